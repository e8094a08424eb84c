"""Configuration management for webget."""

import os
from typing import List, Optional, Tuple

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Recursion depth sentinels.  A literal depth of 0 on the command line
# means "no limit"; the validator rewrites it before anyone reads it.
INFINITE_RECURSION = -1
PAGE_ONLY_RECURSION = 0


def get_str_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get string environment variable."""
    return os.getenv(key, default)


class Config:
    """Settings for a single webget run.

    Built once by the command-line entry point, filled in by the startup
    file and the command line, checked by :meth:`validate`, and only read
    afterwards.
    """

    def __init__(self):
        # Startup
        self.background: bool = False
        self.append_to_log: bool = False
        self.lfilename: Optional[str] = None

        # Logging
        self.verbose: Optional[bool] = None  # None until set explicitly
        self.quiet: bool = False
        self.debug: bool = False
        self.server_response: bool = False
        self.progress_type: str = "bar"
        self.dot_style: str = "default"

        # Input
        self.input_filename: Optional[str] = None
        self.force_html: bool = False
        self.base_href: Optional[str] = None

        # Download
        self.tries: int = 20
        self.retry_connrefused: bool = False
        self.output_document: Optional[str] = None
        self.noclobber: bool = False
        self.always_rest: bool = False
        self.timestamping: bool = False
        self.spider: bool = False
        self.dns_timeout: Optional[float] = None
        self.connect_timeout: Optional[float] = None
        self.read_timeout: Optional[float] = 900.0
        self.wait: float = 0.0
        self.waitretry: float = 10.0
        self.random_wait: bool = False
        self.quota: int = 0
        self.limit_rate: int = 0
        self.bind_address: Optional[str] = None
        self.dns_cache: bool = True
        self.restrict_file_names: str = "windows" if os.name == "nt" else "unix"

        # Proxies
        self.use_proxy: bool = True
        self.http_proxy: Optional[str] = get_str_env("http_proxy")
        self.https_proxy: Optional[str] = get_str_env("https_proxy")
        self.no_proxy: List[str] = [
            host.strip() for host in (get_str_env("no_proxy") or "").split(",") if host.strip()
        ]
        self.proxy_user: Optional[str] = None
        self.proxy_passwd: Optional[str] = None

        # Directories
        self.dirstruct: bool = False
        self.no_dirstruct: bool = False  # set when directories were explicitly refused
        self.add_hostdir: bool = True
        self.dir_prefix: str = "."
        self.cut_dirs: int = 0

        # HTTP
        self.http_user: Optional[str] = None
        self.http_passwd: Optional[str] = None
        self.allow_cache: bool = True
        self.html_extension: bool = False
        self.ignore_length: bool = False
        self.user_headers: List[str] = []
        self.referer: Optional[str] = None
        self.save_headers: bool = False
        self.useragent: Optional[str] = None
        self.http_keep_alive: bool = True
        self.cookies: bool = True
        self.cookies_input: Optional[str] = None
        self.cookies_output: Optional[str] = None
        self.keep_session_cookies: bool = False
        self.post_data: Optional[str] = None
        self.post_file_name: Optional[str] = None

        # HTTPS
        self.ca_directory: Optional[str] = None
        self.ca_cert: Optional[str] = None
        self.cert_file: Optional[str] = None
        self.private_key: Optional[str] = None
        self.check_cert: bool = True

        # FTP
        self.remove_listing: bool = True
        self.ftp_glob: bool = True
        self.ftp_pasv: bool = False
        self.retr_symlinks: bool = False

        # Recursive retrieval
        self.recursive: bool = False
        self.mirror: bool = False
        self.reclevel: int = 5
        self.delete_after: bool = False
        self.convert_links: bool = False
        self.backup_converted: bool = False
        self.backups: int = 0
        self.page_requisites: bool = False
        self.strict_comments: bool = False
        self.htmlify: bool = True

        # Recursive accept/reject
        self.accepts: List[str] = []
        self.rejects: List[str] = []
        self.domains: List[str] = []
        self.exclude_domains: List[str] = []
        self.follow_ftp: bool = False
        self.follow_tags: List[str] = []
        self.ignore_tags: List[str] = []
        self.spanhost: bool = False
        self.relative_only: bool = False
        self.includes: List[str] = []
        self.excludes: List[str] = []
        self.noparent: bool = False

    def validate(self, url_count: int) -> Tuple[bool, Optional[str]]:
        """Apply inter-option defaults and check the configuration.

        Must run once, after every option has been processed.
        URL_COUNT is the number of URLs given on the command line.
        """
        if self.reclevel == 0:
            self.reclevel = INFINITE_RECURSION

        if self.page_requisites and not self.recursive:
            # Recursion stays off; the driver picks tree retrieval for
            # page requisites on its own.
            self.reclevel = PAGE_ONLY_RECURSION
            if not self.no_dirstruct:
                self.dirstruct = True

        if self.verbose is None:
            self.verbose = not self.quiet

        if self.verbose and self.quiet:
            return False, "Can't be verbose and quiet at the same time."
        if self.timestamping and self.noclobber:
            return False, "Can't timestamp and not clobber old files at the same time."
        if not url_count and not self.input_filename:
            return False, "missing URL"
        return True, None

    def __repr__(self) -> str:
        """String representation of config."""
        return (
            f"Config(recursive={self.recursive}, reclevel={self.reclevel}, "
            f"dir_prefix={self.dir_prefix!r}, input_filename={self.input_filename!r})"
        )

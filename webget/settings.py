"""Generic key/value setter behind both the startup file and the command line.

Every standard option names a *command*; the command decides how its
string value is coerced and which :class:`~webget.config.Config`
attributes it touches.  Command names are matched case-insensitively and
ignore ``-`` and ``_``, so ``dir_prefix``, ``dir-prefix`` and
``dirprefix`` are the same command.
"""

import logging
import os
import re
from typing import Callable, Dict, Optional, Tuple

from webget.config import Config, get_str_env

logger = logging.getLogger(__name__)

DEFAULT_STARTUP_FILE = "~/.webgetrc"


class InvalidValue(ValueError):
    """A command was given a value it cannot use, or does not exist."""


def _normalize(com: str) -> str:
    return com.replace("-", "").replace("_", "").lower()


# Value handlers.  Each one is called as handler(config, com, value, attr)
# and either updates the config or raises InvalidValue.

def cmd_boolean(config: Config, com: str, value: str, attr: str):
    """Set ATTR from on/off, yes/no, true/false or 1/0."""
    lowered = value.strip().lower()
    if lowered in ("on", "yes", "true", "1"):
        flag = True
    elif lowered in ("off", "no", "false", "0"):
        flag = False
    else:
        raise InvalidValue(f"{com}: Please specify on or off.")
    setattr(config, attr, flag)


def cmd_number(config: Config, com: str, value: str, attr: str):
    """Set ATTR to a non-negative integer."""
    setattr(config, attr, _parse_number(com, value))


def cmd_number_inf(config: Config, com: str, value: str, attr: str):
    """Set ATTR to a non-negative integer; "inf" is stored as 0."""
    if value.strip().lower() == "inf":
        setattr(config, attr, 0)
    else:
        setattr(config, attr, _parse_number(com, value))


def cmd_string(config: Config, com: str, value: str, attr: str):
    setattr(config, attr, value)


def cmd_file(config: Config, com: str, value: str, attr: str):
    """Set ATTR to a file name, expanding a leading ``~``."""
    setattr(config, attr, os.path.expanduser(value) if value else None)


def cmd_directory(config: Config, com: str, value: str, attr: str):
    """Like :func:`cmd_file`, without trailing slashes."""
    path = os.path.expanduser(value)
    stripped = path.rstrip("/")
    setattr(config, attr, stripped or path)


def cmd_vector(config: Config, com: str, value: str, attr: str):
    """Append comma-separated items to the list ATTR; an empty value clears it."""
    if not value.strip():
        setattr(config, attr, [])
        return
    items = [item.strip() for item in value.split(",") if item.strip()]
    setattr(config, attr, getattr(config, attr) + items)


_BYTE_SUFFIXES = {"": 1, "b": 1, "k": 1024, "m": 1024 ** 2, "g": 1024 ** 3, "t": 1024 ** 4}


def cmd_bytes(config: Config, com: str, value: str, attr: str):
    """Set ATTR to a byte count such as ``512``, ``20k`` or ``1.5m``; "inf" is 0."""
    text = value.strip().lower()
    if text == "inf":
        setattr(config, attr, 0)
        return
    match = re.fullmatch(r"(\d+(?:\.\d*)?|\.\d+)\s*([bkmgt]?)", text)
    if not match:
        raise InvalidValue(f"{com}: Invalid byte value `{value}'.")
    number, suffix = match.groups()
    setattr(config, attr, int(float(number) * _BYTE_SUFFIXES[suffix]))


_TIME_SUFFIXES = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}


def cmd_time(config: Config, com: str, value: str, attr: str):
    """Set ATTR to a number of seconds; ``m``, ``h``, ``d`` and ``w`` suffixes scale it."""
    setattr(config, attr, _parse_time(com, value))


def _enum(*choices: str) -> Callable[[Config, str, str, str], None]:
    def cmd_enum(config: Config, com: str, value: str, attr: str):
        lowered = value.strip().lower()
        if lowered not in choices:
            raise InvalidValue(f"{com}: Invalid value `{value}'; choose one of {', '.join(choices)}.")
        setattr(config, attr, lowered)
    return cmd_enum


def _parse_number(com: str, value: str) -> int:
    text = value.strip()
    if not text.isdigit():
        raise InvalidValue(f"{com}: Invalid number `{value}'.")
    return int(text)


def _parse_time(com: str, value: str) -> float:
    match = re.fullmatch(r"(\d+(?:\.\d*)?|\.\d+)\s*([smhdw]?)", value.strip().lower())
    if not match:
        raise InvalidValue(f"{com}: Invalid time period `{value}'.")
    number, suffix = match.groups()
    return float(number) * _TIME_SUFFIXES[suffix]


# Commands that touch more than one setting.

def cmd_spec_dirstruct(config: Config, com: str, value: str, attr: str):
    cmd_boolean(config, com, value, "dirstruct")
    # Remember an explicit refusal so that --page-requisites and
    # --recursive don't turn directories back on.
    config.no_dirstruct = not config.dirstruct


def cmd_spec_recursive(config: Config, com: str, value: str, attr: str):
    cmd_boolean(config, com, value, "recursive")
    if config.recursive and not config.no_dirstruct:
        config.dirstruct = True


def cmd_spec_mirror(config: Config, com: str, value: str, attr: str):
    """``-r -N -l inf --no-remove-listing``."""
    cmd_boolean(config, com, value, "mirror")
    if config.mirror:
        config.recursive = True
        if not config.no_dirstruct:
            config.dirstruct = True
        config.timestamping = True
        config.reclevel = 0
        config.remove_listing = False


def cmd_spec_timeout(config: Config, com: str, value: str, attr: str):
    seconds = _parse_time(com, value)
    config.dns_timeout = config.connect_timeout = config.read_timeout = seconds


def cmd_spec_header(config: Config, com: str, value: str, attr: str):
    if not value.strip():
        config.user_headers = []
        return
    if ":" not in value:
        raise InvalidValue(f"{com}: Invalid header `{value}'.")
    config.user_headers = config.user_headers + [value.strip()]


def cmd_spec_htmlify(config: Config, com: str, value: str, attr: str):
    cmd_boolean(config, com, value, "htmlify")
    if not config.htmlify:
        config.remove_listing = False


def cmd_spec_progress(config: Config, com: str, value: str, attr: str):
    """``bar`` or ``dot``, optionally followed by ``:STYLE``."""
    kind, _, style = value.strip().lower().partition(":")
    if kind not in ("bar", "dot"):
        raise InvalidValue(f"{com}: Invalid progress type `{value}'.")
    config.progress_type = kind
    if kind == "dot" and style:
        _enum("default", "binary", "mega", "giga")(config, com, style, "dot_style")


def cmd_spec_useragent(config: Config, com: str, value: str, attr: str):
    if "\n" in value:
        raise InvalidValue(f"{com}: Invalid user agent `{value}'.")
    config.useragent = value


Handler = Callable[[Config, str, str, Optional[str]], None]

COMMANDS: Dict[str, Tuple[Optional[str], Handler]] = {
    "accept": ("accepts", cmd_vector),
    "addhostdir": ("add_hostdir", cmd_boolean),
    "background": ("background", cmd_boolean),
    "backupconverted": ("backup_converted", cmd_boolean),
    "backups": ("backups", cmd_number),
    "base": ("base_href", cmd_string),
    "bindaddress": ("bind_address", cmd_string),
    "cache": ("allow_cache", cmd_boolean),
    "connecttimeout": ("connect_timeout", cmd_time),
    "continue": ("always_rest", cmd_boolean),
    "convertlinks": ("convert_links", cmd_boolean),
    "cookies": ("cookies", cmd_boolean),
    "cutdirs": ("cut_dirs", cmd_number),
    "debug": ("debug", cmd_boolean),
    "deleteafter": ("delete_after", cmd_boolean),
    "dirprefix": ("dir_prefix", cmd_directory),
    "dirstruct": (None, cmd_spec_dirstruct),
    "dnscache": ("dns_cache", cmd_boolean),
    "dnstimeout": ("dns_timeout", cmd_time),
    "domains": ("domains", cmd_vector),
    "dotstyle": ("dot_style", _enum("default", "binary", "mega", "giga")),
    "excludedirectories": ("excludes", cmd_vector),
    "excludedomains": ("exclude_domains", cmd_vector),
    "followftp": ("follow_ftp", cmd_boolean),
    "followtags": ("follow_tags", cmd_vector),
    "forcehtml": ("force_html", cmd_boolean),
    "glob": ("ftp_glob", cmd_boolean),
    "header": (None, cmd_spec_header),
    "htmlextension": ("html_extension", cmd_boolean),
    "htmlify": (None, cmd_spec_htmlify),
    "httpkeepalive": ("http_keep_alive", cmd_boolean),
    "httppasswd": ("http_passwd", cmd_string),
    "httpproxy": ("http_proxy", cmd_string),
    "httpsproxy": ("https_proxy", cmd_string),
    "httpuser": ("http_user", cmd_string),
    "ignorelength": ("ignore_length", cmd_boolean),
    "ignoretags": ("ignore_tags", cmd_vector),
    "includedirectories": ("includes", cmd_vector),
    "input": ("input_filename", cmd_file),
    "keepsessioncookies": ("keep_session_cookies", cmd_boolean),
    "limitrate": ("limit_rate", cmd_bytes),
    "loadcookies": ("cookies_input", cmd_file),
    "logfile": ("lfilename", cmd_file),
    "mirror": (None, cmd_spec_mirror),
    "noclobber": ("noclobber", cmd_boolean),
    "noparent": ("noparent", cmd_boolean),
    "noproxy": ("no_proxy", cmd_vector),
    "outputdocument": ("output_document", cmd_file),
    "pagerequisites": ("page_requisites", cmd_boolean),
    "passiveftp": ("ftp_pasv", cmd_boolean),
    "postdata": ("post_data", cmd_string),
    "postfile": ("post_file_name", cmd_file),
    "progress": (None, cmd_spec_progress),
    "proxypasswd": ("proxy_passwd", cmd_string),
    "proxyuser": ("proxy_user", cmd_string),
    "quiet": ("quiet", cmd_boolean),
    "quota": ("quota", cmd_bytes),
    "randomwait": ("random_wait", cmd_boolean),
    "readtimeout": ("read_timeout", cmd_time),
    "reclevel": ("reclevel", cmd_number_inf),
    "recursive": (None, cmd_spec_recursive),
    "referer": ("referer", cmd_string),
    "reject": ("rejects", cmd_vector),
    "relativeonly": ("relative_only", cmd_boolean),
    "removelisting": ("remove_listing", cmd_boolean),
    "restrictfilenames": ("restrict_file_names", _enum("unix", "windows")),
    "retrsymlinks": ("retr_symlinks", cmd_boolean),
    "retryconnrefused": ("retry_connrefused", cmd_boolean),
    "savecookies": ("cookies_output", cmd_file),
    "saveheaders": ("save_headers", cmd_boolean),
    "serverresponse": ("server_response", cmd_boolean),
    "spanhosts": ("spanhost", cmd_boolean),
    "spider": ("spider", cmd_boolean),
    "sslcadir": ("ca_directory", cmd_directory),
    "sslcafile": ("ca_cert", cmd_file),
    "sslcertfile": ("cert_file", cmd_file),
    "sslcertkey": ("private_key", cmd_file),
    "sslcheckcert": ("check_cert", cmd_boolean),
    "strictcomments": ("strict_comments", cmd_boolean),
    "timeout": (None, cmd_spec_timeout),
    "timestamping": ("timestamping", cmd_boolean),
    "tries": ("tries", cmd_number_inf),
    "useproxy": ("use_proxy", cmd_boolean),
    "useragent": (None, cmd_spec_useragent),
    "verbose": ("verbose", cmd_boolean),
    "wait": ("wait", cmd_time),
    "waitretry": ("waitretry", cmd_time),
}


def setoptval(config: Config, com: str, value: str):
    """Run command COM with VALUE against CONFIG.

    Raises InvalidValue when the command is unknown or VALUE cannot be
    coerced to the command's type.
    """
    try:
        attr, handler = COMMANDS[_normalize(com)]
    except KeyError:
        raise InvalidValue(f"Unknown command `{com}'.") from None
    handler(config, com, value, attr)


def parse_line(line: str) -> Optional[Tuple[str, str]]:
    """Split a ``command = value`` line.

    Returns None for blank lines and comments; raises InvalidValue when the
    line has no ``=`` or no command name.
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    com, sep, value = stripped.partition("=")
    com = com.strip()
    if not sep or not com:
        raise InvalidValue(f"Invalid command `{stripped}'.")
    value = value.strip()
    # Allow quoting the value.
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return com, value


def run_command(config: Config, line: str):
    """Execute one startup-file style line, as done by ``--execute``."""
    parsed = parse_line(line)
    if parsed is not None:
        setoptval(config, *parsed)


def startup_file_name() -> Optional[str]:
    """Path of the startup file to read, if there is one.

    ``WEBGETRC`` wins when set; otherwise ``~/.webgetrc`` is used when it
    exists.
    """
    env_name = get_str_env("WEBGETRC")
    if env_name:
        return os.path.expanduser(env_name)
    home_file = os.path.expanduser(DEFAULT_STARTUP_FILE)
    return home_file if os.path.isfile(home_file) else None


def run_startup_file(config: Config, path: str):
    """Apply every command of the startup file PATH, in order."""
    logger.debug("Reading startup file %s", path)
    with open(path, "r", encoding="utf-8") as fh:
        for lineno, line in enumerate(fh, 1):
            try:
                run_command(config, line)
            except InvalidValue as e:
                raise InvalidValue(f"Error in {path} at line {lineno}: {e}") from e


def initialize(config: Config):
    """Load the startup file, if any, into CONFIG."""
    path = startup_file_name()
    if path:
        run_startup_file(config, path)

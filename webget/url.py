"""URL helpers: scheme checks, shorthand rewriting and local file names."""

import os
import re
from typing import Optional
from urllib.parse import unquote, urlparse

from webget.config import Config

SUPPORTED_SCHEMES = ("http", "https", "ftp")
DEFAULT_PORTS = {"http": 80, "https": 443, "ftp": 21}

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")

# Characters that may not appear in file names on Windows.
_WINDOWS_UNSAFE = set('\\|:?"*<>')


def url_has_scheme(url: str) -> bool:
    return bool(_SCHEME_RE.match(url))


def url_scheme(url: str) -> Optional[str]:
    """The supported scheme of URL, or None."""
    scheme = urlparse(url).scheme.lower()
    return scheme if scheme in SUPPORTED_SCHEMES else None


def supports_tree(url: str) -> bool:
    """Whether recursive retrieval applies to URL.

    FTP recursion belongs to the FTP engine itself, so FTP URLs are
    always fetched directly.
    """
    return url_scheme(url) != "ftp"


def rewrite_shorthand_url(url: str) -> Optional[str]:
    """Expand shorthand forms; None when URL already has a scheme.

    ``host/path`` and ``host:port/path`` become HTTP URLs, while
    ``host:path`` (a colon not followed by a port) becomes an FTP URL.
    """
    if url_has_scheme(url):
        return None

    colon = url.find(":")
    slash = url.find("/")
    if colon == -1 or (slash != -1 and slash < colon):
        return "http://" + url

    rest = url[colon + 1:]
    port = re.match(r"\d*", rest).group()
    if port and (len(port) == len(rest) or rest[len(port)] == "/"):
        return "http://" + url
    path = rest.lstrip("/")
    return f"ftp://{url[:colon]}/{path}"


def restrict_file_name(name: str, mode: str) -> str:
    """Escape characters the target OS does not allow in file names."""
    if mode != "windows":
        return name
    return "".join(f"%{ord(c):02X}" if c in _WINDOWS_UNSAFE or ord(c) < 32 else c for c in name)


def url_file_name(config: Config, url: str) -> str:
    """Local file name for URL under the directory settings of CONFIG."""
    if config.output_document:
        return config.output_document

    parsed = urlparse(url)
    path = unquote(parsed.path)

    # Remove leading slashes and empty components
    parts = [part for part in path.split("/") if part]
    if not path or path.endswith("/"):
        filename = "index.html"
    else:
        filename = parts.pop()
    if parsed.query:
        filename += "?" + parsed.query
    filename = restrict_file_name(filename, config.restrict_file_names)

    directories = []
    if config.dirstruct:
        if config.add_hostdir:
            host = parsed.hostname or ""
            if parsed.port and parsed.port != DEFAULT_PORTS.get(parsed.scheme):
                host += f"{':' if config.restrict_file_names != 'windows' else '+'}{parsed.port}"
            directories.append(host)
        directories.extend(restrict_file_name(part, config.restrict_file_names)
                           for part in parts[config.cut_dirs:])

    return os.path.join(config.dir_prefix, *directories, filename)

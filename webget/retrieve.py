"""HTTP retrieval for webget, built on requests and BeautifulSoup."""

import logging
import os
import random
import sys
import time
from collections import deque
from email.utils import formatdate, parsedate_to_datetime
from fnmatch import fnmatch
from http.cookiejar import DefaultCookiePolicy, LoadError, MozillaCookieJar
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple
from urllib.parse import urldefrag, urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from webget import __version__, log, progress
from webget.config import INFINITE_RECURSION, Config
from webget.url import url_file_name, url_scheme

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192

# Tag and attribute pairs that carry links.
LINK_ATTRIBUTES = {
    "a": "href",
    "area": "href",
    "base": None,
    "body": "background",
    "embed": "src",
    "frame": "src",
    "iframe": "src",
    "img": "src",
    "input": "src",
    "link": "href",
    "object": "data",
    "script": "src",
    "source": "src",
}

# Tags whose links are needed to display the page rather than to navigate.
REQUISITE_TAGS = {"body", "embed", "frame", "iframe", "img", "input", "object", "script", "source"}
REQUISITE_LINK_RELS = {"stylesheet", "icon", "shortcut"}

HTML_EXTENSIONS = (".html", ".htm")


def time_str() -> str:
    return time.strftime("%H:%M:%S")


def legible(count: int) -> str:
    """COUNT with thousands separators."""
    return f"{count:,}"


class Link:
    """A link found in an HTML document."""

    def __init__(self, url: str, requisite: bool, relative: bool, tag: str):
        self.url = url
        self.requisite = requisite
        self.relative = relative
        self.tag = tag

    def __repr__(self) -> str:
        return f"Link({self.url!r}, requisite={self.requisite})"


class Retriever:
    """Fetches single documents and link trees on behalf of the driver."""

    def __init__(self, config: Config):
        """Initialize the HTTP session from CONFIG."""
        self.config = config
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": config.useragent or f"Webget/{__version__}"})
        for header in config.user_headers:
            name, _, value = header.partition(":")
            self.session.headers[name.strip()] = value.strip()
        if config.referer:
            self.session.headers["Referer"] = config.referer
        if not config.allow_cache:
            self.session.headers.update({"Pragma": "no-cache", "Cache-Control": "no-cache"})
        if not config.http_keep_alive:
            self.session.headers["Connection"] = "close"
        if config.http_user:
            self.session.auth = (config.http_user, config.http_passwd or "")

        self._configure_proxies()
        self._configure_ssl()
        self._configure_cookies()

        self.total_downloaded_bytes = 0
        self.numurls = 0
        # URL -> local path of every document saved during this run
        self.downloaded: Dict[str, str] = {}
        self.html_files: Set[str] = set()
        self.output_stream = None

    def _configure_proxies(self):
        config = self.config
        if not config.use_proxy:
            self.session.trust_env = False
            self.session.proxies = {}
            return
        proxies = {}
        for scheme, proxy in (("http", config.http_proxy), ("https", config.https_proxy)):
            if not proxy:
                continue
            if config.proxy_user and "@" not in proxy:
                parsed = urlparse(proxy if "://" in proxy else "http://" + proxy)
                credentials = f"{config.proxy_user}:{config.proxy_passwd or ''}"
                proxy = parsed._replace(netloc=f"{credentials}@{parsed.netloc}").geturl()
            proxies[scheme] = proxy
        if config.no_proxy:
            proxies["no_proxy"] = ",".join(config.no_proxy)
        self.session.proxies.update(proxies)

    def _configure_ssl(self):
        config = self.config
        if not config.check_cert:
            self.session.verify = False
        elif config.ca_cert or config.ca_directory:
            self.session.verify = config.ca_cert or config.ca_directory
        if config.cert_file:
            self.session.cert = (config.cert_file, config.private_key) if config.private_key else config.cert_file

    def _configure_cookies(self):
        config = self.config
        if not config.cookies:
            self.session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
            return
        if config.cookies_input:
            jar = MozillaCookieJar(config.cookies_input)
            try:
                jar.load(ignore_discard=True, ignore_expires=False)
            except (OSError, LoadError) as e:
                logger.warning("Cannot load cookies from %s: %s", config.cookies_input, e)
                return
            for cookie in jar:
                self.session.cookies.set_cookie(cookie)

    def open_output_document(self):
        """Open the --output-document target; "-" means standard output."""
        path = self.config.output_document
        if not path:
            return
        if path == "-":
            self.output_stream = sys.stdout.buffer
        else:
            self.output_stream = open(path, "ab" if self.config.always_rest else "wb")

    def close(self):
        """Release the session and the output document."""
        self.session.close()
        if self.output_stream is not None and self.output_stream is not sys.stdout.buffer:
            self.output_stream.close()
        self.output_stream = None

    def save_cookies(self, path: str):
        """Write the session cookies to PATH in Netscape format."""
        jar = MozillaCookieJar(path)
        for cookie in self.session.cookies:
            jar.set_cookie(cookie)
        try:
            jar.save(ignore_discard=self.config.keep_session_cookies)
        except OSError as e:
            logger.warning("Cannot save cookies to %s: %s", path, e)

    def _sleep(self, seconds: float):
        if seconds > 0:
            time.sleep(seconds)

    def _wait_between_retrievals(self):
        wait = self.config.wait
        if self.config.random_wait:
            wait = random.uniform(0, 2 * wait)
        self._sleep(wait)

    def _request_options(self, local_path: str) -> Tuple[str, dict]:
        """HTTP method and keyword arguments for a request saving to LOCAL_PATH."""
        config = self.config
        headers = {}
        kwargs = {"headers": headers, "stream": True, "allow_redirects": True}

        connect_timeout = config.connect_timeout or config.dns_timeout
        if connect_timeout or config.read_timeout:
            kwargs["timeout"] = (connect_timeout, config.read_timeout)

        exists = not config.output_document and os.path.exists(local_path)
        if config.timestamping and exists:
            headers["If-Modified-Since"] = formatdate(os.path.getmtime(local_path), usegmt=True)
        if config.always_rest and exists:
            headers["Range"] = f"bytes={os.path.getsize(local_path)}-"

        method = "GET"
        if config.spider:
            method = "HEAD"
        elif config.post_data is not None:
            method = "POST"
            kwargs["data"] = config.post_data
        elif config.post_file_name:
            method = "POST"
            kwargs["data"] = Path(config.post_file_name).read_bytes()
        return method, kwargs

    def _fetch(self, url: str, local_path: str) -> Optional[requests.Response]:
        """Send the request for URL, retrying as configured.

        Returns the response, or None when the document cannot be had.
        """
        config = self.config
        try:
            method, kwargs = self._request_options(local_path)
        except OSError as e:
            logger.warning("%s: %s", config.post_file_name, e)
            return None

        attempt = 0
        while True:
            attempt += 1
            logger.info("--%s--  %s", time_str(), url)
            if attempt > 1:
                logger.info("  (try:%2d)", attempt)
            try:
                response = self.session.request(method, url, **kwargs)
            except (requests.exceptions.InvalidSchema, requests.exceptions.InvalidURL,
                    requests.exceptions.MissingSchema) as e:
                logger.warning("%s: %s", url, e)
                return None
            except requests.exceptions.ConnectionError as e:
                logger.warning("%s: %s", url, e)
                refused = "refused" in str(e).lower()
                if refused and not config.retry_connrefused:
                    return None
            except requests.exceptions.RequestException as e:
                logger.warning("%s: %s", url, e)
            else:
                if config.server_response:
                    for name, value in response.headers.items():
                        logger.info("  %s: %s", name, value)
                if response.status_code < 400 or response.status_code == 416:
                    return response
                logger.warning("%s ERROR %d: %s.", time_str(), response.status_code, response.reason)
                response.close()
                if response.status_code < 500:
                    return None

            if config.tries and attempt >= config.tries:
                logger.warning("Giving up.")
                return None
            self._sleep(min(attempt, config.waitretry))

    def _is_html(self, response: requests.Response) -> bool:
        content_type = response.headers.get("Content-Type", "")
        return content_type.split(";")[0].strip().lower() in ("text/html", "application/xhtml+xml")

    def retrieve_url(self, url: str) -> Tuple[bool, Optional[str], Optional[str]]:
        """Fetch a single document.

        Returns (success, local file name, URL after redirects when it
        differs from URL).
        """
        config = self.config
        if url_scheme(url) == "ftp":
            logger.warning("%s: FTP retrieval is not supported.", url)
            return False, None, None
        local_path = url_file_name(config, url)
        if config.noclobber and not config.output_document and os.path.exists(local_path):
            logger.info("File `%s' already there; not retrieving.", local_path)
            if local_path.endswith(HTML_EXTENSIONS):
                self.html_files.add(local_path)
            return True, local_path, None

        response = self._fetch(url, local_path)
        if response is None:
            return False, None, None

        with response:
            redirected = response.url if response.url != url else None
            if response.status_code == 304:
                logger.info("Server file no newer than local file `%s' -- not retrieving.", local_path)
                return True, local_path, redirected
            if response.status_code == 416:
                logger.info("The file is already fully retrieved; nothing to do.")
                return True, local_path, redirected
            if config.spider:
                logger.info("Remote file exists.")
                return True, None, redirected

            is_html = self._is_html(response)
            if is_html and config.html_extension and not config.output_document \
                    and not local_path.endswith(HTML_EXTENSIONS):
                local_path += ".html"

            try:
                self._save(response, local_path)
            except (OSError, requests.exceptions.RequestException) as e:
                logger.warning("%s: %s", local_path, e)
                return False, None, redirected

        self.numurls += 1
        self.downloaded[url] = local_path
        if redirected:
            self.downloaded[redirected] = local_path
        if is_html:
            self.html_files.add(local_path)
        return True, local_path, redirected

    def _save(self, response: requests.Response, local_path: str):
        """Stream the body of RESPONSE to LOCAL_PATH (or the output document)."""
        config = self.config
        total = None
        if not config.ignore_length and response.headers.get("Content-Length", "").isdigit():
            total = int(response.headers["Content-Length"])

        logger.info("Length: %s [%s]", legible(total) if total is not None else "unspecified",
                    response.headers.get("Content-Type", "unknown"))

        if self.output_stream is not None:
            stream, owned = self.output_stream, False
        else:
            Path(local_path).parent.mkdir(parents=True, exist_ok=True)
            stream, owned = open(local_path, "ab" if response.status_code == 206 else "wb"), True
            logger.info("    => `%s'", local_path)

        gauge = None
        if config.verbose and not config.quiet:
            gauge = progress.create(total, log.current_stream(), dot_style=config.dot_style)

        received = 0
        started = time.monotonic()
        try:
            if config.save_headers:
                status_line = f"HTTP/1.1 {response.status_code} {response.reason}\r\n"
                header_lines = "".join(f"{k}: {v}\r\n" for k, v in response.headers.items())
                stream.write((status_line + header_lines + "\r\n").encode("latin-1", "replace"))
            for chunk in response.iter_content(CHUNK_SIZE):
                stream.write(chunk)
                received += len(chunk)
                if gauge is not None:
                    gauge.update(len(chunk))
                if config.limit_rate:
                    expected = received / config.limit_rate
                    self._sleep(expected - (time.monotonic() - started))
        finally:
            if owned:
                stream.close()
            if gauge is not None:
                gauge.finish()

        self.total_downloaded_bytes += received
        logger.info("%s - `%s' saved [%s]", time_str(), local_path, legible(received))

        last_modified = response.headers.get("Last-Modified")
        if owned and last_modified:
            try:
                mtime = parsedate_to_datetime(last_modified).timestamp()
                os.utime(local_path, (mtime, mtime))
            except (TypeError, ValueError, OSError):
                pass

    def extract_links(self, path: str, base_url: str) -> List[Link]:
        """Links found in the HTML document at PATH, made absolute against BASE_URL."""
        try:
            with open(path, "rb") as fh:
                soup = BeautifulSoup(fh.read(), "html.parser")
        except OSError as e:
            logger.warning("%s: %s", path, e)
            return []

        base_tag = soup.find("base", href=True)
        if base_tag:
            base_url = urljoin(base_url, base_tag["href"])

        tags = set(LINK_ATTRIBUTES)
        if self.config.follow_tags:
            tags &= {tag.lower() for tag in self.config.follow_tags}
        tags -= {tag.lower() for tag in self.config.ignore_tags}

        links = []
        for element in soup.find_all(list(tags)):
            attr = LINK_ATTRIBUTES.get(element.name)
            value = element.get(attr) if attr else None
            if not value or not isinstance(value, str):
                continue
            value = value.strip()
            if value.startswith("#") or value.lower().startswith(("javascript:", "mailto:", "data:")):
                continue
            requisite = element.name in REQUISITE_TAGS
            if element.name == "link":
                rels = {rel.lower() for rel in (element.get("rel") or [])}
                requisite = bool(rels & REQUISITE_LINK_RELS)
            absolute, _ = urldefrag(urljoin(base_url, value))
            links.append(Link(absolute, requisite, not urlparse(value).netloc, element.name))
        return links

    def _descend(self, link: Link, depth: int, seed: str) -> bool:
        """Whether the tree walk should follow LINK found at DEPTH."""
        config = self.config
        scheme = urlparse(link.url).scheme
        if scheme not in ("http", "https") and not (scheme == "ftp" and config.follow_ftp):
            return False

        reclevel = config.reclevel
        within_depth = reclevel == INFINITE_RECURSION or depth < reclevel
        if not within_depth and not (config.page_requisites and link.requisite):
            return False
        if config.relative_only and not link.relative:
            return False

        host = (urlparse(link.url).hostname or "").lower()
        seed_host = (urlparse(seed).hostname or "").lower()
        if config.domains and not any(host.endswith(d.lower()) for d in config.domains):
            return False
        if any(host.endswith(d.lower()) for d in config.exclude_domains):
            return False
        if not config.spanhost and host != seed_host and not (config.page_requisites and link.requisite):
            return False

        path = urlparse(link.url).path or "/"
        if config.noparent and host == seed_host:
            seed_dir = (urlparse(seed).path or "/").rsplit("/", 1)[0] + "/"
            if not path.startswith(seed_dir):
                return False
        directory = path.rsplit("/", 1)[0] or "/"
        if config.includes and not any(fnmatch(directory, inc) or directory.startswith(inc) for inc in config.includes):
            return False
        if any(fnmatch(directory, exc) or directory.startswith(exc) for exc in config.excludes):
            return False

        filename = path.rsplit("/", 1)[-1]
        if filename and not filename.endswith(HTML_EXTENSIONS):
            if config.accepts and not any(_matches(filename, pattern) for pattern in config.accepts):
                return False
            if any(_matches(filename, pattern) for pattern in config.rejects):
                return False
        return True

    def quota_exceeded(self) -> bool:
        return bool(self.config.quota) and self.total_downloaded_bytes > self.config.quota

    def retrieve_tree(self, seed: str) -> bool:
        """Fetch SEED and follow its links breadth-first.

        Only the outcome for SEED itself decides success; broken links
        further down are logged and skipped.
        """
        config = self.config
        queue = deque([(seed, 0)])
        seen = {seed}
        status = True

        while queue:
            if self.quota_exceeded():
                logger.debug("Quota reached; stopping the tree walk.")
                break

            url, depth = queue.popleft()
            ok, local_path, redirected = self.retrieve_url(url)
            if url == seed:
                status = ok
            if not ok or local_path is None:
                continue

            if local_path in self.html_files and (config.reclevel == INFINITE_RECURSION
                                                  or depth < config.reclevel
                                                  or (config.page_requisites and depth == 0)):
                for link in self.extract_links(local_path, redirected or url):
                    if link.url in seen or not self._descend(link, depth, seed):
                        continue
                    seen.add(link.url)
                    queue.append((link.url, depth + 1))

            if config.delete_after and os.path.exists(local_path):
                logger.info("Removing %s.", local_path)
                try:
                    os.remove(local_path)
                except OSError as e:
                    logger.warning("unlink: %s", e)

            if queue:
                self._wait_between_retrievals()

        return status

    def urls_from_file(self, path: str, force_html: bool) -> List[str]:
        """URLs listed in PATH ("-" for standard input).

        With FORCE_HTML the file is parsed as HTML and its links are
        resolved against --base.
        """
        if path == "-":
            content = sys.stdin.read()
        else:
            with open(path, "r", encoding="utf-8", errors="replace") as fh:
                content = fh.read()

        if not force_html:
            return [line.strip() for line in content.splitlines() if line.strip()]

        base = self.config.base_href or ""
        urls = []
        soup = BeautifulSoup(content, "html.parser")
        for element in soup.find_all(["a", "area", "link", "img", "frame", "iframe"]):
            value = element.get(LINK_ATTRIBUTES[element.name])
            if not value:
                continue
            absolute = urljoin(base, value.strip())
            if not urlparse(absolute).scheme:
                logger.warning("%s: Cannot resolve relative link %s.", path, value)
                continue
            urls.append(urldefrag(absolute)[0])
        return urls


def _matches(filename: str, pattern: str) -> bool:
    """Accept/reject rule: a wildcard pattern or a plain suffix."""
    if any(c in pattern for c in "*?["):
        return fnmatch(filename, pattern)
    return filename.endswith(pattern)

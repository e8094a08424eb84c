"""Rewrite links in downloaded HTML so the local copy can be browsed offline."""

import logging
import os
import shutil
import time
from typing import Dict, Iterable
from urllib.parse import urldefrag, urljoin

from bs4 import BeautifulSoup

from webget.config import Config
from webget.retrieve import LINK_ATTRIBUTES

logger = logging.getLogger(__name__)


def relative_link(from_file: str, to_file: str) -> str:
    """Path of TO_FILE relative to the directory holding FROM_FILE, with "/" separators."""
    start = os.path.dirname(os.path.abspath(from_file))
    return os.path.relpath(os.path.abspath(to_file), start).replace(os.sep, "/")


def convert_links(config: Config, path: str, url: str, downloaded: Dict[str, str]) -> bool:
    """Rewrite the links of the HTML file PATH, which was fetched from URL.

    Links to documents that were downloaded become relative references to
    the local copy; every other link is made absolute so it still works
    from the local file.  Returns whether the file changed.
    """
    with open(path, "rb") as fh:
        soup = BeautifulSoup(fh.read(), "html.parser")

    base = url
    base_tag = soup.find("base", href=True)
    if base_tag:
        base = urljoin(url, base_tag["href"])

    changed = 0
    for element in soup.find_all(list(LINK_ATTRIBUTES)):
        attr = LINK_ATTRIBUTES[element.name]
        value = element.get(attr) if attr else None
        if not value or not isinstance(value, str):
            continue
        if value.startswith("#") or value.lower().startswith(("javascript:", "mailto:", "data:")):
            continue
        absolute, fragment = urldefrag(urljoin(base, value.strip()))
        local = downloaded.get(absolute)
        if local:
            new_value = relative_link(path, local)
        else:
            new_value = absolute
        if fragment:
            new_value += "#" + fragment
        if new_value != value:
            element[attr] = new_value
            changed += 1

    if not changed:
        return False

    if config.backup_converted:
        shutil.copy2(path, path + ".orig")
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(str(soup))
    logger.debug("Converted %d links in %s.", changed, path)
    return True


def convert_all_links(config: Config, downloaded: Dict[str, str], html_files: Iterable[str]):
    """Convert the links of every downloaded HTML document."""
    started = time.monotonic()
    html_files = set(html_files)
    converted = 0
    for url, path in downloaded.items():
        if path not in html_files or not os.path.exists(path):
            continue
        html_files.discard(path)
        logger.info("Converting %s... ", path)
        try:
            if convert_links(config, path, url, downloaded):
                converted += 1
        except OSError as e:
            logger.warning("Cannot convert links in %s: %s", path, e)
    logger.warning("Converted %d files in %.2f seconds.", converted, time.monotonic() - started)

"""Top-level retrieval loop: pick a strategy per URL and fold the results."""

import logging
import os
import time
from typing import Iterable, List, Optional

from webget.config import Config
from webget.retrieve import Retriever, legible
from webget.url import rewrite_shorthand_url, supports_tree

logger = logging.getLogger(__name__)


def expand_urls(args: Iterable[str]) -> List[str]:
    """Command-line URLs with shorthand forms rewritten."""
    return [rewrite_shorthand_url(arg) or arg for arg in args]


def delete_local_file(filename: Optional[str]):
    """Remove FILENAME for --delete-after; failures are logged and ignored."""
    if not filename or not os.path.exists(filename):
        return
    logger.debug("Removing file due to --delete-after in retrieve_all():")
    logger.info("Removing %s.", filename)
    try:
        os.remove(filename)
    except OSError as e:
        logger.warning("unlink: %s", e)


def retrieve_one(config: Config, url: str, retriever: Retriever) -> bool:
    """Retrieve URL with the strategy the configuration asks for."""
    if (config.recursive or config.page_requisites) and supports_tree(url):
        return retriever.retrieve_tree(url)

    ok, filename, _ = retriever.retrieve_url(url)
    if config.delete_after:
        delete_local_file(filename)
    return ok


def retrieve_all(config: Config, urls: List[str], retriever: Retriever) -> bool:
    """Retrieve the command-line URLs, then those of the input file.

    Every URL is attempted; the result is True only when all of them
    succeeded.
    """
    status = True
    for url in urls:
        if not retrieve_one(config, url, retriever):
            status = False

    if config.input_filename:
        try:
            listed = retriever.urls_from_file(config.input_filename, config.force_html)
        except OSError as e:
            logger.warning("%s: %s", config.input_filename, e)
            listed = []
            status = False
        if not listed:
            logger.warning("No URLs found in %s.", config.input_filename)
        for url in listed:
            if not retrieve_one(config, url, retriever):
                status = False

    if (config.recursive or config.page_requisites or len(urls) > 1
            or (config.input_filename and retriever.total_downloaded_bytes)):
        logger.warning("\nFINISHED --%s--\nDownloaded: %s bytes in %d files",
                       time.strftime("%Y-%m-%d %H:%M:%S"),
                       legible(retriever.total_downloaded_bytes), retriever.numurls)
        if retriever.quota_exceeded():
            logger.warning("Download quota (%s bytes) EXCEEDED!", legible(config.quota))

    return status

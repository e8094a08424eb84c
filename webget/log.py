"""Log destination handling for webget.

All modules log through ``logging.getLogger(__name__)`` below the
``webget`` logger; this module decides where those records go.  Output
can be redirected to a file at run time: signal handlers only *request*
the redirect, and the handler performs it the next time it emits a
record.
"""

import logging
import os
import sys
from typing import Optional

from webget.config import Config

logger = logging.getLogger("webget")

DEFAULT_LOGFILE = "webget-log"

# Name of the signal that asked for a redirect, consumed by the handler.
_redirect_request: Optional[str] = None

_handler: Optional["RedirectableHandler"] = None


def unique_name(base: str) -> str:
    """BASE, or the first of BASE.1, BASE.2, ... that does not exist yet."""
    if not os.path.exists(base):
        return base
    count = 1
    while os.path.exists(f"{base}.{count}"):
        count += 1
    return f"{base}.{count}"


def request_redirect_output(signal_name: str):
    """Ask for terminal output to move to a log file.

    Safe to call from a signal handler: it only records the request.
    """
    global _redirect_request
    _redirect_request = signal_name


class RedirectableHandler(logging.StreamHandler):
    """Stream handler that honors pending redirect requests before emitting."""

    def __init__(self, stream=None, to_terminal: bool = True):
        super().__init__(stream)
        self.to_terminal = to_terminal

    def emit(self, record: logging.LogRecord):
        if _redirect_request is not None:
            self.redirect_output()
        super().emit(record)

    def redirect_output(self):
        """Switch from the terminal to a fresh log file."""
        global _redirect_request
        signal_name, _redirect_request = _redirect_request, None
        if not self.to_terminal:
            # Already writing to a file.
            return
        name = unique_name(DEFAULT_LOGFILE)
        try:
            stream = open(name, "w", encoding="utf-8")
        except OSError as e:
            print(f"\n{signal_name} received.\n{name}: {e}; disabling logging.", file=self.stream, flush=True)
            self.setLevel(logging.CRITICAL + 1)
            self.to_terminal = False
            return
        print(f"\n{signal_name} received, redirecting output to `{name}'.", file=self.stream, flush=True)
        self.setStream(stream)
        self.to_terminal = False


def current_stream():
    """Stream the log currently writes to; stderr before logging starts."""
    if _handler is None or _handler.stream is None:
        return sys.stderr
    return _handler.stream


def log_level(config: Config) -> int:
    """Logging threshold for the verbosity settings of CONFIG."""
    if config.quiet:
        return logging.CRITICAL + 1
    if config.debug:
        return logging.DEBUG
    if config.verbose:
        return logging.INFO
    return logging.WARNING


def log_init(filename: Optional[str], append: bool, config: Config) -> logging.Handler:
    """Start logging to FILENAME, or to stderr when FILENAME is None."""
    global _handler
    log_close()
    if filename:
        stream = open(filename, "a" if append else "w", encoding="utf-8")
        handler = RedirectableHandler(stream, to_terminal=False)
    else:
        handler = RedirectableHandler(sys.stderr, to_terminal=True)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(log_level(config))
    logger.propagate = False
    _handler = handler
    return handler


def log_close():
    """Stop logging, closing the log file if one is open."""
    global _handler
    if _handler is None:
        return
    logger.removeHandler(_handler)
    if not _handler.to_terminal:
        _handler.close()
        if _handler.stream not in (sys.stdout, sys.stderr):
            _handler.stream.close()
    _handler = None

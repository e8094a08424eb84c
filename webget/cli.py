"""Command-line interface for webget."""

import logging
import os
import sys
from getopt import GetoptError
from typing import List, Optional

from webget import __version__, progress
from webget.config import Config
from webget.convert import convert_all_links
from webget.dispatch import dispatch
from webget.driver import expand_urls, retrieve_all
from webget.help import print_usage_error
from webget.log import DEFAULT_LOGFILE, log_close, log_init, unique_name
from webget.retrieve import Retriever
from webget.scanner import OptionScanner
from webget.settings import InvalidValue, initialize
from webget.signals import install_signal_handlers
from webget.switches import compile_switches

logger = logging.getLogger(__name__)

EXEC_NAME = "webget"


def parse_command_line(config: Config, args: List[str]) -> List[str]:
    """Apply the options in ARGS to CONFIG and return the remaining operands.

    Exits with status 2 on a malformed command line and with status 1 when
    an option value is unusable.
    """
    switches = compile_switches()
    scanner = OptionScanner(switches, args)
    try:
        for ident, optarg in scanner:
            dispatch(config, switches, ident, optarg, EXEC_NAME)
    except GetoptError as e:
        print_usage_error(EXEC_NAME, f"{EXEC_NAME}: {e.msg}")
        sys.exit(2)
    except InvalidValue as e:
        print(f"{EXEC_NAME}: {e}", file=sys.stderr)
        sys.exit(1)
    return scanner.operands


def fork_to_background(config: Config):
    """Detach from the terminal; the parent process exits here."""
    if not hasattr(os, "fork"):
        print("Background mode is not supported on this platform.", file=sys.stderr)
        return

    changed_logfile = False
    if not config.lfilename:
        config.lfilename = unique_name(DEFAULT_LOGFILE)
        changed_logfile = True

    pid = os.fork()
    if pid:
        print(f"Continuing in background, pid {pid}.")
        if changed_logfile:
            print(f"Output will be written to `{config.lfilename}'.")
        sys.exit(0)
    os.setsid()

    # The child has no terminal; everything it writes goes to the log file.
    devnull = os.open(os.devnull, os.O_RDWR)
    for fd in (0, 1, 2):
        os.dup2(devnull, fd)
    if devnull > 2:
        os.close(devnull)


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    args = sys.argv[1:] if argv is None else list(argv)
    config = Config()

    try:
        initialize(config)
    except (InvalidValue, OSError) as e:
        print(f"{EXEC_NAME}: {e}", file=sys.stderr)
        sys.exit(1)

    operands = parse_command_line(config, args)

    # All options are in; check how they combine.
    is_valid, error = config.validate(len(operands))
    if not is_valid:
        if error == "missing URL":
            print_usage_error(EXEC_NAME, f"{EXEC_NAME}: {error}")
        else:
            print_usage_error(EXEC_NAME, error, hint=False)
        sys.exit(1)

    if config.background:
        fork_to_background(config)

    if config.verbose:
        progress.set_progress_implementation(config.progress_type)

    urls = expand_urls(operands)

    try:
        log_init(config.lfilename, config.append_to_log, config)
    except OSError as e:
        print(f"{config.lfilename}: {e.strerror}", file=sys.stderr)
        sys.exit(1)
    logger.debug("DEBUG output created by webget %s on %s.\n", __version__, sys.platform)

    retriever = Retriever(config)
    try:
        retriever.open_output_document()
    except OSError as e:
        print(f"{config.output_document}: {e.strerror}", file=sys.stderr)
        log_close()
        sys.exit(1)

    install_signal_handlers()

    try:
        status = retrieve_all(config, urls, retriever)
        if config.cookies_output:
            retriever.save_cookies(config.cookies_output)
        if config.convert_links and not config.delete_after:
            convert_all_links(config, retriever.downloaded, retriever.html_files)
    except KeyboardInterrupt:
        print("\nDownload interrupted by user")
        sys.exit(1)
    finally:
        retriever.close()
        log_close()

    sys.exit(0 if status else 1)


if __name__ == "__main__":
    main()

"""Signal handling: every handler only records a request for later."""

import signal

from webget import log, progress

SIGNAL_NAMES = {}
for _name in ("SIGHUP", "SIGUSR1"):
    if hasattr(signal, _name):
        SIGNAL_NAMES[getattr(signal, _name)] = _name


def redirect_output_signal(signum, frame):
    """Hangup or SIGUSR1: move output to a log file and keep going."""
    log.request_redirect_output(SIGNAL_NAMES.get(signum, "WTF?!"))
    progress.progress_schedule_redirect()
    signal.signal(signum, redirect_output_signal)


def install_signal_handlers():
    """Install the handlers for the signals webget reacts to.

    Signals the platform lacks are skipped.  A hangup that was already
    being ignored when webget started (as under nohup) stays ignored.
    """
    if hasattr(signal, "SIGHUP") and signal.getsignal(signal.SIGHUP) != signal.SIG_IGN:
        signal.signal(signal.SIGHUP, redirect_output_signal)
    if hasattr(signal, "SIGUSR1"):
        signal.signal(signal.SIGUSR1, redirect_output_signal)
    # Failed writes are reported through their return codes instead.
    if hasattr(signal, "SIGPIPE"):
        signal.signal(signal.SIGPIPE, signal.SIG_IGN)
    if hasattr(signal, "SIGWINCH"):
        signal.signal(signal.SIGWINCH, progress.handle_sigwinch)

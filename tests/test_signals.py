"""Tests for signal handling and deferred log redirection."""

import io
import logging
import signal
import pytest
from unittest.mock import patch
from webget import log, progress
from webget.signals import install_signal_handlers, redirect_output_signal

needs_posix_signals = pytest.mark.skipif(
    not hasattr(signal, "SIGHUP"), reason="platform lacks SIGHUP/SIGUSR1"
)


@pytest.fixture(autouse=True)
def reset_flags():
    """Clear module-level request flags around each test."""
    log._redirect_request = None
    progress._output_redirected = False
    progress._screen_width_changed = False
    yield
    log._redirect_request = None
    progress._output_redirected = False
    progress._screen_width_changed = False


@needs_posix_signals
class TestSignalHandlers:
    """Test the signal handlers."""

    def test_redirect_only_requests(self):
        """Test that the handler only records the request and re-arms itself."""
        with patch("webget.signals.signal.signal") as mock_signal:
            redirect_output_signal(signal.SIGHUP, None)
        assert log._redirect_request == "SIGHUP"
        assert progress._output_redirected is True
        mock_signal.assert_called_once_with(signal.SIGHUP, redirect_output_signal)

    def test_sigusr1_name(self):
        """Test that SIGUSR1 is reported by name."""
        with patch("webget.signals.signal.signal"):
            redirect_output_signal(signal.SIGUSR1, None)
        assert log._redirect_request == "SIGUSR1"

    def test_install(self):
        """Test the installed dispositions."""
        with patch("webget.signals.signal.getsignal", return_value=signal.SIG_DFL), \
                patch("webget.signals.signal.signal") as mock_signal:
            install_signal_handlers()
        installed = dict(c.args for c in mock_signal.call_args_list)
        assert installed[signal.SIGHUP] is redirect_output_signal
        assert installed[signal.SIGUSR1] is redirect_output_signal
        assert installed[signal.SIGPIPE] == signal.SIG_IGN
        assert installed[signal.SIGWINCH] is progress.handle_sigwinch

    def test_ignored_hangup_stays_ignored(self):
        """Test that a hangup ignored at startup is left alone."""
        with patch("webget.signals.signal.getsignal", return_value=signal.SIG_IGN), \
                patch("webget.signals.signal.signal") as mock_signal:
            install_signal_handlers()
        installed = dict(c.args for c in mock_signal.call_args_list)
        assert signal.SIGHUP not in installed
        assert installed[signal.SIGUSR1] is redirect_output_signal

    def test_sigwinch(self):
        """Test that a resize only sets the recompute flag."""
        progress.handle_sigwinch(signal.SIGWINCH, None)
        assert progress._screen_width_changed is True


class TestRedirectableHandler:
    """Test that pending redirects are drained by the log handler."""

    def make_record(self, message):
        return logging.LogRecord("webget", logging.INFO, __file__, 1, message, None, None)

    def test_redirect_on_next_emit(self, tmp_path, monkeypatch):
        """Test that the terminal handler switches to a fresh log file."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "webget-log").write_text("older run")
        terminal = io.StringIO()
        handler = log.RedirectableHandler(terminal, to_terminal=True)

        handler.emit(self.make_record("before"))
        log.request_redirect_output("SIGHUP")
        handler.emit(self.make_record("after"))
        handler.stream.close()

        assert "before" in terminal.getvalue()
        assert "SIGHUP received, redirecting output to `webget-log.1'" in terminal.getvalue()
        assert "after" not in terminal.getvalue()
        assert (tmp_path / "webget-log.1").read_text() == "after\n"
        assert log._redirect_request is None

    def test_file_handler_ignores_redirect(self):
        """Test that output already going to a file stays there."""
        stream = io.StringIO()
        handler = log.RedirectableHandler(stream, to_terminal=False)
        log.request_redirect_output("SIGUSR1")
        handler.emit(self.make_record("message"))
        assert stream.getvalue() == "message\n"
        assert log._redirect_request is None


class TestUniqueName:
    """Test log file naming."""

    def test_unique_name(self, tmp_path):
        """Test numbered suffixes for taken names."""
        base = tmp_path / "webget-log"
        assert log.unique_name(str(base)) == str(base)
        base.write_text("")
        (tmp_path / "webget-log.1").write_text("")
        assert log.unique_name(str(base)) == str(base) + ".2"

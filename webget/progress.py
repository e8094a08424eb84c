"""Download progress gauges: a single-line bar and classic dots."""

import shutil
import sys
from typing import Optional

DEFAULT_SCREEN_WIDTH = 80

# Set from signal handlers, read by the gauges on their next update.
_screen_width_changed = False
_output_redirected = False

_implementation = "bar"

# (bytes per dot, dots per cluster, dots per line) for each dot style.
DOT_STYLES = {
    "default": (1024, 10, 50),
    "binary": (8192, 16, 48),
    "mega": (65536, 8, 48),
    "giga": (1 << 20, 8, 32),
}


def set_progress_implementation(name: Optional[str]):
    """Select the gauge used by :func:`create`; None keeps the current one."""
    global _implementation
    if name is None:
        return
    if name not in ("bar", "dot"):
        raise ValueError(f"Invalid progress type `{name}'")
    _implementation = name


def handle_sigwinch(signum, frame):
    """Note that the terminal was resized; the bar re-measures on its next update."""
    global _screen_width_changed
    _screen_width_changed = True


def progress_schedule_redirect():
    """Note that output is being moved off the terminal."""
    global _output_redirected
    _output_redirected = True


def screen_width() -> int:
    return shutil.get_terminal_size((DEFAULT_SCREEN_WIDTH, 24)).columns


class DotProgress:
    """Prints one dot per chunk of data, with the percentage at each line end."""

    def __init__(self, total: Optional[int], stream=None, style: str = "default"):
        self.total = total
        self.stream = stream or sys.stderr
        self.dot_bytes, self.cluster, self.per_line = DOT_STYLES[style]
        self.received = 0
        self.dots = 0
        self.accumulated = 0

    def update(self, nbytes: int):
        self.received += nbytes
        self.accumulated += nbytes
        while self.accumulated >= self.dot_bytes:
            self.accumulated -= self.dot_bytes
            if self.dots % self.per_line == 0:
                offset = self.dots * self.dot_bytes // 1024
                self.stream.write(f"\n{offset:6d}K ")
            elif self.dots % self.cluster == 0:
                self.stream.write(" ")
            self.stream.write(".")
            self.dots += 1
            if self.dots % self.per_line == 0 and self.total:
                self.stream.write(f" {100 * self.received // self.total:3d}%")
        self.stream.flush()

    def finish(self):
        if self.total:
            self.stream.write(f" {100 * self.received // self.total:3d}%")
        self.stream.write("\n")
        self.stream.flush()


class BarProgress:
    """Redraws a single status line with percentage, bar and byte count."""

    def __init__(self, total: Optional[int], stream=None):
        self.total = total
        self.stream = stream or sys.stderr
        self.received = 0
        self.width = screen_width()

    def update(self, nbytes: int):
        global _screen_width_changed
        self.received += nbytes
        if _screen_width_changed:
            self.width = screen_width()
            _screen_width_changed = False
        self.draw()

    def draw(self):
        count = f"{self.received:,}"
        if self.total:
            percent = min(100, 100 * self.received // self.total)
            # "100%[" + bar + "] " + count
            bar_width = max(self.width - len(count) - 10, 10)
            filled = bar_width * percent // 100
            bar = "=" * max(filled - 1, 0) + (">" if filled else "")
            line = f"{percent:3d}%[{bar:<{bar_width}}] {count}"
        else:
            line = f"    [{'<=>':^{max(self.width - len(count) - 10, 10)}}] {count}"
        self.stream.write("\r" + line[: self.width - 1])
        self.stream.flush()

    def finish(self):
        self.draw()
        self.stream.write("\n")
        self.stream.flush()


def create(total: Optional[int], stream=None, dot_style: str = "default"):
    """A new gauge for a download of TOTAL bytes (None when unknown).

    The bar falls back to dots when output is not a terminal, since a
    redrawn line is useless in a log file.
    """
    stream = stream or sys.stderr
    use_bar = _implementation == "bar" and not _output_redirected and stream.isatty()
    if use_bar:
        return BarProgress(total, stream)
    return DotProgress(total, stream, dot_style)

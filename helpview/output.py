"""
Output sinks for rendered help.

A sink prints a banner, a heading and body lines through a rich Console.
PipeSink binds that Console to the stdin of an external formatter
(e.g. ``bat -l help -p``) so the caller can report the formatter's exit
status after writing.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import sys
from contextlib import contextmanager
from typing import IO, Iterable, Iterator, Optional

from rich.console import Console

from helpview.errors import HelpIOError

logger = logging.getLogger(__name__)

BANNER_STYLE = "bold reverse"
HEADING_STYLE = "bold"


class HelpConsole(Console):
    """Console that raises BrokenPipeError when its reader goes away.

    rich's own handler redirects stdout to devnull and exits 1.
    """

    def on_broken_pipe(self) -> None:
        raise BrokenPipeError(f"output closed by reader: {self.file!r}")


def make_console(file: Optional[IO[str]] = None, color: bool = True) -> Console:
    """Console for help output; styles are sent even when not on a TTY."""
    return HelpConsole(
        file=file,
        force_terminal=color,
        color_system="standard" if color else None,
    )


class OutputSink:
    """Writes styled help text to a rich Console."""

    def __init__(self, console: Console):
        self.console = console

    def _print(self, text: str, style: Optional[str] = None) -> None:
        # Help text is literal: no markup, no highlighting, no re-wrapping
        self.console.print(
            text,
            style=style,
            markup=False,
            emoji=False,
            highlight=False,
            soft_wrap=True,
        )

    def banner(self, text: str) -> None:
        self._print(text, BANNER_STYLE)

    def heading(self, text: str) -> None:
        self._print(text, HEADING_STYLE)

    def body(self, lines: Iterable[str]) -> None:
        lines = list(lines)
        if lines:
            self._print("\n".join(lines))

    def text(self, text: str) -> None:
        self._print(text)

    def render(self, lines: list[str]) -> None:
        """Print the first line as a heading and the rest as body."""
        if not lines:
            return
        self.heading(lines[0])
        self.body(lines[1:])

    def wait(self) -> int:
        """Finish output; returns the exit status of the downstream consumer."""
        self.console.file.flush()
        return 0

    def close(self) -> None:
        pass


class PipeSink(OutputSink):
    """Sink that feeds an external formatter process through its stdin."""

    def __init__(self, command: list[str], color: bool = True):
        self.command = command
        try:
            self.process = subprocess.Popen(
                command, stdin=subprocess.PIPE, text=True
            )
        except OSError as e:
            raise HelpIOError(command[0], e.strerror or str(e)) from e

        logger.debug("Started formatter %s (pid %s)", command, self.process.pid)
        super().__init__(make_console(self.process.stdin, color=color))
        self.returncode: Optional[int] = None

    def wait(self) -> int:
        if self.returncode is None:
            if self.process.stdin and not self.process.stdin.closed:
                self.process.stdin.close()
            self.returncode = self.process.wait()
            logger.debug(
                "Formatter %s exited with %s", self.command, self.returncode
            )
        return self.returncode

    def close(self) -> None:
        """Release the child process when wait() was never reached."""
        if self.returncode is not None:
            return
        if self.process.stdin and not self.process.stdin.closed:
            try:
                self.process.stdin.close()
            except BrokenPipeError:
                logger.debug("Formatter %s closed its input early", self.command)
        try:
            self.returncode = self.process.wait()
        except KeyboardInterrupt:
            self.process.kill()
            self.returncode = self.process.wait()
            raise


@contextmanager
def open_output(
    formatter: Optional[str] = None,
    console: Optional[Console] = None,
    color: bool = True,
) -> Iterator[OutputSink]:
    """
    Acquire an output sink for one invocation.

    Args:
        formatter: Command line of an external formatter. None or empty
            writes straight to ``console``.
        console: Console used for direct output (defaults to stdout with
            styles forced on unless ``color`` is False).
        color: Whether ANSI styles are sent down the formatter pipe.

    The caller writes to the sink and then calls ``sink.wait()``. The sink
    is closed on every exit path.
    """
    if formatter:
        command = shlex.split(formatter)
        if not command:
            raise HelpIOError(formatter, "empty formatter command")
        sink: OutputSink = PipeSink(command, color=color)
    else:
        sink = OutputSink(console or make_console(color=color))

    try:
        yield sink
    finally:
        sink.close()


def detach_stdout() -> None:
    """Point the stdout descriptor at devnull after its reader has gone.

    Interpreter shutdown flushes sys.stdout; without this that flush fails
    again and Python reports it on stderr.
    """
    try:
        fd = sys.stdout.fileno()
    except (AttributeError, OSError, ValueError):
        return
    devnull = os.open(os.devnull, os.O_WRONLY)
    try:
        os.dup2(devnull, fd)
    finally:
        os.close(devnull)

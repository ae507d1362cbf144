"""Tests for output.py - console and formatter pipe sinks."""

import os
import sys
from io import StringIO
from unittest.mock import MagicMock, patch

import pytest

from helpview.errors import HelpIOError
from helpview.output import OutputSink, PipeSink, make_console, open_output


class TestOutputSink:
    """Test direct console output."""

    def test_render_heading_and_body(self, sink):
        sink.render(["Title", "line one", "line two"])

        assert sink.output.getvalue() == "Title\nline one\nline two\n"

    def test_render_empty_prints_nothing(self, sink):
        sink.render([])

        assert sink.output.getvalue() == ""

    def test_markup_is_not_interpreted(self, sink):
        """Help text full of brackets and colons is printed verbatim."""
        sink.render(["[count] [bold]x[/bold] :smile:"])

        assert sink.output.getvalue() == "[count] [bold]x[/bold] :smile:\n"

    def test_long_lines_are_not_wrapped(self, sink):
        line = "x" * 300
        sink.text(line)

        assert sink.output.getvalue() == line + "\n"

    def test_wait_returns_zero(self, sink):
        assert sink.wait() == 0


class TestOpenOutput:
    """Test sink acquisition."""

    def test_without_formatter_uses_console(self, recording_console):
        console, output = recording_console

        with open_output(None, console=console) as sink:
            sink.heading("hi")
            assert sink.wait() == 0

        assert type(sink) is OutputSink
        assert output.getvalue() == "hi\n"

    def test_formatter_pipes_text(self, tmp_path):
        """Formatter receives what the caller wrote."""
        target = tmp_path / "piped.txt"
        formatter = (
            f"{sys.executable} -c "
            f"\"import sys; open(r'{target}', 'w').write(sys.stdin.read())\""
        )

        with open_output(formatter, color=False) as sink:
            assert isinstance(sink, PipeSink)
            sink.render(["Heading", "body"])
            status = sink.wait()

        assert status == 0
        assert target.read_text() == "Heading\nbody\n"

    def test_formatter_exit_status_is_reported(self):
        formatter = f"{sys.executable} -c \"import sys; sys.stdin.read(); sys.exit(3)\""

        with open_output(formatter, color=False) as sink:
            sink.text("ignored")
            status = sink.wait()

        assert status == 3

    def test_missing_formatter_raises_io_error(self):
        with pytest.raises(HelpIOError, match="no-such-formatter-binary"):
            with open_output("no-such-formatter-binary --flag"):
                pass

    def test_blank_formatter_command_raises(self):
        with pytest.raises(HelpIOError):
            with open_output("   "):
                pass

    @patch("helpview.output.subprocess.Popen")
    def test_pipe_closed_on_error(self, mock_popen):
        """The child is waited for even when the caller raises."""
        process = MagicMock()
        process.stdin.closed = False
        process.wait.return_value = 0
        mock_popen.return_value = process

        with pytest.raises(RuntimeError):
            with open_output("fmt"):
                raise RuntimeError("boom")

        process.stdin.close.assert_called()
        process.wait.assert_called_once()

    @patch("helpview.output.subprocess.Popen")
    def test_wait_is_idempotent(self, mock_popen):
        process = MagicMock()
        process.stdin.closed = False
        process.wait.return_value = 7
        mock_popen.return_value = process

        with open_output("fmt") as sink:
            assert sink.wait() == 7
            assert sink.wait() == 7

        process.wait.assert_called_once()


class TestMakeConsole:
    """Test the console used for stdout and formatter pipes."""

    def test_styles_sent_when_not_a_tty(self):
        output = StringIO()
        sink = OutputSink(make_console(output))

        sink.heading("Title")

        assert output.getvalue().startswith("\x1b[1mTitle")

    def test_banner_is_bold_reverse(self):
        output = StringIO()
        OutputSink(make_console(output)).banner("ls")

        assert "\x1b[1;7mls" in output.getvalue()

    def test_no_color_is_plain(self):
        output = StringIO()
        sink = OutputSink(make_console(output, color=False))

        sink.heading("Title")

        assert output.getvalue() == "Title\n"

    def test_closed_reader_raises_broken_pipe(self):
        """A reader that went away surfaces as BrokenPipeError, not exit(1)."""
        read_fd, write_fd = os.pipe()
        os.close(read_fd)
        stream = os.fdopen(write_fd, "w")
        sink = OutputSink(make_console(stream))
        try:
            with pytest.raises(BrokenPipeError):
                sink.render(["heading", "body"])
        finally:
            try:
                stream.close()
            except BrokenPipeError:
                pass

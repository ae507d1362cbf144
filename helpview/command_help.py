"""
Help for shell commands: man page first, ``<command> --help`` second.
"""

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from typing import Optional

from helpview.errors import NotFoundError
from helpview.output import OutputSink

logger = logging.getLogger(__name__)

# Overstrike sequences man emits for bold ("x\bx") and underline ("_\bx")
_OVERSTRIKE = re.compile(r".\x08")


@dataclass
class CommandResult:
    """Captured output of one help command."""

    ok: bool
    stdout: str = ""
    stderr: str = ""


def strip_overstrike(text: str) -> str:
    """Remove backspace formatting, like piping through ``col -b``."""
    return _OVERSTRIKE.sub("", text)


def _run(cmd: list[str], env: Optional[dict] = None) -> CommandResult:
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, env=env)
    except OSError as e:
        logger.debug("Could not run %s: %s", cmd, e)
        return CommandResult(ok=False, stderr=str(e))

    logger.debug("%s exited with %s", cmd, result.returncode)
    return CommandResult(
        ok=result.returncode == 0, stdout=result.stdout, stderr=result.stderr
    )


def run_man(key: str) -> CommandResult:
    """Render the man page for ``key`` as plain text."""
    env = {**os.environ, "MANPAGER": "cat", "PAGER": "cat"}
    env.pop("MAN_KEEP_FORMATTING", None)
    result = _run(["man", key], env=env)
    if result.ok:
        result.stdout = strip_overstrike(result.stdout)
    return result


def run_self_help(key: str) -> CommandResult:
    """Run ``key --help``."""
    return _run([key, "--help"])


def show_command_help(key: str, sink: OutputSink) -> None:
    """
    Render help for the shell command ``key``.

    Tries the man page, then the program's own ``--help`` output. When
    both fail, prints what the program wrote to stderr and raises
    NotFoundError.
    """
    sink.banner(key)

    result = run_man(key)
    if not result.ok:
        logger.info("No man page for %s, trying --help", key)
        result = run_self_help(key)

    if not result.ok:
        sink.text(f"No help found for {key}")
        sink.render(result.stderr.split("\n"))
        raise NotFoundError(key, f"no help found for {key}")

    sink.render(result.stdout.split("\n"))

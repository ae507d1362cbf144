"""
Shared logging configuration helpers.

Provides a single entry point to configure logging so that the CLI and
the tests do not fight over logging.basicConfig.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    *,
    level: int = logging.WARNING,
    log_file: Optional[str] = None,
    include_console: bool = True,
) -> None:
    """
    Configure root logging once.

    Args:
        level: Default logging level to apply.
        log_file: Optional filename to log to. None skips file logging.
        include_console: Whether to emit logs to stderr as well. Stdout is
            reserved for help output.
    """
    root_logger = logging.getLogger()

    if root_logger.handlers:
        root_logger.setLevel(level)
        return

    handlers: list[logging.Handler] = []
    formatter = logging.Formatter(DEFAULT_FORMAT)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if include_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    logging.basicConfig(
        level=level,
        handlers=handlers or None,
        format=DEFAULT_FORMAT,
    )


def verbosity_to_level(verbose: int, default: int = logging.WARNING) -> int:
    """Map a count of -v flags to a logging level."""
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return min(default, logging.INFO)
    return default

"""
Error types for helpview.

Every error is terminal for the invocation: main() prints the message
and exits non-zero.
"""


class HelpViewError(Exception):
    """Base class for all helpview failures."""


class HelpIOError(HelpViewError):
    """Raised when the tags index, a help document or the formatter is unusable."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class NotFoundError(HelpViewError):
    """Raised when nothing matches the requested key."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"{key} not found")


class ConfigError(HelpViewError):
    """Raised when the config file can't be read or doesn't validate."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")

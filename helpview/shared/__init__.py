"""
Shared modules for helpview
"""

from helpview.shared.logging_config import configure_logging, verbosity_to_level

__all__ = [
    "configure_logging",
    "verbosity_to_level",
]

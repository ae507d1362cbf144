"""
helpview - documentation previews for the terminal

Looks up Vim help tags, man pages and static topics for a keyword.
"""

__version__ = "0.1.0"

from helpview.errors import HelpIOError, HelpViewError, NotFoundError
from helpview.tags import Excerpt, MatchTier, TagEntry, lookup_tag

__all__ = [
    "__version__",
    "Excerpt",
    "HelpIOError",
    "HelpViewError",
    "MatchTier",
    "NotFoundError",
    "TagEntry",
    "lookup_tag",
]

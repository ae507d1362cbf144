"""
Static preview text for top-level topics.
"""

import logging
from types import MappingProxyType
from typing import List, Mapping

from helpview.output import OutputSink

logger = logging.getLogger(__name__)

TOPICS: Mapping[str, str] = MappingProxyType(
    {
        "text objects": """Do the stuffs with the text objects

 * The Operators
 * The Motions and Text Objects
 * The Niceness""",
        "configuration": """Learning about configuration

 * The doing the config
 * The writing the config""",
        "All-the-Things": """A big old fuzzy menu of goodness

 * FZF functionality
 * Lots of helpers
 * IDE-like stuffs""",
    }
)


def topic_names(topics: Mapping[str, str] = TOPICS) -> List[str]:
    """Topic keys in definition order."""
    return list(topics)


def preview_topic(
    key: str, sink: OutputSink, topics: Mapping[str, str] = TOPICS
) -> bool:
    """
    Print the preview for ``key`` if it is a known topic.

    Unknown keys print nothing. Returns True when something was shown.
    """
    preview = topics.get(key)
    if preview is None:
        logger.debug("No top-level topic named %r", key)
        return False

    sink.banner(key)
    sink.render(preview.split("\n"))
    return True

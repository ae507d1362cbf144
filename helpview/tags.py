"""
Vim help tag lookup.

Reads a Vim-style ``doc/tags`` index (``key<TAB>file<TAB>anchor`` per line),
ranks entries against a query and renders an excerpt of the referenced
help document starting at the entry's anchor.

Ranking:
- EXACT:     key == query, or key == "<query>"
- PREFIX:    key starts with query, or with "<query"
- SUBSTRING: query appears anywhere in key

Only the first entry of the best non-empty tier is rendered.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional, Union

from helpview.errors import HelpIOError, NotFoundError
from helpview.output import OutputSink

logger = logging.getLogger(__name__)

DELIMITER = "\t"
DOC_DIR = "doc"
TAGS_FILE = "tags"


class MatchTier(IntEnum):
    """Match quality, best first."""

    EXACT = 0
    PREFIX = 1
    SUBSTRING = 2


@dataclass(frozen=True)
class TagEntry:
    """One line of the tags index."""

    key: str
    file: str
    lookup: str

    @property
    def anchor(self) -> str:
        """Lookup text with its leading marker character removed."""
        return self.lookup[1:]


@dataclass
class TierBuckets:
    """Entries grouped by tier, each list in index-file order."""

    exact: list[TagEntry] = field(default_factory=list)
    prefix: list[TagEntry] = field(default_factory=list)
    substring: list[TagEntry] = field(default_factory=list)

    def add(self, tier: MatchTier, entry: TagEntry) -> None:
        self.for_tier(tier).append(entry)

    def for_tier(self, tier: MatchTier) -> list[TagEntry]:
        if tier is MatchTier.EXACT:
            return self.exact
        if tier is MatchTier.PREFIX:
            return self.prefix
        return self.substring

    def best(self) -> Optional[tuple[MatchTier, list[TagEntry]]]:
        """Return (tier, entries) for the first non-empty tier, or None."""
        for tier in MatchTier:
            entries = self.for_tier(tier)
            if entries:
                return tier, entries
        return None


@dataclass
class Excerpt:
    """Lines of a help document starting at a tag's anchor."""

    entry: TagEntry
    lines: list[str]

    @property
    def heading(self) -> str:
        return self.lines[0] if self.lines else ""

    @property
    def body(self) -> list[str]:
        return self.lines[1:]


def parse_tags(text: str) -> list[TagEntry]:
    """
    Parse index text.

    Lines without exactly three fields, or whose lookup is only a marker
    with no anchor text after it, are skipped.
    """
    entries = []
    for line in text.split("\n"):
        parts = line.split(DELIMITER)
        if len(parts) == 3 and len(parts[2]) > 1:
            entries.append(TagEntry(key=parts[0], file=parts[1], lookup=parts[2]))
    return entries


def classify(entry: TagEntry, query: str) -> Optional[MatchTier]:
    """Return the tier an entry falls into for ``query``, or None."""
    key = entry.key
    if key == query or key == f"<{query}>":
        return MatchTier.EXACT
    if key.startswith(query) or key.startswith(f"<{query}"):
        return MatchTier.PREFIX
    if query in key:
        return MatchTier.SUBSTRING
    return None


def bucket_entries(entries: Iterable[TagEntry], query: str) -> TierBuckets:
    """Sort entries into tiers in a single pass, keeping file order."""
    buckets = TierBuckets()
    for entry in entries:
        tier = classify(entry, query)
        if tier is not None:
            buckets.add(tier, entry)
    return buckets


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise HelpIOError(path, e.strerror or str(e)) from e


def doc_dir(runtime: Union[str, Path]) -> Path:
    return Path(runtime) / DOC_DIR


def doc_path(runtime: Union[str, Path], name: str) -> Path:
    """Path of help document ``name``; it must stay inside the doc directory."""
    relative = PurePosixPath(name)
    if (
        not name
        or relative.is_absolute()
        or Path(name).is_absolute()
        or ".." in relative.parts
    ):
        raise HelpIOError(name, "help file must be a path inside the doc directory")
    return doc_dir(runtime) / relative


def read_tags(runtime: Union[str, Path]) -> str:
    """Read the raw tags index below ``runtime``."""
    return _read_text(doc_dir(runtime) / TAGS_FILE)


def extract_excerpt(
    runtime: Union[str, Path], entry: TagEntry, max_lines: int
) -> Excerpt:
    """
    Locate ``entry``'s anchor in its document and slice from there.

    Raises:
        HelpIOError: the document can't be read or lies outside doc/.
        NotFoundError: the anchor text is not in the document.
    """
    text = _read_text(doc_path(runtime, entry.file))

    index = text.find(entry.anchor)
    if index < 0:
        raise NotFoundError(entry.key, f"{entry.lookup} not found")

    lines = text[index:].split("\n")
    return Excerpt(entry=entry, lines=lines[:max_lines])


def find_best(
    runtime: Union[str, Path], key: str
) -> tuple[MatchTier, TagEntry]:
    """
    Return (tier, entry) for the entry that would be shown for ``key``.

    Raises NotFoundError when no entry matches in any tier.
    """
    buckets = bucket_entries(parse_tags(read_tags(runtime)), key)
    best = buckets.best()
    if best is None:
        raise NotFoundError(key, f"{key}: not found")

    tier, entries = best
    if len(entries) > 1:
        logger.debug(
            "%d %s candidates for %r, showing %r",
            len(entries),
            tier.name.lower(),
            key,
            entries[0].key,
        )
    return tier, entries[0]


def lookup_tag(
    runtime: Union[str, Path], key: str, max_lines: int, sink: OutputSink
) -> Excerpt:
    """
    Render the help excerpt for ``key`` to ``sink``.

    Args:
        runtime: Directory containing ``doc/tags`` and the help documents.
        key: Query string.
        max_lines: Most lines to render, heading included.
        sink: Where the excerpt is written.

    Returns:
        The rendered excerpt.

    Raises:
        HelpIOError: index or document unreadable.
        NotFoundError: no matching tag, or its anchor is missing.
    """
    if max_lines < 1:
        raise ValueError(f"max_lines must be positive, got {max_lines}")

    tier, entry = find_best(runtime, key)
    logger.debug("match level %d (%s): %s", tier, tier.name, entry)

    excerpt = extract_excerpt(runtime, entry, max_lines)
    sink.render(excerpt.lines)
    return excerpt

"""Achievement ranges and range arithmetic.

Responsibilities:
- AchievementRange: an immutable logged span of verses
- extent(): verse and page counts for a range
- union_pages(): the completed-page set for a list of ranges
- PageSetCache: optional memoization of union_pages

Counting note: the same-surah verse count and the page count are the
distance between the endpoints (end - start), not an inclusive count.
A range of 1:1..1:7 therefore reports 6 verses, and a range that
starts and ends on one page reports 0 pages. Completion metrics use
len(union_pages(...)), which is inclusive.
"""

from __future__ import annotations

import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Sequence

import structlog

from hifz.config.catalog import ReferenceCatalog
from hifz.core.addressing import (
    UNRESOLVED_PAGE,
    AddressTranslator,
    VerseAddress,
    get_translator,
)

logger = structlog.get_logger(__name__)

MIN_QUALITY = 1
MAX_QUALITY = 10


class AchievementKind(Enum):
    """Which log a range belongs to."""

    RECITATION = "recitation"
    MEMORIZATION = "memorization"


class InvalidRangeError(ValueError):
    """Raised when a range is built with inverted endpoints or bad quality."""

    pass


@dataclass(frozen=True)
class AchievementRange:
    """A logged span of verses. Replaced wholesale on edit."""

    start: VerseAddress
    end: VerseAddress
    kind: AchievementKind
    quality: int
    tajweed_quality: int | None = None  # recitation ranges only
    notes: str = ""
    logged_at: str = ""
    id: str = field(default="", compare=False)

    def __post_init__(self):
        if self.end < self.start:
            raise InvalidRangeError(
                f"Range end {self.end} comes before start {self.start}"
            )
        for value in (self.quality, self.tajweed_quality):
            if value is not None and not MIN_QUALITY <= value <= MAX_QUALITY:
                raise InvalidRangeError(
                    f"Quality {value} outside {MIN_QUALITY}..{MAX_QUALITY}"
                )
        if not self.logged_at:
            object.__setattr__(self, "logged_at", datetime.now(timezone.utc).isoformat())
        if not self.id:
            prefix = "rec" if self.kind is AchievementKind.RECITATION else "mem"
            object.__setattr__(self, "id", f"{prefix}-{uuid.uuid4().hex[:12]}")

    def contains(self, addr: VerseAddress) -> bool:
        """True if the verse lies inside the range (inclusive)."""
        return self.start <= addr <= self.end

    @property
    def surahs(self) -> range:
        """Surah numbers touched by the range."""
        return range(self.start.surah, self.end.surah + 1)

    @property
    def average_quality(self) -> float:
        """Mean of reading and tajweed quality (reading only if no tajweed score)."""
        if self.tajweed_quality is None:
            return float(self.quality)
        return (self.quality + self.tajweed_quality) / 2

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "id": self.id,
            "kind": self.kind.value,
            "start": self.start.key,
            "end": self.end.key,
            "quality": self.quality,
            "logged_at": self.logged_at,
        }
        if self.tajweed_quality is not None:
            result["tajweed_quality"] = self.tajweed_quality
        if self.notes:
            result["notes"] = self.notes
        return result


@dataclass(frozen=True)
class RangeExtent:
    """Verse and page counts for a range."""

    verse_count: int
    page_count: int


def count_verses(start: VerseAddress, end: VerseAddress, catalog: ReferenceCatalog) -> int:
    """Verses between two addresses, never negative.

    Within one surah this is end - start. Across surahs it is the rest
    of the start surah (inclusive), every surah in between, and the
    first end.ayah verses of the end surah.
    """
    if start.surah == end.surah:
        return max(0, end.ayah - start.ayah)

    total = 0
    if catalog.get(start.surah):
        total += catalog.verse_count(start.surah) - start.ayah + 1
    for number in range(start.surah + 1, end.surah):
        total += catalog.verse_count(number)
    if catalog.get(end.surah):
        total += end.ayah
    return max(0, total)


def extent(rng: AchievementRange, translator: AddressTranslator | None = None) -> RangeExtent:
    """Verse count and page count of a range.

    page_count is 0 when either endpoint cannot be resolved to a page.
    """
    translator = translator or get_translator()
    verses = count_verses(rng.start, rng.end, translator.catalog)

    start_page = translator.page_of(rng.start)
    end_page = translator.page_of(rng.end)
    if start_page == UNRESOLVED_PAGE or end_page == UNRESOLVED_PAGE:
        return RangeExtent(verse_count=verses, page_count=0)

    return RangeExtent(verse_count=verses, page_count=max(0, end_page - start_page))


def page_span(rng: AchievementRange, translator: AddressTranslator | None = None) -> range | None:
    """Inclusive page range of a logged range, or None if unresolvable."""
    translator = translator or get_translator()
    start_page = translator.page_of(rng.start)
    end_page = translator.page_of(rng.end)
    if start_page == UNRESOLVED_PAGE or end_page == UNRESOLVED_PAGE:
        return None
    return range(start_page, end_page + 1)


def union_pages(
    ranges: Iterable[AchievementRange], translator: AddressTranslator | None = None
) -> set[int]:
    """Set of every page touched by at least one range.

    Ranges with an unresolvable endpoint contribute nothing.
    """
    translator = translator or get_translator()
    pages: set[int] = set()
    for rng in ranges:
        span = page_span(rng, translator)
        if span is None:
            logger.warning("union_pages.unresolvable_range", range_id=rng.id)
            continue
        pages.update(span)
    return pages


def find_covering_range(
    addr: VerseAddress, ranges: Iterable[AchievementRange]
) -> AchievementRange | None:
    """First logged range containing the verse, if any."""
    for rng in ranges:
        if rng.contains(addr):
            return rng
    return None


class PageSetCache:
    """Memoize union_pages per range list.

    Keys are the range tuples themselves; ranges are immutable, so a
    changed log is a different key. Dropping the cache only costs time.
    """

    def __init__(self, translator: AddressTranslator | None = None, maxsize: int = 256):
        self.translator = translator
        self.maxsize = maxsize
        self._entries: OrderedDict[tuple[AchievementRange, ...], frozenset[int]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def pages(self, ranges: Sequence[AchievementRange]) -> frozenset[int]:
        key = tuple(ranges)
        cached = self._entries.get(key)
        if cached is not None:
            self._entries.move_to_end(key)
            self.hits += 1
            return cached

        self.misses += 1
        result = frozenset(union_pages(key, self.translator))
        self._entries[key] = result
        if len(self._entries) > self.maxsize:
            self._entries.popitem(last=False)
        return result

    def clear(self) -> None:
        self._entries.clear()

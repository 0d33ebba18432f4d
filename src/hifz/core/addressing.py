"""Verse addressing and verse -> page translation.

Responsibilities:
- VerseAddress: (surah, ayah) in document order
- Page marker table: first verse of every page
- AddressTranslator.page_of: verse -> page, 0 when unresolvable
- Verse stepping and juz lookup

The marker table is supplied data. When the app config names a
``page_index_file`` it is read from there ([[page, surah, ayah], ...]
as YAML or JSON); otherwise it is derived from the catalog's page
boundaries, which is exact at surah starts and spreads verses evenly
across the pages inside a surah.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from pathlib import Path

import structlog
import yaml

from hifz.config.app_config import load_app_config
from hifz.config.catalog import ReferenceCatalog, load_catalog

logger = structlog.get_logger(__name__)

UNRESOLVED_PAGE = 0

# Last page of each juz in the 604-page pagination.
JUZ_END_PAGES: dict[int, int] = {n: 20 * n + 1 for n in range(1, 30)}
JUZ_END_PAGES[30] = 604


@dataclass(frozen=True, order=True)
class VerseAddress:
    """A verse position. Ordering is document order."""

    surah: int
    ayah: int

    @property
    def key(self) -> str:
        """Verse key in "surah:ayah" form."""
        return f"{self.surah}:{self.ayah}"

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class PageMarker:
    """First verse printed on a page."""

    page: int
    surah: int
    ayah: int

    @property
    def address(self) -> VerseAddress:
        return VerseAddress(self.surah, self.ayah)


def derive_page_markers(catalog: ReferenceCatalog) -> list[PageMarker]:
    """Build one marker per page from the catalog's page boundaries.

    A surah that starts on a page an earlier surah already opened adds
    no marker for that page. Pages after a surah's first page get the
    verse at the matching fraction of the surah.
    """
    markers: list[PageMarker] = []
    last_page = 0

    for surah in catalog:
        span = surah.end_page - surah.start_page + 1
        for offset in range(span):
            page = surah.start_page + offset
            if page <= last_page:
                continue
            ayah = 1 + (offset * surah.verse_count) // span
            markers.append(PageMarker(page=page, surah=surah.number, ayah=ayah))
            last_page = page

    return markers


def load_page_markers(path: Path) -> list[PageMarker]:
    """Read a marker table of [page, surah, ayah] rows.

    YAML is a superset of JSON, so both formats load here.
    """
    rows = yaml.safe_load(path.read_text(encoding="utf-8")) or []
    if isinstance(rows, dict):
        rows = rows.get("pages", [])
    return [PageMarker(page=int(r[0]), surah=int(r[1]), ayah=int(r[2])) for r in rows]


class AddressTranslator:
    """Resolve verse addresses to page numbers.

    The marker table is sorted once in document order and searched with
    bisect; lookups are pure and can be cached freely.
    """

    def __init__(self, catalog: ReferenceCatalog, markers: list[PageMarker]):
        self.catalog = catalog
        self.markers = sorted(markers, key=lambda m: (m.surah, m.ayah))
        self._keys = [(m.surah, m.ayah) for m in self.markers]

    @property
    def total_pages(self) -> int:
        return self.markers[-1].page if self.markers else 0

    def is_valid(self, addr: VerseAddress) -> bool:
        return self.catalog.is_valid(addr.surah, addr.ayah)

    def page_of(self, addr: VerseAddress) -> int:
        """Page holding a verse, or 0 if the address is not in the catalog."""
        if not self.is_valid(addr):
            logger.debug("page_of.unresolvable", surah=addr.surah, ayah=addr.ayah)
            return UNRESOLVED_PAGE

        idx = bisect.bisect_right(self._keys, (addr.surah, addr.ayah)) - 1
        if idx < 0:
            return UNRESOLVED_PAGE
        return self.markers[idx].page

    def first_verse_of_page(self, page: int) -> VerseAddress | None:
        """Inverse lookup: first verse printed on a page."""
        for marker in self.markers:
            if marker.page == page:
                return marker.address
        return None

    def next_verse(self, addr: VerseAddress) -> VerseAddress:
        """Following verse; the last verse of the text maps to itself."""
        if addr.ayah < self.catalog.verse_count(addr.surah):
            return VerseAddress(addr.surah, addr.ayah + 1)
        if addr.surah >= self.catalog.last_surah:
            last = self.catalog.last_surah
            return VerseAddress(last, self.catalog.verse_count(last))
        return VerseAddress(addr.surah + 1, 1)

    def previous_verse(self, addr: VerseAddress) -> VerseAddress:
        """Preceding verse; 1:1 maps to itself."""
        if addr.ayah > 1:
            return VerseAddress(addr.surah, addr.ayah - 1)
        if addr.surah <= 1:
            return VerseAddress(1, 1)
        return VerseAddress(addr.surah - 1, self.catalog.verse_count(addr.surah - 1))


def juz_of_page(page: int) -> int:
    """Juz (1..30) containing a page, or 0 for pages outside 1..604."""
    if page < 1:
        return 0
    for juz, end_page in JUZ_END_PAGES.items():
        if page <= end_page:
            return juz
    return 0


# Module-level cache
_cached_translator: AddressTranslator | None = None


def get_translator(force_reload: bool = False) -> AddressTranslator:
    """Translator over the default catalog and configured marker table."""
    global _cached_translator

    if _cached_translator is not None and not force_reload:
        return _cached_translator

    catalog = load_catalog()
    index_file = load_app_config().catalog.page_index_file

    markers: list[PageMarker] | None = None
    if index_file:
        path = Path(index_file)
        if path.exists():
            markers = load_page_markers(path)
            logger.info("page_index.loaded", source=str(path), pages=len(markers))
        else:
            logger.warning("page_index_file_not_found", path=index_file)

    if markers is None:
        markers = derive_page_markers(catalog)
        logger.debug("page_index.derived", pages=len(markers))

    _cached_translator = AddressTranslator(catalog, markers)
    return _cached_translator


def page_of(addr: VerseAddress) -> int:
    """Page of a verse using the default translator (0 if unresolvable)."""
    return get_translator().page_of(addr)


def clear_translator_cache() -> None:
    """Clear the cached translator (after config or catalog changes)."""
    global _cached_translator
    _cached_translator = None

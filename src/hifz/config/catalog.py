"""Reference catalog loader.

Loads the per-surah metadata table (verse counts and page boundaries)
from the catalog_v1.yaml bundled next to this module, or from the file
named by ``catalog.catalog_file`` in the app config.

Usage:
    from hifz.config.catalog import load_catalog, verse_count

    catalog = load_catalog()
    baqarah = catalog.get(2)
    verse_count(2)  # 286
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import structlog
import yaml

from hifz.config.app_config import load_app_config

logger = structlog.get_logger(__name__)

CATALOG_FILE = Path(__file__).parent / "catalog_v1.yaml"
CATALOG_SCHEMA = "catalog_v1"
SURAH_COUNT = 114


class CatalogError(Exception):
    """Raised when the catalog file is missing or structurally wrong."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid catalog {path}: {reason}")


@dataclass(frozen=True)
class SurahRecord:
    """Static metadata for one surah."""

    number: int
    name: str
    transliterated_name: str
    english_name: str
    revelation_type: str
    verse_count: int
    start_page: int
    end_page: int


@dataclass
class ReferenceCatalog:
    """Read-only table of surah records, indexed by surah number."""

    surahs: list[SurahRecord] = field(default_factory=list)
    total_pages: int = 604

    def __post_init__(self):
        self._by_number = {s.number: s for s in self.surahs}

    def __len__(self) -> int:
        return len(self.surahs)

    def __iter__(self):
        return iter(self.surahs)

    def get(self, number: int) -> SurahRecord | None:
        """Get a surah record, or None if the number is unknown."""
        return self._by_number.get(number)

    def verse_count(self, number: int) -> int:
        """Number of verses in a surah (0 for unknown surahs)."""
        record = self._by_number.get(number)
        return record.verse_count if record else 0

    def is_valid(self, surah: int, ayah: int) -> bool:
        """True if (surah, ayah) names a verse that exists."""
        return 1 <= ayah <= self.verse_count(surah)

    @property
    def last_surah(self) -> int:
        return self.surahs[-1].number if self.surahs else 0


# Module-level cache
_cached_catalog: ReferenceCatalog | None = None


def _parse_catalog(data: dict, path: Path) -> ReferenceCatalog:
    """Parse YAML data into a ReferenceCatalog."""
    if not isinstance(data, dict) or "surahs" not in data:
        raise CatalogError(path, "missing 'surahs' list")

    records = []
    for entry in data["surahs"]:
        records.append(
            SurahRecord(
                number=int(entry["number"]),
                name=entry.get("name", ""),
                transliterated_name=entry.get("transliterated_name", ""),
                english_name=entry.get("english_name", ""),
                revelation_type=entry.get("revelation_type", ""),
                verse_count=int(entry["verse_count"]),
                start_page=int(entry["start_page"]),
                end_page=int(entry["end_page"]),
            )
        )

    if len(records) != SURAH_COUNT:
        raise CatalogError(path, f"expected {SURAH_COUNT} surahs, found {len(records)}")

    records.sort(key=lambda r: r.number)
    return ReferenceCatalog(
        surahs=records,
        total_pages=int(data.get("total_pages", records[-1].end_page)),
    )


def _resolve_catalog_path() -> Path:
    """Pick the configured catalog file, falling back to the bundled one."""
    configured = load_app_config().catalog.catalog_file
    if configured:
        path = Path(configured)
        if path.exists():
            return path
        logger.warning("catalog_file_not_found", path=configured, fallback=str(CATALOG_FILE))
    return CATALOG_FILE


def load_catalog(force_reload: bool = False) -> ReferenceCatalog:
    """Load the reference catalog.

    Args:
        force_reload: If True, ignore cache and reload from file.

    Returns:
        ReferenceCatalog with all 114 surahs.

    Raises:
        CatalogError: If the file is unreadable or does not hold 114 surahs.
    """
    global _cached_catalog

    if _cached_catalog is not None and not force_reload:
        return _cached_catalog

    path = _resolve_catalog_path()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise CatalogError(path, str(e)) from e

    _cached_catalog = _parse_catalog(data, path)
    logger.debug("catalog.loaded", source=str(path), surahs=len(_cached_catalog))
    return _cached_catalog


def get_surah(number: int) -> SurahRecord | None:
    """Get a surah record from the default catalog."""
    return load_catalog().get(number)


def verse_count(number: int) -> int:
    """Verse count of a surah in the default catalog (0 if unknown)."""
    return load_catalog().verse_count(number)


def clear_catalog_cache() -> None:
    """Clear the catalog cache.

    Useful for testing or when the config points at a new file.
    """
    global _cached_catalog
    _cached_catalog = None

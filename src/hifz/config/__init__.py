"""Configuration package for the hifz tracker."""

from hifz.config.app_config import (
    AgeGroup,
    AppConfig,
    CatalogConfig,
    RankingConfig,
    ScoringConfig,
    load_app_config,
)
from hifz.config.catalog import (
    CatalogError,
    ReferenceCatalog,
    SurahRecord,
    get_surah,
    load_catalog,
    verse_count,
)

__all__ = [
    "AgeGroup",
    "AppConfig",
    "CatalogConfig",
    "RankingConfig",
    "ScoringConfig",
    "load_app_config",
    "CatalogError",
    "ReferenceCatalog",
    "SurahRecord",
    "get_surah",
    "load_catalog",
    "verse_count",
]

"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml
and falls back to built-in defaults when the file is missing.

Usage:
    from hifz.config.app_config import load_app_config

    config = load_app_config()
    penalty = config.scoring.mistake_penalty
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")


@dataclass
class CatalogConfig:
    """Where the reference catalog and page index come from."""

    catalog_file: str | None = None  # None -> bundled catalog_v1.yaml
    page_index_file: str | None = None  # None -> derived from catalog


@dataclass
class ScoringConfig:
    """Recitation score weights."""

    mistake_penalty: float = 12.8539661  # one word's worth of points
    baseline_quality: float = 7.5
    max_score: float = 1_000_000.0


@dataclass
class AgeGroup:
    """Inclusive age bracket used for ranking."""

    name: str
    min_age: int
    max_age: int | None = None  # None = open ended

    def contains(self, age: int) -> bool:
        if age < self.min_age:
            return False
        return self.max_age is None or age <= self.max_age


@dataclass
class RankingConfig:
    """Ranking settings."""

    age_groups: list[AgeGroup] = field(default_factory=list)

    def group_for(self, age: int) -> AgeGroup | None:
        for group in self.age_groups:
            if group.contains(age):
                return group
        return None


@dataclass
class AppConfig:
    """Application-wide configuration."""

    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    ranking: RankingConfig = field(default_factory=RankingConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "catalog": {
            "catalog_file": None,
            "page_index_file": None,
        },
        "scoring": {
            "mistake_penalty": 12.8539661,
            "baseline_quality": 7.5,
            "max_score": 1_000_000,
        },
        "ranking": {
            "age_groups": [
                {"name": "young", "min_age": 4, "max_age": 15},
                {"name": "aspiring", "min_age": 16, "max_age": 35},
                {"name": "devoted", "min_age": 36, "max_age": None},
            ],
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    catalog_data = data.get("catalog") or {}
    catalog = CatalogConfig(
        catalog_file=catalog_data.get("catalog_file"),
        page_index_file=catalog_data.get("page_index_file"),
    )

    scoring_data = data.get("scoring") or {}
    scoring = ScoringConfig(
        mistake_penalty=float(scoring_data.get("mistake_penalty", 12.8539661)),
        baseline_quality=float(scoring_data.get("baseline_quality", 7.5)),
        max_score=float(scoring_data.get("max_score", 1_000_000)),
    )

    ranking_data = data.get("ranking") or {}
    groups_data = ranking_data.get("age_groups") or defaults["ranking"]["age_groups"]
    ranking = RankingConfig(
        age_groups=[
            AgeGroup(
                name=g["name"],
                min_age=int(g.get("min_age", 0)),
                max_age=g.get("max_age"),
            )
            for g in groups_data
        ]
    )

    return AppConfig(catalog=catalog, scoring=scoring, ranking=ranking)


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data: dict[str, Any]

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        try:
            data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            logger.error("failed_to_load_app_config", error=str(e))
            data = _get_defaults()
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None

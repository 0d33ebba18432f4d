"""Progress views derived from a student's logs.

Responsibilities:
- Milestones over a completed-page set (badge is text or a graphic)
- Per-surah status and average quality
- Recitation score with mistake penalty
- Rank inside the student's age group

Every function here takes its inputs explicitly and returns new values.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Set
from dataclasses import dataclass
from datetime import date
from enum import Enum

import structlog

from hifz.config.app_config import AppConfig, load_app_config
from hifz.config.catalog import ReferenceCatalog
from hifz.core.addressing import AddressTranslator, VerseAddress, get_translator
from hifz.core.ranges import AchievementKind, AchievementRange
from hifz.core.student import StudentRecord

logger = structlog.get_logger(__name__)


# =============================================================================
# MILESTONES
# =============================================================================


@dataclass(frozen=True)
class TextBadge:
    """Badge drawn as a short label, e.g. "10"."""

    text: str


@dataclass(frozen=True)
class GraphicBadge:
    """Badge drawn from a named icon supplied by the presentation layer."""

    handle: str


Badge = TextBadge | GraphicBadge


@dataclass(frozen=True)
class Milestone:
    """A named goal reached once the completed-page set satisfies it."""

    id: str
    title: str
    description: str
    badge: Badge
    is_achieved: Callable[[Set[int]], bool]


def pages_covered(pages: Set[int], first: int, last: int) -> bool:
    """True if every page from first to last is in the set."""
    return all(page in pages for page in range(first, last + 1))


def _surah_covered(catalog: ReferenceCatalog, number: int) -> Callable[[Set[int]], bool]:
    record = catalog.get(number)

    def check(pages: Set[int]) -> bool:
        return record is not None and pages_covered(pages, record.start_page, record.end_page)

    return check


def build_milestones(catalog: ReferenceCatalog) -> list[Milestone]:
    """Milestones in the order they are usually reached."""
    return [
        Milestone(
            id="al-baqarah",
            title="Al-Baqarah",
            description="Completed Surah Al-Baqarah",
            badge=GraphicBadge("book-open"),
            is_achieved=_surah_covered(catalog, 2),
        ),
        Milestone(
            id="5-juz",
            title="5 Ajza",
            description="Completed 100 pages of the Quran",
            badge=TextBadge("5"),
            is_achieved=lambda pages: len(pages) >= 100,
        ),
        Milestone(
            id="10-juz",
            title="10 Ajza",
            description="Completed 200 pages of the Quran",
            badge=TextBadge("10"),
            is_achieved=lambda pages: len(pages) >= 200,
        ),
        Milestone(
            id="15-juz",
            title="Nisf Al-Quran",
            description="Completed Half of the Quran (300 pages)",
            badge=TextBadge("15"),
            is_achieved=lambda pages: len(pages) >= 300,
        ),
        Milestone(
            id="ya-seen",
            title="Qalb Al-Quran",
            description="Completed Surah Ya-Seen, the Heart of the Quran",
            badge=GraphicBadge("heart"),
            is_achieved=_surah_covered(catalog, 36),
        ),
        Milestone(
            id="khatm",
            title="Khatm Al-Quran",
            description="Completed the entire Quran",
            badge=GraphicBadge("khatm"),
            is_achieved=lambda pages: pages_covered(pages, 1, catalog.total_pages),
        ),
    ]


def achieved_milestones(pages: Set[int], milestones: list[Milestone]) -> list[Milestone]:
    """Milestones already reached, most recent first."""
    return [m for m in reversed(milestones) if m.is_achieved(pages)]


def next_milestone(pages: Set[int], milestones: list[Milestone]) -> Milestone | None:
    """First milestone not yet reached, or None when all are done."""
    for milestone in milestones:
        if not milestone.is_achieved(pages):
            return milestone
    return None


# =============================================================================
# PER-SURAH VIEWS
# =============================================================================


class SurahStatus(Enum):
    COMPLETED = "completed"
    IN_PROGRESS = "in_progress"
    NOT_STARTED = "not_started"


def surah_status(
    number: int, ranges: Iterable[AchievementRange], catalog: ReferenceCatalog
) -> SurahStatus:
    """Status of one surah given a log.

    A surah strictly inside a multi-surah range, or covered 1..last by a
    single-surah range, is completed. A surah at the edge of any other
    range is in progress.
    """
    status = SurahStatus.NOT_STARTED
    last_ayah = catalog.verse_count(number)

    for rng in ranges:
        if rng.start.surah < number < rng.end.surah:
            return SurahStatus.COMPLETED
        if number in (rng.start.surah, rng.end.surah):
            whole = (
                rng.start.surah == rng.end.surah == number
                and rng.start.ayah == 1
                and rng.end.ayah == last_ayah
            )
            if whole:
                return SurahStatus.COMPLETED
            status = SurahStatus.IN_PROGRESS
    return status


def surah_statuses(
    ranges: Iterable[AchievementRange], catalog: ReferenceCatalog
) -> dict[int, SurahStatus]:
    """Status of every surah in the catalog."""
    ranges = list(ranges)
    return {record.number: surah_status(record.number, ranges, catalog) for record in catalog}


def surah_quality_map(ranges: Iterable[AchievementRange]) -> dict[int, float]:
    """Mean logged quality for each surah a range touches."""
    totals: dict[int, list[float]] = {}
    for rng in ranges:
        for number in rng.surahs:
            entry = totals.setdefault(number, [0.0, 0])
            entry[0] += rng.quality
            entry[1] += 1
    return {number: total / count for number, (total, count) in totals.items()}


# =============================================================================
# SCORE AND RANKING
# =============================================================================


def recitation_score(
    student: StudentRecord,
    translator: AddressTranslator | None = None,
    config: AppConfig | None = None,
) -> float:
    """Score from recited pages, weighted by quality, minus mistakes.

    Only mistakes on pages the student has recited are penalized.
    """
    translator = translator or get_translator()
    scoring = (config or load_app_config()).scoring

    recited = student.recited_pages(translator)
    gross = len(recited) / translator.catalog.total_pages * scoring.max_score

    log = student.recitation_log
    if log:
        avg_quality = sum(r.average_quality for r in log) / len(log)
    else:
        avg_quality = scoring.baseline_quality

    counted_mistakes = sum(
        1
        for key in student.mistakes
        if translator.page_of(VerseAddress(key.surah, key.ayah)) in recited
    )

    score = gross * (avg_quality / scoring.baseline_quality)
    return max(0.0, score - counted_mistakes * scoring.mistake_penalty)


@dataclass(frozen=True)
class Ranking:
    """Where a student stands in their age group."""

    rank: int
    total_in_group: int
    pages_to_next: int | None = None
    next_student_name: str | None = None


def rank_in_age_group(
    student: StudentRecord,
    students: list[StudentRecord],
    kind: AchievementKind,
    today: date,
    translator: AddressTranslator | None = None,
    config: AppConfig | None = None,
) -> Ranking:
    """Rank by completed-page count among students of the same age group.

    A student outside every age group gets rank 0.
    """
    translator = translator or get_translator()
    ranking = (config or load_app_config()).ranking

    def group_of(s: StudentRecord) -> str | None:
        age = s.age_on(today)
        if age is None:
            return None
        group = ranking.group_for(age)
        return group.name if group else None

    group = group_of(student)
    if group is None:
        return Ranking(rank=0, total_in_group=0)

    peers = [s for s in students if group_of(s) == group]
    scored = sorted(
        ((s, len(s.pages_for(kind, translator))) for s in peers),
        key=lambda pair: pair[1],
        reverse=True,
    )

    position = next(
        (i for i, (s, _) in enumerate(scored) if s.student_id == student.student_id), None
    )
    if position is None:
        return Ranking(rank=0, total_in_group=len(peers))

    pages_to_next = None
    next_name = None
    if position > 0:
        own_score = scored[position][1]
        ahead, ahead_score = scored[position - 1]
        if ahead_score > own_score:
            pages_to_next = ahead_score - own_score
            next_name = ahead.first_name

    logger.debug(
        "ranking.computed", student_id=student.student_id, group=group, rank=position + 1
    )
    return Ranking(
        rank=position + 1,
        total_in_group=len(peers),
        pages_to_next=pages_to_next,
        next_student_name=next_name,
    )

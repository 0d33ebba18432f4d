"""Deciding how a newly logged range is filed.

A memorization range is a revision when every page it covers is
already in the student's memorized-page set; otherwise it is new
progress. The verdict is computed against the set as it was before
the range is added, so callers must classify first and insert second,
one insert at a time per student.
"""

from __future__ import annotations

from collections.abc import Set
from dataclasses import replace
from enum import Enum

import structlog

from hifz.core.addressing import AddressTranslator, VerseAddress, get_translator
from hifz.core.ranges import AchievementKind, AchievementRange, page_span
from hifz.core.student import RevisionEntry, StudentRecord

logger = structlog.get_logger(__name__)


class Verdict(Enum):
    """Where a new memorization range should be filed."""

    REVISION = "revision"
    NEW_PROGRESS = "new_progress"


def _updated(student: StudentRecord, **changes) -> StudentRecord:
    """New record with the given logs; the mistake store is copied, not shared."""
    return replace(student, mistakes=student.mistakes.copy(), **changes)


def classify_range(
    new_range: AchievementRange,
    existing_pages: Set[int],
    translator: AddressTranslator | None = None,
) -> Verdict:
    """Revision iff every page of the range is already completed.

    A range whose endpoints cannot be resolved to pages is new progress,
    so nothing is silently discarded.
    """
    span = page_span(new_range, translator or get_translator())
    if span is None:
        return Verdict.NEW_PROGRESS

    if all(page in existing_pages for page in span):
        return Verdict.REVISION
    return Verdict.NEW_PROGRESS


def record_memorization(
    student: StudentRecord,
    start: VerseAddress,
    end: VerseAddress,
    quality: int,
    logged_at: str = "",
    notes: str = "",
    translator: AddressTranslator | None = None,
) -> tuple[StudentRecord, Verdict]:
    """Classify a memorization range and file it.

    Revisions add one RevisionEntry per surah in the range; new progress
    is appended to the memorization log.

    Returns:
        (updated student record, verdict)
    """
    translator = translator or get_translator()
    candidate = AchievementRange(
        start=start,
        end=end,
        kind=AchievementKind.MEMORIZATION,
        quality=quality,
        notes=notes,
        logged_at=logged_at,
    )

    # Snapshot taken before the candidate joins the log.
    existing = student.memorized_pages(translator)
    verdict = classify_range(candidate, existing, translator)
    logger.info(
        "achievement.classified",
        student_id=student.student_id,
        start=start.key,
        end=end.key,
        verdict=verdict.value,
    )

    if verdict is Verdict.REVISION:
        entries = [
            RevisionEntry(surah=number, quality=quality, logged_at=candidate.logged_at)
            for number in candidate.surahs
        ]
        return _updated(student, revision_log=[*student.revision_log, *entries]), verdict

    return _updated(student, memorization_log=[*student.memorization_log, candidate]), verdict


def record_recitation(
    student: StudentRecord,
    start: VerseAddress,
    end: VerseAddress,
    quality: int,
    tajweed_quality: int | None = None,
    logged_at: str = "",
    notes: str = "",
) -> StudentRecord:
    """Append a recitation range. Recitation is never treated as revision."""
    rng = AchievementRange(
        start=start,
        end=end,
        kind=AchievementKind.RECITATION,
        quality=quality,
        tajweed_quality=tajweed_quality,
        notes=notes,
        logged_at=logged_at,
    )
    logger.debug("achievement.recitation_logged", student_id=student.student_id, range_id=rng.id)
    return _updated(student, recitation_log=[*student.recitation_log, rng])


def remove_range(student: StudentRecord, range_id: str) -> StudentRecord:
    """Drop a logged range from whichever log holds it."""
    return _updated(
        student,
        recitation_log=[r for r in student.recitation_log if r.id != range_id],
        memorization_log=[r for r in student.memorization_log if r.id != range_id],
    )


def replace_range(student: StudentRecord, updated: AchievementRange) -> StudentRecord:
    """Swap a logged range for an edited one with the same id.

    The edited range is not reclassified; editing keeps it in its log.
    """
    def swap(log: list[AchievementRange]) -> list[AchievementRange]:
        return [updated if r.id == updated.id else r for r in log]

    if updated.kind is AchievementKind.RECITATION:
        return _updated(student, recitation_log=swap(student.recitation_log))
    return _updated(student, memorization_log=swap(student.memorization_log))

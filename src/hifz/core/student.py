"""Student record: the logs and annotations the core computes over.

The record is a plain value. Helpers in hifz.core.achievements return
a new record instead of changing one in place; persistence belongs to
the caller.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from hifz.core.addressing import AddressTranslator, VerseAddress
from hifz.core.mistakes import MistakeStore
from hifz.core.ranges import AchievementKind, AchievementRange, union_pages
from hifz.utils.validators import parse_verse_key

STUDENT_SCHEMA = "student_v1"


@dataclass(frozen=True)
class RevisionEntry:
    """A memorization session that only went over already memorized pages."""

    surah: int
    quality: int
    logged_at: str
    id: str = ""

    def __post_init__(self):
        if not self.id:
            object.__setattr__(self, "id", f"rev-{uuid.uuid4().hex[:12]}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "surah": self.surah,
            "quality": self.quality,
            "logged_at": self.logged_at,
        }


@dataclass
class StudentRecord:
    """Everything logged for one student."""

    student_id: str
    name: str
    dob: str = ""  # ISO date, e.g. "2012-05-15"
    recitation_log: list[AchievementRange] = field(default_factory=list)
    memorization_log: list[AchievementRange] = field(default_factory=list)
    revision_log: list[RevisionEntry] = field(default_factory=list)
    mistakes: MistakeStore = field(default_factory=MistakeStore)
    created_at: str = ""

    def __post_init__(self):
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc).isoformat()

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0] if self.name else ""

    def log_for(self, kind: AchievementKind) -> list[AchievementRange]:
        if kind is AchievementKind.RECITATION:
            return self.recitation_log
        return self.memorization_log

    def pages_for(
        self, kind: AchievementKind, translator: AddressTranslator | None = None
    ) -> set[int]:
        """Completed-page set of one log, recomputed on every call."""
        return union_pages(self.log_for(kind), translator)

    def recited_pages(self, translator: AddressTranslator | None = None) -> set[int]:
        return self.pages_for(AchievementKind.RECITATION, translator)

    def memorized_pages(self, translator: AddressTranslator | None = None) -> set[int]:
        return self.pages_for(AchievementKind.MEMORIZATION, translator)

    def age_on(self, today: date) -> int | None:
        """Age in whole years on a given day, or None without a birth date."""
        if not self.dob:
            return None
        try:
            born = date.fromisoformat(self.dob[:10])
        except ValueError:
            return None
        age = today.year - born.year
        if (today.month, today.day) < (born.month, born.day):
            age -= 1
        return age

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "$schema": STUDENT_SCHEMA,
            "student_id": self.student_id,
            "name": self.name,
            "dob": self.dob,
            "created_at": self.created_at,
            "recitation_log": [r.to_dict() for r in self.recitation_log],
            "memorization_log": [r.to_dict() for r in self.memorization_log],
            "revision_log": [r.to_dict() for r in self.revision_log],
            "mistakes": self.mistakes.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StudentRecord:
        """Rebuild a record from to_dict() output."""
        return cls(
            student_id=data["student_id"],
            name=data.get("name", ""),
            dob=data.get("dob", ""),
            created_at=data.get("created_at", ""),
            recitation_log=[_range_from_dict(r) for r in data.get("recitation_log", [])],
            memorization_log=[_range_from_dict(r) for r in data.get("memorization_log", [])],
            revision_log=[
                RevisionEntry(
                    surah=int(r["surah"]),
                    quality=int(r["quality"]),
                    logged_at=r.get("logged_at", ""),
                    id=r.get("id", ""),
                )
                for r in data.get("revision_log", [])
            ],
            mistakes=MistakeStore.from_dict(data.get("mistakes", {})),
        )


def _range_from_dict(data: dict[str, Any]) -> AchievementRange:
    start = VerseAddress(*parse_verse_key(data["start"]))
    end = VerseAddress(*parse_verse_key(data["end"]))
    return AchievementRange(
        start=start,
        end=end,
        kind=AchievementKind(data["kind"]),
        quality=int(data["quality"]),
        tajweed_quality=data.get("tajweed_quality"),
        notes=data.get("notes", ""),
        logged_at=data.get("logged_at", ""),
        id=data.get("id", ""),
    )

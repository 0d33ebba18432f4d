"""Per-word mistake annotations.

Each word position (surah, ayah, word_index) carries a severity from 1
to 5. Tapping a word cycles 0 -> 1 -> ... -> 5 -> 0; reaching 0 deletes
the record, so severity 0 is never stored.

The store belongs to one student's record and is passed around
explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterator

import structlog

from hifz.utils.validators import parse_word_key

logger = structlog.get_logger(__name__)

MAX_SEVERITY = 5


def cycle(current: int) -> int:
    """Next severity after a tap. 0 means "delete the record".

    A stored severity is always 0..5, so anything else is corrupt state
    and raises ValueError instead of being wrapped into range.
    """
    if not 0 <= current <= MAX_SEVERITY:
        raise ValueError(f"Severity {current} outside 0..{MAX_SEVERITY}")
    return (current + 1) % (MAX_SEVERITY + 1)


@dataclass(frozen=True, order=True)
class MistakeKey:
    """A word position inside a verse."""

    surah: int
    ayah: int
    word_index: int

    @property
    def key(self) -> str:
        return f"{self.surah}:{self.ayah}:{self.word_index}"

    @classmethod
    def parse(cls, key: str) -> MistakeKey:
        surah, ayah, word_index = parse_word_key(key)
        return cls(surah, ayah, word_index)


@dataclass(frozen=True)
class MistakeRecord:
    """A stored mistake. Severity is always 1..5."""

    severity: int
    recorded_at: str

    def to_dict(self) -> dict[str, Any]:
        return {"severity": self.severity, "recorded_at": self.recorded_at}


class MistakeStore:
    """Keyed collection of mistake records for one student."""

    def __init__(self, records: dict[MistakeKey, MistakeRecord] | None = None):
        self._records: dict[MistakeKey, MistakeRecord] = dict(records or {})

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MistakeKey]:
        return iter(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def copy(self) -> MistakeStore:
        """Independent store with the same records."""
        return MistakeStore(self._records)

    def items(self):
        return self._records.items()

    def get(self, key: MistakeKey) -> MistakeRecord | None:
        return self._records.get(key)

    def severity(self, key: MistakeKey) -> int:
        """Current severity; 0 when no record exists."""
        record = self._records.get(key)
        return record.severity if record else 0

    def cycle_at(self, key: MistakeKey, now: str | None = None) -> int:
        """Advance the severity at a word and return the new value."""
        new_severity = cycle(self.severity(key))
        if new_severity == 0:
            self._records.pop(key, None)
            logger.debug("mistake.removed", key=key.key)
        else:
            self._records[key] = MistakeRecord(
                severity=new_severity,
                recorded_at=now or datetime.now(timezone.utc).isoformat(),
            )
        return new_severity

    def clear(self, key: MistakeKey) -> bool:
        """Remove the record whatever its severity. True if one existed."""
        return self._records.pop(key, None) is not None

    def for_verse(self, surah: int, ayah: int) -> dict[int, MistakeRecord]:
        """Records of one verse keyed by word index."""
        return {
            key.word_index: record
            for key, record in self._records.items()
            if key.surah == surah and key.ayah == ayah
        }

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Serialize with "surah:ayah:word" string keys."""
        return {key.key: record.to_dict() for key, record in sorted(self._records.items())}

    @classmethod
    def from_dict(cls, data: dict[str, dict[str, Any]]) -> MistakeStore:
        """Inverse of to_dict. Entries with severity 0 are dropped."""
        records = {}
        for raw_key, value in (data or {}).items():
            severity = int(value.get("severity", value.get("level", 0)))
            if severity <= 0:
                continue
            records[MistakeKey.parse(raw_key)] = MistakeRecord(
                severity=min(severity, MAX_SEVERITY),
                recorded_at=value.get("recorded_at", value.get("date", "")),
            )
        return cls(records)

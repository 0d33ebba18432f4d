"""Key parsing and lookup helpers.

Key conventions:
- verse key: "surah:ayah" (e.g. "2:255")
- word key: "surah:ayah:word_index" (e.g. "2:255:3"), word_index from 0

Functions:
- parse_verse_key(key) -> (surah, ayah)
- parse_word_key(key) -> (surah, ayah, word_index)
- resolve_surah(query, catalog) -> SurahRecord: number or name prefix
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hifz.config.catalog import ReferenceCatalog, SurahRecord

VERSE_KEY_PATTERN = re.compile(r"^\s*(\d+)\s*:\s*(\d+)\s*$")
WORD_KEY_PATTERN = re.compile(r"^\s*(\d+)\s*:\s*(\d+)\s*:\s*(\d+)\s*$")


class InvalidVerseKeyError(ValueError):
    """Raised when a key string does not match the expected form."""

    def __init__(self, key: str, expected: str):
        self.key = key
        self.expected = expected
        super().__init__(f"Invalid key '{key}' (expected {expected})")


class AmbiguousSurahError(Exception):
    """Raised when a surah name prefix matches several surahs."""

    def __init__(self, query: str, candidates: list[str]):
        self.query = query
        self.candidates = candidates
        super().__init__(
            f"Surah '{query}' is ambiguous. Candidates:\n"
            + "\n".join(f"  - {c}" for c in candidates)
        )


class SurahNotFoundError(Exception):
    """Raised when no surah matches the query."""

    def __init__(self, query: str):
        self.query = query
        super().__init__(f"No surah matches '{query}'")


def parse_verse_key(key: str) -> tuple[int, int]:
    """Parse "surah:ayah" into integers.

    Raises:
        InvalidVerseKeyError: If the key is not two colon-separated numbers.
    """
    match = VERSE_KEY_PATTERN.match(key or "")
    if not match:
        raise InvalidVerseKeyError(key, "surah:ayah")
    return int(match.group(1)), int(match.group(2))


def parse_word_key(key: str) -> tuple[int, int, int]:
    """Parse "surah:ayah:word_index" into integers.

    Raises:
        InvalidVerseKeyError: If the key is not three colon-separated numbers.
    """
    match = WORD_KEY_PATTERN.match(key or "")
    if not match:
        raise InvalidVerseKeyError(key, "surah:ayah:word")
    return int(match.group(1)), int(match.group(2)), int(match.group(3))


def _normalize_name(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "", name.lower())


def resolve_surah(query: str, catalog: ReferenceCatalog) -> SurahRecord:
    """Resolve a surah number or transliterated-name prefix.

    "2", "baqarah", "Al-Baq" and "al baqarah" all resolve to surah 2.
    The "al"/"an"/"at"... article may be omitted.

    Raises:
        SurahNotFoundError: If nothing matches
        AmbiguousSurahError: If the prefix matches several surahs
    """
    text = query.strip()
    if text.isdigit():
        record = catalog.get(int(text))
        if record is None:
            raise SurahNotFoundError(query)
        return record

    wanted = _normalize_name(text)
    if not wanted:
        raise SurahNotFoundError(query)

    exact = []
    matches = []
    for record in catalog:
        full = _normalize_name(record.transliterated_name)
        bare = _normalize_name(record.transliterated_name.split("-", 1)[-1])
        if wanted in (full, bare):
            exact.append(record)
        elif full.startswith(wanted) or bare.startswith(wanted):
            matches.append(record)

    if len(exact) == 1:
        return exact[0]
    candidates = exact or matches
    if len(candidates) == 0:
        raise SurahNotFoundError(query)
    if len(candidates) == 1:
        return candidates[0]
    raise AmbiguousSurahError(query, [c.transliterated_name for c in candidates])

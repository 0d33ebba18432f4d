"""Tajweed annotation of orthographic units.

Each unit of a word gets exactly one tag. Rules are tried in order and
the first match wins:

1. Madd      - the unit carries a maddah above.
2. Ghunnah   - doubled noon/meem; noon sakinah or tanween before an
               Idgham, Ikhfa or Iqlab letter; meem sakinah before ba/meem.
3. Qalqalah  - one of ق ط ب ج د with sukun, or as the last letter of the
               last word of a verse.
4. None.

The letter that follows a unit is taken from the next unit of the same
word, or from the next word when the unit ends its word. The next word
is always passed in explicitly; nothing here keeps state between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from hifz.core.orthography import (
    QURANIC_SUKUN,
    SUKUN,
    OrthographicUnit,
    first_base_letter,
    parse_word,
    prepare_verse_words,
)


class TajweedTag(Enum):
    """Rule highlighted on a unit."""

    NONE = "none"
    QALQALAH = "qalqalah"
    GHUNNAH = "ghunnah"
    MADD = "madd"


ALL_RULES = frozenset({TajweedTag.MADD, TajweedTag.GHUNNAH, TajweedTag.QALQALAH})

NOON = "ن"
MEEM = "م"
BA = "ب"
ALEF = "ا"

SHADDAH = "\u0651"
MADDAH = "\u0653"
TANWEEN_FATH = "\u064b"
TANWEEN_MARKS = frozenset({"\u064b", "\u064c", "\u064d"})
SUKUN_MARKS = frozenset({SUKUN, QURANIC_SUKUN})

QALQALAH_LETTERS = frozenset("قطبجد")
IDGHAM_LETTERS = frozenset("يرملون")
IKHFA_LETTERS = frozenset("صذثكجشقسدطزفتضظ")
IQLAB_LETTER = BA
NOON_SAKINAH_FOLLOWERS = IDGHAM_LETTERS | IKHFA_LETTERS | {IQLAB_LETTER}
MEEM_SAKINAH_FOLLOWERS = frozenset({BA, MEEM})


@dataclass(frozen=True)
class AnnotatedUnit:
    """A unit with the tag the classifier chose for it."""

    unit: OrthographicUnit
    tag: TajweedTag

    @property
    def text(self) -> str:
        return self.unit.text


def _has_sukun(unit: OrthographicUnit) -> bool:
    return any(mark in unit.trailing for mark in SUKUN_MARKS)


def _is_resting(unit: OrthographicUnit, letter: str) -> bool:
    """Letter with sukun, or bare (the Uthmani spelling of a hidden noon)."""
    return unit.base == letter and (not unit.trailing or _has_sukun(unit))


def _has_tanween(unit: OrthographicUnit) -> bool:
    return any(mark in unit.trailing for mark in TANWEEN_MARKS)


def _is_silent_alef_ending(word: list[OrthographicUnit], index: int) -> bool:
    """Tanween fatha written before a final bare alef, as in "كِتَٰبًا"."""
    if index != len(word) - 2 or TANWEEN_FATH not in word[index].trailing:
        return False
    after = word[index + 1]
    return after.base == ALEF and not after.trailing


def _following_letter(
    word: list[OrthographicUnit],
    index: int,
    next_word: list[OrthographicUnit],
    skip_silent_alef: bool = False,
) -> str | None:
    if index == len(word) - 1:
        return first_base_letter(next_word)
    if skip_silent_alef and _is_silent_alef_ending(word, index):
        return first_base_letter(next_word)
    return first_base_letter(word[index + 1])


def _is_last_letter(word: list[OrthographicUnit], index: int) -> bool:
    return not any(unit.has_letter for unit in word[index + 1 :])


def _ghunnah_applies(
    word: list[OrthographicUnit], index: int, next_word: list[OrthographicUnit]
) -> bool:
    unit = word[index]

    if unit.base in (NOON, MEEM) and SHADDAH in unit.trailing:
        return True

    if _is_resting(unit, NOON) or _has_tanween(unit):
        following = _following_letter(word, index, next_word, skip_silent_alef=True)
        if following in NOON_SAKINAH_FOLLOWERS:
            return True

    if _is_resting(unit, MEEM):
        following = _following_letter(word, index, next_word)
        if following in MEEM_SAKINAH_FOLLOWERS:
            return True

    return False


def _qalqalah_applies(word: list[OrthographicUnit], index: int, verse_final: bool) -> bool:
    unit = word[index]
    if unit.base not in QALQALAH_LETTERS:
        return False
    return _has_sukun(unit) or (verse_final and _is_last_letter(word, index))


def classify_unit(
    word: list[OrthographicUnit],
    index: int,
    next_word: list[OrthographicUnit],
    *,
    verse_final: bool | None = None,
    enabled: frozenset[TajweedTag] = ALL_RULES,
) -> TajweedTag:
    """Tag one unit of a parsed word.

    Args:
        word: Units of the word, from parse_word().
        index: Position of the unit to tag.
        next_word: Units of the following word; empty at the end of a verse.
        verse_final: Whether the word ends its verse. Defaults to
            ``not next_word``; pass it explicitly when next_word comes
            from the following verse.
        enabled: Rule families to apply. A disabled family never matches.

    Raises:
        IndexError: If index is outside the word.
    """
    if index < 0:
        raise IndexError(f"Unit index {index} outside the word")
    unit = word[index]
    if verse_final is None:
        verse_final = not next_word

    if TajweedTag.MADD in enabled and MADDAH in unit.trailing:
        return TajweedTag.MADD

    if TajweedTag.GHUNNAH in enabled and _ghunnah_applies(word, index, next_word):
        return TajweedTag.GHUNNAH

    if TajweedTag.QALQALAH in enabled and _qalqalah_applies(word, index, verse_final):
        return TajweedTag.QALQALAH

    return TajweedTag.NONE


def annotate_word(
    word: str,
    next_word: str = "",
    *,
    verse_final: bool | None = None,
    enabled: frozenset[TajweedTag] = ALL_RULES,
) -> list[AnnotatedUnit]:
    """Parse a word and tag every unit."""
    units = parse_word(word)
    following = parse_word(next_word)
    return [
        AnnotatedUnit(
            unit=unit,
            tag=classify_unit(units, i, following, verse_final=verse_final, enabled=enabled),
        )
        for i, unit in enumerate(units)
    ]


def annotate_verse(
    text: str,
    next_verse_text: str | None = None,
    *,
    enabled: frozenset[TajweedTag] = ALL_RULES,
) -> list[list[AnnotatedUnit]]:
    """Tag every unit of every word in a verse.

    The last word is verse-final for Qalqalah. When next_verse_text is
    given, its first word serves as the lookahead for the last word.
    """
    words = prepare_verse_words(text)
    next_verse_words = prepare_verse_words(next_verse_text) if next_verse_text else []

    annotated = []
    for i, word in enumerate(words):
        is_last = i == len(words) - 1
        if not is_last:
            following = words[i + 1]
        else:
            following = next_verse_words[0] if next_verse_words else ""
        annotated.append(
            annotate_word(word, following, verse_final=is_last, enabled=enabled)
        )
    return annotated

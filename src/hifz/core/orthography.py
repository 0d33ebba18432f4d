"""Splitting verse text into orthographic units.

A unit is one base letter followed by every mark attached to it
(harakat, sukun, shaddah, tanween, Quranic annotation signs) up to the
next base letter. Marks that come before the first letter of a word
form a leading unit with an empty base. Nothing here raises on odd
input: unknown characters are kept as trailing marks.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Arabic base letters: hamza (U+0621) through yeh (U+064A).
BASE_LETTER_FIRST = 0x0621
BASE_LETTER_LAST = 0x064A

SUKUN = "\u0652"
QURANIC_SUKUN = "\u06e1"


def is_base_letter(char: str | None) -> bool:
    """True for a single character in the Arabic base-letter block."""
    if not char:
        return False
    return BASE_LETTER_FIRST <= ord(char[0]) <= BASE_LETTER_LAST


@dataclass(frozen=True)
class OrthographicUnit:
    """A base letter and its trailing marks."""

    base: str
    trailing: str = ""

    @property
    def text(self) -> str:
        return self.base + self.trailing

    @property
    def has_letter(self) -> bool:
        return bool(self.base)

    def __str__(self) -> str:
        return self.text


def parse_word(word: str) -> list[OrthographicUnit]:
    """Split one word into units, in order."""
    units: list[OrthographicUnit] = []
    if not word:
        return units

    base = ""
    trailing: list[str] = []
    started = False

    for char in word:
        if is_base_letter(char):
            if started:
                units.append(OrthographicUnit(base, "".join(trailing)))
            base, trailing, started = char, [], True
        else:
            trailing.append(char)
            started = True

    if started:
        units.append(OrthographicUnit(base, "".join(trailing)))
    return units


def first_base_letter(text: str | OrthographicUnit | list[OrthographicUnit] | None) -> str | None:
    """First base letter of a string, a unit or a unit list, skipping marks."""
    if not text:
        return None
    if isinstance(text, OrthographicUnit):
        text = text.text
    elif isinstance(text, list):
        text = "".join(u.text for u in text)
    for char in text:
        if is_base_letter(char):
            return char
    return None


def prepare_verse_words(text: str) -> list[str]:
    """Normalize sukun to its Quranic form and split a verse into words."""
    normalized = (text or "").replace(SUKUN, QURANIC_SUKUN)
    return [w for w in re.split(r"\s+", normalized) if w]

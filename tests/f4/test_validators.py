"""Tests for key parsing and surah lookup (F4)."""

import pytest

from hifz.utils.validators import (
    AmbiguousSurahError,
    InvalidVerseKeyError,
    SurahNotFoundError,
    parse_verse_key,
    parse_word_key,
    resolve_surah,
)


class TestParseKeys:
    """Tests for verse and word keys."""

    def test_verse_key(self):
        assert parse_verse_key("2:255") == (2, 255)
        assert parse_verse_key(" 2 : 255 ") == (2, 255)

    def test_word_key(self):
        assert parse_word_key("2:255:0") == (2, 255, 0)

    @pytest.mark.parametrize("bad", ["", "2", "2:", "a:b", "2:255:1", "-1:3"])
    def test_invalid_verse_keys(self, bad):
        with pytest.raises(InvalidVerseKeyError) as exc_info:
            parse_verse_key(bad)
        assert "surah:ayah" in str(exc_info.value)

    def test_invalid_word_key(self):
        with pytest.raises(InvalidVerseKeyError):
            parse_word_key("2:255")


class TestResolveSurah:
    """Tests for resolve_surah."""

    def test_by_number(self, catalog):
        assert resolve_surah("2", catalog).number == 2
        assert resolve_surah(" 114 ", catalog).number == 114

    def test_by_name(self, catalog):
        assert resolve_surah("baqarah", catalog).number == 2
        assert resolve_surah("Al-Baq", catalog).number == 2
        assert resolve_surah("al baqarah", catalog).number == 2
        assert resolve_surah("fatihah", catalog).number == 1

    def test_exact_match_beats_prefix(self, catalog):
        """"nas" is An-Nas even though An-Nasr starts the same way."""
        assert resolve_surah("nas", catalog).number == 114

    def test_ambiguous_prefix(self, catalog):
        with pytest.raises(AmbiguousSurahError) as exc_info:
            resolve_surah("an-n", catalog)
        assert "An-Nisa" in exc_info.value.candidates

    @pytest.mark.parametrize("query", ["zzz", "115", "0", "--"])
    def test_not_found(self, catalog, query):
        with pytest.raises(SurahNotFoundError):
            resolve_surah(query, catalog)

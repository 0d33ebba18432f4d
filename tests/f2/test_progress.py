"""Tests for milestones, surah views, score and ranking (F2)."""

from datetime import date

import pytest

from hifz.core.achievements import record_memorization, record_recitation
from hifz.core.addressing import VerseAddress
from hifz.core.mistakes import MistakeKey
from hifz.core.progress import (
    GraphicBadge,
    SurahStatus,
    TextBadge,
    achieved_milestones,
    build_milestones,
    next_milestone,
    rank_in_age_group,
    recitation_score,
    surah_quality_map,
    surah_status,
    surah_statuses,
)
from hifz.core.ranges import AchievementKind
from hifz.core.student import StudentRecord

TODAY = date(2026, 1, 1)


class TestMilestones:
    """Tests for milestone evaluation."""

    def test_order_and_badges(self, catalog):
        milestones = build_milestones(catalog)
        assert [m.id for m in milestones] == [
            "al-baqarah",
            "5-juz",
            "10-juz",
            "15-juz",
            "ya-seen",
            "khatm",
        ]
        assert milestones[1].badge == TextBadge("5")
        assert isinstance(milestones[0].badge, GraphicBadge)

    def test_ya_seen_pages(self, catalog):
        milestones = build_milestones(catalog)
        achieved = achieved_milestones(set(range(440, 446)), milestones)
        assert [m.id for m in achieved] == ["ya-seen"]

    def test_page_count_milestones(self, catalog):
        milestones = build_milestones(catalog)
        achieved = achieved_milestones(set(range(100, 200)), milestones)
        assert [m.id for m in achieved] == ["5-juz"]

    def test_most_recent_first(self, catalog):
        milestones = build_milestones(catalog)
        achieved = achieved_milestones(set(range(1, 301)), milestones)
        assert [m.id for m in achieved] == ["15-juz", "10-juz", "5-juz", "al-baqarah"]

    def test_khatm(self, catalog):
        milestones = build_milestones(catalog)
        assert len(achieved_milestones(set(range(1, 605)), milestones)) == 6
        assert next_milestone(set(range(1, 605)), milestones) is None

    def test_next_milestone(self, catalog):
        milestones = build_milestones(catalog)
        assert next_milestone(set(), milestones).id == "al-baqarah"
        assert next_milestone(set(range(2, 50)), milestones).id == "5-juz"


class TestSurahViews:
    """Tests for per-surah status and quality."""

    def test_whole_surah_completed(self, make_range, catalog):
        assert surah_status(1, [make_range("1:1", "1:7")], catalog) is SurahStatus.COMPLETED

    def test_partial_surah_in_progress(self, make_range, catalog):
        assert surah_status(2, [make_range("2:1", "2:100")], catalog) is SurahStatus.IN_PROGRESS

    def test_interior_of_multi_surah_range(self, make_range, catalog):
        ranges = [make_range("2:200", "4:10")]
        assert surah_status(3, ranges, catalog) is SurahStatus.COMPLETED
        assert surah_status(2, ranges, catalog) is SurahStatus.IN_PROGRESS
        assert surah_status(4, ranges, catalog) is SurahStatus.IN_PROGRESS
        assert surah_status(5, ranges, catalog) is SurahStatus.NOT_STARTED

    def test_completed_wins_over_partial(self, make_range, catalog):
        ranges = [make_range("1:1", "1:3"), make_range("1:1", "1:7")]
        assert surah_status(1, ranges, catalog) is SurahStatus.COMPLETED

    def test_statuses_cover_catalog(self, make_range, catalog):
        statuses = surah_statuses([make_range("1:1", "1:7")], catalog)
        assert len(statuses) == 114
        assert statuses[1] is SurahStatus.COMPLETED
        assert statuses[114] is SurahStatus.NOT_STARTED

    def test_quality_map(self, make_range):
        ranges = [
            make_range("1:1", "2:5", quality=10),
            make_range("2:6", "2:10", quality=6),
        ]
        assert surah_quality_map(ranges) == {1: 10.0, 2: 8.0}


class TestRecitationScore:
    """Tests for the recitation score."""

    def _reciter(self):
        student = StudentRecord(student_id="s1", name="Maryam")
        return record_recitation(
            student, VerseAddress(1, 1), VerseAddress(1, 7), quality=10, tajweed_quality=5
        )

    def test_empty_student_scores_zero(self):
        assert recitation_score(StudentRecord(student_id="s1", name="Maryam")) == 0.0

    def test_one_page_at_baseline_quality(self):
        assert recitation_score(self._reciter()) == pytest.approx(1_000_000 / 604)

    def test_mistake_on_recited_page_is_penalized(self):
        student = self._reciter()
        student.mistakes.cycle_at(MistakeKey(1, 2, 0))
        assert recitation_score(student) == pytest.approx(1_000_000 / 604 - 12.8539661)

    def test_mistake_elsewhere_is_ignored(self):
        student = self._reciter()
        student.mistakes.cycle_at(MistakeKey(2, 5, 0))
        assert recitation_score(student) == pytest.approx(1_000_000 / 604)

    def test_higher_quality_scales_up(self):
        student = record_recitation(
            StudentRecord(student_id="s1", name="Maryam"),
            VerseAddress(1, 1),
            VerseAddress(1, 7),
            quality=10,
        )
        assert recitation_score(student) == pytest.approx(1_000_000 / 604 * 10 / 7.5)


class TestRanking:
    """Tests for age-group ranking."""

    def _memorizer(self, student_id, name, dob, end):
        student = StudentRecord(student_id=student_id, name=name, dob=dob)
        student, _ = record_memorization(student, VerseAddress(2, 1), end, quality=8)
        return student

    def test_rank_inside_young_group(self):
        ahead = self._memorizer("a", "Yusuf Ali", "2012-05-15", VerseAddress(2, 286))
        behind = self._memorizer("b", "Huda Khan", "2014-01-20", VerseAddress(2, 5))
        adult = self._memorizer("c", "Omar", "1985-03-02", VerseAddress(3, 200))
        students = [behind, adult, ahead]

        ranking = rank_in_age_group(behind, students, AchievementKind.MEMORIZATION, TODAY)
        assert ranking.rank == 2
        assert ranking.total_in_group == 2
        assert ranking.pages_to_next == 47
        assert ranking.next_student_name == "Yusuf"

        top = rank_in_age_group(ahead, students, AchievementKind.MEMORIZATION, TODAY)
        assert (top.rank, top.pages_to_next, top.next_student_name) == (1, None, None)

    def test_devoted_group_alone(self):
        adult = self._memorizer("c", "Omar", "1985-03-02", VerseAddress(3, 200))
        ranking = rank_in_age_group(adult, [adult], AchievementKind.MEMORIZATION, TODAY)
        assert (ranking.rank, ranking.total_in_group) == (1, 1)

    def test_no_birth_date_is_unranked(self):
        student = StudentRecord(student_id="x", name="Zaid")
        ranking = rank_in_age_group(student, [student], AchievementKind.MEMORIZATION, TODAY)
        assert ranking.rank == 0

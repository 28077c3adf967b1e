# timetable_engine/tests/unit/test_substitution.py

"""
Tests for absences, substitute ranking and automatic assignment.

The school week runs Sunday to Thursday; 19 October 2026 is a Monday.
"""

import pytest
from datetime import date, time

from timetable_engine.core.problem_model import ScheduledLesson, Weekday
from timetable_engine.substitution import (
    Absence,
    AbsenceStatus,
    SubstituteRanker,
    Substitution,
    week_start,
)

MONDAY = Weekday.MONDAY
TODAY = date(2026, 10, 19)
LAST_WEEK = date(2026, 10, 12)


def _at(lesson, period_id, day=MONDAY):
    return ScheduledLesson(lesson=lesson, day=day, period_id=period_id)


def _covered_by(teacher_id, placement, on=TODAY):
    return Substitution(
        absence=Absence(teacher_id=99, date=on),
        scheduled_lesson=placement,
        substitute_teacher_id=teacher_id,
    )


@pytest.fixture
def math_lesson(make_lesson, teachers, classes, subjects):
    return make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])


@pytest.fixture
def english_lesson(make_lesson, teachers, classes, subjects):
    return make_lesson(2, teachers["jones"], classes["7b"], subjects["english"])


@pytest.fixture
def reserve_lesson(make_lesson, teachers, classes, subjects):
    return make_lesson(3, teachers["intern"], classes["reserve"], subjects["reserve"])


@pytest.fixture
def make_ranker(make_problem):
    def _make(schedule, substitutions=(), lessons=()):
        return SubstituteRanker(
            make_problem(lessons),
            schedule,
            substitutions=substitutions,
            reference_date=TODAY,
        )

    return _make


class TestAbsence:
    """Tests for the Absence model"""

    @pytest.mark.parametrize(
        "day,expected",
        [
            (date(2026, 10, 18), Weekday.SUNDAY),
            (date(2026, 10, 19), Weekday.MONDAY),
            (date(2026, 10, 22), Weekday.THURSDAY),
            (date(2026, 10, 24), Weekday.SATURDAY),
        ],
    )
    def test_weekday(self, day, expected):
        """Test calendar dates map onto the Sunday based week"""
        assert Absence(teacher_id=1, date=day).weekday == expected

    def test_total_hours(self):
        """Test partial absences span their window and full days count 7 hours"""
        partial = Absence(teacher_id=1, date=TODAY, start_time=time(8, 30), end_time=time(10, 0))

        assert partial.is_partial
        assert partial.total_hours == 1.5
        assert Absence(teacher_id=1, date=TODAY).total_hours == 7.0

    def test_same_absence(self):
        """Test identity by object or stored id"""
        first = Absence(teacher_id=1, date=TODAY, id=4)

        assert first.is_same_absence(first)
        assert first.is_same_absence(Absence(teacher_id=2, date=LAST_WEEK, id=4))
        assert not Absence(teacher_id=1, date=TODAY).is_same_absence(
            Absence(teacher_id=1, date=TODAY)
        )


class TestWeekStart:
    """Tests for week_start"""

    @pytest.mark.parametrize(
        "day", [date(2026, 10, 18), date(2026, 10, 19), date(2026, 10, 24)]
    )
    def test_sunday_on_or_before(self, day):
        """Test every day of the week maps to its Sunday"""
        assert week_start(day) == date(2026, 10, 18)


class TestRanking:
    """Tests for SubstituteRanker.rank_substitutes"""

    def test_scores_and_order(self, make_ranker, math_lesson):
        """Test qualification, department and workload points"""
        placement = _at(math_lesson, 1)
        ranker = make_ranker([placement])

        ranked = ranker.rank_substitutes(1, placement)

        assert [(c.teacher.id, c.score) for c in ranked] == [(2, 220), (3, 120), (4, 70)]
        jones = ranked[0]
        assert jones.is_qualified
        assert jones.is_same_department
        assert jones.reasons == (
            "Qualified to teach Mathematics",
            "Same department as J. Smith",
            "Low workload (0 substitutions this week)",
            "Available at this time",
        )
        assert ranked[1].reasons[0] == "Has informal qualifications: Studied mathematics"

    def test_absent_teacher_is_never_offered(self, make_ranker, math_lesson):
        """Test the absent teacher is left out"""
        placement = _at(math_lesson, 1)

        ranked = make_ranker([placement]).rank_substitutes(1, placement)

        assert 1 not in [c.teacher.id for c in ranked]

    def test_co_teacher_ranks_first(self, make_ranker, make_lesson, teachers, classes, subjects):
        """Test a co-teacher is offered despite teaching at the slot"""
        teachers["brown"].available_for_substitution = False
        joint = make_lesson(1, [teachers["smith"], teachers["brown"]], classes["7a"], subjects["math"])
        placement = _at(joint, 1)

        ranked = make_ranker([placement]).rank_substitutes(1, placement)

        assert ranked[0].teacher.id == 3
        assert ranked[0].is_co_teacher
        assert ranked[0].score == 250 + 50 + 40 + 30
        assert ranked[0].reasons[0] == "Co-teacher already teaching this lesson"

    def test_busy_teachers_are_excluded(self, make_ranker, math_lesson, english_lesson):
        """Test teachers with a regular lesson at the slot are skipped"""
        placement = _at(math_lesson, 1)
        ranker = make_ranker([placement, _at(english_lesson, 1)])

        ranked = ranker.rank_substitutes(1, placement)

        assert [c.teacher.id for c in ranked] == [3, 4]
        assert ranker.is_busy(2, MONDAY, 1)
        assert not ranker.is_busy(2, MONDAY, 2)

    def test_reserve_duty_bonus(self, make_ranker, math_lesson, reserve_lesson):
        """Test a teacher on reserve duty at the slot gains 200 points"""
        placement = _at(math_lesson, 1)
        ranker = make_ranker([placement, _at(reserve_lesson, 1)])

        ranked = ranker.rank_substitutes(1, placement)

        assert not ranker.is_busy(4, MONDAY, 1)
        assert ranker.is_on_reserve(4, MONDAY, 1)
        assert (ranked[0].teacher.id, ranked[0].score) == (4, 270)
        assert ranked[0].is_on_reserve

    def test_reserve_teacher_already_covering(self, make_ranker, math_lesson, reserve_lesson):
        """Test a reserve teacher covering the slot elsewhere is not offered again"""
        placement = _at(math_lesson, 1)
        other = _at(reserve_lesson, 1)
        ranker = make_ranker([placement, other], substitutions=[_covered_by(4, other)])

        ranked = ranker.rank_substitutes(1, placement)

        assert ranker.is_substituting_at(4, MONDAY, 1)
        assert 4 not in [c.teacher.id for c in ranked]

    def test_weekly_limit(self, make_ranker, teachers, math_lesson, english_lesson):
        """Test teachers at their weekly limit are skipped and older weeks do not count"""
        teachers["jones"].max_substitutions_per_week = 1
        placement = _at(math_lesson, 1)
        english = _at(english_lesson, 5)

        this_week = make_ranker([placement], substitutions=[_covered_by(2, english)])
        older = make_ranker([placement], substitutions=[_covered_by(2, english, LAST_WEEK)])

        assert this_week.substitutions_this_week(2) == 1
        assert 2 not in [c.teacher.id for c in this_week.rank_substitutes(1, placement)]
        assert older.substitutions_this_week(2) == 0
        assert older.rank_substitutes(1, placement)[0].teacher.id == 2

    def test_moderate_workload(self, make_ranker, teachers, math_lesson, english_lesson):
        """Test the workload bonus falls with each substitution this week"""
        teachers["brown"].max_substitutions_per_week = 10
        placement = _at(math_lesson, 1)
        english = _at(english_lesson, 5)
        ranker = make_ranker([placement], substitutions=[_covered_by(3, english)] * 6)

        brown = next(c for c in ranker.rank_substitutes(1, placement) if c.teacher.id == 3)

        assert brown.score == 50 + 16 + 30
        assert "Moderate workload (6 substitutions this week)" in brown.reasons
        assert brown.substitutions_this_week == 6

    def test_subject_experience(self, make_ranker, math_lesson):
        """Test earlier substitutions in the subject add capped points"""
        placement = _at(math_lesson, 1)
        earlier = _at(math_lesson, 4, day=Weekday.TUESDAY)
        ranker = make_ranker(
            [placement], substitutions=[_covered_by(2, earlier, LAST_WEEK)] * 2
        )

        jones = ranker.rank_substitutes(1, placement)[0]

        assert jones.score == 230
        assert jones.reasons[-1] == "Previously substituted 2x in this subject"
        assert ranker.previous_substitutions_in_subject(2, None) == 0

    def test_month_statistics(self, make_ranker, math_lesson, english_lesson):
        """Test monthly counts and hours start on the first of the month"""
        placement = _at(math_lesson, 1)
        english = _at(english_lesson, 5)
        history = [
            Substitution(Absence(99, on), english, 3, hours_worked=0.75)
            for on in (date(2026, 9, 30), LAST_WEEK, TODAY)
        ]
        ranker = make_ranker([placement], substitutions=history)

        brown = next(c for c in ranker.rank_substitutes(1, placement) if c.teacher.id == 3)

        assert brown.substitutions_this_week == 1
        assert brown.substitutions_this_month == 2
        assert brown.hours_this_month == 1.5
        assert brown.to_dict()["hours_this_month"] == 1.5
        assert ranker.hours_this_month(2) == 0.0

    def test_candidate_to_dict(self, make_ranker, math_lesson):
        """Test candidates serialize with the teacher name"""
        placement = _at(math_lesson, 1)

        data = make_ranker([placement]).rank_substitutes(1, placement)[0].to_dict()

        assert data["teacher_name"] == "A. Jones"
        assert data["score"] == 220
        assert data["is_qualified"]


class TestWorkflow:
    """Tests for affected lessons and assignment"""

    @pytest.fixture
    def day_of_math(self, math_lesson):
        return [
            _at(math_lesson, 1),
            _at(math_lesson, 2),
            _at(math_lesson, 3),
            _at(math_lesson, 1, day=Weekday.TUESDAY),
        ]

    def test_affected_lessons_full_day(self, make_ranker, day_of_math):
        """Test every lesson of the teacher on the absence weekday"""
        ranker = make_ranker(day_of_math)

        affected = ranker.affected_lessons(Absence(teacher_id=1, date=TODAY))

        assert [sl.period_id for sl in affected] == [1, 2, 3]
        assert ranker.affected_lessons(Absence(teacher_id=2, date=TODAY)) == []

    def test_affected_lessons_partial_day(self, make_ranker, day_of_math):
        """Test only periods overlapping the time window"""
        absence = Absence(teacher_id=1, date=TODAY, start_time=time(8, 30), end_time=time(9, 30))

        affected = make_ranker(day_of_math).affected_lessons(absence)

        assert [sl.period_id for sl in affected] == [1, 2]

    def test_find_available_substitutes(self, make_ranker, teachers, english_lesson):
        """Test free volunteers below their weekly limit"""
        teachers["intern"].available_for_substitution = False
        ranker = make_ranker([_at(english_lesson, 1)])

        available = ranker.find_available_substitutes(MONDAY, 1)

        assert [t.id for t in available] == [1, 3]

    def test_assign_updates_status(self, make_ranker, day_of_math):
        """Test the absence status follows its coverage"""
        ranker = make_ranker(day_of_math)
        absence = Absence(teacher_id=1, date=TODAY)
        assert ranker.absence_status(absence) == AbsenceStatus.REPORTED

        substitution = ranker.assign(absence, day_of_math[0], 2, notes="manual")

        assert substitution.hours_worked == 0.75
        assert absence.status == AbsenceStatus.PARTIALLY_COVERED
        assert ranker.substitutions_for(absence) == [substitution]
        ranker.assign(absence, day_of_math[1], 3)
        ranker.assign(absence, day_of_math[2], 4)
        assert absence.status == AbsenceStatus.COVERED

    def test_auto_assign_best(self, make_ranker, day_of_math):
        """Test the top candidate is assigned with the score in the notes"""
        ranker = make_ranker(day_of_math)
        absence = Absence(teacher_id=1, date=TODAY)

        substitution = ranker.auto_assign_best(absence, day_of_math[0])

        assert substitution.substitute_teacher_id == 2
        assert substitution.notes == "Auto-assigned (match score: 220)"

    def test_auto_assign_best_below_minimum(self, make_ranker, day_of_math):
        """Test nothing is assigned when the best score is too low"""
        ranker = make_ranker(day_of_math)
        absence = Absence(teacher_id=1, date=TODAY)

        assert ranker.auto_assign_best(absence, day_of_math[0], minimum_score=500) is None
        assert ranker.substitutions == []

    def test_auto_assign_all(self, make_ranker, day_of_math):
        """Test every uncovered lesson is attempted once"""
        ranker = make_ranker(day_of_math)
        absence = Absence(teacher_id=1, date=TODAY)

        assert ranker.auto_assign_all(absence) == (3, 0)
        assert absence.status == AbsenceStatus.COVERED
        # Covered lessons are not assigned twice
        assert ranker.auto_assign_all(absence) == (0, 0)

    def test_auto_assign_all_failures(self, make_ranker, day_of_math):
        """Test lessons without a good enough candidate are counted as failed"""
        ranker = make_ranker(day_of_math)
        absence = Absence(teacher_id=1, date=TODAY)

        assert ranker.auto_assign_all(absence, minimum_score=500) == (0, 3)
        assert absence.status == AbsenceStatus.REPORTED

    def test_substitution_to_dict(self, day_of_math):
        """Test a substitution serializes its absence and placement"""
        absence = Absence(teacher_id=1, date=TODAY, id=12)
        substitution = Substitution(absence, day_of_math[0], 2)

        data = substitution.to_dict()

        assert data["absence_id"] == 12
        assert data["teacher_id"] == 1
        assert data["date"] == "2026-10-19"
        assert data["substitute_teacher_id"] == 2
        assert data["scheduled_lesson"] == day_of_math[0].to_dict()

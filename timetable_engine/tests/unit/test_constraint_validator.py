# timetable_engine/tests/unit/test_constraint_validator.py

"""
Tests for the ConstraintValidator facade: rule selection, result shapes and
whole-timetable validation.
"""

import pytest
from unittest.mock import patch

from timetable_engine.core.problem_model import (
    Availability,
    ScheduledLesson,
    SchoolClass,
    Weekday,
)
from timetable_engine.core.validation import ConflictSeverity, ValidationContext

MONDAY = Weekday.MONDAY


def _at(lesson, period_id, day=MONDAY, **kwargs):
    return ScheduledLesson(lesson=lesson, day=day, period_id=period_id, **kwargs)


class TestDoubleBookingScenarios:
    """Tests for the double booking and exemption scenarios"""

    def test_third_lesson_for_same_teacher(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test exactly one HC-1 violation naming the teacher"""
        class_8a = SchoolClass(id=5, name="8A")
        smith = teachers["smith"]
        first = make_lesson(1, smith, classes["7a"], subjects["math"])
        second = make_lesson(2, smith, classes["7b"], subjects["english"])
        third = make_lesson(3, smith, class_8a, subjects["art"])
        validator = make_validator(
            make_problem([first, second, third], classes=[*classes.values(), class_8a])
        )

        result = validator.validate_hard(_at(third, 2), [_at(first, 2), _at(second, 2)])

        assert not result.is_valid
        assert result.error_codes() == ["HC-1"]
        assert "J. Smith" in result.error_messages()[0]

    def test_intern_lessons_share_a_slot(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test two 'xy' lessons in one slot are not a conflict"""
        first = make_lesson(1, teachers["intern"], classes["7a"], subjects["math"])
        second = make_lesson(2, teachers["intern"], classes["7b"], subjects["english"])
        validator = make_validator(make_problem([first, second]))

        result = validator.validate_hard(_at(second, 2), [_at(first, 2)])

        assert "HC-1" not in result.error_codes()
        assert result.is_valid


class TestValidationContext:
    """Tests for rule filters and early exit"""

    @pytest.fixture
    def clash(self, make_problem, make_validator, make_lesson, teachers, classes, subjects):
        """A candidate that double books teacher, class and room"""
        first = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        second = make_lesson(2, teachers["smith"], classes["7a"], subjects["english"])
        validator = make_validator(make_problem([first, second]))
        return validator, _at(second, 2, room_id=1), [_at(first, 2, room_id=1)]

    def test_all_hard_rules_reported(self, clash):
        """Test each violated rule appears once, in catalog order"""
        validator, candidate, existing = clash

        result = validator.validate_hard(candidate, existing)

        assert result.error_codes() == ["HC-1", "HC-2", "HC-3"]

    def test_early_exit(self, clash):
        """Test early exit stops at the first hard violation"""
        validator, candidate, existing = clash

        result = validator.validate_hard(
            candidate, existing, ValidationContext(early_exit=True)
        )

        assert result.error_codes() == ["HC-1"]

    def test_codes_to_check(self, clash):
        """Test the allow-list wins over the skip-list"""
        validator, candidate, existing = clash
        context = ValidationContext(codes_to_check={"hc-3"}, codes_to_skip={"HC-3"})

        result = validator.validate_hard(candidate, existing, context)

        assert result.error_codes() == ["HC-3"]

    def test_codes_to_skip(self, clash):
        """Test skipped codes are not evaluated"""
        validator, candidate, existing = clash

        result = validator.validate_hard(
            candidate, existing, ValidationContext(codes_to_skip={"HC-1", "HC-2"})
        )

        assert result.error_codes() == ["HC-3"]

    def test_include_soft_false(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test soft rules can be switched off"""
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        problem = make_problem(
            [lesson], teacher_availabilities=[Availability(1, MONDAY, 2, -2)]
        )
        validator = make_validator(problem)

        assert validator.validate_soft(_at(lesson, 2), []).warning_codes() == ["SC-1"]
        result = validator.validate_all(
            _at(lesson, 2), [], ValidationContext(include_soft=False)
        )
        assert not result.has_warnings

    def test_soft_rules_skipped_after_early_hard_exit(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test early exit with errors skips the soft rules"""
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        other = make_lesson(2, teachers["smith"], classes["7b"], subjects["english"])
        problem = make_problem(
            [lesson, other], teacher_availabilities=[Availability(1, MONDAY, 2, -2)]
        )
        validator = make_validator(problem)

        early = validator.validate_all(
            _at(lesson, 2), [_at(other, 2)], ValidationContext(early_exit=True)
        )
        full = validator.validate_all(_at(lesson, 2), [_at(other, 2)])

        assert early.has_errors and not early.has_warnings
        assert full.error_codes() == ["HC-1"]
        assert full.warning_codes() == ["SC-1"]
        assert not full.is_valid


class TestValidatorProperties:
    """Tests for properties that hold across the validator API"""

    def test_can_schedule_at_agrees_with_validate_hard(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test the yes/no gate never disagrees with the full hard check"""
        teachers["smith"].max_periods_per_day = 3
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        other = make_lesson(2, teachers["jones"], classes["7b"], subjects["english"])
        problem = make_problem(
            [lesson, other],
            teacher_availabilities=[Availability(1, MONDAY, 4, -3)],
            room_availabilities=[Availability(2, MONDAY, 5, -3)],
        )
        validator = make_validator(problem)
        existing = [
            _at(other, 1, room_id=1),
            _at(lesson, 2),
            _at(lesson, 3),
            _at(lesson, 6, day=Weekday.TUESDAY),
        ]

        for day in (MONDAY, Weekday.TUESDAY):
            for period_id in range(1, 9):
                for room_id in (None, 1, 2):
                    candidate = _at(lesson, period_id, day=day, room_id=room_id)
                    expected = validator.validate_hard(candidate, existing).is_valid
                    assert (
                        validator.can_schedule_at(1, day, period_id, room_id, existing)
                        == expected
                    )

    def test_can_schedule_at_unknown_lesson(self, make_problem, make_validator):
        """Test an unknown lesson id cannot be scheduled"""
        validator = make_validator(make_problem())

        assert not validator.can_schedule_at(99, MONDAY, 1, None, [])

    def test_validation_is_idempotent(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test repeated validation of one snapshot gives the same violations"""
        classes["7a"].min_periods_per_day = 3
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        other = make_lesson(2, teachers["smith"], classes["7b"], subjects["english"])
        validator = make_validator(make_problem([lesson, other]))
        candidate = _at(lesson, 4, room_id=1)
        existing = [_at(other, 4, room_id=1), _at(lesson, 1)]

        first = validator.validate_all(candidate, existing)
        second = validator.validate_all(candidate, existing)

        assert first.hard_violations == second.hard_violations
        assert first.soft_violations == second.soft_violations
        assert first.error_codes() == ["HC-1", "HC-3"]
        assert first.warning_codes() == ["SC-7", "SC-11"]

    def test_unknown_code_is_satisfied(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test stale rule codes do not fail the caller"""
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        validator = make_validator(make_problem([lesson]))

        result = validator.validate_one("XX-1", _at(lesson, 1), [])

        assert result.satisfied
        assert result.message == "Unknown constraint code: XX-1"

    def test_missing_related_data_is_not_a_violation(
        self, make_problem, make_validator, make_lesson
    ):
        """Test lessons without teachers, classes or subjects validate cleanly"""
        empty = make_lesson(1)
        validator = make_validator(make_problem([empty]))

        result = validator.validate_all(_at(empty, 2, room_id=42), [_at(empty, 2)])

        assert result.is_valid
        assert not result.has_warnings

    def test_default_policy_comes_from_registry(self, make_problem, registry):
        """Test the validator shares the registry's exemption policy"""
        from timetable_engine.constraints.constraint_validator import ConstraintValidator

        validator = ConstraintValidator(make_problem(), registry)

        assert validator.policy is registry.policy
        assert validator.lunch_periods == (4, 5, 6)


class TestTimetableValidation:
    """Tests for validate_timetable"""

    @pytest.fixture
    def validator(self, make_problem, make_validator, make_lesson, teachers, classes, subjects):
        math = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        english = make_lesson(2, teachers["smith"], classes["7b"], subjects["english"])
        art = make_lesson(3, teachers["jones"], classes["team"], subjects["art"])
        problem = make_problem(
            [math, english, art],
            subject_availabilities=[Availability(3, Weekday.TUESDAY, 1, -1)],
            scheduled_lessons=[
                _at(math, 2, id=1, timetable_id=1),
                _at(english, 2, id=2, timetable_id=1),
                _at(art, 1, day=Weekday.TUESDAY, id=3, timetable_id=1),
                _at(math, 2, id=4, timetable_id=2),
            ],
        )
        return make_validator(problem)

    def test_conflicts_per_lesson(self, validator):
        """Test errors and warnings are reported per placement"""
        result = validator.validate_timetable(1)

        assert result.total_lessons == 3
        assert not result.is_valid
        assert result.lessons_with_errors == 2
        assert result.lessons_with_warnings == 1

        by_id = {c.scheduled_lesson_id: c for c in result.conflicts}
        assert by_id[1].severity == ConflictSeverity.ERROR
        assert by_id[1].constraint_codes == ["HC-1"]
        assert by_id[3].severity == ConflictSeverity.WARNING
        assert by_id[3].constraint_codes == ["SC-3"]

    def test_message_summaries(self, validator):
        """Test the flattened message lists"""
        result = validator.validate_timetable(1)

        assert len(result.all_error_messages()) == 2
        assert result.all_warning_messages() == [
            "Subject Art mildly prefers NOT to be scheduled at this time"
        ]
        assert result.to_dict()["lessons_with_errors"] == 2

    def test_other_timetable_is_clean(self, validator):
        """Test placements of other timetables are not compared"""
        result = validator.validate_timetable(2)

        assert result.is_valid
        assert result.total_lessons == 1
        assert result.conflicts == []

    def test_violations_are_logged(self, validator):
        """Test the error conflicts reach the structured logger"""
        with patch(
            "timetable_engine.constraints.constraint_validator.get_scheduling_logger"
        ) as get_logger:
            validator.validate_timetable(1)

        logged = get_logger.return_value.log_constraint_violations.call_args[0][0]
        assert len(logged) == 2
        assert all(entry["severity"] == "error" for entry in logged)

# timetable_engine/tests/unit/test_hard_constraints.py

"""
Tests for the hard constraint rules HC-1 to HC-12, each evaluated on its own
through ConstraintValidator.validate_one.
"""

import pytest

from timetable_engine.core.problem_model import Availability, ScheduledLesson, Weekday

MONDAY = Weekday.MONDAY


def _at(lesson, period_id, day=MONDAY, **kwargs):
    return ScheduledLesson(lesson=lesson, day=day, period_id=period_id, **kwargs)


class TestDoubleBooking:
    """Tests for HC-1, HC-2 and HC-3"""

    def test_teacher_double_booking(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test a teacher cannot teach two lessons in one slot"""
        first = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        second = make_lesson(2, teachers["smith"], classes["7b"], subjects["english"])
        validator = make_validator(make_problem([first, second]))

        result = validator.validate_one("HC-1", _at(second, 2), [_at(first, 2, id=10)])

        assert not result.satisfied
        assert result.message == (
            "Teacher J. Smith is already teaching 7A (Mathematics) at this time"
        )
        assert result.details == {"teacher_id": 1, "conflicting_lesson_id": 10}

    def test_teacher_free_in_other_period(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test different periods or days do not conflict"""
        first = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        second = make_lesson(2, teachers["smith"], classes["7b"], subjects["english"])
        validator = make_validator(make_problem([first, second]))

        assert validator.validate_one("HC-1", _at(second, 3), [_at(first, 2)]).satisfied
        assert validator.validate_one(
            "HC-1", _at(second, 2, day=Weekday.TUESDAY), [_at(first, 2)]
        ).satisfied

    def test_co_teacher_is_checked(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test every teacher of a co-taught lesson is checked"""
        taught = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        co_taught = make_lesson(
            2, [teachers["jones"], teachers["smith"]], classes["7b"], subjects["english"]
        )
        validator = make_validator(make_problem([taught, co_taught]))

        result = validator.validate_one("HC-1", _at(co_taught, 2), [_at(taught, 2)])

        assert not result.satisfied
        assert "J. Smith" in result.message

    def test_intern_teacher_is_exempt(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test the intern placeholder may appear in several slots at once"""
        first = make_lesson(1, teachers["intern"], classes["7a"], subjects["math"])
        second = make_lesson(2, teachers["intern"], classes["7b"], subjects["art"])
        validator = make_validator(make_problem([first, second]))

        assert validator.validate_one("HC-1", _at(second, 2), [_at(first, 2)]).satisfied

    def test_candidate_itself_is_ignored(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test a placement does not conflict with its own stored copy"""
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        placement = _at(lesson, 2, id=5)
        validator = make_validator(make_problem([lesson]))

        assert validator.validate_one("HC-1", placement, [placement]).satisfied

    def test_class_double_booking(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test a class cannot attend two lessons in one slot"""
        first = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        second = make_lesson(2, teachers["jones"], classes["7a"], subjects["english"])
        validator = make_validator(make_problem([first, second]))

        result = validator.validate_one("HC-2", _at(second, 2), [_at(first, 2)])

        assert not result.satisfied
        assert result.message == (
            "Class 7A is already scheduled for Mathematics (J. Smith) at this time"
        )
        assert result.details["class_id"] == 1

    @pytest.mark.parametrize("class_key", ["reserve", "team"])
    def test_special_classes_are_exempt(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects, class_key
    ):
        """Test reserve and team classes may overlap"""
        first = make_lesson(1, teachers["smith"], classes[class_key], subjects["reserve"])
        second = make_lesson(2, teachers["jones"], classes[class_key], subjects["reserve"])
        validator = make_validator(make_problem([first, second]))

        assert validator.validate_one("HC-2", _at(second, 2), [_at(first, 2)]).satisfied

    def test_room_double_booking(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test a room cannot host two lessons in one slot"""
        first = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        second = make_lesson(2, teachers["jones"], classes["7b"], subjects["english"])
        validator = make_validator(make_problem([first, second]))

        result = validator.validate_one(
            "HC-3", _at(second, 2, room_id=1), [_at(first, 2, room_id=1)]
        )

        assert not result.satisfied
        assert result.message == "Room 101 is already occupied by 7A (Mathematics)"

    def test_additional_rooms_are_checked(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test additional rooms on either side count as occupied"""
        first = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        second = make_lesson(2, teachers["jones"], classes["7b"], subjects["english"])
        validator = make_validator(make_problem([first, second]))

        existing = [_at(first, 2, room_id=3, additional_room_ids=(1,))]
        result = validator.validate_one("HC-3", _at(second, 2, room_id=1), existing)
        assert not result.satisfied

        candidate = _at(second, 2, room_id=2, additional_room_ids=(3,))
        result = validator.validate_one("HC-3", candidate, existing)
        assert not result.satisfied
        assert result.details["room_id"] == 3

    def test_team_room_and_no_room(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test the team room is shared and placements without room never clash"""
        first = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        second = make_lesson(2, teachers["jones"], classes["7b"], subjects["english"])
        validator = make_validator(make_problem([first, second]))

        assert validator.validate_one(
            "HC-3", _at(second, 2, room_id=4), [_at(first, 2, room_id=4)]
        ).satisfied
        assert validator.validate_one("HC-3", _at(second, 2), [_at(first, 2)]).satisfied


class TestAbsoluteUnavailability:
    """Tests for HC-4 to HC-7"""

    def test_teacher_unavailable(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test importance -3 blocks the teacher and names the reason"""
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        problem = make_problem(
            [lesson],
            teacher_availabilities=[
                Availability(1, MONDAY, 2, -3, reason="Conference", id=77)
            ],
        )
        result = make_validator(problem).validate_one("HC-4", _at(lesson, 2), [])

        assert not result.satisfied
        assert result.message == (
            "Teacher J. Smith is unavailable at this time (Reason: Conference)"
        )
        assert result.details == {"teacher_id": 1, "availability_id": 77}

    def test_missing_reason(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test a blocked slot without reason reports 'Not specified'"""
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        problem = make_problem(
            [lesson], teacher_availabilities=[Availability(1, MONDAY, 2, -3)]
        )
        result = make_validator(problem).validate_one("HC-4", _at(lesson, 2), [])

        assert result.message.endswith("(Reason: Not specified)")

    @pytest.mark.parametrize("importance", [-2, -1, 0, 2, 3])
    def test_softer_marks_do_not_block(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects, importance
    ):
        """Test only -3 makes a hard violation"""
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        problem = make_problem(
            [lesson], teacher_availabilities=[Availability(1, MONDAY, 2, importance)]
        )

        assert make_validator(problem).validate_one("HC-4", _at(lesson, 2), []).satisfied

    def test_intern_ignores_unavailability(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test the intern placeholder is never unavailable"""
        lesson = make_lesson(1, teachers["intern"], classes["7a"], subjects["math"])
        problem = make_problem(
            [lesson], teacher_availabilities=[Availability(4, MONDAY, 2, -3)]
        )

        assert make_validator(problem).validate_one("HC-4", _at(lesson, 2), []).satisfied

    def test_class_unavailable(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test a blocked class slot"""
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        problem = make_problem(
            [lesson], class_availabilities=[Availability(1, MONDAY, 2, -3)]
        )
        result = make_validator(problem).validate_one("HC-5", _at(lesson, 2), [])

        assert result.message == (
            "Class 7A is unavailable at this time (e.g., assembly, standardized testing)"
        )

    def test_room_unavailable(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test a blocked room slot, only when that room is used"""
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        problem = make_problem(
            [lesson], room_availabilities=[Availability(1, MONDAY, 2, -3)]
        )
        validator = make_validator(problem)

        result = validator.validate_one("HC-6", _at(lesson, 2, room_id=1), [])
        assert result.message == (
            "Room 101 is unavailable at this time (e.g., maintenance, lockdown)"
        )
        assert validator.validate_one("HC-6", _at(lesson, 2, room_id=2), []).satisfied

    def test_any_subject_can_block(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test every subject of a multi-subject lesson is checked"""
        lesson = make_lesson(
            1, teachers["smith"], classes["7a"], [subjects["math"], subjects["art"]]
        )
        problem = make_problem(
            [lesson], subject_availabilities=[Availability(3, MONDAY, 2, -3)]
        )
        result = make_validator(problem).validate_one("HC-7", _at(lesson, 2), [])

        assert result.message == "Subject Art should not be scheduled at this time"
        assert result.details["subject_id"] == 3


class TestConsecutivePeriods:
    """Tests for HC-8 and HC-9"""

    def test_teacher_max_consecutive(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test a third adjacent period exceeds a limit of two"""
        teachers["smith"].max_consecutive_periods = 2
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"], frequency_per_week=4)
        validator = make_validator(make_problem([lesson]))
        existing = [_at(lesson, 1), _at(lesson, 2)]

        result = validator.validate_one("HC-8", _at(lesson, 3), existing)
        assert not result.satisfied
        assert result.message == "Teacher J. Smith exceeds max consecutive periods (2)"
        assert result.details["consecutive_count"] == 3

        assert validator.validate_one("HC-8", _at(lesson, 4), existing).satisfied

    def test_teacher_without_limit(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test no limit means no violation"""
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        validator = make_validator(make_problem([lesson]))
        existing = [_at(lesson, p) for p in (1, 2, 3, 4)]

        assert validator.validate_one("HC-8", _at(lesson, 5), existing).satisfied

    def test_class_max_consecutive_same_subject(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test the limit counts only periods of the same subject"""
        classes["7a"].max_consecutive_subjects = 1
        math = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        english = make_lesson(2, teachers["jones"], classes["7a"], subjects["english"])
        validator = make_validator(make_problem([math, english]))

        result = validator.validate_one("HC-9", _at(math, 2), [_at(math, 1)])
        assert not result.satisfied
        assert result.message == (
            "Class 7A exceeds max consecutive periods of Mathematics (1)"
        )

        assert validator.validate_one("HC-9", _at(english, 2), [_at(math, 1)]).satisfied


class TestLockedLesson:
    """Tests for HC-10 during validation"""

    def test_locked_rule_never_fires_in_validation(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test HC-10 is enforced at the edit boundary, not here"""
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        validator = make_validator(make_problem([lesson]))

        assert validator.validate_one("HC-10", _at(lesson, 2, is_locked=True), []).satisfied


class TestDailyLimits:
    """Tests for HC-11 and HC-12"""

    def test_teacher_max_periods(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test same-day placements plus the candidate are counted"""
        teachers["smith"].max_periods_per_day = 2
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        validator = make_validator(make_problem([lesson]))
        existing = [_at(lesson, 1), _at(lesson, 5), _at(lesson, 1, day=Weekday.TUESDAY)]

        result = validator.validate_one("HC-11", _at(lesson, 7), existing)

        assert not result.satisfied
        assert result.message == "Teacher J. Smith exceeds maximum periods per day (2)"
        assert result.details["current_periods"] == 3
        assert result.details["max_allowed"] == 2

    def test_teacher_under_limit(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test other days do not count towards the limit"""
        teachers["smith"].max_periods_per_day = 2
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        validator = make_validator(make_problem([lesson]))
        existing = [_at(lesson, 1), _at(lesson, 1, day=Weekday.TUESDAY)]

        assert validator.validate_one("HC-11", _at(lesson, 7), existing).satisfied

    def test_class_max_periods(
        self, make_problem, make_validator, make_lesson, teachers, classes, subjects
    ):
        """Test the class limit and the reserve class exemption"""
        classes["7a"].max_periods_per_day = 1
        classes["reserve"].max_periods_per_day = 1
        lesson = make_lesson(1, teachers["smith"], classes["7a"], subjects["math"])
        reserve = make_lesson(2, teachers["jones"], classes["reserve"], subjects["reserve"])
        validator = make_validator(make_problem([lesson, reserve]))

        result = validator.validate_one("HC-12", _at(lesson, 3), [_at(lesson, 1)])
        assert result.message == "Class 7A exceeds maximum periods per day (1)"

        assert validator.validate_one("HC-12", _at(reserve, 3), [_at(reserve, 1)]).satisfied

# timetable_engine/constraints/soft_constraints/__init__.py

"""
Soft constraint rules. Violations are warnings and only lower a slot's score.
"""

from .availability_preference import (
    check_teacher_preference,
    check_class_preference,
    check_subject_preference,
    check_room_preference,
)
from .lunch_break import check_teacher_lunch_break, check_class_lunch_break
from .schedule_gaps import check_class_schedule_gaps
from .room_preference import check_room_type_mismatch, check_subject_preferred_room
from .daily_minimums import check_teacher_min_periods, check_class_min_periods

SOFT_RULE_CHECKS = {
    "SC-1": check_teacher_preference,
    "SC-2": check_class_preference,
    "SC-3": check_subject_preference,
    "SC-4": check_room_preference,
    "SC-5": check_teacher_lunch_break,
    "SC-6": check_class_lunch_break,
    "SC-7": check_class_schedule_gaps,
    "SC-8": check_room_type_mismatch,
    "SC-9": check_subject_preferred_room,
    "SC-10": check_teacher_min_periods,
    "SC-11": check_class_min_periods,
}

__all__ = [
    "SOFT_RULE_CHECKS",
    "check_teacher_preference",
    "check_class_preference",
    "check_subject_preference",
    "check_room_preference",
    "check_teacher_lunch_break",
    "check_class_lunch_break",
    "check_class_schedule_gaps",
    "check_room_type_mismatch",
    "check_subject_preferred_room",
    "check_teacher_min_periods",
    "check_class_min_periods",
]

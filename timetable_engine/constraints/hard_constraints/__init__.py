# timetable_engine/constraints/hard_constraints/__init__.py

"""
Hard constraint rules. A placement that violates any of these is infeasible.
"""

from .double_booking import (
    check_teacher_double_booking,
    check_class_double_booking,
    check_room_double_booking,
)
from .availability import (
    check_teacher_unavailability,
    check_class_unavailability,
    check_room_unavailability,
    check_subject_unavailability,
)
from .consecutive_periods import (
    check_teacher_max_consecutive,
    check_class_max_consecutive_subject,
)
from .locked_lesson import check_locked_lesson
from .daily_limits import check_teacher_max_periods, check_class_max_periods

HARD_RULE_CHECKS = {
    "HC-1": check_teacher_double_booking,
    "HC-2": check_class_double_booking,
    "HC-3": check_room_double_booking,
    "HC-4": check_teacher_unavailability,
    "HC-5": check_class_unavailability,
    "HC-6": check_room_unavailability,
    "HC-7": check_subject_unavailability,
    "HC-8": check_teacher_max_consecutive,
    "HC-9": check_class_max_consecutive_subject,
    "HC-10": check_locked_lesson,
    "HC-11": check_teacher_max_periods,
    "HC-12": check_class_max_periods,
}

__all__ = [
    "HARD_RULE_CHECKS",
    "check_teacher_double_booking",
    "check_class_double_booking",
    "check_room_double_booking",
    "check_teacher_unavailability",
    "check_class_unavailability",
    "check_room_unavailability",
    "check_subject_unavailability",
    "check_teacher_max_consecutive",
    "check_class_max_consecutive_subject",
    "check_locked_lesson",
    "check_teacher_max_periods",
    "check_class_max_periods",
]

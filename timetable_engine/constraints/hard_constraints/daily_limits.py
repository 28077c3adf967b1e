# timetable_engine/constraints/hard_constraints/daily_limits.py

"""
HC-11 and HC-12: maximum periods per day for teachers and classes.

The count is the entity's other placements that day plus the candidate.
"""

from ...core.constraint_types import ConstraintResult
from ..base_constraint import RuleContext, satisfied


def check_teacher_max_periods(ctx: RuleContext) -> ConstraintResult:
    code = "HC-11"
    for teacher in ctx.lesson.teachers:
        if ctx.policy.is_intern_teacher(teacher):
            continue
        if teacher.max_periods_per_day is None:
            continue

        count = len(ctx.same_day(lambda sl: sl.lesson.has_teacher(teacher.id))) + 1
        if count > teacher.max_periods_per_day:
            return ConstraintResult.violated(
                code,
                ctx.message(code, teacher.full_name, teacher.max_periods_per_day),
                teacher_id=teacher.id,
                current_periods=count,
                max_allowed=teacher.max_periods_per_day,
            )
    return satisfied(code)


def check_class_max_periods(ctx: RuleContext) -> ConstraintResult:
    code = "HC-12"
    for school_class in ctx.lesson.classes:
        if ctx.policy.is_special_class(school_class):
            continue
        if school_class.max_periods_per_day is None:
            continue

        count = len(ctx.same_day(lambda sl: sl.lesson.has_class(school_class.id))) + 1
        if count > school_class.max_periods_per_day:
            return ConstraintResult.violated(
                code,
                ctx.message(code, school_class.name, school_class.max_periods_per_day),
                class_id=school_class.id,
                current_periods=count,
                max_allowed=school_class.max_periods_per_day,
            )
    return satisfied(code)

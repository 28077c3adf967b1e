# timetable_engine/constraints/soft_constraints/daily_minimums.py

"""
SC-10 and SC-11: minimum periods per day for teachers and classes.
"""

from ...core.constraint_types import ConstraintResult
from ..base_constraint import RuleContext, satisfied


def check_teacher_min_periods(ctx: RuleContext) -> ConstraintResult:
    code = "SC-10"
    for teacher in ctx.lesson.teachers:
        if ctx.policy.is_intern_teacher(teacher):
            continue
        if teacher.min_periods_per_day is None:
            continue

        count = len(ctx.same_day(lambda sl: sl.lesson.has_teacher(teacher.id))) + 1
        if count < teacher.min_periods_per_day:
            return ConstraintResult.violated(
                code,
                ctx.message(code, teacher.full_name, teacher.min_periods_per_day),
                teacher_id=teacher.id,
                current_periods=count,
                min_required=teacher.min_periods_per_day,
            )
    return satisfied(code)


def check_class_min_periods(ctx: RuleContext) -> ConstraintResult:
    code = "SC-11"
    for school_class in ctx.lesson.classes:
        if ctx.policy.is_special_class(school_class):
            continue
        if school_class.min_periods_per_day is None:
            continue

        count = len(ctx.same_day(lambda sl: sl.lesson.has_class(school_class.id))) + 1
        if count < school_class.min_periods_per_day:
            return ConstraintResult.violated(
                code,
                ctx.message(code, school_class.name, school_class.min_periods_per_day),
                class_id=school_class.id,
                current_periods=count,
                min_required=school_class.min_periods_per_day,
            )
    return satisfied(code)

# timetable_engine/constraints/soft_constraints/lunch_break.py

"""
SC-5 and SC-6: keep a lunch break free.

Only fires when the candidate falls inside the lunch window, the entity asks
for a lunch break, and the entity already teaches or attends inside the
window that day.
"""

from ...core.constraint_types import ConstraintResult
from ..base_constraint import RuleContext, satisfied


def _busy_at_lunch(ctx: RuleContext, involves) -> bool:
    return any(
        sl.period_id in ctx.lunch_periods and involves(sl) for sl in ctx.same_day()
    )


def check_teacher_lunch_break(ctx: RuleContext) -> ConstraintResult:
    code = "SC-5"
    if ctx.candidate.period_id not in ctx.lunch_periods:
        return satisfied(code)

    for teacher in ctx.lesson.teachers:
        if ctx.policy.is_intern_teacher(teacher):
            continue
        if not teacher.min_lunch_break or teacher.min_lunch_break <= 0:
            continue

        if _busy_at_lunch(ctx, lambda sl: sl.lesson.has_teacher(teacher.id)):
            return ConstraintResult.violated(
                code,
                ctx.message(code, teacher.full_name),
                teacher_id=teacher.id,
                min_lunch_break=teacher.min_lunch_break,
            )
    return satisfied(code)


def check_class_lunch_break(ctx: RuleContext) -> ConstraintResult:
    code = "SC-6"
    if ctx.candidate.period_id not in ctx.lunch_periods:
        return satisfied(code)

    for school_class in ctx.lesson.classes:
        if ctx.policy.is_special_class(school_class):
            continue
        if not school_class.min_lunch_break or school_class.min_lunch_break <= 0:
            continue

        if _busy_at_lunch(ctx, lambda sl: sl.lesson.has_class(school_class.id)):
            return ConstraintResult.violated(
                code,
                ctx.message(code, school_class.name),
                class_id=school_class.id,
                min_lunch_break=school_class.min_lunch_break,
            )
    return satisfied(code)

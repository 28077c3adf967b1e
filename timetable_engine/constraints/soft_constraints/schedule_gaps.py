# timetable_engine/constraints/soft_constraints/schedule_gaps.py

"""
SC-7: a class should not have free periods between lessons on the same day.
"""

from ...core.constraint_types import ConstraintResult
from ..base_constraint import RuleContext, satisfied


def check_class_schedule_gaps(ctx: RuleContext) -> ConstraintResult:
    code = "SC-7"
    for school_class in ctx.lesson.classes:
        period_ids = ctx.day_periods_with(lambda sl: sl.lesson.has_class(school_class.id))
        if len(period_ids) <= 1:
            continue

        present = set(period_ids)
        gap = next(
            (p for p in range(period_ids[0] + 1, period_ids[-1]) if p not in present),
            None,
        )
        if gap is not None:
            return ConstraintResult.violated(
                code,
                ctx.message(code, school_class.name),
                class_id=school_class.id,
                gap_period=gap,
            )
    return satisfied(code)

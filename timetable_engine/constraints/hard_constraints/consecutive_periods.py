# timetable_engine/constraints/hard_constraints/consecutive_periods.py

"""
HC-8 and HC-9: runs of consecutive period ids on one day.

Period ids are assumed to follow timetable order, so ``id + 1`` is the next
period of the day.
"""

from ...core.constraint_types import ConstraintResult
from ..base_constraint import UNKNOWN, RuleContext, first_run_exceeding, satisfied


def check_teacher_max_consecutive(ctx: RuleContext) -> ConstraintResult:
    code = "HC-8"
    for teacher in ctx.lesson.teachers:
        if ctx.policy.is_intern_teacher(teacher):
            continue
        if teacher.max_consecutive_periods is None:
            continue

        period_ids = ctx.day_periods_with(lambda sl: sl.lesson.has_teacher(teacher.id))
        run = first_run_exceeding(period_ids, teacher.max_consecutive_periods)
        if run is not None:
            return ConstraintResult.violated(
                code,
                ctx.message(code, teacher.full_name, teacher.max_consecutive_periods),
                teacher_id=teacher.id,
                consecutive_count=run,
            )
    return satisfied(code)


def check_class_max_consecutive_subject(ctx: RuleContext) -> ConstraintResult:
    """Checked per (subject, class) pair of the candidate lesson."""
    code = "HC-9"
    for subject in ctx.lesson.subjects:
        for school_class in ctx.lesson.classes:
            if ctx.policy.is_special_class(school_class):
                continue
            maximum = school_class.max_consecutive_subjects
            if maximum is None:
                continue

            period_ids = ctx.day_periods_with(
                lambda sl: sl.lesson.has_subject(subject.id)
                and sl.lesson.has_class(school_class.id)
            )
            run = first_run_exceeding(period_ids, maximum)
            if run is not None:
                return ConstraintResult.violated(
                    code,
                    ctx.message(code, school_class.name, subject.name or UNKNOWN, maximum),
                    class_id=school_class.id,
                    subject_id=subject.id,
                    consecutive_count=run,
                )
    return satisfied(code)

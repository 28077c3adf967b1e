# timetable_engine/constraints/hard_constraints/availability.py

"""
HC-4 to HC-7: absolute unavailability (importance -3) of the teacher, class,
room or any subject of the lesson at the candidate's (day, period).
"""

from ...core.constraint_types import ConstraintResult, ImportanceScale
from ..base_constraint import RuleContext, satisfied


def _blocked(ctx: RuleContext, table, entity_id: int):
    record = ctx.lookup(table, entity_id)
    if record is not None and ImportanceScale.is_hard_unavailable(record.importance):
        return record
    return None


def check_teacher_unavailability(ctx: RuleContext) -> ConstraintResult:
    code = "HC-4"
    for teacher in ctx.lesson.teachers:
        if ctx.policy.is_intern_teacher(teacher):
            continue

        record = _blocked(ctx, ctx.problem.teacher_availability, teacher.id)
        if record is not None:
            return ConstraintResult.violated(
                code,
                ctx.message(code, teacher.full_name, record.reason or "Not specified"),
                teacher_id=teacher.id,
                availability_id=record.id,
            )
    return satisfied(code)


def check_class_unavailability(ctx: RuleContext) -> ConstraintResult:
    code = "HC-5"
    for school_class in ctx.lesson.classes:
        if ctx.policy.is_special_class(school_class):
            continue

        record = _blocked(ctx, ctx.problem.class_availability, school_class.id)
        if record is not None:
            return ConstraintResult.violated(
                code,
                ctx.message(code, school_class.name),
                class_id=school_class.id,
                availability_id=record.id,
            )
    return satisfied(code)


def check_room_unavailability(ctx: RuleContext) -> ConstraintResult:
    code = "HC-6"
    for room_id in ctx.candidate.all_room_ids():
        record = _blocked(ctx, ctx.problem.room_availability, room_id)
        if record is not None:
            return ConstraintResult.violated(
                code,
                ctx.message(code, ctx.room_number(room_id)),
                room_id=room_id,
                availability_id=record.id,
            )
    return satisfied(code)


def check_subject_unavailability(ctx: RuleContext) -> ConstraintResult:
    """Every subject of a multi-subject lesson is checked."""
    code = "HC-7"
    for subject in ctx.lesson.subjects:
        record = _blocked(ctx, ctx.problem.subject_availability, subject.id)
        if record is not None:
            return ConstraintResult.violated(
                code,
                ctx.message(code, subject.name),
                subject_id=subject.id,
                availability_id=record.id,
            )
    return satisfied(code)

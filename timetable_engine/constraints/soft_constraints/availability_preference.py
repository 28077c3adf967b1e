# timetable_engine/constraints/soft_constraints/availability_preference.py

"""
SC-1 to SC-4: soft unavailability (importance -2 or -1) of the teacher,
class, subject or room at the candidate's (day, period).
"""

from ...core.constraint_types import ConstraintResult, ImportanceScale
from ..base_constraint import RuleContext, satisfied


def _discouraged(ctx: RuleContext, table, entity_id: int):
    record = ctx.lookup(table, entity_id)
    if record is not None and ImportanceScale.is_soft_unavailable(record.importance):
        return record
    return None


def check_teacher_preference(ctx: RuleContext) -> ConstraintResult:
    code = "SC-1"
    for teacher in ctx.lesson.teachers:
        if ctx.policy.is_intern_teacher(teacher):
            continue

        record = _discouraged(ctx, ctx.problem.teacher_availability, teacher.id)
        if record is not None:
            return ConstraintResult.violated(
                code,
                ctx.message(
                    code, teacher.full_name, ImportanceScale.describe(record.importance)
                ),
                teacher_id=teacher.id,
                importance=record.importance,
            )
    return satisfied(code)


def check_class_preference(ctx: RuleContext) -> ConstraintResult:
    code = "SC-2"
    for school_class in ctx.lesson.classes:
        if ctx.policy.is_special_class(school_class):
            continue

        record = _discouraged(ctx, ctx.problem.class_availability, school_class.id)
        if record is not None:
            return ConstraintResult.violated(
                code,
                ctx.message(
                    code, school_class.name, ImportanceScale.describe(record.importance)
                ),
                class_id=school_class.id,
                importance=record.importance,
            )
    return satisfied(code)


def check_subject_preference(ctx: RuleContext) -> ConstraintResult:
    code = "SC-3"
    for subject in ctx.lesson.subjects:
        record = _discouraged(ctx, ctx.problem.subject_availability, subject.id)
        if record is not None:
            return ConstraintResult.violated(
                code,
                ctx.message(code, subject.name, ImportanceScale.describe(record.importance)),
                subject_id=subject.id,
                importance=record.importance,
            )
    return satisfied(code)


def check_room_preference(ctx: RuleContext) -> ConstraintResult:
    code = "SC-4"
    for room_id in ctx.candidate.all_room_ids():
        record = _discouraged(ctx, ctx.problem.room_availability, room_id)
        if record is not None:
            return ConstraintResult.violated(
                code,
                ctx.message(
                    code, ctx.room_number(room_id), ImportanceScale.describe(record.importance)
                ),
                room_id=room_id,
                importance=record.importance,
            )
    return satisfied(code)

# timetable_engine/constraints/hard_constraints/double_booking.py

"""
HC-1, HC-2, HC-3: no teacher, class or room is booked twice at the same
(day, period). Exempt sentinels (intern teacher, reserve and team classes,
team rooms) may overlap freely.
"""

from ...core.constraint_types import ConstraintResult
from ..base_constraint import RuleContext, conflict_names, satisfied


def check_teacher_double_booking(ctx: RuleContext) -> ConstraintResult:
    code = "HC-1"
    at_slot = ctx.same_slot()

    for teacher in ctx.lesson.teachers:
        if ctx.policy.is_intern_teacher(teacher):
            continue

        conflict = next((sl for sl in at_slot if sl.lesson.has_teacher(teacher.id)), None)
        if conflict is not None:
            class_name, subject, _ = conflict_names(conflict)
            return ConstraintResult.violated(
                code,
                ctx.message(code, teacher.full_name, class_name, subject),
                teacher_id=teacher.id,
                conflicting_lesson_id=conflict.id,
            )

    return satisfied(code)


def check_class_double_booking(ctx: RuleContext) -> ConstraintResult:
    code = "HC-2"
    at_slot = ctx.same_slot()

    for school_class in ctx.lesson.classes:
        if ctx.policy.is_special_class(school_class):
            continue

        conflict = next(
            (sl for sl in at_slot if sl.lesson.has_class(school_class.id)), None
        )
        if conflict is not None:
            _, subject, teacher = conflict_names(conflict)
            return ConstraintResult.violated(
                code,
                ctx.message(code, school_class.name, subject, teacher),
                class_id=school_class.id,
                conflicting_lesson_id=conflict.id,
            )

    return satisfied(code)


def check_room_double_booking(ctx: RuleContext) -> ConstraintResult:
    """Checks the primary room and every additional room of the candidate."""
    code = "HC-3"
    at_slot = ctx.same_slot()

    for room_id in ctx.candidate.all_room_ids():
        if ctx.policy.is_team_room(ctx.problem.get_room(room_id)):
            continue

        conflict = next((sl for sl in at_slot if sl.uses_room(room_id)), None)
        if conflict is not None:
            class_name, subject, _ = conflict_names(conflict)
            return ConstraintResult.violated(
                code,
                ctx.message(code, ctx.room_number(room_id), class_name, subject),
                room_id=room_id,
                conflicting_lesson_id=conflict.id,
            )

    return satisfied(code)

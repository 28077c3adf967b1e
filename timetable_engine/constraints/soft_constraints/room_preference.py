# timetable_engine/constraints/soft_constraints/room_preference.py

"""
SC-8 and SC-9: the lesson's required room type and the subjects' preferred
rooms. Both look at the primary room and every additional room.
"""

from ...core.constraint_types import ConstraintResult
from ..base_constraint import UNKNOWN, RuleContext, satisfied


def check_room_type_mismatch(ctx: RuleContext) -> ConstraintResult:
    code = "SC-8"
    required = ctx.lesson.required_room_type
    if not required or not required.strip():
        return satisfied(code)

    for room_id in ctx.candidate.all_room_ids():
        room = ctx.problem.get_room(room_id)
        if room is None:
            continue

        if (room.room_type or "").lower() != required.lower():
            return ConstraintResult.violated(
                code,
                ctx.message(code, room.room_type or UNKNOWN, required),
                room_id=room.id,
                actual_type=room.room_type,
                required_type=required,
            )
    return satisfied(code)


def check_subject_preferred_room(ctx: RuleContext) -> ConstraintResult:
    code = "SC-9"
    for subject in ctx.lesson.subjects:
        preferred = subject.preferred_room_id
        if preferred is None:
            continue

        if not ctx.candidate.uses_room(preferred):
            return ConstraintResult.violated(
                code,
                ctx.message(code, subject.name, ctx.room_number(preferred)),
                subject_id=subject.id,
                preferred_room_id=preferred,
            )
    return satisfied(code)

# timetable_engine/constraints/hard_constraints/locked_lesson.py

"""
HC-10: locked lessons cannot be moved or deleted.

Generation never moves an existing placement, so the rule is always satisfied
here. The edit boundary (core.solution.ScheduleEditor) enforces it.
"""

from ...core.constraint_types import ConstraintResult
from ..base_constraint import RuleContext, satisfied


def check_locked_lesson(ctx: RuleContext) -> ConstraintResult:
    return satisfied("HC-10")

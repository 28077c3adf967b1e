# timetable_engine/constraints/base_constraint.py

"""
Shared evaluation context and helpers for the rule functions.

Every rule is a pure function ``check(ctx: RuleContext) -> ConstraintResult``.
Rules never raise on missing related data; a missing teacher, class, room or
availability record means the rule is satisfied.
"""

from typing import Callable, Iterable, List, Optional, Sequence, Tuple
from dataclasses import dataclass
import logging

from ..core.constraint_registry import ConstraintRegistry
from ..core.constraint_types import ConstraintResult
from ..core.exemptions import ExemptionPolicy
from ..core.problem_model import (
    Availability,
    AvailabilityTable,
    ScheduledLesson,
    SchedulingProblem,
)

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class RuleContext:
    """Everything a rule may read while judging one candidate placement."""

    candidate: ScheduledLesson
    others: Tuple[ScheduledLesson, ...]
    problem: SchedulingProblem
    registry: ConstraintRegistry
    policy: ExemptionPolicy
    lunch_periods: Tuple[int, ...]

    @classmethod
    def build(
        cls,
        candidate: ScheduledLesson,
        existing_schedule: Iterable[ScheduledLesson],
        problem: SchedulingProblem,
        registry: ConstraintRegistry,
        policy: ExemptionPolicy,
        lunch_periods: Sequence[int],
    ) -> "RuleContext":
        """Build a context with the candidate itself removed from the schedule."""
        others = tuple(
            sl for sl in existing_schedule if not candidate.is_same_placement(sl)
        )
        return cls(
            candidate=candidate,
            others=others,
            problem=problem,
            registry=registry,
            policy=policy,
            lunch_periods=tuple(lunch_periods),
        )

    @property
    def lesson(self):
        return self.candidate.lesson

    def message(self, code: str, *args) -> str:
        return self.registry.get_by_code(code).format_message(*args)

    def same_slot(self) -> List[ScheduledLesson]:
        return [sl for sl in self.others if sl.same_slot(self.candidate)]

    def same_day(
        self, predicate: Optional[Callable[[ScheduledLesson], bool]] = None
    ) -> List[ScheduledLesson]:
        return [
            sl
            for sl in self.others
            if sl.day == self.candidate.day and (predicate is None or predicate(sl))
        ]

    def day_periods_with(
        self, predicate: Callable[[ScheduledLesson], bool]
    ) -> List[int]:
        """Sorted distinct period ids matching the predicate today, plus the candidate's."""
        period_ids = {sl.period_id for sl in self.same_day(predicate)}
        period_ids.add(self.candidate.period_id)
        return sorted(period_ids)

    def room_number(self, room_id: int) -> str:
        room = self.problem.get_room(room_id)
        return room.room_number if room is not None else str(room_id)

    def lookup(
        self, table: AvailabilityTable, entity_id: int
    ) -> Optional[Availability]:
        return table.lookup(entity_id, self.candidate.day, self.candidate.period_id)


def conflict_names(placement: ScheduledLesson) -> Tuple[str, str, str]:
    """(class, subject, teacher) names of a conflicting placement."""
    lesson = placement.lesson
    class_name = lesson.primary_class.name if lesson.primary_class else UNKNOWN
    subject = lesson.primary_subject.name if lesson.primary_subject else UNKNOWN
    teacher = lesson.primary_teacher.full_name if lesson.primary_teacher else UNKNOWN
    return class_name, subject, teacher


def first_run_exceeding(period_ids: Sequence[int], maximum: int) -> Optional[int]:
    """
    Walk sorted period ids and return the run length at the first point where
    consecutive ids (p, p+1, ...) exceed the maximum, or None.
    """
    consecutive = 1
    for previous, current in zip(period_ids, period_ids[1:]):
        if current == previous + 1:
            consecutive += 1
            if consecutive > maximum:
                return consecutive
        else:
            consecutive = 1
    return None


def satisfied(code: str) -> ConstraintResult:
    return ConstraintResult.ok(code)

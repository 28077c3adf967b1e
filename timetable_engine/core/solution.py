# timetable_engine/core/solution.py

"""
Solution representation: the result object returned by every engine, the
immutable slot candidates built while scoring, and the edit boundary that
keeps locked placements from being moved or removed.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING
from dataclasses import dataclass, field, replace
import logging

from .exceptions import LockedLessonError, UnknownEntityError
from .metrics import QualityMetrics
from .problem_model import ScheduledLesson, Weekday

if TYPE_CHECKING:
    from ..constraints.constraint_validator import ConstraintValidator
    from .validation import ValidationResult


logger = logging.getLogger(__name__)


@dataclass
class SchedulingResult:
    success: bool = False
    timetable_id: Optional[int] = None
    scheduled_count: int = 0
    total_count: int = 0
    assignments: List[ScheduledLesson] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    quality_metrics: Optional[QualityMetrics] = None
    runtime_seconds: float = 0.0
    algorithm: Optional[str] = None

    # Engine specific statistics (annealing energy history, etc.)
    statistics: Dict[str, Any] = field(default_factory=dict)

    @property
    def completion_percentage(self) -> float:
        if self.total_count == 0:
            return 0.0
        return self.scheduled_count * 100.0 / self.total_count

    def fail(self, message: str) -> "SchedulingResult":
        self.success = False
        self.errors.append(message)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "timetable_id": self.timetable_id,
            "scheduled_count": self.scheduled_count,
            "total_count": self.total_count,
            "completion_percentage": round(self.completion_percentage, 2),
            "assignments": [a.to_dict() for a in self.assignments],
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "quality_metrics": (
                self.quality_metrics.to_dict() if self.quality_metrics else None
            ),
            "runtime_seconds": self.runtime_seconds,
            "algorithm": self.algorithm,
            "statistics": dict(self.statistics),
        }


@dataclass(frozen=True)
class SlotCandidate:
    """A feasible (day, period, room) option together with its score."""

    day: Weekday
    period_id: int
    room_id: Optional[int]
    score: int
    reasons: Tuple[str, ...] = ()

    def describe(self) -> str:
        return (
            f"{self.day.label} Period {self.period_id} - Score: {self.score} "
            f"({', '.join(self.reasons)})"
        )


class ScheduleEditor:
    """
    Edit boundary for a working schedule. Locked placements can be unlocked
    but never moved or removed.
    """

    def __init__(
        self, validator: "ConstraintValidator", schedule: List[ScheduledLesson]
    ):
        self.validator = validator
        self.schedule = list(schedule)

    def _ensure_unlocked(self, placement: ScheduledLesson):
        if not placement.is_locked:
            return
        definition = self.validator.registry.get_by_code("HC-10")
        subject, class_name, _ = placement.lesson.describe()
        message = definition.format_message(subject, class_name)
        logger.warning(f"Rejected edit of locked placement: {message}")
        raise LockedLessonError(message, scheduled_lesson_id=placement.id)

    def _ensure_known_slot(self, period_id: int, room_id: Optional[int]):
        problem = self.validator.problem
        if problem.get_period(period_id) is None:
            raise UnknownEntityError("period", period_id)
        if room_id is not None and problem.get_room(room_id) is None:
            raise UnknownEntityError("room", room_id)

    def _index_of(self, placement: ScheduledLesson) -> int:
        for index, existing in enumerate(self.schedule):
            if existing.is_same_placement(placement) or existing == placement:
                return index
        raise ValueError(f"Placement for lesson {placement.lesson_id} is not in the schedule")

    def move(
        self,
        placement: ScheduledLesson,
        day: Weekday,
        period_id: int,
        room_id: Optional[int] = None,
    ) -> Tuple[ScheduledLesson, "ValidationResult"]:
        """
        Move a placement to a new slot. The move is applied only when the new
        slot passes every hard constraint.
        """
        day = Weekday(day)
        self._ensure_unlocked(placement)
        index = self._index_of(placement)
        self._ensure_known_slot(period_id, room_id)

        moved = replace(placement, day=day, period_id=period_id, room_id=room_id)
        others = self.schedule[:index] + self.schedule[index + 1 :]
        result = self.validator.validate_hard(moved, others)

        if result.is_valid:
            self.schedule[index] = moved
        else:
            logger.info(
                f"Move of lesson {placement.lesson_id} to {day.label} period "
                f"{period_id} rejected: {result.error_messages()}"
            )
        return moved, result

    def remove(self, placement: ScheduledLesson) -> ScheduledLesson:
        self._ensure_unlocked(placement)
        return self.schedule.pop(self._index_of(placement))

    def lock(self, placement: ScheduledLesson) -> ScheduledLesson:
        return self._set_locked(placement, True)

    def unlock(self, placement: ScheduledLesson) -> ScheduledLesson:
        return self._set_locked(placement, False)

    def _set_locked(self, placement: ScheduledLesson, locked: bool) -> ScheduledLesson:
        index = self._index_of(placement)
        updated = replace(placement, is_locked=locked)
        self.schedule[index] = updated
        return updated

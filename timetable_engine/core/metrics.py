# timetable_engine/core/metrics.py

"""
Solution quality metrics.
Counts non-teaching periods (NTPs, gaps between lessons on the same day) per
teacher and per class and condenses them into a 0-100 score.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence
from dataclasses import dataclass, field, asdict
from collections import defaultdict
import logging

from .problem_model import ScheduledLesson, Weekday

logger = logging.getLogger(__name__)


@dataclass
class QualityMetrics:
    """NTP report for a generated timetable."""

    total_teacher_ntps: int = 0
    total_student_ntps: int = 0
    teacher_ntps: Dict[int, int] = field(default_factory=dict)
    student_ntps: Dict[int, int] = field(default_factory=dict)
    overall_score: int = 0  # 0-100

    @property
    def total_ntps(self) -> int:
        return self.total_teacher_ntps + self.total_student_ntps

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def count_gaps(period_ids: Iterable[int]) -> int:
    """Sum of (next - prev - 1) over the sorted period ids of one day."""
    ordered = sorted(period_ids)
    return sum(b - a - 1 for a, b in zip(ordered, ordered[1:]))


class SolutionMetrics:
    """
    Calculates NTP-based quality metrics for a list of placements.
    """

    # Assumed upper bound: five lessons a day over five days per teacher
    MAX_NTPS_PER_TEACHER = 5 * 5

    def __init__(self, days: Sequence[Weekday]):
        self.days = list(days)

    def _count_entity_ntps(
        self,
        schedule: List[ScheduledLesson],
        involves: Callable[[ScheduledLesson], bool],
    ) -> int:
        total = 0
        for day in self.days:
            periods = [sl.period_id for sl in schedule if sl.day == day and involves(sl)]
            if len(periods) > 1:
                total += count_gaps(periods)
        return total

    def count_teacher_ntps(self, teacher_id: int, schedule: List[ScheduledLesson]) -> int:
        return self._count_entity_ntps(
            schedule, lambda sl: sl.lesson.has_teacher(teacher_id)
        )

    def count_student_ntps(self, class_id: int, schedule: List[ScheduledLesson]) -> int:
        return self._count_entity_ntps(schedule, lambda sl: sl.lesson.has_class(class_id))

    def calculate_quality_metrics(
        self, schedule: List[ScheduledLesson]
    ) -> QualityMetrics:
        metrics = QualityMetrics()

        teacher_ids = list(
            dict.fromkeys(t.id for sl in schedule for t in sl.lesson.teachers)
        )
        class_ids = list(
            dict.fromkeys(c.id for sl in schedule for c in sl.lesson.classes)
        )

        for teacher_id in teacher_ids:
            ntps = self.count_teacher_ntps(teacher_id, schedule)
            if ntps > 0:
                metrics.teacher_ntps[teacher_id] = ntps
                metrics.total_teacher_ntps += ntps

        for class_id in class_ids:
            ntps = self.count_student_ntps(class_id, schedule)
            if ntps > 0:
                metrics.student_ntps[class_id] = ntps
                metrics.total_student_ntps += ntps

        max_possible = len(teacher_ids) * self.MAX_NTPS_PER_TEACHER
        metrics.overall_score = max(
            0, 100 - (metrics.total_ntps * 100 // max(1, max_possible))
        )

        logger.debug(
            f"Quality metrics: {metrics.total_teacher_ntps} teacher NTPs, "
            f"{metrics.total_student_ntps} student NTPs, score {metrics.overall_score}"
        )
        return metrics


def periods_by_entity_day(
    schedule: Iterable[ScheduledLesson],
    key: Callable[[ScheduledLesson], Optional[int]],
) -> Dict[tuple, List[int]]:
    """Group period ids per (entity, day) for the given entity key."""
    grouped: Dict[tuple, List[int]] = defaultdict(list)
    for sl in schedule:
        entity_id = key(sl)
        if entity_id is not None:
            grouped[(entity_id, sl.day)].append(sl.period_id)
    return grouped

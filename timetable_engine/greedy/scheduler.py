# timetable_engine/greedy/scheduler.py

"""
Greedy engine variants.

GreedyScheduler is the single-pass generator. PriorityGreedyScheduler also
orders long lessons first, records why each slot lost points and reports
NTP quality metrics for the finished timetable.
"""

from typing import List

from ..config import SchedulingAlgorithm
from .base_scheduler import BaseGreedyScheduler, LessonInstance, requires_room_type


class GreedyScheduler(BaseGreedyScheduler):
    """Lessons needing a specific room type first, then the most frequent."""

    algorithm = SchedulingAlgorithm.GREEDY

    def order_instances(self, instances: List[LessonInstance]) -> List[LessonInstance]:
        return sorted(
            instances,
            key=lambda i: (
                not requires_room_type(i.lesson),
                -i.lesson.frequency_per_week,
            ),
        )


class PriorityGreedyScheduler(BaseGreedyScheduler):
    algorithm = SchedulingAlgorithm.GREEDY_PRIORITY
    record_reasons = True
    compute_quality = True

    def order_instances(self, instances: List[LessonInstance]) -> List[LessonInstance]:
        return sorted(
            instances,
            key=lambda i: (
                not requires_room_type(i.lesson),
                -i.lesson.frequency_per_week,
                -i.lesson.duration,
            ),
        )

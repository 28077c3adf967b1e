# timetable_engine/annealing/energy.py

"""
Energy function for simulated annealing.

The energy of a schedule is a weighted sum of penalty counts; lower is
better. Hard conflicts carry a weight large enough to dominate every soft
term, and the availability term is negated so that well-liked slots lower
the energy. Only the first teacher, class and subject of a lesson take part,
except for the availability term which also looks at the second teacher.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence
from dataclasses import dataclass, asdict
from collections import Counter, defaultdict
from enum import Enum
import logging

import numpy as np

from ..config import SoftConstraintWeights
from ..core.metrics import QualityMetrics, periods_by_entity_day
from ..core.problem_model import ScheduledLesson, SchedulingProblem

logger = logging.getLogger(__name__)


class PreferredTimeOfDay(Enum):
    MORNING = "morning"  # periods 1-3
    MIDDAY = "midday"  # periods 4-5
    AFTERNOON = "afternoon"  # period 6 onwards
    ANY = "any"


_CATEGORY_PREFERENCES = {
    "mathematics": PreferredTimeOfDay.MORNING,
    "science": PreferredTimeOfDay.MORNING,
    "language": PreferredTimeOfDay.MORNING,
    "arts": PreferredTimeOfDay.AFTERNOON,
    "physical education": PreferredTimeOfDay.AFTERNOON,
}


def preferred_time_for(category: Optional[str]) -> PreferredTimeOfDay:
    """Time of day a subject category is best taught at."""
    return _CATEGORY_PREFERENCES.get(
        (category or "").strip().lower(), PreferredTimeOfDay.ANY
    )


def is_preferred_period(period_number: int, preferred: PreferredTimeOfDay) -> bool:
    if preferred == PreferredTimeOfDay.MORNING:
        return period_number <= 3
    if preferred == PreferredTimeOfDay.MIDDAY:
        return 4 <= period_number <= 5
    if preferred == PreferredTimeOfDay.AFTERNOON:
        return period_number >= 6
    return True


def count_consecutive_violations(period_ids: Sequence[int], max_consecutive: int) -> int:
    """Each period that extends a run of adjacent ids beyond the maximum counts once."""
    violations = 0
    streak = 1
    for previous, current in zip(period_ids, period_ids[1:]):
        if current == previous + 1:
            streak += 1
            if streak > max_consecutive:
                violations += 1
        else:
            streak = 1
    return violations


def _gap_count(period_ids: List[int]) -> int:
    if len(period_ids) <= 1:
        return 0
    return (max(period_ids) - min(period_ids) + 1) - len(set(period_ids))


def _primary_teacher_id(sl: ScheduledLesson) -> Optional[int]:
    teacher = sl.lesson.primary_teacher
    return teacher.id if teacher else None


def _primary_class_id(sl: ScheduledLesson) -> Optional[int]:
    school_class = sl.lesson.primary_class
    return school_class.id if school_class else None


def _primary_subject_id(sl: ScheduledLesson) -> Optional[int]:
    subject = sl.lesson.primary_subject
    return subject.id if subject else None


@dataclass
class EnergyBreakdown:
    """Raw penalty counts before weighting."""

    hard_violations: int = 0
    teacher_ntps: int = 0
    student_ntps: int = 0
    uneven_distribution: int = 0
    non_preferred_slots: int = 0
    room_changes: int = 0
    workload_imbalance: int = 0
    consecutive_same_subject: int = 0
    availability_score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EnergyFunction:
    """Scores a complete schedule against one set of soft weights."""

    CONSECUTIVE_SAME_SUBJECT_WEIGHT = 100

    def __init__(
        self,
        problem: SchedulingProblem,
        weights: Optional[SoftConstraintWeights] = None,
        hard_violation_weight: int = 10000,
    ):
        self.problem = problem
        self.weights = weights or SoftConstraintWeights()
        self.hard_violation_weight = hard_violation_weight

    def __call__(self, schedule: Sequence[ScheduledLesson]) -> float:
        return self.calculate(schedule)

    def calculate(self, schedule: Sequence[ScheduledLesson]) -> float:
        if not self.weights.enabled:
            return 0.0

        parts = self.breakdown(schedule)
        w = self.weights
        return float(
            parts.hard_violations * self.hard_violation_weight
            + parts.teacher_ntps * w.minimize_teacher_ntps
            + parts.student_ntps * w.minimize_student_ntps
            + parts.uneven_distribution * w.even_distribution
            + parts.non_preferred_slots * w.preferred_time_slot
            + parts.room_changes * w.minimize_room_changes
            + parts.workload_imbalance * w.balanced_workload
            + parts.consecutive_same_subject * self.CONSECUTIVE_SAME_SUBJECT_WEIGHT
            - parts.availability_score * w.availability_weight
        )

    def breakdown(self, schedule: Sequence[ScheduledLesson]) -> EnergyBreakdown:
        schedule = list(schedule)
        return EnergyBreakdown(
            hard_violations=self.count_hard_violations(schedule),
            teacher_ntps=self.count_ntps(schedule, _primary_teacher_id),
            student_ntps=self.count_ntps(schedule, _primary_class_id),
            uneven_distribution=self.uneven_distribution(schedule),
            non_preferred_slots=self.non_preferred_slots(schedule),
            room_changes=self.room_changes(schedule),
            workload_imbalance=self.workload_imbalance(schedule),
            consecutive_same_subject=self.consecutive_same_subject(schedule),
            availability_score=self.availability_score(schedule),
        )

    # Hard terms

    def count_hard_violations(self, schedule: List[ScheduledLesson]) -> int:
        by_slot: Dict[tuple, List[ScheduledLesson]] = defaultdict(list)
        for sl in schedule:
            by_slot[(sl.day, sl.period_id)].append(sl)

        violations = 0
        for placements in by_slot.values():
            for i, first in enumerate(placements):
                for second in placements[i + 1 :]:
                    teacher = _primary_teacher_id(first)
                    if teacher is not None and teacher == _primary_teacher_id(second):
                        violations += 1
                    school_class = _primary_class_id(first)
                    if school_class is not None and school_class == _primary_class_id(second):
                        violations += 1
                    if first.room_id is not None and first.room_id == second.room_id:
                        violations += 1

        return violations + self._daily_limit_violations(schedule)

    def _daily_limit_violations(self, schedule: List[ScheduledLesson]) -> int:
        violations = 0

        for (teacher_id, _), period_ids in periods_by_entity_day(
            schedule, _primary_teacher_id
        ).items():
            teacher = self.problem.get_teacher(teacher_id)
            if teacher is None:
                continue
            distinct = sorted(set(period_ids))
            if teacher.max_periods_per_day is not None:
                violations += max(0, len(distinct) - teacher.max_periods_per_day)
            if teacher.max_consecutive_periods is not None:
                violations += count_consecutive_violations(
                    distinct, teacher.max_consecutive_periods
                )

        class_days: Dict[tuple, List[ScheduledLesson]] = defaultdict(list)
        for sl in schedule:
            class_id = _primary_class_id(sl)
            if class_id is not None:
                class_days[(class_id, sl.day)].append(sl)

        for (class_id, _), placements in class_days.items():
            school_class = self.problem.get_class(class_id)
            if school_class is None:
                continue
            if school_class.max_periods_per_day is not None:
                distinct = len({sl.period_id for sl in placements})
                violations += max(0, distinct - school_class.max_periods_per_day)
            if school_class.max_consecutive_subjects is not None:
                by_subject: Dict[Optional[int], set] = defaultdict(set)
                for sl in placements:
                    by_subject[_primary_subject_id(sl)].add(sl.period_id)
                for period_ids in by_subject.values():
                    violations += count_consecutive_violations(
                        sorted(period_ids), school_class.max_consecutive_subjects
                    )

        return violations

    # Soft terms

    def count_ntps(self, schedule: Iterable[ScheduledLesson], key) -> int:
        return sum(
            _gap_count(period_ids)
            for period_ids in periods_by_entity_day(schedule, key).values()
        )

    def uneven_distribution(self, schedule: List[ScheduledLesson]) -> int:
        counts = list(Counter(sl.day for sl in schedule).values())
        if not counts:
            return 0
        return int(np.var(counts) * 10)

    def non_preferred_slots(self, schedule: List[ScheduledLesson]) -> int:
        penalty = 0
        for sl in schedule:
            subject = sl.lesson.primary_subject
            if subject is None:
                continue
            preferred = preferred_time_for(subject.category or subject.name)
            period = self.problem.get_period(sl.period_id)
            number = period.period_number if period else sl.period_id
            if not is_preferred_period(number, preferred):
                penalty += 1
        return penalty

    def room_changes(self, schedule: List[ScheduledLesson]) -> int:
        rooms: Dict[int, set] = defaultdict(set)
        for sl in schedule:
            teacher_id = _primary_teacher_id(sl)
            if teacher_id is not None:
                rooms[teacher_id].add(sl.room_id)
        return sum(max(0, len(used) - 1) for used in rooms.values())

    def workload_imbalance(self, schedule: List[ScheduledLesson]) -> int:
        per_teacher: Dict[int, Counter] = defaultdict(Counter)
        for sl in schedule:
            teacher_id = _primary_teacher_id(sl)
            if teacher_id is not None:
                per_teacher[teacher_id][sl.day] += 1

        total = 0
        for per_day in per_teacher.values():
            counts = list(per_day.values())
            mean = sum(counts) / len(counts)
            total += int(sum(abs(c - mean) for c in counts))
        return total

    def consecutive_same_subject(self, schedule: List[ScheduledLesson]) -> int:
        class_days: Dict[tuple, List[ScheduledLesson]] = defaultdict(list)
        for sl in schedule:
            class_id = _primary_class_id(sl)
            if class_id is not None:
                class_days[(class_id, sl.day)].append(sl)

        violations = 0
        for placements in class_days.values():
            ordered = sorted(placements, key=lambda sl: sl.period_id)
            for current, following in zip(ordered, ordered[1:]):
                subject_id = _primary_subject_id(current)
                if (
                    current.period_id + 1 == following.period_id
                    and subject_id is not None
                    and subject_id == _primary_subject_id(following)
                ):
                    violations += 1
        return violations

    def availability_score(self, schedule: List[ScheduledLesson]) -> int:
        """Sum of importance marks; negative values mean disliked slots."""
        problem = self.problem
        total = 0
        for sl in schedule:
            lesson = sl.lesson
            lookups = [
                (problem.teacher_availability, t.id) for t in lesson.teachers[:2]
            ]
            if lesson.primary_class:
                lookups.append((problem.class_availability, lesson.primary_class.id))
            if lesson.primary_subject:
                lookups.append((problem.subject_availability, lesson.primary_subject.id))
            if sl.room_id is not None:
                lookups.append((problem.room_availability, sl.room_id))

            for table, entity_id in lookups:
                record = table.lookup(entity_id, sl.day, sl.period_id)
                if record is not None:
                    total += record.importance
        return total

    def quality_metrics(self, schedule: Sequence[ScheduledLesson]) -> QualityMetrics:
        """NTP report with a score that also discounts hard conflicts."""
        schedule = list(schedule)
        metrics = QualityMetrics()

        for key, target in (
            (_primary_teacher_id, metrics.teacher_ntps),
            (_primary_class_id, metrics.student_ntps),
        ):
            for (entity_id, _), period_ids in periods_by_entity_day(schedule, key).items():
                gaps = _gap_count(period_ids)
                if gaps > 0:
                    target[entity_id] = target.get(entity_id, 0) + gaps

        metrics.total_teacher_ntps = sum(metrics.teacher_ntps.values())
        metrics.total_student_ntps = sum(metrics.student_ntps.values())

        max_possible = len(schedule) * 2
        ntp_score = (
            max(0.0, 100 - metrics.total_ntps * 100.0 / max_possible)
            if max_possible > 0
            else 100.0
        )
        penalty = min(50, self.count_hard_violations(schedule) * 10)
        metrics.overall_score = int(max(0.0, min(100.0, ntp_score - penalty)))
        return metrics

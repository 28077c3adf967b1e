# timetable_engine/greedy/base_scheduler.py

"""
Base Greedy Scheduler - one-pass constructive timetable generation.

Lesson instances are placed one at a time, most constrained first. For each
instance every (school day, teaching period) pair is tried; the first room
that passes all hard constraints makes the slot feasible, and the feasible
slot with the highest soft score wins. There is no backtracking: an instance
without a feasible slot is reported as a warning and skipped.
"""

from typing import Iterator, List, Optional, Sequence, Tuple
from contextlib import nullcontext
from dataclasses import dataclass, replace
from collections import Counter
import time

from ..config import SchedulingAlgorithm, SchedulingEngineConfig, config as default_config
from ..config import get_logger
from ..constraints.constraint_validator import ConstraintValidator
from ..core.constraint_registry import ConstraintRegistry
from ..core.metrics import SolutionMetrics
from ..core.problem_model import (
    Lesson,
    Period,
    Room,
    ScheduledLesson,
    SchedulingProblem,
    Weekday,
    school_days,
)
from ..core.solution import SchedulingResult, SlotCandidate
from ..core.validation import ValidationContext
from ..utils.logging import SchedulingPhase, get_logger as get_scheduling_logger
from ..utils.performance import SchedulingStage, get_profiler
from .scoring import SlotScorer

logger = get_logger("greedy.scheduler")


@dataclass
class LessonInstance:
    """One weekly occurrence of a lesson that still needs a slot."""

    lesson: Lesson
    instance_number: int


def build_instances(
    lessons: Sequence[Lesson], locked: Sequence[ScheduledLesson]
) -> List[LessonInstance]:
    """Remaining weekly occurrences after the locked placements are counted."""
    locked_counts = Counter(sl.lesson_id for sl in locked)
    instances: List[LessonInstance] = []
    for lesson in lessons:
        remaining = max(0, lesson.frequency_per_week - locked_counts[lesson.id])
        for number in range(remaining):
            instances.append(LessonInstance(lesson=lesson, instance_number=number + 1))
    return instances


def requires_room_type(lesson: Lesson) -> bool:
    return bool(lesson.required_room_type and lesson.required_room_type.strip())


class BaseGreedyScheduler:
    """
    Shared generation loop of the greedy engines. Subclasses decide the
    instance order and whether scoring reasons and quality metrics are kept.
    """

    algorithm = SchedulingAlgorithm.GREEDY
    record_reasons = False
    compute_quality = False

    def __init__(
        self,
        config: Optional[SchedulingEngineConfig] = None,
        registry: Optional[ConstraintRegistry] = None,
    ):
        self.config = config or default_config
        self.registry = registry or ConstraintRegistry(self.config.exemptions)

    def order_instances(self, instances: List[LessonInstance]) -> List[LessonInstance]:
        raise NotImplementedError

    def generate(
        self,
        problem: SchedulingProblem,
        timetable_id: Optional[int] = None,
        existing_timetable_id: Optional[int] = None,
    ) -> SchedulingResult:
        result = SchedulingResult(algorithm=self.algorithm.value)
        start_time = time.time()

        profiling = (
            get_profiler().time_operation(
                f"{self.algorithm.value}_generate", SchedulingStage.GREEDY_PLACEMENT
            )
            if self.config.enable_profiling
            else nullcontext()
        )

        try:
            with profiling:
                self._generate(problem, result, timetable_id, existing_timetable_id)
        except Exception as e:
            logger.exception("Error generating timetable")
            result.success = False
            result.errors.append(f"Error: {e}")

        result.runtime_seconds = time.time() - start_time
        return result

    def _generate(
        self,
        problem: SchedulingProblem,
        result: SchedulingResult,
        timetable_id: Optional[int],
        existing_timetable_id: Optional[int],
    ):
        structured = get_scheduling_logger()

        with structured.phase_context(SchedulingPhase.DATA_PREPARATION):
            lessons = problem.active_lessons()
            periods = problem.teaching_periods()

        if not lessons:
            result.fail("No active lessons found to schedule")
            return
        if not periods:
            result.fail("No periods configured. Please configure periods first.")
            return

        timetable_id = (
            timetable_id if timetable_id is not None else problem.next_timetable_id()
        )
        result.timetable_id = timetable_id

        schedule = self._copy_locked(problem, existing_timetable_id, timetable_id)
        locked_count = len(schedule)
        instances = self.order_instances(build_instances(lessons, schedule))
        days = school_days(self.config.non_school_days)

        validator = ConstraintValidator(
            problem, self.registry, lunch_periods=self.config.lunch_periods
        )
        scorer = SlotScorer(validator, self.config.greedy, self.record_reasons)

        logger.info(
            f"Attempting to schedule {len(instances)} lesson instances "
            f"({locked_count} locked placements kept) into timetable {timetable_id}"
        )

        scheduled = 0
        with structured.phase_context(
            SchedulingPhase.PLACEMENT, {"instances": len(instances)}
        ):
            for instance in instances:
                best = self._best_slot(
                    instance.lesson, days, periods, problem.active_rooms(),
                    schedule, validator, scorer,
                )
                if best is None:
                    subject, class_name, teacher = instance.lesson.describe()
                    warning = (
                        f"Could not schedule: {subject} for {class_name} "
                        f"(Teacher: {teacher})"
                    )
                    result.warnings.append(warning)
                    structured.log_unscheduled(warning, component=self.algorithm.value)
                    continue

                schedule.append(
                    ScheduledLesson(
                        lesson=instance.lesson,
                        day=best.day,
                        period_id=best.period_id,
                        room_id=best.room_id,
                        timetable_id=timetable_id,
                        week_number=1,
                    )
                )
                scheduled += 1
                logger.debug(
                    f"Scheduled lesson {instance.lesson.id} #{instance.instance_number} "
                    f"at {best.describe()}"
                )

        with structured.phase_context(SchedulingPhase.FINALIZATION):
            result.assignments = schedule
            result.scheduled_count = scheduled
            result.total_count = len(instances)
            result.statistics = {
                "locked_count": locked_count,
                "unscheduled_count": len(instances) - scheduled,
            }

            if self.compute_quality:
                metrics = SolutionMetrics(days).calculate_quality_metrics(schedule)
                result.quality_metrics = metrics
                if self.config.enable_profiling:
                    get_profiler().track_solution_quality(
                        metrics.overall_score, stage=SchedulingStage.GREEDY_PLACEMENT
                    )

            result.success = scheduled > 0 if result.warnings else True

        logger.info(
            f"Timetable generation completed. Scheduled {scheduled}/{len(instances)} "
            f"lessons"
            + (
                f". Quality Score: {result.quality_metrics.overall_score}"
                if result.quality_metrics
                else ""
            )
        )

    def _copy_locked(
        self,
        problem: SchedulingProblem,
        existing_timetable_id: Optional[int],
        timetable_id: int,
    ) -> List[ScheduledLesson]:
        if existing_timetable_id is None:
            return []
        return [
            replace(sl, id=None, timetable_id=timetable_id, is_locked=True)
            for sl in problem.timetable_lessons(existing_timetable_id)
            if sl.is_locked
        ]

    def _room_candidates(self, lesson: Lesson, rooms: List[Room]) -> List[Optional[int]]:
        if requires_room_type(lesson):
            required = lesson.required_room_type.strip().lower()
            return [r.id for r in rooms if (r.room_type or "").lower() == required]
        return [None] + [r.id for r in rooms]

    def _feasible_room(
        self,
        lesson: Lesson,
        day: Weekday,
        period: Period,
        room_ids: List[Optional[int]],
        schedule: List[ScheduledLesson],
        validator: ConstraintValidator,
    ) -> Tuple[bool, Optional[ScheduledLesson]]:
        context = ValidationContext(include_soft=False, early_exit=True)
        for room_id in room_ids:
            candidate = ScheduledLesson(
                lesson=lesson, day=day, period_id=period.id, room_id=room_id
            )
            if validator.validate_hard(candidate, schedule, context).is_valid:
                return True, candidate
        return False, None

    def _iter_slots(
        self,
        lesson: Lesson,
        days: List[Weekday],
        periods: List[Period],
        rooms: List[Room],
        schedule: List[ScheduledLesson],
        validator: ConstraintValidator,
        scorer: SlotScorer,
    ) -> Iterator[SlotCandidate]:
        room_ids = self._room_candidates(lesson, rooms)
        if not room_ids:
            return

        for day in days:
            for period in periods:
                feasible, candidate = self._feasible_room(
                    lesson, day, period, room_ids, schedule, validator
                )
                if feasible:
                    yield scorer.score(candidate, schedule)

    def _best_slot(self, *args) -> Optional[SlotCandidate]:
        """Highest scoring feasible slot; ties keep the earliest one."""
        best: Optional[SlotCandidate] = None
        for slot in self._iter_slots(*args):
            if best is None or slot.score > best.score:
                best = slot
        return best

    def candidate_slots(
        self, problem: SchedulingProblem, lesson: Lesson, schedule: List[ScheduledLesson]
    ) -> List[SlotCandidate]:
        """Every feasible slot for a lesson against a schedule, in enumeration order."""
        validator = ConstraintValidator(
            problem, self.registry, lunch_periods=self.config.lunch_periods
        )
        return list(
            self._iter_slots(
                lesson,
                school_days(self.config.non_school_days),
                problem.teaching_periods(),
                problem.active_rooms(),
                schedule,
                validator,
                SlotScorer(validator, self.config.greedy, self.record_reasons),
            )
        )

# timetable_engine/annealing/annealer.py

"""
Simulated Annealing Scheduler - builds a greedy starting timetable and then
improves it with Metropolis acceptance over a geometric cooling schedule.

Each run owns its random generator: either the one passed in or a fresh
numpy Generator seeded from the configuration, so equal seeds give equal
timetables.
"""

from typing import Any, Dict, List, Optional
from contextlib import nullcontext
from dataclasses import dataclass, field, replace
from collections import Counter
import math
import time

import numpy as np

from ..config import (
    SchedulingAlgorithm,
    SchedulingEngineConfig,
    SimulatedAnnealingConfig,
    config as default_config,
    get_logger,
)
from ..core.problem_model import ScheduledLesson, SchedulingProblem, school_days
from ..core.solution import SchedulingResult
from ..utils.logging import (
    AnnealingLogMetrics,
    SchedulingPhase,
    get_logger as get_scheduling_logger,
)
from ..utils.performance import SchedulingStage, get_profiler
from .energy import EnergyFunction
from .initial_solution import build_initial_solution
from .neighborhood import MoveType, NeighborhoodGenerator

logger = get_logger("annealing.annealer")


@dataclass
class AnnealingStats:
    """Search statistics of one annealing run"""

    initial_energy: float = 0.0
    best_energy: float = 0.0
    final_temperature: float = 0.0
    total_iterations: int = 0
    accepted_moves: int = 0
    rejected_moves: int = 0
    improvements: int = 0
    temperature_steps: int = 0
    stopped_reason: str = ""

    # Sampled at every temperature boundary, starting with the initial state
    current_energy_history: List[float] = field(default_factory=list)
    best_energy_history: List[float] = field(default_factory=list)
    move_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def acceptance_rate(self) -> float:
        total = self.accepted_moves + self.rejected_moves
        return self.accepted_moves / total if total else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "initial_energy": self.initial_energy,
            "best_energy": self.best_energy,
            "final_temperature": self.final_temperature,
            "total_iterations": self.total_iterations,
            "accepted_moves": self.accepted_moves,
            "rejected_moves": self.rejected_moves,
            "acceptance_rate": self.acceptance_rate,
            "improvements": self.improvements,
            "temperature_steps": self.temperature_steps,
            "stopped_reason": self.stopped_reason,
            "current_energy_history": list(self.current_energy_history),
            "best_energy_history": list(self.best_energy_history),
            "move_counts": dict(self.move_counts),
        }


class SimulatedAnnealingScheduler:
    """
    Timetable generator that trades hard and soft penalties inside a single
    energy value. Hard conflicts are discouraged by weight, not forbidden.
    """

    algorithm = SchedulingAlgorithm.SIMULATED_ANNEALING

    def __init__(self, config: Optional[SchedulingEngineConfig] = None):
        self.config = config or default_config
        self.last_stats: Optional[AnnealingStats] = None

    def generate(
        self,
        problem: SchedulingProblem,
        timetable_id: Optional[int] = None,
        annealing_config: Optional[SimulatedAnnealingConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> SchedulingResult:
        annealing_config = annealing_config or self.config.annealing
        if rng is None:
            rng = np.random.default_rng(annealing_config.random_seed)

        result = SchedulingResult(algorithm=self.algorithm.value)
        start_time = time.time()

        profiling = (
            get_profiler().time_operation(
                "simulated_annealing_generate", SchedulingStage.ANNEALING
            )
            if self.config.enable_profiling
            else nullcontext()
        )

        try:
            with profiling:
                self._generate(problem, result, timetable_id, annealing_config, rng)
        except Exception as e:
            logger.exception("Error during simulated annealing scheduling")
            result.success = False
            result.errors.append(f"Error during scheduling: {e}")

        result.runtime_seconds = time.time() - start_time
        return result

    def _generate(
        self,
        problem: SchedulingProblem,
        result: SchedulingResult,
        timetable_id: Optional[int],
        annealing_config: SimulatedAnnealingConfig,
        rng: np.random.Generator,
    ):
        structured = get_scheduling_logger()

        with structured.phase_context(SchedulingPhase.DATA_PREPARATION):
            lessons = problem.active_lessons()
            rooms = problem.active_rooms()
            periods = problem.teaching_periods()
            days = school_days(self.config.non_school_days)

        timetable_id = (
            timetable_id if timetable_id is not None else problem.next_timetable_id()
        )
        result.timetable_id = timetable_id
        result.total_count = sum(l.frequency_per_week for l in lessons)

        if not lessons:
            result.fail("No active lessons to schedule")
            return
        if not periods:
            result.fail("No periods defined for this school year")
            return

        with structured.phase_context(SchedulingPhase.INITIAL_SOLUTION):
            initial = build_initial_solution(lessons, days, periods, rooms, timetable_id)
        result.scheduled_count = len(initial)

        if not initial:
            result.fail("Could not generate initial solution")
            return

        self._report_unplaced(lessons, initial, result)

        energy = EnergyFunction(
            problem, annealing_config.weights, annealing_config.hard_violation_weight
        )
        neighborhood = NeighborhoodGenerator(days, periods, rooms, rng)

        logger.info(
            f"Starting simulated annealing on {len(initial)} placements "
            f"(T0={annealing_config.initial_temperature}, "
            f"cooling={annealing_config.cooling_rate})"
        )

        with structured.phase_context(
            SchedulingPhase.ANNEALING, {"placements": len(initial)}
        ):
            best, stats = self.anneal(initial, energy, neighborhood, annealing_config, rng)

        with structured.phase_context(SchedulingPhase.FINALIZATION):
            result.assignments = [replace(sl, timetable_id=timetable_id) for sl in best]
            metrics = energy.quality_metrics(best)
            result.quality_metrics = metrics
            result.statistics = stats.to_dict()
            result.success = True

            if self.config.enable_profiling:
                profiler = get_profiler()
                profiler.track_solution_quality(
                    metrics.overall_score,
                    energy.count_hard_violations(best),
                    SchedulingStage.ANNEALING,
                )
                profiler.set_gauge("annealing_best_energy", stats.best_energy)
                profiler.increment_counter("annealing_iterations", stats.total_iterations)
                profiler.snapshot_memory()

        self.last_stats = stats
        logger.info(
            f"Simulated annealing completed after {stats.total_iterations} iterations. "
            f"Energy {stats.initial_energy:.1f} -> {stats.best_energy:.1f}, "
            f"Quality Score: {metrics.overall_score}"
        )

    def anneal(
        self,
        initial: List[ScheduledLesson],
        energy: EnergyFunction,
        neighborhood: NeighborhoodGenerator,
        annealing_config: SimulatedAnnealingConfig,
        rng: np.random.Generator,
    ):
        """Run the cooling schedule and return (best schedule, stats)."""
        structured = get_scheduling_logger()
        stats = AnnealingStats()
        structured.start_annealing_run()
        move_counts: Counter = Counter()

        current = list(initial)
        current_energy = energy(current)
        best, best_energy = current, current_energy

        stats.initial_energy = current_energy
        stats.current_energy_history.append(current_energy)
        stats.best_energy_history.append(best_energy)

        temperature = annealing_config.initial_temperature
        without_improvement = 0

        while (
            temperature > annealing_config.final_temperature
            and without_improvement < annealing_config.max_iterations_without_improvement
        ):
            accepted = rejected = 0

            for _ in range(annealing_config.iterations_per_temperature):
                stats.total_iterations += 1
                neighbor, move = neighborhood.neighbor(current)
                move_counts[move.value] += 1

                neighbor_energy = energy(neighbor)
                delta = neighbor_energy - current_energy

                if delta < 0 or rng.random() < math.exp(-delta / temperature):
                    current, current_energy = neighbor, neighbor_energy
                    accepted += 1
                    if current_energy < best_energy:
                        best, best_energy = current, current_energy
                        stats.improvements += 1
                        without_improvement = 0
                    else:
                        without_improvement += 1
                else:
                    rejected += 1
                    without_improvement += 1

                if best_energy == 0:
                    break

            stats.accepted_moves += accepted
            stats.rejected_moves += rejected
            stats.temperature_steps += 1
            stats.current_energy_history.append(current_energy)
            stats.best_energy_history.append(best_energy)

            structured.log_temperature_step(
                AnnealingLogMetrics(
                    temperature=temperature,
                    current_energy=current_energy,
                    best_energy=best_energy,
                    accepted_moves=accepted,
                    rejected_moves=rejected,
                    iterations_without_improvement=without_improvement,
                )
            )

            temperature *= annealing_config.cooling_rate
            if best_energy == 0:
                break

        if best_energy == 0:
            stats.stopped_reason = "optimal"
        elif without_improvement >= annealing_config.max_iterations_without_improvement:
            stats.stopped_reason = "no_improvement"
        else:
            stats.stopped_reason = "frozen"

        stats.best_energy = best_energy
        stats.final_temperature = temperature
        stats.move_counts = {m.value: move_counts.get(m.value, 0) for m in MoveType}
        return best, stats

    def _report_unplaced(
        self,
        lessons,
        initial: List[ScheduledLesson],
        result: SchedulingResult,
    ):
        placed = Counter(sl.lesson_id for sl in initial)
        for lesson in lessons:
            missing = lesson.frequency_per_week - placed[lesson.id]
            if missing <= 0:
                continue
            subject, class_name, teacher = lesson.describe()
            warning = (
                f"Could not schedule: {subject} for {class_name} (Teacher: {teacher})"
            )
            result.warnings.extend([warning] * missing)
            get_scheduling_logger().log_unscheduled(warning, component="annealing")

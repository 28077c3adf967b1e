# timetable_engine/config.py

"""
Configuration module for the timetable engine.
Dataclass configurations for the greedy engines, simulated annealing,
substitute ranking and the shared exemption and calendar settings.
"""

from typing import Dict, Tuple
from enum import Enum
from dataclasses import dataclass, field, replace
import logging

from .core.constraint_types import ConstraintPriority
from .core.exemptions import ExemptionPolicy
from .core.problem_model import Weekday


class SchedulingAlgorithm(Enum):
    """Timetable generators available in the engine"""

    GREEDY = "greedy"
    GREEDY_PRIORITY = "greedy_priority"
    SIMULATED_ANNEALING = "simulated_annealing"


class AnnealingPreset(Enum):
    FAST = "fast"
    BALANCED = "balanced"
    THOROUGH = "thorough"


@dataclass
class GreedyConfig:
    """Configuration for slot scoring in the greedy engines"""

    baseline_score: int = 1000
    priority_penalties: Dict[ConstraintPriority, int] = field(
        default_factory=lambda: {
            ConstraintPriority.CRITICAL: 100,
            ConstraintPriority.HIGH: 50,
            ConstraintPriority.NORMAL: 20,
            ConstraintPriority.LOW: 10,
        }
    )
    default_penalty: int = 15  # soft constraints without a mapped priority

    def penalty_for(self, priority) -> int:
        return self.priority_penalties.get(priority, self.default_penalty)


@dataclass
class SoftConstraintWeights:
    """Weights of the soft terms in the annealing energy function"""

    minimize_teacher_ntps: int = 100
    minimize_student_ntps: int = 80
    even_distribution: int = 60
    preferred_time_slot: int = 40
    minimize_room_changes: int = 30
    balanced_workload: int = 50
    block_scheduling: int = 20
    availability_weight: int = 10
    enabled: bool = True

    @classmethod
    def default(cls) -> "SoftConstraintWeights":
        return cls()

    @classmethod
    def aggressive(cls) -> "SoftConstraintWeights":
        return cls(
            minimize_teacher_ntps=150,
            minimize_student_ntps=120,
            even_distribution=90,
            preferred_time_slot=60,
            minimize_room_changes=50,
            balanced_workload=80,
            block_scheduling=40,
            availability_weight=15,
        )

    @classmethod
    def relaxed(cls) -> "SoftConstraintWeights":
        return cls(
            minimize_teacher_ntps=50,
            minimize_student_ntps=40,
            even_distribution=30,
            preferred_time_slot=20,
            minimize_room_changes=15,
            balanced_workload=25,
            block_scheduling=10,
            availability_weight=5,
        )


@dataclass
class SimulatedAnnealingConfig:
    """Configuration for the simulated annealing engine"""

    initial_temperature: float = 100.0
    final_temperature: float = 0.1
    cooling_rate: float = 0.95
    iterations_per_temperature: int = 100
    max_iterations_without_improvement: int = 1000
    weights: SoftConstraintWeights = field(default_factory=SoftConstraintWeights)
    random_seed: int | None = None

    # Weight applied to each hard violation inside the energy
    hard_violation_weight: int = 10000

    def __post_init__(self):
        if not 0 < self.cooling_rate < 1:
            raise ValueError(f"cooling_rate must be in (0, 1), got {self.cooling_rate}")
        if self.final_temperature <= 0:
            raise ValueError("final_temperature must be positive")

    @classmethod
    def fast(cls) -> "SimulatedAnnealingConfig":
        return cls(
            initial_temperature=50.0,
            final_temperature=0.5,
            cooling_rate=0.90,
            iterations_per_temperature=50,
            max_iterations_without_improvement=500,
            weights=SoftConstraintWeights.relaxed(),
        )

    @classmethod
    def balanced(cls) -> "SimulatedAnnealingConfig":
        return cls()

    @classmethod
    def thorough(cls) -> "SimulatedAnnealingConfig":
        return cls(
            initial_temperature=150.0,
            final_temperature=0.05,
            cooling_rate=0.98,
            iterations_per_temperature=200,
            max_iterations_without_improvement=2000,
            weights=SoftConstraintWeights.aggressive(),
        )

    @classmethod
    def from_preset(
        cls, preset: "AnnealingPreset | str", random_seed: int | None = None
    ) -> "SimulatedAnnealingConfig":
        preset = AnnealingPreset(preset)
        factory = {
            AnnealingPreset.FAST: cls.fast,
            AnnealingPreset.BALANCED: cls.balanced,
            AnnealingPreset.THOROUGH: cls.thorough,
        }[preset]
        return replace(factory(), random_seed=random_seed)


@dataclass
class SubstitutionConfig:
    """Configuration for substitute teacher ranking"""

    minimum_score: int = 100
    reserve_subject_code: str = "sub"
    default_max_substitutions_per_week: int = 5

    # Points
    co_teacher_points: int = 250
    reserve_duty_points: int = 200
    qualified_points: int = 100
    informal_qualification_points: int = 50
    same_department_points: int = 50
    workload_points: int = 40
    workload_step: int = 4
    availability_points: int = 30
    experience_points_per_substitution: int = 5
    max_experience_points: int = 20


@dataclass
class SchedulingEngineConfig:
    """Main configuration for the timetable engine"""

    exemptions: ExemptionPolicy = field(default_factory=ExemptionPolicy)

    # Period ids treated as the lunch window by the lunch break rules
    lunch_periods: Tuple[int, ...] = (4, 5, 6)
    non_school_days: Tuple[Weekday, ...] = (Weekday.FRIDAY, Weekday.SATURDAY)

    greedy: GreedyConfig = field(default_factory=GreedyConfig)
    annealing: SimulatedAnnealingConfig = field(
        default_factory=SimulatedAnnealingConfig
    )
    substitution: SubstitutionConfig = field(default_factory=SubstitutionConfig)

    # Global settings
    enable_logging: bool = True
    log_level: str = "INFO"
    enable_profiling: bool = False


# Global configuration instance
config = SchedulingEngineConfig()


def get_logger(name: str) -> logging.Logger:
    """Get configured logger for the timetable engine"""
    logger = logging.getLogger(f"timetable_engine.{name}")
    if config.enable_logging and not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(getattr(logging, config.log_level))
    return logger

# timetable_engine/__init__.py

"""
Timetable Engine Package Initialization

Constraint-driven school timetable generation: a catalog of hard and soft
rules, a validator facade over them, greedy and simulated annealing
generators, and substitute teacher ranking for absences.
"""

from .config import (
    SchedulingEngineConfig,
    SchedulingAlgorithm,
    AnnealingPreset,
    SimulatedAnnealingConfig,
    SoftConstraintWeights,
    config,
    get_logger,
)

from .core import (
    SchedulingProblem,
    ScheduledLesson,
    SchedulingResult,
    ScheduleEditor,
    ConstraintRegistry,
    ExemptionPolicy,
    SolutionMetrics,
    Weekday,
)
from .constraints import ConstraintValidator
from .greedy import GreedyScheduler, PriorityGreedyScheduler
from .annealing import SimulatedAnnealingScheduler
from .substitution import SubstituteRanker

__version__ = "1.0.0"

# Package-level exports
__all__ = [
    # Configuration
    "SchedulingEngineConfig",
    "SchedulingAlgorithm",
    "AnnealingPreset",
    "SimulatedAnnealingConfig",
    "SoftConstraintWeights",
    "config",
    "get_logger",
    # Core components
    "SchedulingProblem",
    "ScheduledLesson",
    "SchedulingResult",
    "ScheduleEditor",
    "ConstraintRegistry",
    "ExemptionPolicy",
    "SolutionMetrics",
    "Weekday",
    # Engines
    "ConstraintValidator",
    "GreedyScheduler",
    "PriorityGreedyScheduler",
    "SimulatedAnnealingScheduler",
    "SubstituteRanker",
]

# Initialize package-level logger
logger = get_logger("main")
logger.info(f"Timetable Engine v{__version__} initialized")

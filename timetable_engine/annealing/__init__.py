# timetable_engine/annealing/__init__.py

"""
Simulated annealing timetable optimisation.
"""

from .annealer import AnnealingStats, SimulatedAnnealingScheduler
from .energy import (
    EnergyBreakdown,
    EnergyFunction,
    PreferredTimeOfDay,
    count_consecutive_violations,
    is_preferred_period,
    preferred_time_for,
)
from .initial_solution import build_initial_solution, would_create_class_gap
from .neighborhood import MoveType, NeighborhoodGenerator

__all__ = [
    "AnnealingStats",
    "SimulatedAnnealingScheduler",
    "EnergyBreakdown",
    "EnergyFunction",
    "PreferredTimeOfDay",
    "count_consecutive_violations",
    "is_preferred_period",
    "preferred_time_for",
    "build_initial_solution",
    "would_create_class_gap",
    "MoveType",
    "NeighborhoodGenerator",
]

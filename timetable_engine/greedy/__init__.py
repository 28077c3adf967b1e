# timetable_engine/greedy/__init__.py

"""
Greedy constructive timetable generators.
"""

from .base_scheduler import BaseGreedyScheduler, LessonInstance, build_instances
from .scheduler import GreedyScheduler, PriorityGreedyScheduler
from .scoring import SlotScorer

__all__ = [
    "BaseGreedyScheduler",
    "LessonInstance",
    "build_instances",
    "GreedyScheduler",
    "PriorityGreedyScheduler",
    "SlotScorer",
]

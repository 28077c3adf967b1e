# timetable_engine/substitution/__init__.py

"""
Substitute teacher ranking and assignment.
"""

from .models import (
    Absence,
    AbsenceStatus,
    AbsenceType,
    SubstituteCandidate,
    Substitution,
)
from .ranker import SubstituteRanker, week_start

__all__ = [
    "Absence",
    "AbsenceStatus",
    "AbsenceType",
    "SubstituteCandidate",
    "Substitution",
    "SubstituteRanker",
    "week_start",
]

# timetable_engine/substitution/models.py

"""
Data types of the substitution workflow: teacher absences, the substitutions
that cover them and the ranked candidates offered for each affected lesson.
"""

from typing import Any, Dict, Optional, Tuple
from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum

from ..core.problem_model import ScheduledLesson, Teacher, Weekday


class AbsenceType(Enum):
    SICK = "sick"
    PERSONAL = "personal"
    TRAINING = "training"
    OTHER = "other"


class AbsenceStatus(Enum):
    REPORTED = "reported"
    PARTIALLY_COVERED = "partially_covered"
    COVERED = "covered"


# Assumed length of a full school day when no time window is given
FULL_DAY_HOURS = 7.0


@dataclass
class Absence:
    """A teacher's absence on one date, optionally limited to a time window."""

    teacher_id: int
    date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    absence_type: AbsenceType = AbsenceType.SICK
    notes: Optional[str] = None
    status: AbsenceStatus = AbsenceStatus.REPORTED
    id: Optional[int] = None

    @property
    def weekday(self) -> Weekday:
        # date.weekday() starts at Monday, the timetable week at Sunday
        return Weekday((self.date.weekday() + 1) % 7)

    @property
    def is_partial(self) -> bool:
        return self.start_time is not None and self.end_time is not None

    @property
    def total_hours(self) -> float:
        if not self.is_partial:
            return FULL_DAY_HOURS
        start = self.start_time.hour * 60 + self.start_time.minute
        end = self.end_time.hour * 60 + self.end_time.minute
        return (end - start) / 60.0

    def is_same_absence(self, other: "Absence") -> bool:
        return self is other or (self.id is not None and self.id == other.id)


@dataclass
class Substitution:
    """A substitute teacher covering one scheduled lesson during an absence."""

    absence: Absence
    scheduled_lesson: ScheduledLesson
    substitute_teacher_id: Optional[int]
    notes: Optional[str] = None
    id: Optional[int] = None
    # Payroll hours, normally the length of the covered period
    hours_worked: float = 0.0

    @property
    def date(self) -> date:
        return self.absence.date

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "absence_id": self.absence.id,
            "teacher_id": self.absence.teacher_id,
            "date": self.date.isoformat(),
            "scheduled_lesson": self.scheduled_lesson.to_dict(),
            "substitute_teacher_id": self.substitute_teacher_id,
            "notes": self.notes,
            "hours_worked": self.hours_worked,
        }


@dataclass(frozen=True)
class SubstituteCandidate:
    """An eligible substitute with the score and reasons it was ranked by."""

    teacher: Teacher
    score: int
    reasons: Tuple[str, ...] = field(default_factory=tuple)
    is_qualified: bool = False
    is_same_department: bool = False
    is_co_teacher: bool = False
    is_on_reserve: bool = False
    substitutions_this_week: int = 0
    substitutions_this_month: int = 0
    hours_this_month: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "teacher_id": self.teacher.id,
            "teacher_name": self.teacher.full_name,
            "score": self.score,
            "reasons": list(self.reasons),
            "is_qualified": self.is_qualified,
            "is_same_department": self.is_same_department,
            "is_co_teacher": self.is_co_teacher,
            "is_on_reserve": self.is_on_reserve,
            "substitutions_this_week": self.substitutions_this_week,
            "substitutions_this_month": self.substitutions_this_month,
            "hours_this_month": self.hours_this_month,
        }

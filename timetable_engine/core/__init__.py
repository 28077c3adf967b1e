# timetable_engine/core/__init__.py

"""
Core data model, constraint catalog and result types.
"""

from .constraint_types import (
    ConstraintType,
    ConstraintCategory,
    ConstraintPriority,
    ConstraintDefinition,
    ConstraintResult,
    ConstraintViolation,
    ImportanceScale,
)
from .constraint_registry import ConstraintRegistry
from .exceptions import LockedLessonError, SchedulingError, UnknownEntityError
from .exemptions import DEFAULT_EXEMPTIONS, ExemptionPolicy
from .metrics import QualityMetrics, SolutionMetrics
from .problem_model import (
    Availability,
    AvailabilityTable,
    Lesson,
    Period,
    Room,
    ScheduledLesson,
    SchedulingProblem,
    SchoolClass,
    Subject,
    Teacher,
    Weekday,
    school_days,
)
from .solution import ScheduleEditor, SchedulingResult, SlotCandidate
from .validation import (
    ConflictSeverity,
    TimetableConflict,
    TimetableValidationResult,
    ValidationContext,
    ValidationResult,
)

__all__ = [
    "ConstraintType",
    "ConstraintCategory",
    "ConstraintPriority",
    "ConstraintDefinition",
    "ConstraintResult",
    "ConstraintViolation",
    "ImportanceScale",
    "ConstraintRegistry",
    "SchedulingError",
    "LockedLessonError",
    "UnknownEntityError",
    "ExemptionPolicy",
    "DEFAULT_EXEMPTIONS",
    "QualityMetrics",
    "SolutionMetrics",
    "Availability",
    "AvailabilityTable",
    "Lesson",
    "Period",
    "Room",
    "ScheduledLesson",
    "SchedulingProblem",
    "SchoolClass",
    "Subject",
    "Teacher",
    "Weekday",
    "school_days",
    "ScheduleEditor",
    "SchedulingResult",
    "SlotCandidate",
    "ConflictSeverity",
    "TimetableConflict",
    "TimetableValidationResult",
    "ValidationContext",
    "ValidationResult",
]

# timetable_engine/core/validation.py

"""
Validation context and result containers returned by the constraint
validator, for single placements and for whole timetables.
"""

from typing import Any, Dict, Iterable, List, Optional, Set
from dataclasses import dataclass, field
from enum import Enum

from .constraint_types import ConstraintViolation


def _normalize_codes(codes: Optional[Iterable[str]]) -> Optional[Set[str]]:
    if codes is None:
        return None
    return {code.strip().upper() for code in codes if code}


@dataclass
class ValidationContext:
    """
    Filters and switches for one validation call.

    When both an allow-list and a skip-list are given, the allow-list wins.
    """

    codes_to_check: Optional[Set[str]] = None
    codes_to_skip: Optional[Set[str]] = None
    include_soft: bool = True
    early_exit: bool = False

    # Scratch space for batch validation, keyed by "entity:id:property"
    cache: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.codes_to_check = _normalize_codes(self.codes_to_check)
        self.codes_to_skip = _normalize_codes(self.codes_to_skip)

    def should_check(self, code: str) -> bool:
        key = code.strip().upper()
        if self.codes_to_check:
            return key in self.codes_to_check
        if self.codes_to_skip:
            return key not in self.codes_to_skip
        return True


@dataclass
class ValidationResult:
    is_valid: bool = True
    hard_violations: List[ConstraintViolation] = field(default_factory=list)
    soft_violations: List[ConstraintViolation] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.hard_violations)

    @property
    def has_warnings(self) -> bool:
        return bool(self.soft_violations)

    def error_messages(self) -> List[str]:
        return [v.message for v in self.hard_violations]

    def warning_messages(self) -> List[str]:
        return [v.message for v in self.soft_violations]

    def error_codes(self) -> List[str]:
        return [v.constraint_code for v in self.hard_violations]

    def warning_codes(self) -> List[str]:
        return [v.constraint_code for v in self.soft_violations]

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Append the other result's violations; validity follows the errors."""
        self.hard_violations.extend(other.hard_violations)
        self.soft_violations.extend(other.soft_violations)
        self.is_valid = not self.has_errors
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "hard_violations": [v.to_dict() for v in self.hard_violations],
            "soft_violations": [v.to_dict() for v in self.soft_violations],
        }


class ConflictSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class TimetableConflict:
    scheduled_lesson_id: Optional[int]
    severity: ConflictSeverity
    messages: List[str] = field(default_factory=list)
    constraint_codes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scheduled_lesson_id": self.scheduled_lesson_id,
            "severity": self.severity.value,
            "messages": list(self.messages),
            "constraint_codes": list(self.constraint_codes),
        }


@dataclass
class TimetableValidationResult:
    """Per-lesson conflict report for an entire timetable."""

    is_valid: bool = True
    conflicts: List[TimetableConflict] = field(default_factory=list)
    total_lessons: int = 0

    @property
    def lessons_with_errors(self) -> int:
        return sum(1 for c in self.conflicts if c.severity == ConflictSeverity.ERROR)

    @property
    def lessons_with_warnings(self) -> int:
        return sum(
            1 for c in self.conflicts if c.severity == ConflictSeverity.WARNING
        )

    def all_error_messages(self) -> List[str]:
        return [
            message
            for c in self.conflicts
            if c.severity == ConflictSeverity.ERROR
            for message in c.messages
        ]

    def all_warning_messages(self) -> List[str]:
        return [
            message
            for c in self.conflicts
            if c.severity == ConflictSeverity.WARNING
            for message in c.messages
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "total_lessons": self.total_lessons,
            "lessons_with_errors": self.lessons_with_errors,
            "lessons_with_warnings": self.lessons_with_warnings,
            "conflicts": [c.to_dict() for c in self.conflicts],
        }

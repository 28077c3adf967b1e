# timetable_engine/core/constraint_types.py

"""
Common constraint types and definitions shared by the registry, the rule
functions and the scheduling engines.
"""

from __future__ import annotations
from typing import Any, Dict, FrozenSet, Optional
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum


class ConstraintType(Enum):
    HARD = "hard"
    SOFT = "soft"


class ConstraintCategory(Enum):
    CONFLICT = "conflict"
    AVAILABILITY = "availability"
    TIME = "time"
    RESOURCE = "resource"
    WORKLOAD = "workload"
    PEDAGOGICAL = "pedagogical"


class ConstraintPriority(Enum):
    """Weight class of a soft constraint when scoring candidate slots"""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"


class ImportanceScale:
    """
    Signed 7-point scale used by availability records.

    -3 means the slot must not be used, +3 means it must be used. Hard
    constraints only fire on -3, soft ones on -2 and -1.
    """

    MUST_NOT_SCHEDULE = -3
    STRONGLY_PREFER_NOT = -2
    MILDLY_PREFER_NOT = -1
    NEUTRAL = 0
    MILDLY_PREFER = 1
    STRONGLY_PREFER = 2
    MUST_SCHEDULE = 3

    _DESCRIPTIONS = {
        -3: "must NOT",
        -2: "strongly prefers NOT",
        -1: "mildly prefers NOT",
        0: "has no preference",
        1: "mildly prefers",
        2: "strongly prefers",
        3: "must",
    }

    @classmethod
    def describe(cls, importance: int) -> str:
        """Human readable strength used inside soft-constraint messages."""
        return cls._DESCRIPTIONS.get(importance, "has no preference")

    @classmethod
    def is_hard_unavailable(cls, importance: int) -> bool:
        return importance == cls.MUST_NOT_SCHEDULE

    @classmethod
    def is_soft_unavailable(cls, importance: int) -> bool:
        return cls.MUST_NOT_SCHEDULE < importance < cls.NEUTRAL


@dataclass(frozen=True)
class ConstraintDefinition:
    """
    Static description of one constraint rule. Behaviour lives in the rule
    dispatch table, not here.
    """

    code: str  # e.g. "HC-1"
    name: str
    constraint_type: ConstraintType
    category: ConstraintCategory
    description: str
    message_template: str

    # Names (compared case-insensitively) that this rule never applies to
    exempt_entities: FrozenSet[str] = frozenset()

    # Soft constraints only
    priority: Optional[ConstraintPriority] = None

    @property
    def is_hard(self) -> bool:
        return self.constraint_type == ConstraintType.HARD

    def format_message(self, *args: Any) -> str:
        return self.message_template.format(*args)

    def is_exempt(self, name: Optional[str]) -> bool:
        if not name:
            return False
        key = name.strip().lower()
        return any(key == exempt.strip().lower() for exempt in self.exempt_entities)


@dataclass
class ConstraintResult:
    """Outcome of evaluating a single rule against a single candidate."""

    constraint_code: str
    satisfied: bool = True
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, code: str, message: str = "") -> "ConstraintResult":
        return cls(constraint_code=code, satisfied=True, message=message)

    @classmethod
    def violated(cls, code: str, message: str, **details: Any) -> "ConstraintResult":
        return cls(
            constraint_code=code, satisfied=False, message=message, details=details
        )


@dataclass
class ConstraintViolation:
    constraint_code: str
    constraint_name: str
    constraint_type: ConstraintType
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    detected_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False
    )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["constraint_type"] = self.constraint_type.value
        data["detected_at"] = self.detected_at.isoformat()
        return data

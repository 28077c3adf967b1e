# timetable_engine/core/constraint_registry.py

"""
Constraint Registry - static catalog of the hard and soft scheduling rules.

The registry only describes rules (code, name, category, message template,
exempt names, priority). The behaviour for each code is registered separately
in timetable_engine.constraints.RULE_CHECKS.
"""

import logging
from typing import Dict, FrozenSet, List, Optional

from .constraint_types import (
    ConstraintCategory,
    ConstraintDefinition,
    ConstraintPriority,
    ConstraintType,
)
from .exemptions import DEFAULT_EXEMPTIONS, ExemptionPolicy

logger = logging.getLogger(__name__)


def _hard(
    code: str,
    name: str,
    category: ConstraintCategory,
    description: str,
    template: str,
    exempt: FrozenSet[str] = frozenset(),
) -> ConstraintDefinition:
    return ConstraintDefinition(
        code=code,
        name=name,
        constraint_type=ConstraintType.HARD,
        category=category,
        description=description,
        message_template=template,
        exempt_entities=frozenset(exempt),
    )


def _soft(
    code: str,
    name: str,
    category: ConstraintCategory,
    description: str,
    template: str,
    exempt: FrozenSet[str] = frozenset(),
    priority: ConstraintPriority = ConstraintPriority.NORMAL,
) -> ConstraintDefinition:
    return ConstraintDefinition(
        code=code,
        name=name,
        constraint_type=ConstraintType.SOFT,
        category=category,
        description=description,
        message_template=template,
        exempt_entities=frozenset(exempt),
        priority=priority,
    )


def build_catalog(policy: ExemptionPolicy) -> List[ConstraintDefinition]:
    """Build the ordered list of all rule definitions for an exemption policy."""
    interns = frozenset(policy.intern_teacher_names)
    special_classes = policy.special_class_names
    team_rooms = frozenset(policy.team_room_numbers)

    return [
        # --- Hard constraints ---
        _hard(
            "HC-1",
            "Teacher Double-Booking",
            ConstraintCategory.CONFLICT,
            "A teacher cannot teach two lessons at the same time",
            "Teacher {0} is already teaching {1} ({2}) at this time",
            interns,
        ),
        _hard(
            "HC-2",
            "Class Double-Booking",
            ConstraintCategory.CONFLICT,
            "A class cannot attend two lessons at the same time",
            "Class {0} is already scheduled for {1} ({2}) at this time",
            special_classes,
        ),
        _hard(
            "HC-3",
            "Room Double-Booking",
            ConstraintCategory.CONFLICT,
            "A room cannot host two lessons at the same time",
            "Room {0} is already occupied by {1} ({2})",
            team_rooms,
        ),
        _hard(
            "HC-4",
            "Teacher Absolute Unavailability",
            ConstraintCategory.AVAILABILITY,
            "Teacher is marked as unavailable (importance -3)",
            "Teacher {0} is unavailable at this time (Reason: {1})",
            interns,
        ),
        _hard(
            "HC-5",
            "Class Absolute Unavailability",
            ConstraintCategory.AVAILABILITY,
            "Class is marked as unavailable (importance -3)",
            "Class {0} is unavailable at this time (e.g., assembly, standardized testing)",
            special_classes,
        ),
        _hard(
            "HC-6",
            "Room Absolute Unavailability",
            ConstraintCategory.AVAILABILITY,
            "Room is marked as unavailable (importance -3)",
            "Room {0} is unavailable at this time (e.g., maintenance, lockdown)",
        ),
        _hard(
            "HC-7",
            "Subject Absolute Unavailability",
            ConstraintCategory.AVAILABILITY,
            "Subject must not be scheduled at this time (importance -3)",
            "Subject {0} should not be scheduled at this time",
        ),
        _hard(
            "HC-8",
            "Teacher Max Consecutive Periods",
            ConstraintCategory.TIME,
            "Teacher cannot exceed the configured run of consecutive periods",
            "Teacher {0} exceeds max consecutive periods ({1})",
            interns,
        ),
        _hard(
            "HC-9",
            "Class Max Consecutive Same Subject",
            ConstraintCategory.TIME,
            "Class cannot have the same subject for more than the configured run",
            "Class {0} exceeds max consecutive periods of {1} ({2})",
            special_classes,
        ),
        _hard(
            "HC-10",
            "Locked Lesson",
            ConstraintCategory.TIME,
            "Locked lessons cannot be moved or deleted",
            "Lesson for {0} ({1}) is locked and cannot be modified",
        ),
        _hard(
            "HC-11",
            "Teacher Max Periods Per Day",
            ConstraintCategory.WORKLOAD,
            "Teacher cannot exceed the maximum periods per day",
            "Teacher {0} exceeds maximum periods per day ({1})",
            interns,
        ),
        _hard(
            "HC-12",
            "Class Max Periods Per Day",
            ConstraintCategory.WORKLOAD,
            "Class cannot exceed the maximum periods per day",
            "Class {0} exceeds maximum periods per day ({1})",
            special_classes,
        ),
        # --- Soft constraints ---
        _soft(
            "SC-1",
            "Teacher Preference Unavailability",
            ConstraintCategory.AVAILABILITY,
            "Teacher prefers not to teach at this time (importance -2 or -1)",
            "Teacher {0} {1} to teach at this time",
            interns,
        ),
        _soft(
            "SC-2",
            "Class Preference Unavailability",
            ConstraintCategory.AVAILABILITY,
            "Class prefers not to be scheduled at this time (importance -2 or -1)",
            "Class {0} {1} to be scheduled at this time",
            special_classes,
        ),
        _soft(
            "SC-3",
            "Subject Time Preferences",
            ConstraintCategory.AVAILABILITY,
            "Subject prefers not to be scheduled at this time",
            "Subject {0} {1} to be scheduled at this time",
        ),
        _soft(
            "SC-4",
            "Room Preferences",
            ConstraintCategory.AVAILABILITY,
            "Room prefers not to be used at this time",
            "Room {0} {1} to be used at this time",
        ),
        _soft(
            "SC-5",
            "Teacher Lunch Break",
            ConstraintCategory.WORKLOAD,
            "Teacher should keep a lunch break free",
            "Teacher {0} may not have adequate lunch break",
            interns,
        ),
        _soft(
            "SC-6",
            "Class Lunch Break",
            ConstraintCategory.WORKLOAD,
            "Class should keep a lunch break free",
            "Class {0} may not have adequate lunch break",
            special_classes,
        ),
        _soft(
            "SC-7",
            "No Gaps in Class Schedule",
            ConstraintCategory.PEDAGOGICAL,
            "Class should not have free periods between lessons on the same day",
            "Class {0} creates a gap in the class schedule",
            priority=ConstraintPriority.HIGH,
        ),
        _soft(
            "SC-8",
            "Room Type Preference Mismatch",
            ConstraintCategory.RESOURCE,
            "Lesson should be held in a room of the required type",
            "Room is type '{0}' but lesson requires '{1}'",
        ),
        _soft(
            "SC-9",
            "Subject Preferred Room",
            ConstraintCategory.RESOURCE,
            "Subject should be taught in its preferred room",
            "Subject {0} prefers room {1}",
        ),
        _soft(
            "SC-10",
            "Teacher Min Periods Per Day",
            ConstraintCategory.WORKLOAD,
            "Teacher should reach the minimum periods per day",
            "Teacher {0} has fewer than minimum periods per day ({1})",
            interns,
        ),
        _soft(
            "SC-11",
            "Class Min Periods Per Day",
            ConstraintCategory.WORKLOAD,
            "Class should reach the minimum periods per day",
            "Class {0} has fewer than minimum periods per day ({1})",
            special_classes,
        ),
    ]


class ConstraintRegistry:
    """Immutable catalog of constraint definitions, indexed by code and category."""

    def __init__(self, policy: Optional[ExemptionPolicy] = None):
        self.policy = policy or DEFAULT_EXEMPTIONS
        catalog = build_catalog(self.policy)

        self._definitions: Dict[str, ConstraintDefinition] = {}
        self._category_constraints: Dict[ConstraintCategory, List[str]] = {}
        for definition in catalog:
            self._definitions[definition.code.upper()] = definition
            self._category_constraints.setdefault(definition.category, []).append(
                definition.code.upper()
            )

        logger.debug(
            f"Loaded {len(self._definitions)} constraint definitions across "
            f"{len(self._category_constraints)} categories"
        )

    def get_hard_constraints(self) -> List[ConstraintDefinition]:
        return [d for d in self._definitions.values() if d.is_hard]

    def get_soft_constraints(self) -> List[ConstraintDefinition]:
        return [d for d in self._definitions.values() if not d.is_hard]

    def get_all_constraints(self) -> List[ConstraintDefinition]:
        return list(self._definitions.values())

    def get_by_code(self, code: Optional[str]) -> Optional[ConstraintDefinition]:
        """Case-insensitive lookup; unknown codes return None."""
        if not code:
            return None
        return self._definitions.get(code.strip().upper())

    def get_by_category(
        self, category: ConstraintCategory
    ) -> List[ConstraintDefinition]:
        return [self._definitions[c] for c in self._category_constraints.get(category, [])]

    def codes(self) -> List[str]:
        return list(self._definitions.keys())

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and self.get_by_code(code) is not None

    def __len__(self) -> int:
        return len(self._definitions)

# timetable_engine/core/exemptions.py

"""
Exemption policy for synthetic entities that are allowed to appear in several
slots at once: placeholder intern teachers, reserve classes, team-teaching
classes and shared team rooms.
"""

from __future__ import annotations
from typing import FrozenSet, Iterable, Optional, TYPE_CHECKING
from dataclasses import dataclass, field

if TYPE_CHECKING:
    from .problem_model import Room, SchoolClass, Teacher


def _normalize(names: Iterable[str]) -> FrozenSet[str]:
    return frozenset(name.strip().lower() for name in names if name and name.strip())


def _matches(name: Optional[str], names: FrozenSet[str]) -> bool:
    return bool(name) and name.strip().lower() in _normalize(names)


@dataclass(frozen=True)
class ExemptionPolicy:
    """Sentinel names, compared case-insensitively after trimming."""

    intern_teacher_names: FrozenSet[str] = field(
        default_factory=lambda: frozenset({"xy"})
    )
    reserve_class_names: FrozenSet[str] = field(
        default_factory=lambda: frozenset({"v-res"})
    )
    team_class_names: FrozenSet[str] = field(
        default_factory=lambda: frozenset({"Team"})
    )
    team_room_numbers: FrozenSet[str] = field(
        default_factory=lambda: frozenset({"Teamraum"})
    )

    def is_intern_teacher(self, teacher: Optional["Teacher"]) -> bool:
        if teacher is None:
            return False
        return _matches(teacher.first_name, self.intern_teacher_names) or _matches(
            teacher.full_name, self.intern_teacher_names
        )

    def is_reserve_class(self, school_class: Optional["SchoolClass"]) -> bool:
        return school_class is not None and _matches(
            school_class.name, self.reserve_class_names
        )

    def is_team_class(self, school_class: Optional["SchoolClass"]) -> bool:
        return school_class is not None and _matches(
            school_class.name, self.team_class_names
        )

    def is_special_class(self, school_class: Optional["SchoolClass"]) -> bool:
        return self.is_reserve_class(school_class) or self.is_team_class(school_class)

    def is_team_room(self, room: Optional["Room"]) -> bool:
        return room is not None and _matches(room.room_number, self.team_room_numbers)

    @property
    def special_class_names(self) -> FrozenSet[str]:
        return frozenset(self.reserve_class_names) | frozenset(self.team_class_names)


DEFAULT_EXEMPTIONS = ExemptionPolicy()

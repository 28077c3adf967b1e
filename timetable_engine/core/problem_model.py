# timetable_engine/core/problem_model.py

"""
In-memory snapshot of everything a scheduling run reads: teachers, classes,
rooms, subjects, lessons, periods and the four availability tables.

The snapshot is supplied fully hydrated by the storage collaborator and is
treated as read-only for the duration of a run.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Set, Tuple, Any
from dataclasses import dataclass, field
from datetime import time
from enum import IntEnum
import logging

logger = logging.getLogger(__name__)


class Weekday(IntEnum):
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @property
    def label(self) -> str:
        return self.name.capitalize()


def school_days(non_school_days: Iterable[Weekday]) -> List[Weekday]:
    """Every weekday in calendar order except the configured days off."""
    excluded = set(non_school_days)
    return [day for day in Weekday if day not in excluded]


@dataclass
class Teacher:
    id: int
    first_name: str
    last_name: Optional[str] = None
    department_id: Optional[int] = None

    # Daily workload limits
    min_periods_per_day: Optional[int] = None
    max_periods_per_day: Optional[int] = None
    min_lunch_break: Optional[int] = None
    max_consecutive_periods: Optional[int] = None

    is_active: bool = True

    # Substitution profile
    available_for_substitution: bool = True
    max_substitutions_per_week: Optional[int] = 5
    substitution_qualification_notes: Optional[str] = None
    qualified_subject_ids: Set[int] = field(default_factory=set)

    @property
    def full_name(self) -> str:
        if self.last_name:
            return f"{self.first_name} {self.last_name}".strip()
        return self.first_name


@dataclass
class SchoolClass:
    id: int
    name: str
    min_periods_per_day: Optional[int] = None
    max_periods_per_day: Optional[int] = None
    min_lunch_break: Optional[int] = None
    max_consecutive_subjects: Optional[int] = None
    student_count: int = 0
    is_active: bool = True


@dataclass
class Room:
    id: int
    room_number: str
    name: str = ""
    room_type: Optional[str] = None
    capacity: int = 0
    is_active: bool = True


@dataclass
class Subject:
    id: int
    code: str
    name: str
    category: Optional[str] = None
    preferred_room_id: Optional[int] = None


@dataclass
class Period:
    id: int
    period_number: int
    name: str = ""
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_break: bool = False

    def overlaps(self, start: time, end: time) -> bool:
        if self.start_time is None or self.end_time is None:
            return False
        return self.start_time < end and self.end_time > start

    @property
    def duration_hours(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        start = self.start_time.hour * 60 + self.start_time.minute
        end = self.end_time.hour * 60 + self.end_time.minute
        return max(0, end - start) / 60.0


@dataclass
class Lesson:
    """
    A weekly teaching requirement. Co-teaching, joint classes and
    multi-subject lessons are all legal, so every association is a list.
    """

    id: int
    teachers: List[Teacher] = field(default_factory=list)
    classes: List[SchoolClass] = field(default_factory=list)
    subjects: List[Subject] = field(default_factory=list)
    frequency_per_week: int = 1
    duration: int = 1
    required_room_type: Optional[str] = None
    is_active: bool = True

    @property
    def primary_teacher(self) -> Optional[Teacher]:
        return self.teachers[0] if self.teachers else None

    @property
    def primary_class(self) -> Optional[SchoolClass]:
        return self.classes[0] if self.classes else None

    @property
    def primary_subject(self) -> Optional[Subject]:
        return self.subjects[0] if self.subjects else None

    def has_teacher(self, teacher_id: int) -> bool:
        return any(t.id == teacher_id for t in self.teachers)

    def has_class(self, class_id: int) -> bool:
        return any(c.id == class_id for c in self.classes)

    def has_subject(self, subject_id: int) -> bool:
        return any(s.id == subject_id for s in self.subjects)

    def describe(self) -> Tuple[str, str, str]:
        """(subject, class, teacher) names used in engine warnings."""
        subject = self.primary_subject.name if self.primary_subject else None
        school_class = self.primary_class.name if self.primary_class else None
        teacher = self.primary_teacher.full_name if self.primary_teacher else None
        return str(subject), str(school_class), str(teacher)


@dataclass
class Availability:
    """One (entity, day, period) importance mark on the -3..+3 scale."""

    entity_id: int
    day: Weekday
    period_id: int
    importance: int
    reason: Optional[str] = None
    id: Optional[int] = None


class AvailabilityTable:
    """Lookup of availability records keyed by (entity, day, period)."""

    def __init__(self, records: Iterable[Availability] = ()):
        self._records: Dict[Tuple[int, Weekday, int], Availability] = {}
        for record in records:
            key = (record.entity_id, Weekday(record.day), record.period_id)
            self._records.setdefault(key, record)

    def lookup(
        self, entity_id: int, day: Weekday, period_id: int
    ) -> Optional[Availability]:
        return self._records.get((entity_id, day, period_id))

    def __len__(self) -> int:
        return len(self._records)


@dataclass(frozen=True)
class ScheduledLesson:
    """
    A lesson placed at (day, period) with zero or one primary room plus any
    number of additional rooms. Instances are immutable; moves produce new
    placements via dataclasses.replace.
    """

    lesson: Lesson
    day: Weekday
    period_id: int
    room_id: Optional[int] = None
    additional_room_ids: Tuple[int, ...] = ()
    id: Optional[int] = None
    timetable_id: Optional[int] = None
    week_number: Optional[int] = None
    is_locked: bool = False

    @property
    def lesson_id(self) -> int:
        return self.lesson.id

    def all_room_ids(self) -> List[int]:
        """Primary room followed by additional rooms, without duplicates."""
        room_ids: List[int] = []
        if self.room_id is not None:
            room_ids.append(self.room_id)
        for room_id in self.additional_room_ids:
            if room_id not in room_ids:
                room_ids.append(room_id)
        return room_ids

    def uses_room(self, room_id: int) -> bool:
        return self.room_id == room_id or room_id in self.additional_room_ids

    def same_slot(self, other: "ScheduledLesson") -> bool:
        return self.day == other.day and self.period_id == other.period_id

    def is_same_placement(self, other: "ScheduledLesson") -> bool:
        return self is other or (self.id is not None and self.id == other.id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "lesson_id": self.lesson.id,
            "day": self.day.label,
            "period_id": self.period_id,
            "room_id": self.room_id,
            "additional_room_ids": list(self.additional_room_ids),
            "timetable_id": self.timetable_id,
            "week_number": self.week_number,
            "is_locked": self.is_locked,
        }


@dataclass
class SchedulingProblem:
    """Read-only entity snapshot consumed by the validator and the engines."""

    teachers: List[Teacher] = field(default_factory=list)
    classes: List[SchoolClass] = field(default_factory=list)
    rooms: List[Room] = field(default_factory=list)
    subjects: List[Subject] = field(default_factory=list)
    lessons: List[Lesson] = field(default_factory=list)
    periods: List[Period] = field(default_factory=list)

    teacher_availabilities: List[Availability] = field(default_factory=list)
    class_availabilities: List[Availability] = field(default_factory=list)
    room_availabilities: List[Availability] = field(default_factory=list)
    subject_availabilities: List[Availability] = field(default_factory=list)

    # Previously committed placements, across timetables
    scheduled_lessons: List[ScheduledLesson] = field(default_factory=list)

    def __post_init__(self):
        self.reindex()

    def reindex(self):
        """Rebuild lookup tables after the entity lists were replaced."""
        self._teachers = {t.id: t for t in self.teachers}
        self._classes = {c.id: c for c in self.classes}
        self._rooms = {r.id: r for r in self.rooms}
        self._subjects = {s.id: s for s in self.subjects}
        self._lessons = {l.id: l for l in self.lessons}
        self._periods = {p.id: p for p in self.periods}

        self.teacher_availability = AvailabilityTable(self.teacher_availabilities)
        self.class_availability = AvailabilityTable(self.class_availabilities)
        self.room_availability = AvailabilityTable(self.room_availabilities)
        self.subject_availability = AvailabilityTable(self.subject_availabilities)

        logger.debug(
            f"Indexed problem: {len(self.teachers)} teachers, {len(self.classes)} classes, "
            f"{len(self.rooms)} rooms, {len(self.lessons)} lessons, {len(self.periods)} periods"
        )

    def get_teacher(self, teacher_id: Optional[int]) -> Optional[Teacher]:
        return self._teachers.get(teacher_id) if teacher_id is not None else None

    def get_class(self, class_id: Optional[int]) -> Optional[SchoolClass]:
        return self._classes.get(class_id) if class_id is not None else None

    def get_room(self, room_id: Optional[int]) -> Optional[Room]:
        return self._rooms.get(room_id) if room_id is not None else None

    def get_subject(self, subject_id: Optional[int]) -> Optional[Subject]:
        return self._subjects.get(subject_id) if subject_id is not None else None

    def get_lesson(self, lesson_id: Optional[int]) -> Optional[Lesson]:
        return self._lessons.get(lesson_id) if lesson_id is not None else None

    def get_period(self, period_id: Optional[int]) -> Optional[Period]:
        return self._periods.get(period_id) if period_id is not None else None

    def active_lessons(self) -> List[Lesson]:
        return [lesson for lesson in self.lessons if lesson.is_active]

    def active_rooms(self) -> List[Room]:
        return [room for room in self.rooms if room.is_active]

    def teaching_periods(self) -> List[Period]:
        """Non-break periods in timetable order."""
        return sorted(
            (p for p in self.periods if not p.is_break), key=lambda p: p.period_number
        )

    def timetable_lessons(self, timetable_id: int) -> List[ScheduledLesson]:
        return [sl for sl in self.scheduled_lessons if sl.timetable_id == timetable_id]

    def next_timetable_id(self) -> int:
        used = [sl.timetable_id for sl in self.scheduled_lessons if sl.timetable_id]
        return max(used, default=0) + 1

    def to_dict(self) -> Dict[str, Any]:
        """Summary counts for logging and diagnostics."""
        return {
            "teachers": len(self.teachers),
            "classes": len(self.classes),
            "rooms": len(self.rooms),
            "subjects": len(self.subjects),
            "lessons": len(self.lessons),
            "periods": len(self.periods),
            "availabilities": sum(
                len(table)
                for table in (
                    self.teacher_availability,
                    self.class_availability,
                    self.room_availability,
                    self.subject_availability,
                )
            ),
            "scheduled_lessons": len(self.scheduled_lessons),
        }

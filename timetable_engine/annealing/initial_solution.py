# timetable_engine/annealing/initial_solution.py

"""
Greedy starting point for simulated annealing.

Lessons with fewer weekly occurrences go first, and among those the ones
needing a special room. Each occurrence takes the first (day, period) where
a large enough room is free, the first teacher and first class are free, and
the class would not be left with a gap. Lessons without a teacher or class
are never placed.
"""

from typing import List, Optional, Sequence
import logging

from ..core.problem_model import (
    Lesson,
    Period,
    Room,
    ScheduledLesson,
    Weekday,
)

logger = logging.getLogger(__name__)


def _at_slot(
    schedule: Sequence[ScheduledLesson], day: Weekday, period_id: int
) -> List[ScheduledLesson]:
    return [sl for sl in schedule if sl.day == day and sl.period_id == period_id]


def would_create_class_gap(
    class_id: int, day: Weekday, period_id: int, schedule: Sequence[ScheduledLesson]
) -> bool:
    existing = [
        sl.period_id
        for sl in schedule
        if sl.day == day and sl.lesson.has_class(class_id)
    ]
    if not existing:
        return False

    period_ids = existing + [period_id]
    return max(period_ids) - min(period_ids) > len(period_ids) - 1


def _free_room(
    lesson: Lesson,
    rooms: Sequence[Room],
    occupied: List[ScheduledLesson],
) -> Optional[Room]:
    needed = lesson.primary_class.student_count if lesson.primary_class else 0
    for room in rooms:
        if room.capacity < needed:
            continue
        if not any(sl.room_id == room.id for sl in occupied):
            return room
    return None


def _place(
    lesson: Lesson,
    days: Sequence[Weekday],
    periods: Sequence[Period],
    rooms: Sequence[Room],
    schedule: List[ScheduledLesson],
    timetable_id: Optional[int],
) -> Optional[ScheduledLesson]:
    teacher = lesson.primary_teacher
    school_class = lesson.primary_class
    if teacher is None or school_class is None:
        return None

    for day in days:
        for period in periods:
            occupied = _at_slot(schedule, day, period.id)
            room = _free_room(lesson, rooms, occupied)
            if room is None:
                continue

            if any(sl.lesson.has_teacher(teacher.id) for sl in occupied):
                continue
            if any(sl.lesson.has_class(school_class.id) for sl in occupied):
                continue
            if would_create_class_gap(school_class.id, day, period.id, schedule):
                continue

            return ScheduledLesson(
                lesson=lesson,
                day=day,
                period_id=period.id,
                room_id=room.id,
                timetable_id=timetable_id,
            )
    return None


def build_initial_solution(
    lessons: Sequence[Lesson],
    days: Sequence[Weekday],
    periods: Sequence[Period],
    rooms: Sequence[Room],
    timetable_id: Optional[int] = None,
) -> List[ScheduledLesson]:
    ordered = sorted(
        lessons,
        key=lambda l: (
            l.frequency_per_week,
            not (l.required_room_type and l.required_room_type.strip()),
        ),
    )

    schedule: List[ScheduledLesson] = []
    for lesson in ordered:
        for _ in range(lesson.frequency_per_week):
            placement = _place(lesson, days, periods, rooms, schedule, timetable_id)
            if placement is not None:
                schedule.append(placement)

    logger.debug(
        f"Initial solution placed {len(schedule)} of "
        f"{sum(l.frequency_per_week for l in lessons)} lesson instances"
    )
    return schedule

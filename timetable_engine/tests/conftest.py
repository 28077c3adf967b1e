# timetable_engine/tests/conftest.py

"""
Pytest configuration and fixtures for timetable engine tests.

The fixtures describe a small school: four teachers (one of them the "xy"
intern placeholder), two regular classes plus the reserve and team classes,
four rooms and eight teaching periods starting at 08:00.
"""

import pytest
import logging
from datetime import time

from timetable_engine.config import SchedulingEngineConfig
from timetable_engine.constraints.constraint_validator import ConstraintValidator
from timetable_engine.core.constraint_registry import ConstraintRegistry
from timetable_engine.core.problem_model import (
    Lesson,
    Period,
    Room,
    SchedulingProblem,
    SchoolClass,
    Subject,
    Teacher,
)

# Configure logging for tests
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


@pytest.fixture
def periods():
    """Eight 45 minute teaching periods, 08:00 to 15:45"""
    return [
        Period(
            id=number,
            period_number=number,
            name=f"Period {number}",
            start_time=time(7 + number, 0),
            end_time=time(7 + number, 45),
        )
        for number in range(1, 9)
    ]


@pytest.fixture
def teachers():
    return {
        "smith": Teacher(
            id=1,
            first_name="J.",
            last_name="Smith",
            department_id=10,
            qualified_subject_ids={1},
        ),
        "jones": Teacher(
            id=2,
            first_name="A.",
            last_name="Jones",
            department_id=10,
            qualified_subject_ids={1, 2},
        ),
        "brown": Teacher(
            id=3,
            first_name="B.",
            last_name="Brown",
            department_id=20,
            substitution_qualification_notes="Studied mathematics",
        ),
        "intern": Teacher(id=4, first_name="xy"),
    }


@pytest.fixture
def classes():
    return {
        "7a": SchoolClass(id=1, name="7A", student_count=25),
        "7b": SchoolClass(id=2, name="7B", student_count=28),
        "reserve": SchoolClass(id=3, name="v-res"),
        "team": SchoolClass(id=4, name="Team"),
    }


@pytest.fixture
def rooms():
    return {
        "101": Room(id=1, room_number="101", room_type="Classroom", capacity=30),
        "102": Room(id=2, room_number="102", room_type="Classroom", capacity=30),
        "gym": Room(id=3, room_number="GYM", room_type="Gym", capacity=60),
        "teamraum": Room(id=4, room_number="Teamraum", room_type="Classroom", capacity=40),
    }


@pytest.fixture
def subjects():
    return {
        "math": Subject(id=1, code="MATH", name="Mathematics", category="Mathematics"),
        "english": Subject(id=2, code="ENG", name="English", category="Language"),
        "art": Subject(id=3, code="ART", name="Art", category="Arts"),
        "sport": Subject(id=4, code="PE", name="Sport", category="Physical Education"),
        "reserve": Subject(id=5, code="sub", name="Substitution Reserve"),
    }


def _as_list(value):
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


@pytest.fixture
def make_lesson():
    """Factory for lessons; single entities or lists are both accepted"""

    def _make(lesson_id, teacher=None, school_class=None, subject=None, **kwargs):
        return Lesson(
            id=lesson_id,
            teachers=_as_list(teacher),
            classes=_as_list(school_class),
            subjects=_as_list(subject),
            **kwargs,
        )

    return _make


@pytest.fixture
def make_problem(teachers, classes, rooms, subjects, periods):
    """Factory for a problem snapshot over the fixture school"""

    def _make(lessons=(), **overrides):
        data = dict(
            teachers=list(teachers.values()),
            classes=list(classes.values()),
            rooms=list(rooms.values()),
            subjects=list(subjects.values()),
            periods=list(periods),
            lessons=list(lessons),
        )
        data.update(overrides)
        return SchedulingProblem(**data)

    return _make


@pytest.fixture
def registry():
    return ConstraintRegistry()


@pytest.fixture
def engine_config():
    """Fresh engine configuration with profiling disabled"""
    return SchedulingEngineConfig()


@pytest.fixture
def make_validator(registry):
    def _make(problem, **kwargs):
        return ConstraintValidator(problem, registry, **kwargs)

    return _make

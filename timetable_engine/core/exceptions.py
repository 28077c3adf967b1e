# timetable_engine/core/exceptions.py

"""
Exceptions raised at the explicit edit and lookup boundaries of the engine.
Constraint violations are never raised; they are returned as results.
"""

from typing import Any, Optional


class SchedulingError(Exception):
    """Base class for scheduling engine errors"""


class LockedLessonError(SchedulingError):
    """Raised when an edit touches a placement that is locked"""

    def __init__(self, message: str, scheduled_lesson_id: Optional[int] = None):
        super().__init__(message)
        self.scheduled_lesson_id = scheduled_lesson_id


class UnknownEntityError(SchedulingError, KeyError):
    """Raised when a lookup by id finds nothing in the problem snapshot"""

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"Unknown {entity}: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id

    def __str__(self) -> str:
        return self.args[0]

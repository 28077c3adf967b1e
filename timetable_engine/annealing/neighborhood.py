# timetable_engine/annealing/neighborhood.py

"""
Neighbourhood moves for simulated annealing.

Every move returns a new schedule list and leaves the one it was given
untouched; placements are replaced, never mutated.
"""

from typing import List, Sequence, Tuple
from dataclasses import replace
from enum import Enum

import numpy as np

from ..core.problem_model import Period, Room, ScheduledLesson, Weekday


class MoveType(Enum):
    SWAP = "swap"
    MOVE = "move"
    CHANGE_ROOM = "change_room"


class NeighborhoodGenerator:
    """Draws one random move per call from the run's generator."""

    SWAP_PROBABILITY = 0.4
    MOVE_PROBABILITY = 0.3

    def __init__(
        self,
        days: Sequence[Weekday],
        periods: Sequence[Period],
        rooms: Sequence[Room],
        rng: np.random.Generator,
    ):
        self.days = list(days)
        self.periods = list(periods)
        self.rooms = list(rooms)
        self.rng = rng

    def neighbor(
        self, schedule: Sequence[ScheduledLesson]
    ) -> Tuple[List[ScheduledLesson], MoveType]:
        neighbor = list(schedule)
        draw = self.rng.random()

        if draw < self.SWAP_PROBABILITY:
            move = MoveType.SWAP
        elif draw < self.SWAP_PROBABILITY + self.MOVE_PROBABILITY:
            move = MoveType.MOVE
        else:
            move = MoveType.CHANGE_ROOM

        if not neighbor:
            return neighbor, move

        if move == MoveType.SWAP:
            self.swap(neighbor)
        elif move == MoveType.MOVE:
            self.move(neighbor)
        else:
            self.change_room(neighbor)
        return neighbor, move

    def swap(self, neighbor: List[ScheduledLesson]):
        """Exchange the day, period and room of two distinct placements."""
        if len(neighbor) < 2:
            return
        first = int(self.rng.integers(len(neighbor)))
        second = int(self.rng.integers(len(neighbor)))
        while second == first:
            second = int(self.rng.integers(len(neighbor)))

        a, b = neighbor[first], neighbor[second]
        neighbor[first] = replace(a, day=b.day, period_id=b.period_id, room_id=b.room_id)
        neighbor[second] = replace(b, day=a.day, period_id=a.period_id, room_id=a.room_id)

    def move(self, neighbor: List[ScheduledLesson]):
        if not self.days or not self.periods:
            return
        index = int(self.rng.integers(len(neighbor)))
        day = self.days[int(self.rng.integers(len(self.days)))]
        period = self.periods[int(self.rng.integers(len(self.periods)))]
        neighbor[index] = replace(neighbor[index], day=day, period_id=period.id)

    def change_room(self, neighbor: List[ScheduledLesson]):
        if not self.rooms:
            return
        index = int(self.rng.integers(len(neighbor)))
        placement = neighbor[index]

        suitable = self.suitable_rooms(placement)
        if suitable:
            room = suitable[int(self.rng.integers(len(suitable)))]
            neighbor[index] = replace(placement, room_id=room.id)

    def suitable_rooms(self, placement: ScheduledLesson) -> List[Room]:
        """Rooms large enough for the lesson's first class."""
        school_class = placement.lesson.primary_class
        needed = school_class.student_count if school_class else 0
        return [room for room in self.rooms if room.capacity >= needed]

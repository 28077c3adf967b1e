# timetable_engine/greedy/scoring.py

"""
Slot scoring for the greedy engines.

A feasible slot starts from the baseline score and loses a priority-weighted
penalty for every soft constraint it violates. Scoring never blocks a
placement; feasibility is decided by the hard constraints alone.
"""

from typing import Iterable, List, Optional

from ..config import GreedyConfig
from ..constraints.constraint_validator import ConstraintValidator
from ..core.problem_model import ScheduledLesson
from ..core.solution import SlotCandidate


class SlotScorer:
    """Builds immutable SlotCandidate values for feasible placements."""

    def __init__(
        self,
        validator: ConstraintValidator,
        greedy_config: Optional[GreedyConfig] = None,
        record_reasons: bool = False,
    ):
        self.validator = validator
        self.greedy_config = greedy_config or GreedyConfig()
        self.record_reasons = record_reasons

    def penalty_for_code(self, code: str) -> int:
        definition = self.validator.registry.get_by_code(code)
        priority = definition.priority if definition else None
        return self.greedy_config.penalty_for(priority)

    def score(
        self, candidate: ScheduledLesson, schedule: Iterable[ScheduledLesson]
    ) -> SlotCandidate:
        result = self.validator.validate_soft(candidate, schedule)

        score = self.greedy_config.baseline_score
        reasons: List[str] = []
        for violation in result.soft_violations:
            penalty = self.penalty_for_code(violation.constraint_code)
            score -= penalty
            if self.record_reasons:
                reasons.append(f"{violation.constraint_name} (-{penalty})")

        return SlotCandidate(
            day=candidate.day,
            period_id=candidate.period_id,
            room_id=candidate.room_id,
            score=score,
            reasons=tuple(reasons),
        )

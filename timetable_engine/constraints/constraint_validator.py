# timetable_engine/constraints/constraint_validator.py

"""
Constraint Validator - facade that evaluates candidate placements against the
hard and soft rules of the registry.

Validation never raises for a violated rule: violations are collected into
ValidationResult objects. Rules run in catalog order, each returning on its
first violation, so a result holds at most one violation per code.
"""

from typing import Iterable, List, Optional, Sequence
import logging

from ..config import config
from ..core.constraint_registry import ConstraintRegistry
from ..core.constraint_types import (
    ConstraintDefinition,
    ConstraintResult,
    ConstraintViolation,
)
from ..core.exemptions import ExemptionPolicy
from ..core.problem_model import ScheduledLesson, SchedulingProblem, Weekday
from ..core.validation import (
    ConflictSeverity,
    TimetableConflict,
    TimetableValidationResult,
    ValidationContext,
    ValidationResult,
)
from ..utils.logging import get_logger as get_scheduling_logger, log_operation
from .base_constraint import RuleContext
from .rule_table import RULE_CHECKS

logger = logging.getLogger(__name__)


class ConstraintValidator:
    """
    Validates placements against a problem snapshot.

    The exemption policy defaults to the registry's policy, and the lunch
    window defaults to the engine configuration.
    """

    def __init__(
        self,
        problem: SchedulingProblem,
        registry: Optional[ConstraintRegistry] = None,
        policy: Optional[ExemptionPolicy] = None,
        lunch_periods: Optional[Sequence[int]] = None,
    ):
        self.problem = problem
        self.policy = policy or (registry.policy if registry else config.exemptions)
        self.registry = registry or ConstraintRegistry(self.policy)
        self.lunch_periods = tuple(
            lunch_periods if lunch_periods is not None else config.lunch_periods
        )

    def _context_for(
        self, candidate: ScheduledLesson, existing_schedule: Iterable[ScheduledLesson]
    ) -> RuleContext:
        return RuleContext.build(
            candidate,
            existing_schedule,
            self.problem,
            self.registry,
            self.policy,
            self.lunch_periods,
        )

    def _run(
        self,
        definitions: List[ConstraintDefinition],
        rule_ctx: RuleContext,
        context: ValidationContext,
        stop_on_first: bool,
    ) -> List[ConstraintViolation]:
        violations: List[ConstraintViolation] = []
        for definition in definitions:
            if not context.should_check(definition.code):
                continue

            outcome = RULE_CHECKS[definition.code](rule_ctx)
            if outcome.satisfied:
                continue

            violations.append(
                ConstraintViolation(
                    constraint_code=definition.code,
                    constraint_name=definition.name,
                    constraint_type=definition.constraint_type,
                    message=outcome.message,
                    details=dict(outcome.details),
                )
            )
            if stop_on_first:
                break
        return violations

    def validate_hard(
        self,
        candidate: ScheduledLesson,
        existing_schedule: Iterable[ScheduledLesson],
        context: Optional[ValidationContext] = None,
    ) -> ValidationResult:
        context = context or ValidationContext()
        rule_ctx = self._context_for(candidate, existing_schedule)

        violations = self._run(
            self.registry.get_hard_constraints(), rule_ctx, context, context.early_exit
        )
        return ValidationResult(is_valid=not violations, hard_violations=violations)

    def validate_soft(
        self,
        candidate: ScheduledLesson,
        existing_schedule: Iterable[ScheduledLesson],
        context: Optional[ValidationContext] = None,
    ) -> ValidationResult:
        context = context or ValidationContext()
        if not context.include_soft:
            return ValidationResult(is_valid=True)

        rule_ctx = self._context_for(candidate, existing_schedule)
        violations = self._run(
            self.registry.get_soft_constraints(), rule_ctx, context, False
        )
        return ValidationResult(is_valid=True, soft_violations=violations)

    def validate_all(
        self,
        candidate: ScheduledLesson,
        existing_schedule: Iterable[ScheduledLesson],
        context: Optional[ValidationContext] = None,
    ) -> ValidationResult:
        """Hard rules first; soft rules are skipped only on early exit with errors."""
        context = context or ValidationContext()
        existing = list(existing_schedule)

        result = self.validate_hard(candidate, existing, context)
        if not context.early_exit or not result.has_errors:
            result.merge(self.validate_soft(candidate, existing, context))
        return result

    def validate_one(
        self,
        code: str,
        candidate: ScheduledLesson,
        existing_schedule: Iterable[ScheduledLesson],
        context: Optional[ValidationContext] = None,
    ) -> ConstraintResult:
        check = RULE_CHECKS.get(code.strip().upper()) if code else None
        if check is None:
            return ConstraintResult.ok(code, f"Unknown constraint code: {code}")
        return check(self._context_for(candidate, existing_schedule))

    @log_operation("validate_timetable")
    def validate_timetable(
        self, timetable_id: int, context: Optional[ValidationContext] = None
    ) -> TimetableValidationResult:
        """Validate every placement of a timetable against all the others."""
        context = context or ValidationContext()
        placements = self.problem.timetable_lessons(timetable_id)
        result = TimetableValidationResult(total_lessons=len(placements))

        for index, placement in enumerate(placements):
            others = placements[:index] + placements[index + 1 :]
            validation = self.validate_all(placement, others, context)

            if validation.has_errors:
                result.conflicts.append(
                    TimetableConflict(
                        scheduled_lesson_id=placement.id,
                        severity=ConflictSeverity.ERROR,
                        messages=validation.error_messages(),
                        constraint_codes=validation.error_codes(),
                    )
                )
            elif validation.has_warnings:
                result.conflicts.append(
                    TimetableConflict(
                        scheduled_lesson_id=placement.id,
                        severity=ConflictSeverity.WARNING,
                        messages=validation.warning_messages(),
                        constraint_codes=validation.warning_codes(),
                    )
                )

        result.is_valid = result.lessons_with_errors == 0
        get_scheduling_logger().log_constraint_violations(
            [c.to_dict() for c in result.conflicts if c.severity == ConflictSeverity.ERROR]
        )
        logger.info(
            f"Validated timetable {timetable_id}: {result.total_lessons} lessons, "
            f"{result.lessons_with_errors} with errors, "
            f"{result.lessons_with_warnings} with warnings"
        )
        return result

    def can_schedule_at(
        self,
        lesson_id: int,
        day: Weekday,
        period_id: int,
        room_id: Optional[int],
        existing_schedule: Iterable[ScheduledLesson],
    ) -> bool:
        lesson = self.problem.get_lesson(lesson_id)
        if lesson is None:
            return False

        candidate = ScheduledLesson(
            lesson=lesson, day=Weekday(day), period_id=period_id, room_id=room_id
        )
        context = ValidationContext(include_soft=False, early_exit=True)
        return self.validate_hard(candidate, existing_schedule, context).is_valid

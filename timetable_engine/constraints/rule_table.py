# timetable_engine/constraints/rule_table.py

"""
Dispatch table from constraint code to rule function. The catalog in
core.constraint_registry describes the same codes.
"""

from typing import Callable, Dict

from ..core.constraint_types import ConstraintResult
from .base_constraint import RuleContext
from .hard_constraints import HARD_RULE_CHECKS
from .soft_constraints import SOFT_RULE_CHECKS

RuleCheck = Callable[[RuleContext], ConstraintResult]

RULE_CHECKS: Dict[str, RuleCheck] = {**HARD_RULE_CHECKS, **SOFT_RULE_CHECKS}

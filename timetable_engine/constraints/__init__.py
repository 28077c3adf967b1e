# timetable_engine/constraints/__init__.py

"""
Constraint rules, their dispatch table and the validator facade.
"""

from .base_constraint import RuleContext
from .rule_table import RULE_CHECKS, RuleCheck
from .constraint_validator import ConstraintValidator

__all__ = [
    "RULE_CHECKS",
    "RuleCheck",
    "RuleContext",
    "ConstraintValidator",
]

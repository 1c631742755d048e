"""invar - declare, discover and enforce invariants over Python objects."""

__version__ = "0.1.0"

from .coordinator import assert_all_satisfied_by, assert_satisfied, delegate
from .discovery import (
    ClassPool,
    ModulePool,
    RulePool,
    as_pool,
    find_candidates,
    find_rules,
    has_zero_arg_constructor,
    is_rule_for,
    is_unparametrized_rule_for,
)
from .registry import RuleRegistry, get_default_registry, register_rule, reset_default_registry
from .rule import NestedRule, Rule, invariant
from .ruleset import RuleSet
from .violation import NULL_MARKER, InvariantViolation, describe, overrides_str

__all__ = [
    "__version__",
    # Rules
    "Rule",
    "NestedRule",
    "RuleSet",
    "invariant",
    # Violations
    "InvariantViolation",
    "NULL_MARKER",
    "describe",
    "overrides_str",
    # Coordination
    "assert_satisfied",
    "assert_all_satisfied_by",
    "delegate",
    # Discovery
    "RulePool",
    "ModulePool",
    "ClassPool",
    "as_pool",
    "find_candidates",
    "find_rules",
    "has_zero_arg_constructor",
    "is_rule_for",
    "is_unparametrized_rule_for",
    # Registry
    "RuleRegistry",
    "get_default_registry",
    "register_rule",
    "reset_default_registry",
]

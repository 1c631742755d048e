"""
Assertion coordination for rules and rule sets.

When a rule delegates its check to something else (a nested rule set, or each
element of a collection field), the violation that comes back names the
nested rule. The coordinator re-wraps such violations so the outermost one
always names the rule the caller registered, while the chain of causes still
reaches the leaf rule that failed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable

from .violation import InvariantViolation

if TYPE_CHECKING:
    from .rule import Rule


def delegate(rule: Rule[Any], subject: Any, target: Rule[Any], target_subject: Any) -> None:
    """
    Assert `target` against `target_subject` on behalf of `rule` and `subject`.

    A violation raised by `rule` itself (the same instance) propagates
    unchanged. Any other violation, including one raised by another instance
    of the same rule class, is wrapped in a new one naming `rule` and
    `subject`, with the caught violation as its cause.

    Raises:
        ValueError: if `rule` or `target` is None
        InvariantViolation: if `target` is not satisfied by `target_subject`
    """
    if rule is None:
        raise ValueError("rule is required")
    if target is None:
        raise ValueError("target is required")

    try:
        target.assert_satisfied_by(target_subject)
    except InvariantViolation as violation:
        if violation.rule is rule:
            raise
        raise InvariantViolation(rule, subject, violation) from violation


def assert_satisfied(rule: Rule[Any], subject: Any) -> None:
    """Assert a single rule against a subject, wrapping nested violations."""
    delegate(rule, subject, rule, subject)


def assert_all_satisfied_by(rules: Iterable[Rule[Any]], subject: Any) -> None:
    """
    Assert every rule in `rules` against `subject`, in order.

    Unlike a rule set, violations are raised exactly as the rules raise them.

    Raises:
        ValueError: if `rules` is None
        InvariantViolation: for the first rule not satisfied by `subject`
    """
    if rules is None:
        raise ValueError("rules is required")

    for rule in rules:
        rule.assert_satisfied_by(subject)

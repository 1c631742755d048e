"""
Invariant violations and safe diagnostic rendering.

A violation names the rule that failed and the subject that failed it. When
the failure happened inside a nested rule set, the violation also carries the
violation it was raised from, so callers can walk the chain down to the leaf
rule that actually failed.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

logger = logging.getLogger(__name__)

NULL_MARKER = "<NULL>"


def overrides_str(cls: type) -> bool:
    """Return True if instances of `cls` have their own text rendering.

    Inherited overrides count (a subclass of a class defining __str__ does
    override it); only object's defaults do not.
    """
    return cls.__str__ is not object.__str__ or cls.__repr__ is not object.__repr__


def describe(value: Any) -> str:
    """Render a value for a diagnostic message without ever raising."""
    if value is None:
        return NULL_MARKER

    cls = type(value)
    if overrides_str(cls):
        try:
            return str(value)
        except Exception as e:
            logger.debug(f"Rendering {cls.__qualname__} failed, using type name: {e!r}")

    return cls.__qualname__


class InvariantViolation(Exception):
    """Raised when a subject does not satisfy an invariant."""

    def __init__(self, rule: Any, subject: Any, cause: InvariantViolation | None = None):
        super().__init__(f"Invariant {describe(rule)} violated by subject: {describe(subject)}")
        self._rule = rule
        self._subject = subject
        self._cause = cause

    @property
    def rule(self) -> Any:
        """The rule which was violated."""
        return self._rule

    @property
    def subject(self) -> Any:
        """The subject which violated the rule."""
        return self._subject

    @property
    def cause(self) -> InvariantViolation | None:
        """The violation raised inside a nested rule set, if any."""
        return self._cause

    @property
    def rule_id(self) -> str:
        return getattr(self._rule, "rule_id", describe(self._rule))

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""

    def chain(self) -> Iterator[InvariantViolation]:
        """Iterate the causal chain from this violation to the innermost one."""
        current: InvariantViolation | None = self
        while current is not None:
            yield current
            current = current.cause

    @property
    def root(self) -> InvariantViolation:
        """The innermost violation: the leaf rule that actually failed."""
        *_, last = self.chain()
        return last

    @property
    def depth(self) -> int:
        return sum(1 for _ in self.chain())

    def to_dict(self) -> dict[str, Any]:
        """Serialize the chain for JSON output."""
        return {
            "rule": self.rule_id,
            "rule_text": describe(self._rule),
            "subject": describe(self._subject),
            "message": self.message,
            "cause": self._cause.to_dict() if self._cause is not None else None,
        }

    def __reduce__(self):
        return (type(self), (self._rule, self._subject, self._cause))

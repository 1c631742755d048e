"""
Rule sets: ordered collections of rules for one subject type.

A rule set is itself a rule, so it can be nested inside another rule set or
wrapped by a `NestedRule` for a related subject. Rule sets are meant to be
populated once and then only asserted; assertion does not touch the set's
own state, but concurrent `add` calls are not safe.
"""

from __future__ import annotations

import inspect
import itertools
import logging
from typing import Any, Callable, Iterable, Iterator

from .coordinator import assert_satisfied
from .discovery import as_pool, find_candidates
from .rule import Rule, S
from .violation import InvariantViolation

logger = logging.getLogger(__name__)

_ruleset_ids = itertools.count(1)


class RuleSet(Rule[S]):
    """
    Ordered rules for instances, subclasses or implementations of a subject type.

    Args:
        subject_type: The type whose instances the rules are asserted against
        rules: Rules to add immediately
        discover: Also add all unparametrized rules declared in the subject
            type's own module
    """

    def __init__(
        self,
        subject_type: type[S],
        rules: Iterable[Rule[Any]] = (),
        *,
        discover: bool = False,
    ):
        if subject_type is None:
            raise ValueError("subject_type is required")
        if not isinstance(subject_type, type):
            raise TypeError(f"subject_type must be a class, got {subject_type!r}")

        self.subject_type = subject_type
        self._rules: list[Rule[Any]] = []
        self._discovered: set[type] = set()
        self._serial = next(_ruleset_ids)

        self.add(rules)
        if discover:
            self.add_discovered_from_module_of(subject_type)

    @property
    def rule_id(self) -> str:
        return f"{__name__}.RuleSet[{self.subject_type.__qualname__}]#{self._serial}"

    @property
    def name(self) -> str:
        return f"RuleSet[{self.subject_type.__qualname__}]"

    @property
    def rules(self) -> tuple[Rule[Any], ...]:
        return tuple(self._rules)

    @property
    def discovered(self) -> frozenset[type]:
        """Implementation types added by discovery so far."""
        return frozenset(self._discovered)

    def supports(self, subject_type: type) -> bool:
        return isinstance(subject_type, type) and issubclass(subject_type, self.subject_type)

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def add(self, rule: Rule[Any] | Iterable[Rule[Any]]) -> RuleSet[S]:
        """
        Add a rule, or each rule of an iterable, to the set.

        Duplicates are allowed. Nothing is added if any rule is rejected.

        Raises:
            ValueError: if a rule is None
            TypeError: if a rule does not apply to the subject type
        """
        if rule is None:
            raise ValueError("rule is required")

        rules = [rule] if isinstance(rule, Rule) else list(rule)
        for item in rules:
            self._check_rule(item)

        self._rules.extend(rules)
        return self

    def _check_rule(self, rule: Any) -> None:
        if rule is None:
            raise ValueError("rule is required")
        if not isinstance(rule, Rule):
            raise TypeError(f"Expected a Rule, got {type(rule).__qualname__}")
        if not rule.supports(self.subject_type):
            raise TypeError(f"Rule {rule.name} does not apply to {self.subject_type.__qualname__}")

    def add_discovered_from(
        self,
        pool: Any,
        include: Callable[[type], bool] | None = None,
        *,
        recursive: bool = False,
    ) -> RuleSet[S]:
        """
        Instantiate and add every unparametrized rule in `pool` applicable to the subject type.

        Implementations already added by an earlier discovery are skipped, so
        repeated calls with the same pool add nothing new. Nothing is added if
        any built rule is rejected by `add`.

        Args:
            pool: Module, module name, iterable of classes, or RulePool
            include: Optional predicate over implementation types; only types
                it accepts are added
            recursive: Also scan submodules when `pool` is a package

        Returns:
            This rule set, for chaining

        Raises:
            TypeError: if a pool factory builds a rule that does not apply to
                the subject type
        """
        source = as_pool(pool, recursive=recursive)
        found: list[tuple[type, Rule[Any]]] = []

        for cls in find_candidates(self.subject_type, source):
            if cls in self._discovered:
                logger.debug(f"Skipping already discovered rule {cls.__qualname__}")
                continue
            if include is not None and not include(cls):
                logger.debug(f"Rule {cls.__qualname__} excluded by filter")
                continue

            factory = source.factory_for(cls)
            found.append((cls, factory()))

        self.add([rule for _, rule in found])
        for cls, _ in found:
            self._discovered.add(cls)
            logger.debug(f"Added rule {cls.__qualname__} to {self.name}")

        return self

    def add_discovered_from_module_of(
        self,
        obj: Any,
        include: Callable[[type], bool] | None = None,
    ) -> RuleSet[S]:
        """Discover rules from the module in which `obj` is declared."""
        if obj is None:
            raise ValueError("obj is required")

        module = inspect.getmodule(obj)
        if module is None:
            raise ValueError(f"Cannot determine the module of {obj!r}")
        return self.add_discovered_from(module, include)

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def assert_satisfied_by(self, subject: S) -> None:
        """
        Assert every rule against `subject` in registration order, stopping at the first failure.

        Raises:
            InvariantViolation: naming the registered rule that failed; its
                cause chain leads to the leaf rule when the failure happened
                in a nested rule set
        """
        for rule in self._rules:
            assert_satisfied(rule, subject)

    def is_satisfied_by(self, subject: S) -> bool:
        """Return True if every rule holds for `subject`. Never raises a violation."""
        return all(rule.holds_for(subject) for rule in self._rules)

    def violations(self, subject: S) -> Iterator[InvariantViolation]:
        """Yield the violation of every failing rule, in registration order."""
        for rule in self._rules:
            try:
                assert_satisfied(rule, subject)
            except InvariantViolation as violation:
                yield violation

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule[Any]]:
        return iter(self.rules)

    def __repr__(self) -> str:
        return f"RuleSet({self.subject_type.__qualname__}, {len(self._rules)} rules)"

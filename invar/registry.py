"""
Explicit rule registry.

Rules register themselves (or are registered) with a zero-argument factory.
A registry is a discovery pool, so parametrized rules become discoverable
once a factory supplies their arguments:

    registry.register(VehicleMaximumWeight, factory=lambda: VehicleMaximumWeight(40_000))
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator

from .discovery import RuleFactory, has_zero_arg_constructor
from .rule import Rule

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Rule implementations keyed by type, each with a zero-argument factory."""

    def __init__(self) -> None:
        self._factories: dict[type, RuleFactory] = {}

    def register(
        self,
        cls: type[Rule[Any]] | None = None,
        *,
        factory: RuleFactory | None = None,
    ) -> Any:
        """
        Register a rule implementation.

        Usable as a plain call or as a class decorator. Re-registering a type
        replaces its factory.

        Raises:
            TypeError: if `cls` is not a Rule subclass
            ValueError: if `cls` needs constructor arguments and no factory is given
        """

        def do_register(rule_cls: type[Rule[Any]]) -> type[Rule[Any]]:
            if not (isinstance(rule_cls, type) and issubclass(rule_cls, Rule)):
                raise TypeError(f"Expected a Rule subclass, got {rule_cls!r}")
            if factory is None and not has_zero_arg_constructor(rule_cls):
                raise ValueError(f"{rule_cls.__qualname__} needs constructor arguments; register it with a factory")

            self._factories[rule_cls] = factory or rule_cls
            logger.debug(f"Registered rule {rule_cls.__qualname__}")
            return rule_cls

        if cls is None:
            return do_register
        return do_register(cls)

    def unregister(self, cls: type) -> None:
        self._factories.pop(cls, None)

    def clear(self) -> None:
        """Remove all registrations (for testing)."""
        self._factories.clear()

    def implementations(self) -> list[type]:
        return list(self._factories)

    def factory_for(self, cls: type) -> RuleFactory | None:
        return self._factories.get(cls)

    def __contains__(self, cls: object) -> bool:
        return cls in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def __iter__(self) -> Iterator[type]:
        return iter(list(self._factories))


# Process-wide registry for rules registered with @register_rule
_DEFAULT_REGISTRY = RuleRegistry()


def get_default_registry() -> RuleRegistry:
    return _DEFAULT_REGISTRY


def reset_default_registry() -> None:
    """Clear the default registry (for testing)."""
    _DEFAULT_REGISTRY.clear()


def register_rule(
    cls: type[Rule[Any]] | None = None,
    *,
    factory: Callable[[], Rule[Any]] | None = None,
) -> Any:
    """Register a rule with the default registry. Usable as a decorator."""
    return _DEFAULT_REGISTRY.register(cls, factory=factory)

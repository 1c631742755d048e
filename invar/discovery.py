"""
Rule discovery over candidate pools.

A pool is anything which can list candidate rule implementations and say how
to build one without arguments:
- a module (rule classes declared in it; packages optionally recursively)
- an importable module name
- an iterable of classes
- any object implementing the `RulePool` protocol (e.g. a `RuleRegistry`)

Discovery never instantiates rules and never mutates the pool. It only yields
implementation types; rule sets build instances afterwards, once their own
filters have run.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Callable, Iterable, Iterator, Protocol, runtime_checkable

from .rule import Rule, is_generic_template, supports_subject

logger = logging.getLogger(__name__)

RuleFactory = Callable[[], Rule[Any]]

_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@runtime_checkable
class RulePool(Protocol):
    """Provider of candidate rule implementations."""

    def implementations(self) -> Iterable[type]:
        """All candidate types, applicable or not."""
        ...

    def factory_for(self, cls: type) -> RuleFactory | None:
        """A zero-argument factory for `cls`, or None if it needs arguments."""
        ...


def has_zero_arg_constructor(cls: type) -> bool:
    """Return True if `cls` can be instantiated without arguments."""
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return cls.__init__ is object.__init__ and cls.__new__ is object.__new__

    return all(
        param.default is not inspect.Parameter.empty or param.kind in _VARIADIC
        for param in signature.parameters.values()
    )


def is_rule_for(cls: type, subject_type: type) -> bool:
    """Return True if `cls` is a concrete rule implementation applicable to `subject_type`."""
    if cls is None:
        raise ValueError("cls is required")
    if subject_type is None:
        raise ValueError("subject_type is required")

    return (
        isinstance(cls, type)
        and issubclass(cls, Rule)
        and not inspect.isabstract(cls)
        and not getattr(cls, "_is_protocol", False)
        and not is_generic_template(cls)
        and supports_subject(cls, subject_type)
    )


def is_unparametrized_rule_for(cls: type, subject_type: type) -> bool:
    """Return True if `cls` is a rule for `subject_type` with a zero-argument constructor."""
    return is_rule_for(cls, subject_type) and has_zero_arg_constructor(cls)


@dataclass(frozen=True)
class ModulePool:
    """Rule classes declared in a module, and optionally in its submodules."""

    module: ModuleType
    recursive: bool = False

    def modules(self) -> Iterator[ModuleType]:
        yield self.module
        if not self.recursive or not hasattr(self.module, "__path__"):
            return
        for info in pkgutil.walk_packages(self.module.__path__, prefix=f"{self.module.__name__}."):
            yield importlib.import_module(info.name)

    def implementations(self) -> Iterator[type]:
        for module in self.modules():
            # Classes imported from elsewhere belong to their own module's pool
            for value in list(vars(module).values()):
                if isinstance(value, type) and value.__module__ == module.__name__:
                    yield value

    def factory_for(self, cls: type) -> RuleFactory | None:
        return cls if has_zero_arg_constructor(cls) else None


@dataclass(frozen=True)
class ClassPool:
    """A fixed collection of candidate classes."""

    classes: tuple[type, ...]

    def implementations(self) -> Iterator[type]:
        return iter(self.classes)

    def factory_for(self, cls: type) -> RuleFactory | None:
        return cls if has_zero_arg_constructor(cls) else None


def as_pool(pool: Any, *, recursive: bool = False) -> RulePool:
    """
    Adapt `pool` to the RulePool protocol.

    Raises:
        ValueError: if `pool` is None
        TypeError: if `pool` is not a supported pool
    """
    if pool is None:
        raise ValueError("pool is required")
    if isinstance(pool, ModuleType):
        return ModulePool(pool, recursive=recursive)
    if isinstance(pool, str):
        return ModulePool(importlib.import_module(pool), recursive=recursive)
    if isinstance(pool, type):
        return ClassPool((pool,))
    if isinstance(pool, RulePool):
        return pool
    if isinstance(pool, Iterable):
        return ClassPool(tuple(pool))

    raise TypeError(f"Unsupported rule pool: {type(pool).__qualname__}")


def _scan(subject_type: type, source: RulePool, unparametrized: bool) -> Iterator[type]:
    seen: set[type] = set()
    for cls in source.implementations():
        if cls in seen:
            continue
        seen.add(cls)

        if not is_rule_for(cls, subject_type):
            continue
        if unparametrized and source.factory_for(cls) is None:
            logger.debug(f"Skipping parametrized rule {cls.__qualname__}")
            continue

        logger.debug(f"Found rule {cls.__qualname__} for {subject_type.__qualname__}")
        yield cls


def find_rules(subject_type: type, pool: Any) -> Iterator[type]:
    """Lazily yield all concrete rule implementations in `pool` applicable to `subject_type`."""
    if subject_type is None:
        raise ValueError("subject_type is required")
    return _scan(subject_type, as_pool(pool), unparametrized=False)


def find_candidates(subject_type: type, pool: Any) -> Iterator[type]:
    """
    Lazily yield the unparametrized rule implementations in `pool` applicable to `subject_type`.

    A rule declared for a supertype of `subject_type` is a match. Rules which
    need constructor arguments are only yielded when the pool supplies a
    factory for them.

    Raises:
        ValueError: if `subject_type` or `pool` is None (raised immediately, not on iteration)
    """
    if subject_type is None:
        raise ValueError("subject_type is required")
    return _scan(subject_type, as_pool(pool), unparametrized=True)

"""
Rules: predicates over typed subjects.

A rule declares the subject types it applies to through its generic argument:

    class CarHasFourWheels(Rule[Car]):
        def is_satisfied_by(self, subject: Car) -> bool:
            return len(subject.wheels) == 4

Declarations are contravariant: a rule for `Vehicle` is also a rule for
every subclass of `Vehicle`. Rules with a zero-argument constructor are
"unparametrized" and can be discovered automatically (see `invar.discovery`).
"""

from __future__ import annotations

import inspect
import types
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Generic, Iterable, TypeVar, Union, get_args, get_origin

from .coordinator import delegate
from .violation import InvariantViolation

S = TypeVar("S")
E = TypeVar("E")


def _resolve_subject_types(arg: Any) -> tuple[type, ...] | None:
    """Resolve a generic argument to concrete subject types.

    Returns None while the argument is still a type variable.
    """
    if isinstance(arg, TypeVar):
        return None
    if arg is Any:
        return (object,)

    origin = get_origin(arg)
    if origin in (Union, types.UnionType):
        resolved: list[type] = []
        for member in get_args(arg):
            member_types = _resolve_subject_types(member)
            if member_types is None:
                return None
            resolved.extend(member_types)
        return tuple(resolved)
    if isinstance(origin, type):
        # list[Wheel] -> list
        return (origin,)
    if isinstance(arg, type):
        return (arg,)

    raise TypeError(f"Unsupported subject type declaration: {arg!r}")


def supports_subject(rule_cls: type, subject_type: type) -> bool:
    """Return True if `rule_cls` declares applicability to `subject_type` or a supertype of it."""
    if not isinstance(subject_type, type):
        raise TypeError(f"subject_type must be a class, got {subject_type!r}")
    declared = getattr(rule_cls, "subject_types", ())
    return any(issubclass(subject_type, t) for t in declared)


def is_generic_template(cls: type) -> bool:
    """Return True if the class still has unbound type parameters."""
    return bool(getattr(cls, "__parameters__", ()))


def rule_description(cls: type) -> str:
    """First line of the class's own docstring, or an empty string."""
    doc = cls.__dict__.get("__doc__")
    if not doc:
        return ""
    return inspect.cleandoc(doc).splitlines()[0]


class Rule(ABC, Generic[S]):
    """
    An invariant which must hold on instances of its subject types.

    Subclasses implement `is_satisfied_by` and may narrow `applies`; a rule
    which does not apply to a subject is vacuously satisfied by it.
    """

    subject_types: ClassVar[tuple[type, ...]] = (object,)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        if "subject_types" in cls.__dict__:
            declared = cls.__dict__["subject_types"]
            cls.subject_types = (declared,) if isinstance(declared, type) else tuple(declared)
            return

        for base in cls.__dict__.get("__orig_bases__", ()):
            origin = get_origin(base)
            if not (isinstance(origin, type) and issubclass(origin, Rule)):
                continue
            params = getattr(origin, "__parameters__", ())
            if S not in params:
                continue
            declared = _resolve_subject_types(get_args(base)[params.index(S)])
            if declared is not None:
                cls.subject_types = declared
            break

    @property
    def rule_id(self) -> str:
        """Identifier of the implementation, used in reports and JSON output."""
        cls = type(self)
        return f"{cls.__module__}.{cls.__qualname__}"

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def description(self) -> str:
        return rule_description(type(self))

    def supports(self, subject_type: type) -> bool:
        """Return True if this rule can be registered for `subject_type`."""
        return supports_subject(type(self), subject_type)

    def applies(self, subject: S) -> bool:
        return True

    @abstractmethod
    def is_satisfied_by(self, subject: S) -> bool:
        """Return True if the invariant holds for `subject`."""
        ...

    def holds_for(self, subject: S) -> bool:
        """Non-raising counterpart of `assert_satisfied_by`."""
        return not self.applies(subject) or self.is_satisfied_by(subject)

    def assert_satisfied_by(self, subject: S) -> None:
        """
        Assert that the invariant is satisfied by `subject`.

        Raises:
            InvariantViolation: if the rule applies to `subject` and is not satisfied
        """
        if self.applies(subject) and not self.is_satisfied_by(subject):
            raise InvariantViolation(self, subject)

    def __str__(self) -> str:
        return self.name


class NestedRule(Rule[S], Generic[S, E]):
    """
    A rule over S which holds when every related E satisfies a nested rule.

    The nested rule is usually a `RuleSet[E]`. Failures inside it are reported
    as a violation of this rule on the outer subject, caused by the nested
    violation.
    """

    def __init__(self, ruleset: Rule[E]):
        if ruleset is None:
            raise ValueError("ruleset is required")
        self.ruleset = ruleset

    @abstractmethod
    def related(self, subject: S) -> Iterable[E]:
        """The elements of `subject` which the nested rule is asserted against."""
        ...

    def is_satisfied_by(self, subject: S) -> bool:
        return all(self.ruleset.holds_for(item) for item in self.related(subject))

    def assert_satisfied_by(self, subject: S) -> None:
        if not self.applies(subject):
            return
        for item in self.related(subject):
            delegate(self, subject, self.ruleset, item)


def invariant(
    subject_type: Any,
    *,
    applies: Callable[[Any], bool] | None = None,
    name: str | None = None,
) -> Callable[[Callable[[Any], bool]], type[Rule[Any]]]:
    """
    Turn a predicate function into an unparametrized rule class.

    The class is declared in the function's module, so module discovery
    finds it:

        @invariant(Vehicle)
        def non_negative_weight(vehicle: Vehicle) -> bool:
            return vehicle.weight >= 0

        non_negative_weight().assert_satisfied_by(truck)
    """

    def decorate(predicate: Callable[[Any], bool]) -> type[Rule[Any]]:
        class_name = name or predicate.__name__

        def is_satisfied_by(self: Rule[Any], subject: Any) -> bool:
            return bool(predicate(subject))

        def exec_body(ns: dict[str, Any]) -> None:
            ns["__module__"] = predicate.__module__
            ns["__qualname__"] = name or predicate.__qualname__
            ns["__doc__"] = predicate.__doc__
            ns["predicate"] = staticmethod(predicate)
            ns["is_satisfied_by"] = is_satisfied_by
            if applies is not None:
                ns["applies"] = lambda self, subject: bool(applies(subject))

        return types.new_class(class_name, (Rule[subject_type],), {}, exec_body)

    return decorate

"""Helpers shared by the rules and check commands."""

from __future__ import annotations

from typing import Any, Iterable

from ..config import InvarConfig, names_rule
from ..ruleset import RuleSet
from ..util import import_object


def resolve_subject_type(reference: str) -> type:
    """Import a `module:Type` reference and check that it names a class."""
    subject_type = import_object(reference)
    if not isinstance(subject_type, type):
        raise ValueError(f"{reference!r} is not a class")
    return subject_type


def pool_names(subject_type: type, config: InvarConfig, pools: Iterable[str] = ()) -> list[str]:
    """Pools to scan: configured and given pools, else the subject type's own module."""
    names: list[str] = []
    for name in (*config.pools, *pools):
        if name not in names:
            names.append(name)
    return names or [subject_type.__module__]


def is_excluded(cls: type, config: InvarConfig, exclude: Iterable[str] = ()) -> bool:
    return config.excludes(cls) or names_rule(exclude, cls)


def build_ruleset(
    subject_type: type,
    config: InvarConfig,
    pools: Iterable[str] = (),
    exclude: Iterable[str] = (),
) -> RuleSet[Any]:
    """Build a rule set for `subject_type` by discovery over the resolved pools."""
    exclude = tuple(exclude)
    ruleset: RuleSet[Any] = RuleSet(subject_type)
    for name in pool_names(subject_type, config, pools):
        ruleset.add_discovered_from(
            name,
            lambda cls: not is_excluded(cls, config, exclude),
            recursive=config.recursive,
        )
    return ruleset

"""Rules command implementation - list the rules discovered for a subject type."""

import json
from dataclasses import asdict, dataclass
from typing import Iterable

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import InvarConfig
from ..discovery import as_pool, find_rules
from ..rule import rule_description
from .common import is_excluded, pool_names, resolve_subject_type


@dataclass
class RuleEntry:
    """A rule implementation found for a subject type."""

    name: str
    rule_id: str
    pool: str
    subject_types: list[str]
    discoverable: bool  # False: needs constructor arguments, register manually
    excluded: bool
    description: str

    @property
    def status(self) -> str:
        if self.excluded:
            return "excluded"
        return "auto" if self.discoverable else "manual"


def collect_rules(
    subject_type: type,
    config: InvarConfig,
    pools: Iterable[str] = (),
    show_all: bool = False,
) -> list[RuleEntry]:
    entries: list[RuleEntry] = []
    seen: set[type] = set()

    for name in pool_names(subject_type, config, pools):
        source = as_pool(name, recursive=config.recursive)
        for cls in find_rules(subject_type, source):
            if cls in seen:
                continue
            seen.add(cls)

            discoverable = source.factory_for(cls) is not None
            if not discoverable and not show_all:
                continue

            entries.append(
                RuleEntry(
                    name=cls.__name__,
                    rule_id=f"{cls.__module__}.{cls.__qualname__}",
                    pool=name,
                    subject_types=[t.__qualname__ for t in cls.subject_types],
                    discoverable=discoverable,
                    excluded=is_excluded(cls, config),
                    description=rule_description(cls),
                )
            )

    return entries


def run_rules(
    config: InvarConfig,
    subject_ref: str,
    pools: Iterable[str] = (),
    show_all: bool = False,
    output_json: bool = False,
) -> int:
    """List the rules applicable to a subject type.

    Args:
        config: Loaded configuration
        subject_ref: Subject type as `module:Type`
        pools: Extra module names to scan
        show_all: Include parametrized rules, which discovery cannot instantiate
        output_json: Output results as JSON instead of a table

    Returns:
        Exit code (0 = success, 1 = bad input)
    """
    console = Console(stderr=True)

    try:
        subject_type = resolve_subject_type(subject_ref)
        entries = collect_rules(subject_type, config, pools, show_all=show_all)
    except (ValueError, ImportError) as e:
        console.print(escape(str(e)), style="bold red")
        return 1

    if output_json:
        output = {
            "subject": f"{subject_type.__module__}.{subject_type.__qualname__}",
            "rules": [{**asdict(e), "status": e.status} for e in entries],
        }
        print(json.dumps(output, indent=2))
        return 0

    if not entries:
        console.print(f"No rules found for {escape(subject_type.__qualname__)}", style="yellow")
        return 0

    table = Table(title=f"Rules for {escape(subject_type.__qualname__)}")
    table.add_column("Rule", style="cyan")
    table.add_column("Declared for")
    table.add_column("Discovery")
    table.add_column("Description", style="dim")

    status_styles = {"auto": "green", "manual": "yellow", "excluded": "dim"}
    for entry in entries:
        table.add_row(
            escape(entry.name),
            escape(", ".join(entry.subject_types)),
            f"[{status_styles[entry.status]}]{entry.status}[/]",
            escape(entry.description),
        )

    console.print(table)
    return 0

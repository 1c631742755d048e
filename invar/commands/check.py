"""Check command implementation - assert discovered rules against a batch of subjects."""

import json
from dataclasses import dataclass, field
from typing import Any, Iterable

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import InvarConfig
from ..ruleset import RuleSet
from ..util import import_object
from ..violation import InvariantViolation, describe
from .common import build_ruleset, resolve_subject_type


@dataclass
class SubjectResult:
    """Violations found for one subject."""

    subject: Any
    violations: list[InvariantViolation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject": describe(self.subject),
            "ok": self.ok,
            "violations": [v.to_dict() for v in self.violations],
        }


def load_subjects(reference: str) -> list[Any]:
    """Load subjects from a `module:attribute` reference to an iterable or a callable returning one."""
    source = import_object(reference)
    subjects = source() if callable(source) else source
    try:
        return list(subjects)
    except TypeError as e:
        raise ValueError(f"{reference!r} did not produce an iterable of subjects") from e


def check_subjects(ruleset: RuleSet[Any], subjects: Iterable[Any]) -> list[SubjectResult]:
    """Collect every violation of every subject.

    Raises:
        TypeError: if a subject is not an instance of the rule set's subject type
    """
    results = []
    for subject in subjects:
        if not isinstance(subject, ruleset.subject_type):
            raise TypeError(
                f"Subject {describe(subject)} is not a {ruleset.subject_type.__qualname__}"
            )
        results.append(SubjectResult(subject, list(ruleset.violations(subject))))
    return results


def run_check(
    config: InvarConfig,
    subject_ref: str,
    subjects_ref: str,
    pools: Iterable[str] = (),
    exclude: Iterable[str] = (),
    output_json: bool = False,
) -> int:
    """Check subjects against every rule discovered for their type.

    Args:
        config: Loaded configuration
        subject_ref: Subject type as `module:Type`
        subjects_ref: Subjects as `module:attribute`, an iterable or a callable returning one
        pools: Extra module names to scan for rules
        exclude: Rule class names or ids to skip
        output_json: Output results as JSON instead of a table

    Returns:
        Exit code (0 = all subjects satisfy all rules, 1 = violations or bad input)
    """
    console = Console(stderr=True)

    try:
        subject_type = resolve_subject_type(subject_ref)
        subjects = load_subjects(subjects_ref)
        ruleset = build_ruleset(subject_type, config, pools, exclude)
        results = check_subjects(ruleset, subjects)
    except (ValueError, TypeError, ImportError) as e:
        console.print(escape(str(e)), style="bold red")
        return 1

    failed = [r for r in results if not r.ok]

    if output_json:
        output = {
            "subject_type": f"{subject_type.__module__}.{subject_type.__qualname__}",
            "rules": [rule.rule_id for rule in ruleset],
            "results": [r.to_dict() for r in results],
            "summary": {
                "subjects": len(results),
                "failed": len(failed),
                "rules": len(ruleset),
            },
        }
        print(json.dumps(output, indent=2, default=str))
        return 1 if failed else 0

    if len(ruleset) == 0:
        console.print(f"No rules discovered for {escape(subject_type.__qualname__)}", style="yellow")

    _print_human_output(console, subject_type, results)

    console.print()
    if failed:
        console.print(f"✗ {len(failed)} of {len(results)} subjects violate invariants", style="bold red")
        return 1

    console.print(f"✓ All {len(results)} subjects satisfy {len(ruleset)} rules", style="bold green")
    return 0


def _print_human_output(console: Console, subject_type: type, results: list[SubjectResult]) -> None:
    table = Table(title=f"Invariants for {escape(subject_type.__qualname__)}")
    table.add_column("Subject", style="cyan")
    table.add_column("Status")
    table.add_column("Rule")
    table.add_column("Root cause", style="dim")

    for result in results:
        subject_text = escape(describe(result.subject))
        if result.ok:
            table.add_row(subject_text, "[green]ok[/]", "", "")
            continue

        for violation in result.violations:
            root = violation.root
            root_text = ""
            if root is not violation:
                root_text = f"{describe(root.rule)} on {describe(root.subject)}"
            table.add_row(subject_text, "[red]violated[/]", escape(describe(violation.rule)), escape(root_text))

    console.print(table)

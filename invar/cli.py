"""CLI entrypoint for invar."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import find_config, load_config


def _configure_logging(verbose: bool) -> None:
    """Route library logging to stderr through rich when --verbose is set."""
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(__version__, prog_name="invar")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to pyproject.toml with a [tool.invar] table (defaults to the nearest one)",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Log discovery and registration details to stderr",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """invar - discover and enforce invariants over Python objects.

    SUBJECT arguments name a class as module:Type; rules are discovered from
    the modules given with --pool, the [tool.invar] pools setting, or else
    the subject's own module.
    """
    ctx.ensure_object(dict)
    _configure_logging(verbose)

    if config_path is None:
        config_path = find_config(Path.cwd())

    try:
        ctx.obj["config"] = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration in {config_path}: {e}")


@cli.command()
@click.argument("subject")
@click.option(
    "--pool",
    "-p",
    "pools",
    multiple=True,
    metavar="MODULE",
    help="Module to scan for rules (repeatable)",
)
@click.option(
    "--all",
    "show_all",
    is_flag=True,
    help="Include parametrized rules, which must be registered manually",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output results as JSON",
)
@click.pass_context
def rules(
    ctx: click.Context,
    subject: str,
    pools: tuple[str, ...],
    show_all: bool,
    output_json: bool,
) -> None:
    """List the rules discovered for SUBJECT.

    Examples:

        invar rules myapp.models:Car

        invar rules myapp.models:Car --pool myapp.rules --all
    """
    from .commands.rules_cmd import run_rules

    exit_code = run_rules(ctx.obj["config"], subject, pools, show_all=show_all, output_json=output_json)
    sys.exit(exit_code)


@cli.command()
@click.argument("subject")
@click.option(
    "--subjects",
    "-s",
    "subjects_ref",
    required=True,
    metavar="FACTORY",
    help="module:attribute naming an iterable of subjects, or a callable returning one",
)
@click.option(
    "--pool",
    "-p",
    "pools",
    multiple=True,
    metavar="MODULE",
    help="Module to scan for rules (repeatable)",
)
@click.option(
    "--exclude",
    "-x",
    multiple=True,
    metavar="RULE",
    help="Skip a rule by class name or id (repeatable)",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output results as JSON",
)
@click.pass_context
def check(
    ctx: click.Context,
    subject: str,
    subjects_ref: str,
    pools: tuple[str, ...],
    exclude: tuple[str, ...],
    output_json: bool,
) -> None:
    """Check subjects against every rule discovered for SUBJECT.

    Exits with status 1 if any subject violates a rule.

    Examples:

        invar check myapp.models:Car --subjects myapp.fixtures:all_cars

        invar check myapp.models:Car -s myapp.fixtures:all_cars -x CarHasFourWheels --json
    """
    from .commands.check import run_check

    exit_code = run_check(ctx.obj["config"], subject, subjects_ref, pools, exclude, output_json=output_json)
    sys.exit(exit_code)


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()

"""Configuration from the `[tool.invar]` table of pyproject.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable


@dataclass(frozen=True)
class InvarConfig:
    """Settings shared by CLI commands."""

    pools: tuple[str, ...] = ()  # module names scanned in addition to --pool
    exclude: frozenset[str] = frozenset()  # rule class names or ids skipped by discovery
    recursive: bool = False  # scan packages recursively
    path: Path | None = None

    def excludes(self, cls: type) -> bool:
        return names_rule(self.exclude, cls)


def names_rule(names: Iterable[str], cls: type) -> bool:
    """Return True if `names` holds the class name or the `module.qualname` id of `cls`."""
    names = set(names)
    return cls.__name__ in names or f"{cls.__module__}.{cls.__qualname__}" in names


def find_config(start: Path) -> Path | None:
    """Find the nearest pyproject.toml by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        candidate = p / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def _coerce_str_list(value: Any, key: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"tool.invar.{key} must be a list of strings")
    return tuple(v.strip() for v in value if v.strip())


def load_config(path: Path | None) -> InvarConfig:
    """
    Load the `[tool.invar]` table from `path`.

    A missing path or table yields the defaults.

    Raises:
        ValueError: if the file is not valid TOML or a key has the wrong type
    """
    if path is None:
        return InvarConfig()

    data = tomllib.loads(path.read_text(encoding="utf-8"))
    tool = data.get("tool")
    table = tool.get("invar") if isinstance(tool, dict) else None
    if table is None:
        return InvarConfig(path=path)
    if not isinstance(table, dict):
        raise ValueError("tool.invar must be a table")

    recursive = table.get("recursive", False)
    if not isinstance(recursive, bool):
        raise ValueError("tool.invar.recursive must be a boolean")

    return InvarConfig(
        pools=_coerce_str_list(table.get("pools"), "pools"),
        exclude=frozenset(_coerce_str_list(table.get("exclude"), "exclude")),
        recursive=recursive,
        path=path,
    )

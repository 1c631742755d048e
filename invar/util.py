"""Shared utilities."""

from __future__ import annotations

import importlib
from typing import Any


def import_object(reference: str) -> Any:
    """
    Import the object named by a `module:attribute` reference.

    The attribute part may be dotted (`pkg.mod:Outer.Inner`).

    Raises:
        ValueError: if the reference is malformed or cannot be resolved
    """
    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name.strip() or not attr_path.strip():
        raise ValueError(f"Expected 'module:attribute', got {reference!r}")

    try:
        obj: Any = importlib.import_module(module_name.strip())
    except ImportError as e:
        raise ValueError(f"Cannot import module {module_name!r}: {e}") from e

    for part in attr_path.strip().split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ValueError(f"Module {module_name!r} has no attribute {attr_path!r}") from e
    return obj

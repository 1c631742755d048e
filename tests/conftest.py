"""Pytest configuration and fixtures."""

import pytest

from invar import RuleRegistry, RuleSet, get_default_registry, reset_default_registry
from vehicles import Car, Wheel


@pytest.fixture
def registry() -> RuleRegistry:
    """An empty, isolated rule registry."""
    return RuleRegistry()


@pytest.fixture
def default_registry():
    """The process-wide registry, cleared before and after the test."""
    reset_default_registry()
    yield get_default_registry()
    reset_default_registry()


@pytest.fixture
def car_rules() -> RuleSet[Car]:
    """Rules discovered for Car in the vehicles module."""
    return RuleSet(Car, discover=True)


@pytest.fixture
def wheel_rules() -> RuleSet[Wheel]:
    return RuleSet(Wheel, discover=True)

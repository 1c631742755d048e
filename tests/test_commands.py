"""
Tests for the rules and check commands.

Tests the command implementations directly; test_cli.py covers the click layer.
"""

from __future__ import annotations

import json

import pytest

from invar import RuleSet
from invar.commands.check import check_subjects, load_subjects, run_check
from invar.commands.common import build_ruleset, is_excluded, pool_names
from invar.commands.rules_cmd import collect_rules, run_rules
from invar.config import InvarConfig
from vehicles import Car, CarHasFourWheelsInvariant, Wheel

NOT_SUBJECTS = 42


# -----------------------------------------------------------------------------
# Shared helpers
# -----------------------------------------------------------------------------


def test_pool_names_default_to_subject_module() -> None:
    assert pool_names(Car, InvarConfig()) == ["vehicles"]


def test_pool_names_merge_config_and_arguments() -> None:
    config = InvarConfig(pools=("app.rules", "vehicles"))

    assert pool_names(Car, config, ["vehicles", "app.extra"]) == ["app.rules", "vehicles", "app.extra"]


def test_build_ruleset_honors_exclusions() -> None:
    config = InvarConfig(exclude=frozenset({"VehicleWheelsInvariant"}))

    ruleset = build_ruleset(Car, config, exclude=["vehicles.CarHasFourWheelsInvariant"])

    assert [rule.name for rule in ruleset] == ["VehicleHasNonNegativeWeightInvariant"]


def test_is_excluded_by_config_or_argument() -> None:
    config = InvarConfig(exclude=frozenset({"CarHasFourWheelsInvariant"}))

    assert is_excluded(CarHasFourWheelsInvariant, config)
    assert is_excluded(CarHasFourWheelsInvariant, InvarConfig(), ["vehicles.CarHasFourWheelsInvariant"])
    assert not is_excluded(CarHasFourWheelsInvariant, InvarConfig(), ["VehicleWheelsInvariant"])


def test_load_subjects_from_callable_and_iterable() -> None:
    assert len(load_subjects("vehicles:broken_cars")) == 3

    with pytest.raises(ValueError, match="iterable of subjects"):
        load_subjects(f"{__name__}:NOT_SUBJECTS")


def test_check_subjects_rejects_wrong_subject_type() -> None:
    with pytest.raises(TypeError, match="is not a Car"):
        check_subjects(RuleSet(Car), [Wheel()])


def test_check_subjects_collects_all_violations() -> None:
    ruleset = RuleSet(Car, discover=True)
    bad = Car(weight=-1, wheels=[Wheel(-5)], license_plate="ZZ-999")

    [result] = check_subjects(ruleset, [bad])

    assert not result.ok
    assert [v.rule.name for v in result.violations] == [
        "VehicleHasNonNegativeWeightInvariant",
        "CarHasFourWheelsInvariant",
        "VehicleWheelsInvariant",
    ]


# -----------------------------------------------------------------------------
# rules
# -----------------------------------------------------------------------------


def test_collect_rules_hides_parametrized_rules_by_default() -> None:
    names = [entry.name for entry in collect_rules(Car, InvarConfig())]

    assert names == ["VehicleHasNonNegativeWeightInvariant", "CarHasFourWheelsInvariant", "VehicleWheelsInvariant"]


def test_collect_rules_show_all() -> None:
    entries = {entry.name: entry for entry in collect_rules(Car, InvarConfig(), show_all=True)}

    assert entries["VehicleMaximumWeightInvariant"].status == "manual"
    assert entries["CarHasFourWheelsInvariant"].status == "auto"
    assert entries["CarHasFourWheelsInvariant"].description == "Cars have exactly four wheels."


def test_run_rules_json(capsys) -> None:
    config = InvarConfig(exclude=frozenset({"CarHasFourWheelsInvariant"}))

    result = run_rules(config, "vehicles:Car", output_json=True)

    assert result == 0
    data = json.loads(capsys.readouterr().out)
    assert data["subject"] == "vehicles.Car"
    statuses = {rule["name"]: rule["status"] for rule in data["rules"]}
    assert statuses == {
        "VehicleHasNonNegativeWeightInvariant": "auto",
        "CarHasFourWheelsInvariant": "excluded",
        "VehicleWheelsInvariant": "auto",
    }
    wheels_rule = next(rule for rule in data["rules"] if rule["name"] == "VehicleWheelsInvariant")
    assert wheels_rule["subject_types"] == ["Vehicle"]
    assert wheels_rule["pool"] == "vehicles"


def test_run_rules_table(capsys, monkeypatch) -> None:
    monkeypatch.setenv("COLUMNS", "200")

    result = run_rules(InvarConfig(), "vehicles:Wheel")

    assert result == 0
    err = capsys.readouterr().err
    assert "Rules for Wheel" in err
    assert "WheelHasNonNegativeMileageInvariant" in err


def test_run_rules_no_rules(capsys) -> None:
    result = run_rules(InvarConfig(), "vehicles:Wheel", pools=["invar.config"])

    assert result == 0
    assert "No rules found for Wheel" in capsys.readouterr().err


def test_run_rules_bad_subject(capsys) -> None:
    result = run_rules(InvarConfig(), "vehicles:Bicycle")

    assert result == 1
    assert "has no attribute" in capsys.readouterr().err


def test_run_rules_subject_must_be_class(capsys) -> None:
    result = run_rules(InvarConfig(), "vehicles:broken_cars")

    assert result == 1
    assert "is not a class" in capsys.readouterr().err


# -----------------------------------------------------------------------------
# check
# -----------------------------------------------------------------------------


def test_run_check_all_valid(capsys) -> None:
    result = run_check(InvarConfig(), "vehicles:Car", "vehicles:sample_cars")

    assert result == 0
    assert "✓ All 2 subjects satisfy 3 rules" in capsys.readouterr().err


def test_run_check_reports_violations(capsys) -> None:
    result = run_check(InvarConfig(), "vehicles:Car", "vehicles:broken_cars")

    assert result == 1
    assert "✗ 2 of 3 subjects violate invariants" in capsys.readouterr().err


def test_run_check_json(capsys) -> None:
    result = run_check(InvarConfig(), "vehicles:Car", "vehicles:broken_cars", output_json=True)

    assert result == 1
    captured = capsys.readouterr()
    assert captured.err == ""
    data = json.loads(captured.out)

    assert data["subject_type"] == "vehicles.Car"
    assert data["summary"] == {"subjects": 3, "failed": 2, "rules": 3}
    assert [r["ok"] for r in data["results"]] == [True, False, False]

    three_wheels = data["results"][1]
    assert three_wheels["subject"] == "Car EF-789"
    assert [v["rule"] for v in three_wheels["violations"]] == ["vehicles.CarHasFourWheelsInvariant"]

    bad_wheel = data["results"][2]["violations"][0]
    assert bad_wheel["rule"] == "vehicles.VehicleWheelsInvariant"
    assert bad_wheel["cause"]["rule"] == "vehicles.WheelHasNonNegativeMileageInvariant"
    assert bad_wheel["cause"]["subject"] == "Wheel(mileage=-100)"


def test_run_check_exclude(capsys) -> None:
    result = run_check(
        InvarConfig(),
        "vehicles:Car",
        "vehicles:broken_cars",
        exclude=["VehicleWheelsInvariant"],
        output_json=True,
    )

    data = json.loads(capsys.readouterr().out)
    assert result == 1
    assert data["summary"] == {"subjects": 3, "failed": 1, "rules": 2}


def test_run_check_config_exclude(capsys) -> None:
    config = InvarConfig(exclude=frozenset({"CarHasFourWheelsInvariant", "VehicleWheelsInvariant"}))

    result = run_check(config, "vehicles:Car", "vehicles:broken_cars")

    assert result == 0
    assert "✓ All 3 subjects satisfy 1 rules" in capsys.readouterr().err


def test_run_check_wrong_subjects(capsys) -> None:
    result = run_check(InvarConfig(), "vehicles:Car", "vehicles:wheels")

    assert result == 1
    assert "is not a Car" in capsys.readouterr().err


def test_check_rule_order_matches_discovery() -> None:
    ruleset = build_ruleset(Car, InvarConfig())

    assert isinstance(ruleset.rules[1], CarHasFourWheelsInvariant)

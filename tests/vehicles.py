"""Vehicle subjects and rules shared by the test suite."""

from __future__ import annotations

from typing import Iterable

from invar import NestedRule, Rule, RuleSet


class Wheel:
    def __init__(self, mileage: int = 0):
        self.mileage = mileage

    def __str__(self) -> str:
        return f"Wheel(mileage={self.mileage})"


class Vehicle:
    def __init__(self, weight: int = 0, wheels: Iterable[Wheel] = (), license_plate: str | None = None):
        self.license_plate = license_plate
        self.wheels = list(wheels)
        self.weight = weight


class Car(Vehicle):
    def __str__(self) -> str:
        return f"Car {self.license_plate or '(unregistered)'}"


class Sedan(Car):
    pass


# No custom rendering: diagnostics fall back to the type name
class Truck(Vehicle):
    pass


class VehicleHasNonNegativeWeightInvariant(Rule[Vehicle]):
    """Vehicles cannot weigh less than nothing."""

    def is_satisfied_by(self, subject: Vehicle) -> bool:
        return subject.weight >= 0


class VehicleMaximumWeightInvariant(Rule[Vehicle]):
    """Vehicles stay under a configured weight."""

    def __init__(self, maximum_weight: int):
        self.maximum_weight = maximum_weight

    def is_satisfied_by(self, subject: Vehicle) -> bool:
        return subject.weight <= self.maximum_weight

    def __str__(self) -> str:
        return f"VehicleMaximumWeightInvariant(<= {self.maximum_weight})"


class CarHasFourWheelsInvariant(Rule[Car]):
    """Cars have exactly four wheels."""

    def is_satisfied_by(self, subject: Car) -> bool:
        return len(subject.wheels) == 4


class WheelHasNonNegativeMileageInvariant(Rule[Wheel]):
    def is_satisfied_by(self, subject: Wheel) -> bool:
        return subject.mileage >= 0


class VehicleWheelsInvariant(NestedRule[Vehicle, Wheel]):
    """Every wheel of a vehicle satisfies the wheel invariants."""

    def __init__(self) -> None:
        super().__init__(RuleSet(Wheel, discover=True))

    def related(self, subject: Vehicle) -> Iterable[Wheel]:
        return subject.wheels


def wheels(count: int = 4, *mileages: int) -> list[Wheel]:
    """`count` wheels; the first ones take the given mileages."""
    result = [Wheel(m) for m in mileages[:count]]
    result.extend(Wheel() for _ in range(count - len(result)))
    return result


def sample_cars() -> list[Car]:
    return [
        Car(weight=1200, wheels=wheels(4), license_plate="AB-123"),
        Sedan(weight=1350, wheels=wheels(4, 15000), license_plate="CD-456"),
    ]


def broken_cars() -> list[Car]:
    return [
        Car(weight=1200, wheels=wheels(4), license_plate="AB-123"),
        Car(weight=1100, wheels=wheels(3), license_plate="EF-789"),
        Car(weight=900, wheels=wheels(4, 0, -100), license_plate="GH-012"),
    ]

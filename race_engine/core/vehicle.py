"""Vehicle model for the race simulation engine.

A :class:`Vehicle` is a tagged variant: a single mutable record holding the
state every vehicle shares (name, tank, fuel, odometer) plus an immutable,
kind-specific payload.  The payload type determines the vehicle's
:class:`VehicleKind`, and both the adjusted efficiency and the stunt a
vehicle can perform dispatch on that kind.

Fuel is kept at two-decimal precision: every mutation is rounded
half-up, and fuel that rounds below zero is clamped to 0.0.  The
odometer accumulates the exact distance covered and is read back rounded
to two decimals, so splitting a trip into several legs never drifts the
reading away from the total.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from race_engine.core.displacement import Displacement, QuadType
from race_engine.core.registry import NameRegistry, normalize_name
from race_engine.exceptions import ValidationError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

BASE_EFFICIENCY: float = 10.0  # km per litre for a plain vehicle
MOTORCYCLE_EFFICIENCY: float = 20.0
TRUCK_EFFICIENCY: float = 6.25
TRUCK_REDUCTION_PER_TONNE: float = 0.2

MIN_CARGO_WEIGHT: int = 1000
MAX_CARGO_WEIGHT: int = 10000


def round2(value: float) -> float:
    """Round *value* half-up to two decimals."""
    return math.floor(value * 100.0 + 0.5) / 100.0


# ---------------------------------------------------------------------------
# Kinds, stunts and payloads
# ---------------------------------------------------------------------------


class VehicleKind(Enum):
    CAR = "car"
    MOTORCYCLE = "motorcycle"
    TRUCK = "truck"
    QUAD = "quad"


class Stunt(Enum):
    """A cosmetic manoeuvre that burns a fixed distance-equivalent of fuel.

    The value is ``(label, distance_equivalent_km)``.
    """

    SKID = ("Skid", 7.5)
    WHEELIE = ("Wheelie", 6.5)

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def distance_equivalent(self) -> float:
        return self.value[1]


@dataclass(frozen=True)
class CarSpec:
    """Car payload.

    Attributes:
        sporty: Whether the car is a sports model.
    """

    sporty: bool = False


@dataclass(frozen=True)
class MotorcycleSpec:
    displacement: Displacement


@dataclass(frozen=True)
class TruckSpec:
    """Truck payload.

    Attributes:
        cargo_weight: Cargo weight in kg, within [1000, 10000].
    """

    cargo_weight: int

    def __post_init__(self) -> None:
        if not MIN_CARGO_WEIGHT <= self.cargo_weight <= MAX_CARGO_WEIGHT:
            raise ValidationError(
                f"cargo_weight must be between {MIN_CARGO_WEIGHT} and "
                f"{MAX_CARGO_WEIGHT} kg, got {self.cargo_weight}."
            )


@dataclass(frozen=True)
class QuadSpec:
    displacement: Displacement
    quad_type: QuadType


VehicleSpec = CarSpec | MotorcycleSpec | TruckSpec | QuadSpec

_KIND_BY_SPEC: dict[type, VehicleKind] = {
    CarSpec: VehicleKind.CAR,
    MotorcycleSpec: VehicleKind.MOTORCYCLE,
    TruckSpec: VehicleKind.TRUCK,
    QuadSpec: VehicleKind.QUAD,
}

_STUNT_BY_KIND: dict[VehicleKind, Stunt] = {
    VehicleKind.CAR: Stunt.SKID,
    VehicleKind.MOTORCYCLE: Stunt.WHEELIE,
    VehicleKind.QUAD: Stunt.WHEELIE,
}


def _motorcycle_efficiency(displacement: Displacement) -> float:
    # Whole-litre division: every class under 1000 cc contributes 0.
    return MOTORCYCLE_EFFICIENCY - (1 - displacement.cc // 1000)


# ---------------------------------------------------------------------------
# Vehicle
# ---------------------------------------------------------------------------


class Vehicle:
    """Fuel-constrained race vehicle.

    Attributes:
        name: Normalised, unique vehicle name.
        spec: Kind-specific payload (``CarSpec``, ``MotorcycleSpec``,
            ``TruckSpec`` or ``QuadSpec``).
        capacity: Fuel tank capacity in litres.
        brand: Manufacturer label (may be empty).
        model: Model label (may be empty).
    """

    __slots__ = ("name", "spec", "capacity", "brand", "model", "_fuel", "_odometer")

    def __init__(
        self,
        name: str,
        spec: VehicleSpec,
        capacity: float,
        fuel: float,
        odometer: float = 0.0,
        brand: str = "",
        model: str = "",
        registry: NameRegistry | None = None,
    ) -> None:
        """Initialise and validate a vehicle.

        Args:
            name: Requested name; normalised before storage.
            spec: Kind-specific payload.
            capacity: Tank capacity in litres (> 0).
            fuel: Initial fuel in litres, within [0, capacity].
            odometer: Initial odometer reading in km (>= 0).
            brand: Manufacturer label.
            model: Model label.
            registry: Registry used to enforce name uniqueness.  The name
                is claimed only once every other check has passed.

        Raises:
            ValidationError: If any attribute is invalid or the name is
                already taken in *registry*.
        """
        if type(spec) not in _KIND_BY_SPEC:
            raise ValidationError(f"Unsupported vehicle payload: {spec!r}.")
        if not name.strip():
            raise ValidationError("Vehicle name must not be blank.")
        if round2(capacity) <= 0.0:
            raise ValidationError("Tank capacity must be > 0.")
        if fuel < 0.0:
            raise ValidationError("Initial fuel must be >= 0.")
        if round2(fuel) > round2(capacity):
            raise ValidationError("Initial fuel must not exceed tank capacity.")
        if odometer < 0.0:
            raise ValidationError("Initial odometer must be >= 0.")

        self.name: str = (
            registry.claim(name) if registry is not None else normalize_name(name)
        )
        self.spec: VehicleSpec = spec
        self.capacity: float = round2(capacity)
        self.brand: str = brand
        self.model: str = model
        self._fuel: float = round2(fuel)
        # Unrounded running total; the reading is rounded on access.
        self._odometer: float = round2(odometer)

    # -- State ---------------------------------------------------------------

    @property
    def kind(self) -> VehicleKind:
        return _KIND_BY_SPEC[type(self.spec)]

    @property
    def fuel(self) -> float:
        """Current fuel level in litres."""
        return self._fuel

    @fuel.setter
    def fuel(self, value: float) -> None:
        self._fuel = 0.0 if value < 0.0 else min(round2(value), self.capacity)

    @property
    def odometer(self) -> float:
        """Current odometer reading in km, rounded to two decimals."""
        return round2(self._odometer)

    @property
    def stunt(self) -> Stunt | None:
        """The stunt this vehicle performs, or ``None`` for trucks."""
        return _STUNT_BY_KIND.get(self.kind)

    # -- Behaviour -------------------------------------------------------------

    def adjusted_efficiency(self) -> float:
        """Return km covered per litre of fuel for this vehicle."""
        spec = self.spec
        if isinstance(spec, MotorcycleSpec):
            return _motorcycle_efficiency(spec.displacement)
        if isinstance(spec, QuadSpec):
            return _motorcycle_efficiency(spec.displacement) / 2.0
        if isinstance(spec, TruckSpec):
            tonnes = spec.cargo_weight // 1000
            return TRUCK_EFFICIENCY - tonnes * TRUCK_REDUCTION_PER_TONNE
        return BASE_EFFICIENCY

    def _range(self) -> float:
        return self._fuel * self.adjusted_efficiency()

    def _burn(self, distance: float) -> None:
        self.fuel = self._fuel - distance / self.adjusted_efficiency()

    def travel(self, distance: float) -> float:
        """Drive up to *distance* km on the fuel currently in the tank.

        Covers ``min(range, distance)``, burns the matching fuel and
        advances the odometer.

        Args:
            distance: Requested distance in km (>= 0).

        Returns:
            Distance left uncovered for lack of fuel (0.0 when complete).

        Raises:
            ValueError: If distance is negative.
        """
        if distance < 0.0:
            raise ValueError("travel distance must be >= 0.")
        covered: float = min(self._range(), distance)
        self._burn(covered)
        self._odometer += covered
        return distance - covered

    def refuel(self, amount: float = 0.0) -> float:
        """Add fuel to the tank, capped at capacity.

        Args:
            amount: Litres to add.  Zero or negative fills the tank.

        Returns:
            Litres actually added.
        """
        previous: float = self._fuel
        if amount <= 0.0:
            self.fuel = self.capacity
        else:
            self.fuel = min(self.capacity, self._fuel + amount)
        return round2(self._fuel - previous)

    def perform_stunt(self) -> float:
        """Perform this vehicle's stunt and return the remaining fuel.

        Raises:
            TypeError: If the vehicle kind has no stunt.
        """
        stunt = self.stunt
        if stunt is None:
            raise TypeError(f"{self.kind.value} vehicles cannot perform stunts.")
        self._burn(stunt.distance_equivalent)
        return self._fuel

    def skid(self) -> float:
        """Skid the car, burning fuel regardless of the current level."""
        if self.kind is not VehicleKind.CAR:
            raise TypeError("Only cars can skid.")
        return self.perform_stunt()

    def wheelie(self) -> float:
        """Pull a wheelie, burning fuel regardless of the current level."""
        if self.stunt is not Stunt.WHEELIE:
            raise TypeError("Only motorcycles and quads can pull a wheelie.")
        return self.perform_stunt()

    # -- Presentation ----------------------------------------------------------

    def describe(self) -> str:
        """Return a one-line description of the vehicle and its state."""
        spec = self.spec
        state = (
            f"name={self.name}, capacity={self.capacity:.2f} L, "
            f"fuel={self._fuel:.2f} L, odometer={self.odometer:.2f} km"
        )
        if isinstance(spec, CarSpec):
            return (
                f"Car({state}, brand={self.brand}, model={self.model}, "
                f"sporty={'yes' if spec.sporty else 'no'})"
            )
        if isinstance(spec, MotorcycleSpec):
            return (
                f"Motorcycle({state}, brand={self.brand}, model={self.model}, "
                f"displacement={spec.displacement.cc}cc)"
            )
        if isinstance(spec, TruckSpec):
            return f"Truck({state}, cargo={spec.cargo_weight} kg)"
        return (
            f"Quad({state}, displacement={spec.displacement.cc}cc, "
            f"type={spec.quad_type.label})"
        )

    def introduction(self) -> str:
        """Sentence announcing the vehicle assigned to a participant."""
        return f"You got a {self.describe()}"

    def __repr__(self) -> str:
        return self.describe()

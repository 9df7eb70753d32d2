"""Random vehicle generation for race participants.

The factory owns the :class:`NameRegistry` for one simulation run, so
every vehicle it builds has a name no earlier vehicle from the same
factory has used.  A rejected name raises
:class:`~race_engine.exceptions.ValidationError` and is *not* reserved,
so the caller can simply retry with another name.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TypeVar

import numpy as np
from numpy.random import Generator

from race_engine.core.displacement import Displacement, QuadType
from race_engine.core.registry import NameRegistry
from race_engine.core.vehicle import (
    CarSpec,
    MotorcycleSpec,
    QuadSpec,
    TruckSpec,
    Vehicle,
    VehicleKind,
    round2,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

CAR_BRANDS: tuple[str, ...] = ("Toyota", "Honda", "BMW", "Ford")
CAR_MODELS: tuple[str, ...] = ("Basic", "Basic A", "Premium A", "Premium B")
MOTORCYCLE_BRANDS: tuple[str, ...] = (
    "Harley Davidson",
    "Ducati",
    "Aprilia",
    "BMW",
    "Yamaha",
    "Honda",
    "Suzuki",
    "Kawasaki",
    "KTM",
)
MOTORCYCLE_MODELS: tuple[str, ...] = ("Moto A", "Moto B", "Moto C", "Moto D")

# Inclusive tank capacity bounds in litres.
TANK_RANGES: dict[VehicleKind, tuple[int, int]] = {
    VehicleKind.CAR: (30, 60),
    VehicleKind.MOTORCYCLE: (15, 30),
    VehicleKind.TRUCK: (90, 150),
    VehicleKind.QUAD: (20, 40),
}
CARGO_WEIGHT_RANGE: tuple[int, int] = (1000, 10000)
INITIAL_FILL_RANGE: tuple[float, float] = (0.2, 1.0)


class VehicleFactory:
    """Builds vehicles with randomly drawn attributes.

    Attributes:
        registry: Names already handed out by this factory.
    """

    def __init__(
        self,
        registry: NameRegistry | None = None,
        rng: Generator | None = None,
        seed: int | None = None,
    ) -> None:
        self.registry: NameRegistry = (
            registry if registry is not None else NameRegistry()
        )
        self._rng: Generator = rng if rng is not None else np.random.default_rng(seed)

    def _choice(self, options: Sequence[T]) -> T:
        return options[int(self._rng.integers(0, len(options)))]

    def _tank(self, kind: VehicleKind) -> tuple[float, float]:
        """Draw a tank capacity and a partial initial fill."""
        low, high = TANK_RANGES[kind]
        capacity = float(self._rng.integers(low, high + 1))
        fill = float(self._rng.uniform(*INITIAL_FILL_RANGE))
        return capacity, round2(capacity * fill)

    def create(self, name: str, kind: VehicleKind | None = None) -> Vehicle:
        """Build a vehicle called *name*.

        Args:
            name: Requested vehicle name.
            kind: Vehicle kind to build.  Drawn at random when ``None``.

        Raises:
            ValidationError: If the name is blank or already used.
        """
        if kind is None:
            kind = self._choice(list(VehicleKind))
        builders = {
            VehicleKind.CAR: self.create_car,
            VehicleKind.MOTORCYCLE: self.create_motorcycle,
            VehicleKind.TRUCK: self.create_truck,
            VehicleKind.QUAD: self.create_quad,
        }
        vehicle = builders[kind](name)
        logger.debug("Generated %s", vehicle.describe())
        return vehicle

    def create_car(self, name: str) -> Vehicle:
        capacity, fuel = self._tank(VehicleKind.CAR)
        return Vehicle(
            name,
            CarSpec(sporty=bool(self._rng.integers(0, 2))),
            capacity,
            fuel,
            brand=self._choice(CAR_BRANDS),
            model=self._choice(CAR_MODELS),
            registry=self.registry,
        )

    def create_motorcycle(self, name: str) -> Vehicle:
        capacity, fuel = self._tank(VehicleKind.MOTORCYCLE)
        return Vehicle(
            name,
            MotorcycleSpec(displacement=self._choice(list(Displacement))),
            capacity,
            fuel,
            brand=self._choice(MOTORCYCLE_BRANDS),
            model=self._choice(MOTORCYCLE_MODELS),
            registry=self.registry,
        )

    def create_truck(self, name: str) -> Vehicle:
        capacity, fuel = self._tank(VehicleKind.TRUCK)
        low, high = CARGO_WEIGHT_RANGE
        weight = int(self._rng.integers(low, high + 1))
        return Vehicle(
            name,
            TruckSpec(cargo_weight=weight),
            capacity,
            fuel,
            registry=self.registry,
        )

    def create_quad(self, name: str) -> Vehicle:
        capacity, fuel = self._tank(VehicleKind.QUAD)
        return Vehicle(
            name,
            QuadSpec(
                displacement=self._choice(list(Displacement)),
                quad_type=self._choice(list(QuadType)),
            ),
            capacity,
            fuel,
            registry=self.registry,
        )

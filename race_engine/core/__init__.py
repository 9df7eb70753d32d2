"""Core race-progression modules for the race simulation engine."""

from race_engine.core.displacement import Displacement, QuadType
from race_engine.core.monte_carlo import simulate_race_monte_carlo
from race_engine.core.race import (
    DEFAULT_RACE_NAME,
    MIN_RACE_DISTANCE,
    SEGMENT_LENGTH,
    Race,
    RaceStatus,
)
from race_engine.core.registry import NameRegistry, normalize_name
from race_engine.core.telemetry import REFUEL_MARKER, RaceResult, RaceTelemetry
from race_engine.core.vehicle import (
    CarSpec,
    MotorcycleSpec,
    QuadSpec,
    Stunt,
    TruckSpec,
    Vehicle,
    VehicleKind,
)

__all__ = [
    "CarSpec",
    "DEFAULT_RACE_NAME",
    "Displacement",
    "MIN_RACE_DISTANCE",
    "MotorcycleSpec",
    "NameRegistry",
    "QuadSpec",
    "QuadType",
    "REFUEL_MARKER",
    "Race",
    "RaceResult",
    "RaceStatus",
    "RaceTelemetry",
    "SEGMENT_LENGTH",
    "Stunt",
    "TruckSpec",
    "Vehicle",
    "VehicleKind",
    "normalize_name",
    "simulate_race_monte_carlo",
]

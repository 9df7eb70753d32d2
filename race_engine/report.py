"""Standings and history rendering for finished races."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from race_engine.core.telemetry import RaceResult

STANDINGS_COLUMNS: list[str] = [
    "position",
    "name",
    "kind",
    "distance_km",
    "odometer_km",
    "fuel_l",
    "refuel_stops",
]


def standings_frame(results: Sequence[RaceResult]) -> pd.DataFrame:
    """Build a standings table with one row per result, in rank order."""
    rows = [
        {
            "position": r.position,
            "name": r.vehicle.name,
            "kind": r.vehicle.kind.value,
            "distance_km": r.distance,
            "odometer_km": r.vehicle.odometer,
            "fuel_l": r.vehicle.fuel,
            "refuel_stops": r.refuel_stops,
        }
        for r in results
    ]
    return pd.DataFrame(rows, columns=STANDINGS_COLUMNS)


def format_standings(results: Sequence[RaceResult]) -> str:
    """Render the standings table as plain text."""
    frame = standings_frame(results)
    if frame.empty:
        return "(no results)"
    return frame.to_string(index=False, float_format=lambda v: f"{v:.2f}")


def format_summary(result: RaceResult) -> str:
    """One-line summary of a single result."""
    return (
        f"{result.position} -> {result.vehicle.name}: {result.distance:.2f} km, "
        f"{result.refuel_stops} refuel stop(s), {result.vehicle.describe()}"
    )


def format_history(results: Sequence[RaceResult]) -> str:
    """Render every vehicle's action log, in rank order."""
    blocks = []
    for r in results:
        lines = [f"{r.position} -> {r.vehicle.name}", *r.history]
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)

"""Race telemetry: per-vehicle action history and cumulative distance ledger."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from race_engine.core.vehicle import Vehicle, round2
from race_engine.exceptions import UnknownParticipantError

logger = logging.getLogger(__name__)

REFUEL_MARKER: str = "Refuel"


@dataclass(frozen=True)
class RaceResult:
    """Final standing of one vehicle.

    Attributes:
        vehicle: The vehicle this result belongs to.
        position: Final rank (1 is the winner).
        distance: Total distance covered, rounded to 2 decimals.
        refuel_stops: Number of refuel entries in the action history.
        history: Ordered action log for the vehicle.
    """

    vehicle: Vehicle
    position: int
    distance: float
    refuel_stops: int
    history: tuple[str, ...]


class RaceTelemetry:
    """Ledger of what every participant did during a single race.

    ``history`` maps vehicle names to their append-only action log and
    ``positions`` maps vehicle names to cumulative distance.  Both keep
    the participants' registration order.
    """

    __slots__ = ("history", "positions")

    def __init__(self) -> None:
        self.history: dict[str, list[str]] = {}
        self.positions: dict[str, float] = {}

    def initialize(self, participants: Iterable[Vehicle]) -> None:
        """Reset the ledger with an empty entry for every participant."""
        self.history = {}
        self.positions = {}
        for vehicle in participants:
            self.history[vehicle.name] = []
            self.positions[vehicle.name] = 0.0

    def record_action(self, name: str, action: str) -> None:
        """Append *action* to the history of vehicle *name*.

        Raises:
            UnknownParticipantError: If *name* was never initialised.
        """
        if name not in self.history:
            raise UnknownParticipantError(name)
        self.history[name].append(action)
        logger.debug("%s: %s", name, action)

    def update_position(self, name: str, distance: float) -> None:
        """Add *distance* to the cumulative distance of vehicle *name*.

        Raises:
            UnknownParticipantError: If *name* was never initialised.
        """
        if name not in self.positions:
            raise UnknownParticipantError(name)
        self.positions[name] += distance

    def refuel_stops(self, name: str) -> int:
        return sum(1 for entry in self.history.get(name, ()) if REFUEL_MARKER in entry)

    def compute_results(self, participants: Iterable[Vehicle]) -> list[RaceResult]:
        """Rank participants by cumulative distance, furthest first.

        Ties keep ledger order and the rank is the sorted index plus one.
        Ledger entries without a matching vehicle in *participants* are left
        out, but their rank is still used up.
        """
        by_name: dict[str, Vehicle] = {v.name: v for v in participants}
        standings = sorted(
            self.positions.items(), key=lambda item: item[1], reverse=True
        )

        results: list[RaceResult] = []
        for index, (name, distance) in enumerate(standings):
            vehicle = by_name.get(name)
            if vehicle is None:
                continue
            results.append(
                RaceResult(
                    vehicle=vehicle,
                    position=index + 1,
                    distance=round2(distance),
                    refuel_stops=self.refuel_stops(name),
                    history=tuple(self.history[name]),
                )
            )
        return results

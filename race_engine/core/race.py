"""Turn-based race orchestrator for the race simulation engine.

Each turn one participant is drawn uniformly at random and asked to
cover a random distance.  The distance is split into fixed-length
segments; whenever the tank runs dry mid-segment the vehicle refuels to
full and keeps going until the segment is done.  After every segment the
vehicle gets a fixed number of chances to perform its stunt.

The distance drawn for a turn is clamped against how far the ledger has
already credited the vehicle, so that it lands exactly on the finish
line and never overshoots it.  The race finishes as soon as the vehicle
with the highest odometer reading has reached the total distance.

All randomness is drawn from a single ``numpy.random.Generator`` (or any
object exposing ``integers(low, high)`` and ``random()``), so races are
reproducible when a seed or a scripted source is supplied.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Sequence
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np
from numpy.random import Generator

from race_engine.core.telemetry import REFUEL_MARKER, RaceResult, RaceTelemetry
from race_engine.core.vehicle import Vehicle, round2
from race_engine.exceptions import ConfigurationError, RaceStateError

if TYPE_CHECKING:
    from race_engine.config import RaceConfig

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MIN_RACE_DISTANCE: float = 1000.0
DEFAULT_RACE_NAME: str = "Grand Stunt Race"
SEGMENT_LENGTH: float = 20.0  # km between stunt opportunities
STUNT_ATTEMPTS: int = 2
STUNT_PROBABILITY: float = 0.5
MIN_TURN_DISTANCE: float = 10.0
MAX_TURN_DISTANCE: float = 200.0


class RaceStatus(Enum):
    NOT_STARTED = "not started"
    RUNNING = "running"
    FINISHED = "finished"


# ---------------------------------------------------------------------------
# Race
# ---------------------------------------------------------------------------


class Race:
    """A single race among a fixed list of vehicles.

    Attributes:
        name: Race title.
        distance: Total race distance in km.
        participants: Vehicles taking part, in registration order.
        telemetry: Ledger receiving every state change during the race.
        status: Current lifecycle state.
        turns: Number of turns played so far.
        winner: The winning vehicle once the race has finished.
    """

    def __init__(
        self,
        participants: Sequence[Vehicle],
        distance: float = MIN_RACE_DISTANCE,
        name: str = DEFAULT_RACE_NAME,
        rng: Generator | None = None,
        seed: int | None = None,
        telemetry: RaceTelemetry | None = None,
        segment_length: float = SEGMENT_LENGTH,
        stunt_attempts: int = STUNT_ATTEMPTS,
        stunt_probability: float = STUNT_PROBABILITY,
        min_turn_distance: float = MIN_TURN_DISTANCE,
        max_turn_distance: float = MAX_TURN_DISTANCE,
        pacing_delay: float = 0.0,
    ) -> None:
        """Create a race and register every participant with its telemetry.

        Args:
            participants: Vehicles in registration order (non-empty, unique
                names).
            distance: Total race distance in km (>= 1000).
            name: Race title.
            rng: Random source.  Takes precedence over *seed*.
            seed: Seed for ``np.random.default_rng`` when *rng* is ``None``.
            telemetry: Ledger to record into.  A fresh one is created when
                omitted.
            segment_length: Length of a segment in km (> 0).
            stunt_attempts: Stunt draws after each segment (>= 0).
            stunt_probability: Chance of each stunt draw succeeding.
            min_turn_distance: Lower bound of the per-turn distance draw.
            max_turn_distance: Upper bound of the per-turn distance draw.
            pacing_delay: Seconds to sleep between turns in :meth:`run`.

        Raises:
            ConfigurationError: If any argument is out of range.
        """
        if not participants:
            raise ConfigurationError("A race needs at least one participant.")
        names = [vehicle.name for vehicle in participants]
        if len(set(names)) != len(names):
            raise ConfigurationError("Participant names must be unique.")
        if distance < MIN_RACE_DISTANCE:
            raise ConfigurationError(
                f"Race distance must be at least {MIN_RACE_DISTANCE:.0f} km, "
                f"got {distance}."
            )
        if segment_length <= 0.0:
            raise ConfigurationError("segment_length must be > 0.")
        if stunt_attempts < 0:
            raise ConfigurationError("stunt_attempts must be >= 0.")
        if not 0.0 <= stunt_probability <= 1.0:
            raise ConfigurationError("stunt_probability must be between 0.0 and 1.0.")
        if not 0.0 < min_turn_distance <= max_turn_distance:
            raise ConfigurationError(
                "Turn distance bounds must satisfy 0 < min <= max."
            )
        if pacing_delay < 0.0:
            raise ConfigurationError("pacing_delay must be >= 0.")

        self.name: str = name
        self.distance: float = float(distance)
        self.participants: list[Vehicle] = list(participants)
        self.telemetry: RaceTelemetry = (
            telemetry if telemetry is not None else RaceTelemetry()
        )
        self.segment_length: float = segment_length
        self.stunt_attempts: int = stunt_attempts
        self.stunt_probability: float = stunt_probability
        self.pacing_delay: float = pacing_delay
        self.status: RaceStatus = RaceStatus.NOT_STARTED
        self.turns: int = 0
        self.winner: Vehicle | None = None

        self._rng: Generator = rng if rng is not None else np.random.default_rng(seed)
        # Turn distances are drawn in hundredths of a km.
        self._min_cents: int = int(round(min_turn_distance * 100))
        self._max_cents: int = int(round(max_turn_distance * 100))

        self._start_odometers: dict[str, float] = {
            vehicle.name: vehicle.odometer for vehicle in self.participants
        }
        self.telemetry.initialize(self.participants)

    @classmethod
    def from_config(
        cls,
        participants: Sequence[Vehicle],
        config: RaceConfig,
        rng: Generator | None = None,
        seed: int | None = None,
    ) -> Race:
        """Build a race from a loaded :class:`~race_engine.config.RaceConfig`."""
        return cls(
            participants,
            distance=config.total_distance,
            name=config.name,
            rng=rng,
            seed=seed,
            segment_length=config.segment_length,
            stunt_attempts=config.stunt_attempts,
            stunt_probability=config.stunt_probability,
            min_turn_distance=config.min_turn_distance,
            max_turn_distance=config.max_turn_distance,
            pacing_delay=config.pacing_delay,
        )

    def __repr__(self) -> str:
        return (
            f"Race(name={self.name!r}, distance={self.distance:.2f}, "
            f"participants={len(self.participants)}, status={self.status.value}, "
            f"turns={self.turns})"
        )

    # -- Lifecycle -------------------------------------------------------------

    def start(self) -> None:
        """Move the race from NOT_STARTED to RUNNING.

        Raises:
            RaceStateError: If the race has already started.
        """
        if self.status is not RaceStatus.NOT_STARTED:
            raise RaceStateError(f"Race '{self.name}' has already started.")
        self.status = RaceStatus.RUNNING
        logger.info(
            "Race '%s' started: %d participants over %.2f km",
            self.name,
            len(self.participants),
            self.distance,
        )

    def step(self) -> Vehicle | None:
        """Play one turn.

        Starts the race on the first call.

        Returns:
            The winner if this turn finished the race, otherwise ``None``.

        Raises:
            RaceStateError: If the race has already finished.
        """
        if self.status is RaceStatus.FINISHED:
            raise RaceStateError(f"Race '{self.name}' has already finished.")
        if self.status is RaceStatus.NOT_STARTED:
            self.start()

        vehicle = self._select_vehicle()
        self._advance_vehicle(vehicle)
        self.turns += 1

        winner = self._find_winner()
        if winner is not None:
            self.status = RaceStatus.FINISHED
            self.winner = winner
            logger.info(
                "Race '%s' finished after %d turns: winner %s",
                self.name,
                self.turns,
                winner.name,
            )
        return winner

    def run(self, on_turn: Callable[[Race], None] | None = None) -> Vehicle:
        """Play turns until a winner is declared and return it.

        Args:
            on_turn: Optional callback invoked with the race after each turn.
        """
        winner: Vehicle | None = None
        while winner is None:
            if self.turns and self.pacing_delay > 0.0:
                time.sleep(self.pacing_delay)
            winner = self.step()
            if on_turn is not None:
                on_turn(self)
        return winner

    def results(self) -> list[RaceResult]:
        """Final standings, furthest first.

        Raises:
            RaceStateError: If the race has not finished yet.
        """
        if self.status is not RaceStatus.FINISHED:
            raise RaceStateError(f"Race '{self.name}' has not finished yet.")
        return self.telemetry.compute_results(self.participants)

    # -- Turn mechanics --------------------------------------------------------

    def _select_vehicle(self) -> Vehicle:
        index = int(self._rng.integers(0, len(self.participants)))
        return self.participants[index]

    def _covered(self, vehicle: Vehicle) -> float:
        """Where *vehicle* stands on the course: start reading plus ledger."""
        return round2(
            self._start_odometers[vehicle.name]
            + self.telemetry.positions[vehicle.name]
        )

    def _turn_distance(self, vehicle: Vehicle) -> float:
        """Draw this turn's distance, clamped to land exactly on the finish."""
        cents = int(self._rng.integers(self._min_cents, self._max_cents + 1))
        drawn: float = cents / 100
        remaining = round2(self.distance - self._covered(vehicle))
        if drawn > remaining:
            return max(0.0, remaining)
        return drawn

    def _segment_count(self, distance: float) -> int:
        return math.ceil(distance / self.segment_length)

    def _advance_vehicle(self, vehicle: Vehicle) -> None:
        target = self._turn_distance(vehicle)
        logger.debug(
            "Turn %d: %s targets %.2f km", self.turns + 1, vehicle.name, target
        )

        self.telemetry.record_action(
            vehicle.name,
            f"Trip start: {target:.2f} km to cover "
            f"({vehicle.odometer:.2f} km and {vehicle.fuel:.2f} L on board)",
        )

        remaining = target
        for _ in range(self._segment_count(target)):
            segment = min(self.segment_length, remaining)
            self._advance_segment(vehicle, segment)
            remaining -= segment
            for _ in range(self.stunt_attempts):
                self._attempt_stunt(vehicle)

        self.telemetry.record_action(
            vehicle.name,
            f"Trip end: {target:.2f} km covered in total "
            f"({vehicle.odometer:.2f} km and {vehicle.fuel:.2f} L on board)",
        )
        self.telemetry.update_position(vehicle.name, target)

    def _advance_segment(self, vehicle: Vehicle, segment: float) -> None:
        """Cover *segment* km, refuelling to full as often as needed."""
        shortfall = vehicle.travel(segment)
        self.telemetry.record_action(
            vehicle.name, f"Segment advance: covered {segment - shortfall:.2f} km"
        )

        while shortfall > 0.0:
            added = vehicle.refuel()
            self.telemetry.record_action(
                vehicle.name, f"{REFUEL_MARKER}: {added:.2f} L"
            )
            requested = shortfall
            shortfall = vehicle.travel(requested)
            self.telemetry.record_action(
                vehicle.name, f"Segment advance: covered {requested - shortfall:.2f} km"
            )

    def _attempt_stunt(self, vehicle: Vehicle) -> None:
        triggered = float(self._rng.random()) < self.stunt_probability
        stunt = vehicle.stunt
        if not triggered or stunt is None:
            return
        fuel_left = vehicle.perform_stunt()
        self.telemetry.record_action(
            vehicle.name, f"{stunt.label}: {fuel_left:.2f} L of fuel left."
        )

    def _find_winner(self) -> Vehicle | None:
        leader = max(self.participants, key=lambda v: v.odometer)
        if leader.odometer >= self.distance:
            return leader
        return None

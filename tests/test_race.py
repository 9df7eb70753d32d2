"""Tests for the turn-based race orchestrator."""

from __future__ import annotations

import pytest

from race_engine.core.displacement import Displacement, QuadType
from race_engine.core.race import Race, RaceStatus
from race_engine.core.telemetry import REFUEL_MARKER
from race_engine.core.vehicle import (
    CarSpec,
    MotorcycleSpec,
    QuadSpec,
    TruckSpec,
    Vehicle,
    round2,
)
from race_engine.exceptions import ConfigurationError, RaceStateError
from race_engine.factory import VehicleFactory

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


class _ScriptedRng:
    """Random source replaying fixed integer and float sequences.

    ``integers`` pops the next scripted value and checks it lies in
    ``[low, high)``.  ``random`` pops the next float, falling back to
    *default_float* once the script is exhausted.
    """

    def __init__(self, ints: list[int], floats: list[float] | None = None,
                 default_float: float = 0.99) -> None:
        self.ints = list(ints)
        self.floats = list(floats or [])
        self.default_float = default_float
        self.random_calls = 0

    def integers(self, low: int, high: int) -> int:
        value = self.ints.pop(0)
        assert low <= value < high, f"{value} outside [{low}, {high})"
        return value

    def random(self) -> float:
        self.random_calls += 1
        if self.floats:
            return self.floats.pop(0)
        return self.default_float


def _car(name: str = "Rayo", fuel: float = 50.0, capacity: float = 50.0,
         odometer: float = 0.0) -> Vehicle:
    return Vehicle(name, CarSpec(), capacity, fuel, odometer=odometer)


def _truck(name: str = "Trailer") -> Vehicle:
    return Vehicle(name, TruckSpec(cargo_weight=2000), 150.0, 150.0)


def _fleet(seed: int, size: int = 4) -> list[Vehicle]:
    factory = VehicleFactory(seed=seed)
    return [factory.create(f"Racer {i}") for i in range(size)]


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def test_race_requires_minimum_distance() -> None:
    """Distances under 1000 km are rejected."""
    with pytest.raises(ConfigurationError, match="at least 1000"):
        Race([_car()], distance=999.99)
    Race([_car()], distance=1000.0)


def test_race_rejects_empty_and_duplicate_participants() -> None:
    """Participants must be non-empty with unique names."""
    with pytest.raises(ConfigurationError, match="at least one"):
        Race([])
    with pytest.raises(ConfigurationError, match="unique"):
        Race([_car("Twin"), _car("twin")])


def test_race_rejects_bad_knobs() -> None:
    """Segment, stunt and turn-distance settings are validated."""
    with pytest.raises(ConfigurationError):
        Race([_car()], segment_length=0.0)
    with pytest.raises(ConfigurationError):
        Race([_car()], stunt_probability=1.5)
    with pytest.raises(ConfigurationError):
        Race([_car()], min_turn_distance=50.0, max_turn_distance=10.0)


def test_construction_initialises_telemetry() -> None:
    """Every participant has a ledger entry before the first turn."""
    race = Race([_car("Alpha"), _car("Beta")])
    assert race.status is RaceStatus.NOT_STARTED
    assert race.telemetry.positions == {"Alpha": 0.0, "Beta": 0.0}


# ---------------------------------------------------------------------------
# Single turns
# ---------------------------------------------------------------------------


def test_turn_log_for_plain_segment() -> None:
    """A 20 km turn logs start, one segment and the trip end."""
    car = _car(fuel=50.0)
    rng = _ScriptedRng([0, 2000])
    race = Race([car], rng=rng)
    assert race.step() is None

    assert race.telemetry.history["Rayo"] == [
        "Trip start: 20.00 km to cover (0.00 km and 50.00 L on board)",
        "Segment advance: covered 20.00 km",
        "Trip end: 20.00 km covered in total (20.00 km and 48.00 L on board)",
    ]
    assert race.telemetry.positions["Rayo"] == 20.0
    assert race.status is RaceStatus.RUNNING
    assert race.turns == 1


def test_turn_split_into_segments() -> None:
    """A 45 km turn runs three segments with two stunt draws each."""
    car = _car(fuel=50.0)
    rng = _ScriptedRng([0, 4500])
    race = Race([car], rng=rng)
    race.step()

    advances = [e for e in race.telemetry.history["Rayo"] if e.startswith("Segment")]
    assert advances == [
        "Segment advance: covered 20.00 km",
        "Segment advance: covered 20.00 km",
        "Segment advance: covered 5.00 km",
    ]
    assert rng.random_calls == 6
    assert car.odometer == 45.0


def test_refuel_mid_segment() -> None:
    """Running dry mid-segment refuels to full and finishes the segment."""
    car = _car(fuel=1.0, capacity=10.0)
    rng = _ScriptedRng([0, 1500])
    race = Race([car], rng=rng)
    race.step()

    history = race.telemetry.history["Rayo"]
    assert history[1:4] == [
        "Segment advance: covered 10.00 km",
        f"{REFUEL_MARKER}: 10.00 L",
        "Segment advance: covered 5.00 km",
    ]
    assert car.odometer == 15.0
    assert car.fuel == 9.5
    assert race.telemetry.refuel_stops("Rayo") == 1


def test_repeated_refuels_until_segment_done() -> None:
    """A tank smaller than a segment refuels as many times as needed."""
    car = _car(fuel=0.0, capacity=0.5)  # 5 km range per tank
    rng = _ScriptedRng([0, 1200])
    race = Race([car], rng=rng)
    race.step()

    assert race.telemetry.refuel_stops("Rayo") == 3
    assert car.odometer == 12.0
    assert car.fuel == pytest.approx(0.3)


def test_stunts_follow_probability_draws() -> None:
    """Each draw below the probability triggers one stunt."""
    car = _car(fuel=50.0)
    rng = _ScriptedRng([0, 2000], floats=[0.1, 0.9])
    race = Race([car], rng=rng)
    race.step()

    stunts = [e for e in race.telemetry.history["Rayo"] if e.startswith("Skid")]
    assert stunts == ["Skid: 47.25 L of fuel left."]
    assert car.fuel == 47.25


def test_motorcycle_wheelies() -> None:
    """Motorcycles log wheelies."""
    moto = Vehicle("Moto", MotorcycleSpec(Displacement.CC_1000), 20.0, 20.0)
    rng = _ScriptedRng([0, 2000], floats=[0.0, 0.0])
    race = Race([moto], rng=rng)
    race.step()
    wheelies = [e for e in race.telemetry.history["Moto"] if e.startswith("Wheelie")]
    assert len(wheelies) == 2


def test_truck_never_performs_stunts() -> None:
    """Trucks ignore successful stunt draws."""
    truck = _truck()
    rng = _ScriptedRng([0, 2000], floats=[0.0, 0.0])
    race = Race([truck], rng=rng)
    race.step()
    assert len(race.telemetry.history["Trailer"]) == 3
    assert rng.random_calls == 2


def test_mover_selected_by_index() -> None:
    """The drawn index picks the mover; others stay put."""
    alpha, beta = _car("Alpha"), _car("Beta")
    rng = _ScriptedRng([1, 1000])
    race = Race([alpha, beta], rng=rng)
    race.step()
    assert beta.odometer == 10.0
    assert alpha.odometer == 0.0
    assert race.telemetry.history["Alpha"] == []


# ---------------------------------------------------------------------------
# Finish detection
# ---------------------------------------------------------------------------


def test_final_leg_clamped_to_exact_finish() -> None:
    """A vehicle at 900 km that draws 200 km covers exactly 100 km and wins."""
    car = _car(fuel=50.0, odometer=900.0)
    rng = _ScriptedRng([0, 20000])
    race = Race([car], rng=rng)

    assert race.step() is car
    assert car.odometer == 1000.0
    assert race.status is RaceStatus.FINISHED
    assert race.winner is car
    assert race.telemetry.positions["Rayo"] == pytest.approx(100.0)


def test_winner_targets_sum_to_race_distance() -> None:
    """The winner's ledger distance equals the race distance, no overshoot."""
    car = _car(fuel=200.0, capacity=200.0)
    rng = _ScriptedRng([0, 20000, 0, 20000, 0, 20000, 0, 20000, 0, 15055, 0, 20000])
    race = Race([car], rng=rng)
    winner = race.run()

    assert winner is car
    assert race.turns == 6
    assert car.odometer == 1000.0
    assert race.telemetry.positions["Rayo"] == pytest.approx(1000.0)


def test_step_after_finish_rejected() -> None:
    """A finished race cannot be advanced."""
    race = Race([_car(odometer=990.0)], rng=_ScriptedRng([0, 1000]))
    race.step()
    with pytest.raises(RaceStateError, match="already finished"):
        race.step()
    with pytest.raises(RaceStateError, match="already started"):
        race.start()


def test_results_require_finished_race() -> None:
    """Standings are only available once a winner is declared."""
    race = Race([_car()], rng=_ScriptedRng([0, 1000]))
    with pytest.raises(RaceStateError, match="not finished"):
        race.results()
    race.step()
    with pytest.raises(RaceStateError):
        race.results()


# ---------------------------------------------------------------------------
# Full races
# ---------------------------------------------------------------------------


def test_full_race_runs_to_completion() -> None:
    """A seeded race ends with the winner exactly on the finish line."""
    race = Race(_fleet(seed=3), seed=11)
    winner = race.run()

    assert race.status is RaceStatus.FINISHED
    assert winner.odometer == 1000.0
    results = race.results()
    assert results[0].vehicle is winner
    assert results[0].distance == 1000.0
    assert [r.position for r in results] == list(range(1, len(results) + 1))
    assert all(r.vehicle.odometer <= 1000.0 for r in results)
    distances = [r.distance for r in results]
    assert distances == sorted(distances, reverse=True)


@pytest.mark.parametrize("seed", range(20))
def test_winner_lands_on_finish_despite_refuels(seed: int) -> None:
    """Across seeded races the winner's ledger and odometer both read 1000.

    No tank holds 1000 km of range, so every winner refuels on the way.
    """
    race = Race(_fleet(seed=seed), seed=seed + 100)
    winner = race.run()

    assert round2(race.telemetry.positions[winner.name]) == race.distance
    assert winner.odometer == race.distance
    assert all(v.odometer <= race.distance for v in race.participants)
    assert race.results()[0].refuel_stops >= 1


def test_mid_segment_refuel_keeps_odometer_on_ledger() -> None:
    """A nearly empty quad refuels mid-segment and still reads the ledger total."""
    quad = Vehicle(
        "Cuatro", QuadSpec(Displacement.CC_125, QuadType.SPORT), 20.0, 0.01
    )
    race = Race([quad], rng=_ScriptedRng([0, 2000]))
    race.step()

    assert race.telemetry.refuel_stops("Cuatro") == 1
    assert race.telemetry.positions["Cuatro"] == 20.0
    assert quad.odometer == 20.0


def test_seed_determinism() -> None:
    """The same seeds reproduce the same race turn for turn."""
    r1 = Race(_fleet(seed=5), seed=21)
    r2 = Race(_fleet(seed=5), seed=21)
    r1.run()
    r2.run()
    assert r1.turns == r2.turns
    assert r1.winner.name == r2.winner.name
    assert r1.telemetry.history == r2.telemetry.history


def test_run_invokes_turn_callback() -> None:
    """on_turn is called once per turn."""
    calls: list[int] = []
    race = Race(_fleet(seed=8, size=2), seed=2)
    race.run(on_turn=lambda r: calls.append(r.turns))
    assert calls == list(range(1, race.turns + 1))

"""Monte Carlo race analytics for the race simulation engine.

Runs many seeded replications of a race over copies of the same starting
fleet and aggregates the outcomes into win probabilities, expected
finishing positions, expected turns and refuel-stop averages.
"""

from __future__ import annotations

import copy
from collections import defaultdict
from collections.abc import Sequence
from typing import Any

from race_engine.core.race import MIN_RACE_DISTANCE, Race
from race_engine.core.vehicle import Vehicle


def simulate_race_monte_carlo(
    fleet: Sequence[Vehicle],
    simulations: int,
    distance: float = MIN_RACE_DISTANCE,
    base_seed: int = 42,
    **race_options: Any,
) -> dict[str, Any]:
    """Run a Monte Carlo ensemble of races.

    Every replication races a deep copy of *fleet*, so the caller's
    vehicles are never mutated.  Replication *i* uses
    ``seed = base_seed + i``, making the ensemble reproducible.

    Args:
        fleet: Starting vehicles (unique names).
        simulations: Number of replications (>= 1).
        distance: Race distance in km.
        base_seed: Starting seed value.
        **race_options: Extra keyword arguments forwarded to :class:`Race`
            (``segment_length``, ``stunt_probability``, ...).

    Returns:
        Dictionary with keys:
            winner_probabilities  -- ``{vehicle_name: float}``
            expected_position     -- ``{vehicle_name: float}``
            expected_refuel_stops -- ``{vehicle_name: float}``
            finish_distribution   -- ``{vehicle_name: {position: float}}``
            expected_turns        -- ``float``

    Raises:
        ValueError: If simulations < 1.
    """
    if simulations < 1:
        raise ValueError("simulations must be >= 1.")

    names: list[str] = [vehicle.name for vehicle in fleet]

    win_counts: dict[str, int] = defaultdict(int)
    position_sums: dict[str, int] = defaultdict(int)
    refuel_sums: dict[str, int] = defaultdict(int)
    position_counts: dict[str, dict[int, int]] = {
        name: defaultdict(int) for name in names
    }
    turn_sum: int = 0

    for i in range(simulations):
        race = Race(
            copy.deepcopy(list(fleet)),
            distance=distance,
            seed=base_seed + i,
            **race_options,
        )
        winner = race.run()
        win_counts[winner.name] += 1
        turn_sum += race.turns

        for result in race.results():
            name = result.vehicle.name
            position_sums[name] += result.position
            refuel_sums[name] += result.refuel_stops
            position_counts[name][result.position] += 1

    # -- Normalise ------------------------------------------------------------
    inv: float = 1.0 / simulations

    return {
        "winner_probabilities": {name: win_counts[name] * inv for name in names},
        "expected_position": {name: position_sums[name] * inv for name in names},
        "expected_refuel_stops": {name: refuel_sums[name] * inv for name in names},
        "finish_distribution": {
            name: {
                pos: count * inv
                for pos, count in sorted(position_counts[name].items())
            }
            for name in names
        },
        "expected_turns": turn_sum * inv,
    }

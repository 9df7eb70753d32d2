"""CLI entrypoint for the Grand Stunt Race simulation."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from race_engine import __version__
from race_engine.config import load_race_config
from race_engine.core.race import Race
from race_engine.core.vehicle import Vehicle
from race_engine.exceptions import ValidationError
from race_engine.factory import VehicleFactory
from race_engine.report import format_history, format_standings, format_summary


def prompt_number(message: str, read: Callable[[str], str] = input) -> int:
    """Ask for a positive integer until one is entered."""
    while True:
        raw = read(message)
        try:
            value = int(raw.strip())
        except ValueError:
            print("**Error** Please enter a whole number.")
            continue
        if value < 1:
            print("**Error** Please enter a number greater than zero.")
            continue
        return value


def prompt_vehicle(
    factory: VehicleFactory,
    index: int,
    read: Callable[[str], str] = input,
) -> Vehicle:
    """Ask for a vehicle name until the factory accepts it."""
    while True:
        name = read(f"\t* Name of vehicle {index} -> ")
        try:
            return factory.create(name)
        except ValidationError as exc:
            print(f"**Error** {exc}")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a Grand Stunt Race.")
    parser.add_argument("--config", type=Path, default=None, help="race YAML file")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--verbose", action="store_true", help="log every action")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Collect participants, run one race and print the results."""
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    config = load_race_config(args.config)
    print(f"Grand Stunt Race Engine v{__version__}")
    print("=" * 56)

    # -- Participants -----------------------------------------------------------
    factory = VehicleFactory(seed=args.seed)
    count = prompt_number("Number of participants: ")
    vehicles: list[Vehicle] = []
    for index in range(1, count + 1):
        vehicle = prompt_vehicle(factory, index)
        vehicles.append(vehicle)
        print(f"\t{vehicle.introduction()}")

    # -- Race -------------------------------------------------------------------
    race = Race.from_config(vehicles, config, seed=args.seed)
    print(f"\n*** {race.name} ***\n")
    print("The race is on!")
    winner = race.run(on_turn=lambda _race: print(".", end="", flush=True))
    print("\nRace finished!")
    print(f"\nCONGRATULATIONS {winner.name}!!!\n")

    # -- Report -----------------------------------------------------------------
    results = race.results()
    print("* Standings:\n")
    print(format_standings(results))
    print()
    print("\n".join(format_summary(r) for r in results))
    print("\n* Detailed history:\n")
    print(format_history(results))


if __name__ == "__main__":
    sys.exit(main() or 0)

"""Configuration loader for the race simulation engine."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from race_engine.core.race import MIN_RACE_DISTANCE
from race_engine.exceptions import ConfigurationError

DATA_DIR: Path = Path(__file__).resolve().parent.parent / "data"
RACE_CONFIG_PATH: Path = DATA_DIR / "race.yaml"

_REQUIRED_FIELDS: tuple[str, ...] = (
    "name",
    "total_distance",
    "segment_length",
    "stunt_attempts",
    "stunt_probability",
    "min_turn_distance",
    "max_turn_distance",
    "pacing_delay",
)

_NUMERIC_FIELDS: tuple[str, ...] = _REQUIRED_FIELDS[1:]  # all except name


@dataclass(frozen=True)
class RaceConfig:
    """Race parameters loaded from YAML.

    Attributes:
        name: Race title.
        total_distance: Finish distance in km (>= 1000).
        segment_length: Segment length in km (> 0).
        stunt_attempts: Stunt draws after every segment (>= 0).
        stunt_probability: Chance of each stunt draw succeeding (0.0-1.0).
        min_turn_distance: Lower bound of the per-turn distance draw (> 0).
        max_turn_distance: Upper bound of the per-turn distance draw.
        pacing_delay: Seconds between turns when running interactively.
    """

    name: str
    total_distance: float
    segment_length: float
    stunt_attempts: int
    stunt_probability: float
    min_turn_distance: float
    max_turn_distance: float
    pacing_delay: float


def load_race_config(path: Path | None = None) -> RaceConfig:
    """Load the race configuration from a YAML file.

    Args:
        path: Optional override for the configuration file path.

    Returns:
        A validated :class:`RaceConfig`.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        ConfigurationError: If a field is missing, non-numeric, or out of
            range.
    """
    config_path = path or RACE_CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Race configuration not found: {config_path}")

    with open(config_path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}

    entry = data.get("race")
    if not isinstance(entry, dict):
        raise ConfigurationError(f"{config_path}: missing top-level 'race' section")

    # --- Validate required fields ---
    for field in _REQUIRED_FIELDS:
        if field not in entry:
            raise ConfigurationError(f"Race config is missing required field '{field}'")

    # --- Validate numeric types ---
    for field in _NUMERIC_FIELDS:
        val = entry[field]
        if isinstance(val, bool) or not isinstance(val, (int, float)):
            raise ConfigurationError(
                f"Race config '{field}' must be numeric, got {type(val).__name__}"
            )

    config = RaceConfig(
        name=str(entry["name"]),
        total_distance=float(entry["total_distance"]),
        segment_length=float(entry["segment_length"]),
        stunt_attempts=int(entry["stunt_attempts"]),
        stunt_probability=float(entry["stunt_probability"]),
        min_turn_distance=float(entry["min_turn_distance"]),
        max_turn_distance=float(entry["max_turn_distance"]),
        pacing_delay=float(entry["pacing_delay"]),
    )

    # --- Validate ranges ---
    if not config.name.strip():
        raise ConfigurationError("Race config 'name' must not be empty")
    if config.total_distance < MIN_RACE_DISTANCE:
        raise ConfigurationError(
            f"Race config 'total_distance' must be >= {MIN_RACE_DISTANCE:.0f}, "
            f"got {config.total_distance}"
        )
    if config.segment_length <= 0.0:
        raise ConfigurationError("Race config 'segment_length' must be > 0")
    if config.stunt_attempts < 0:
        raise ConfigurationError("Race config 'stunt_attempts' must be >= 0")
    if not 0.0 <= config.stunt_probability <= 1.0:
        raise ConfigurationError("Race config 'stunt_probability' must be in [0, 1]")
    if not 0.0 < config.min_turn_distance <= config.max_turn_distance:
        raise ConfigurationError(
            "Race config turn distances must satisfy 0 < min_turn_distance "
            "<= max_turn_distance"
        )
    if config.pacing_delay < 0.0:
        raise ConfigurationError("Race config 'pacing_delay' must be >= 0")

    return config

"""Custom exceptions for the race simulation engine."""

from __future__ import annotations


class RaceEngineError(Exception):
    """Base exception for all race engine errors."""


class ValidationError(RaceEngineError, ValueError):
    """Raised when a vehicle is constructed with invalid attributes."""


class ConfigurationError(RaceEngineError, ValueError):
    """Raised when a race or its configuration file is invalid."""


class UnknownParticipantError(RaceEngineError, LookupError):
    """Raised when telemetry is updated for a vehicle that was never registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Vehicle '{name}' is not a registered participant")


class RaceStateError(RaceEngineError, RuntimeError):
    """Raised when a race operation is invoked in the wrong lifecycle state."""

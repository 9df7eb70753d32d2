"""Vehicle name normalisation and the per-run uniqueness registry."""

from __future__ import annotations

import re

from race_engine.exceptions import ValidationError

_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Return *name* trimmed, single-spaced, with every word capitalised.

    ``"  el   RAYO mcqueen "`` becomes ``"El Rayo Mcqueen"``.
    """
    words = _WHITESPACE.sub(" ", name.strip()).split(" ")
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


class NameRegistry:
    """Set of vehicle names already claimed during one simulation run.

    Names are compared after :func:`normalize_name`, so uniqueness is
    case- and whitespace-insensitive.
    """

    __slots__ = ("_names",)

    def __init__(self) -> None:
        self._names: set[str] = set()

    def __contains__(self, name: str) -> bool:
        return normalize_name(name) in self._names

    def __len__(self) -> int:
        return len(self._names)

    def claim(self, name: str) -> str:
        """Reserve *name* and return its normalised form.

        Raises:
            ValidationError: If the name is blank or already claimed.
        """
        if not name.strip():
            raise ValidationError("Vehicle name must not be blank.")
        normalized = normalize_name(name)
        if normalized in self._names:
            raise ValidationError(f"A vehicle named '{normalized}' already exists.")
        self._names.add(normalized)
        return normalized

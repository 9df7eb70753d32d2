"""Turn-based fuel-constrained vehicle race simulation engine."""

__version__ = "1.0.0"

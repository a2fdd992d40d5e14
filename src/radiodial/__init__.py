"""Station record store for the radio catalog."""

__version__ = "0.1.0"

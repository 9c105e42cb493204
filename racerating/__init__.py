"""Rating recalculation for multiplayer race events."""

__version__ = "0.1.0"

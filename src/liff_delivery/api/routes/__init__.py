"""Route group exports."""

from . import deliveries, find, health, locations

__all__ = ["deliveries", "find", "health", "locations"]

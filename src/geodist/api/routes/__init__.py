"""Route group exports."""

from . import bulk, distance, health

__all__ = ["bulk", "distance", "health"]

"""Route group exports."""

from . import breaks, capacity, health, insertion, timeline

__all__ = ["timeline", "capacity", "breaks", "insertion", "health"]

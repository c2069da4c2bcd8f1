"""Route group exports."""

from . import customers, health

__all__ = ["health", "customers"]

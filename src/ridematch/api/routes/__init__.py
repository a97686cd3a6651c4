"""Route group exports."""

from . import health, matching, push, routing, watches

__all__ = ["health", "matching", "push", "routing", "watches"]

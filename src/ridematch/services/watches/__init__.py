"""Route watch matching."""

from .matcher import WatchMatcher

__all__ = ["WatchMatcher"]

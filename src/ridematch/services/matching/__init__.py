"""Ride matching: scoring primitives and the search service."""

from .scorer import DetourThresholds, MatchScorer, OnRouteCheck, ranking_key
from .service import RideMatchService

__all__ = [
    "DetourThresholds",
    "MatchScorer",
    "OnRouteCheck",
    "RideMatchService",
    "ranking_key",
]

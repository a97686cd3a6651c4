"""Ride matching and route-watch notification service."""

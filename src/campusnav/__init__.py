#!/usr/bin/env python3
"""
Campusnav - follow a pre-authored walking path with live GPS progress.

This package models paths as deduplicated waypoint sequences, filters noisy
position samples, and tracks progress along a path: distance to the next
waypoint, remaining distance, average speed, ETA and route completion.
"""
import importlib.metadata

__version__ = importlib.metadata.version("campusnav")

# Import main classes for public API
from .geometry import Coordinate, haversine_distance, initial_bearing
from .path import Path, PathCollection, PathFormatError, PathSummary, Waypoint
from .tracker import PositionSample, PositionTracker, SampleResult
from .navigation import NavigationEvent, NavigationSession, SessionUpdate, TurnHint

__all__ = [
    "Coordinate",
    "haversine_distance",
    "initial_bearing",
    "Path",
    "PathCollection",
    "PathFormatError",
    "PathSummary",
    "Waypoint",
    "PositionSample",
    "PositionTracker",
    "SampleResult",
    "NavigationEvent",
    "NavigationSession",
    "SessionUpdate",
    "TurnHint",
]

#!/usr/bin/env python3
"""
Path authoring: collect pin locations into a path that can be saved.
"""

from typing import Any, Dict, List, Optional
import logging

from .config import COINCIDENCE_THRESHOLD
from .geometry import Coordinate
from .path import Path
from .tracker import PositionSample, PositionTracker, SampleResult

logger = logging.getLogger(__name__)


def default_name(existing_count: int = 0) -> str:
    """Name offered for a new route when the list already holds existing_count."""
    return f"My Route {existing_count + 1}"


class PathDraft:
    """A path under construction, fed with the user's live position."""

    def __init__(self, tracker: Optional[PositionTracker] = None):
        self.tracker = tracker if tracker is not None else PositionTracker()
        self.waypoints: List[Coordinate] = []

    def ingest(self, sample: PositionSample) -> SampleResult:
        return self.tracker.ingest(sample)

    @property
    def position(self) -> Optional[Coordinate]:
        return self.tracker.position

    def add_location(self, coord: Coordinate) -> None:
        self.waypoints.append(coord)
        logger.debug(f"Draft now has {len(self.waypoints)} points")

    def undo(self) -> None:
        """Remove the last point; a no-op on an empty draft."""
        if self.waypoints:
            self.waypoints.pop()

    def clear(self) -> None:
        self.waypoints.clear()

    def can_save(self) -> bool:
        """A route needs a start and an end point."""
        return len(self.waypoints) > 1

    def to_pdo(self, name: str) -> Dict[str, Any]:
        """
        Raw draft points as a persisted {title, locations} record.

        Raises:
            ValueError: If the draft has fewer than two points.
        """
        if not self.can_save():
            raise ValueError("There are not enough points to save this route")
        return {
            "title": name,
            "locations": [
                {"lat": coord.latitude, "lng": coord.longitude}
                for coord in self.waypoints
            ],
        }

    def to_path(
        self, name: str, coincidence_threshold: float = COINCIDENCE_THRESHOLD
    ) -> Path:
        return Path(name, list(self.waypoints), coincidence_threshold)

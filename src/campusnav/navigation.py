#!/usr/bin/env python3
"""
Navigation session: waypoint advancement and derived progress metrics.
"""

from enum import Enum
from typing import Callable, List, NamedTuple, Optional
import logging
import math
import time

from .geometry import Coordinate, haversine_distance, initial_bearing, normalize_direction
from .path import Path, Waypoint
from .tracker import PositionSample, PositionTracker, SampleResult

logger = logging.getLogger(__name__)


class NavigationEvent(Enum):
    """What an accepted position did to the session."""

    NONE = "none"
    WAYPOINT_REACHED = "waypoint_reached"
    DESTINATION_REACHED = "destination_reached"


class SessionUpdate(NamedTuple):
    """Result of feeding one sample through a session."""

    result: SampleResult
    event: NavigationEvent


class TurnHint(Enum):
    """Coarse direction of the next waypoint relative to the heading."""

    STRAIGHT = "straight"
    SLIGHT_LEFT = "slight_left"
    LEFT = "left"
    SLIGHT_RIGHT = "slight_right"
    RIGHT = "right"
    U_TURN = "uturn"


def classify_direction(direction: float) -> TurnHint:
    """
    Bucket a relative direction in (-180, 180] into a turn hint.

    Sectors are 45° wide and centred on straight ahead; anything further
    than 112.5° either way is a U-turn.
    """
    if direction <= -112.5:
        return TurnHint.U_TURN
    elif direction <= -67.5:
        return TurnHint.LEFT
    elif direction <= -22.5:
        return TurnHint.SLIGHT_LEFT
    elif direction <= 22.5:
        return TurnHint.STRAIGHT
    elif direction <= 67.5:
        return TurnHint.SLIGHT_RIGHT
    elif direction <= 112.5:
        return TurnHint.RIGHT
    return TurnHint.U_TURN


class NavigationSession:
    """
    Follows a path with a stream of position samples.

    The session owns its PositionTracker and borrows the path. The waypoint
    index only moves forward and route_complete latches once the last
    waypoint is reached. Metrics are computed on read; None means the value
    is unavailable.
    """

    def __init__(
        self,
        path: Path,
        tracker: Optional[PositionTracker] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            path: Path to follow.
            tracker: Position filter; a default PositionTracker is created if None.
            clock: Source of the current time in seconds.
        """
        self.path = path
        self.tracker = tracker if tracker is not None else PositionTracker()
        self.clock = clock

        self.waypoint_index = 0
        self.route_complete = False
        self.travelled = 0.0
        self.position_history: List[Coordinate] = []

        self.start_time = clock()

        if not path.waypoints:
            logger.warning(f"Path '{path.name}' has no waypoints; nothing to navigate")

    def ingest(self, sample: PositionSample) -> SessionUpdate:
        """Filter a raw sample and, if accepted, advance the session with it."""
        result = self.tracker.ingest(sample)
        if result is not SampleResult.ACCEPTED:
            return SessionUpdate(result, NavigationEvent.NONE)
        event = self.on_position_accepted(sample.coordinate, sample.accuracy)
        return SessionUpdate(result, event)

    def on_position_accepted(
        self, position: Coordinate, accuracy: float
    ) -> NavigationEvent:
        """
        Advance the session with a position the tracker has accepted.

        A waypoint counts as reached when the position lies strictly within
        the sample's accuracy of it, so a zero-accuracy sample never arrives.
        Metrics are measured from this position afterwards, so positions
        filtered by another source can be fed here directly.
        """
        if self.position_history:
            self.travelled += haversine_distance(self.position_history[-1], position)
        self.position_history.append(position)

        if self.route_complete or not self.path.waypoints:
            return NavigationEvent.NONE

        distance = haversine_distance(position, self.path.waypoints[self.waypoint_index])
        if not distance < accuracy:
            return NavigationEvent.NONE

        if self.waypoint_index < len(self.path.waypoints) - 1:
            self.waypoint_index += 1
            logger.info(
                f"Reached waypoint {self.waypoint_index} of {len(self.path.waypoints)}"
            )
            return NavigationEvent.WAYPOINT_REACHED

        self.route_complete = True
        logger.info(
            f"Reached destination of '{self.path.name}' after {self.travelled:.2f}m"
        )
        return NavigationEvent.DESTINATION_REACHED

    @property
    def position(self) -> Optional[Coordinate]:
        """The last position the session advanced with."""
        if not self.position_history:
            return None
        return self.position_history[-1]

    @property
    def heading(self) -> float:
        return self.tracker.heading

    @property
    def imprecise(self) -> bool:
        return self.tracker.imprecise

    @property
    def waypoint_count(self) -> int:
        return len(self.path.waypoints)

    @property
    def current_waypoint(self) -> Optional[Waypoint]:
        """The waypoint being navigated to, or None once complete."""
        if self.route_complete or not self.path.waypoints:
            return None
        return self.path.get_waypoint(self.waypoint_index)

    @property
    def elapsed(self) -> float:
        """Seconds since the session started."""
        return self.clock() - self.start_time

    @property
    def distance_to_next(self) -> Optional[float]:
        """Meters from the current position to the current waypoint."""
        waypoint = self.current_waypoint
        if waypoint is None or self.position is None:
            return None
        return haversine_distance(self.position, waypoint.coordinate)

    @property
    def average_speed(self) -> float:
        """Average speed in m/s since the session started; 0 before time passes."""
        elapsed = self.elapsed
        if elapsed <= 0:
            return 0.0
        return self.travelled / elapsed

    @property
    def remaining_distance(self) -> Optional[float]:
        """Meters to the end of the path via the remaining waypoints."""
        distance_to_next = self.distance_to_next
        if distance_to_next is None:
            return None
        return distance_to_next + sum(
            self.path.segment_distances[self.waypoint_index + 1 :]
        )

    @property
    def remaining_time(self) -> Optional[float]:
        """
        Estimated seconds to the end of the path at the average speed.

        None when no estimate exists, including when the user has not moved:
        an infinite ETA is reported as unavailable rather than as a number.
        """
        remaining = self.remaining_distance
        if remaining is None:
            return None

        speed = self.average_speed
        if speed <= 0:
            return None

        remaining_time = remaining / speed
        if math.isinf(remaining_time) or math.isnan(remaining_time):
            return None
        return remaining_time

    @property
    def direction_to_waypoint(self) -> Optional[float]:
        """Bearing of the current waypoint relative to the heading, in (-180, 180]."""
        waypoint = self.current_waypoint
        if waypoint is None or self.position is None:
            return None
        bearing = initial_bearing(self.position, waypoint.coordinate)
        return normalize_direction(bearing - self.heading)

    @property
    def turn_hint(self) -> Optional[TurnHint]:
        direction = self.direction_to_waypoint
        if direction is None:
            return None
        return classify_direction(direction)

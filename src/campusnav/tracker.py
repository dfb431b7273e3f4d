#!/usr/bin/env python3
"""
Filtered position and heading tracking for a stream of GPS samples.
"""

from enum import Enum
from typing import NamedTuple, Optional
import logging

from .config import PRECISION_THRESHOLD, THRESHOLD_FACTOR
from .geometry import Coordinate, haversine_distance, initial_bearing

logger = logging.getLogger(__name__)


class PositionSample(NamedTuple):
    """A single fix delivered by the position source."""

    coordinate: Coordinate
    accuracy: float  # uncertainty radius in meters
    timestamp: Optional[float] = None


class SampleResult(Enum):
    """Outcome of offering a sample to a PositionTracker."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"


class PositionTracker:
    """
    Holds the current position, heading and accuracy, updated from samples
    that move far enough to be distinguishable from jitter.

    A sample is accepted when it lies at least threshold_factor times its own
    accuracy away from the current position. A factor below 1 keeps the
    displayed position responsive while still ignoring movement well inside
    the device's reported uncertainty.
    """

    def __init__(
        self,
        threshold_factor: float = THRESHOLD_FACTOR,
        precision_threshold: float = PRECISION_THRESHOLD,
    ):
        self.threshold_factor = threshold_factor
        self.precision_threshold = precision_threshold

        self.position: Optional[Coordinate] = None
        self.heading = 0.0
        self.accuracy: Optional[float] = None

        self._last_timestamp: Optional[float] = None

    def ingest(self, sample: PositionSample) -> SampleResult:
        """
        Offer a sample to the tracker.

        Rejected samples leave the tracked state untouched.

        Returns:
            SampleResult.ACCEPTED if the tracked state was updated,
            SampleResult.REJECTED otherwise
        """
        if sample.timestamp is not None:
            if sample.timestamp == self._last_timestamp:
                logger.debug(f"Ignoring repeated sample at timestamp {sample.timestamp}")
                return SampleResult.REJECTED
            self._last_timestamp = sample.timestamp

        if self.position is not None:
            distance = haversine_distance(self.position, sample.coordinate)
            if distance < sample.accuracy * self.threshold_factor:
                logger.debug(
                    f"Rejected sample {distance:.2f}m from current position "
                    f"(accuracy {sample.accuracy:.1f}m)"
                )
                return SampleResult.REJECTED
            self.heading = initial_bearing(self.position, sample.coordinate)

        self.position = sample.coordinate
        self.accuracy = sample.accuracy

        logger.debug(
            f"Accepted sample ({sample.coordinate.latitude:.6f}, "
            f"{sample.coordinate.longitude:.6f}) accuracy {sample.accuracy:.1f}m, "
            f"heading {self.heading:.1f}°"
        )
        return SampleResult.ACCEPTED

    @property
    def imprecise(self) -> bool:
        """True when the last accepted fix is less precise than the threshold."""
        if self.accuracy is None:
            return False
        return self.accuracy > self.precision_threshold

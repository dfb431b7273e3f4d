import math

import pytest

from campusnav.geometry import EARTH_RADIUS, Coordinate
from campusnav.tracker import PositionSample, PositionTracker, SampleResult

METERS_PER_DEGREE = EARTH_RADIUS * math.pi / 180.0
ORIGIN = Coordinate(0.0, 0.0)


def east_of_origin(meters: float) -> Coordinate:
    return Coordinate(0.0, meters / METERS_PER_DEGREE)


def north_of_origin(meters: float) -> Coordinate:
    return Coordinate(meters / METERS_PER_DEGREE, 0.0)


class TestNoiseFilter:
    def test_first_sample_is_always_accepted(self):
        tracker = PositionTracker()
        result = tracker.ingest(PositionSample(ORIGIN, accuracy=500.0))

        assert result is SampleResult.ACCEPTED
        assert tracker.position == ORIGIN
        assert tracker.accuracy == 500.0
        assert tracker.heading == 0.0

    def test_sample_within_reaction_margin_is_rejected(self):
        tracker = PositionTracker()
        tracker.ingest(PositionSample(ORIGIN, accuracy=10.0))

        # 3 m < 10 m * 0.4
        result = tracker.ingest(PositionSample(east_of_origin(3.0), accuracy=10.0))

        assert result is SampleResult.REJECTED
        assert tracker.position == ORIGIN
        assert tracker.accuracy == 10.0
        assert tracker.heading == 0.0

    def test_sample_beyond_reaction_margin_is_accepted(self):
        tracker = PositionTracker()
        tracker.ingest(PositionSample(ORIGIN, accuracy=10.0))

        # 5 m >= 10 m * 0.4
        result = tracker.ingest(PositionSample(east_of_origin(5.0), accuracy=10.0))

        assert result is SampleResult.ACCEPTED
        assert tracker.position == east_of_origin(5.0)

    def test_margin_uses_the_new_samples_accuracy(self):
        tracker = PositionTracker()
        tracker.ingest(PositionSample(ORIGIN, accuracy=2.0))

        # 5 m is within 0.4 * 20 m of the new, less precise sample
        result = tracker.ingest(PositionSample(east_of_origin(5.0), accuracy=20.0))
        assert result is SampleResult.REJECTED

    def test_custom_threshold_factor(self):
        tracker = PositionTracker(threshold_factor=1.0)
        tracker.ingest(PositionSample(ORIGIN, accuracy=10.0))
        result = tracker.ingest(PositionSample(east_of_origin(5.0), accuracy=10.0))
        assert result is SampleResult.REJECTED

    def test_repeated_timestamp_is_rejected(self):
        tracker = PositionTracker()
        tracker.ingest(PositionSample(ORIGIN, accuracy=5.0, timestamp=100.0))

        repeated = PositionSample(east_of_origin(50.0), accuracy=5.0, timestamp=100.0)
        assert tracker.ingest(repeated) is SampleResult.REJECTED
        assert tracker.position == ORIGIN

        fresh = PositionSample(east_of_origin(50.0), accuracy=5.0, timestamp=101.0)
        assert tracker.ingest(fresh) is SampleResult.ACCEPTED


class TestHeading:
    def test_heading_follows_movement(self):
        tracker = PositionTracker()
        tracker.ingest(PositionSample(ORIGIN, accuracy=5.0))
        tracker.ingest(PositionSample(east_of_origin(20.0), accuracy=5.0))
        assert tracker.heading == pytest.approx(90.0)

    def test_heading_updates_on_each_accepted_sample(self):
        tracker = PositionTracker()
        tracker.ingest(PositionSample(ORIGIN, accuracy=5.0))
        tracker.ingest(PositionSample(north_of_origin(20.0), accuracy=5.0))
        assert tracker.heading == pytest.approx(0.0)

        tracker.ingest(PositionSample(ORIGIN, accuracy=5.0))
        assert tracker.heading == pytest.approx(180.0)


class TestPrecisionFlag:
    def test_not_imprecise_before_any_sample(self):
        assert PositionTracker().imprecise is False

    def test_imprecise_above_threshold(self):
        tracker = PositionTracker()
        tracker.ingest(PositionSample(ORIGIN, accuracy=15.0))
        assert tracker.imprecise is True

    def test_threshold_itself_is_precise(self):
        tracker = PositionTracker()
        tracker.ingest(PositionSample(ORIGIN, accuracy=10.0))
        assert tracker.imprecise is False

    def test_flag_tracks_latest_accepted_accuracy(self):
        tracker = PositionTracker(precision_threshold=5.0)
        tracker.ingest(PositionSample(ORIGIN, accuracy=8.0))
        assert tracker.imprecise is True
        tracker.ingest(PositionSample(east_of_origin(30.0), accuracy=3.0))
        assert tracker.imprecise is False

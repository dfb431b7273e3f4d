import pytest
import math
from hypothesis import given, strategies as st, assume
from campusnav.geometry import (
    Coordinate,
    haversine_distance,
    initial_bearing,
    normalize_direction,
)
from campusnav.navigation import NavigationSession
from campusnav.path import Path
from campusnav.tracker import PositionSample, PositionTracker, SampleResult

# Strategy for valid GPS coordinates
valid_lat = st.floats(-85.0, 85.0)  # Exclude poles
valid_lon = st.floats(-180.0, 180.0)
valid_coordinate = st.builds(Coordinate, latitude=valid_lat, longitude=valid_lon)

# Coordinates within roughly a kilometre of a campus, so arrivals actually happen
campus_coordinate = st.builds(
    Coordinate,
    latitude=st.floats(-37.915, -37.905),
    longitude=st.floats(145.130, 145.140),
)
accuracy = st.floats(0.0, 200.0)
bearing = st.floats(-180.0, 180.0, exclude_min=True)


class TestDistanceProperties:

    @given(valid_coordinate, valid_coordinate)
    def test_distance_is_non_negative(self, pos1, pos2):
        """Distance between any two points is always non-negative."""
        assert haversine_distance(pos1, pos2) >= 0

    @given(valid_coordinate)
    def test_distance_to_self_is_zero(self, pos):
        """Distance from a point to itself is always zero."""
        assert haversine_distance(pos, pos) == 0

    @given(valid_coordinate, valid_coordinate)
    def test_distance_is_symmetric(self, pos1, pos2):
        """Distance from A to B equals distance from B to A."""
        dist_ab = haversine_distance(pos1, pos2)
        dist_ba = haversine_distance(pos2, pos1)
        assert dist_ab == pytest.approx(dist_ba, abs=1e-6)

    @given(valid_coordinate, valid_coordinate)
    def test_distance_is_at_most_half_circumference(self, pos1, pos2):
        """No two points are further apart than antipodes."""
        assert haversine_distance(pos1, pos2) <= math.pi * 6371000.0 + 1e-6


class TestBearingProperties:

    @given(valid_coordinate, valid_coordinate)
    def test_bearing_range(self, pos1, pos2):
        """Bearing is always in range (-180, 180]."""
        result = initial_bearing(pos1, pos2)
        assert -180 < result <= 180

    @given(campus_coordinate, campus_coordinate)
    def test_opposite_bearing_property(self, pos1, pos2):
        """Over short distances the reverse bearing is ~180° away."""
        assume(haversine_distance(pos1, pos2) > 1.0)

        diff = abs(initial_bearing(pos1, pos2) - initial_bearing(pos2, pos1))
        diff = min(diff, 360 - diff)
        assert abs(diff - 180) < 1.0

    @given(bearing, bearing)
    def test_relative_direction_range(self, target, heading):
        """The difference of two bearings always folds back into range."""
        direction = normalize_direction(target - heading)
        assert -180 < direction <= 180

    @given(bearing, bearing)
    def test_relative_direction_is_equivalent_angle(self, target, heading):
        """Folding only ever adds or removes a full turn."""
        direction = normalize_direction(target - heading)
        offset = direction - (target - heading)
        assert min(abs(offset), abs(abs(offset) - 360)) < 1e-9


class TestPathProperties:

    @given(st.lists(campus_coordinate, max_size=50), st.floats(0.0, 100.0))
    def test_consecutive_waypoints_are_apart(self, coords, threshold):
        """No two consecutive waypoints lie within the coincidence threshold."""
        path = Path("random", coords, coincidence_threshold=threshold)
        for previous, current in zip(path.waypoints, path.waypoints[1:]):
            assert haversine_distance(previous, current) > threshold

    @given(st.lists(campus_coordinate, max_size=50))
    def test_total_is_sum_of_segments(self, coords):
        """Total distance is the sum of the per-waypoint segment distances."""
        path = Path("random", coords)
        assert len(path.segment_distances) == len(path.waypoints)
        assert path.total_distance == pytest.approx(sum(path.segment_distances))
        if path.segment_distances:
            assert path.segment_distances[0] == 0.0

    @given(st.lists(campus_coordinate, min_size=1, max_size=50))
    def test_waypoints_are_an_ordered_subsequence(self, coords):
        """Dedup keeps the start point and never reorders or invents points."""
        path = Path("random", coords)
        assert path.waypoints[0] == coords[0]

        remaining = iter(coords)
        assert all(any(w == c for c in remaining) for w in path.waypoints)

    @given(st.lists(campus_coordinate, min_size=1, max_size=50), st.floats(0, 1000))
    def test_bbox_contains_all_waypoints(self, coords, buffer):
        """Bounding box should contain all waypoints."""
        path = Path("random", coords)
        south, west, north, east = path.get_bbox(buffer)

        for coord in path.waypoints:
            assert south <= coord.latitude <= north
            assert west <= coord.longitude <= east


class TestSessionProperties:

    @given(
        st.lists(campus_coordinate, min_size=1, max_size=8),
        st.lists(st.tuples(campus_coordinate, accuracy), max_size=40),
    )
    def test_progress_is_monotonic(self, coords, samples):
        """The waypoint index never goes back and completion never unlatches."""
        path = Path("random", coords)
        session = NavigationSession(path, clock=lambda: 0.0)

        previous_index = session.waypoint_index
        was_complete = False
        for coordinate, sample_accuracy in samples:
            session.ingest(PositionSample(coordinate, sample_accuracy))

            assert session.waypoint_index >= previous_index
            assert 0 <= session.waypoint_index < len(path)
            if was_complete:
                assert session.route_complete
                assert session.waypoint_index == previous_index

            previous_index = session.waypoint_index
            was_complete = session.route_complete

    @given(
        st.lists(campus_coordinate, min_size=2, max_size=8),
        st.lists(st.tuples(campus_coordinate, accuracy), max_size=40),
    )
    def test_remaining_distance_bounded_by_next_leg(self, coords, samples):
        """Remaining distance is never less than the distance to the next waypoint."""
        session = NavigationSession(Path("random", coords), clock=lambda: 0.0)
        for coordinate, sample_accuracy in samples:
            session.ingest(PositionSample(coordinate, sample_accuracy))
            if session.remaining_distance is not None:
                assert session.remaining_distance >= session.distance_to_next


class TestTrackerProperties:

    @given(st.lists(st.tuples(campus_coordinate, accuracy), min_size=1, max_size=40))
    def test_rejected_samples_leave_state_untouched(self, samples):
        """A rejected sample changes neither position, heading nor accuracy."""
        tracker = PositionTracker()
        for coordinate, sample_accuracy in samples:
            before = (tracker.position, tracker.heading, tracker.accuracy)
            result = tracker.ingest(PositionSample(coordinate, sample_accuracy))
            if result is SampleResult.REJECTED:
                assert (tracker.position, tracker.heading, tracker.accuracy) == before
            else:
                assert tracker.position == coordinate
                assert tracker.accuracy == sample_accuracy


# Run with: pytest -v --hypothesis-show-statistics
if __name__ == "__main__":
    pytest.main([__file__, "-v", "--hypothesis-show-statistics"])

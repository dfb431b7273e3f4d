#!/usr/bin/env python3
"""
Geodesic distance and bearing on a spherical Earth.
"""

from typing import NamedTuple
import math

# Mean Earth radius in meters
EARTH_RADIUS = 6371000.0


class Coordinate(NamedTuple):
    """Represents a geographic position with latitude and longitude."""

    latitude: float
    longitude: float


def haversine_distance(coord1: Coordinate, coord2: Coordinate) -> float:
    """
    Calculate the great-circle distance between two coordinates.

    Args:
        coord1: First coordinate
        coord2: Second coordinate

    Returns:
        Distance in meters
    """
    lat1, lon1 = math.radians(coord1.latitude), math.radians(coord1.longitude)
    lat2, lon2 = math.radians(coord2.latitude), math.radians(coord2.longitude)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    )
    # Rounding can push a marginally past 1 for antipodal points
    a = min(a, 1.0)

    return 2 * EARTH_RADIUS * math.asin(math.sqrt(a))


def initial_bearing(coord1: Coordinate, coord2: Coordinate) -> float:
    """
    Calculate the initial bearing of the great circle from coord1 to coord2.

    Args:
        coord1: Origin coordinate
        coord2: Destination coordinate

    Returns:
        Bearing in degrees clockwise from true north, in the range (-180, 180].
        Identical coordinates give 0.
    """
    lat1 = math.radians(coord1.latitude)
    lat2 = math.radians(coord2.latitude)
    dlon = math.radians(coord2.longitude - coord1.longitude)

    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(
        dlon
    )

    bearing = math.degrees(math.atan2(y, x))
    if bearing == -180.0:
        bearing = 180.0
    return bearing


def normalize_direction(angle: float) -> float:
    """
    Fold the difference of two bearings into (-180, 180].

    Both operands already lie in (-180, 180], so their difference lies in
    (-360, 360) and a single correction is enough.
    """
    if angle <= -180.0:
        angle += 360.0
    elif angle > 180.0:
        angle -= 360.0
    return angle

#!/usr/bin/env python3
"""
Path data model: an ordered, deduplicated sequence of waypoints.
"""

from typing import Any, Dict, Iterator, List, NamedTuple, Optional, TextIO, Tuple
import logging
import math
import os
from math import cos, radians
import gpxpy
import gpxpy.gpx

from .config import COINCIDENCE_THRESHOLD
from .geometry import Coordinate, haversine_distance

logger = logging.getLogger(__name__)


class PathFormatError(ValueError):
    """Raised when a persisted path record is malformed."""

    pass


class Waypoint(NamedTuple):
    """A path coordinate tagged with its position in the path."""

    index: int
    coordinate: Coordinate


class PathSummary(NamedTuple):
    """Total distance and number of turns, used when listing paths."""

    total_distance: float
    turns: int


def _location_to_coordinate(location: Any, index: int) -> Coordinate:
    """Convert a persisted {lat, lng} record into a Coordinate, failing fast."""
    if not isinstance(location, dict):
        raise PathFormatError(
            f"Location {index} must be an object with lat and lng, got {location!r}"
        )

    for key in ("lat", "lng"):
        if key not in location:
            raise PathFormatError(f"Location {index} is missing '{key}'")
        # float(True) is 1.0
        if isinstance(location[key], bool):
            raise PathFormatError(
                f"Location {index} has a boolean '{key}': {location!r}"
            )

    try:
        lat = float(location["lat"])
        lng = float(location["lng"])
    except (TypeError, ValueError):
        raise PathFormatError(
            f"Location {index} has non-numeric coordinates: {location!r}"
        )

    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise PathFormatError(f"Location {index} has non-finite coordinates")
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        raise PathFormatError(
            f"Location {index} at ({lat}, {lng}) is outside the valid coordinate range"
        )

    return Coordinate(latitude=lat, longitude=lng)


class Path:
    """Represents a pre-authored path with precomputed segment distances."""

    def __init__(
        self,
        name: str,
        coords: List[Coordinate],
        coincidence_threshold: float = COINCIDENCE_THRESHOLD,
    ):
        """Initializes a Path object.

        Consecutive points closer than the coincidence threshold to the last
        accepted waypoint are dropped. Each candidate is compared with the last
        accepted waypoint rather than its raw predecessor, so a slow drift of
        sub-threshold steps cannot add up to an unnoticed jump.

        Args:
            name: Path label.
            coords: Raw ordered coordinates, first point is the start.
            coincidence_threshold: Minimum distance in meters between
                consecutive waypoints.
        """
        self.name = name
        self.coincidence_threshold = coincidence_threshold

        self.waypoints: List[Coordinate] = []
        self.segment_distances: List[float] = []
        self.total_distance = 0.0

        if not coords:
            return

        self.waypoints.append(coords[0])
        self.segment_distances.append(0.0)

        for candidate in coords[1:]:
            distance = haversine_distance(self.waypoints[-1], candidate)
            if distance > coincidence_threshold:
                self.waypoints.append(candidate)
                self.segment_distances.append(distance)
                self.total_distance += distance
            else:
                logger.debug(
                    f"Dropping point ({candidate.latitude:.6f}, {candidate.longitude:.6f}) "
                    f"{distance:.2f}m from previous waypoint"
                )

        dropped = len(coords) - len(self.waypoints)
        if dropped > 0:
            logger.debug(
                f"Path '{name}': dropped {dropped} of {len(coords)} points within "
                f"{coincidence_threshold}m of the previous waypoint"
            )

    @classmethod
    def from_locations(
        cls,
        title: str,
        locations: List[Dict[str, float]],
        coincidence_threshold: float = COINCIDENCE_THRESHOLD,
    ) -> "Path":
        """
        Build a path from persisted {lat, lng} records.

        Raises:
            PathFormatError: If any record is malformed.
        """
        if not isinstance(locations, list):
            raise PathFormatError(f"Path '{title}' locations must be a list")

        coords = [
            _location_to_coordinate(location, i)
            for i, location in enumerate(locations)
        ]
        return cls(title, coords, coincidence_threshold)

    @classmethod
    def from_pdo(
        cls,
        pdo: Dict[str, Any],
        coincidence_threshold: float = COINCIDENCE_THRESHOLD,
    ) -> "Path":
        """
        Build a path from a persisted {title, locations} record.

        Raises:
            PathFormatError: If the record or any of its locations is malformed.
        """
        if not isinstance(pdo, dict):
            raise PathFormatError(f"Path record must be an object, got {pdo!r}")
        if "locations" not in pdo:
            raise PathFormatError("Path record is missing 'locations'")

        return cls.from_locations(
            str(pdo.get("title", "")), pdo["locations"], coincidence_threshold
        )

    def to_pdo(self) -> Dict[str, Any]:
        """Return the persisted {title, locations} form of this path."""
        return {
            "title": self.name,
            "locations": [
                {"lat": coord.latitude, "lng": coord.longitude}
                for coord in self.waypoints
            ],
        }

    @classmethod
    def from_gpx(
        cls,
        file_input: TextIO,
        name: Optional[str] = None,
        coincidence_threshold: float = COINCIDENCE_THRESHOLD,
        default_name: str = "",
    ) -> "Path":
        """
        Parse a GPX document into a path.

        Track points from all tracks and segments are concatenated. Files
        without tracks fall back to their route points.

        Args:
            file_input: File-like object containing GPX data
            name: Path name; defaults to the first track or route name
            default_name: Name used when neither name nor the GPX gives one

        Raises:
            gpxpy.gpx.GPXException: If GPX file is malformed.
        """
        gpx_data = gpxpy.parse(file_input)

        coords = []
        gpx_name = None

        for track in gpx_data.tracks:
            gpx_name = gpx_name or track.name
            for segment in track.segments:
                for point in segment.points:
                    coords.append(
                        Coordinate(latitude=point.latitude, longitude=point.longitude)
                    )

        if not coords:
            for route in gpx_data.routes:
                gpx_name = gpx_name or route.name
                for point in route.points:
                    coords.append(
                        Coordinate(latitude=point.latitude, longitude=point.longitude)
                    )

        path_name = name or gpx_name or gpx_data.name or default_name
        path = cls(path_name, coords, coincidence_threshold)

        logger.debug(
            f"Parsed {len(coords)} points from GPX into {len(path)} waypoints"
        )

        return path

    @classmethod
    def from_file(
        cls, filename: str, coincidence_threshold: float = COINCIDENCE_THRESHOLD
    ) -> "Path":
        """
        Load and parse a GPX file into a path named after the file when the
        GPX carries no name.

        Raises:
            FileNotFoundError: If file doesn't exist.
            PermissionError: If file can't be read.
            gpxpy.gpx.GPXException: If GPX file is malformed.
        """
        logger.debug(f"Reading GPX file: {filename}")
        stem = os.path.splitext(os.path.basename(filename))[0]
        with open(filename, "r", encoding="utf-8") as f:
            return cls.from_gpx(
                f, coincidence_threshold=coincidence_threshold, default_name=stem
            )

    def get_summary(self) -> PathSummary:
        """
        Total distance and turn count for listing.

        The start and end waypoints are not turns.
        """
        return PathSummary(
            total_distance=self.total_distance,
            turns=max(len(self.waypoints) - 2, 0),
        )

    def get_waypoint(self, index: int) -> Waypoint:
        """Return the waypoint at index, tagged with that index."""
        return Waypoint(index=index, coordinate=self.waypoints[index])

    def get_bbox(self, buffer: float = 0.0) -> Tuple[float, float, float, float]:
        """
        Get bounding box for this path, optionally with a buffer.

        Args:
            buffer: Buffer distance in meters (default: 0.0)

        Returns:
            Tuple of (south, west, north, east) in decimal degrees

        Raises:
            ValueError: If the path has no waypoints
        """
        if not self.waypoints:
            raise ValueError("Cannot compute bounding box of an empty path")

        latitudes = [coord.latitude for coord in self.waypoints]
        longitudes = [coord.longitude for coord in self.waypoints]

        min_lat, max_lat = min(latitudes), max(latitudes)
        min_lon, max_lon = min(longitudes), max(longitudes)

        # Convert buffer from m to approximate degrees
        # 1 degree latitude ≈ 111 km = 111000m
        avg_lat = (min_lat + max_lat) / 2
        lat_buffer = buffer / 111000.0
        lon_buffer = buffer / (111000.0 * max(abs(cos(radians(avg_lat))), 1e-6))

        return (
            max(-90.0, min_lat - lat_buffer),
            max(-180.0, min_lon - lon_buffer),
            min(90.0, max_lat + lat_buffer),
            min(180.0, max_lon + lon_buffer),
        )

    def __len__(self) -> int:
        """Return number of waypoints in the path."""
        return len(self.waypoints)

    def __getitem__(self, index):
        """Allow indexing into waypoints."""
        return self.waypoints[index]

    def __iter__(self) -> Iterator[Coordinate]:
        """Allow iteration over waypoints."""
        return iter(self.waypoints)

    def __str__(self) -> str:
        lines = [f"name: {self.name}"]
        for coord in self.waypoints:
            lines.append(f"coords: {coord.latitude}, {coord.longitude}")
        lines.append(f"total distance: {self.total_distance}")
        return "\n".join(lines) + "\n"


class PathCollection:
    """A named, ordered list of paths as loaded from storage or the catalog."""

    def __init__(self, name: str, paths: Optional[List[Path]] = None):
        self.name = name
        self.paths: List[Path] = list(paths) if paths is not None else []

    @classmethod
    def from_pdo(
        cls,
        name: str,
        pdo: Dict[str, Any],
        coincidence_threshold: float = COINCIDENCE_THRESHOLD,
    ) -> "PathCollection":
        """
        Build a collection from a persisted {paths: [...]} record.

        Raises:
            PathFormatError: If the record or any path in it is malformed.
        """
        if not isinstance(pdo, dict) or not isinstance(pdo.get("paths"), list):
            raise PathFormatError("Path collection record must have a 'paths' list")

        paths = [Path.from_pdo(p, coincidence_threshold) for p in pdo["paths"]]
        logger.debug(f"Loaded {len(paths)} paths into collection '{name}'")
        return cls(name, paths)

    def to_pdo(self) -> Dict[str, Any]:
        """Return the persisted {paths: [...]} form of this collection."""
        return {"paths": [path.to_pdo() for path in self.paths]}

    def __len__(self) -> int:
        return len(self.paths)

    def __getitem__(self, index) -> Path:
        return self.paths[index]

    def __iter__(self) -> Iterator[Path]:
        return iter(self.paths)

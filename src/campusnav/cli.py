#!/usr/bin/env python3
"""
Campus path navigation tool.
Lists stored or published paths, and replays a recorded GPX track against a
chosen path, reporting navigation progress and drawing the session on an
interactive HTML map.

Requirements:
    pip install gpxpy folium requests

"""

from typing import List, Optional
import webbrowser
import argparse
import logging
import sys
import os
import gpxpy
from gpxpy import gpx
import requests

from . import __version__
from . import visualization
from .catalog import fetch_catalog
from .config import (
    CampusNavConfig,
    COINCIDENCE_THRESHOLD,
    DEFAULT_ACCURACY,
    DEFAULT_API_TIMEOUT,
    DEFAULT_BBOX_BUFFER,
)
from .file_utils import generate_output_filename
from .geometry import Coordinate
from .metrics import collect_progress, format_progress, log_metrics
from .navigation import NavigationEvent, NavigationSession
from .path import Path, PathCollection, PathFormatError
from .storage import load_path_collection
from .tracker import PositionSample, PositionTracker, SampleResult

# Configure logging
logger = logging.getLogger("campusnav")


class ReplayClock:
    """Session clock driven by the timestamps of replayed samples."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Campus path navigation tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "filename",
        type=str,
        nargs="?",
        help="Path collection JSON, single path JSON, or GPX path file",
    )
    parser.add_argument(
        "--catalog",
        type=str,
        default=None,
        metavar="CAMPUS",
        help="Fetch the published route catalog for CAMPUS instead of reading a file",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List available paths with distance and number of turns",
    )
    parser.add_argument(
        "--path-index",
        type=int,
        default=0,
        help="Index of the path to navigate (default: 0)",
    )
    parser.add_argument(
        "--track",
        type=str,
        default=None,
        help="GPX track to replay as position samples",
    )
    parser.add_argument(
        "--accuracy",
        type=float,
        default=DEFAULT_ACCURACY,
        help=f"Accuracy in meters assigned to replayed samples (default: {DEFAULT_ACCURACY})",
    )
    parser.add_argument(
        "--coincidence-threshold",
        type=float,
        default=COINCIDENCE_THRESHOLD,
        help=f"Minimum distance in meters between waypoints (default: {COINCIDENCE_THRESHOLD})",
    )
    parser.add_argument(
        "--bbox-buffer",
        type=float,
        default=DEFAULT_BBOX_BUFFER,
        help=f"Map margin around the path in meters (default: {DEFAULT_BBOX_BUFFER})",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=DEFAULT_API_TIMEOUT,
        help=f"Catalog request timeout in seconds (default: {DEFAULT_API_TIMEOUT})",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output HTML map file (default: auto-generated based on track filename)",
    )
    parser.add_argument(
        "--no-map",
        action="store_true",
        help="Don't write an HTML map of the replayed session",
    )
    parser.add_argument(
        "--no-open",
        action="store_true",
        help="Don't automatically open the HTML file in browser",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level (default: WARNING)",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Output structured metrics after processing",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"campusnav {__version__}",
    )
    return parser


def determine_output_filename(input_filename: str, output_arg: Optional[str]) -> str:
    """
    Determine the output filename to use.

    Args:
        input_filename: Path to the replayed track file
        output_arg: Value from --output argument (None if not specified)

    Returns:
        Output filename to use

    Raises:
        RuntimeError: If auto-generation fails
        ValueError: If constructed filename would be illegal
    """
    if output_arg is not None:
        return output_arg

    try:
        return generate_output_filename(input_filename)
    except (RuntimeError, ValueError) as e:
        logger.error(f"Failed to generate output filename: {e}")
        raise


def open_file_in_browser(filename: str) -> None:
    """
    Open the specified file in the default browser.

    Args:
        filename: Path to the file to open
    """
    abs_path = os.path.abspath(filename)
    try:
        webbrowser.open(f"file://{abs_path}")
        logger.debug(f"Opening {abs_path} in your default browser...")
    except webbrowser.Error as e:
        logger.warning(f"Could not automatically open browser: {e}")
        logger.warning(f"Please manually open {abs_path}")


def setup_logging(args: argparse.Namespace) -> None:
    """Setup logging configuration."""
    level = getattr(logging, args.log_level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure the root logger so all modules inherit the configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Suppress overly verbose third-party logging
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def load_track_samples(filename: str, accuracy: float) -> List[PositionSample]:
    """
    Read every track point of a GPX file as a position sample.

    Points keep their GPX time as the sample timestamp (seconds since the
    epoch) when present.

    Raises:
        FileNotFoundError: If file doesn't exist.
        gpxpy.gpx.GPXException: If GPX file is malformed.
    """
    with open(filename, "r", encoding="utf-8") as f:
        gpx_data = gpxpy.parse(f)

    samples = []
    for track in gpx_data.tracks:
        for segment in track.segments:
            for point in segment.points:
                timestamp = point.time.timestamp() if point.time is not None else None
                samples.append(
                    PositionSample(
                        coordinate=Coordinate(point.latitude, point.longitude),
                        accuracy=accuracy,
                        timestamp=timestamp,
                    )
                )

    logger.debug(f"Parsed {len(samples)} track points from {filename}")
    return samples


def replay_track(
    path: Path, samples: List[PositionSample], config: CampusNavConfig
) -> NavigationSession:
    """
    Feed recorded samples through a new navigation session.

    Sample timestamps drive the session clock; samples without one advance
    it by a second. Progress is printed after every accepted sample.
    """
    first_time = next((s.timestamp for s in samples if s.timestamp is not None), 0.0)
    clock = ReplayClock(first_time)
    tracker = PositionTracker(
        threshold_factor=config.threshold_factor,
        precision_threshold=config.precision_threshold,
    )
    session = NavigationSession(path, tracker=tracker, clock=clock)

    for sample in samples:
        clock.now = sample.timestamp if sample.timestamp is not None else clock.now + 1.0
        update = session.ingest(sample)
        if update.result is not SampleResult.ACCEPTED:
            continue

        if update.event is NavigationEvent.WAYPOINT_REACHED:
            print("You have reached the next waypoint.")
        elif update.event is NavigationEvent.DESTINATION_REACHED:
            print("You have reached the destination!")

        print(format_progress(collect_progress(session)))

    return session


def list_paths(collection: PathCollection) -> None:
    """Print each path with its total distance and number of turns."""
    if not collection:
        print(f"No routes found in {collection.name}")
        return

    print(f"{collection.name}:")
    for i, path in enumerate(collection):
        summary = path.get_summary()
        print(
            f"{i:3d}: {path.name} - Total distance: {summary.total_distance:.2f} m, "
            f"No. of turns: {summary.turns}"
        )


def load_collection(
    args: argparse.Namespace, config: CampusNavConfig
) -> PathCollection:
    """Load paths from the catalog or a file, exiting with status 1 on failure."""
    if args.catalog:
        try:
            return fetch_catalog(
                args.catalog,
                timeout=config.timeout,
                coincidence_threshold=config.coincidence_threshold,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to fetch route catalog: {e}")
            sys.exit(1)
        except PathFormatError as e:
            logger.error(f"Invalid route catalog: {e}")
            sys.exit(1)

    try:
        return load_path_collection(
            args.filename, coincidence_threshold=config.coincidence_threshold
        )
    except FileNotFoundError:
        logger.error(f"Path file not found: {args.filename}")
        sys.exit(1)
    except PermissionError:
        logger.error(f"Cannot read path file (permission denied): {args.filename}")
        sys.exit(1)
    except PathFormatError as e:
        logger.error(f"Invalid path file: {e}")
        sys.exit(1)
    except gpx.GPXException as e:
        logger.error(f"Invalid GPX file: {e}")
        sys.exit(1)
    except (UnicodeDecodeError, OSError) as e:
        logger.error(f"Cannot read path file {args.filename}: {e}")
        sys.exit(1)


def main(argv: Optional[List[str]] = None):
    """
    Parses command-line arguments, loads paths, and either lists them or
    replays a recorded track against one of them.
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.filename and not args.catalog:
        parser.print_help()
        sys.exit(1)

    setup_logging(args)
    config = CampusNavConfig.from_args(args)

    collection = load_collection(args, config)

    if args.list or not args.track:
        list_paths(collection)
        return

    if not 0 <= args.path_index < len(collection):
        logger.error(
            f"Path index {args.path_index} out of range ({len(collection)} paths available)"
        )
        sys.exit(1)

    path = collection[args.path_index]
    logger.info(
        f"Navigating '{path.name}': {len(path)} waypoints, "
        f"{path.total_distance:.2f} m"
    )

    try:
        samples = load_track_samples(args.track, config.accuracy)
    except FileNotFoundError:
        logger.error(f"GPX track not found: {args.track}")
        sys.exit(1)
    except PermissionError:
        logger.error(f"Cannot read GPX track (permission denied): {args.track}")
        sys.exit(1)
    except gpx.GPXException as e:
        logger.error(f"Invalid GPX track: {e}")
        sys.exit(1)
    except (UnicodeDecodeError, OSError) as e:
        logger.error(f"Cannot read GPX track {args.track}: {e}")
        sys.exit(1)

    session = replay_track(path, samples, config)
    report = collect_progress(session)

    if not args.no_map and path:
        try:
            output_filename = determine_output_filename(args.track, args.output)
            logger.debug(f"Output filename: {output_filename}")
            visualization.create_session_map(session, output_filename, config.bbox_buffer)
        except (RuntimeError, ValueError, OSError) as e:
            logger.error(f"Failed to create map: {e}")
            sys.exit(1)

        if not args.no_open:
            open_file_in_browser(output_filename)

    log_metrics(report, args)


if __name__ == "__main__":
    main()

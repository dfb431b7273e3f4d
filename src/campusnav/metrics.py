"""
Module for collecting, formatting and logging navigation progress.
"""

import argparse
import logging
from typing import NamedTuple, Optional

from .navigation import NavigationSession, TurnHint

logger = logging.getLogger(__name__)


class ProgressReport(NamedTuple):
    """Snapshot of a navigation session's metrics."""

    waypoint_index: int
    waypoint_count: int
    route_complete: bool
    travelled: float
    average_speed: float
    distance_to_next: Optional[float]
    remaining_distance: Optional[float]
    remaining_time: Optional[float]
    direction: Optional[float]
    turn_hint: Optional[TurnHint]
    imprecise: bool


def collect_progress(session: NavigationSession) -> ProgressReport:
    """
    Read every derived metric of a session at the current instant.

    Args:
        session: NavigationSession to snapshot

    Returns:
        ProgressReport with None for unavailable values
    """
    return ProgressReport(
        waypoint_index=session.waypoint_index,
        waypoint_count=session.waypoint_count,
        route_complete=session.route_complete,
        travelled=session.travelled,
        average_speed=session.average_speed,
        distance_to_next=session.distance_to_next,
        remaining_distance=session.remaining_distance,
        remaining_time=session.remaining_time,
        direction=session.direction_to_waypoint,
        turn_hint=session.turn_hint,
        imprecise=session.imprecise,
    )


def _format_meters(value: Optional[float]) -> str:
    if value is None:
        return "None"
    return f"{value:.2f} m"


def format_progress(report: ProgressReport) -> str:
    """
    Render a report as a single status line.

    Distances keep two decimals, the ETA is in minutes and a missing ETA on
    an unfinished route reads "NaN".
    """
    if report.route_complete:
        eta = "None"
    elif report.remaining_time is None:
        eta = "NaN"
    else:
        eta = f"{report.remaining_time / 60:.2f} mins"

    hint = report.turn_hint.value if report.turn_hint is not None else "none"
    waypoint = min(report.waypoint_index + 1, report.waypoint_count)

    parts = [
        f"waypoint {waypoint}/{report.waypoint_count}",
        f"next: {_format_meters(report.distance_to_next)}",
        f"travelled: {report.travelled:.2f} m",
        f"speed: {report.average_speed:.2f} m/s",
        f"remaining: {_format_meters(report.remaining_distance)}",
        f"eta: {eta}",
        f"direction: {hint}",
    ]
    if report.imprecise:
        parts.append("GPS is inaccurate")
    if report.route_complete:
        parts.append("destination reached")
    return ", ".join(parts)


def log_metrics(report: ProgressReport, args: argparse.Namespace) -> None:
    """
    Log structured metrics at the end of a replay.

    Args:
        report: ProgressReport of the finished session
        args: argparse.Namespace object containing settings like metrics flag
    """
    if not args.metrics:
        return

    logger.debug("=== CAMPUSNAV_METRICS ===")
    logger.debug(f"waypoint_index={report.waypoint_index}")
    logger.debug(f"waypoint_count={report.waypoint_count}")
    logger.debug(f"route_complete={int(report.route_complete)}")
    logger.debug(f"travelled_m={report.travelled:.2f}")
    logger.debug(f"average_speed_mps={report.average_speed:.2f}")
    if report.remaining_distance is not None:
        logger.debug(f"remaining_distance_m={report.remaining_distance:.2f}")
    if report.remaining_time is not None:
        logger.debug(f"remaining_time_s={report.remaining_time:.1f}")
    logger.debug("=== END_CAMPUSNAV_METRICS ===")

import argparse
from dataclasses import dataclass

# Minimum distance in meters between two consecutive waypoints. Closer points
# are treated as GPS jitter while a path is being authored.
COINCIDENCE_THRESHOLD = 10.0

# Accuracy radius in meters above which a fix is flagged as imprecise.
PRECISION_THRESHOLD = COINCIDENCE_THRESHOLD

# Fraction of a sample's accuracy it must move before the displayed position
# follows it.
THRESHOLD_FACTOR = 0.4

# Accuracy assigned to replayed track points that carry none.
DEFAULT_ACCURACY = 10.0

CATALOG_API_URL = "https://eng1003.monash/api/campusnav/"
DEFAULT_API_TIMEOUT = 30

# Margin in meters drawn around the path on the session map.
DEFAULT_BBOX_BUFFER = 50.0


@dataclass
class CampusNavConfig:
    """Configuration for the campusnav CLI."""

    coincidence_threshold: float = COINCIDENCE_THRESHOLD
    precision_threshold: float = PRECISION_THRESHOLD
    threshold_factor: float = THRESHOLD_FACTOR
    accuracy: float = DEFAULT_ACCURACY
    bbox_buffer: float = DEFAULT_BBOX_BUFFER
    timeout: int = DEFAULT_API_TIMEOUT
    log_level: str = "WARNING"
    metrics: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "CampusNavConfig":
        return cls(
            coincidence_threshold=args.coincidence_threshold,
            accuracy=args.accuracy,
            bbox_buffer=args.bbox_buffer,
            timeout=args.timeout,
            log_level=args.log_level,
            metrics=args.metrics,
        )

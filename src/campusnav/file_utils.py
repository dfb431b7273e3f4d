#!/usr/bin/env python3
"""
Filename utilities for generating output filenames.
"""

import os
import logging

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 100


def generate_output_filename(input_filename: str) -> str:
    """
    Generates an output HTML filename and reserves it by creating an empty file.

    Strategy:
    1. Drop the input's extension
    2. Append " map.html"
    3. If file exists, try " map (1).html", " map (2).html", etc.
    4. Use exclusive open (`open(path, 'x')`) to avoid race conditions and reserve the name.

    Args:
        input_filename: Path to the replayed track file

    Returns:
        Safe output filename that has been created as an empty file to reserve its name

    Raises:
        RuntimeError: If no available filename found after MAX_ATTEMPTS attempts
        ValueError: If a filename cannot be created (e.g., due to permissions)
    """
    input_dir = os.path.dirname(input_filename)
    base_name = os.path.splitext(os.path.basename(input_filename))[0]
    base_output = base_name + " map"

    candidates = [base_output + ".html"] + [
        f"{base_output} ({i}).html" for i in range(1, MAX_ATTEMPTS + 1)
    ]

    for name in candidates:
        candidate = os.path.join(input_dir, name)
        try:
            with open(candidate, "x"):
                pass  # File created successfully and is kept
            return candidate
        except FileExistsError:
            continue
        except OSError as e:
            logger.error(f"Cannot create file {candidate}: {e}")
            raise ValueError(f"Cannot create file: {e}")

    logger.error(
        f"Could not find an available filename after {MAX_ATTEMPTS} attempts. "
        f"Please clean up your output directory or specify --output explicitly."
    )
    raise RuntimeError(f"No available filename found after {MAX_ATTEMPTS} attempts")

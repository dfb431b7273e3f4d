#!/usr/bin/env python3
"""
JSON persistence of path collections in the {paths: [{title, locations}]} shape.
"""

from typing import Any, Dict, Optional
import json
import logging
import os

from .config import COINCIDENCE_THRESHOLD
from .path import Path, PathCollection, PathFormatError

logger = logging.getLogger(__name__)


def _read_json(filename: str) -> Any:
    with open(filename, "r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise PathFormatError(f"Invalid JSON in {filename}: {e}")
        except UnicodeDecodeError as e:
            raise PathFormatError(f"{filename} is not UTF-8 text: {e}")


def _write_json(data: Dict[str, Any], filename: str) -> None:
    with open(filename, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def load_path_collection(
    filename: str,
    name: Optional[str] = None,
    coincidence_threshold: float = COINCIDENCE_THRESHOLD,
) -> PathCollection:
    """
    Load a path collection from disk.

    Accepts a {paths: [...]} collection, a single {title, locations} path, or
    a GPX file, which becomes a one-path collection.

    Args:
        filename: File to read
        name: Collection name; defaults to the file's base name

    Raises:
        FileNotFoundError: If file doesn't exist.
        PathFormatError: If the content is not a valid path or collection.
        gpxpy.gpx.GPXException: If a GPX file is malformed.
    """
    collection_name = name or os.path.splitext(os.path.basename(filename))[0]

    if filename.lower().endswith(".gpx"):
        path = Path.from_file(filename, coincidence_threshold)
        return PathCollection(collection_name, [path])

    data = _read_json(filename)

    if isinstance(data, dict) and "paths" not in data and "locations" in data:
        collection = PathCollection(
            collection_name, [Path.from_pdo(data, coincidence_threshold)]
        )
    else:
        collection = PathCollection.from_pdo(
            collection_name, data, coincidence_threshold
        )

    logger.info(f"Loaded {len(collection)} paths from {filename}")
    return collection


def save_path_collection(collection: PathCollection, filename: str) -> None:
    """Write a collection as {paths: [...]} JSON, replacing the file."""
    _write_json(collection.to_pdo(), filename)
    logger.debug(f"Saved {len(collection)} paths to {filename}")


def append_path(filename: str, path_pdo: Dict[str, Any]) -> int:
    """
    Append a path record to the collection stored at filename, creating it
    if needed.

    Returns:
        Number of paths stored after appending

    Raises:
        PathFormatError: If the record is malformed; the file is left untouched.
    """
    Path.from_pdo(path_pdo)

    if os.path.exists(filename):
        data = _read_json(filename)
        if not isinstance(data, dict) or not isinstance(data.get("paths"), list):
            raise PathFormatError(f"{filename} does not hold a path collection")
    else:
        data = {"paths": []}

    data["paths"].append(path_pdo)
    _write_json(data, filename)
    logger.debug(f"Appended '{path_pdo.get('title')}' to {filename}")
    return len(data["paths"])


def delete_path(filename: str, index: int) -> int:
    """
    Remove the path at index from the collection stored at filename.

    Removing the last remaining path deletes the file.

    Returns:
        Number of paths left

    Raises:
        IndexError: If index is out of range.
    """
    data = _read_json(filename)
    if not isinstance(data, dict) or not isinstance(data.get("paths"), list):
        raise PathFormatError(f"{filename} does not hold a path collection")

    paths = data["paths"]
    if not 0 <= index < len(paths):
        raise IndexError(f"Path index {index} out of range for {len(paths)} paths")

    if len(paths) == 1:
        os.remove(filename)
        logger.debug(f"Removed last path; deleted {filename}")
        return 0

    del paths[index]
    _write_json(data, filename)
    return len(paths)

from typing import Any, Dict, List
import json
import logging
import re
import time
import requests

from .config import CATALOG_API_URL, COINCIDENCE_THRESHOLD, DEFAULT_API_TIMEOUT
from .path import PathCollection, PathFormatError

CATALOG_CALLBACK = "initPage"

# callback( ... ) with an optional trailing semicolon
_JSONP_PATTERN = re.compile(r"^\s*[\w$.]+\s*\((.*)\)\s*;?\s*$", re.DOTALL)

# Configure logging
logger = logging.getLogger(__name__)


def _is_retryable_error(e: requests.exceptions.HTTPError) -> bool:
    """Check if an HTTP error is retryable."""
    if e.response is not None and hasattr(e.response, "status_code"):
        return e.response.status_code == 429 or e.response.status_code >= 500
    else:
        error_msg = str(e).lower()
        return any(code in error_msg for code in ["429", "500", "502", "503", "504"])


def parse_catalog_response(text: str) -> List[Dict[str, Any]]:
    """Extract the list of path records from a JSONP or JSON catalog body.

    Raises:
        PathFormatError: If the body is neither JSONP nor JSON, or holds no path list
    """
    match = _JSONP_PATTERN.match(text)
    payload = match.group(1) if match else text

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise PathFormatError(f"Unparseable catalog response: {e}")

    if isinstance(data, dict):
        data = data.get("paths")
    if not isinstance(data, list):
        raise PathFormatError("Catalog response does not contain a list of paths")

    return data


def fetch_catalog(
    campus: str,
    url: str = CATALOG_API_URL,
    timeout: int = DEFAULT_API_TIMEOUT,
    max_retries: int = 5,
    coincidence_threshold: float = COINCIDENCE_THRESHOLD,
) -> PathCollection:
    """Fetch the published route catalog for a campus.

    Retries with exponential backoff on 429 (rate limit) and 5xx errors.

    Returns:
        PathCollection named after the campus

    Raises:
        requests.exceptions.RequestException: On network or HTTP errors after retries
        PathFormatError: If the response holds malformed paths
    """
    params = {"campus": campus, "callback": CATALOG_CALLBACK}
    attempt = 0
    base_delay = 2.0

    while True:
        try:
            response = requests.get(url, params=params, timeout=timeout)
            response.raise_for_status()
            break

        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            logger.debug(
                f"HTTPError caught: status={status_code}, attempt={attempt}, max_retries={max_retries}"
            )

            if _is_retryable_error(e) and attempt < max_retries:
                delay = base_delay * (2**attempt)
                error_type = (
                    "Server error"
                    if status_code and status_code >= 500
                    else "Rate limited"
                )
                logger.warning(
                    f"{error_type} ({status_code or 'unknown'}), retrying in {delay:.0f}s (attempt {attempt + 1} of {max_retries + 1})"
                )
                time.sleep(delay)
                attempt += 1
                continue
            raise

    records = parse_catalog_response(response.text)
    collection = PathCollection.from_pdo(
        f"{campus.capitalize()} Routes", {"paths": records}, coincidence_threshold
    )
    logger.info(f"Fetched {len(collection)} routes for campus '{campus}'")
    return collection

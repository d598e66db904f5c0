"""
Data collection from the Fishtest API.

One GET against the active-runs endpoint returns every running test as a
mapping of run id -> run record. Transport errors are retried with
exponential backoff; an HTTP error status aborts immediately. Either way
a failure raises FetchError so the update cycle stops before anything is
written.
"""

import logging
import os
import time

import requests

from fishtrack.errors import FetchError

log = logging.getLogger("fishtrack.collect")

API_URL = os.environ.get(
    "FISHTEST_API_URL", "https://tests.stockfishchess.org/api/active_runs"
)
USER_AGENT = "fishtrack (fishtest progress tracker)"
HEADERS = {"User-Agent": USER_AGENT, "Accept": "application/json"}

MAX_ATTEMPTS = 4
DEFAULT_TIMEOUT = 30


def _api_get(url, timeout=DEFAULT_TIMEOUT, attempts=MAX_ATTEMPTS):
    """GET ``url`` with retries on transport errors. Raises FetchError."""
    last_error = None
    for attempt in range(attempts):
        try:
            resp = requests.get(url, headers=HEADERS, timeout=timeout)
        except requests.RequestException as e:
            last_error = e
            if attempt + 1 < attempts:
                wait = 2 ** (attempt + 1)
                log.warning(f"Request error: {e}. Retrying in {wait}s...")
                time.sleep(wait)
            continue

        if not 200 <= resp.status_code < 300:
            raise FetchError(
                f"HTTP error! status: {resp.status_code} {resp.reason}",
                status_code=resp.status_code,
            )
        return resp

    raise FetchError(f"Failed after {attempts} attempts: {url} ({last_error})")


def fetch_active_runs(url=None, timeout=DEFAULT_TIMEOUT):
    """Fetch the raw active-runs mapping (run id -> run record)."""
    url = url or API_URL
    log.info(f"Fetching active runs from {url}")
    resp = _api_get(url, timeout=timeout)
    try:
        data = resp.json()
    except ValueError as e:
        raise FetchError(f"Invalid JSON from {url}: {e}") from e
    if not isinstance(data, dict):
        raise FetchError(
            f"Unexpected payload from {url}: expected an object, "
            f"got {type(data).__name__}"
        )
    return data

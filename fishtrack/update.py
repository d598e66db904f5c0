"""
One fetch -> process -> persist cycle.

Fetching the API and loading the previous history are independent, so they
run side by side. Nothing is written until the fetch has succeeded; the
snapshot is rewritten every cycle, the history only when it changed.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fishtrack.collect import DEFAULT_TIMEOUT, fetch_active_runs
from fishtrack.history import (
    MAX_HISTORY_POINTS,
    history_from_json,
    history_to_json,
    update_history,
)
from fishtrack.snapshot import process_raw_data, snapshot_to_json
from fishtrack.storage import (
    history_data_path,
    latest_data_path,
    load_json,
    save_json,
)

log = logging.getLogger("fishtrack.update")

DATA_DIR = Path(os.environ.get("DATA_DIR", "."))


@dataclass
class UpdateResult:
    tests: int
    history_changed: bool
    tracked_tests: int


def load_history(data_dir):
    return history_from_json(load_json(history_data_path(data_dir), {}))


def run_update(
    data_dir=None,
    api_url: Optional[str] = None,
    now: Optional[int] = None,
    timeout: float = DEFAULT_TIMEOUT,
    max_points: int = MAX_HISTORY_POINTS,
) -> UpdateResult:
    """Run a single update cycle. FetchError propagates with nothing written."""
    data_dir = Path(data_dir) if data_dir is not None else DATA_DIR
    log.info("Starting data update process...")

    with ThreadPoolExecutor(max_workers=2) as pool:
        history_future = pool.submit(load_history, data_dir)
        raw_future = pool.submit(fetch_active_runs, api_url, timeout)
        raw = raw_future.result()
        current_history = history_future.result()

    summaries = process_raw_data(raw)
    log.info(f"Fetched and processed {len(summaries)} active tests.")

    updated_history, changed = update_history(
        current_history, summaries, now=now, max_points=max_points
    )

    save_json(latest_data_path(data_dir), snapshot_to_json(summaries))
    if changed:
        save_json(history_data_path(data_dir), history_to_json(updated_history))
    else:
        log.info("Historical data unchanged, skipping save.")

    log.info("Data update process finished.")
    return UpdateResult(
        tests=len(summaries),
        history_changed=changed,
        tracked_tests=len(updated_history),
    )

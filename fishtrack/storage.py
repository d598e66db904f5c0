"""
JSON file storage for the snapshot and history files.

Both files live in a single data directory (the repository root by default,
so the static page and the scheduled workflow find them). Reads treat a
missing file as "no data yet"; every other I/O or decode error propagates.
Writes go through a temp file in the same directory so a reader never sees
a half-written file.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

log = logging.getLogger("fishtrack.storage")

LATEST_DATA_FILE = "latest_data.json"
HISTORY_DATA_FILE = "historical_data.json"


def latest_data_path(data_dir):
    return Path(data_dir) / LATEST_DATA_FILE


def history_data_path(data_dir):
    return Path(data_dir) / HISTORY_DATA_FILE


def load_json(path, default):
    """Load JSON from ``path``, returning ``default`` if the file does not exist."""
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        log.info(f"File not found: {path}. Returning default.")
        return default
    except (OSError, json.JSONDecodeError) as e:
        log.error(f"Error reading JSON from {path}: {e}")
        raise


def save_json(path, data):
    """Pretty-print ``data`` to ``path`` atomically, creating parent dirs."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_name, path)
    except (OSError, TypeError, ValueError) as e:
        log.error(f"Error writing JSON to {path}: {e}")
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    log.info(f"Successfully saved data to {path}")

"""'Last update: 5 min ago' status line."""

import time
from typing import Optional


def format_time_ago(timestamp: Optional[int], now: Optional[int] = None) -> str:
    if not timestamp:
        return "N/A"
    if now is None:
        now = int(time.time())

    diff_seconds = now - timestamp
    if diff_seconds < 0:
        return "in the future?"
    if diff_seconds < 60:
        return f"{diff_seconds} sec ago"

    diff_minutes = diff_seconds // 60
    if diff_minutes < 60:
        return f"{diff_minutes} min ago"

    diff_hours = diff_minutes // 60
    if diff_hours < 24:
        return f"{diff_hours} hr ago"

    return f"{diff_hours // 24} day(s) ago"


def status_text(latest_time: Optional[int], now: Optional[int] = None, error: bool = False) -> str:
    if error:
        return "Last update: Error loading"
    if not latest_time:
        return "Last update: N/A (or still loading)"
    return f"Last update: {format_time_ago(latest_time, now)}"

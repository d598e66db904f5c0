"""
Per-test history: a bounded, change-gated time series of (time, wml, llr).

Each update cycle adds at most one point per active test, and only when
wml or llr moved since the last retained point. Sequences are capped at
MAX_HISTORY_POINTS (oldest dropped first). Tests that disappear from the
active list lose their history entirely.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from fishtrack.snapshot import TestSummary, parse_float, parse_int

log = logging.getLogger("fishtrack.history")

# 864 points = 3 days of samples at the 5-minute schedule.
MAX_HISTORY_POINTS = 864

HistoryStore = Dict[str, List["HistoryPoint"]]


@dataclass(frozen=True)
class HistoryPoint:
    time: int                  # unix seconds
    wml: int
    llr: Optional[float]

    def same_values(self, other: "HistoryPoint") -> bool:
        return self.wml == other.wml and self.llr == other.llr

    def to_dict(self) -> Dict[str, Any]:
        return {"time": self.time, "wml": self.wml, "llr": self.llr}

    @classmethod
    def from_dict(cls, data: Mapping) -> "HistoryPoint":
        return cls(
            time=parse_int(data.get("time")),
            wml=parse_int(data.get("wml")),
            llr=parse_float(data.get("llr")),
        )


def update_history(
    history: Mapping[str, List[HistoryPoint]],
    summaries: Iterable[TestSummary],
    now: Optional[int] = None,
    max_points: int = MAX_HISTORY_POINTS,
) -> Tuple[HistoryStore, bool]:
    """Fold one snapshot into the history store.

    Returns (updated_store, changed). ``changed`` is False only when no
    entry was created, appended to, or removed, so the caller can skip
    rewriting the history file. The input mapping is left untouched.
    """
    if now is None:
        now = int(time.time())

    updated: HistoryStore = {test_id: list(points) for test_id, points in history.items()}
    changed = False
    active_ids = set()

    for summary in summaries:
        active_ids.add(summary.id)
        points = updated.get(summary.id)
        if points is None:
            points = updated[summary.id] = []
            changed = True

        candidate = HistoryPoint(time=now, wml=summary.wml, llr=summary.llr)
        if points and points[-1].same_values(candidate):
            continue

        points.append(candidate)
        changed = True
        if len(points) > max_points:
            del points[0]

    for test_id in list(updated):
        if test_id not in active_ids:
            log.info(f"Cleaning up historical data for ended test: {test_id}")
            del updated[test_id]
            changed = True

    return updated, changed


def latest_update_time(history: Mapping[str, List[HistoryPoint]]) -> Optional[int]:
    """Most recent capture time across the last point of every test."""
    latest = 0
    for points in history.values():
        if points and points[-1].time > latest:
            latest = points[-1].time
    return latest if latest > 0 else None


# ---------------------------------------------------------------------------
# File format: {test_id: [{"time": ..., "wml": ..., "llr": ...}, ...]}
# ---------------------------------------------------------------------------

def history_to_json(history: Mapping[str, List[HistoryPoint]]) -> Dict[str, List[Dict[str, Any]]]:
    return {
        test_id: [p.to_dict() for p in points]
        for test_id, points in history.items()
    }


def history_from_json(data: Any) -> HistoryStore:
    if not isinstance(data, Mapping):
        raise ValueError(f"history must be a JSON object, got {type(data).__name__}")
    store: HistoryStore = {}
    for test_id, entries in data.items():
        if not isinstance(entries, list):
            continue
        store[str(test_id)] = [
            HistoryPoint.from_dict(e) for e in entries if isinstance(e, Mapping)
        ]
    return store

"""
Snapshot processing: raw Fishtest run records -> sorted test summaries.

The API payload is loosely structured. Any field may be missing, null or
a string where a number is expected, so every value goes through a
parse-with-default helper instead of failing the whole record:

    counts (wins/losses/draws/workers)  -> 0
    llr / elo0                          -> None
    username / branch                   -> "N/A"

The resulting list is sorted by LLR descending, tests without an LLR last.
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

NOT_AVAILABLE = "N/A"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------

def parse_int(value: Any, default: int = 0) -> int:
    """Leading-integer parse: "12" -> 12, "12.7" -> 12, 12.7 -> 12, junk -> default."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else default
    return default


def parse_float(value: Any) -> Optional[float]:
    """Leading-float parse: "1.5abc" -> 1.5, ".5" -> 0.5.

    None for missing, unparseable or non-finite values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        match = _LEADING_FLOAT.match(value)
        if not match:
            return None
        result = float(match.group(1))
    else:
        return None
    return result if math.isfinite(result) else None


def _mapping(value: Any) -> Mapping:
    return value if isinstance(value, Mapping) else {}


def _text(value: Any) -> str:
    return NOT_AVAILABLE if value is None else str(value)


# ---------------------------------------------------------------------------
# Test summary
# ---------------------------------------------------------------------------

@dataclass
class TestSummary:
    """One active test as shown in the table."""

    id: str
    username: str = NOT_AVAILABLE
    branch: str = NOT_AVAILABLE
    llr: Optional[float] = None
    wml: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    workers: int = 0
    sprt_elo0: Optional[float] = None   # sign picks the row tint

    @property
    def total_games(self) -> int:
        return self.wins + self.losses + self.draws

    @property
    def paused(self) -> bool:
        return self.workers == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "branch": self.branch,
            "llr": self.llr,
            "wml": self.wml,
            "wins": self.wins,
            "losses": self.losses,
            "draws": self.draws,
            "totalGames": self.total_games,
            "workers": self.workers,
            "sprtElo0": self.sprt_elo0,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "TestSummary":
        """Read back a snapshot-file entry, tolerating missing fields."""
        wins = parse_int(data.get("wins"))
        losses = parse_int(data.get("losses"))
        return cls(
            id=str(data.get("id", "")),
            username=_text(data.get("username")),
            branch=_text(data.get("branch")),
            llr=parse_float(data.get("llr")),
            wml=parse_int(data.get("wml"), default=wins - losses),
            wins=wins,
            losses=losses,
            draws=parse_int(data.get("draws")),
            workers=parse_int(data.get("workers")),
            sprt_elo0=parse_float(data.get("sprtElo0")),
        )


def summarize_run(run_id: str, record: Mapping) -> TestSummary:
    """Normalize one raw API record."""
    record = _mapping(record)
    args = _mapping(record.get("args"))
    sprt = _mapping(args.get("sprt"))
    results = _mapping(record.get("results"))

    wins = parse_int(results.get("wins"))
    losses = parse_int(results.get("losses"))

    return TestSummary(
        id=str(record.get("_id") or run_id),
        username=_text(args.get("username")),
        branch=_text(args.get("new_tag")),
        llr=parse_float(sprt.get("llr")),
        wml=wins - losses,
        wins=wins,
        losses=losses,
        draws=parse_int(results.get("draws")),
        workers=parse_int(record.get("workers")),
        sprt_elo0=parse_float(sprt.get("elo0")),
    )


def sort_by_llr(summaries: List[TestSummary]) -> List[TestSummary]:
    """LLR descending, None last. Stable, so None-vs-None keeps input order."""
    with_llr = [s for s in summaries if s.llr is not None]
    without_llr = [s for s in summaries if s.llr is None]
    with_llr.sort(key=lambda s: s.llr, reverse=True)
    return with_llr + without_llr


def process_raw_data(raw: Mapping) -> List[TestSummary]:
    """Turn the API's {run_id: record} mapping into sorted summaries."""
    summaries = [summarize_run(run_id, record) for run_id, record in raw.items()]
    return sort_by_llr(summaries)


def snapshot_to_json(summaries: List[TestSummary]) -> List[Dict[str, Any]]:
    return [s.to_dict() for s in summaries]


def snapshot_from_json(data: Any) -> List[TestSummary]:
    if not isinstance(data, list):
        raise ValueError(f"snapshot must be a JSON array, got {type(data).__name__}")
    return [TestSummary.from_dict(entry) for entry in data if isinstance(entry, Mapping)]

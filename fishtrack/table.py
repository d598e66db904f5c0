"""
Table view: filtering and the derived per-row display fields.

Rows come out as plain dataclasses; the dashboard turns them into JSON and
the page only has to paint them.
"""

import math
from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from fishtrack.snapshot import TestSummary

# SPRT decision boundary: log((1 - 0.05) / 0.05)
LLR_BOUND = 2.94443897916644

TEST_VIEW_URL = "https://tests.stockfishchess.org/tests/view/{id}"

LOAD_ERROR_MESSAGE = "Error loading test data. Check the logs or wait for data generation."
NO_MATCHES_MESSAGE = "No tests match your filter."
NO_DATA_MESSAGE = "No active tests found or data not yet available."

TINT_REGRESSION = "regression"
TINT_IMPROVEMENT = "improvement"


def _js_round(x: float) -> int:
    """Round half up, matching the page's Math.round."""
    return int(math.floor(x + 0.5))


def _to_fixed(x: float) -> str:
    """Two decimals with ties away from zero, matching the page's toFixed(2)."""
    if x == 0:
        x = 0.0  # -0.0 prints as "0.00"
    return str(Decimal(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_llr(llr: Optional[float]) -> str:
    """'2.94 (100%)' style: value plus progress toward the SPRT bound."""
    if llr is None:
        return "N/A"
    percentage = (llr / LLR_BOUND) * 100
    percentage = max(-100.0, min(100.0, percentage))
    return f"{_to_fixed(llr)} ({_js_round(percentage)}%)"


def score_percent(wins: int, losses: int, draws: int) -> str:
    total = wins + losses + draws
    if total == 0:
        return "0.00"
    score = (wins + draws / 2) / total * 100
    if not math.isfinite(score):
        score = 0.0
    return _to_fixed(score)


def row_tint(sprt_elo0: Optional[float]) -> Optional[str]:
    # elo0 == 0 counts as an improvement test
    if sprt_elo0 is None:
        return None
    return TINT_REGRESSION if sprt_elo0 < 0 else TINT_IMPROVEMENT


def filter_summaries(summaries: List[TestSummary], query: Optional[str]) -> List[TestSummary]:
    """Case-insensitive substring match on username, branch or id."""
    needle = (query or "").strip().lower()
    if not needle:
        return summaries
    return [
        s for s in summaries
        if needle in s.username.lower()
        or needle in s.branch.lower()
        or needle in s.id.lower()
    ]


@dataclass
class TableRow:
    id: str
    short_id: str
    test_url: str
    username: str
    branch: str
    llr_display: str
    total_games: int
    score: str
    games_display: str
    paused: bool
    tint: Optional[str]


@dataclass
class TableView:
    rows: List[TableRow] = field(default_factory=list)
    placeholder: Optional[str] = None
    is_error: bool = False
    total: int = 0

    def to_dict(self):
        return asdict(self)


def build_row(summary: TestSummary) -> TableRow:
    total = summary.total_games
    score = score_percent(summary.wins, summary.losses, summary.draws)
    return TableRow(
        id=summary.id,
        short_id=summary.id[:8] + "...",
        test_url=TEST_VIEW_URL.format(id=summary.id),
        username=summary.username,
        branch=summary.branch,
        llr_display=format_llr(summary.llr),
        total_games=total,
        score=score,
        games_display=f"{total} ({score}%)",
        paused=summary.paused,
        tint=row_tint(summary.sprt_elo0),
    )


def render_table(
    summaries: List[TestSummary],
    query: Optional[str] = None,
    load_error: Optional[str] = None,
) -> TableView:
    """Filter ``summaries`` and build the rows or the right placeholder."""
    if load_error:
        return TableView(placeholder=LOAD_ERROR_MESSAGE, is_error=True)

    visible = filter_summaries(summaries, query)
    if not visible:
        placeholder = NO_MATCHES_MESSAGE if summaries else NO_DATA_MESSAGE
        return TableView(placeholder=placeholder, total=len(summaries))

    return TableView(rows=[build_row(s) for s in visible], total=len(summaries))

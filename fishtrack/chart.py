"""
Progress chart state for the one test the user is tracking.

The chart has two series, score (wins minus losses) and LLR, and shows
exactly one at a time. State lives in an immutable ChartState; every user
event is a function (state, event) -> (new_state, RenderInstruction) so the
dashboard can hold one state value and swap it per request.

    select test    -> rebuild (or just scroll, if it is already tracked)
    toggle metric  -> flip series visibility and the y-axis bounds
    data refresh   -> recompute series and "ended" for the tracked test
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from fishtrack.history import HistoryPoint
from fishtrack.snapshot import TestSummary

LLR_AXIS_MIN = -3
LLR_AXIS_MAX = 3

Point = Tuple[int, float]


class Metric(str, Enum):
    SCORE = "score"
    LLR = "llr"


class RenderAction(str, Enum):
    NONE = "none"
    SCROLL = "scroll"           # already tracked: bring the chart into view
    REBUILD = "rebuild"         # new chart for a newly selected test
    UPDATE = "update"           # same chart, new data or axis


@dataclass(frozen=True)
class RenderInstruction:
    action: RenderAction
    scroll: bool = False


@dataclass(frozen=True)
class ChartState:
    tracked_id: Optional[str] = None
    tracked_branch: Optional[str] = None
    metric: Metric = Metric.LLR
    ended: bool = False
    series: Dict[str, List[Point]] = field(
        default_factory=lambda: {Metric.SCORE.value: [], Metric.LLR.value: []}
    )

    @property
    def tracking(self) -> bool:
        return self.tracked_id is not None


# ---------------------------------------------------------------------------
# Series and axes
# ---------------------------------------------------------------------------

def build_series(points: Sequence[HistoryPoint]) -> Dict[str, List[Point]]:
    """Map history points to (ms timestamp, value). Missing LLR -> NaN gap."""
    score = [(p.time * 1000, p.wml) for p in points]
    llr = [(p.time * 1000, p.llr if p.llr is not None else math.nan) for p in points]
    return {Metric.SCORE.value: score, Metric.LLR.value: llr}


def axis_config(metric: Metric) -> Dict[str, object]:
    if Metric(metric) is Metric.LLR:
        return {"min": LLR_AXIS_MIN, "max": LLR_AXIS_MAX, "beginAtZero": False}
    return {"min": None, "max": None, "beginAtZero": True}


def series_visibility(metric: Metric) -> Dict[str, bool]:
    metric = Metric(metric)
    return {m.value: m is metric for m in Metric}


def _is_active(test_id: str, summaries: Iterable[TestSummary]) -> bool:
    return any(s.id == test_id for s in summaries)


# ---------------------------------------------------------------------------
# Event handlers
# ---------------------------------------------------------------------------

def on_test_selected(
    state: ChartState,
    test_id: str,
    branch: str,
    history: Mapping[str, List[HistoryPoint]],
    summaries: Iterable[TestSummary],
) -> Tuple[ChartState, RenderInstruction]:
    if test_id == state.tracked_id:
        return state, RenderInstruction(RenderAction.SCROLL, scroll=True)

    new_state = ChartState(
        tracked_id=test_id,
        tracked_branch=branch,
        metric=Metric.LLR,
        ended=not _is_active(test_id, summaries),
        series=build_series(history.get(test_id, [])),
    )
    return new_state, RenderInstruction(RenderAction.REBUILD, scroll=True)


def on_metric_toggled(state: ChartState, metric) -> Tuple[ChartState, RenderInstruction]:
    """Show ``metric`` ('score' or 'llr'). Raises ValueError for anything else."""
    metric = Metric(metric)
    new_state = replace(state, metric=metric)
    if not state.tracking:
        return new_state, RenderInstruction(RenderAction.NONE)
    return new_state, RenderInstruction(RenderAction.UPDATE)


def on_data_refreshed(
    state: ChartState,
    history: Mapping[str, List[HistoryPoint]],
    summaries: Iterable[TestSummary],
) -> Tuple[ChartState, RenderInstruction]:
    if not state.tracking:
        return state, RenderInstruction(RenderAction.NONE)
    new_state = replace(
        state,
        series=build_series(history.get(state.tracked_id, [])),
        ended=not _is_active(state.tracked_id, summaries),
    )
    return new_state, RenderInstruction(RenderAction.UPDATE)


# ---------------------------------------------------------------------------
# JSON view for the page
# ---------------------------------------------------------------------------

def _json_value(value):
    # JSON has no NaN; null makes Chart.js break the line the same way
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def chart_view(state: ChartState) -> Optional[Dict[str, object]]:
    if not state.tracking:
        return None
    visible = series_visibility(state.metric)
    return {
        "testId": state.tracked_id,
        "branch": state.tracked_branch,
        "title": f"Progress for: {state.tracked_branch} (ID: {state.tracked_id[:8]}...)",
        "metric": state.metric.value,
        "ended": state.ended,
        "datasets": [
            {
                "key": key,
                "label": "Score" if key == Metric.SCORE.value else "LLR",
                "hidden": not visible[key],
                "data": [{"x": x, "y": _json_value(y)} for x, y in state.series[key]],
            }
            for key in (Metric.SCORE.value, Metric.LLR.value)
        ],
        "yAxis": axis_config(state.metric),
    }

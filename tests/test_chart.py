"""
Tests for the chart state machine and series construction.
"""

import math

import pytest

from fishtrack.chart import (
    ChartState,
    Metric,
    RenderAction,
    axis_config,
    build_series,
    chart_view,
    on_data_refreshed,
    on_metric_toggled,
    on_test_selected,
    series_visibility,
)
from fishtrack.history import HistoryPoint


@pytest.fixture
def tracked(history, summaries):
    state, _ = on_test_selected(ChartState(), "aaaaaaaa1111", "search-tweak", history, summaries)
    return state


class TestBuildSeries:
    """History points -> (ms, value) pairs."""

    def test_times_in_ms_and_score_is_wml(self, history):
        series = build_series(history["aaaaaaaa1111"])
        assert series["score"] == [(1_700_000_000_000, 8), (1_700_000_300_000, 10)]

    def test_missing_llr_is_nan(self, history):
        llr = build_series(history["aaaaaaaa1111"])["llr"]
        assert llr[0] == (1_700_000_000_000, 1.0)
        assert math.isnan(llr[1][1])

    def test_empty(self):
        assert build_series([]) == {"score": [], "llr": []}


class TestAxes:
    """Axis bounds and visibility per metric."""

    def test_llr_axis_fixed(self):
        assert axis_config(Metric.LLR) == {"min": -3, "max": 3, "beginAtZero": False}

    def test_score_axis_auto(self):
        assert axis_config("score") == {"min": None, "max": None, "beginAtZero": True}

    def test_exactly_one_visible(self):
        assert series_visibility(Metric.LLR) == {"score": False, "llr": True}
        assert series_visibility(Metric.SCORE) == {"score": True, "llr": False}


class TestSelectTest:
    """Selecting a test from the table."""

    def test_select_new_test(self, tracked, history):
        assert tracked.tracked_id == "aaaaaaaa1111"
        assert tracked.tracked_branch == "search-tweak"
        assert tracked.metric is Metric.LLR
        assert tracked.ended is False
        assert tracked.series == build_series(history["aaaaaaaa1111"])

    def test_reselect_only_scrolls(self, tracked, history, summaries):
        toggled, _ = on_metric_toggled(tracked, "score")
        state, instruction = on_test_selected(toggled, "aaaaaaaa1111", "other", history, summaries)

        assert state is toggled
        assert state.metric is Metric.SCORE
        assert instruction.action is RenderAction.SCROLL
        assert instruction.scroll is True

    def test_switching_resets_metric_to_llr(self, tracked, history, summaries):
        toggled, _ = on_metric_toggled(tracked, "score")
        state, instruction = on_test_selected(toggled, "bbbbbbbb2222", "simplify-eval", history, summaries)

        assert state.metric is Metric.LLR
        assert instruction.action is RenderAction.REBUILD

    def test_no_history_gives_empty_series(self, history, summaries):
        state, _ = on_test_selected(ChartState(), "cccccccc3333", "nnue-v2", history, summaries)
        assert state.series == {"score": [], "llr": []}
        assert state.ended is False

    def test_ended_test(self, history, summaries):
        state, _ = on_test_selected(ChartState(), "dddddddd4444", "old", history, summaries)
        assert state.ended is True
        assert state.series["llr"] == [(1_700_000_600_000, -2.9)]


class TestToggleMetric:
    """Switching the visible series."""

    def test_llr_to_score(self, tracked):
        state, instruction = on_metric_toggled(tracked, Metric.SCORE)
        view = chart_view(state)

        hidden = {d["key"]: d["hidden"] for d in view["datasets"]}
        assert hidden == {"score": False, "llr": True}
        assert view["yAxis"] == {"min": None, "max": None, "beginAtZero": True}
        assert instruction.action is RenderAction.UPDATE

    def test_series_are_hidden_not_removed(self, tracked):
        state, _ = on_metric_toggled(tracked, "score")
        assert len(chart_view(state)["datasets"]) == 2
        assert state.series == tracked.series

    def test_invalid_metric(self, tracked):
        with pytest.raises(ValueError):
            on_metric_toggled(tracked, "elo")

    def test_without_tracked_test(self):
        state, instruction = on_metric_toggled(ChartState(), "score")
        assert state.metric is Metric.SCORE
        assert instruction.action is RenderAction.NONE


class TestDataRefresh:
    """Reloading data while a test is tracked."""

    def test_noop_when_nothing_tracked(self, history, summaries):
        state = ChartState()
        new_state, instruction = on_data_refreshed(state, history, summaries)
        assert new_state is state
        assert instruction.action is RenderAction.NONE

    def test_recomputes_series_and_ended(self, tracked, history):
        extended = dict(history)
        extended["aaaaaaaa1111"] = history["aaaaaaaa1111"] + [
            HistoryPoint(time=1_700_000_900, wml=12, llr=1.4)
        ]
        state, instruction = on_data_refreshed(tracked, extended, [])

        assert len(state.series["score"]) == 3
        assert state.ended is True
        assert state.metric is tracked.metric
        assert instruction.action is RenderAction.UPDATE


class TestChartView:
    """JSON view for the page."""

    def test_none_when_not_tracking(self):
        assert chart_view(ChartState()) is None

    def test_title_and_nan_as_null(self, tracked):
        view = chart_view(tracked)
        assert view["title"] == "Progress for: search-tweak (ID: aaaaaaaa...)"
        llr = next(d for d in view["datasets"] if d["key"] == "llr")
        assert llr["data"][1] == {"x": 1_700_000_300_000, "y": None}
        assert view["yAxis"]["min"] == -3

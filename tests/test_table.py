"""
Tests for the table view: derived fields, filtering and empty states.
"""

import pytest

from fishtrack.snapshot import TestSummary as Summary
from fishtrack.table import (
    LLR_BOUND,
    LOAD_ERROR_MESSAGE,
    NO_DATA_MESSAGE,
    NO_MATCHES_MESSAGE,
    _js_round,
    build_row,
    filter_summaries,
    format_llr,
    render_table,
    row_tint,
    score_percent,
)


class TestFormatLLR:
    """LLR text with progress toward the SPRT bound."""

    def test_at_bound(self):
        assert format_llr(LLR_BOUND) == "2.94 (100%)"

    def test_half_bound(self):
        assert format_llr(1.47221948958322) == "1.47 (50%)"

    def test_none(self):
        assert format_llr(None) == "N/A"

    def test_clamped(self):
        assert format_llr(5.0) == "5.00 (100%)"
        assert format_llr(-4.2) == "-4.20 (-100%)"

    def test_zero(self):
        assert format_llr(0.0) == "0.00 (0%)"

    def test_two_decimal_tie_rounds_away_from_zero(self):
        assert format_llr(0.125) == "0.13 (4%)"
        assert format_llr(-0.125) == "-0.13 (-4%)"

    def test_negative_zero(self):
        assert format_llr(-0.0) == "0.00 (0%)"

    def test_half_rounds_up(self):
        assert _js_round(0.5) == 1
        assert _js_round(2.5) == 3
        assert _js_round(-0.5) == 0
        assert _js_round(-50.5) == -50


class TestScorePercent:
    """(wins + draws/2) / games."""

    def test_example(self):
        assert score_percent(3, 1, 0) == "75.00"

    def test_with_draws(self):
        assert score_percent(1, 1, 2) == "50.00"

    def test_no_games(self):
        assert score_percent(0, 0, 0) == "0.00"

    def test_tie_rounds_up(self):
        # 0.5 / 16 = 3.125%
        assert score_percent(0, 15, 1) == "3.13"


class TestRowTint:
    """Sign of elo0 picks the tint; 0 is an improvement test."""

    def test_values(self):
        assert row_tint(None) is None
        assert row_tint(-0.5) == "regression"
        assert row_tint(0.0) == "improvement"
        assert row_tint(2.0) == "improvement"


class TestBuildRow:
    """One row's display fields."""

    def test_row(self, summaries):
        row = build_row(summaries[0])

        assert row.short_id == "bbbbbbbb..."
        assert row.test_url == "https://tests.stockfishchess.org/tests/view/bbbbbbbb2222"
        assert row.total_games == 100
        assert row.score == "49.00"
        assert row.games_display == "100 (49.00%)"
        assert row.llr_display == "2.50 (85%)"
        assert row.paused is True
        assert row.tint == "regression"

    def test_active_row_without_sprt(self):
        row = build_row(Summary(id="x", workers=4))
        assert row.paused is False
        assert row.tint is None
        assert row.llr_display == "N/A"
        assert row.games_display == "0 (0.00%)"


class TestFilterSummaries:
    """Case-insensitive substring filter over username, branch and id."""

    def test_empty_query_returns_full_list(self, summaries):
        assert filter_summaries(summaries, "") is summaries
        assert filter_summaries(summaries, "   ") is summaries
        assert filter_summaries(summaries, None) is summaries

    def test_username(self, summaries):
        assert [s.username for s in filter_summaries(summaries, "ALI")] == ["alice"]

    def test_branch(self, summaries):
        assert [s.id for s in filter_summaries(summaries, "Eval")] == ["bbbbbbbb2222"]

    def test_id(self, summaries):
        assert [s.id for s in filter_summaries(summaries, "cccc33")] == ["cccccccc3333"]

    def test_query_is_trimmed(self, summaries):
        assert len(filter_summaries(summaries, "  bob ")) == 1

    @pytest.mark.parametrize("query", ["a", "e", "2", "zzz"])
    def test_matches_only_what_contains_query(self, summaries, query):
        result = filter_summaries(summaries, query)
        for s in summaries:
            hit = any(query in f.lower() for f in (s.username, s.branch, s.id))
            assert (s in result) == hit


class TestRenderTable:
    """Rows versus placeholders."""

    def test_rows(self, summaries):
        view = render_table(summaries, "")
        assert [r.id for r in view.rows] == [s.id for s in summaries]
        assert view.placeholder is None
        assert view.total == 3

    def test_no_matches(self, summaries):
        view = render_table(summaries, "nobody")
        assert view.rows == []
        assert view.placeholder == NO_MATCHES_MESSAGE

    def test_no_data(self):
        view = render_table([], "")
        assert view.placeholder == NO_DATA_MESSAGE
        assert view.is_error is False

    def test_no_data_with_filter(self):
        assert render_table([], "bob").placeholder == NO_DATA_MESSAGE

    def test_load_error_wins(self):
        view = render_table([], "", load_error="boom")
        assert view.placeholder == LOAD_ERROR_MESSAGE
        assert view.is_error is True

    def test_to_dict(self, summaries):
        data = render_table(summaries[:1]).to_dict()
        assert data["rows"][0]["tint"] == "regression"
        assert data["placeholder"] is None

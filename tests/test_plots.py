"""
Tests for the static progress plots.
"""

import math

from fishtrack.history import HistoryPoint
from fishtrack.plots import generate_all_plots, plot_test_history, series_frame


class TestSeriesFrame:

    def test_columns_and_nan(self, history):
        df = series_frame(history["aaaaaaaa1111"])
        assert list(df.columns) == ["score", "llr"]
        assert list(df["score"]) == [8.0, 10.0]
        assert math.isnan(df["llr"].iloc[1])
        assert str(df.index.tz) == "UTC"


class TestPlots:

    def test_plot_one_test(self, tmp_path, history):
        out = plot_test_history(history["aaaaaaaa1111"], "aaaaaaaa1111", "llr", tmp_path)
        assert out == tmp_path / "aaaaaaaa1111_llr.png"
        assert out.stat().st_size > 0

    def test_unsafe_id_is_sanitized(self, tmp_path):
        points = [HistoryPoint(time=1_700_000_000, wml=1, llr=0.1)]
        out = plot_test_history(points, "../evil id", "score", tmp_path)
        assert out.parent == tmp_path
        assert out.name == ".._evil_id_score.png"

    def test_no_points(self, tmp_path):
        assert plot_test_history([], "x", "score", tmp_path) is None

    def test_generate_all(self, data_dir, tmp_path):
        fig_dir = tmp_path / "figures"
        written = generate_all_plots(data_dir=data_dir, fig_dir=fig_dir)
        assert sorted(p.name for p in written) == [
            "aaaaaaaa1111_llr.png", "aaaaaaaa1111_score.png",
            "dddddddd4444_llr.png", "dddddddd4444_score.png",
        ]

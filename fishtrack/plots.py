"""
Visualization: static PNG progress charts for every tracked test.

The same two series the dashboard draws, rendered offline:
1. Score (wins minus losses) over time
2. LLR over time, on the fixed [-3, 3] axis with the SPRT bounds marked

Missing LLR samples are NaN, so the line breaks instead of interpolating.
"""

import logging
import re
from pathlib import Path

import matplotlib
matplotlib.use("Agg")  # non-interactive backend
import matplotlib.dates as mdates
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from fishtrack.chart import Metric, axis_config, build_series
from fishtrack.history import history_from_json
from fishtrack.storage import history_data_path, load_json
from fishtrack.table import LLR_BOUND

log = logging.getLogger("fishtrack.plots")

sns.set_theme(style="whitegrid", font_scale=1.1)
SERIES_COLORS = {Metric.SCORE.value: "#4bc0c0", Metric.LLR.value: "#ff6384"}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def _save(fig, path, dpi=150):
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    log.info(f"  Saved {path}")


def series_frame(points):
    """History points -> DataFrame indexed by UTC time with score/llr columns."""
    series = build_series(points)
    score = series[Metric.SCORE.value]
    llr = series[Metric.LLR.value]
    df = pd.DataFrame({
        "time": pd.to_datetime([t for t, _ in score], unit="ms", utc=True),
        Metric.SCORE.value: np.array([v for _, v in score], dtype=float),
        Metric.LLR.value: np.array([v for _, v in llr], dtype=float),
    })
    return df.set_index("time")


def plot_test_history(points, test_id, metric, fig_dir, title=None):
    """Line chart of one metric for one test. Returns the PNG path, or None."""
    metric = Metric(metric)
    if not points:
        log.info(f"  Skipping {test_id}: no history")
        return None

    df = series_frame(points)
    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(df.index, df[metric.value], "o-", color=SERIES_COLORS[metric.value],
            linewidth=2, markersize=3)

    axis = axis_config(metric)
    if metric is Metric.LLR:
        ax.set_ylim(axis["min"], axis["max"])
        for bound in (-LLR_BOUND, LLR_BOUND):
            ax.axhline(bound, color="gray", linestyle="--", linewidth=1)
    elif axis["beginAtZero"]:
        lo, hi = ax.get_ylim()
        ax.set_ylim(min(lo, 0), max(hi, 0))

    ax.xaxis.set_major_formatter(mdates.DateFormatter("%H:%M"))
    ax.set_xlabel("Time (UTC)")
    ax.set_ylabel("LLR" if metric is Metric.LLR else "Wins - Losses")
    ax.set_title(title or f"Progress for: {test_id[:8]}... ({metric.value})")

    fig_path = Path(fig_dir)
    fig_path.mkdir(parents=True, exist_ok=True)
    out = fig_path / f"{_UNSAFE_CHARS.sub('_', test_id)}_{metric.value}.png"
    _save(fig, out)
    return out


def generate_all_plots(data_dir=".", fig_dir="results/figures"):
    """Render score and LLR charts for every test in the history file."""
    history = history_from_json(load_json(history_data_path(data_dir), {}))
    log.info(f"Plotting {len(history)} tracked tests...")

    written = []
    for test_id, points in sorted(history.items()):
        for metric in Metric:
            out = plot_test_history(points, test_id, metric, fig_dir)
            if out is not None:
                written.append(out)

    log.info("All plots generated.")
    return written


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    generate_all_plots()

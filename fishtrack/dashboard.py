"""
Live dashboard: serves a localhost page with the filterable test table and
the per-test progress chart.

Run the updater on a schedule (or once):  python run_pipeline.py update
Run the dashboard:                        python -m fishtrack.dashboard

The dashboard reads latest_data.json and historical_data.json from the data
directory on every poll. All page state (filter text, tracked test, visible
metric) lives in one DashboardController; each route is a thin command that
feeds an event into it and returns the resulting view as JSON.
"""

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from flask import Flask, jsonify, render_template_string, request

from fishtrack import chart
from fishtrack.dashboard_template import TEMPLATE
from fishtrack.errors import DataLoadError
from fishtrack.history import history_from_json, history_to_json, latest_update_time
from fishtrack.snapshot import snapshot_from_json, snapshot_to_json
from fishtrack.status import status_text
from fishtrack.storage import history_data_path, latest_data_path, load_json
from fishtrack.table import render_table

log = logging.getLogger("fishtrack.dashboard")

app = Flask(__name__)

DATA_DIR = Path(os.environ.get("DATA_DIR", "."))


def _read_snapshot(data_dir):
    path = latest_data_path(data_dir)
    data = load_json(path, None)
    if data is None:
        raise DataLoadError(f"Failed to load {path.name}: not found")
    return snapshot_from_json(data)


def _read_history(data_dir):
    # No history file yet is normal on first run
    return history_from_json(load_json(history_data_path(data_dir), {}))


class DashboardController:
    """Holds the page state and applies user events to it."""

    def __init__(self, data_dir):
        self.data_dir = Path(data_dir)
        self.summaries = []
        self.history = {}
        self.load_error = None
        self.query = ""
        self.chart_state = chart.ChartState()
        self.last_render = chart.RenderInstruction(chart.RenderAction.NONE)
        self._lock = threading.Lock()

    # -- data ---------------------------------------------------------------

    def reload(self):
        """Load both files side by side; on any failure reset to empty."""
        try:
            with ThreadPoolExecutor(max_workers=2) as pool:
                snapshot_future = pool.submit(_read_snapshot, self.data_dir)
                history_future = pool.submit(_read_history, self.data_dir)
                summaries = snapshot_future.result()
                history = history_future.result()
        except (DataLoadError, OSError, ValueError) as e:
            log.error(f"Error loading data from JSON files: {e}")
            with self._lock:
                self.summaries = []
                self.history = {}
                self.load_error = str(e)
                self.chart_state, self.last_render = chart.on_data_refreshed(
                    self.chart_state, {}, []
                )
            return

        with self._lock:
            self.summaries = summaries
            self.history = history
            self.load_error = None
            self.chart_state, self.last_render = chart.on_data_refreshed(
                self.chart_state, history, summaries
            )

    # -- events -------------------------------------------------------------

    def on_filter_changed(self, text):
        with self._lock:
            self.query = text or ""
            self.last_render = chart.RenderInstruction(chart.RenderAction.NONE)

    def on_test_selected(self, test_id, branch):
        with self._lock:
            self.chart_state, self.last_render = chart.on_test_selected(
                self.chart_state, test_id, branch, self.history, self.summaries
            )

    def on_metric_toggled(self, metric):
        with self._lock:
            self.chart_state, self.last_render = chart.on_metric_toggled(
                self.chart_state, metric
            )

    # -- views --------------------------------------------------------------

    def status_line(self):
        with self._lock:
            return self._status_line()

    def _status_line(self):
        if self.load_error:
            return status_text(None, error=True)
        return status_text(latest_update_time(self.history))

    def view(self):
        with self._lock:
            table = render_table(self.summaries, self.query, self.load_error)
            return {
                "query": self.query,
                "table": table.to_dict(),
                "chart": chart.chart_view(self.chart_state),
                "render": {
                    "action": self.last_render.action.value,
                    "scroll": self.last_render.scroll,
                },
                "status": self._status_line(),
                "latestUpdate": latest_update_time(self.history),
            }


controller = DashboardController(DATA_DIR)


def _json_body():
    return request.get_json(silent=True) or {}


@app.route("/")
def index():
    return render_template_string(TEMPLATE)


@app.route("/latest_data.json")
def latest_data():
    try:
        summaries = _read_snapshot(controller.data_dir)
    except DataLoadError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(snapshot_to_json(summaries))


@app.route("/historical_data.json")
def historical_data():
    return jsonify(history_to_json(_read_history(controller.data_dir)))


@app.route("/api/state")
def api_state():
    """Reload both files and return the full page view. Polled by the page."""
    controller.reload()
    return jsonify(controller.view())


@app.route("/api/filter", methods=["POST"])
def api_filter():
    controller.on_filter_changed(str(_json_body().get("query", "")))
    return jsonify(controller.view())


@app.route("/api/select", methods=["POST"])
def api_select():
    body = _json_body()
    test_id = body.get("id")
    if not test_id:
        return jsonify({"error": "missing test id"}), 400
    controller.on_test_selected(str(test_id), str(body.get("branch") or "N/A"))
    return jsonify(controller.view())


@app.route("/api/metric", methods=["POST"])
def api_metric():
    try:
        controller.on_metric_toggled(_json_body().get("metric"))
    except ValueError:
        return jsonify({"error": "metric must be 'score' or 'llr'"}), 400
    return jsonify(controller.view())


@app.route("/api/status-line")
def api_status_line():
    """Re-render the status text from already-loaded data (no file reads)."""
    return jsonify({"status": controller.status_line()})


def run_dashboard(host="127.0.0.1", port=5050, data_dir="."):
    """Start the dashboard server."""
    global DATA_DIR
    DATA_DIR = Path(data_dir)
    controller.data_dir = DATA_DIR
    os.environ["DATA_DIR"] = str(data_dir)

    log.info(f"Dashboard: http://{host}:{port}")
    log.info(f"  Watching: {DATA_DIR}/")
    app.run(host=host, port=port, debug=False)


if __name__ == "__main__":
    import argparse
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    parser = argparse.ArgumentParser(description="Fishtest progress dashboard")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=5050)
    parser.add_argument("--data-dir", default=str(DATA_DIR))
    args = parser.parse_args()
    run_dashboard(args.host, args.port, args.data_dir)

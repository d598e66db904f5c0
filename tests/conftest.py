"""
Shared fixtures for fishtrack tests.
"""

import json

import pytest

from fishtrack.history import HistoryPoint
from fishtrack.snapshot import TestSummary


# =============================================================================
# Raw API payloads
# =============================================================================

def make_run(run_id, username="vondele", branch="patch", llr=None, elo0=None,
             wins=0, losses=0, draws=0, workers=1):
    """Build a raw active-runs record the way the API shapes it."""
    sprt = {}
    if llr is not None:
        sprt["llr"] = llr
    if elo0 is not None:
        sprt["elo0"] = elo0
    args = {"username": username, "new_tag": branch}
    if sprt:
        args["sprt"] = sprt
    return {
        "_id": run_id,
        "args": args,
        "results": {"wins": wins, "losses": losses, "draws": draws},
        "workers": workers,
    }


@pytest.fixture
def raw_runs():
    """Three active runs: two SPRT tests and one without an LLR yet."""
    return {
        "aaaaaaaa1111": make_run("aaaaaaaa1111", username="alice", branch="search-tweak",
                                 llr=1.2, elo0=0.0, wins=30, losses=20, draws=50),
        "bbbbbbbb2222": make_run("bbbbbbbb2222", username="bob", branch="simplify-eval",
                                 llr=2.5, elo0=-1.75, wins=10, losses=12, draws=78, workers=0),
        "cccccccc3333": make_run("cccccccc3333", username="carol", branch="nnue-v2"),
    }


# =============================================================================
# Summaries and history
# =============================================================================

@pytest.fixture
def summaries():
    return [
        TestSummary(id="bbbbbbbb2222", username="bob", branch="simplify-eval", llr=2.5,
                    wml=-2, wins=10, losses=12, draws=78, workers=0, sprt_elo0=-1.75),
        TestSummary(id="aaaaaaaa1111", username="alice", branch="search-tweak", llr=1.2,
                    wml=10, wins=30, losses=20, draws=50, workers=3, sprt_elo0=0.0),
        TestSummary(id="cccccccc3333", username="carol", branch="nnue-v2"),
    ]


@pytest.fixture
def history():
    return {
        "aaaaaaaa1111": [
            HistoryPoint(time=1_700_000_000, wml=8, llr=1.0),
            HistoryPoint(time=1_700_000_300, wml=10, llr=None),
        ],
        "dddddddd4444": [
            HistoryPoint(time=1_700_000_600, wml=-5, llr=-2.9),
        ],
    }


@pytest.fixture
def data_dir(tmp_path, summaries, history):
    """A data directory with both JSON files written."""
    from fishtrack.history import history_to_json
    from fishtrack.snapshot import snapshot_to_json

    (tmp_path / "latest_data.json").write_text(json.dumps(snapshot_to_json(summaries)))
    (tmp_path / "historical_data.json").write_text(json.dumps(history_to_json(history)))
    return tmp_path

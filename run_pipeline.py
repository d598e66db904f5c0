#!/usr/bin/env python3
"""
Fishtest Tracker Pipeline

Usage:
    python run_pipeline.py                  # Run update + plot
    python run_pipeline.py update           # Fetch active runs, write latest/historical JSON
    python run_pipeline.py plot             # Render per-test progress PNGs from the history
    python run_pipeline.py dashboard        # Launch live dashboard on localhost:5050
    python run_pipeline.py --help           # Show this help

The 'update' step is what the scheduled workflow runs every 5 minutes. It
exits with status 1 if the Fishtest API cannot be fetched, and in that case
writes nothing.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from fishtrack.errors import FishtrackError

log = logging.getLogger("fishtrack")


def step_update(args):
    """Fetch, process and persist one snapshot."""
    from fishtrack.update import run_update

    result = run_update(
        data_dir=args.data_dir,
        api_url=args.api_url,
        timeout=args.timeout,
    )
    log.info(
        f"{result.tests} active tests, history "
        f"{'updated' if result.history_changed else 'unchanged'}"
    )


def step_plot(args):
    """Render score/LLR charts for every tracked test."""
    from fishtrack.plots import generate_all_plots

    fig_dir = Path(args.results_dir) / "figures"
    generate_all_plots(data_dir=args.data_dir, fig_dir=str(fig_dir))


def step_dashboard(args):
    """Launch live dashboard on localhost."""
    from fishtrack.dashboard import run_dashboard

    run_dashboard(host=args.host, port=args.port, data_dir=args.data_dir)


STEPS = {
    "update": step_update,
    "plot": step_plot,
    "dashboard": step_dashboard,
}


def build_parser():
    parser = argparse.ArgumentParser(
        description="Fishtest Tracker Pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "steps", nargs="*", default=[],
        help="Which step(s) to run: all, update, plot, dashboard (default: all)",
    )
    parser.add_argument(
        "--data-dir", default=os.environ.get("DATA_DIR", "."),
        help="Directory for latest_data.json / historical_data.json (default: .)",
    )
    parser.add_argument(
        "--results-dir", default=os.environ.get("RESULTS_DIR", "results"),
        help="Directory for results (default: results/)",
    )
    parser.add_argument(
        "--api-url", default=None,
        help="Fishtest active-runs endpoint (default: $FISHTEST_API_URL or the public API)",
    )
    parser.add_argument(
        "--timeout", type=float, default=30,
        help="HTTP timeout in seconds (default: 30)",
    )
    parser.add_argument(
        "--host", default="127.0.0.1",
        help="Dashboard host (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port", type=int, default=5050,
        help="Dashboard port (default: 5050)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Debug logging",
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    steps = args.steps if args.steps else ["all"]
    valid_steps = set(STEPS) | {"all"}
    for s in steps:
        if s not in valid_steps:
            parser.error(f"invalid step: {s!r} (choose from {', '.join(sorted(valid_steps))})")
    if "all" in steps:
        steps = ["update", "plot"]

    try:
        for step_name in steps:
            STEPS[step_name](args)
    except FishtrackError as e:
        log.error(f"Critical error during {step_name}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

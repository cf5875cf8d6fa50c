"""
catch_autoplay.py

Command line entrypoint. Computes the autoplay trajectory for a catch chart and prints it as JSON.

Usage
- python catch_autoplay.py path/to/chart.json
- python catch_autoplay.py --demo --difficulty hard
- python catch_autoplay.py chart.json --output trajectory.json --dash-speed 0.002 --half-width 0.08
- python catch_autoplay.py --run-tests

Output
- stdout: {"ok": true, "title": ..., "keyframes": [...], "total_score": ..., "caught_value": ...}
- On failure: {"ok": false, "error": "..."} and exit code 2.
- Logs go to stderr.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import autoplay
import catch_models
import catch_store
import config as config_module
import path_reconstructor
import score_engine
import test_chart


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compute an autoplay catcher trajectory for a catch chart.")
    parser.add_argument("chart_path", nargs="?", type=Path, help="JSON catch chart to process.")
    parser.add_argument("--demo", action="store_true", help="Use the built-in test chart instead of a file.")
    parser.add_argument("--difficulty", default="easy", help="Test chart difficulty for --demo (easy, medium, hard).")
    parser.add_argument("--config", type=Path, default=None, help="Config file path (overrides discovery).")
    parser.add_argument("--dash-speed", type=float, default=None, help="Override autoplay.dash_speed.")
    parser.add_argument("--half-width", type=float, default=None, help="Override autoplay.catcher_half_width.")
    parser.add_argument("--output", type=Path, default=None, help="Also write the trajectory JSON to this file.")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level.")
    parser.add_argument("--run-tests", action="store_true", help="Run the in-module smoke tests and exit.")
    return parser


def _run_chunk_tests() -> None:
    catch_models._run_unit_tests()
    score_engine._run_unit_tests()
    path_reconstructor._run_unit_tests()
    autoplay._run_unit_tests()
    catch_store._run_unit_tests()


def _print_payload(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_argument_parser().parse_args(argv)

    if args.run_tests:
        _run_chunk_tests()
        print("Chunk tests passed.")
        return 0

    try:
        app_config, _config_path = config_module.load_config(args.config)
    except Exception as exception:
        _print_payload({"ok": False, "error": str(exception)})
        return 2

    log_level = "DEBUG" if args.verbose else app_config.logging.level
    logging.basicConfig(level=getattr(logging, log_level), stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")

    try:
        settings = config_module.to_settings(app_config)
        if args.dash_speed is not None:
            settings = replace(settings, dash_speed=float(args.dash_speed))
        if args.half_width is not None:
            settings = replace(settings, catcher_half_width=float(args.half_width))
    except ValueError as exception:
        _print_payload({"ok": False, "error": str(exception)})
        return 2

    if args.demo:
        demo_chart = test_chart.build_test_chart(difficulty=args.difficulty)
        title = f"demo ({demo_chart.difficulty})"
        events = demo_chart.events
    elif args.chart_path is not None:
        try:
            loaded = catch_store.load_chart(args.chart_path)
        except catch_store.ChartFileError as exception:
            _print_payload({"ok": False, "error": str(exception)})
            return 2
        title = loaded.title
        events = loaded.events
    else:
        _print_payload({"ok": False, "error": "Provide a chart path or --demo"})
        return 2

    try:
        result = autoplay.generate_autoplay(events, settings)
    except catch_models.CatchModelError as exception:
        _print_payload({"ok": False, "error": str(exception)})
        return 2

    include_scores = bool(app_config.output.include_scores)
    if args.output is not None:
        try:
            catch_store.save_trajectory(
                args.output,
                result,
                indent=int(app_config.output.indent),
                include_scores=include_scores,
            )
        except catch_store.ChartFileError as exception:
            _print_payload({"ok": False, "error": str(exception)})
            return 2

    payload = {"ok": True, "title": title}
    payload.update(catch_store.trajectory_to_dict(result, include_scores=include_scores))
    _print_payload(payload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

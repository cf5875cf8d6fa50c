# -*- coding: utf-8 -*-
########################
# catch_store.py
########################
# Purpose:
# - Read catch charts from JSON and write autoplay trajectories to JSON.
# - Flattens composite chart objects (juice streams, banana showers) into discrete CatchEvents.
#
# Design notes:
# - Parsing must never silently accept invalid charts.
# - Composite objects already carry their nested points; this module does not derive timing.
# - Positions are normalized to [0, 1]. Charts in playfield units declare "playfield_width".
#
########################
# Interfaces:
# Public exceptions:
# - class ChartFileError(Exception)
# - class ChartParseError(ChartFileError)
# - class ChartValidationError(ChartFileError)
#
# Public dataclasses:
# - LoadedCatchChart(title: str, events: list[CatchEvent], source_path: Optional[pathlib.Path])
#
# Public functions:
# - parse_chart_dict(payload: dict, *, source_path: Optional[pathlib.Path] = None) -> LoadedCatchChart
# - load_chart(chart_path: pathlib.Path) -> LoadedCatchChart
# - trajectory_to_dict(result: AutoplayResult, *, include_scores: bool = True) -> dict
# - save_trajectory(output_path: pathlib.Path, result: AutoplayResult, *, indent: int = 2,
#                   include_scores: bool = True) -> None
#
# Example chart file:
# {
#   "title": "example",
#   "playfield_width": 512,
#   "objects": [
#     {"type": "fruit", "x": 256, "time": 1000, "hyperdash_target": 480},
#     {"type": "juice_stream", "nested": [
#       {"type": "fruit", "x": 480, "time": 1100},
#       {"type": "droplet", "x": 430, "time": 1200},
#       {"type": "tiny_droplet", "x": 400, "time": 1250}
#     ]},
#     {"type": "banana_shower", "nested": [{"type": "banana", "x": 100, "time": 2000}]}
#   ]
# }
#
########################

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from autoplay import AutoplayResult
from catch_models import CatchEvent


class ChartFileError(Exception):
    """Base error for chart file reading and trajectory writing."""


class ChartParseError(ChartFileError):
    """Raised when the file cannot be read or is not the expected JSON structure."""


class ChartValidationError(ChartFileError):
    """Raised when the file parses but an object entry is invalid."""


@dataclass(frozen=True)
class LoadedCatchChart:
    title: str
    events: List[CatchEvent]
    source_path: Optional[Path] = None


_NESTED_KINDS = {
    "juice_stream": ("fruit", "droplet", "tiny_droplet"),
    "banana_shower": ("banana",),
}


def _number(entry: Dict[str, Any], key: str, *, where: str) -> float:
    value = entry.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ChartValidationError(f"{where}: '{key}' must be a number, got {value!r}")
    try:
        return float(value)
    except OverflowError as exc:
        raise ChartValidationError(f"{where}: '{key}' is too large") from exc


def _make_event(entry: Any, *, kind: str, playfield_width: float, where: str) -> CatchEvent:
    if not isinstance(entry, dict):
        raise ChartValidationError(f"{where}: expected an object, got {type(entry).__name__}")

    x_value = _number(entry, "x", where=where) / playfield_width
    time_value = _number(entry, "time", where=where)

    hyperdash_target: Optional[float] = None
    if entry.get("hyperdash_target") is not None:
        hyperdash_target = _number(entry, "hyperdash_target", where=where) / playfield_width

    if not 0.0 <= x_value <= 1.0:
        raise ChartValidationError(f"{where}: x is outside the playfield")
    if hyperdash_target is not None and not 0.0 <= hyperdash_target <= 1.0:
        raise ChartValidationError(f"{where}: hyperdash_target is outside the playfield")

    return CatchEvent(x=x_value, time=time_value, kind=kind, hyperdash_target=hyperdash_target)


def _entry_type(entry: Any, *, where: str) -> str:
    if not isinstance(entry, dict):
        raise ChartValidationError(f"{where}: expected an object, got {type(entry).__name__}")
    type_text = str(entry.get("type") or "").strip().lower()
    if not type_text:
        raise ChartValidationError(f"{where}: missing 'type'")
    return type_text


def parse_chart_dict(payload: Dict[str, Any], *, source_path: Optional[Path] = None) -> LoadedCatchChart:
    if not isinstance(payload, dict):
        raise ChartParseError("Chart root must be a JSON object")

    playfield_width = payload.get("playfield_width", 1.0)
    if isinstance(playfield_width, bool) or not isinstance(playfield_width, (int, float)) or playfield_width <= 0:
        raise ChartValidationError(f"playfield_width must be a positive number, got {playfield_width!r}")
    try:
        playfield_width = float(playfield_width)
    except OverflowError as exc:
        raise ChartValidationError("playfield_width is too large") from exc

    entries = payload.get("objects")
    if not isinstance(entries, list):
        raise ChartParseError("Chart must contain an 'objects' list")

    events: List[CatchEvent] = []
    for object_index, entry in enumerate(entries):
        where = f"objects[{object_index}]"
        type_text = _entry_type(entry, where=where)

        if type_text == "fruit":
            events.append(_make_event(entry, kind="fruit", playfield_width=playfield_width, where=where))
            continue

        allowed_nested = _NESTED_KINDS.get(type_text)
        if allowed_nested is None:
            raise ChartValidationError(f"{where}: unknown type {type_text!r}")

        nested_entries = entry.get("nested")
        if not isinstance(nested_entries, list):
            raise ChartValidationError(f"{where}: '{type_text}' requires a 'nested' list")

        for nested_index, nested_entry in enumerate(nested_entries):
            nested_where = f"{where}.nested[{nested_index}]"
            nested_type = _entry_type(nested_entry, where=nested_where)
            if nested_type not in allowed_nested:
                raise ChartValidationError(
                    f"{nested_where}: {nested_type!r} is not allowed inside {type_text!r}. Allowed: {list(allowed_nested)}"
                )
            events.append(_make_event(nested_entry, kind=nested_type, playfield_width=playfield_width, where=nested_where))

    title = str(payload.get("title") or (source_path.stem if source_path is not None else "untitled"))
    return LoadedCatchChart(title=title, events=events, source_path=source_path)


def load_chart(chart_path: Path) -> LoadedCatchChart:
    resolved_path = Path(chart_path)
    try:
        raw_text = resolved_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ChartParseError(f"Chart file is not valid UTF-8: {resolved_path}") from exc
    except OSError as exc:
        raise ChartParseError(f"Failed to read chart file: {resolved_path}. Error: {exc}") from exc

    try:
        payload = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise ChartParseError(f"Chart file is not valid JSON: {resolved_path}. Error: {exc}") from exc

    return parse_chart_dict(payload, source_path=resolved_path)


def trajectory_to_dict(result: AutoplayResult, *, include_scores: bool = True) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "keyframes": [
            {"time": keyframe.time, "position": keyframe.position, "hyperdash": keyframe.hyperdash}
            for keyframe in result.keyframes
        ],
    }
    if include_scores:
        payload["total_score"] = int(result.total_score)
        payload["caught_value"] = int(result.caught_value)
    return payload


def save_trajectory(
    output_path: Path,
    result: AutoplayResult,
    *,
    indent: int = 2,
    include_scores: bool = True,
) -> None:
    resolved_path = Path(output_path)
    text = json.dumps(trajectory_to_dict(result, include_scores=include_scores), ensure_ascii=False, indent=indent)
    try:
        resolved_path.write_text(text + "\n", encoding="utf-8")
    except OSError as exc:
        raise ChartFileError(f"Failed to write trajectory file: {resolved_path}. Error: {exc}") from exc


def _run_unit_tests() -> None:
    loaded = parse_chart_dict(
        {
            "title": "smoke",
            "playfield_width": 512,
            "objects": [
                {"type": "fruit", "x": 256, "time": 1000},
                {"type": "juice_stream", "nested": [{"type": "droplet", "x": 128, "time": 1100}]},
            ],
        }
    )
    assert loaded.title == "smoke"
    assert [(e.x, e.kind) for e in loaded.events] == [(0.5, "fruit"), (0.25, "droplet")]

    try:
        parse_chart_dict({"objects": [{"type": "spinner", "x": 0.5, "time": 0}]})
    except ChartValidationError:
        pass
    else:
        raise AssertionError("Expected ChartValidationError for unknown type")


if __name__ == "__main__":
    _run_unit_tests()
    print("catch_store.py: ok")

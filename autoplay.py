# -*- coding: utf-8 -*-
########################
# autoplay.py
########################
# Purpose:
# - Single entry point for computing an autoplay trajectory.
# - Wires catch_models -> ScoreEngine -> PathReconstructor and reports the result.
#
# Design notes:
# - One run owns its objects and memo table. Nothing is shared across calls.
# - Physical constants arrive through AutoplaySettings, never module globals.
#
########################
# Interfaces:
# Public dataclasses:
# - AutoplaySettings(dash_speed: float, catcher_half_width: float, start_time: float = SENTINEL_TIME)
# - AutoplayResult(keyframes, total_score, caught_value, visited_indices, objects, evaluations)
#
# Public functions:
# - generate_autoplay(events: Iterable[CatchEvent], settings: AutoplaySettings) -> AutoplayResult
# - generate_autoplay_for_objects(objects: Sequence[CatchableObject], settings: AutoplaySettings) -> AutoplayResult
#
########################

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from catch_models import SENTINEL_TIME, CatchableObject, CatchEvent, Keyframe, build_object_sequence
from path_reconstructor import PathReconstructor
from score_engine import ScoreEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AutoplaySettings:
    dash_speed: float
    catcher_half_width: float
    start_time: float = SENTINEL_TIME

    def __post_init__(self) -> None:
        if not math.isfinite(float(self.dash_speed)) or float(self.dash_speed) <= 0.0:
            raise ValueError(f"dash_speed must be a positive finite number, got {self.dash_speed!r}")
        if not math.isfinite(float(self.catcher_half_width)) or float(self.catcher_half_width) < 0.0:
            raise ValueError(f"catcher_half_width must be a non-negative finite number, got {self.catcher_half_width!r}")
        if not math.isfinite(float(self.start_time)):
            raise ValueError(f"start_time must be finite, got {self.start_time!r}")


@dataclass(frozen=True)
class AutoplayResult:
    keyframes: List[Keyframe]
    total_score: int
    caught_value: int
    visited_indices: List[int]
    objects: List[CatchableObject]
    evaluations: int


def generate_autoplay_for_objects(objects: Sequence[CatchableObject], settings: AutoplaySettings) -> AutoplayResult:
    object_list = list(objects)
    engine = ScoreEngine(
        object_list,
        dash_speed=settings.dash_speed,
        catcher_half_width=settings.catcher_half_width,
    )
    start_scores = engine.compute_score(0)
    logger.info(
        "Scores computed for %d objects (best left=%d, right=%d)",
        len(object_list) - 1,
        start_scores.left.score,
        start_scores.right.score,
    )

    reconstructor = PathReconstructor(
        object_list,
        engine,
        dash_speed=settings.dash_speed,
        catcher_half_width=settings.catcher_half_width,
    )
    path = reconstructor.reconstruct()
    caught_value = sum(object_list[index].value for index in path.visited_indices)
    logger.info("Trajectory has %d keyframes, caught value %d", len(path.keyframes), caught_value)

    return AutoplayResult(
        keyframes=list(path.keyframes),
        total_score=start_scores.best_score,
        caught_value=caught_value,
        visited_indices=list(path.visited_indices),
        objects=object_list,
        evaluations=engine.evaluations,
    )


def generate_autoplay(events: Iterable[CatchEvent], settings: AutoplaySettings) -> AutoplayResult:
    objects = build_object_sequence(events, start_time=settings.start_time)
    return generate_autoplay_for_objects(objects, settings)


def _run_unit_tests() -> None:
    settings = AutoplaySettings(dash_speed=0.0001, catcher_half_width=0.1)

    empty = generate_autoplay([], settings)
    assert [(k.time, k.position) for k in empty.keyframes] == [(SENTINEL_TIME, 0.5)]
    assert empty.total_score == 0

    choice = generate_autoplay(
        [CatchEvent(x=0.2, time=500.0), CatchEvent(x=0.8, time=500.0, kind="droplet")],
        settings,
    )
    assert choice.total_score == 100
    assert choice.caught_value == 100
    assert choice.keyframes[-1].position == 0.2


if __name__ == "__main__":
    _run_unit_tests()
    print("autoplay.py: ok")

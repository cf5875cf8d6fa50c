# -*- coding: utf-8 -*-
########################
# path_reconstructor.py
########################
# Purpose:
# - Turn ScoreEngine results into a concrete catcher trajectory.
# - Walks forward from the start object, choosing LEFT or RIGHT at each visited object,
#   and emits one Keyframe per visited object.
#
# Design notes:
# - No I/O. Deterministic for a fixed input.
# - Physical admissibility dominates score: a side whose limiter the catcher edge has crossed is closed.
# - Tie break: when both open sides score the same, continue on the side the previous step planned
#   for this object (DirectionScore.next_path). The start object prefers RIGHT.
# - Non hyperdash transitions are capped at dash_speed * elapsed time, so keyframes never imply
#   a speed above the dash speed.
#
########################
# Interfaces:
# Public dataclasses:
# - ReconstructedPath(keyframes: list[Keyframe], visited_indices: list[int])
#
# Public classes:
# - class PathReconstructor
#   - __init__(objects: Sequence[CatchableObject], score_engine: ScoreEngine, *, dash_speed: float,
#              catcher_half_width: float)
#   - choose_direction(scores: ObjectScores, position: float, preferred: Direction) -> Optional[Direction]
#   - reconstruct() -> ReconstructedPath
#
# Inputs:
# - The same object sequence the ScoreEngine was built on.
#
# Outputs:
# - Keyframes starting with the sentinel keyframe at the start object (time, 0.5).
#
########################

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from catch_models import START_POSITION, CatchableObject, Direction, Keyframe, rules_for
from score_engine import ObjectScores, ScoreEngine

logger = logging.getLogger(__name__)


@dataclass
class ReconstructedPath:
    keyframes: List[Keyframe] = field(default_factory=list)
    visited_indices: List[int] = field(default_factory=list)


class PathReconstructor:
    def __init__(
        self,
        objects: Sequence[CatchableObject],
        score_engine: ScoreEngine,
        *,
        dash_speed: float,
        catcher_half_width: float,
    ) -> None:
        self._objects = list(objects)
        self._score_engine = score_engine
        self._dash_speed = float(dash_speed)
        self._half_width = float(catcher_half_width)

    def _is_open(self, scores: ObjectScores, direction: Direction, position: float) -> bool:
        side = scores.side(direction)
        if not side.has_target:
            return False
        rules = rules_for(direction)
        # The limiter is the furthest the catcher edge may sit against this direction.
        return not rules.beyond(side.limiter, rules.edge(position, self._half_width))

    def choose_direction(self, scores: ObjectScores, position: float, preferred: Direction) -> Optional[Direction]:
        both = (Direction.LEFT, Direction.RIGHT)
        candidates = [direction for direction in both if self._is_open(scores, direction, position)]
        if not candidates:
            # Every chain is already out of reach. Keep chasing whatever is left.
            candidates = [direction for direction in both if scores.side(direction).has_target]
        if not candidates:
            return None
        if len(candidates) == 1:
            return candidates[0]

        if scores.left.score > scores.right.score:
            return Direction.LEFT
        if scores.right.score > scores.left.score:
            return Direction.RIGHT
        return preferred

    def _next_position(self, current: CatchableObject, position: float, target: CatchableObject) -> float:
        if current.hyperdashes_to(target):
            return target.position
        reach = (target.time - current.time) * self._dash_speed
        return min(position + reach, max(position - reach, target.position))

    def reconstruct(self) -> ReconstructedPath:
        path = ReconstructedPath()
        if not self._objects:
            return path

        index = 0
        position = START_POSITION
        preferred = Direction.RIGHT
        path.keyframes.append(Keyframe(time=self._objects[0].time, position=position))
        path.visited_indices.append(index)

        while True:
            current = self._objects[index]
            scores = self._score_engine.compute_score(index)
            direction = self.choose_direction(scores, position, preferred)
            logger.debug(
                "Object %d at %.4f: left=%d (limiter %.4f) right=%d (limiter %.4f) -> %s",
                index,
                position,
                scores.left.score,
                scores.left.limiter,
                scores.right.score,
                scores.right.limiter,
                direction.value if direction is not None else "stop",
            )
            if direction is None:
                break

            choice = scores.side(direction)
            if choice.next_index is None:
                break
            target = self._objects[choice.next_index]
            position = self._next_position(current, position, target)
            path.keyframes.append(
                Keyframe(time=target.time, position=position, hyperdash=current.hyperdashes_to(target))
            )
            path.visited_indices.append(choice.next_index)

            index = choice.next_index
            if choice.next_path is not None:
                preferred = choice.next_path

        return path


def _run_unit_tests() -> None:
    from catch_models import CatchEvent, build_object_sequence

    objects = build_object_sequence([CatchEvent(x=0.6, time=1000.0)])
    engine = ScoreEngine(objects, dash_speed=0.0001, catcher_half_width=0.1)
    reconstructor = PathReconstructor(objects, engine, dash_speed=0.0001, catcher_half_width=0.1)
    path = reconstructor.reconstruct()
    assert [(k.time, k.position) for k in path.keyframes] == [(-100000.0, 0.5), (1000.0, 0.6)]
    assert path.visited_indices == [0, 1]

    empty_objects = build_object_sequence([])
    empty_engine = ScoreEngine(empty_objects, dash_speed=0.0001, catcher_half_width=0.1)
    empty_path = PathReconstructor(empty_objects, empty_engine, dash_speed=0.0001, catcher_half_width=0.1).reconstruct()
    assert [(k.time, k.position) for k in empty_path.keyframes] == [(-100000.0, 0.5)]


if __name__ == "__main__":
    _run_unit_tests()
    print("path_reconstructor.py: ok")

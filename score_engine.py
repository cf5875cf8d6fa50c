# -*- coding: utf-8 -*-
########################
# score_engine.py
########################
# Purpose:
# - Dynamic programming over a time-sorted CatchableObject sequence.
# - For every object, computes the best continuation value when leaving it to the left and to the right,
#   the reachability limiter for each side, and the chosen successor.
#
# Design notes:
# - No I/O. Pure and deterministic for a fixed input.
# - Results live in a memo table keyed by object index. Each ObjectScores record is written once.
# - A record only depends on records of strictly later objects, so evaluation is an iterative
#   post-order walk driven by an explicit work stack. Deep charts never touch the recursion limit.
# - LEFT and RIGHT share one routine. All side-specific arithmetic goes through catch_models.DirectionRules.
#
########################
# Interfaces:
# Public dataclasses:
# - DirectionScore(score: int, limiter: float, next_index: Optional[int], next_position: Optional[float],
#                  next_path: Optional[Direction])
# - ObjectScores(left: DirectionScore, right: DirectionScore)
#   - side(direction: Direction) -> DirectionScore
#   - best_score -> int
#
# Public classes:
# - class ScoreEngine
#   - __init__(objects: Sequence[CatchableObject], *, dash_speed: float, catcher_half_width: float)
#   - compute_score(index: int) -> ObjectScores
#   - scores(index: int) -> Optional[ObjectScores]
#   - evaluations -> int
#
# Inputs:
# - Validated object sequence (catch_models.build_object_sequence) and physical constants.
#
# Outputs:
# - ObjectScores records consumed by PathReconstructor.
#
########################

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from catch_models import (
    CatchableObject,
    Direction,
    DirectionRules,
    ObjectValidationError,
    rules_for,
    validate_object_sequence,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectionScore:
    score: int
    limiter: float
    next_index: Optional[int] = None
    next_position: Optional[float] = None
    next_path: Optional[Direction] = None

    @property
    def has_target(self) -> bool:
        return self.next_index is not None


@dataclass(frozen=True)
class ObjectScores:
    left: DirectionScore
    right: DirectionScore

    def side(self, direction: Direction) -> DirectionScore:
        return self.left if direction is Direction.LEFT else self.right

    @property
    def best_score(self) -> int:
        return max(self.left.score, self.right.score)


class ScoreEngine:
    def __init__(self, objects: Sequence[CatchableObject], *, dash_speed: float, catcher_half_width: float) -> None:
        dash_speed_value = float(dash_speed)
        half_width_value = float(catcher_half_width)
        if not math.isfinite(dash_speed_value) or dash_speed_value <= 0.0:
            raise ValueError(f"dash_speed must be a positive finite number, got {dash_speed!r}")
        if not math.isfinite(half_width_value) or half_width_value < 0.0:
            raise ValueError(f"catcher_half_width must be a non-negative finite number, got {catcher_half_width!r}")

        validate_object_sequence(objects)

        self._objects: List[CatchableObject] = list(objects)
        self._dash_speed = dash_speed_value
        self._half_width = half_width_value
        self._memo: Dict[int, ObjectScores] = {}
        self._candidates: Dict[Tuple[int, Direction], List[int]] = {}
        self._evaluations = 0

    @property
    def evaluations(self) -> int:
        return self._evaluations

    def scores(self, index: int) -> Optional[ObjectScores]:
        return self._memo.get(int(index))

    def compute_score(self, index: int) -> ObjectScores:
        root = int(index)
        if not 0 <= root < len(self._objects):
            raise IndexError(f"Object index out of range: {index}")

        cached = self._memo.get(root)
        if cached is not None:
            return cached

        stack = [root]
        while stack:
            current_index = stack[-1]
            if current_index in self._memo:
                stack.pop()
                continue

            pending = [
                candidate_index
                for candidate_index in self._dependencies(current_index)
                if candidate_index not in self._memo
            ]
            if pending:
                # Later objects first, so the earliest candidate is evaluated next.
                stack.extend(reversed(pending))
                continue

            stack.pop()
            self._memo[current_index] = self._evaluate(current_index)
            self._evaluations += 1

        logger.debug("Scores computed for object %d (%d evaluations)", root, self._evaluations)
        return self._memo[root]

    def _dependencies(self, index: int) -> List[int]:
        left = self._candidate_indices(index, rules_for(Direction.LEFT))
        right = self._candidate_indices(index, rules_for(Direction.RIGHT))
        return sorted(set(left) | set(right))

    def _candidate_indices(self, index: int, rules: DirectionRules) -> List[int]:
        """Viable successors of an object on one side.

        The scan covers the time needed to dash to the wall on that side and is extended
        until at least one viable candidate has been seen.
        """
        key = (index, rules.direction)
        cached = self._candidates.get(key)
        if cached is not None:
            return cached

        current = self._objects[index]
        edge = rules.edge(current.position, self._half_width)
        horizon = current.time + 2.0 * rules.distance_to_wall(current.position) / self._dash_speed

        viable: List[int] = []
        previous_time = current.time
        for candidate_index in range(index + 1, len(self._objects)):
            if viable and previous_time >= horizon:
                break
            candidate = self._objects[candidate_index]
            previous_time = candidate.time
            if self._is_viable(current, candidate, edge, rules):
                viable.append(candidate_index)

        self._candidates[key] = viable
        return viable

    def _is_viable(
        self,
        current: CatchableObject,
        candidate: CatchableObject,
        edge: float,
        rules: DirectionRules,
    ) -> bool:
        if current.hyperdashes_to(candidate):
            return True
        if not rules.is_on_side(candidate.position, current.position):
            return False
        reach = rules.advance(edge, (candidate.time - current.time) * self._dash_speed)
        return not rules.beyond(rules.back(candidate.position, self._half_width), reach)

    def _evaluate(self, index: int) -> ObjectScores:
        left = self._score_direction(index, rules_for(Direction.LEFT))
        right = self._score_direction(index, rules_for(Direction.RIGHT))
        for direction in Direction:
            self._candidates.pop((index, direction), None)
        return ObjectScores(left=left, right=right)

    def _score_direction(self, index: int, rules: DirectionRules) -> DirectionScore:
        current = self._objects[index]
        edge = rules.edge(current.position, self._half_width)
        collapses = current.hyperdash_target is not None

        best: Optional[DirectionScore] = None
        for candidate_index in self._candidate_indices(index, rules):
            candidate = self._objects[candidate_index]
            candidate_scores = self._memo[candidate_index]
            same_side = candidate_scores.side(rules.direction)
            other_side = candidate_scores.side(rules.direction.opposite)

            travel = (candidate.time - current.time) * self._dash_speed
            reach = rules.advance(edge, travel)
            via_hyperdash = current.hyperdashes_to(candidate)
            best_score = -1 if best is None else best.score

            if (
                same_side.score > other_side.score
                and same_side.score + candidate.value > best_score
                and (rules.beyond(reach, same_side.limiter) or via_hyperdash)
            ):
                limiter = rules.collapsed_limiter if collapses else rules.back(same_side.limiter, travel)
                best = DirectionScore(
                    score=same_side.score + candidate.value,
                    limiter=limiter,
                    next_index=candidate_index,
                    next_position=candidate.position,
                    next_path=rules.direction,
                )
            elif other_side.score + candidate.value > best_score:
                limiter = (
                    rules.collapsed_limiter
                    if collapses
                    else rules.back(candidate.position, self._half_width + travel)
                )
                best = DirectionScore(
                    score=other_side.score + candidate.value,
                    limiter=limiter,
                    next_index=candidate_index,
                    next_position=candidate.position,
                    next_path=rules.direction.opposite,
                )

        if best is None:
            # Nothing left to catch on this side.
            return DirectionScore(score=0, limiter=rules.collapsed_limiter)
        return best


def _run_unit_tests() -> None:
    from catch_models import CatchEvent, build_object_sequence

    objects = build_object_sequence(
        [
            CatchEvent(x=0.2, time=500.0),
            CatchEvent(x=0.8, time=500.0, kind="droplet"),
        ]
    )
    engine = ScoreEngine(objects, dash_speed=0.0001, catcher_half_width=0.1)
    start = engine.compute_score(0)
    assert start.left.score == 100
    assert start.right.score == 1
    assert engine.evaluations == 3

    again = engine.compute_score(0)
    assert again is start
    assert engine.evaluations == 3

    try:
        ScoreEngine(list(reversed(objects)), dash_speed=1.0, catcher_half_width=0.1)
    except ObjectValidationError:
        pass
    else:
        raise AssertionError("Expected ObjectValidationError for an unsorted sequence")


if __name__ == "__main__":
    _run_unit_tests()
    print("score_engine.py: ok")

# -*- coding: utf-8 -*-
########################
# catch_models.py
########################
# Purpose:
# - Core data models for the catch autoplay pipeline.
# - Defines the input CatchEvent, the normalized CatchableObject, trajectory Keyframes,
#   and the LEFT/RIGHT direction rules shared by ScoreEngine and PathReconstructor.
#
# Design notes:
# - Pure data, no I/O. Objects are immutable once constructed.
# - Object sequences are built here and only here: validate, stable sort by time, prepend the start object.
# - Malformed input fails fast with ObjectValidationError before it can reach the scoring recursion.
#
########################
# Interfaces:
# Public enums:
# - class Direction(enum.Enum): LEFT | RIGHT
#
# Public dataclasses:
# - DirectionRules(direction, sign, wall, collapsed_limiter)
# - CatchEvent(x: float, time: float, kind: str = "fruit", hyperdash_target: Optional[float] = None)
# - CatchableObject(position: float, time: float, hyperdash_target: Optional[float], value: int)
# - Keyframe(time: float, position: float, hyperdash: bool = False)
#
# Public functions:
# - rules_for(direction: Direction) -> DirectionRules
# - make_start_object(start_time: float = SENTINEL_TIME) -> CatchableObject
# - build_object_sequence(events, *, start_time: float = SENTINEL_TIME) -> list[CatchableObject]
# - validate_object_sequence(objects) -> None
#
# Inputs:
# - CatchEvent values from catch_store or test_chart.
#
# Outputs:
# - Time-sorted CatchableObject lists for ScoreEngine and PathReconstructor.
#
########################

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence


START_POSITION = 0.5
SENTINEL_TIME = -100000.0

PRIMARY_VALUE = 100
MINOR_VALUE = 1

EVENT_KINDS = ("fruit", "droplet", "tiny_droplet", "banana")
# Bananas are fruit for scoring purposes.
PRIMARY_KINDS = ("fruit", "banana")


class CatchModelError(Exception):
    """Base error for catch object construction."""


class ObjectValidationError(CatchModelError):
    """Raised when an event or object sequence violates the model invariants."""


class Direction(enum.Enum):
    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> "Direction":
        return Direction.RIGHT if self is Direction.LEFT else Direction.LEFT


@dataclass(frozen=True)
class DirectionRules:
    """Boundary and comparison operators for one side of the playfield.

    Every position test in the scoring and reconstruction passes goes through these,
    so LEFT and RIGHT share a single code path.
    """

    direction: Direction
    sign: int
    wall: float
    collapsed_limiter: float

    def edge(self, position: float, half_width: float) -> float:
        """Catcher edge on this side, clamped to the playfield."""
        return min(1.0, max(0.0, position + self.sign * half_width))

    def is_on_side(self, candidate_position: float, current_position: float) -> bool:
        # Stacked objects belong to the right path.
        if self.sign < 0:
            return candidate_position < current_position
        return candidate_position >= current_position

    def advance(self, position: float, distance: float) -> float:
        return position + self.sign * distance

    def back(self, position: float, distance: float) -> float:
        return position - self.sign * distance

    def beyond(self, position: float, reference: float) -> bool:
        """True when position lies strictly further along this direction than reference."""
        return self.sign * (position - reference) > 0.0

    def distance_to_wall(self, position: float) -> float:
        return abs(self.wall - position)


_RULES = {
    Direction.LEFT: DirectionRules(direction=Direction.LEFT, sign=-1, wall=0.0, collapsed_limiter=1.0),
    Direction.RIGHT: DirectionRules(direction=Direction.RIGHT, sign=1, wall=1.0, collapsed_limiter=0.0),
}


def rules_for(direction: Direction) -> DirectionRules:
    return _RULES[direction]


@dataclass(frozen=True)
class CatchEvent:
    x: float
    time: float
    kind: str = "fruit"
    hyperdash_target: Optional[float] = None


@dataclass(frozen=True)
class CatchableObject:
    position: float
    time: float
    hyperdash_target: Optional[float] = None
    value: int = 0

    @classmethod
    def from_event(cls, event: CatchEvent) -> "CatchableObject":
        value = PRIMARY_VALUE if event.kind in PRIMARY_KINDS else MINOR_VALUE
        target = None if event.hyperdash_target is None else float(event.hyperdash_target)
        return cls(position=float(event.x), time=float(event.time), hyperdash_target=target, value=value)

    def hyperdashes_to(self, other: "CatchableObject") -> bool:
        return self.hyperdash_target is not None and self.hyperdash_target == other.position


@dataclass(frozen=True)
class Keyframe:
    time: float
    position: float
    hyperdash: bool = False


def make_start_object(start_time: float = SENTINEL_TIME) -> CatchableObject:
    return CatchableObject(position=START_POSITION, time=float(start_time), hyperdash_target=None, value=0)


def _is_unit_interval(value: float) -> bool:
    return math.isfinite(value) and 0.0 <= value <= 1.0


def _validate_event(event: CatchEvent, *, index: int, start_time: float) -> None:
    if event.kind not in EVENT_KINDS:
        raise ObjectValidationError(f"Event {index}: unknown kind {event.kind!r}. Allowed: {list(EVENT_KINDS)}")
    if not _is_unit_interval(float(event.x)):
        raise ObjectValidationError(f"Event {index}: x must be a finite value in [0, 1], got {event.x!r}")
    if not math.isfinite(float(event.time)):
        raise ObjectValidationError(f"Event {index}: time must be finite, got {event.time!r}")
    if float(event.time) <= start_time:
        raise ObjectValidationError(f"Event {index}: time {event.time!r} is not after the start time {start_time!r}")
    if event.hyperdash_target is not None and not _is_unit_interval(float(event.hyperdash_target)):
        raise ObjectValidationError(
            f"Event {index}: hyperdash_target must be a finite value in [0, 1], got {event.hyperdash_target!r}"
        )


def build_object_sequence(events: Iterable[CatchEvent], *, start_time: float = SENTINEL_TIME) -> List[CatchableObject]:
    """Validate events and return the start object followed by the events in stable time order."""
    start_value = float(start_time)
    if not math.isfinite(start_value):
        raise ObjectValidationError(f"start_time must be finite, got {start_time!r}")

    event_list = list(events)
    for index, event in enumerate(event_list):
        _validate_event(event, index=index, start_time=start_value)

    ordered = sorted(event_list, key=lambda item: float(item.time))
    objects = [make_start_object(start_value)]
    objects.extend(CatchableObject.from_event(event) for event in ordered)
    return objects


def validate_object_sequence(objects: Sequence[CatchableObject]) -> None:
    if not objects:
        raise ObjectValidationError("Object sequence must contain at least the start object")

    previous_time = -math.inf
    for index, catch_object in enumerate(objects):
        if not _is_unit_interval(catch_object.position):
            raise ObjectValidationError(f"Object {index}: position must be a finite value in [0, 1]")
        if not math.isfinite(catch_object.time):
            raise ObjectValidationError(f"Object {index}: time must be finite")
        if catch_object.hyperdash_target is not None and not _is_unit_interval(catch_object.hyperdash_target):
            raise ObjectValidationError(f"Object {index}: hyperdash_target must be a finite value in [0, 1]")
        if catch_object.value < 0:
            raise ObjectValidationError(f"Object {index}: value must be non-negative")
        if catch_object.time < previous_time:
            raise ObjectValidationError(
                f"Object {index}: sequence is not sorted by time ({catch_object.time} < {previous_time})"
            )
        previous_time = catch_object.time


def _run_unit_tests() -> None:
    events = [
        CatchEvent(x=0.8, time=200.0, kind="droplet"),
        CatchEvent(x=0.2, time=100.0),
        CatchEvent(x=0.4, time=100.0, kind="tiny_droplet"),
    ]
    objects = build_object_sequence(events)
    assert objects[0] == make_start_object()
    assert [(o.position, o.value) for o in objects[1:]] == [(0.2, 100), (0.4, 1), (0.8, 1)]
    validate_object_sequence(objects)

    left = rules_for(Direction.LEFT)
    right = rules_for(Direction.RIGHT)
    assert left.edge(0.05, 0.1) == 0.0
    assert right.edge(0.95, 0.1) == 1.0
    assert left.beyond(0.1, 0.2) and right.beyond(0.2, 0.1)
    assert right.is_on_side(0.5, 0.5) and not left.is_on_side(0.5, 0.5)

    try:
        build_object_sequence([CatchEvent(x=1.5, time=0.0)])
    except ObjectValidationError:
        pass
    else:
        raise AssertionError("Expected ObjectValidationError for out of range x")


if __name__ == "__main__":
    _run_unit_tests()
    print("catch_models.py: ok")

import math

import pytest

from catch_models import (
    MINOR_VALUE,
    PRIMARY_VALUE,
    SENTINEL_TIME,
    START_POSITION,
    CatchableObject,
    CatchEvent,
    Direction,
    ObjectValidationError,
    build_object_sequence,
    make_start_object,
    rules_for,
    validate_object_sequence,
)


def test_sequence_starts_with_start_object():
    objects = build_object_sequence([CatchEvent(x=0.3, time=10.0)])
    start = objects[0]
    assert start.position == START_POSITION
    assert start.time == SENTINEL_TIME
    assert start.hyperdash_target is None
    assert start.value == 0


def test_sequence_is_stable_sorted_by_time():
    events = [
        CatchEvent(x=0.9, time=300.0),
        CatchEvent(x=0.1, time=100.0),
        CatchEvent(x=0.7, time=100.0, kind="droplet"),
        CatchEvent(x=0.4, time=200.0, kind="banana"),
    ]
    objects = build_object_sequence(events)
    assert [(o.time, o.position) for o in objects[1:]] == [(100.0, 0.1), (100.0, 0.7), (200.0, 0.4), (300.0, 0.9)]


def test_values_by_kind():
    kinds = ["fruit", "droplet", "tiny_droplet", "banana"]
    objects = build_object_sequence([CatchEvent(x=0.5, time=float(i + 1), kind=k) for i, k in enumerate(kinds)])
    assert [o.value for o in objects[1:]] == [PRIMARY_VALUE, MINOR_VALUE, MINOR_VALUE, PRIMARY_VALUE]


@pytest.mark.parametrize(
    "event",
    [
        CatchEvent(x=math.nan, time=0.0),
        CatchEvent(x=-0.1, time=0.0),
        CatchEvent(x=0.5, time=math.inf),
        CatchEvent(x=0.5, time=SENTINEL_TIME),
        CatchEvent(x=0.5, time=0.0, kind="spinner"),
        CatchEvent(x=0.5, time=0.0, hyperdash_target=1.2),
    ],
)
def test_malformed_events_fail_fast(event):
    with pytest.raises(ObjectValidationError):
        build_object_sequence([event])


def test_unsorted_sequence_is_rejected():
    objects = [make_start_object(), CatchableObject(position=0.2, time=50.0), CatchableObject(position=0.3, time=10.0)]
    with pytest.raises(ObjectValidationError):
        validate_object_sequence(objects)


def test_empty_sequence_is_rejected():
    with pytest.raises(ObjectValidationError):
        validate_object_sequence([])


def test_hyperdashes_to_matches_exact_position():
    origin = CatchableObject(position=0.1, time=0.0, hyperdash_target=0.9, value=100)
    assert origin.hyperdashes_to(CatchableObject(position=0.9, time=10.0))
    assert not origin.hyperdashes_to(CatchableObject(position=0.8, time=10.0))
    assert not CatchableObject(position=0.1, time=0.0).hyperdashes_to(CatchableObject(position=0.9, time=10.0))


def test_direction_rules_are_mirrored():
    left = rules_for(Direction.LEFT)
    right = rules_for(Direction.RIGHT)

    assert Direction.LEFT.opposite is Direction.RIGHT
    assert left.edge(0.5, 0.1) == pytest.approx(0.4)
    assert right.edge(0.5, 0.1) == pytest.approx(0.6)
    assert left.edge(0.02, 0.1) == 0.0
    assert right.edge(0.98, 0.1) == 1.0

    assert left.advance(0.5, 0.2) == pytest.approx(0.3)
    assert right.advance(0.5, 0.2) == pytest.approx(0.7)
    assert left.back(0.5, 0.2) == pytest.approx(0.7)
    assert right.back(0.5, 0.2) == pytest.approx(0.3)

    assert left.beyond(0.2, 0.3)
    assert not left.beyond(0.3, 0.3)
    assert right.beyond(0.3, 0.2)

    assert left.distance_to_wall(0.3) == pytest.approx(0.3)
    assert right.distance_to_wall(0.3) == pytest.approx(0.7)
    assert left.collapsed_limiter == 1.0
    assert right.collapsed_limiter == 0.0


def test_stacked_objects_belong_to_the_right_path():
    assert rules_for(Direction.RIGHT).is_on_side(0.5, 0.5)
    assert not rules_for(Direction.LEFT).is_on_side(0.5, 0.5)
    assert rules_for(Direction.LEFT).is_on_side(0.49, 0.5)

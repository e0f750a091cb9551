from __future__ import annotations

import math

from arena_sim.geometry_utils import (
    TWO_PI,
    angle_between,
    bearing,
    normalize_angle,
    normalize_heading,
    reference_angle,
)


def test_normalize_angle_wraps_into_range() -> None:
    assert math.isclose(normalize_angle(TWO_PI + 0.1), 0.1, abs_tol=1e-12)
    assert math.isclose(normalize_angle(-0.1), TWO_PI - 0.1, abs_tol=1e-12)
    assert normalize_angle(1.0) == 1.0
    assert normalize_angle(TWO_PI) == 0.0


def test_normalize_angle_rounding_to_full_turn_reports_zero() -> None:
    assert normalize_angle(-1e-17) == 0.0


def test_normalize_angle_applies_a_single_wrap() -> None:
    # Known range limitation: more than one extra turn is not removed
    assert math.isclose(normalize_angle(4.5 * math.pi), 2.5 * math.pi)
    assert math.isclose(normalize_angle(-10.0), -10.0 + TWO_PI)


def test_normalize_heading_removes_whole_turns() -> None:
    assert math.isclose(normalize_heading(4.5 * math.pi), 0.5 * math.pi)
    assert math.isclose(normalize_heading(-10.0), -10.0 + 2 * TWO_PI)
    assert normalize_heading(-TWO_PI) == 0.0
    assert normalize_heading(-1e-17) == 0.0
    for k in range(-40, 41):
        result = normalize_heading(k * 0.77)
        assert 0.0 <= result < TWO_PI


def test_heading_plus_delta_always_in_range() -> None:
    for i in range(64):
        heading = i * TWO_PI / 64
        for j in range(-63, 64):
            delta = j * TWO_PI / 64
            result = normalize_angle(heading + delta)
            assert 0.0 <= result < TWO_PI


def test_angle_between_takes_short_way_round() -> None:
    assert math.isclose(angle_between(0.1, TWO_PI - 0.1), 0.2, abs_tol=1e-12)
    assert math.isclose(angle_between(0.0, math.pi), math.pi)
    assert angle_between(1.0, 1.0) == 0.0


def test_bearing_covers_all_quadrants() -> None:
    assert math.isclose(bearing(1.0, 0.0), 0.0)
    assert math.isclose(bearing(0.0, 1.0), math.pi / 2)
    assert math.isclose(bearing(-1.0, 0.0), math.pi)
    assert math.isclose(bearing(0.0, -1.0), 1.5 * math.pi)
    assert math.isclose(bearing(1.0, -1.0), 1.75 * math.pi)


def test_reference_angle_by_quadrant() -> None:
    q, ref = reference_angle(math.pi / 6)
    assert q == 1 and math.isclose(ref, math.pi / 6)
    q, ref = reference_angle(0.75 * math.pi)
    assert q == 2 and math.isclose(ref, math.pi / 4)
    q, ref = reference_angle(1.25 * math.pi)
    assert q == 3 and math.isclose(ref, math.pi / 4)
    q, ref = reference_angle(1.75 * math.pi)
    assert q == 4 and math.isclose(ref, math.pi / 4)

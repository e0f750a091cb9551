"""
Geometry utilities for the arena simulation.

Angle normalization, bearings, distances and clamping shared by the arena,
the motion model and the sensor model.

Coordinates follow the drawing surface: origin at the top-left corner,
x grows to the right and y grows downward. Angles are radians measured from
+x toward +y.
"""

from __future__ import annotations

from typing import Tuple
import math


TWO_PI = 2.0 * math.pi
HALF_PI = 0.5 * math.pi


# ---------------------------------------------------------------------------
# Angle helpers
# ---------------------------------------------------------------------------


def normalize_angle(theta: float) -> float:
    """Wrap angle to [0, 2*pi) with a single correction.

    At most one full turn is added or removed. Callers are expected to pass
    an angle within one turn of the range (a heading plus a per-tick delta);
    larger excursions are not fully wrapped, in either direction. Use
    `normalize_heading` where the input is unbounded.
    """
    if theta >= TWO_PI:
        theta -= TWO_PI
    elif theta < 0.0:
        theta += TWO_PI
    # -tiny + 2*pi rounds to exactly 2*pi
    if theta == TWO_PI:
        return 0.0
    return theta


def normalize_heading(theta: float) -> float:
    """Wrap any finite angle to [0, 2*pi), removing whole turns first."""
    return normalize_angle(math.fmod(theta, TWO_PI))


def angle_between(a: float, b: float) -> float:
    """Absolute angular difference between two angles, in [0, pi]."""
    d = abs(a - b) % TWO_PI
    if d > math.pi:
        d = TWO_PI - d
    return d


def bearing(dx: float, dy: float) -> float:
    """Direction of vector (dx, dy) in [0, 2*pi)."""
    return normalize_angle(math.atan2(dy, dx))


def reference_angle(theta: float) -> Tuple[int, float]:
    """Quadrant (1-4) of an angle in [0, 2*pi) and its angle to the x axis.

    Quadrant 1 points toward +x/+y, 2 toward -x/+y, 3 toward -x/-y and
    4 toward +x/-y. The reference angle lies in [0, pi/2].
    """
    if theta < HALF_PI:
        return 1, theta
    if theta < math.pi:
        return 2, math.pi - theta
    if theta < 3.0 * HALF_PI:
        return 3, theta - math.pi
    return 4, TWO_PI - theta


# ---------------------------------------------------------------------------
# Points and distances
# ---------------------------------------------------------------------------


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Euclidean distance between two points."""
    return math.hypot(x2 - x1, y2 - y1)


def polar_offset(x: float, y: float, angle: float, length: float) -> Tuple[float, float]:
    """Point reached from (x, y) by moving `length` along `angle`."""
    return x + length * math.cos(angle), y + length * math.sin(angle)


def clamp(value: float, vmin: float, vmax: float) -> float:
    """Clamp value to [vmin, vmax]."""
    return max(vmin, min(vmax, value))

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Tuple

from .bodies import Body, DifferentialDriveRobot
from .collisions import Collision, CollisionEvent, resolve_collisions
from .errors import InvalidConstructionError, TypeMismatchError


@dataclass
class TickReport:
    """Outcome of one simulation tick."""

    tick: int
    events: List[CollisionEvent] = field(default_factory=list)

    @property
    def collided(self) -> bool:
        return bool(self.events)

    def to_dict(self) -> Dict[str, Any]:
        return {"tick": self.tick, "events": [e.to_dict() for e in self.events]}


class Arena:
    """Bounded rectangular world holding circular bodies.

    Parameters
    ----------
    width : float
        Arena width in arena units (pixels of the drawing surface).
    height : float
        Arena height in arena units.
    time_scale : float
        Multiplier applied to the fixed per-tick simulated duration.

    Bodies are kept in insertion order, which is also the order used for
    ticking, collision scans and sensor scans. Position writes are not
    synchronized: a multi-threaded host must serialize ticks per arena.
    """

    FRAME_RATE = 60.0

    def __init__(self, width: float, height: float, time_scale: float = 1.0) -> None:
        if width <= 0 or height <= 0:
            raise InvalidConstructionError(
                f"Arena dimensions must be positive, got {width}x{height}"
            )
        self.width = float(width)
        self.height = float(height)
        self._bodies: List[Body] = []
        self._time_scale = 1.0
        self.time_scale = time_scale
        self.tick_count = 0

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------
    @property
    def time_scale(self) -> float:
        return self._time_scale

    @time_scale.setter
    def time_scale(self, value: float) -> None:
        if value < 0:
            raise InvalidConstructionError(f"time_scale must be >= 0, got {value}")
        self._time_scale = float(value)

    @property
    def tick_duration(self) -> float:
        """Simulated seconds covered by one tick."""
        return (1.0 / self.FRAME_RATE) * self._time_scale

    # ------------------------------------------------------------------
    # Bounds
    # ------------------------------------------------------------------
    def valid_coords(self, x: float, y: float) -> bool:
        """True if (x, y) lies inside the arena, edges included."""
        return 0.0 <= x <= self.width and 0.0 <= y <= self.height

    def clamp_x(self, x: float) -> float:
        if x < 0.0:
            return 0.0
        if x > self.width:
            return self.width
        return x

    def clamp_y(self, y: float) -> float:
        if y < 0.0:
            return 0.0
        if y > self.height:
            return self.height
        return y

    def clamp_extent(self, x: float, y: float, radius: float) -> Tuple[float, float]:
        """Move a circle's centre so its bounding box stays inside the arena.

        Each axis is handled independently, X first. The near edge
        (x - radius, y - radius) is tested first; the far edge is only
        tested when the near edge is not below zero. A near edge past the
        far wall puts the far edge past it too, so the far edge decides.
        """
        near = x - radius
        if near < 0.0:
            x = self.clamp_x(near) + radius
        else:
            far = x + radius
            if far > self.width:
                x = self.clamp_x(far) - radius

        near = y - radius
        if near < 0.0:
            y = self.clamp_y(near) + radius
        else:
            far = y + radius
            if far > self.height:
                y = self.clamp_y(far) - radius
        return x, y

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------
    def insert(self, body: Body, x: float = 0.0, y: float = 0.0) -> int:
        """Add a body to the arena at (x, y) and return its handle.

        The placement goes through the same clamp and collision path as any
        later move. A placement that collides still lands on its clamped
        candidate, since a new body has no earlier position to keep.
        """
        if not isinstance(body, Body):
            raise TypeMismatchError(
                f"Only Body instances can be inserted, got {type(body).__name__}"
            )
        if body.in_arena:
            raise InvalidConstructionError("Body already belongs to an arena")

        body.arena = self
        body.handle = len(self._bodies)
        collisions = self.set_position(body, x, y)
        if collisions:
            body.x, body.y = self.clamp_extent(x, y, body.radius)
        self._bodies.append(body)
        return body.handle

    def get(self, handle: int) -> Body:
        """Body registered under `handle`."""
        return self._bodies[handle]

    @property
    def bodies(self) -> List[Body]:
        return list(self._bodies)

    def others(self, body: Body) -> Iterator[Body]:
        """Every body except `body`, in registry order."""
        for other in self._bodies:
            if other is not body:
                yield other

    def robots(self) -> List[DifferentialDriveRobot]:
        return [b for b in self._bodies if isinstance(b, DifferentialDriveRobot)]

    def __len__(self) -> int:
        return len(self._bodies)

    def __iter__(self) -> Iterator[Body]:
        return iter(self._bodies)

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------
    def set_position(self, body: Body, x: float, y: float) -> List[Collision]:
        """Clamp, resolve collisions and commit a body's new position.

        Returns the collisions found. An empty list means the position was
        committed; otherwise the body keeps its previous position, the
        overlapping neighbours have been pushed away, and the body's
        `on_collision` hook (if any) has been called.
        """
        x, y = self.clamp_extent(x, y, body.radius)
        collisions = resolve_collisions(self, body, x, y)
        if not collisions:
            body.x = x
            body.y = y
        elif body.on_collision is not None:
            body.on_collision(body, collisions)
        return collisions

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------
    def tick(self) -> TickReport:
        """Advance every body by one frame, in registry order."""
        self.tick_count += 1
        report = TickReport(tick=self.tick_count)
        # bodies inserted by a collision hook start moving next tick
        for body in list(self._bodies):
            candidate = body.recompute()
            if candidate is None:
                continue
            collisions = self.set_position(body, *candidate)
            if collisions:
                report.events.append(
                    CollisionEvent(body=body, candidate=candidate, collisions=collisions)
                )
        return report

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def snapshot(self) -> Dict[str, Any]:
        """Current world state as plain data (for telemetry)."""
        return {
            "tick": self.tick_count,
            "time_scale": self._time_scale,
            "bodies": [b.to_dict() for b in self._bodies],
        }

    def to_dict(self) -> Dict[str, Any]:
        """Serialize arena description to a Python dict."""
        data = self.snapshot()
        data["width"] = self.width
        data["height"] = self.height
        return data

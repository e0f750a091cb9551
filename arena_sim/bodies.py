from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional, Tuple
import math

from .errors import DetachedError, InvalidConstructionError, TypeMismatchError
from .geometry_utils import normalize_heading
from .sensors import InfraredSensor, Sensor

if TYPE_CHECKING:
    from .arena import Arena
    from .collisions import Collision


CollisionHook = Callable[["Body", List["Collision"]], None]


@dataclass(frozen=True)
class Pose:
    """Snapshot of a body's pose in arena coordinates.

    Attributes
    ----------
    x : float
        X position (arena units).
    y : float
        Y position (arena units), growing downward.
    heading : float
        Heading (radians) in [0, 2*pi), measured from +x toward +y.
    """

    x: float
    y: float
    heading: float


class Body:
    """Circular body living in an arena.

    The base class is what the arena needs: a radius, a position and a
    heading. Subclasses that move override `recompute`.
    """

    kind = "body"

    def __init__(
        self,
        radius: float = 20.0,
        heading: float = 0.0,
        name: Optional[str] = None,
        on_collision: Optional[CollisionHook] = None,
    ) -> None:
        if radius <= 0:
            raise InvalidConstructionError(f"Body radius must be positive, got {radius}")
        self.radius = float(radius)
        self.x = 0.0
        self.y = 0.0
        self.heading = normalize_heading(float(heading))
        self.name = name
        self.on_collision = on_collision

        # Set by Arena.insert
        self.arena: Optional["Arena"] = None
        self.handle: Optional[int] = None

    @property
    def in_arena(self) -> bool:
        return self.arena is not None

    def pose(self) -> Pose:
        """Return a read-only snapshot of the current pose."""
        return Pose(x=self.x, y=self.y, heading=self.heading)

    def recompute(self) -> Optional[Tuple[float, float]]:
        """Candidate position for the next tick, or None when the body stays put."""
        return None

    def commit(self, x: float, y: float) -> bool:
        """Submit a new position to the arena. True if it was accepted."""
        return not self._require_arena().set_position(self, x, y)

    def _require_arena(self) -> "Arena":
        if not self.in_arena:
            raise DetachedError(f"{self!r} has not been inserted into an arena")
        return self.arena

    def to_dict(self) -> Dict[str, Any]:
        """Serialize current state to a dict for logging/telemetry."""
        return {
            "handle": self.handle,
            "kind": self.kind,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "heading": self.heading,
            "radius": self.radius,
        }

    def __repr__(self) -> str:
        label = self.name or self.kind
        return f"<{type(self).__name__} {label} at ({self.x:.1f}, {self.y:.1f}) r={self.radius}>"


class StaticObstacle(Body):
    """Round obstacle that never moves by itself (it can still be pushed)."""

    kind = "obstacle"


class DifferentialDriveRobot(Body):
    """Two-wheeled robot driven by left/right wheel speeds.

    Wheel speeds are linear speeds in arena units per second. Each tick the
    robot first rotates by the difference of the wheel paths, then moves
    along its new heading by their mean.
    """

    kind = "robot"

    def __init__(
        self,
        radius: float = 20.0,
        heading: float = 0.0,
        left_speed: float = 0.0,
        right_speed: float = 0.0,
        sensors: Iterable[Sensor] = (),
        name: Optional[str] = None,
        on_collision: Optional[CollisionHook] = None,
    ) -> None:
        super().__init__(radius=radius, heading=heading, name=name, on_collision=on_collision)
        self.left_speed = float(left_speed)
        self.right_speed = float(right_speed)
        self._sensors: List[Sensor] = []
        for sensor in sensors:
            self.add_sensor(sensor)

    # ------------------------------------------------------------------
    # Sensors
    # ------------------------------------------------------------------
    def add_sensor(self, sensor: Sensor) -> Sensor:
        if not isinstance(sensor, Sensor):
            raise TypeMismatchError(
                f"Only Sensor instances can be mounted, got {type(sensor).__name__}"
            )
        sensor.attach(self)
        self._sensors.append(sensor)
        return sensor

    @property
    def sensors(self) -> List[Sensor]:
        return list(self._sensors)

    def read_sensors(self) -> List[bool]:
        """Current reading of every mounted sensor, in mounting order."""
        return [s.read() for s in self._sensors]

    # ------------------------------------------------------------------
    # Motion
    # ------------------------------------------------------------------
    def set_wheel_speeds(self, left: float, right: float) -> None:
        self.left_speed = float(left)
        self.right_speed = float(right)

    def stop(self) -> None:
        self.set_wheel_speeds(0.0, 0.0)

    def rotate(self, angle: float) -> None:
        """Turn by a relative angle (radians). Whole turns are dropped."""
        self.heading = normalize_heading(self.heading + angle)

    def recompute(self) -> Optional[Tuple[float, float]]:
        """Apply this tick's rotation and return the candidate position.

        The rotation is kept even if the arena later rejects the position.
        """
        t = self._require_arena().tick_duration
        path_left = self.left_speed * t
        path_right = self.right_speed * t

        self.rotate((path_left - path_right) / (2.0 * self.radius))

        path_mean = (path_left + path_right) / 2.0
        x = self.x + path_mean * math.cos(self.heading)
        y = self.y + path_mean * math.sin(self.heading)
        return x, y

    def advance(self) -> bool:
        """Recompute and commit in one call. True if the move was accepted."""
        x, y = self.recompute()
        return self.commit(x, y)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["left_speed"] = self.left_speed
        data["right_speed"] = self.right_speed
        data["sensors"] = [s.to_dict() for s in self._sensors]
        return data


class KheperaRobot(DifferentialDriveRobot):
    """Differential-drive robot with the classic ring of eight IR sensors.

    Six sensors face forward (left side to right side) and two face
    backward. Angles are relative to the heading, positive toward +y.
    """

    SENSOR_LAYOUT_DEG = (-90.0, -45.0, -10.0, 10.0, 45.0, 90.0, 170.0, -170.0)

    def __init__(
        self,
        radius: float = 20.0,
        heading: float = 0.0,
        view_angle: float = math.radians(12.5),
        detection_range: float = 50.0,
        name: Optional[str] = None,
        on_collision: Optional[CollisionHook] = None,
    ) -> None:
        sensors = [
            InfraredSensor(
                mount_angle=math.radians(deg),
                half_view=view_angle,
                detection_range=detection_range,
            )
            for deg in self.SENSOR_LAYOUT_DEG
        ]
        super().__init__(
            radius=radius,
            heading=heading,
            sensors=sensors,
            name=name,
            on_collision=on_collision,
        )

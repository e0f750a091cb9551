from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Flag
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional, Tuple, Union
import math

from .errors import DetachedError, InvalidConstructionError
from .geometry_utils import (
    HALF_PI,
    angle_between,
    bearing,
    normalize_angle,
    polar_offset,
    reference_angle,
)

if TYPE_CHECKING:
    from .arena import Arena
    from .bodies import DifferentialDriveRobot


class DetectionKind(Flag):
    """Which targets a sensor reacts to."""

    NONE = 0
    WALL = 1
    OBJECT = 2
    ALL = 3

    @classmethod
    def parse(cls, names: Union[str, Iterable[str]]) -> "DetectionKind":
        """Build a filter from names such as ``["wall", "object"]``."""
        if isinstance(names, str):
            names = [names]
        kinds = cls.NONE
        for name in names:
            try:
                kinds |= cls[name.strip().upper()]
            except KeyError:
                raise InvalidConstructionError(f"Unknown detection kind: {name!r}") from None
        return kinds


@dataclass(frozen=True)
class SensorCone:
    """Absolute placement of a sensor's view cone (for drawing)."""

    x: float
    y: float
    angle: float
    half_view: float
    detection_range: float


class Sensor(ABC):
    """Sensor mounted on a robot at a fixed angle relative to its heading.

    A sensor has no position of its own: its absolute pose is derived on
    every query from the robot's current pose.
    """

    def __init__(
        self,
        mount_angle: float,
        half_view: float,
        detection_range: float,
        detects: DetectionKind = DetectionKind.ALL,
    ) -> None:
        if detection_range <= 0:
            raise InvalidConstructionError(
                f"Detection range must be positive, got {detection_range}"
            )
        if not 0.0 < half_view <= math.pi:
            raise InvalidConstructionError(
                f"View half-angle must be in (0, pi], got {half_view}"
            )
        self._mount_angle = float(mount_angle)
        self._half_view = float(half_view)
        self.detection_range = float(detection_range)
        self.detects = detects
        self.robot: Optional["DifferentialDriveRobot"] = None

    @property
    def mount_angle(self) -> float:
        return self._mount_angle

    @property
    def half_view(self) -> float:
        return self._half_view

    def attach(self, robot: "DifferentialDriveRobot") -> None:
        if self.robot is not None:
            raise InvalidConstructionError("Sensor is already mounted on a robot")
        self.robot = robot

    # ------------------------------------------------------------------
    # Absolute placement
    # ------------------------------------------------------------------
    def absolute_angle(self) -> float:
        """Facing of the sensor in arena coordinates, in [0, 2*pi)."""
        return normalize_angle(self._require_robot().heading + self._mount_angle)

    def position(self) -> Tuple[float, float]:
        """Sensor location on the rim of the robot."""
        robot = self._require_robot()
        return polar_offset(robot.x, robot.y, self.absolute_angle(), robot.radius)

    def cone(self) -> SensorCone:
        x, y = self.position()
        return SensorCone(
            x=x,
            y=y,
            angle=self.absolute_angle(),
            half_view=self._half_view,
            detection_range=self.detection_range,
        )

    def _require_robot(self) -> "DifferentialDriveRobot":
        if self.robot is None:
            raise DetachedError("Sensor is not mounted on a robot")
        return self.robot

    def _require_arena(self) -> "Arena":
        robot = self._require_robot()
        if not robot.in_arena:
            raise DetachedError("Sensor's robot has not been inserted into an arena")
        return robot.arena

    @abstractmethod
    def read(self) -> Any:
        """Reading computed from the current world state."""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": type(self).__name__,
            "mount_angle": self._mount_angle,
            "half_view": self._half_view,
            "range": self.detection_range,
        }


@dataclass(frozen=True)
class InfraredReading:
    """Which kinds of target an infrared sensor currently sees."""

    wall: bool
    obj: bool

    @property
    def triggered(self) -> bool:
        return self.wall or self.obj


class InfraredSensor(Sensor):
    """Binary proximity sensor with a conical field of view.

    Readings are recomputed on every call from the committed world state;
    nothing is cached between calls.
    """

    # ------------------------------------------------------------------
    # Walls
    # ------------------------------------------------------------------
    def detect_walls(self) -> bool:
        """True if the view cone reaches one of the arena walls.

        The cone is bounded by its two extreme rays: the steepest one is
        projected on the y axis and the flattest one on the x axis, each
        against the wall the sensor faces on that axis.
        """
        arena = self._require_arena()
        angle = self.absolute_angle()
        x, y = self.position()
        quadrant, ref = reference_angle(angle)

        if quadrant in (1, 2):
            remaining_y = arena.height - y
        else:
            remaining_y = y
        if quadrant in (1, 4):
            remaining_x = arena.width - x
        else:
            remaining_x = x

        reach_y = self.detection_range * math.cos(HALF_PI - min(HALF_PI, ref + self._half_view))
        if reach_y > remaining_y:
            return True

        reach_x = self.detection_range * math.cos(max(0.0, ref - self._half_view))
        return reach_x > remaining_x

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------
    def detect_objects(self) -> bool:
        """True if any other body's disk intersects the view cone within range."""
        arena = self._require_arena()
        robot = self._require_robot()
        facing = self.absolute_angle()
        sx, sy = self.position()
        for body in arena.others(robot):
            if self._sees_circle(sx, sy, facing, body.x, body.y, body.radius):
                return True
        return False

    def _sees_circle(
        self,
        sx: float,
        sy: float,
        facing: float,
        tx: float,
        ty: float,
        radius: float,
    ) -> bool:
        rng = self.detection_range
        dx = tx - sx
        dy = ty - sy
        if abs(dx) - radius > rng or abs(dy) - radius > rng:
            return False
        dist = math.hypot(dx, dy)
        if dist - radius > rng:
            return False
        # Sensor sits inside the target
        if dist <= radius:
            return True

        diff = angle_between(bearing(dx, dy), facing)
        subtended = math.asin(radius / dist)
        if diff > self._half_view + subtended:
            return False

        projected = math.cos(diff - self._half_view) * dist
        miss = math.sin(max(0.0, diff - self._half_view)) * dist
        return projected <= rng or miss < radius

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------
    def reading(self) -> InfraredReading:
        wall = bool(self.detects & DetectionKind.WALL) and self.detect_walls()
        obj = bool(self.detects & DetectionKind.OBJECT) and self.detect_objects()
        return InfraredReading(wall=wall, obj=obj)

    def read(self) -> bool:
        """True if a wall or object (as allowed by the filter) is detected."""
        if self.detects & DetectionKind.WALL and self.detect_walls():
            return True
        return bool(self.detects & DetectionKind.OBJECT) and self.detect_objects()

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["detects"] = [k.name.lower() for k in (DetectionKind.WALL, DetectionKind.OBJECT) if k & self.detects]
        return data

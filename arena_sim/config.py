"""
YAML configuration for arena simulations.

The YAML file is read with PyYAML and mapped onto plain dataclasses. Angles
are written in degrees in the file and converted to radians when the arena is
built. Validation of the values themselves is left to the engine
constructors, which raise InvalidConstructionError.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import math

import yaml

from .arena import Arena
from .bodies import DifferentialDriveRobot, KheperaRobot, StaticObstacle
from .sensors import DetectionKind, InfraredSensor


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


@dataclass
class ArenaConfig:
    width: float = 800.0
    height: float = 600.0
    time_scale: float = 1.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArenaConfig":
        return cls(
            width=float(data.get("width", 800.0)),
            height=float(data.get("height", 600.0)),
            time_scale=float(data.get("time_scale", 1.0)),
        )


@dataclass
class SensorConfig:
    """One infrared sensor; angles in degrees."""

    mount_deg: float
    view_deg: float = 12.5
    range: float = 50.0
    detects: List[str] = field(default_factory=lambda: ["wall", "object"])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SensorConfig":
        return cls(
            mount_deg=float(data["mount_deg"]),
            view_deg=float(data.get("view_deg", 12.5)),
            range=float(data.get("range", 50.0)),
            detects=list(data.get("detects", ["wall", "object"])),
        )

    def build(self) -> InfraredSensor:
        return InfraredSensor(
            mount_angle=math.radians(self.mount_deg),
            half_view=math.radians(self.view_deg),
            detection_range=self.range,
            detects=DetectionKind.parse(self.detects),
        )


@dataclass
class RobotConfig:
    """A robot and its placement.

    ``type: khepera`` mounts the standard eight-sensor ring using
    ``sensor_view_deg`` and ``sensor_range``; ``type: differential`` mounts
    exactly the sensors listed under ``sensors``.
    """

    x: float
    y: float
    type: str = "khepera"
    name: Optional[str] = None
    heading_deg: float = 0.0
    radius: float = 20.0
    left_speed: float = 0.0
    right_speed: float = 0.0
    sensor_view_deg: float = 12.5
    sensor_range: float = 50.0
    sensors: List[SensorConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RobotConfig":
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            type=str(data.get("type", "khepera")),
            name=data.get("name"),
            heading_deg=float(data.get("heading_deg", 0.0)),
            radius=float(data.get("radius", 20.0)),
            left_speed=float(data.get("left_speed", 0.0)),
            right_speed=float(data.get("right_speed", 0.0)),
            sensor_view_deg=float(data.get("sensor_view_deg", 12.5)),
            sensor_range=float(data.get("sensor_range", 50.0)),
            sensors=[SensorConfig.from_dict(s) for s in data.get("sensors", [])],
        )

    def build(self) -> DifferentialDriveRobot:
        heading = math.radians(self.heading_deg)
        if self.type == "khepera":
            robot: DifferentialDriveRobot = KheperaRobot(
                radius=self.radius,
                heading=heading,
                view_angle=math.radians(self.sensor_view_deg),
                detection_range=self.sensor_range,
                name=self.name,
            )
            for s in self.sensors:
                robot.add_sensor(s.build())
        elif self.type == "differential":
            robot = DifferentialDriveRobot(
                radius=self.radius,
                heading=heading,
                sensors=[s.build() for s in self.sensors],
                name=self.name,
            )
        else:
            raise KeyError(f"Unknown robot type: {self.type}. Available: ['khepera', 'differential']")
        robot.set_wheel_speeds(self.left_speed, self.right_speed)
        return robot


@dataclass
class ObstacleConfig:
    x: float
    y: float
    radius: float = 20.0
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ObstacleConfig":
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            radius=float(data.get("radius", 20.0)),
            name=data.get("name"),
        )


@dataclass
class RenderConfig:
    window_width: int = 800
    window_height: int = 600
    fps: int = 60
    show_cones: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RenderConfig":
        return cls(
            window_width=int(data.get("window_width", 800)),
            window_height=int(data.get("window_height", 600)),
            fps=int(data.get("fps", 60)),
            show_cones=bool(data.get("show_cones", True)),
        )


@dataclass
class SimConfig:
    """Whole simulation description, as found in configs/arena.yaml."""

    arena: ArenaConfig = field(default_factory=ArenaConfig)
    robots: List[RobotConfig] = field(default_factory=list)
    obstacles: List[ObstacleConfig] = field(default_factory=list)
    render: RenderConfig = field(default_factory=RenderConfig)
    telemetry: Dict[str, Any] = field(default_factory=dict)
    teleop: Dict[str, Any] = field(default_factory=dict)
    seed: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimConfig":
        return cls(
            arena=ArenaConfig.from_dict(data.get("arena", {})),
            robots=[RobotConfig.from_dict(r) for r in data.get("robots", [])],
            obstacles=[ObstacleConfig.from_dict(o) for o in data.get("obstacles", [])],
            render=RenderConfig.from_dict(data.get("render", {})),
            telemetry=dict(data.get("telemetry", {})),
            teleop=dict(data.get("teleop", {})),
            seed=int(data.get("seed", 0)),
        )


def load_config(path: str) -> SimConfig:
    """Read a simulation YAML file."""
    return SimConfig.from_dict(load_yaml(path))


def build_arena(cfg: SimConfig) -> Arena:
    """Create the arena and insert robots first, then obstacles."""
    arena = Arena(
        width=cfg.arena.width,
        height=cfg.arena.height,
        time_scale=cfg.arena.time_scale,
    )
    for rc in cfg.robots:
        arena.insert(rc.build(), rc.x, rc.y)
    for oc in cfg.obstacles:
        arena.insert(StaticObstacle(radius=oc.radius, name=oc.name), oc.x, oc.y)
    return arena

"""
Top-level package for the arena simulator.

Components:
- geometry_utils: angle normalization, bearings, distances
- arena: bounds, body registry, position commit and ticking
- collisions: pairwise overlap detection and neighbour displacement
- bodies: static obstacles and differential-drive robots
- sensors: infrared proximity sensors (wall and object detection)
- config: YAML configuration and arena construction
- env: Gymnasium-compatible RL environment
- render: pygame-based visualization
"""

from .arena import Arena, TickReport
from .bodies import Body, DifferentialDriveRobot, KheperaRobot, Pose, StaticObstacle
from .collisions import Collision, CollisionEvent
from .errors import ArenaError, DetachedError, InvalidConstructionError, TypeMismatchError
from .sensors import DetectionKind, InfraredReading, InfraredSensor, Sensor

__all__ = [
    "Arena",
    "TickReport",
    "Body",
    "DifferentialDriveRobot",
    "KheperaRobot",
    "Pose",
    "StaticObstacle",
    "Collision",
    "CollisionEvent",
    "ArenaError",
    "DetachedError",
    "InvalidConstructionError",
    "TypeMismatchError",
    "DetectionKind",
    "InfraredReading",
    "InfraredSensor",
    "Sensor",
]

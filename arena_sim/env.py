from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
import math
import random

import gymnasium as gym
from gymnasium import spaces
import numpy as np

from .arena import Arena
from .bodies import KheperaRobot, StaticObstacle
from .geometry_utils import distance
from rl.reward import compute_reward


@dataclass
class EnvConfig:
    arena_width: float
    arena_height: float
    max_steps: int
    robot_radius: float
    max_wheel_speed: float
    sensor_view_deg: float
    sensor_range: float
    num_obstacles_min: int
    num_obstacles_max: int
    obstacle_radius_min: float
    obstacle_radius_max: float
    collision_penalty: float = 1.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnvConfig":
        return cls(
            arena_width=float(data["arena_width"]),
            arena_height=float(data["arena_height"]),
            max_steps=int(data["max_steps"]),
            robot_radius=float(data["robot_radius"]),
            max_wheel_speed=float(data["max_wheel_speed"]),
            sensor_view_deg=float(data["sensor_view_deg"]),
            sensor_range=float(data["sensor_range"]),
            num_obstacles_min=int(data["num_obstacles_min"]),
            num_obstacles_max=int(data["num_obstacles_max"]),
            obstacle_radius_min=float(data["obstacle_radius_min"]),
            obstacle_radius_max=float(data["obstacle_radius_max"]),
            collision_penalty=float(data.get("collision_penalty", 1.0)),
        )


class ArenaEnv(gym.Env):
    """Gymnasium-compatible obstacle-avoidance task for a Khepera robot.

    Action: left and right wheel speeds. Observation: the eight infrared
    readings (0 or 1) followed by both wheel speeds divided by the maximum
    wheel speed.
    """

    metadata = {"render_modes": ["none"], "render_fps": 60}

    def __init__(self, config: EnvConfig, seed: int = 0) -> None:
        super().__init__()
        self.cfg = config
        self.rng = random.Random(int(seed))

        self.arena: Optional[Arena] = None
        self.robot: Optional[KheperaRobot] = None
        self._step_count = 0

        num_sensors = len(KheperaRobot.SENSOR_LAYOUT_DEG)
        self.observation_space = spaces.Box(
            low=np.array([0.0] * num_sensors + [-1.0, -1.0], dtype=np.float32),
            high=np.ones(num_sensors + 2, dtype=np.float32),
            dtype=np.float32,
        )
        max_speed = self.cfg.max_wheel_speed
        self.action_space = spaces.Box(
            low=np.array([-max_speed, -max_speed], dtype=np.float32),
            high=np.array([max_speed, max_speed], dtype=np.float32),
            dtype=np.float32,
        )

    # ------------------------------------------------------------------
    # Gym API
    # ------------------------------------------------------------------
    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.rng.seed(int(seed))

        self._step_count = 0
        self.arena = Arena(self.cfg.arena_width, self.cfg.arena_height)
        self.robot = KheperaRobot(
            radius=self.cfg.robot_radius,
            heading=self.rng.uniform(0.0, 2.0 * math.pi),
            view_angle=math.radians(self.cfg.sensor_view_deg),
            detection_range=self.cfg.sensor_range,
            name="agent",
        )
        r = self.cfg.robot_radius
        self.arena.insert(
            self.robot,
            self.rng.uniform(r, self.cfg.arena_width - r),
            self.rng.uniform(r, self.cfg.arena_height - r),
        )
        self._place_obstacles()

        obs = self._get_obs()
        info: Dict[str, Any] = {"pose": self.robot.to_dict()}
        return obs, info

    def step(
        self, action: np.ndarray
    ) -> Tuple[np.ndarray, float, bool, bool, Dict[str, Any]]:
        arena, robot = self._require_reset()
        self._step_count += 1

        action = np.asarray(action, dtype=np.float32)
        action = np.clip(action, self.action_space.low, self.action_space.high)
        left = float(action[0])
        right = float(action[1])

        robot.set_wheel_speeds(left, right)
        report = arena.tick()
        collided = any(e.body is robot for e in report.events)

        obs = self._get_obs()
        activation = float(np.max(obs[: len(KheperaRobot.SENSOR_LAYOUT_DEG)]))
        reward_components = compute_reward(
            left_speed=left,
            right_speed=right,
            max_speed=self.cfg.max_wheel_speed,
            sensor_activation=activation,
            collided=collided,
            collision_penalty=self.cfg.collision_penalty,
        )

        terminated = False
        truncated = self._step_count >= self.cfg.max_steps

        info: Dict[str, Any] = {
            "collision": collided,
            "pose": robot.to_dict(),
            "reward_components": reward_components.as_dict(),
        }
        return obs, float(reward_components.total()), terminated, truncated, info

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _require_reset(self) -> Tuple[Arena, KheperaRobot]:
        if self.arena is None or self.robot is None:
            raise RuntimeError("ArenaEnv.reset() must be called before step()")
        return self.arena, self.robot

    def _place_obstacles(self) -> None:
        """Insert obstacles that do not overlap the robot or each other."""
        arena, _ = self._require_reset()
        n = self.rng.randint(self.cfg.num_obstacles_min, self.cfg.num_obstacles_max)
        for _ in range(n):
            radius = self.rng.uniform(self.cfg.obstacle_radius_min, self.cfg.obstacle_radius_max)
            for _ in range(100):
                x = self.rng.uniform(radius, self.cfg.arena_width - radius)
                y = self.rng.uniform(radius, self.cfg.arena_height - radius)
                if all(distance(b.x, b.y, x, y) > b.radius + radius for b in arena):
                    arena.insert(StaticObstacle(radius=radius), x, y)
                    break

    def _get_obs(self) -> np.ndarray:
        _, robot = self._require_reset()
        readings = np.asarray(robot.read_sensors(), dtype=np.float32)
        max_speed = self.cfg.max_wheel_speed
        speeds = np.array(
            [robot.left_speed / max_speed, robot.right_speed / max_speed],
            dtype=np.float32,
        )
        return np.concatenate([readings, speeds], axis=0)

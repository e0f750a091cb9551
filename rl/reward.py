from __future__ import annotations

from dataclasses import dataclass
from typing import Dict
import math


# Scale applied to the collision penalty in the total
COLLISION_WEIGHT = 1.0


@dataclass
class RewardComponents:
    """Decomposed obstacle-avoidance reward terms for easier logging and testing.

    The product ``speed * straightness * clearance`` is the classic
    Floreano-Mondada fitness for Khepera robots: go fast, go straight,
    stay away from anything the proximity sensors see.
    """

    speed: float
    straightness: float
    clearance: float
    collision_penalty: float = 0.0

    def total(self) -> float:
        """Return the final reward."""
        return self.speed * self.straightness * self.clearance + COLLISION_WEIGHT * self.collision_penalty

    def as_dict(self) -> Dict[str, float]:
        return {
            "speed": self.speed,
            "straightness": self.straightness,
            "clearance": self.clearance,
            "collision_penalty": self.collision_penalty,
            "total": self.total(),
        }


def compute_reward(
    left_speed: float,
    right_speed: float,
    max_speed: float,
    sensor_activation: float,
    collided: bool,
    collision_penalty: float = 1.0,
) -> RewardComponents:
    """Compute the obstacle-avoidance reward for one step.

    Parameters
    ----------
    left_speed, right_speed : float
        Wheel speeds applied this step.
    max_speed : float
        Largest allowed wheel speed, used to normalize into [0, 1].
    sensor_activation : float
        Highest proximity reading in [0, 1] (1 = something detected).
    collided : bool
        Whether the robot's move was rejected by a collision.
    collision_penalty : float
        Magnitude of the penalty when collided.
    """
    if max_speed <= 0.0:
        raise ValueError(f"max_speed must be positive, got {max_speed}")
    left = max(-1.0, min(1.0, left_speed / max_speed))
    right = max(-1.0, min(1.0, right_speed / max_speed))

    # Mean forward speed; reversing earns nothing
    speed = max(0.0, (left + right) / 2.0)
    # Wheel difference lies in [0, 2]; normalize to [0, 1]
    straightness = 1.0 - math.sqrt(abs(left - right) / 2.0)
    clearance = 1.0 - max(0.0, min(1.0, sensor_activation))

    return RewardComponents(
        speed=speed,
        straightness=straightness,
        clearance=clearance,
        collision_penalty=-collision_penalty if collided else 0.0,
    )

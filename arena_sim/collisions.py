from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Tuple
import math

if TYPE_CHECKING:
    from .arena import Arena
    from .bodies import Body


# Push neighbours 1% past contact so they do not sit exactly on the boundary.
COLLISION_MARGIN = 1.01


@dataclass
class Collision:
    """One neighbour displaced while another body tried to move.

    Attributes
    ----------
    other : Body
        The body that was pushed away.
    distance : int
        Centre distance (rounded) at the candidate position.
    min_distance : float
        Sum of both radii.
    displacement : tuple[float, float]
        Vector added to the neighbour's position.
    """

    other: "Body"
    distance: int
    min_distance: float
    displacement: Tuple[float, float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "other": self.other.handle,
            "distance": self.distance,
            "min_distance": self.min_distance,
            "displacement": list(self.displacement),
        }


@dataclass
class CollisionEvent:
    """A rejected move: the body that tried to move and what it hit."""

    body: "Body"
    candidate: Tuple[float, float]
    collisions: List[Collision] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "body": self.body.handle,
            "candidate": list(self.candidate),
            "collisions": [c.to_dict() for c in self.collisions],
        }


def resolve_collisions(arena: "Arena", body: "Body", x: float, y: float) -> List[Collision]:
    """Push every body overlapping `body` at (x, y) out of the way.

    Single pass in registry order. Each overlapping neighbour is moved along
    the line from (x, y) through its centre until it sits at the contact
    distance plus the margin. Displaced neighbours are neither clamped to the
    arena nor re-checked against third bodies.

    Returns the list of collisions found; the caller decides whether the move
    is committed.
    """
    collisions: List[Collision] = []
    for other in arena.others(body):
        dx = other.x - x
        dy = other.y - y
        dist = int(round(math.hypot(dx, dy)))
        min_distance = body.radius + other.radius
        if dist >= min_distance:
            continue

        if dist > 0:
            scale = min_distance / dist * COLLISION_MARGIN
            new_x = x + dx * scale
            new_y = y + dy * scale
        else:
            # Coincident centres: fall back to the raw offset, then to the mover's heading
            length = math.hypot(dx, dy)
            if length > 0.0:
                ux, uy = dx / length, dy / length
            else:
                ux, uy = math.cos(body.heading), math.sin(body.heading)
            reach = min_distance * COLLISION_MARGIN
            new_x = x + ux * reach
            new_y = y + uy * reach

        displacement = (new_x - other.x, new_y - other.y)
        other.x = new_x
        other.y = new_y
        collisions.append(
            Collision(
                other=other,
                distance=dist,
                min_distance=min_distance,
                displacement=displacement,
            )
        )
    return collisions

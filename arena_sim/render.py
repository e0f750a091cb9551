from __future__ import annotations

from typing import List, Tuple
import math

import pygame

from .arena import Arena
from .bodies import Body, DifferentialDriveRobot
from .sensors import InfraredSensor


Color = Tuple[int, int, int]

# Modern dark theme palette
THEME = {
    "bg": (18, 22, 32),
    "grid": (28, 34, 48),
    "border": (65, 75, 98),
    "obstacle_fill": (45, 52, 70),
    "obstacle_edge": (85, 95, 120),
    "robot_fill": (100, 220, 255),
    "robot_outline": (40, 140, 200),
    "robot_heading": (140, 240, 255),
    "cone_idle": (60, 90, 120),
    "cone_wall": (255, 180, 100),
    "cone_object": (255, 90, 90),
    "hud_bg": (28, 34, 48),
    "hud_border": (55, 65, 88),
    "hud_text": (200, 220, 255),
}


class PygameRenderer:
    """Top-down view of an arena, its bodies and their sensor cones.

    Arena coordinates already match the screen (y grows downward), so the
    transform is a plain scale.
    """

    def __init__(
        self,
        arena: Arena,
        window_width: int,
        window_height: int,
        show_cones: bool = True,
    ) -> None:
        pygame.init()
        pygame.display.set_caption("Arena Simulator")
        self.screen = pygame.display.set_mode((window_width, window_height))
        self.clock = pygame.time.Clock()

        self.arena = arena
        self.window_width = window_width
        self.window_height = window_height
        self.show_cones = show_cones

        self.scale_x = window_width / arena.width
        self.scale_y = window_height / arena.height

    # ------------------------------------------------------------------
    # Coordinate transforms
    # ------------------------------------------------------------------
    def _to_screen(self, x: float, y: float) -> Tuple[int, int]:
        return int(x * self.scale_x), int(y * self.scale_y)

    def _length_to_pixels(self, r: float) -> int:
        """Convert an arena length to pixels (average of axes)."""
        return int(r * 0.5 * (self.scale_x + self.scale_y))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def _draw_grid(self) -> None:
        step = 50.0
        color = THEME["grid"]
        x = 0.0
        while x <= self.arena.width:
            pygame.draw.line(self.screen, color, self._to_screen(x, 0.0), self._to_screen(x, self.arena.height), 1)
            x += step
        y = 0.0
        while y <= self.arena.height:
            pygame.draw.line(self.screen, color, self._to_screen(0.0, y), self._to_screen(self.arena.width, y), 1)
            y += step

    def draw(self, tick: int = 0, fps: float = 0.0) -> None:
        """Render one frame of the current committed world state."""
        self.screen.fill(THEME["bg"])
        self._draw_grid()
        pygame.draw.rect(
            self.screen,
            THEME["border"],
            pygame.Rect(0, 0, self.window_width, self.window_height),
            2,
        )

        robots: List[DifferentialDriveRobot] = []
        for body in self.arena:
            if isinstance(body, DifferentialDriveRobot):
                robots.append(body)
            else:
                self._draw_obstacle(body)

        if self.show_cones:
            for robot in robots:
                for sensor in robot.sensors:
                    if isinstance(sensor, InfraredSensor):
                        self._draw_cone(sensor)

        for robot in robots:
            self._draw_robot(robot)

        self._draw_hud(tick, fps)
        pygame.display.flip()

    def _draw_obstacle(self, body: Body) -> None:
        center = self._to_screen(body.x, body.y)
        radius_px = max(2, self._length_to_pixels(body.radius))
        pygame.draw.circle(self.screen, THEME["obstacle_fill"], center, radius_px, 0)
        pygame.draw.circle(self.screen, THEME["obstacle_edge"], center, radius_px, 2)

    def _draw_robot(self, robot: DifferentialDriveRobot) -> None:
        center = self._to_screen(robot.x, robot.y)
        radius_px = max(2, self._length_to_pixels(robot.radius))
        pygame.draw.circle(self.screen, THEME["robot_fill"], center, radius_px, 0)
        pygame.draw.circle(self.screen, THEME["robot_outline"], center, radius_px, 2)

        # Front line, centre to rim
        hx = robot.x + math.cos(robot.heading) * robot.radius
        hy = robot.y + math.sin(robot.heading) * robot.radius
        pygame.draw.line(self.screen, THEME["robot_heading"], center, self._to_screen(hx, hy), 3)

    def _draw_cone(self, sensor: InfraredSensor) -> None:
        reading = sensor.reading()
        if reading.obj:
            color = THEME["cone_object"]
        elif reading.wall:
            color = THEME["cone_wall"]
        else:
            color = THEME["cone_idle"]

        cone = sensor.cone()
        points = [self._to_screen(cone.x, cone.y)]
        steps = 6
        for i in range(steps + 1):
            angle = cone.angle - cone.half_view + i * (2.0 * cone.half_view / steps)
            px = cone.x + cone.detection_range * math.cos(angle)
            py = cone.y + cone.detection_range * math.sin(angle)
            points.append(self._to_screen(px, py))
        pygame.draw.polygon(self.screen, color, points, 1)

    def _draw_hud(self, tick: int, fps: float) -> None:
        pad = 10
        font = pygame.font.SysFont("monospace", 13)
        text = f"  tick={tick}   time x{self.arena.time_scale:.2f}   FPS={fps:.1f}  "
        surf = font.render(text, True, THEME["hud_text"])
        r = surf.get_rect(topleft=(pad, pad))
        panel = r.inflate(pad, pad)
        pygame.draw.rect(self.screen, THEME["hud_bg"], panel)
        pygame.draw.rect(self.screen, THEME["hud_border"], panel, 1)
        self.screen.blit(surf, (panel.x + 4, panel.y + 4))

    def tick(self, target_fps: int) -> float:
        """Cap frame rate and return achieved FPS."""
        fps = self.clock.get_fps()
        self.clock.tick(target_fps)
        return fps

    def close(self) -> None:
        pygame.quit()

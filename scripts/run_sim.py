from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

# Ensure project root is on path when running this script directly
_script_dir = Path(__file__).resolve().parent
_project_root = _script_dir.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pygame

from arena_sim.bodies import Body
from arena_sim.collisions import Collision
from arena_sim.config import build_arena, load_config
from arena_sim.geometry_utils import clamp
from arena_sim.render import PygameRenderer
from telemetry.logger import TelemetryLogger


def main() -> None:
    parser = argparse.ArgumentParser(description="Arena simulator with keyboard teleop.")
    parser.add_argument(
        "--config",
        type=str,
        default="configs/arena.yaml",
        help="Path to arena YAML config.",
    )
    parser.add_argument(
        "--no-telemetry",
        action="store_true",
        help="Do not write the JSONL telemetry file.",
    )
    args = parser.parse_args()

    cfg = load_config(args.config)
    arena = build_arena(cfg)
    robots = arena.robots()
    if not robots:
        print("Config has no robots to drive.", file=sys.stderr)
        sys.exit(1)
    driven = robots[0]

    teleop = cfg.teleop
    speed_step = float(teleop.get("speed_step", 20.0))
    max_speed = float(teleop.get("max_speed", 200.0))
    time_scale_step = float(teleop.get("time_scale_step", 0.25))

    telemetry = None
    every_n = int(cfg.telemetry.get("every_n_ticks", 10))
    if not args.no_telemetry and cfg.telemetry.get("path"):
        telemetry = TelemetryLogger(cfg.telemetry["path"])

        def on_collision(body: Body, collisions: List[Collision]) -> None:
            telemetry.log_event(
                "collision",
                tick=arena.tick_count,
                body=body.handle,
                others=[c.to_dict() for c in collisions],
            )

        for robot in robots:
            robot.on_collision = on_collision

    renderer = PygameRenderer(
        arena=arena,
        window_width=cfg.render.window_width,
        window_height=cfg.render.window_height,
        show_cones=cfg.render.show_cones,
    )

    print(
        "Keyboard teleop: Q/A left wheel, W/S right wheel, SPACE stop, "
        "+/- time scale, ESC to quit."
    )

    def nudge(left: float, right: float) -> None:
        driven.set_wheel_speeds(
            clamp(driven.left_speed + left, -max_speed, max_speed),
            clamp(driven.right_speed + right, -max_speed, max_speed),
        )

    running = True
    try:
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_SPACE:
                        driven.stop()
                    elif event.key == pygame.K_q:
                        nudge(speed_step, 0.0)
                    elif event.key == pygame.K_a:
                        nudge(-speed_step, 0.0)
                    elif event.key == pygame.K_w:
                        nudge(0.0, speed_step)
                    elif event.key == pygame.K_s:
                        nudge(0.0, -speed_step)
                    elif event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
                        arena.time_scale = arena.time_scale + time_scale_step
                    elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
                        arena.time_scale = max(0.0, arena.time_scale - time_scale_step)

            report = arena.tick()

            if telemetry is not None and report.tick % every_n == 0:
                record = arena.snapshot()
                record["readings"] = {
                    str(r.handle): r.read_sensors() for r in robots
                }
                telemetry.log_step(record)

            fps = renderer.tick(cfg.render.fps)
            renderer.draw(tick=report.tick, fps=fps)
    except KeyboardInterrupt:
        print("Stopping simulation (KeyboardInterrupt).")
    finally:
        renderer.close()
        if telemetry is not None:
            telemetry.close()


if __name__ == "__main__":
    main()

from __future__ import annotations

import math
from pathlib import Path

import pytest

from arena_sim.bodies import DifferentialDriveRobot, KheperaRobot, StaticObstacle
from arena_sim.config import RobotConfig, SimConfig, build_arena, load_config
from arena_sim.errors import InvalidConstructionError
from arena_sim.sensors import DetectionKind

CONFIG_YAML = """
arena:
  width: 300
  height: 200
  time_scale: 2.0
robots:
  - name: k
    x: 50
    y: 50
    heading_deg: 90
  - name: d
    type: differential
    x: 250
    y: 150
    radius: 10
    left_speed: 30
    right_speed: 20
    sensors:
      - mount_deg: 45
        view_deg: 20
        range: 70
        detects: [wall]
obstacles:
  - {x: 150, y: 100, radius: 25}
"""


def test_load_config_and_build_arena(tmp_path: Path) -> None:
    path = tmp_path / "arena.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")

    cfg = load_config(str(path))
    arena = build_arena(cfg)

    assert (arena.width, arena.height, arena.time_scale) == (300.0, 200.0, 2.0)
    assert len(arena) == 3

    khepera, differential, obstacle = arena.bodies
    assert isinstance(khepera, KheperaRobot)
    assert math.isclose(khepera.heading, math.pi / 2)
    assert len(khepera.sensors) == 8

    assert type(differential) is DifferentialDriveRobot
    assert (differential.left_speed, differential.right_speed) == (30.0, 20.0)
    sensor = differential.sensors[0]
    assert math.isclose(sensor.mount_angle, math.radians(45))
    assert math.isclose(sensor.half_view, math.radians(20))
    assert sensor.detection_range == 70.0
    assert sensor.detects == DetectionKind.WALL

    assert isinstance(obstacle, StaticObstacle)
    assert (obstacle.x, obstacle.y, obstacle.radius) == (150.0, 100.0, 25.0)


def test_defaults_for_missing_sections() -> None:
    cfg = SimConfig.from_dict({})
    assert cfg.arena.width == 800.0
    assert cfg.robots == []
    assert cfg.render.fps == 60
    arena = build_arena(cfg)
    assert len(arena) == 0


def test_bad_values_fail_in_the_engine() -> None:
    cfg = SimConfig.from_dict({"arena": {"width": 0, "height": 100}})
    with pytest.raises(InvalidConstructionError):
        build_arena(cfg)


def test_unknown_robot_type() -> None:
    with pytest.raises(KeyError):
        RobotConfig(x=10, y=10, type="hovercraft").build()


def test_bundled_config_builds() -> None:
    path = Path(__file__).resolve().parents[1] / "configs" / "arena.yaml"
    arena = build_arena(load_config(str(path)))
    assert len(arena.robots()) == 2
    for body in arena:
        assert arena.valid_coords(body.x, body.y)

from __future__ import annotations

import math

import pytest

from arena_sim.arena import Arena
from arena_sim.bodies import DifferentialDriveRobot, KheperaRobot, StaticObstacle
from arena_sim.errors import DetachedError, InvalidConstructionError, TypeMismatchError
from arena_sim.sensors import DetectionKind, InfraredSensor

HALF_VIEW = math.radians(12.5)


def _robot_with_sensor(
    arena: Arena,
    x: float,
    y: float,
    heading: float = 0.0,
    detection_range: float = 60.0,
    detects: DetectionKind = DetectionKind.ALL,
) -> InfraredSensor:
    sensor = InfraredSensor(
        mount_angle=0.0,
        half_view=HALF_VIEW,
        detection_range=detection_range,
        detects=detects,
    )
    robot = DifferentialDriveRobot(radius=10, heading=heading, sensors=[sensor])
    arena.insert(robot, x, y)
    return sensor


def test_sensor_sits_on_robot_rim() -> None:
    sensor = _robot_with_sensor(Arena(400, 400), 50, 50)
    x, y = sensor.position()
    assert math.isclose(x, 60.0)
    assert math.isclose(y, 50.0)
    assert sensor.absolute_angle() == 0.0


def test_wall_in_front_is_detected() -> None:
    sensor = _robot_with_sensor(Arena(100, 100), 50, 50)
    assert sensor.detect_walls()
    assert sensor.read()


def test_open_space_detects_no_wall() -> None:
    sensor = _robot_with_sensor(Arena(400, 400), 200, 200)
    assert not sensor.detect_walls()
    assert not sensor.read()


def test_wall_below_is_detected_when_facing_down() -> None:
    sensor = _robot_with_sensor(Arena(400, 400), 200, 370, heading=math.pi / 2)
    assert sensor.detect_walls()


def test_wall_behind_is_not_detected() -> None:
    sensor = _robot_with_sensor(Arena(400, 400), 200, 370, heading=1.5 * math.pi)
    assert not sensor.detect_walls()


def test_wall_left_is_detected_when_facing_left() -> None:
    sensor = _robot_with_sensor(Arena(400, 400), 40, 200, heading=math.pi)
    assert sensor.detect_walls()


def test_diagonal_facing_picks_walls_by_quadrant() -> None:
    # Quadrant 2 faces the bottom and left walls
    sensor = _robot_with_sensor(Arena(400, 400), 40, 360, heading=0.75 * math.pi)
    assert sensor.detect_walls()
    sensor = _robot_with_sensor(Arena(400, 400), 360, 40, heading=0.75 * math.pi)
    assert not sensor.detect_walls()

    # Quadrant 4 faces the top and right walls
    sensor = _robot_with_sensor(Arena(400, 400), 360, 40, heading=1.75 * math.pi)
    assert sensor.detect_walls()
    sensor = _robot_with_sensor(Arena(400, 400), 40, 360, heading=1.75 * math.pi)
    assert not sensor.detect_walls()


def test_diagonal_facing_into_corners() -> None:
    sensor = _robot_with_sensor(Arena(400, 400), 360, 360, heading=0.25 * math.pi)
    assert sensor.detect_walls()
    sensor = _robot_with_sensor(Arena(400, 400), 40, 40, heading=1.25 * math.pi)
    assert sensor.detect_walls()
    sensor = _robot_with_sensor(Arena(400, 400), 40, 40, heading=0.25 * math.pi)
    assert not sensor.detect_walls()


def test_diagonal_facing_trips_on_the_x_axis_alone() -> None:
    # Far from the top and bottom walls; only the side wall is in reach
    sensor = _robot_with_sensor(Arena(400, 400), 30, 200, heading=0.75 * math.pi)
    assert sensor.detect_walls()
    sensor = _robot_with_sensor(Arena(400, 400), 370, 200, heading=0.75 * math.pi)
    assert not sensor.detect_walls()


def test_cone_edge_reaches_side_wall() -> None:
    # Facing along the wall: only the cone's outer ray reaches it
    sensor = _robot_with_sensor(Arena(400, 400), 200, 388, detection_range=60.0)
    assert sensor.detect_walls()


def test_object_filter_ignores_walls() -> None:
    sensor = _robot_with_sensor(Arena(100, 100), 50, 50, detects=DetectionKind.OBJECT)
    assert sensor.detect_walls()
    assert not sensor.read()


def test_object_ahead_is_detected() -> None:
    arena = Arena(400, 400)
    sensor = _robot_with_sensor(arena, 50, 50, detection_range=50.0)
    target = StaticObstacle(radius=10)
    arena.insert(target, 90, 50)

    assert sensor.position() == pytest.approx((60.0, 50.0))
    assert sensor.detect_objects()
    assert sensor.read()

    arena.set_position(target, 60, 150)
    assert not sensor.detect_objects()
    assert not sensor.read()


def test_object_behind_is_not_detected() -> None:
    arena = Arena(400, 400)
    sensor = _robot_with_sensor(arena, 50, 50, detection_range=50.0)
    arena.insert(StaticObstacle(radius=10), 20, 50)
    assert not sensor.detect_objects()


def test_object_partly_inside_cone_is_detected() -> None:
    arena = Arena(400, 400)
    sensor = _robot_with_sensor(arena, 50, 50, detection_range=50.0)
    # 20 degrees off-axis: outside the half-view, but the disk reaches into it
    angle = math.radians(20.0)
    arena.insert(StaticObstacle(radius=10), 60 + 40 * math.cos(angle), 50 + 40 * math.sin(angle))
    assert sensor.detect_objects()


def test_object_beside_cone_is_not_detected() -> None:
    arena = Arena(400, 400)
    sensor = _robot_with_sensor(arena, 50, 50, detection_range=50.0)
    angle = math.radians(35.0)
    arena.insert(StaticObstacle(radius=10), 60 + 40 * math.cos(angle), 50 + 40 * math.sin(angle))
    assert not sensor.detect_objects()


def test_object_out_of_range_is_not_detected() -> None:
    arena = Arena(400, 400)
    sensor = _robot_with_sensor(arena, 50, 50, detection_range=50.0)
    arena.insert(StaticObstacle(radius=10), 125, 50)
    assert not sensor.detect_objects()


def test_owning_robot_is_not_a_target() -> None:
    arena = Arena(400, 400)
    sensor = _robot_with_sensor(arena, 200, 200)
    assert not sensor.detect_objects()


def test_wall_filter_ignores_objects() -> None:
    arena = Arena(400, 400)
    sensor = _robot_with_sensor(arena, 50, 50, detection_range=50.0, detects=DetectionKind.WALL)
    arena.insert(StaticObstacle(radius=10), 90, 50)
    assert not sensor.read()
    reading = sensor.reading()
    assert not reading.wall and not reading.obj


def test_reading_breaks_down_targets() -> None:
    arena = Arena(100, 100)
    sensor = _robot_with_sensor(arena, 50, 50, detection_range=50.0)
    arena.insert(StaticObstacle(radius=5), 85, 50)
    reading = sensor.reading()
    assert reading.wall
    assert reading.obj
    assert reading.triggered


def test_reads_are_idempotent_and_pure() -> None:
    arena = Arena(400, 400)
    sensor = _robot_with_sensor(arena, 50, 50, detection_range=50.0)
    arena.insert(StaticObstacle(radius=10), 90, 50)
    before = arena.snapshot()
    results = [sensor.read() for _ in range(5)]
    assert results == [True] * 5
    assert arena.snapshot() == before


def test_khepera_has_eight_sensors() -> None:
    arena = Arena(400, 400)
    robot = KheperaRobot(radius=20, detection_range=50.0)
    arena.insert(robot, 200, 200)
    assert len(robot.sensors) == 8
    assert robot.read_sensors() == [False] * 8

    # Obstacle straight ahead triggers the two front sensors
    arena.insert(StaticObstacle(radius=15), 260, 200)
    readings = robot.read_sensors()
    assert readings[2] and readings[3]
    assert not readings[6] and not readings[7]


def test_sensor_needs_robot_in_arena() -> None:
    sensor = InfraredSensor(mount_angle=0.0, half_view=HALF_VIEW, detection_range=50.0)
    with pytest.raises(DetachedError):
        sensor.read()
    DifferentialDriveRobot(radius=10, sensors=[sensor])
    with pytest.raises(DetachedError):
        sensor.read()


def test_sensor_construction_is_validated() -> None:
    with pytest.raises(InvalidConstructionError):
        InfraredSensor(mount_angle=0.0, half_view=HALF_VIEW, detection_range=0.0)
    with pytest.raises(InvalidConstructionError):
        InfraredSensor(mount_angle=0.0, half_view=0.0, detection_range=10.0)


def test_sensor_mounts_once() -> None:
    sensor = InfraredSensor(mount_angle=0.0, half_view=HALF_VIEW, detection_range=50.0)
    DifferentialDriveRobot(radius=10, sensors=[sensor])
    with pytest.raises(InvalidConstructionError):
        DifferentialDriveRobot(radius=10, sensors=[sensor])


def test_only_sensors_can_be_mounted() -> None:
    robot = DifferentialDriveRobot(radius=10)
    with pytest.raises(TypeMismatchError):
        robot.add_sensor("not a sensor")


def test_detection_kind_parse() -> None:
    assert DetectionKind.parse(["wall"]) == DetectionKind.WALL
    assert DetectionKind.parse(["wall", "object"]) == DetectionKind.ALL
    assert DetectionKind.parse("object") == DetectionKind.OBJECT
    with pytest.raises(InvalidConstructionError):
        DetectionKind.parse(["smell"])

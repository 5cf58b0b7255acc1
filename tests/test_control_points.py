"""Tests for deterministic control point placement."""

import math
from dataclasses import FrozenInstanceError

import pytest

from mesh_core.control_points import ControlPoint, generate_control_points, spread_distance

# seed=42, points=3, palette=pastel, scale=1.0, recorded from the browser overlay
EXPECTED_SEED_42 = [
    dict(base_x=0.5001598048833725, base_y=0.8334881984003986, color=(193, 240, 227),
         angle=4.685607311312102, radius=0.13219025728292763,
         drift_vx=-0.60549232410267, drift_vy=0.0014589754864573479,
         breathe_phase=4.31411054271768, wave_freq=0.6053104492137209,
         wave_phase=0.02414597930838645, orbit_speed=0.5353909618686885),
    dict(base_x=0.31187386033420234, base_y=0.3915054874371444, color=(173, 212, 230),
         angle=3.7216813944428426, radius=0.08536145245656371,
         drift_vx=-0.4660880262963474, drift_vy=-0.8764372151345015,
         breathe_phase=1.1667184415233303, wave_freq=0.6917736465809867,
         wave_phase=3.332196889432712, orbit_speed=-0.3135618046624586),
    dict(base_x=0.783957225730973, base_y=0.3358757423627981, color=(187, 181, 237),
         angle=3.0645602824594778, radius=0.2175339072407223,
         drift_vx=-0.36107650864869356, drift_vy=-0.10020854277536273,
         breathe_phase=0.23523751680393895, wave_freq=0.325696367258206,
         wave_phase=3.497219555197698, orbit_speed=-0.5983647563960404),
]


def test_seed_42_snapshot():
    points = generate_control_points(42, 3, "pastel", 1.0)
    assert len(points) == 3
    for point, expected in zip(points, EXPECTED_SEED_42):
        assert point.color == expected["color"]
        for name, value in expected.items():
            if name == "color":
                continue
            assert getattr(point, name) == pytest.approx(value, rel=1e-12, abs=1e-15), name


@pytest.mark.parametrize("seed", [1, 42, 777, 999999])
@pytest.mark.parametrize("count", [2, 3, 4])
def test_generation_is_deterministic(seed, count):
    a = generate_control_points(seed, count, "vibrant", 1.3)
    b = generate_control_points(seed, count, "vibrant", 1.3)
    assert a == b


@pytest.mark.parametrize("count", [2, 3, 4])
def test_point_count_matches_request(count):
    for seed in range(1, 40):
        assert len(generate_control_points(seed, count, "ocean", 1.0)) == count


@pytest.mark.parametrize("scale", [0.5, 1.0, 1.5, 2.0])
def test_base_positions_within_spread(scale):
    spread = spread_distance(scale)
    for seed in range(1, 60):
        for pt in generate_control_points(seed, 4, "aurora", scale):
            dist = math.hypot(pt.base_x - 0.5, pt.base_y - 0.5)
            assert 0.6 * spread - 1e-12 <= dist <= spread + 1e-12


def test_points_occupy_distinct_sectors():
    points = generate_control_points(9, 4, "neon", 1.0)
    angles = sorted(math.atan2(p.base_y - 0.5, p.base_x - 0.5) % (2 * math.pi) for p in points)
    gaps = [b - a for a, b in zip(angles, angles[1:])]
    assert all(gap == pytest.approx(math.pi / 2) for gap in gaps)


def test_motion_parameter_ranges():
    for seed in range(1, 30):
        for pt in generate_control_points(seed, 4, "warm", 1.0):
            assert 0 <= pt.angle < 2 * math.pi
            assert 0.08 <= pt.radius < 0.25
            assert -1 <= pt.drift_vx < 1
            assert -1 <= pt.drift_vy < 1
            assert 0 <= pt.breathe_phase < 2 * math.pi
            assert 0.3 <= pt.wave_freq < 0.8
            assert 0 <= pt.wave_phase < 2 * math.pi
            assert 0.3 <= abs(pt.orbit_speed) < 0.8


def test_orbit_direction_varies():
    signs = {
        math.copysign(1, pt.orbit_speed)
        for seed in range(1, 20)
        for pt in generate_control_points(seed, 4, "cool", 1.0)
    }
    assert signs == {1.0, -1.0}


def test_scale_does_not_change_colors_or_motion():
    near = generate_control_points(42, 3, "pastel", 0.5)
    far = generate_control_points(42, 3, "pastel", 2.0)
    for a, b in zip(near, far):
        assert a.color == b.color
        assert a.orbit_speed == b.orbit_speed
        assert a.base_x != b.base_x


def test_unknown_palette_degrades_to_empty():
    assert generate_control_points(42, 3, "nope", 1.0) == []
    assert generate_control_points(42, 3, "sakura", 1.0) == []


def test_control_points_are_immutable():
    pt = generate_control_points(1, 2, "earth", 1.0)[0]
    assert isinstance(pt, ControlPoint)
    with pytest.raises(FrozenInstanceError):
        pt.base_x = 0.1

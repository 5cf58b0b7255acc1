"""Tests for the parameter bundle and its coercion rules."""

import pytest

from mesh_core.params import (
    MESH_ANIMATIONS, MESH_BLEND_MODES, SEED_RANGE, MeshParams, random_seed,
)


def test_defaults_match_configurator():
    p = MeshParams()
    assert (p.seed, p.points, p.palette, p.animation) == (42, 3, "pastel", "drift")
    assert (p.speed, p.blur, p.scale, p.opacity) == (1.0, 100.0, 1.0, 0.8)
    assert (p.blend, p.bg) == ("normal", "000000")


def test_from_mapping_parses_strings():
    p = MeshParams.from_mapping({
        "seed": "1234", "points": "4", "palette": "ocean", "animation": "orbit",
        "speed": "2.5", "blur": "60", "scale": "1.5", "opacity": "0.5",
        "blend": "screen", "bg": "#FFAA00",
    })
    assert p == MeshParams(
        seed=1234, points=4, palette="ocean", animation="orbit", speed=2.5,
        blur=60.0, scale=1.5, opacity=0.5, blend="screen", bg="ffaa00",
    )


def test_missing_values_use_defaults():
    assert MeshParams.from_mapping({}) == MeshParams()


@pytest.mark.parametrize("raw", ["abc", "", "nan", "inf"])
def test_unparseable_numbers_fall_back(raw):
    assert MeshParams.from_mapping({"blur": raw}).blur == 100.0


@pytest.mark.parametrize("field, raw, expected", [
    ("points", "9", 4),
    ("points", "1", 2),
    ("seed", "0", 1),
    ("seed", "5000000", 999999),
    ("speed", "10", 3.0),
    ("blur", "5", 20.0),
    ("blur", "500", 200.0),
    ("scale", "0.1", 0.5),
    ("opacity", "1.7", 1.0),
    ("opacity", "-1", 0.0),
])
def test_values_are_clamped(field, raw, expected):
    assert getattr(MeshParams.from_mapping({field: raw}), field) == expected


def test_fractional_seed_truncates():
    assert MeshParams.from_mapping({"seed": "42.9"}).seed == 42


def test_unknown_choices_fall_back():
    p = MeshParams.from_mapping({"animation": "spin", "blend": "difference", "bg": "zzz"})
    assert p.animation == "drift"
    assert p.blend == "normal"
    assert p.bg == "000000"


def test_unknown_palette_passes_through():
    assert MeshParams.from_mapping({"palette": "twilight"}).palette == "twilight"


def test_structural_key_and_helpers():
    p = MeshParams(seed=7, points=2, palette="earth", scale=1.2, bg="102030")
    assert p.structural_key == (7, 2, "earth", 1.2)
    assert p.bg_rgb == (16, 32, 48)
    assert p.replace(speed=2.0).structural_key == p.structural_key
    assert p.replace(seed=8).structural_key != p.structural_key
    assert MeshParams(animation="none").is_static
    assert not MeshParams(animation="wave").is_static


def test_option_lists():
    assert "none" in MESH_ANIMATIONS
    assert MESH_BLEND_MODES == ["normal", "screen", "multiply", "overlay"]


def test_random_seed_in_range():
    for _ in range(50):
        assert SEED_RANGE[0] <= random_seed() <= SEED_RANGE[1]


@pytest.mark.parametrize("bad", ["#fff", "fff", "#000000", "12345g", ""])
def test_direct_construction_rejects_bad_background(bad):
    with pytest.raises(ValueError, match="6-digit hex"):
        MeshParams(bg=bad)


def test_replace_rejects_bad_background():
    with pytest.raises(ValueError):
        MeshParams().replace(bg="#ffffff")


def test_uppercase_background_accepted_directly():
    assert MeshParams(bg="FFAA00").bg_rgb == (255, 170, 0)

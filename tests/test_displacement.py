import math

import numpy as np
import pytest

from disc_world import config as DEFAULTS
from disc_world import displacement
from disc_world.mesh import build_cylinder
from disc_world.rng import SeededRandom


# --- Radial fade ---

def test_fade_endpoints_and_monotonicity():
    assert displacement.fade(0.0, 0.4) == 1.0
    assert displacement.fade(1.0, 0.4) == 0.0
    assert displacement.fade(1.7, 0.5) == 0.0
    values = displacement.fade(np.linspace(0.0, 1.5, 200), 0.4)
    assert np.all(np.diff(values) <= 0.0)


def test_fade_rejects_non_positive_exponent():
    with pytest.raises(ValueError):
        displacement.fade(0.5, 0.0)


# --- Rim wall ---

@pytest.fixture(scope="module")
def small_wall():
    return displacement.build_rim_wall(10.05, 3.2, radial_segments=32, height_segments=6)


def test_rim_wall_offsets_are_seamless():
    y = np.linspace(-1.6, 1.6, 9)
    at_zero = displacement.rim_wall_radial_offset(np.zeros_like(y), y)
    at_two_pi = displacement.rim_wall_radial_offset(np.full_like(y, 2 * np.pi - 1e-9), y)
    np.testing.assert_allclose(at_zero, at_two_pi, atol=1e-7)


def test_rim_wall_seam_columns_coincide(small_wall):
    grid = small_wall.positions.reshape(7, 33, 3)
    np.testing.assert_allclose(grid[:, 0], grid[:, -1], atol=1e-9)


def test_rim_wall_radius_matches_offset_field(small_wall):
    row = np.arange(small_wall.vertex_count) // 33
    y0 = -(row / 6) * 3.2 + 1.6
    positions = small_wall.positions
    theta = np.arctan2(positions[:, 2], positions[:, 0])
    expected = 10.05 + displacement.rim_wall_radial_offset(theta, y0)
    np.testing.assert_allclose(np.hypot(positions[:, 0], positions[:, 2]), expected, atol=1e-9)


def test_rim_wall_sits_on_disc(small_wall):
    height_ratio = small_wall.fields['height_ratio']
    bottom = height_ratio == 0.0
    jitter_amplitude = DEFAULTS.RIM_WALL_JITTER[0]
    assert np.all(np.abs(small_wall.positions[bottom, 1] - DEFAULTS.ORNAMENT_BASE_Y) <= jitter_amplitude + 1e-12)
    np.testing.assert_allclose(small_wall.fields['radius_ratio'], 1.0 - height_ratio)


def test_rim_wall_blend_fields_in_unit_range(small_wall):
    for name in ('snow_blend', 'ice_blend'):
        field = small_wall.fields[name]
        assert field.min() >= 0.0
        assert field.max() <= 1.0
    assert small_wall.fields['snow_blend'][small_wall.fields['height_ratio'] == 1.0].min() == 1.0


def test_rim_wall_rejects_fractional_theta_frequency():
    with pytest.raises(ValueError):
        displacement.build_rim_wall(10.0, 3.0, 16, 2, strata_terms=[(0.1, 3.0, 2.5, 0.0)])


def test_rim_wall_rejects_radius_within_term_amplitude():
    # Default strata + bulge can pull the wall in by up to 0.61.
    offsets = 0.3 + displacement.rim_wall_radial_offset(np.linspace(0.0, 2 * np.pi, 720), 0.0)
    assert offsets.min() < 0.0
    with pytest.raises(ValueError, match="amplitude"):
        displacement.build_rim_wall(0.3, 3.0, 32, 4)


def test_rim_wall_just_beyond_term_amplitude_is_not_reflected():
    base = build_cylinder(0.62, 0.62, 3.0, 32, 4, open_ended=True)
    wall = displacement.build_rim_wall(0.62, 3.0, 32, 4)
    along = wall.positions[:, 0] * base.positions[:, 0] + wall.positions[:, 2] * base.positions[:, 2]
    assert np.all(along > 0.0)


@pytest.mark.parametrize("kwargs", [
    {"jitter": (0.04, 17.5, 5.0)},
    {"jitter": (0.04, 17)},
    {"snow_band": (0.9, 0.6)},
    {"ice_band": (0.5, 0.5)},
])
def test_check_rim_wall_rejects_bad_tables(kwargs):
    params = dict(
        strata_terms=DEFAULTS.RIM_WALL_STRATA_TERMS, bulge_terms=DEFAULTS.RIM_WALL_BULGE_TERMS,
        jitter=DEFAULTS.RIM_WALL_JITTER, snow_band=DEFAULTS.RIM_WALL_SNOW_BAND, ice_band=DEFAULTS.RIM_WALL_ICE_BAND,
    )
    params.update(kwargs)
    with pytest.raises(ValueError):
        displacement.check_rim_wall(10.05, **params)


# --- Ornament field ---

def _ring(count=80):
    return displacement.OrnamentRing(count, 10.05, 1.4, 3.8, 0.22, 0.55)


def test_ornament_draw_order_matches_replay():
    ring = _ring()
    replay = SeededRandom(42)
    instance = displacement.build_ornament(ring, 0, 0, SeededRandom(42))
    expected_angle = 0.0 + replay.range(-0.05, 0.05)
    expected_height = replay.range(1.4, 3.8)
    expected_base = replay.range(0.22, 0.55)
    expected_sides = 3 + math.floor(replay.next() * 4)
    assert instance.angle == expected_angle
    assert instance.height == expected_height
    assert instance.base_radius == expected_base
    assert instance.sides == expected_sides


def test_ornament_consumes_fixed_number_of_draws():
    rng = SeededRandom(7)
    instance = displacement.build_ornament(_ring(), 0, 3, rng)
    assert instance.mesh.vertex_count == 4 * instance.sides + 3
    assert rng.draws == 4 + 3 * instance.mesh.vertex_count + 4


def test_ornament_tip_is_not_spread_sideways():
    instance = displacement.build_ornament(_ring(), 0, 5, SeededRandom(99))
    tip = instance.mesh.positions[:instance.sides + 1]
    np.testing.assert_array_equal(tip[:, 0], 0.0)
    np.testing.assert_array_equal(tip[:, 2], 0.0)
    assert np.all(np.abs(tip[:, 1] - instance.height / 2) <= instance.height * 0.05)


def test_ornament_angles_stay_near_slots():
    ring = _ring()
    instances = displacement.build_ornament_field([ring], SeededRandom(42))
    assert len(instances) == 80
    for instance in instances:
        slot = instance.index / 80 * 2 * np.pi
        assert abs(instance.angle - slot) <= 0.05
        assert abs(instance.distance - ring.radius) <= 0.35
        assert 0.0 <= instance.yaw < 2 * np.pi
        assert abs(instance.roll) <= 0.2
        assert abs(instance.pitch) <= 0.07
        assert 3 <= instance.sides <= 6


def test_ornament_field_is_reproducible():
    rings = [_ring(12), displacement.OrnamentRing(9, 9.5, 0.25, 1.5, 0.07, 0.22)]
    first = displacement.build_ornament_field(rings, SeededRandom(42))
    second = displacement.build_ornament_field(rings, SeededRandom(42))
    assert len(first) == 21
    for a, b in zip(first, second):
        np.testing.assert_array_equal(a.mesh.positions, b.mesh.positions)
        assert (a.angle, a.yaw, a.material) == (b.angle, b.yaw, b.material)


def test_ornament_material_follows_height_band():
    for instance in displacement.build_ornament_field([_ring(40)], SeededRandom(3)):
        if instance.normalized_height > 0.65:
            assert instance.material == 3
        elif instance.normalized_height <= 0.18:
            assert instance.material == 0


def test_ornament_world_transform():
    instance = displacement.build_ornament(_ring(), 0, 0, SeededRandom(42))
    np.testing.assert_allclose(instance.position[1], DEFAULTS.ORNAMENT_BASE_Y + instance.height / 2)
    world = instance.world_positions()
    assert world.shape == instance.mesh.positions.shape
    np.testing.assert_allclose(np.linalg.norm(instance.world_normals(), axis=1),
                               np.linalg.norm(instance.mesh.normals, axis=1))


@pytest.mark.parametrize("args", [
    (0, 10.0, 1.0, 2.0, 0.1, 0.2),
    (5, 10.0, 2.0, 1.0, 0.1, 0.2),
    (5, 10.0, 1.0, 2.0, 0.3, 0.2),
    (5, 0.0, 1.0, 2.0, 0.1, 0.2),
])
def test_invalid_rings_raise(args):
    with pytest.raises(ValueError):
        displacement.OrnamentRing(*args)


def test_ring_config_missing_keys_raise():
    with pytest.raises(ValueError, match="ring_radius_offset"):
        displacement.OrnamentRing.from_config({"count": 3}, 10.0)


# --- Underside ---

def _bedrock_layer():
    return dict(DEFAULTS.UNDERSIDE_LAYERS[0])


def test_underside_centre_hangs_deepest_term_value():
    layer = _bedrock_layer()
    mesh = displacement.build_underside_layer(
        "bedrock", 9.9, 32, 8, layer['terms'], layer['bias'], layer['scale'], layer['fade_exponent'],
        offset_y=layer['offset_y'],
    )
    # At x = z = 0 only the phases contribute.
    total = math.sin(0.4) * math.cos(0.8) * 0.9
    total += 0.45 * math.sin(1.2) + 0.22 * math.sin(-0.7) + 0.10 * math.sin(2.1)
    expected_hang = max(0.0, total + 0.6) * 3.0
    assert mesh.fields['hang'][0] == pytest.approx(expected_hang)
    assert mesh.positions[0, 1] == pytest.approx(-0.1 - expected_hang)


def test_underside_rim_is_flush_with_offset():
    mesh = displacement.build_underside_layer(
        "crevice", 7.8, 24, 6, DEFAULTS.UNDERSIDE_LAYERS[1]['terms'], 0.4, 2.5, 0.5,
        offset_y=-0.12, drop=0.3,
    )
    rim = mesh.positions[-25:]
    np.testing.assert_allclose(rim[:, 1], -0.12 - 0.3, atol=1e-5)
    assert np.all(mesh.positions[:, 1] <= -0.12 - 0.3 + 1e-9)


def test_underside_zero_scale_is_flat():
    mesh = displacement.build_underside_layer("flat", 5.0, 16, 4, [("wave", 1.0, 1.0, 0.0, 1.0)], 0.5, 0.0, 0.4)
    np.testing.assert_array_equal(mesh.positions[:, 1], 0.0)
    np.testing.assert_array_equal(mesh.fields['depth_shade'], 0.0)


def test_underside_rejects_bad_parameters():
    terms = [("wave", 1.0, 1.0, 0.0, 1.0)]
    with pytest.raises(ValueError):
        displacement.build_underside_layer("bad", 5.0, 16, 4, terms, 0.5, -1.0, 0.4)
    with pytest.raises(ValueError):
        displacement.build_underside_layer("bad", 5.0, 16, 4, terms, 0.5, 1.0, 0.0)
    with pytest.raises(ValueError):
        displacement.build_underside_layer("bad", 5.0, 16, 4, [("ridge", 1.0, 1.0, 0.0, 1.0)], 0.5, 1.0, 0.4)


@pytest.mark.parametrize("overrides", [
    {"segments": 2},
    {"rings": 0},
    {"scale": -1.0},
    {"fade_exponent": 0.0},
    {"radius_factor": 0.0},
    {"terms": [("ridge", 1.0, 1.0, 0.0, 1.0)]},
    {"terms": []},
])
def test_check_underside_layer_rejects_bad_values(overrides):
    with pytest.raises(ValueError):
        displacement.check_underside_layer(dict(_bedrock_layer(), **overrides))


def test_check_underside_layer_names_missing_key():
    layer = _bedrock_layer()
    del layer['rings']
    with pytest.raises(ValueError, match="rings"):
        displacement.check_underside_layer(layer)


def test_check_underside_layer_accepts_defaults():
    for layer in DEFAULTS.UNDERSIDE_LAYERS:
        displacement.check_underside_layer(layer)


def test_build_underside_builds_each_layer():
    meshes = displacement.build_underside(DEFAULTS.UNDERSIDE_LAYERS, 10.0)
    assert [m.name for m in meshes] == ["bedrock", "crevice"]
    assert meshes[0].vertex_count == 1 + 48 * 161
    assert meshes[1].vertex_count == 1 + 36 * 121
    assert meshes[1].positions[:, 1].max() <= -0.42 + 1e-9

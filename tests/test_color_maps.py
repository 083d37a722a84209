import numpy as np
import pytest

from disc_world import color_maps
from disc_world import config as DEFAULTS
from disc_world import projection


@pytest.mark.parametrize("value, expected", [
    (1.0, color_maps.MATERIAL_ID_SNOW),
    (0.66, color_maps.MATERIAL_ID_SNOW),
    (0.65, color_maps.MATERIAL_ID_ICE),
    (0.39, color_maps.MATERIAL_ID_ICE),
    (0.38, color_maps.MATERIAL_ID_ROCK),
    (0.19, color_maps.MATERIAL_ID_ROCK),
    (0.18, color_maps.MATERIAL_ID_SHADOW_ROCK),
    (0.0, color_maps.MATERIAL_ID_SHADOW_ROCK),
])
def test_band_thresholds(value, expected):
    assert color_maps.classify_band(value) == expected


def test_classification_is_total_and_monotonic():
    ids = color_maps.classify_band(np.linspace(0.0, 1.0, 1001))
    assert ids.dtype == np.uint8
    assert set(np.unique(ids)) == {0, 1, 2, 3}
    assert np.all(np.diff(ids.astype(int)) >= 0)


def test_classification_rejects_out_of_range():
    with pytest.raises(ValueError):
        color_maps.classify_band(1.2)
    with pytest.raises(ValueError):
        color_maps.classify_band(np.array([0.5, -0.01]))


def test_custom_bands():
    bands = {"snow": 0.9, "ice": 0.5, "rock": 0.1}
    assert color_maps.classify_band(0.8, bands) == color_maps.MATERIAL_ID_ICE


def test_normalize_in_range():
    assert color_maps.normalize_in_range(2.6, 1.4, 3.8) == pytest.approx(0.5)
    with pytest.raises(ValueError):
        color_maps.normalize_in_range(4.0, 1.4, 3.8)
    with pytest.raises(ValueError):
        color_maps.normalize_in_range(1.0, 2.0, 2.0)


def test_smoothstep_and_mix():
    assert color_maps.smoothstep(0.0, 1.0, -1.0) == 0.0
    assert color_maps.smoothstep(0.0, 1.0, 0.5) == 0.5
    assert color_maps.smoothstep(0.0, 1.0, 2.0) == 1.0
    np.testing.assert_allclose(color_maps.mix([0.0, 1.0], [1.0, 3.0], 0.25), [0.25, 1.5])


def test_material_lut_matches_names():
    lut = color_maps.create_material_color_lut()
    assert lut.shape == (len(color_maps.MATERIAL_NAMES), 3)
    assert tuple(lut[color_maps.MATERIAL_ID_SNOW]) == (0xee, 0xf8, 0xff)
    colors = color_maps.get_material_color_array(np.array([0, 3]), lut)
    assert colors.shape == (2, 3)
    assert color_maps.material_name(color_maps.MATERIAL_ID_ICE) == "ice"


def test_rim_wall_colors_hit_endpoints():
    colors = color_maps.get_rim_wall_colors(np.array([0.0, 1.0]), np.array([0.0, 0.0]))
    np.testing.assert_allclose(colors[0], np.asarray(color_maps.MATERIALS["rock"]["color"]) / 255.0)
    np.testing.assert_allclose(colors[1], np.asarray(color_maps.MATERIALS["snow"]["color"]) / 255.0)


def test_underside_colors_darken_with_depth():
    colors = color_maps.get_underside_colors(np.array([0.0, 1.0]))
    assert colors[1].sum() < colors[0].sum()


# --- Disc top ---

def test_outside_disc_is_transparent():
    rgba = color_maps.shade_disc_top(np.array([0.0, 0.95]), np.array([0.0, 0.95]))
    np.testing.assert_array_equal(rgba, 0.0)


def test_circle_clip_follows_disc_radius_fraction():
    u = np.array([0.5, 0.999, 1.001, 0.5 + 0.36, 0.5 + 0.35])
    v = np.array([0.5, 0.5, 0.5, 0.5 + 0.36, 0.5 + 0.35])
    rgba = color_maps.shade_disc_top(u, v)
    inside = projection.disc_radius_fraction(u, v) <= 0.5
    np.testing.assert_array_equal(rgba[:, 3] > 0, inside)
    np.testing.assert_array_equal(inside, [True, True, False, False, True])


def test_disc_edge_is_darkened_outer_ocean():
    rgba = color_maps.shade_disc_top(1.0, 0.5)
    np.testing.assert_allclose(rgba[:3], np.asarray(DEFAULTS.OCEAN_OUTER_RGB) * 0.4)
    assert rgba[3] == 1.0


def test_centre_is_inner_ocean():
    rgba = color_maps.shade_disc_top(0.5, 0.5)
    np.testing.assert_allclose(rgba, list(DEFAULTS.OCEAN_INNER_RGB) + [1.0])


def test_texture_mixes_over_ocean():
    white = np.full((4, 4, 4), 255, dtype=np.uint8)
    rgba = color_maps.shade_disc_top(0.5, 0.5, texture=white)
    expected = np.asarray(DEFAULTS.OCEAN_INNER_RGB) * 0.07 + 0.93
    np.testing.assert_allclose(rgba[:3], expected)
    assert rgba[3] == pytest.approx(1.0)


def test_night_darkens_surface():
    day = color_maps.shade_disc_top(0.5, 0.5)
    night = color_maps.shade_disc_top(0.5, 0.5, night_amount=1.0)
    expected = np.asarray(DEFAULTS.OCEAN_INNER_RGB) * 0.06 + np.asarray(DEFAULTS.NIGHT_GLOW_RGB)
    np.testing.assert_allclose(night[:3], expected)
    assert np.all(night[:3] < day[:3])


def test_sample_texture_at_pixel_centres():
    texture = np.array([
        [[255, 0, 0], [0, 255, 0]],
        [[0, 0, 255], [255, 255, 255]],
    ], dtype=np.uint8)
    # v = 1 is the top row.
    sample = color_maps.sample_texture(texture, np.array([0.25, 0.75, 0.25]), np.array([0.75, 0.75, 0.25]))
    np.testing.assert_allclose(sample, [[1, 0, 0], [0, 1, 0], [0, 0, 1]])


def test_sample_texture_clamps_to_edge():
    texture = np.array([[[0.2], [0.8]]])
    sample = color_maps.sample_texture(texture, np.array([-0.5, 1.5]), np.array([0.5, 0.5]))
    np.testing.assert_allclose(sample[:, 0], [0.2, 0.8])


def test_disc_top_color_array():
    image = color_maps.get_disc_top_color_array(32)
    assert image.shape == (32, 32, 4)
    assert image.dtype == np.uint8
    assert image[0, 0, 3] == 0
    assert image[16, 16, 3] == 255

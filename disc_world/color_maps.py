# disc_world/color_maps.py

"""
================================================================================
SURFACE CLASSIFICATION & COLOR MAPPING
================================================================================
This module turns the scalar fields produced by the displacement engine into
shading inputs: discrete material categories for the ornament peaks,
continuous blend weights for the wall and underside, material colors, and the
composited color of the disc-top map surface.

It is designed to be a pure, stateless utility with no rendering dependencies,
so any front end can consume its output.
================================================================================
"""
import numpy as np
from scipy.ndimage import map_coordinates

from . import config as DEFAULTS
from . import projection

# --- Material ID Constants ---
MATERIAL_ID_SHADOW_ROCK = 0
MATERIAL_ID_ROCK = 1
MATERIAL_ID_ICE = 2
MATERIAL_ID_SNOW = 3
MATERIAL_ID_BEDROCK = 4
MATERIAL_ID_CREVICE = 5
MATERIAL_ID_DISC_BODY = 6

MATERIAL_NAMES = ["shadow_rock", "rock", "ice", "snow", "bedrock", "crevice", "disc_body"]

# Surface properties for each material, indexed by material ID.
MATERIALS = {
    "shadow_rock": {"color": (0x2a, 0x3a, 0x48), "roughness": 0.85, "metalness": 0.05, "opacity": 1.0},
    "rock": {"color": (0x4a, 0x60, 0x70), "roughness": 0.75, "metalness": 0.08, "opacity": 1.0},
    "ice": {"color": (0x88, 0xc4, 0xe0), "roughness": 0.22, "metalness": 0.32, "opacity": 0.90},
    "snow": {"color": (0xee, 0xf8, 0xff), "roughness": 0.40, "metalness": 0.18, "opacity": 1.0},
    "bedrock": {"color": (0x2a, 0x1c, 0x10), "roughness": 0.97, "metalness": 0.02, "opacity": 1.0},
    "crevice": {"color": (0x14, 0x0b, 0x04), "roughness": 0.99, "metalness": 0.0, "opacity": 1.0},
    "disc_body": {"color": (0x0f, 0x25, 0x35), "roughness": 0.9, "metalness": 0.05, "opacity": 1.0},
}


# --- Interpolation Helpers ---
def smoothstep(edge0: float, edge1: float, x):
    """Hermite interpolation between two edges, clamped to [0, 1]."""
    t = np.clip((np.asarray(x, dtype=float) - edge0) / (edge1 - edge0), 0.0, 1.0)
    result = t * t * (3.0 - 2.0 * t)
    return float(result) if result.ndim == 0 else result


def mix(a, b, t):
    "Linear interpolation, broadcasting over color channels."
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    t = np.asarray(t, dtype=float)
    return a * (1.0 - t) + b * t


def normalize_in_range(value, lo: float, hi: float):
    """
    Position of value within [lo, hi] as a fraction. Values that land outside
    [0, 1] mean the shape or ring was misconfigured.
    """
    if not hi > lo:
        raise ValueError(f"Range needs hi > lo, got [{lo}, {hi}]")
    normalized = (np.asarray(value, dtype=float) - lo) / (hi - lo)
    if np.any(normalized < 0.0) or np.any(normalized > 1.0):
        raise ValueError(f"Value {value} lies outside its configured range [{lo}, {hi}]")
    return float(normalized) if normalized.ndim == 0 else normalized


# --- Classification ---
def classify_band(normalized_height, bands: dict = None):
    """
    Classifies normalized heights into material IDs. Bands are checked from
    high to low and the first match wins:
      > snow -> snow, > ice -> ice, > rock -> rock, otherwise shadow rock.
    """
    bands = bands or DEFAULTS.MATERIAL_BANDS
    values = np.asarray(normalized_height, dtype=float)
    if np.any(values < 0.0) or np.any(values > 1.0):
        raise ValueError(f"Normalized heights must lie in [0, 1], got {normalized_height}")

    conditions = [values > bands["snow"], values > bands["ice"], values > bands["rock"]]
    choices = [MATERIAL_ID_SNOW, MATERIAL_ID_ICE, MATERIAL_ID_ROCK]
    ids = np.select(conditions, choices, default=MATERIAL_ID_SHADOW_ROCK).astype(np.uint8)
    return int(ids) if ids.ndim == 0 else ids


def material_name(material_id: int) -> str:
    return MATERIAL_NAMES[material_id]


# --- Color Lookup Table (LUT) Generation ---
def create_material_color_lut() -> np.ndarray:
    """Creates a LUT where the index is the material ID and the value is the RGB color."""
    return np.array([MATERIALS[name]["color"] for name in MATERIAL_NAMES], dtype=np.uint8)


def get_material_color_array(material_ids: np.ndarray, material_lut: np.ndarray) -> np.ndarray:
    """Converts an integer material map into RGB colors using a pre-computed LUT."""
    return material_lut[np.asarray(material_ids, dtype=np.intp)]


def blend_colors(base_rgb, over_rgb, weights: np.ndarray) -> np.ndarray:
    """Per-vertex blend of two material colors by a continuous weight in [0, 1]."""
    weights = np.asarray(weights, dtype=float)[..., np.newaxis]
    return mix(np.asarray(base_rgb) / 255.0, np.asarray(over_rgb) / 255.0, weights)


def get_rim_wall_colors(snow_blend: np.ndarray, ice_blend: np.ndarray) -> np.ndarray:
    """Rock shading blended towards ice by the strata field, then towards snow by height."""
    rock_to_ice = blend_colors(MATERIALS["rock"]["color"], MATERIALS["ice"]["color"], ice_blend)
    snow = np.asarray(MATERIALS["snow"]["color"]) / 255.0
    return mix(rock_to_ice, snow, np.asarray(snow_blend)[..., np.newaxis])


def get_underside_colors(depth_shade: np.ndarray, layer: str = "bedrock") -> np.ndarray:
    """Deeper hanging rock darkens towards the crevice color."""
    return blend_colors(MATERIALS[layer]["color"], MATERIALS["crevice"]["color"], depth_shade)


# --- Disc Top Compositing ---
def sample_texture(texture: np.ndarray, u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """
    Bilinear, clamp-to-edge sampling of an (H, W, C) image at texture
    coordinates. v = 1 is the top row of the image.
    """
    image = np.asarray(texture)
    if np.issubdtype(image.dtype, np.integer):
        image = image / 255.0
    image = image.astype(float)
    height, width = image.shape[:2]
    rows = (1.0 - np.asarray(v, dtype=float)) * height - 0.5
    cols = np.asarray(u, dtype=float) * width - 0.5
    coords = np.array([rows.ravel(), cols.ravel()])
    channels = [
        map_coordinates(image[..., ch], coords, order=1, mode='nearest').reshape(rows.shape)
        for ch in range(image.shape[2])
    ]
    return np.stack(channels, axis=-1)


def shade_disc_top(u, v, texture: np.ndarray = None, night_amount: float = 0.0) -> np.ndarray:
    """
    Composites the map surface color at each (u, v) as an RGBA float array.

    Samples farther than 0.5 from the centre are outside the disc and come
    back fully transparent. Inside, an ocean gradient is optionally covered
    by the map texture, mixed towards night, and darkened towards the rim.
    """
    u = np.asarray(u, dtype=float)
    v = np.asarray(v, dtype=float)
    r = np.asarray(projection.disc_radius_fraction(u, v))
    inside = r <= 0.5

    gradient = smoothstep(DEFAULTS.OCEAN_GRADIENT_BAND[0], DEFAULTS.OCEAN_GRADIENT_BAND[1], r * 2.0)
    color = mix(DEFAULTS.OCEAN_INNER_RGB, DEFAULTS.OCEAN_OUTER_RGB, np.asarray(gradient)[..., np.newaxis])
    alpha = np.ones(r.shape)

    if texture is not None:
        lo, hi = DEFAULTS.TEXTURE_UV_CLAMP
        sample = sample_texture(texture, np.clip(u, lo, hi), np.clip(v, lo, hi))
        if sample.shape[-1] == 4:
            sample_alpha = sample[..., 3]
            sample = sample[..., :3]
        else:
            sample_alpha = np.ones(r.shape)
        color = mix(color, sample, DEFAULTS.TEXTURE_MIX)
        alpha = mix(alpha, sample_alpha, DEFAULTS.TEXTURE_MIX)

    night = color * DEFAULTS.NIGHT_SCALE + np.asarray(DEFAULTS.NIGHT_GLOW_RGB)
    color = mix(color, night, night_amount)

    edge = smoothstep(DEFAULTS.EDGE_DARKEN_BAND[0], DEFAULTS.EDGE_DARKEN_BAND[1], r)
    color = color * (1.0 - np.asarray(edge)[..., np.newaxis] * DEFAULTS.EDGE_DARKEN_STRENGTH)

    rgba = np.concatenate((color, alpha[..., np.newaxis]), axis=-1)
    rgba[~inside] = 0.0
    return rgba


def get_disc_top_color_array(resolution: int, texture: np.ndarray = None, night_amount: float = 0.0) -> np.ndarray:
    """
    Renders the disc top to a (resolution, resolution, 4) uint8 RGBA image,
    sampling at pixel centres. Row 0 is the top of the image (v = 1).
    """
    centres = (np.arange(resolution) + 0.5) / resolution
    u_grid, v_grid = np.meshgrid(centres, centres[::-1])
    rgba = shade_disc_top(u_grid, v_grid, texture, night_amount)
    return (np.clip(rgba, 0.0, 1.0) * 255).astype(np.uint8)

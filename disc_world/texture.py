# disc_world/texture.py

"""
================================================================================
WORLD MAP TEXTURE SOURCE
================================================================================
Provides the image sampled by the disc top. A real map image can be loaded
from disk; when none is available a stylized placeholder is drawn
procedurally: a radial ocean gradient, four continent blobs and a polar ice
cap, all in azimuthal-equidistant layout (pole at the centre).

Data Contract:
---------------
- Inputs: An optional image path and a logger.
- Outputs: Pillow RGBA images, convertible to NumPy arrays for sampling.
- Side Effects: Reads an image file when a path is given.
================================================================================
"""
import logging

import numpy as np
from PIL import Image

from . import config as DEFAULTS

# Reference canvas the placeholder layout is designed on.
_REFERENCE_SIZE = 1024.0

OCEAN_STOPS = [
    (0.0, (0x1b, 0x64, 0x94)),
    (0.55, (0x0f, 0x44, 0x70)),
    (0.85, (0x08, 0x2e, 0x52)),
    (1.0, (0x04, 0x1c, 0x38)),
]
OCEAN_RADIUS = 510.0

# Continent blobs: centre, radii and rotation on the reference canvas.
CONTINENTS = [
    {"cx": 430, "cy": 340, "rx": 80, "ry": 110, "rot": -0.3, "color": (0x3d, 0x7a, 0x3d)},
    {"cx": 300, "cy": 440, "rx": 60, "ry": 80, "rot": 0.2, "color": (0x4a, 0x8a, 0x2a)},
    {"cx": 590, "cy": 360, "rx": 90, "ry": 75, "rot": 0.5, "color": (0x5a, 0x8a, 0x3a)},
    {"cx": 625, "cy": 495, "rx": 50, "ry": 45, "rot": -0.1, "color": (0x6a, 0xaa, 0x4a)},
]
# Continent edges fade to this alpha.
CONTINENT_EDGE_ALPHA = 0x88 / 255.0

ICE_CAP_RADIUS = 65.0
ICE_CAP_INNER = (230, 245, 255, 0.95)
ICE_CAP_OUTER = (200, 230, 255, 0.0)


def _layer(rgb: np.ndarray, alpha: np.ndarray) -> Image.Image:
    rgba = np.concatenate((rgb, alpha[..., np.newaxis]), axis=-1)
    return Image.fromarray(np.clip(np.round(rgba * 255), 0, 255).astype(np.uint8), 'RGBA')


def draw_placeholder_disc(size: int = DEFAULTS.PLACEHOLDER_TEXTURE_SIZE) -> Image.Image:
    """Draws the fallback world map as a square RGBA image of side `size`."""
    if int(size) != size or size < 8:
        raise ValueError(f"Texture size must be an integer >= 8, got {size}")
    k = size / _REFERENCE_SIZE
    centre = size / 2.0
    coords = np.arange(size) + 0.5
    px, py = np.meshgrid(coords, coords)
    dist = np.hypot(px - centre, py - centre)

    # --- 1. Ocean ---
    t = dist / centre
    stops = [s[0] for s in OCEAN_STOPS]
    ocean_rgb = np.stack([
        np.interp(t, stops, [s[1][ch] / 255.0 for s in OCEAN_STOPS]) for ch in range(3)
    ], axis=-1)
    image = _layer(ocean_rgb, (dist <= OCEAN_RADIUS * k).astype(float))

    # --- 2. Continents ---
    for blob in CONTINENTS:
        dx = px - blob["cx"] * k
        dy = py - blob["cy"] * k
        cos_r, sin_r = np.cos(blob["rot"]), np.sin(blob["rot"])
        lx = cos_r * dx + sin_r * dy
        ly = -sin_r * dx + cos_r * dy
        rx, ry = blob["rx"] * k, blob["ry"] * k
        inside = (lx / rx) ** 2 + (ly / ry) ** 2 <= 1.0
        fall = np.clip(np.hypot(lx, ly) / max(rx, ry), 0.0, 1.0)
        alpha = (1.0 - fall * (1.0 - CONTINENT_EDGE_ALPHA)) * inside
        rgb = np.broadcast_to(np.asarray(blob["color"]) / 255.0, ocean_rgb.shape)
        image = Image.alpha_composite(image, _layer(rgb, alpha))

    # --- 3. Polar ice cap ---
    ice_t = np.clip(dist / (ICE_CAP_RADIUS * k), 0.0, 1.0)[..., np.newaxis]
    inner = np.asarray(ICE_CAP_INNER, dtype=float)
    outer = np.asarray(ICE_CAP_OUTER, dtype=float)
    ice = inner * (1.0 - ice_t) + outer * ice_t
    ice_alpha = ice[..., 3] * (dist <= ICE_CAP_RADIUS * k)
    image = Image.alpha_composite(image, _layer(ice[..., :3] / 255.0, ice_alpha))

    return image


def load_disc_texture(path: str = None, logger: logging.Logger = None) -> Image.Image:
    """
    Loads a world map image for the disc top. Falls back to the procedural
    placeholder when no path is given or the image cannot be read.
    """
    logger = logger or logging.getLogger(__name__)
    if path is None:
        logger.info("No map texture configured, drawing placeholder disc.")
        return draw_placeholder_disc()
    try:
        with Image.open(path) as img:
            texture = img.convert('RGBA')
    except OSError as e:
        logger.warning(f"Could not load map texture '{path}' ({e}), drawing placeholder disc.")
        return draw_placeholder_disc()
    logger.info(f"Loaded map texture '{path}' ({texture.width}x{texture.height}).")
    return texture


def texture_to_array(texture: Image.Image) -> np.ndarray:
    """Converts a Pillow image to an (H, W, 4) uint8 array for sampling."""
    return np.asarray(texture.convert('RGBA'))

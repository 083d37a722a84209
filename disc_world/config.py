# disc_world/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the disc
world builder. These values are used if they are not explicitly provided by
the user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC WORLD.
Instead, pass a configuration dictionary to the DiscWorldGenerator instance.
================================================================================
"""

# --- Deterministic Generator ---
# The fixed seed makes the ice mountains look identical on every start.
DEFAULT_SEED = 42
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
LCG_MODULUS = 2 ** 32

# --- Disc Dimensions (scene units) ---
DISC_RADIUS = 10.0
DISC_SEGMENTS = 256
DISC_THICKNESS = 0.18
# Height of the map surface above the disc centre plane.
DISC_TOP_Y = 0.091
# Height at which ornament peaks are planted.
ORNAMENT_BASE_Y = 0.09

# --- Projection ---
# Empirically tuned margin so the map stops just short of the clipped edge.
PROJECTION_MARGIN = 0.505
# Picks south of this latitude land "beyond the ice wall".
SOUTHERN_CUTOFF_LAT = -60.0

# --- Rim Wall (continuous cliff variant) ---
RIM_WALL_RADIUS_OFFSET = 0.05
RIM_WALL_HEIGHT = 3.2
RIM_WALL_RADIAL_SEGMENTS = 256
RIM_WALL_HEIGHT_SEGMENTS = 48

# (amplitude, y frequency, theta frequency, phase). Theta frequencies MUST be
# integers so the wall closes without a seam at theta = 2*pi.
RIM_WALL_STRATA_TERMS = [
    (0.12, 3.1, 2, 0.0),
    (0.06, 7.3, 5, 1.3),
    (0.03, 15.7, 11, 2.6),
]
# (amplitude, theta frequency, phase)
RIM_WALL_BULGE_TERMS = [
    (0.25, 3, 0.7),
    (0.10, 7, 1.9),
    (0.05, 13, 0.3),
]
# (amplitude, theta frequency, y frequency)
RIM_WALL_JITTER = (0.04, 17, 5.0)

# Normalized wall height over which snow fades in.
RIM_WALL_SNOW_BAND = (0.6, 0.9)
# Normalized strata value over which exposed ice fades in.
RIM_WALL_ICE_BAND = (0.55, 0.8)

# --- Ornament Field (discrete peaks variant) ---
# One dict per ring. 'ring_radius_offset' is relative to DISC_RADIUS.
ORNAMENT_RINGS = [
    {"count": 80, "ring_radius_offset": 0.05, "min_height": 1.4, "max_height": 3.8,
     "min_base_radius": 0.22, "max_base_radius": 0.55},
    {"count": 130, "ring_radius_offset": -0.50, "min_height": 0.25, "max_height": 1.5,
     "min_base_radius": 0.07, "max_base_radius": 0.22},
    {"count": 55, "ring_radius_offset": 0.70, "min_height": 0.3, "max_height": 1.0,
     "min_base_radius": 0.08, "max_base_radius": 0.24},
]
ORNAMENT_ANGLE_JITTER = 0.05
ORNAMENT_RADIAL_JITTER = 0.35
ORNAMENT_MIN_SIDES = 3
ORNAMENT_SIDE_CHOICES = 4
# Sideways vertex jitter as a fraction of the base radius.
ORNAMENT_SPREAD_FACTOR = 0.40
# Vertical vertex jitter as a fraction of the height.
ORNAMENT_LIFT_FACTOR = 0.05
ORNAMENT_MAX_ROLL = 0.20
ORNAMENT_MAX_PITCH = 0.07

# --- Underside (hanging bedrock) ---
# Each term is (kind, x frequency, z frequency, phase, amplitude[, z phase]).
#   'cross': sin(fx*x + phase) * cos(fz*z + z_phase)
#   'wave':  sin(fx*x + fz*z + phase)
UNDERSIDE_LAYERS = [
    {
        "name": "bedrock",
        "radius_factor": 0.99,
        "segments": 160,
        "rings": 48,
        "offset_y": -0.1,
        "bias": 0.6,
        "scale": 3.0,
        "fade_exponent": 0.4,
        "drop": 0.0,
        "terms": [
            ("cross", 1.7, 2.0, 0.4, 0.9, 0.8),
            ("wave", 3.5, -2.8, 1.2, 0.45),
            ("wave", 6.9, 5.3, -0.7, 0.22),
            ("wave", 12.3, -9.1, 2.1, 0.10),
            ("wave", 22.7, 17.3, 0.0, 0.05),
        ],
    },
    {
        "name": "crevice",
        "radius_factor": 0.78,
        "segments": 120,
        "rings": 36,
        "offset_y": -0.12,
        "bias": 0.4,
        "scale": 2.5,
        "fade_exponent": 0.5,
        "drop": 0.3,
        "terms": [
            ("cross", 2.1, 2.6, 1.0, 0.6, 0.3),
            ("wave", 4.3, -3.7, 0.0, 0.3),
            ("wave", 8.9, 7.1, 0.0, 0.15),
        ],
    },
]

# --- Material Bands (Normalized 0.0 to 1.0) ---
# Evaluated high to low, first match wins. Anything below 'rock' is shadow rock.
MATERIAL_BANDS = {
    "snow": 0.65,
    "ice": 0.38,
    "rock": 0.18,
}

# --- Disc Top Shading ---
OCEAN_INNER_RGB = (0.08, 0.30, 0.55)
OCEAN_OUTER_RGB = (0.03, 0.12, 0.32)
OCEAN_GRADIENT_BAND = (0.4, 1.0)
TEXTURE_MIX = 0.93
TEXTURE_UV_CLAMP = (0.01, 0.99)
EDGE_DARKEN_BAND = (0.42, 0.5)
EDGE_DARKEN_STRENGTH = 0.6
NIGHT_SCALE = 0.06
NIGHT_GLOW_RGB = (0.0, 0.005, 0.02)

# --- Night Transition ---
NIGHT_EASE_RATE = 0.025
AMBIENT_DAY_INTENSITY = 0.7
AMBIENT_NIGHT_DROP = 0.55
SUN_DAY_INTENSITY = 2.0
SUN_NIGHT_DROP = 1.9

# --- Placeholder Texture ---
PLACEHOLDER_TEXTURE_SIZE = 1024
PREVIEW_RESOLUTION = 512

# disc_world/displacement.py

"""
================================================================================
DISPLACEMENT ENGINE
================================================================================
This module turns the smooth base shapes into rough terrain. Three variants
are provided:

  - Rim wall: a continuous cliff. Radius and height are offset by periodic
    functions of (y, theta), so the wall closes with no seam.
  - Ornament field: rings of jagged cone peaks. Every random quantity is drawn
    from the injected SeededRandom in a fixed order.
  - Underside: hanging bedrock caps. A fixed-octave sum of cross terms is
    attenuated by a radial fade so the rock hangs deepest at the centre.

Data Contract:
---------------
- Inputs: Shape parameters, term tables (see config.py) and, for ornaments,
  a SeededRandom instance.
- Outputs: Frozen Mesh objects (or OrnamentInstance records) carrying
  recomputed normals and per-vertex scalar fields for the shading stage.
- Side Effects: Ornament builders advance the generator.
- Invariants: No vertex is ever discarded. For a given generator state the
  output is bit-for-bit reproducible.
================================================================================
"""

from dataclasses import dataclass

import numpy as np
from scipy.spatial.transform import Rotation
from tqdm import tqdm

from . import color_maps
from . import config as DEFAULTS
from . import noise
from .mesh import Mesh, build_cap, build_cone, build_cylinder
from .rng import SeededRandom


def fade(r, exponent: float):
    """
    Radial attenuation (1 - min(r, 1)) ** exponent. It is 1 at the centre,
    non-increasing in r and exactly 0 from r = 1 outwards.
    """
    if not exponent > 0:
        raise ValueError(f"Fade exponent must be positive, got {exponent}")
    r = np.asarray(r, dtype=float)
    base = np.clip(1.0 - np.minimum(r, 1.0), 0.0, 1.0)
    result = np.power(base, exponent)
    return float(result) if result.ndim == 0 else result


# --- Rim Wall ---

def _wall_term_arrays(strata_terms, bulge_terms):
    strata_array = np.array(strata_terms, dtype=np.float64).reshape(-1, 4)
    bulge_array = np.array(bulge_terms, dtype=np.float64).reshape(-1, 3)
    theta_frequencies = np.concatenate((strata_array[:, 2], bulge_array[:, 1]))
    if np.any(theta_frequencies != np.round(theta_frequencies)):
        raise ValueError(
            f"Rim wall theta frequencies must be integers to close the wall without a seam, got {theta_frequencies}"
        )
    return strata_array, bulge_array


def check_rim_wall(radius: float, strata_terms, bulge_terms, jitter, snow_band, ice_band):
    """
    Validates rim wall parameters and returns the packed (strata, bulge) term
    arrays. The radius must exceed the largest inward offset the terms can
    reach, otherwise vertices would be pushed through the axis.
    """
    strata_array, bulge_array = _wall_term_arrays(strata_terms, bulge_terms)
    if len(jitter) != 3:
        raise ValueError(f"Rim wall jitter needs (amplitude, theta frequency, y frequency), got {jitter}")
    if jitter[1] != round(jitter[1]):
        raise ValueError(f"Rim wall jitter theta frequency must be an integer, got {jitter[1]}")
    for name, band in (("snow", snow_band), ("ice", ice_band)):
        if len(band) != 2 or not band[0] < band[1]:
            raise ValueError(f"Rim wall {name} band needs (low, high) with low < high, got {band}")
    reach = noise.max_amplitude(strata_array, 0) + noise.max_amplitude(bulge_array, 0)
    if not radius > reach:
        raise ValueError(f"Rim wall radius {radius} must exceed its strata + bulge amplitude {reach}")
    return strata_array, bulge_array


def rim_wall_radial_offset(theta, y, strata_terms=DEFAULTS.RIM_WALL_STRATA_TERMS,
                           bulge_terms=DEFAULTS.RIM_WALL_BULGE_TERMS) -> np.ndarray:
    """The radius change (strata + bulge) applied to wall vertices at (theta, y)."""
    strata_array, bulge_array = _wall_term_arrays(strata_terms, bulge_terms)
    theta = np.atleast_1d(np.asarray(theta, dtype=np.float64))
    y = np.broadcast_to(np.asarray(y, dtype=np.float64), theta.shape).copy()
    return noise.strata(y, theta, strata_array) + noise.bulge(theta, bulge_array)


def build_rim_wall(
    radius: float,
    height: float,
    radial_segments: int = DEFAULTS.RIM_WALL_RADIAL_SEGMENTS,
    height_segments: int = DEFAULTS.RIM_WALL_HEIGHT_SEGMENTS,
    base_y: float = DEFAULTS.ORNAMENT_BASE_Y,
    strata_terms=DEFAULTS.RIM_WALL_STRATA_TERMS,
    bulge_terms=DEFAULTS.RIM_WALL_BULGE_TERMS,
    jitter=DEFAULTS.RIM_WALL_JITTER,
    snow_band=DEFAULTS.RIM_WALL_SNOW_BAND,
    ice_band=DEFAULTS.RIM_WALL_ICE_BAND,
) -> Mesh:
    """
    Builds the continuous cliff variant of the rim: an open cylinder whose
    vertices are pushed outward by strata + bulge and nudged vertically.
    The wall's undisplaced bottom edge sits at base_y.
    """
    strata_array, bulge_array = check_rim_wall(radius, strata_terms, bulge_terms, jitter, snow_band, ice_band)
    jitter_amplitude, jitter_theta_frequency, jitter_y_frequency = jitter

    mesh = build_cylinder(radius, radius, height, radial_segments, height_segments, open_ended=True, name="rim_wall")
    positions = mesh.positions.copy()
    x, y, z = positions[:, 0], positions[:, 1], positions[:, 2]

    theta = np.arctan2(z, x)
    old_radius = np.hypot(x, z)
    strata_values = noise.strata(y, theta, strata_array)
    bulge_values = noise.bulge(theta, bulge_array)
    scale = (old_radius + strata_values + bulge_values) / old_radius

    height_ratio = (y + height / 2.0) / height
    positions[:, 0] = x * scale
    positions[:, 2] = z * scale
    positions[:, 1] = y + noise.vertical_jitter(
        theta, y, jitter_amplitude, float(jitter_theta_frequency), jitter_y_frequency
    ) + base_y + height / 2.0
    mesh.positions = positions
    mesh.compute_vertex_normals()

    strata_limit = noise.max_amplitude(strata_array, 0)
    strata_norm = (strata_values + strata_limit) / (2.0 * strata_limit)
    mesh.set_field('radius_ratio', 1.0 - height_ratio)
    mesh.set_field('height_ratio', height_ratio)
    mesh.set_field('strata', strata_values)
    mesh.set_field('snow_blend', color_maps.smoothstep(snow_band[0], snow_band[1], height_ratio))
    mesh.set_field('ice_blend', color_maps.smoothstep(ice_band[0], ice_band[1], strata_norm))
    return mesh.freeze()


# --- Ornament Field ---

RING_KEYS = ("count", "ring_radius_offset", "min_height", "max_height", "min_base_radius", "max_base_radius")

@dataclass(frozen=True)
class OrnamentRing:
    """One ring of peaks: how many, where, and the ranges their sizes are drawn from."""
    count: int
    radius: float
    min_height: float
    max_height: float
    min_base_radius: float
    max_base_radius: float

    def __post_init__(self):
        if int(self.count) != self.count or self.count < 1:
            raise ValueError(f"Ring count must be a positive integer, got {self.count}")
        if not self.radius > 0:
            raise ValueError(f"Ring radius must be positive, got {self.radius}")
        if not 0 < self.min_height < self.max_height:
            raise ValueError(f"Ring heights need 0 < min < max, got [{self.min_height}, {self.max_height}]")
        if not 0 < self.min_base_radius <= self.max_base_radius:
            raise ValueError(
                f"Ring base radii need 0 < min <= max, got [{self.min_base_radius}, {self.max_base_radius}]"
            )

    @classmethod
    def from_config(cls, ring: dict, disc_radius: float) -> "OrnamentRing":
        missing = [key for key in RING_KEYS if key not in ring]
        if missing:
            raise ValueError(f"Ornament ring is missing required keys: {', '.join(missing)}")
        return cls(
            count=ring['count'],
            radius=disc_radius + ring['ring_radius_offset'],
            min_height=ring['min_height'],
            max_height=ring['max_height'],
            min_base_radius=ring['min_base_radius'],
            max_base_radius=ring['max_base_radius'],
        )


@dataclass(frozen=True)
class OrnamentInstance:
    """A single frozen peak: its drawn parameters, material and local geometry."""
    ring_index: int
    index: int
    angle: float
    height: float
    base_radius: float
    sides: int
    distance: float
    yaw: float
    roll: float
    pitch: float
    normalized_height: float
    material: int
    mesh: Mesh
    base_y: float = DEFAULTS.ORNAMENT_BASE_Y

    @property
    def position(self) -> np.ndarray:
        return np.array([
            self.distance * np.cos(self.angle),
            self.base_y + self.height / 2.0,
            self.distance * np.sin(self.angle),
        ])

    @property
    def rotation(self) -> Rotation:
        # Intrinsic X then Y then Z, matching the scene graph's Euler order.
        return Rotation.from_euler('XYZ', [self.pitch, self.yaw, self.roll])

    def world_positions(self) -> np.ndarray:
        return self.rotation.apply(self.mesh.positions) + self.position

    def world_normals(self) -> np.ndarray:
        return self.rotation.apply(self.mesh.normals)


def build_ornament(ring: OrnamentRing, ring_index: int, index: int, rng: SeededRandom,
                   base_y: float = DEFAULTS.ORNAMENT_BASE_Y) -> OrnamentInstance:
    """
    Builds one jagged peak. Draw order (fixed):
    angle jitter, height, base radius, sides, then per vertex (x, z, y) jitter,
    then radial jitter, yaw, roll and pitch.
    """
    angle = (index / ring.count) * np.pi * 2 + rng.range(-DEFAULTS.ORNAMENT_ANGLE_JITTER, DEFAULTS.ORNAMENT_ANGLE_JITTER)
    height = rng.range(ring.min_height, ring.max_height)
    base_radius = rng.range(ring.min_base_radius, ring.max_base_radius)
    sides = DEFAULTS.ORNAMENT_MIN_SIDES + int(np.floor(rng.next() * DEFAULTS.ORNAMENT_SIDE_CHOICES))

    mesh = build_cone(base_radius, height, sides, name=f"ornament_{ring_index}_{index}")
    positions = mesh.positions.copy()
    spread = base_radius * DEFAULTS.ORNAMENT_SPREAD_FACTOR
    lift = height * DEFAULTS.ORNAMENT_LIFT_FACTOR
    # Jitter vanishes at the tip and is strongest at the base.
    for v in range(mesh.vertex_count):
        vy = positions[v, 1]
        influence = 1.0 - max(0.0, (vy + height * 0.5) / height)
        positions[v, 0] += rng.range(-spread, spread) * influence
        positions[v, 2] += rng.range(-spread, spread) * influence
        positions[v, 1] = vy + rng.range(-lift, lift)
    mesh.positions = positions
    mesh.compute_vertex_normals()

    normalized_height = color_maps.normalize_in_range(height, ring.min_height, ring.max_height)
    material = color_maps.classify_band(normalized_height)
    mesh.set_field('height_ratio', np.full(mesh.vertex_count, normalized_height))

    distance = ring.radius + rng.range(-DEFAULTS.ORNAMENT_RADIAL_JITTER, DEFAULTS.ORNAMENT_RADIAL_JITTER)
    yaw = rng.range(0, np.pi * 2)
    roll = rng.range(-DEFAULTS.ORNAMENT_MAX_ROLL, DEFAULTS.ORNAMENT_MAX_ROLL)
    pitch = rng.range(-DEFAULTS.ORNAMENT_MAX_PITCH, DEFAULTS.ORNAMENT_MAX_PITCH)

    return OrnamentInstance(
        ring_index=ring_index, index=index, angle=angle, height=height,
        base_radius=base_radius, sides=sides, distance=distance,
        yaw=yaw, roll=roll, pitch=pitch,
        normalized_height=normalized_height, material=material,
        mesh=mesh.freeze(), base_y=base_y,
    )


def build_ornament_field(rings, rng: SeededRandom, base_y: float = DEFAULTS.ORNAMENT_BASE_Y,
                         progress: bool = False) -> list:
    """Builds every ring in order, instance by instance, from one advancing generator."""
    instances = []
    for ring_index, ring in enumerate(rings):
        for index in tqdm(range(ring.count), desc=f"Carving ring {ring_index}", disable=not progress):
            instances.append(build_ornament(ring, ring_index, index, rng, base_y))
    return instances


# --- Underside ---

def underside_hang(x, z, terms, bias: float, scale: float) -> np.ndarray:
    """The un-faded hang depth max(0, sum + bias) * scale at each (x, z)."""
    terms_array = terms if isinstance(terms, np.ndarray) else noise.terms_to_array(terms)
    x = np.ascontiguousarray(x, dtype=np.float64)
    z = np.ascontiguousarray(z, dtype=np.float64)
    return np.maximum(0.0, noise.cross_terms_2d(x, z, terms_array) + bias) * scale


def build_underside_layer(
    name: str,
    radius: float,
    segments: int,
    rings: int,
    terms,
    bias: float,
    scale: float,
    fade_exponent: float,
    offset_y: float = 0.0,
    drop: float = 0.0,
) -> Mesh:
    """
    Builds one hanging cap. Vertex depth below offset_y is
    hang(x, z) * fade(r) + drop, where r is the distance from the axis
    over the cap radius.
    """
    if scale < 0:
        raise ValueError(f"Underside scale must be non-negative, got {scale}")
    if not fade_exponent > 0:
        raise ValueError(f"Fade exponent must be positive, got {fade_exponent}")
    terms_array = noise.terms_to_array(terms)

    mesh = build_cap(radius, segments, rings, y=0.0, name=name)
    positions = mesh.positions.copy()
    r = mesh.fields['radius_ratio']
    hang = underside_hang(positions[:, 0], positions[:, 2], terms_array, bias, scale)
    fade_values = fade(r, fade_exponent)
    depth = hang * fade_values

    positions[:, 1] = offset_y - depth - drop
    mesh.positions = positions
    mesh.compute_vertex_normals()

    max_hang = max((noise.max_amplitude(terms_array, 4) + bias) * scale, np.finfo(float).eps)
    mesh.set_field('hang', hang)
    mesh.set_field('fade', fade_values)
    mesh.set_field('depth_shade', color_maps.smoothstep(0.0, max_hang, depth))
    return mesh.freeze()


UNDERSIDE_KEYS = ("name", "radius_factor", "segments", "rings", "offset_y", "bias", "scale", "fade_exponent", "terms")


def check_underside_layer(layer: dict):
    """Validates one underside layer config so errors surface before any geometry is built."""
    missing = [key for key in UNDERSIDE_KEYS if key not in layer]
    if missing:
        raise ValueError(f"Underside layer is missing required keys: {', '.join(missing)}")
    name = layer['name']
    if not layer['radius_factor'] > 0:
        raise ValueError(f"Underside layer '{name}' needs a positive radius factor, got {layer['radius_factor']}")
    for key, minimum in (('segments', 3), ('rings', 1)):
        if int(layer[key]) != layer[key] or layer[key] < minimum:
            raise ValueError(f"Underside layer '{name}': '{key}' must be an integer >= {minimum}, got {layer[key]}")
    if layer['scale'] < 0:
        raise ValueError(f"Underside layer '{name}' needs a non-negative scale, got {layer['scale']}")
    if not layer['fade_exponent'] > 0:
        raise ValueError(f"Underside layer '{name}' needs a positive fade exponent, got {layer['fade_exponent']}")
    if layer.get('drop', 0.0) < 0:
        raise ValueError(f"Underside layer '{name}' needs a non-negative drop, got {layer['drop']}")
    noise.terms_to_array(layer['terms'])


def build_underside(layers, disc_radius: float) -> list:
    """Builds every configured underside layer as an independent mesh."""
    meshes = []
    for layer in layers:
        meshes.append(build_underside_layer(
            name=layer['name'],
            radius=disc_radius * layer['radius_factor'],
            segments=layer['segments'],
            rings=layer['rings'],
            terms=layer['terms'],
            bias=layer['bias'],
            scale=layer['scale'],
            fade_exponent=layer['fade_exponent'],
            offset_y=layer['offset_y'],
            drop=layer.get('drop', 0.0),
        ))
    return meshes

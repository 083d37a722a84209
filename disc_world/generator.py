# disc_world/generator.py

"""
================================================================================
CORE DISC WORLD GENERATOR
================================================================================
This module contains the main DiscWorldGenerator class, responsible for
building every piece of disc geometry once, in a fixed order, from a single
seed.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): A dictionary of parameters which can override the
      internal defaults. Expected keys include 'seed', 'disc_radius', etc.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from build()):
    - A DiscWorld holding frozen meshes, ornament instances and shading
      inputs.
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same seed and configuration, the output is
  deterministic. Invalid configuration raises ValueError during
  initialization, before any geometry exists.
================================================================================
"""

import logging
import time

from . import config as DEFAULTS
from . import displacement
from . import projection
from .mesh import build_cylinder, build_plane
from .rng import SeededRandom


class DiscWorld:
    """The immutable result of a build. Consumers may read it from any thread."""

    def __init__(self, seed: int, disc_radius: float, disc_top, disc_body, rim_wall, ornaments: list, underside: list):
        self.seed = seed
        self.disc_radius = disc_radius
        self.disc_top = disc_top
        self.disc_body = disc_body
        self.rim_wall = rim_wall
        self.ornaments = tuple(ornaments)
        self.underside = tuple(underside)

    @property
    def meshes(self) -> list:
        return [self.disc_top, self.disc_body, self.rim_wall, *self.underside]

    def pick(self, x: float, z: float) -> tuple[float, float]:
        """Converts a hit on the disc-top plane (scene x, z) to (lat, lon)."""
        u, v = projection.surface_to_uv(x, z, self.disc_radius)
        return projection.unproject(u, v)

    def summary(self) -> dict:
        """Counts and content hashes for every generated shape."""
        return {
            "seed": self.seed,
            "disc_radius": self.disc_radius,
            "meshes": {
                mesh.name: {
                    "vertices": mesh.vertex_count,
                    "faces": mesh.face_count,
                    "hash": mesh.content_hash(),
                }
                for mesh in self.meshes
            },
            "ornaments": {
                "count": len(self.ornaments),
                "vertices": sum(o.mesh.vertex_count for o in self.ornaments),
                "hashes": [o.mesh.content_hash() for o in self.ornaments],
                "materials": [o.material for o in self.ornaments],
            },
        }


class DiscWorldGenerator:
    """
    Builds the procedural geometry for the flat disc world.
    This class is backend-only and does not handle any visualization.
    """
    def __init__(self, config: dict, logger: logging.Logger):
        """
        Initializes the disc world generator.

        Args:
            config (dict): User-defined parameters to override defaults.
            logger (logging.Logger): The logger instance for all output.
        """
        self.logger = logger
        self.user_config = config
        self.logger.info("DiscWorldGenerator initializing...")

        # --- Consolidate Configuration ---
        self.settings = {
            'seed': self.user_config.get('seed', DEFAULTS.DEFAULT_SEED),
            'disc_radius': self.user_config.get('disc_radius', DEFAULTS.DISC_RADIUS),
            'disc_segments': self.user_config.get('disc_segments', DEFAULTS.DISC_SEGMENTS),
            'disc_thickness': self.user_config.get('disc_thickness', DEFAULTS.DISC_THICKNESS),
            'disc_top_y': self.user_config.get('disc_top_y', DEFAULTS.DISC_TOP_Y),
            'ornament_base_y': self.user_config.get('ornament_base_y', DEFAULTS.ORNAMENT_BASE_Y),

            'rim_wall_radius_offset': self.user_config.get('rim_wall_radius_offset', DEFAULTS.RIM_WALL_RADIUS_OFFSET),
            'rim_wall_height': self.user_config.get('rim_wall_height', DEFAULTS.RIM_WALL_HEIGHT),
            'rim_wall_radial_segments': self.user_config.get('rim_wall_radial_segments', DEFAULTS.RIM_WALL_RADIAL_SEGMENTS),
            'rim_wall_height_segments': self.user_config.get('rim_wall_height_segments', DEFAULTS.RIM_WALL_HEIGHT_SEGMENTS),
            'rim_wall_strata_terms': self.user_config.get('rim_wall_strata_terms', DEFAULTS.RIM_WALL_STRATA_TERMS),
            'rim_wall_bulge_terms': self.user_config.get('rim_wall_bulge_terms', DEFAULTS.RIM_WALL_BULGE_TERMS),
            'rim_wall_jitter': self.user_config.get('rim_wall_jitter', DEFAULTS.RIM_WALL_JITTER),
            'rim_wall_snow_band': self.user_config.get('rim_wall_snow_band', DEFAULTS.RIM_WALL_SNOW_BAND),
            'rim_wall_ice_band': self.user_config.get('rim_wall_ice_band', DEFAULTS.RIM_WALL_ICE_BAND),

            'ornament_rings': self.user_config.get('ornament_rings', DEFAULTS.ORNAMENT_RINGS),
            'underside_layers': self.user_config.get('underside_layers', DEFAULTS.UNDERSIDE_LAYERS),
        }

        # --- Fail fast on configuration errors ---
        self._validate_settings()

        # --- Public Properties for easy access ---
        self.seed = self.settings['seed']
        self.disc_radius = self.settings['disc_radius']
        self.rings = [
            displacement.OrnamentRing.from_config(ring, self.disc_radius)
            for ring in self.settings['ornament_rings']
        ]

        self.logger.info(f"DiscWorldGenerator initialized with seed: {self.seed}")
        self.logger.info(
            f"Disc radius {self.disc_radius}, {len(self.rings)} ornament rings "
            f"({sum(r.count for r in self.rings)} peaks), "
            f"{len(self.settings['underside_layers'])} underside layers"
        )

    def _validate_settings(self):
        s = self.settings
        seed = s['seed']
        if isinstance(seed, bool) or not isinstance(seed, int) or not 0 <= seed < DEFAULTS.LCG_MODULUS:
            raise ValueError(f"Seed must be a 32-bit unsigned integer, got {seed!r}")
        for key in ('disc_radius', 'disc_thickness', 'rim_wall_height'):
            if not s[key] > 0:
                raise ValueError(f"'{key}' must be positive, got {s[key]}")
        for key, minimum in (('disc_segments', 3), ('rim_wall_radial_segments', 3), ('rim_wall_height_segments', 1)):
            if int(s[key]) != s[key] or s[key] < minimum:
                raise ValueError(f"'{key}' must be an integer >= {minimum}, got {s[key]}")
        displacement.check_rim_wall(
            s['disc_radius'] + s['rim_wall_radius_offset'],
            s['rim_wall_strata_terms'], s['rim_wall_bulge_terms'], s['rim_wall_jitter'],
            s['rim_wall_snow_band'], s['rim_wall_ice_band'],
        )
        if not s['ornament_rings']:
            raise ValueError("At least one ornament ring is required")
        for layer in s['underside_layers']:
            displacement.check_underside_layer(layer)

    def build_disc_top(self):
        """The square map plane. Its circular outline is applied at shading time."""
        return build_plane(
            self.disc_radius * 2, segments=2, y=self.settings['disc_top_y'], name="disc_top"
        ).freeze()

    def build_disc_body(self):
        return build_cylinder(
            self.disc_radius, self.disc_radius, self.settings['disc_thickness'],
            self.settings['disc_segments'], 1, open_ended=False, name="disc_body"
        ).freeze()

    def build_rim_wall(self):
        return displacement.build_rim_wall(
            radius=self.disc_radius + self.settings['rim_wall_radius_offset'],
            height=self.settings['rim_wall_height'],
            radial_segments=self.settings['rim_wall_radial_segments'],
            height_segments=self.settings['rim_wall_height_segments'],
            base_y=self.settings['ornament_base_y'],
            strata_terms=self.settings['rim_wall_strata_terms'],
            bulge_terms=self.settings['rim_wall_bulge_terms'],
            jitter=self.settings['rim_wall_jitter'],
            snow_band=self.settings['rim_wall_snow_band'],
            ice_band=self.settings['rim_wall_ice_band'],
        )

    def build_ornament_field(self, rng: SeededRandom, progress: bool = False) -> list:
        """
        Builds the ring peaks. Rings, instances and vertices are consumed from
        the generator strictly in order.
        """
        instances = displacement.build_ornament_field(
            self.rings, rng, self.settings['ornament_base_y'], progress=progress
        )
        for ring_index, ring in enumerate(self.rings):
            self.logger.debug(f"Ring {ring_index}: {ring.count} peaks at radius {ring.radius:.2f}")
        return instances

    def build_underside(self) -> list:
        return displacement.build_underside(self.settings['underside_layers'], self.disc_radius)

    def build(self, progress: bool = False) -> DiscWorld:
        """Builds the whole world from a fresh generator seeded with self.seed."""
        start_time = time.perf_counter()
        rng = SeededRandom(self.seed)

        disc_top = self.build_disc_top()
        disc_body = self.build_disc_body()
        self.logger.info(f"Disc built: top {disc_top.vertex_count} vertices, body {disc_body.vertex_count} vertices.")

        rim_wall = self.build_rim_wall()
        self.logger.info(f"Rim wall built: {rim_wall.vertex_count} vertices, {rim_wall.face_count} faces.")

        ornaments = self.build_ornament_field(rng, progress=progress)
        self.logger.info(f"Ornament field built: {len(ornaments)} peaks from {rng.draws} generator draws.")

        underside = self.build_underside()
        for layer in underside:
            self.logger.info(f"Underside layer '{layer.name}' built: {layer.vertex_count} vertices.")

        self.logger.info(f"Build complete in {time.perf_counter() - start_time:.2f} seconds.")
        return DiscWorld(self.seed, self.disc_radius, disc_top, disc_body, rim_wall, ornaments, underside)

# build_disc.py

"""
================================================================================
DISC WORLD BUILD SCRIPT
================================================================================
This script is a command-line tool that builds the disc world geometry from a
configuration file, logs what was generated, and writes diagnostics: a build
report (vertex counts and content hashes per shape) and, optionally, a
preview image of the shaded disc top.

Meshes themselves are not saved; every run regenerates them from the seed.
The --probe flag rebuilds the world a second time and checks that both builds
are identical and that the projection round-trips.

Usage:
    python build_disc.py --config path/to/your/config.json
================================================================================
"""
import os
import sys
import json
import logging
import argparse

import numpy as np
from PIL import Image

from disc_world import color_maps
from disc_world import config as DEFAULTS
from disc_world import projection
from disc_world import texture
from disc_world.generator import DiscWorldGenerator
from disc_world.night import NightTransition

# Number of night ticks applied before rendering a night preview.
NIGHT_PREVIEW_TICKS = 240


def run_probe(generator: DiscWorldGenerator, first_summary: dict, logger: logging.Logger) -> bool:
    """Rebuilds the world and checks determinism and projection round-trips."""
    logger.info("--- Probing build determinism ---")
    second_summary = generator.build().summary()
    passed = True
    for name, entry in first_summary["meshes"].items():
        result = "PASS" if entry["hash"] == second_summary["meshes"][name]["hash"] else "FAIL"
        passed &= result == "PASS"
        logger.info(f"  - {name}: {result}")
    ornaments_match = first_summary["ornaments"]["hashes"] == second_summary["ornaments"]["hashes"]
    passed &= ornaments_match
    logger.info(f"  - ornaments ({first_summary['ornaments']['count']}): {'PASS' if ornaments_match else 'FAIL'}")

    logger.info("--- Probing projection round-trip ---")
    lat = np.linspace(DEFAULTS.SOUTHERN_CUTOFF_LAT, 89.0, 60)
    lon = np.linspace(-179.0, 180.0, 60)
    lat_grid, lon_grid = np.meshgrid(lat, lon)
    back_lat, back_lon = projection.unproject(*projection.project(lat_grid, lon_grid))
    error = max(np.max(np.abs(back_lat - lat_grid)), np.max(np.abs(back_lon - lon_grid)))
    round_trip_ok = error < 1e-6
    passed &= round_trip_ok
    logger.info(f"  - max error {error:.2e} degrees: {'PASS' if round_trip_ok else 'FAIL'}")
    return passed


def write_preview(path: str, texture_path: str, night: bool, logger: logging.Logger):
    """Shades the disc top and saves it as a PNG."""
    map_texture = texture.texture_to_array(texture.load_disc_texture(texture_path, logger))
    night_amount = 0.0
    if night:
        transition = NightTransition()
        transition.set_night_mode(True)
        for _ in range(NIGHT_PREVIEW_TICKS):
            transition.update()
        night_amount = transition.night_amount
    colors = color_maps.get_disc_top_color_array(DEFAULTS.PREVIEW_RESOLUTION, map_texture, night_amount)
    Image.fromarray(colors, 'RGBA').save(path, 'PNG')
    logger.info(f"Disc top preview saved to: {path} (night amount {night_amount:.3f})")


def build_disc(config_path: str, output_dir: str = None, preview: bool = False, night: bool = False,
               probe: bool = False) -> int:
    """
    Loads a configuration, builds the disc world, and writes the build report
    and optional preview into the output directory. Returns an exit code.
    """
    # 1. --- Setup Logging ---
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    logger = logging.getLogger("DiscBuilder")

    # 2. --- Load Configuration ---
    logger.info(f"Loading configuration from: {config_path}")
    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.critical(f"Failed to load or parse config file: {e}")
        return 1

    disc_params = config.get('disc_world_parameters', {})

    # 3. --- Build ---
    try:
        generator = DiscWorldGenerator(config=disc_params, logger=logger)
        world = generator.build(progress=True)
    except ValueError as e:
        logger.critical(f"Invalid disc world configuration: {e}")
        return 1
    summary = world.summary()

    # 4. --- Write Diagnostics ---
    output_dir = output_dir or os.path.join("builds", f"seed_{generator.seed}")
    os.makedirs(output_dir, exist_ok=True)
    report_path = os.path.join(output_dir, "build_report.json")
    with open(report_path, 'w') as f:
        json.dump(summary, f, indent=2)
    logger.info(f"Build report saved to: {report_path}")

    material_counts = np.bincount(summary["ornaments"]["materials"], minlength=len(color_maps.MATERIAL_NAMES))
    logger.info("--- Ornament Materials ---")
    for material_id, count in enumerate(material_counts[:4]):
        logger.info(f"  - {color_maps.material_name(material_id)}: {count}")

    if preview:
        write_preview(os.path.join(output_dir, "disc_top.png"), config.get('map_texture'), night, logger)

    if probe and not run_probe(generator, summary, logger):
        logger.error("Probe failed.")
        return 2
    return 0


# --- Command-Line Interface ---
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Builds the procedural geometry of the flat disc world.")
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to the JSON configuration file for the disc world."
    )
    parser.add_argument("--output", type=str, default=None, help="Directory for the build report and preview.")
    parser.add_argument("--preview", action="store_true", help="Render a PNG preview of the disc top.")
    parser.add_argument("--night", action="store_true", help="Render the preview in night mode.")
    parser.add_argument("--probe", action="store_true", help="Verify determinism and projection round-trips.")
    args = parser.parse_args()

    sys.exit(build_disc(args.config, args.output, args.preview, args.night, args.probe))

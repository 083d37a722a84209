# disc_world/projection.py

"""
================================================================================
AZIMUTHAL EQUIDISTANT PROJECTION
================================================================================
Bidirectional mapping between the disc top's unit-square texture coordinates
and geographic latitude/longitude. The projection is centred on the north
pole, which sits at (u, v) = (0.5, 0.5). Distance from the centre is
proportional to colatitude.

Data Contract:
---------------
- Inputs: Scalars or NumPy arrays of degrees (lat, lon) or texture
  coordinates (u, v).
- Outputs: Floats for scalar input, NumPy arrays otherwise.
- Side Effects: None.
- Invariants: unproject(project(lat, lon)) == (lat, lon) within floating point
  tolerance for every lon in (-180, 180] and lat < 90.
================================================================================
"""

import numpy as np

from . import config as DEFAULTS

# uv units per radian of colatitude.
SCALE = 1.0 / (np.pi * DEFAULTS.PROJECTION_MARGIN)
POLE = (90.0, 0.0)


def _as_output(*arrays):
    """Returns plain floats when every input was a scalar."""
    if all(np.ndim(a) == 0 for a in arrays):
        return tuple(float(a) for a in arrays)
    return arrays


def project(lat, lon):
    """Maps latitude/longitude in degrees to disc-top texture coordinates (u, v)."""
    lat_rad = np.radians(np.asarray(lat, dtype=float))
    lon_rad = np.radians(np.asarray(lon, dtype=float))
    colatitude = np.pi / 2 - lat_rad
    u = 0.5 + colatitude * np.sin(lon_rad) * SCALE
    v = 0.5 - colatitude * np.cos(lon_rad) * SCALE
    return _as_output(u, v)


def unproject(u, v):
    """
    Maps disc-top texture coordinates back to (lat, lon) in degrees.

    The exact centre has no defined longitude; it returns the pole, (90, 0).
    Points beyond the mapped disc still return a valid coordinate; use
    is_off_world() to decide whether they are on the map.
    """
    x = (np.asarray(u, dtype=float) - 0.5) / SCALE
    y = (np.asarray(v, dtype=float) - 0.5) / SCALE
    c = np.sqrt(x * x + y * y)
    at_pole = c == 0
    lat = np.where(at_pole, POLE[0], (np.pi / 2 - c) * 180 / np.pi)
    lon = np.where(at_pole, POLE[1], np.arctan2(x, -y) * 180 / np.pi)
    return _as_output(lat, lon)


def disc_radius_fraction(u, v):
    """Distance of (u, v) from the disc centre. The visible disc ends at 0.5."""
    du = np.asarray(u, dtype=float) - 0.5
    dv = np.asarray(v, dtype=float) - 0.5
    r = np.sqrt(du * du + dv * dv)
    return float(r) if np.ndim(r) == 0 else r


def surface_to_uv(x, z, disc_radius: float = DEFAULTS.DISC_RADIUS):
    """Maps a point on the disc-top plane (scene x, z) to texture coordinates."""
    if not disc_radius > 0:
        raise ValueError(f"Disc radius must be positive, got {disc_radius}")
    u = np.asarray(x, dtype=float) / (2 * disc_radius) + 0.5
    v = 0.5 - np.asarray(z, dtype=float) / (2 * disc_radius)
    return _as_output(u, v)


def uv_to_surface(u, v, disc_radius: float = DEFAULTS.DISC_RADIUS):
    """Maps texture coordinates to the scene (x, z) position on the disc-top plane."""
    if not disc_radius > 0:
        raise ValueError(f"Disc radius must be positive, got {disc_radius}")
    x = (np.asarray(u, dtype=float) - 0.5) * 2 * disc_radius
    z = (0.5 - np.asarray(v, dtype=float)) * 2 * disc_radius
    return _as_output(x, z)


def is_off_world(lat, cutoff: float = DEFAULTS.SOUTHERN_CUTOFF_LAT):
    """True where a latitude lies south of the mapped world (the ice wall)."""
    result = np.asarray(lat, dtype=float) < cutoff
    return bool(result) if np.ndim(result) == 0 else result


def format_lat_lon(lat: float, lon: float, decimals: int = 3) -> tuple[str, str]:
    """Formats a coordinate as hemisphere-suffixed strings, e.g. ('51.505°N', '0.090°W')."""
    lat_str = f"{abs(lat):.{decimals}f}°{'N' if lat >= 0 else 'S'}"
    lon_str = f"{abs(lon):.{decimals}f}°{'E' if lon >= 0 else 'W'}"
    return lat_str, lon_str

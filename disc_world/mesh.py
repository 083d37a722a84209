# disc_world/mesh.py

"""
================================================================================
BASE SHAPES & MESH CONTAINER
================================================================================
This module provides the `Mesh` container and builders for the undisplaced
base shapes the displacement engine starts from: the square disc-top plane,
cylinders (rim wall, disc body), cones (ornament peaks) and the subdivided
circular cap of the underside.

Vertex ordering follows the conventional three.js layout (row by row, with a
duplicated seam column). Builders that jitter vertices with the deterministic
generator depend on this order, so it is part of each builder's contract.

Data Contract:
---------------
- Inputs: Shape dimensions and segment counts.
- Outputs: Mesh instances with positions (N, 3), normals (N, 3), uvs (N, 2),
  triangle indices (M, 3) and named per-vertex scalar fields.
- Side Effects: None.
- Invariants: Invalid dimensions raise ValueError before any array is built.
================================================================================
"""

import hashlib

import numpy as np


def _require_positive(name: str, value: float):
    if not value > 0:
        raise ValueError(f"{name} must be positive, got {value}")


def _require_segments(name: str, value: int, minimum: int):
    if int(value) != value or value < minimum:
        raise ValueError(f"{name} must be an integer >= {minimum}, got {value}")


class Mesh:
    """Indexed triangle mesh with per-vertex scalar fields."""

    def __init__(self, name: str, positions: np.ndarray, indices: np.ndarray, uvs: np.ndarray = None):
        self.name = name
        self.positions = np.asarray(positions, dtype=np.float64)
        self.indices = np.asarray(indices, dtype=np.int64).reshape(-1, 3)
        if uvs is None:
            uvs = np.zeros((len(self.positions), 2))
        self.uvs = np.asarray(uvs, dtype=np.float64)
        self.normals = np.zeros_like(self.positions)
        self.fields = {}

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def face_count(self) -> int:
        return len(self.indices)

    def compute_vertex_normals(self):
        """
        Recomputes normals from the current positions and topology.
        Each face contributes its unnormalized (area-weighted) normal to its
        three vertices; the sums are then normalized. Vertices that belong to
        no face, or whose contributions cancel, keep a zero normal.
        """
        p_a = self.positions[self.indices[:, 0]]
        p_b = self.positions[self.indices[:, 1]]
        p_c = self.positions[self.indices[:, 2]]
        face_normals = np.cross(p_c - p_b, p_a - p_b)

        normals = np.zeros_like(self.positions)
        for corner in range(3):
            np.add.at(normals, self.indices[:, corner], face_normals)

        lengths = np.linalg.norm(normals, axis=1, keepdims=True)
        lengths[lengths == 0] = 1.0
        self.normals = normals / lengths
        return self.normals

    def set_field(self, name: str, values: np.ndarray):
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (self.vertex_count,):
            raise ValueError(f"Field '{name}' needs {self.vertex_count} values, got shape {values.shape}")
        self.fields[name] = values

    def bounds(self) -> tuple[np.ndarray, np.ndarray]:
        return self.positions.min(axis=0), self.positions.max(axis=0)

    def content_hash(self) -> str:
        """MD5 of the vertex positions, used to compare builds for determinism."""
        return hashlib.md5(np.ascontiguousarray(self.positions).tobytes()).hexdigest()

    def freeze(self):
        """Marks every array read-only. Built meshes are never mutated again."""
        for array in (self.positions, self.indices, self.uvs, self.normals, *self.fields.values()):
            array.flags.writeable = False
        return self

    def __repr__(self) -> str:
        return f"Mesh(name={self.name!r}, vertices={self.vertex_count}, faces={self.face_count})"


def build_plane(size: float, segments: int = 2, y: float = 0.0, name: str = "plane") -> Mesh:
    """
    A square plane of side `size` lying in the XZ plane at height `y`.
    UVs run 0 -> 1 with no wrap seam: u grows with x, v grows towards -z.
    """
    _require_positive("Plane size", size)
    _require_segments("Plane segments", segments, 1)

    half = size / 2.0
    steps = np.arange(segments + 1)
    iy, ix = np.meshgrid(steps, steps, indexing='ij')
    x = ix * (size / segments) - half
    z = iy * (size / segments) - half
    positions = np.column_stack((x.ravel(), np.full(x.size, y), z.ravel()))
    uvs = np.column_stack(((ix / segments).ravel(), (1.0 - iy / segments).ravel()))

    cell_y, cell_x = np.meshgrid(np.arange(segments), np.arange(segments), indexing='ij')
    row = segments + 1
    a = (cell_x + row * cell_y).ravel()
    b = (cell_x + row * (cell_y + 1)).ravel()
    c = (cell_x + 1 + row * (cell_y + 1)).ravel()
    d = (cell_x + 1 + row * cell_y).ravel()
    indices = np.stack([np.column_stack((a, b, d)), np.column_stack((b, c, d))], axis=1).reshape(-1, 3)

    mesh = Mesh(name, positions, indices, uvs)
    # Corners lie outside the inscribed disc; they are clamped to its edge.
    mesh.set_field('radius_ratio', np.minimum(np.hypot(positions[:, 0], positions[:, 2]) / half, 1.0))
    mesh.compute_vertex_normals()
    return mesh


def build_cylinder(
    radius_top: float, radius_bottom: float, height: float,
    radial_segments: int, height_segments: int = 1, open_ended: bool = False,
    name: str = "cylinder"
) -> Mesh:
    """
    A (possibly tapered) cylinder centred on the origin along Y.
    A zero top radius produces a cone. Vertex (x, z) = (r*sin(t), r*cos(t)).
    """
    if radius_top < 0 or radius_bottom < 0 or (radius_top == 0 and radius_bottom == 0):
        raise ValueError(f"Cylinder radii must be non-negative and not both zero, got {radius_top}, {radius_bottom}")
    _require_positive("Cylinder height", height)
    _require_segments("Radial segments", radial_segments, 3)
    _require_segments("Height segments", height_segments, 1)

    half = height / 2.0
    row = radial_segments + 1

    # --- Torso ---
    v = np.arange(height_segments + 1) / height_segments
    u = np.arange(radial_segments + 1) / radial_segments
    vv, uu = np.meshgrid(v, u, indexing='ij')
    theta = uu * 2 * np.pi
    radius = vv * (radius_bottom - radius_top) + radius_top
    positions = [np.column_stack((
        (radius * np.sin(theta)).ravel(),
        (-vv * height + half).ravel(),
        (radius * np.cos(theta)).ravel(),
    ))]
    uvs = [np.column_stack((uu.ravel(), (1.0 - vv).ravel()))]

    cell_x, cell_y = np.meshgrid(np.arange(radial_segments), np.arange(height_segments), indexing='ij')
    cell_x, cell_y = cell_x.ravel(), cell_y.ravel()
    a = cell_y * row + cell_x
    b = (cell_y + 1) * row + cell_x
    c = (cell_y + 1) * row + cell_x + 1
    d = cell_y * row + cell_x + 1
    faces = np.stack([np.column_stack((a, b, d)), np.column_stack((b, c, d))], axis=1)
    keep = np.column_stack((
        (radius_top > 0) | (cell_y != 0),
        (radius_bottom > 0) | (cell_y != height_segments - 1),
    ))
    indices = [faces[keep]]
    count = row * (height_segments + 1)

    # --- Caps ---
    if not open_ended:
        for top, cap_radius in ((True, radius_top), (False, radius_bottom)):
            if cap_radius <= 0:
                continue
            sign = 1.0 if top else -1.0
            centers = np.tile([0.0, half * sign, 0.0], (radial_segments, 1))
            cap_theta = np.arange(row) / radial_segments * 2 * np.pi
            rim = np.column_stack((
                cap_radius * np.sin(cap_theta),
                np.full(row, half * sign),
                cap_radius * np.cos(cap_theta),
            ))
            positions += [centers, rim]
            uvs += [
                np.full((radial_segments, 2), 0.5),
                np.column_stack((np.cos(cap_theta) * 0.5 + 0.5, np.sin(cap_theta) * 0.5 * sign + 0.5)),
            ]
            center_start = count
            rim_start = count + radial_segments
            seg = np.arange(radial_segments)
            ci = center_start + seg
            ri = rim_start + seg
            if top:
                indices.append(np.column_stack((ri, ri + 1, ci)))
            else:
                indices.append(np.column_stack((ri + 1, ri, ci)))
            count += radial_segments + row

    mesh = Mesh(name, np.vstack(positions), np.vstack(indices), np.vstack(uvs))
    mesh.compute_vertex_normals()
    return mesh


def build_cone(radius: float, height: float, radial_segments: int, name: str = "cone") -> Mesh:
    """A closed cone with its tip at +height/2 and its base at -height/2."""
    _require_positive("Cone radius", radius)
    return build_cylinder(0.0, radius, height, radial_segments, 1, False, name=name)


def build_cap(radius: float, segments: int, rings: int, y: float = 0.0, name: str = "cap") -> Mesh:
    """
    A flat disc in the XZ plane, subdivided into concentric rings so it can be
    displaced across its interior. Faces wind so normals point down (-Y).
    Each ring repeats its first vertex at angle 2*pi.
    """
    _require_positive("Cap radius", radius)
    _require_segments("Cap segments", segments, 3)
    _require_segments("Cap rings", rings, 1)

    row = segments + 1
    rho = np.arange(1, rings + 1) / rings * radius
    angle = np.arange(row) / segments * 2 * np.pi
    rr, aa = np.meshgrid(rho, angle, indexing='ij')
    ring_xz = np.column_stack(((rr * np.cos(aa)).ravel(), (rr * np.sin(aa)).ravel()))
    xz = np.vstack(([0.0, 0.0], ring_xz))
    positions = np.column_stack((xz[:, 0], np.full(len(xz), y), xz[:, 1]))
    uvs = xz / (2 * radius) + 0.5

    seg = np.arange(segments)
    indices = [np.column_stack((np.zeros(segments, dtype=np.int64), 1 + seg, 2 + seg))]
    for k in range(rings - 1):
        inner = 1 + k * row + seg
        outer = 1 + (k + 1) * row + seg
        quads = np.stack([
            np.column_stack((inner, outer, outer + 1)),
            np.column_stack((inner, outer + 1, inner + 1)),
        ], axis=1)
        indices.append(quads.reshape(-1, 3))

    mesh = Mesh(name, positions, np.vstack(indices), uvs)
    mesh.set_field('radius_ratio', np.minimum(np.hypot(positions[:, 0], positions[:, 2]) / radius, 1.0))
    mesh.compute_vertex_normals()
    return mesh

"""
Triangle mesh value type.

A Mesh is what renderers and mesh exporters consume: flat vertex buffers
plus an optional index buffer, with bounding volumes filled in by
``heal_mesh``. Every generation call hands out freshly built meshes; a
caller that wants to keep one while passing it on should ``clone()`` it,
and ``dispose()`` releases the buffers once it is no longer needed.

Mesh processing (normals, feature edges, STL encoding) goes through
trimesh via ``Mesh.to_trimesh()``.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
import trimesh
from build123d import Shape

logger = logging.getLogger(__name__)

Vector3 = Tuple[float, float, float]
UV = Tuple[float, float]
BoundingBox = Tuple[Vector3, Vector3]
BoundingSphere = Tuple[Vector3, float]


@dataclass
class Mesh:
    """Triangle mesh with optional normals, UVs and index buffer."""

    positions: List[Vector3]
    normals: Optional[List[Vector3]] = None
    uvs: Optional[List[UV]] = None
    indices: Optional[List[int]] = None  # Flat, three per triangle
    bounding_box: Optional[BoundingBox] = None
    bounding_sphere: Optional[BoundingSphere] = None

    @property
    def is_indexed(self) -> bool:
        return self.indices is not None

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        if self.indices is not None:
            return len(self.indices) // 3
        return len(self.positions) // 3

    def triangle_indices(self) -> Iterator[Tuple[int, int, int]]:
        """Vertex index triples, one per triangle."""
        if self.indices is not None:
            idx = self.indices
            for i in range(0, len(idx) - len(idx) % 3, 3):
                yield idx[i], idx[i + 1], idx[i + 2]
        else:
            n = len(self.positions) - len(self.positions) % 3
            for i in range(0, n, 3):
                yield i, i + 1, i + 2

    def triangles(self) -> Iterator[Tuple[Vector3, Vector3, Vector3]]:
        """Vertex position triples, one per triangle."""
        pos = self.positions
        for a, b, c in self.triangle_indices():
            yield pos[a], pos[b], pos[c]

    def to_trimesh(self) -> trimesh.Trimesh:
        """
        The same triangles as a trimesh.Trimesh.

        Built with ``process=False`` so vertex order and triangle count
        match this mesh exactly (nothing merged or dropped).
        """
        vertices = np.asarray(self.positions, dtype=np.float64).reshape(-1, 3)
        faces = np.asarray(list(self.triangle_indices()), dtype=np.int64).reshape(-1, 3)
        return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)

    def compute_bounding_box(self) -> BoundingBox:
        if not self.positions:
            self.bounding_box = ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
            return self.bounding_box
        points = np.asarray(self.positions, dtype=np.float64)
        lo, hi = points.min(axis=0), points.max(axis=0)
        self.bounding_box = (tuple(lo.tolist()), tuple(hi.tolist()))
        return self.bounding_box

    def compute_bounding_sphere(self) -> BoundingSphere:
        """Sphere centred on the box centre enclosing every vertex."""
        lo, hi = self.bounding_box or self.compute_bounding_box()
        center = ((lo[0] + hi[0]) / 2, (lo[1] + hi[1]) / 2, (lo[2] + hi[2]) / 2)
        radius = 0.0
        if self.positions:
            offsets = np.asarray(self.positions, dtype=np.float64) - np.asarray(center)
            radius = float(np.linalg.norm(offsets, axis=1).max())
        self.bounding_sphere = (center, radius)
        return self.bounding_sphere

    def clone(self) -> "Mesh":
        """Independent deep copy; no buffers are shared."""
        return Mesh(
            positions=list(self.positions),
            normals=list(self.normals) if self.normals is not None else None,
            uvs=list(self.uvs) if self.uvs is not None else None,
            indices=list(self.indices) if self.indices is not None else None,
            bounding_box=self.bounding_box,
            bounding_sphere=self.bounding_sphere,
        )

    def to_non_indexed(self) -> "Mesh":
        """Copy with every triangle owning its own three vertices."""
        if self.indices is None:
            return self.clone()

        order = [i for tri in self.triangle_indices() for i in tri]
        return Mesh(
            positions=[self.positions[i] for i in order],
            normals=[self.normals[i] for i in order] if self.normals is not None else None,
            uvs=[self.uvs[i] for i in order] if self.uvs is not None else None,
            indices=None,
            bounding_box=self.bounding_box,
            bounding_sphere=self.bounding_sphere,
        )

    def dispose(self) -> None:
        """Release all buffers. The mesh is empty afterwards."""
        self.positions = []
        self.normals = None
        self.uvs = None
        self.indices = None
        self.bounding_box = None
        self.bounding_sphere = None


def merge_meshes(meshes: Sequence[Mesh]) -> Mesh:
    """
    Concatenate meshes into one.

    Index buffers are offset when every input is indexed; a mix of indexed
    and non-indexed inputs is merged non-indexed. Normals and UVs are kept
    only if every input has them.
    """
    if not meshes:
        return Mesh(positions=[])

    if not all(m.is_indexed for m in meshes):
        meshes = [m.to_non_indexed() for m in meshes]
        indexed = False
    else:
        indexed = True

    keep_normals = all(m.normals is not None for m in meshes)
    keep_uvs = all(m.uvs is not None for m in meshes)

    positions: List[Vector3] = []
    normals: Optional[List[Vector3]] = [] if keep_normals else None
    uvs: Optional[List[UV]] = [] if keep_uvs else None
    indices: Optional[List[int]] = [] if indexed else None

    for m in meshes:
        offset = len(positions)
        positions.extend(m.positions)
        if keep_normals:
            normals.extend(m.normals)
        if keep_uvs:
            uvs.extend(m.uvs)
        if indexed:
            indices.extend(i + offset for i in m.indices)

    return Mesh(positions=positions, normals=normals, uvs=uvs, indices=indices)


def angular_tolerance_for(facets: int) -> float:
    """Tessellation angular deflection that yields about ``facets`` per turn."""
    return 2 * math.pi / max(3, facets)


def mesh_from_shape(shape: Shape, tolerance: float, angular_tolerance: float) -> Mesh:
    """
    Tessellate a build123d shape into an indexed Mesh.

    Args:
        shape: Solid, Part or Compound to mesh
        tolerance: Linear deflection in mm
        angular_tolerance: Angular deflection in radians

    Returns:
        Indexed Mesh without normals or UVs (see ``heal_mesh``)
    """
    vertices, triangles = shape.tessellate(tolerance, angular_tolerance)

    positions = [(v.X, v.Y, v.Z) for v in vertices]
    indices = [i for tri in triangles for i in tri]

    logger.debug(f"Tessellated: {len(positions)} vertices, {len(triangles)} triangles")
    return Mesh(positions=positions, indices=indices)

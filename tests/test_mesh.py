"""
Tests for the Mesh value type and mesh healing.

Plain-Python meshes only; tessellation of real solids is covered in
test_tool.py.
"""

import math

import pytest

from drillgen.core.geometry_repair import heal_mesh
from drillgen.core.mesh import Mesh, angular_tolerance_for, merge_meshes


def _tetrahedron(indexed=True) -> Mesh:
    positions = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)]
    indices = [0, 2, 1, 0, 1, 3, 0, 3, 2, 1, 2, 3]
    mesh = Mesh(positions=positions, indices=indices)
    return mesh if indexed else mesh.to_non_indexed()


class TestMesh:

    def test_counts(self):
        mesh = _tetrahedron()
        assert mesh.is_indexed
        assert mesh.vertex_count == 4
        assert mesh.triangle_count == 4

    def test_non_indexed_counts(self):
        mesh = _tetrahedron(indexed=False)
        assert not mesh.is_indexed
        assert mesh.vertex_count == 12
        assert mesh.triangle_count == 4

    def test_to_non_indexed_keeps_triangles(self):
        indexed = _tetrahedron()
        flat = indexed.to_non_indexed()
        assert list(flat.triangles()) == list(indexed.triangles())

    def test_bounding_box(self):
        lo, hi = _tetrahedron().compute_bounding_box()
        assert lo == (0.0, 0.0, 0.0)
        assert hi == (1.0, 1.0, 1.0)

    def test_empty_bounding_box(self):
        assert Mesh(positions=[]).compute_bounding_box() == ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))

    def test_bounding_sphere_encloses_vertices(self):
        mesh = _tetrahedron()
        center, radius = mesh.compute_bounding_sphere()

        assert center == pytest.approx((0.5, 0.5, 0.5))
        for p in mesh.positions:
            assert math.dist(p, center) <= radius + 1e-12

    def test_clone_is_independent(self):
        mesh = _tetrahedron()
        copy = mesh.clone()
        copy.positions[0] = (9.0, 9.0, 9.0)
        copy.indices.append(0)

        assert mesh.positions[0] == (0.0, 0.0, 0.0)
        assert len(mesh.indices) == 12

    def test_dispose_empties_buffers(self):
        mesh = _tetrahedron()
        mesh.dispose()

        assert mesh.vertex_count == 0
        assert mesh.triangle_count == 0
        assert mesh.indices is None
        assert mesh.bounding_box is None


class TestToTrimesh:

    def test_same_triangles(self):
        tm = _tetrahedron().to_trimesh()
        assert tm.vertices.shape == (4, 3)
        assert tm.faces.tolist() == [[0, 2, 1], [0, 1, 3], [0, 3, 2], [1, 2, 3]]
        assert tm.is_watertight

    def test_non_indexed_vertices_not_merged(self):
        tm = _tetrahedron(indexed=False).to_trimesh()
        assert len(tm.vertices) == 12
        assert len(tm.faces) == 4


class TestMergeMeshes:

    def test_indexed_offsets(self):
        merged = merge_meshes([_tetrahedron(), _tetrahedron()])

        assert merged.vertex_count == 8
        assert merged.triangle_count == 8
        assert max(merged.indices) == 7

    def test_mixed_inputs_merge_non_indexed(self):
        merged = merge_meshes([_tetrahedron(), _tetrahedron(indexed=False)])

        assert not merged.is_indexed
        assert merged.triangle_count == 8

    def test_empty(self):
        assert merge_meshes([]).vertex_count == 0


class TestHealMesh:

    def test_fills_normals_uvs_and_bounds(self):
        healed = heal_mesh(_tetrahedron())

        assert len(healed.normals) == healed.vertex_count
        assert healed.uvs == [(0.0, 0.0)] * 4
        assert healed.bounding_box is not None
        assert healed.bounding_sphere is not None

    def test_normals_are_unit(self):
        for n in heal_mesh(_tetrahedron()).normals:
            assert math.hypot(*n) == pytest.approx(1.0)

    def test_shared_vertex_normal_averages_faces(self):
        # Vertex 0 is the right-angle corner shared by the -X, -Y and -Z faces
        normal = heal_mesh(_tetrahedron()).normals[0]
        assert normal == pytest.approx((-1 / math.sqrt(3),) * 3)

    def test_flat_normals_on_non_indexed(self):
        """Each corner of a non-indexed triangle gets its face normal."""
        healed = heal_mesh(_tetrahedron(indexed=False))
        # First triangle (0, 2, 1) lies in the z=0 plane, facing -Z
        for n in healed.normals[:3]:
            assert n == pytest.approx((0.0, 0.0, -1.0))

    def test_input_untouched(self):
        mesh = _tetrahedron()
        heal_mesh(mesh)
        assert mesh.normals is None
        assert mesh.uvs is None

    def test_wrong_length_uvs_replaced(self):
        mesh = _tetrahedron()
        mesh.uvs = [(1.0, 1.0)]
        assert len(heal_mesh(mesh).uvs) == 4

    def test_existing_uvs_kept(self):
        mesh = _tetrahedron()
        mesh.uvs = [(0.1 * i, 0.0) for i in range(4)]
        assert heal_mesh(mesh).uvs == mesh.uvs


def test_angular_tolerance_for_facets():
    assert angular_tolerance_for(64) == pytest.approx(2 * math.pi / 64)
    assert angular_tolerance_for(0) == pytest.approx(2 * math.pi / 3)

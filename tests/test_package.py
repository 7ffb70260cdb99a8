"""
Tests for export and packaging of generated tools.
"""

import io
import struct
import zipfile

import ezdxf
import pytest
import trimesh

from drillgen.core.mesh import Mesh
from drillgen.exceptions import UnsupportedFormatError
from drillgen.io.package import (
    EXPORT_FORMATS,
    PackageFiles,
    create_package_zip,
    export_tool,
    generate_package,
    mesh_to_stl_bytes,
    normalise_formats,
    save_package_to_dir,
)


def _read_stl(data: bytes):
    """Triangle count and vertex list of a binary STL."""
    (count,) = struct.unpack_from('<I', data, 80)
    vertices = []
    offset = 84
    for _ in range(count):
        values = struct.unpack_from('<12f', data, offset)
        vertices.extend([values[3:6], values[6:9], values[9:12]])
        offset += 50
    return count, vertices


class TestStl:

    def test_triangle_layout(self):
        mesh = Mesh(positions=[(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)])
        data = mesh_to_stl_bytes(mesh)

        assert len(data) == 84 + 50
        normal = struct.unpack_from('<3f', data, 84)
        assert normal == pytest.approx((0.0, 0.0, 1.0))

    def test_indexed_mesh_expanded(self):
        mesh = Mesh(
            positions=[(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (1.0, 1.0, 0.0)],
            indices=[0, 1, 2, 1, 3, 2],
        )
        count, vertices = _read_stl(mesh_to_stl_bytes(mesh))
        assert count == 2
        assert vertices[3] == pytest.approx((1.0, 0.0, 0.0))

    def test_loads_back_in_trimesh(self):
        mesh = Mesh(
            positions=[(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (1.0, 1.0, 0.0)],
            indices=[0, 1, 2, 1, 3, 2],
        )
        loaded = trimesh.load(io.BytesIO(mesh_to_stl_bytes(mesh)), file_type="stl")

        assert len(loaded.faces) == 2
        assert loaded.bounds.tolist() == [[0.0, 0.0, 0.0], [1.0, 1.0, 0.0]]


class TestFormats:

    def test_aliases(self):
        assert normalise_formats(["STL", "stp", "markdown", ".json", "stl"]) == ["stl", "step", "md", "json"]

    def test_unsupported(self):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            normalise_formats(["stl", "obj"])
        assert exc_info.value.format == "obj"
        assert exc_info.value.supported == EXPORT_FORMATS


class TestPackageFiles:

    @pytest.fixture
    def files(self):
        return PackageFiles(basename="Drill_10x100_2F", stl=b"solid", json="{}", md="# Drill")

    def test_file_map_skips_missing(self, files):
        assert list(files.file_map()) == ["Drill_10x100_2F.stl", "Drill_10x100_2F.json", "Drill_10x100_2F.md"]

    def test_save_to_dir(self, files, tmp_path):
        written = save_package_to_dir(files, tmp_path / "out")

        assert [p.name for p in written] == list(files.file_map())
        assert (tmp_path / "out" / "Drill_10x100_2F.stl").read_bytes() == b"solid"
        assert (tmp_path / "out" / "Drill_10x100_2F.md").read_text(encoding="utf-8") == "# Drill"

    def test_zip(self, files):
        with zipfile.ZipFile(io.BytesIO(create_package_zip(files))) as zf:
            assert sorted(zf.namelist()) == sorted(files.file_map())
            assert zf.read("Drill_10x100_2F.json") == b"{}"


@pytest.mark.slow
class TestExportGeneratedTool:

    def test_stl_matches_render_mesh(self, built_small_drill):
        data = export_tool(built_small_drill, "stl")
        count, vertices = _read_stl(data)

        mesh = built_small_drill.mesh
        assert count == mesh.triangle_count
        lo, hi = mesh.compute_bounding_box()
        assert min(v[1] for v in vertices) == pytest.approx(lo[1], abs=1e-4)
        assert max(v[1] for v in vertices) == pytest.approx(hi[1], abs=1e-4)

    def test_step(self, built_small_drill):
        data = export_tool(built_small_drill, "STP")
        assert data.startswith(b"ISO-10303-21")

    def test_dxf_layers(self, built_small_drill, tmp_path):
        path = tmp_path / "tool.dxf"
        path.write_bytes(export_tool(built_small_drill, "dxf"))
        doc = ezdxf.readfile(path)
        for layer in ("Top", "Front", "Side", "Dimensions", "Text"):
            assert layer in doc.layers

    def test_text_formats(self, built_small_drill):
        assert '"parameters"' in export_tool(built_small_drill, "json")
        assert export_tool(built_small_drill, "csv").startswith("parameter,value")
        assert export_tool(built_small_drill, "markdown").startswith("# Drill")

    def test_unsupported_format_writes_nothing(self, built_small_drill, tmp_path):
        with pytest.raises(UnsupportedFormatError):
            export_tool(built_small_drill, "obj")
        with pytest.raises(UnsupportedFormatError):
            generate_package(built_small_drill, formats=["json", "obj"])
        assert list(tmp_path.iterdir()) == []

    def test_generate_package_subset(self, built_small_drill):
        messages = []
        files = generate_package(built_small_drill, formats=["json", "csv", "stl"], log=messages.append)

        assert files.basename == "Drill_6x60_2F"
        assert files.step is None and files.dxf is None
        assert files.stl is not None
        assert any("Exporting STL" in m for m in messages)

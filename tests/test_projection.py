"""
Tests for 2D projection and the DXF drawing writer.
"""

import ezdxf
import pytest
from ezdxf import units

from drillgen.calculator.core import build_layout
from drillgen.core.mesh import Mesh
from drillgen.core.projection import (
    Segment2D,
    boundary_circles,
    build_dimensions,
    build_notes,
    extract_sharp_edges,
    project_point,
    project_tool,
    project_view,
)
from drillgen.enums import ProjectionView
from drillgen.io.drawing import DXF_LAYER_COLORS, build_dxf_document, export_dxf, view_origins


def _box_mesh(sx=2.0, sy=4.0, sz=2.0) -> Mesh:
    """Axis-aligned box centred on the origin, duplicated vertices per face."""
    hx, hy, hz = sx / 2, sy / 2, sz / 2
    corners = [
        (-hx, -hy, -hz), (hx, -hy, -hz), (hx, hy, -hz), (-hx, hy, -hz),
        (-hx, -hy, hz), (hx, -hy, hz), (hx, hy, hz), (-hx, hy, hz),
    ]
    quads = [
        (0, 3, 2, 1), (4, 5, 6, 7),  # -z, +z
        (0, 1, 5, 4), (2, 3, 7, 6),  # -y, +y
        (1, 2, 6, 5), (0, 4, 7, 3),  # +x, -x
    ]
    positions = []
    for a, b, c, d in quads:
        for i in (a, b, c, a, c, d):
            positions.append(corners[i])
    mesh = Mesh(positions=positions)
    mesh.compute_bounding_box()
    return mesh


class TestSharpEdges:

    def test_box_has_twelve_edges(self):
        """Face diagonals are coplanar and dropped; the 12 box edges stay."""
        edges = extract_sharp_edges(_box_mesh())
        assert len(edges) == 12

    def test_edges_sorted_and_canonical(self):
        edges = extract_sharp_edges(_box_mesh())
        assert edges == sorted(edges)
        assert all(a < b for a, b in edges)

    def test_open_mesh_keeps_boundary(self):
        mesh = Mesh(positions=[(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)])
        assert len(extract_sharp_edges(mesh)) == 3

    def test_high_threshold_keeps_only_boundary(self):
        assert extract_sharp_edges(_box_mesh(), threshold_deg=120) == []


class TestProjectView:

    def test_project_point_axes(self):
        p = (1.0, 2.0, 3.0)
        assert project_point(p, ProjectionView.FRONT) == (1.0, 2.0)
        assert project_point(p, ProjectionView.SIDE) == (3.0, 2.0)
        assert project_point(p, ProjectionView.TOP) == (1.0, 3.0)

    def test_segment_canonical_order(self):
        seg = Segment2D.between((1.0, 0.0), (0.0, 0.0))
        assert seg.start == (0.0, 0.0)
        assert seg.length == pytest.approx(1.0)

    def test_front_view_collapses_depth(self):
        """Front and back box edges project onto the same 4 outline lines."""
        view = project_view(ProjectionView.FRONT, extract_sharp_edges(_box_mesh()))
        assert len(view.segments) == 4

    def test_side_view_dedupes(self):
        view = project_view(ProjectionView.SIDE, extract_sharp_edges(_box_mesh()))
        assert len(view.segments) == 4
        assert view.bounds == ((-1.0, -2.0), (1.0, 2.0))

    def test_deterministic(self):
        edges = extract_sharp_edges(_box_mesh())
        for view in ProjectionView:
            assert project_view(view, edges) == project_view(view, list(reversed(edges)))


class TestLayoutAnnotations:

    def test_boundary_circles_drill(self, drill_params):
        circles = boundary_circles(build_layout(drill_params))
        assert circles == sorted(circles)
        # The tip apex has radius zero and is not a circle
        assert all(r == 5.0 for _, r in circles)
        assert circles[0][0] == pytest.approx(-50.0)

    def test_top_view_circles(self, step_drill_params):
        layout = build_layout(step_drill_params)
        view = project_view(ProjectionView.TOP, [], layout)

        radii = sorted({c.radius for c in view.circles})
        assert radii == [4.0, 6.0]
        assert all(c.center == (0.0, 0.0) for c in view.circles)

    def test_front_view_section_lines(self, drill_params):
        view = project_view(ProjectionView.FRONT, [], build_layout(drill_params))
        assert Segment2D((-5.0, -50.0), (5.0, -50.0)) in view.segments

    def test_dimensions(self, drill_params):
        layout = build_layout(drill_params)
        texts = [d.text for d in build_dimensions(drill_params, layout)]
        assert texts == ["100", "30", "60", "Ø10 h8", "Ø10"]

    def test_notes(self, drill_params):
        notes = build_notes(drill_params)
        assert notes[0] == "TOLERANCE: h8 (0 to -0.039 mm)"
        assert "MATERIAL: High Speed Steel" in notes
        assert "TIP ANGLE: 118°" in notes


class TestDxf:

    @pytest.fixture
    def drawing(self, drill_params):
        layout = build_layout(drill_params)
        return project_tool(_box_mesh(10.0, 100.0, 10.0), drill_params, layout, title="Drill_10x100_2F")

    def test_drawing_size_from_mesh(self, drawing):
        assert drawing.size == (10.0, 100.0, 10.0)
        assert set(drawing.views) == set(ProjectionView)

    def test_view_origins_separate_views(self, drawing):
        origins = view_origins(drawing)
        assert origins[ProjectionView.TOP][1] > origins[ProjectionView.FRONT][1]
        assert origins[ProjectionView.SIDE][0] > origins[ProjectionView.FRONT][0]
        assert origins[ProjectionView.SIDE][1] == origins[ProjectionView.FRONT][1]

    def test_layers_and_entities(self, drawing):
        doc = build_dxf_document(drawing)
        for name in DXF_LAYER_COLORS:
            assert name in doc.layers

        msp = doc.modelspace()
        assert len(msp.query('LINE[layer=="Front"]')) > 0
        assert len(msp.query('CIRCLE[layer=="Top"]')) > 0
        texts = [t.dxf.text for t in msp.query('TEXT')]
        assert "Drill_10x100_2F - Technical Drawing" in texts
        assert "FRONT VIEW" in texts

    def test_export_reads_back(self, drawing, tmp_path):
        path = tmp_path / "drawing.dxf"
        path.write_bytes(export_dxf(drawing))

        doc = ezdxf.readfile(path)

        assert doc.units == units.MM
        texts = [t.dxf.text for t in doc.modelspace().query("TEXT")]
        assert "Ø10 h8" in texts
        assert "HELIX ANGLE: 30°" in texts


@pytest.mark.slow
def test_project_generated_tool(built_small_drill):
    result = built_small_drill
    drawing = project_tool(result.mesh, result.params, result.layout, paths=result.paths)

    front = drawing.views[ProjectionView.FRONT]
    (_, y0), (_, y1) = front.bounds
    assert y0 == pytest.approx(-30.0, abs=0.1)
    # Helix guides run out past the tip
    assert y1 >= 30.0 - 0.1

    again = project_tool(result.mesh, result.params, result.layout, paths=result.paths)
    assert again.views == drawing.views

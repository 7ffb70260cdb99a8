"""
Tests for helical flute paths.

HelixPath evaluation is pure math on build123d Vectors, no OCC solids.
"""

import math

import pytest

from drillgen.calculator.core import build_layout
from drillgen.core.helix import HelixPath, calculate_helix_pitch, create_flute_paths


def _path(**overrides) -> HelixPath:
    values = dict(
        radius=5.0,
        pitch=calculate_helix_pitch(10.0, 30.0),
        base_angle=0.0,
        helix_height=60.0,
        start_y=0.0,
        extension_length=13.5,
    )
    values.update(overrides)
    return HelixPath(**values)


class TestPitch:

    def test_30_degree_helix(self):
        assert calculate_helix_pitch(10.0, 30.0) == pytest.approx(math.pi * 10 / math.tan(math.radians(30)))

    def test_straight_flutes_infinite_pitch(self):
        assert math.isinf(calculate_helix_pitch(10.0, 0.0))

    def test_steeper_helix_shorter_pitch(self):
        assert calculate_helix_pitch(10.0, 45.0) < calculate_helix_pitch(10.0, 20.0)


class TestHelixPath:

    def test_endpoints(self):
        path = _path()
        end = path.point_at(1.0)

        assert path.point_at(path.extension_ratio).Y == pytest.approx(0.0)
        assert end.Y == pytest.approx(60.0)
        assert math.hypot(end.X, end.Z) == pytest.approx(5.0)

    def test_helix_points_on_cylinder(self):
        path = _path()
        ratio = path.extension_ratio
        for i in range(11):
            t = ratio + (1 - ratio) * i / 10
            p = path.point_at(t)
            assert math.hypot(p.X, p.Z) == pytest.approx(5.0)

    def test_lead_in_joins_helix_tangentially(self):
        path = _path()
        ratio = path.extension_ratio

        lead_in = path.tangent_at(ratio * 0.5)
        helix = path.tangent_at(ratio + 1e-9)

        assert (lead_in - helix).length == pytest.approx(0.0, abs=1e-6)

    def test_lead_in_length(self):
        path = _path()
        assert (path.helix_start - path.lead_in_start).length == pytest.approx(13.5)

    def test_tangent_is_unit(self):
        path = _path()
        for t in (0.0, 0.3, 0.7, 1.0):
            assert path.tangent_at(t).length == pytest.approx(1.0)

    def test_right_hand(self):
        """Angle decreases as the flute advances towards the tip."""
        path = _path(extension_length=0.0)
        p0 = path.point_at(0.0)
        p1 = path.point_at(0.01)
        angle0 = math.atan2(p0.Z, p0.X)
        angle1 = math.atan2(p1.Z, p1.X)
        assert angle1 < angle0

    def test_straight_flute_is_axial(self):
        path = _path(pitch=math.inf)

        assert path.revolutions == 0.0
        assert path.helix_length == pytest.approx(60.0)
        start, end = path.point_at(0.0), path.point_at(1.0)
        assert end.X == pytest.approx(start.X)
        assert end.Z == pytest.approx(start.Z)
        assert path.tangent_at(0.5).Y == pytest.approx(1.0)

    def test_helix_length(self):
        path = _path()
        expected = math.sqrt(60.0 ** 2 + (2 * math.pi * 5.0 * path.revolutions) ** 2)
        assert path.helix_length == pytest.approx(expected)
        assert path.total_length == pytest.approx(expected + 13.5)

    def test_t_is_clamped(self):
        path = _path()
        assert path.point_at(-1.0) == path.point_at(0.0)
        assert path.point_at(2.0) == path.point_at(1.0)

    def test_sample_count(self):
        assert len(_path().sample(25)) == 25
        with pytest.raises(ValueError):
            _path().sample(1)


class TestCreateFlutePaths:

    def test_one_path_per_flute(self, make_params):
        params = make_params("endmill", flute_count=3)
        paths = create_flute_paths(params, build_layout(params))

        assert len(paths) == 3
        angles = [p.base_angle for p in paths]
        assert angles == pytest.approx([0.0, 2 * math.pi / 3, 4 * math.pi / 3])

    def test_no_flutes(self, make_params):
        params = make_params(flute_count=0)
        assert create_flute_paths(params, build_layout(params)) == []

    def test_path_geometry_from_layout(self, drill_params):
        layout = build_layout(drill_params)
        path = create_flute_paths(drill_params, layout)[0]

        assert path.radius == 5.0
        assert path.start_y == pytest.approx(layout.flute_start_y)
        assert path.helix_height == pytest.approx(layout.derived.helix_height)
        assert path.extension_length == pytest.approx(13.5)

    def test_helix_leaves_body_past_tip(self, drill_params):
        layout = build_layout(drill_params)
        path = create_flute_paths(drill_params, layout)[0]
        assert path.point_at(1.0).Y > layout.derived.length / 2

    def test_lead_in_starts_in_run_out_zone(self, drill_params):
        """Lead-in starts below the cutting part but above the body start."""
        from drillgen.enums import SegmentKind

        layout = build_layout(drill_params)
        body = layout.segment(SegmentKind.FLUTED_BODY)
        path = create_flute_paths(drill_params, layout)[0]

        assert body.start < path.lead_in_start.Y < layout.flute_start_y

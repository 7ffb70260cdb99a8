"""
Tests for the output formatters (JSON, CSV, Markdown, summary).
"""

import csv
import io
import json

import pytest

from drillgen.calculator.output import (
    display_material,
    export_basename,
    export_filename,
    format_tolerance,
    to_csv,
    to_json,
    to_markdown,
    to_summary,
)
from drillgen.calculator.validation import validate_parameters
from drillgen.enums import SurfaceFinish, ToleranceClass, ToolMaterial
from drillgen.io.loaders import parameters_from_dict


class TestFileNames:

    def test_drill_basename(self, drill_params):
        assert export_basename(drill_params) == "Drill_10x100_2F"

    def test_step_drill_basename(self, step_drill_params):
        assert export_basename(step_drill_params) == "StepDrill_12x100_2F"

    def test_fractional_diameter(self, make_params):
        params = make_params("reamer", diameter=6.5, shank_diameter=6.5)
        assert export_basename(params) == "Reamer_6.5x100_4F"

    def test_filename_extension(self, endmill_params):
        assert export_filename(endmill_params, ".STL") == "Endmill_10x85_4F.stl"


class TestToJson:

    def test_structure(self, drill_params):
        data = json.loads(to_json(drill_params))

        assert data["schema_version"] == "1.0"
        assert data["parameters"]["diameter"] == 10.0
        assert data["derived"]["minimum_length"] == 93
        assert data["derived"]["non_cutting_length"] == 7
        assert "validation" not in data

    def test_with_validation(self, drill_params):
        validation = validate_parameters(drill_params)
        data = json.loads(to_json(drill_params, validation=validation))

        assert data["validation"]["valid"] is True
        codes = [m["code"] for m in data["validation"]["messages"]]
        assert "NON_CUTTING_LENGTH_RECOMPUTED" in codes

    def test_loads_back(self, drill_params):
        data = json.loads(to_json(drill_params, include_derived=False))
        assert parameters_from_dict(data) == drill_params


class TestToCsv:

    def test_rows(self, drill_params):
        rows = list(csv.reader(io.StringIO(to_csv(drill_params))))

        assert rows[0] == ["parameter", "value"]
        values = dict(rows[1:])
        assert values["diameter"] == "10.0"
        assert values["tool_type"] == "drill"
        assert values["minimum_length"] == "93"
        assert values["tip_height"] == "3.0043"

    def test_without_derived(self, drill_params):
        text = to_csv(drill_params, include_derived=False)
        assert "minimum_length" not in text


class TestToMarkdown:

    def test_sections(self, drill_params):
        md = to_markdown(drill_params)

        assert md.startswith("# Drill Technical Specification")
        for heading in ("## Geometry", "## Derived Dimensions", "## Materials",
                        "## Application", "## Tolerances", "## Notes"):
            assert heading in md
        assert "| Tip Height | 3.004 mm |" in md
        assert "High Speed Steel" in md

    def test_clamped_length_note(self, make_params):
        md = to_markdown(make_params(length=50.0))
        assert "has been increased to 93 mm" in md

    def test_validation_section(self, make_params):
        params = make_params(flute_count=5)
        md = to_markdown(params, validation=validate_parameters(params))

        assert "❌ Parameters have errors" in md
        assert "FLUTE_COUNT_OUT_OF_RANGE" in md


def test_summary(drill_params):
    summary = to_summary(drill_params)
    assert summary.splitlines()[0] == "Drill Ø10 h8 x 100 mm, 2 flute(s)"


class TestDisplayHelpers:

    def test_tolerance_band(self):
        assert format_tolerance(ToleranceClass.H7) == "+0.025 to 0 mm"

    def test_polished_keeps_material_colour(self):
        assert display_material(ToolMaterial.CARBIDE, SurfaceFinish.POLISHED).hex_color == "#64748b"

    @pytest.mark.parametrize("material", list(ToolMaterial))
    def test_coating_overrides_material(self, material):
        assert display_material(material, SurfaceFinish.TIN).color == 0xFCD34D

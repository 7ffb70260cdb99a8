"""Output formatters for cutting tool parameter sets.

Converts typed ToolParameters models to JSON, CSV, Markdown and short text
summaries, and provides the display-name helpers used by the technical
specification sheet and the drawing notes.

Uses Pydantic's model_dump(mode='json') for serialization so enums become
their string values automatically.
"""

import csv
import io
import json
from dataclasses import asdict, dataclass
from typing import Dict, Optional, TYPE_CHECKING

from ..enums import SurfaceFinish, ToleranceClass, ToolMaterial, ToolType
from ..io.loaders import SCHEMA_VERSION, ToolParameters
from .core import calculate_derived_quantities

if TYPE_CHECKING:
    from .validation import ValidationResult


TOLERANCE_BANDS: Dict[ToleranceClass, str] = {
    ToleranceClass.h6: "0 to -0.016 mm",
    ToleranceClass.h7: "0 to -0.025 mm",
    ToleranceClass.h8: "0 to -0.039 mm",
    ToleranceClass.h9: "0 to -0.062 mm",
    ToleranceClass.h10: "0 to -0.100 mm",
    ToleranceClass.H6: "+0.016 to 0 mm",
    ToleranceClass.H7: "+0.025 to 0 mm",
    ToleranceClass.H8: "+0.039 to 0 mm",
}

MATERIAL_NAMES: Dict[ToolMaterial, str] = {
    ToolMaterial.HSS: "High Speed Steel",
    ToolMaterial.CARBIDE: "Solid Carbide",
    ToolMaterial.COBALT: "Cobalt Steel",
    ToolMaterial.TITANIUM: "Titanium Coated HSS",
}

FINISH_NAMES: Dict[SurfaceFinish, str] = {
    SurfaceFinish.POLISHED: "Polished",
    SurfaceFinish.BLACK_OXIDE: "Black Oxide",
    SurfaceFinish.TIN: "Titanium Nitride Coated",
    SurfaceFinish.ALN: "Aluminum Nitride Coated",
}

FLUTE_RECOMMENDATIONS: Dict[int, str] = {
    1: "Reamer applications, deep hole drilling",
    2: "General purpose drilling, softer materials",
    3: "Medium to hard materials, improved chip evacuation",
    4: "Harder materials, precision applications",
}

COOLANT_RECOMMENDATIONS: Dict[ToolMaterial, str] = {
    ToolMaterial.HSS: "Required for most applications",
    ToolMaterial.CARBIDE: "Recommended for most applications",
    ToolMaterial.COBALT: "Required for higher temperature applications",
    ToolMaterial.TITANIUM: "Recommended but can be used dry in some applications",
}

TOOL_TYPE_NAMES: Dict[ToolType, str] = {
    ToolType.DRILL: "Drill",
    ToolType.ENDMILL: "Endmill",
    ToolType.REAMER: "Reamer",
    ToolType.STEP_DRILL: "StepDrill",
}


@dataclass(frozen=True)
class DisplayMaterial:
    """Phong shading parameters for renderers (colours as 0xRRGGBB)."""
    color: int
    shininess: float
    specular: int

    @property
    def hex_color(self) -> str:
        return f"#{self.color:06x}"


_MATERIAL_DISPLAY: Dict[ToolMaterial, DisplayMaterial] = {
    ToolMaterial.HSS: DisplayMaterial(0x3B82F6, 60, 0x444444),
    ToolMaterial.CARBIDE: DisplayMaterial(0x64748B, 80, 0x666666),
    ToolMaterial.COBALT: DisplayMaterial(0x6366F1, 70, 0x555555),
    ToolMaterial.TITANIUM: DisplayMaterial(0xF59E0B, 75, 0x666666),
}

# Coatings override the base material colour; polished keeps it
_FINISH_DISPLAY: Dict[SurfaceFinish, DisplayMaterial] = {
    SurfaceFinish.BLACK_OXIDE: DisplayMaterial(0x1E293B, 40, 0x333333),
    SurfaceFinish.TIN: DisplayMaterial(0xFCD34D, 90, 0x777777),
    SurfaceFinish.ALN: DisplayMaterial(0xD1D5DB, 85, 0x666666),
}


def display_material(material: ToolMaterial, finish: SurfaceFinish) -> DisplayMaterial:
    """Renderer material for a tool material and surface finish."""
    if finish in _FINISH_DISPLAY:
        return _FINISH_DISPLAY[finish]
    return _MATERIAL_DISPLAY.get(material, _MATERIAL_DISPLAY[ToolMaterial.HSS])


def format_tolerance(tolerance: ToleranceClass) -> str:
    return TOLERANCE_BANDS.get(tolerance, tolerance.value)


def format_material(material: ToolMaterial) -> str:
    return MATERIAL_NAMES.get(material, material.value)


def format_surface_finish(finish: SurfaceFinish) -> str:
    return FINISH_NAMES.get(finish, finish.value)


def flute_recommendation(flute_count: int) -> str:
    return FLUTE_RECOMMENDATIONS.get(flute_count, "General purpose")


def coolant_recommendation(material: ToolMaterial) -> str:
    return COOLANT_RECOMMENDATIONS.get(material, "Recommended")


def export_basename(params: ToolParameters) -> str:
    """Base file name: <ToolType>_<diameter>x<length>_<flutes>F.

    Example: Drill_10x100_2F
    """
    type_name = TOOL_TYPE_NAMES[params.tool_type]
    return f"{type_name}_{params.diameter:g}x{params.length:g}_{params.flute_count}F"


def export_filename(params: ToolParameters, extension: str) -> str:
    """File name with extension, e.g. ``Drill_10x100_2F.stl``."""
    return f"{export_basename(params)}.{extension.lstrip('.').lower()}"


def _validation_to_dict(validation: "ValidationResult") -> dict:
    return {
        'valid': validation.valid,
        'messages': [
            {
                'severity': m.severity.value,
                'code': m.code,
                'message': m.message,
                'suggestion': m.suggestion,
            }
            for m in validation.messages
        ],
    }


def to_json(
    params: ToolParameters,
    validation: Optional["ValidationResult"] = None,
    indent: int = 2,
    include_derived: bool = True,
) -> str:
    """Convert ToolParameters to JSON string.

    The result loads back with ``load_parameters_json`` (the parameter set
    is under the ``"parameters"`` key).

    Args:
        params: Tool parameters
        validation: Optional validation results to include in output
        indent: JSON indentation level (default: 2)
        include_derived: Include derived quantities (default: True)

    Returns:
        JSON string with schema version, parameters and optional extras
    """
    data = {
        'schema_version': SCHEMA_VERSION,
        'parameters': params.model_dump(mode='json'),
    }

    if include_derived:
        data['derived'] = asdict(calculate_derived_quantities(params))

    if validation is not None:
        data['validation'] = _validation_to_dict(validation)

    return json.dumps(data, indent=indent)


def to_csv(params: ToolParameters, include_derived: bool = True) -> str:
    """Convert ToolParameters to ``parameter,value`` CSV rows."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator='\n')
    writer.writerow(['parameter', 'value'])

    for name, value in params.model_dump(mode='json').items():
        writer.writerow([name, value])

    if include_derived:
        derived = calculate_derived_quantities(params)
        for name in ('minimum_length', 'chamfer_height', 'tip_height', 'fluted_part_length'):
            value = getattr(derived, name)
            writer.writerow([name, round(value, 4) if isinstance(value, float) else value])

    return buf.getvalue()


def to_markdown(
    params: ToolParameters,
    validation: Optional["ValidationResult"] = None,
) -> str:
    """Convert ToolParameters to a technical specification sheet.

    Args:
        params: Tool parameters
        validation: Optional validation results to include

    Returns:
        Markdown specification string
    """
    derived = calculate_derived_quantities(params)
    tolerance = params.tolerance

    md = f"# {TOOL_TYPE_NAMES[params.tool_type]} Technical Specification\n\n"

    md += "## Geometry\n\n"
    md += "| Parameter | Value |\n"
    md += "|-----------|-------|\n"
    md += f"| Diameter | {params.diameter:g} mm {tolerance.value} ({format_tolerance(tolerance)}) |\n"
    md += f"| Overall Length | {derived.length:g} mm |\n"
    md += f"| Shank Diameter | {params.shank_diameter:g} mm |\n"
    md += f"| Shank Length | {params.shank_length:g} mm |\n"
    md += f"| Flute Length | {params.flute_length:g} mm |\n"
    md += f"| Non-Cutting Length | {derived.non_cutting_length:g} mm |\n"
    md += f"| Tip Angle | {params.tip_angle:g}° |\n"
    md += f"| Helix Angle | {params.helix_angle:g}° |\n"
    md += f"| Number of Flutes | {params.flute_count} |\n\n"

    md += "## Derived Dimensions\n\n"
    md += "| Dimension | Value |\n"
    md += "|-----------|-------|\n"
    md += f"| Minimum Length | {derived.minimum_length} mm |\n"
    md += f"| Chamfer Height | {derived.chamfer_height:.3f} mm |\n"
    md += f"| Tip Height | {derived.tip_height:.3f} mm |\n"
    md += f"| Cutting Length | {derived.fluted_part_length:.3f} mm |\n\n"

    if derived.length_clamped:
        md += (
            f"**Note:** requested length {params.length:g} mm was below the minimum "
            f"and has been increased to {derived.length:g} mm.\n\n"
        )

    md += "## Materials\n\n"
    md += f"- **Material:** {format_material(params.material)}\n"
    md += f"- **Surface Treatment:** {format_surface_finish(params.surface_finish)}\n\n"

    md += "## Application\n\n"
    md += f"- **Recommended for:** {flute_recommendation(params.flute_count)}\n"
    md += f"- **Coolant Requirement:** {coolant_recommendation(params.material)}\n\n"

    md += "## Tolerances\n\n"
    md += f"- Diameter: {format_tolerance(tolerance)}\n"
    md += "- Length: ±0.5 mm\n"
    md += "- Runout: 0.02 mm TIR (Total Indicator Reading)\n"
    md += "- Concentricity: 0.01 mm\n"

    if validation:
        md += "\n## Validation\n\n"

        if validation.valid:
            md += "**Status:** ✅ Parameters are valid\n\n"
        else:
            md += "**Status:** ❌ Parameters have errors\n\n"

        for title, msgs in (("Errors", validation.errors), ("Warnings", validation.warnings)):
            if msgs:
                md += f"### {title}\n\n"
                for msg in msgs:
                    md += f"- **{msg.code}**: {msg.message}\n"
                    if msg.suggestion:
                        md += f"  - *Suggestion*: {msg.suggestion}\n"
                md += "\n"

        if validation.infos:
            md += "### Information\n\n"
            for msg in validation.infos:
                md += f"- {msg.message}\n"

    md += "\n## Notes\n\n"
    md += "- All dimensions in millimeters unless otherwise noted\n"

    return md


def to_summary(params: ToolParameters) -> str:
    """One-paragraph plain-text summary for terminal output."""
    derived = calculate_derived_quantities(params)
    lines = [
        f"{TOOL_TYPE_NAMES[params.tool_type]} Ø{params.diameter:g} {params.tolerance.value} "
        f"x {derived.length:g} mm, {params.flute_count} flute(s)",
        f"  Shank: Ø{params.shank_diameter:g} x {params.shank_length:g} mm",
        f"  Flutes: {params.flute_length:g} mm, helix {params.helix_angle:g}°, tip {params.tip_angle:g}°",
        f"  Material: {format_material(params.material)}, {format_surface_finish(params.surface_finish)}",
    ]
    return "\n".join(lines)

"""
JSON input/output for cutting tool parameters.

Loads and saves tool parameter sets. Field names are snake_case; the
camelCase names used by browser front ends (``shankDiameter``,
``fluteCount`` ...) are accepted as aliases on input.

Uses Pydantic for automatic validation and enum coercion. Range checks are
deliberately left to ``calculator.validation`` so that out-of-range values
produce coded validation messages instead of parse errors.
"""

import json
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from ..calculator.constants import LINEAR_DEFLECTION_MM
from ..enums import FluteProfile, SurfaceFinish, ToleranceClass, ToolMaterial, ToolType

SCHEMA_VERSION = "1.0"


class ToolParameters(BaseModel):
    """User-facing parameter set for one rotary cutting tool (all lengths in mm)."""

    model_config = ConfigDict(
        extra='ignore',
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
    )

    diameter: float
    shank_diameter: float
    length: float
    shank_length: float
    flute_length: float
    non_cutting_length: float = 0.0  # Always recomputed by the calculator
    flute_count: int = 2
    tip_angle: float = 118.0  # 180 = flat bottom
    helix_angle: float = 30.0  # 0 = straight flutes
    tolerance: ToleranceClass = ToleranceClass.h8
    material: ToolMaterial = ToolMaterial.HSS
    surface_finish: SurfaceFinish = SurfaceFinish.POLISHED
    tool_type: ToolType = ToolType.DRILL

    @field_validator('tool_type', mode='before')
    @classmethod
    def coerce_tool_type(cls, v):
        # Accept "step_drill" / "stepdrill" as well as "step-drill"
        if isinstance(v, str):
            key = v.strip().lower().replace('_', '-')
            if key == 'stepdrill':
                key = 'step-drill'
            return ToolType(key)
        return v

    @field_validator('surface_finish', mode='before')
    @classmethod
    def coerce_surface_finish(cls, v):
        if isinstance(v, str):
            return SurfaceFinish(v.strip().lower().replace('_', '-'))
        return v

    @field_validator('material', mode='before')
    @classmethod
    def coerce_material(cls, v):
        if isinstance(v, str):
            return ToolMaterial(v.strip().lower())
        return v


class GenerationSettings(BaseModel):
    """Generation settings that are not part of the tool definition."""

    model_config = ConfigDict(extra='ignore')

    show_notifications: bool = True
    boolean_backend: Literal["occt", "algebra"] = "occt"
    fuzzy_value: Optional[float] = None  # OCCT boolean fuzzy tolerance (mm)
    flute_profile: FluteProfile = FluteProfile.CIRCLE
    linear_deflection: float = LINEAR_DEFLECTION_MM
    repair: bool = True


def parameters_from_dict(data: Dict[str, Any]) -> ToolParameters:
    """Build ToolParameters from a plain dict (snake_case or camelCase keys)."""
    if 'parameters' in data and isinstance(data['parameters'], dict):
        data = data['parameters']
    return ToolParameters.model_validate(data)


def parameters_to_dict(params: ToolParameters) -> Dict[str, Any]:
    """Convert ToolParameters to a JSON-compatible dict with schema version."""
    data = params.model_dump(mode='json')
    data['schema_version'] = SCHEMA_VERSION
    return data


def load_parameters_json(filepath: Union[str, Path]) -> ToolParameters:
    """
    Load tool parameters from a JSON file.

    Accepts either a bare parameter object or one wrapped in a
    ``"parameters"`` key.

    Args:
        filepath: Path to JSON file

    Returns:
        ToolParameters

    Raises:
        FileNotFoundError: If file doesn't exist
        ValidationError: If JSON is missing required fields or has bad types
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"Parameter file not found: {filepath}")

    with open(filepath, 'r') as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError("Invalid parameter JSON - expected an object at top level")

    return parameters_from_dict(data)


def save_parameters_json(params: ToolParameters, filepath: Union[str, Path]) -> None:
    """
    Save tool parameters to a JSON file.

    Args:
        params: Parameters to save
        filepath: Path to save JSON file
    """
    filepath = Path(filepath)

    with open(filepath, 'w') as f:
        json.dump(parameters_to_dict(params), f, indent=2)

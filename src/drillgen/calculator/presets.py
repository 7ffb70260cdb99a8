"""
Default parameter sets per tool type.

Each preset is a complete, valid ToolParameters set that the CLI uses as a
starting point when no parameter file is given.
"""

from typing import Any, Dict, Union

from ..enums import ToolType

TOOL_PRESETS: Dict[ToolType, Dict[str, Any]] = {
    ToolType.DRILL: {
        "diameter": 10.0,
        "shank_diameter": 10.0,
        "length": 100.0,
        "shank_length": 30.0,
        "flute_length": 60.0,
        "non_cutting_length": 10.0,
        "flute_count": 2,
        "tip_angle": 118.0,
        "helix_angle": 30.0,
        "tolerance": "h8",
        "material": "hss",
        "surface_finish": "polished",
    },
    ToolType.ENDMILL: {
        "diameter": 10.0,
        "shank_diameter": 10.0,
        "length": 85.0,
        "shank_length": 40.0,
        "flute_length": 40.0,
        "flute_count": 4,
        "tip_angle": 180.0,
        "helix_angle": 30.0,
        "tolerance": "h7",
        "material": "carbide",
        "surface_finish": "aln",
    },
    ToolType.REAMER: {
        "diameter": 8.0,
        "shank_diameter": 8.0,
        "length": 100.0,
        "shank_length": 40.0,
        "flute_length": 45.0,
        "flute_count": 4,
        "tip_angle": 90.0,
        "helix_angle": 0.0,
        "tolerance": "H7",
        "material": "cobalt",
        "surface_finish": "polished",
    },
    ToolType.STEP_DRILL: {
        "diameter": 12.0,
        "shank_diameter": 8.0,
        "length": 100.0,
        "shank_length": 35.0,
        "flute_length": 55.0,
        "flute_count": 2,
        "tip_angle": 135.0,
        "helix_angle": 28.0,
        "tolerance": "h8",
        "material": "titanium",
        "surface_finish": "black-oxide",
    },
}


def get_preset(tool_type: Union[ToolType, str]) -> Dict[str, Any]:
    """
    Get a copy of the default parameters for a tool type.

    Args:
        tool_type: ToolType or its string value ("drill", "endmill", ...)

    Returns:
        Parameter dict suitable for ToolParameters.model_validate()

    Raises:
        ValueError: If tool_type is unknown
    """
    if isinstance(tool_type, str):
        tool_type = ToolType(tool_type.lower().replace('_', '-'))
    preset = dict(TOOL_PRESETS[tool_type])
    preset["tool_type"] = tool_type.value
    return preset

"""
Drillgen IO - parameter models, JSON loaders and exporters.

Example:
    >>> from drillgen.io import load_parameters_json, save_parameters_json
    >>>
    >>> params = load_parameters_json("drill.json")
    >>> save_parameters_json(params, "drill_copy.json")

Export and packaging (``drillgen.io.package``) and the DXF drawing writer
(``drillgen.io.drawing``) need the geometry kernel and are imported from
their own modules.
"""

from .loaders import (
    SCHEMA_VERSION,
    ToolParameters,
    GenerationSettings,
    parameters_from_dict,
    parameters_to_dict,
    load_parameters_json,
    save_parameters_json,
)

__all__ = [
    "SCHEMA_VERSION",
    "ToolParameters",
    "GenerationSettings",
    "parameters_from_dict",
    "parameters_to_dict",
    "load_parameters_json",
    "save_parameters_json",
]

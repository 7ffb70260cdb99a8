"""
Cutting Tool Calculator - derived quantities, layout and validation.

Pure Python, no geometry kernel required.

Example:
    >>> from drillgen.calculator import calculate_derived_quantities, get_preset
    >>> from drillgen.io import ToolParameters
    >>>
    >>> params = ToolParameters(**get_preset("drill"))
    >>> derived = calculate_derived_quantities(params)
    >>> derived.minimum_length
    93

Output formatters live in ``drillgen.calculator.output`` and are not
imported here (they depend on the IO models, which depend on this package).
"""

from .core import (
    # Rounding
    round_half_up,

    # Low-level calculation functions
    calculate_chamfer_height,
    calculate_tip_height,
    calculate_minimum_length,
    calculate_fluted_part_length,
    calculate_radial_segments,

    # Derived quantities and layout
    calculate_derived_quantities,
    resolve_parameters,
    build_layout,
    DerivedQuantities,
    GeometrySegment,
    ToolLayout,
)

from .validation import (
    validate_parameters,
    Severity,
    ValidationMessage,
    ValidationResult,
)

from .presets import TOOL_PRESETS, get_preset

__all__ = [
    "round_half_up",
    "calculate_chamfer_height",
    "calculate_tip_height",
    "calculate_minimum_length",
    "calculate_fluted_part_length",
    "calculate_radial_segments",
    "calculate_derived_quantities",
    "resolve_parameters",
    "build_layout",
    "DerivedQuantities",
    "GeometrySegment",
    "ToolLayout",
    "validate_parameters",
    "Severity",
    "ValidationMessage",
    "ValidationResult",
    "TOOL_PRESETS",
    "get_preset",
]

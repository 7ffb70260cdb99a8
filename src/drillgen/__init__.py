"""
Drillgen - parametric rotary cutting tool generator.

Drills, endmills, reamers and step drills from a handful of parameters to
a repaired 3D solid, a render-ready mesh, and STL/STEP/DXF/JSON/CSV exports.

Example:
    >>> from drillgen import ToolGeometry, ToolParameters, get_preset
    >>> from pathlib import Path
    >>> from drillgen.io.package import generate_package, save_package_to_dir
    >>>
    >>> params = ToolParameters(**get_preset("drill"))
    >>> result = ToolGeometry(params).build()
    >>>
    >>> files = generate_package(result, formats=["stl", "dxf"])
    >>> save_package_to_dir(files, Path("out"))

Note: All imports are lazy-loaded for fast startup. The calculator can be
imported without triggering geometry (build123d) imports.
"""

__version__ = "0.1.0"

# Define which names come from which submodule
# All imports are lazy to minimize startup time

_ENUMS = {
    "ToolType",
    "ToleranceClass",
    "ToolMaterial",
    "SurfaceFinish",
    "FluteProfile",
    "SegmentKind",
    "ProjectionView",
    "GenerationStatus",
}

_EXCEPTIONS = {"DrillgenError", "ParameterValidationError", "UnsupportedFormatError"}

_CALCULATOR = {
    "calculate_derived_quantities",
    "resolve_parameters",
    "build_layout",
    "validate_parameters",
    "Severity",
    "ValidationResult",
    "TOOL_PRESETS",
    "get_preset",
}

_IO = {
    "ToolParameters",
    "GenerationSettings",
    "load_parameters_json",
    "save_parameters_json",
}

_CORE = {
    "ToolGeometry",
    "GenerationResult",
    "generate_tool",
    "Mesh",
    "project_tool",
}

# Cache for lazy-loaded modules
_modules = {}


def __getattr__(name):
    """Lazy load submodules when their attributes are accessed."""
    groups = (
        ("enums", _ENUMS),
        ("exceptions", _EXCEPTIONS),
        ("calculator", _CALCULATOR),
        ("io", _IO),
        ("core", _CORE),
    )
    for module_name, names in groups:
        if name in names:
            if module_name not in _modules:
                import importlib
                _modules[module_name] = importlib.import_module(f".{module_name}", __name__)
            return getattr(_modules[module_name], name)

    raise AttributeError(f"module 'drillgen' has no attribute {name!r}")


__all__ = [
    "__version__",
    *sorted(_ENUMS),
    *sorted(_EXCEPTIONS),
    *sorted(_CALCULATOR),
    *sorted(_IO),
    *sorted(_CORE),
]

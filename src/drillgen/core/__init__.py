"""
Drillgen Core - geometry synthesis engine.

Builds the tool solid with build123d (blank, helical flutes, boolean cut,
repair), tessellates it into a Mesh and extracts 2D drawing views.

Example:
    >>> from drillgen.core import ToolGeometry
    >>> from drillgen.io import ToolParameters
    >>> from drillgen.calculator import get_preset
    >>>
    >>> tool = ToolGeometry(ToolParameters(**get_preset("drill")))
    >>> result = tool.build()
    >>> result.mesh.triangle_count
"""

from .mesh import Mesh, merge_meshes, mesh_from_shape
from .helix import HelixPath, calculate_helix_pitch, create_flute_paths
from .primitives import build_blank
from .flutes import FluteSweeper
from .boolean import (
    BooleanBackend,
    BooleanEngine,
    BooleanResult,
    OCCTBooleanBackend,
    AlgebraBooleanBackend,
    get_boolean_backend,
)
from .geometry_repair import heal_mesh, repair_geometry, simplify_geometry
from .projection import Drawing, ProjectedView, project_tool
from .tool import GenerationResult, ToolGeometry, generate_tool

__all__ = [
    "Mesh",
    "merge_meshes",
    "mesh_from_shape",
    "HelixPath",
    "calculate_helix_pitch",
    "create_flute_paths",
    "build_blank",
    "FluteSweeper",
    "BooleanBackend",
    "BooleanEngine",
    "BooleanResult",
    "OCCTBooleanBackend",
    "AlgebraBooleanBackend",
    "get_boolean_backend",
    "heal_mesh",
    "repair_geometry",
    "simplify_geometry",
    "Drawing",
    "ProjectedView",
    "project_tool",
    "GenerationResult",
    "ToolGeometry",
    "generate_tool",
]

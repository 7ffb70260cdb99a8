"""
Base class for drillgen geometry classes.

Provides the shared export and display methods used by ToolGeometry.
"""

import logging

from build123d import export_step

logger = logging.getLogger(__name__)


class BaseGeometry:
    """Base class providing shared export/display methods for geometry classes.

    Subclasses must:
    - Set self._result = None in __init__
    - Implement build() -> GenerationResult
    - Set _part_name class attribute for log messages
    """

    _part_name: str = "tool"

    def show(self):
        """Display in OCP viewer (requires ocp_vscode)."""
        part = self.build().part
        try:
            from ocp_vscode import show as ocp_show
        except ImportError:
            logger.warning("ocp_vscode is not installed, nothing to show")
            return part
        ocp_show(part)
        return part

    def export_step(self, filepath: str):
        """Export the final solid to a STEP file (builds if not already built)."""
        result = self.build()

        logger.info(f"Exporting {self._part_name}: volume={result.part.volume:.2f} mm³")
        export_step(result.part, filepath)
        logger.info(f"Exported {self._part_name} to {filepath}")

    def export_stl(self, filepath: str):
        """Export the rendered mesh to a binary STL file (builds if not already built)."""
        from ..io.package import mesh_to_stl_bytes

        result = self.build()
        with open(filepath, 'wb') as f:
            f.write(mesh_to_stl_bytes(result.mesh))
        logger.info(f"Exported {self._part_name} to {filepath} ({result.mesh.triangle_count} triangles)")

"""
Blank (unfluted tool body) construction using build123d.

Each axial segment becomes a cylinder or frustum along +Y; the segments
are fused into a single solid and simplified so coincident faces of equal
radius merge before the flute cut.
"""

import logging
from typing import List

from OCP.BRepAlgoAPI import BRepAlgoAPI_Fuse
from build123d import Part, Plane, Solid

from ..calculator.core import GeometrySegment, ToolLayout
from .geometry_repair import as_part, simplify_geometry

logger = logging.getLogger(__name__)


def _segment_plane(y: float) -> Plane:
    """Plane at axial position y whose normal is the tool axis."""
    return Plane(origin=(0, y, 0), x_dir=(1, 0, 0), z_dir=(0, 1, 0))


def make_segment_solid(segment: GeometrySegment) -> Solid:
    """
    Create the solid for one segment.

    Equal radii give a cylinder; otherwise a frustum (or a cone when the
    end radius is zero, as for the tip).
    """
    plane = _segment_plane(segment.start)
    if segment.start_radius == segment.end_radius:
        return Solid.make_cylinder(segment.start_radius, segment.length, plane)
    return Solid.make_cone(segment.start_radius, segment.end_radius, segment.length, plane)


def fuse_solids(solids: List[Solid]) -> Part:
    """Fuse solids in order with OCP, falling back to the build123d operator."""
    if not solids:
        raise ValueError("Nothing to fuse")

    result_shape = solids[0].wrapped
    for solid in solids[1:]:
        try:
            fuse = BRepAlgoAPI_Fuse(result_shape, solid.wrapped)
            fuse.Build()
            if fuse.IsDone():
                result_shape = fuse.Shape()
                continue
            logger.warning("OCP segment fuse failed, using build123d operator")
        except Exception as e:
            logger.warning(f"OCP segment fuse error ({e}), using build123d operator")
        result_shape = (as_part(result_shape) + solid).wrapped

    return as_part(result_shape)


def build_blank(layout: ToolLayout) -> Part:
    """
    Build the blank solid for a tool layout.

    A flat tip contributes no segment: the fluted body's planar end face
    closes the tool.

    Args:
        layout: Segment layout from ``build_layout``

    Returns:
        Single fused, simplified Part spanning -length/2 .. +length/2 on Y
    """
    solids = []
    for segment in layout.segments:
        if segment.length <= 0:
            logger.debug(f"Skipping zero-length {segment.kind.value} segment")
            continue
        logger.debug(
            f"Segment {segment.kind.value}: y={segment.start:.3f}..{segment.end:.3f}, "
            f"r={segment.start_radius:.3f}->{segment.end_radius:.3f}"
        )
        solids.append(make_segment_solid(segment))

    logger.info(f"Fusing {len(solids)} blank segments...")
    blank = fuse_solids(solids)
    blank = simplify_geometry(blank, "blank")

    logger.debug(f"Blank volume: {blank.volume:.2f} mm³")
    return blank

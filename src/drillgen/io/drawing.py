"""
DXF technical drawing writer.

Lays out the projected views of a ``Drawing`` on one sheet (top view above
the front view, side view to the right of the front view) with one layer
per view plus Dimensions and Text layers.
"""

import io
import logging
import math
from datetime import date
from typing import Optional, Tuple

import ezdxf
from ezdxf import units
from ezdxf.enums import TextEntityAlignment

from ..calculator.constants import (
    DXF_LAYER_COLORS,
    DXF_TEXT_HEIGHT_MM,
    DXF_TITLE_HEIGHT_MM,
)
from ..core.projection import Dimension, Drawing, ProjectedView
from ..enums import ProjectionView

logger = logging.getLogger(__name__)

VIEW_LAYERS = {
    ProjectionView.TOP: "Top",
    ProjectionView.FRONT: "Front",
    ProjectionView.SIDE: "Side",
}

VIEW_LABELS = {
    ProjectionView.TOP: "TOP VIEW",
    ProjectionView.FRONT: "FRONT VIEW",
    ProjectionView.SIDE: "SIDE VIEW",
}

LABEL_GAP_MM = 10.0
DIMENSION_TEXT_GAP_MM = 2.0


def view_origins(drawing: Drawing) -> dict:
    """
    Sheet position of each view's local origin.

    The margin is half the largest model extent; views are spaced so
    that their extents plus one margin never overlap.
    """
    sx, sy, sz = drawing.size
    margin = max(sx, sy, sz) * 0.5
    offset_y = sy + margin * 2

    # Projected coordinates are centred on the tool axis, shift by half extents
    return {
        ProjectionView.TOP: (margin + sx / 2, offset_y * 2 + sz / 2),
        ProjectionView.FRONT: (margin + sx / 2, offset_y + sy / 2),
        ProjectionView.SIDE: (margin + sx + margin + sz / 2, offset_y + sy / 2),
    }


def _shift(p: Tuple[float, float], origin: Tuple[float, float]) -> Tuple[float, float]:
    return (p[0] + origin[0], p[1] + origin[1])


def _add_text(msp, text: str, position, height: float, layer: str = "Text",
              align: TextEntityAlignment = TextEntityAlignment.MIDDLE_CENTER, rotation: float = 0.0):
    msp.add_text(
        text,
        dxfattribs={'layer': layer, 'height': height, 'rotation': rotation},
    ).set_placement(position, align=align)


def _add_view(msp, view: ProjectedView, origin: Tuple[float, float]) -> None:
    layer = VIEW_LAYERS[view.view]

    for seg in view.segments:
        msp.add_line(_shift(seg.start, origin), _shift(seg.end, origin), dxfattribs={'layer': layer})

    for circle in view.circles:
        msp.add_circle(_shift(circle.center, origin), circle.radius, dxfattribs={'layer': layer})

    (lo_x, lo_y), (hi_x, _) = view.bounds
    label_pos = (origin[0] + (lo_x + hi_x) / 2, origin[1] + lo_y - LABEL_GAP_MM)
    _add_text(msp, VIEW_LABELS[view.view], label_pos, DXF_TEXT_HEIGHT_MM)


def _add_dimension(msp, dim: Dimension, origin: Tuple[float, float]) -> None:
    """Dimension line with two extension lines and centred value text."""
    (x1, y1), (x2, y2) = _shift(dim.start, origin), _shift(dim.end, origin)
    length = math.hypot(x2 - x1, y2 - y1)
    if length <= 0:
        return

    # Unit normal to the right of start -> end
    nx, ny = (y2 - y1) / length, -(x2 - x1) / length
    ox, oy = nx * dim.offset, ny * dim.offset

    attribs = {'layer': 'Dimensions'}
    msp.add_line((x1, y1), (x1 + ox, y1 + oy), dxfattribs=attribs)
    msp.add_line((x2, y2), (x2 + ox, y2 + oy), dxfattribs=attribs)
    msp.add_line((x1 + ox, y1 + oy), (x2 + ox, y2 + oy), dxfattribs=attribs)

    side = math.copysign(DIMENSION_TEXT_GAP_MM, dim.offset) if dim.offset else DIMENSION_TEXT_GAP_MM
    text_pos = ((x1 + x2) / 2 + ox + nx * side, (y1 + y2) / 2 + oy + ny * side)
    rotation = math.degrees(math.atan2(y2 - y1, x2 - x1))
    if rotation > 90 or rotation <= -90:
        rotation -= math.copysign(180, rotation)
    _add_text(msp, dim.text, text_pos, DXF_TEXT_HEIGHT_MM, layer='Dimensions', rotation=rotation)


def build_dxf_document(drawing: Drawing, drawing_date: Optional[date] = None):
    """
    Create an ezdxf document for a Drawing.

    Args:
        drawing: Projected views and annotations
        drawing_date: Date printed on the sheet (default: today)

    Returns:
        ezdxf Drawing document (not yet written)
    """
    doc = ezdxf.new('R2000')
    doc.units = units.MM
    msp = doc.modelspace()

    for name, color in DXF_LAYER_COLORS.items():
        if name not in doc.layers:
            doc.layers.new(name=name, dxfattribs={'color': color})

    # Title block
    _add_text(msp, f"{drawing.title} - Technical Drawing", (10, 10), DXF_TITLE_HEIGHT_MM,
              align=TextEntityAlignment.LEFT)
    drawing_date = drawing_date or date.today()
    _add_text(msp, f"Date: {drawing_date.isoformat()}", (10, 20), DXF_TEXT_HEIGHT_MM,
              align=TextEntityAlignment.LEFT)

    origins = view_origins(drawing)
    for view_kind, view in drawing.views.items():
        _add_view(msp, view, origins[view_kind])

    for dim in drawing.dimensions:
        if dim.view in drawing.views:
            _add_dimension(msp, dim, origins[dim.view])

    # Notes stacked above the title, below the lowest view
    for i, note in enumerate(drawing.notes):
        _add_text(msp, note, (10, 30 + i * DXF_TEXT_HEIGHT_MM * 1.8), DXF_TEXT_HEIGHT_MM,
                  align=TextEntityAlignment.LEFT)

    logger.debug(
        f"DXF document: {len(drawing.views)} views, {len(drawing.dimensions)} dimensions, "
        f"{len(msp)} entities"
    )
    return doc


def export_dxf(drawing: Drawing, drawing_date: Optional[date] = None) -> bytes:
    """Render a Drawing to DXF file contents."""
    doc = build_dxf_document(drawing, drawing_date)
    stream = io.StringIO()
    doc.write(stream)
    return doc.encode(stream.getvalue())

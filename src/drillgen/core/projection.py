"""
2D projection of a generated tool for technical drawings.

Produces, per orthographic view, a list of 2D line segments and circles:

- sharp mesh edges (dihedral angle above SHARP_EDGE_THRESHOLD_DEG, plus
  open boundary edges)
- exact cross-section circles at every blank segment boundary, which are
  more reliable than thresholded mesh edges on round features
- helix guide lines, reduced to their start, middle and end segments

plus dimension and note annotations derived from the parameters.

View axes (horizontal, vertical; depth):

- FRONT: (x, y; z)
- SIDE:  (z, y; x)
- TOP:   (x, z; y)

Output is deterministic: the same mesh and parameters always give the
same, identically ordered, segment lists.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import trimesh

from ..calculator.constants import (
    DIMENSION_OFFSET_MM,
    MIN_SEGMENT_LENGTH_MM,
    SHARP_EDGE_THRESHOLD_DEG,
    SIDE_VIEW_DEDUPE_DECIMALS,
    WELD_PRECISION_DECIMALS,
)
from ..calculator.core import ToolLayout
from ..enums import ProjectionView
from .helix import HelixPath
from .mesh import Mesh, Vector3

logger = logging.getLogger(__name__)

Point2D = Tuple[float, float]
Edge3D = Tuple[Vector3, Vector3]

GUIDE_SAMPLES = 64


@dataclass(frozen=True, order=True)
class Segment2D:
    """A projected line segment, endpoints in canonical (sorted) order."""
    start: Point2D
    end: Point2D

    @classmethod
    def between(cls, a: Point2D, b: Point2D) -> "Segment2D":
        return cls(a, b) if a <= b else cls(b, a)

    @property
    def length(self) -> float:
        return math.hypot(self.end[0] - self.start[0], self.end[1] - self.start[1])


@dataclass(frozen=True, order=True)
class Circle2D:
    center: Point2D
    radius: float


@dataclass(frozen=True)
class Dimension:
    """Linear dimension between two points of a view, drawn at ``offset``.

    ``offset`` is the signed distance of the dimension line from the
    measured points; positive values lie to the right of start -> end.
    """
    view: ProjectionView
    start: Point2D
    end: Point2D
    offset: float
    text: str


@dataclass
class ProjectedView:
    view: ProjectionView
    segments: List[Segment2D] = field(default_factory=list)
    circles: List[Circle2D] = field(default_factory=list)

    @property
    def bounds(self) -> Tuple[Point2D, Point2D]:
        """(min, max) corners of all geometry in the view."""
        xs: List[float] = []
        ys: List[float] = []
        for s in self.segments:
            xs.extend((s.start[0], s.end[0]))
            ys.extend((s.start[1], s.end[1]))
        for c in self.circles:
            xs.extend((c.center[0] - c.radius, c.center[0] + c.radius))
            ys.extend((c.center[1] - c.radius, c.center[1] + c.radius))
        if not xs:
            return (0.0, 0.0), (0.0, 0.0)
        return (min(xs), min(ys)), (max(xs), max(ys))


@dataclass
class Drawing:
    """Projected views plus annotations, ready for a vector writer."""
    title: str
    views: Dict[ProjectionView, ProjectedView]
    size: Vector3 = (0.0, 0.0, 0.0)  # Model bounding box extents
    dimensions: List[Dimension] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)


def project_point(p: Vector3, view: ProjectionView) -> Point2D:
    if view == ProjectionView.FRONT:
        return (p[0], p[1])
    if view == ProjectionView.SIDE:
        return (p[2], p[1])
    return (p[0], p[2])


def view_depth(p: Vector3, view: ProjectionView) -> float:
    """Distance towards the viewer (larger is nearer)."""
    if view == ProjectionView.FRONT:
        return p[2]
    if view == ProjectionView.SIDE:
        return p[0]
    return p[1]


def extract_sharp_edges(mesh: Mesh, threshold_deg: float = SHARP_EDGE_THRESHOLD_DEG) -> List[Edge3D]:
    """
    Feature edges of a triangle mesh.

    Vertices are merged by rounded position first, so edges shared by
    triangles that do not share vertex indices (tessellators duplicate
    vertices per face) are still recognised as shared. An edge is kept
    when it borders only one triangle or when the angle between its two
    faces exceeds ``threshold_deg``.

    Returns:
        Edges as (a, b) position pairs, a < b, sorted
    """
    if mesh.triangle_count == 0:
        return []

    tm = mesh.to_trimesh()
    tm.merge_vertices(digits_vertex=WELD_PRECISION_DECIMALS)
    tm.update_faces(tm.nondegenerate_faces())

    sharp = tm.face_adjacency_edges[tm.face_adjacency_angles > math.radians(threshold_deg)]
    open_rows = np.asarray(
        trimesh.grouping.group_rows(tm.edges_sorted, require_count=1), dtype=np.int64
    ).ravel()
    boundary = tm.edges_sorted[open_rows]

    vertices = np.round(tm.vertices, WELD_PRECISION_DECIMALS) + 0.0
    edges = set()
    for a, b in np.vstack((sharp.reshape(-1, 2), boundary.reshape(-1, 2))):
        p, q = tuple(vertices[a].tolist()), tuple(vertices[b].tolist())
        if p == q:
            continue
        edges.add((p, q) if p < q else (q, p))

    return sorted(edges)


def boundary_circles(layout: ToolLayout) -> List[Tuple[float, float]]:
    """(y, radius) of every distinct non-zero segment end circle, sorted."""
    circles = set()
    for segment in layout.segments:
        for y, r in ((segment.start, segment.start_radius), (segment.end, segment.end_radius)):
            if r > 0:
                circles.add((round(y, 6) + 0.0, round(r, 6) + 0.0))
    return sorted(circles)


def helix_guide_edges(paths: Sequence[HelixPath], samples: int = GUIDE_SAMPLES) -> List[Edge3D]:
    """Start, middle and end segment of each sampled helix polyline."""
    edges: List[Edge3D] = []
    for path in paths:
        points = [p.to_tuple() for p in path.sample(samples)]
        pairs = list(zip(points[:-1], points[1:]))
        if not pairs:
            continue
        picked = sorted({0, len(pairs) // 2, len(pairs) - 1})
        edges.extend(pairs[i] for i in picked)
    return edges


def _project_edges(edges: Iterable[Edge3D], view: ProjectionView) -> List[Segment2D]:
    segments = set()
    for a, b in edges:
        seg = Segment2D.between(project_point(a, view), project_point(b, view))
        if seg.length > MIN_SEGMENT_LENGTH_MM:
            segments.add(seg)
    return sorted(segments)


def _project_side(edges: Sequence[Edge3D]) -> List[Segment2D]:
    """Side view: nearest edges first, skip repeats of an already drawn 2D segment."""
    view = ProjectionView.SIDE
    decimals = SIDE_VIEW_DEDUPE_DECIMALS

    def depth_key(edge: Edge3D):
        a, b = edge
        return (-(view_depth(a, view) + view_depth(b, view)) / 2, a, b)

    drawn = set()
    segments = []
    for a, b in sorted(edges, key=depth_key):
        pa, pb = project_point(a, view), project_point(b, view)
        seg = Segment2D.between(pa, pb)
        if seg.length <= MIN_SEGMENT_LENGTH_MM:
            continue
        key = (
            round(seg.start[0], decimals) + 0.0, round(seg.start[1], decimals) + 0.0,
            round(seg.end[0], decimals) + 0.0, round(seg.end[1], decimals) + 0.0,
        )
        if key in drawn:
            continue
        drawn.add(key)
        segments.append(seg)

    return sorted(segments)


def project_view(
    view: ProjectionView,
    sharp_edges: Sequence[Edge3D],
    layout: Optional[ToolLayout] = None,
    guides: Sequence[Edge3D] = (),
) -> ProjectedView:
    """Project feature edges, boundary circles and helix guides into one view."""
    edges: List[Edge3D] = list(sharp_edges) + list(guides)
    circles: List[Circle2D] = []

    if layout is not None:
        for y, r in boundary_circles(layout):
            if view == ProjectionView.TOP:
                circles.append(Circle2D((0.0, 0.0), r))
            elif view == ProjectionView.FRONT:
                edges.append(((-r, y, 0.0), (r, y, 0.0)))
            else:
                edges.append(((0.0, y, -r), (0.0, y, r)))

    if view == ProjectionView.SIDE:
        segments = _project_side(edges)
    else:
        segments = _project_edges(edges, view)

    return ProjectedView(view=view, segments=segments, circles=sorted(set(circles)))


def build_dimensions(params, layout: ToolLayout) -> List[Dimension]:
    """Dimension annotations for the FRONT view (tool axis vertical)."""
    derived = layout.derived
    half = derived.length / 2
    r_max = max(params.diameter, params.shank_diameter) / 2
    front = ProjectionView.FRONT
    off = DIMENSION_OFFSET_MM

    dims = [
        Dimension(front, (r_max, -half), (r_max, half), off, f"{derived.length:g}"),
        Dimension(front, (-r_max, -half), (-r_max, -half + params.shank_length), -off,
                  f"{params.shank_length:g}"),
        Dimension(front, (-r_max, half - params.flute_length), (-r_max, half), -off,
                  f"{params.flute_length:g}"),
        Dimension(front, (-params.diameter / 2, half), (params.diameter / 2, half), -off,
                  f"Ø{params.diameter:g} {params.tolerance.value}"),
        Dimension(front, (-params.shank_diameter / 2, -half), (params.shank_diameter / 2, -half), off,
                  f"Ø{params.shank_diameter:g}"),
    ]
    return dims


def build_notes(params) -> List[str]:
    # Local import: output imports io.loaders, which must not load at core import time
    from ..calculator.output import format_material, format_surface_finish, format_tolerance

    return [
        f"TOLERANCE: {params.tolerance.value} ({format_tolerance(params.tolerance)})",
        f"MATERIAL: {format_material(params.material)}",
        f"FINISH: {format_surface_finish(params.surface_finish)}",
        f"FLUTES: {params.flute_count}",
        f"HELIX ANGLE: {params.helix_angle:g}°",
        f"TIP ANGLE: {params.tip_angle:g}°",
    ]


def project_tool(
    mesh: Mesh,
    params,
    layout: ToolLayout,
    paths: Sequence[HelixPath] = (),
    views: Sequence[ProjectionView] = (ProjectionView.TOP, ProjectionView.FRONT, ProjectionView.SIDE),
    title: str = "",
) -> Drawing:
    """
    Build a Drawing of a generated tool.

    Args:
        mesh: Final (healed) tool mesh
        params: ToolParameters the tool was generated from
        layout: Segment layout used for the blank
        paths: Flute helix paths to draw as guide lines
        views: Views to produce
        title: Drawing title

    Returns:
        Drawing with one ProjectedView per requested view
    """
    sharp = extract_sharp_edges(mesh)
    lo, hi = mesh.bounding_box or mesh.compute_bounding_box()
    guides = helix_guide_edges(paths)
    logger.debug(f"Projection: {len(sharp)} sharp edges, {len(guides)} guide segments")

    projected = {view: project_view(view, sharp, layout, guides) for view in views}

    return Drawing(
        title=title,
        views=projected,
        size=(hi[0] - lo[0], hi[1] - lo[1], hi[2] - lo[2]),
        dimensions=build_dimensions(params, layout),
        notes=build_notes(params),
    )

"""
Cutting Tool Calculator - Core Calculations

Derived quantities (chamfer height, tip height, minimum length,
non-cutting length) and the axial segment layout of the tool blank.

Coordinate convention: the tool axis is +Y, centred on the origin.
The shank starts at y = -length/2 and the tip ends at y = +length/2.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple, TYPE_CHECKING

from ..enums import SegmentKind
from .constants import (
    EXTENSION_MARGIN_FACTOR,
    FLAT_TIP_ANGLE_DEG,
    FLUTE_DEPTH_FACTOR,
    FLUTED_RADIAL_SEGMENTS_PER_MM,
    MAX_RADIAL_SEGMENTS,
    MIN_LENGTH_BUFFER_MM,
    MIN_RADIAL_SEGMENTS,
    RADIAL_SEGMENTS_PER_MM,
)

if TYPE_CHECKING:
    from ..io.loaders import ToolParameters


def round_half_up(value: float) -> int:
    """Round to nearest integer with halves rounding up (2.5 -> 3, -2.5 -> -2).

    Python's round() uses banker's rounding, which would make the
    minimum length jump between even and odd values for .5 inputs.
    """
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class DerivedQuantities:
    """Quantities derived from a ToolParameters set (lengths in mm)."""
    chamfer_height: float
    tip_height: float
    minimum_length: int
    non_cutting_length: float
    fluted_part_length: float
    length: float  # Effective total length (clamped to minimum_length if needed)
    length_clamped: bool = False
    helix_height: float = 0.0
    extension_length: float = 0.0
    flute_depth: float = 0.0


@dataclass(frozen=True)
class GeometrySegment:
    """One axial segment of the blank, a cylinder or a frustum."""
    kind: SegmentKind
    start: float  # Axial (Y) position of the shank-side face
    length: float
    start_radius: float
    end_radius: float
    facets: int  # Circumferential resolution

    @property
    def end(self) -> float:
        return self.start + self.length


@dataclass(frozen=True)
class ToolLayout:
    """Ordered blank segments plus where the helical cutting part begins."""
    segments: Tuple[GeometrySegment, ...]
    flute_start_y: float
    derived: DerivedQuantities

    @property
    def total_length(self) -> float:
        return sum(s.length for s in self.segments)

    def segment(self, kind: SegmentKind):
        """Return the segment of the given kind, or None if absent."""
        for s in self.segments:
            if s.kind == kind:
                return s
        return None

    @property
    def max_facets(self) -> int:
        return max(s.facets for s in self.segments)


def calculate_chamfer_height(diameter: float, shank_diameter: float) -> float:
    """Axial length of the shank-to-body transition (45° chamfer)."""
    return abs(diameter - shank_diameter) / 2


def calculate_tip_height(diameter: float, tip_angle_deg: float) -> float:
    """
    Calculate the height of the conical point.

    Formula: h = (d/2) / tan(tip_angle/2)

    A 180° tip angle is a flat bottom and has zero height.
    """
    if tip_angle_deg >= FLAT_TIP_ANGLE_DEG:
        return 0.0
    return (diameter / 2) / math.tan(math.radians(tip_angle_deg / 2))


def calculate_minimum_length(flute_length: float, shank_length: float, chamfer_height: float) -> int:
    """Minimum overall length: flutes + shank + chamfer + buffer, rounded."""
    return round_half_up(flute_length + shank_length + chamfer_height + MIN_LENGTH_BUFFER_MM)


def calculate_fluted_part_length(flute_length: float, tip_height: float, diameter: float) -> float:
    """
    Length of the helical cutting portion behind the tip.

    The flute length includes the tip and a run-out margin of
    EXTENSION_MARGIN_FACTOR × diameter where the flute lead-in exits the
    body. Negative means the flutes do not fit.
    """
    return flute_length - tip_height - diameter * EXTENSION_MARGIN_FACTOR


def calculate_radial_segments(diameter: float, fluted: bool = False) -> int:
    """Circumferential facet count for a segment of the given diameter."""
    per_mm = FLUTED_RADIAL_SEGMENTS_PER_MM if fluted else RADIAL_SEGMENTS_PER_MM
    return max(MIN_RADIAL_SEGMENTS, min(MAX_RADIAL_SEGMENTS, int(math.floor(diameter * per_mm))))


def calculate_derived_quantities(params: "ToolParameters") -> DerivedQuantities:
    """
    Compute every derived quantity for a parameter set.

    The non-cutting length is always recomputed from the other lengths;
    any value supplied in ``params`` is ignored. When the requested length
    is below the minimum, the length is clamped to the minimum and the
    non-cutting length becomes zero (``length_clamped`` is set).
    """
    chamfer_height = calculate_chamfer_height(params.diameter, params.shank_diameter)
    tip_height = calculate_tip_height(params.diameter, params.tip_angle)
    minimum_length = calculate_minimum_length(params.flute_length, params.shank_length, chamfer_height)

    length = params.length
    clamped = False
    if length < minimum_length:
        length = float(minimum_length)
        non_cutting_length = 0.0
        clamped = True
    else:
        non_cutting_length = float(round_half_up(length - minimum_length))

    fluted_part_length = calculate_fluted_part_length(params.flute_length, tip_height, params.diameter)

    return DerivedQuantities(
        chamfer_height=chamfer_height,
        tip_height=tip_height,
        minimum_length=minimum_length,
        non_cutting_length=non_cutting_length,
        fluted_part_length=fluted_part_length,
        length=length,
        length_clamped=clamped,
        helix_height=(fluted_part_length + tip_height) * EXTENSION_MARGIN_FACTOR,
        extension_length=params.diameter * EXTENSION_MARGIN_FACTOR,
        flute_depth=params.diameter * FLUTE_DEPTH_FACTOR,
    )


def resolve_parameters(params: "ToolParameters") -> Tuple["ToolParameters", DerivedQuantities]:
    """
    Return the parameter set with length clamped and non-cutting length
    recomputed, together with its derived quantities.

    Idempotent: resolving an already resolved set returns an equal set.
    """
    derived = calculate_derived_quantities(params)
    resolved = params.model_copy(update={
        'length': derived.length,
        'non_cutting_length': derived.non_cutting_length,
    })
    return resolved, derived


def build_layout(params: "ToolParameters", derived: Optional[DerivedQuantities] = None) -> ToolLayout:
    """
    Lay out the blank segments contiguously along +Y.

    Order: shank, chamfer (if any), non-cutting (if any), fluted body,
    tip (if not flat). The fluted body takes whatever length remains so
    that the segment lengths sum exactly to the effective length; it
    contains the helical cutting part plus the run-out margin.
    """
    if derived is None:
        derived = calculate_derived_quantities(params)

    length = derived.length
    body_radius = params.diameter / 2
    shank_radius = params.shank_diameter / 2
    body_facets = calculate_radial_segments(params.diameter)

    segments: List[GeometrySegment] = []
    y = -length / 2

    segments.append(GeometrySegment(
        kind=SegmentKind.SHANK,
        start=y,
        length=params.shank_length,
        start_radius=shank_radius,
        end_radius=shank_radius,
        facets=calculate_radial_segments(params.shank_diameter),
    ))
    y += params.shank_length

    if derived.chamfer_height > 0:
        segments.append(GeometrySegment(
            kind=SegmentKind.CHAMFER,
            start=y,
            length=derived.chamfer_height,
            start_radius=shank_radius,
            end_radius=body_radius,
            facets=calculate_radial_segments(max(params.diameter, params.shank_diameter)),
        ))
        y += derived.chamfer_height

    if derived.non_cutting_length > 0:
        segments.append(GeometrySegment(
            kind=SegmentKind.NON_CUTTING,
            start=y,
            length=derived.non_cutting_length,
            start_radius=body_radius,
            end_radius=body_radius,
            facets=body_facets,
        ))
        y += derived.non_cutting_length

    body_length = length - params.shank_length - derived.chamfer_height \
        - derived.non_cutting_length - derived.tip_height
    segments.append(GeometrySegment(
        kind=SegmentKind.FLUTED_BODY,
        start=y,
        length=body_length,
        start_radius=body_radius,
        end_radius=body_radius,
        facets=calculate_radial_segments(params.diameter, fluted=True),
    ))
    y += body_length

    if derived.tip_height > 0:
        segments.append(GeometrySegment(
            kind=SegmentKind.TIP,
            start=y,
            length=derived.tip_height,
            start_radius=body_radius,
            end_radius=0.0,
            facets=body_facets,
        ))

    tip_start = length / 2 - derived.tip_height
    flute_start_y = tip_start - derived.fluted_part_length

    return ToolLayout(
        segments=tuple(segments),
        flute_start_y=flute_start_y,
        derived=derived,
    )

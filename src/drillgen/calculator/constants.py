"""
Engineering and geometry constants for cutting tool generation.

This module centralizes all numerical constants used by the calculator,
the validator and the geometry pipeline. Each constant is documented with
its purpose and, where it is an empirical value, marked as such.

MODIFICATION GUIDELINES:
- Add new constants here rather than hardcoding in functions
- Always include units in constant names (_MM, _DEG)
- Empirical factors (EXTENSION_MARGIN_FACTOR, FLUTE_DEPTH_FACTOR) change
  the generated geometry of every tool; adjust together with tests

Constants are grouped by category:
- Length bookkeeping: minimum length and run-out margins
- Flutes: depth of the swept cutter
- Tessellation: circumferential facet counts and mesh deflection
- Validation limits: accepted parameter ranges
- Drawing: edge extraction and DXF layer setup
"""

from typing import Dict, Tuple

# =============================================================================
# Length Bookkeeping
# =============================================================================

# Extra axial length required beyond shank + chamfer + flutes
MIN_LENGTH_BUFFER_MM: float = 3.0

# Helix over-extension and lead-in length, as a multiple of diameter.
# Empirical: long enough that the flute runs out of the body at both ends.
EXTENSION_MARGIN_FACTOR: float = 1.35

# Flat-bottomed tools (endmills) use a 180° "tip"
FLAT_TIP_ANGLE_DEG: float = 180.0

# =============================================================================
# Flutes
# =============================================================================

# Radius of the swept flute cutter, as a multiple of diameter (empirical)
FLUTE_DEPTH_FACTOR: float = 0.3

# Capsule flute profile: slot length as a multiple of the cutter radius
CAPSULE_LENGTH_FACTOR: float = 1.5

# =============================================================================
# Tessellation
# =============================================================================

# Circumferential facets: clamp(floor(diameter × multiplier), MIN, MAX)
MIN_RADIAL_SEGMENTS: int = 16
MAX_RADIAL_SEGMENTS: int = 64
RADIAL_SEGMENTS_PER_MM: int = 16
FLUTED_RADIAL_SEGMENTS_PER_MM: int = 24

# Linear deflection for meshing solids (mm)
LINEAR_DEFLECTION_MM: float = 0.01

# =============================================================================
# Validation Limits
# =============================================================================

FLUTE_COUNT_MIN: int = 1
FLUTE_COUNT_MAX: int = 4

HELIX_ANGLE_MIN_DEG: float = 0.0
HELIX_ANGLE_MAX_DEG: float = 60.0

TIP_ANGLE_MIN_DEG: float = 0.0    # Exclusive
TIP_ANGLE_MAX_DEG: float = 180.0  # Inclusive (flat bottom)

# Typical drill point angles; anything else gets an INFO note
STANDARD_TIP_ANGLES_DEG: Tuple[float, ...] = (90.0, 118.0, 120.0, 130.0, 135.0, 140.0, 180.0)

# Shanks above this diameter are unusual for collet / chuck holding
SHANK_DIAMETER_WARNING_MM: float = 32.0

# Very slender tools deflect and break easily
SLENDERNESS_WARNING_RATIO: float = 20.0

# =============================================================================
# Drawing / Projection
# =============================================================================

# Adjacent faces meeting at more than this angle produce a drawn edge
SHARP_EDGE_THRESHOLD_DEG: float = 30.0

# Vertex welding precision (decimal places) for edge extraction
WELD_PRECISION_DECIMALS: int = 4

# Key precision (decimal places) for side-view de-duplication
SIDE_VIEW_DEDUPE_DECIMALS: int = 2

# Projected segments shorter than this are dropped (mm)
MIN_SEGMENT_LENGTH_MM: float = 1e-6

# DXF layers and AutoCAD colour indices
DXF_LAYER_COLORS: Dict[str, int] = {
    "Top": 3,         # green
    "Front": 5,       # blue
    "Side": 1,        # red
    "Dimensions": 7,  # white
    "Text": 6,        # magenta
}

# Title text height and dimension text height (mm)
DXF_TITLE_HEIGHT_MM: float = 5.0
DXF_TEXT_HEIGHT_MM: float = 3.0

# Dimension line offset from the view outline (mm)
DIMENSION_OFFSET_MM: float = 20.0

"""Type-safe enums for the cutting tool generator."""

from enum import Enum


class ToolType(Enum):
    """Rotary cutting tool family"""
    DRILL = "drill"
    ENDMILL = "endmill"
    REAMER = "reamer"
    STEP_DRILL = "step-drill"


class ToleranceClass(Enum):
    """ISO 286 tolerance class for the cutting diameter"""
    h6 = "h6"
    h7 = "h7"
    h8 = "h8"
    h9 = "h9"
    h10 = "h10"
    H6 = "H6"
    H7 = "H7"
    H8 = "H8"


class ToolMaterial(Enum):
    """Tool body material"""
    HSS = "hss"            # High speed steel
    CARBIDE = "carbide"    # Solid carbide
    COBALT = "cobalt"      # HSS-Co
    TITANIUM = "titanium"  # Titanium coated HSS


class SurfaceFinish(Enum):
    """Surface treatment / coating"""
    POLISHED = "polished"
    BLACK_OXIDE = "black-oxide"
    TIN = "tin"  # Titanium nitride
    ALN = "aln"  # Aluminium nitride


class FluteProfile(Enum):
    """Cross-section swept along each flute path"""
    CIRCLE = "circle"    # Round tube (default)
    CAPSULE = "capsule"  # Elongated slot, wider chip gullet


class SegmentKind(Enum):
    """Axial segment of the tool blank, shank first"""
    SHANK = "shank"
    CHAMFER = "chamfer"
    NON_CUTTING = "non-cutting"
    FLUTED_BODY = "fluted-body"
    TIP = "tip"


class ProjectionView(Enum):
    """Orthographic view of the 2D drawing.

    FRONT looks along -Z, SIDE along -X and TOP down the tool axis (Y).
    """
    TOP = "top"
    FRONT = "front"
    SIDE = "side"


class GenerationStatus(Enum):
    """Outcome of a generation run"""
    OK = "ok"
    BOOLEAN_FALLBACK = "boolean-fallback"  # Flutes could not be cut, blank returned
    SAFE_FALLBACK = "safe-fallback"        # Synthesis failed, plain cylinder returned

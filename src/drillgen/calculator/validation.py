"""
Cutting Tool Calculator - Validation Rules

Checks a ToolParameters set before any geometry is generated:
- Finite numbers and positive dimensions
- Flute count, helix angle and tip angle ranges
- Length bookkeeping (minimum length, room for the flutes)
- Manufacturing plausibility (shank size, slenderness)

Errors block generation. Warnings and infos are reported alongside the
generated tool.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, TYPE_CHECKING

from .constants import (
    FLUTE_COUNT_MAX,
    FLUTE_COUNT_MIN,
    HELIX_ANGLE_MAX_DEG,
    HELIX_ANGLE_MIN_DEG,
    SHANK_DIAMETER_WARNING_MM,
    SLENDERNESS_WARNING_RATIO,
    STANDARD_TIP_ANGLES_DEG,
    TIP_ANGLE_MAX_DEG,
    TIP_ANGLE_MIN_DEG,
)
from .core import calculate_derived_quantities

if TYPE_CHECKING:
    from ..io.loaders import ToolParameters

NUMERIC_FIELDS = (
    "diameter", "shank_diameter", "length", "shank_length", "flute_length",
    "tip_angle", "helix_angle",
)


class Severity(Enum):
    """Validation message severity"""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationMessage:
    """A single validation finding"""
    severity: Severity
    code: str
    message: str
    suggestion: Optional[str] = None


@dataclass
class ValidationResult:
    """Complete validation result"""
    valid: bool  # True if no errors
    messages: List[ValidationMessage] = field(default_factory=list)

    @property
    def errors(self) -> List[ValidationMessage]:
        return [m for m in self.messages if m.severity == Severity.ERROR]

    @property
    def warnings(self) -> List[ValidationMessage]:
        return [m for m in self.messages if m.severity == Severity.WARNING]

    @property
    def infos(self) -> List[ValidationMessage]:
        return [m for m in self.messages if m.severity == Severity.INFO]

    def codes(self) -> List[str]:
        return [m.code for m in self.messages]


def validate_parameters(params: "ToolParameters") -> ValidationResult:
    """
    Validate a tool parameter set against geometric and practical rules.

    Args:
        params: ToolParameters to check

    Returns:
        ValidationResult with all findings
    """
    messages: List[ValidationMessage] = []

    # Numbers and dimensions first; derived checks are meaningless without them
    dimension_messages = _validate_finite(params) + _validate_dimensions(params)
    messages.extend(dimension_messages)

    messages.extend(_validate_flute_count(params))
    messages.extend(_validate_helix_angle(params))
    messages.extend(_validate_tip_angle(params))

    if not any(m.severity == Severity.ERROR for m in dimension_messages):
        messages.extend(_validate_lengths(params))
        messages.extend(_validate_proportions(params))

    has_errors = any(m.severity == Severity.ERROR for m in messages)

    return ValidationResult(
        valid=not has_errors,
        messages=messages
    )


def _validate_finite(params: "ToolParameters") -> List[ValidationMessage]:
    """NaN and infinity are rejected for every dimension and angle"""
    messages = []

    for name in NUMERIC_FIELDS:
        value = getattr(params, name)
        if not math.isfinite(value):
            label = name.replace("_", " ")
            messages.append(ValidationMessage(
                severity=Severity.ERROR,
                code="VALUE_NOT_FINITE",
                message=f"Tool {label} must be a finite number (got {value})",
                suggestion=f"Enter a numeric {label}"
            ))

    return messages


def _validate_dimensions(params: "ToolParameters") -> List[ValidationMessage]:
    """Check that every length and diameter is positive"""
    messages = []

    checks = (
        ("diameter", params.diameter, "DIAMETER_NOT_POSITIVE"),
        ("shank diameter", params.shank_diameter, "SHANK_DIAMETER_NOT_POSITIVE"),
        ("length", params.length, "LENGTH_NOT_POSITIVE"),
        ("shank length", params.shank_length, "SHANK_LENGTH_NOT_POSITIVE"),
        ("flute length", params.flute_length, "FLUTE_LENGTH_NOT_POSITIVE"),
    )
    for label, value, code in checks:
        if math.isfinite(value) and value <= 0:
            messages.append(ValidationMessage(
                severity=Severity.ERROR,
                code=code,
                message=f"Tool {label} must be positive (got {value:g}mm)",
                suggestion=f"Enter a {label} greater than zero"
            ))

    return messages


def _validate_flute_count(params: "ToolParameters") -> List[ValidationMessage]:
    """Flute count must be within the supported range"""
    messages = []
    count = params.flute_count

    if count < FLUTE_COUNT_MIN or count > FLUTE_COUNT_MAX:
        messages.append(ValidationMessage(
            severity=Severity.ERROR,
            code="FLUTE_COUNT_OUT_OF_RANGE",
            message=f"Flute count {count} is outside {FLUTE_COUNT_MIN}-{FLUTE_COUNT_MAX}",
            suggestion="Use 2 flutes for drills, 3-4 for endmills and reamers"
        ))

    return messages


def _validate_helix_angle(params: "ToolParameters") -> List[ValidationMessage]:
    """Helix angle must be within 0-60°"""
    messages = []
    helix = params.helix_angle
    if not math.isfinite(helix):
        return messages

    if helix < HELIX_ANGLE_MIN_DEG or helix > HELIX_ANGLE_MAX_DEG:
        messages.append(ValidationMessage(
            severity=Severity.ERROR,
            code="HELIX_ANGLE_OUT_OF_RANGE",
            message=f"Helix angle {helix:g}° is outside {HELIX_ANGLE_MIN_DEG:g}-{HELIX_ANGLE_MAX_DEG:g}°",
            suggestion="Typical helix angles are 25-35° for drills, 0° for straight-flute reamers"
        ))
    elif helix == 0:
        messages.append(ValidationMessage(
            severity=Severity.INFO,
            code="STRAIGHT_FLUTES",
            message="Helix angle 0°: flutes are straight",
        ))

    return messages


def _validate_tip_angle(params: "ToolParameters") -> List[ValidationMessage]:
    """Tip angle must be within (0, 180]"""
    messages = []
    tip = params.tip_angle
    if not math.isfinite(tip):
        return messages

    if tip <= TIP_ANGLE_MIN_DEG or tip > TIP_ANGLE_MAX_DEG:
        messages.append(ValidationMessage(
            severity=Severity.ERROR,
            code="TIP_ANGLE_OUT_OF_RANGE",
            message=f"Tip angle {tip:g}° must be greater than {TIP_ANGLE_MIN_DEG:g}° and at most {TIP_ANGLE_MAX_DEG:g}°",
            suggestion="Use 118° for general drilling, 135° for hard materials, 180° for a flat bottom"
        ))
    elif tip not in STANDARD_TIP_ANGLES_DEG:
        messages.append(ValidationMessage(
            severity=Severity.INFO,
            code="TIP_ANGLE_NON_STANDARD",
            message=f"Tip angle {tip:g}° is not a standard point angle",
            suggestion="Standard point angles: " + ", ".join(f"{a:g}°" for a in STANDARD_TIP_ANGLES_DEG)
        ))

    return messages


def _validate_lengths(params: "ToolParameters") -> List[ValidationMessage]:
    """Check length bookkeeping: minimum length and room for the flutes"""
    messages = []
    derived = calculate_derived_quantities(params)

    if derived.length_clamped:
        messages.append(ValidationMessage(
            severity=Severity.WARNING,
            code="LENGTH_CLAMPED",
            message=(
                f"Length {params.length:g}mm is below the minimum {derived.minimum_length}mm; "
                f"using {derived.minimum_length}mm"
            ),
            suggestion="Increase the overall length or shorten the shank / flutes"
        ))

    if derived.fluted_part_length < 0:
        messages.append(ValidationMessage(
            severity=Severity.ERROR,
            code="FLUTE_TOO_SHORT",
            message=(
                f"Flute length {params.flute_length:g}mm is shorter than the tip "
                f"({derived.tip_height:.2f}mm) plus run-out ({derived.extension_length:.2f}mm)"
            ),
            suggestion=(
                f"Increase flute length above "
                f"{derived.tip_height + derived.extension_length:.1f}mm or reduce the diameter"
            )
        ))

    if params.non_cutting_length and params.non_cutting_length != derived.non_cutting_length:
        messages.append(ValidationMessage(
            severity=Severity.INFO,
            code="NON_CUTTING_LENGTH_RECOMPUTED",
            message=(
                f"Non-cutting length {params.non_cutting_length:g}mm recomputed to "
                f"{derived.non_cutting_length:g}mm from the overall length"
            ),
        ))

    return messages


def _validate_proportions(params: "ToolParameters") -> List[ValidationMessage]:
    """Manufacturing plausibility checks (warnings only)"""
    messages = []

    if params.shank_diameter > SHANK_DIAMETER_WARNING_MM:
        messages.append(ValidationMessage(
            severity=Severity.WARNING,
            code="SHANK_DIAMETER_LARGE",
            message=f"Shank diameter {params.shank_diameter:g}mm exceeds {SHANK_DIAMETER_WARNING_MM:g}mm",
            suggestion="Check that the tool holder accepts this shank"
        ))

    slenderness = params.length / params.diameter
    if slenderness > SLENDERNESS_WARNING_RATIO:
        messages.append(ValidationMessage(
            severity=Severity.WARNING,
            code="TOOL_SLENDER",
            message=f"Length/diameter ratio {slenderness:.1f} is high; the tool may deflect or break",
            suggestion="Reduce the overall length or increase the diameter"
        ))

    if params.shank_diameter > params.diameter:
        messages.append(ValidationMessage(
            severity=Severity.INFO,
            code="SHANK_LARGER_THAN_BODY",
            message=(
                f"Shank ({params.shank_diameter:g}mm) is larger than the cutting diameter "
                f"({params.diameter:g}mm); the chamfer steps down"
            ),
        ))

    return messages

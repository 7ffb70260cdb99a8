"""
Helical flute paths.

Each flute follows one continuous curve: a straight lead-in that runs
tangentially out of the body into the run-out zone, followed by a helix
around the tool axis (+Y). The lead-in is tangent-continuous with the
helix, so a profile swept along the whole curve has no kink.

Parameterisation over t in [0, 1]:

- t <= extension_ratio: linear lead-in from
  ``helix_start - tangent * extension_length`` to ``helix_start``
- t > extension_ratio: helix_t = (t - ratio) / (1 - ratio),
  angle = base_angle - helix_t * revolutions * 2π,
  y = start_y + helix_t * helix_height

The angle decreases as y increases, which makes the flutes right-hand.
"""

import math
from dataclasses import dataclass
from typing import List, TYPE_CHECKING

from build123d import Vector


if TYPE_CHECKING:
    from ..calculator.core import ToolLayout
    from ..io.loaders import ToolParameters


def calculate_helix_pitch(diameter: float, helix_angle_deg: float) -> float:
    """
    Axial advance per revolution: pitch = π·d / tan(helix angle).

    Returns math.inf for straight flutes (helix angle 0).
    """
    if helix_angle_deg <= 0:
        return math.inf
    return math.pi * diameter / math.tan(math.radians(helix_angle_deg))


@dataclass(frozen=True)
class HelixPath:
    """Lead-in plus helix for one flute. Immutable; evaluation only."""

    radius: float
    pitch: float  # math.inf for straight flutes
    base_angle: float  # Radians
    helix_height: float
    start_y: float
    extension_length: float

    @property
    def revolutions(self) -> float:
        if math.isinf(self.pitch) or self.pitch == 0:
            return 0.0
        return self.helix_height / self.pitch

    @property
    def helix_length(self) -> float:
        """Arc length of the helical part.

        Written as H·√(1 + (2πr·n/H)²) so straight flutes (infinite
        pitch, zero revolutions) need no special case.
        """
        circumferential = 2 * math.pi * self.radius * self.revolutions
        if self.helix_height <= 0:
            return abs(circumferential)
        return self.helix_height * math.sqrt(1 + (circumferential / self.helix_height) ** 2)

    @property
    def total_length(self) -> float:
        return self.helix_length + self.extension_length

    @property
    def extension_ratio(self) -> float:
        total = self.total_length
        if total <= 0:
            return 0.0
        return self.extension_length / total

    def _helix_point(self, helix_t: float) -> Vector:
        angle = self.base_angle - helix_t * self.revolutions * 2 * math.pi
        return Vector(
            self.radius * math.cos(angle),
            self.start_y + helix_t * self.helix_height,
            self.radius * math.sin(angle),
        )

    def _helix_tangent(self, helix_t: float) -> Vector:
        angle = self.base_angle - helix_t * self.revolutions * 2 * math.pi
        sweep = 2 * math.pi * self.revolutions * self.radius
        tangent = Vector(sweep * math.sin(angle), self.helix_height, -sweep * math.cos(angle))
        if tangent.length == 0:
            return Vector(0, 1, 0)
        return tangent.normalized()

    @property
    def helix_start(self) -> Vector:
        return self._helix_point(0.0)

    @property
    def lead_in_start(self) -> Vector:
        return self.helix_start - self._helix_tangent(0.0) * self.extension_length

    def point_at(self, t: float) -> Vector:
        """Point on the curve at parameter t (clamped to [0, 1])."""
        t = min(1.0, max(0.0, t))
        ratio = self.extension_ratio

        if ratio > 0 and t <= ratio:
            s = t / ratio
            start = self.lead_in_start
            return start + (self.helix_start - start) * s

        helix_t = (t - ratio) / (1 - ratio) if ratio < 1 else 1.0
        return self._helix_point(helix_t)

    def tangent_at(self, t: float) -> Vector:
        """Unit tangent at parameter t (clamped to [0, 1])."""
        t = min(1.0, max(0.0, t))
        ratio = self.extension_ratio

        if ratio > 0 and t <= ratio:
            return self._helix_tangent(0.0)

        helix_t = (t - ratio) / (1 - ratio) if ratio < 1 else 1.0
        return self._helix_tangent(helix_t)

    def sample(self, count: int) -> List[Vector]:
        """``count`` points uniformly spaced in t over the whole curve."""
        if count < 2:
            raise ValueError(f"Need at least 2 samples, got {count}")
        return [self.point_at(i / (count - 1)) for i in range(count)]


def create_flute_paths(params: "ToolParameters", layout: "ToolLayout") -> List[HelixPath]:
    """
    One HelixPath per flute, evenly spaced around the axis.

    The helix starts where the cutting part begins (``layout.flute_start_y``)
    and over-extends past the tip by the run-out margin so each flute
    leaves the body cleanly at the point.
    """
    derived = layout.derived
    pitch = calculate_helix_pitch(params.diameter, params.helix_angle)

    paths = []
    for i in range(max(0, params.flute_count)):
        paths.append(HelixPath(
            radius=params.diameter / 2,
            pitch=pitch,
            base_angle=2 * math.pi * i / params.flute_count,
            helix_height=derived.helix_height,
            start_y=layout.flute_start_y,
            extension_length=derived.extension_length,
        ))
    return paths

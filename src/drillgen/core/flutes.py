"""
Flute cutter generation.

Sweeps a closed cross-section along each flute path to form a tube; the
tubes are subtracted from the blank in a single boolean.

The helical part of the path is build123d's exact ``Helix`` rotated to
the flute's start angle, preceded by the straight lead-in. The sweep uses
OCC's BRepOffsetAPI_MakePipeShell directly in corrected Frenet mode:
unlike plain Frenet it stays defined on the straight lead-in and on
straight (0° helix) flutes.
"""

import logging
import math
from typing import List, Optional, Union

from OCP.BRepOffsetAPI import BRepOffsetAPI_MakePipeShell
from build123d import Axis, BuildSketch, Edge, Helix, Plane, SlotCenterToCenter, Solid, Vector, Wire

from ..calculator.constants import CAPSULE_LENGTH_FACTOR
from ..enums import FluteProfile
from .geometry_repair import solid_from_shape
from .helix import HelixPath

logger = logging.getLogger(__name__)


class FluteSweeper:
    """
    Builds flute tube solids from helix paths.

    Args:
        flute_depth: Radius of the swept cross-section in mm
        profile: Cross-section shape (circle or capsule)
    """

    def __init__(self, flute_depth: float, profile: FluteProfile = FluteProfile.CIRCLE):
        if flute_depth <= 0:
            raise ValueError(f"Flute depth must be positive, got {flute_depth}")
        self.flute_depth = flute_depth
        self.profile = profile

    def make_helix(self, path: HelixPath) -> Union[Wire, Edge]:
        """Helical part of the path; a straight line for 0° flutes."""
        if path.revolutions == 0:
            return Edge.make_line(path.helix_start, path.point_at(1.0))

        # Positive pitch about +Y: the angle in the XZ plane falls as y rises
        helix = Helix(
            pitch=path.pitch,
            height=path.helix_height,
            radius=path.radius,
            center=(0, path.start_y, 0),
            direction=(0, 1, 0),
        )

        start = helix @ 0
        offset = math.degrees(math.atan2(start.Z, start.X) - path.base_angle)
        if abs(offset) > 1e-9:
            helix = helix.rotate(Axis.Y, offset)
        return helix

    def make_spine(self, path: HelixPath) -> Wire:
        """Lead-in line followed by the helix, joined tangent-continuously."""
        helix = self.make_helix(path)
        edges = list(helix.edges())

        if path.extension_length > 0:
            start = helix @ 0
            tangent = helix % 0
            edges.insert(0, Edge.make_line(start - tangent * path.extension_length, start))

        return Wire(edges)

    def make_profile(self, path: HelixPath, origin: Vector, tangent: Vector) -> Wire:
        """Closed cross-section at *origin*, normal to *tangent*."""
        radial = Vector(math.cos(path.base_angle), 0, math.sin(path.base_angle))
        plane = Plane(origin=origin, x_dir=radial, z_dir=tangent)

        if self.profile == FluteProfile.CAPSULE:
            with BuildSketch(plane) as sk:
                SlotCenterToCenter(
                    self.flute_depth * CAPSULE_LENGTH_FACTOR,
                    2 * self.flute_depth,
                )
            return sk.sketch.faces()[0].outer_wire()

        return Wire.make_circle(self.flute_depth, plane)

    def sweep(self, path: HelixPath) -> Solid:
        """
        Sweep the cross-section along one flute path.

        Raises:
            RuntimeError: If OCC fails to build the pipe shell
        """
        spine = self.make_spine(path)
        profile = self.make_profile(path, spine @ 0, spine % 0)

        pipe = BRepOffsetAPI_MakePipeShell(spine.wrapped)
        pipe.SetMode(False)  # corrected Frenet
        pipe.Add(profile.wrapped)
        pipe.Build()

        if not pipe.IsDone():
            raise RuntimeError("OCC MakePipeShell failed to build flute")

        pipe.MakeSolid()
        tube = solid_from_shape(pipe.Shape())
        logger.debug(f"Flute swept: length={path.total_length:.2f}mm, volume={tube.volume:.2f}")
        return tube

    def sweep_all(self, paths: List[HelixPath]) -> Optional[List[Solid]]:
        """Sweep every path; None when there are no flutes."""
        if not paths:
            return None

        logger.info(f"Sweeping {len(paths)} flute(s)...")
        return [self.sweep(path) for path in paths]

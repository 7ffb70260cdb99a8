"""
Geometry healing for solids and meshes.

Solid level: topology repair after the flute cut and preventive
simplification before it. Mesh level: ``heal_mesh`` rebuilds normals,
UVs and bounding volumes so renderers and exporters always receive a
complete mesh.
"""

import logging
import tempfile
import time
from pathlib import Path
from typing import List, Optional

from OCP.BRepBuilderAPI import BRepBuilderAPI_MakeSolid, BRepBuilderAPI_Sewing
from OCP.ShapeFix import ShapeFix_Shape, ShapeFix_Solid
from OCP.ShapeUpgrade import ShapeUpgrade_UnifySameDomain
from OCP.TopAbs import TopAbs_COMPOUND, TopAbs_FACE, TopAbs_SHELL, TopAbs_SOLID
from OCP.TopExp import TopExp_Explorer
from OCP.TopoDS import TopoDS, TopoDS_Shape
from build123d import Part, Shape, Solid, export_step, import_step

from .mesh import Mesh

logger = logging.getLogger(__name__)

SEWING_TOLERANCE_MM = 1e-6


def _unify(shape: TopoDS_Shape) -> TopoDS_Shape:
    unifier = ShapeUpgrade_UnifySameDomain(shape, True, True, True)
    unifier.Build()
    return unifier.Shape()


def _shape_fix(shape: TopoDS_Shape) -> TopoDS_Shape:
    fixer = ShapeFix_Shape(shape)
    fixer.Perform()
    return fixer.Shape()


def _sew_to_solid(shape: TopoDS_Shape) -> Optional[TopoDS_Shape]:
    """Stitch all faces into one shell and close it into a solid."""
    sewer = BRepBuilderAPI_Sewing(SEWING_TOLERANCE_MM)

    explorer = TopExp_Explorer(shape, TopAbs_FACE)
    face_count = 0
    while explorer.More():
        sewer.Add(explorer.Current())
        face_count += 1
        explorer.Next()

    if face_count == 0:
        return None

    sewer.Perform()
    shell_explorer = TopExp_Explorer(sewer.SewedShape(), TopAbs_SHELL)
    if not shell_explorer.More():
        return None

    solid_maker = BRepBuilderAPI_MakeSolid(TopoDS.Shell_s(shell_explorer.Current()))
    if not solid_maker.IsDone():
        return None

    solid_fixer = ShapeFix_Solid(solid_maker.Solid())
    solid_fixer.Perform()
    return solid_fixer.Solid()


def _step_roundtrip(part: Part) -> Part:
    """Export then re-import so the STEP writer/reader normalise topology."""
    with tempfile.NamedTemporaryFile(suffix=".step", delete=False) as f:
        step_path = Path(f.name)

    try:
        export_step(part, str(step_path))
        return import_step(str(step_path))
    finally:
        step_path.unlink(missing_ok=True)


def as_part(shape) -> Part:
    """
    Wrap a build123d shape or raw OCC shape as a Part.

    Part is a Compound: a bare solid handed to ``Part()`` reports zero
    volume, so anything that is not already a compound is wrapped as a
    one-element compound.
    """
    if isinstance(shape, Part):
        return shape
    if isinstance(shape, Shape):
        shape = shape.wrapped
    if shape.ShapeType() == TopAbs_COMPOUND:
        return Part(shape)
    return Part([Shape.cast(shape)])


def largest_solid(part: Part) -> Part:
    """Collapse a multi-solid result to its largest solid.

    Boolean cuts can leave slivers (e.g. a flute separating a thin chip
    from the tip); only the main body is kept.
    """
    if not hasattr(part, "solids"):
        return part
    solids = list(part.solids())
    if not solids:
        return part
    kept = max(solids, key=lambda s: s.volume)
    if len(solids) > 1:
        logger.debug(f"Keeping largest of {len(solids)} solids (volume={kept.volume:.2f})")
    return as_part(kept)


def solid_from_shape(shape: TopoDS_Shape) -> Solid:
    """
    Normalise a raw OCC shape (e.g. a pipe shell) into a single Solid.

    A valid closed solid is used as is. Anything else (open shells,
    compounds of faces) goes through a STEP roundtrip, which turns it
    into a proper solid.
    """
    if shape.ShapeType() == TopAbs_SOLID:
        solid = Solid(TopoDS.Solid_s(shape))
        if solid.is_valid and solid.volume > 0:
            return solid

    imported = _step_roundtrip(as_part(shape))
    solids = list(imported.solids())
    if not solids:
        raise RuntimeError("Shape contains no solid after normalisation")
    return max(solids, key=lambda s: s.volume)


def repair_geometry(part: Part) -> Part:
    """
    Multi-strategy repair for invalid topology after boolean operations.

    Tries, in order, until one produces a valid solid:

    1. UnifySameDomain, merging coincident faces on the same surface
    2. Sew + MakeSolid with ShapeFix_Solid cleanup
    3. ShapeFix_Shape on the unified shape
    4. STEP roundtrip

    If every strategy fails the original *part* is returned unchanged.

    Args:
        part: Part to repair.

    Returns:
        Repaired Part (or original if repair fails or is unnecessary).
    """
    if part.is_valid:
        return part

    try:
        shape = part.wrapped if hasattr(part, "wrapped") else part
        unified = _unify(shape)

        strategies: List[tuple] = [
            ("unify", lambda: unified),
            ("sew + solid", lambda: _sew_to_solid(unified)),
            ("ShapeFix", lambda: _shape_fix(unified)),
        ]
        for name, strategy in strategies:
            repaired = strategy()
            if repaired is None:
                continue
            result = as_part(repaired)
            if result.is_valid:
                logger.debug(f"Geometry repair successful ({name})")
                return result

        reimported = _step_roundtrip(part)
        if reimported.is_valid:
            logger.debug("Geometry repair successful (STEP roundtrip)")
            return reimported

        logger.debug("Geometry repair did not achieve valid solid, using original")
        return part

    except Exception as e:
        logger.debug(f"Geometry repair skipped: {e}")
        return part


def simplify_geometry(part: Part, description: str = "") -> Part:
    """
    Preventive simplification before boolean operations.

    Merges coincident faces (UnifySameDomain) then applies ShapeFix. For
    the blank this joins the faces of adjoining segments with equal
    radius, so the flute cut meets fewer seams.

    Args:
        part: The part to simplify.
        description: Optional label for log messages.

    Returns:
        Simplified Part (or original if simplification fails).
    """
    if description:
        logger.debug(f"Simplifying {description}...")

    start = time.time()

    try:
        if not isinstance(part, Part):
            if not hasattr(part, "wrapped"):
                raise ValueError(f"Cannot simplify object of type {type(part)}")
            part = as_part(part)

        simplified = as_part(_shape_fix(_unify(part.wrapped)))

        if description:
            logger.debug(f"done in {time.time() - start:.1f}s")
        return simplified
    except Exception as e:
        logger.warning(f"Simplification failed after {time.time() - start:.1f}s: {e}, using original")
        return part


def heal_mesh(mesh: Mesh) -> Mesh:
    """
    Return a healed copy of *mesh*; the input is left untouched.

    - vertex normals recomputed by trimesh (averaged over the triangles
      sharing a vertex, so non-indexed meshes get flat face normals)
    - UVs filled with zeros when missing
    - bounding box and bounding sphere recomputed
    """
    healed = mesh.clone()
    if healed.triangle_count:
        normals = healed.to_trimesh().vertex_normals
        healed.normals = [tuple(n) for n in normals.tolist()]
    else:
        healed.normals = [(0.0, 0.0, 0.0)] * healed.vertex_count

    if healed.uvs is None or len(healed.uvs) != healed.vertex_count:
        healed.uvs = [(0.0, 0.0)] * healed.vertex_count

    healed.compute_bounding_box()
    healed.compute_bounding_sphere()
    return healed

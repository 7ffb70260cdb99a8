"""
Cutting tool geometry generation.

ToolGeometry runs the complete synthesis pipeline for one parameter set:

    validate -> resolve lengths -> layout -> blank -> flute paths ->
    flute sweep -> boolean subtract -> repair -> tessellate -> heal mesh

The result is never "nothing": a failed boolean falls back to the uncut
blank, and any other failure during synthesis falls back to a plain
cylinder of the requested length and diameter. Only invalid parameters
raise.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from build123d import Part, Plane, Solid

from ..calculator.core import ToolLayout, build_layout, resolve_parameters
from ..calculator.validation import Severity, ValidationResult, validate_parameters
from ..enums import GenerationStatus
from ..exceptions import ParameterValidationError
from ..io.loaders import GenerationSettings, ToolParameters
from .boolean import BooleanBackend, BooleanEngine, get_boolean_backend
from .flutes import FluteSweeper
from .geometry_base import BaseGeometry
from .geometry_repair import as_part, heal_mesh, largest_solid, repair_geometry
from .helix import HelixPath, create_flute_paths
from .mesh import Mesh, angular_tolerance_for, merge_meshes, mesh_from_shape
from .primitives import build_blank

logger = logging.getLogger(__name__)

Notify = Callable[[str], None]


@dataclass
class GenerationResult:
    """Everything produced by one pipeline run.

    ``mesh``, ``blank_mesh`` and ``cutter_mesh`` belong to the caller; they
    share no buffers with each other or with any other result.
    """
    params: ToolParameters  # Resolved (length clamped, non-cutting recomputed)
    part: Part
    mesh: Mesh
    blank: Part
    blank_mesh: Mesh
    layout: ToolLayout
    paths: List[HelixPath]
    validation: ValidationResult
    status: GenerationStatus = GenerationStatus.OK
    warnings: List[str] = field(default_factory=list)
    timings: Dict[str, float] = field(default_factory=dict)  # Seconds per stage
    cutter_mesh: Optional[Mesh] = None  # All flute tubes merged into one mesh

    @property
    def derived(self):
        return self.layout.derived

    @property
    def is_fallback(self) -> bool:
        return self.status != GenerationStatus.OK


def make_fallback_cylinder(length: float, diameter: float) -> Part:
    """Plain cylinder on the tool axis, spanning -length/2 .. +length/2."""
    plane = Plane(origin=(0, -length / 2, 0), x_dir=(1, 0, 0), z_dir=(0, 1, 0))
    return as_part(Solid.make_cylinder(diameter / 2, length, plane))


class ToolGeometry(BaseGeometry):
    """
    Generates 3D geometry for a rotary cutting tool.

    Args:
        params: Tool parameters
        settings: Generation settings (defaults when omitted)
        boolean_backend: Backend for the flute cut; built from
            ``settings.boolean_backend`` when omitted
        notify: Callback receiving user-facing notices (warnings and
            fallbacks); only called when ``settings.show_notifications``
        validate: Run parameter validation and raise on errors. Disabling
            it lets degenerate sets such as ``flute_count=0`` through to the
            geometry layer.
    """

    _part_name = "tool"

    def __init__(
        self,
        params: ToolParameters,
        settings: Optional[GenerationSettings] = None,
        boolean_backend: Optional[BooleanBackend] = None,
        notify: Optional[Notify] = None,
        validate: bool = True,
    ):
        self.params = params
        self.settings = settings or GenerationSettings()
        if boolean_backend is None:
            kwargs = {}
            if self.settings.boolean_backend == "occt":
                kwargs['fuzzy_value'] = self.settings.fuzzy_value
            boolean_backend = get_boolean_backend(self.settings.boolean_backend, **kwargs)
        self.boolean = BooleanEngine(boolean_backend)
        self.notify = notify
        self.validate = validate

        # Cache for built geometry (avoids rebuilding on export)
        self._result: Optional[GenerationResult] = None

    def _notify(self, message: str) -> None:
        if self.notify is not None and self.settings.show_notifications:
            self.notify(message)

    def _mesh(self, part: Part, layout: ToolLayout) -> Mesh:
        mesh = mesh_from_shape(
            part,
            tolerance=self.settings.linear_deflection,
            angular_tolerance=angular_tolerance_for(layout.max_facets),
        )
        return heal_mesh(mesh)

    def _cutter_mesh(self, cutters, layout: ToolLayout) -> Mesh:
        """Tessellate every flute tube and merge them into one cutter mesh."""
        tubes = [
            mesh_from_shape(
                cutter,
                tolerance=self.settings.linear_deflection,
                angular_tolerance=angular_tolerance_for(layout.max_facets),
            )
            for cutter in cutters
        ]
        return heal_mesh(merge_meshes(tubes))

    def build(self) -> GenerationResult:
        """
        Build the tool geometry.

        Returns:
            GenerationResult with solid, mesh and status

        Raises:
            ParameterValidationError: If validation is enabled and fails
        """
        if self._result is not None:
            return self._result

        timings: Dict[str, float] = {}
        warnings: List[str] = []

        start = time.time()
        validation = validate_parameters(self.params)
        if self.validate and not validation.valid:
            raise ParameterValidationError(validation)
        for msg in validation.messages:
            if msg.severity == Severity.WARNING:
                logger.warning(f"{msg.code}: {msg.message}")
                warnings.append(msg.message)
                self._notify(msg.message)

        params, derived = resolve_parameters(self.params)
        layout = build_layout(params, derived)
        paths = create_flute_paths(params, layout)
        timings['validate'] = time.time() - start

        logger.info(
            f"Generating {params.tool_type.value}: d={params.diameter:g}mm, "
            f"L={params.length:g}mm, {params.flute_count} flute(s), helix={params.helix_angle:g}°"
        )

        try:
            result = self._synthesize(params, layout, paths, validation, warnings, timings)
        except Exception as e:
            logger.exception(f"Tool generation failed, using plain cylinder: {e}")
            message = f"Geometry generation failed ({e}); showing a plain cylinder instead"
            warnings.append(message)
            self._notify(message)

            cylinder = make_fallback_cylinder(params.length, params.diameter)
            mesh = self._mesh(cylinder, layout)
            result = GenerationResult(
                params=params,
                part=cylinder,
                mesh=mesh,
                blank=cylinder,
                blank_mesh=mesh.clone(),
                layout=layout,
                paths=paths,
                validation=validation,
                status=GenerationStatus.SAFE_FALLBACK,
                warnings=warnings,
                timings=timings,
            )

        timings['total'] = time.time() - start
        self._result = result
        return result

    def _synthesize(
        self,
        params: ToolParameters,
        layout: ToolLayout,
        paths: List[HelixPath],
        validation: ValidationResult,
        warnings: List[str],
        timings: Dict[str, float],
    ) -> GenerationResult:
        stage = time.time()
        blank = build_blank(layout)
        blank_mesh = self._mesh(blank, layout)
        timings['blank'] = time.time() - stage

        stage = time.time()
        cutters = None
        cutter_mesh = None
        if paths:
            sweeper = FluteSweeper(layout.derived.flute_depth, profile=self.settings.flute_profile)
            cutters = sweeper.sweep_all(paths)
            cutter_mesh = self._cutter_mesh(cutters, layout)
        timings['flutes'] = time.time() - stage

        stage = time.time()
        cut = self.boolean.subtract(blank, cutters)
        timings['boolean'] = time.time() - stage

        status = GenerationStatus.OK
        if cut.fallback:
            status = GenerationStatus.BOOLEAN_FALLBACK
            message = "Flute cut failed; showing the tool without flutes"
            warnings.append(message)
            self._notify(message)

        if cut.part is blank:
            # No cut happened: the final mesh is an independent copy of the blank mesh
            return GenerationResult(
                params=params,
                part=blank,
                mesh=blank_mesh.clone(),
                blank=blank,
                blank_mesh=blank_mesh,
                layout=layout,
                paths=paths,
                validation=validation,
                status=status,
                warnings=warnings,
                timings=timings,
                cutter_mesh=cutter_mesh,
            )

        stage = time.time()
        part = cut.part
        if self.settings.repair:
            part = repair_geometry(part)
        part = largest_solid(part)
        timings['repair'] = time.time() - stage

        stage = time.time()
        mesh = self._mesh(part, layout)
        timings['mesh'] = time.time() - stage

        logger.info(
            f"Tool complete: volume={part.volume:.2f} mm³, {mesh.triangle_count} triangles"
        )

        return GenerationResult(
            params=params,
            part=part,
            mesh=mesh,
            blank=blank,
            blank_mesh=blank_mesh,
            layout=layout,
            paths=paths,
            validation=validation,
            status=status,
            warnings=warnings,
            timings=timings,
            cutter_mesh=cutter_mesh,
        )


def generate_tool(
    params: ToolParameters,
    settings: Optional[GenerationSettings] = None,
    notify: Optional[Notify] = None,
    validate: bool = True,
) -> GenerationResult:
    """Run the pipeline once from scratch and return a fresh result."""
    return ToolGeometry(params, settings=settings, notify=notify, validate=validate).build()

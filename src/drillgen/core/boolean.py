"""
Boolean subtraction of flute cutters from the blank.

The boolean engine is an adapter: any object implementing
``BooleanBackend.subtract`` can be plugged in. Whatever the backend, a
failure never propagates to the caller. The blank is returned instead and
the result is flagged as a fallback.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from OCP.BRepAlgoAPI import BRepAlgoAPI_Cut
from OCP.TopTools import TopTools_ListOfShape
from build123d import Part, Shape

from .geometry_repair import as_part

logger = logging.getLogger(__name__)

# Volumes below this are treated as an empty (degenerate) result
MIN_RESULT_VOLUME_MM3 = 1e-6


class BooleanBackend(Protocol):
    """Subtracts tool solids from a base solid, raising on failure."""

    name: str

    def subtract(self, base: Part, tools: Sequence[Shape]) -> Part:
        ...


class OCCTBooleanBackend:
    """BRepAlgoAPI_Cut with all tools in one operation.

    Args:
        fuzzy_value: Optional fuzzy tolerance (mm) for near-coincident faces
    """

    name = "occt"

    def __init__(self, fuzzy_value: Optional[float] = None):
        self.fuzzy_value = fuzzy_value

    def subtract(self, base: Part, tools: Sequence[Shape]) -> Part:
        arguments = TopTools_ListOfShape()
        arguments.Append(base.wrapped)

        tool_list = TopTools_ListOfShape()
        for tool in tools:
            tool_list.Append(tool.wrapped)

        cut = BRepAlgoAPI_Cut()
        cut.SetArguments(arguments)
        cut.SetTools(tool_list)
        if self.fuzzy_value:
            cut.SetFuzzyValue(self.fuzzy_value)
        cut.Build()

        if not cut.IsDone():
            raise RuntimeError("OCCT cut did not complete")

        return as_part(cut.Shape())


class AlgebraBooleanBackend:
    """build123d algebra cut (``Shape.cut``)."""

    name = "algebra"

    def subtract(self, base: Part, tools: Sequence[Shape]) -> Part:
        result = base.cut(*tools)
        return as_part(result)


BOOLEAN_BACKENDS = {
    OCCTBooleanBackend.name: OCCTBooleanBackend,
    AlgebraBooleanBackend.name: AlgebraBooleanBackend,
}


def get_boolean_backend(name: str, **kwargs) -> BooleanBackend:
    """Instantiate a backend by name ("occt" or "algebra")."""
    try:
        backend_cls = BOOLEAN_BACKENDS[name]
    except KeyError:
        raise ValueError(
            f"Unknown boolean backend: {name!r}. Must be one of {tuple(BOOLEAN_BACKENDS)}"
        ) from None
    if backend_cls is OCCTBooleanBackend:
        return backend_cls(**kwargs)
    return backend_cls()


@dataclass
class BooleanResult:
    """Outcome of a subtraction."""
    part: Part
    fallback: bool = False  # True if the blank was returned unchanged
    error: Optional[str] = None


class BooleanEngine:
    """
    Safe subtraction front end over a BooleanBackend.

    ``subtract`` always returns a usable solid: on any backend exception
    or a degenerate (empty) result, the blank is returned with
    ``fallback=True`` and a warning is logged.
    """

    def __init__(self, backend: Optional[BooleanBackend] = None):
        self.backend = backend if backend is not None else OCCTBooleanBackend()

    def subtract(self, blank: Part, cutters: Optional[List[Shape]]) -> BooleanResult:
        if not cutters:
            logger.debug("No cutters, boolean skipped")
            return BooleanResult(part=blank)

        backend_name = getattr(self.backend, "name", type(self.backend).__name__)
        logger.info(f"Cutting {len(cutters)} flute(s) from blank ({backend_name})...")

        try:
            result = self.backend.subtract(blank, cutters)
            if result is None:
                raise RuntimeError("backend returned no shape")
            volume = sum(s.volume for s in result.solids())
            if volume <= MIN_RESULT_VOLUME_MM3:
                raise RuntimeError(f"degenerate result (volume={volume:.3g})")
        except Exception as e:
            logger.warning(f"Flute boolean failed ({e}), using uncut blank")
            return BooleanResult(part=blank, fallback=True, error=str(e))

        logger.debug(f"Boolean complete: volume {blank.volume:.2f} -> {volume:.2f} mm³")
        return BooleanResult(part=result)

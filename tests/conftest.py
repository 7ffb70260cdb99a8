"""
Pytest configuration and shared fixtures for drillgen tests.
"""

import pytest

from drillgen.calculator.presets import get_preset
from drillgen.io.loaders import ToolParameters


def _make_params(tool_type="drill", **overrides) -> ToolParameters:
    """ToolParameters from a preset with field overrides."""
    data = get_preset(tool_type)
    data.update(overrides)
    return ToolParameters.model_validate(data)


@pytest.fixture(scope="session")
def make_params():
    """Factory: make_params("endmill", flute_count=3) -> ToolParameters."""
    return _make_params


# ─── Parameter sets ─────────────────────────────────────────────────────


@pytest.fixture
def drill_params():
    """Default drill: Ø10 x 100, 2 flutes, 118° tip (minimum length 93)."""
    return _make_params("drill")


@pytest.fixture
def endmill_params():
    """Default endmill: Ø10 x 85, 4 flutes, flat (180°) tip."""
    return _make_params("endmill")


@pytest.fixture
def reamer_params():
    """Default reamer: Ø8 x 100, 4 straight flutes."""
    return _make_params("reamer")


@pytest.fixture
def step_drill_params():
    """Default step drill: Ø12 body on an Ø8 shank (2mm chamfer)."""
    return _make_params("step-drill")


@pytest.fixture(scope="module")
def small_drill_params():
    """Short drill that builds quickly."""
    return _make_params(
        "drill",
        diameter=6.0,
        shank_diameter=6.0,
        length=60.0,
        shank_length=20.0,
        flute_length=30.0,
    )


# ─── Module-scoped built geometry ────────────────────────────────────────


@pytest.fixture(scope="module")
def built_small_drill(small_drill_params):
    """Module-scoped generated small drill."""
    from drillgen.core.tool import ToolGeometry
    return ToolGeometry(small_drill_params).build()


@pytest.fixture(scope="module")
def built_straight_reamer():
    """Module-scoped generated reamer with straight (0°) flutes."""
    from drillgen.core.tool import ToolGeometry
    params = _make_params(
        "reamer",
        diameter=6.0,
        shank_diameter=6.0,
        length=60.0,
        shank_length=20.0,
        flute_length=30.0,
    )
    return ToolGeometry(params).build()

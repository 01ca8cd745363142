"""
Shared test fixtures for floatplace tests.

Provides a static platform with a reference button and a tooltip, plus a
helper that builds a MiddlewareState for calling middleware directly.
"""

import pytest
from typing import Optional, Sequence

from floatplace.core.compute import compute_coords_from_placement
from floatplace.core.middleware import MiddlewareState
from floatplace.geometry.primitives import Placement, Rect, Strategy
from floatplace.platform.abstraction import Elements, Obstacle
from floatplace.platform.static_adapter import StaticElement, StaticPlatform


@pytest.fixture
def platform() -> StaticPlatform:
    """An 800x600 viewport with nothing registered."""
    return StaticPlatform(viewport=Rect(0, 0, 800, 600))


@pytest.fixture
def button(platform) -> StaticElement:
    """A 100x100 reference element in the middle of the viewport."""
    return platform.add_element(StaticElement("button", Rect(350, 250, 100, 100)))


@pytest.fixture
def tooltip(platform) -> StaticElement:
    """A 50x50 floating element."""
    return platform.add_element(StaticElement("tooltip", Rect(0, 0, 50, 50)))


@pytest.fixture
def make_state(platform, button, tooltip):
    """Build a MiddlewareState as compute_position would for a placement."""

    async def _make_state(placement="bottom", initial_placement=None,
                          obstacles: Sequence[Obstacle] = (),
                          x: Optional[float] = None, y: Optional[float] = None,
                          middleware_data=None,
                          reference=None, floating=None) -> MiddlewareState:
        reference = reference or button
        floating = floating or tooltip
        placement = Placement.parse(placement)
        rects = await platform.get_element_rects(reference, floating, Strategy.ABSOLUTE)
        cx, cy = compute_coords_from_placement(rects, placement,
                                               await platform.is_rtl(floating))
        return MiddlewareState(
            x=cx if x is None else x,
            y=cy if y is None else y,
            placement=placement,
            initial_placement=Placement.parse(initial_placement or placement),
            strategy=Strategy.ABSOLUTE,
            rects=rects,
            elements=Elements(reference=reference, floating=floating),
            platform=platform,
            middleware_data=dict(middleware_data or {}),
            obstacles=tuple(obstacles),
        )

    return _make_state

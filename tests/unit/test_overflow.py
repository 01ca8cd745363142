"""
Tests for overflow detection.

Tests cover:
- Sign convention and padding
- Offset-parent scale
- Element context, alt boundary and virtual elements
- Obstacle intersection and penetration direction
- Platform error propagation
"""

import asyncio

import pytest

from floatplace.core.middleware import MiddlewareState
from floatplace.core.overflow import (
    DetectOverflowOptions,
    ElementContext,
    detect_overflow,
    get_collidable_intersection,
)
from floatplace.geometry.primitives import (
    Placement,
    Rect,
    Side,
    Strategy,
    rect_to_client_rect,
)
from floatplace.platform.abstraction import (
    ElementRects,
    Elements,
    Obstacle,
    Platform,
    PlatformQueryError,
)
from floatplace.platform.static_adapter import StaticElement, VirtualElement


def run(coro):
    return asyncio.run(coro)


class ScaledPlatform(Platform):
    """Fixed 100x100 clipping rect inside a scaled offset parent."""

    def __init__(self, scale):
        self.scale = scale

    async def get_clipping_rect(self, element, boundary, root_boundary, strategy):
        return Rect(0, 0, 100, 100)

    async def get_element_rects(self, reference, floating, strategy):
        return ElementRects(reference=Rect(0, 0, 10, 10), floating=Rect(0, 0, 50, 50))

    async def get_offset_parent(self, node):
        return "offset-parent"

    async def get_scale(self, node):
        return self.scale


class FailingPlatform(ScaledPlatform):
    async def get_clipping_rect(self, element, boundary, root_boundary, strategy):
        raise PlatformQueryError("element detached")


def scaled_state(platform, x, y) -> MiddlewareState:
    rects = run(platform.get_element_rects("ref", "float", Strategy.ABSOLUTE))
    placement = Placement.parse("bottom")
    return MiddlewareState(
        x=x, y=y,
        placement=placement,
        initial_placement=placement,
        strategy=Strategy.ABSOLUTE,
        rects=rects,
        elements=Elements(reference="ref", floating="float"),
        platform=platform,
    )


class TestSideValues:
    """Tests for the four overflow values."""

    def test_inside_is_non_positive(self, make_state):
        state = run(make_state("bottom"))
        overflow = run(detect_overflow(state))

        # tooltip at (375, 350) in an 800x600 viewport
        assert overflow.top == -350
        assert overflow.bottom == -200
        assert overflow.left == -375
        assert overflow.right == -375
        assert all(v <= 0 for v in overflow.as_dict().values())

    def test_outside_bottom_is_positive_depth(self, make_state):
        overflow = run(detect_overflow(run(make_state("bottom", y=580))))
        assert overflow.bottom == 30

        deeper = run(detect_overflow(run(make_state("bottom", y=590))))
        assert deeper.bottom == 40
        assert deeper.top < 0

    def test_flush_is_zero(self, make_state):
        overflow = run(detect_overflow(run(make_state("bottom", x=0, y=550))))
        assert overflow.bottom == 0
        assert overflow.left == 0

    def test_padding_increases_overflow(self, make_state):
        state = run(make_state("bottom"))
        plain = run(detect_overflow(state))
        padded = run(detect_overflow(state, {"padding": {"bottom": 10}}))

        assert padded.bottom == plain.bottom + 10
        assert padded.top == plain.top

    def test_uniform_padding(self, make_state):
        state = run(make_state("bottom"))
        plain = run(detect_overflow(state))
        padded = run(detect_overflow(state, DetectOverflowOptions(padding=5)))
        for side in Side:
            assert padded[side] == plain[side] + 5

    def test_unknown_option_rejected(self, make_state):
        state = run(make_state("bottom"))
        with pytest.raises(ValueError):
            run(detect_overflow(state, {"margin": 5}))


class TestScale:
    """Tests for offset-parent scale."""

    def test_identity_scale(self):
        platform = ScaledPlatform((1.0, 1.0))
        overflow = run(detect_overflow(scaled_state(platform, x=80, y=70)))
        assert overflow.right == 30
        assert overflow.bottom == 20

    def test_doubling_scale_halves_overflow(self):
        platform = ScaledPlatform((2.0, 1.0))
        overflow = run(detect_overflow(scaled_state(platform, x=80, y=70)))
        assert overflow.right == 15
        assert overflow.left == -40
        # y axis is unscaled
        assert overflow.bottom == 20

    def test_non_element_offset_parent_is_identity(self, make_state):
        # The static platform only treats StaticElements as elements
        state = run(make_state("bottom", y=580))
        assert run(detect_overflow(state)).bottom == 30


class TestElementContext:
    """Tests for element context, alt boundary and virtual elements."""

    def test_reference_context_uses_measured_rect(self, make_state):
        state = run(make_state("bottom", y=580))
        options = DetectOverflowOptions(element_context=ElementContext.REFERENCE)
        overflow = run(detect_overflow(state, options))
        # button spans 250..350 regardless of the proposed tooltip position
        assert overflow.bottom == -250
        assert overflow.top == -250

    def test_element_context_accepts_string(self):
        assert DetectOverflowOptions(element_context="reference").element_context == ElementContext.REFERENCE

    def test_alt_boundary_uses_other_element_clipping(self, platform, make_state, tooltip):
        panel = platform.add_element(StaticElement("panel", Rect(300, 300, 200, 200)))
        tooltip.clipping_ancestors.append(panel)
        state = run(make_state("bottom"))

        own = run(detect_overflow(state))
        alt = run(detect_overflow(state, {"alt_boundary": True}))

        assert own.top == -50       # panel top at 300, tooltip top at 350
        assert alt.top == -350      # button has no clipping ancestors

    def test_virtual_reference_uses_context_element(self, platform, make_state):
        panel = platform.add_element(StaticElement("panel", Rect(0, 0, 400, 300)))
        scroller = platform.add_element(
            StaticElement("scroller", Rect(0, 0, 400, 300), clipping_ancestors=[panel])
        )
        cursor = VirtualElement(Rect(100, 100, 10, 10), context_element=scroller)
        state = run(make_state("bottom", reference=cursor))

        overflow = run(detect_overflow(state, {"element_context": "reference"}))
        assert overflow.bottom == -190

    def test_virtual_reference_falls_back_to_document(self, make_state):
        cursor = VirtualElement(Rect(100, 100, 10, 10))
        state = run(make_state("bottom", reference=cursor))

        overflow = run(detect_overflow(state, {"element_context": "reference"}))
        assert overflow.bottom == -490


class TestObstacles:
    """Tests for obstacle intersection."""

    def test_no_obstacles(self, make_state):
        overflow = run(detect_overflow(run(make_state("bottom"))))
        assert overflow.is_intersecting is False
        assert overflow.collidable_intersections == ()

    def test_overlapping_obstacle(self, make_state):
        # tooltip spans x 375..425, y 350..400
        obstacle = Obstacle(rect=Rect(400, 360, 100, 20))
        overflow = run(detect_overflow(run(make_state("bottom", obstacles=[obstacle]))))

        assert overflow.is_intersecting
        assert len(overflow.collidable_intersections) == 1
        hit = overflow.collidable_intersections[0]
        assert hit.x_direction == Side.RIGHT
        assert hit.x == 25
        assert hit.y_direction == Side.TOP
        assert hit.y == 30

    def test_distant_obstacle_ignored(self, make_state):
        obstacle = Obstacle(rect=Rect(0, 0, 20, 20))
        overflow = run(detect_overflow(run(make_state("bottom", obstacles=[obstacle]))))
        assert not overflow.is_intersecting
        assert overflow.collidable_intersections == ()

    def test_own_element_excluded(self, make_state, tooltip):
        own = Obstacle(rect=Rect(375, 350, 50, 50), element=tooltip)
        overflow = run(detect_overflow(run(make_state("bottom", obstacles=[own]))))
        assert not overflow.is_intersecting

    def test_alt_boundary_excludes_boundary_element(self, make_state, button, tooltip):
        # Exclusion follows the alt-boundary element, the overlap test does not
        state = run(make_state("bottom", obstacles=[
            Obstacle(rect=Rect(375, 350, 50, 50), element=tooltip),
        ]))
        overflow = run(detect_overflow(state, {"alt_boundary": True}))
        assert overflow.is_intersecting

        state = run(make_state("bottom", obstacles=[
            Obstacle(rect=Rect(375, 350, 50, 50), element=button),
        ]))
        overflow = run(detect_overflow(state, {"alt_boundary": True}))
        assert not overflow.is_intersecting

    def test_obstacle_on_the_left(self):
        subject = rect_to_client_rect(Rect(50, 0, 50, 50))
        obstacle = rect_to_client_rect(Rect(0, 0, 70, 50))
        hit = get_collidable_intersection(subject, obstacle)
        assert hit.x_direction == Side.LEFT
        assert hit.x == 20

    def test_penetration_non_negative_when_intersecting(self):
        subject = rect_to_client_rect(Rect(100, 100, 50, 50))
        for rect in (Rect(90, 90, 20, 20), Rect(140, 140, 30, 30),
                     Rect(110, 110, 10, 10), Rect(50, 120, 200, 5)):
            obstacle = rect_to_client_rect(rect)
            assert subject.intersects(obstacle)
            hit = get_collidable_intersection(subject, obstacle)
            assert hit.x >= 0
            assert hit.y >= 0


class TestPlatformErrors:
    """Platform failures propagate unchanged."""

    def test_query_error_propagates(self):
        state = scaled_state(FailingPlatform((1.0, 1.0)), x=0, y=0)
        with pytest.raises(PlatformQueryError, match="detached"):
            run(detect_overflow(state))

    def test_missing_capability_propagates(self):
        state = scaled_state(ScaledPlatform((1.0, 1.0)), x=0, y=0)
        state.platform = Platform()
        with pytest.raises(NotImplementedError):
            run(detect_overflow(state))

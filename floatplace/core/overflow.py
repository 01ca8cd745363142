"""
Overflow Detection

Measures how far an element extends past its clipping boundary on each side
and whether it overlaps any registered obstacle.

Sign convention for the side values:
- positive = overflowing the boundary by that many pixels
- negative = pixels left before it will overflow
- 0 = flush with the boundary

Side values are expressed in the floating element's offset-parent units,
so they are divided by the offset parent's scale.
"""

import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Mapping, Tuple, Union

from ..geometry.primitives import (
    ClientRect,
    Padding,
    Rect,
    Side,
    SideObject,
    get_padding_object,
    rect_to_client_rect,
)
from ..platform.abstraction import CLIPPING_ANCESTORS, VIEWPORT, Boundary, RootBoundary
from .middleware import MiddlewareState

logger = logging.getLogger(__name__)


class ElementContext(Enum):
    """Which element's overflow is being measured."""
    FLOATING = "floating"
    REFERENCE = "reference"

    @property
    def opposite(self) -> "ElementContext":
        if self == ElementContext.FLOATING:
            return ElementContext.REFERENCE
        return ElementContext.FLOATING


@dataclass
class DetectOverflowOptions:
    """Options for ``detect_overflow``."""
    boundary: Boundary = CLIPPING_ANCESTORS
    root_boundary: RootBoundary = VIEWPORT
    element_context: ElementContext = ElementContext.FLOATING
    # Measure the clipping boundary of the other element (reference <-> floating)
    alt_boundary: bool = False
    padding: Padding = 0

    def __post_init__(self):
        if not isinstance(self.element_context, ElementContext):
            self.element_context = ElementContext(self.element_context)

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "DetectOverflowOptions":
        known = {f.name for f in fields(cls)}
        unknown = set(options) - known
        if unknown:
            raise ValueError(f"Unknown overflow options: {sorted(unknown)}")
        return cls(**options)


@dataclass(frozen=True)
class CollidableIntersection:
    """Penetration of one obstacle into the measured element.

    ``x``/``y`` are the overlap span on each axis; the directions name the
    side the obstacle approaches from.
    """
    x: float
    y: float
    x_direction: Side
    y_direction: Side


@dataclass(frozen=True)
class OverflowResult(SideObject):
    """Per-side overflow plus obstacle collision data."""
    is_intersecting: bool = False
    collidable_intersections: Tuple[CollidableIntersection, ...] = field(default_factory=tuple)


def get_collidable_intersection(subject: ClientRect,
                                obstacle: ClientRect) -> CollidableIntersection:
    """
    Penetration of an intersecting obstacle into ``subject``.

    The direction on each axis names the side the obstacle comes from,
    decided by comparing centers. Each edge of the penetration span is then
    picked with a direction-aware min/max, giving the distance the subject
    would have to move away from the obstacle along that axis. For partial
    overlaps this is the overlap width/height.
    """
    subject_cx, subject_cy = subject.center
    obstacle_cx, obstacle_cy = obstacle.center

    obstacle_after_x = subject_cx < obstacle_cx
    obstacle_after_y = subject_cy < obstacle_cy
    x_direction = Side.RIGHT if obstacle_after_x else Side.LEFT
    y_direction = Side.BOTTOM if obstacle_after_y else Side.TOP

    if obstacle_after_x:
        left_op = subject.left > obstacle.left
        right_op = subject.right < obstacle.right
    else:
        left_op = subject.left < obstacle.left
        right_op = subject.right > obstacle.right

    if obstacle_after_y:
        top_op = subject.top > obstacle.top
        bottom_op = subject.bottom < obstacle.bottom
    else:
        top_op = subject.top < obstacle.top
        bottom_op = subject.bottom > obstacle.bottom

    left = (min if left_op else max)(subject.left, obstacle.left)
    right = (min if right_op else max)(subject.right, obstacle.right)
    top = (min if top_op else max)(subject.top, obstacle.top)
    bottom = (min if bottom_op else max)(subject.bottom, obstacle.bottom)

    return CollidableIntersection(
        x=right - left,
        y=bottom - top,
        x_direction=x_direction,
        y_direction=y_direction,
    )


async def detect_overflow(
        state: MiddlewareState,
        options: Union[DetectOverflowOptions, Mapping[str, Any], None] = None,
) -> OverflowResult:
    """
    Resolve how much the element overflows its clipping boundary per side.

    Args:
        state: Current pipeline state; ``x``/``y`` are the proposed
            (not yet applied) coordinates of the floating element
        options: ``DetectOverflowOptions`` or a mapping of its fields

    Returns:
        OverflowResult with the four side values and collision data

    Platform errors propagate unchanged.
    """
    if options is None:
        options = DetectOverflowOptions()
    elif not isinstance(options, DetectOverflowOptions):
        options = DetectOverflowOptions.from_mapping(options)

    platform = state.platform
    elements = state.elements
    padding = get_padding_object(options.padding)

    context = options.element_context
    boundary_context = context.opposite if options.alt_boundary else context
    element = getattr(elements, boundary_context.value)

    # Virtual elements fall back to their context element, then the document
    clipping_element = element
    if not await platform.is_element(element):
        clipping_element = getattr(element, "context_element", None)
        if clipping_element is None:
            clipping_element = await platform.get_document_element(elements.floating)

    clipping_rect = rect_to_client_rect(
        await platform.get_clipping_rect(
            clipping_element,
            options.boundary,
            options.root_boundary,
            state.strategy,
        )
    )

    if context == ElementContext.FLOATING:
        floating = state.rects.floating
        rect = Rect(x=state.x, y=state.y, width=floating.width, height=floating.height)
    else:
        rect = state.rects.reference

    offset_parent = await platform.get_offset_parent(elements.floating)
    scale_x, scale_y = 1.0, 1.0
    if offset_parent is not None and await platform.is_element(offset_parent):
        scale_x, scale_y = await platform.get_scale(offset_parent) or (1.0, 1.0)

    element_rect = rect_to_client_rect(
        await platform.convert_offset_parent_relative_rect_to_viewport_relative_rect(
            rect, offset_parent, state.strategy
        )
    )

    # The exclusion uses the boundary element while the overlap test uses
    # the measured context rect; these differ when alt_boundary is set.
    candidates = [o for o in state.obstacles if o.element is not element]
    intersections = tuple(
        get_collidable_intersection(element_rect, obstacle.client_rect)
        for obstacle in candidates
        if element_rect.intersects(obstacle.client_rect)
    )
    is_intersecting = bool(intersections)

    if is_intersecting:
        logger.debug("%s rect intersects %d of %d obstacles",
                     context.value, len(intersections), len(state.obstacles))

    return OverflowResult(
        top=(clipping_rect.top - element_rect.top + padding.top) / scale_y,
        bottom=(element_rect.bottom - clipping_rect.bottom + padding.bottom) / scale_y,
        left=(clipping_rect.left - element_rect.left + padding.left) / scale_x,
        right=(element_rect.right - clipping_rect.right + padding.right) / scale_x,
        is_intersecting=is_intersecting,
        collidable_intersections=intersections,
    )

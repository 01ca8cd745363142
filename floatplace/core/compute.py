"""
Position Computation

Runs the middleware pipeline for one positioning request:

1. Measure both elements and place the floating element on the requested
   side of the reference.
2. Run every middleware in order, applying coordinates and storing data.
3. When a middleware asks for a reset, apply it and restart from the first
   middleware with the accumulated data kept.
4. Stop after a full pass with no reset.

Resets are counted against ``ComputeConfig.max_resets``; exceeding the cap
raises ``PipelineNotConvergedError``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from ..config import ComputeConfig
from ..geometry.primitives import (
    Alignment,
    Axis,
    Placement,
    PlacementLike,
    Side,
    Strategy,
    get_alignment_axis,
    get_axis_length,
    get_side_axis,
)
from ..platform.abstraction import ElementRects, Elements, Obstacle, Platform
from .middleware import Middleware, MiddlewareResult, MiddlewareState, Reset

logger = logging.getLogger(__name__)


class PipelineNotConvergedError(Exception):
    """Raised when middleware keep requesting resets past the configured cap."""

    def __init__(self, resets: int, max_resets: int, placement: Placement):
        self.resets = resets
        self.max_resets = max_resets
        self.placement = placement
        super().__init__(
            f"Middleware pipeline did not converge after {resets} resets "
            f"(limit {max_resets}), last placement {placement}"
        )


@dataclass
class ComputePositionResult:
    """Final coordinates and placement of the floating element."""
    x: float
    y: float
    placement: Placement
    strategy: Strategy
    middleware_data: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    resets: int = 0


def compute_coords_from_placement(rects: ElementRects, placement: PlacementLike,
                                  rtl: bool = False) -> Tuple[float, float]:
    """
    Coordinates that put the floating element on ``placement``.

    The floating element sits flush against the reference on the placement
    side and is centered along the other axis; ``start``/``end`` alignment
    lines up the matching edges instead. In RTL layouts the alignment of
    top/bottom placements is mirrored.
    """
    placement = Placement.parse(placement)
    reference, floating = rects.reference, rects.floating

    alignment_axis = get_alignment_axis(placement)
    align_length = get_axis_length(alignment_axis)
    is_vertical = get_side_axis(placement) == Axis.Y

    common_x = reference.x + reference.width / 2 - floating.width / 2
    common_y = reference.y + reference.height / 2 - floating.height / 2
    common_align = getattr(reference, align_length) / 2 - getattr(floating, align_length) / 2

    if placement.side == Side.TOP:
        coords = {Axis.X: common_x, Axis.Y: reference.y - floating.height}
    elif placement.side == Side.BOTTOM:
        coords = {Axis.X: common_x, Axis.Y: reference.y + reference.height}
    elif placement.side == Side.RIGHT:
        coords = {Axis.X: reference.x + reference.width, Axis.Y: common_y}
    else:
        coords = {Axis.X: reference.x - floating.width, Axis.Y: common_y}

    direction = -1 if rtl and is_vertical else 1
    if placement.alignment == Alignment.START:
        coords[alignment_axis] -= common_align * direction
    elif placement.alignment == Alignment.END:
        coords[alignment_axis] += common_align * direction

    return (coords[Axis.X], coords[Axis.Y])


def _merge_data(middleware_data: Dict[str, Dict[str, Any]], name: str,
                data: Optional[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    merged = dict(middleware_data)
    merged[name] = {**middleware_data.get(name, {}), **(data or {})}
    return merged


async def compute_position(
        reference: Any,
        floating: Any,
        platform: Platform,
        placement: Optional[PlacementLike] = None,
        strategy: Optional[Strategy] = None,
        middleware: Sequence[Optional[Middleware]] = (),
        obstacles: Iterable[Obstacle] = (),
        config: Optional[ComputeConfig] = None,
) -> ComputePositionResult:
    """
    Compute the position of ``floating`` next to ``reference``.

    Args:
        reference: Platform handle of the reference element
        floating: Platform handle of the floating element
        platform: Adapter answering geometry queries
        placement: Preferred placement (default from config: bottom)
        strategy: Positioning strategy (default from config: absolute)
        middleware: Pipeline steps; ``None`` entries are skipped
        obstacles: Elements the floating element should not overlap
        config: Pipeline settings, e.g. the reset cap

    Returns:
        ComputePositionResult

    Raises:
        PipelineNotConvergedError: If the reset cap is exceeded
    """
    config = config or ComputeConfig()
    initial_placement = Placement.parse(placement or config.placement)
    strategy = Strategy(strategy or config.strategy)
    steps = [m for m in middleware if m is not None]
    elements = Elements(reference=reference, floating=floating)

    rtl = await platform.is_rtl(floating)
    rects = await platform.get_element_rects(reference, floating, strategy)
    x, y = compute_coords_from_placement(rects, initial_placement, rtl)

    current_placement = initial_placement
    middleware_data: Dict[str, Dict[str, Any]] = {}
    obstacles = tuple(obstacles)
    resets = 0

    i = 0
    while i < len(steps):
        step = steps[i]
        state = MiddlewareState(
            x=x,
            y=y,
            placement=current_placement,
            initial_placement=initial_placement,
            strategy=strategy,
            rects=rects,
            elements=elements,
            platform=platform,
            middleware_data=middleware_data,
            obstacles=obstacles,
        )
        result = await step.evaluate(state) or MiddlewareResult()

        if result.x is not None:
            x = result.x
        if result.y is not None:
            y = result.y
        middleware_data = _merge_data(middleware_data, step.name,
                                      dict(result.data) if result.data else None)

        if not result.reset:
            i += 1
            continue

        resets += 1
        if resets > config.max_resets:
            logger.warning("Reset limit reached: %s requested reset %d (limit %d)",
                           step.name, resets, config.max_resets)
            raise PipelineNotConvergedError(resets, config.max_resets, current_placement)

        reset = result.reset
        if isinstance(reset, Reset):
            if reset.placement is not None:
                current_placement = Placement.parse(reset.placement)
            if reset.rects is True:
                rects = await platform.get_element_rects(reference, floating, strategy)
            elif isinstance(reset.rects, ElementRects):
                rects = reset.rects
            x, y = compute_coords_from_placement(rects, current_placement, rtl)

        logger.debug("Reset %d from %s, restarting at %s", resets, step.name,
                     current_placement)
        i = 0

    return ComputePositionResult(
        x=x,
        y=y,
        placement=current_placement,
        strategy=strategy,
        middleware_data=middleware_data,
        resets=resets,
    )

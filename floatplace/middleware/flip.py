"""
Flip Middleware

Keeps the floating element in view by moving it to a fallback placement
when the preferred one overflows its clipping boundary or hits an obstacle.

The first evaluation of each placement records ``(placement, overflows)`` in
the flip history. Each evaluation then either:
- accepts the placement (nothing overflows, no obstacle hit),
- requests a reset to the next untried candidate, or
- once every candidate has been tried, resets to the best recorded one.
"""

import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..core.middleware import Middleware, MiddlewareResult, MiddlewareState, Reset
from ..core.overflow import DetectOverflowOptions, detect_overflow
from ..geometry.primitives import (
    Placement,
    PlacementLike,
    get_alignment_sides,
    get_expanded_placements,
    get_opposite_axis_placements,
    get_opposite_placement,
)

logger = logging.getLogger(__name__)


class FallbackStrategy(Enum):
    """What to do when no candidate placement fits."""
    BEST_FIT = "bestFit"                    # least total overflow
    INITIAL_PLACEMENT = "initialPlacement"  # back to the requested placement


class FallbackAxisSideDirection(Enum):
    """Whether to also try the perpendicular axis, and which side first."""
    NONE = "none"
    START = "start"
    END = "end"


@dataclass(frozen=True)
class FlipAttempt:
    """Overflow recorded for one tried placement.

    ``overflows`` holds the main-axis side first (when checked), then the
    main and cross alignment sides (when checked).
    """
    placement: Placement
    overflows: Tuple[float, ...]

    @property
    def total_overflow(self) -> float:
        """Sum of the positive overflows only."""
        return sum(v for v in self.overflows if v > 0)


@dataclass
class FlipOptions:
    """Options for the flip middleware."""
    # Check overflow on the side the floating element sits on
    main_axis: bool = True
    # Check overflow along the alignment axis
    cross_axis: bool = True
    # Candidates to try in order; derived from the initial placement when None
    fallback_placements: Optional[Sequence[PlacementLike]] = None
    fallback_strategy: FallbackStrategy = FallbackStrategy.BEST_FIT
    fallback_axis_side_direction: FallbackAxisSideDirection = FallbackAxisSideDirection.NONE
    # Also try the opposite alignment of each side
    flip_alignment: bool = True
    detect_overflow: DetectOverflowOptions = field(default_factory=DetectOverflowOptions)

    def __post_init__(self):
        self.fallback_strategy = FallbackStrategy(self.fallback_strategy)
        self.fallback_axis_side_direction = FallbackAxisSideDirection(
            self.fallback_axis_side_direction
        )
        if self.fallback_placements is not None:
            self.fallback_placements = tuple(
                Placement.parse(p) for p in self.fallback_placements
            )
        if isinstance(self.detect_overflow, Mapping):
            self.detect_overflow = DetectOverflowOptions.from_mapping(self.detect_overflow)

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "FlipOptions":
        """
        Build options from a flat mapping.

        Keys that are not flip options are treated as overflow detection
        options, so ``{"fallback_placements": ["top"], "padding": 8}`` works.
        """
        own = {f.name for f in fields(cls)}
        flip_args = {k: v for k, v in options.items() if k in own}
        overflow_args = {k: v for k, v in options.items() if k not in own}
        if overflow_args:
            if "detect_overflow" in flip_args:
                raise ValueError("Pass overflow options either flat or as detect_overflow")
            flip_args["detect_overflow"] = DetectOverflowOptions.from_mapping(overflow_args)
        return cls(**flip_args)


def resolve_fallback_placement(history: Sequence[FlipAttempt],
                               initial_placement: Placement,
                               fallback_strategy: FallbackStrategy) -> Optional[Placement]:
    """
    Pick a placement once every candidate has been tried.

    Prefers attempts whose main-axis value fits, choosing the least
    cross-axis overflow (first seen wins ties). Otherwise applies the
    fallback strategy.
    """
    fitting = [a for a in history if a.overflows and a.overflows[0] <= 0]
    if fitting:
        fitting.sort(key=lambda a: a.overflows[1] if len(a.overflows) > 1 else 0)
        return fitting[0].placement

    if fallback_strategy == FallbackStrategy.INITIAL_PLACEMENT:
        return initial_placement

    if not history:
        return None
    return min(history, key=lambda a: a.total_overflow).placement


class Flip(Middleware):
    """
    Optimizes visibility by flipping the placement when the preferred one
    would overflow the clipping boundary.

    Stored data, under ``middleware_data["flip"]``:
        index: position of the current candidate in [initial, *fallbacks]
        overflows: tuple of FlipAttempt, one per tried placement, oldest first
    """

    name = "flip"

    def __init__(self, options: Optional[FlipOptions] = None):
        super().__init__(options or FlipOptions())

    def get_candidates(self, initial_placement: Placement, rtl: bool) -> List[Placement]:
        """Initial placement followed by the fallback placements, in try order."""
        options = self.options
        if options.fallback_placements is not None:
            fallbacks = list(options.fallback_placements)
        elif initial_placement.alignment is None or not options.flip_alignment:
            fallbacks = [get_opposite_placement(initial_placement)]
        else:
            fallbacks = get_expanded_placements(initial_placement)

        direction = options.fallback_axis_side_direction
        if options.fallback_placements is None and direction != FallbackAxisSideDirection.NONE:
            fallbacks += get_opposite_axis_placements(
                initial_placement, options.flip_alignment, direction.value, rtl
            )
        return [initial_placement] + fallbacks

    async def evaluate(self, state: MiddlewareState) -> MiddlewareResult:
        options = self.options
        placement = state.placement
        rtl = await state.platform.is_rtl(state.elements.floating)
        candidates = self.get_candidates(state.initial_placement, rtl)

        overflow = await detect_overflow(state, options.detect_overflow)

        overflows = []
        if options.main_axis:
            overflows.append(overflow[placement.side])
        if options.cross_axis:
            main, cross = get_alignment_sides(
                placement, state.rects.reference, state.rects.floating, rtl
            )
            overflows += [overflow[main], overflow[cross]]

        data: Dict[str, Any] = state.middleware_data.get(self.name, {})
        index = data.get("index", 0)
        history = tuple(data.get("overflows", ()))
        # One entry per placement; re-evaluations after a reset are not recorded
        if all(a.placement != placement for a in history):
            history += (FlipAttempt(placement=placement, overflows=tuple(overflows)),)

        if all(v <= 0 for v in overflows) and not overflow.is_intersecting:
            return MiddlewareResult(data={"index": index, "overflows": history})

        next_index = index + 1
        if next_index < len(candidates):
            logger.debug("%s overflows %s, trying %s", placement, overflows,
                         candidates[next_index])
            return MiddlewareResult(
                data={"index": next_index, "overflows": history},
                reset=Reset(placement=candidates[next_index]),
            )

        resolved = resolve_fallback_placement(
            history, state.initial_placement, options.fallback_strategy
        )
        logger.debug("All %d placements tried, resolved to %s", len(candidates), resolved)

        if resolved is not None and resolved != placement:
            return MiddlewareResult(
                data={"index": index, "overflows": history},
                reset=Reset(placement=resolved),
            )
        return MiddlewareResult(data={"index": index, "overflows": history})


def flip(options: Optional[FlipOptions] = None, **kwargs) -> Flip:
    """
    Create a flip middleware.

    Example:
        flip(fallback_placements=["top", "right"], padding=8)
    """
    if options is not None and kwargs:
        raise ValueError("Pass either a FlipOptions or keyword options, not both")
    if options is None:
        options = FlipOptions.from_mapping(kwargs)
    return Flip(options)

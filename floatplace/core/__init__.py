"""Overflow detection, the middleware protocol and the pipeline loop."""

from .middleware import Middleware, MiddlewareResult, MiddlewareState, Reset
from .overflow import (
    CollidableIntersection,
    DetectOverflowOptions,
    ElementContext,
    OverflowResult,
    detect_overflow,
)
from .compute import (
    ComputePositionResult,
    PipelineNotConvergedError,
    compute_coords_from_placement,
    compute_position,
)

__all__ = [
    "Middleware",
    "MiddlewareResult",
    "MiddlewareState",
    "Reset",
    "CollidableIntersection",
    "DetectOverflowOptions",
    "ElementContext",
    "OverflowResult",
    "detect_overflow",
    "ComputePositionResult",
    "PipelineNotConvergedError",
    "compute_coords_from_placement",
    "compute_position",
]

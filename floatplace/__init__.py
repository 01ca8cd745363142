"""
floatplace - Floating Element Positioning

Computes where a floating element (tooltip, popover, dropdown) goes next to
a reference element, keeping it inside its clipping boundary and away from
registered obstacles. Placement is adjusted by a pipeline of middleware,
such as ``flip``, that can re-run the pipeline with a new placement.
"""

__version__ = "0.1.0"

from .config import ComputeConfig, ConfigError, get_flip_options, load_profile
from .core import (
    DetectOverflowOptions,
    Middleware,
    MiddlewareResult,
    MiddlewareState,
    OverflowResult,
    PipelineNotConvergedError,
    Reset,
    compute_position,
    detect_overflow,
)
from .geometry import Placement, Rect, Side, Strategy
from .middleware import Flip, FlipOptions, flip
from .platform import Obstacle, Platform, PlatformQueryError

__all__ = [
    "ComputeConfig",
    "ConfigError",
    "get_flip_options",
    "load_profile",
    "DetectOverflowOptions",
    "Middleware",
    "MiddlewareResult",
    "MiddlewareState",
    "OverflowResult",
    "PipelineNotConvergedError",
    "Reset",
    "compute_position",
    "detect_overflow",
    "Placement",
    "Rect",
    "Side",
    "Strategy",
    "Flip",
    "FlipOptions",
    "flip",
    "Obstacle",
    "Platform",
    "PlatformQueryError",
]

"""Pipeline middleware built on the overflow detector."""

from .flip import (
    FallbackAxisSideDirection,
    FallbackStrategy,
    Flip,
    FlipAttempt,
    FlipOptions,
    flip,
    resolve_fallback_placement,
)

__all__ = [
    "FallbackAxisSideDirection",
    "FallbackStrategy",
    "Flip",
    "FlipAttempt",
    "FlipOptions",
    "flip",
    "resolve_fallback_placement",
]

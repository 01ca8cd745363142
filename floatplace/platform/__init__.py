"""Platform adapters: the measurement capabilities the engine consumes."""

from .abstraction import (
    CLIPPING_ANCESTORS,
    DOCUMENT,
    VIEWPORT,
    ElementRects,
    Elements,
    Obstacle,
    Platform,
    PlatformQueryError,
)
from .static_adapter import StaticElement, StaticPlatform, VirtualElement

__all__ = [
    "CLIPPING_ANCESTORS",
    "DOCUMENT",
    "VIEWPORT",
    "ElementRects",
    "Elements",
    "Obstacle",
    "Platform",
    "PlatformQueryError",
    "StaticElement",
    "StaticPlatform",
    "VirtualElement",
]

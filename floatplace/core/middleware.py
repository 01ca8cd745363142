"""
Middleware Protocol

A middleware reads the current ``MiddlewareState`` and answers with a
``MiddlewareResult``: optionally new coordinates, data to store under its
own name, and/or a reset that restarts the whole middleware list.

Contract enforced by ``compute_position``:
- ``data`` is shallow-merged into ``middleware_data[name]`` only
- ``reset`` restarts the list from the first middleware, keeping the
  accumulated ``middleware_data``
- the pipeline ends after a full pass without a reset
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ..geometry.primitives import Placement, Strategy
from ..platform.abstraction import ElementRects, Elements, Obstacle, Platform


@dataclass
class MiddlewareState:
    """Pipeline context for one positioning request."""
    x: float
    y: float
    placement: Placement
    initial_placement: Placement
    strategy: Strategy
    rects: ElementRects
    elements: Elements
    platform: Platform
    middleware_data: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    obstacles: Tuple[Obstacle, ...] = ()


@dataclass(frozen=True)
class Reset:
    """Instruction to restart the pipeline.

    ``rects=True`` re-measures both elements through the platform; an
    ``ElementRects`` value replaces the measurements directly.
    """
    placement: Optional[Placement] = None
    rects: Union[bool, ElementRects, None] = None


@dataclass(frozen=True)
class MiddlewareResult:
    """What a middleware hands back to the pipeline. Empty means "no change"."""
    x: Optional[float] = None
    y: Optional[float] = None
    data: Optional[Mapping[str, Any]] = None
    # True restarts without changing anything
    reset: Union[Reset, bool, None] = None


class Middleware:
    """
    Base class for pipeline steps.

    Subclasses set ``name`` and implement ``evaluate``. ``name`` keys the
    middleware's slot in ``middleware_data``; no other middleware writes it.
    """

    name: str = ""

    def __init__(self, options: Any = None):
        self.options = options

    async def evaluate(self, state: MiddlewareState) -> MiddlewareResult:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

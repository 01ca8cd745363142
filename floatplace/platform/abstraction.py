"""
Platform Abstraction Layer

The positioning engine never measures anything itself. Everything it needs
to know about the host environment (clipping rectangles, element rectangles,
offset parents, scale, writing direction) is asked of a ``Platform``. This
allows the overflow detector and middleware to work independently of how
geometry is actually measured.

Two capabilities are required; every other query has a default so adapters
only override what their environment can answer.
"""

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple, Union

from ..geometry.primitives import ClientRect, Rect, Strategy, rect_to_client_rect

CLIPPING_ANCESTORS = "clippingAncestors"
VIEWPORT = "viewport"
DOCUMENT = "document"

# "clippingAncestors", one element, several elements, or an explicit rectangle
Boundary = Union[str, Any, Sequence[Any], Rect]
# "viewport", "document", or an explicit rectangle
RootBoundary = Union[str, Rect]


class PlatformQueryError(Exception):
    """Raised by adapters when a query cannot be answered."""
    pass


@dataclass(frozen=True)
class ElementRects:
    """Measured reference and floating rectangles.

    The reference is relative to the floating element's offset parent; the
    floating rectangle only carries a meaningful size.
    """
    reference: Rect
    floating: Rect


@dataclass(frozen=True)
class Elements:
    """Opaque platform handles for the two elements being positioned."""
    reference: Any
    floating: Any


@dataclass(frozen=True)
class Obstacle:
    """An element the floating element is checked against for overlap.

    ``rect`` is in viewport coordinates. ``element`` is the platform handle,
    used to skip the element currently being checked against itself.
    """
    rect: Union[Rect, ClientRect]
    element: Any = None

    @property
    def client_rect(self) -> ClientRect:
        if isinstance(self.rect, ClientRect):
            return self.rect
        return rect_to_client_rect(self.rect)


class Platform:
    """
    Host capabilities queried by the positioning engine.

    All queries are coroutines so adapters can measure asynchronously.
    ``get_clipping_rect`` and ``get_element_rects`` must be implemented;
    the remaining methods return neutral defaults.
    """

    async def get_clipping_rect(self, element: Any, boundary: Boundary,
                                root_boundary: RootBoundary,
                                strategy: Strategy) -> Rect:
        """Rectangle outside of which ``element`` is considered clipped."""
        raise NotImplementedError

    async def get_element_rects(self, reference: Any, floating: Any,
                                strategy: Strategy) -> ElementRects:
        """Measure both elements for the given strategy."""
        raise NotImplementedError

    async def is_element(self, node: Any) -> bool:
        """Whether ``node`` can be measured directly (not a virtual element)."""
        return node is not None

    async def get_document_element(self, node: Any) -> Any:
        """Root element of the document that owns ``node``."""
        return None

    async def get_offset_parent(self, node: Any) -> Any:
        """Ancestor establishing the coordinate origin of ``node``."""
        return None

    async def get_scale(self, node: Any) -> Tuple[float, float]:
        """(x, y) scale applied to ``node``."""
        return (1.0, 1.0)

    async def convert_offset_parent_relative_rect_to_viewport_relative_rect(
            self, rect: Rect, offset_parent: Any, strategy: Strategy) -> Rect:
        """Translate a rectangle from offset-parent space to the viewport."""
        return rect

    async def is_rtl(self, node: Any) -> bool:
        """Whether ``node`` is laid out right-to-left."""
        return False

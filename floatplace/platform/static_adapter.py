"""
Static Platform Adapter

Answers platform queries from rectangles measured ahead of time. Useful
wherever geometry comes from somewhere other than a live document: server
side layout, snapshots replayed from a browser, and tests.

Coordinate model:
- Each ``StaticElement.rect`` is relative to its offset parent (or to the
  viewport when it has none), expressed in the offset parent's unscaled
  units.
- An offset parent's ``scale`` multiplies the coordinates of everything
  positioned inside it.
- ``VirtualElement.rect`` is always in viewport coordinates.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from ..geometry.primitives import Rect, Strategy
from .abstraction import (
    CLIPPING_ANCESTORS,
    DOCUMENT,
    VIEWPORT,
    Boundary,
    ElementRects,
    Obstacle,
    Platform,
    PlatformQueryError,
    RootBoundary,
)

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class StaticElement:
    """A measured element. Compared by identity, like a DOM node."""
    name: str
    rect: Rect
    offset_parent: Optional["StaticElement"] = None
    scale: Tuple[float, float] = (1.0, 1.0)
    rtl: bool = False

    # Ancestors whose box clips this element, nearest first
    clipping_ancestors: List["StaticElement"] = field(default_factory=list)

    # Obstacles are collected from elements flagged collidable
    collidable: bool = False

    def __repr__(self) -> str:
        return f"StaticElement({self.name!r})"


@dataclass(eq=False)
class VirtualElement:
    """A position without a node of its own, e.g. a text selection or cursor.

    ``context_element`` is the real element whose clipping context applies.
    """
    rect: Rect
    context_element: Optional[StaticElement] = None


class StaticPlatform(Platform):
    """
    Platform backed by a registry of pre-measured elements.

    Example:
        platform = StaticPlatform(viewport=Rect(0, 0, 800, 600))
        ref = platform.add_element(StaticElement("button", Rect(100, 100, 80, 30)))
        tip = platform.add_element(StaticElement("tooltip", Rect(0, 0, 120, 40)))
    """

    def __init__(self, viewport: Rect, document: Optional[Rect] = None):
        self.viewport = viewport
        self.document_element = StaticElement("html", document or viewport)
        self.elements: List[StaticElement] = []

    def add_element(self, element: StaticElement) -> StaticElement:
        """Register an element (registration order is document order)."""
        self.elements.append(element)
        return element

    def get_element(self, name: str) -> StaticElement:
        for element in self.elements:
            if element.name == name:
                return element
        raise PlatformQueryError(f"Unknown element: {name}")

    def collect_obstacles(self, exclude: Sequence[Any] = ()) -> List[Obstacle]:
        """Obstacles for every collidable element, in document order."""
        return [
            Obstacle(rect=self.viewport_rect(element), element=element)
            for element in self.elements
            if element.collidable and element not in exclude
        ]

    def viewport_rect(self, node: Any) -> Rect:
        """Rectangle of ``node`` in viewport coordinates.

        ``node`` may be a registered element name, e.g. a boundary given as
        ``"sidebar"``.
        """
        if isinstance(node, str):
            node = self.get_element(node)
        if isinstance(node, VirtualElement):
            return node.rect
        if not isinstance(node, StaticElement):
            raise PlatformQueryError(f"Cannot measure {node!r}")

        if node.offset_parent is None:
            return node.rect
        return self._to_viewport(node.rect, node.offset_parent)

    def _to_viewport(self, rect: Rect, offset_parent: StaticElement) -> Rect:
        origin = self.viewport_rect(offset_parent)
        sx, sy = offset_parent.scale
        return Rect(
            x=origin.x + rect.x * sx,
            y=origin.y + rect.y * sy,
            width=rect.width * sx,
            height=rect.height * sy,
        )

    def _from_viewport(self, rect: Rect, offset_parent: Optional[StaticElement]) -> Rect:
        if offset_parent is None:
            return rect
        origin = self.viewport_rect(offset_parent)
        sx, sy = offset_parent.scale
        return Rect(
            x=(rect.x - origin.x) / sx,
            y=(rect.y - origin.y) / sy,
            width=rect.width / sx,
            height=rect.height / sy,
        )

    def _root_rect(self, root_boundary: RootBoundary) -> Rect:
        if isinstance(root_boundary, Rect):
            return root_boundary
        if root_boundary == VIEWPORT:
            return self.viewport
        if root_boundary == DOCUMENT:
            return self.document_element.rect
        raise PlatformQueryError(f"Unknown root boundary: {root_boundary!r}")

    def _boundary_rects(self, element: Any, boundary: Boundary) -> List[Rect]:
        if isinstance(boundary, Rect):
            return [boundary]
        if boundary == CLIPPING_ANCESTORS:
            if element is None:
                raise PlatformQueryError("No element to resolve clipping ancestors for")
            if isinstance(element, StaticElement):
                return [self.viewport_rect(a) for a in element.clipping_ancestors]
            return []
        if isinstance(boundary, (list, tuple)):
            return [self.viewport_rect(b) for b in boundary]
        return [self.viewport_rect(boundary)]

    async def get_clipping_rect(self, element: Any, boundary: Boundary,
                                root_boundary: RootBoundary,
                                strategy: Strategy) -> Rect:
        rects = self._boundary_rects(element, boundary)
        rects.append(self._root_rect(root_boundary))

        top = max(r.y for r in rects)
        left = max(r.x for r in rects)
        bottom = min(r.y + r.height for r in rects)
        right = min(r.x + r.width for r in rects)

        logger.debug("Clipping rect for %r: (%s, %s, %s, %s) from %d rects",
                     element, left, top, right, bottom, len(rects))
        return Rect(x=left, y=top, width=right - left, height=bottom - top)

    async def get_element_rects(self, reference: Any, floating: Any,
                                strategy: Strategy) -> ElementRects:
        if not isinstance(floating, StaticElement):
            raise PlatformQueryError(f"Cannot measure floating element {floating!r}")

        reference_rect = self._from_viewport(
            self.viewport_rect(reference), floating.offset_parent
        )
        floating_rect = Rect(0.0, 0.0, floating.rect.width, floating.rect.height)
        return ElementRects(reference=reference_rect, floating=floating_rect)

    async def is_element(self, node: Any) -> bool:
        return isinstance(node, StaticElement)

    async def get_document_element(self, node: Any) -> Any:
        return self.document_element

    async def get_offset_parent(self, node: Any) -> Any:
        if isinstance(node, StaticElement):
            return node.offset_parent
        return None

    async def get_scale(self, node: Any) -> Tuple[float, float]:
        if isinstance(node, StaticElement):
            return node.scale
        return (1.0, 1.0)

    async def convert_offset_parent_relative_rect_to_viewport_relative_rect(
            self, rect: Rect, offset_parent: Any, strategy: Strategy) -> Rect:
        if not isinstance(offset_parent, StaticElement):
            return rect
        return self._to_viewport(rect, offset_parent)

    async def is_rtl(self, node: Any) -> bool:
        if isinstance(node, (StaticElement, VirtualElement)):
            return getattr(node, "rtl", False)
        return False


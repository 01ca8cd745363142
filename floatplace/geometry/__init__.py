"""Geometry primitives: sides, placements, rectangles and padding."""

from .primitives import (
    Alignment,
    Axis,
    ClientRect,
    Padding,
    Placement,
    Rect,
    Side,
    SideObject,
    Strategy,
    get_alignment,
    get_alignment_axis,
    get_alignment_sides,
    get_axis_length,
    get_expanded_placements,
    get_opposite_alignment_placement,
    get_opposite_axis,
    get_opposite_axis_placements,
    get_opposite_placement,
    get_padding_object,
    get_side,
    get_side_axis,
    rect_to_client_rect,
)

__all__ = [
    "Alignment",
    "Axis",
    "ClientRect",
    "Padding",
    "Placement",
    "Rect",
    "Side",
    "SideObject",
    "Strategy",
    "get_alignment",
    "get_alignment_axis",
    "get_alignment_sides",
    "get_axis_length",
    "get_expanded_placements",
    "get_opposite_alignment_placement",
    "get_opposite_axis",
    "get_opposite_axis_placements",
    "get_opposite_placement",
    "get_padding_object",
    "get_side",
    "get_side_axis",
    "rect_to_client_rect",
]

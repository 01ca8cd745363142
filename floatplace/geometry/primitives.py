"""
Geometry Primitives

Sides, alignments, placements and rectangles shared by the overflow
detector, the pipeline loop and the middleware. Placements are small
immutable values; all the "what is opposite to what" algebra lives here so
middleware never manipulates placement strings directly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple, Union


class Side(Enum):
    """Side of the reference element the floating element sits on."""
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"


class Alignment(Enum):
    """Alignment of the floating element along the side."""
    START = "start"
    END = "end"


class Axis(Enum):
    X = "x"
    Y = "y"


class Strategy(Enum):
    """CSS positioning strategy the coordinates are computed for."""
    ABSOLUTE = "absolute"
    FIXED = "fixed"


OPPOSITE_SIDE = {
    Side.TOP: Side.BOTTOM,
    Side.BOTTOM: Side.TOP,
    Side.LEFT: Side.RIGHT,
    Side.RIGHT: Side.LEFT,
}

OPPOSITE_ALIGNMENT = {
    Alignment.START: Alignment.END,
    Alignment.END: Alignment.START,
}


@dataclass(frozen=True)
class Placement:
    """A side plus an optional alignment, e.g. ``bottom-start``."""
    side: Side
    alignment: Optional[Alignment] = None

    def __str__(self) -> str:
        if self.alignment is None:
            return self.side.value
        return f"{self.side.value}-{self.alignment.value}"

    @classmethod
    def parse(cls, value: Union[str, "Placement"]) -> "Placement":
        """Parse ``"side"`` or ``"side-alignment"``; placements pass through."""
        if isinstance(value, Placement):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unknown placement: {value!r}")

        side_name, _, alignment_name = value.strip().lower().partition("-")
        try:
            side = Side(side_name)
            alignment = Alignment(alignment_name) if alignment_name else None
        except ValueError:
            raise ValueError(f"Unknown placement: {value!r}") from None
        return cls(side, alignment)

    @classmethod
    def all(cls) -> List["Placement"]:
        """All 12 placements, each side followed by its aligned variants."""
        placements = []
        for side in Side:
            placements.append(cls(side))
            for alignment in Alignment:
                placements.append(cls(side, alignment))
        return placements


PlacementLike = Union[str, Placement]


@dataclass(frozen=True)
class Rect:
    """Measured rectangle (px) in the coordinate space of the strategy."""
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class ClientRect:
    """Rectangle with explicit edges; ``right = x + width``, ``bottom = y + height``."""
    x: float
    y: float
    width: float
    height: float
    top: float
    right: float
    bottom: float
    left: float

    @property
    def center(self) -> Tuple[float, float]:
        return (self.left + self.width / 2, self.top + self.height / 2)

    def intersects(self, other: "ClientRect") -> bool:
        """Strict overlap test; rectangles sharing only an edge do not intersect."""
        return (self.top < other.bottom and self.bottom > other.top and
                self.left < other.right and self.right > other.left)


def rect_to_client_rect(rect: Union[Rect, ClientRect]) -> ClientRect:
    """Derive edge coordinates from x/y/width/height."""
    return ClientRect(
        x=rect.x,
        y=rect.y,
        width=rect.width,
        height=rect.height,
        top=rect.y,
        right=rect.x + rect.width,
        bottom=rect.y + rect.height,
        left=rect.x,
    )


@dataclass(frozen=True)
class SideObject:
    """A signed value per side; positive means overflowing by that many px."""
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    def __getitem__(self, side: Union[Side, str]) -> float:
        if isinstance(side, Side):
            side = side.value
        if side not in ("top", "right", "bottom", "left"):
            raise KeyError(side)
        return getattr(self, side)

    def as_dict(self) -> Dict[str, float]:
        return {
            "top": self.top,
            "right": self.right,
            "bottom": self.bottom,
            "left": self.left,
        }


Padding = Union[float, Mapping[Union[Side, str], float]]


def get_padding_object(padding: Padding) -> SideObject:
    """
    Normalize padding to all four sides.

    A number applies to every side; a mapping may name any subset of sides
    (by ``Side`` or side name) and the rest default to 0.
    """
    if isinstance(padding, (int, float)):
        value = float(padding)
        return SideObject(top=value, right=value, bottom=value, left=value)

    values = {"top": 0.0, "right": 0.0, "bottom": 0.0, "left": 0.0}
    for key, value in padding.items():
        name = key.value if isinstance(key, Side) else str(key)
        if name not in values:
            raise ValueError(f"Unknown padding side: {key!r}")
        values[name] = float(value)
    return SideObject(**values)


# Placement algebra

def get_side(placement: PlacementLike) -> Side:
    return Placement.parse(placement).side


def get_alignment(placement: PlacementLike) -> Optional[Alignment]:
    return Placement.parse(placement).alignment


def get_opposite_axis(axis: Axis) -> Axis:
    return Axis.Y if axis == Axis.X else Axis.X


def get_axis_length(axis: Axis) -> str:
    """Name of the rectangle dimension measured along an axis."""
    return "width" if axis == Axis.X else "height"


def get_side_axis(placement: PlacementLike) -> Axis:
    """Axis the side sits on: top/bottom move along y, left/right along x."""
    return Axis.Y if get_side(placement) in (Side.TOP, Side.BOTTOM) else Axis.X


def get_alignment_axis(placement: PlacementLike) -> Axis:
    return get_opposite_axis(get_side_axis(placement))


def get_opposite_placement(placement: PlacementLike) -> Placement:
    """Same alignment on the geometrically opposite side."""
    placement = Placement.parse(placement)
    return Placement(OPPOSITE_SIDE[placement.side], placement.alignment)


def get_opposite_alignment_placement(placement: PlacementLike) -> Placement:
    """Same side with start and end swapped; unaligned placements are unchanged."""
    placement = Placement.parse(placement)
    if placement.alignment is None:
        return placement
    return Placement(placement.side, OPPOSITE_ALIGNMENT[placement.alignment])


def get_expanded_placements(placement: PlacementLike) -> List[Placement]:
    """Alignment-flipped variant, then the opposite side in both alignments."""
    opposite = get_opposite_placement(placement)
    return [
        get_opposite_alignment_placement(placement),
        opposite,
        get_opposite_alignment_placement(opposite),
    ]


def _get_side_list(side: Side, is_start: bool, rtl: bool) -> List[Side]:
    left_right = [Side.LEFT, Side.RIGHT]
    right_left = [Side.RIGHT, Side.LEFT]
    top_bottom = [Side.TOP, Side.BOTTOM]
    bottom_top = [Side.BOTTOM, Side.TOP]

    if side in (Side.TOP, Side.BOTTOM):
        if rtl:
            return right_left if is_start else left_right
        return left_right if is_start else right_left
    return top_bottom if is_start else bottom_top


def get_opposite_axis_placements(placement: PlacementLike, flip_alignment: bool,
                                 direction: str, rtl: bool = False) -> List[Placement]:
    """
    Placements on the axis perpendicular to the placement's side.

    Args:
        placement: Preferred placement
        flip_alignment: Also include the opposite-alignment variants
        direction: "start" or "end"; which perpendicular side comes first
        rtl: Right-to-left layout reverses the horizontal start side

    Returns:
        Candidate placements, in preference order
    """
    placement = Placement.parse(placement)
    sides = _get_side_list(placement.side, direction == "start", rtl)
    candidates = [Placement(side, placement.alignment) for side in sides]

    if placement.alignment is not None and flip_alignment:
        candidates += [get_opposite_alignment_placement(p) for p in candidates]
    return candidates


def get_alignment_sides(placement: PlacementLike, reference: Rect, floating: Rect,
                        rtl: bool = False) -> Tuple[Side, Side]:
    """
    Sides checked for overflow along the alignment axis.

    Returns:
        (main, cross) - main is the side the floating element extends past
        the reference towards, cross the opposite one
    """
    placement = Placement.parse(placement)
    alignment_axis = get_alignment_axis(placement)
    length = get_axis_length(alignment_axis)

    if alignment_axis == Axis.X:
        start = Alignment.END if rtl else Alignment.START
        main = Side.RIGHT if placement.alignment == start else Side.LEFT
    else:
        main = Side.BOTTOM if placement.alignment == Alignment.START else Side.TOP

    if getattr(reference, length) > getattr(floating, length):
        main = OPPOSITE_SIDE[main]
    return (main, OPPOSITE_SIDE[main])

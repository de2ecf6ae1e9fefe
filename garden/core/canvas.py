"""Canvas geometry and position normalization.

Plant positions are stored in "canvas units" and rendered on one fixed
logical canvas. Three coordinate generations exist in stored data:

    GENERATION  ENCODING
    1           percentage of the canvas (0-100 on both axes)
    2           absolute units on a 1000x700 canvas
    3           absolute units on the current canvas (500x900 by default)

Positions written by this package are tagged with their generation
(``Position.canvas``), so tagged positions are resolved by lookup. Untagged
positions come from older clients and are resolved by the legacy heuristic,
in a separate code path; they are never rewritten in storage.

PLANTING ZONE:
- the top ``min_y_percent`` of the canvas is sky and cannot be planted
- a symmetric side margin and a bottom margin keep plantings clear of chrome
- a request below the sky line but inside a margin is clamped, not rejected
"""

from dataclasses import dataclass
from typing import Any, NamedTuple

from .types import Position

PERCENT_GENERATION = 1
LEGACY_GENERATION = 2
CURRENT_GENERATION = 3

LEGACY_WIDTH = 1000
LEGACY_HEIGHT = 700

# Signature of the 1000x700 generation in untagged data
LEGACY_X_ABOVE = 500
LEGACY_Y_BELOW = 350
PERCENT_MAX = 100


class CanvasPoint(NamedTuple):
    """A point in current canvas units."""

    x: float
    y: float


@dataclass(frozen=True)
class Canvas:
    """Current canvas geometry.

    Attributes:
        width: Logical width in canvas units
        height: Logical height in canvas units
        min_y_percent: Fraction of the height, from the top, that is sky
        side_margin_percent: Fraction of the width kept clear on each side
        bottom_margin_percent: Fraction of the height kept clear at the bottom
    """

    width: float = 500
    height: float = 900
    min_y_percent: float = 0.35
    side_margin_percent: float = 0.08
    bottom_margin_percent: float = 0.05

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Canvas must have positive size, got {self.width}x{self.height}")
        if self.min_y_percent + self.bottom_margin_percent >= 1:
            raise ValueError("Sky and bottom margin leave no room to plant")
        if self.side_margin_percent * 2 >= 1:
            raise ValueError("Side margins leave no room to plant")

    @property
    def sky_line(self) -> float:
        return self.height * self.min_y_percent

    @property
    def planting_bounds(self) -> tuple[float, float, float, float]:
        """Legal planting rectangle as (left, top, right, bottom)."""
        margin_x = self.width * self.side_margin_percent
        return (
            margin_x,
            self.sky_line,
            self.width - margin_x,
            self.height * (1 - self.bottom_margin_percent),
        )


DEFAULT_CANVAS = Canvas()


def _coerce(position: Position | dict[str, Any]) -> Position:
    if isinstance(position, Position):
        return position
    return Position.from_dict(position)


def normalize(position: Position | dict[str, Any], canvas: Canvas = DEFAULT_CANVAS) -> CanvasPoint:
    """Resolve a stored position into current canvas units.

    Args:
        position: Stored position (``Position`` or its document dict)
        canvas: Current canvas geometry

    Returns:
        CanvasPoint in current canvas units

    Raises:
        ValueError: If the position carries an unknown generation tag
    """
    position = _coerce(position)
    if position.canvas is None:
        return _normalize_untagged(position, canvas)
    return _normalize_tagged(position, canvas)


def _normalize_tagged(position: Position, canvas: Canvas) -> CanvasPoint:
    if position.canvas == CURRENT_GENERATION:
        return CanvasPoint(position.x, position.y)
    if position.canvas == LEGACY_GENERATION:
        return _from_legacy(position, canvas)
    if position.canvas == PERCENT_GENERATION:
        return _from_percent(position, canvas)
    raise ValueError(f"Unknown canvas generation: {position.canvas}")


def _normalize_untagged(position: Position, canvas: Canvas) -> CanvasPoint:
    # Heuristic only: current-generation points near x=500 or above y=350
    # are indistinguishable from legacy ones.
    x, y = position.x, position.y
    if x <= PERCENT_MAX and y <= PERCENT_MAX:
        return _from_percent(position, canvas)
    if x > LEGACY_X_ABOVE or y < LEGACY_Y_BELOW:
        return _from_legacy(position, canvas)
    return CanvasPoint(x, y)


def _from_percent(position: Position, canvas: Canvas) -> CanvasPoint:
    return CanvasPoint(
        position.x / 100 * canvas.width,
        position.y / 100 * canvas.height,
    )


def _from_legacy(position: Position, canvas: Canvas) -> CanvasPoint:
    return CanvasPoint(
        position.x / LEGACY_WIDTH * canvas.width,
        position.y / LEGACY_HEIGHT * canvas.height,
    )


def is_plantable(point: CanvasPoint, canvas: Canvas = DEFAULT_CANVAS) -> bool:
    """True when ``point`` is on the canvas and below the sky line.

    Points in the side or bottom margins are plantable; they are clamped
    into the legal rectangle by ``clamp_to_planting_zone``.
    """
    x, y = point
    return 0 <= x <= canvas.width and canvas.sky_line <= y <= canvas.height


def clamp_to_planting_zone(point: CanvasPoint, canvas: Canvas = DEFAULT_CANVAS) -> CanvasPoint:
    """Nearest point of the legal planting rectangle."""
    left, top, right, bottom = canvas.planting_bounds
    return CanvasPoint(
        min(max(point[0], left), right),
        min(max(point[1], top), bottom),
    )


def to_position(point: CanvasPoint) -> Position:
    """Tag a current-canvas point for storage."""
    return Position(x=point[0], y=point[1], canvas=CURRENT_GENERATION)

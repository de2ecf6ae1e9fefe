"""Domain types for the garden.

These types define the fundamental data representations used throughout
the system, ensuring consistency between the store documents, the
lifecycle records and the derivations done on read.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from ..utils import isodatetime


class Timestamp(str):
    """ISO 8601 UTC timestamp string.

    Represents a point in time with timezone awareness (UTC only).
    Format: '2025-12-23T10:30:00.000Z'

    This is a string subtype for JSON serialization compatibility while
    providing type-safe conversion methods.
    """

    @classmethod
    def from_datetime(cls, dt: datetime) -> "Timestamp":
        """Convert datetime to Timestamp.

        Args:
            dt: datetime object (naive datetimes treated as UTC)

        Returns:
            Timestamp string in ISO 8601 format with 'Z' suffix
        """
        return cls(isodatetime.to_timestamp(dt))

    def to_datetime(self) -> datetime:
        """Convert Timestamp to datetime.

        Returns:
            datetime object with UTC timezone info
        """
        return isodatetime.to_datetime(self)


class SeedColor(str, Enum):
    """Flower colors a seed can carry."""

    SUNSET = "sunset"
    BLUSH = "blush"
    GOLDEN = "golden"
    SAPPHIRE = "sapphire"
    LAVENDER = "lavender"
    MOONLIGHT = "moonlight"


@dataclass(frozen=True)
class PaletteEntry:
    hex: str
    name: str
    meaning: str


SEED_PALETTE: dict[SeedColor, PaletteEntry] = {
    SeedColor.SUNSET: PaletteEntry("#e8a87c", "Sunset Rose", "Warmth & comfort"),
    SeedColor.BLUSH: PaletteEntry("#f4a4b8", "Blush Peony", "Tender affection"),
    SeedColor.GOLDEN: PaletteEntry("#f5d76e", "Golden Dahlia", "Joy & celebration"),
    SeedColor.SAPPHIRE: PaletteEntry("#7eb8da", "Sapphire Orchid", "Deep devotion"),
    SeedColor.LAVENDER: PaletteEntry("#b8a9c9", "Lavender Dream", "Peaceful love"),
    SeedColor.MOONLIGHT: PaletteEntry("#f0e6d3", "Moonlight Lily", "Eternal bond"),
}


class Weather(str, Enum):
    """Shared garden weather, last writer wins."""

    SUNNY = "sunny"
    RAINY = "rainy"
    MISTY = "misty"


@dataclass(frozen=True)
class Position:
    """A planting position as stored.

    ``canvas`` is the coordinate-generation tag. Positions written by this
    package carry the current generation; documents from older clients have
    no tag and are resolved by the legacy heuristic in ``canvas.normalize``.
    """

    x: float
    y: float
    canvas: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"x": self.x, "y": self.y}
        if self.canvas is not None:
            data["canvas"] = self.canvas
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Position":
        return cls(x=data["x"], y=data["y"], canvas=data.get("canvas"))

"""Garden core: records, lifecycle transitions and pure derivations.

Nothing in this package performs I/O. Growth, hydration and positions are
derived on read from stored fields and an explicit ``now``.

MODULES:
- types      Timestamp, Position, SeedColor, Weather, palette
- lifecycle  Seed / Plant / Memory records and the transitions between them
- growth     growth stage, progress, hydration, countdown, display formatting
- canvas     coordinate normalization and the planting zone
"""

from .canvas import Canvas, CanvasPoint, normalize
from .growth import GrowthStage, TimeRemaining
from .lifecycle import (
    Comment,
    GardenSettings,
    LifecycleStage,
    Memory,
    Plant,
    Seed,
    plant_to_memory,
    plant_to_void,
    seed_to_plant,
)
from .types import SEED_PALETTE, Position, SeedColor, Timestamp, Weather

__all__ = [
    "Canvas",
    "CanvasPoint",
    "Comment",
    "GardenSettings",
    "GrowthStage",
    "LifecycleStage",
    "Memory",
    "Plant",
    "Position",
    "SEED_PALETTE",
    "Seed",
    "SeedColor",
    "TimeRemaining",
    "Timestamp",
    "Weather",
    "normalize",
    "plant_to_memory",
    "plant_to_void",
    "seed_to_plant",
]

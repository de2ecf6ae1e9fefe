"""Garden

Plant lifecycle engine and realtime multi-client synchronization for a
shared garden of time-delayed messages.
"""

__version__ = "0.1.0"

# Core exports
from garden.core import (
    Canvas,
    Comment,
    GardenSettings,
    GrowthStage,
    Memory,
    Plant,
    Position,
    Seed,
    SeedColor,
    Timestamp,
    Weather,
)

# Store exports
from garden.store import DocumentStore, MemoryStore, SqliteStore, get_store

# Config exports
from garden.config import Settings, configure_logging, get_settings

# Sync and session exports
from garden.admin import create_seed
from garden.session import GardenSession, InteractionMode, Season
from garden.sync import GardenSync, PlantStatus, open_garden

# Exception exports
from garden import exceptions

__all__ = [
    # Core
    "Canvas",
    "Comment",
    "GardenSettings",
    "GrowthStage",
    "Memory",
    "Plant",
    "Position",
    "Seed",
    "SeedColor",
    "Timestamp",
    "Weather",
    # Store
    "DocumentStore",
    "MemoryStore",
    "SqliteStore",
    "get_store",
    # Config
    "Settings",
    "configure_logging",
    "get_settings",
    # Sync and session
    "GardenSession",
    "GardenSync",
    "InteractionMode",
    "PlantStatus",
    "Season",
    "create_seed",
    "open_garden",
    # Exceptions module (access as garden.exceptions.ValidationError, etc.)
    "exceptions",
]

"""Tests for lifecycle records and transitions.

Coverage:
- Seed -> Plant carries message, color and duration
- Plant -> Memory preserves plantedAt and position
- Plant -> void requires a stored plant
- Illegal edges raise TransitionError
- Document field round-trips and defaults for older documents
"""

from dataclasses import replace
from datetime import timedelta

import pytest

from garden.core.lifecycle import (
    GardenSettings,
    LifecycleStage,
    Memory,
    Plant,
    Seed,
    check_transition,
    plant_to_memory,
    plant_to_void,
    seed_to_plant,
)
from garden.core.types import Position, SeedColor, Timestamp, Weather
from garden.exceptions import TransitionError


def make_seed(t0, **overrides) -> Seed:
    fields = dict(
        id="seed-1",
        message="See you soon",
        duration_minutes=90,
        color=SeedColor.SAPPHIRE,
        created_at=Timestamp.from_datetime(t0),
    )
    fields.update(overrides)
    return Seed(**fields)


class TestSeedToPlant:
    """Tests for seed_to_plant()."""

    def test_carries_seed_fields(self, t0):
        seed = make_seed(t0)
        position = Position(250, 600, canvas=3)
        plant = seed_to_plant(seed, position, t0 + timedelta(minutes=5))

        assert plant.id is None
        assert plant.seed_id == "seed-1"
        assert plant.message == seed.message
        assert plant.color is SeedColor.SAPPHIRE
        assert plant.duration_minutes == 90
        assert plant.position == position

    def test_planted_and_watered_now(self, t0):
        """A new plant starts fully hydrated with a streak of 1."""
        now = t0 + timedelta(minutes=5)
        plant = seed_to_plant(make_seed(t0), Position(250, 600), now)

        assert plant.planted_at == plant.last_watered_at == Timestamp.from_datetime(now)
        assert plant.water_streak == 1
        assert plant.hydration(now) == 100

    def test_plant_cannot_be_replanted(self, t0):
        plant = seed_to_plant(make_seed(t0), Position(250, 600), t0)
        with pytest.raises(TransitionError) as exc_info:
            seed_to_plant(plant, Position(250, 600), t0)
        assert exc_info.value.source == "plant"
        assert exc_info.value.target == "plant"


class TestPlantToMemory:
    """Tests for plant_to_memory()."""

    def test_preserves_planted_at_and_position(self, t0):
        plant = seed_to_plant(make_seed(t0), Position(120, 700, canvas=3), t0)
        harvested = t0 + timedelta(hours=2)
        memory = plant_to_memory(plant, harvested)

        assert memory.planted_at == plant.planted_at
        assert memory.harvested_at == Timestamp.from_datetime(harvested)
        assert memory.position == plant.position
        assert memory.message == plant.message
        assert memory.color is plant.color
        assert memory.duration_minutes == plant.duration_minutes

    def test_seed_cannot_skip_to_memory(self, t0):
        with pytest.raises(TransitionError, match="Cannot move a seed to memory"):
            plant_to_memory(make_seed(t0), t0)

    def test_memory_is_terminal(self, t0):
        plant = seed_to_plant(make_seed(t0), Position(250, 600), t0)
        memory = plant_to_memory(plant, t0)
        for target in LifecycleStage:
            with pytest.raises(TransitionError):
                check_transition(memory, target)


class TestPlantToVoid:
    """Tests for plant_to_void()."""

    def test_returns_plant_id(self):
        plant = Plant.from_document("p1", {
            "message": "hi",
            "color": "golden",
            "durationMinutes": 10,
            "position": {"x": 250, "y": 600},
            "plantedAt": "2025-01-01T12:00:00.000Z",
        })
        assert plant_to_void(plant) == "p1"

    def test_unstored_plant(self, t0):
        plant = seed_to_plant(make_seed(t0), Position(250, 600), t0)
        with pytest.raises(ValueError):
            plant_to_void(plant)

    def test_non_record(self):
        with pytest.raises(TransitionError, match="not a lifecycle record"):
            check_transition({"message": "hi"}, LifecycleStage.PLANT)


class TestDocuments:
    """Tests for record <-> document field mapping."""

    def test_plant_fields_round_trip(self, t0):
        plant = seed_to_plant(make_seed(t0), Position(250, 600, canvas=3), t0)
        fields = plant.to_fields()

        assert fields["plantedAt"] == "2025-01-01T12:00:00.000Z"
        assert fields["position"] == {"x": 250, "y": 600, "canvas": 3}
        assert Plant.from_document("p1", fields) == replace(plant, id="p1")

    def test_older_plant_document_defaults(self):
        """Missing lastWateredAt and waterStreak fall back to plantedAt and 1."""
        plant = Plant.from_document("p1", {
            "message": "hi",
            "color": "blush",
            "durationMinutes": 10,
            "position": {"x": 40, "y": 60},
            "plantedAt": "2025-01-01T12:00:00.000Z",
        })
        assert plant.last_watered_at == plant.planted_at
        assert plant.water_streak == 1
        assert plant.position.canvas is None

    def test_memory_from_document(self, t0):
        memory = Memory.from_document("m1", {
            "message": "hi",
            "color": "moonlight",
            "plantedAt": "2025-01-01T12:00:00.000Z",
            "harvestedAt": "2025-01-01T13:00:00.000Z",
            "durationMinutes": 60,
            "position": {"x": 250, "y": 600, "canvas": 3},
        })
        assert memory.color is SeedColor.MOONLIGHT
        assert memory.harvested_at.to_datetime() == t0 + timedelta(hours=1)

    def test_unknown_color_rejected(self):
        with pytest.raises(ValueError):
            Seed.from_document("s1", {
                "message": "hi",
                "durationMinutes": 5,
                "color": "chartreuse",
                "createdAt": "2025-01-01T12:00:00.000Z",
            })

    def test_settings_defaults(self):
        settings = GardenSettings.from_document({})
        assert settings.weather is Weather.SUNNY
        assert settings.last_updated is None
        assert settings.version == 0

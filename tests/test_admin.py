"""Tests for administrative seed creation.

Coverage:
- Valid seeds are stored with createdAt and an id
- Each validation failure has its user-facing message
- Rejected seeds never reach the store
"""

import pytest

from garden.admin import create_seed, validate_seed
from garden.core.lifecycle import Seed
from garden.core.types import SEED_PALETTE, SeedColor, Timestamp
from garden.exceptions import ValidationError


class TestCreateSeed:
    """Tests for create_seed()."""

    def test_stores_seed(self, memory_store, t0):
        seed = create_seed(memory_store, "Open me later", 1440, "sapphire", now=t0)

        assert seed.id is not None
        assert seed.color is SeedColor.SAPPHIRE
        assert seed.created_at == Timestamp.from_datetime(t0)
        stored = memory_store.get(f"seeds/{seed.id}")
        assert Seed.from_document(stored.id, stored.data) == seed

    @pytest.mark.parametrize("minutes", [1, 10080])
    def test_duration_bounds_inclusive(self, memory_store, minutes):
        assert create_seed(memory_store, "hi", minutes, SeedColor.GOLDEN).duration_minutes == minutes

    def test_rejected_seed_not_stored(self, memory_store):
        with pytest.raises(ValidationError):
            create_seed(memory_store, "", 10, "golden")
        assert memory_store.query_once("seeds") == []


class TestValidateSeed:
    """Tests for validate_seed() messages."""

    @pytest.mark.parametrize(
        "message, minutes, color, expected",
        [
            ("", 10, "golden", "Message cannot be empty"),
            ("   ", 10, "golden", "Message cannot be empty"),
            ("hi", 0, "golden", "Duration must be at least 1 minute"),
            ("hi", 10081, "golden", "Duration cannot exceed 7 days"),
            ("hi", 1.5, "golden", "Duration must be a whole number of minutes"),
            ("hi", True, "golden", "Duration must be a whole number of minutes"),
            ("hi", 10, "chartreuse", "Unknown seed color: 'chartreuse'"),
        ],
    )
    def test_rejections(self, message, minutes, color, expected):
        with pytest.raises(ValidationError) as exc_info:
            validate_seed(message, minutes, color)
        assert exc_info.value.message == expected

    def test_every_color_has_palette_entry(self):
        assert set(SEED_PALETTE) == set(SeedColor)
        assert SEED_PALETTE[SeedColor.SUNSET].name == "Sunset Rose"

    def test_configured_limits(self):
        """Narrower configured bounds are enforced and named in the message."""
        with pytest.raises(ValidationError) as exc_info:
            validate_seed("hi", 90, "golden", min_duration=5, max_duration=60)
        assert exc_info.value.message == "Duration cannot exceed 1h"

        with pytest.raises(ValidationError) as exc_info:
            validate_seed("hi", 2, "golden", min_duration=5, max_duration=60)
        assert exc_info.value.message == "Duration must be at least 5 minutes"

    def test_create_seed_passes_limits(self, memory_store):
        with pytest.raises(ValidationError):
            create_seed(memory_store, "hi", 90, "golden", max_duration=60)
        assert memory_store.query_once("seeds") == []

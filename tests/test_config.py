"""Tests for configuration loading.

Coverage:
- Built-in defaults without a config file
- TOML sections: store, canvas, limits, logging
- Environment variables override TOML
- Invalid TOML falls back to defaults
- Settings reach GardenSync, GardenSession and seed creation
"""

import logging
from pathlib import Path

import pytest

from garden.config import (
    MAX_COMMENT_LENGTH,
    MAX_DURATION_MINUTES,
    Settings,
    configure_logging,
    load_toml_config,
)
from garden.core.canvas import DEFAULT_CANVAS, CanvasPoint
from garden.exceptions import ValidationError
from garden.session import GardenSession
from garden.sync import GardenSync, open_garden


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for key in ("GARDEN_CONFIG", "GARDEN_STORE_PATH", "GARDEN_DATA_DIR", "GARDEN_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


def write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(text)
    return path


class TestDefaults:
    """Tests for settings without a config file."""

    def test_defaults(self, tmp_path):
        settings = Settings(tmp_path / "missing.toml")

        assert settings.store_path == Path("./garden.db")
        assert settings.canvas == DEFAULT_CANVAS
        assert settings.min_duration_minutes == 1
        assert settings.max_duration_minutes == MAX_DURATION_MINUTES
        assert settings.max_comment_length == MAX_COMMENT_LENGTH
        assert settings.log_level == "info"

    def test_get(self, tmp_path):
        settings = Settings(tmp_path / "missing.toml")
        assert settings.get("log_level") == "info"
        assert settings.get("nope", 42) == 42


class TestTomlConfig:
    """Tests for values read from config.toml."""

    def test_sections(self, tmp_path):
        path = write_config(tmp_path, """
[store]
path = "/var/lib/garden/garden.db"

[canvas]
width = 600
min_y_percent = 0.4

[limits]
max_comment_length = 140

[logging]
level = "DEBUG"
""")
        settings = Settings(path)

        assert settings.store_path == Path("/var/lib/garden/garden.db")
        assert settings.canvas.width == 600
        assert settings.canvas.height == DEFAULT_CANVAS.height
        assert settings.canvas.min_y_percent == 0.4
        assert settings.max_comment_length == 140
        assert settings.log_level == "debug"

    def test_max_duration_capped_at_seven_days(self, tmp_path):
        path = write_config(tmp_path, "[limits]\nmax_duration_minutes = 20000\n")
        assert Settings(path).max_duration_minutes == MAX_DURATION_MINUTES

    def test_config_path_from_environment(self, tmp_path, monkeypatch):
        path = write_config(tmp_path, "[limits]\nmax_comment_length = 99\n")
        monkeypatch.setenv("GARDEN_CONFIG", str(path))
        assert Settings().max_comment_length == 99

    def test_invalid_toml_falls_back(self, tmp_path, caplog):
        path = write_config(tmp_path, "[limits\n")
        caplog.set_level(logging.WARNING, logger="garden")

        settings = Settings(path)

        assert settings.max_comment_length == MAX_COMMENT_LENGTH
        assert "Failed to load config" in caplog.text

    def test_load_toml_config_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_toml_config(tmp_path / "missing.toml")


class TestEnvironmentOverrides:
    """Environment variables win over the TOML file."""

    def test_store_path(self, tmp_path, monkeypatch):
        path = write_config(tmp_path, '[store]\npath = "/from/toml.db"\n')
        monkeypatch.setenv("GARDEN_STORE_PATH", "/from/env.db")
        assert Settings(path).store_path == Path("/from/env.db")

    def test_data_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GARDEN_DATA_DIR", str(tmp_path))
        assert Settings(tmp_path / "missing.toml").store_path == tmp_path / "garden.db"

    def test_log_level(self, tmp_path, monkeypatch):
        path = write_config(tmp_path, '[logging]\nlevel = "debug"\n')
        monkeypatch.setenv("GARDEN_LOG_LEVEL", "WARNING")
        assert Settings(path).log_level == "warning"


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_sets_garden_logger_level(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GARDEN_LOG_LEVEL", "debug")
        logger = logging.getLogger("garden")
        previous = logger.level
        try:
            configure_logging(Settings(tmp_path / "missing.toml"))
            assert logger.level == logging.DEBUG
        finally:
            logger.setLevel(previous)

    def test_unknown_level(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GARDEN_LOG_LEVEL", "chatty")
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging(Settings(tmp_path / "missing.toml"))


class TestConfiguredGarden:
    """Settings flow into the sync layer, the session and seed creation."""

    @pytest.fixture
    def settings(self, tmp_path):
        path = write_config(tmp_path, f"""
[store]
path = "{tmp_path / 'configured.db'}"

[canvas]
min_y_percent = 0.5

[limits]
max_comment_length = 5
max_duration_minutes = 60
""")
        return Settings(path)

    def test_from_settings(self, settings, memory_store, clock):
        garden = GardenSync.from_settings(settings, store=memory_store, clock=clock)

        assert garden.canvas.sky_line == pytest.approx(450)
        assert garden.max_comment_length == 5
        assert garden.max_duration_minutes == 60

    def test_canvas_moves_sky_line(self, settings, memory_store, clock):
        """A click that is ground on the default canvas is sky here."""
        with GardenSync.from_settings(settings, store=memory_store, clock=clock) as garden:
            session = GardenSession(garden)
            session.select_seed(garden.create_seed("hi", 10, "golden"))

            assert session.click_garden(CanvasPoint(250, 400)) is None
            assert session.placement_pending
            assert session.click_garden(CanvasPoint(250, 600)) is not None

    def test_limits_apply(self, settings, memory_store, clock):
        with GardenSync.from_settings(settings, store=memory_store, clock=clock) as garden:
            with pytest.raises(ValidationError, match="cannot exceed 1h"):
                garden.create_seed("hi", 120, "golden")

            seed = garden.create_seed("hi", 60, "golden")
            plant = garden.plant(seed, {"x": 250, "y": 600, "canvas": 3})
            clock.advance(minutes=61)
            memory = garden.harvest(plant)

            assert garden.add_comment(memory.id, "lovely garden").text == "lovel"

    def test_open_garden(self, settings, tmp_path, clock):
        logger = logging.getLogger("garden")
        previous = logger.level
        try:
            garden = open_garden(tmp_path / "config.toml", clock=clock)
            try:
                assert garden.connected
                assert (tmp_path / "configured.db").exists()
                assert garden.create_seed("hi", 10, "golden").id is not None
                assert len(garden.seeds) == 1
                assert logger.level == logging.INFO
            finally:
                garden.disconnect()
        finally:
            logger.setLevel(previous)

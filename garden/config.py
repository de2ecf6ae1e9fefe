"""Configuration management for the garden.

Configuration is loaded from a TOML file with environment variable
overrides.

Configuration Resolution Order:
1. Environment variables (highest priority)
2. TOML config file
3. Built-in defaults

Example config.toml:

    [store]
    path = "/var/lib/garden/garden.db"

    [canvas]
    width = 500
    height = 900
    min_y_percent = 0.35

    [limits]
    max_comment_length = 500

    [logging]
    level = "debug"
"""

import logging
import sys
from pathlib import Path
from typing import Any, Optional

from .core.canvas import Canvas
from .host.environment import get_config_path, get_env, get_store_path

# Python 3.11+ has tomllib in stdlib, otherwise use tomli
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

MIN_DURATION_MINUTES = 1
MAX_DURATION_MINUTES = 7 * 24 * 60  # 10080 minutes
MAX_COMMENT_LENGTH = 500
DEFAULT_LOG_LEVEL = "info"

CANVAS_KEYS = (
    "width",
    "height",
    "min_y_percent",
    "side_margin_percent",
    "bottom_margin_percent",
)


def load_toml_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config.toml file

    Returns:
        Dictionary with configuration sections

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is invalid TOML
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {config_path}: {e}") from e


class Settings:
    """Garden settings.

    Configuration Loading:
    1. Load from TOML config file (if exists)
    2. Apply environment variable overrides
    3. Fall back to built-in defaults

    Attributes:
        store_path: SQLite file for the durable store
        canvas: Current canvas geometry
        min_duration_minutes: Shortest growth period a seed may have
        max_duration_minutes: Longest growth period a seed may have (<= 7 days)
        max_comment_length: Comments are capped to this many characters
        log_level: Level name for the ``garden`` logger
    """

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize settings.

        Args:
            config_path: Optional explicit path to config.toml. If None,
                resolved via GARDEN_CONFIG or the user config directory.
        """
        self._config: dict[str, Any] = {}

        config_path = get_config_path(config_path)
        if config_path.exists():
            try:
                self._config = load_toml_config(config_path)
            except ValueError as e:
                # Log warning but continue with defaults
                logger.warning("Failed to load config from %s: %s", config_path, e)

        self._apply_config()

    def _apply_config(self):
        """Apply TOML configuration and environment overrides (env var > TOML > default)."""
        store_config = self._config.get("store", {})
        if get_env("GARDEN_STORE_PATH") or get_env("GARDEN_DATA_DIR"):
            self.store_path = get_store_path()
        elif store_config.get("path"):
            self.store_path = Path(store_config["path"])
        else:
            self.store_path = get_store_path()

        canvas_config = self._config.get("canvas", {})
        self.canvas = Canvas(**{
            key: float(canvas_config[key]) for key in CANVAS_KEYS if key in canvas_config
        })

        limits_config = self._config.get("limits", {})
        self.min_duration_minutes = max(
            MIN_DURATION_MINUTES,
            int(limits_config.get("min_duration_minutes", MIN_DURATION_MINUTES)),
        )
        # Never above 7 days, whatever the config says
        self.max_duration_minutes = min(
            MAX_DURATION_MINUTES,
            int(limits_config.get("max_duration_minutes", MAX_DURATION_MINUTES)),
        )
        self.max_comment_length = int(
            limits_config.get("max_comment_length", MAX_COMMENT_LENGTH)
        )

        logging_config = self._config.get("logging", {})
        self.log_level = get_env(
            "GARDEN_LOG_LEVEL",
            logging_config.get("level", DEFAULT_LOG_LEVEL),
        ).lower()

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        return getattr(self, key, default)


def configure_logging(settings: Settings) -> None:
    """Install the configured level on the ``garden`` logger.

    Handlers are left to the application; without one, records propagate
    to the root logger.

    Raises:
        ValueError: If the configured level name is unknown
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {settings.log_level}")
    logging.getLogger("garden").setLevel(level)


def get_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings from the resolved config path."""
    return Settings(config_path)

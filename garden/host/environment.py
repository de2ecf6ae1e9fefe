"""Environment variable access and path resolution.

Store Path Resolution Order:
1. Explicit store path (GARDEN_STORE_PATH)
2. Shared data directory (GARDEN_DATA_DIR/garden.db)
3. Current directory (./garden.db)

Config Path Resolution Order:
1. Explicit config path (GARDEN_CONFIG)
2. User config directory (~/.config/garden/config.toml)
"""

import os
from pathlib import Path

STORE_FILENAME = "garden.db"


def get_env(key: str, default: str | None = None) -> str | None:
    """Get environment variable.

    Args:
        key: Environment variable name
        default: Default value if not found

    Returns:
        Environment variable value or default
    """
    return os.environ.get(key, default)


def get_store_path() -> Path:
    """Resolve the sqlite file backing the durable document store.

    Examples:
        >>> os.environ['GARDEN_STORE_PATH'] = '/custom/garden.db'
        >>> get_store_path()
        Path('/custom/garden.db')

        >>> del os.environ['GARDEN_STORE_PATH']
        >>> os.environ['GARDEN_DATA_DIR'] = '/data'
        >>> get_store_path()
        Path('/data/garden.db')
    """
    store_path = get_env("GARDEN_STORE_PATH")
    if store_path:
        return Path(store_path)

    data_dir = get_env("GARDEN_DATA_DIR")
    if data_dir:
        return Path(data_dir) / STORE_FILENAME

    return Path(f"./{STORE_FILENAME}")


def get_config_path(config_override: Path | None = None) -> Path:
    """Get configuration file path.

    Args:
        config_override: Optional explicit config path

    Returns:
        Path to configuration file (may not exist)
    """
    if config_override:
        return config_override

    config_env = get_env("GARDEN_CONFIG")
    if config_env:
        return Path(config_env)

    return Path.home() / ".config/garden/config.toml"

"""Schema access utilities for the garden.

Provides runtime access to the SQL schema of the durable document store.

- Try importlib.resources first (installed package)
- Fall back to file reading (development checkout)
- Raise FileNotFoundError if the schema is in neither location

USAGE:
    >>> from garden.schemas import get_sql_schema
    >>> store_sql = get_sql_schema()
"""

from importlib.resources import files as resource_files
from pathlib import Path

SCHEMA_VERSION = "20261019"
STORE_SCHEMA = "store.sql"


def get_sql_schema(name: str = STORE_SCHEMA) -> str:
    """Get SQL schema content.

    Args:
        name: Schema file name inside the package

    Returns:
        SQL schema content as string

    Raises:
        FileNotFoundError: If the schema file is not found
    """
    try:
        schema_file = resource_files("garden.schemas") / name
        if schema_file.is_file():
            return schema_file.read_text(encoding="utf-8")
    except (FileNotFoundError, ModuleNotFoundError):
        pass

    file_path = Path(__file__).parent / name
    if file_path.exists():
        return file_path.read_text(encoding="utf-8")

    raise FileNotFoundError(f"SQL schema file not found: {name} (searched {file_path})")

"""Host interface for the garden.

Provides abstractions for host platform operations (environment, time)
so the core can run against a real clock or an injected one.
"""

from .environment import get_config_path, get_env, get_store_path
from .time import Clock, FixedClock, now_utc

__all__ = [
    "Clock",
    "FixedClock",
    "get_config_path",
    "get_env",
    "get_store_path",
    "now_utc",
]

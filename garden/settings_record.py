"""Shared garden settings behind an explicit accessor.

The settings singleton lives at ``settings/global``. Callers read and
write it through ``SettingsRecord`` instead of touching a module-level
global. Writes overwrite the whole document: the last writer wins, there
is no merge and no compare-and-set. ``version`` counts writes so that
clients can tell two writes apart in logs.
"""

import logging
from datetime import datetime

from .core.lifecycle import GardenSettings
from .core.types import Timestamp, Weather
from .exceptions import ValidationError
from .host.time import Clock, now_utc
from .store.base import Document, DocumentStore, Subscription

logger = logging.getLogger(__name__)

SETTINGS_PATH = "settings/global"


def parse_weather(value: Weather | str) -> Weather:
    """Coerce ``value`` to Weather.

    Raises:
        ValidationError: If ``value`` is not a known weather
    """
    try:
        return Weather(value)
    except ValueError:
        raise ValidationError(
            f"Unknown weather: {value!r}",
            {"allowed": [w.value for w in Weather]},
        ) from None


class SettingsRecord:
    """Get/set accessor for the settings singleton."""

    def __init__(self, store: DocumentStore, clock: Clock = now_utc):
        self._store = store
        self._clock = clock

    @staticmethod
    def _from_document(document: Document | None) -> GardenSettings:
        # Readers see the defaults until someone writes the document
        if document is None:
            return GardenSettings()
        return GardenSettings.from_document(document.data)

    def get(self) -> GardenSettings:
        return self._from_document(self._store.get(SETTINGS_PATH))

    def set(self, weather: Weather | str, now: datetime | None = None) -> GardenSettings:
        """Overwrite the settings document.

        Returns:
            The settings as written
        """
        weather = parse_weather(weather)
        current = self.get()
        settings = GardenSettings(
            weather=weather,
            last_updated=Timestamp.from_datetime(now or self._clock()),
            version=current.version + 1,
        )
        self._store.set(SETTINGS_PATH, settings.to_fields())
        logger.info("Weather set to %s (version %d)", weather.value, settings.version)
        return settings

    def watch(self, callback) -> Subscription:
        """Push the current settings now and after every write."""
        return self._store.subscribe_document(
            SETTINGS_PATH,
            lambda document: callback(self._from_document(document)),
        )

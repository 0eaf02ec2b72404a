"""Configuration store adapters."""

from __future__ import annotations

import threading

from tlsigner.app.ports import Configuration, ConfigStorePort
from tlsigner.config import Settings, get_settings


class InMemoryConfigStore(ConfigStorePort):
    """Process-local store; useful for tests and embedding hosts."""

    def __init__(self, configuration: Configuration | None = None) -> None:
        self._lock = threading.Lock()
        self._configuration = configuration or Configuration()

    def load(self) -> Configuration:
        return self._configuration

    def save(self, configuration: Configuration) -> None:
        with self._lock:
            self._configuration = configuration


class SettingsConfigStore(ConfigStorePort):
    """Store seeded from :class:`Settings` (environment and ``.env``).

    Saved configurations live for the rest of the process; nothing is written
    back to the environment.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._saved: Configuration | None = None

    def load(self) -> Configuration:
        if self._saved is not None:
            return self._saved
        return self._settings.to_configuration()

    def save(self, configuration: Configuration) -> None:
        self._saved = configuration

"""Magasin des réglages d'accès à l'API astrologique (clé + URL de base).

Les réglages sont persistés dans le même `KeyValueStore` que le cache, sous `settings:api`.
La clé d'API n'est jamais journalisée.
"""

from __future__ import annotations

import structlog
from pydantic import BaseModel, Field

from southchart.domain.errors import PersistenceError
from southchart.infra.kv_stores import KeyValueStore

log = structlog.get_logger(__name__)

SETTINGS_KEY = "settings:api"


class ApiSettings(BaseModel):
    """Identifiants de l'API amont."""

    api_key: str = Field(..., min_length=1)
    base_url: str = Field(..., min_length=1)


class ApiSettingsStore:
    """Lecture/écriture des réglages d'API, avec valeurs initiales issues de la configuration."""

    def __init__(self, store: KeyValueStore, defaults: ApiSettings | None = None) -> None:
        self._store = store
        self._defaults = defaults

    def get(self) -> ApiSettings | None:
        """Réglages enregistrés, sinon ceux de la configuration, sinon None."""
        try:
            raw = self._store.get(SETTINGS_KEY)
        except Exception as exc:
            log.warning("api_settings_read_failed", error=str(exc))
            raw = None
        if raw:
            try:
                return ApiSettings.model_validate_json(raw)
            except ValueError:
                log.warning("api_settings_invalid")
        return self._defaults

    def set(self, settings: ApiSettings) -> None:
        try:
            self._store.set(SETTINGS_KEY, settings.model_dump_json())
        except Exception as exc:
            raise PersistenceError("Failed to save API settings") from exc
        log.info("api_settings_saved", base_url=settings.base_url)

    def clear(self) -> None:
        """Oublie les réglages enregistrés et ceux de la configuration."""
        try:
            self._store.delete(SETTINGS_KEY)
        except Exception as exc:
            raise PersistenceError("Failed to clear API settings") from exc
        self._defaults = None
        log.info("api_settings_cleared")

    def is_configured(self) -> bool:
        return self.get() is not None

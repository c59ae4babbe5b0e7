"""
Conteneur d'injection de dépendances.

Assemble les composants centraux (settings, stockage clé-valeur, cache des cartes, client de l'API
amont, LLM, services). L'instance est créée par la fabrique d'application et attachée à
`app.state`; aucun état global n'est partagé entre applications.
"""

from pathlib import Path

import structlog

from southchart.core.settings import Settings, get_settings
from southchart.domain.chart_cache import ChartCache
from southchart.domain.consultation import ConsultationService
from southchart.domain.services import ChartService
from southchart.infra.astro_client import AstroApiClient
from southchart.infra.kv_stores import InMemoryKV, JSONFileKV, KeyValueStore, RedisKV
from southchart.infra.llm.openai_client import OpenAILLM
from southchart.infra.settings_store import ApiSettings, ApiSettingsStore

log = structlog.get_logger(__name__)


def build_store(settings: Settings) -> KeyValueStore:
    """Choisit le stockage selon `CACHE_BACKEND`, avec repli mémoire si Redis est indisponible."""
    backend = (settings.CACHE_BACKEND or "memory").lower()
    if backend == "file":
        return JSONFileKV(Path(settings.CACHE_FILE_PATH))
    if backend == "redis":
        if not settings.REDIS_URL:
            if settings.REQUIRE_REDIS:
                raise RuntimeError("Redis required but REDIS_URL not set")
            log.warning("redis_url_missing_memory_fallback")
            return InMemoryKV()
        try:
            store = RedisKV(settings.REDIS_URL)
            store.client.ping()
            return store
        except Exception as err:
            if settings.REQUIRE_REDIS:
                raise RuntimeError("Redis required but unavailable") from err
            log.warning("redis_unavailable_memory_fallback", error=str(err))
            return InMemoryKV()
    return InMemoryKV()


def _default_api_settings(settings: Settings) -> ApiSettings | None:
    if settings.ASTRO_API_KEY and settings.ASTRO_API_BASE_URL:
        return ApiSettings(api_key=settings.ASTRO_API_KEY, base_url=settings.ASTRO_API_BASE_URL)
    return None


class Container:
    def __init__(
        self,
        settings: Settings | None = None,
        store: KeyValueStore | None = None,
        astro_client: AstroApiClient | None = None,
        llm=None,
    ):
        self.settings = settings or get_settings()
        self.store = store or build_store(self.settings)
        self.storage_backend = self.store.name
        self.api_settings = ApiSettingsStore(self.store, _default_api_settings(self.settings))
        self.chart_cache = ChartCache(self.store, capacity=self.settings.CACHE_CAPACITY)
        self.astro = astro_client or AstroApiClient(timeout=self.settings.ASTRO_HTTP_TIMEOUT)
        self.llm = llm or OpenAILLM(
            api_key=self.settings.OPENAI_API_KEY, model=self.settings.LLM_MODEL
        )
        self.chart_service = ChartService(
            self.astro, self.api_settings, self.chart_cache, orb=self.settings.CONJUNCTION_ORB
        )
        self.consultation = ConsultationService(
            self.llm, history_limit=self.settings.CHAT_HISTORY_LIMIT
        )

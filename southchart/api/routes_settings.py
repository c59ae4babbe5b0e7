"""Routes de configuration de l'accès à l'API astrologique amont.

La clé d'API n'est jamais renvoyée: seule sa présence est exposée.
"""

from fastapi import APIRouter, Depends

from southchart.api.deps import get_astro_client, get_settings_store
from southchart.api.schemas import ApiSettingsPayload, ApiSettingsView, ConnectionTestResponse
from southchart.core.http_constants import HTTP_NO_CONTENT
from southchart.domain.errors import NotConfigured
from southchart.infra.astro_client import AstroApiClient
from southchart.infra.settings_store import ApiSettings, ApiSettingsStore

router = APIRouter(prefix="/settings/api", tags=["settings"])
store_dep = Depends(get_settings_store)
client_dep = Depends(get_astro_client)


def _view(settings: ApiSettings | None) -> ApiSettingsView:
    if settings is None:
        return ApiSettingsView(configured=False)
    return ApiSettingsView(configured=True, base_url=settings.base_url, api_key_set=True)


@router.get("", response_model=ApiSettingsView)
def get_api_settings(store: ApiSettingsStore = store_dep):
    return _view(store.get())


@router.put("", response_model=ApiSettingsView)
def put_api_settings(payload: ApiSettingsPayload, store: ApiSettingsStore = store_dep):
    settings = ApiSettings(**payload.model_dump())
    store.set(settings)
    return _view(settings)


@router.delete("", status_code=HTTP_NO_CONTENT)
def delete_api_settings(store: ApiSettingsStore = store_dep):
    store.clear()


@router.post("/test", response_model=ConnectionTestResponse)
async def test_api_settings(
    store: ApiSettingsStore = store_dep, client: AstroApiClient = client_dep
):
    """Teste la connexion avec l'échantillon de référence (New Delhi, 1990-01-01 12:00)."""
    settings = store.get()
    if settings is None:
        raise NotConfigured()
    return ConnectionTestResponse(ok=await client.test_connection(settings))

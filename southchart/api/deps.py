"""Dépendances partagées pour les routes de l'API.

But du module
-------------
- Exposer aux endpoints les instances du conteneur attaché à l'application
  (`app.state.container`), via `Depends`.
"""

from fastapi import Request

from southchart.core.container import Container
from southchart.domain.chart_cache import ChartCache
from southchart.domain.consultation import ConsultationService
from southchart.domain.services import ChartService
from southchart.infra.astro_client import AstroApiClient
from southchart.infra.settings_store import ApiSettingsStore


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_chart_service(request: Request) -> ChartService:
    return get_container(request).chart_service


def get_chart_cache(request: Request) -> ChartCache:
    return get_container(request).chart_cache


def get_settings_store(request: Request) -> ApiSettingsStore:
    return get_container(request).api_settings


def get_astro_client(request: Request) -> AstroApiClient:
    return get_container(request).astro


def get_consultation(request: Request) -> ConsultationService:
    return get_container(request).consultation

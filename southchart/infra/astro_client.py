"""Client HTTP de l'API astrologique amont.

Objectif du module
------------------
- Encapsuler l'appel `POST {base_url}/chart` authentifié par jeton Bearer.
- Traduire les échecs en erreurs du domaine (`UpstreamError`, `NetworkError`,
  `MalformedResponse`). Aucun retry automatique: la politique appartient à l'appelant.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from southchart.core.http_constants import DEFAULT_TIMEOUT
from southchart.domain.entities import BirthParameters, ChartResponse
from southchart.domain.errors import ChartError, MalformedResponse, NetworkError, UpstreamError
from southchart.infra.settings_store import ApiSettings

log = structlog.get_logger(__name__)

# Échantillon utilisé par `test_connection` (New Delhi, 1er janvier 1990 à midi).
SAMPLE_BIRTH = BirthParameters(
    year=1990,
    month=1,
    day=1,
    hour=12,
    minute=0,
    second=0,
    lat=28.6139,
    lon=77.2090,
    tz="Asia/Kolkata",
)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or response.reason_phrase)
    return response.reason_phrase


class AstroApiClient:
    """Client asynchrone de l'API de calcul des cartes."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialise le client; `transport` permet d'injecter un faux serveur en test."""
        self._timeout = httpx.Timeout(timeout)
        self._transport = transport

    async def fetch_chart(self, settings: ApiSettings, birth: BirthParameters) -> dict[str, Any]:
        """Récupère la réponse brute (natal + transit) pour ces paramètres.

        Le document est validé (champs requis présents) puis renvoyé tel quel pour le cache.
        """
        url = f"{settings.base_url.rstrip('/')}/chart"
        headers = {"Authorization": f"Bearer {settings.api_key}"}
        log.info("astro_api_request", url=url)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, json=birth.to_payload(), headers=headers)
        except httpx.HTTPError as exc:
            log.warning("astro_api_network_error", url=url, error=str(exc))
            raise NetworkError(f"Network error while fetching chart data: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            log.warning("astro_api_error", status=response.status_code, error=message)
            raise UpstreamError(response.status_code, message)

        try:
            raw = response.json()
        except ValueError as exc:
            raise MalformedResponse("Chart response is not valid JSON") from exc
        ChartResponse.parse(raw)
        log.info("astro_api_response", status=response.status_code)
        return raw

    async def test_connection(self, settings: ApiSettings) -> bool:
        """Vérifie la configuration avec l'échantillon de référence."""
        try:
            await self.fetch_chart(settings, SAMPLE_BIRTH)
        except ChartError as exc:
            log.warning("astro_api_connection_test_failed", code=exc.code, error=exc.message)
            return False
        return True

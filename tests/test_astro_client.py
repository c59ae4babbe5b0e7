"""Tests pour le client de l'API astrologique amont (transport httpx simulé)."""

from __future__ import annotations

import json

import httpx
import pytest

from southchart.core.http_constants import HTTP_BAD_GATEWAY, HTTP_OK
from southchart.domain.errors import MalformedResponse, NetworkError, UpstreamError
from southchart.infra.astro_client import AstroApiClient
from southchart.infra.settings_store import ApiSettings

HTTP_UNAUTHORIZED = 401

API = ApiSettings(api_key="secret-token", base_url="https://astro.example.test/v1/")


def _client(handler) -> AstroApiClient:
    return AstroApiClient(timeout=5, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_chart_posts_birth_data(birth, chart_response) -> None:
    """Teste l'URL, l'en-tête Bearer et le corps JSON envoyés."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(HTTP_OK, json=chart_response)

    raw = await _client(handler).fetch_chart(API, birth)
    assert raw == chart_response
    assert seen["url"] == "https://astro.example.test/v1/chart"
    assert seen["auth"] == "Bearer secret-token"
    assert seen["body"]["lat"] == pytest.approx(28.6139)
    assert seen["body"]["tz"] == "Asia/Kolkata"
    assert "ayanamsha" not in seen["body"]


@pytest.mark.asyncio
async def test_fetch_chart_upstream_error(birth) -> None:
    """Teste qu'un statut non 2xx devient UpstreamError avec statut et message."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(HTTP_UNAUTHORIZED, json={"detail": "Invalid API key"})

    with pytest.raises(UpstreamError) as exc:
        await _client(handler).fetch_chart(API, birth)
    assert exc.value.status_code == HTTP_UNAUTHORIZED
    assert exc.value.upstream_message == "Invalid API key"
    assert exc.value.details == {"upstream_status": HTTP_UNAUTHORIZED}


@pytest.mark.asyncio
async def test_fetch_chart_upstream_error_plain_text(birth) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(HTTP_BAD_GATEWAY, text="upstream down")

    with pytest.raises(UpstreamError) as exc:
        await _client(handler).fetch_chart(API, birth)
    assert exc.value.upstream_message == "upstream down"


@pytest.mark.asyncio
async def test_fetch_chart_network_error(birth) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError):
        await _client(handler).fetch_chart(API, birth)


@pytest.mark.asyncio
async def test_fetch_chart_malformed(birth, chart_response) -> None:
    """Teste qu'une réponse sans planètes natales lève MalformedResponse en nommant le champ."""
    del chart_response["natal_planets"]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(HTTP_OK, json=chart_response)

    with pytest.raises(MalformedResponse) as exc:
        await _client(handler).fetch_chart(API, birth)
    assert exc.value.field == "natal_planets"


@pytest.mark.asyncio
async def test_fetch_chart_not_json(birth) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(HTTP_OK, text="<html>oops</html>")

    with pytest.raises(MalformedResponse):
        await _client(handler).fetch_chart(API, birth)


@pytest.mark.asyncio
async def test_connection_probe(chart_response) -> None:
    """Teste la connexion avec l'échantillon New Delhi 1990-01-01 12:00."""
    bodies = []

    def ok(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(HTTP_OK, json=chart_response)

    def ko(request: httpx.Request) -> httpx.Response:
        return httpx.Response(HTTP_UNAUTHORIZED, json={"error": "nope"})

    assert await _client(ok).test_connection(API) is True
    assert bodies[0]["year"] == 1990
    assert bodies[0]["lon"] == pytest.approx(77.2090)
    assert await _client(ko).test_connection(API) is False

"""Tests pour les routes de réglages de l'API amont."""

from __future__ import annotations

from unittest.mock import Mock

from southchart.core.http_constants import (
    HTTP_NO_CONTENT,
    HTTP_OK,
    HTTP_PRECONDITION_FAILED,
    HTTP_UNPROCESSABLE_ENTITY,
)


def test_get_settings_hides_key(client) -> None:
    r = client.get("/settings/api")
    assert r.status_code == HTTP_OK
    assert r.json() == {
        "configured": True,
        "base_url": "https://astro.example.test/v1",
        "api_key_set": True,
    }
    assert "test-key" not in r.text


def test_put_then_delete_settings(client, container) -> None:
    payload = {"api_key": "new-key", "base_url": "https://other.example.test"}
    r = client.put("/settings/api", json=payload)
    assert r.status_code == HTTP_OK
    assert r.json()["base_url"] == "https://other.example.test"
    assert container.api_settings.get().api_key == "new-key"

    assert client.delete("/settings/api").status_code == HTTP_NO_CONTENT
    assert client.get("/settings/api").json() == {
        "configured": False,
        "base_url": None,
        "api_key_set": False,
    }


def test_put_settings_requires_fields(client) -> None:
    r = client.put("/settings/api", json={"api_key": "", "base_url": "https://x.test"})
    assert r.status_code == HTTP_UNPROCESSABLE_ENTITY


def test_connection_test(client, astro_client) -> None:
    """Teste POST /settings/api/test avec un client amont simulé."""

    async def _ok(settings):
        return True

    astro_client.test_connection = Mock(side_effect=_ok)
    r = client.post("/settings/api/test")
    assert r.status_code == HTTP_OK
    assert r.json() == {"ok": True}
    sent = astro_client.test_connection.call_args[0][0]
    assert sent.api_key == "test-key"


def test_connection_test_not_configured(client) -> None:
    client.delete("/settings/api")
    r = client.post("/settings/api/test")
    assert r.status_code == HTTP_PRECONDITION_FAILED
    assert r.json()["code"] == "NOT_CONFIGURED"

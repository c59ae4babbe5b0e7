"""Configuration de test pour pytest avec gestion des chemins et fixtures partagées.

Ce module ajoute la racine du projet au sys.path et fournit une réponse amont type, un conteneur
entièrement en mémoire et un client de test FastAPI.
"""

import os
import sys
from unittest.mock import Mock

import pytest

# Ensure project root is on sys.path so that
# imports like `from southchart...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from fastapi.testclient import TestClient  # noqa: E402

from southchart.app.main import create_app  # noqa: E402
from southchart.core.container import Container  # noqa: E402
from southchart.core.settings import Settings  # noqa: E402
from southchart.domain.entities import BirthParameters  # noqa: E402
from southchart.infra.kv_stores import InMemoryKV  # noqa: E402
from tests.fakes import make_chart_response  # noqa: E402


@pytest.fixture
def chart_response() -> dict:
    return make_chart_response()


@pytest.fixture
def birth() -> BirthParameters:
    return BirthParameters(
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


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        CACHE_BACKEND="memory",
        ASTRO_API_KEY="test-key",
        ASTRO_API_BASE_URL="https://astro.example.test/v1",
        OPENAI_API_KEY=None,
    )


@pytest.fixture
def astro_client(chart_response) -> Mock:
    """Faux client amont: `fetch_chart` est une coroutine qui renvoie la réponse type."""
    client = Mock()

    async def _fetch(settings, birth):
        return chart_response

    client.fetch_chart = Mock(side_effect=_fetch)
    return client


@pytest.fixture
def llm() -> Mock:
    fake = Mock()
    fake.is_configured = True
    fake.model = "fake-model"
    fake.generate.return_value = "Your Sun is exalted in Aries."
    return fake


@pytest.fixture
def container(test_settings, astro_client, llm) -> Container:
    return Container(settings=test_settings, store=InMemoryKV(), astro_client=astro_client, llm=llm)


@pytest.fixture
def client(container) -> TestClient:
    return TestClient(create_app(container))

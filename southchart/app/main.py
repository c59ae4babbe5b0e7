"""
Application principale FastAPI.

Ce module assemble les composants de l'application: conteneur de dépendances, middlewares,
gestion des erreurs et routes des cartes d'Inde du Sud.

Responsabilités du module:
- Initialiser le logging structuré
- Construire (ou recevoir) le conteneur et l'attacher à `app.state`
- Ajouter les middlewares (request id, timing)
- Monter les routers (santé, réglages, cartes, consultation)
"""

from __future__ import annotations

from fastapi import FastAPI

from southchart.api.errors import install_error_handlers
from southchart.api.routes_charts import router as charts_router
from southchart.api.routes_chat import router as chat_router
from southchart.api.routes_health import router as health_router
from southchart.api.routes_settings import router as settings_router
from southchart.core.container import Container
from southchart.core.logging import setup_logging
from southchart.middlewares.request_id import RequestIDMiddleware
from southchart.middlewares.timing import TimingMiddleware


def create_app(container: Container | None = None) -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Étapes:
    - Construit le conteneur à partir de la configuration si aucun n'est fourni
    - Configure le logging structuré (structlog)
    - Ajoute les middlewares utiles au debug/traçabilité
    - Publie les routes et les gestionnaires d'erreurs
    """
    container = container or Container()
    settings = container.settings
    setup_logging(debug=settings.APP_DEBUG, json_logs=settings.APP_ENV != "dev")
    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_DEBUG)
    app.state.container = container
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    install_error_handlers(app)
    app.include_router(health_router)
    app.include_router(settings_router)
    app.include_router(charts_router)
    app.include_router(chat_router)
    return app


def run() -> None:
    """Point d'entrée console: lance uvicorn avec l'hôte et le port configurés."""
    import uvicorn

    container = Container()
    uvicorn.run(
        create_app(container),
        host=container.settings.APP_HOST,
        port=container.settings.APP_PORT,
    )

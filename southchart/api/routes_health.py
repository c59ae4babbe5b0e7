"""
Endpoint de santé pour vérifier la disponibilité de l'API et du stockage.

Expose `/health` pour signaler l'état général de l'application, du stockage et de la configuration.
"""

from fastapi import APIRouter, Depends

from southchart.api.deps import get_container
from southchart.core.container import Container

router = APIRouter(tags=["health"])
container_dep = Depends(get_container)


@router.get("/health")
def health(container: Container = container_dep):
    """Vérifie la disponibilité de l'API et le backend de stockage."""
    return {
        "status": "ok",
        "storage": container.storage_backend,
        "astro_api_configured": container.api_settings.is_configured(),
        "chat_configured": container.consultation.is_configured,
    }

"""Routes de consultation astrologique conversationnelle.

La carte de contexte est désignée par l'empreinte d'une carte sauvegardée; sans empreinte, le
modèle répond avec un prompt générique.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from southchart.api.deps import get_chart_cache, get_consultation
from southchart.api.schemas import ChatRequest, ChatResponse
from southchart.core.http_constants import HTTP_NOT_FOUND
from southchart.domain.chart_cache import ChartCache
from southchart.domain.consultation import ConsultationService

router = APIRouter(prefix="/chat", tags=["chat"])
consultation_dep = Depends(get_consultation)
cache_dep = Depends(get_chart_cache)


@router.post("/reply", response_model=ChatResponse)
def reply(
    payload: ChatRequest,
    consultation: ConsultationService = consultation_dep,
    cache: ChartCache = cache_dep,
):
    """Répond à la question, dans le contexte de la carte sauvegardée si fournie."""
    chart = None
    if payload.fingerprint:
        entry = cache.get(payload.fingerprint)
        if entry is None:
            raise HTTPException(status_code=HTTP_NOT_FOUND, detail="chart_not_found")
        chart = entry.chart
    message = consultation.reply(payload.message, chart=chart, history=payload.history)
    return ChatResponse(message=message)

"""Routes liées au calcul et aux cartes sauvegardées.

Objectif du module
------------------
- Calculer les quatre cartes (natal/transit, Rasi/Bhav) à partir de données de naissance, en
  passant par le cache.
- Lister, décrire et supprimer les cartes sauvegardées.
"""

from fastapi import APIRouter, Depends, HTTPException

from southchart.api.deps import get_chart_cache, get_chart_service
from southchart.api.schemas import (
    CalculateChartRequest,
    CalculateChartResponse,
    SavedChartSummary,
    StorageInfo,
)
from southchart.core.http_constants import HTTP_NO_CONTENT, HTTP_NOT_FOUND
from southchart.domain.chart_builder import layout_south_indian
from southchart.domain.chart_cache import ChartCache, display_label
from southchart.domain.services import ChartService

router = APIRouter(prefix="/charts", tags=["charts"])
service_dep = Depends(get_chart_service)
cache_dep = Depends(get_chart_cache)


@router.post("/calculate", response_model=CalculateChartResponse)
async def calculate_charts(payload: CalculateChartRequest, service: ChartService = service_dep):
    """Retourne la réponse amont (depuis le cache si possible) et les quatre cartes."""
    result = await service.calculate(payload.birth(), label=payload.label)
    layouts = None
    if payload.layout:
        charts = result.charts
        layouts = {
            "natal_rasi": layout_south_indian(charts.natal_rasi),
            "natal_bhav": layout_south_indian(charts.natal_bhav),
            "transit_rasi": layout_south_indian(charts.transit_rasi),
            "transit_bhav": layout_south_indian(charts.transit_bhav),
        }
    return CalculateChartResponse(**result.model_dump(), layouts=layouts)


@router.get("/saved", response_model=list[SavedChartSummary])
def list_saved(cache: ChartCache = cache_dep):
    """Cartes sauvegardées, de la plus récente à la plus ancienne."""
    return [
        SavedChartSummary(
            fingerprint=e.fingerprint, label=display_label(e), saved_at=e.saved_at, birth=e.birth
        )
        for e in cache.entries()
    ]


@router.get("/saved/info", response_model=StorageInfo)
def saved_info(cache: ChartCache = cache_dep):
    return cache.info()


@router.delete("/saved/{fingerprint}", status_code=HTTP_NO_CONTENT)
def delete_saved(fingerprint: str, cache: ChartCache = cache_dep):
    if not cache.delete(fingerprint):
        raise HTTPException(status_code=HTTP_NOT_FOUND, detail="Chart not found")


@router.delete("/saved", status_code=HTTP_NO_CONTENT)
def clear_saved(cache: ChartCache = cache_dep):
    cache.clear()

# Schémas Pydantic exposés par l'API (requêtes et réponses).

from typing import Any

from pydantic import BaseModel, Field

from southchart.domain.consultation import ChatMessage
from southchart.domain.entities import BirthParameters
from southchart.domain.services import ChartSet


class CalculateChartRequest(BirthParameters):
    """Paramètres de naissance, plus options d'enregistrement et d'affichage.

    Champs additionnels:
    - label: libellé libre de la carte sauvegardée
    - layout: inclure la disposition sur la grille d'Inde du Sud
    """

    label: str | None = None
    layout: bool = False

    def birth(self) -> BirthParameters:
        return BirthParameters(**self.model_dump(exclude={"label", "layout"}))


class CalculateChartResponse(BaseModel):
    """Réponse du calcul: provenance, réponse brute amont et cartes construites."""

    fingerprint: str
    from_cache: bool
    saved: bool
    response: dict[str, Any]
    charts: ChartSet
    layouts: dict[str, list[dict[str, Any]]] | None = None


class SavedChartSummary(BaseModel):
    fingerprint: str
    label: str
    saved_at: float
    birth: BirthParameters


class StorageInfo(BaseModel):
    chart_count: int
    storage_size: str


class ApiSettingsPayload(BaseModel):
    api_key: str = Field(..., min_length=1)
    base_url: str = Field(..., min_length=1)


class ApiSettingsView(BaseModel):
    """Vue des réglages sans la clé (seulement sa présence)."""

    configured: bool
    base_url: str | None = None
    api_key_set: bool = False


class ConnectionTestResponse(BaseModel):
    ok: bool


class ChatRequest(BaseModel):
    """Question de l'utilisateur, carte sauvegardée éventuelle et historique récent."""

    message: str = Field(..., min_length=1)
    fingerprint: str | None = None
    history: list[ChatMessage] = Field(default_factory=list)


class ChatResponse(BaseModel):
    message: ChatMessage

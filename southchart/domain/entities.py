"""
Entités du domaine métier.

Ce module définit les modèles de données des cartes védiques: paramètres de naissance, corps
célestes, positions calculées, réponse de l'API amont et entrées du cache.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from southchart.domain.errors import MalformedResponse


class Body(str, Enum):
    """Corps célestes renvoyés par l'API, plus l'Ascendant (axe de la carte)."""

    SUN = "Sun"
    MOON = "Moon"
    MARS = "Mars"
    MERCURY = "Mercury"
    JUPITER = "Jupiter"
    VENUS = "Venus"
    SATURN = "Saturn"
    RAHU = "Rahu"
    KETU = "Ketu"
    ASCENDANT = "Ascendant"

    @property
    def is_axis(self) -> bool:
        return self is Body.ASCENDANT


PLANETS: tuple[Body, ...] = tuple(b for b in Body if not b.is_axis)
BODY_ORDER: dict[Body, int] = {b: i for i, b in enumerate(Body)}

PlanetLongitudes = dict[Body, float]
HouseCusps = dict[str, float]


class PositionKind(str, Enum):
    """Nature d'une position: corps, axe (Ascendant) ou cuspide de maison."""

    BODY = "body"
    AXIS = "axis"
    CUSP = "cusp"


class BirthParameters(BaseModel):
    """Données de naissance envoyées à l'API amont et utilisées comme clé de cache.

    Les noms `lat`, `lon`, `tz` sont ceux attendus par l'API amont.
    """

    model_config = ConfigDict(frozen=True)

    year: int
    month: int = Field(..., ge=1, le=12)
    day: int = Field(..., ge=1, le=31)
    hour: int = Field(..., ge=0, le=23)
    minute: int = Field(..., ge=0, le=59)
    second: int = Field(0, ge=0, le=59)
    lat: float = Field(..., ge=-90, le=90, description="Latitude décimale")
    lon: float = Field(..., ge=-180, le=180, description="Longitude décimale")
    tz: str = Field(..., description="IANA TZ, e.g. Asia/Kolkata")
    ayanamsha: str | None = None
    house_system: str | None = None
    natal_ayanamsha: str | None = None
    natal_house_system: str | None = None
    transit_ayanamsha: str | None = None
    transit_house_system: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Corps JSON de la requête amont (champs optionnels absents omis)."""
        return self.model_dump(exclude_none=True)


class ChartPosition(BaseModel):
    """Position d'un corps, de l'Ascendant ou d'une cuspide dans un signe."""

    model_config = ConfigDict(frozen=True)

    sign: int = Field(..., ge=0, le=11)
    degree: float = Field(..., ge=0, lt=30)
    label: str
    kind: PositionKind = PositionKind.BODY


class ChartData(BaseModel):
    """Carte prête à afficher: positions (ordre indifférent) + signe ascendant."""

    model_config = ConfigDict(frozen=True)

    positions: list[ChartPosition]
    ascendant_sign: int = Field(..., ge=0, le=11)


class ChartResponse(BaseModel):
    """Réponse de l'API amont, validée uniquement sur la présence des champs utiles."""

    model_config = ConfigDict(extra="allow")

    other_details: dict[str, Any] = Field(default_factory=dict)
    natal_planets: dict[str, float]
    natal_house_cusps: dict[str, float]
    transit_planets: dict[str, float]
    transit_house_cusps: dict[str, float]

    @classmethod
    def parse(cls, raw: Any) -> ChartResponse:
        """Valide un document brut et lève `MalformedResponse` en nommant le champ fautif."""
        if not isinstance(raw, dict):
            raise MalformedResponse("Chart response is not a JSON object")
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            err = exc.errors()[0]
            field = ".".join(str(p) for p in err.get("loc", ())) or None
            raise MalformedResponse(f"Invalid chart response: {err.get('msg')}", field=field) from exc


class CacheEntry(BaseModel):
    """Carte sauvegardée: clé, paramètres d'origine, réponse brute, horodatage."""

    fingerprint: str
    birth: BirthParameters
    chart: dict[str, Any]
    saved_at: float
    label: str | None = None


class ConjunctionGroup(BaseModel):
    """Groupe de corps en conjonction (au moins deux), longitudes en parallèle."""

    bodies: list[Body]
    longitudes: list[float]


def parse_longitudes(raw: dict[str, Any], field: str = "planets") -> PlanetLongitudes:
    """Convertit un objet {nom: degrés} en mapping indexé par `Body`.

    Les clés inconnues sont ignorées; une valeur non numérique lève `MalformedResponse`.
    """
    out: PlanetLongitudes = {}
    for name, value in raw.items():
        try:
            body = Body(name)
        except ValueError:
            continue
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise MalformedResponse(f"Longitude for {name} is not a number", field=f"{field}.{name}")
        out[body] = float(value)
    return out

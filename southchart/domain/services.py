from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator
from typing import Any

import structlog
from pydantic import BaseModel

from southchart.domain.chart_builder import build_bhav_chart, build_rasi_chart
from southchart.domain.chart_cache import ChartCache, fingerprint
from southchart.domain.conjunctions import DEFAULT_ORB, find_conjunctions
from southchart.domain.entities import (
    BirthParameters,
    ChartData,
    ChartResponse,
    ConjunctionGroup,
    PlanetLongitudes,
    parse_longitudes,
)
from southchart.domain.errors import NotConfigured, PersistenceError

log = structlog.get_logger(__name__)


class ChartSet(BaseModel):
    """Les quatre cartes issues d'une réponse amont, plus les conjonctions."""

    natal_rasi: ChartData
    natal_bhav: ChartData
    transit_rasi: ChartData
    transit_bhav: ChartData
    natal_conjunctions: list[ConjunctionGroup]
    transit_conjunctions: list[ConjunctionGroup]


class ChartResult(BaseModel):
    """Résultat d'un calcul: réponse brute, provenance et cartes construites."""

    fingerprint: str
    from_cache: bool
    saved: bool
    response: dict[str, Any]
    charts: ChartSet


def _bodies_only(planets: PlanetLongitudes) -> PlanetLongitudes:
    return {b: lon for b, lon in planets.items() if not b.is_axis}


def build_chart_set(raw: dict[str, Any], orb: float = DEFAULT_ORB) -> ChartSet:
    """Construit natal Rasi/Bhav et transit Rasi/Bhav à partir d'un document amont."""
    response = ChartResponse.parse(raw)
    natal = parse_longitudes(response.natal_planets, "natal_planets")
    transit = parse_longitudes(response.transit_planets, "transit_planets")
    return ChartSet(
        natal_rasi=build_rasi_chart(natal),
        natal_bhav=build_bhav_chart(natal, response.natal_house_cusps),
        transit_rasi=build_rasi_chart(transit),
        transit_bhav=build_bhav_chart(transit, response.transit_house_cusps),
        natal_conjunctions=find_conjunctions(_bodies_only(natal), orb),
        transit_conjunctions=find_conjunctions(_bodies_only(transit), orb),
    )


class ChartService:
    """Service métier: cache d'abord, API amont ensuite, puis construction des cartes.

    Responsabilités:
    - Consulter le cache par empreinte avant tout appel amont.
    - Garantir au plus un appel amont en cours par empreinte (verrou par empreinte).
    - Enregistrer la réponse; un échec du cache n'empêche jamais l'affichage.
    """

    def __init__(self, astro_client, settings_store, cache: ChartCache, orb: float = DEFAULT_ORB):
        """Initialise le service avec ses dépendances.

        Paramètres:
        - astro_client: client de l'API amont (`fetch_chart`).
        - settings_store: réglages d'API (`get`).
        - cache: `ChartCache` des réponses déjà obtenues.
        - orb: orbe des conjonctions, en degrés.
        """
        self.astro = astro_client
        self.settings = settings_store
        self.cache = cache
        self.orb = orb
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @contextlib.asynccontextmanager
    async def _single_flight(self, fp: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(fp, asyncio.Lock())
        self._waiters[fp] = self._waiters.get(fp, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[fp] -= 1
            if not self._waiters[fp]:
                del self._waiters[fp]
                del self._locks[fp]

    def _cached(self, birth: BirthParameters):
        try:
            return self.cache.lookup(birth)
        except Exception as exc:
            log.warning("chart_cache_lookup_failed", error=str(exc))
            return None

    async def calculate(self, birth: BirthParameters, label: str | None = None) -> ChartResult:
        """Retourne les quatre cartes pour ces paramètres de naissance.

        Lève `NotConfigured` si un appel amont est nécessaire sans réglages d'API, et propage
        `UpstreamError`, `NetworkError` et `MalformedResponse`. Une annulation pendant l'appel
        amont n'écrit rien dans le cache.
        """
        fp = fingerprint(birth)
        async with self._single_flight(fp):
            entry = self._cached(birth)
            if entry is not None:
                log.info("chart_cache_hit", fingerprint=fp)
                return ChartResult(
                    fingerprint=fp,
                    from_cache=True,
                    saved=True,
                    response=entry.chart,
                    charts=build_chart_set(entry.chart, self.orb),
                )

            api = self.settings.get()
            if api is None:
                raise NotConfigured()
            log.info("chart_cache_miss", fingerprint=fp)
            raw = await self.astro.fetch_chart(api, birth)
            # Une réponse inexploitable n'est jamais mise en cache.
            charts = build_chart_set(raw, self.orb)
            return ChartResult(
                fingerprint=fp,
                from_cache=False,
                saved=self._save(birth, raw, label),
                response=raw,
                charts=charts,
            )

    def _save(self, birth: BirthParameters, raw: dict[str, Any], label: str | None) -> bool:
        try:
            self.cache.store(birth, raw, label)
        except PersistenceError as exc:
            log.warning("chart_cache_store_failed", error=str(exc))
            return False
        return True

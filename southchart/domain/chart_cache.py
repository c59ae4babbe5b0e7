"""Cache persistant des réponses de l'API amont, indexé par empreinte de naissance.

Objectif du module
------------------
- Éviter les appels amont redondants (facturés) pour des paramètres de naissance déjà vus.
- Borner la taille du stockage (50 entrées par défaut, éviction des plus anciennes).

L'empreinte ne tient compte ni de l'ayanamsha, ni du système de maisons, ni du fuseau: deux
requêtes ne différant que par ces champs partagent la même entrée. C'est une limite connue,
conservée pour rester compatible avec les empreintes déjà stockées.

Chaque mutation est écrite immédiatement dans le `KeyValueStore`, source de vérité partagée entre
workers. En cas d'échec du stockage, `PersistenceError` est levée et la mutation reste visible
localement (état post-mutation) jusqu'à ce qu'une écriture suivante la persiste.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog

from southchart.domain.entities import BirthParameters, CacheEntry
from southchart.domain.errors import PersistenceError
from southchart.infra.kv_stores import KeyValueStore

log = structlog.get_logger(__name__)

DEFAULT_CAPACITY = 50
KEY_PREFIX = "chart:"


def fingerprint(birth: BirthParameters) -> str:
    """Empreinte déterministe: date, heure et coordonnées arrondies à 4 décimales.

    `+ 0.0` ramène -0.0 à 0.0, pour que "-0.0000" et "0.0000" ne donnent pas deux empreintes.
    """
    return (
        f"{birth.year}-{birth.month}-{birth.day}-{birth.hour}-{birth.minute}-{birth.second}"
        f"-{birth.lat + 0.0:.4f}-{birth.lon + 0.0:.4f}"
    )


def display_label(entry: CacheEntry) -> str:
    """Libellé d'affichage: le label saisi, sinon la date et l'heure de naissance."""
    if entry.label:
        return entry.label
    b = entry.birth
    return datetime(b.year, b.month, b.day, b.hour, b.minute).strftime("%Y-%m-%d %H:%M")


class ChartCache:
    """Cache borné des réponses de cartes, adossé à un `KeyValueStore`.

    Le stockage est la source de vérité: plusieurs instances (workers) partageant le même backend
    voient les mêmes entrées et la même borne. Seules les mutations dont l'écriture a échoué sont
    conservées localement (`_pending`), et rejouées à la mutation suivante.
    """

    def __init__(
        self,
        store: KeyValueStore,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Applique la borne au contenu existant; un stockage illisible est journalisé."""
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._store = store
        self.capacity = capacity
        self._clock = clock
        self._lock = threading.Lock()
        # empreinte -> entrée à écrire, ou None pour une suppression à rejouer
        self._pending: dict[str, CacheEntry | None] = {}
        try:
            with self._lock:
                if self._evict():
                    self._flush()
        except PersistenceError as exc:
            log.warning("chart_cache_load_failed", error=str(exc))

    @staticmethod
    def _key(fp: str) -> str:
        return f"{KEY_PREFIX}{fp}"

    def _read(self, key: str) -> CacheEntry | None:
        raw = self._store.get(key)
        if raw is None:
            return None
        try:
            return CacheEntry.model_validate_json(raw)
        except ValueError:
            log.warning("chart_cache_entry_skipped", key=key)
            return None

    def _view(self) -> dict[str, CacheEntry]:
        """Entrées du stockage, corrigées par les mutations locales non persistées."""
        try:
            entries = {}
            for key in self._store.list_keys(KEY_PREFIX):
                entry = self._read(key)
                if entry is not None:
                    entries[entry.fingerprint] = entry
        except Exception as exc:
            raise PersistenceError("Failed to read saved charts") from exc
        for fp, entry in self._pending.items():
            entries.pop(fp, None)
            if entry is not None:
                entries[fp] = entry
        return entries

    def _flush(self) -> None:
        failure = None
        for fp, entry in list(self._pending.items()):
            try:
                if entry is None:
                    self._store.delete(self._key(fp))
                else:
                    self._store.set(self._key(fp), entry.model_dump_json())
            except Exception as exc:
                failure = exc
                continue
            del self._pending[fp]
        if failure is not None:
            raise PersistenceError(f"Failed to persist {len(self._pending)} chart(s)") from failure

    def _evict(self) -> list[str]:
        view = self._view()
        overflow = len(view) - self.capacity
        if overflow <= 0:
            return []
        # Tri stable: à horodatage égal, l'ordre d'insertion départage.
        oldest = sorted(view.values(), key=lambda e: e.saved_at)[:overflow]
        for e in oldest:
            self._pending[e.fingerprint] = None
        return [e.fingerprint for e in oldest]

    def __len__(self) -> int:
        with self._lock:
            return len(self._view())

    def __contains__(self, fp: str) -> bool:
        return self.get(fp) is not None

    def lookup(self, birth: BirthParameters) -> CacheEntry | None:
        """Entrée associée aux paramètres, sans effet de bord."""
        return self.get(fingerprint(birth))

    def get(self, fp: str) -> CacheEntry | None:
        with self._lock:
            if fp in self._pending:
                return self._pending[fp]
            try:
                return self._read(self._key(fp))
            except Exception as exc:
                raise PersistenceError(f"Failed to read chart {fp}") from exc

    def entries(self) -> list[CacheEntry]:
        """Entrées de la plus récente à la plus ancienne."""
        with self._lock:
            values = list(self._view().values())
        return sorted(values, key=lambda e: e.saved_at)[::-1]

    def store(
        self, birth: BirthParameters, chart: dict[str, Any], label: str | None = None
    ) -> str:
        """Enregistre (ou remplace) la réponse pour ces paramètres et retourne l'empreinte."""
        fp = fingerprint(birth)
        entry = CacheEntry(
            fingerprint=fp, birth=birth, chart=chart, saved_at=self._clock(), label=label
        )
        with self._lock:
            self._pending.pop(fp, None)
            self._pending[fp] = entry
            evicted = self._evict()
            self._flush()
        log.info("chart_saved", fingerprint=fp, evicted=len(evicted))
        return fp

    def delete(self, fp: str) -> bool:
        """Supprime une entrée; True si elle existait."""
        with self._lock:
            if fp in self._pending:
                existed = self._pending[fp] is not None
            else:
                try:
                    existed = self._store.get(self._key(fp)) is not None
                except Exception as exc:
                    raise PersistenceError(f"Failed to read chart {fp}") from exc
            if not existed:
                return False
            self._pending[fp] = None
            self._flush()
        log.info("chart_deleted", fingerprint=fp)
        return True

    def clear(self) -> None:
        with self._lock:
            try:
                keys = self._store.list_keys(KEY_PREFIX)
            except Exception as exc:
                raise PersistenceError("Failed to clear saved charts") from exc
            fps = {key.removeprefix(KEY_PREFIX) for key in keys} | set(self._pending)
            self._pending = dict.fromkeys(fps)
            self._flush()
        log.info("chart_cache_cleared")

    def info(self) -> dict[str, Any]:
        """Nombre d'entrées et taille sérialisée approximative."""
        with self._lock:
            values = list(self._view().values())
        size = sum(len(e.model_dump_json().encode("utf-8")) for e in values)
        return {"chart_count": len(values), "storage_size": f"{size / 1024:.2f} KB"}

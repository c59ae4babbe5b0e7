"""
Stockages clé-valeur pour le cache des cartes et les réglages.

Ce module fournit une interface minimale `get/set/delete/list_keys` avec trois implémentations:
en mémoire (tests), fichier JSON local (poste de travail/CLI) et Redis (déploiement serveur).
Les valeurs sont des chaînes (documents JSON sérialisés par l'appelant).
"""

from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import redis


class KeyValueStore(ABC):
    """Interface de persistance clé-valeur."""

    name = "abstract"

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Retourne la valeur de `key`, ou None si absente."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Écrit (ou écrase) la valeur de `key`."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Supprime `key`; True si elle existait."""

    @abstractmethod
    def list_keys(self, prefix: str = "") -> list[str]:
        """Liste les clés commençant par `prefix`."""


class InMemoryKV(KeyValueStore):
    """
    Stockage en mémoire (utilisé pour dev/tests).

    Stocke les valeurs dans un dict local, non persistant.
    """

    name = "memory"

    def __init__(self):
        """Initialise une base mémoire vide."""
        self._db: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._db.get(key)

    def set(self, key: str, value: str) -> None:
        self._db[key] = value

    def delete(self, key: str) -> bool:
        return self._db.pop(key, None) is not None

    def list_keys(self, prefix: str = "") -> list[str]:
        return [k for k in self._db if k.startswith(prefix)]


class JSONFileKV(KeyValueStore):
    """Stockage dans un unique fichier JSON, réécrit atomiquement à chaque mutation."""

    name = "file"

    def __init__(self, path: str | os.PathLike):
        """Mémorise le chemin du fichier; il est créé à la première écriture."""
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open(encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def _dump(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def delete(self, key: str) -> bool:
        data = self._load()
        if key not in data:
            return False
        del data[key]
        self._dump(data)
        return True

    def list_keys(self, prefix: str = "") -> list[str]:
        return [k for k in self._load() if k.startswith(prefix)]


class RedisKV(KeyValueStore):
    """Stockage adossé à Redis (une clé Redis par entrée)."""

    name = "redis"

    def __init__(self, url: str):
        """Crée un client Redis à partir de l'URL fournie."""
        self.client = redis.Redis.from_url(url, decode_responses=True)

    def get(self, key: str) -> str | None:
        return self.client.get(key)

    def set(self, key: str, value: str) -> None:
        self.client.set(key, value)

    def delete(self, key: str) -> bool:
        return bool(self.client.delete(key))

    def list_keys(self, prefix: str = "") -> list[str]:
        return list(self.client.scan_iter(match=f"{prefix}*"))

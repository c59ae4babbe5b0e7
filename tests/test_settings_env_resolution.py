"""
Tests pour la résolution des variables d'environnement.

Ce module teste le chargement des settings à partir d'un fichier .env désigné par ENV_FILE.
"""

from __future__ import annotations

import importlib
from pathlib import Path

# Constantes pour éviter les erreurs PLR2004 (Magic values)
CUSTOM_CAPACITY = 7
CUSTOM_ORB = 6.5


def test_settings_reads_env_file(tmp_path: Path, monkeypatch) -> None:
    """
    Teste que les settings lisent correctement le fichier désigné par ENV_FILE.

    Vérifie que capacité du cache, orbe et backend définis dans un fichier .env personnalisé sont
    appliqués aux settings.
    """
    env = tmp_path / ".env.custom"
    env.write_text(
        "CACHE_BACKEND=file\nCACHE_CAPACITY=7\nCONJUNCTION_ORB=6.5\n", encoding="utf-8"
    )
    monkeypatch.setenv("ENV_FILE", str(env))
    for name in ("CACHE_BACKEND", "CACHE_CAPACITY", "CONJUNCTION_ORB"):
        monkeypatch.delenv(name, raising=False)

    # Reload settings module to pick up new ENV_FILE
    settings_mod = importlib.import_module("southchart.core.settings")
    try:
        importlib.reload(settings_mod)
        s = settings_mod.get_settings()
        assert s.CACHE_BACKEND == "file"
        assert s.CACHE_CAPACITY == CUSTOM_CAPACITY
        assert s.CONJUNCTION_ORB == CUSTOM_ORB
    finally:
        monkeypatch.delenv("ENV_FILE")
        importlib.reload(settings_mod)

"""Interface de base pour les modèles de langage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class LLM(ABC):
    """Interface abstraite pour les modèles de langage."""

    model: str = "unknown"

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Indique si le modèle peut être appelé (clé présente)."""

    @abstractmethod
    def generate(self, messages: list[dict[str, str]], **kwargs: Any) -> str:
        """Génère une réponse à partir d'une liste de messages."""
        ...

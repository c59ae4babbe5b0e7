"""
Client LLM basé sur l'API OpenAI.

Implémente l'interface LLM via `chat.completions`. Sans clé d'API, le client n'est pas configuré
et toute génération lève `NotConfigured`.
"""

from __future__ import annotations

from typing import Any

import openai
import structlog
from openai import OpenAI

from southchart.domain.errors import ConsultationError, NotConfigured
from southchart.infra.llm.base import LLM

log = structlog.get_logger(__name__)


class OpenAILLM(LLM):
    """LLM basé sur OpenAI."""

    def __init__(
        self, api_key: str | None = None, model: str = "gpt-4o-mini", client: Any = None
    ) -> None:
        """Initialize the OpenAILLM client."""
        self.model = model
        if client is not None:
            self.client = client
        elif api_key:
            self.client = OpenAI(api_key=api_key)
        else:
            self.client = None

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def generate(self, messages: list[dict[str, str]], **kwargs: Any) -> str:
        """Génère le texte de la réponse; une réponse vide renvoie une chaîne vide."""
        if self.client is None:
            raise NotConfigured("Chat service not configured. Set OPENAI_API_KEY.")
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                **kwargs,
            )
        except openai.OpenAIError as exc:
            log.warning("llm_generation_failed", model=self.model, error=str(exc))
            raise ConsultationError(
                "Failed to generate astrological response. Please try again."
            ) from exc
        choice = resp.choices[0]
        content = getattr(getattr(choice, "message", None), "content", None)
        return str(content) if content else ""

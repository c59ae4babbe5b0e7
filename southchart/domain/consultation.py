"""Consultation astrologique conversationnelle.

Ce module construit le contexte (prompt système décrivant la carte natale, historique récent) et
délègue la génération du texte au LLM configuré. Les signes et degrés du prompt viennent du module
de géométrie partagé.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Sequence
from typing import Any, Literal

import structlog
from pydantic import BaseModel, Field

from southchart.domain.entities import BODY_ORDER, ChartResponse, parse_longitudes
from southchart.domain.errors import NotConfigured
from southchart.domain.geometry import sign_degree, sign_name
from southchart.infra.llm.base import LLM

log = structlog.get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 10
EMPTY_REPLY = "I apologize, but I couldn't generate a response. Please try again."

GENERIC_SYSTEM = (
    "You are an expert Vedic astrologer specializing in South Indian astrology chart "
    "interpretation. You provide insightful, accurate, and helpful guidance based on "
    "astrological principles. Answer questions about astrology, planetary positions, houses, "
    "and chart interpretations. Keep responses clear, informative, and relevant to Vedic "
    "astrology."
)

CHART_SYSTEM = """You are an expert Vedic astrologer specializing in South Indian astrology chart interpretation.

CURRENT CHART CONTEXT:
- Birth Date: {natal_date}
- Current Transit Date: {transit_date}
- Ayanamsha: {ayanamsha}
- House System: {house_system}
- Natal Planetary Positions: {positions}

Based on this specific chart data, provide personalized astrological guidance and interpretations.
Answer questions about:
- Planetary positions and their meanings
- House interpretations
- Current transits and their effects
- Compatibility and relationships
- Career and life path guidance
- Timing of events (muhurta)
- Remedies and suggestions

Keep responses accurate, insightful, and specific to this person's chart.
Use Vedic astrology principles and South Indian chart conventions."""


class ChatMessage(BaseModel):
    """Message d'une conversation de consultation."""

    id: str
    role: Literal["user", "assistant"]
    content: str
    timestamp: float = Field(default_factory=time.time)
    is_audio: bool = False


def new_message(
    role: Literal["user", "assistant"], content: str, is_audio: bool = False
) -> ChatMessage:
    """Crée un message avec un identifiant unique `msg_{ms}_{suffixe}`."""
    now = time.time()
    return ChatMessage(
        id=f"msg_{int(now * 1000)}_{uuid.uuid4().hex[:9]}",
        role=role,
        content=content,
        timestamp=now,
        is_audio=is_audio,
    )


def user_message(content: str, is_audio: bool = False) -> ChatMessage:
    return new_message("user", content, is_audio)


def assistant_message(content: str) -> ChatMessage:
    return new_message("assistant", content)


def describe_positions(planets: dict[str, Any]) -> str:
    """Résumé "Corps: Signe 12.34°" des longitudes natales, dans l'ordre canonique."""
    longitudes = parse_longitudes(planets, "natal_planets")
    parts = []
    for body in sorted(longitudes, key=BODY_ORDER.__getitem__):
        sign, degree = sign_degree(longitudes[body])
        parts.append(f"{body.value}: {sign_name(sign)} {degree:.2f}°")
    return ", ".join(parts)


def build_system_prompt(chart: dict[str, Any] | None = None) -> str:
    if not chart:
        return GENERIC_SYSTEM
    response = ChartResponse.parse(chart)
    details = response.other_details
    return CHART_SYSTEM.format(
        natal_date=details.get("natal_date_formatted", "unknown"),
        transit_date=details.get("transit_date_formatted", "unknown"),
        ayanamsha=details.get("natal_ayanamsha_name", "unknown"),
        house_system=details.get("natal_house_system_used", "unknown"),
        positions=describe_positions(response.natal_planets),
    )


class ConsultationService:
    """Orchestrateur pour les conversations astrologiques."""

    def __init__(self, llm: LLM, history_limit: int = DEFAULT_HISTORY_LIMIT):
        """Initialise le service avec un LLM et la taille d'historique conservée."""
        self.llm = llm
        self.history_limit = history_limit

    @property
    def is_configured(self) -> bool:
        return self.llm.is_configured

    def build_messages(
        self,
        message: str,
        chart: dict[str, Any] | None = None,
        history: Sequence[ChatMessage] = (),
    ) -> list[dict[str, str]]:
        """Prompt système, puis les derniers messages de l'historique, puis la question."""
        messages = [{"role": "system", "content": build_system_prompt(chart)}]
        recent = list(history)[-self.history_limit :] if self.history_limit else []
        messages.extend({"role": m.role, "content": m.content} for m in recent)
        messages.append({"role": "user", "content": message})
        return messages

    def reply(
        self,
        message: str,
        chart: dict[str, Any] | None = None,
        history: Sequence[ChatMessage] = (),
    ) -> ChatMessage:
        """Génère la réponse de l'assistant à `message`."""
        if not self.is_configured:
            raise NotConfigured("Chat service not configured. Set OPENAI_API_KEY.")
        messages = self.build_messages(message, chart, history)
        text = self.llm.generate(messages).strip()
        log.info("consultation_reply", with_chart=chart is not None, history=len(messages) - 2)
        return assistant_message(text or EMPTY_REPLY)

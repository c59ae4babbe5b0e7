"""Taxonomie des erreurs du domaine.

Chaque erreur porte un `code` stable réutilisé tel quel dans l'enveloppe d'erreur de l'API.
Aucune de ces erreurs n'est fatale au processus: toutes se récupèrent à la frontière de requête.
"""

from __future__ import annotations

from typing import Any


class ChartError(Exception):
    """Erreur de base du domaine des cartes."""

    code = "CHART_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotConfigured(ChartError):
    """Aucune clé/URL d'API n'est configurée; l'appelant doit demander la configuration."""

    code = "NOT_CONFIGURED"

    def __init__(self, message: str = "API not configured. Set API key and base URL.") -> None:
        super().__init__(message)


class UpstreamError(ChartError):
    """L'API amont a répondu avec un statut non 2xx."""

    code = "UPSTREAM_ERROR"

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(
            f"API Error ({status_code}): {message}", details={"upstream_status": status_code}
        )
        self.status_code = status_code
        self.upstream_message = message


class NetworkError(ChartError):
    """Échec de transport vers l'API amont (l'appelant décide d'un éventuel retry)."""

    code = "NETWORK_ERROR"


class MalformedResponse(ChartError):
    """Réponse amont incomplète ou incohérente."""

    code = "MALFORMED_RESPONSE"

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


class MissingField(MalformedResponse):
    """Champ obligatoire absent (typiquement la longitude de l'Ascendant)."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required field: {field}", field=field)


class MalformedCusps(MalformedResponse):
    """Jeu de cuspides différent des 12 maisons attendues."""

    def __init__(self, count: int, field: str = "house_cusps") -> None:
        super().__init__(f"Expected 12 house cusps, got {count}", field=field)
        self.count = count


class PersistenceError(ChartError):
    """Lecture/écriture du stockage durable en échec; l'état mémoire reste cohérent."""

    code = "PERSISTENCE_ERROR"


class ConsultationError(ChartError):
    """Le service de langage n'a pas pu produire de réponse."""

    code = "CONSULTATION_ERROR"

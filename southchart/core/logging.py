"""Configuration de logging basée sur structlog.

Objectif du module
------------------
- Logs structurés lisibles en console pendant le développement.
- Logs JSON (une ligne par événement) hors développement, pour l'agrégation.
- Fusion des variables de contexte (request_id) dans chaque événement.
"""

import logging
import sys

import structlog


def setup_logging(debug: bool = True, json_logs: bool = False) -> None:
    """Configure structlog; `debug` abaisse le niveau à DEBUG, `json_logs` change le rendu."""
    level = logging.DEBUG if debug else logging.INFO
    renderer = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="ISO", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

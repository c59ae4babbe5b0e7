"""
Fakes et données types pour les tests unitaires.

Ce module fournit une réponse amont réaliste, des cuspides synthétiques et un stockage clé-valeur
dont on peut provoquer l'échec.
"""

from __future__ import annotations

from southchart.infra.kv_stores import InMemoryKV


def make_cusps(start: float) -> dict[str, float]:
    """12 cuspides espacées de 30° à partir de `start`."""
    return {f"House {i}": (start + (i - 1) * 30.0) % 360 for i in range(1, 13)}


def make_chart_response() -> dict:
    """Réponse amont réaliste: Ascendant en Lion, Soleil et Lune conjoints en Bélier."""
    return {
        "other_details": {
            "natal_date_formatted": "1990-01-01 12:00:00",
            "transit_date_formatted": "2026-10-19 09:00:00",
            "natal_ayanamsha_name": "Lahiri",
            "transit_ayanamsha_name": "Lahiri",
            "ayanamsha_value_natal": 23.72,
            "ayanamsha_value_transit": 24.21,
            "natal_house_system_used": "Placidus",
            "transit_house_system_used": "Placidus",
            "timezone_used": "Asia/Kolkata",
            "natal_input_time_ut": 6.5,
            "transit_input_time_ut": 3.5,
        },
        "natal_planets": {
            "Ascendant": 125.5,
            "Sun": 10.0,
            "Moon": 12.0,
            "Mars": 100.0,
            "Mercury": 200.25,
            "Jupiter": 250.0,
            "Venus": 300.0,
            "Saturn": 330.0,
            "Rahu": 359.0,
            "Ketu": 179.0,
        },
        "natal_house_cusps": make_cusps(125.5),
        "transit_planets": {
            "Ascendant": 5.0,
            "Sun": 182.0,
            "Moon": 45.0,
            "Mars": 75.0,
            "Mercury": 190.0,
            "Jupiter": 62.0,
            "Venus": 160.0,
            "Saturn": 335.0,
            "Rahu": 340.0,
            "Ketu": 160.0,
        },
        "transit_house_cusps": make_cusps(5.0),
    }


class FlakyKV(InMemoryKV):
    """Stockage mémoire dont les écritures échouent tant que `fail` est vrai."""

    def __init__(self):
        super().__init__()
        self.fail = False

    def set(self, key: str, value: str) -> None:
        if self.fail:
            raise OSError("disk full")
        super().set(key, value)

    def delete(self, key: str) -> bool:
        if self.fail:
            raise OSError("disk full")
        return super().delete(key)


# Requête de calcul type (New Delhi, 1990-01-01 12:00) et son empreinte.
PAYLOAD = {
    "year": 1990,
    "month": 1,
    "day": 1,
    "hour": 12,
    "minute": 0,
    "lat": 28.6139,
    "lon": 77.2090,
    "tz": "Asia/Kolkata",
}
FP = "1990-1-1-12-0-0-28.6139-77.2090"

"""Géométrie du zodiaque sidéral: signes, degrés dans le signe, maisons.

Objectif du module
------------------
- Convertir une longitude écliptique (degrés) en signe 0..11 et en degré dans le signe.
- Numéroter les maisons (1..12) relativement au signe ascendant.
- Décrire la grille fixe de la carte d'Inde du Sud (les signes ne bougent jamais).

Toutes les fonctions sont pures. Les longitudes hors [0, 360) sont ramenées modulo 360.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from southchart.domain.entities import Body, ChartPosition

SIGN_SPAN = 30.0
FULL_CIRCLE = 360.0
SIGN_COUNT = 12

ZODIAC_SIGNS: tuple[str, ...] = (
    "Aries",
    "Taurus",
    "Gemini",
    "Cancer",
    "Leo",
    "Virgo",
    "Libra",
    "Scorpio",
    "Sagittarius",
    "Capricorn",
    "Aquarius",
    "Pisces",
)

BODY_SYMBOLS: dict[Body, str] = {
    Body.SUN: "☉",
    Body.MOON: "☽",
    Body.MARS: "♂",
    Body.MERCURY: "☿",
    Body.JUPITER: "♃",
    Body.VENUS: "♀",
    Body.SATURN: "♄",
    Body.RAHU: "☊",
    Body.KETU: "☋",
}

BODY_ABBREVIATIONS: dict[Body, str] = {
    Body.SUN: "Su",
    Body.MOON: "Mo",
    Body.MARS: "Ma",
    Body.MERCURY: "Me",
    Body.JUPITER: "Ju",
    Body.VENUS: "Ve",
    Body.SATURN: "Sa",
    Body.RAHU: "Ra",
    Body.KETU: "Ke",
    Body.ASCENDANT: "As",
}

# Grille 4x4, ligne par ligne; None = cases centrales (titre de la carte).
SOUTH_INDIAN_GRID: tuple[tuple[int | None, ...], ...] = (
    (11, 0, 1, 2),
    (10, None, None, 3),
    (9, None, None, 4),
    (8, 7, 6, 5),
)


def normalize(longitude: float) -> float:
    """Ramène une longitude dans [0, 360)."""
    value = longitude % FULL_CIRCLE
    # -1e-20 % 360 == 360.0 en flottant
    if value >= FULL_CIRCLE:
        value = 0.0
    return value


def sign_of(longitude: float) -> int:
    """Index du signe (0 = Bélier .. 11 = Poissons)."""
    return int(normalize(longitude) // SIGN_SPAN) % SIGN_COUNT


def sign_degree(longitude: float) -> tuple[int, float]:
    """Retourne `(signe, degré dans le signe)` avec un degré dans [0, 30)."""
    value = normalize(longitude)
    sign = int(value // SIGN_SPAN) % SIGN_COUNT
    return sign, value - sign * SIGN_SPAN


def house_number(sign: int, ascendant_sign: int) -> int:
    """Numéro de maison (1..12); le signe ascendant est toujours la maison 1."""
    return ((sign - ascendant_sign + SIGN_COUNT) % SIGN_COUNT) + 1


def sign_name(sign: int) -> str:
    if 0 <= sign < SIGN_COUNT:
        return ZODIAC_SIGNS[sign]
    return "Unknown"


def format_degree(degree: float) -> str:
    """Formate un degré décimal en D°M'S" (minutes et secondes tronquées)."""
    deg = math.floor(degree)
    minutes_f = (degree - deg) * 60
    minutes = math.floor(minutes_f)
    seconds = math.floor((minutes_f - minutes) * 60)
    return f"{deg}°{minutes}'{seconds}\""


def abbreviation(label: str) -> str:
    """Abréviation à deux lettres d'un libellé de position."""
    try:
        return BODY_ABBREVIATIONS[Body(label)]
    except ValueError:
        return label[:2]


def positions_in_sign(positions: Iterable[ChartPosition], sign: int) -> list[ChartPosition]:
    return [p for p in positions if p.sign == sign]


def grid_cells() -> list[tuple[int, int, int]]:
    """Cases actives de la grille: `(ligne, colonne, signe)` dans l'ordre de lecture."""
    return [
        (row, col, sign)
        for row, line in enumerate(SOUTH_INDIAN_GRID)
        for col, sign in enumerate(line)
        if sign is not None
    ]

"""Construction des cartes Rasi et Bhav à partir des longitudes brutes.

Objectif du module
------------------
- Transformer un mapping {corps: longitude} en positions (signe, degré) et signe ascendant.
- Ajouter les cuspides de maisons (H1..H12) pour la carte Bhav.
- Disposer une carte sur la grille fixe d'Inde du Sud pour l'affichage.

Politique sur les cuspides: stricte. Un jeu différent de "House 1".."House 12" lève
`MalformedCusps`, pour la carte natale comme pour la carte de transit.
"""

from __future__ import annotations

from typing import Any

from southchart.domain.entities import (
    BODY_ORDER,
    Body,
    ChartData,
    ChartPosition,
    HouseCusps,
    PlanetLongitudes,
    PositionKind,
)
from southchart.domain.errors import MalformedCusps, MissingField
from southchart.domain.geometry import (
    abbreviation,
    format_degree,
    grid_cells,
    house_number,
    positions_in_sign,
    sign_degree,
    sign_name,
    sign_of,
)

HOUSE_PREFIX = "House "
HOUSE_LABELS: tuple[str, ...] = tuple(f"{HOUSE_PREFIX}{i}" for i in range(1, 13))


def _ascendant_sign(planets: PlanetLongitudes) -> int:
    if Body.ASCENDANT not in planets:
        raise MissingField(Body.ASCENDANT.value)
    return sign_of(planets[Body.ASCENDANT])


def _body_positions(planets: PlanetLongitudes) -> list[ChartPosition]:
    positions = []
    for body in sorted(planets, key=BODY_ORDER.__getitem__):
        if body.is_axis:
            continue
        sign, degree = sign_degree(planets[body])
        positions.append(ChartPosition(sign=sign, degree=degree, label=body.value))
    return positions


def build_rasi_chart(planets: PlanetLongitudes) -> ChartData:
    """Carte Rasi: un emplacement par corps, l'Ascendant étant porté par `ascendant_sign`."""
    ascendant = _ascendant_sign(planets)
    return ChartData(positions=_body_positions(planets), ascendant_sign=ascendant)


def build_bhav_chart(planets: PlanetLongitudes, cusps: HouseCusps) -> ChartData:
    """Carte Bhav: positions Rasi plus une position par cuspide, libellée H1..H12."""
    ascendant = _ascendant_sign(planets)
    if len(cusps) != len(HOUSE_LABELS) or set(cusps) != set(HOUSE_LABELS):
        raise MalformedCusps(len(cusps))
    positions = _body_positions(planets)
    for house in HOUSE_LABELS:
        sign, degree = sign_degree(cusps[house])
        positions.append(
            ChartPosition(
                sign=sign,
                degree=degree,
                label="H" + house.removeprefix(HOUSE_PREFIX),
                kind=PositionKind.CUSP,
            )
        )
    return ChartData(positions=positions, ascendant_sign=ascendant)


def layout_south_indian(chart: ChartData) -> list[dict[str, Any]]:
    """Répartit une carte sur les 12 cases fixes de la grille d'Inde du Sud.

    La case du signe ascendant reçoit un marqueur d'axe synthétique (`As`) en tête.
    """
    cells = []
    for row, col, sign in grid_cells():
        is_ascendant = sign == chart.ascendant_sign
        occupants = positions_in_sign(chart.positions, sign)
        if is_ascendant:
            marker = ChartPosition(
                sign=sign, degree=0.0, label=Body.ASCENDANT.value, kind=PositionKind.AXIS
            )
            occupants = [marker, *occupants]
        cells.append(
            {
                "row": row,
                "col": col,
                "sign": sign,
                "sign_name": sign_name(sign),
                "house": house_number(sign, chart.ascendant_sign),
                "is_ascendant": is_ascendant,
                "occupants": [
                    {
                        "label": p.label,
                        "kind": p.kind.value,
                        "abbrev": abbreviation(p.label),
                        "degree": format_degree(p.degree),
                    }
                    for p in occupants
                ],
            }
        )
    return cells

"""Détection des conjonctions entre corps célestes.

La séparation angulaire est circulaire (359° et 2° sont à 3°). Les groupes sont la fermeture
transitive de la relation "en conjonction" (union-find): si A~B et B~C, alors {A, B, C} forment un
seul groupe même si A et C sont hors orbe, quel que soit l'ordre de découverte des paires.
"""

from __future__ import annotations

from itertools import combinations

from southchart.domain.entities import BODY_ORDER, Body, ConjunctionGroup, PlanetLongitudes
from southchart.domain.geometry import FULL_CIRCLE

DEFAULT_ORB = 8.0


def angular_separation(a: float, b: float) -> float:
    """Plus petite distance entre deux longitudes sur le cercle, dans [0, 180]."""
    diff = abs(a - b) % FULL_CIRCLE
    return min(diff, FULL_CIRCLE - diff)


def is_conjunction(a: float, b: float, orb: float = DEFAULT_ORB) -> bool:
    return angular_separation(a, b) <= orb


class _DisjointSet:
    def __init__(self, items):
        self._parent = {i: i for i in items}

    def find(self, item):
        root = item
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[item] != root:
            self._parent[item], item = root, self._parent[item]
        return root

    def union(self, a, b) -> None:
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return
        # La racine est toujours le corps le plus tôt dans l'ordre de l'enum.
        if BODY_ORDER[rb] < BODY_ORDER[ra]:
            ra, rb = rb, ra
        self._parent[rb] = ra


def find_conjunctions(
    planets: PlanetLongitudes, orb: float = DEFAULT_ORB
) -> list[ConjunctionGroup]:
    """Regroupe les corps en conjonction (orbe inclus); les corps isolés sont omis.

    Les groupes sont triés par leur premier corps et leurs membres suivent l'ordre de `Body`.
    """
    bodies = sorted(planets, key=BODY_ORDER.__getitem__)
    groups = _DisjointSet(bodies)
    for a, b in combinations(bodies, 2):
        if is_conjunction(planets[a], planets[b], orb):
            groups.union(a, b)

    members: dict[Body, list[Body]] = {}
    for body in bodies:
        members.setdefault(groups.find(body), []).append(body)

    return [
        ConjunctionGroup(bodies=group, longitudes=[planets[b] for b in group])
        for group in sorted(members.values(), key=lambda g: BODY_ORDER[g[0]])
        if len(group) >= 2
    ]

"""Tests pour la détection des conjonctions (séparation circulaire et fermeture transitive)."""

from __future__ import annotations

import itertools

import pytest

from southchart.domain.conjunctions import angular_separation, find_conjunctions, is_conjunction
from southchart.domain.entities import Body


def test_is_conjunction_wraps_around_zero() -> None:
    """Teste 359° et 2° en conjonction (3° de séparation à travers 0°)."""
    assert is_conjunction(359, 2, orb=8)
    assert is_conjunction(2, 359, orb=8)


def test_is_conjunction_out_of_orb() -> None:
    assert not is_conjunction(10, 25, orb=8)


def test_is_conjunction_orb_is_inclusive() -> None:
    assert is_conjunction(10, 18, orb=8)
    assert not is_conjunction(10, 18.01, orb=8)


@pytest.mark.parametrize(
    ("a", "b", "expected"),
    [(0, 180, 180), (10, 350, 20), (350, 10, 20), (5, 5, 0), (720, 1, 1)],
)
def test_angular_separation(a: float, b: float, expected: float) -> None:
    assert angular_separation(a, b) == pytest.approx(expected)


def test_find_conjunctions_single_group() -> None:
    """Teste Soleil 10°, Lune 12°, Mars 100°: un groupe {Soleil, Lune}, Mars exclu."""
    groups = find_conjunctions({Body.SUN: 10.0, Body.MOON: 12.0, Body.MARS: 100.0}, orb=8)
    assert len(groups) == 1
    assert groups[0].bodies == [Body.SUN, Body.MOON]
    assert groups[0].longitudes == [10.0, 12.0]


def test_find_conjunctions_transitive_chain() -> None:
    """Teste A~B, B~C avec A et C hors orbe: un seul groupe de trois."""
    planets = {Body.SUN: 0.0, Body.MOON: 7.0, Body.MARS: 14.0}
    assert not is_conjunction(planets[Body.SUN], planets[Body.MARS], orb=8)
    groups = find_conjunctions(planets, orb=8)
    assert [g.bodies for g in groups] == [[Body.SUN, Body.MOON, Body.MARS]]


def test_find_conjunctions_bridging_pair_merges_groups() -> None:
    """Teste qu'une paire découverte tard fusionne deux groupes déjà formés.

    Sun~Jupiter et Moon~Venus apparaissent avant la paire Jupiter~Venus qui les relie.
    """
    planets = {
        Body.SUN: 100.0,
        Body.MOON: 119.0,
        Body.JUPITER: 106.0,
        Body.VENUS: 113.0,
    }
    groups = find_conjunctions(planets, orb=8)
    assert len(groups) == 1
    assert groups[0].bodies == [Body.SUN, Body.MOON, Body.JUPITER, Body.VENUS]


def test_find_conjunctions_independent_of_insertion_order() -> None:
    planets = {
        Body.SUN: 355.0,
        Body.MOON: 3.0,
        Body.MARS: 9.0,
        Body.SATURN: 200.0,
        Body.RAHU: 205.0,
        Body.KETU: 25.0,
    }
    expected = find_conjunctions(planets)
    for order in itertools.permutations(planets):
        shuffled = {b: planets[b] for b in order}
        assert find_conjunctions(shuffled) == expected
    assert [g.bodies for g in expected] == [
        [Body.SUN, Body.MOON, Body.MARS],
        [Body.SATURN, Body.RAHU],
    ]


def test_find_conjunctions_none() -> None:
    planets = {b: i * 30.0 for i, b in enumerate(Body)}
    assert find_conjunctions(planets, orb=8) == []


def test_find_conjunctions_empty() -> None:
    assert find_conjunctions({}) == []

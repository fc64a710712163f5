import pytest

from slimefield.archetypes import (
    BASE_TRAITS, TRAIT_NAMES, Archetype, archetype_bonus, archetype_from_code, species_name,
)
from slimefield.colony import (
    Colony, founder_traits, hsl_to_rgb, jitter_color, mutate_traits, vivid_color,
)
from slimefield.noise import SeededRandom


def test_archetype_lookup():
    assert archetype_from_code("MAT") is Archetype.MAT
    assert archetype_from_code(Archetype.SCOUT) is Archetype.SCOUT
    assert archetype_from_code("NOPE") is None
    assert archetype_from_code(None) is None
    assert len(Archetype) == 6


def test_archetype_bonus_terms():
    assert list(archetype_bonus(Archetype.FLOAT, [1, 0])) == pytest.approx([0.5, -0.08])
    assert list(archetype_bonus(Archetype.TOWER, [1, 0])) == pytest.approx([-0.12, 0.0])
    assert list(archetype_bonus(Archetype.MAT, [1, 0])) == [0.0, 0.0]


def test_founder_traits_near_baseline():
    rng = SeededRandom(5)
    for arch in Archetype:
        traits = founder_traits(arch, rng, 0.05)
        assert set(traits) == set(TRAIT_NAMES)
        for k, v in traits.items():
            assert 0.0 <= v <= 1.0
            assert abs(v - BASE_TRAITS[arch][k]) <= 0.05 + 1e-12


def test_mutation_is_bounded():
    rng = SeededRandom(11)
    parent = {k: 0.5 for k in TRAIT_NAMES}
    for _ in range(200):
        child = mutate_traits(parent, 1.0, rng, 0.12)
        assert all(abs(child[k] - 0.5) <= 0.12 + 1e-12 for k in TRAIT_NAMES)
    edge = {k: 1.0 for k in TRAIT_NAMES}
    assert all(v <= 1.0 for v in mutate_traits(edge, 1.0, rng).values())
    assert mutate_traits(parent, 0.0, rng) == parent


def test_colours():
    rng = SeededRandom(2)
    h, s, l = vivid_color(rng)
    assert 0 <= h < 360 and 70 <= s < 95 and 45 <= l < 60
    h2, s2, l2 = jitter_color((355.0, 97.0, 66.0), rng, 14.0)
    assert 0 <= h2 < 360 and 60 <= s2 <= 98 and 35 <= l2 <= 68
    assert hsl_to_rgb((0.0, 100.0, 50.0)) == (255, 0, 0)


def test_species_name_is_deterministic():
    a = species_name(Archetype.CORD, SeededRandom(8))
    assert a == species_name(Archetype.CORD, SeededRandom(8))
    assert a.endswith("-funis")


def test_colony_dict_round_trip():
    col = Colony(id=3, archetype=Archetype.EAT, name="Engulfer", species="Myxo vias-vorax",
                 x=4, y=2, traits={k: 0.25 for k in TRAIT_NAMES}, color=(10.0, 80.0, 50.0),
                 parent_id=1, children=[7, 9], generation=2, born=40)
    d = col.to_dict()
    assert d["type"] == "EAT"
    assert Colony.from_dict(d) == col

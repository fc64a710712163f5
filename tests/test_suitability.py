import numpy as np
import pytest

from slimefield.archetypes import Archetype
from slimefield.suitability import connectivity, light_fit, suitability, suitability_at
from slimefield.world import EMPTY


def all_tiles(world):
    ys, xs = np.mgrid[0:world.H, 0:world.W]
    return xs.ravel(), ys.ravel()


def test_scores_in_unit_range_for_every_archetype(empty_world):
    w = empty_world
    xs, ys = all_tiles(w)
    for i, arch in enumerate(Archetype):
        col = w.spawn_colony(arch.value, 2 + 3 * i, 5)
        s = suitability(w, col, xs, ys)
        assert s.shape == xs.shape
        assert s.min() >= 0.0 and s.max() <= 1.0


def test_degenerate_extremes_stay_bounded(empty_world):
    w = empty_world
    col = w.spawn_colony("EAT", 4, 4)
    xs, ys = all_tiles(w)
    for value, trail, mass in ((0.0, 0.0, 100.0), (1.0, 1e6, 0.0)):
        w.humidity[...] = value
        w.light[...] = value
        w.nutrient[...] = value
        w.trail.trail[...] = trail
        w.biomass[...] = mass
        s = suitability(w, col, xs, ys)
        assert s.min() >= 0.0 and s.max() <= 1.0

    w.nutrient[...] = np.nan
    s = suitability(w, col, xs, ys)
    assert np.isfinite(s).all()
    assert s.min() >= 0.0 and s.max() <= 1.0


def test_scoring_does_not_mutate(world):
    col = next(iter(world.colonies.values()))
    before = world.get_snapshot()
    suitability(world, col, *all_tiles(world))
    after = world.get_snapshot()
    for name, grid in before["grids"].items():
        assert np.array_equal(grid, after["grids"][name])
    assert before["rng_state"] == after["rng_state"]


def test_scalar_wrapper(world):
    col = next(iter(world.colonies.values()))
    v = suitability_at(world, col, col.x, col.y)
    assert isinstance(v, float)
    assert v == suitability(world, col, [col.x], [col.y])[0]


def test_connectivity_counts_in_grid_neighbours():
    tiles = np.full((3, 3), EMPTY)
    tiles[0, 1] = 7
    tiles[1, 0] = 7
    conn = connectivity(tiles, 7, np.array([0, 1]), np.array([0, 1]))
    assert conn[0] == 1.0
    assert conn[1] == 0.5


def test_shade_preference_without_photosynthesis():
    light = np.array([0.0, 1.0])
    assert list(light_fit(light, 0.3, 0.0)) == pytest.approx([1.0, 0.4])


def test_type_pressure_scales_base_score(empty_world):
    w = empty_world
    col = w.spawn_colony("MAT", 3, 3)
    col.traits["transport"] = 0.0
    w.humidity[...] = 0.5
    w.light[...] = 0.5
    w.nutrient[...] = 0.5
    w.water[...] = 0
    w.trail.trail[...] = 0.0
    w.biomass[...] = 0.0

    w.type_pressure[Archetype.MAT] = 1.0
    full = suitability_at(w, col, 20, 10)
    w.type_pressure[Archetype.MAT] = 0.55
    damped = suitability_at(w, col, 20, 10)
    assert full > 0.0
    assert damped == pytest.approx(0.55 * full)

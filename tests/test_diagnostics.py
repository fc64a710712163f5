import numpy as np

from slimefield.diagnostics import field_violations, nutrient_report, population_report


def test_fresh_world_is_clean(world):
    assert field_violations(world) == []


def test_reports_bad_values(world):
    world.nutrient[0, 0] = np.nan
    world.light[1, 1] = 1.5
    world.tiles[2, 2] = 4242
    problems = field_violations(world)
    assert any(p.startswith("nutrient") for p in problems)
    assert any(p.startswith("light") for p in problems)
    assert any("dangling" in p for p in problems)


def test_nutrient_report(world):
    r = nutrient_report(world)
    assert r["min"] <= r["mean"] <= r["max"]
    assert r["hotspots"] == len(world.hotspots)


def test_population_report(world):
    r = population_report(world)
    assert r["total"]["colonies"] == world.pop
    assert sum(v["colonies"] for k, v in r.items() if k != "total") == world.pop
    assert sum(v["tiles"] for k, v in r.items() if k != "total") == r["total"]["tiles"]


def test_reports_negative_biomass_anywhere(world):
    ys, xs = np.nonzero(world.tiles == -1)
    world.biomass[ys[0], xs[0]] = -0.1
    assert any("negative" in p for p in field_violations(world))

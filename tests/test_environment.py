import numpy as np
import pytest

from slimefield.config import Config
from slimefield.noise import SeededRandom, ValueNoise
from slimefield.environment import (
    drift, drift_hotspots, erode_isolated, generate_environment, hotspot_count, perturb,
    pool_moisture, smooth_binary_grid, water_mask,
)


def test_layers_shape_and_ranges(world):
    for name in ("humidity", "light", "nutrient"):
        grid = getattr(world, name)
        assert grid.shape == (world.H, world.W)
        assert grid.min() >= 0.0 and grid.max() <= 1.0
    assert set(np.unique(world.water)) <= {0, 1}
    assert world.water.mean() <= 0.5


def test_hotspot_count():
    cfg = Config()
    assert hotspot_count(64, 36, cfg) == 5
    assert hotspot_count(10, 10, cfg) == 4


def test_hotspots_inside_grid(world):
    for hs in world.hotspots:
        assert 0 <= hs.x < world.W and 0 <= hs.y < world.H
        assert 0.06 <= hs.strength <= 0.10
        assert 3 <= hs.radius <= 5


def test_majority_smoothing():
    lone = np.zeros((7, 7), dtype=np.uint8)
    lone[3, 3] = 1
    assert smooth_binary_grid(lone).sum() == 0

    full = np.ones((5, 5), dtype=np.uint8)
    assert smooth_binary_grid(full).all()


def test_erosion_keeps_connected_pairs():
    m = np.zeros((5, 5), dtype=np.uint8)
    m[0, 0] = 1
    m[3, 2] = m[3, 3] = 1
    out = erode_isolated(m)
    assert out[0, 0] == 0
    assert out[3, 2] == 1 and out[3, 3] == 1


def test_drift_is_small_and_bounded(world):
    before_h = world.humidity.copy()
    before_n = world.nutrient.copy()
    drift(world)
    d = world.cfg.drift_scale * world.speed
    assert np.abs(world.humidity - before_h).max() <= d + 1e-12
    assert world.humidity.min() >= 0.0 and world.humidity.max() <= 1.0
    assert np.array_equal(world.nutrient, before_n)


def test_perturbation_targets_named_fields(world):
    light = world.light.copy()
    hum = world.humidity.copy()
    perturb(world, {"humidity": (0.1, 0.1)})
    assert np.allclose(world.humidity, np.clip(hum + 0.1, 0.0, 1.0))
    assert np.array_equal(world.light, light)


def test_default_shake_keeps_ranges(world):
    world.apply_environmental_perturbation()
    for name in ("humidity", "light", "nutrient"):
        grid = getattr(world, name)
        assert grid.min() >= 0.0 and grid.max() <= 1.0


def test_unknown_perturbation_field(world):
    with pytest.raises(ValueError):
        world.apply_environmental_perturbation({"salinity": (0.0, 0.1)})


def test_hotspot_drift_stays_in_bounds(world):
    for _ in range(50):
        drift_hotspots(world)
    for hs in world.hotspots:
        assert 2 <= hs.x <= world.W - 3
        assert 2 <= hs.y <= world.H - 3


def test_reseed_keeps_colonies(world):
    ids = list(world.colonies)
    world.tick()
    world.reseed_environment()
    assert list(world.colonies) == ids
    assert world.trail.total() == 0.0


def test_water_mask_hits_target_fraction():
    seed = SeededRandom(4).uniform(0.0, 1.0, (60, 80))
    for fraction in (0.22, 0.26, 0.30):
        assert water_mask(seed, fraction).mean() == pytest.approx(fraction, abs=2.0 / seed.size)


def test_pools_raise_humidity_and_nutrient():
    humidity = np.array([[0.3, 0.3], [0.95, 1.0]])
    nutrient = np.array([[0.5, 0.5], [0.99, 0.2]])
    water = np.array([[1, 0], [1, 1]], dtype=np.uint8)
    pool_moisture(humidity, nutrient, water)
    assert humidity[0, 0] == pytest.approx(0.3 * 0.88 + 0.12)
    assert nutrient[0, 0] == pytest.approx(0.54)
    assert humidity[0, 1] == 0.3 and nutrient[0, 1] == 0.5
    assert humidity[1, 1] <= 1.0 and nutrient[1, 0] == 1.0


def test_generated_pools_are_wetter():
    env = generate_environment(ValueNoise(21), SeededRandom(21), 64, 36)
    wet = env["water"] > 0
    if wet.any():
        assert env["humidity"][wet].min() >= 0.12


def test_reseed_rebuilds_grids_in_place(world):
    humidity, water = world.humidity, world.water
    before = humidity.copy()
    world.reseed_environment()
    assert world.humidity is humidity
    assert world.water is water
    assert not np.array_equal(world.humidity, before)

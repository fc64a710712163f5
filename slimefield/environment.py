"""
slimefield: Environment generation
==================================
Builds the four environment layers from layered value noise:
  - humidity, light, nutrient: continuous in [0,1]
  - water: binary pools, thresholded from a blended "water seed" and then
    cleaned with a majority cellular automaton and an erosion pass

Also holds the slower environmental processes that act on the same layers:
random-walk drift, the "seasonal shake" perturbation, and hotspot drift.
"""

import logging
from dataclasses import dataclass

import numpy as np
from scipy.ndimage import convolve

logger = logging.getLogger(__name__)

ENV_FIELDS = ("humidity", "light", "nutrient")

# Default (lo, hi) noise bands for the seasonal shake.
PERTURBATION_BANDS = {
    "humidity": (-0.2, 0.25),
    "light": (-0.15, 0.2),
    "nutrient": (-0.1, 0.3),
}

_MOORE = np.array([[1, 1, 1],
                   [1, 0, 1],
                   [1, 1, 1]], dtype=np.int32)


@dataclass
class Hotspot:
    x: int
    y: int
    strength: float
    radius: int

    def to_dict(self):
        return {"x": self.x, "y": self.y, "strength": self.strength, "radius": self.radius}


# ─────────────────────────────────────────────────────
# Water pools
# ─────────────────────────────────────────────────────

def water_neighbors(mask):
    """Count water tiles among the 8 neighbours; off-grid counts as land."""
    return convolve(mask.astype(np.int32), _MOORE, mode="constant", cval=0)


def smooth_binary_grid(mask, iters=2):
    """Majority rule: >=5 water neighbours -> water, <=2 -> land, else keep."""
    a = mask.astype(np.uint8)
    for _ in range(iters):
        cnt = water_neighbors(a)
        b = a.copy()
        b[cnt >= 5] = 1
        b[cnt <= 2] = 0
        a = b
    return a


def erode_isolated(mask):
    """Drop water tiles that have no water neighbour at all."""
    cnt = water_neighbors(mask)
    return ((mask > 0) & (cnt >= 1)).astype(np.uint8)


def percentile_threshold(values, p):
    ordered = np.sort(values, axis=None)
    i = int(np.floor(p * (ordered.size - 1)))
    return ordered[max(0, min(ordered.size - 1, i))]


def water_mask(water_seed, fraction):
    """Binary mask of the tiles whose seed lies above the (1 - fraction) percentile."""
    thr = percentile_threshold(water_seed, 1.0 - fraction)
    return (water_seed > thr).astype(np.uint8)


def pool_moisture(humidity, nutrient, water):
    """Pools pull humidity and nutrients up, in place."""
    wet = water > 0
    humidity[wet] = np.clip(humidity[wet] * 0.88 + 0.12, 0.0, 1.0)
    nutrient[wet] = np.clip(nutrient[wet] + 0.04, 0.0, 1.0)


# ─────────────────────────────────────────────────────
# Build
# ─────────────────────────────────────────────────────

def generate_environment(noise, rng, width, height):
    """Return dict of humidity/light/nutrient/water grids shaped (height, width)."""
    s_hum = rng.uniform(120, 420)
    s_lig = rng.uniform(200, 700)
    s_nut = rng.uniform(150, 600)
    s_wat = rng.uniform(180, 520)

    ys, xs = np.mgrid[0:height, 0:width]
    nx = xs / width
    ny = ys / height

    h0 = noise.fractal(nx * s_hum, ny * s_hum, 4, 2.0, 0.55)
    l0 = noise.fractal(1000 + nx * s_lig, 1000 + ny * s_lig, 4, 2.0, 0.5)
    n0 = noise.fractal(2000 + nx * s_nut, 2000 + ny * s_nut, 5, 2.2, 0.55)
    basin = noise.fractal(3000 + nx * s_wat, 3000 + ny * s_wat, 5, 2.2, 0.55)

    band = 0.5 + 0.5 * np.sin((ny - 0.2) * np.pi * 2)
    light = np.clip(0.25 + 0.75 * l0 * band, 0.0, 1.0)
    humidity = np.clip(0.2 + 0.8 * h0 * (1.0 - 0.25 * np.abs(nx - 0.5)), 0.0, 1.0)
    nutrient = np.clip(0.3 + 0.7 * n0, 0.0, 1.0)

    water_seed = 0.55 * humidity + 0.3 * (1.0 - light) + 0.6 * (basin - 0.5)
    desired = 0.22 + 0.08 * rng.random()
    water = erode_isolated(smooth_binary_grid(water_mask(water_seed, desired), 2))
    pool_moisture(humidity, nutrient, water)

    return {"humidity": humidity, "light": light, "nutrient": nutrient, "water": water}


def hotspot_count(width, height, cfg):
    return max(cfg.hotspot_min_count, (width * height) // cfg.hotspot_area_per)


def generate_hotspots(rng, width, height, cfg):
    s_lo, s_hi = cfg.hotspot_strength
    r_lo, r_hi = cfg.hotspot_radius
    spots = []
    for _ in range(hotspot_count(width, height, cfg)):
        spots.append(Hotspot(
            x=rng.index(width),
            y=rng.index(height),
            strength=rng.uniform(s_lo, s_hi),
            radius=r_lo + rng.index(r_hi - r_lo + 1),
        ))
    return spots


def _store(world, name, values):
    """Copy into the existing grid when shapes agree, otherwise bind a new one."""
    current = getattr(world, name, None)
    if current is not None and current.shape == values.shape and current.dtype == values.dtype:
        current[...] = values
    else:
        setattr(world, name, values)


def build_environment(world):
    """(Re)populate the world's environment layers and hotspots.

    Grids that already exist with the right shape are overwritten in place, so
    references held by a viewer stay valid across a reseed.
    """
    env = generate_environment(world.noise, world.rng, world.W, world.H)
    for name in ("humidity", "light", "nutrient", "water"):
        _store(world, name, env[name])
    _store(world, "nutrient_scratch", np.zeros_like(env["nutrient"]))
    world.hotspots = generate_hotspots(world.rng, world.W, world.H, world.cfg)
    logger.debug("environment built: %dx%d, water=%.2f, hotspots=%d, nutrient=%.3f",
                 world.W, world.H, float(world.water.mean()), len(world.hotspots),
                 float(world.nutrient.mean()))


# ─────────────────────────────────────────────────────
# Slow processes
# ─────────────────────────────────────────────────────

def drift(world):
    """Random walk on humidity and light (humidity draws first)."""
    d = world.cfg.drift_scale * world.speed
    for name in ("humidity", "light"):
        grid = getattr(world, name)
        grid += world.rng.uniform(-d, d, grid.shape)
        np.clip(grid, 0.0, 1.0, out=grid)


def perturb(world, deltas=None):
    """Seasonal shake: add bounded uniform noise to the named fields."""
    bands = PERTURBATION_BANDS if deltas is None else deltas
    unknown = set(bands) - set(ENV_FIELDS)
    if unknown:
        raise ValueError(f"unknown environment field(s): {sorted(unknown)}")
    for name in ENV_FIELDS:
        if name not in bands:
            continue
        lo, hi = bands[name]
        grid = getattr(world, name)
        grid += world.rng.uniform(lo, hi, grid.shape)
        np.clip(grid, 0.0, 1.0, out=grid)


def _drift_bounds(n):
    return (2, n - 3) if n >= 5 else (0, n - 1)


def drift_hotspots(world):
    amt = world.cfg.hotspot_drift
    x_lo, x_hi = _drift_bounds(world.W)
    y_lo, y_hi = _drift_bounds(world.H)
    for hs in world.hotspots:
        hs.x = int(np.floor(np.clip(hs.x + world.rng.uniform(-amt, amt), x_lo, x_hi)))
        hs.y = int(np.floor(np.clip(hs.y + world.rng.uniform(-amt, amt), y_lo, y_hi)))

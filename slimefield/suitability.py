"""
slimefield: Suitability scoring
===============================
Fitness of a tile for a colony, in [0,1]. Chemotaxis (nutrient + saturated
trail, weighted by the archetype's behaviour profile) dominates; humidity and
light matching only break ties. Connectivity rewards contiguous growth,
crowding above the biomass capacity is penalised, and the archetype's current
type pressure damps dominant archetypes.

The scorer is vectorised over arrays of tile coordinates and never mutates
world state.
"""

import numpy as np

from slimefield.archetypes import Archetype, archetype_bonus
from slimefield.fields import saturate

NEIGHBORS4 = ((1, 0), (-1, 0), (0, 1), (0, -1))


def local_mean(grid, xs, ys):
    """Mean of each tile and its 4 neighbours, clamped at the edges."""
    H, W = grid.shape
    xl = np.clip(xs - 1, 0, W - 1)
    xr = np.clip(xs + 1, 0, W - 1)
    yu = np.clip(ys - 1, 0, H - 1)
    yd = np.clip(ys + 1, 0, H - 1)
    return (grid[ys, xs] + grid[ys, xl] + grid[ys, xr] + grid[yu, xs] + grid[yd, xs]) / 5.0


def connectivity(tiles, colony_id, xs, ys):
    """Fraction of in-grid 4-neighbours already owned by colony_id."""
    H, W = tiles.shape
    conn = np.zeros(xs.shape)
    neigh = np.zeros(xs.shape)
    for dx, dy in NEIGHBORS4:
        nx, ny = xs + dx, ys + dy
        inside = (nx >= 0) & (nx < W) & (ny >= 0) & (ny < H)
        owned = tiles[np.clip(ny, 0, H - 1), np.clip(nx, 0, W - 1)] == colony_id
        neigh += inside
        conn += inside & owned
    return np.where(neigh > 0, conn / np.maximum(neigh, 1.0), 0.0)


def light_fit(light, light_use, photosym):
    if photosym > 0:
        return 0.55 * (1.0 - np.abs(light - light_use)) + 0.45 * photosym * light
    # shade-preferring
    return 1.0 - 0.6 * light


def suitability(world, colony, xs, ys):
    c = world.cfg
    xs = np.atleast_1d(np.asarray(xs, dtype=np.int64))
    ys = np.atleast_1d(np.asarray(ys, dtype=np.int64))
    T = colony.traits
    B = colony.archetype.behavior

    h = np.clip(local_mean(world.humidity, xs, ys), 0.0, 1.0)
    l = np.clip(local_mean(world.light, xs, ys), 0.0, 1.0)
    n = np.clip(world.nutrient[ys, xs], 0.0, 1.0)
    w = world.water[ys, xs]

    water_need = min(1.0, max(0.0, T["water_need"]))
    light_use = min(1.0, max(0.0, T["light_use"]))
    photosym = min(1.0, max(0.0, T["photosym"]))

    water_fit = 1.0 - np.abs(h - water_need)
    lfit = light_fit(l, light_use, photosym)

    tr = saturate(world.trail.trail[ys, xs], c.trail_scale)
    denom = max(1e-6, B.nutrient_weight + B.trail_weight)
    chemo = (B.nutrient_weight * n + B.trail_weight * tr) / denom

    bonus = archetype_bonus(colony.archetype, w)
    base = np.clip(c.weight_water * water_fit + c.weight_light * lfit
                   + c.weight_chemo * chemo + bonus, 0.0, 1.0)

    transport = c.transport_bonus * T["transport"] * connectivity(world.tiles, colony.id, xs, ys)
    if colony.archetype is Archetype.SCOUT:
        transport = transport + c.scout_bonus

    cap = max(0.1, world.capacity)
    density = np.maximum(0.0, world.biomass[ys, xs])
    cap_penalty = -c.capacity_penalty * np.clip(density - cap, 0.0, 1.0)

    p_lo, p_hi = c.pressure_clamp
    pressure = min(p_hi, max(p_lo, world.type_pressure.get(colony.archetype, 1.0)))

    out = np.clip(base * pressure + transport + cap_penalty, 0.0, 1.0)
    return np.where(np.isfinite(out), out, 0.0)


def suitability_at(world, colony, x, y):
    return float(suitability(world, colony, [x], [y])[0])

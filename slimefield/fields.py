"""
slimefield: Field dynamics
==========================
Recurring per-tick field processes:
  - chemical trail: diffusion toward the 4-neighbour mean, then evaporation
  - nutrients: diffusion, relaxation toward a humidity/water target,
    hotspot injection

Boundary policy: clamped edges. A neighbour that would fall outside the grid
reads the tile itself. The same policy is used by the suitability scorer's
local averaging.

Both processes are double buffered: the new values are written into a
scratch grid of identical shape and the two grids are swapped.
"""

import numpy as np


def neighbor_sum(grid, out):
    """Write the clamped-edge 4-neighbour sum of grid into out."""
    out[...] = 0.0
    out[1:, :] += grid[:-1, :]      # up
    out[0, :] += grid[0, :]
    out[:-1, :] += grid[1:, :]      # down
    out[-1, :] += grid[-1, :]
    out[:, 1:] += grid[:, :-1]      # left
    out[:, 0] += grid[:, 0]
    out[:, :-1] += grid[:, 1:]      # right
    out[:, -1] += grid[:, -1]
    return out


def saturate(v, k):
    """1 - exp(-k v): maps trail mass in [0, inf) onto [0, 1)."""
    return 1.0 - np.exp(-k * np.asarray(v, dtype=np.float64))


# ─────────────────────────────────────────────────────
# Trail
# ─────────────────────────────────────────────────────

class TrailField:
    def __init__(self, height, width, cfg):
        self.cfg = cfg
        self.trail = np.zeros((height, width))
        self.scratch = np.zeros((height, width))

    def diffuse_evaporate(self):
        c = self.cfg
        nxt = neighbor_sum(self.trail, self.scratch)
        nxt *= c.trail_diffusion * 0.25
        nxt += (1.0 - c.trail_diffusion) * self.trail
        nxt *= c.trail_evaporation
        self.trail, self.scratch = nxt, self.trail

    def deposit(self, x, y, amount):
        self.trail[y, x] += amount

    def saturation(self, ys=None, xs=None):
        if ys is None:
            return saturate(self.trail, self.cfg.trail_scale)
        return saturate(self.trail[ys, xs], self.cfg.trail_scale)

    def clear(self):
        self.trail.fill(0.0)
        self.scratch.fill(0.0)

    def total(self):
        return float(self.trail.sum())


# ─────────────────────────────────────────────────────
# Nutrients
# ─────────────────────────────────────────────────────

def nutrient_target(humidity, water, cfg):
    return np.clip(cfg.nutrient_target_base
                   + cfg.nutrient_target_humidity * humidity
                   + cfg.nutrient_target_water * water, 0.0, 1.0)


def inject_hotspot(grid, hs):
    """Add strength * (1 - d/radius) to every tile within the hotspot radius."""
    H, W = grid.shape
    r = int(hs.radius)
    y0, y1 = max(0, hs.y - r), min(H, hs.y + r + 1)
    x0, x1 = max(0, hs.x - r), min(W, hs.x + r + 1)
    if y0 >= y1 or x0 >= x1:
        return
    yy, xx = np.mgrid[y0:y1, x0:x1]
    d = np.sqrt((yy - hs.y) ** 2 + (xx - hs.x) ** 2)
    inside = d <= hs.radius
    grid[y0:y1, x0:x1] += np.where(inside, hs.strength * (1.0 - d / hs.radius), 0.0)


def nutrient_dynamics(world):
    c = world.cfg
    n = world.nutrient
    nxt = neighbor_sum(n, world.nutrient_scratch)
    nxt *= c.nutrient_diffusion * 0.25
    nxt += (1.0 - c.nutrient_diffusion) * n
    nxt += c.nutrient_regen * (nutrient_target(world.humidity, world.water, c) - nxt)
    for hs in world.hotspots:
        inject_hotspot(nxt, hs)
    np.clip(nxt, 0.0, 1.0, out=nxt)
    world.nutrient, world.nutrient_scratch = nxt, n

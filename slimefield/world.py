"""
slimefield: World
=================
The simulation context. Owns every grid (environment layers, trail, tile
ownership, tile biomass), the colony collection and the seeded RNG stream,
and advances them through a fixed per-tick pipeline:

  1. environmental drift (every drift_interval ticks)
  2. colony pass in rotating order: age, fitness, expansion, own biomass,
     reproduction
  3. trail diffusion + evaporation
  4. starvation / growth sweep
  5. nutrient dynamics (hotspot drift first on its interval)
  6. type-pressure refresh (every pressure_interval ticks)
  7. pruning of colonies that own no tile (every prune_interval ticks)

The RNG stream is consumed in exactly this order; changing the order
changes every run for a given seed.
"""

import copy
import logging
import math

import numpy as np

from slimefield.archetypes import ARCHETYPE_ORDER, archetype_from_code, species_name
from slimefield.colony import (
    Colony, clamp, founder_traits, jitter_color, mutate_traits, vivid_color,
)
from slimefield.config import PARAMETER_RANGES, Config
from slimefield.environment import (
    Hotspot, build_environment, drift, drift_hotspots, perturb,
)
from slimefield.fields import TrailField, nutrient_dynamics
from slimefield.noise import SeededRandom, ValueNoise
from slimefield.suitability import NEIGHBORS4, suitability, suitability_at

logger = logging.getLogger(__name__)

EMPTY = -1

GRID_NAMES = ("humidity", "light", "nutrient", "water", "tiles", "biomass")

_DX = np.array([d[0] for d in NEIGHBORS4], dtype=np.int64)
_DY = np.array([d[1] for d in NEIGHBORS4], dtype=np.int64)


def config_values(cfg):
    return {k: getattr(cfg, k) for k in dir(Config) if not k.startswith("_")}


class World:
    def __init__(self, cfg=None, seed=None, width=None, height=None):
        self.cfg = cfg or Config()
        c = self.cfg
        self.speed = c.speed
        self.mutation_rate = c.mutation_rate
        self.capacity = c.capacity
        self.paused = False
        self.setup(c.random_seed if seed is None else seed,
                   c.width if width is None else width,
                   c.height if height is None else height)
        if c.initial_colonies > 0:
            self.seed_founders(c.initial_colonies)
            self.update_type_pressure(force=True)

    @property
    def pop(self):
        return len(self.colonies)

    # ── Lifecycle ──

    def setup(self, seed, width, height):
        """(Re)initialise environment, clear colonies, reset the tick counter."""
        width, height = int(width), int(height)
        if width < 1 or height < 1:
            raise ValueError(f"world size must be positive, got {width}x{height}")
        self.seed = seed
        self.W, self.H = width, height
        self.rng = SeededRandom(seed)
        self.noise = ValueNoise(seed)
        self.timestep = 0
        self.next_id = 1
        self.colonies = {}
        self.tiles = np.full((height, width), EMPTY, dtype=np.int64)
        self.biomass = np.zeros((height, width))
        self.trail = TrailField(height, width, self.cfg)
        build_environment(self)
        self.type_pressure = {a: 1.0 for a in ARCHETYPE_ORDER}
        self._last_type_counts = None
        self._last_pressure_update = 0
        self.stats_history = []
        self.update_type_pressure(force=True)

    def reseed_environment(self):
        """Rebuild the environment layers from the current stream; keep colonies."""
        build_environment(self)
        self.trail.clear()

    def seed_founders(self, count):
        founders = []
        for _ in range(count):
            arch = ARCHETYPE_ORDER[self.rng.index(len(ARCHETYPE_ORDER))]
            x = self.rng.index(self.W)
            y = self.rng.index(self.H)
            founders.append(self._new_colony(arch, x, y))
        return founders

    # ── Commands ──

    def spawn_colony(self, code, x, y):
        """Place a founder colony; None if the archetype code is unknown."""
        arch = archetype_from_code(code)
        if arch is None:
            logger.warning("spawn_colony: unknown archetype %r", code)
            return None
        x, y = self._clamp_xy(x, y)
        return self._new_colony(arch, x, y)

    def apply_environmental_perturbation(self, deltas=None):
        perturb(self, deltas)

    def set_parameter(self, name, value):
        if name not in PARAMETER_RANGES:
            raise KeyError(name)
        lo, hi = PARAMETER_RANGES[name]
        value = clamp(float(value), lo, hi)
        setattr(self, name, value)
        return value

    # ── Colonies ──

    def _clamp_xy(self, x, y):
        return (int(clamp(int(round(x)), 0, self.W - 1)),
                int(clamp(int(round(y)), 0, self.H - 1)))

    def _take_id(self):
        cid = self.next_id
        self.next_id += 1
        return cid

    def _new_colony(self, arch, x, y):
        c = self.cfg
        traits = founder_traits(arch, self.rng, c.founder_jitter)
        color = vivid_color(self.rng)
        col = Colony(
            id=self._take_id(), archetype=arch, name=arch.display_name,
            species=species_name(arch, self.rng), x=x, y=y,
            traits=traits, color=color, born=self.timestep,
        )
        self.colonies[col.id] = col
        self.tiles[y, x] = col.id
        self.biomass[y, x] = max(self.biomass[y, x], c.founder_tile_biomass)
        self.trail.deposit(x, y, arch.behavior.deposit)
        return col

    def _spawn_child(self, parent, x, y):
        c = self.cfg
        traits = mutate_traits(parent.traits, self.mutation_rate, self.rng, c.mutation_sigma)
        color = jitter_color(parent.color, self.rng, c.child_color_jitter)
        child = Colony(
            id=self._take_id(), archetype=parent.archetype, name=parent.name,
            species=parent.species, x=x, y=y, traits=traits, color=color,
            biomass=c.child_biomass, generation=parent.generation + 1,
            parent_id=parent.id, born=self.timestep,
        )
        parent.children.append(child.id)
        self.colonies[child.id] = child
        self.tiles[y, x] = child.id
        self.biomass[y, x] = c.child_tile_biomass
        self.trail.deposit(x, y, parent.archetype.behavior.deposit)
        return child

    # ── Expansion & competition ──

    def _candidates(self, col):
        """In-grid 4-neighbours of owned tiles inside the sensing window, scan order."""
        r = col.archetype.behavior.sense_radius
        x0, x1 = max(0, col.x - r), min(self.W, col.x + r + 1)
        y0, y1 = max(0, col.y - r), min(self.H, col.y + r + 1)
        oy, ox = np.nonzero(self.tiles[y0:y1, x0:x1] == col.id)
        if oy.size == 0:
            return None, None
        cx = (ox[:, None] + x0 + _DX[None, :]).ravel()
        cy = (oy[:, None] + y0 + _DY[None, :]).ravel()
        inside = (cx >= 0) & (cx < self.W) & (cy >= 0) & (cy < self.H)
        cx, cy = cx[inside], cy[inside]
        _, first = np.unique(cy * self.W + cx, return_index=True)
        keep = np.sort(first)
        cx, cy = cx[keep], cy[keep]
        not_self = self.tiles[cy, cx] != col.id
        return cx[not_self], cy[not_self]

    def try_expand(self, col):
        c = self.cfg
        cx, cy = self._candidates(col)
        if cx is None or cx.size == 0:
            return False

        s = suitability(self, col, cx, cy)
        owner = self.tiles[cy, cx]
        empty = owner == EMPTY
        ok = np.ones(cx.size, dtype=bool)
        lo, hi = c.contest_band
        for k in np.nonzero(~empty)[0]:
            rival = self.colonies.get(int(owner[k]))
            if rival is None:
                # stale owner id: the tile is free
                empty[k] = True
                continue
            pressure_score = col.traits["predation"] - c.defense_weight * rival.traits["defense"]
            advantage = s[k] - suitability_at(self, rival, int(cx[k]), int(cy[k]))
            ok[k] = (pressure_score + advantage) > self.rng.uniform(lo, hi)

        cx, cy, s, empty = cx[ok], cy[ok], s[ok], empty[ok]
        if cx.size == 0:
            return False
        score = (s
                 + c.trail_bias * self.trail.saturation(cy, cx)
                 + np.where(empty, c.empty_bonus, 0.0)
                 + self.rng.uniform(0.0, c.claim_jitter, cx.size))
        best = int(np.argmax(score))
        self._claim(col, int(cx[best]), int(cy[best]))
        return True

    def _claim(self, col, x, y):
        c = self.cfg
        self.tiles[y, x] = col.id
        self.biomass[y, x] = clamp(self.biomass[y, x] + c.claim_biomass, 0.0, c.claim_biomass_cap)
        col.x, col.y = x, y
        self.trail.deposit(x, y, col.archetype.behavior.deposit * (0.5 + 0.5 * col.traits["flow"]))
        self.nutrient[y, x] = clamp(self.nutrient[y, x] - c.claim_nutrient_cost, 0.0, 1.0)

    # ── Colony turn ──

    def _colony_turn(self, col):
        c = self.cfg
        col.age += 1
        col.x, col.y = self._clamp_xy(col.x, col.y)
        col.fitness = suitability_at(self, col, col.x, col.y)
        if self.try_expand(col):
            col.biomass = clamp(col.biomass + c.colony_growth, 0.0, c.colony_biomass_cap)
        else:
            col.biomass *= c.decay_poor if col.fitness < c.poor_fitness else c.decay_normal
        self._maybe_reproduce(col)

    def _maybe_reproduce(self, col):
        c = self.cfg
        if col.biomass <= c.spawn_min_biomass or col.fitness <= c.spawn_min_fitness:
            return None
        pressure = self.type_pressure.get(col.archetype, 1.0)
        p = (c.spawn_base + c.spawn_mutation_scale * self.mutation_rate) * pressure
        if self.rng.random() >= p:
            return None
        dx, dy = NEIGHBORS4[self.rng.index(4)]
        bx, by = self._clamp_xy(col.x + dx * c.spawn_distance, col.y + dy * c.spawn_distance)
        if self.tiles[by, bx] != EMPTY:
            return None
        return self._spawn_child(col, bx, by)

    # ── Starvation / growth ──

    def _trait_by_id(self, trait):
        out = np.full(self.next_id, np.nan)
        for cid, col in self.colonies.items():
            if 0 <= cid < self.next_id:
                out[cid] = col.traits[trait]
        return out

    def starvation_sweep(self):
        c = self.cfg
        ys, xs = np.nonzero(self.tiles != EMPTY)
        if ys.size == 0:
            return
        ids = self.tiles[ys, xs]
        lookup = self._trait_by_id("photosym")
        valid = (ids >= 0) & (ids < lookup.size)
        ps = np.full(ids.shape, np.nan)
        ps[valid] = lookup[ids[valid]]

        dangling = np.isnan(ps)
        if dangling.any():
            self.tiles[ys[dangling], xs[dangling]] = EMPTY
            ys, xs, ps = ys[~dangling], xs[~dangling], ps[~dangling]

        n = self.nutrient[ys, xs]
        l = self.light[ys, xs]
        b = self.biomass[ys, xs]

        cutoff = c.non_photosynthetic_cutoff
        bonus = np.where(ps < cutoff,
                         c.non_photosynthetic_bonus * (1.0 - ps / max(cutoff, 1e-9)), 0.0)
        energy = 0.7 * n + 0.3 * ps * l + bonus * n

        consumed = np.minimum(n, c.nutrient_consumption * np.maximum(0.1, b))
        self.nutrient[ys, xs] = np.clip(n - consumed, 0.0, 1.0)

        thr = c.energy_threshold
        cap = self.capacity
        decay = 1.0 - np.minimum(c.starvation_scale * (thr - energy), c.starvation_max)
        grown = np.where(b < cap, np.minimum(cap, b + c.biomass_growth * (energy - thr)), b)
        b = np.where(energy < thr, b * decay, grown)
        self.biomass[ys, xs] = b

        dead = b < c.vacate_threshold
        self.tiles[ys[dead], xs[dead]] = EMPTY

    # ── Type pressure ──

    def tile_counts(self):
        """Tiles owned per archetype, plus the number of occupied tiles."""
        arch_idx = np.full(self.next_id, -1, dtype=np.int64)
        for cid, col in self.colonies.items():
            if 0 <= cid < self.next_id:
                arch_idx[cid] = ARCHETYPE_ORDER.index(col.archetype)
        ids = self.tiles[self.tiles != EMPTY]
        valid = (ids >= 0) & (ids < arch_idx.size)
        idx = arch_idx[ids[valid]]
        binc = np.bincount(idx[idx >= 0], minlength=len(ARCHETYPE_ORDER))
        return {a: int(binc[i]) for i, a in enumerate(ARCHETYPE_ORDER)}, int(ids.size)

    def update_type_pressure(self, force=False):
        c = self.cfg
        counts, filled = self.tile_counts()
        total = max(1, filled)
        if not force:
            stale = self.timestep - self._last_pressure_update >= c.pressure_max_age
            shifted = False
            if self._last_type_counts is not None:
                last_total = max(1, sum(self._last_type_counts.values()))
                shifted = any(
                    abs(counts[a] / total - self._last_type_counts[a] / last_total)
                    > c.pressure_change_trigger
                    for a in ARCHETYPE_ORDER)
            if not (stale or shifted):
                return False
        self.type_pressure = {
            a: clamp(1.0 - c.pressure_scale * counts[a] / total, c.pressure_floor, 1.0)
            for a in ARCHETYPE_ORDER
        }
        self._last_type_counts = counts
        self._last_pressure_update = self.timestep
        logger.debug("type pressure t=%d: %s", self.timestep,
                     {a.value: round(p, 3) for a, p in self.type_pressure.items()})
        return True

    # ── Cleanup ──

    def prune_colonies(self):
        alive = set(np.unique(self.tiles).tolist())
        dead = [cid for cid in self.colonies if cid not in alive]
        for cid in dead:
            del self.colonies[cid]
        if dead:
            logger.debug("pruned %d colonies at t=%d", len(dead), self.timestep)
        return len(dead)

    # ── Main loop ──

    def tick(self):
        c = self.cfg
        self.timestep += 1
        t = self.timestep

        if t % c.drift_interval == 0:
            drift(self)

        cols = list(self.colonies.values())
        n = len(cols)
        for k in range(n):
            self._colony_turn(cols[(k + t % n) % n])

        self.trail.diffuse_evaporate()
        self.starvation_sweep()
        if t % c.hotspot_drift_interval == 0:
            drift_hotspots(self)
        nutrient_dynamics(self)

        if t % c.pressure_interval == 0:
            self.update_type_pressure()
        if t % c.prune_interval == 0:
            self.prune_colonies()
        self._record_stats()

    def step(self):
        """Run max(1, floor(8 * speed)) ticks; nothing while paused."""
        if self.paused:
            return 0
        n = max(1, int(math.floor(8 * self.speed)))
        for _ in range(n):
            self.tick()
        return n

    # ── Stats ──

    def stats(self):
        counts, filled = self.tile_counts()
        return {
            "t": self.timestep,
            "colonies": self.pop,
            "occupied": filled,
            "by_type": {a.value: counts[a] for a in ARCHETYPE_ORDER},
            "biomass_total": round(float(self.biomass.sum()), 3),
            "trail_total": round(self.trail.total(), 3),
            "nutrient_mean": round(float(self.nutrient.mean()), 4),
            "max_gen": max((col.generation for col in self.colonies.values()), default=0),
        }

    def _record_stats(self):
        self.stats_history.append(self.stats())

    # ── Snapshot ──

    def get_snapshot(self):
        """Copy of the full state: enough to render, save, or rebuild the world."""
        grids = {name: getattr(self, name).copy() for name in GRID_NAMES}
        grids["trail"] = self.trail.trail.copy()
        return {
            "timestep": self.timestep,
            "width": self.W,
            "height": self.H,
            "seed": self.seed,
            "paused": self.paused,
            "speed": self.speed,
            "mutation_rate": self.mutation_rate,
            "capacity": self.capacity,
            "next_id": self.next_id,
            "grids": grids,
            "hotspots": [hs.to_dict() for hs in self.hotspots],
            "colonies": [col.to_dict() for col in self.colonies.values()],
            "type_pressure": {a.value: p for a, p in self.type_pressure.items()},
            "last_type_counts": (None if self._last_type_counts is None else
                                 {a.value: n for a, n in self._last_type_counts.items()}),
            "last_pressure_update": self._last_pressure_update,
            "rng_state": copy.deepcopy(self.rng.get_state()),
            "config": config_values(self.cfg),
        }

    @classmethod
    def from_snapshot(cls, snapshot, cfg=None):
        if cfg is None:
            cfg = Config()
            for k, v in snapshot.get("config", {}).items():
                setattr(cfg, k, v)
        world = cls.__new__(cls)
        world.cfg = cfg
        W, H = int(snapshot["width"]), int(snapshot["height"])
        world.W, world.H = W, H
        world.seed = snapshot["seed"]
        world.timestep = int(snapshot["timestep"])
        world.paused = bool(snapshot["paused"])
        world.speed = float(snapshot["speed"])
        world.mutation_rate = float(snapshot["mutation_rate"])
        world.capacity = float(snapshot["capacity"])
        world.next_id = int(snapshot["next_id"])
        world.rng = SeededRandom(world.seed)
        world.rng.set_state(copy.deepcopy(snapshot["rng_state"]))
        world.noise = ValueNoise(world.seed)

        grids = snapshot["grids"]
        for name in GRID_NAMES + ("trail",):
            if np.shape(grids[name]) != (H, W):
                raise ValueError(f"grid {name!r} has shape {np.shape(grids[name])}, expected {(H, W)}")
        world.humidity = np.array(grids["humidity"], dtype=np.float64)
        world.light = np.array(grids["light"], dtype=np.float64)
        world.nutrient = np.array(grids["nutrient"], dtype=np.float64)
        world.water = np.array(grids["water"], dtype=np.uint8)
        world.tiles = np.array(grids["tiles"], dtype=np.int64)
        world.biomass = np.array(grids["biomass"], dtype=np.float64)
        world.nutrient_scratch = np.zeros_like(world.nutrient)
        world.trail = TrailField(H, W, cfg)
        world.trail.trail[...] = grids["trail"]

        world.hotspots = [Hotspot(**hs) for hs in snapshot["hotspots"]]
        world.colonies = {}
        for d in snapshot["colonies"]:
            col = Colony.from_dict(d)
            world.colonies[col.id] = col

        world.type_pressure = {a: float(snapshot["type_pressure"].get(a.value, 1.0))
                               for a in ARCHETYPE_ORDER}
        last = snapshot.get("last_type_counts")
        world._last_type_counts = (None if last is None else
                                   {a: int(last.get(a.value, 0)) for a in ARCHETYPE_ORDER})
        world._last_pressure_update = int(snapshot.get("last_pressure_update", 0))
        world.stats_history = []
        return world

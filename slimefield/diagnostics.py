"""
slimefield: Diagnostics
=======================
Invariant checks and small reports over a live World. Used by the tests and
by the runner's final check; never mutates the world.
"""

import numpy as np

from slimefield.archetypes import ARCHETYPE_ORDER
from slimefield.world import EMPTY


UNIT_FIELDS = ("humidity", "light", "nutrient")


def field_violations(world):
    """Return a list of human-readable problems; empty when the world is sane."""
    problems = []
    for name in UNIT_FIELDS:
        grid = getattr(world, name)
        if not np.isfinite(grid).all():
            problems.append(f"{name}: non-finite values")
        elif grid.min() < 0.0 or grid.max() > 1.0:
            problems.append(f"{name}: out of [0,1] (min={grid.min():.4f}, max={grid.max():.4f})")

    if not np.isin(world.water, (0, 1)).all():
        problems.append("water: values other than 0/1")

    trail = world.trail.trail
    if not np.isfinite(trail).all():
        problems.append("trail: non-finite values")
    elif trail.min() < 0.0:
        problems.append(f"trail: negative mass ({trail.min():.4f})")

    if not np.isfinite(world.biomass).all():
        problems.append("biomass: non-finite values")
    elif world.biomass.min() < 0.0:
        problems.append(f"biomass: negative values (min={world.biomass.min():.4f})")

    owned = world.tiles != EMPTY
    if (world.biomass[owned] <= 0.0).any():
        problems.append(f"biomass: {int((world.biomass[owned] <= 0.0).sum())} owned tiles with non-positive biomass")

    ids = np.unique(world.tiles[owned])
    dangling = [int(i) for i in ids if int(i) not in world.colonies]
    if dangling:
        problems.append(f"tiles: dangling owner ids {dangling[:10]}")

    for col in world.colonies.values():
        if not (0 <= col.x < world.W and 0 <= col.y < world.H):
            problems.append(f"colony {col.id}: position ({col.x},{col.y}) outside grid")
        bad = [k for k, v in col.traits.items() if not 0.0 <= v <= 1.0]
        if bad:
            problems.append(f"colony {col.id}: traits out of range {bad}")
    return problems


def nutrient_report(world):
    n = world.nutrient
    return {
        "mean": float(n.mean()),
        "min": float(n.min()),
        "max": float(n.max()),
        "hotspots": len(world.hotspots),
    }


def population_report(world):
    """Per-archetype colony and tile counts."""
    tiles, occupied = world.tile_counts()
    report = {a.value: {"colonies": 0, "tiles": tiles[a]} for a in ARCHETYPE_ORDER}
    for col in world.colonies.values():
        report[col.code]["colonies"] += 1
    report["total"] = {"colonies": world.pop, "tiles": occupied}
    return report

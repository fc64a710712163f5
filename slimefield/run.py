"""
slimefield: Headless runner
===========================
Runs a world for cfg.total_ticks ticks, printing a status line and writing a
JSON snapshot every cfg.snapshot_interval ticks, then a run summary.

Usage:
    slimefield-run --seed 1337 --ticks 2000
    python -m slimefield.run --width 96 --height 54 --verbose
"""

import argparse
import json
import logging
import os
import time

from slimefield.config import Config
from slimefield.diagnostics import field_violations, population_report
from slimefield.world import World, config_values


def save_snapshot(world, output_dir):
    os.makedirs(output_dir, exist_ok=True)
    data = {
        "t": world.timestep,
        "stats": world.stats_history[-1] if world.stats_history else world.stats(),
        "population": population_report(world),
        "colonies": [
            {"id": col.id, "type": col.code, "species": col.species,
             "x": col.x, "y": col.y, "age": col.age, "generation": col.generation,
             "parent_id": col.parent_id, "biomass": round(col.biomass, 4),
             "fitness": round(col.fitness, 4)}
            for col in world.colonies.values()
        ],
    }
    path = os.path.join(output_dir, f"snapshot_{world.timestep:06d}.json")
    with open(path, "w") as f:
        json.dump(data, f)
    return path


def run_simulation(cfg=None):
    cfg = cfg or Config()
    world = World(cfg)

    print(f"slimefield | seed {cfg.random_seed}")
    print(f"Grid: {world.W}×{world.H}  |  Founders: {cfg.initial_colonies}  |  "
          f"Hotspots: {len(world.hotspots)}  |  Water: {world.water.mean():.2f}")
    print(f"{'─' * 110}")

    start = time.time()
    for _ in range(cfg.total_ticks):
        world.tick()

        if world.timestep % cfg.snapshot_interval == 0:
            save_snapshot(world, cfg.output_dir)
            s = world.stats_history[-1]
            bt = s["by_type"]
            el = time.time() - start
            print(
                f"  t={s['t']:5d}  |  col={s['colonies']:4d}  |  occ={s['occupied']:5d}  |  "
                f"gen={s['max_gen']:3d}  |  bio={s['biomass_total']:8.1f}  |  "
                f"trail={s['trail_total']:7.2f}  |  nut={s['nutrient_mean']:.3f}  |  "
                + " ".join(f"{k}={v}" for k, v in bt.items())
                + f"  |  {el:.1f}s"
            )

        if world.pop == 0:
            print(f"\n  *** EXTINCTION at t={world.timestep} ***")
            break

    el = time.time() - start
    print(f"{'─' * 110}")
    print(f"Done in {el:.1f}s  |  Colonies: {world.pop}  |  Next id: {world.next_id}")

    problems = field_violations(world)
    for p in problems:
        print(f"  ! {p}")

    os.makedirs(cfg.output_dir, exist_ok=True)
    with open(os.path.join(cfg.output_dir, "run_summary.json"), "w") as f:
        json.dump({"config": config_values(cfg),
                   "violations": problems,
                   "stats_history": world.stats_history}, f, indent=2)
    return world


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the slimefield simulation headless.")
    parser.add_argument("--seed", default=None, help="random seed (int or string)")
    parser.add_argument("--width", type=int, default=None)
    parser.add_argument("--height", type=int, default=None)
    parser.add_argument("--ticks", type=int, default=None)
    parser.add_argument("--output", default=None, help="output directory")
    parser.add_argument("--verbose", action="store_true", help="log engine diagnostics")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    cfg = Config()
    if args.seed is not None:
        cfg.random_seed = int(args.seed) if args.seed.lstrip("-").isdigit() else args.seed
    if args.width is not None:
        cfg.width = args.width
    if args.height is not None:
        cfg.height = args.height
    if args.ticks is not None:
        cfg.total_ticks = args.ticks
    if args.output is not None:
        cfg.output_dir = args.output
    run_simulation(cfg)


if __name__ == "__main__":
    main()

"""
slimefield: Live Visualizer
===========================
Runs the simulation and renders it in real time using Pygame. Everything
drawn comes from World.get_snapshot(); the viewer only talks back to the
world through its command methods.

Usage:
    pip install -e .[viz]
    python -m slimefield.visualizer

Controls:
    SPACE      Pause / Resume
    UP / DOWN  Speed up / slow down (world speed knob)
    1          Toggle humidity overlay
    2          Toggle light overlay
    3          Toggle nutrient overlay
    4          Toggle water overlay
    5          Toggle trail overlay
    6          Toggle colonies
    TAB        Cycle archetype to spawn
    CLICK      Spawn the selected archetype at the cursor
    E          Reseed environment (keeps colonies)
    S          Seasonal shake
    R          Reset simulation
    Q / ESC    Quit
"""

import sys
import time as _time

import numpy as np
import pygame

from slimefield.archetypes import ARCHETYPE_ORDER
from slimefield.colony import hsl_to_rgb
from slimefield.config import Config
from slimefield.world import World


# ═══════════════════════════════════════════════════════════════════════════════
# VISUALIZER CONFIG
# ═══════════════════════════════════════════════════════════════════════════════

WINDOW_SCALE = 12         # Each grid cell = 12×12 pixels
STATS_WIDTH = 300
FPS = 30
SPEED_STEP = 0.2

BG_COLOR = (8, 8, 12)


# ═══════════════════════════════════════════════════════════════════════════════
# COLOR UTILITIES
# ═══════════════════════════════════════════════════════════════════════════════

def make_colormap(keypoints):
    """256-entry RGB colormap from (position, r, g, b) keypoints."""
    pos = np.array([k[0] for k in keypoints])
    rgb = np.array([k[1:] for k in keypoints], dtype=np.float64)
    t = np.linspace(0.0, 1.0, 256)
    return np.stack([np.interp(t, pos, rgb[:, j]) for j in range(3)], axis=1).astype(np.uint8)


HUMIDITY_CMAP = make_colormap([(0.0, 0, 0, 0), (0.5, 10, 40, 70), (1.0, 40, 110, 160)])
LIGHT_CMAP = make_colormap([(0.0, 0, 0, 0), (0.6, 70, 60, 10), (1.0, 160, 140, 40)])
NUTRIENT_CMAP = make_colormap([(0.0, 0, 0, 0), (0.4, 20, 50, 10), (1.0, 90, 170, 40)])
TRAIL_CMAP = make_colormap([(0.0, 0, 0, 0), (0.3, 70, 30, 90), (1.0, 220, 140, 255)])
WATER_RGB = np.array([25, 60, 120], dtype=np.int16)

OVERLAYS = [("humidity", "1:Humidity"), ("light", "2:Light"), ("nutrient", "3:Nutrient"),
            ("water", "4:Water"), ("trail", "5:Trail"), ("colonies", "6:Colonies")]


def render_heatmap(grid, cmap, vmin=0.0, vmax=1.0):
    normalized = np.clip((grid - vmin) / max(vmax - vmin, 1e-8), 0, 1)
    return cmap[(normalized * 255).astype(np.uint8)]


def add_rgb(base, layer):
    return np.clip(base.astype(np.int16) + layer.astype(np.int16), 0, 255).astype(np.uint8)


def render_grid_to_surface(rgb_array, scale):
    h, w = rgb_array.shape[:2]
    small_surf = pygame.surfarray.make_surface(rgb_array.transpose(1, 0, 2))
    return pygame.transform.scale(small_surf, (w * scale, h * scale))


# ═══════════════════════════════════════════════════════════════════════════════
# SNAPSHOT RENDERING
# ═══════════════════════════════════════════════════════════════════════════════

def colony_palette(snap):
    """Lookup table colony id -> RGB, black for ids without a live colony."""
    lut = np.zeros((snap["next_id"] + 1, 3), dtype=np.uint8)
    for c in snap["colonies"]:
        lut[c["id"]] = hsl_to_rgb(c["color"])
    return lut


def compose(snap, layers):
    g = snap["grids"]
    H, W = snap["height"], snap["width"]
    rgb = np.full((H, W, 3), BG_COLOR, dtype=np.uint8)

    if layers["humidity"]:
        rgb = add_rgb(rgb, render_heatmap(g["humidity"], HUMIDITY_CMAP))
    if layers["light"]:
        rgb = add_rgb(rgb, render_heatmap(g["light"], LIGHT_CMAP))
    if layers["nutrient"]:
        rgb = add_rgb(rgb, render_heatmap(g["nutrient"], NUTRIENT_CMAP))
    if layers["water"]:
        wet = g["water"] > 0
        rgb[wet] = np.clip(rgb[wet].astype(np.int16) + WATER_RGB, 0, 255).astype(np.uint8)
    if layers["trail"]:
        sat = 1.0 - np.exp(-snap["config"]["trail_scale"] * g["trail"])
        rgb = add_rgb(rgb, render_heatmap(sat, TRAIL_CMAP))

    if layers["colonies"]:
        tiles = g["tiles"]
        owned = tiles >= 0
        lut = colony_palette(snap)
        ids = np.clip(tiles[owned], 0, lut.shape[0] - 1)
        shade = np.clip(0.45 + 0.55 * g["biomass"][owned], 0.45, 1.0)[:, None]
        rgb[owned] = (lut[ids] * shade).astype(np.uint8)
    return rgb


def draw_stats_panel(surface, world, snap, x_offset, selected, layers, elapsed):
    font = pygame.font.SysFont("monospace", 12)

    panel_rect = pygame.Rect(x_offset, 0, STATS_WIDTH, surface.get_height())
    pygame.draw.rect(surface, (15, 15, 22), panel_rect)
    pygame.draw.line(surface, (60, 60, 80), (x_offset, 0), (x_offset, surface.get_height()), 2)

    s = world.stats_history[-1] if world.stats_history else world.stats()
    lines = [("SLIMEFIELD", (200, 180, 255)), (f"seed {snap['seed']}", (140, 130, 170)), ("", None)]

    state = "▐▐ PAUSED" if snap["paused"] else f"▶ speed {snap['speed']:.1f}"
    lines.append((f"t = {snap['timestep']:,}   {state}", (255, 255, 255)))
    lines.append((f"Sim time: {elapsed:.1f}s", (150, 150, 150)))
    lines.append(("", None))

    lines.append(("─── Colonies ───", (100, 180, 255)))
    lines.append((f"  Alive:    {s['colonies']:,}", (255, 255, 255)))
    lines.append((f"  Occupied: {s['occupied']:,}", (200, 200, 200)))
    lines.append((f"  Gen:      {s['max_gen']}", (180, 180, 230)))
    lines.append((f"  Biomass:  {s['biomass_total']:.1f}", (180, 230, 180)))
    lines.append(("", None))

    lines.append(("─── Tiles by type ───", (100, 220, 130)))
    for a in ARCHETYPE_ORDER:
        mark = "►" if a is selected else " "
        p = world.type_pressure[a]
        lines.append((f" {mark}{a.value:6s} {s['by_type'][a.value]:5d}  p={p:.2f}",
                      (255, 230, 140) if a is selected else (190, 190, 190)))
    lines.append(("", None))

    lines.append(("─── Environment ───", (255, 180, 80)))
    lines.append((f"  Nutrient: {s['nutrient_mean']:.3f} avg", (200, 230, 140)))
    lines.append((f"  Trail:    {s['trail_total']:.2f}", (220, 160, 255)))
    lines.append((f"  Hotspots: {len(snap['hotspots'])}", (200, 160, 80)))
    lines.append(("", None))

    lines.append(("─── Layers ───", (150, 150, 150)))
    for key, name in OVERLAYS:
        on = layers[key]
        lines.append((f"  {'●' if on else '○'} {name}", (180, 255, 180) if on else (80, 80, 80)))
    lines.append(("", None))

    lines.append(("─── Controls ───", (120, 120, 120)))
    for ctrl in ["SPACE  Pause/Resume", "UP/DN  Speed +/-", "1-6    Toggle layers",
                 "TAB    Cycle archetype", "CLICK  Spawn", "E      Reseed env",
                 "S      Shake", "R      Reset", "Q/ESC  Quit"]:
        lines.append((f"  {ctrl}", (100, 100, 110)))

    y = 10
    for text, color in lines:
        if color is None:
            y += 5
            continue
        surface.blit(font.render(text, True, color), (x_offset + 10, y))
        y += 16


# ═══════════════════════════════════════════════════════════════════════════════
# MAIN LOOP
# ═══════════════════════════════════════════════════════════════════════════════

def main():
    pygame.init()
    pygame.display.set_caption("slimefield")

    cfg = Config()
    world = World(cfg)

    grid_w = world.W * WINDOW_SCALE
    grid_h = world.H * WINDOW_SCALE
    screen = pygame.display.set_mode((grid_w + STATS_WIDTH, max(grid_h, 560)))
    clock = pygame.time.Clock()

    selected_idx = 0
    layers = {"humidity": False, "light": False, "nutrient": True,
              "water": True, "trail": True, "colonies": True}
    layer_keys = {pygame.K_1: "humidity", pygame.K_2: "light", pygame.K_3: "nutrient",
                  pygame.K_4: "water", pygame.K_5: "trail", pygame.K_6: "colonies"}

    sim_start = _time.time()
    running = True

    while running:
        # ── Events ───────────────────────────────────────────────────────
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_q, pygame.K_ESCAPE):
                    running = False
                elif event.key == pygame.K_SPACE:
                    world.paused = not world.paused
                elif event.key == pygame.K_UP:
                    world.set_parameter("speed", world.speed + SPEED_STEP)
                elif event.key == pygame.K_DOWN:
                    world.set_parameter("speed", world.speed - SPEED_STEP)
                elif event.key == pygame.K_TAB:
                    selected_idx = (selected_idx + 1) % len(ARCHETYPE_ORDER)
                elif event.key == pygame.K_e:
                    world.reseed_environment()
                elif event.key == pygame.K_s:
                    world.apply_environmental_perturbation()
                elif event.key == pygame.K_r:
                    world = World(cfg)
                    sim_start = _time.time()
                elif event.key in layer_keys:
                    key = layer_keys[event.key]
                    layers[key] = not layers[key]
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                mx, my = event.pos
                if mx < grid_w and my < grid_h:
                    world.spawn_colony(ARCHETYPE_ORDER[selected_idx].value,
                                       mx // WINDOW_SCALE, my // WINDOW_SCALE)

        # ── Simulation ───────────────────────────────────────────────────
        world.step()
        elapsed = _time.time() - sim_start

        # ── Render ───────────────────────────────────────────────────────
        snap = world.get_snapshot()
        screen.fill(BG_COLOR)
        screen.blit(render_grid_to_surface(compose(snap, layers), WINDOW_SCALE), (0, 0))
        draw_stats_panel(screen, world, snap, grid_w, ARCHETYPE_ORDER[selected_idx],
                         layers, elapsed)

        pygame.display.flip()
        clock.tick(FPS)

    pygame.quit()
    sys.exit()


if __name__ == "__main__":
    main()

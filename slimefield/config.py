"""
slimefield: Configuration
=========================
Every tunable of the simulation lives here as a class attribute of Config.
Override on an instance (cfg = Config(); cfg.width = 32) to build a world
with different settings.
"""


# Live-tunable knobs and the closed range each one is clamped to.
PARAMETER_RANGES = {
    "speed": (0.1, 4.0),
    "mutation_rate": (0.0, 1.0),
    "capacity": (0.2, 2.5),
}


class Config:
    # ── World ──
    width = 64
    height = 36
    random_seed = 1337
    initial_colonies = 8

    # ── Live knobs ──
    speed = 1.2                      # step() runs max(1, floor(8 * speed)) ticks
    mutation_rate = 0.18
    capacity = 1.0                   # soft cap on per-tile biomass

    # ── Environment drift ──
    drift_interval = 5
    drift_scale = 0.002              # multiplied by speed

    # ── Trail ──
    trail_evaporation = 0.985
    trail_diffusion = 0.35
    trail_scale = 0.03               # saturation steepness
    trail_bias = 0.06                # expansion score bonus per unit saturated trail

    # ── Nutrients ──
    nutrient_diffusion = 0.12
    nutrient_regen = 0.01
    nutrient_target_base = 0.2
    nutrient_target_humidity = 0.6
    nutrient_target_water = 0.2

    # ── Hotspots ──
    hotspot_min_count = 4
    hotspot_area_per = 400           # one extra hotspot per this many tiles
    hotspot_strength = (0.06, 0.10)
    hotspot_radius = (3, 5)
    hotspot_drift_interval = 120
    hotspot_drift = 2.0

    # ── Suitability ──
    weight_water = 0.06
    weight_light = 0.06
    weight_chemo = 0.88
    transport_bonus = 0.12
    scout_bonus = 0.04
    capacity_penalty = 0.35
    pressure_clamp = (0.1, 1.5)

    # ── Expansion ──
    contest_band = (-0.15, 0.1)      # random threshold a challenger must beat
    defense_weight = 0.7
    empty_bonus = 0.05
    claim_jitter = 0.02
    claim_biomass = 0.2
    claim_biomass_cap = 2.5
    claim_nutrient_cost = 0.03

    # ── Starvation / growth ──
    energy_threshold = 0.35
    starvation_scale = 0.8
    starvation_max = 0.28
    biomass_growth = 0.005
    nutrient_consumption = 0.008
    vacate_threshold = 0.05
    non_photosynthetic_bonus = 0.5   # set to 0.0 for the plain energy formula
    non_photosynthetic_cutoff = 0.1

    # ── Colony biomass ──
    colony_growth = 0.01
    colony_biomass_cap = 3.0
    decay_poor = 0.985               # no claim and fitness below poor_fitness
    decay_normal = 0.992
    poor_fitness = 0.4

    # ── Reproduction ──
    spawn_base = 0.003
    spawn_mutation_scale = 0.008
    spawn_min_biomass = 0.8
    spawn_min_fitness = 0.55
    spawn_distance = 2
    child_biomass = 0.6
    child_tile_biomass = 0.4
    founder_tile_biomass = 0.4
    founder_jitter = 0.05
    mutation_sigma = 0.12
    child_color_jitter = 14.0

    # ── Type pressure ──
    pressure_interval = 5
    pressure_scale = 0.7
    pressure_floor = 0.55
    pressure_max_age = 30            # refresh at least this often
    pressure_change_trigger = 0.15   # or sooner when a share moves this much

    # ── Cleanup ──
    prune_interval = 60

    # ── Runner ──
    total_ticks = 2000
    snapshot_interval = 100
    output_dir = "output_slimefield"

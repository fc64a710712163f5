"""
slimefield: Archetype catalog
=============================
The fixed set of colony archetypes. Differences between archetypes are data
(baseline traits and behaviour weights) plus a small per-archetype bonus
term used by the suitability scorer.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np


TRAIT_NAMES = (
    "water_need", "light_use", "photosym", "transport",
    "predation", "defense", "spore", "flow",
)


@dataclass(frozen=True)
class Behavior:
    trail_weight: float
    nutrient_weight: float
    deposit: float
    sense_radius: int
    water_affinity: float = 0.0


class Archetype(Enum):
    MAT = "MAT"
    CORD = "CORD"
    TOWER = "TOWER"
    FLOAT = "FLOAT"
    EAT = "EAT"
    SCOUT = "SCOUT"

    @property
    def display_name(self):
        return DISPLAY_NAMES[self]

    @property
    def base_traits(self):
        return dict(BASE_TRAITS[self])

    @property
    def behavior(self):
        return BEHAVIORS[self]


ARCHETYPE_ORDER = tuple(Archetype)

DISPLAY_NAMES = {
    Archetype.MAT: "Foraging Mat",
    Archetype.CORD: "Cord/Creeper",
    Archetype.TOWER: "Tower/Canopy",
    Archetype.FLOAT: "Floater/Raft",
    Archetype.EAT: "Engulfer",
    Archetype.SCOUT: "Scout/Prospector",
}

#                  water  light  photo  trans  pred   def    spore  flow
_BASE = {
    Archetype.MAT:   (0.70, 0.20, 0.15, 0.60, 0.10, 0.50, 0.50, 0.80),
    Archetype.CORD:  (0.60, 0.25, 0.20, 0.85, 0.15, 0.55, 0.45, 0.90),
    Archetype.TOWER: (0.55, 0.85, 0.75, 0.50, 0.05, 0.60, 0.40, 0.50),
    Archetype.FLOAT: (0.90, 0.50, 0.60, 0.55, 0.08, 0.45, 0.60, 0.60),
    Archetype.EAT:   (0.50, 0.05, 0.00, 0.70, 0.85, 0.70, 0.35, 0.75),
    Archetype.SCOUT: (0.55, 0.35, 0.25, 0.70, 0.05, 0.35, 0.55, 0.95),
}
BASE_TRAITS = {a: dict(zip(TRAIT_NAMES, vals)) for a, vals in _BASE.items()}

BEHAVIORS = {
    Archetype.MAT:   Behavior(trail_weight=0.30, nutrient_weight=0.70, deposit=0.50, sense_radius=3),
    Archetype.CORD:  Behavior(trail_weight=0.55, nutrient_weight=0.60, deposit=0.80, sense_radius=7),
    Archetype.TOWER: Behavior(trail_weight=0.15, nutrient_weight=0.55, deposit=0.30, sense_radius=3),
    Archetype.FLOAT: Behavior(trail_weight=0.40, nutrient_weight=0.70, deposit=0.60, sense_radius=4,
                              water_affinity=0.25),
    Archetype.EAT:   Behavior(trail_weight=0.60, nutrient_weight=0.45, deposit=0.65, sense_radius=5),
    Archetype.SCOUT: Behavior(trail_weight=0.35, nutrient_weight=0.85, deposit=0.25, sense_radius=8),
}


def archetype_from_code(code):
    """Resolve an archetype code ("MAT", ...) or member; None if unknown."""
    if isinstance(code, Archetype):
        return code
    if not isinstance(code, str):
        return None
    return Archetype.__members__.get(code)


# ── Archetype-specific suitability terms ──

def _float_bonus(water):
    return np.where(water > 0, 0.25, -0.08)


def _tower_bonus(water):
    return np.where(water > 0, -0.12, 0.0)


_BONUS_FUNCS = {
    Archetype.FLOAT: _float_bonus,
    Archetype.TOWER: _tower_bonus,
}


def archetype_bonus(archetype, water):
    """Additive suitability bonus for an archetype given water flags (array)."""
    water = np.asarray(water)
    bonus = np.zeros(water.shape)
    fn = _BONUS_FUNCS.get(archetype)
    if fn is not None:
        bonus = bonus + fn(water)
    affinity = BEHAVIORS[archetype].water_affinity
    if affinity:
        bonus = bonus + np.where(water > 0, affinity, 0.0)
    return bonus


# ── Species names ──

GENUS_PARTS = ["Myxo", "Physa", "Plasmo", "Dicty", "Fuligo", "Arcyria",
               "Lepto", "Stemo", "Lampro", "Lycog", "Cratera", "Stemon"]
EPITHET_PARTS = ["luminis", "hydra", "nutrix", "vias", "silvae", "aqua",
                 "tenebrae", "celer", "retis", "spora", "flumen", "saxum"]
SPECIES_HINTS = {
    Archetype.MAT: "matta",
    Archetype.CORD: "funis",
    Archetype.TOWER: "turris",
    Archetype.FLOAT: "ratis",
    Archetype.EAT: "vorax",
    Archetype.SCOUT: "cursor",
}


def species_name(archetype, rng):
    genus = GENUS_PARTS[rng.index(len(GENUS_PARTS))]
    epithet = EPITHET_PARTS[rng.index(len(EPITHET_PARTS))]
    return f"{genus} {epithet}-{SPECIES_HINTS.get(archetype, 'forma')}"

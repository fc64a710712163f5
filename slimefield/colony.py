"""
slimefield: Colony record
=========================
A colony is one agent: an archetype, a trait vector, a frontier position and
its own biomass. Lineage is kept as id references (parent_id, children) into
the world's flat colony collection.
"""

import colorsys
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from slimefield.archetypes import Archetype, TRAIT_NAMES


def clamp(v, lo, hi):
    return lo if v < lo else (hi if v > hi else v)


@dataclass
class Colony:
    id: int
    archetype: Archetype
    name: str
    species: str
    x: int
    y: int
    traits: Dict[str, float]
    color: Tuple[float, float, float]       # (hue deg, saturation %, lightness %)
    age: int = 0
    biomass: float = 1.0
    generation: int = 0
    parent_id: Optional[int] = None
    children: List[int] = field(default_factory=list)
    fitness: float = 0.0
    born: int = 0

    @property
    def code(self):
        return self.archetype.value

    def to_dict(self):
        return {
            "id": self.id, "type": self.archetype.value, "name": self.name,
            "species": self.species, "x": self.x, "y": self.y,
            "traits": dict(self.traits), "color": list(self.color),
            "age": self.age, "biomass": self.biomass,
            "generation": self.generation, "parent_id": self.parent_id,
            "children": list(self.children), "fitness": self.fitness,
            "born": self.born,
        }

    @classmethod
    def from_dict(cls, d):
        return cls(
            id=int(d["id"]), archetype=Archetype(d["type"]), name=d["name"],
            species=d["species"], x=int(d["x"]), y=int(d["y"]),
            traits={k: float(d["traits"][k]) for k in TRAIT_NAMES},
            color=tuple(float(c) for c in d["color"]),
            age=int(d["age"]), biomass=float(d["biomass"]),
            generation=int(d["generation"]),
            parent_id=None if d["parent_id"] is None else int(d["parent_id"]),
            children=[int(c) for c in d["children"]],
            fitness=float(d["fitness"]), born=int(d["born"]),
        )


# ── Traits ──

def founder_traits(archetype, rng, jitter=0.05):
    base = archetype.base_traits
    return {k: clamp(base[k] + rng.uniform(-jitter, jitter), 0.0, 1.0) for k in TRAIT_NAMES}


def mutate_traits(traits, rate, rng, sigma=0.12):
    """Perturb every trait by U(-sigma*rate, +sigma*rate), clamped to [0,1]."""
    s = sigma * rate
    return {k: clamp(traits[k] + rng.uniform(-s, s), 0.0, 1.0) for k in TRAIT_NAMES}


# ── Colours ──

def vivid_color(rng):
    h = rng.uniform(0.0, 360.0)
    s = rng.uniform(70.0, 95.0)
    l = rng.uniform(45.0, 60.0)
    return (h, s, l)


def jitter_color(color, rng, amount=8.0):
    h, s, l = color
    h = (h + rng.uniform(-amount, amount) + 360.0) % 360.0
    s = clamp(s + rng.uniform(-5.0, 5.0), 60.0, 98.0)
    l = clamp(l + rng.uniform(-5.0, 5.0), 35.0, 68.0)
    return (h, s, l)


def hsl_to_rgb(color):
    h, s, l = color
    r, g, b = colorsys.hls_to_rgb(h / 360.0, l / 100.0, s / 100.0)
    return (int(r * 255), int(g * 255), int(b * 255))

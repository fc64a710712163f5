"""
slimefield
==========
A grid ecosystem of slime-mould colonies competing for tiles over drifting
humidity, light and nutrient fields. Build a World, call step(), read
get_snapshot().
"""

from slimefield.archetypes import ARCHETYPE_ORDER, TRAIT_NAMES, Archetype
from slimefield.colony import Colony
from slimefield.config import PARAMETER_RANGES, Config
from slimefield.world import EMPTY, World

__all__ = [
    "ARCHETYPE_ORDER", "TRAIT_NAMES", "Archetype", "Colony",
    "PARAMETER_RANGES", "Config", "EMPTY", "World",
]

"""
Regions, the region utility of a transition system and requested net properties.
"""

from __future__ import annotations

from typing import List

from .equation_system import EquationSystem
from .utility import RegionUtility
from .region import Region, RegionBuilder, copy_region_to_utility
from .properties import PNProperties

__all__: List[str] = [
    "EquationSystem",
    "RegionUtility",
    "Region",
    "RegionBuilder",
    "copy_region_to_utility",
    "PNProperties",
]

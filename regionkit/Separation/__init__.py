"""
Separation strategies: regions solving event/state and state separation problems.
"""

from __future__ import annotations

from typing import List

from .base import (
    LocationMap,
    PrecomputedSeparation,
    Separation,
    has_locations,
    is_event_enabled,
    location_map,
    separates_event,
    separates_states,
)
from .basic import BasicImpureSeparation, BasicPureSeparation
from .elementary import ElementarySeparation
from .factory import STRATEGY_FACTORIES, StrategyFactory, create_separation
from .inequality import InequalitySystemSeparation
from .kbounded import KBoundedSeparation
from .marked_graph import MarkedGraphSeparation
from .output_nonbranching import OutputNonbranchingSeparation

__all__: List[str] = [
    "LocationMap",
    "Separation",
    "PrecomputedSeparation",
    "has_locations",
    "is_event_enabled",
    "location_map",
    "separates_event",
    "separates_states",
    "BasicPureSeparation",
    "BasicImpureSeparation",
    "ElementarySeparation",
    "InequalitySystemSeparation",
    "KBoundedSeparation",
    "MarkedGraphSeparation",
    "OutputNonbranchingSeparation",
    "STRATEGY_FACTORIES",
    "StrategyFactory",
    "create_separation",
]

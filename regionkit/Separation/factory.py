"""Choosing a separation strategy for a set of requested properties."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from ..exceptions import UnsupportedPropertiesError
from ..Region.properties import PNProperties
from ..Region.utility import RegionUtility
from .base import LocationMap, Separation, location_map
from .basic import BasicImpureSeparation, BasicPureSeparation
from .elementary import ElementarySeparation
from .inequality import InequalitySystemSeparation
from .kbounded import KBoundedSeparation
from .marked_graph import MarkedGraphSeparation
from .output_nonbranching import OutputNonbranchingSeparation

logger = logging.getLogger(__name__)

StrategyFactory = Callable[[RegionUtility, PNProperties, LocationMap], Optional[Separation]]


def _optional(strategy: Callable[..., Separation]) -> StrategyFactory:
    """Turn a strategy constructor into a factory returning ``None`` if unsupported."""

    def factory(
        utility: RegionUtility, properties: PNProperties, locations: LocationMap
    ) -> Optional[Separation]:
        try:
            return strategy(utility, properties, locations)
        except UnsupportedPropertiesError as e:
            logger.debug("%s is not applicable: %s", strategy.__name__, e)
            return None

    factory.__name__ = strategy.__name__
    return factory


# Cheapest and most specialised first; the SMT strategy supports everything.
STRATEGY_FACTORIES: List[StrategyFactory] = [
    _optional(ElementarySeparation),
    _optional(KBoundedSeparation),
    _optional(MarkedGraphSeparation),
    _optional(OutputNonbranchingSeparation),
    _optional(BasicPureSeparation),
    _optional(BasicImpureSeparation),
    InequalitySystemSeparation,
]


def create_separation(
    utility: RegionUtility,
    properties: PNProperties,
    strategy_factory: Optional[StrategyFactory] = None,
) -> Separation:
    """
    Create the first applicable separation strategy.

    Output-nonbranching is turned into a location map before any strategy
    sees the properties.

    :param utility: Utility of the transition system.
    :param properties: Requested properties.
    :param strategy_factory: Use this factory instead of the built-in
        order. It must not return ``None``.
    :returns: The strategy.
    :raises MissingLocationError: If only some events have a location.
    """
    locations = location_map(utility, properties)
    properties = properties.replace(output_nonbranching=False)

    if strategy_factory is not None:
        result = strategy_factory(utility, properties, locations)
        if result is None:
            raise ValueError(f"Strategy factory {strategy_factory!r} returned no strategy")
        return result

    for factory in STRATEGY_FACTORIES:
        result = factory(utility, properties, locations)
        if result is not None:
            logger.debug("Created separation strategy %s", type(result).__name__)
            return result
    raise AssertionError("The last strategy factory supports every property")

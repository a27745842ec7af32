"""
The general separation strategy: one z3 formula for all properties.

The region unknowns and the "is a region with the requested properties"
constraint are asserted once. Each separation problem is then solved in
its own push/pop scope, so the solver keeps what it learnt about the
transition system between problems.
"""

from __future__ import annotations

import logging
from typing import Hashable, Optional

import z3

from ..Region.properties import PNProperties
from ..Region.region import Region
from ..Region.utility import RegionUtility
from ..Solver.inequality import check_sat
from ..Solver.smt import RegionEncoder
from .base import LocationMap, Separation

logger = logging.getLogger(__name__)


class InequalitySystemSeparation(Separation):
    """
    Separation through the SMT encoding of :class:`RegionEncoder`.

    Supports every combination of properties the encoder supports; this is
    the fallback of the strategy dispatcher.

    :param utility: Utility of the transition system.
    :param properties: Requested properties, with output-nonbranching
        already turned into locations.
    :param location_map: Location per event.
    """

    def __init__(
        self,
        utility: RegionUtility,
        properties: PNProperties,
        location_map: LocationMap,
    ) -> None:
        super().__init__(utility, location_map)
        self.properties = properties
        self._encoder = RegionEncoder(utility, properties, location_map)
        self._region = self._encoder.new_region()
        self._solver = z3.Solver()
        self._solver.add(self._encoder.is_region(self._region))

    def _region_from_solution(self) -> Optional[Region]:
        if check_sat(self._solver, self.utility.interrupter) == z3.unsat:
            return None
        return self._region.to_region(self._solver.model())

    def separate_states(self, state: Hashable, other_state: Hashable) -> Optional[Region]:
        tree = self.utility.spanning_tree
        if not tree.is_reachable(state) or not tree.is_reachable(other_state):
            return None
        self._solver.push()
        try:
            # "!=" cannot be strengthened to "<": with locations a region may
            # lack a complementary region
            self._solver.add(self._region.marking(state) != self._region.marking(other_state))
            return self._region_from_solution()
        finally:
            self._solver.pop()

    def separate_event(self, state: Hashable, event: str) -> Optional[Region]:
        if not self.utility.spanning_tree.is_reachable(state):
            return None
        index = self.utility.event_index(event)
        self._solver.push()
        try:
            marking = self._region.marking(state)
            if self.properties.pure:
                # all states stay reachable, so the effect of the event is negative
                term = marking + self._region.weight[index]
            else:
                term = marking - self._region.backward[index]
            self._solver.add(term < 0)
            return self._region_from_solution()
        finally:
            self._solver.pop()

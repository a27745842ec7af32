"""
Enumeration of all minimal k-bounded regions.

A multiset of states (a count per state) is a region exactly when every
event has a constant *gradient* ``count(target) - count(source)`` on its
arcs. Starting from the excitation and switching sets of every event, a
multiset with a non-constant gradient is expanded in two directions: one
towards gradients ``<= g`` and one towards gradients ``>= g + 1``, with
``g`` the rounded-down mean of the extreme gradients. Expansion stops at
multisets covering every state (not minimal) or exceeding ``k``.

References
----------
- Badouel, Bernardinello & Darondeau (2015), *Petri Net Synthesis*,
  Springer, section 7.3.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, Hashable, List, Optional, Set, Tuple

from ..exceptions import UnsupportedPropertiesError
from ..Region.properties import PNProperties
from ..Region.region import Region, RegionBuilder
from ..Region.utility import RegionUtility
from ..TS.transition_system import Arc
from .base import LocationMap, PrecomputedSeparation, has_locations

logger = logging.getLogger(__name__)

Multiset = Tuple[int, ...]


class KBoundedSeparation(PrecomputedSeparation):
    """
    All minimal k-bounded regions of a totally reachable transition system.

    :param utility: Utility of the transition system.
    :param properties: Must be ``k-bounded`` and may add ``pure``.
    :param location_map: Must not assign any location.
    :raises UnsupportedPropertiesError: If the properties, the locations or
        the transition system are not supported.
    """

    def __init__(
        self,
        utility: RegionUtility,
        properties: PNProperties,
        location_map: LocationMap,
    ) -> None:
        super().__init__(utility, location_map)
        if not properties.is_k_bounded():
            raise UnsupportedPropertiesError("k-bounded regions need a bound")
        supported = PNProperties().require_k_bounded(properties.k_bounded).replace(pure=True)
        if not supported.contains_all(properties):
            raise UnsupportedPropertiesError(f"k-bounded regions cannot provide {properties}")
        if has_locations(location_map):
            raise UnsupportedPropertiesError("k-bounded regions do not support locations")

        ts = utility.ts
        if not utility.spanning_tree.is_totally_reachable():
            raise UnsupportedPropertiesError("Transition system is not totally reachable")
        if {arc.label for arc in ts.arcs} != set(ts.alphabet):
            raise UnsupportedPropertiesError("Every event must label some arc")

        self.pure = properties.pure
        self._states: List[Hashable] = ts.states
        self._position: Dict[Hashable, int] = {s: i for i, s in enumerate(self._states)}
        self._arcs_with_label: Dict[str, List[Arc]] = {}
        for arc in ts.arcs:
            self._arcs_with_label.setdefault(arc.label, []).append(arc)

        # no 0-bounded region solves any separation problem
        if properties.k_bounded > 0:
            self._generate_all_regions(properties.k_bounded)

    # ------------------------------------------------------------------
    # Multisets
    # ------------------------------------------------------------------

    def _multiset(self, states: Set[Hashable]) -> Multiset:
        return tuple(1 if state in states else 0 for state in self._states)

    def _count(self, multiset: Multiset, state: Hashable) -> int:
        return multiset[self._position[state]]

    def _gradient(self, multiset: Multiset, arc: Arc) -> int:
        return self._count(multiset, arc.target) - self._count(multiset, arc.source)

    def _seeds(self) -> List[Multiset]:
        """Excitation and switching sets of every event."""
        seeds: List[Multiset] = []
        for event in self.ts.alphabet:
            arcs = self._arcs_with_label.get(event, [])
            for states in ({a.source for a in arcs}, {a.target for a in arcs}):
                if states:
                    seed = self._multiset(states)
                    if seed not in seeds:
                        seeds.append(seed)
        return seeds

    def _non_constant_gradient(self, multiset: Multiset) -> Optional[Tuple[str, int]]:
        """An event with several gradients and the mean of its extreme gradients."""
        for event, arcs in self._arcs_with_label.items():
            gradients = {self._gradient(multiset, arc) for arc in arcs}
            if len(gradients) > 1:
                low, high = min(gradients), max(gradients)
                mean = (low + high) // 2
                logger.debug(
                    "For %s: mean %d, max gradient %d, min gradient %d for %s",
                    event, mean, high, low, multiset,
                )
                return event, mean
        return None

    def _expand(self, multiset: Multiset, event: str, g: int, forward: bool) -> Multiset:
        result = []
        for state in self._states:
            arcs = self.ts.out_arcs(state) if forward else self.ts.in_arcs(state)
            increment = 0
            for arc in arcs:
                if arc.label == event:
                    value = self._gradient(multiset, arc) - g
                    if not forward:
                        value = -value
                    increment = max(increment, value)
            result.append(self._count(multiset, state) + increment)
        return tuple(result)

    @staticmethod
    def _should_explore(multiset: Multiset, k: int) -> bool:
        # a multiset covering every state is not minimal
        if all(count > 0 for count in multiset):
            return False
        return all(count <= k for count in multiset)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def _generate_all_regions(self, k: int) -> None:
        interrupter = self.utility.interrupter
        seeds = self._seeds()
        known: Set[Multiset] = set(seeds)
        todo: Deque[Multiset] = deque(seeds)
        while todo:
            interrupter.check()
            multiset = todo.popleft()
            found = self._non_constant_gradient(multiset)
            if found is None:
                region = self._to_region(multiset)
                if region not in self.regions:
                    self.regions.append(region)
                continue
            event, g = found
            for candidate in (
                self._expand(multiset, event, g, True),
                self._expand(multiset, event, g + 1, False),
            ):
                if self._should_explore(candidate, k) and candidate not in known:
                    known.add(candidate)
                    todo.append(candidate)
        logger.debug("Found %d k-bounded regions", len(self.regions))

    def _to_region(self, multiset: Multiset) -> Region:
        builder = RegionBuilder(self.utility)
        for event in self.ts.alphabet:
            arcs = self._arcs_with_label[event]
            gradient = self._gradient(multiset, arcs[0])
            if self.pure:
                builder.add_weight_on(event, gradient)
            else:
                minimum = min(self._count(multiset, arc.source) for arc in arcs)
                builder.add_weight_on(event, -minimum)
                builder.add_weight_on(event, minimum + gradient)
        region = builder.with_initial_marking(self._count(multiset, self.ts.initial_state))
        logger.debug("Region %s corresponds to %s", region, multiset)
        return region

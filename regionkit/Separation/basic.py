"""
Separation by linear combination of the region basis.

Every pure region is an integer combination of the basis computed by
:meth:`RegionUtility.region_basis`. A separation problem becomes a system
of linear inequalities over the combination coefficients, solved with
:class:`~regionkit.Solver.inequality.InequalitySystemSolver`.

:class:`BasicPureSeparation` handles exactly ``pure``;
:class:`BasicImpureSeparation` handles nets without any requirement and
adds side conditions (self-loops) where a pure region is not enough.
"""

from __future__ import annotations

import logging
from typing import Hashable, List, Optional

from ..exceptions import UnsupportedPropertiesError
from ..Region.properties import PNProperties
from ..Region.region import Region, RegionBuilder
from ..Region.utility import RegionUtility
from ..Solver.inequality import InequalitySystem, InequalitySystemSolver
from .base import LocationMap, Separation, has_locations, separates_event

logger = logging.getLogger(__name__)


class BasicPureSeparation(Separation):
    """
    Pure regions from the basis.

    :raises UnsupportedPropertiesError: Unless ``properties`` is exactly
        ``pure``.
    """

    def __init__(
        self,
        utility: RegionUtility,
        properties: PNProperties,
        location_map: LocationMap,
    ) -> None:
        super().__init__(utility, location_map)
        self._check_properties(properties)

    def _check_properties(self, properties: PNProperties) -> None:
        if properties != PNProperties(pure=True):
            raise UnsupportedPropertiesError(f"{type(self).__name__} cannot handle {properties}")

    # ------------------------------------------------------------------
    # SSP
    # ------------------------------------------------------------------

    def separate_states(self, state: Hashable, other_state: Hashable) -> Optional[Region]:
        tree = self.utility.spanning_tree
        if not tree.is_reachable(state) or not tree.is_reachable(other_state):
            return None
        result = self._separate_states(state, other_state)
        if result is None and has_locations(self.location_map):
            # with locations "!=" cannot always be strengthened to ">"
            result = self._separate_states(other_state, state)
        return result

    def _separate_states(self, state: Hashable, other_state: Hashable) -> Optional[Region]:
        basis = self.utility.region_basis()
        system = InequalitySystem()
        system.add_inequality(
            0,
            ">",
            [r.marking_for_state(state) - r.marking_for_state(other_state) for r in basis],
            f"Region should separate state {state} from state {other_state}",
        )
        logger.debug("Solving an inequality system to separate %s from %s", state, other_state)
        return self._region_from_system(system, basis, None)

    # ------------------------------------------------------------------
    # ESSP
    # ------------------------------------------------------------------

    def separate_event(self, state: Hashable, event: str) -> Optional[Region]:
        # The marking of a normal region in s is max_{s'} r(PV(s) - PV(s')).
        # Disabling the event means 0 > r(PV(s) - PV(s') + event) for all s'.
        if not self.utility.spanning_tree.is_reachable(state):
            return None
        basis = self.utility.region_basis()
        index = self.utility.event_index(event)
        system = InequalitySystem()
        for other in self.utility.spanning_tree.reachable_states:
            system.add_inequality(
                0,
                ">",
                [
                    r.marking_for_state(state) - r.marking_for_state(other) + r.weight(index)
                    for r in basis
                ],
                f"inequality for state {other}",
            )
        logger.debug("Solving an inequality system to separate %s from %s", state, event)
        return self._region_from_system(system, basis, event)

    # ------------------------------------------------------------------
    # Solving
    # ------------------------------------------------------------------

    def _distributable(self, basis: List[Region], event: Optional[str]) -> List[InequalitySystem]:
        """One system per admissible location: only its events may consume tokens."""
        if event is None:
            locations = sorted({loc for loc in self.location_map if loc is not None})
        else:
            location = self.location_map[self.utility.event_index(event)]
            if location is None:
                return []
            locations = [location]

        systems = []
        for location in locations:
            system = InequalitySystem()
            for index, loc in enumerate(self.location_map):
                if loc is not None and loc != location:
                    system.add_inequality(
                        0,
                        "<=",
                        [r.weight(index) for r in basis],
                        f"Only events with location {location} may consume tokens from this region",
                    )
            systems.append(system)
        return systems

    def _region_from_system(
        self,
        system: InequalitySystem,
        basis: List[Region],
        event: Optional[str],
    ) -> Optional[Region]:
        solution = (
            InequalitySystemSolver(self.utility.interrupter)
            .assert_disjunction(system)
            .assert_disjunction(*self._distributable(basis, event))
            .find_solution()
        )
        if solution is None:
            return None
        builder = RegionBuilder(self.utility)
        for region, factor in zip(basis, solution):
            builder.add_region_with_factor(region, factor)
        result = builder.make_pure().with_normal_region_initial_marking()
        logger.debug("region: %s", result)
        return result


class BasicImpureSeparation(BasicPureSeparation):
    """
    Regions with side conditions for nets without further requirements.

    State separation is inherited from the pure case. For event/state
    separation a pure region ranking ``state`` below every state enabling
    the event is computed first and then a self-loop of suitable weight is
    put around the event.

    :raises UnsupportedPropertiesError: Unless ``properties`` is empty.
    """

    def _check_properties(self, properties: PNProperties) -> None:
        if not properties.is_empty():
            raise UnsupportedPropertiesError(f"{type(self).__name__} cannot handle {properties}")

    def separate_event(self, state: Hashable, event: str) -> Optional[Region]:
        tree = self.utility.spanning_tree
        if not tree.is_reachable(state):
            return None
        basis = self.utility.region_basis()
        index = self.utility.event_index(event)
        enabling = [s for s in tree.reachable_states if self.ts.is_enabled(s, event)]

        if enabling:
            system = InequalitySystem()
            for other in enabling:
                system.add_inequality(
                    0,
                    ">",
                    [r.marking_for_state(state) - r.marking_for_state(other) for r in basis],
                    f"inequality for state {other}",
                )
            logger.debug("Solving an inequality system to separate %s from %s", state, event)
            result = self._region_from_system(system, basis, event)
            if result is None:
                return None
            if separates_event(result, state, event):
                return result
            minimum = min(result.marking_for_state(other) for other in enabling)
        else:
            # a dead event is prevented by a plain self-loop
            result = RegionBuilder(self.utility).with_initial_marking(0)
            minimum = 1

        minimum -= result.backward_weight(index)
        logger.debug("Adding self-loop to event %s with weight %d", event, minimum)
        assert minimum > 0
        return (
            RegionBuilder.from_region(result)
            .add_loop_around(index, minimum)
            .with_initial_marking(result.initial_marking)
        )

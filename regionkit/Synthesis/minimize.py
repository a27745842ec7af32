"""
Petri nets with as few places as possible.

Starting from a successful synthesis with ``n`` regions, z3 is asked for
``n - 1`` regions that together solve every event/state separation problem
and separate every pair of states known to need it. Whenever the answer
leaves some states unseparated, these states are added to the pairs and
the question is asked again. The search stops at the first ``n`` without
a solution.
"""

from __future__ import annotations

import logging
from itertools import combinations
from typing import Hashable, List, Optional, Set

import z3

from ..Petri.petri_net import PetriNet
from ..Region.region import Region
from ..Separation.base import location_map
from ..Solver.inequality import check_sat
from ..Solver.smt import RegionEncoder
from .synthesize_pn import SynthesizePN
from .synthesizer import calculate_unseparated_states, event_state_separation_problems, minimize_regions

logger = logging.getLogger(__name__)


class MinimizePN:
    """
    Minimise the number of places of a successful synthesis.

    :param synthesize: A successful synthesis run.
    :raises ValueError: If ``synthesize`` was not successful.
    """

    def __init__(self, synthesize: SynthesizePN) -> None:
        if not synthesize.was_successfully_separated():
            raise ValueError("Net was not successfully synthesized and thus cannot be minimized")
        self.synthesize = synthesize
        self.utility = synthesize.utility
        self.only_event_separation = synthesize.only_event_separation
        properties = synthesize.properties
        self._encoder = RegionEncoder(
            self.utility,
            properties.replace(output_nonbranching=False),
            location_map(self.utility, properties),
        )

        regions = synthesize.regions
        while regions:
            logger.debug(
                "Have solution with %d regions, trying to find solution with one region less",
                len(regions),
            )
            new_regions = self._synthesize_with_limit(len(regions) - 1)
            if new_regions is None:
                break
            # the cheap pass often removes even more regions
            regions = minimize_regions(
                self.utility.ts, new_regions, self.only_event_separation, self.utility.interrupter
            )
            assert all(region.is_valid() for region in regions), regions
        logger.debug("Could not reduce number of regions any more")
        self._regions = regions

    @property
    def regions(self) -> List[Region]:
        return list(self._regions)

    def synthesize_petri_net(self) -> Optional[PetriNet]:
        return self.synthesize.synthesize_petri_net(self._regions)

    def _synthesize_with_limit(self, limit: int) -> Optional[List[Region]]:
        result = self._solve(limit, set())
        if result is None or self.only_event_separation:
            return result

        states_to_separate: Set[Hashable] = set()
        ts = self.utility.ts
        while True:
            unseparated = calculate_unseparated_states(ts.states, result, self.utility.interrupter)
            logger.debug("Unseparated states: %s", unseparated)
            if not unseparated:
                return result
            states_to_separate |= unseparated
            logger.debug("Trying again, now separating %s", states_to_separate)
            result = self._solve(limit, states_to_separate)
            if result is None:
                return None

    def _solve(self, limit: int, states_to_separate: Set[Hashable]) -> Optional[List[Region]]:
        """Ask for ``limit`` regions solving all ESSP and separating the given states."""
        encoder = self._encoder
        solver = z3.Solver()
        regions = [encoder.new_region(f"r{i}-") for i in range(limit)]
        for region in regions:
            solver.add(encoder.is_region(region))

        first_problem = True
        for state, event in event_state_separation_problems(self.utility.ts):
            if limit == 0:
                # no region solves anything
                solver.add(z3.BoolVal(False))
                break
            index = self.utility.event_index(event)
            # the first region solves the first problem, which breaks symmetry
            candidates = regions[:1] if first_problem else regions
            options = []
            for region in candidates:
                if encoder.properties.pure:
                    term = region.marking(state) + region.weight[index]
                else:
                    term = region.marking(state) - region.backward[index]
                options.append(term < 0)
            solver.add(z3.Or(options) if len(options) > 1 else options[0])
            first_problem = False

        ordered = [s for s in self.utility.ts.states if s in states_to_separate]
        for state, other in combinations(ordered, 2):
            options = [region.marking(state) != region.marking(other) for region in regions]
            if not options:
                solver.add(z3.BoolVal(False))
            else:
                solver.add(z3.Or(options) if len(options) > 1 else options[0])

        if check_sat(solver, self.utility.interrupter) == z3.unsat:
            return None
        model = solver.model()
        result: List[Region] = []
        for region in regions:
            candidate = region.to_region(model)
            if candidate not in result:
                result.append(candidate)
        return result

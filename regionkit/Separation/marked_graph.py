"""
Direct synthesis of plain marked graphs.

A reversible, persistent and backward persistent transition system whose
small cycles all contain every label exactly once is the reachability
graph of a plain marked graph. Its places can be read off the
*sequentialising* states: a state ``s`` with a single outgoing arc ``a``
leading to a state that enables ``b != a`` yields a place from ``a`` to
``b``. No search is involved.

References
----------
- Best & Devillers (2015), "Characterisation of the state spaces of
  live and bounded marked graph Petri nets".
"""

from __future__ import annotations

import logging
from typing import Dict

from ..exceptions import NonDeterministicError, PreconditionFailedError, UnsupportedPropertiesError
from ..Region.properties import PNProperties
from ..Region.region import RegionBuilder
from ..Region.utility import ParikhVector, RegionUtility
from ..TS.analysis import find_persistence_violation, is_reversible
from ..TS.cycles import search_small_cycles
from .base import LocationMap, PrecomputedSeparation

logger = logging.getLogger(__name__)


def unique_predecessor_parikh_vectors(utility: RegionUtility) -> Dict[int, ParikhVector]:
    """
    Map events to the Parikh vector of the state reached only by them.

    Only reachable states with exactly one incoming arc are considered.
    """
    result: Dict[int, ParikhVector] = {}
    tree = utility.spanning_tree
    for state in utility.ts.states:
        utility.interrupter.check()
        arcs = utility.ts.in_arcs(state)
        if len(arcs) != 1 or not tree.is_reachable(state):
            continue
        event = utility.event_index(arcs[0].label)
        result.setdefault(event, utility.reaching_parikh_vector(state))
    return result


class MarkedGraphSeparation(PrecomputedSeparation):
    """
    Places of a plain marked graph.

    Locations are ignored since T-nets satisfy every location map.

    :raises UnsupportedPropertiesError: If properties beyond ``pure``,
        ``plain``, ``tnet``, ``marked-graph`` and ``output-nonbranching``
        are requested or the transition system is not of the required shape.
    """

    def __init__(
        self,
        utility: RegionUtility,
        properties: PNProperties,
        location_map: LocationMap,
    ) -> None:
        super().__init__(utility, location_map)
        supported = PNProperties(
            pure=True, plain=True, tnet=True, marked_graph=True, output_nonbranching=True
        )
        if not supported.contains_all(properties):
            raise UnsupportedPropertiesError(f"Marked graph synthesis cannot provide {properties}")

        ts = utility.ts
        interrupter = utility.interrupter
        if {arc.label for arc in ts.arcs} != set(ts.alphabet):
            raise UnsupportedPropertiesError("Every event must label some arc")
        try:
            cycles = search_small_cycles(ts, interrupter)
        except (PreconditionFailedError, NonDeterministicError) as e:
            raise UnsupportedPropertiesError(str(e)) from e
        for pv in cycles:
            if any(pv.get(label, 0) != 1 for label in ts.alphabet):
                raise UnsupportedPropertiesError(f"Not all small cycles contain every label once, e.g. {pv}")
        if not is_reversible(ts):
            raise UnsupportedPropertiesError(f"Transition system {ts.name!r} is not reversible")
        if find_persistence_violation(ts, backward=True, interrupter=interrupter) is not None:
            raise UnsupportedPropertiesError(f"Transition system {ts.name!r} is not backward persistent")

        self._reached_only_by = unique_predecessor_parikh_vectors(utility)
        self._calculate_regions()

    def _calculate_regions(self) -> None:
        utility = self.utility
        tree = utility.spanning_tree
        n = utility.number_of_events
        seen = set()
        for state in self.ts.states:
            following = self.ts.out_arcs(state)
            if len(following) != 1 or not tree.is_reachable(state):
                continue
            arc = following[0]
            event = utility.event_index(arc.label)
            for following_arc in self.ts.out_arcs(arc.target):
                utility.interrupter.check()
                other_event = utility.event_index(following_arc.label)
                if event == other_event or (event, other_event) in seen:
                    continue
                seen.add((event, other_event))
                # ``event`` produces the token that ``other_event`` consumes
                vector = [0] * n
                vector[event] = 1
                vector[other_event] = -1
                pv = self._reached_only_by.get(other_event)
                if pv is None or 0 not in pv:
                    raise UnsupportedPropertiesError(
                        f"No short path reaching a state only via {following_arc.label!r}"
                    )
                # path plus opposite path is (k, ..., k) and a short path misses some event
                k = max(pv)
                self.regions.append(
                    RegionBuilder.pure(utility, vector).with_initial_marking(k - pv[event])
                )
        logger.debug("Marked graph regions: %s", [str(r) for r in self.regions])

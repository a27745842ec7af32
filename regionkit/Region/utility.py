"""
Shared per-transition-system data for region computations.

A :class:`RegionUtility` fixes an order on the events of a transition
system, owns its BFS spanning tree and caches the reaching Parikh vector of
every reachable state. All regions of one synthesis run refer to the same
utility; regions over different utilities are never compared equal.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Hashable, List, Optional, Sequence, Tuple

import numpy as np

from ..exceptions import UnreachableError
from ..interrupt import NEVER, Interrupter
from ..TS.spanning_tree import SpanningTree
from ..TS.transition_system import Arc, TransitionSystem
from .equation_system import EquationSystem

if TYPE_CHECKING:
    from .region import Region

logger = logging.getLogger(__name__)

ParikhVector = Tuple[int, ...]


class RegionUtility:
    """
    Event order, spanning tree and Parikh vector cache of a transition system.

    :param ts: The transition system.
    :type ts: TransitionSystem
    :param interrupter: Cancellation flag shared by every algorithm that
        works on this utility.
    :type interrupter: Interrupter
    """

    def __init__(self, ts: TransitionSystem, interrupter: Interrupter = NEVER) -> None:
        self._ts = ts
        self._interrupter = interrupter
        self._tree = SpanningTree(ts, interrupter=interrupter)
        self._events: List[str] = ts.alphabet
        self._index: Dict[str, int] = {event: i for i, event in enumerate(self._events)}
        self._pv_cache: Dict[Hashable, ParikhVector] = {}
        self._basis: Optional[List["Region"]] = None

    @property
    def ts(self) -> TransitionSystem:
        return self._ts

    @property
    def spanning_tree(self) -> SpanningTree:
        return self._tree

    @property
    def interrupter(self) -> Interrupter:
        return self._interrupter

    @property
    def event_list(self) -> List[str]:
        return list(self._events)

    @property
    def number_of_events(self) -> int:
        return len(self._events)

    def event_index(self, event: str) -> int:
        """Position of ``event`` in :attr:`event_list`; ``-1`` if unknown."""
        return self._index.get(event, -1)

    # ------------------------------------------------------------------
    # Parikh vectors
    # ------------------------------------------------------------------

    def reaching_parikh_vector(self, state: Hashable) -> ParikhVector:
        """
        Parikh vector of the spanning-tree path from the initial state.

        :raises UnreachableError: If ``state`` is not reachable.
        """
        cached = self._pv_cache.get(state)
        if cached is not None:
            return cached
        if not self._tree.is_reachable(state):
            raise UnreachableError(state)

        # Walk up to the nearest cached ancestor (or the root), then fill
        # the cache on the way back down.
        pending: List[Arc] = []
        current = state
        while current not in self._pv_cache:
            arc = self._tree.predecessor_arc(current)
            if arc is None:
                self._pv_cache[current] = (0,) * len(self._events)
                break
            pending.append(arc)
            current = arc.source

        vector = list(self._pv_cache[current])
        for arc in reversed(pending):
            vector[self._index[arc.label]] += 1
            self._pv_cache[arc.target] = tuple(vector)
        return self._pv_cache[state]

    def parikh_vector_for_edge(self, arc: Arc) -> ParikhVector:
        """``PV(source) - PV(target) + unit(label)``: the cycle closed by ``arc``."""
        source = self.reaching_parikh_vector(arc.source)
        target = self.reaching_parikh_vector(arc.target)
        label = self._index[arc.label]
        return tuple(
            s - t + (1 if i == label else 0)
            for i, (s, t) in enumerate(zip(source, target))
        )

    # ------------------------------------------------------------------
    # Regions
    # ------------------------------------------------------------------

    def region_basis(self) -> List["Region"]:
        """
        Pure regions generating all pure regions of the transition system.

        Every chord closes a cycle whose effect must be zero; the integer
        solutions of these equations are computed once and cached.
        """
        if self._basis is None:
            from .region import RegionBuilder

            system = EquationSystem(self.number_of_events)
            for chord in self._tree.chords:
                self._interrupter.check()
                system.add_equation(self.parikh_vector_for_edge(chord))
            self._basis = [
                RegionBuilder.pure(self, vector).with_normal_region_initial_marking()
                for vector in system.find_basis()
            ]
            logger.debug(
                "Region basis of %r: %d regions from %d chords",
                self._ts.name, len(self._basis), len(self._tree.chords),
            )
        return list(self._basis)

    def marking_matrix(self, regions: Sequence["Region"]) -> np.ndarray:
        """
        Markings of all reachable states under ``regions``.

        :returns: An object-dtype matrix with one row per reachable state
            (spanning-tree order) and one column per region.
        :rtype: numpy.ndarray
        """
        states = self._tree.reachable_states
        matrix = np.zeros((len(states), len(regions)), dtype=object)
        for row, state in enumerate(states):
            for column, region in enumerate(regions):
                matrix[row, column] = region.marking_for_state(state)
        return matrix

    def __repr__(self) -> str:
        return f"RegionUtility(ts={self._ts.name!r}, events={self._events})"

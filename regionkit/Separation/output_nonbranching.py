"""
Synthesis of output-nonbranching (ON) nets for persistent systems.

In an ON net every place has at most one consumer. For a deterministic,
persistent and totally reachable transition system with disjoint prime
small cycles, the regions are computed per event ``x``:

1. Labels are grouped by the small cycle containing them; group ``0``
   holds the labels on no cycle.
2. ``NX(x)`` are the states disabling ``x`` and ``XNX(x)`` those of them
   that must stay apart from the states enabling ``x``. Both sets are
   reduced to their extreme representatives under a weak order derived
   from the Parikh vectors.
3. For every minimal ``NX`` state one small inequality system gives the
   weights of the producers of a place consumed only by ``x``.

References
----------
- Best, Devillers & Schlachter (2018), "Bounded choice-free Petri net
  synthesis: algorithmic issues", Acta Informatica 55.
"""

from __future__ import annotations

import logging
import math
from functools import reduce
from typing import Dict, Hashable, List, Optional

from ..exceptions import NonDeterministicError, PreconditionFailedError, UnsupportedPropertiesError
from ..Region.properties import PNProperties
from ..Region.region import RegionBuilder
from ..Region.utility import RegionUtility
from ..Solver.inequality import InequalitySystem, InequalitySystemSolver
from ..TS.cycles import search_small_cycles
from .base import LocationMap, PrecomputedSeparation

logger = logging.getLogger(__name__)


class OutputNonbranchingSeparation(PrecomputedSeparation):
    """
    Regions of an output-nonbranching net.

    :param utility: Utility of the transition system.
    :param properties: Must be empty (output-nonbranching itself is
        expressed through ``location_map``).
    :param location_map: Must give every event its own location.
    :raises UnsupportedPropertiesError: If the properties, the locations or
        the transition system are not supported, or if some inequality
        system has no solution.
    """

    def __init__(
        self,
        utility: RegionUtility,
        properties: PNProperties,
        location_map: LocationMap,
    ) -> None:
        super().__init__(utility, location_map)
        ts = utility.ts
        if not PNProperties().contains_all(properties):
            raise UnsupportedPropertiesError(f"ON synthesis cannot provide {properties}")
        if len({loc for loc in location_map if loc is not None}) != len(ts.alphabet):
            raise UnsupportedPropertiesError("Every event needs its own location")

        try:
            cycles = search_small_cycles(ts, utility.interrupter)
        except (PreconditionFailedError, NonDeterministicError) as e:
            raise UnsupportedPropertiesError(str(e)) from e

        remaining = list(ts.alphabet)
        self._cycles: List[Optional[Dict[str, int]]] = []
        self._cycle_labels: List[List[str]] = []
        for pv in cycles:
            if reduce(math.gcd, pv.values()) != 1:
                raise UnsupportedPropertiesError(f"Non prime small cycle: {pv}")
            labels = [label for label in ts.alphabet if label in pv]
            remaining = [label for label in remaining if label not in pv]
            self._cycles.append(pv)
            self._cycle_labels.append(labels)

        if not self._check_short_path_property():
            raise UnsupportedPropertiesError("Short path property does not hold")

        # group 0: labels on no small cycle
        self._cycles.insert(0, None)
        self._cycle_labels.insert(0, remaining)
        self._synthesis()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _distance(self, state: Hashable, label: str) -> int:
        return self.utility.reaching_parikh_vector(state)[self.utility.event_index(label)]

    def _check_short_path_property(self) -> bool:
        """No tree leaf may be reached by a path containing a whole small cycle."""
        tree = self.utility.spanning_tree
        inner = {tree.predecessor(state) for state in self.ts.states}
        for state in self.ts.states:
            if state in inner:
                continue
            for cycle in self._cycles:
                if all(self._distance(state, label) >= count for label, count in cycle.items()):
                    return False
        return True

    def _synthesis(self) -> None:
        t_zero = self._cycle_labels[0]
        for l, labels in enumerate(self._cycle_labels):
            t_zero_and_l = list(labels)
            if l != 0:
                t_zero_and_l += [label for label in t_zero if label not in labels]
            for x in labels:
                self._compute_regions(l, x, t_zero_and_l)
        logger.debug("ON regions: %s", [str(r) for r in self.regions])

    # ------------------------------------------------------------------
    # Per-event computation
    # ------------------------------------------------------------------

    def _is_less_or_equal(self, l: int, x: str, a: Hashable, b: Hashable) -> bool:
        for j in self._cycle_labels[0]:
            if j != x and self._distance(a, j) > self._distance(b, j):
                return False
        if l == 0:
            return self._distance(a, x) >= self._distance(b, x)
        cycle = self._cycles[l]
        for j in self._cycle_labels[l]:
            if j == x:
                continue
            lhs = cycle[x] * self._distance(a, j) - cycle[j] * self._distance(a, x)
            rhs = cycle[x] * self._distance(b, j) - cycle[j] * self._distance(b, x)
            if lhs > rhs:
                return False
        return True

    def _representatives(self, l: int, x: str, states: List[Hashable], maximal: bool) -> List[Hashable]:
        def leq(a: Hashable, b: Hashable) -> bool:
            return self._is_less_or_equal(l, x, b, a) if maximal else self._is_less_or_equal(l, x, a, b)

        result: List[Hashable] = []
        for candidate in states:
            if any(leq(candidate, other) for other in result):
                continue
            result = [other for other in result if not leq(other, candidate)]
            result.append(candidate)
        return result

    def _compute_regions(self, l: int, x: str, t_zero_and_l: List[str]) -> None:
        ts = self.ts
        xnx: List[Hashable] = []
        nx: List[Hashable] = []
        single_label_cycle = l > 0 and len(self._cycle_labels[l]) == 1
        for state in ts.states:
            if not ts.is_enabled(state, x):
                nx.append(state)
                if not single_label_cycle and ts.predecessors(state, x):
                    xnx.append(state)
            elif single_label_cycle:
                xnx.append(state)
        logger.debug("XNX(%s) = %s, NX(%s) = %s", x, xnx, x, nx)

        m_xnx = self._representatives(l, x, xnx, True)
        m_nx = self._representatives(l, x, nx, False)
        logger.debug("mXNX(%s) = %s, mNX(%s) = %s", x, m_xnx, x, m_nx)
        if not m_xnx:
            return
        for state in m_nx:
            self._solve(l, x, t_zero_and_l, state, m_xnx)

    def _solve(
        self,
        l: int,
        x: str,
        t_zero_and_l: List[str],
        state: Hashable,
        m_xnx: List[Hashable],
    ) -> None:
        self.utility.interrupter.check()
        variables = [label for label in t_zero_and_l if label != x]
        size = 1 + len(variables)
        system = InequalitySystem()
        for i in range(size):
            system.add_inequality(0, "<=", [1 if j == i else 0 for j in range(size)],
                                  "Variable should be non-negative")

        cycle = self._cycles[l]
        for other in m_xnx:
            delta_x = 1 + self._distance(state, x) - self._distance(other, x)
            if l == 0:
                coefficients = [delta_x] + [
                    self._distance(other, j) - self._distance(state, j) for j in variables
                ]
            else:
                # the first variable is unused
                coefficients = [0] + [
                    cycle[j] * delta_x - cycle[x] * (self._distance(state, j) - self._distance(other, j))
                    for j in variables
                ]
            system.add_inequality(0, "<", coefficients, f"Inequality for state {other}")

        solution = InequalitySystemSolver(self.utility.interrupter).assert_disjunction(system).find_solution()
        logger.debug("Got solution: %s", solution)
        if solution is None:
            raise UnsupportedPropertiesError(f"Failure for x={x} and state={state}")

        if l == 0:
            factor = 1
            k = solution[0]
        else:
            # sum_j k_j * cycle[j] = k * cycle[x]
            lhs = sum(solution[i + 1] * cycle[j] for i, j in enumerate(variables))
            divisor = math.gcd(lhs, cycle[x])
            k = lhs // divisor
            factor = cycle[x] // divisor
        logger.debug("Using k=%d and factor=%d", k, factor)

        mu = max(
            k * self._distance(r, x)
            - sum(factor * solution[i + 1] * self._distance(r, j) for i, j in enumerate(variables))
            for r in m_xnx
        )
        h = 0
        if mu < 0:
            h, mu = -mu, 0
        logger.debug("Computed h=%d (side condition) and mu=%d (initial marking)", h, mu)

        builder = RegionBuilder(self.utility).add_weight_on(x, -k).add_loop_around(x, h)
        for i, j in enumerate(variables):
            builder.add_weight_on(j, factor * solution[i + 1])
        region = builder.with_initial_marking(mu)
        logger.debug("Constructed region %s", region)
        self.regions.append(region)

"""
Small cycles of persistent transition systems.

For a deterministic, totally reachable and persistent transition system the
Parikh vectors of its *small* cycles can be read off the chords of a
spanning tree rooted at a home state. This is used by the marked-graph and
output-nonbranching synthesis algorithms.

References
----------
- Best & Devillers (2015), "Characterisation of the state spaces of
  live and bounded marked graph Petri nets".
- Best, Devillers & Schlachter (2018), "Bounded choice-free Petri net
  synthesis: algorithmic issues".
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, FrozenSet, Hashable, List, Optional, Set, Tuple

import networkx as nx

from ..exceptions import NonDisjointCyclesError, PreconditionFailedError
from ..interrupt import NEVER, Interrupter
from .analysis import check_deterministic, find_persistence_violation
from .spanning_tree import SpanningTree
from .transition_system import TransitionSystem

logger = logging.getLogger(__name__)

ParikhVector = Dict[str, int]


def find_home_state(ts: TransitionSystem) -> Hashable:
    """
    Return a state of a terminal strongly connected component.

    Among the terminal components reachable from the initial state the one
    holding the earliest inserted state wins; its earliest state is returned.
    """
    order = {state: idx for idx, state in enumerate(ts.states)}
    reachable = nx.descendants(ts.graph, ts.initial_state) | {ts.initial_state}
    condensed = nx.condensation(nx.DiGraph(ts.graph.subgraph(reachable)))
    sinks = [
        min(condensed.nodes[c]["members"], key=order.__getitem__)
        for c in condensed.nodes
        if condensed.out_degree(c) == 0
    ]
    return min(sinks, key=order.__getitem__)


def _tree_pv(tree: SpanningTree, state: Hashable, up_to: Optional[Hashable]) -> Counter:
    """Parikh vector of the tree path from ``up_to`` down to ``state``."""
    result: Counter = Counter()
    arc = tree.predecessor_arc(state)
    while arc is not None and state != up_to:
        result[arc.label] += 1
        state = arc.source
        arc = tree.predecessor_arc(state)
    return result


def _common_ancestor(tree: SpanningTree, state1: Hashable, state2: Hashable) -> Hashable:
    if state1 == state2:
        return state1
    ancestors1 = {state1}
    ancestors2 = {state2}
    while True:
        if state1 is not None:
            state1 = tree.predecessor(state1)
            if state1 in ancestors2:
                return state1
            ancestors1.add(state1)
        if state2 is not None:
            state2 = tree.predecessor(state2)
            if state2 in ancestors1:
                return state2
            ancestors2.add(state2)


def _residual(pv1: Counter, pv2: Counter) -> Counter:
    return Counter({k: v - pv2[k] for k, v in pv1.items() if v - pv2[k] > 0})


def search_small_cycles(
    ts: TransitionSystem, interrupter: Interrupter = NEVER
) -> List[ParikhVector]:
    """
    Compute the Parikh vectors of the small cycles of ``ts``.

    :param ts: A deterministic, totally reachable, persistent transition system.
    :param interrupter: Cancellation flag polled per chord.
    :returns: Distinct non-empty Parikh vectors (``label -> count``).
    :rtype: list[dict[str, int]]
    :raises NonDeterministicError: If ``ts`` is not deterministic.
    :raises PreconditionFailedError: If ``ts`` is not totally reachable or
        not persistent.
    :raises NonDisjointCyclesError: If a chord closes a cycle that is not
        the difference of two comparable tree paths.
    """
    check_deterministic(ts, interrupter=interrupter)
    if not SpanningTree(ts, interrupter=interrupter).is_totally_reachable():
        raise PreconditionFailedError(
            f"Transition system {ts.name!r} is not totally reachable"
        )
    violation = find_persistence_violation(ts, interrupter=interrupter)
    if violation is not None:
        raise PreconditionFailedError(
            "Transition system %r is not persistent: labels %r and %r in state %r"
            % (ts.name, violation[1], violation[2], violation[0])
        )

    home = find_home_state(ts)
    tree = SpanningTree(ts, root=home, interrupter=interrupter)
    seen: Set[FrozenSet[Tuple[str, int]]] = set()
    result: List[ParikhVector] = []
    for chord in tree.chords:
        interrupter.check()
        ancestor = _common_ancestor(tree, chord.source, chord.target)
        pv1 = _tree_pv(tree, chord.source, ancestor)
        pv1[chord.label] += 1
        pv2 = _tree_pv(tree, chord.target, ancestor)
        if any(pv1[label] < count for label, count in pv2.items()):
            raise NonDisjointCyclesError(dict(_residual(pv1, pv2)), dict(_residual(pv2, pv1)))
        cycle = _residual(pv1, pv2)
        key = frozenset(cycle.items())
        if cycle and key not in seen:
            seen.add(key)
            result.append(dict(cycle))
    logger.debug("Small cycles around home state %r: %s", home, result)
    return result

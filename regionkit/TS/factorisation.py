"""
Factorisation of transition systems into concurrent components.

Labels are grouped by an equivalence relation: two labels meeting at a state
end up in the same class unless they are locally separated and form a
(generalised) diamond there. Each class yields one factor made of the arcs
carrying its labels and the states weakly connected to the initial state by
them. State ids are preserved so results on a factor can be mapped back to
the composite system.

References
----------
- Devillers (2018), "Factorisation of transition systems",
  Acta Informatica 55.
"""

from __future__ import annotations

import logging
from itertools import combinations
from typing import Hashable, Iterable, List, NamedTuple, Optional

import networkx as nx
from networkx.utils import UnionFind

from ..interrupt import NEVER, Interrupter
from .analysis import check_deterministic
from .transition_system import TransitionSystem

logger = logging.getLogger(__name__)


class _Neighbour(NamedTuple):
    state: Hashable
    label: str
    forward: bool


def _step(ts: TransitionSystem, state: Hashable, label: str, forward: bool) -> Optional[Hashable]:
    nodes = ts.successors(state, label) if forward else ts.predecessors(state, label)
    return nodes[0] if nodes else None


def _neighbours(ts: TransitionSystem, state: Hashable) -> List[_Neighbour]:
    result = [_Neighbour(arc.target, arc.label, True) for arc in ts.out_arcs(state)]
    result.extend(_Neighbour(arc.source, arc.label, False) for arc in ts.in_arcs(state))
    return result


def create_factor(ts: TransitionSystem, labels: Iterable[str]) -> TransitionSystem:
    """
    Restrict ``ts`` to ``labels``.

    The factor contains the states weakly connected to the initial state
    through arcs labelled with ``labels`` and exactly those arcs.
    """
    labels = set(labels)
    connectivity = nx.Graph()
    connectivity.add_node(ts.initial_state)
    connectivity.add_edges_from(
        (arc.source, arc.target) for arc in ts.arcs if arc.label in labels
    )
    component = nx.node_connected_component(connectivity, ts.initial_state)

    factor = TransitionSystem(f"{ts.name} factor {sorted(labels)}")
    for event in ts.alphabet:
        if event in labels:
            factor.add_event(event, ts.location(event))
    for state in ts.states:
        if state in component:
            factor.add_state(state, **ts.graph.nodes[state])
    for arc in ts.arcs:
        if arc.label in labels and arc.source in component and arc.target in component:
            factor.add_arc(*arc)
    factor.initial_state = ts.initial_state
    return factor


def factorise(ts: TransitionSystem, interrupter: Interrupter = NEVER) -> List[TransitionSystem]:
    """
    Split ``ts`` into factors over disjoint label sets.

    :param ts: A forward and backward deterministic transition system.
    :param interrupter: Cancellation flag polled per pair of neighbours.
    :returns: The factors, or ``[ts]`` if ``ts`` is not factorisable.
    :rtype: list[TransitionSystem]
    :raises NonDeterministicError: If ``ts`` is not forward and backward
        deterministic.
    """
    check_deterministic(ts, True, interrupter)
    check_deterministic(ts, False, interrupter)

    alphabet = ts.alphabet
    classes = UnionFind(alphabet)

    def num_classes() -> int:
        return len({classes[event] for event in alphabet})

    for state in ts.states:
        for first, second in combinations(_neighbours(ts, state), 2):
            interrupter.check()
            if classes[first.label] == classes[second.label]:
                continue
            if first.state == second.state and first.state != state:
                # not locally separated
                classes.union(first.label, second.label)
                continue
            state1 = _step(ts, second.state, first.label, first.forward)
            state2 = _step(ts, first.state, second.label, second.forward)
            if state1 is None or state1 != state2:
                # no diamond
                classes.union(first.label, second.label)
        if num_classes() <= 1:
            return [ts]
    if num_classes() <= 1:
        return [ts]

    index = {event: idx for idx, event in enumerate(alphabet)}
    label_classes = sorted(
        (sorted(group, key=index.__getitem__) for group in classes.to_sets()),
        key=lambda group: index[group[0]],
    )
    logger.debug("Found %d candidate factors: %s", len(label_classes), label_classes)
    return [create_factor(ts, group) for group in label_classes]

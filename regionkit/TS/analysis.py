"""
Behavioural properties of transition systems.

Small predicates used as preconditions by the specialised separation
strategies: determinism (forward and backward), total reachability,
(backward) persistence and reversibility.
"""

from __future__ import annotations

from itertools import combinations
from typing import Dict, Hashable, Optional, Set, Tuple

import networkx as nx

from ..exceptions import NonDeterministicError
from ..interrupt import NEVER, Interrupter
from .spanning_tree import SpanningTree
from .transition_system import TransitionSystem


# ---------------------------------------------------------------------------
# Determinism
# ---------------------------------------------------------------------------


def find_nondeterminism(
    ts: TransitionSystem, forward: bool = True, interrupter: Interrupter = NEVER
) -> Optional[Tuple[Hashable, str]]:
    """
    Find a state with two arcs carrying the same label.

    :param ts: Transition system to examine.
    :param forward: Look at outgoing arcs when ``True``, at incoming arcs
        otherwise (backward determinism).
    :returns: ``(state, label)`` witnessing non-determinism, or ``None``.
    """
    seen: Set[Tuple[Hashable, str]] = set()
    for arc in ts.arcs:
        interrupter.check()
        key = (arc.source if forward else arc.target, arc.label)
        if key in seen:
            return key
        seen.add(key)
    return None


def is_deterministic(ts: TransitionSystem, forward: bool = True) -> bool:
    return find_nondeterminism(ts, forward) is None


def check_deterministic(
    ts: TransitionSystem, forward: bool = True, interrupter: Interrupter = NEVER
) -> None:
    """Raise :class:`NonDeterministicError` unless ``ts`` is deterministic."""
    witness = find_nondeterminism(ts, forward, interrupter)
    if witness is not None:
        raise NonDeterministicError(witness[0], witness[1], forward)


# ---------------------------------------------------------------------------
# Reachability
# ---------------------------------------------------------------------------


def is_totally_reachable(ts: TransitionSystem) -> bool:
    return SpanningTree(ts).is_totally_reachable()


def is_reversible(ts: TransitionSystem) -> bool:
    """``True`` if the initial state can be reached again from every reachable state."""
    initial = ts.initial_state
    reachable = nx.descendants(ts.graph, initial)
    back = nx.ancestors(ts.graph, initial)
    return reachable <= back


def reachable_part(ts: TransitionSystem) -> TransitionSystem:
    """
    Copy of ``ts`` restricted to the states reachable from the initial state.

    State ids, state attributes and the alphabet (with locations) are kept.
    """
    tree = SpanningTree(ts)
    result = TransitionSystem(ts.name)
    for event in ts.alphabet:
        result.add_event(event, ts.location(event))
    for state in tree.reachable_states:
        result.add_state(state, **ts.graph.nodes[state])
    for state in tree.reachable_states:
        for arc in ts.out_arcs(state):
            result.add_arc(*arc)
    result.initial_state = ts.initial_state
    return result


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def _postset_by_label(
    ts: TransitionSystem, state: Hashable, backward: bool
) -> Dict[str, Set[Hashable]]:
    result: Dict[str, Set[Hashable]] = {}
    arcs = ts.in_arcs(state) if backward else ts.out_arcs(state)
    for arc in arcs:
        other = arc.source if backward else arc.target
        result.setdefault(arc.label, set()).add(other)
    return result


def find_persistence_violation(
    ts: TransitionSystem, backward: bool = False, interrupter: Interrupter = NEVER
) -> Optional[Tuple[Hashable, str, str]]:
    """
    Look for a state where two enabled labels do not commute.

    A TS is persistent if whenever two different labels ``a`` and ``b`` are
    enabled in a state, some common state is reached by ``ab`` and by ``ba``.
    With ``backward=True`` the same is checked on reversed arcs.

    :returns: ``(state, label1, label2)`` or ``None``.
    """
    cache: Dict[Hashable, Dict[str, Set[Hashable]]] = {}

    def postset(state: Hashable) -> Dict[str, Set[Hashable]]:
        if state not in cache:
            cache[state] = _postset_by_label(ts, state, backward)
        return cache[state]

    for state in ts.states:
        enabled = postset(state)
        for label1, label2 in combinations(list(enabled), 2):
            interrupter.check()
            after12: Set[Hashable] = set()
            for node in enabled[label1]:
                after12 |= postset(node).get(label2, set())
            found = any(
                not after12.isdisjoint(postset(node).get(label1, set()))
                for node in enabled[label2]
            )
            if not found:
                return state, label1, label2
    return None


def is_persistent(
    ts: TransitionSystem, backward: bool = False, interrupter: Interrupter = NEVER
) -> bool:
    return find_persistence_violation(ts, backward, interrupter) is None

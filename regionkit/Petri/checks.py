"""
Structural checks of Petri nets and behavioural comparison of transition systems.

The structural checks look at presets, postsets and flow weights of places
(see :mod:`regionkit.Petri.petri_net` for the graph conventions). They are
used to confirm that a synthesized net has the requested properties.

References
----------
- Murata (1989), Proc. IEEE, "Petri nets: Properties, analysis and
  applications".
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, FrozenSet, Hashable, Mapping, Optional, Set, Tuple

import networkx as nx
from networkx.algorithms import isomorphism

from ..TS.transition_system import TransitionSystem
from .petri_net import PetriNet

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------


def is_pure(pn: PetriNet) -> bool:
    """No transition both consumes from and produces on the same place."""
    for place in pn.places:
        if set(pn.preset(place)) & set(pn.postset(place)):
            logger.debug("Place %s is a side condition", place)
            return False
    return True


def is_plain(pn: PetriNet) -> bool:
    return all(data["weight"] <= 1 for _, _, data in pn.graph.edges(data=True))


def is_generalized_t_net(pn: PetriNet) -> bool:
    """Every place has at most one producer and at most one consumer."""
    for place in pn.places:
        if len(pn.preset(place)) > 1 or len(pn.postset(place)) > 1:
            logger.debug("T-net check: merge or conflict at %s", place)
            return False
    return True


def is_generalized_marked_graph(pn: PetriNet) -> bool:
    """Every place has exactly one producer and exactly one consumer."""
    for place in pn.places:
        if len(pn.preset(place)) != 1 or len(pn.postset(place)) != 1:
            logger.debug("Marked graph check: %s does not have one producer and one consumer", place)
            return False
    return True


def is_output_nonbranching(pn: PetriNet) -> bool:
    return all(len(pn.postset(place)) <= 1 for place in pn.places)


def is_merge_free(pn: PetriNet) -> bool:
    return all(len(pn.preset(place)) <= 1 for place in pn.places)


def is_conflict_free(pn: PetriNet) -> bool:
    """
    Plain, and every place has at most one consumer or is given back its
    tokens by each of its consumers.
    """
    if not is_plain(pn):
        return False
    for place in pn.places:
        consumers = set(pn.postset(place))
        if len(consumers) > 1 and not consumers <= set(pn.preset(place)):
            logger.debug("Place %s is in conflict between %s", place, sorted(consumers))
            return False
    return True


def is_homogeneous(pn: PetriNet) -> bool:
    """All flows leaving a place have the same weight."""
    for place in pn.places:
        weights = {pn.weight(place, transition) for transition in pn.postset(place)}
        if len(weights) > 1:
            return False
    return True


def is_distributed_implementation(pn: PetriNet, locations: Mapping[str, Optional[str]]) -> bool:
    """
    All consumers of a place share one location.

    :param locations: Location of each transition; ``None`` matches any
        location.
    """
    for place in pn.places:
        location = None
        for transition in pn.postset(place):
            own = locations.get(transition)
            if own is None:
                continue
            if location is None:
                location = own
            elif location != own:
                logger.debug("Place %s has consumers at %s and %s", place, location, own)
                return False
    return True


def max_tokens(pn: PetriNet, limit: Optional[int] = None) -> int:
    """The largest number of tokens on a place in a reachable marking."""
    graph = pn.reachability_graph(limit)
    return max(
        (max(graph.state_attr(state, "marking"), default=0) for state in graph.states),
        default=0,
    )


def is_k_bounded(pn: PetriNet, k: int, limit: Optional[int] = None) -> bool:
    return max_tokens(pn, limit) <= k


# ---------------------------------------------------------------------------
# Behaviour
# ---------------------------------------------------------------------------


def _labelled_graph(ts: TransitionSystem) -> nx.MultiDiGraph:
    graph = nx.MultiDiGraph()
    for state in ts.states:
        graph.add_node(state, initial=state == ts.initial_state)
    for arc in ts.arcs:
        graph.add_edge(arc.source, arc.target, key=arc.label, label=arc.label)
    return graph


def is_isomorphic(ts1: TransitionSystem, ts2: TransitionSystem) -> bool:
    """
    Whether a label-preserving bijection maps ``ts1`` onto ``ts2`` and the
    initial state onto the initial state.
    """
    return nx.is_isomorphic(
        _labelled_graph(ts1),
        _labelled_graph(ts2),
        node_match=isomorphism.categorical_node_match("initial", False),
        edge_match=isomorphism.categorical_multiedge_match("label", None),
    )


def _step(ts: TransitionSystem, states: FrozenSet[Hashable], label: str) -> FrozenSet[Hashable]:
    return frozenset(target for state in states for target in ts.successors(state, label))


def _enabled(ts: TransitionSystem, states: FrozenSet[Hashable]) -> Set[str]:
    return {label for state in states for label in ts.enabled(state)}


def is_language_equivalent(ts1: TransitionSystem, ts2: TransitionSystem) -> bool:
    """
    Whether both systems accept the same words.

    Both (prefix closed) languages are explored in lockstep through the
    subset construction; they differ exactly when some word reaches
    subsets with different enabled labels.
    """
    start = (frozenset([ts1.initial_state]), frozenset([ts2.initial_state]))
    seen: Set[Tuple[FrozenSet[Hashable], FrozenSet[Hashable]]] = {start}
    todo: Deque[Tuple[FrozenSet[Hashable], FrozenSet[Hashable]]] = deque([start])
    while todo:
        states1, states2 = todo.popleft()
        enabled = _enabled(ts1, states1)
        if enabled != _enabled(ts2, states2):
            logger.debug("Languages differ after reaching %s and %s", set(states1), set(states2))
            return False
        for label in sorted(enabled):
            pair = (_step(ts1, states1, label), _step(ts2, states2, label))
            if pair not in seen:
                seen.add(pair)
                todo.append(pair)
    return True

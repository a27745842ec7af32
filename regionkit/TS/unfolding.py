"""
Limited unfolding of deterministic transition systems.

The unfolding is built by a depth-first search. Only the states on the
current root-to-here path keep a copy in the unfolding; an arc back into
such a state reuses the copy and closes a loop, every other arc leads to a
fresh copy. The result has the same language as the input and is the
starting point for synthesis up to language equivalence.
"""

from __future__ import annotations

import logging
from typing import Dict, Hashable, Iterator, List, Tuple

from ..interrupt import NEVER, Interrupter
from .analysis import check_deterministic
from .transition_system import Arc, TransitionSystem

logger = logging.getLogger(__name__)

ORIGINAL_STATE = "original_state"


def limited_unfolding(ts: TransitionSystem, interrupter: Interrupter = NEVER) -> TransitionSystem:
    """
    Compute the limited unfolding of ``ts``.

    Every state of the result carries the ``original_state`` attribute
    naming the state of ``ts`` it copies.

    :param ts: A deterministic transition system.
    :param interrupter: Cancellation flag polled once per DFS step.
    :returns: The unfolding.
    :rtype: TransitionSystem
    :raises NonDeterministicError: If ``ts`` is not deterministic.
    """
    check_deterministic(ts, interrupter=interrupter)
    unfolding = TransitionSystem(f"Limited unfolding of {ts.name}")
    for event in ts.alphabet:
        unfolding.add_event(event, ts.location(event))

    on_path: Dict[Hashable, Hashable] = {}
    stack: List[Tuple[Hashable, Iterator[Arc]]] = []

    def visit(old: Hashable) -> Hashable:
        attrs = dict(ts.graph.nodes[old])
        attrs[ORIGINAL_STATE] = old
        new = unfolding.add_state(None, **attrs)
        on_path[old] = new
        stack.append((old, iter(ts.out_arcs(old))))
        return new

    unfolding.initial_state = visit(ts.initial_state)
    while stack:
        interrupter.check()
        old, arcs = stack[-1]
        arc = next(arcs, None)
        if arc is None:
            del on_path[old]
            stack.pop()
            continue
        source = on_path[old]
        target = on_path.get(arc.target)
        if target is None:
            target = visit(arc.target)
        unfolding.add_arc(source, target, arc.label)

    logger.debug(
        "Limited unfolding of %r has %d states (input had %d)",
        ts.name, len(unfolding), len(ts),
    )
    return unfolding

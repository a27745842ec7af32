"""
Breadth-first spanning trees of transition systems.

The tree is built from a root (the initial state by default) by a
breadth-first search over outgoing arcs in insertion order, so every tree
path is a shortest path. Every arc that leaves a reached state and is not a
tree arc is a *chord*. States never reached are *unreachable*.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, Hashable, List, Optional

from ..interrupt import NEVER, Interrupter
from .transition_system import Arc, TransitionSystem


class SpanningTree:
    """
    BFS spanning tree of a :class:`TransitionSystem`.

    :param ts: The transition system.
    :param root: Root of the tree; defaults to the initial state.
    :param interrupter: Cancellation flag polled once per visited state.
    """

    def __init__(
        self,
        ts: TransitionSystem,
        root: Optional[Hashable] = None,
        interrupter: Interrupter = NEVER,
    ) -> None:
        self._ts = ts
        self._root = ts.initial_state if root is None else root
        self._predecessor: Dict[Hashable, Optional[Arc]] = {self._root: None}
        self._order: List[Hashable] = []
        self._chords: List[Arc] = []

        queue = deque([self._root])
        while queue:
            interrupter.check()
            state = queue.popleft()
            self._order.append(state)
            for arc in ts.out_arcs(state):
                if arc.target in self._predecessor:
                    self._chords.append(arc)
                else:
                    self._predecessor[arc.target] = arc
                    queue.append(arc.target)

    @property
    def ts(self) -> TransitionSystem:
        return self._ts

    @property
    def root(self) -> Hashable:
        return self._root

    @property
    def chords(self) -> List[Arc]:
        """Non-tree arcs leaving reachable states."""
        return list(self._chords)

    @property
    def reachable_states(self) -> List[Hashable]:
        """Reachable states in BFS order (root first)."""
        return list(self._order)

    @property
    def unreachable_states(self) -> List[Hashable]:
        return [s for s in self._ts.states if s not in self._predecessor]

    def is_reachable(self, state: Hashable) -> bool:
        return state in self._predecessor

    def is_totally_reachable(self) -> bool:
        return len(self._predecessor) == len(self._ts)

    def predecessor_arc(self, state: Hashable) -> Optional[Arc]:
        """The tree arc entering ``state``; ``None`` for the root and unreachable states."""
        return self._predecessor.get(state)

    def predecessor(self, state: Hashable) -> Optional[Hashable]:
        arc = self._predecessor.get(state)
        return None if arc is None else arc.source

    def path_to(self, state: Hashable) -> List[Arc]:
        """Tree arcs from the root to ``state`` (empty for the root)."""
        path: List[Arc] = []
        arc = self._predecessor.get(state)
        while arc is not None:
            path.append(arc)
            arc = self._predecessor[arc.source]
        path.reverse()
        return path

"""
Labelled transition systems on top of :mod:`networkx`.

A :class:`TransitionSystem` wraps a :class:`networkx.MultiDiGraph` whose
nodes are states and whose edges are labelled arcs. The arc label is used
as the multigraph edge key, so at most one arc exists for each
``(source, target, label)`` triple.

Graph conventions
-----------------
- Nodes: arbitrary hashable state ids with optional attributes
  (e.g. ``index`` for word systems, ``original_state`` for unfoldings).
- Edges: key and ``label`` attribute hold the event name.
- Graph attributes: ``name``.

Events are kept in an ordered alphabet together with an optional
``location`` string per event.
"""

from __future__ import annotations

from typing import Any, Dict, Hashable, Iterable, List, NamedTuple, Optional, Set, Tuple

import networkx as nx


class Arc(NamedTuple):
    """A labelled arc ``source --label--> target``."""

    source: Hashable
    target: Hashable
    label: str


class TransitionSystem:
    """
    Finite labelled transition system with a single initial state.

    :param name: Optional human readable name.
    :type name: str

    .. code-block:: python

        from regionkit.TS.transition_system import TransitionSystem

        ts = TransitionSystem.from_arcs(
            [("s", "t", "a"), ("t", "u", "b")], initial="s"
        )
        ts.alphabet          # ['a', 'b']
        ts.successors("s", "a")  # ['t']
    """

    def __init__(self, name: str = "") -> None:
        self._graph: nx.MultiDiGraph = nx.MultiDiGraph(name=name)
        self._initial: Optional[Hashable] = None
        self._events: Dict[str, Optional[str]] = {}
        self._counter = 0

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_arcs(
        cls,
        arcs: Iterable[Tuple[Hashable, Hashable, str]],
        initial: Hashable,
        states: Iterable[Hashable] = (),
        name: str = "",
    ) -> "TransitionSystem":
        """
        Build a transition system from ``(source, target, label)`` triples.

        :param arcs: Arc triples; missing states are created on the fly.
        :param initial: The initial state (created if it does not occur in
            ``arcs``).
        :param states: Additional (possibly isolated) states.
        :param name: Optional name.
        :returns: The new transition system.
        :rtype: TransitionSystem
        """
        ts = cls(name)
        ts.add_state(initial)
        for state in states:
            ts.add_state(state)
        for source, target, label in arcs:
            ts.add_arc(source, target, label)
        ts.initial_state = initial
        return ts

    def add_state(self, state: Optional[Hashable] = None, **attrs: Any) -> Hashable:
        """
        Add a state and return its id.

        When ``state`` is ``None`` a fresh id ``"s<n>"`` is generated. Adding
        an existing state only updates its attributes.
        """
        if state is None:
            state = self._fresh_id()
        self._graph.add_node(state, **attrs)
        return state

    def _fresh_id(self) -> str:
        while True:
            candidate = f"s{self._counter}"
            self._counter += 1
            if candidate not in self._graph:
                return candidate

    def add_event(self, event: str, location: Optional[str] = None) -> None:
        """Register ``event`` in the alphabet, optionally with a location."""
        if event not in self._events or location is not None:
            self._events[event] = location

    def add_arc(self, source: Hashable, target: Hashable, label: str) -> Arc:
        """
        Add the arc ``source --label--> target``.

        Missing states are created. Adding an arc that already exists is a
        no-op and returns the existing arc.
        """
        if source not in self._graph:
            self.add_state(source)
        if target not in self._graph:
            self.add_state(target)
        if label not in self._events:
            self._events[label] = None
        if not self._graph.has_edge(source, target, key=label):
            self._graph.add_edge(source, target, key=label, label=label)
        return Arc(source, target, label)

    def set_location(self, event: str, location: Optional[str]) -> None:
        """Attach (or clear) the ``location`` extension of ``event``."""
        if event not in self._events:
            raise KeyError(f"Unknown event {event!r}")
        self._events[event] = location

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._graph.graph.get("name", "")

    @property
    def graph(self) -> nx.MultiDiGraph:
        """The underlying NetworkX multigraph."""
        return self._graph

    @property
    def initial_state(self) -> Hashable:
        if self._initial is None:
            raise ValueError("Transition system has no initial state")
        return self._initial

    @initial_state.setter
    def initial_state(self, state: Hashable) -> None:
        if state not in self._graph:
            raise KeyError(f"Unknown state {state!r}")
        self._initial = state

    @property
    def states(self) -> List[Hashable]:
        """All states in insertion order."""
        return list(self._graph.nodes)

    @property
    def arcs(self) -> List[Arc]:
        return [Arc(u, v, k) for u, v, k in self._graph.edges(keys=True)]

    @property
    def alphabet(self) -> List[str]:
        """All events in insertion order."""
        return list(self._events)

    def location(self, event: str) -> Optional[str]:
        return self._events.get(event)

    def has_state(self, state: Hashable) -> bool:
        return state in self._graph

    def __contains__(self, state: Hashable) -> bool:
        return state in self._graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def state_attr(self, state: Hashable, key: str, default: Any = None) -> Any:
        return self._graph.nodes[state].get(key, default)

    def set_state_attr(self, state: Hashable, key: str, value: Any) -> None:
        self._graph.nodes[state][key] = value

    def out_arcs(self, state: Hashable) -> List[Arc]:
        return [Arc(u, v, k) for u, v, k in self._graph.out_edges(state, keys=True)]

    def in_arcs(self, state: Hashable) -> List[Arc]:
        return [Arc(u, v, k) for u, v, k in self._graph.in_edges(state, keys=True)]

    def neighbouring_arcs(self, state: Hashable) -> List[Arc]:
        """Outgoing and incoming arcs of ``state`` (self-loops only once)."""
        result = self.out_arcs(state)
        result.extend(arc for arc in self.in_arcs(state) if arc.source != arc.target)
        return result

    def successors(self, state: Hashable, label: Optional[str] = None) -> List[Hashable]:
        """Targets of arcs leaving ``state``, restricted to ``label`` if given."""
        return [
            v
            for _, v, k in self._graph.out_edges(state, keys=True)
            if label is None or k == label
        ]

    def predecessors(self, state: Hashable, label: Optional[str] = None) -> List[Hashable]:
        """Sources of arcs entering ``state``, restricted to ``label`` if given."""
        return [
            u
            for u, _, k in self._graph.in_edges(state, keys=True)
            if label is None or k == label
        ]

    def enabled(self, state: Hashable) -> Set[str]:
        """Labels of all arcs leaving ``state``."""
        return {k for _, _, k in self._graph.out_edges(state, keys=True)}

    def is_enabled(self, state: Hashable, label: str) -> bool:
        return any(k == label for _, _, k in self._graph.out_edges(state, keys=True))

    def copy(self, name: Optional[str] = None) -> "TransitionSystem":
        result = TransitionSystem()
        result._graph = self._graph.copy()
        if name is not None:
            result._graph.graph["name"] = name
        result._initial = self._initial
        result._events = dict(self._events)
        result._counter = self._counter
        return result

    def __repr__(self) -> str:
        return (
            f"TransitionSystem(name={self.name!r}, |S|={self._graph.number_of_nodes()}, "
            f"|A|={self._graph.number_of_edges()}, initial={self._initial!r})"
        )

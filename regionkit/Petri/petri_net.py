"""
Place/transition nets as bipartite :mod:`networkx` graphs.

Graph conventions
-----------------
- Nodes:
    * transitions: ``kind="transition"``, the node id is the event label.
    * places: ``kind="place"``, ids ``"p0"``, ``"p1"``, ... with the initial
      marking in ``tokens`` and, for synthesized nets, the source region
      in ``region``.
- Edges: ``weight`` (a positive integer) on every flow, place to
  transition for consumption and transition to place for production.

A marking is a tuple of token counts in :attr:`PetriNet.places` order.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Deque, Dict, Hashable, List, Optional, Tuple

import networkx as nx

from ..exceptions import SynthesisError
from ..interrupt import NEVER, Interrupter
from ..TS.transition_system import TransitionSystem

logger = logging.getLogger(__name__)

Marking = Tuple[int, ...]


class PetriNet:
    """
    A place/transition net with an initial marking.

    :param name: Optional human readable name.

    .. code-block:: python

        pn = PetriNet()
        pn.add_transition("a")
        p = pn.add_place(tokens=1)
        pn.add_flow(p, "a")
        pn.reachability_graph().alphabet  # ['a']
    """

    def __init__(self, name: str = "") -> None:
        self._graph: nx.DiGraph = nx.DiGraph(name=name)
        self._places: List[str] = []
        self._transitions: List[str] = []

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_transition(self, label: str) -> str:
        if label in self._graph:
            if self._graph.nodes[label]["kind"] != "transition":
                raise ValueError(f"Node {label!r} already exists as a place")
            return label
        self._graph.add_node(label, kind="transition")
        self._transitions.append(label)
        return label

    def add_place(self, tokens: int = 0, region: Any = None) -> str:
        """Add a place with ``tokens`` initial tokens and return its id."""
        if tokens < 0:
            raise ValueError(f"Initial marking must be non-negative, got {tokens}")
        index = len(self._places)
        while f"p{index}" in self._graph:
            index += 1
        place = f"p{index}"
        self._graph.add_node(place, kind="place", tokens=tokens, region=region)
        self._places.append(place)
        return place

    def add_flow(self, source: str, target: str, weight: int = 1) -> None:
        """Add ``weight`` to the flow from ``source`` to ``target``."""
        if weight <= 0:
            raise ValueError(f"Flow weight must be positive, got {weight}")
        kinds = (self.kind(source), self.kind(target))
        if kinds not in (("place", "transition"), ("transition", "place")):
            raise ValueError(f"A flow must connect a place and a transition, got {kinds}")
        if self._graph.has_edge(source, target):
            self._graph[source][target]["weight"] += weight
        else:
            self._graph.add_edge(source, target, weight=weight)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._graph.graph.get("name", "")

    @property
    def graph(self) -> nx.DiGraph:
        """The underlying bipartite NetworkX graph."""
        return self._graph

    @property
    def places(self) -> List[str]:
        return list(self._places)

    @property
    def transitions(self) -> List[str]:
        return list(self._transitions)

    def kind(self, node: str) -> str:
        return self._graph.nodes[node]["kind"]

    def tokens(self, place: str) -> int:
        return self._graph.nodes[place]["tokens"]

    def region(self, place: str) -> Any:
        return self._graph.nodes[place].get("region")

    def preset(self, node: str) -> List[str]:
        return list(self._graph.predecessors(node))

    def postset(self, node: str) -> List[str]:
        return list(self._graph.successors(node))

    def weight(self, source: str, target: str) -> int:
        """Weight of the flow from ``source`` to ``target``, ``0`` if absent."""
        data = self._graph.get_edge_data(source, target)
        return data["weight"] if data else 0

    @property
    def initial_marking(self) -> Marking:
        return tuple(self.tokens(place) for place in self._places)

    # ------------------------------------------------------------------
    # Token game
    # ------------------------------------------------------------------

    def is_enabled(self, marking: Marking, transition: str) -> bool:
        return all(
            marking[index] >= self.weight(place, transition)
            for index, place in enumerate(self._places)
        )

    def fire(self, marking: Marking, transition: str) -> Marking:
        """
        Fire ``transition`` in ``marking``.

        :raises ValueError: If ``transition`` is not enabled.
        """
        if not self.is_enabled(marking, transition):
            raise ValueError(f"Transition {transition!r} is not enabled in {marking}")
        return tuple(
            marking[index] - self.weight(place, transition) + self.weight(transition, place)
            for index, place in enumerate(self._places)
        )

    def reachability_graph(
        self,
        limit: Optional[int] = None,
        interrupter: Interrupter = NEVER,
    ) -> TransitionSystem:
        """
        Explore all reachable markings breadth first.

        States are named ``m0``, ``m1``, ... in discovery order and carry
        their marking in the ``marking`` attribute. Every transition is in
        the alphabet, even if it never fires.

        :param limit: Maximal number of markings to explore.
        :param interrupter: Cancellation flag polled per marking.
        :returns: The reachability graph.
        :rtype: TransitionSystem
        :raises SynthesisError: If more than ``limit`` markings are reachable.
        """
        ts = TransitionSystem(f"Reachability graph of {self.name}".rstrip())
        for transition in self._transitions:
            ts.add_event(transition)
        states: Dict[Marking, Hashable] = {}

        def state_for(marking: Marking) -> Hashable:
            state = states.get(marking)
            if state is None:
                if limit is not None and len(states) >= limit:
                    raise SynthesisError(f"Net {self.name!r} has more than {limit} reachable markings")
                state = ts.add_state(f"m{len(states)}", marking=marking)
                states[marking] = state
                todo.append(marking)
            return state

        todo: Deque[Marking] = deque()
        ts.initial_state = state_for(self.initial_marking)
        while todo:
            interrupter.check()
            marking = todo.popleft()
            for transition in self._transitions:
                if self.is_enabled(marking, transition):
                    target = state_for(self.fire(marking, transition))
                    ts.add_arc(states[marking], target, transition)
        logger.debug("Net %r has %d reachable markings", self.name, len(states))
        return ts

    def __repr__(self) -> str:
        return (
            f"PetriNet(name={self.name!r}, |P|={len(self._places)}, "
            f"|T|={len(self._transitions)})"
        )

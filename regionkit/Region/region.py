"""
Regions of transition systems and a builder for combining them.

A region assigns each event a backward weight ``b(e) >= 0`` (tokens
consumed) and a forward weight ``f(e) >= 0`` (tokens produced), together
with an initial marking ``m0 >= 0``. Its effect is ``w(e) = f(e) - b(e)``
and the marking of a reachable state ``s`` is
``m0 + sum_e PV(s)[e] * w(e)``. A region is *valid* when every arc
``s -e-> s'`` satisfies ``marking(s) >= b(e)`` and
``marking(s') = marking(s) + w(e)``.

Regions are immutable. New regions are derived through
:class:`RegionBuilder`:

.. code-block:: python

    region = (
        RegionBuilder(utility)
        .add_weight_on("a", -1)
        .add_weight_on("b", 1)
        .with_normal_region_initial_marking()
    )
"""

from __future__ import annotations

from typing import Dict, Hashable, List, Optional, Sequence, Tuple, Union

from ..exceptions import InvalidRegionError, UnreachableError
from ..TS.transition_system import Arc, TransitionSystem
from .utility import RegionUtility

EventRef = Union[str, int]


class Region:
    """
    An immutable region over a :class:`RegionUtility`.

    :param utility: Utility fixing the event order.
    :param backward: Backward weight per event (utility order).
    :param forward: Forward weight per event (utility order).
    :param initial_marking: Marking of the initial state.
    :raises ValueError: If a list has the wrong length or any value is
        negative.
    """

    __slots__ = ("_utility", "_backward", "_forward", "_initial", "_marking_cache")

    def __init__(
        self,
        utility: RegionUtility,
        backward: Sequence[int],
        forward: Sequence[int],
        initial_marking: int,
    ) -> None:
        n = utility.number_of_events
        if len(backward) != n:
            raise ValueError("There must be as many backward weights as events")
        if len(forward) != n:
            raise ValueError("There must be as many forward weights as events")
        if any(value < 0 for value in backward):
            raise ValueError(f"Backward weights {list(backward)} must not be negative")
        if any(value < 0 for value in forward):
            raise ValueError(f"Forward weights {list(forward)} must not be negative")
        if initial_marking < 0:
            raise ValueError(f"Initial marking {initial_marking} must not be negative")
        self._utility = utility
        self._backward: Tuple[int, ...] = tuple(int(v) for v in backward)
        self._forward: Tuple[int, ...] = tuple(int(v) for v in forward)
        self._initial = int(initial_marking)
        self._marking_cache: Dict[Hashable, int] = {}

    # ------------------------------------------------------------------
    # Weights
    # ------------------------------------------------------------------

    @property
    def utility(self) -> RegionUtility:
        return self._utility

    @property
    def transition_system(self) -> TransitionSystem:
        return self._utility.ts

    @property
    def initial_marking(self) -> int:
        return self._initial

    @property
    def backward_weights(self) -> Tuple[int, ...]:
        return self._backward

    @property
    def forward_weights(self) -> Tuple[int, ...]:
        return self._forward

    def _idx(self, event: EventRef) -> int:
        if isinstance(event, int):
            return event
        index = self._utility.event_index(event)
        if index < 0:
            raise KeyError(f"Unknown event {event!r}")
        return index

    def backward_weight(self, event: EventRef) -> int:
        """Tokens consumed by ``event`` (name or index)."""
        return self._backward[self._idx(event)]

    def forward_weight(self, event: EventRef) -> int:
        """Tokens produced by ``event`` (name or index)."""
        return self._forward[self._idx(event)]

    def weight(self, event: EventRef) -> int:
        """Effect ``f(e) - b(e)`` of ``event`` (name or index)."""
        index = self._idx(event)
        return self._forward[index] - self._backward[index]

    def is_pure(self) -> bool:
        return all(b == 0 or f == 0 for b, f in zip(self._backward, self._forward))

    # ------------------------------------------------------------------
    # Markings
    # ------------------------------------------------------------------

    def evaluate_parikh_vector(self, vector: Sequence[int]) -> int:
        """Total effect of firing the events counted by ``vector``."""
        assert len(vector) == self._utility.number_of_events
        return sum(count * (f - b) for count, b, f in zip(vector, self._backward, self._forward))

    def marking_for_state(self, state: Hashable) -> int:
        """
        Marking of a reachable state.

        :raises UnreachableError: If ``state`` is not reachable.
        """
        marking = self._marking_cache.get(state)
        if marking is None:
            pv = self._utility.reaching_parikh_vector(state)
            marking = self._initial + self.evaluate_parikh_vector(pv)
            self._marking_cache[state] = marking
        return marking

    # ------------------------------------------------------------------
    # Validity
    # ------------------------------------------------------------------

    def find_prevented_arc(self) -> Optional[Tuple[Hashable, str]]:
        """A reachable ``(state, event)`` whose arc is blocked, or ``None``."""
        ts = self._utility.ts
        for state in ts.states:
            try:
                marking = self.marking_for_state(state)
            except UnreachableError:
                continue
            for arc in ts.out_arcs(state):
                if marking - self.backward_weight(arc.label) < 0:
                    return state, arc.label
        return None

    def find_arc_with_wrong_effect(self) -> Optional[Arc]:
        """An arc between reachable states whose effect is wrong, or ``None``."""
        for arc in self._utility.ts.arcs:
            try:
                source = self.marking_for_state(arc.source)
                target = self.marking_for_state(arc.target)
            except UnreachableError:
                continue
            if source + self.weight(arc.label) != target:
                return arc
        return None

    def check_valid_region(self) -> None:
        """
        :raises InvalidRegionError: If an arc is prevented or has the wrong effect.
        """
        prevented = self.find_prevented_arc()
        if prevented is not None:
            raise InvalidRegionError(self, prevented[0], prevented[1], "prevented")
        wrong = self.find_arc_with_wrong_effect()
        if wrong is not None:
            raise InvalidRegionError(self, wrong.source, wrong.label, "wrong-effect")

    def is_valid(self) -> bool:
        return self.find_prevented_arc() is None and self.find_arc_with_wrong_effect() is None

    # ------------------------------------------------------------------
    # Dunder
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Region):
            return NotImplemented
        return (
            self._utility is other._utility
            and self._forward == other._forward
            and self._backward == other._backward
            and self._initial == other._initial
        )

    def __hash__(self) -> int:
        return hash((self._forward, self._backward, self._initial))

    def __str__(self) -> str:
        parts = [f"{{ init={self._initial}"]
        for event, b, f in zip(self._utility.event_list, self._backward, self._forward):
            parts.append(f"{b}:{event}:{f}")
        return ", ".join(parts) + " }"

    def __repr__(self) -> str:
        return f"Region({self})"


class RegionBuilder:
    """
    Mutable accumulator of backward and forward weights.

    The terminal operations :meth:`with_initial_marking` and
    :meth:`with_normal_region_initial_marking` produce a :class:`Region`.

    :param utility: Utility fixing the event order.
    :param backward: Initial backward weights (zeros by default).
    :param forward: Initial forward weights (zeros by default).
    """

    def __init__(
        self,
        utility: RegionUtility,
        backward: Optional[Sequence[int]] = None,
        forward: Optional[Sequence[int]] = None,
    ) -> None:
        n = utility.number_of_events
        backward = [0] * n if backward is None else list(backward)
        forward = [0] * n if forward is None else list(forward)
        if len(backward) != n:
            raise ValueError("The backward list must contain an entry per event")
        if len(forward) != n:
            raise ValueError("The forward list must contain an entry per event")
        self._utility = utility
        self._backward: List[int] = backward
        self._forward: List[int] = forward

    @classmethod
    def from_region(cls, region: Region) -> "RegionBuilder":
        return cls(region.utility, region.backward_weights, region.forward_weights)

    @classmethod
    def pure(cls, utility: RegionUtility, vector: Sequence[int]) -> "RegionBuilder":
        """Builder whose effect is ``vector``, split into pure weights."""
        if len(vector) != utility.number_of_events:
            raise ValueError("The vector must contain one entry per event")
        builder = cls(utility)
        for i, value in enumerate(vector):
            if value > 0:
                builder._forward[i] = value
            else:
                builder._backward[i] = -value
        return builder

    def _idx(self, event: EventRef) -> int:
        if isinstance(event, int):
            return event
        index = self._utility.event_index(event)
        if index < 0:
            raise KeyError(f"Unknown event {event!r}")
        return index

    def add_weight_on(self, event: EventRef, weight: int) -> "RegionBuilder":
        """Add ``weight`` to the effect of ``event``; positive goes forward, negative backward."""
        index = self._idx(event)
        if weight > 0:
            self._forward[index] += weight
        elif weight < 0:
            self._backward[index] -= weight
        return self

    def add_loop_around(self, event: EventRef, weight: int) -> "RegionBuilder":
        """Add ``weight`` to both the backward and the forward weight of ``event``."""
        index = self._idx(event)
        self._backward[index] += weight
        self._forward[index] += weight
        return self

    def add_region_with_factor(self, region: Region, factor: int) -> "RegionBuilder":
        """
        Add ``factor`` times ``region``.

        A negative factor adds the mirrored region (backward and forward
        swapped) scaled by ``-factor``, so weights never become negative.
        """
        if factor == 0:
            return self
        backward, forward = region.backward_weights, region.forward_weights
        if factor < 0:
            factor = -factor
            backward, forward = forward, backward
        for i in range(self._utility.number_of_events):
            self._backward[i] += factor * backward[i]
            self._forward[i] += factor * forward[i]
        return self

    def make_pure(self) -> "RegionBuilder":
        """Cancel self-loops so that each event only consumes or only produces."""
        for i in range(self._utility.number_of_events):
            weight = self._forward[i] - self._backward[i]
            if weight >= 0:
                self._forward[i], self._backward[i] = weight, 0
            else:
                self._forward[i], self._backward[i] = 0, -weight
        return self

    def with_initial_marking(self, initial: int) -> Region:
        return Region(self._utility, self._backward, self._forward, initial)

    def with_normal_region_initial_marking(self) -> Region:
        """
        Finish with the least initial marking keeping every reachable
        marking non-negative.
        """
        initial = 0
        for state in self._utility.ts.states:
            try:
                pv = self._utility.reaching_parikh_vector(state)
            except UnreachableError:
                continue
            value = sum(
                count * (f - b) for count, b, f in zip(pv, self._backward, self._forward)
            )
            initial = max(initial, -value)
        return self.with_initial_marking(initial)


def copy_region_to_utility(utility: RegionUtility, region: Region) -> Region:
    """
    Re-express ``region`` over another utility.

    Events are matched by name; events of ``utility`` unknown to
    ``region`` get zero weights. The initial marking is kept.

    :raises ValueError: If ``utility`` lacks an event of ``region``.
    """
    if utility.event_list == region.utility.event_list:
        return Region(utility, region.backward_weights, region.forward_weights, region.initial_marking)
    builder = RegionBuilder(utility)
    for index, event in enumerate(region.utility.event_list):
        new_index = utility.event_index(event)
        if new_index < 0:
            raise ValueError(f"The given region utility does not have event {event!r}")
        builder._backward[new_index] = region.backward_weights[index]
        builder._forward[new_index] = region.forward_weights[index]
    return builder.with_initial_marking(region.initial_marking)

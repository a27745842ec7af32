"""
Separation by elementary (0/1) regions.

For safe nets every region is a set of states: a state is either inside or
outside and every label either enters, exits, stays inside or does not
cross the border. A *rough region* fixes part of this assignment.
Refinement propagates forced consequences; when nothing is forced, the
search branches on the first unassigned label (in alphabet order).

Branching order
---------------
The copies are explored depth first, with the label set to
``DONT_CROSS``, ``EXIT``, ``ENTER`` and (impure nets only) ``INSIDE``.
"""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Deque, Dict, Hashable, List, Optional

from ..exceptions import UnsupportedPropertiesError
from ..Region.properties import PNProperties
from ..Region.region import Region, RegionBuilder
from ..Region.utility import RegionUtility
from ..TS.transition_system import Arc
from .base import LocationMap, Separation

logger = logging.getLogger(__name__)


class Operation(Enum):
    """What the arcs of one label do to a rough region."""

    ENTER = "enter"
    EXIT = "exit"
    DONT_CROSS = "dont-cross"
    INSIDE = "inside"


class RoughRegion:
    """
    A partial assignment of states (in/out) and labels (operations).

    :param owner: The strategy providing the transition system, the
        location map and the purity flag.
    """

    def __init__(self, owner: "ElementarySeparation") -> None:
        self.owner = owner
        self.states: Dict[Hashable, bool] = {}
        self.labels: Dict[str, Operation] = {}
        self.states_to_handle: Deque[Hashable] = deque()
        self.labels_to_handle: Deque[str] = deque()
        self.location: Optional[str] = None
        self.inconsistent = False

    def copy(self) -> "RoughRegion":
        other = RoughRegion(self.owner)
        other.states = dict(self.states)
        other.labels = dict(self.labels)
        other.states_to_handle = deque(self.states_to_handle)
        other.labels_to_handle = deque(self.labels_to_handle)
        other.location = self.location
        other.inconsistent = self.inconsistent
        return other

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    def set_state(self, state: Hashable, inside: bool) -> None:
        old = self.states.get(state)
        self.states[state] = inside
        if old is None:
            self.states_to_handle.append(state)
        elif old != inside:
            self.inconsistent = True

    def set_label(self, label: str, op: Operation) -> None:
        old = self.labels.get(label)
        self.labels[label] = op
        if old is None:
            self.labels_to_handle.append(label)
        elif old != op:
            self.inconsistent = True
        if op in (Operation.EXIT, Operation.INSIDE):
            # all consumers of a place must share one location
            new_location = self.owner.location_map[self.owner.utility.event_index(label)]
            if self.location is None:
                self.location = new_location
            elif self.location != new_location:
                self.inconsistent = True

    def unassigned_label(self) -> Optional[str]:
        for label in self.owner.ts.alphabet:
            if label not in self.labels:
                return label
        return None

    # ------------------------------------------------------------------
    # Refinement
    # ------------------------------------------------------------------

    def refine(self) -> bool:
        return self._refine_on_label() or self._refine_on_state()

    def _refine_on_label(self) -> bool:
        if not self.labels_to_handle:
            return False
        label = self.labels_to_handle.popleft()
        op = self.labels[label]
        for arc in self.owner.arcs_with_label.get(label, ()):
            self._apply(op, arc)
        return True

    def _apply(self, op: Operation, arc: Arc) -> None:
        if op is Operation.ENTER:
            self.set_state(arc.source, False)
            self.set_state(arc.target, True)
        elif op is Operation.EXIT:
            self.set_state(arc.source, True)
            self.set_state(arc.target, False)
        elif op is Operation.INSIDE:
            self.set_state(arc.source, True)
            self.set_state(arc.target, True)
        else:
            known = self.states.get(arc.source)
            if known is not None:
                self.set_state(arc.target, known)
            else:
                known = self.states.get(arc.target)
                if known is not None:
                    self.set_state(arc.source, known)

    def _refine_on_state(self) -> bool:
        if not self.states_to_handle:
            return False
        state = self.states_to_handle.popleft()
        pure = self.owner.pure
        for arc in self.owner.ts.neighbouring_arcs(state):
            source_in = self.states.get(arc.source)
            target_in = self.states.get(arc.target)
            if source_in is None or target_in is None:
                if self.labels.get(arc.label) is Operation.DONT_CROSS:
                    value = target_in if target_in is not None else source_in
                    self.set_state(arc.source, value)
                    self.set_state(arc.target, value)
                continue
            if not source_in and target_in:
                self.set_label(arc.label, Operation.ENTER)
            if source_in and not target_in:
                self.set_label(arc.label, Operation.EXIT)
            if pure and source_in == target_in:
                self.set_label(arc.label, Operation.DONT_CROSS)
            if not pure and not source_in and not target_in:
                # INSIDE is also possible when both ends are inside
                self.set_label(arc.label, Operation.DONT_CROSS)
        return True

    # ------------------------------------------------------------------
    # Result
    # ------------------------------------------------------------------

    def extract_valid_region(self) -> Optional[Region]:
        if self.inconsistent or self.states_to_handle or self.labels_to_handle:
            return None
        ts = self.owner.ts
        if set(self.states) != set(ts.states) or set(self.labels) != set(ts.alphabet):
            return None
        utility = self.owner.utility
        builder = RegionBuilder(utility)
        for index, event in enumerate(utility.event_list):
            op = self.labels[event]
            if op is Operation.ENTER:
                builder.add_weight_on(index, 1)
            elif op is Operation.EXIT:
                builder.add_weight_on(index, -1)
            elif op is Operation.INSIDE:
                builder.add_loop_around(index, 1)
        return builder.with_initial_marking(1 if self.states[ts.initial_state] else 0)

    def __str__(self) -> str:
        inside = sorted(str(s) for s, v in self.states.items() if v)
        outside = sorted(str(s) for s, v in self.states.items() if not v)
        ops = {op.value: sorted(l for l, o in self.labels.items() if o is op) for op in Operation}
        prefix = "INCONSISTENT! " if self.inconsistent else ""
        return f"RoughRegion[{prefix}in={inside}, out={outside}, labels={ops}]"


class ElementarySeparation(Separation):
    """
    Elementary regions for safe nets.

    :param utility: Utility of a totally reachable transition system.
    :param properties: Must require ``safe`` and may only add ``plain``
        and ``pure``.
    :param location_map: Location per event.
    :raises UnsupportedPropertiesError: Otherwise.
    """

    def __init__(
        self,
        utility: RegionUtility,
        properties: PNProperties,
        location_map: LocationMap,
    ) -> None:
        super().__init__(utility, location_map)
        required = PNProperties().require_safe()
        # arcs weighted above one can never fire in a safe net
        supported = required.replace(plain=True, pure=True)
        if not properties.contains_all(required) or not supported.contains_all(properties):
            raise UnsupportedPropertiesError(f"Elementary regions cannot provide {properties}")
        if not utility.spanning_tree.is_totally_reachable():
            logger.debug("Only totally reachable transition systems are supported")
            raise UnsupportedPropertiesError("Transition system is not totally reachable")
        self.pure = properties.pure
        self.arcs_with_label: Dict[str, List[Arc]] = {}
        for arc in utility.ts.arcs:
            self.arcs_with_label.setdefault(arc.label, []).append(arc)

    def separate_states(self, state: Hashable, other_state: Hashable) -> Optional[Region]:
        tree = self.utility.spanning_tree
        if not tree.is_reachable(state) or not tree.is_reachable(other_state):
            return None
        # the complement of a region is a region, so the orientation is irrelevant
        region = RoughRegion(self)
        region.set_state(state, True)
        region.set_state(other_state, False)
        return self._extract(region)

    def separate_event(self, state: Hashable, event: str) -> Optional[Region]:
        if not self.utility.spanning_tree.is_reachable(state) or self.ts.is_enabled(state, event):
            return None
        region = RoughRegion(self)
        region.set_state(state, False)
        region.set_label(event, Operation.EXIT)
        result = self._extract(region)
        if result is None and not self.pure:
            # a side condition of the event
            region = RoughRegion(self)
            region.set_state(state, False)
            region.set_label(event, Operation.INSIDE)
            result = self._extract(region)
        return result

    def _extract(self, region: RoughRegion) -> Optional[Region]:
        unhandled: Deque[RoughRegion] = deque([region])
        interrupter = self.utility.interrupter
        while unhandled:
            interrupter.check()
            region = unhandled.popleft()
            while not region.inconsistent and region.refine():
                pass
            if region.inconsistent:
                continue

            label = region.unassigned_label()
            if label is None:
                result = region.extract_valid_region()
                if result is not None:
                    logger.debug("Extracted region %s from %s", result, region)
                    return result
                continue

            logger.debug("Splitting the rough region on label %s", label)
            enter = region.copy()
            exit_ = region.copy()
            inside = None if self.pure else region.copy()
            region.set_label(label, Operation.DONT_CROSS)
            enter.set_label(label, Operation.ENTER)
            exit_.set_label(label, Operation.EXIT)
            if inside is not None:
                inside.set_label(label, Operation.INSIDE)
                unhandled.appendleft(inside)
            unhandled.appendleft(enter)
            unhandled.appendleft(exit_)
            unhandled.appendleft(region)
        return None

"""
z3 encoding of regions and of structural Petri net properties.

:class:`RegionEncoder` turns "these integer unknowns form a region of the
transition system that satisfies the requested properties" into a z3
formula. One encoder can instantiate several independent sets of
unknowns (:class:`RegionVariables`), which the exact minimizer uses to
search for a fixed number of regions at once.

Unknowns per region
-------------------
- ``m0``: initial marking.
- Pure nets: one effect ``e-<event>`` per event; backward and forward
  weights are the negative and positive parts of the effect.
- Otherwise: ``b-<event>`` and ``f-<event>`` per event; the effect is
  their difference.
"""

from __future__ import annotations

import logging
from itertools import combinations
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

import z3

from ..Region.properties import PNProperties
from ..Region.region import Region, RegionBuilder
from ..Region.utility import ParikhVector, RegionUtility

logger = logging.getLogger(__name__)

LocationMap = Sequence[Optional[str]]

_ZERO = z3.IntVal(0)


def _sum(terms: Sequence[z3.ArithRef]) -> z3.ArithRef:
    return z3.Sum(list(terms)) if terms else _ZERO


def _collect(op, terms: Sequence[z3.BoolRef], default: bool) -> z3.BoolRef:
    if not terms:
        return z3.BoolVal(default)
    if len(terms) == 1:
        return terms[0]
    return op(list(terms))


class RegionVariables:
    """
    One set of region unknowns.

    :param utility: Utility fixing the event order.
    :param pure: Use a single effect unknown per event.
    :param prefix: Prefix of all z3 names, making several sets independent.
    """

    def __init__(self, utility: RegionUtility, pure: bool, prefix: str = "") -> None:
        events = utility.event_list
        self.utility = utility
        self.pure = pure
        self.initial_marking = z3.Int(f"{prefix}m0")
        if pure:
            self.weight = [z3.Int(f"{prefix}e-{event}") for event in events]
            self.backward = [z3.If(w < 0, -w, _ZERO) for w in self.weight]
            self.forward = [z3.If(w > 0, w, _ZERO) for w in self.weight]
        else:
            self.backward = [z3.Int(f"{prefix}b-{event}") for event in events]
            self.forward = [z3.Int(f"{prefix}f-{event}") for event in events]
            self.weight = [f - b for b, f in zip(self.backward, self.forward)]

    def evaluate_parikh_vector(self, pv: ParikhVector) -> z3.ArithRef:
        return _sum([count * w for count, w in zip(pv, self.weight) if count != 0])

    def marking(self, state: Hashable) -> z3.ArithRef:
        """Marking of a reachable ``state`` as a z3 term."""
        pv = self.utility.reaching_parikh_vector(state)
        return self.initial_marking + self.evaluate_parikh_vector(pv)

    def to_region(self, model: z3.ModelRef) -> Region:
        """Read the region described by ``model``."""

        def value(term: z3.ArithRef) -> int:
            return model.eval(term, model_completion=True).as_long()

        if self.pure:
            builder = RegionBuilder.pure(self.utility, [value(w) for w in self.weight])
        else:
            builder = RegionBuilder(
                self.utility,
                [value(b) for b in self.backward],
                [value(f) for f in self.forward],
            )
        region = builder.with_initial_marking(value(self.initial_marking))
        logger.debug("region: %s", region)
        return region


class RegionEncoder:
    """
    Build the "is a region with the requested properties" formula.

    :param utility: Utility of the transition system.
    :param properties: Requested properties. Output-nonbranching must
        already be expressed through ``location_map``.
    :param location_map: Location per event (utility order), ``None`` for
        events without location.
    """

    def __init__(
        self,
        utility: RegionUtility,
        properties: PNProperties,
        location_map: LocationMap,
    ) -> None:
        assert not properties.output_nonbranching
        self.utility = utility
        self.properties = properties
        self.location_map: Tuple[Optional[str], ...] = tuple(location_map)
        ts = utility.ts
        tree = utility.spanning_tree

        self._cycle_pvs: List[ParikhVector] = []
        for chord in tree.chords:
            pv = utility.parikh_vector_for_edge(chord)
            if pv not in self._cycle_pvs:
                self._cycle_pvs.append(pv)
        self._reachable = tree.reachable_states
        self._arcs = [arc for arc in ts.arcs if tree.is_reachable(arc.source)]
        self._enabled: Dict[Hashable, List[int]] = {
            state: sorted(utility.event_index(label) for label in ts.enabled(state))
            for state in self._reachable
        }

    def new_region(self, prefix: str = "") -> RegionVariables:
        return RegionVariables(self.utility, self.properties.pure, prefix)

    # ------------------------------------------------------------------
    # The formula
    # ------------------------------------------------------------------

    def is_region(self, region: RegionVariables) -> z3.BoolRef:
        """Conjunction of the region constraints and every requested property."""
        props = self.properties
        terms: List[z3.BoolRef] = self._require_region(region)
        if props.is_k_bounded():
            terms += self._require_k_bounded(region, props.k_bounded)
        # conflict-freeness is only defined for plain nets
        if props.plain or props.conflict_free:
            terms += self._require_plain(region)
        terms += self._require_distributable(region)
        if props.merge_free:
            terms += self._require_single_nonzero(region.forward)
        if props.conflict_free:
            terms += self._require_conflict_free(region)
        if props.tnet or props.marked_graph:
            terms += self._require_tnet(region.backward, props.marked_graph)
            terms += self._require_tnet(region.forward, props.marked_graph)
        if props.homogeneous:
            terms += self._require_homogeneous(region)
        if props.is_k_marking():
            terms.append(region.initial_marking % props.k_marking == 0)
        if props.behaviourally_conflict_free:
            terms += self._require_behaviourally_conflict_free(region)
        if props.binary_conflict_free:
            terms += self._require_binary_conflict_free(region)
        if props.equal_conflict:
            terms += self._require_equal_conflict(region)
        return _collect(z3.And, terms, True)

    def _require_region(self, region: RegionVariables) -> List[z3.BoolRef]:
        terms: List[z3.BoolRef] = []
        # every cycle returns to the same marking
        for pv in self._cycle_pvs:
            terms.append(region.evaluate_parikh_vector(pv) == 0)
        # every arc is enabled
        for arc in self._arcs:
            index = self.utility.event_index(arc.label)
            terms.append(region.backward[index] <= region.marking(arc.source))
        terms.append(region.initial_marking >= 0)
        terms += [b >= 0 for b in region.backward]
        terms += [f >= 0 for f in region.forward]
        return terms

    def _require_k_bounded(self, region: RegionVariables, k: int) -> List[z3.BoolRef]:
        return [region.marking(state) <= k for state in self._reachable]

    def _require_plain(self, region: RegionVariables) -> List[z3.BoolRef]:
        return [b <= 1 for b in region.backward] + [f <= 1 for f in region.forward]

    @staticmethod
    def _all_but_one_zero(weights: Sequence[z3.ArithRef], strict: bool = False) -> List[z3.BoolRef]:
        options = []
        for index, own in enumerate(weights):
            others = _sum([w for i, w in enumerate(weights) if i != index]) == 0
            options.append(z3.And(others, own > 0) if strict else others)
        return options

    def _require_single_nonzero(self, weights: Sequence[z3.ArithRef]) -> List[z3.BoolRef]:
        return [_collect(z3.Or, self._all_but_one_zero(weights), True)]

    def _require_tnet(self, weights: Sequence[z3.ArithRef], marked_graph: bool) -> List[z3.BoolRef]:
        return [_collect(z3.Or, self._all_but_one_zero(weights, marked_graph), True)]

    def _require_distributable(self, region: RegionVariables) -> List[z3.BoolRef]:
        locations = sorted({loc for loc in self.location_map if loc is not None})
        if not locations:
            return []
        options = []
        for location in locations:
            # only events at ``location`` may consume tokens
            consumers = [
                region.backward[index]
                for index, loc in enumerate(self.location_map)
                if loc is not None and loc != location
            ]
            options.append(_sum(consumers) == 0)
        return [_collect(z3.Or, options, True)]

    def _require_conflict_free(self, region: RegionVariables) -> List[z3.BoolRef]:
        # a single consumer, or the preset is contained in the postset
        options = self._all_but_one_zero(region.backward)
        options.append(_collect(z3.And, [w >= 0 for w in region.weight], False))
        return [_collect(z3.Or, options, True)]

    def _require_homogeneous(self, region: RegionVariables) -> List[z3.BoolRef]:
        return [
            z3.Or(b1 == 0, b2 == 0, b1 == b2)
            for b1, b2 in combinations(region.backward, 2)
        ]

    def _require_behaviourally_conflict_free(self, region: RegionVariables) -> List[z3.BoolRef]:
        groups: List[Tuple[int, ...]] = []
        for enabled in self._enabled.values():
            group = tuple(enabled)
            if group and group not in groups:
                groups.append(group)
        terms = []
        for group in groups:
            # at most one of the simultaneously enabled events consumes
            options = [
                _sum([region.backward[other] for other in group if other != allowed]) == 0
                for allowed in group
            ]
            terms.append(_collect(z3.Or, options, True))
        return terms

    def _require_binary_conflict_free(self, region: RegionVariables) -> List[z3.BoolRef]:
        terms = []
        for state in self._reachable:
            marking = region.marking(state)
            for first, second in combinations(self._enabled[state], 2):
                terms.append(marking >= region.backward[first] + region.backward[second])
        return terms

    def enabling_classes(self) -> List[List[int]]:
        """Events grouped by being enabled in exactly the same states."""
        ts = self.utility.ts
        classes: Dict[Tuple[bool, ...], List[int]] = {}
        for index, event in enumerate(self.utility.event_list):
            signature = tuple(ts.is_enabled(state, event) for state in ts.states)
            classes.setdefault(signature, []).append(index)
        return list(classes.values())

    def _require_equal_conflict(self, region: RegionVariables) -> List[z3.BoolRef]:
        backward = region.backward
        if not backward:
            return []
        logger.debug("Enabling-equivalent events: %s", self.enabling_classes())
        options = []
        # the consumers of the place form one class, or there are none
        for group in self.enabling_classes() + [[]]:
            current = []
            pivot = None
            for index, b in enumerate(backward):
                if index in group:
                    if pivot is None:
                        pivot = b
                        current.append(b > 0)
                    else:
                        current.append(b == pivot)
                else:
                    current.append(b == 0)
            options.append(_collect(z3.And, current, True))
        return [_collect(z3.Or, options, False)]

"""
Synthesis of a Petri net from a transition system.

:class:`SynthesizePN` runs the separation synthesizer chosen for the
requested properties and turns the resulting regions into places. Two modes
exist:

- *Isomorphic behaviour*: the reachability graph of the net must be
  isomorphic to the transition system, so state separation is required.
- *Language equivalence*: only the language must match. The transition
  system is replaced by its limited unfolding, state separation is
  skipped and failures are reported for the states of the input.

.. code-block:: python

    from regionkit.Region.properties import PNProperties
    from regionkit.Synthesis.synthesize_pn import SynthesizePN
    from regionkit.TS.transition_system import TransitionSystem

    ts = TransitionSystem.from_arcs([("s", "t", "a"), ("t", "u", "b")], "s")
    synth = SynthesizePN.for_isomorphic_behaviour(ts, PNProperties(pure=True))
    synth.was_successfully_separated()  # True
    pn = synth.synthesize_petri_net()
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Hashable, Iterable, List, Optional, Sequence, Tuple, Union

from networkx.utils import UnionFind

from ..interrupt import NEVER, Interrupter
from ..Petri import checks
from ..Petri.petri_net import PetriNet
from ..Region.properties import PNProperties
from ..Region.region import Region
from ..Region.utility import RegionUtility
from ..Separation.base import location_map, separates_event
from ..Separation.factory import StrategyFactory
from ..TS.transition_system import TransitionSystem
from ..TS.unfolding import ORIGINAL_STATE, limited_unfolding
from .synthesizer import (
    calculate_unseparated_states,
    create_synthesizer,
    event_state_separation_problems,
    minimize_regions,
)

logger = logging.getLogger(__name__)


class SynthesizePN:
    """
    Synthesise a Petri net whose places are regions of ``utility.ts``.

    All work happens in the constructor. Prefer the factory methods
    :meth:`for_isomorphic_behaviour` and :meth:`for_language_equivalence`.

    :param utility: Utility of the transition system to synthesise.
    :param properties: Requested net properties.
    :param only_event_separation: Skip state separation.
    :param state_mapping: State attribute naming the original state of
        each state, used to report failures (language equivalence).
    :param quick_fail: Stop at the first unsolved separation problem.
    :param seed_regions: Regions of ``utility`` to reuse. Each is checked
        with :meth:`Region.check_valid_region`.
    :param try_factorize: Allow factorisation in quick-fail mode.
    :param strategy_factory: Override the strategy dispatch.
    :raises ValueError: If a seed region belongs to another utility.
    :raises InvalidRegionError: If a seed region is not valid.
    :raises MissingLocationError: If only some events have a location.
    """

    def __init__(
        self,
        utility: RegionUtility,
        properties: PNProperties = PNProperties(),
        only_event_separation: bool = False,
        state_mapping: Optional[str] = None,
        quick_fail: bool = False,
        seed_regions: Iterable[Region] = (),
        try_factorize: bool = True,
        strategy_factory: Optional[StrategyFactory] = None,
    ) -> None:
        self.utility = utility
        self.properties = properties
        self.only_event_separation = only_event_separation
        seeds: List[Region] = []
        for region in seed_regions:
            if region.utility is not utility:
                raise ValueError("The given region belongs to a different region utility")
            region.check_valid_region()
            if region not in seeds:
                seeds.append(region)
        logger.debug("Input regions: %s", [str(r) for r in seeds])

        synthesizer = create_synthesizer(
            utility,
            properties,
            only_event_separation,
            quick_fail,
            try_factorize,
            strategy_factory,
            seeds,
        )
        self._regions: List[Region] = list(seeds)
        self._regions += [r for r in synthesizer.regions if r not in self._regions]

        def mapped(state: Hashable) -> Hashable:
            if state_mapping is None:
                return state
            return utility.ts.state_attr(state, state_mapping)

        relation = UnionFind()
        for group in synthesizer.unsolvable_state_separation_problems:
            group = [mapped(state) for state in group]
            if group:
                relation.union(*group)
        self._failed_ssp: List[FrozenSet[Hashable]] = [
            frozenset(group) for group in relation.to_sets()
        ]
        self._failed_essp: Dict[str, FrozenSet[Hashable]] = {
            event: frozenset(mapped(state) for state in states)
            for event, states in synthesizer.unsolvable_event_state_separation_problems.items()
            if states
        }
        logger.info(
            "Synthesis of %r: %d regions, %d failed ESSP events, %d failed SSP classes",
            utility.ts.name, len(self._regions), len(self._failed_essp), len(self._failed_ssp),
        )

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def for_isomorphic_behaviour(
        cls,
        ts: Union[TransitionSystem, RegionUtility],
        properties: PNProperties = PNProperties(),
        interrupter: Interrupter = NEVER,
        **kwargs,
    ) -> "SynthesizePN":
        """Synthesise a net whose reachability graph is isomorphic to ``ts``."""
        utility = ts if isinstance(ts, RegionUtility) else RegionUtility(ts, interrupter)
        return cls(utility, properties, only_event_separation=False, **kwargs)

    @classmethod
    def for_language_equivalence(
        cls,
        ts: Union[TransitionSystem, RegionUtility],
        properties: PNProperties = PNProperties(),
        interrupter: Interrupter = NEVER,
        **kwargs,
    ) -> "SynthesizePN":
        """
        Synthesise a net with the same language as ``ts``.

        A plain transition system is unfolded first; a given utility is
        used as is and its states must carry ``original_state``.

        :raises NonDeterministicError: If ``ts`` is not deterministic.
        """
        if isinstance(ts, RegionUtility):
            utility = ts
        else:
            utility = RegionUtility(limited_unfolding(ts, interrupter), interrupter)
        return cls(
            utility,
            properties,
            only_event_separation=True,
            state_mapping=ORIGINAL_STATE,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    @property
    def ts(self) -> TransitionSystem:
        return self.utility.ts

    @property
    def regions(self) -> List[Region]:
        return list(self._regions)

    def was_successfully_separated(self) -> bool:
        return not self._failed_ssp and not self._failed_essp

    @property
    def failed_state_separation_problems(self) -> List[FrozenSet[Hashable]]:
        return list(self._failed_ssp)

    @property
    def failed_event_state_separation_problems(self) -> Dict[str, FrozenSet[Hashable]]:
        return dict(self._failed_essp)

    def solved_event_state_separation_problems(
        self, regions: Optional[Sequence[Region]] = None
    ) -> List[Tuple[Region, Dict[str, List[Hashable]]]]:
        """
        For every region, the states in which it prevents each event.

        :param regions: The regions to report on, by default :attr:`regions`.
        """
        if regions is None:
            regions = self._regions
        ts = self.utility.ts
        result = []
        for region in regions:
            solved: Dict[str, List[Hashable]] = {}
            for state, event in event_state_separation_problems(ts):
                if separates_event(region, state, event):
                    solved.setdefault(event, []).append(state)
            result.append((region, solved))
        return result

    # ------------------------------------------------------------------
    # Net construction
    # ------------------------------------------------------------------

    def synthesize_petri_net(self, regions: Optional[Sequence[Region]] = None) -> Optional[PetriNet]:
        """
        Build the net with one place per region.

        :param regions: Regions to use instead of :attr:`regions`.
        :returns: The net, or ``None`` if no regions are given and the
            synthesis was not successful.
        """
        if regions is None:
            if not self.was_successfully_separated():
                return None
            regions = self._regions
        pn = build_petri_net(self.utility, regions)
        assert all(region.is_valid() for region in regions), regions
        assert self._has_requested_properties(pn), regions
        return pn

    def _has_requested_properties(self, pn: PetriNet) -> bool:
        props = self.properties
        if props.pure and not checks.is_pure(pn):
            return False
        if props.plain and not checks.is_plain(pn):
            return False
        if props.tnet and not checks.is_generalized_t_net(pn):
            return False
        if props.marked_graph and not checks.is_generalized_marked_graph(pn):
            return False
        if props.output_nonbranching and not checks.is_output_nonbranching(pn):
            return False
        if props.merge_free and not checks.is_merge_free(pn):
            return False
        if props.conflict_free and not checks.is_conflict_free(pn):
            return False
        if (props.homogeneous or props.equal_conflict) and not checks.is_homogeneous(pn):
            return False
        if any(pn.tokens(place) % props.k_marking for place in pn.places):
            return False
        locations = location_map(self.utility, props)
        if not checks.is_distributed_implementation(pn, dict(zip(self.utility.event_list, locations))):
            return False
        if props.is_k_bounded() and not checks.is_k_bounded(pn, props.k_bounded):
            return False
        reachability = pn.reachability_graph()
        if self.only_event_separation:
            return checks.is_language_equivalent(reachability, self.utility.ts)
        return checks.is_isomorphic(reachability, self.utility.ts)

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    calculate_unseparated_states = staticmethod(calculate_unseparated_states)
    minimize_regions = staticmethod(minimize_regions)


def build_petri_net(utility: RegionUtility, regions: Iterable[Region]) -> PetriNet:
    """
    One transition per event and one place per region.

    Flow weights are the backward (consumption) and forward (production)
    weights of the region.
    """
    pn = PetriNet(utility.ts.name)
    for event in utility.event_list:
        pn.add_transition(event)
    for region in regions:
        place = pn.add_place(region.initial_marking, region)
        for event in region.utility.event_list:
            backward = region.backward_weight(event)
            if backward > 0:
                pn.add_flow(place, event, backward)
            forward = region.forward_weight(event)
            if forward > 0:
                pn.add_flow(event, place, forward)
    logger.debug("Synthesized %r from %d regions", pn, len(pn.places))
    return pn

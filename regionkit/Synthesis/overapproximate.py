"""
Over-approximation of transition systems that have no exact net.

Synthesis is repeated on a transition system that is changed after each
failed attempt:

- every class of states that could not be separated is merged into one
  state;
- for every event that could not be prevented in a state, the event is
  allowed there by an arc to a fresh state.

The regions found so far stay valid on the changed system and are passed
to the next attempt as seeds. The result is a net whose language contains
the language of the input.
"""

from __future__ import annotations

import logging
from typing import Collection, Dict, Hashable, Iterable, Mapping, Optional

from ..exceptions import UnsupportedPropertiesError
from ..interrupt import NEVER, Interrupter
from ..Petri.petri_net import PetriNet
from ..Region.properties import PNProperties
from ..Region.region import copy_region_to_utility
from ..Region.utility import RegionUtility
from ..Separation.base import has_locations, location_map
from ..Separation.factory import StrategyFactory
from ..TS.analysis import reachable_part
from ..TS.transition_system import TransitionSystem
from .synthesize_pn import SynthesizePN

logger = logging.getLogger(__name__)

# Over-approximation is only known to terminate for these properties; a bound
# of zero accepts every bound.
SUPPORTED_PROPERTIES = PNProperties(
    k_bounded=0, pure=True, plain=True, tnet=True, marked_graph=True
)


def check_supported(ts: TransitionSystem, properties: PNProperties) -> None:
    """
    :raises UnsupportedPropertiesError: If ``properties`` or the event
        locations of ``ts`` rule out over-approximation.
    :raises MissingLocationError: If only some events have a location.
    """
    if not SUPPORTED_PROPERTIES.contains_all(properties):
        raise UnsupportedPropertiesError(
            f"Some of the requested properties are not supported for over-approximation; "
            f"requested: {properties}; supported: {SUPPORTED_PROPERTIES}"
        )
    if has_locations(location_map(RegionUtility(ts), properties)):
        raise UnsupportedPropertiesError("Overapproximation is not possible with locations")


def handle_separation_failures(
    ts: TransitionSystem,
    failed_ssp: Collection[Iterable[Hashable]],
    failed_essp: Mapping[str, Iterable[Hashable]],
) -> TransitionSystem:
    """
    Change ``ts`` so that the given separation problems disappear.

    :param ts: The transition system; it is not modified.
    :param failed_ssp: Classes of states to merge.
    :param failed_essp: For each event, the states where it gets enabled.
    :returns: The changed copy.
    :rtype: TransitionSystem
    """
    logger.debug(
        "Creating new TS to handle SSP failures %s and ESSP failures %s", failed_ssp, failed_essp
    )
    result = ts.copy()
    old_to_new: Optional[Dict[Hashable, Hashable]] = None

    if failed_ssp:
        result = TransitionSystem(ts.name)
        for event in ts.alphabet:
            result.add_event(event, ts.location(event))
        merged = {state for group in failed_ssp for state in group}
        old_to_new = {}
        for state in ts.states:
            if state not in merged:
                old_to_new[state] = result.add_state(state, **ts.graph.nodes[state])
        for group in failed_ssp:
            new_state = result.add_state()
            for state in group:
                old_to_new[state] = new_state
        result.initial_state = old_to_new[ts.initial_state]
        for arc in ts.arcs:
            # merged states may share an outgoing label; the arc then exists already
            result.add_arc(old_to_new[arc.source], old_to_new[arc.target], arc.label)

    for event, states in failed_essp.items():
        for state in states:
            to_modify = state if old_to_new is None else old_to_new[state]
            if not result.is_enabled(to_modify, event):
                result.add_arc(to_modify, result.add_state(), event)
            else:
                # merged with a state that already enables the event
                assert failed_ssp
    return result


def overapproximate(
    ts: TransitionSystem,
    properties: PNProperties = PNProperties(),
    interrupter: Interrupter = NEVER,
    strategy_factory: Optional[StrategyFactory] = None,
) -> PetriNet:
    """
    Compute a net whose language contains the language of ``ts``.

    :param ts: The transition system.
    :param properties: Requested properties; only bounds, ``pure``,
        ``plain``, ``tnet`` and ``marked_graph`` are supported.
    :param interrupter: Cancellation flag.
    :param strategy_factory: Override the strategy dispatch.
    :returns: The net.
    :rtype: PetriNet
    :raises UnsupportedPropertiesError: See :func:`check_supported`.
    """
    check_supported(ts, properties)
    ts = reachable_part(ts)
    synthesize: Optional[SynthesizePN] = None
    iterations = 0
    while True:
        iterations += 1
        logger.debug("Beginning iteration %d", iterations)
        interrupter.check()
        utility = RegionUtility(ts, interrupter)
        seeds = []
        if synthesize is not None:
            for region in synthesize.regions:
                seed = copy_region_to_utility(utility, region)
                assert str(seed) == str(region), (seed, region)
                seeds.append(seed)
        synthesize = SynthesizePN.for_isomorphic_behaviour(
            utility, properties, seed_regions=seeds, strategy_factory=strategy_factory
        )
        if synthesize.was_successfully_separated():
            break
        ts = handle_separation_failures(
            ts,
            synthesize.failed_state_separation_problems,
            synthesize.failed_event_state_separation_problems,
        )
    logger.info("Over-approximation needed %d iterations", iterations)
    pn = synthesize.synthesize_petri_net()
    assert pn is not None
    return pn

"""
Quick-fail synthesis through factorisation.

If a transition system splits into factors over disjoint label sets, it
is synthesisable exactly when every factor is. Each factor is synthesised
with ``quick_fail`` and its regions are copied back to the composite
system. The first failing factor ends the attempt and its first failure is
reported for the composite system, which is possible because factors keep
the state ids of the composite system.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from ..exceptions import NonDeterministicError
from ..Region.properties import PNProperties
from ..Region.region import Region, copy_region_to_utility
from ..Region.utility import RegionUtility
from ..Separation.factory import StrategyFactory
from ..TS.factorisation import factorise
from .synthesizer import FixedSynthesizer, Synthesizer, create_synthesizer

logger = logging.getLogger(__name__)

SynthesizerFactory = Callable[[RegionUtility, PNProperties, bool], Synthesizer]


def _nondeterministic_failure(utility: RegionUtility, error: NonDeterministicError) -> Synthesizer:
    """Two states reached by the same label from the same state cannot be separated."""
    ts = utility.ts
    if error.forward:
        states = ts.successors(error.state, error.label)
    else:
        states = ts.predecessors(error.state, error.label)
    assert len(set(states)) >= 2
    return FixedSynthesizer(ssp=[set(states[:2])])


def _first_failure(failed: Synthesizer, regions: List[Region]) -> Synthesizer:
    essp = failed.unsolvable_event_state_separation_problems
    if essp:
        event = next(iter(essp))
        state = next(iter(essp[event]))
        return FixedSynthesizer(regions, essp={event: {state}})
    group = failed.unsolvable_state_separation_problems[0]
    return FixedSynthesizer(regions, ssp=[set(group)])


class FactorisationSynthesizer:
    """
    Synthesis of the factors of a transition system.

    :param factory: Synthesizer used for every factor. By default the
        regular dispatch with ``quick_fail`` and without factorisation.
    :param strategy_factory: Strategy override passed to the default
        factory.
    """

    def __init__(
        self,
        factory: Optional[SynthesizerFactory] = None,
        strategy_factory: Optional[StrategyFactory] = None,
    ) -> None:
        if factory is None:

            def factory(
                utility: RegionUtility, properties: PNProperties, only_event_separation: bool
            ) -> Synthesizer:
                return create_synthesizer(
                    utility,
                    properties,
                    only_event_separation,
                    quick_fail=True,
                    try_factorize=False,
                    strategy_factory=strategy_factory,
                )

        self.factory = factory

    def create_synthesizer(
        self,
        utility: RegionUtility,
        properties: PNProperties,
        only_event_separation: bool,
    ) -> Optional[Synthesizer]:
        """
        Synthesise the factors of ``utility.ts``.

        :returns: The combined result, or ``None`` if the transition system
            does not factorise or has unreachable states.
        """
        # factors only keep states reachable from the initial state
        if not utility.spanning_tree.is_totally_reachable():
            return None
        try:
            factors = factorise(utility.ts, utility.interrupter)
        except NonDeterministicError as e:
            logger.debug("Not deterministic, cannot be synthesised: %s", e)
            return _nondeterministic_failure(utility, e)
        if len(factors) <= 1:
            return None

        logger.debug("Synthesising %d factors of %r", len(factors), utility.ts.name)
        regions: List[Region] = []
        for factor in factors:
            synthesizer = self.factory(
                RegionUtility(factor, utility.interrupter), properties, only_event_separation
            )
            for region in synthesizer.regions:
                mapped = copy_region_to_utility(utility, region)
                if mapped not in regions:
                    regions.append(mapped)
            if not synthesizer.was_successful():
                logger.debug("Factor %r failed", factor.name)
                return _first_failure(synthesizer, regions)
        return FixedSynthesizer(regions)

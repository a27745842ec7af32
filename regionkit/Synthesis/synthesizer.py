"""
Solving all separation problems of a transition system.

A :class:`Synthesizer` is the result of one run: the regions found and the
separation problems that remained unsolved. :class:`SeparationSynthesizer`
drives a :class:`~regionkit.Separation.base.Separation` strategy over every
event/state separation problem (ESSP) and every pair of states that the
regions found so far do not separate (SSP).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from itertools import combinations
from typing import Dict, Hashable, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from networkx.utils import UnionFind

from ..interrupt import NEVER, Interrupter
from ..Region.properties import PNProperties
from ..Region.region import Region
from ..Region.utility import RegionUtility
from ..exceptions import UnreachableError
from ..Separation.base import Separation, is_event_enabled, separates_event, separates_states
from ..Separation.factory import StrategyFactory, create_separation
from ..TS.transition_system import TransitionSystem

logger = logging.getLogger(__name__)

EsspFailures = Dict[str, Set[Hashable]]
SspFailures = List[Set[Hashable]]


class Synthesizer(ABC):
    """The regions and unsolved separation problems of one synthesis run."""

    @property
    @abstractmethod
    def regions(self) -> List[Region]:
        raise NotImplementedError

    @property
    @abstractmethod
    def unsolvable_event_state_separation_problems(self) -> EsspFailures:
        """Map from an event to the states in which it could not be prevented."""
        raise NotImplementedError

    @property
    @abstractmethod
    def unsolvable_state_separation_problems(self) -> SspFailures:
        """Classes of states that could not be told apart."""
        raise NotImplementedError

    def was_successful(self) -> bool:
        return not (
            self.unsolvable_event_state_separation_problems
            or self.unsolvable_state_separation_problems
        )


class FixedSynthesizer(Synthesizer):
    """A synthesis result given explicitly."""

    def __init__(
        self,
        regions: Iterable[Region] = (),
        essp: Optional[EsspFailures] = None,
        ssp: Optional[SspFailures] = None,
    ) -> None:
        self._regions = _unique(regions)
        self._essp = dict(essp or {})
        self._ssp = list(ssp or [])

    @property
    def regions(self) -> List[Region]:
        return self._regions

    @property
    def unsolvable_event_state_separation_problems(self) -> EsspFailures:
        return self._essp

    @property
    def unsolvable_state_separation_problems(self) -> SspFailures:
        return self._ssp


# ---------------------------------------------------------------------------
# Helpers shared with the minimizer
# ---------------------------------------------------------------------------


def _unique(regions: Iterable[Region]) -> List[Region]:
    return list(dict.fromkeys(regions))


def event_state_separation_problems(ts: TransitionSystem) -> Iterator[Tuple[Hashable, str]]:
    """Every pair of a state and an event not enabled in it."""
    for state in ts.states:
        for event in ts.alphabet:
            if not is_event_enabled(ts, state, event):
                yield state, event


def calculate_unseparated_states(
    states: Iterable[Hashable],
    regions: Iterable[Region],
    interrupter: Interrupter = NEVER,
) -> Set[Hashable]:
    """
    States that some other state shares every marking with.

    The states are partitioned by the markings that each region assigns
    them. Singleton classes are separated from everything and dropped.

    :param states: The states to consider.
    :param regions: The regions to separate with.
    :param interrupter: Cancellation flag polled per partition class.
    :returns: The union of all non-singleton classes. If some state is
        unreachable, all ``states`` are returned since no region separates
        an unreachable state.
    """
    states = list(states)
    partition: List[List[Hashable]] = [states]
    for region in regions:
        new_partition: List[List[Hashable]] = []
        discarded = 0
        for family in partition:
            interrupter.check()
            markings: Dict[int, List[Hashable]] = defaultdict(list)
            for state in family:
                try:
                    markings[region.marking_for_state(state)].append(state)
                except UnreachableError:
                    return set(states)
            for group in markings.values():
                if len(group) > 1:
                    new_partition.append(group)
                else:
                    discarded += 1
        partition = new_partition
        logger.debug(
            "After region %s, still have %d families (%d resulting singular families discarded)",
            region, len(partition), discarded,
        )
        if not partition:
            break
    return {state for family in partition for state in family}


def minimize_regions(
    ts: TransitionSystem,
    regions: Sequence[Region],
    only_event_separation: bool,
    interrupter: Interrupter = NEVER,
) -> List[Region]:
    """
    Drop regions that are not needed to solve the separation problems.

    A region that is the only one solving some problem is required. Each
    remaining problem keeps the regions solving it; if no required region
    solves it, the first of them is picked.

    :param ts: The transition system.
    :param regions: Candidate regions.
    :param only_event_separation: Ignore state separation.
    :param interrupter: Cancellation flag polled per problem.
    :returns: The selected regions, in input order.
    """
    remaining = _unique(regions)
    required: List[Region] = []
    problems: List[List[Region]] = []

    def record(solves) -> None:
        if any(solves(r) for r in required):
            return
        candidates = [r for r in remaining if solves(r)]
        if len(candidates) == 1:
            required.append(candidates[0])
            remaining.remove(candidates[0])
        elif candidates:
            problems.append(candidates)

    for state, event in event_state_separation_problems(ts):
        interrupter.check()
        record(lambda r: separates_event(r, state, event))

    if not only_event_separation:
        unseparated = [
            s for s in ts.states if s in calculate_unseparated_states(ts.states, required, interrupter)
        ]
        for state, other in combinations(unseparated, 2):
            interrupter.check()
            record(lambda r: separates_states(r, state, other))

    logger.debug("Required regions after first pass: %s", [str(r) for r in required])
    for candidates in problems:
        if not any(r in required for r in candidates):
            required.append(candidates[0])

    order: Dict[Region, int] = {}
    for index, region in enumerate(regions):
        order.setdefault(region, index)
    required.sort(key=order.__getitem__)
    logger.debug("Picked %d required regions out of %d input regions", len(required), len(order))
    return required


# ---------------------------------------------------------------------------
# Driving a strategy
# ---------------------------------------------------------------------------


class SeparationSynthesizer(Synthesizer):
    """
    Solve all separation problems with one strategy.

    Regions found earlier (or given as ``seed_regions``) are tried before
    the strategy is asked. Unless ``quick_fail`` stops early, the regions
    are reduced with :func:`minimize_regions` at the end.

    :param utility: Utility of the transition system.
    :param separation: The strategy.
    :param only_event_separation: Skip state separation.
    :param quick_fail: Stop at the first unsolved problem.
    :param seed_regions: Known valid regions.
    """

    def __init__(
        self,
        utility: RegionUtility,
        separation: Separation,
        only_event_separation: bool = False,
        quick_fail: bool = False,
        seed_regions: Iterable[Region] = (),
    ) -> None:
        self.utility = utility
        self.separation = separation
        self._regions: List[Region] = _unique(seed_regions)
        self._essp: EsspFailures = {}
        self._failed_pairs = UnionFind()

        self._solve_event_state_separation(quick_fail)
        if not only_event_separation and (not quick_fail or not self._essp):
            self._solve_state_separation(quick_fail)
        if not quick_fail or self.was_successful():
            logger.debug("Minimizing regions")
            self._regions = minimize_regions(
                utility.ts, self._regions, only_event_separation, utility.interrupter
            )
        logger.debug(
            "Separation with %s gave %d regions, %d ESSP failures and %d SSP failures",
            type(separation).__name__,
            len(self._regions),
            sum(len(states) for states in self._essp.values()),
            len(self.unsolvable_state_separation_problems),
        )

    @property
    def regions(self) -> List[Region]:
        return self._regions

    @property
    def unsolvable_event_state_separation_problems(self) -> EsspFailures:
        return self._essp

    @property
    def unsolvable_state_separation_problems(self) -> SspFailures:
        return [set(group) for group in self._failed_pairs.to_sets()]

    def _solve_event_state_separation(self, quick_fail: bool) -> None:
        logger.debug("Solving event-state separation")
        for state, event in event_state_separation_problems(self.utility.ts):
            self.utility.interrupter.check()
            logger.debug("Trying to separate %s from event %r", state, event)
            if any(separates_event(r, state, event) for r in self._regions):
                continue
            region = self.separation.separate_event(state, event)
            if region is None:
                self._essp.setdefault(event, set()).add(state)
                logger.debug("Failure!")
                if quick_fail:
                    return
            else:
                logger.debug("Calculated region %s", region)
                self._regions.append(region)

    def _solve_state_separation(self, quick_fail: bool) -> None:
        logger.debug("Solving state separation")
        ts = self.utility.ts
        interrupter = self.utility.interrupter
        unseparated = calculate_unseparated_states(ts.states, self._regions, interrupter)
        for state, other in combinations([s for s in ts.states if s in unseparated], 2):
            interrupter.check()
            logger.debug("Trying to separate %s from %s", state, other)
            if any(separates_states(r, state, other) for r in self._regions):
                continue
            region = self.separation.separate_states(state, other)
            if region is None:
                self._failed_pairs.union(state, other)
                logger.debug("Failure!")
                if quick_fail:
                    return
            else:
                logger.debug("Calculated region %s", region)
                self._regions.append(region)


def create_synthesizer(
    utility: RegionUtility,
    properties: PNProperties,
    only_event_separation: bool = False,
    quick_fail: bool = False,
    try_factorize: bool = True,
    strategy_factory: Optional[StrategyFactory] = None,
    seed_regions: Iterable[Region] = (),
) -> Synthesizer:
    """
    Run synthesis with the strategy chosen for ``properties``.

    With ``quick_fail`` the transition system is first split into factors
    which are synthesised independently.

    :raises MissingLocationError: If only some events have a location.
    """
    if quick_fail and try_factorize:
        from .factorisation import FactorisationSynthesizer

        result = FactorisationSynthesizer(strategy_factory=strategy_factory).create_synthesizer(
            utility, properties, only_event_separation
        )
        if result is not None:
            return result
    separation = create_separation(utility, properties, strategy_factory)
    return SeparationSynthesizer(
        utility, separation, only_event_separation, quick_fail, seed_regions
    )

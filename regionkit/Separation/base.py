"""
The separation-strategy interface and helpers shared by all strategies.

A strategy answers two kinds of questions about a transition system:

- *State separation* (SSP): find a region giving two reachable states
  different markings.
- *Event/state separation* (ESSP): find a region whose marking in a
  state is too small to fire an event that is not enabled there.

``None`` means the strategy could not solve this particular instance;
it does not prove that no suitable region exists.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Hashable, Iterable, List, Optional

from ..exceptions import MissingLocationError, UnreachableError
from ..Region.properties import PNProperties
from ..Region.region import Region
from ..Region.utility import RegionUtility
from ..TS.transition_system import TransitionSystem

logger = logging.getLogger(__name__)

LocationMap = List[Optional[str]]


# ---------------------------------------------------------------------------
# Separation predicates
# ---------------------------------------------------------------------------


def is_event_enabled(ts: TransitionSystem, state: Hashable, event: str) -> bool:
    return ts.is_enabled(state, event)


def separates_states(region: Region, state: Hashable, other_state: Hashable) -> bool:
    """Whether ``region`` assigns different markings to two reachable states."""
    try:
        return region.marking_for_state(state) != region.marking_for_state(other_state)
    except UnreachableError:
        return False


def separates_event(region: Region, state: Hashable, event: str) -> bool:
    """Whether ``region`` holds fewer tokens in ``state`` than ``event`` consumes."""
    try:
        return region.marking_for_state(state) < region.backward_weight(event)
    except UnreachableError:
        return False


def location_map(utility: RegionUtility, properties: PNProperties) -> LocationMap:
    """
    Location of every event, indexed like :attr:`RegionUtility.event_list`.

    Output-nonbranching is expressed by putting every event at its own
    location. When all events share one location no location handling is
    needed and an all-``None`` map is returned.

    :raises MissingLocationError: If some but not all events have a location.
    """
    ts = utility.ts
    locations: LocationMap = [ts.location(event) for event in utility.event_list]
    if not locations:
        return locations
    with_location = [e for e, loc in zip(utility.event_list, locations) if loc is not None]
    if with_location and len(with_location) != len(locations):
        without = [e for e, loc in zip(utility.event_list, locations) if loc is None]
        raise MissingLocationError(with_location, without)

    if properties.output_nonbranching:
        locations = [str(index) for index in range(len(locations))]

    if all(loc == locations[0] for loc in locations):
        return [None] * len(locations)
    return locations


def has_locations(locations: Iterable[Optional[str]]) -> bool:
    return any(loc is not None for loc in locations)


# ---------------------------------------------------------------------------
# Strategy interface
# ---------------------------------------------------------------------------


class Separation(ABC):
    """
    Base class of all separation strategies.

    Constructors take ``(utility, properties, location_map)`` and raise
    :class:`~regionkit.exceptions.UnsupportedPropertiesError` when they
    cannot honour ``properties``.
    """

    def __init__(self, utility: RegionUtility, location_map: LocationMap) -> None:
        self.utility = utility
        self.location_map = list(location_map)

    @property
    def ts(self) -> TransitionSystem:
        return self.utility.ts

    @abstractmethod
    def separate_states(self, state: Hashable, other_state: Hashable) -> Optional[Region]:
        """
        Find a region separating two states.

        :returns: A valid region with different markings in both states, or
            ``None``.
        """
        raise NotImplementedError

    @abstractmethod
    def separate_event(self, state: Hashable, event: str) -> Optional[Region]:
        """
        Find a region preventing ``event`` in ``state``.

        :returns: A valid region whose marking in ``state`` is below the
            backward weight of ``event``, or ``None``.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.utility.ts.name!r})"


class PrecomputedSeparation(Separation):
    """
    A strategy that computes all regions it can offer up front.

    Subclasses fill :attr:`regions` in their constructor; both separation
    questions are then answered by looking the regions up.
    """

    def __init__(self, utility: RegionUtility, location_map: LocationMap) -> None:
        super().__init__(utility, location_map)
        self.regions: List[Region] = []

    def separate_states(self, state: Hashable, other_state: Hashable) -> Optional[Region]:
        for region in self.regions:
            if separates_states(region, state, other_state):
                return region
        return None

    def separate_event(self, state: Hashable, event: str) -> Optional[Region]:
        for region in self.regions:
            if separates_event(region, state, event):
                return region
        return None

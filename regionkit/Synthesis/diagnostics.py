"""
Human readable reports about a synthesis run.
"""

from __future__ import annotations

from typing import Hashable, Iterable, List

from ..Region.region import Region
from ..Separation.base import is_event_enabled, separates_event
from ..TS.transition_system import TransitionSystem


def _state_ids(states: Iterable[Hashable]) -> str:
    return "[" + ", ".join(sorted(str(state) for state in states)) + "]"


def format_solved_event_state_separation_problems(
    ts: TransitionSystem, regions: Iterable[Region]
) -> str:
    """
    Describe, region by region, which events are prevented in which states.

    Each region contributes a ``Region <region>:`` header followed by one
    ``separates event <e> at states [...]`` line per event it prevents
    somewhere.

    :param ts: The transition system the regions belong to.
    :param regions: The regions to describe.
    :returns: The report, or ``"none"`` when there is nothing to report.
    :rtype: str

    .. code-block:: text

        Region { init=1, 1:a:0, 0:b:1 }:
            separates event a at states [s1]
    """
    lines: List[str] = []
    for region in regions:
        lines.append(f"\nRegion {region}:")
        for event in ts.alphabet:
            states = [
                state
                for state in ts.states
                if not is_event_enabled(ts, state, event) and separates_event(region, state, event)
            ]
            if states:
                lines.append(f"\n\tseparates event {event} at states {_state_ids(states)}")
    text = "".join(lines)
    return text if text else "none"

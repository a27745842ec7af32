from __future__ import annotations

from typing import Any, Iterable, Optional


class SynthesisError(RuntimeError):
    """Base class for all regionkit-specific errors."""


class UnreachableError(SynthesisError):
    """Raised when a Parikh vector or marking is requested for an unreachable state."""

    def __init__(self, state: Any) -> None:
        super().__init__(f"State {state!r} is not reachable from the initial state")
        self.state = state


class UnsupportedPropertiesError(SynthesisError):
    """Raised by a separation strategy that cannot realise the requested properties."""


class InvalidRegionError(SynthesisError):
    """Raised when a candidate region violates a region invariant.

    ``kind`` is ``"prevented"`` when an enabled arc is blocked by the region
    and ``"wrong-effect"`` when the effect of an arc does not match the
    markings of its endpoints.
    """

    def __init__(self, region: Any, state: Any, event: str, kind: str) -> None:
        if kind == "prevented":
            msg = f"Region {region} prevents event {event!r} in state {state!r}"
        else:
            msg = (
                f"Region {region} assigns a wrong effect to the "
                f"{event!r}-arc leaving state {state!r}"
            )
        super().__init__(msg)
        self.region = region
        self.state = state
        self.event = event
        self.kind = kind


class MissingLocationError(SynthesisError):
    """Raised when only some events of a transition system carry a location."""

    def __init__(self, with_location: Iterable[str], without_location: Iterable[str]) -> None:
        self.with_location = sorted(with_location)
        self.without_location = sorted(without_location)
        super().__init__(
            "Events %s have a location, but events %s do not"
            % (self.with_location, self.without_location)
        )


class NonDeterministicError(SynthesisError):
    """Raised when an algorithm requires a deterministic transition system."""

    def __init__(self, state: Any, label: str, forward: bool = True) -> None:
        direction = "successors" if forward else "predecessors"
        super().__init__(
            f"State {state!r} has several {direction} for label {label!r}"
        )
        self.state = state
        self.label = label
        self.forward = forward


class PreconditionFailedError(SynthesisError):
    """Raised when an input does not satisfy the preconditions of an algorithm."""


class NonDisjointCyclesError(PreconditionFailedError):
    """Raised when two small cycles of a transition system are not disjoint."""

    def __init__(self, cycle1: Any, cycle2: Any) -> None:
        super().__init__(f"Small cycles {cycle1} and {cycle2} are not disjoint")
        self.cycle1 = cycle1
        self.cycle2 = cycle2


class SynthesisInterrupted(SynthesisError):
    """Raised when a cooperative cancellation request is observed."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "Synthesis was interrupted")


class OptionsError(SynthesisError, ValueError):
    """Raised when a synthesis option string cannot be parsed."""

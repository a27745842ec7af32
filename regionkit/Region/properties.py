"""
Structural properties requested from a synthesized Petri net.

:class:`PNProperties` is an immutable value object. Every ``require_*`` or
:meth:`PNProperties.replace` call returns a new instance, so a descriptor
can be shared freely between strategies.

.. code-block:: python

    props = PNProperties().require_safe().replace(pure=True)
    str(props)            # '[safe, pure]'
    props.is_k_bounded(3)  # True
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from typing import Any, List, Optional


@dataclass(frozen=True)
class PNProperties:
    """
    Immutable set of requested net properties.

    :param k_bounded: Token bound per place; ``None`` means unbounded.
    :param k_marking: Every initial marking must be a multiple of this.
    :param pure: No place is both input and output of a transition.
    :param plain: All arc weights are at most one.
    :param tnet: Every place has at most one input and one output transition.
    :param marked_graph: Every place has exactly one input and one output transition.
    :param output_nonbranching: Every place has at most one output transition.
    :param merge_free: Every place has at most one input transition.
    :param conflict_free: Every place with several outputs is a side condition of them.
    :param homogeneous: All outgoing arcs of a place have the same weight.
    :param behaviourally_conflict_free: Transitions enabled together share no input place.
    :param binary_conflict_free: Every two enabled transitions may fire together.
    :param equal_conflict: Transitions sharing an input place have identical presets.
    """

    k_bounded: Optional[int] = None
    k_marking: int = 1
    pure: bool = False
    plain: bool = False
    tnet: bool = False
    marked_graph: bool = False
    output_nonbranching: bool = False
    merge_free: bool = False
    conflict_free: bool = False
    homogeneous: bool = False
    behaviourally_conflict_free: bool = False
    binary_conflict_free: bool = False
    equal_conflict: bool = False

    def __post_init__(self) -> None:
        if self.k_bounded is not None and self.k_bounded < 0:
            raise ValueError(f"k_bounded must be non-negative, got {self.k_bounded}")
        if self.k_marking < 1:
            raise ValueError(f"k_marking must be positive, got {self.k_marking}")

    # ------------------------------------------------------------------
    # Bounds
    # ------------------------------------------------------------------

    def is_k_bounded(self, k: Optional[int] = None) -> bool:
        """Whether some bound is set and, if ``k`` is given, whether it is ``<= k``."""
        if self.k_bounded is None:
            return False
        return k is None or self.k_bounded <= k

    def is_safe(self) -> bool:
        return self.is_k_bounded(1)

    def require_k_bounded(self, k: int) -> "PNProperties":
        if k < 0:
            raise ValueError(f"k must be non-negative, got {k}")
        if self.is_k_bounded(k):
            return self
        return replace(self, k_bounded=k)

    def require_safe(self) -> "PNProperties":
        return self.require_k_bounded(1)

    def is_k_marking(self) -> bool:
        """Every marking is a 1-marking, so only ``k > 1`` counts."""
        return self.k_marking != 1

    def require_k_marking(self, k: int) -> "PNProperties":
        if k < 1:
            raise ValueError(f"k must be positive, got {k}")
        if self.k_marking == k:
            return self
        return replace(self, k_marking=self.k_marking * k // math.gcd(self.k_marking, k))

    def replace(self, **changes: Any) -> "PNProperties":
        """Return a copy with the given fields changed."""
        return replace(self, **changes)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def contains_all(self, other: "PNProperties") -> bool:
        """
        Whether every property required by ``other`` is implied by ``self``.

        A tighter bound implies a looser one and a k-marking implies every
        divisor-marking.
        """
        if other.is_k_bounded():
            if not self.is_k_bounded() or self.k_bounded > other.k_bounded:
                return False
        if other.is_k_marking():
            if not self.is_k_marking() or self.k_marking % other.k_marking != 0:
                return False
        for flag in _FLAGS:
            if getattr(other, flag) and not getattr(self, flag):
                return False
        return True

    def is_empty(self) -> bool:
        return self == PNProperties()

    def __str__(self) -> str:
        items: List[str] = []
        if self.k_bounded == 1:
            items.append("safe")
        elif self.is_k_bounded():
            items.append(f"{self.k_bounded}-bounded")
        if self.is_k_marking():
            items.append(f"{self.k_marking}-marking")
        for flag in _FLAGS:
            if getattr(self, flag):
                items.append(flag.replace("_", "-"))
        return "[" + ", ".join(items) + "]"


_FLAGS = tuple(
    f.name for f in fields(PNProperties) if f.name not in ("k_bounded", "k_marking")
)

"""
Transition systems and the TS-level algorithms used by synthesis.

Re-exported names
-----------------
- :class:`~regionkit.TS.transition_system.TransitionSystem`, :class:`~regionkit.TS.transition_system.Arc`
- :class:`~regionkit.TS.spanning_tree.SpanningTree`
- :func:`~regionkit.TS.unfolding.limited_unfolding`
- :func:`~regionkit.TS.factorisation.factorise`
- :func:`~regionkit.TS.word.word_ts`
"""

from __future__ import annotations

from typing import List

from .transition_system import Arc, TransitionSystem
from .spanning_tree import SpanningTree
from .analysis import (
    check_deterministic,
    is_deterministic,
    is_persistent,
    is_reversible,
    is_totally_reachable,
    reachable_part,
)
from .cycles import search_small_cycles
from .unfolding import limited_unfolding
from .factorisation import factorise
from .word import format_essp_failures, format_ssp_failures, word_ts

__all__: List[str] = [
    "Arc",
    "TransitionSystem",
    "SpanningTree",
    "check_deterministic",
    "is_deterministic",
    "is_persistent",
    "is_reversible",
    "is_totally_reachable",
    "reachable_part",
    "search_small_cycles",
    "limited_unfolding",
    "factorise",
    "word_ts",
    "format_essp_failures",
    "format_ssp_failures",
]

"""
Petri nets built from regions and the checks applied to them.
"""

from __future__ import annotations

from typing import List

from .petri_net import Marking, PetriNet
from .checks import (
    is_conflict_free,
    is_distributed_implementation,
    is_generalized_marked_graph,
    is_generalized_t_net,
    is_homogeneous,
    is_isomorphic,
    is_k_bounded,
    is_language_equivalent,
    is_merge_free,
    is_output_nonbranching,
    is_plain,
    is_pure,
    max_tokens,
)

__all__: List[str] = [
    "Marking",
    "PetriNet",
    "is_conflict_free",
    "is_distributed_implementation",
    "is_generalized_marked_graph",
    "is_generalized_t_net",
    "is_homogeneous",
    "is_isomorphic",
    "is_k_bounded",
    "is_language_equivalent",
    "is_merge_free",
    "is_output_nonbranching",
    "is_plain",
    "is_pure",
    "max_tokens",
]

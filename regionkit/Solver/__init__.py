"""
Constraint solving on top of z3.
"""

from __future__ import annotations

from typing import List

from .inequality import Comparator, Inequality, InequalitySystem, InequalitySystemSolver, check_sat
from .smt import RegionEncoder, RegionVariables

__all__: List[str] = [
    "Comparator",
    "Inequality",
    "InequalitySystem",
    "InequalitySystemSolver",
    "check_sat",
    "RegionEncoder",
    "RegionVariables",
]

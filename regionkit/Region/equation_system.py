"""
Integer solutions of homogeneous linear equation systems.

:class:`EquationSystem` computes a generating set of the integer solutions
of ``A x = 0``. The method keeps two systems: ``x = E1 y`` (initially the
identity) and ``E2 y = 0`` (initially ``A``). The first equation of ``E2``
is reduced by unimodular variable substitutions to a single non-zero
coefficient, after which that variable is forced to zero and the equation
is dropped. When ``E2`` is empty the non-zero columns of ``E1`` span all
integer solutions.

References
----------
- Badouel, Bernardinello & Darondeau (2015), *Petri Net Synthesis*,
  Springer, Algorithm 4 (p. 190).
"""

from __future__ import annotations

from itertools import chain
from typing import List, Optional, Sequence, Tuple


class EquationSystem:
    """
    A homogeneous system ``sum_i a_i x_i = 0`` over the integers.

    :param num_variables: Number of unknowns.
    :type num_variables: int

    .. code-block:: python

        system = EquationSystem(3)
        system.add_equation([1, -1, 0])
        system.find_basis()   # e.g. [[1, 1, 0], [0, 0, 1]]
    """

    def __init__(self, num_variables: int) -> None:
        if num_variables < 0:
            raise ValueError("num_variables must be non-negative")
        self._num_variables = num_variables
        self._equations: List[Tuple[int, ...]] = []

    @property
    def num_variables(self) -> int:
        return self._num_variables

    @property
    def equations(self) -> List[Tuple[int, ...]]:
        return list(self._equations)

    def add_equation(self, coefficients: Sequence[int]) -> None:
        if len(coefficients) != self._num_variables:
            raise ValueError(
                f"Expected {self._num_variables} coefficients, got {len(coefficients)}"
            )
        self._equations.append(tuple(int(c) for c in coefficients))

    def find_basis(self) -> List[List[int]]:
        """
        Compute a generating set of the integer solutions.

        :returns: Distinct non-zero solution vectors; every integer solution
            is an integer linear combination of them.
        :rtype: list[list[int]]
        """
        solver = _Solver(self._num_variables, self._equations)
        e1 = solver.solve()
        n = self._num_variables
        basis: List[List[int]] = []
        for column in range(n):
            vector = [e1[row][column] for row in range(n)]
            if any(vector) and vector not in basis:
                basis.append(vector)
        return basis

    def __repr__(self) -> str:
        return f"EquationSystem({self._num_variables} variables, {len(self._equations)} equations)"


class _Solver:
    """Working state of the reduction; rows of ``e1`` and ``e2`` share the ``y`` columns."""

    def __init__(self, n: int, equations: Sequence[Sequence[int]]) -> None:
        self.n = n
        self.e1 = [[1 if i == j else 0 for j in range(n)] for i in range(n)]
        self.e2 = [list(row) for row in equations]

    def _rows(self):
        return chain(self.e1, self.e2)

    def _invert(self, j: int) -> None:
        for row in self._rows():
            row[j] = -row[j]

    def _substitute(self, variable: int, factor: int, addend: int) -> None:
        # y_variable -> y_variable + factor * y_addend
        for row in self._rows():
            row[variable] += factor * row[addend]

    def _remove_variable(self, j: int) -> None:
        for row in self._rows():
            row[j] = 0

    def _find_pair(self, equation: List[int]) -> Optional[Tuple[int, int]]:
        nonzero = [i for i, value in enumerate(equation) if value != 0]
        if len(nonzero) < 2:
            return None
        i, j = nonzero[0], nonzero[1]
        if equation[j] < equation[i]:
            i, j = j, i
        return i, j

    def _remove_redundancy(self) -> None:
        index = 0
        while index < len(self.e2):
            nonzero = [j for j, value in enumerate(self.e2[index]) if value != 0]
            if len(nonzero) == 1:
                del self.e2[index]
                self._remove_variable(nonzero[0])
            else:
                index += 1
        self.e2 = [row for row in self.e2 if any(row)]

    def solve(self) -> List[List[int]]:
        while self.e2:
            equation = self.e2[0]
            for i in range(self.n):
                if equation[i] < 0:
                    self._invert(i)
            while True:
                pair = self._find_pair(equation)
                if pair is None:
                    break
                small, large = pair
                self._substitute(large, -(equation[large] // equation[small]), small)
            self._remove_redundancy()
        return self.e1

"""
Systems of linear integer inequalities and a z3-backed solver.

An :class:`InequalitySystem` is a conjunction of rows
``lhs <cmp> sum_i c_i * x_i`` over integer unknowns ``x_0, x_1, ...``.
:class:`InequalitySystemSolver` asserts disjunctions of such systems into
an incremental :class:`z3.Solver` and extracts integer models.

.. code-block:: python

    system = InequalitySystem()
    system.add_inequality(0, ">", [1, -1])     # x0 < x1
    solver = InequalitySystemSolver().assert_disjunction(system)
    solver.find_solution()                     # e.g. [0, 1]
"""

from __future__ import annotations

import logging
import operator
from enum import Enum
from typing import Callable, Iterator, List, NamedTuple, Optional, Sequence, Tuple

import z3

from ..exceptions import SynthesisInterrupted
from ..interrupt import NEVER, Interrupter

logger = logging.getLogger(__name__)


class Comparator(str, Enum):
    """Relation between the left-hand side constant and the weighted sum."""

    LESS_THAN_OR_EQUAL = "<="
    LESS_THAN = "<"
    EQUAL = "="
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="

    @property
    def function(self) -> Callable[[object, object], object]:
        return _OPERATORS[self]

    @classmethod
    def parse(cls, value: "str | Comparator") -> "Comparator":
        if isinstance(value, Comparator):
            return value
        for comparator in cls:
            if comparator.value == value:
                return comparator
        raise ValueError(f"Unknown comparator {value!r}")

    def __str__(self) -> str:
        return self.value


_OPERATORS = {
    Comparator.LESS_THAN_OR_EQUAL: operator.le,
    Comparator.LESS_THAN: operator.lt,
    Comparator.EQUAL: operator.eq,
    Comparator.GREATER_THAN: operator.gt,
    Comparator.GREATER_THAN_OR_EQUAL: operator.ge,
}


class Inequality(NamedTuple):
    """One row ``lhs <comparator> sum_i coefficients[i] * x_i``."""

    lhs: int
    comparator: Comparator
    coefficients: Tuple[int, ...]
    comment: str = ""

    def fulfilled_by(self, values: Sequence[int]) -> bool:
        rhs = sum(c * v for c, v in zip(self.coefficients, values))
        return bool(self.comparator.function(self.lhs, rhs))

    def __str__(self) -> str:
        terms = [f"{c}*x[{i}]" for i, c in enumerate(self.coefficients) if c != 0]
        text = f"{self.lhs} {self.comparator} {' + '.join(terms) if terms else '0'}"
        if self.comment:
            text += f"\t({self.comment})"
        return text


class InequalitySystem:
    """A conjunction of :class:`Inequality` rows."""

    def __init__(self) -> None:
        self._rows: List[Inequality] = []

    @property
    def number_of_variables(self) -> int:
        return max((len(row.coefficients) for row in self._rows), default=0)

    def add_inequality(
        self,
        lhs: int,
        comparator: "str | Comparator",
        coefficients: Sequence[int],
        comment: str = "",
    ) -> "InequalitySystem":
        self._rows.append(
            Inequality(
                int(lhs),
                Comparator.parse(comparator),
                tuple(int(c) for c in coefficients),
                comment,
            )
        )
        return self

    def fulfilled_by(self, values: Sequence[int]) -> bool:
        return all(row.fulfilled_by(values) for row in self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Inequality]:
        return iter(self._rows)

    def __str__(self) -> str:
        return "[\n" + "".join(f"{row}\n" for row in self._rows) + "]"


class InequalitySystemSolver:
    """
    Incremental solver for disjunctions of inequality systems.

    ``assert_disjunction(s1, s2)`` requires at least one of ``s1`` and
    ``s2`` to hold. An empty system is unsatisfiable and asserting no
    systems at all adds no constraint. :meth:`push` and :meth:`pop`
    delimit scopes of assertions.

    :param interrupter: Polled before every satisfiability check; its
        remaining time becomes the z3 timeout.
    """

    def __init__(self, interrupter: Interrupter = NEVER) -> None:
        self._solver = z3.Solver()
        self._interrupter = interrupter
        self._variables: List[z3.ArithRef] = []
        self._systems: List[Tuple[InequalitySystem, ...]] = []
        self._scopes: List[Tuple[int, int]] = []

    def _variable(self, index: int) -> z3.ArithRef:
        while len(self._variables) <= index:
            self._variables.append(z3.Int(f"var{len(self._variables)}"))
        return self._variables[index]

    def _to_term(self, system: InequalitySystem) -> z3.BoolRef:
        if len(system) == 0:
            return z3.BoolVal(False)
        terms = []
        for row in system:
            summands = [
                c * self._variable(i) for i, c in enumerate(row.coefficients) if c != 0
            ]
            rhs = z3.Sum(summands) if summands else z3.IntVal(0)
            terms.append(row.comparator.function(z3.IntVal(row.lhs), rhs))
        return terms[0] if len(terms) == 1 else z3.And(terms)

    def assert_disjunction(self, *systems: InequalitySystem) -> "InequalitySystemSolver":
        for system in systems:
            if system.number_of_variables:
                self._variable(system.number_of_variables - 1)
        self._systems.append(tuple(systems))
        if len(systems) == 1:
            self._solver.add(self._to_term(systems[0]))
        elif systems:
            self._solver.add(z3.Or([self._to_term(s) for s in systems]))
        return self

    def push(self) -> "InequalitySystemSolver":
        self._solver.push()
        self._scopes.append((len(self._systems), len(self._variables)))
        return self

    def pop(self) -> "InequalitySystemSolver":
        self._solver.pop()
        num_systems, num_variables = self._scopes.pop()
        del self._systems[num_systems:]
        del self._variables[num_variables:]
        return self

    def find_solution(self) -> Optional[List[int]]:
        """
        Solve the asserted constraints.

        :returns: One integer per variable, or ``None`` if unsatisfiable.
        :raises SynthesisInterrupted: If interrupted or z3 gives up.
        """
        result = check_sat(self._solver, self._interrupter)
        if result == z3.unsat:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("No solution found for:")
                for disjunction in self._systems:
                    logger.debug("at least one of: %s", [str(s) for s in disjunction])
            return None
        model = self._solver.model()
        solution = [
            model.eval(variable, model_completion=True).as_long()
            for variable in self._variables
        ]
        logger.debug("Solution: %s", solution)
        assert self._is_solution(solution), f"{solution} should solve the system but does not"
        return solution

    def _is_solution(self, solution: Sequence[int]) -> bool:
        return all(
            not disjunction or any(s.fulfilled_by(solution) for s in disjunction)
            for disjunction in self._systems
        )


def check_sat(solver: z3.Solver, interrupter: Interrupter = NEVER) -> z3.CheckSatResult:
    """
    Run ``solver.check()`` under the deadline of ``interrupter``.

    :raises SynthesisInterrupted: If cancellation was requested or z3
        answers ``unknown``.
    """
    interrupter.check()
    remaining = interrupter.remaining_ms()
    if remaining is not None:
        solver.set("timeout", remaining)
    result = solver.check()
    if result == z3.unknown:
        raise SynthesisInterrupted(f"SMT solver gave up: {solver.reason_unknown()}")
    return result

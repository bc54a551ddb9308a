#!/usr/bin/env python3
#
# Copyright 2022 Max Planck Insitute Magdeburg
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
#
#
"""Exact linear programs solved with the two-phase simplex method

A LinearProgram minimizes or maximizes a linear objective over non-negative
variables subject to linear constraints (<=, = or >=). All tableau
arithmetic is exact, so there are no tolerances: a reduced cost is either
negative or it is not. Bland's rule selects entering and leaving variables,
which rules out cycling on degenerate problems.

With integer=True, the program is solved by branch and bound: the first
variable with a fractional value v in the relaxed optimum is split into the
branches x <= floor(v) and x >= floor(v) + 1.

transport_problem forms the fleet-assignment program (ships of several types
assigned to transport lines at least cost) and transport_plan reads its
solution back as a lines x ship types matrix.

Example:
    >>> lp = LinearProgram([1, 1], [Constraint([1, 2], GE, 4), Constraint([3, 1], GE, 6)])
    >>> lp.solve().objective_value
    Rational(14, 5)
"""

import logging
from typing import List, Optional, Sequence
from exactlinalg.errors import DimensionMismatch, NoSolution, UnboundedProblem, ExactLinAlgError
from exactlinalg.matrix import RationalMatrix, RationalVector
from exactlinalg.outcome import Outcome, Success, Failure
from exactlinalg.rational import Rational
from exactlinalg.names import *

LOG = logging.getLogger(__name__)


class Constraint(object):
    """Linear constraint  coefficients * x  (<=|=|>=)  rhs

    Args:
        coefficients (sequence):
            One coefficient per variable.

        sign (str):
            LE ('<='), EQ ('=') or GE ('>=').

        rhs:
            Right-hand side value.
    """
    __slots__ = ('coefficients', 'sign', 'rhs')

    def __init__(self, coefficients, sign: str, rhs):
        if sign not in (LE, EQ, GE):
            raise ValueError(f"Unknown constraint sign {sign!r}, use '<=', '=' or '>='")
        self.coefficients = coefficients if isinstance(coefficients, RationalVector) else RationalVector(coefficients)
        self.sign = sign
        self.rhs = Rational.value_of(rhs)

    def __reduce__(self):
        return (Constraint, (self.coefficients, self.sign, self.rhs))

    def __repr__(self):
        return f"Constraint({self.coefficients} {self.sign} {self.rhs})"


class LPSolution(object):
    """Optimal point of a linear program

    Attributes:
        variables (RationalVector): Optimal values of the variables.
        objective_value (Rational): Objective at the optimum.
        status (str): OPTIMAL.
    """
    __slots__ = ('variables', 'objective_value', 'status')

    def __init__(self, variables: RationalVector, objective_value: Rational, status: str = OPTIMAL):
        self.variables = variables
        self.objective_value = objective_value
        self.status = status

    def __eq__(self, other):
        if not isinstance(other, LPSolution):
            return NotImplemented
        return self.variables == other.variables and self.objective_value == other.objective_value

    __hash__ = None

    def __reduce__(self):
        return (LPSolution, (self.variables, self.objective_value, self.status))

    def __repr__(self):
        return f"LPSolution(variables={self.variables}, objective_value={self.objective_value})"


class LinearProgram(object):
    """Linear program over non-negative rational variables

    Args:
        objective (sequence):
            Objective coefficients, one per variable.

        constraints (list of Constraint):
            Linear constraints. Non-negativity of the variables is implied.

        sense (optional (str)): (Default: MINIMIZE)
            MINIMIZE or MAXIMIZE.

        integer (optional (bool)): (Default: False)
            Restrict all variables to integers (branch and bound).

    Raises:
        DimensionMismatch: If a constraint has a different number of
            coefficients than the objective.
    """
    __slots__ = ('objective', 'constraints', 'sense', 'integer')

    def __init__(self, objective, constraints: Sequence[Constraint] = (), sense: str = MINIMIZE,
                 integer: bool = False):
        if sense not in (MINIMIZE, MAXIMIZE):
            raise ValueError(f"Unknown optimization sense {sense!r}")
        self.objective = objective if isinstance(objective, RationalVector) else RationalVector(objective)
        self.constraints = tuple(constraints)
        for i, c in enumerate(self.constraints):
            if len(c.coefficients) != len(self.objective):
                raise DimensionMismatch(f"Constraint {i} has {len(c.coefficients)} coefficients, "
                                        f"objective has {len(self.objective)}")
        self.sense = sense
        self.integer = integer

    @property
    def n_variables(self) -> int:
        return len(self.objective)

    def with_constraint(self, constraint: Constraint) -> 'LinearProgram':
        """Copy of this program with one more constraint"""
        return LinearProgram(self.objective, self.constraints + (constraint,), self.sense, self.integer)

    def solve(self) -> LPSolution:
        """Solve the program exactly

        Raises:
            NoSolution: If the program is infeasible.
            UnboundedProblem: If the objective is unbounded.
        """
        if self.integer:
            return self._branch_and_bound()
        return _Tableau(self).solve()

    def _improves(self, candidate: Rational, incumbent: Rational) -> bool:
        if self.sense == MINIMIZE:
            return candidate < incumbent
        return candidate > incumbent

    def _branch_and_bound(self) -> LPSolution:
        best = None
        nodes = 0
        stack = [self]
        while stack:
            node = stack.pop()
            nodes += 1
            try:
                relaxed = _Tableau(node).solve()
            except NoSolution:
                continue
            if best is not None and not self._improves(relaxed.objective_value, best.objective_value):
                continue
            fractional = next((i for i, v in enumerate(relaxed.variables) if not v.is_integer()), None)
            if fractional is None:
                LOG.debug(f"Integral solution with objective {relaxed.objective_value} at node {nodes}")
                best = relaxed
                continue
            whole = relaxed.variables[fractional].floor()
            unit = [0] * self.n_variables
            unit[fractional] = 1
            stack.append(node.with_constraint(Constraint(unit, GE, whole + 1)))
            stack.append(node.with_constraint(Constraint(unit, LE, whole)))
        LOG.info(f"Branch and bound explored {nodes} nodes.")
        if best is None:
            raise NoSolution("Integer program has no feasible solution")
        return best


class _Tableau:
    """Simplex tableau in standard form for one LinearProgram

    Columns are the original variables, then one slack or surplus variable per
    inequality, then one artificial variable per >= or = row. The last entry
    of every row holds the right-hand side.
    """

    def __init__(self, program: LinearProgram):
        self.program = program
        n = program.n_variables
        rows = []
        for c in program.constraints:
            coefficients = list(c.coefficients)
            rhs, sign = c.rhs, c.sign
            if rhs.is_negative():
                coefficients = [v.negate() for v in coefficients]
                rhs = rhs.negate()
                sign = {LE: GE, GE: LE, EQ: EQ}[sign]
            rows.append((coefficients, sign, rhs))
        n_slack = sum(1 for _, sign, _ in rows if sign != EQ)
        n_artificial = sum(1 for _, sign, _ in rows if sign != LE)
        self.n_original = n
        self.first_artificial = n + n_slack
        self.width = n + n_slack + n_artificial
        self.table = []
        self.basis = []
        slack = n
        artificial = self.first_artificial
        for coefficients, sign, rhs in rows:
            row = coefficients + [Rational.ZERO] * (n_slack + n_artificial) + [rhs]
            if sign == LE:
                row[slack] = Rational.ONE
                self.basis.append(slack)
                slack += 1
            else:
                if sign == GE:
                    row[slack] = Rational.ONE.negate()
                    slack += 1
                row[artificial] = Rational.ONE
                self.basis.append(artificial)
                artificial += 1
            self.table.append(row)

    def solve(self) -> LPSolution:
        if self.first_artificial < self.width:
            phase1_cost = [Rational.ZERO] * self.first_artificial + [Rational.ONE] * (self.width - self.first_artificial)
            self._optimize(phase1_cost, self.width)
            if not self._value(phase1_cost).is_zero():
                raise NoSolution("Linear program is infeasible")
            self._drive_out_artificials()
        cost = list(self.program.objective)
        if self.program.sense == MAXIMIZE:
            cost = [v.negate() for v in cost]
        cost += [Rational.ZERO] * (self.first_artificial - self.n_original)
        if not self._optimize(cost, self.first_artificial):
            raise UnboundedProblem("Objective is unbounded")
        x = [Rational.ZERO] * self.n_original
        for i, col in enumerate(self.basis):
            if col < self.n_original:
                x[col] = self.table[i][-1]
        variables = RationalVector._wrap(tuple(x))
        return LPSolution(variables, self.program.objective.dot(variables))

    def _value(self, cost: List[Rational]) -> Rational:
        total = Rational.ZERO
        for i, col in enumerate(self.basis):
            if col < len(cost):
                total = total + cost[col] * self.table[i][-1]
        return total

    def _optimize(self, cost: List[Rational], allowed: int) -> bool:
        """Minimize cost over the first allowed columns. False if unbounded."""
        iteration = 0
        while True:
            entering = self._entering_column(cost, allowed)
            if entering is None:
                return True
            leaving = self._leaving_row(entering)
            if leaving is None:
                return False
            iteration += 1
            LOG.debug(f"Simplex iteration {iteration}: column {entering} enters, "
                      f"column {self.basis[leaving]} leaves")
            self._pivot(leaving, entering)

    def _entering_column(self, cost: List[Rational], allowed: int) -> Optional[int]:
        """Bland's rule: lowest index with negative reduced cost"""
        basic = set(self.basis)
        for j in range(allowed):
            if j in basic:
                continue
            reduced = cost[j] if j < len(cost) else Rational.ZERO
            for i, col in enumerate(self.basis):
                if col < len(cost) and not self.table[i][j].is_zero():
                    reduced = reduced - cost[col] * self.table[i][j]
            if reduced.is_negative():
                return j
        return None

    def _leaving_row(self, col: int) -> Optional[int]:
        """Minimum ratio test, ties broken by the lowest basic column index"""
        best = None
        best_ratio = None
        for i, row in enumerate(self.table):
            if row[col] > 0:
                ratio = row[-1] / row[col]
                if best is None or ratio < best_ratio or (ratio == best_ratio and self.basis[i] < self.basis[best]):
                    best, best_ratio = i, ratio
        return best

    def _pivot(self, row: int, col: int):
        pivot_value = self.table[row][col]
        pivot = [v / pivot_value for v in self.table[row]]
        self.table[row] = pivot
        for i, current in enumerate(self.table):
            if i == row or current[col].is_zero():
                continue
            multiplier = current[col]
            self.table[i] = [a - multiplier * p if not p.is_zero() else a for a, p in zip(current, pivot)]
        self.basis[row] = col

    def _drive_out_artificials(self):
        """Replace artificial basic variables (all at zero) or drop redundant rows"""
        i = 0
        while i < len(self.table):
            if self.basis[i] >= self.first_artificial:
                col = next((j for j in range(self.first_artificial) if not self.table[i][j].is_zero()), None)
                if col is None:
                    del self.table[i]
                    del self.basis[i]
                    continue
                self._pivot(i, col)
            i += 1


def optimize(program: LinearProgram) -> Outcome:
    """Solve a linear program: Success(LPSolution), or Failure with NoSolution or UnboundedProblem"""
    try:
        return Success(program.solve())
    except ExactLinAlgError as err:
        LOG.debug(f"{OPTIMIZE} failed with {err.kind}: {err}")
        return Failure(err)


def transport_problem(transport_rate, cost_rate, min_transport, ships_per_type, integer: bool = False) -> LinearProgram:
    """Fleet assignment as a linear program

    Ships of several types are assigned to transport lines. Variable x[i][j]
    is the number of ships of type j on line i, stored row by row (line i,
    ship type j is variable i * n_ships + j). The program minimizes the total
    cost sum(cost_rate[i][j] * x[i][j]) such that

    - every line i carries at least min_transport[i]:
      sum_j transport_rate[i][j] * x[i][j] >= min_transport[i]
    - every ship of type j is used: sum_i x[i][j] = ships_per_type[j]

    Args:
        transport_rate (RationalMatrix or sequence of rows):
            Amount a ship of type j carries on line i (lines x ship types).

        cost_rate (RationalMatrix or sequence of rows):
            Cost of a ship of type j on line i, same shape as transport_rate.

        min_transport (sequence):
            Minimum amount per line.

        ships_per_type (sequence):
            Number of available ships per type.

        integer (optional (bool)): (Default: False)
            Only whole ships (branch and bound).

    Raises:
        DimensionMismatch: If the shapes of the inputs disagree.
    """
    transport_rate = RationalMatrix(transport_rate)
    cost_rate = RationalMatrix(cost_rate)
    min_transport = RationalVector(min_transport)
    ships_per_type = RationalVector(ships_per_type)
    if transport_rate.shape != cost_rate.shape:
        raise DimensionMismatch(f"Transport rates {transport_rate.shape} and costs {cost_rate.shape} differ in shape")
    n_lines, n_ships = transport_rate.shape
    if len(min_transport) != n_lines:
        raise DimensionMismatch(f"{len(min_transport)} minimum transports given for {n_lines} lines")
    if len(ships_per_type) != n_ships:
        raise DimensionMismatch(f"{len(ships_per_type)} ship counts given for {n_ships} ship types")
    n = n_lines * n_ships
    constraints = []
    for i in range(n_lines):
        coefficients = [Rational.ZERO] * n
        coefficients[i * n_ships:(i + 1) * n_ships] = transport_rate.row(i)
        constraints.append(Constraint(RationalVector._wrap(tuple(coefficients)), GE, min_transport[i]))
    for j in range(n_ships):
        coefficients = [Rational.ONE if k % n_ships == j else Rational.ZERO for k in range(n)]
        constraints.append(Constraint(RationalVector._wrap(tuple(coefficients)), EQ, ships_per_type[j]))
    objective = RationalVector._wrap(tuple(v for row in cost_rate for v in row))
    LOG.info(f"Transport problem with {n_lines} lines and {n_ships} ship types formed.")
    return LinearProgram(objective, constraints, MINIMIZE, integer)


def transport_plan(solution: LPSolution, n_lines: int, n_ships: int) -> RationalMatrix:
    """Variables of a solved transport_problem as a lines x ship types matrix"""
    if len(solution.variables) != n_lines * n_ships:
        raise DimensionMismatch(f"{len(solution.variables)} variables do not form a {n_lines}x{n_ships} plan")
    values = solution.variables.to_list()
    return RationalMatrix._wrap(tuple(tuple(values[i * n_ships:(i + 1) * n_ships]) for i in range(n_lines)), n_ships)

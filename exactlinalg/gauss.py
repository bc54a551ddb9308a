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
"""Exact Gauss-Jordan elimination and the linear algebra entry points

The Gauss class performs elimination on a private copy of a RationalMatrix
and derives rank, determinant, inverse, solutions of linear systems and
nullspace bases from it. Its methods raise the typed errors from
exactlinalg.errors.

The module level functions solve, invert, determinant, row_reduce,
row_echelon, rank and nullspace wrap the Gauss methods and return an
Outcome (Success or Failure) instead of raising. These are the functions
host applications and the batch dispatcher call.

Pivoting: there is no round-off to control in exact arithmetic, so pivots
are not chosen by magnitude. For every column the first row at or below the
current pivot row with a non-zero entry is taken. Results are therefore
reproducible for a given input.
"""

import logging
from typing import List, Optional, Sequence, Tuple, Union
from exactlinalg.configuration import Configuration
from exactlinalg.errors import (ExactLinAlgError, DimensionMismatch, SingularMatrix, NoSolution,
                                UnderdeterminedSystem)
from exactlinalg.matrix import RationalMatrix, RationalVector
from exactlinalg.outcome import Outcome, Success, Failure
from exactlinalg.rational import Rational
from exactlinalg.names import *

LOG = logging.getLogger(__name__)


class EliminationResult(object):
    """Read-only result of one elimination run

    Attributes:
        matrix (RationalMatrix):
            Row-echelon form, or reduced row-echelon form if reduced is True.

        pivot_columns (tuple of int):
            Column index of the pivot in each of the first rank rows.

        rank (int):
            Number of pivots.

        swap_count (int):
            Number of row exchanges performed.

        determinant (Rational or None):
            Determinant of the input if it was square and every column could
            hold a pivot (no pivot_limit below the column count), else None.

        reduced (bool):
            Whether entries above the pivots were eliminated too.
    """
    __slots__ = ('matrix', 'pivot_columns', 'rank', 'swap_count', 'determinant', 'reduced')

    def __init__(self, matrix, pivot_columns, swap_count, determinant, reduced):
        self.matrix = matrix
        self.pivot_columns = tuple(pivot_columns)
        self.rank = len(self.pivot_columns)
        self.swap_count = swap_count
        self.determinant = determinant
        self.reduced = reduced

    def __eq__(self, other):
        if not isinstance(other, EliminationResult):
            return NotImplemented
        return (self.matrix == other.matrix and self.pivot_columns == other.pivot_columns and
                self.determinant == other.determinant and self.reduced == other.reduced)

    __hash__ = None

    def __reduce__(self):
        return (EliminationResult, (self.matrix, self.pivot_columns, self.swap_count, self.determinant, self.reduced))

    def __repr__(self):
        return (f"EliminationResult(rank={self.rank}, pivot_columns={self.pivot_columns}, "
                f"determinant={self.determinant}, reduced={self.reduced})")


class Solution(object):
    """Solution set of a consistent linear system A x = b

    Every solution can be written as x + sum(t_i * nullspace[i]) for
    arbitrary rationals t_i.

    Attributes:
        x (RationalVector):
            Particular solution with all free variables set to zero.

        nullspace (tuple of RationalVector):
            Basis of the solutions of A x = 0, one vector per free variable.
            Empty if the solution is unique.

        free_columns (tuple of int):
            Indices of the free variables.

        rank (int):
            Rank of the coefficient matrix.
    """
    __slots__ = ('x', 'nullspace', 'free_columns', 'rank')

    def __init__(self, x, nullspace=(), free_columns=(), rank=0):
        self.x = x
        self.nullspace = tuple(nullspace)
        self.free_columns = tuple(free_columns)
        self.rank = rank

    @property
    def unique(self) -> bool:
        return not self.free_columns

    def __eq__(self, other):
        if not isinstance(other, Solution):
            return NotImplemented
        return (self.x == other.x and self.nullspace == other.nullspace and
                self.free_columns == other.free_columns and self.rank == other.rank)

    __hash__ = None

    def __reduce__(self):
        return (Solution, (self.x, self.nullspace, self.free_columns, self.rank))

    def __repr__(self):
        return f"Solution(x={self.x}, free_columns={self.free_columns}, rank={self.rank})"


class Gauss:
    """Matrix operations based on exact Gauss-Jordan elimination

    The class holds no state; get_instance() returns a shared instance.
    """
    _instance = None

    @classmethod
    def get_instance(cls) -> 'Gauss':
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    # Core operations
    def row_echelon(self, matrix: RationalMatrix, reduced: bool = True,
                    pivot_limit: Optional[int] = None) -> EliminationResult:
        """
        Compute the (reduced) row-echelon form of a matrix.

        Args:
            matrix: Input matrix, left unchanged
            reduced: Eliminate above the pivots too (Gauss-Jordan)
            pivot_limit: Only the first pivot_limit columns may hold pivots

        Returns:
            EliminationResult with form, pivot columns, rank and determinant
        """
        work = matrix.to_rows()
        cols = matrix.column_count
        pivots, swaps, product = self._eliminate(work, cols, reduced, pivot_limit)
        det = None
        # columns beyond pivot_limit are carried along, not eliminated
        if matrix.is_square() and (pivot_limit is None or pivot_limit >= cols):
            det = self._signed_determinant(pivots, swaps, product, matrix.row_count)
        LOG.debug(f"Elimination of {matrix.row_count}x{cols} matrix: rank {len(pivots)}, {swaps} swaps")
        return EliminationResult(RationalMatrix._wrap(tuple(tuple(r) for r in work), cols), pivots, swaps, det,
                                 reduced)

    def rank(self, matrix: RationalMatrix) -> int:
        """Number of pivots of the row-echelon form"""
        work = matrix.to_rows()
        pivots, _, _ = self._eliminate(work, matrix.column_count, reduced=False)
        return len(pivots)

    def determinant(self, matrix: RationalMatrix) -> Rational:
        """
        Determinant as (-1)^swaps times the product of the un-normalized pivots.

        Raises:
            DimensionMismatch: If the matrix is not square
        """
        if not matrix.is_square():
            raise DimensionMismatch(f"Determinant needs a square matrix, got {matrix.row_count}x{matrix.column_count}")
        work = matrix.to_rows()
        pivots, swaps, product = self._eliminate(work, matrix.column_count, reduced=False)
        return self._signed_determinant(pivots, swaps, product, matrix.row_count)

    def invert(self, matrix: RationalMatrix) -> RationalMatrix:
        """
        Compute the inverse of a square matrix.

        The reduced row-echelon form of [A | I] is [I | A^-1].

        Raises:
            DimensionMismatch: If the matrix is not square
            SingularMatrix: If the rank is less than the dimension
        """
        n = matrix.row_count
        if not matrix.is_square():
            raise DimensionMismatch(f"Matrix must be square for inversion: {n}x{matrix.column_count}")
        work = matrix.augment(RationalMatrix.identity(n)).to_rows()
        pivots, _, _ = self._eliminate(work, 2 * n, reduced=True, pivot_limit=n)
        if len(pivots) < n:
            raise SingularMatrix(f"Matrix is singular (rank {len(pivots)} < {n})")
        return RationalMatrix._wrap(tuple(tuple(r[n:]) for r in work), n)

    def solve(self, matrix: RationalMatrix, rhs: Union[RationalVector, Sequence],
              underdetermined: Optional[str] = None) -> Solution:
        """
        Solve the linear system A x = b.

        Args:
            matrix: Coefficient matrix A
            rhs: Right-hand side b, one entry per row of A
            underdetermined: Policy if the system has free variables,
                UNDERDETERMINED_ERROR or UNDERDETERMINED_PARAMETRIC.
                Defaults to Configuration().underdetermined.

        Returns:
            Solution with a particular solution and a nullspace basis

        Raises:
            DimensionMismatch: If b has the wrong length
            NoSolution: If the system is inconsistent
            UnderdeterminedSystem: If there are free variables and the policy
                is UNDERDETERMINED_ERROR. The error carries the Solution.
        """
        policy = Configuration().underdetermined if underdetermined is None else underdetermined
        if policy not in (UNDERDETERMINED_ERROR, UNDERDETERMINED_PARAMETRIC):
            raise ValueError('Unknown underdetermined policy: ' + str(policy))
        rhs = _as_vector(rhs)
        if len(rhs) != matrix.row_count:
            raise DimensionMismatch(f"Right-hand side has {len(rhs)} entries, matrix has {matrix.row_count} rows")
        n = matrix.column_count
        work = matrix.augment(rhs).to_rows()
        pivots, _, _ = self._eliminate(work, n + 1, reduced=True)
        if n in pivots:
            raise NoSolution("Inconsistent system: pivot in the constant column")
        x = [Rational.ZERO] * n
        for i, col in enumerate(pivots):
            x[col] = work[i][n]
        free = [c for c in range(n) if c not in pivots]
        solution = Solution(RationalVector._wrap(tuple(x)), self._kernel_basis(work, pivots, free, n), free,
                            len(pivots))
        if free and policy == UNDERDETERMINED_ERROR:
            raise UnderdeterminedSystem(f"System has {len(free)} free variable(s) (rank {len(pivots)} < {n})",
                                        solution)
        return solution

    def nullspace(self, matrix: RationalMatrix) -> Tuple[RationalVector, ...]:
        """Basis of the solutions of A x = 0, one vector per free column"""
        n = matrix.column_count
        work = matrix.to_rows()
        pivots, _, _ = self._eliminate(work, n, reduced=True)
        free = [c for c in range(n) if c not in pivots]
        return self._kernel_basis(work, pivots, free, n)

    # Elimination
    def _eliminate(self, work: List[List[Rational]], cols: int, reduced: bool,
                   pivot_limit: Optional[int] = None) -> Tuple[List[int], int, Rational]:
        """
        Gaussian elimination on work, modified in place.

        Returns:
            Tuple of (pivot columns, number of row swaps, product of pivot values)
        """
        rows = len(work)
        limit = cols if pivot_limit is None else min(pivot_limit, cols)
        pivots = []
        swaps = 0
        product = Rational.ONE
        current_row = 0
        for col in range(limit):
            if current_row >= rows:
                break
            pivot_row = self._find_pivot_row(work, current_row, col)
            if pivot_row == -1:
                # no pivot in this column
                continue
            if pivot_row != current_row:
                work[pivot_row], work[current_row] = work[current_row], work[pivot_row]
                swaps += 1
            pivot_value = work[current_row][col]
            product = product.multiply(pivot_value)
            if not pivot_value.is_one():
                work[current_row] = [v if v.is_zero() else v.divide(pivot_value) for v in work[current_row]]
            self._eliminate_column(work, current_row, col, reduced)
            pivots.append(col)
            current_row += 1
        return pivots, swaps, product

    def _find_pivot_row(self, work: List[List[Rational]], start_row: int, col: int) -> int:
        """First row at or below start_row with a non-zero entry in col, -1 if none"""
        for row in range(start_row, len(work)):
            if not work[row][col].is_zero():
                return row
        return -1

    def _eliminate_column(self, work: List[List[Rational]], pivot_row: int, col: int, reduced: bool):
        """
        Subtract multiples of the normalized pivot row so that col is zero elsewhere.

        Only rows below the pivot are touched unless reduced is True. Entries
        of the pivot row left of col are zero, so the update starts at col.
        """
        pivot = work[pivot_row]
        targets = range(len(work)) if reduced else range(pivot_row + 1, len(work))
        for row in targets:
            if row == pivot_row or work[row][col].is_zero():
                continue
            multiplier = work[row][col]
            current = work[row]
            for j in range(col, len(current)):
                if not pivot[j].is_zero():
                    current[j] = current[j].subtract(multiplier.multiply(pivot[j]))

    @staticmethod
    def _signed_determinant(pivots: List[int], swaps: int, product: Rational, n: int) -> Rational:
        if len(pivots) < n:
            return Rational.ZERO
        return product.negate() if swaps % 2 else product

    @staticmethod
    def _kernel_basis(work: List[List[Rational]], pivots: List[int], free: List[int],
                      n: int) -> Tuple[RationalVector, ...]:
        """Nullspace basis read off a reduced row-echelon form"""
        basis = []
        for f in free:
            v = [Rational.ZERO] * n
            v[f] = Rational.ONE
            for i, col in enumerate(pivots):
                v[col] = work[i][f].negate()
            basis.append(RationalVector._wrap(tuple(v)))
        return tuple(basis)


def _as_matrix(matrix) -> RationalMatrix:
    if isinstance(matrix, RationalMatrix):
        return matrix
    return RationalMatrix(matrix)


def _as_vector(rhs) -> RationalVector:
    if isinstance(rhs, RationalVector):
        return rhs
    if isinstance(rhs, RationalMatrix):
        if rhs.column_count != 1:
            raise DimensionMismatch(f"Right-hand side must be a single column, got {rhs.row_count}x{rhs.column_count}")
        return RationalVector._wrap(tuple(r[0] for r in rhs))
    return RationalVector(rhs)


def _run(operation: str, func) -> Outcome:
    """Call func and wrap its result or typed error into an Outcome"""
    try:
        return Success(func())
    except ExactLinAlgError as err:
        LOG.debug(f"{operation} failed with {err.kind}: {err}")
        return Failure(err)


def solve(A, b, underdetermined: Optional[str] = None) -> Outcome:
    """Solve the linear system A x = b exactly

    Args:
        A (RationalMatrix or sequence of rows):
            Coefficient matrix.

        b (RationalVector or sequence):
            Right-hand side with one entry per row of A.

        underdetermined (optional (str)): (Default: Configuration().underdetermined)
            UNDERDETERMINED_ERROR: consistent systems with free variables fail with
            UnderdeterminedSystem (the error carries the solution set).
            UNDERDETERMINED_PARAMETRIC: they succeed with a Solution whose nullspace
            spans the free directions.

    Returns:
        (Outcome):
            Success(Solution) or Failure with DimensionMismatch, NoSolution or
            UnderdeterminedSystem.
    """
    return _run(SOLVE, lambda: Gauss.get_instance().solve(_as_matrix(A), b, underdetermined))


def invert(A) -> Outcome:
    """Inverse of a square matrix: Success(RationalMatrix), or Failure with
    DimensionMismatch or SingularMatrix"""
    return _run(INVERT, lambda: Gauss.get_instance().invert(_as_matrix(A)))


def determinant(A) -> Outcome:
    """Determinant of a square matrix: Success(Rational) or Failure(DimensionMismatch)"""
    return _run(DETERMINANT, lambda: Gauss.get_instance().determinant(_as_matrix(A)))


def row_reduce(A) -> Outcome:
    """Reduced row-echelon form: Success(EliminationResult)"""
    return _run(ROW_REDUCE, lambda: Gauss.get_instance().row_echelon(_as_matrix(A), reduced=True))


def row_echelon(A) -> Outcome:
    """Row-echelon form from forward elimination only: Success(EliminationResult)"""
    return _run(ROW_REDUCE, lambda: Gauss.get_instance().row_echelon(_as_matrix(A), reduced=False))


def rank(A) -> Outcome:
    """Rank of a matrix: Success(int)"""
    return _run(RANK, lambda: Gauss.get_instance().rank(_as_matrix(A)))


def nullspace(A) -> Outcome:
    """Nullspace basis: Success(tuple of RationalVector)"""
    return _run(NULLSPACE, lambda: Gauss.get_instance().nullspace(_as_matrix(A)))

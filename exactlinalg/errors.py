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
"""Typed errors raised by exact scalars, matrices and the elimination engine

Every error carries a ``kind`` string from :mod:`exactlinalg.names` so that
it can be reported in a batch result slot or handed to a UI layer without
inspecting the class. Each class also derives from the closest builtin
exception, e.g. ``DivisionByZero`` can be caught as ``ZeroDivisionError``.
"""

from exactlinalg.names import *


class ExactLinAlgError(Exception):
    """Base exception for exactlinalg."""
    kind = None

    def __init__(self, message=''):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class DivisionByZero(ExactLinAlgError, ZeroDivisionError):
    """Division of an exact value by zero."""
    kind = DIVISION_BY_ZERO


class PrecisionLoss(ExactLinAlgError, ValueError):
    """A value cannot be converted without losing information."""
    kind = PRECISION_LOSS


class DimensionMismatch(ExactLinAlgError, ValueError):
    """Shapes of the operands disagree."""
    kind = DIMENSION_MISMATCH


class IndexOutOfRange(ExactLinAlgError, IndexError):
    """Row, column or element index beyond the bounds of a matrix or vector."""
    kind = INDEX_OUT_OF_RANGE


class SingularMatrix(ExactLinAlgError, ArithmeticError):
    """Inverse requested for a rank deficient square matrix."""
    kind = SINGULAR_MATRIX


class NoSolution(ExactLinAlgError, ArithmeticError):
    """Inconsistent linear system or infeasible linear program."""
    kind = NO_SOLUTION


class UnderdeterminedSystem(ExactLinAlgError, ArithmeticError):
    """Consistent linear system with free variables.

    Args:
        message (str):
            Error message.

        solution (exactlinalg.gauss.Solution):
            Particular solution (free variables set to zero) together with a
            basis of the nullspace. Lets the caller recover the full
            solution set without solving again.
    """
    kind = UNDERDETERMINED_SYSTEM

    def __init__(self, message='', solution=None):
        super().__init__(message)
        self.solution = solution

    def __reduce__(self):
        return (self.__class__, (self.message, self.solution))


class UnboundedProblem(ExactLinAlgError, ArithmeticError):
    """Linear program whose objective is unbounded in the optimization direction."""
    kind = UNBOUNDED


class InvalidJob(ExactLinAlgError, ValueError):
    """Batch job descriptor that names no known operation or lacks an input."""
    kind = INVALID_JOB

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
"""Tagged result of a computation: Success carries a value, Failure an error

The entry points of the elimination engine and the batch dispatcher return
an Outcome instead of raising, so that the result of every job can be kept
in its own slot and inspected later:

    >>> out = determinant(RationalMatrix([[1, 2], [3, 4]]))
    >>> out.ok, out.value
    (True, Rational(-2, 1))
    >>> out = invert(RationalMatrix([[1, 2], [2, 4]]))
    >>> out.status
    'singular_matrix'
"""

from exactlinalg.errors import ExactLinAlgError
from exactlinalg.names import *


class Outcome(object):
    """Common base of Success and Failure"""
    __slots__ = ()
    ok = False

    @property
    def status(self) -> str:
        raise NotImplementedError

    def unwrap(self):
        raise NotImplementedError


class Success(Outcome):
    """Successful computation

    Args:
        value:
            The computed result (Rational, RationalMatrix, Solution, ...).
    """
    __slots__ = ('value',)
    ok = True

    def __init__(self, value):
        self.value = value

    @property
    def error(self):
        return None

    @property
    def status(self) -> str:
        return OPTIMAL

    def unwrap(self):
        return self.value

    def __eq__(self, other):
        if not isinstance(other, Success):
            return NotImplemented
        return self.value == other.value

    __hash__ = None

    def __reduce__(self):
        return (Success, (self.value,))

    def __repr__(self):
        return f"Success({self.value!r})"


class Failure(Outcome):
    """Failed computation

    Args:
        error (ExactLinAlgError):
            The typed error. Its kind is the status of the outcome.
    """
    __slots__ = ('error',)

    def __init__(self, error: ExactLinAlgError):
        if not isinstance(error, ExactLinAlgError):
            raise TypeError(f"Failure needs an ExactLinAlgError, got {type(error).__name__}")
        self.error = error

    @property
    def value(self):
        return None

    @property
    def status(self) -> str:
        return self.error.kind

    def unwrap(self):
        """Re-raise the carried error"""
        raise self.error

    def __eq__(self, other):
        if not isinstance(other, Failure):
            return NotImplemented
        return type(self.error) is type(other.error) and str(self.error) == str(other.error)

    __hash__ = None

    def __reduce__(self):
        return (Failure, (self.error,))

    def __repr__(self):
        return f"Failure({type(self.error).__name__}({str(self.error)!r}))"

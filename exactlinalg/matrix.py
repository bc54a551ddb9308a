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
"""Dense exact rational matrices and vectors

RationalMatrix stores a rectangular grid of Rational values in row-major
order. The public interface is immutable: transposition, arithmetic, row
operations and element updates all return new matrices, so a matrix handed
to the elimination engine or to a batch worker can never be changed behind
the caller's back. A matrix with a zero dimension is a valid value and keeps
both dimensions (a 0x3 matrix is not a 3x0 matrix).

Interoperability with numpy (object arrays of fractions.Fraction) and
scipy.sparse is provided for hosts that hold their data in those formats.
Floating point input is converted exactly, never rounded.
"""

import operator
import numpy as np
from fractions import Fraction
from scipy import sparse
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union
from exactlinalg.errors import DimensionMismatch, IndexOutOfRange, DivisionByZero, PrecisionLoss
from exactlinalg.rational import Rational
from exactlinalg.names import *


def _check_index(index, bound: int, what: str) -> int:
    index = operator.index(index)
    if not 0 <= index < bound:
        raise IndexOutOfRange(f"{what} index {index} out of range [0, {bound})")
    return index


def _scalar(value) -> Rational:
    if isinstance(value, (RationalMatrix, RationalVector)):
        raise TypeError("Expected an exact scalar, got a " + type(value).__name__)
    return Rational.value_of(value)


class RationalVector:
    """One-dimensional sequence of Rational values

    Used as a column whenever it is the right-hand side of a linear system.

    Args:
        values (iterable):
            Entries, anything Rational.value_of accepts.
    """
    __slots__ = ('_values',)

    def __init__(self, values: Iterable = ()):
        if isinstance(values, RationalMatrix):
            raise TypeError("Use RationalMatrix.column() or row() to obtain a vector from a matrix")
        self._values = tuple(_scalar(v) for v in values)

    @classmethod
    def _wrap(cls, values: Tuple[Rational, ...]) -> 'RationalVector':
        obj = object.__new__(cls)
        obj._values = values
        return obj

    @staticmethod
    def zeros(length: int) -> 'RationalVector':
        if length < 0:
            raise DimensionMismatch(f"negative vector length: {length}")
        return RationalVector._wrap((Rational.ZERO,) * length)

    @staticmethod
    def from_record(record: Sequence[dict]) -> 'RationalVector':
        return RationalVector._wrap(tuple(Rational.from_record(r) for r in record))

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, index: int) -> Rational:
        return self._values[_check_index(index, len(self._values), 'Vector')]

    def __iter__(self) -> Iterator[Rational]:
        return iter(self._values)

    def __eq__(self, other) -> bool:
        if isinstance(other, RationalVector):
            return self._values == other._values
        if isinstance(other, (list, tuple)):
            return len(other) == len(self._values) and all(a == b for a, b in zip(self._values, other))
        return NotImplemented

    __hash__ = None

    def _check_length(self, other: 'RationalVector'):
        if not isinstance(other, RationalVector):
            raise TypeError(f"Expected RationalVector, got {type(other).__name__}")
        if len(other) != len(self):
            raise DimensionMismatch(f"Vector lengths differ: {len(self)} vs {len(other)}")

    def add(self, other: 'RationalVector') -> 'RationalVector':
        self._check_length(other)
        return RationalVector._wrap(tuple(a.add(b) for a, b in zip(self._values, other._values)))

    def subtract(self, other: 'RationalVector') -> 'RationalVector':
        self._check_length(other)
        return RationalVector._wrap(tuple(a.subtract(b) for a, b in zip(self._values, other._values)))

    def scale(self, factor) -> 'RationalVector':
        factor = _scalar(factor)
        return RationalVector._wrap(tuple(v.multiply(factor) for v in self._values))

    def dot(self, other: 'RationalVector') -> Rational:
        self._check_length(other)
        total = Fraction(0)
        for a, b in zip(self._values, other._values):
            total += a.to_fraction() * b.to_fraction()
        return Rational(total)

    def is_zero(self) -> bool:
        return all(v.is_zero() for v in self._values)

    def as_column(self) -> 'RationalMatrix':
        """Vector as an n x 1 matrix"""
        return RationalMatrix._wrap(tuple((v,) for v in self._values), 1)

    def to_list(self) -> List[Rational]:
        return list(self._values)

    def to_record(self) -> List[dict]:
        return [v.to_record() for v in self._values]

    def __str__(self) -> str:
        return '[' + ', '.join(str(v) for v in self._values) + ']'

    def __repr__(self) -> str:
        return 'RationalVector([' + ', '.join(str(v) for v in self._values) + '])'


class RationalMatrix:
    """Dense rectangular matrix of exact rational numbers

    Args:
        rows (sequence of sequences):
            Matrix entries row by row. Entries may be anything Rational.value_of
            accepts: Rational, int, Fraction, decimal text or float (converted exactly).

        cols (optional (int)):
            Number of columns. Required to build an empty matrix with columns,
            e.g. RationalMatrix([], 3) is a 0x3 matrix. If given together with
            rows, it must agree with the row length.

    Raises:
        DimensionMismatch: If rows differ in length or disagree with cols.

    Example:
        >>> A = RationalMatrix([[1, 2], ['1/2', '0.25']])
        >>> A.shape
        (2, 2)
    """
    __slots__ = ('_rows', '_cols')

    def __init__(self, rows: Iterable[Iterable] = (), cols: Optional[int] = None):
        if isinstance(rows, RationalMatrix):
            if cols is not None and cols != rows._cols:
                raise DimensionMismatch(f"Matrix has {rows._cols} columns, but {cols} columns were requested")
            self._rows, self._cols = rows._rows, rows._cols
            return
        data = tuple(tuple(_scalar(v) for v in row) for row in rows)
        if data:
            width = len(data[0])
            for i, row in enumerate(data):
                if len(row) != width:
                    raise DimensionMismatch(f"Row {i} has {len(row)} entries, expected {width}")
            if cols is not None and cols != width:
                raise DimensionMismatch(f"Rows have {width} entries, but {cols} columns were requested")
        else:
            width = 0 if cols is None else cols
            if width < 0:
                raise DimensionMismatch(f"negative column count: {width}")
        self._rows = data
        self._cols = width

    @classmethod
    def _wrap(cls, rows: Tuple[Tuple[Rational, ...], ...], cols: int) -> 'RationalMatrix':
        """Build from already validated rows, skipping conversion"""
        obj = object.__new__(cls)
        obj._rows = rows
        obj._cols = cols
        return obj

    # Factories
    @staticmethod
    def zeros(row_count: int, col_count: int) -> 'RationalMatrix':
        if row_count < 0:
            raise DimensionMismatch(f"negative row count: {row_count}")
        if col_count < 0:
            raise DimensionMismatch(f"negative column count: {col_count}")
        row = (Rational.ZERO,) * col_count
        return RationalMatrix._wrap((row,) * row_count, col_count)

    @staticmethod
    def identity(size: int) -> 'RationalMatrix':
        if size < 0:
            raise DimensionMismatch(f"negative size: {size}")
        return RationalMatrix._wrap(
            tuple(tuple(Rational.ONE if i == j else Rational.ZERO for j in range(size)) for i in range(size)), size)

    @staticmethod
    def from_columns(columns: Iterable[Iterable], row_count: Optional[int] = None) -> 'RationalMatrix':
        """Build a matrix from its columns (vectors or sequences)"""
        cols = [tuple(_scalar(v) for v in c) for c in columns]
        if not cols:
            return RationalMatrix.zeros(row_count or 0, 0)
        height = len(cols[0])
        for j, col in enumerate(cols):
            if len(col) != height:
                raise DimensionMismatch(f"Column {j} has {len(col)} entries, expected {height}")
        if row_count is not None and row_count != height:
            raise DimensionMismatch(f"Columns have {height} entries, but {row_count} rows were requested")
        return RationalMatrix._wrap(tuple(zip(*cols)) if height else (), len(cols))

    @staticmethod
    def from_numpy(arr: np.ndarray) -> 'RationalMatrix':
        """Exact conversion of a 2-D numpy array

        Integer and object arrays are taken as they are, float entries are
        converted to their exact binary value.
        """
        arr = np.asarray(arr)
        if arr.ndim != 2:
            raise DimensionMismatch(f"Expected a 2-D array, got {arr.ndim} dimensions")
        rows, cols = arr.shape
        if arr.dtype.kind in 'iub':
            data = tuple(tuple(Rational(int(v)) for v in row) for row in arr.tolist())
        elif arr.dtype.kind == 'f':
            data = tuple(tuple(Rational.from_float(v) for v in row) for row in arr.tolist())
        else:
            data = tuple(tuple(Rational.value_of(v) for v in row) for row in arr.tolist())
        return RationalMatrix._wrap(data, cols)

    @staticmethod
    def from_sparse(mx) -> 'RationalMatrix':
        """Exact conversion of a scipy.sparse matrix or array"""
        if not sparse.issparse(mx):
            raise TypeError(f"Expected a scipy.sparse matrix, got {type(mx).__name__}")
        coo = sparse.coo_matrix(mx)
        rows, cols = coo.shape
        data = [[Rational.ZERO] * cols for _ in range(rows)]
        for r, c, v in zip(coo.row.tolist(), coo.col.tolist(), coo.data.tolist()):
            # duplicate entries of a COO matrix are summed
            data[r][c] = data[r][c].add(Rational.value_of(v))
        return RationalMatrix._wrap(tuple(tuple(row) for row in data), cols)

    @staticmethod
    def from_record(record: dict) -> 'RationalMatrix':
        """Inverse of to_record

        Raises:
            PrecisionLoss: If a key is missing or a dimension is not an integer.
            DimensionMismatch: For negative dimensions or data of another shape.
        """
        try:
            rows, cols = int(record[ROWS]), int(record[COLS])
            data = [list(row) for row in record[DATA]]
        except (KeyError, TypeError, ValueError) as exc:
            raise PrecisionLoss(f"Malformed matrix record {record!r}") from exc
        if rows < 0 or cols < 0:
            raise DimensionMismatch(f"Record declares negative dimensions {rows}x{cols}")
        if len(data) != rows:
            raise DimensionMismatch(f"Record declares {rows} rows but holds {len(data)}")
        for i, row in enumerate(data):
            if len(row) != cols:
                raise DimensionMismatch(f"Record row {i} has {len(row)} entries, expected {cols}")
        return RationalMatrix._wrap(tuple(tuple(Rational.from_record(v) for v in row) for row in data), cols)

    # Shape and access
    @property
    def row_count(self) -> int:
        return len(self._rows)

    @property
    def column_count(self) -> int:
        return self._cols

    @property
    def shape(self) -> Tuple[int, int]:
        return len(self._rows), self._cols

    def is_empty(self) -> bool:
        return len(self._rows) == 0 or self._cols == 0

    def is_square(self) -> bool:
        return len(self._rows) == self._cols

    def get_value_at(self, row: int, col: int) -> Rational:
        _check_index(row, len(self._rows), 'Row')
        _check_index(col, self._cols, 'Column')
        return self._rows[row][col]

    def __getitem__(self, index: Tuple[int, int]) -> Rational:
        row, col = index
        return self.get_value_at(row, col)

    def row(self, row: int) -> RationalVector:
        return RationalVector._wrap(self._rows[_check_index(row, len(self._rows), 'Row')])

    def column(self, col: int) -> RationalVector:
        _check_index(col, self._cols, 'Column')
        return RationalVector._wrap(tuple(r[col] for r in self._rows))

    def to_rows(self) -> List[List[Rational]]:
        """Fresh list-of-lists copy of the entries"""
        return [list(r) for r in self._rows]

    def __iter__(self) -> Iterator[Tuple[Rational, ...]]:
        return iter(self._rows)

    def __eq__(self, other) -> bool:
        if not isinstance(other, RationalMatrix):
            return NotImplemented
        return self.shape == other.shape and self._rows == other._rows

    __hash__ = None

    # Transforms
    def transpose(self) -> 'RationalMatrix':
        if not self._rows:
            return RationalMatrix.zeros(self._cols, 0)
        return RationalMatrix._wrap(tuple(zip(*self._rows)), len(self._rows))

    def _check_same_shape(self, other: 'RationalMatrix', op: str):
        if not isinstance(other, RationalMatrix):
            raise TypeError(f"Cannot {op} {type(other).__name__} and RationalMatrix")
        if self.shape != other.shape:
            raise DimensionMismatch(f"Cannot {op} {self.shape} and {other.shape} matrices")

    def add(self, other: 'RationalMatrix') -> 'RationalMatrix':
        """Element-wise sum"""
        self._check_same_shape(other, 'add')
        return RationalMatrix._wrap(
            tuple(tuple(a.add(b) for a, b in zip(r1, r2)) for r1, r2 in zip(self._rows, other._rows)), self._cols)

    def subtract(self, other: 'RationalMatrix') -> 'RationalMatrix':
        """Element-wise difference"""
        self._check_same_shape(other, 'subtract')
        return RationalMatrix._wrap(
            tuple(tuple(a.subtract(b) for a, b in zip(r1, r2)) for r1, r2 in zip(self._rows, other._rows)), self._cols)

    def scale(self, factor) -> 'RationalMatrix':
        """Multiply every entry by an exact scalar"""
        factor = _scalar(factor)
        return RationalMatrix._wrap(tuple(tuple(v.multiply(factor) for v in r) for r in self._rows), self._cols)

    def multiply(self, other: Union['RationalMatrix', RationalVector]) -> Union['RationalMatrix', RationalVector]:
        """Matrix product. A vector operand is treated as a column and a vector is returned.

        Raises:
            DimensionMismatch: If the column count of this matrix differs from
                the row count of other.
        """
        if isinstance(other, RationalVector):
            if len(other) != self._cols:
                raise DimensionMismatch(f"Cannot multiply {self.shape} matrix with vector of length {len(other)}")
            vec = [v.to_fraction() for v in other]
            return RationalVector._wrap(
                tuple(Rational(sum((a.to_fraction() * b for a, b in zip(r, vec)), Fraction(0))) for r in self._rows))
        if not isinstance(other, RationalMatrix):
            raise TypeError(f"Cannot multiply RationalMatrix with {type(other).__name__}, use scale() for scalars")
        if self._cols != other.row_count:
            raise DimensionMismatch(f"Inner dimensions differ: {self.shape} x {other.shape}")
        other_cols = [[v.to_fraction() for v in col] for col in zip(*other._rows)] if other._rows else \
            [[] for _ in range(other._cols)]
        product = []
        for r in self._rows:
            left = [v.to_fraction() for v in r]
            product.append(tuple(Rational(sum((a * b for a, b in zip(left, col)), Fraction(0))) for col in other_cols))
        return RationalMatrix._wrap(tuple(product), other._cols)

    def submatrix(self, row_indices: Sequence[int], col_indices: Sequence[int]) -> 'RationalMatrix':
        """Rows and columns selected by index, in the given order (repetition allowed)

        Raises:
            IndexOutOfRange: If any index is beyond the bounds.
        """
        row_indices = [_check_index(i, len(self._rows), 'Row') for i in row_indices]
        col_indices = [_check_index(j, self._cols, 'Column') for j in col_indices]
        return RationalMatrix._wrap(tuple(tuple(self._rows[i][j] for j in col_indices) for i in row_indices),
                                    len(col_indices))

    def augment(self, other: Union['RationalMatrix', RationalVector]) -> 'RationalMatrix':
        """Horizontal concatenation [self | other]"""
        if isinstance(other, RationalVector):
            other = other.as_column()
        if not isinstance(other, RationalMatrix):
            raise TypeError(f"Cannot augment with {type(other).__name__}")
        if other.row_count != len(self._rows):
            raise DimensionMismatch(f"Cannot augment {self.shape} with {other.shape}: row counts differ")
        return RationalMatrix._wrap(tuple(a + b for a, b in zip(self._rows, other._rows)), self._cols + other._cols)

    def with_value_at(self, row: int, col: int, value) -> 'RationalMatrix':
        """Copy with one entry replaced"""
        _check_index(row, len(self._rows), 'Row')
        _check_index(col, self._cols, 'Column')
        new_row = self._rows[row][:col] + (_scalar(value),) + self._rows[row][col + 1:]
        return RationalMatrix._wrap(self._rows[:row] + (new_row,) + self._rows[row + 1:], self._cols)

    def swap_rows(self, i: int, j: int) -> 'RationalMatrix':
        """Copy with rows i and j exchanged"""
        _check_index(i, len(self._rows), 'Row')
        _check_index(j, len(self._rows), 'Row')
        rows = list(self._rows)
        rows[i], rows[j] = rows[j], rows[i]
        return RationalMatrix._wrap(tuple(rows), self._cols)

    def scale_row(self, i: int, factor) -> 'RationalMatrix':
        """Copy with row i multiplied by a non-zero scalar"""
        _check_index(i, len(self._rows), 'Row')
        factor = _scalar(factor)
        if factor.is_zero():
            raise DivisionByZero("Scaling a row by zero is not an elementary row operation")
        rows = list(self._rows)
        rows[i] = tuple(v.multiply(factor) for v in rows[i])
        return RationalMatrix._wrap(tuple(rows), self._cols)

    # Conversion
    def to_numpy(self) -> np.ndarray:
        """numpy object array of fractions.Fraction"""
        arr = np.empty(self.shape, dtype=object)
        for i, r in enumerate(self._rows):
            for j, v in enumerate(r):
                arr[i, j] = v.to_fraction()
        return arr

    def to_record(self) -> dict:
        """Structured record keeping numerator/denominator pairs exactly"""
        return {ROWS: len(self._rows), COLS: self._cols, DATA: [[v.to_record() for v in r] for r in self._rows]}

    def __str__(self) -> str:
        if self.is_empty():
            return f"[]({len(self._rows)}x{self._cols})"
        cells = [[str(v) for v in r] for r in self._rows]
        widths = [max(len(row[j]) for row in cells) for j in range(self._cols)]
        return '\n'.join('[' + '  '.join(c.rjust(w) for c, w in zip(row, widths)) + ']' for row in cells)

    def __repr__(self) -> str:
        return 'RationalMatrix([' + ', '.join('[' + ', '.join(repr(str(v)) for v in r) + ']'
                                              for r in self._rows) + f'], cols={self._cols})'

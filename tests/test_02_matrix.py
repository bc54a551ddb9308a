"""Test dense rational matrices and vectors."""
from fractions import Fraction
import numpy as np
import pytest
from scipy import sparse
from exactlinalg import (Rational, RationalMatrix, RationalVector, DimensionMismatch, IndexOutOfRange, DivisionByZero,
                         PrecisionLoss)
from exactlinalg.names import *


def test_rectangular():
    with pytest.raises(DimensionMismatch):
        RationalMatrix([[1, 2], [3]])
    with pytest.raises(DimensionMismatch):
        RationalMatrix([[1, 2]], cols=3)
    A = RationalMatrix([[1, '1/2', 0.25]])
    assert (A.shape == (1, 3))
    assert (A.get_value_at(0, 1) == Rational(1, 2))
    assert (A[0, 2] == Rational(1, 4))


def test_empty_dimensions():
    """Empty matrices keep both dimensions."""
    assert (RationalMatrix([], 3).shape == (0, 3))
    assert (RationalMatrix([[], []]).shape == (2, 0))
    assert (RationalMatrix.zeros(0, 3) != RationalMatrix.zeros(3, 0))
    assert (RationalMatrix.zeros(0, 3).transpose().shape == (3, 0))
    assert (RationalMatrix.zeros(2, 0).transpose().shape == (0, 2))
    assert (RationalMatrix.zeros(0, 3).is_empty())
    assert (RationalMatrix.identity(0).shape == (0, 0))


def test_bounds():
    A = RationalMatrix([[1, 2], [3, 4]])
    for r, c in [(2, 0), (0, 2), (-1, 0), (0, -1)]:
        with pytest.raises(IndexOutOfRange):
            A.get_value_at(r, c)
    with pytest.raises(IndexError):
        A.row(5)
    with pytest.raises(IndexOutOfRange):
        A.column(2)
    assert (A.get_value_at(np.int64(1), np.int64(0)) == 3)


def test_transpose_and_columns():
    A = RationalMatrix([[1, 2, 3], [4, 5, 6]])
    T = A.transpose()
    assert (T.shape == (3, 2))
    assert (T == RationalMatrix([[1, 4], [2, 5], [3, 6]]))
    assert (T.transpose() == A)
    assert (A.column(1) == [2, 5])
    assert (A.row(1) == RationalVector([4, 5, 6]))
    assert (RationalMatrix.from_columns([[1, 4], [2, 5], [3, 6]]) == A)


def test_elementwise():
    A = RationalMatrix([[1, 2], [3, 4]])
    B = RationalMatrix([['1/2', 0], [0, '-1/3']])
    assert (A.add(B) == RationalMatrix([['3/2', 2], [3, '11/3']]))
    assert (A.add(B).subtract(B) == A)
    assert (A.scale(Rational(1, 2)) == RationalMatrix([['1/2', 1], ['3/2', 2]]))
    with pytest.raises(DimensionMismatch):
        A.add(RationalMatrix([[1, 2, 3]]))
    with pytest.raises(TypeError):
        A.scale(A)


def test_multiply():
    A = RationalMatrix([[1, 2], [3, 4]])
    B = RationalMatrix([[5, 6], [7, 8]])
    assert (A.multiply(B) == RationalMatrix([[19, 22], [43, 50]]))
    assert (A.multiply(RationalVector([1, -1])) == [-1, -1])
    assert (RationalMatrix.identity(2).multiply(A) == A)
    with pytest.raises(DimensionMismatch):
        A.multiply(RationalMatrix([[1, 2, 3]]))
    with pytest.raises(DimensionMismatch):
        A.multiply(RationalVector([1, 2, 3]))
    # (2x0)(0x3) is the 2x3 zero matrix
    assert (RationalMatrix.zeros(2, 0).multiply(RationalMatrix.zeros(0, 3)) == RationalMatrix.zeros(2, 3))


def test_submatrix():
    A = RationalMatrix([[1, 2, 3], [4, 5, 6], [7, 8, 9]])
    assert (A.submatrix([2, 0], [1]) == RationalMatrix([[8], [2]]))
    assert (A.submatrix([], [0, 1]).shape == (0, 2))
    with pytest.raises(IndexOutOfRange):
        A.submatrix([3], [0])


def test_augment():
    A = RationalMatrix([[1, 2], [3, 4]])
    assert (A.augment(RationalVector([5, 6])) == RationalMatrix([[1, 2, 5], [3, 4, 6]]))
    assert (A.augment(RationalMatrix.identity(2)).shape == (2, 4))
    with pytest.raises(DimensionMismatch):
        A.augment(RationalVector([1]))


def test_immutable():
    A = RationalMatrix([[1, 2], [3, 4]])
    B = A.with_value_at(0, 0, '7/2')
    assert (B.get_value_at(0, 0) == Rational(7, 2))
    assert (A.get_value_at(0, 0) == 1)
    rows = A.to_rows()
    rows[1][1] = Rational(99)
    assert (A.get_value_at(1, 1) == 4)
    assert (A.swap_rows(0, 1) == RationalMatrix([[3, 4], [1, 2]]))
    assert (A.scale_row(1, Rational(1, 2)) == RationalMatrix([[1, 2], ['3/2', 2]]))
    assert (A == RationalMatrix([[1, 2], [3, 4]]))
    with pytest.raises(DivisionByZero):
        A.scale_row(0, 0)


def test_vector():
    u, v = RationalVector([1, '1/2', -3]), RationalVector(['2/3', 4, 0])
    assert (u.dot(v) == Rational(8, 3))
    assert (u.add(v) == [Rational(5, 3), Rational(9, 2), Rational(-3)])
    assert (u.subtract(u).is_zero())
    assert (u.scale(2) == [2, 1, -6])
    assert (u.as_column().shape == (3, 1))
    with pytest.raises(DimensionMismatch):
        u.dot(RationalVector([1]))
    assert (RationalVector.from_record(u.to_record()) == u)


def test_numpy():
    A = RationalMatrix.from_numpy(np.array([[1, -2], [0, 3]]))
    assert (A == RationalMatrix([[1, -2], [0, 3]]))
    F = RationalMatrix.from_numpy(np.array([[0.5, 0.1]]))
    assert (F.get_value_at(0, 0) == Rational(1, 2))
    assert (F.get_value_at(0, 1).to_fraction() == Fraction(0.1))
    arr = RationalMatrix([['1/3', 2]]).to_numpy()
    assert (arr.dtype == object)
    assert (arr.shape == (1, 2))
    assert (arr[0, 0] == Fraction(1, 3))
    assert (RationalMatrix.from_numpy(arr) == RationalMatrix([['1/3', 2]]))
    with pytest.raises(DimensionMismatch):
        RationalMatrix.from_numpy(np.zeros(3))


def test_sparse():
    A = RationalMatrix.from_sparse(sparse.csr_matrix(np.array([[0, 2], [0, 0], [5, 0]])))
    assert (A == RationalMatrix([[0, 2], [0, 0], [5, 0]]))
    with pytest.raises(TypeError):
        RationalMatrix.from_sparse(np.eye(2))


def test_record():
    A = RationalMatrix([[Rational(2**100, 3), -1], [0, '5/7']])
    record = A.to_record()
    assert (record[ROWS] == 2 and record[COLS] == 2)
    assert (record[DATA][0][0] == {NUM: str(2**100), DEN: "3"})
    assert (RationalMatrix.from_record(record) == A)
    empty = RationalMatrix.zeros(0, 4)
    assert (RationalMatrix.from_record(empty.to_record()).shape == (0, 4))
    record[ROWS] = 3
    with pytest.raises(DimensionMismatch):
        RationalMatrix.from_record(record)
    with pytest.raises(DimensionMismatch):
        RationalMatrix.from_record({ROWS: 0, COLS: -2, DATA: []})
    with pytest.raises(PrecisionLoss):
        RationalMatrix.from_record({ROWS: 1, COLS: 1})
    with pytest.raises(PrecisionLoss):
        RationalMatrix.from_record({ROWS: 'one', COLS: 1, DATA: [[{NUM: '1', DEN: '1'}]]})
    with pytest.raises(PrecisionLoss):
        RationalMatrix.from_record({ROWS: 1, COLS: 1, DATA: [7]})


def test_copy_with_columns():
    A = RationalMatrix([[1, 2], [3, 4]])
    assert (RationalMatrix(A, cols=2) == A)
    with pytest.raises(DimensionMismatch):
        RationalMatrix(A, cols=3)

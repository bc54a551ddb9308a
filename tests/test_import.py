"""Test if package imports successfully."""

import pytest


def test1():
    import exactlinalg
    from exactlinalg import RationalMatrix, RationalVector
    out = exactlinalg.solve(RationalMatrix([[1, 1], [1, -1]]), RationalVector([4, 2]))
    assert (out.value.x == [3, 1])
    with exactlinalg.DisableLogger():
        assert (exactlinalg.run_batch([], backend=exactlinalg.SERIAL) == [])

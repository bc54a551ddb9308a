"""Compare elimination results against sympy on seeded random matrices."""
import random
import pytest
import sympy
from exactlinalg import *
from exactlinalg.names import *

SEEDS = range(12)


def random_matrix(rng: random.Random, rows: int, cols: int, fractions: bool = False) -> RationalMatrix:
    """Small integer (or fractional) entries, about a third of them zero"""
    def entry():
        if rng.random() < 0.3:
            return 0
        if fractions:
            return Rational(rng.randint(-9, 9), rng.randint(1, 5))
        return rng.randint(-5, 5)

    return RationalMatrix([[entry() for _ in range(cols)] for _ in range(rows)])


def rank_deficient(rng: random.Random, n: int) -> RationalMatrix:
    """n x n matrix whose last row is a combination of the others"""
    rows = random_matrix(rng, n - 1, n).to_rows()
    weights = [rng.randint(-3, 3) for _ in rows]
    rows.append([sum((w * r[j] for w, r in zip(weights, rows)), Rational.ZERO) for j in range(n)])
    return RationalMatrix(rows)


def to_sympy(A: RationalMatrix) -> sympy.Matrix:
    return sympy.Matrix(A.row_count, A.column_count,
                        lambda i, j: sympy.Rational(A[i, j].numerator, A[i, j].denominator))


def from_sympy(value) -> Rational:
    value = sympy.Rational(value)
    return Rational(int(value.p), int(value.q))


@pytest.mark.parametrize("seed", SEEDS)
def test_determinant_matches_sympy(seed):
    rng = random.Random(seed)
    n = rng.randint(1, 5)
    A = random_matrix(rng, n, n, fractions=seed % 2 == 1)
    assert (determinant(A).unwrap() == from_sympy(to_sympy(A).det()))


@pytest.mark.parametrize("seed", SEEDS)
def test_determinant_multiplicative(seed):
    rng = random.Random(seed)
    n = rng.randint(1, 5)
    A, B = random_matrix(rng, n, n), random_matrix(rng, n, n, fractions=True)
    assert (determinant(A.multiply(B)).unwrap() == determinant(A).unwrap() * determinant(B).unwrap())


@pytest.mark.parametrize("seed", SEEDS)
def test_inverse(seed):
    """Inverse exists exactly when the determinant is non-zero."""
    rng = random.Random(seed)
    n = rng.randint(1, 5)
    A = random_matrix(rng, n, n, fractions=True) if seed % 3 else rank_deficient(rng, max(n, 2))
    out = invert(A)
    if determinant(A).unwrap().is_zero():
        assert (out.status == SINGULAR_MATRIX)
    else:
        I = RationalMatrix.identity(A.row_count)
        assert (A.multiply(out.value) == I)
        assert (out.value.multiply(A) == I)


@pytest.mark.parametrize("seed", SEEDS)
def test_rref_matches_sympy(seed):
    rng = random.Random(seed)
    A = random_matrix(rng, rng.randint(1, 5), rng.randint(1, 6), fractions=seed % 2 == 0)
    result = row_reduce(A).unwrap()
    expected, pivots = to_sympy(A).rref()
    assert (result.pivot_columns == tuple(pivots))
    assert (result.matrix == RationalMatrix([[from_sympy(expected[i, j]) for j in range(A.column_count)]
                                             for i in range(A.row_count)]))
    assert (row_reduce(result.matrix).unwrap().matrix == result.matrix)


@pytest.mark.parametrize("seed", SEEDS)
def test_rank_invariance(seed):
    """Rank is unchanged by row exchanges and non-zero row scaling."""
    rng = random.Random(seed)
    n = rng.randint(2, 5)
    A = rank_deficient(rng, n)
    r = rank(A).unwrap()
    assert (r == to_sympy(A).rank())
    assert (r < n)
    B = A.swap_rows(0, n - 1).scale_row(rng.randrange(n), Rational(rng.choice([-3, -1, 2, 7]), 5))
    assert (rank(B).unwrap() == r)
    assert (len(nullspace(A).unwrap()) == n - r)


@pytest.mark.parametrize("seed", SEEDS)
def test_solution_set(seed):
    """Particular solution plus any nullspace combination solves the system."""
    rng = random.Random(seed)
    A = random_matrix(rng, rng.randint(1, 4), rng.randint(1, 5))
    b = A.multiply(RationalVector([rng.randint(-4, 4) for _ in range(A.column_count)]))
    solution = solve(A, b, underdetermined=UNDERDETERMINED_PARAMETRIC).unwrap()
    assert (A.multiply(solution.x) == b)
    assert (len(solution.nullspace) == A.column_count - solution.rank)
    x = solution.x
    for v in solution.nullspace:
        assert (A.multiply(v).is_zero())
        x = x.add(v.scale(Rational(rng.randint(-5, 5), rng.randint(1, 4))))
    assert (A.multiply(x) == b)


@pytest.mark.parametrize("seed", SEEDS)
def test_big_integer_arithmetic(seed):
    rng = random.Random(seed)
    a = Rational(rng.getrandbits(200) - 2**199, rng.getrandbits(150) + 1)
    b = Rational(rng.getrandbits(300) + 1, rng.getrandbits(100) + 1)
    assert (a.add(b).subtract(b) == a)
    assert (a.multiply(b).divide(b) == a)
    assert (a.compare_to(b) == (1 if a > b else -1))
    assert (Rational.from_record(a.to_record()) == a)

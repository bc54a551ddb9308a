"""Test if batches compute correctly on all backends."""
import logging
import pickle
import pytest
from exactlinalg import *
from exactlinalg.names import *


@pytest.mark.timeout(180)
def test_failure_stays_in_its_slot(curr_backend):
    jobs = [{OPERATION: INVERT, MATRIX: [[4, 7], [2, 6]]},
            {OPERATION: INVERT, MATRIX: [[1, 2], [2, 4]]},
            BatchJob(INVERT, RationalMatrix([[1, 1], [1, -1]]))]
    out = run_batch(jobs, processes=2, backend=curr_backend)
    assert (len(out) == 3)
    assert (out[0].value == RationalMatrix([['3/5', '-7/10'], ['-1/5', '2/5']]))
    assert (out[1].status == SINGULAR_MATRIX)
    assert (isinstance(out[1].error, SingularMatrix))
    assert (out[2].value == RationalMatrix([['1/2', '1/2'], ['1/2', '-1/2']]))


@pytest.mark.timeout(180)
def test_order_preserved(curr_backend):
    jobs = [{OPERATION: DETERMINANT, MATRIX: [[k, 0], [0, 1]]} for k in range(20)]
    out = run_batch(jobs, processes=3, backend=curr_backend)
    assert ([o.value for o in out] == list(range(20)))


def test_empty_batch(curr_backend):
    assert (run_batch([], backend=curr_backend) == [])
    assert (solve_many([[1]], [], backend=curr_backend) == [])


@pytest.mark.timeout(180)
def test_invalid_jobs(curr_backend):
    jobs = [{OPERATION: 'frobnicate', MATRIX: [[1]]},
            {OPERATION: DETERMINANT},
            {OPERATION: DETERMINANT, MATRIX: [[None]]},
            {OPERATION: DETERMINANT, MATRIX: [[1, 2], [3]]},
            {OPERATION: SOLVE, MATRIX: [[1]]},
            {OPERATION: OPTIMIZE, MATRIX: [[1]]},
            {OPERATION: RANK, MATRIX: [[1]], OPTIONS: {'pivoting': 'partial'}},
            {OPERATION: DETERMINANT, MATRIX: [[2]], 'priority': 1},
            {OPERATION: DETERMINANT, MATRIX: [[2]]}]
    out = run_batch(jobs, processes=2, backend=curr_backend)
    assert ([o.status for o in out] == [INVALID_JOB, INVALID_JOB, INVALID_JOB, DIMENSION_MISMATCH, INVALID_JOB,
                                        INVALID_JOB, INVALID_JOB, INVALID_JOB, OPTIMAL])
    assert (out[-1].value == 2)


@pytest.mark.timeout(180)
def test_malformed_descriptors_keep_siblings(curr_backend):
    """Unhashable operations, non-mapping options and non-iterable matrices fail only their own slot."""
    jobs = [{OPERATION: DETERMINANT, MATRIX: [[2]]},
            {OPERATION: [SOLVE], MATRIX: [[1]]},
            {OPERATION: SOLVE, MATRIX: [[1]], RHS: [1], OPTIONS: UNDERDETERMINED_PARAMETRIC},
            {OPERATION: RANK, MATRIX: 5},
            {OPERATION: DETERMINANT, MATRIX: [[3]]}]
    out = run_batch(jobs, processes=2, backend=curr_backend)
    assert ([o.status for o in out] == [OPTIMAL, INVALID_JOB, INVALID_JOB, INVALID_JOB, OPTIMAL])
    assert (out[0].value == 2)
    assert (out[4].value == 3)
    with pytest.raises(InvalidJob):
        BatchJob(RANK, [[1]], options=[('underdetermined', UNDERDETERMINED_ERROR)])


def test_unknown_backend():
    with pytest.raises(ValueError):
        run_batch([{OPERATION: RANK, MATRIX: [[1]]}], backend='gpu')


@pytest.mark.timeout(180)
def test_mixed_operations(curr_backend):
    lp = LinearProgram([1, 1], [Constraint([1, 2], GE, 4), Constraint([3, 1], GE, 6)])
    unbounded = LinearProgram([1], [Constraint([1], GE, 1)], sense=MAXIMIZE)
    jobs = [BatchJob(SOLVE, [[1, 1], [1, -1]], [4, 2]),
            BatchJob(RANK, [[1, 2, 3], [2, 4, 6]]),
            BatchJob(NULLSPACE, [[1, 1]]),
            BatchJob(ROW_REDUCE, [[2, 4], [1, 3]]),
            BatchJob(OPTIMIZE, lp),
            BatchJob(OPTIMIZE, unbounded),
            BatchJob(SOLVE, [[1, 1], [2, 2]], [1, 3])]
    out = run_batch(jobs, processes=2, backend=curr_backend)
    assert (out[0].value.x == [3, 1])
    assert (out[1].value == 1)
    assert (out[2].value == (RationalVector([-1, 1]),))
    assert (out[3].value.matrix == RationalMatrix.identity(2))
    assert (out[4].value.objective_value == Rational(14, 5))
    assert (out[5].status == UNBOUNDED)
    assert (out[6].status == NO_SOLUTION)


@pytest.mark.timeout(180)
def test_policy_reaches_workers(curr_backend, config):
    """Default policy of the caller applies in workers; a job option overrides it."""
    config.underdetermined = UNDERDETERMINED_PARAMETRIC
    jobs = [{OPERATION: SOLVE, MATRIX: [[1, 1]], RHS: [2]},
            {OPERATION: SOLVE, MATRIX: [[1, 1]], RHS: [2], OPTIONS: {'underdetermined': UNDERDETERMINED_ERROR}}]
    out = run_batch(jobs, processes=2, backend=curr_backend)
    assert (out[0].ok)
    assert (out[0].value.nullspace == (RationalVector([-1, 1]),))
    assert (out[1].status == UNDERDETERMINED_SYSTEM)
    assert (out[1].error.solution.x == [2, 0])


@pytest.mark.timeout(180)
def test_solve_many(curr_backend):
    A = RationalMatrix([[2, 1], [1, 3]])
    out = solve_many(A, [[3, 5], [1, 0], [0, 1], [1, 2, 3], ['1/2', None]], processes=2, backend=curr_backend)
    assert (out[0].value.x == [Rational(4, 5), Rational(7, 5)])
    assert (out[1].value.x == [Rational(3, 5), Rational(-1, 5)])
    assert (out[2].value.x == [Rational(-1, 5), Rational(2, 5)])
    assert (out[3].status == DIMENSION_MISMATCH)
    assert (out[4].status == INVALID_JOB)


def test_solve_many_malformed_matrix():
    out = solve_many([[1, 2], [3]], [[1, 2], [3, 4]], backend=SERIAL)
    assert ([o.status for o in out] == [DIMENSION_MISMATCH, DIMENSION_MISMATCH])
    with pytest.raises(ValueError):
        solve_many([[1]], [[1]], underdetermined='guess')


def test_small_batches_run_serially(config, caplog):
    config.parallel_threshold = 10
    caplog.set_level(logging.INFO)
    out = run_batch([{OPERATION: RANK, MATRIX: [[1, 0], [0, 1]]}] * 3, processes=4, backend=PROCESS)
    assert ([o.value for o in out] == [2, 2, 2])
    assert ("serially" in caplog.text)


def test_run_job():
    assert (run_job({OPERATION: DETERMINANT, MATRIX: [[1, 2], [3, 4]]}).value == -2)
    assert (run_job(42).status == INVALID_JOB)


def test_outcomes_pickle():
    """Outcomes cross process boundaries intact."""
    failure = solve([[1, 1]], [2], underdetermined=UNDERDETERMINED_ERROR)
    copy = pickle.loads(pickle.dumps(failure))
    assert (copy == failure)
    assert (copy.error.solution == failure.error.solution)
    success = row_reduce([[1, 2], [3, 4]])
    assert (pickle.loads(pickle.dumps(success)) == success)
    zero = Success(Rational.ZERO)
    assert (pickle.loads(pickle.dumps(zero)).value == 0)


def test_configuration(config, monkeypatch):
    assert (Configuration() is config)
    with pytest.raises(ValueError):
        config.processes = 0
    with pytest.raises(ValueError):
        config.backend = 'gpu'
    with pytest.raises(ValueError):
        config.underdetermined = 'guess'
    monkeypatch.setenv('EXACTLINALG_PROCESSES', '3')
    assert (Configuration._default_processes() == 3)
    monkeypatch.setenv('EXACTLINALG_PROCESSES', 'many')
    assert (Configuration._default_processes() >= 1)

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
"""Batch dispatcher: many independent problems on a fixed worker pool

run_batch takes an ordered collection of problem descriptors and returns one
Outcome per descriptor in the same order, however the workers finish. Jobs
share no mutable state: in the process backend every worker receives pickled
copies, in the thread backend the inputs are immutable and every elimination
works on its own copy. A failing job only fills its own slot with a Failure.

solve_many solves A x = b for many right-hand sides b with one coefficient
matrix A. In the process backend, A is sent once to every worker through the
pool initializer instead of once per job.
"""

import logging
from collections.abc import Mapping
from functools import partial
from multiprocessing.pool import ThreadPool
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union
from exactlinalg.configuration import Configuration
from exactlinalg.errors import ExactLinAlgError, InvalidJob
from exactlinalg.gauss import solve, invert, determinant, row_reduce, rank, nullspace
from exactlinalg.matrix import RationalMatrix
from exactlinalg.outcome import Outcome, Failure
from exactlinalg.pool import LAPool, chunk_size
from exactlinalg.simplex import LinearProgram, optimize
from exactlinalg.names import *

OPTION_UNDERDETERMINED = 'underdetermined'


class BatchJob(object):
    """Descriptor of one independent problem

    Args:
        operation (str):
            SOLVE, INVERT, DETERMINANT, ROW_REDUCE, RANK, NULLSPACE or OPTIMIZE.

        matrix (RationalMatrix, sequence of rows or LinearProgram):
            The matrix, or the linear program for OPTIMIZE.

        rhs (optional (RationalVector or sequence)):
            Right-hand side, required for SOLVE.

        options (optional (dict)):
            Per-job options. SOLVE accepts 'underdetermined' with the values
            UNDERDETERMINED_ERROR or UNDERDETERMINED_PARAMETRIC.

    Jobs can also be given as dicts, e.g.
    {OPERATION: SOLVE, MATRIX: [[1, 1], [1, -1]], RHS: [4, 2]}.
    """
    __slots__ = ('operation', 'matrix', 'rhs', 'options')

    def __init__(self, operation: str, matrix, rhs=None, options: Optional[Dict] = None):
        self.operation = operation
        self.matrix = matrix
        self.rhs = rhs
        if options is not None and not isinstance(options, Mapping):
            raise InvalidJob(f"Job options must be a mapping, got {type(options).__name__}")
        self.options = dict(options) if options else {}

    @staticmethod
    def from_descriptor(descriptor: Union['BatchJob', Dict]) -> 'BatchJob':
        """Validate a descriptor and bring it into canonical form

        Raises:
            InvalidJob: For unknown operations, unknown options, missing
                inputs or entries that are not exact numbers.
            DimensionMismatch: For ragged matrices.
        """
        if isinstance(descriptor, dict):
            unknown = set(descriptor) - {OPERATION, MATRIX, RHS, OPTIONS}
            if unknown:
                raise InvalidJob(f"Unknown job keys: {sorted(unknown)}")
            if OPERATION not in descriptor or MATRIX not in descriptor:
                raise InvalidJob(f"A job needs the keys '{OPERATION}' and '{MATRIX}'")
            descriptor = BatchJob(descriptor[OPERATION], descriptor[MATRIX], descriptor.get(RHS),
                                  descriptor.get(OPTIONS))
        elif not isinstance(descriptor, BatchJob):
            raise InvalidJob(f"Cannot interpret {type(descriptor).__name__} as a batch job")
        job = descriptor
        if not isinstance(job.operation, str) or job.operation not in _OPERATIONS:
            raise InvalidJob(f"Unknown operation {job.operation!r}")
        unknown = set(job.options) - ({OPTION_UNDERDETERMINED} if job.operation == SOLVE else set())
        if unknown:
            raise InvalidJob(f"Unknown options for {job.operation}: {sorted(unknown)}")
        if job.options.get(OPTION_UNDERDETERMINED) not in (None, UNDERDETERMINED_ERROR, UNDERDETERMINED_PARAMETRIC):
            raise InvalidJob(f"Unknown underdetermined policy {job.options[OPTION_UNDERDETERMINED]!r}")
        if job.operation == OPTIMIZE:
            if not isinstance(job.matrix, LinearProgram):
                raise InvalidJob(f"{OPTIMIZE} needs a LinearProgram, got {type(job.matrix).__name__}")
            return job
        if job.operation == SOLVE and job.rhs is None:
            raise InvalidJob(f"{SOLVE} needs a right-hand side")
        try:
            matrix = job.matrix if isinstance(job.matrix, RationalMatrix) else RationalMatrix(job.matrix)
        except ExactLinAlgError:
            raise
        except (TypeError, ValueError) as exc:
            raise InvalidJob(f"Matrix entries must be exact numbers: {exc}") from exc
        return BatchJob(job.operation, matrix, job.rhs, job.options)

    def run(self) -> Outcome:
        """Compute this job in the calling thread"""
        return _OPERATIONS[self.operation](self)

    def __reduce__(self):
        return (BatchJob, (self.operation, self.matrix, self.rhs, self.options))

    def __repr__(self):
        return f"BatchJob({self.operation!r}, shape={getattr(self.matrix, 'shape', None)})"


def _solve_job(job: BatchJob) -> Outcome:
    try:
        return solve(job.matrix, job.rhs, job.options.get(OPTION_UNDERDETERMINED))
    except TypeError as exc:
        return Failure(InvalidJob(f"Right-hand side entries must be exact numbers: {exc}"))


_OPERATIONS = {
    SOLVE: _solve_job,
    INVERT: lambda job: invert(job.matrix),
    DETERMINANT: lambda job: determinant(job.matrix),
    ROW_REDUCE: lambda job: row_reduce(job.matrix),
    RANK: lambda job: rank(job.matrix),
    NULLSPACE: lambda job: nullspace(job.matrix),
    OPTIMIZE: lambda job: optimize(job.matrix),
}


def run_job(descriptor) -> Outcome:
    """Validate and compute one job; every typed error ends up in the Outcome"""
    try:
        job = BatchJob.from_descriptor(descriptor)
    except ExactLinAlgError as err:
        logging.debug(f"Rejected batch job: {err}")
        return Failure(err)
    return job.run()


def batch_worker_init(underdetermined: str):
    """Helper function for parallel batches

    Carry the default underdetermined policy of the main process over to a
    spawned worker. Is executed on workers, not on main thread.
    """
    Configuration().underdetermined = underdetermined


def batch_worker_compute(item: Tuple[int, object]) -> Tuple[int, Outcome]:
    """Helper function for parallel batches

    Compute one job. Is executed on workers, not on main thread.

    Args:
        item (tuple):
            Index of the job in the batch and its descriptor.
    """
    i, descriptor = item
    return i, run_job(descriptor)


def solve_worker_init(matrix: RationalMatrix, underdetermined: Optional[str]):
    """Helper function for parallel solves

    Store the coefficient matrix that all jobs of this worker share. Is
    executed on workers, not on main thread.
    """
    global solve_glob
    solve_glob = (matrix, underdetermined)


def solve_worker_compute(item: Tuple[int, object]) -> Tuple[int, Outcome]:
    """Helper function for parallel solves

    Solve for one right-hand side against the matrix stored by
    solve_worker_init. Is executed on workers, not on main thread.
    """
    global solve_glob
    matrix, underdetermined = solve_glob
    return _solve_with(matrix, underdetermined, item)


def _solve_with(matrix: RationalMatrix, underdetermined: Optional[str], item: Tuple[int, object]) -> Tuple[int, Outcome]:
    i, rhs = item
    return i, _solve_job(BatchJob(SOLVE, matrix, rhs, {OPTION_UNDERDETERMINED: underdetermined}))


def _dispatch(items: Sequence, compute: Callable, processes: Optional[int], backend: Optional[str],
              initializer: Optional[Callable] = None, initargs: Tuple = (),
              local_compute: Optional[Callable] = None) -> List[Outcome]:
    """Run compute on every (index, item) pair and return the outcomes in input order

    compute (plus initializer) is used by the process backend, local_compute
    (if given) by the serial and thread backends, which share memory with the
    caller and need no initialization.
    """
    config = Configuration()
    n = len(items)
    if n == 0:
        return []
    backend = config.backend if backend is None else backend
    if backend not in (PROCESS, THREAD, SERIAL):
        raise ValueError('Unknown batch backend: ' + str(backend))
    processes = min(config.processes if processes is None else processes, n)
    if processes < 1:
        raise ValueError('Number of processes must be at least 1, got ' + str(processes))
    if local_compute is None:
        local_compute = compute
    results = [None] * n
    if backend == SERIAL or processes == 1 or n < config.parallel_threshold:
        logging.info(f"Computing batch of {n} job(s) serially.")
        for item in enumerate(items):
            i, outcome = local_compute(item)
            results[i] = outcome
        return results
    logging.info(f"Computing batch of {n} jobs on {processes} {backend} worker(s).")
    chunks = chunk_size(n, processes)
    if backend == THREAD:
        with ThreadPool(processes) as pool:
            for i, outcome in pool.imap_unordered(local_compute, enumerate(items), chunksize=chunks):
                results[i] = outcome
    else:
        with LAPool(processes, initializer=initializer, initargs=initargs) as pool:
            for i, outcome in pool.imap_unordered(compute, enumerate(items), chunksize=chunks):
                results[i] = outcome
    return results


def run_batch(jobs: Sequence, processes: Optional[int] = None, backend: Optional[str] = None) -> List[Outcome]:
    """Compute independent problems concurrently

    Args:
        jobs (list of BatchJob or dict):
            Problem descriptors, see BatchJob.

        processes (optional (int)): (Default: Configuration().processes)
            Maximum number of workers. Never more workers than jobs are started.

        backend (optional (str)): (Default: Configuration().backend)
            PROCESS, THREAD or SERIAL.

    Returns:
        (list of Outcome):
            One Success or Failure per job, in the order of the input. An empty
            input gives an empty list.

    Example:
        >>> out = run_batch([{OPERATION: DETERMINANT, MATRIX: [[1, 2], [3, 4]]},
        ...                  {OPERATION: INVERT, MATRIX: [[1, 2], [2, 4]]}])
        >>> [o.status for o in out]
        ['optimal', 'singular_matrix']
    """
    return _dispatch(list(jobs), batch_worker_compute, processes, backend,
                     initializer=batch_worker_init, initargs=(Configuration().underdetermined,))


def solve_many(A, rhs_list: Sequence, processes: Optional[int] = None, backend: Optional[str] = None,
               underdetermined: Optional[str] = None) -> List[Outcome]:
    """Solve A x = b for every b in rhs_list

    Args:
        A (RationalMatrix or sequence of rows):
            Coefficient matrix shared by all systems.

        rhs_list (list):
            Right-hand sides.

        processes, backend:
            As for run_batch.

        underdetermined (optional (str)):
            Policy for systems with free variables, see gauss.solve.

    Returns:
        (list of Outcome):
            One Success(Solution) or Failure per right-hand side, in order. If A
            itself is malformed, every slot carries the same Failure.
    """
    rhs_list = list(rhs_list)
    if underdetermined is None:
        underdetermined = Configuration().underdetermined
    if underdetermined not in (UNDERDETERMINED_ERROR, UNDERDETERMINED_PARAMETRIC):
        raise ValueError("Unknown underdetermined policy: " + str(underdetermined))
    try:
        matrix = A if isinstance(A, RationalMatrix) else RationalMatrix(A)
    except ExactLinAlgError as err:
        return [Failure(err) for _ in rhs_list]
    return _dispatch(rhs_list, solve_worker_compute, processes, backend,
                     initializer=solve_worker_init, initargs=(matrix, underdetermined),
                     local_compute=partial(_solve_with, matrix, underdetermined))

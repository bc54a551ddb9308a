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
"""Process pool for batch jobs, with a fast worker initialization path on Windows"""

from multiprocessing.pool import Pool
from multiprocessing import get_context
from contextlib import contextmanager
import os
import sys
import pickle
from os.path import isfile
from platform import system
from tempfile import mkstemp
from typing import Callable, Optional, Tuple
from exactlinalg.configuration import Configuration


def _init_win_worker(filename: str) -> None:
    """Retrieve worker initialization code from a pickle file and call it."""
    with open(filename, mode="rb") as handle:
        func, *args = pickle.load(handle)
    func(*args)


@contextmanager
def _detached_main():
    """Hide __main__.__spec__ and __main__.__file__ while workers are spawned

    Spawned workers import the file named there, which would re-run the
    host script in every worker.
    """
    main = sys.modules['__main__']
    spec = getattr(main, '__spec__', None)
    file = getattr(main, '__file__', None)
    if spec:
        main.__spec__ = None
    if file:
        main.__file__ = None
    try:
        yield
    finally:
        if spec:
            main.__spec__ = spec
        if file:
            main.__file__ = file


def chunk_size(n_jobs: int, processes: int) -> int:
    """Jobs handed to a worker at a time: about four chunks per worker"""
    return max(1, n_jobs // (4 * max(1, processes)))


class LAPool(Pool):
    """Multiprocessing process pool for independent elimination jobs

    Thin layer on top of multiprocessing.Pool:

    - workers are started with the 'spawn' method unless another context
      is given, forking has proven unreliable with large parent processes
    - the number of workers defaults to Configuration().processes
    - on Windows the initializer and its arguments are passed to the workers
      through a pickle file instead of directly, avoiding a slow start-up with
      large initializer arguments (e.g. a big coefficient matrix), see [1_]

    Leaving the pool as a context manager terminates all outstanding work.

    References
    ----------
    .. [1] https://github.com/opencobra/cobrapy/issues/997

    """

    def __init__(self,
                 processes: Optional[int] = None,
                 initializer: Optional[Callable] = None,
                 initargs: Tuple = (),
                 maxtasksperchild: Optional[int] = None,
                 context=None):
        self._filename = None
        if processes is None:
            processes = Configuration().processes
        if initializer is not None and system() == "Windows":
            descriptor, self._filename = mkstemp(suffix=".pkl")
            # Write through the descriptor returned by mkstemp so that the file is
            # closed and can be removed later, otherwise Windows raises PermissionError.
            with os.fdopen(descriptor, mode="wb") as handle:
                pickle.dump((initializer,) + tuple(initargs), handle)
            initializer = _init_win_worker
            initargs = (self._filename,)
        if context is None:
            context = get_context('spawn')
            with _detached_main():
                super().__init__(processes=processes,
                                 initializer=initializer,
                                 initargs=initargs,
                                 maxtasksperchild=maxtasksperchild,
                                 context=context)
        else:
            super().__init__(processes=processes,
                             initializer=initializer,
                             initargs=initargs,
                             maxtasksperchild=maxtasksperchild,
                             context=context)

    def __exit__(self, *args, **kwargs):
        """Clean up resources when leaving a context"""
        self._clean_up()
        return super().__exit__(*args, **kwargs)

    def close(self):
        """Call cleanup function and close"""
        self._clean_up()
        super().close()

    def _clean_up(self):
        """Remove the dump file if it exists"""
        if self._filename is not None and isfile(self._filename):
            os.remove(self._filename)

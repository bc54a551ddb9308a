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
"""Process-wide default settings for batch computations and linear solves"""

import logging
import os
from psutil import cpu_count
from exactlinalg.names import *

PROCESSES_ENV = 'EXACTLINALG_PROCESSES'


class Configuration(object):
    """Singleton holding the package defaults

    Every instantiation returns the same object, so settings changed in one
    place are seen everywhere::

        Configuration().processes = 2

    Attributes:
        processes (int):
            Default number of batch workers. Taken from the environment variable
            EXACTLINALG_PROCESSES if set, otherwise the number of physical cores.

        backend (str):
            Default batch backend: PROCESS, THREAD or SERIAL.

        parallel_threshold (int):
            Batches with fewer jobs than this are computed in the calling thread.

        underdetermined (str):
            Default policy for consistent systems with free variables:
            UNDERDETERMINED_ERROR or UNDERDETERMINED_PARAMETRIC.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._reset()
        return cls._instance

    def _reset(self):
        self._processes = self._default_processes()
        self._backend = PROCESS
        self._parallel_threshold = 2
        self._underdetermined = UNDERDETERMINED_ERROR

    @staticmethod
    def _default_processes() -> int:
        env = os.environ.get(PROCESSES_ENV)
        if env:
            try:
                return max(1, int(env))
            except ValueError:
                logging.warning('Ignoring non-integer ' + PROCESSES_ENV + '=' + env)
        return cpu_count(logical=False) or os.cpu_count() or 1

    @property
    def processes(self) -> int:
        return self._processes

    @processes.setter
    def processes(self, value: int):
        if int(value) < 1:
            raise ValueError('Number of processes must be at least 1, got ' + str(value))
        self._processes = int(value)

    @property
    def backend(self) -> str:
        return self._backend

    @backend.setter
    def backend(self, value: str):
        if value not in (PROCESS, THREAD, SERIAL):
            raise ValueError('Unknown batch backend: ' + str(value))
        self._backend = value

    @property
    def parallel_threshold(self) -> int:
        return self._parallel_threshold

    @parallel_threshold.setter
    def parallel_threshold(self, value: int):
        self._parallel_threshold = max(1, int(value))

    @property
    def underdetermined(self) -> str:
        return self._underdetermined

    @underdetermined.setter
    def underdetermined(self, value: str):
        if value not in (UNDERDETERMINED_ERROR, UNDERDETERMINED_PARAMETRIC):
            raise ValueError('Unknown underdetermined policy: ' + str(value))
        self._underdetermined = value

    def __repr__(self):
        return (f"Configuration(processes={self._processes}, backend={self._backend!r}, "
                f"parallel_threshold={self._parallel_threshold}, underdetermined={self._underdetermined!r})")

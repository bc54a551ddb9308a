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
"""exactlinalg: exact linear algebra over the rational numbers"""

from .names import *
import logging


class DisableLogger():
    """Environment in which logging is disabled"""

    def __enter__(self):
        logging.disable(logging.CRITICAL)

    def __exit__(self, exit_type, exit_value, exit_traceback):
        logging.disable(logging.NOTSET)


from .errors import *
from .configuration import Configuration
from .rational import Rational, DecimalText
from .matrix import RationalMatrix, RationalVector
from .outcome import Outcome, Success, Failure
from .gauss import (Gauss, EliminationResult, Solution, solve, invert, determinant, row_reduce, row_echelon, rank,
                    nullspace)
from .simplex import Constraint, LinearProgram, LPSolution, optimize, transport_problem, transport_plan
from .pool import LAPool
from .batch import BatchJob, run_batch, run_job, solve_many

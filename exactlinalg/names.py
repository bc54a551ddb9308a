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
"""Static strings used in the exactlinalg package

    Operations

        SOLVE = 'solve'

        INVERT = 'invert'

        DETERMINANT = 'determinant'

        ROW_REDUCE = 'row_reduce'

        RANK = 'rank'

        NULLSPACE = 'nullspace'

        OPTIMIZE = 'optimize'

    Batch job descriptors

        OPERATION = 'operation'

        MATRIX = 'matrix'

        RHS = 'rhs'

        OPTIONS = 'options'

    Batch backends

        PROCESS = 'process'

        THREAD = 'thread'

        SERIAL = 'serial'

    Underdetermined systems

        UNDERDETERMINED_ERROR = 'error'

        UNDERDETERMINED_PARAMETRIC = 'parametric'

    Status codes and error kinds

        OPTIMAL = 'optimal'

        DIVISION_BY_ZERO = 'division_by_zero'

        PRECISION_LOSS = 'precision_loss'

        DIMENSION_MISMATCH = 'dimension_mismatch'

        INDEX_OUT_OF_RANGE = 'index_out_of_range'

        SINGULAR_MATRIX = 'singular_matrix'

        NO_SOLUTION = 'no_solution'

        UNDERDETERMINED_SYSTEM = 'underdetermined_system'

        UNBOUNDED = 'unbounded'

        INVALID_JOB = 'invalid_job'

    Linear programs

        MAXIMIZE = 'maximize'

        MINIMIZE = 'minimize'

        LE = '<='

        EQ = '='

        GE = '>='

    Records

        NUM = 'num'

        DEN = 'den'

        ROWS = 'rows'

        COLS = 'cols'

        DATA = 'data'
"""

# Operations
SOLVE = 'solve'
INVERT = 'invert'
DETERMINANT = 'determinant'
ROW_REDUCE = 'row_reduce'
RANK = 'rank'
NULLSPACE = 'nullspace'
OPTIMIZE = 'optimize'

# Batch job descriptors
OPERATION = 'operation'
MATRIX = 'matrix'
RHS = 'rhs'
OPTIONS = 'options'

# Batch backends
PROCESS = 'process'
THREAD = 'thread'
SERIAL = 'serial'

# Underdetermined systems
UNDERDETERMINED_ERROR = 'error'
UNDERDETERMINED_PARAMETRIC = 'parametric'

# Status codes and error kinds
OPTIMAL = 'optimal'
DIVISION_BY_ZERO = 'division_by_zero'
PRECISION_LOSS = 'precision_loss'
DIMENSION_MISMATCH = 'dimension_mismatch'
INDEX_OUT_OF_RANGE = 'index_out_of_range'
SINGULAR_MATRIX = 'singular_matrix'
NO_SOLUTION = 'no_solution'
UNDERDETERMINED_SYSTEM = 'underdetermined_system'
UNBOUNDED = 'unbounded'
INVALID_JOB = 'invalid_job'

# Linear programs
MAXIMIZE = 'maximize'
MINIMIZE = 'minimize'
LE = '<='
EQ = '='
GE = '>='

# Records
NUM = 'num'
DEN = 'den'
ROWS = 'rows'
COLS = 'cols'
DATA = 'data'

import pytest
from exactlinalg import Configuration, RationalMatrix
from exactlinalg.names import *

# Backends the batch dispatcher is tested with
backends = [SERIAL, THREAD, PROCESS]


@pytest.fixture(params=backends, scope="session")
def curr_backend(request: pytest.FixtureRequest) -> str:
    """Provide session-level fixture for parametrized batch backends."""
    return request.param


@pytest.fixture(params=[UNDERDETERMINED_ERROR, UNDERDETERMINED_PARAMETRIC], scope="session")
def policy(request: pytest.FixtureRequest) -> str:
    """Provide session-level fixture for underdetermined-system policies."""
    return request.param


@pytest.fixture
def config():
    """Configuration singleton, restored after the test."""
    conf = Configuration()
    saved = (conf.processes, conf.backend, conf.parallel_threshold, conf.underdetermined)
    yield conf
    conf.processes, conf.backend, conf.parallel_threshold, conf.underdetermined = saved


@pytest.fixture
def singular():
    """Rank-one 2x2 matrix."""
    return RationalMatrix([[1, 2], [2, 4]])


@pytest.fixture
def hilbert():
    """Ill-conditioned 5x5 Hilbert matrix."""
    return RationalMatrix([[f"1/{i + j + 1}" for j in range(5)] for i in range(5)])

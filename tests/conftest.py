import matplotlib

matplotlib.use("Agg")

import pytest

from capsim.config import SimConfig
from capsim.instance import Trial
from capsim.workers import WorkerPool

PAIR = [(90.0, 100.0), (110.0, 100.0)]
SQUARE = [(40.0, 40.0), (60.0, 40.0), (40.0, 60.0), (60.0, 60.0)]


@pytest.fixture
def pair_positions():
    return list(PAIR)


@pytest.fixture
def square_positions():
    return list(SQUARE)


@pytest.fixture
def pair_config():
    return SimConfig(beta=0.5, max_range=100.0, width=200.0, height=200.0, num_transmitters=2)


@pytest.fixture
def pair_trial(pair_config):
    return Trial.build(PAIR, pair_config)


@pytest.fixture
def square_config():
    return SimConfig(beta=0.5, max_range=40.0, width=100.0, height=100.0, num_transmitters=4)


@pytest.fixture
def square_trial(square_config):
    return Trial.build(SQUARE, square_config)


@pytest.fixture
def workers():
    pool = WorkerPool(3)
    yield pool
    pool.shutdown(timeout=5.0)

import matplotlib

matplotlib.use("Agg")

import pytest

from neat_pool import NEATConfig, Population


@pytest.fixture
def cfg():
    return NEATConfig(random_seed=1234)


@pytest.fixture
def pool(cfg):
    return Population(cfg)


@pytest.fixture
def seeded_pool():
    pool = Population(NEATConfig(random_seed=99))
    pool.initialize()
    return pool

"""Pytest configuration and shared fixtures."""

import pytest
import random
from itertools import count

from evoneat.genotype   import Genome, InnovationLedger
from evoneat.phenotype  import Individual
from evoneat.run.config import Config


@pytest.fixture(autouse=True)
def reset_individual_ids():
    """Individual IDs start from 0 in each test."""
    Individual._id_generator = count(0)
    yield


@pytest.fixture
def config():
    """Default configuration for a 2-input, 1-output population of 20."""
    config = Config()
    config.num_inputs      = 2
    config.num_outputs     = 1
    config.population_size = 20
    return config


@pytest.fixture
def config_1x1(config):
    """Same as 'config', with a single input."""
    config.num_inputs = 1
    return config


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def ledger(config):
    return InnovationLedger(config.num_inputs, config.num_outputs)


@pytest.fixture
def genome(config, ledger, rng):
    """A freshly built, fully connected 2-input, 1-output genome."""
    return Genome(config, ledger, rng)

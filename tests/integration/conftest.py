"""
Shared fixtures for integration tests.
"""

import pytest

from evoneat.run.config import Config


@pytest.fixture
def xor_inputs():
    return [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]


@pytest.fixture
def xor_outputs():
    return [[0.0], [1.0], [1.0], [0.0]]


@pytest.fixture
def xor_config():
    """XOR setup; stagnation is switched off so runs never collapse."""
    config = Config()
    config.num_inputs = 2
    config.num_outputs = 1
    config.population_size = 50
    config.seed = 2024
    config.max_number_generations = 25
    config.max_stagnation_period = 1000
    return config

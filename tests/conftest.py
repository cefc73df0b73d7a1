import numpy as np
import pytest

from genecars.evolution.engine.config import EvolutionConfig
from genecars.evolution.engine.core import GenerationManager
from genecars.genome.schema import DEFAULT_SCHEMA


@pytest.fixture
def genome_length():
    return DEFAULT_SCHEMA.genome_length


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def config():
    return EvolutionConfig(
        population_size=20,
        num_clones=2,
        num_random=2,
        crossover_rate=0.4,
        mutation_flip_count=3,
    )


@pytest.fixture
def manager(config):
    return GenerationManager(config, seed=42)


@pytest.fixture
def evaluate_all():
    return report_all


def report_all(manager, fitness_of=None):
    """Report a fitness for every pending individual (default: 10 * id)."""
    fitness_of = fitness_of or (lambda ind: float(ind.id) * 10.0)
    for ind in manager.current_population():
        if ind.fitness is None:
            manager.report_fitness(ind.id, fitness_of(ind))

import pytest

from genecars.exceptions import InvariantViolation
from genecars.genome.genome import Genome
from genecars.population.individual import Individual
from genecars.population.population import Population, rank_individuals
from genecars.population.state import GenerationState, Origin, validate_transition


def make(i, fitness=None, length=8, origin=Origin.BRED):
    return Individual(id=i, genome=Genome.zeros(length), origin=origin, fitness=fitness)


def test_ids_must_be_sequential():
    Population(1, [make(0), make(1)])
    with pytest.raises(InvariantViolation):
        Population(1, [make(0), make(0)])
    with pytest.raises(InvariantViolation):
        Population(1, [make(1)])


def test_genome_lengths_must_match():
    with pytest.raises(InvariantViolation):
        Population(1, [make(0), make(1, length=9)])


def test_pending_and_ranking():
    population = Population(3, [make(0, 2.0), make(1), make(2, 2.0)])
    assert population.pending_ids() == [1]
    assert not population.is_fully_evaluated()
    with pytest.raises(ValueError):
        population.ranked()

    population[1].fitness = 7.0
    assert [ind.id for ind in population.ranked()] == [1, 0, 2]


def test_fitness_must_be_finite():
    ind = make(0)
    with pytest.raises(ValueError):
        ind.fitness = float("nan")


def test_individual_dict_form():
    ind = Individual(
        id=4,
        genome=Genome.from_bitstring("1100"),
        origin=Origin.CLONED,
        generation=3,
        fitness=12.0,
        parents=(2,),
    )
    data = ind.to_dict()
    assert data["genome"] == "1100"
    assert data["origin"] == "cloned"
    assert Individual.from_dict(data) == ind


def test_rank_individuals_orders_by_fitness_then_id():
    ranked = rank_individuals([make(0, 10.0), make(1, 30.0), make(2, 30.0), make(3, 5.0)])
    assert [ind.id for ind in ranked] == [1, 2, 0, 3]


def test_state_transitions():
    validate_transition(GenerationState.EVALUATING, GenerationState.ADVANCING)
    validate_transition(GenerationState.ADVANCING, GenerationState.EVALUATING)
    with pytest.raises(ValueError):
        validate_transition(GenerationState.EVALUATING, GenerationState.EVALUATING)

from genecars.population.individual import Individual
from genecars.population.population import Population, rank_individuals
from genecars.population.state import GenerationState, Origin

__all__ = [
    "GenerationState",
    "Individual",
    "Origin",
    "Population",
    "rank_individuals",
]

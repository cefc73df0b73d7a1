from abc import ABC, abstractmethod

import numpy as np

from genecars.genome.genome import Genome


class GeneticOperators(ABC):
    """Crossover and mutation pair the generation manager breeds with.

    The manager only relies on these two call contracts; how an
    implementation is sourced (built in or loaded from a script) is the
    registry's business.
    """

    name: str = "operators"

    @abstractmethod
    def crossover(
        self, genome_a: Genome, genome_b: Genome, rate: float, rng: np.random.Generator
    ) -> Genome:
        """Combine two parents into one offspring.

        Each offspring bit comes from *genome_a* or *genome_b*. ``rate=0``
        must return an exact copy of *genome_a*.
        """

    @abstractmethod
    def mutate(self, genome: Genome, flip_count: int, rng: np.random.Generator) -> Genome:
        """Flip exactly ``min(flip_count, len(genome))`` distinct bits."""

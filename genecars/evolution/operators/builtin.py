"""Built-in operators.

``do_crossover`` and ``flip_genome_bits`` are also the helper library for
operator scripts, which typically wrap them with fixed parameters.
"""

import numpy as np

from genecars.evolution.operators.base import GeneticOperators
from genecars.genome.genome import Genome

__all__ = ["BuiltinOperators", "do_crossover", "flip_genome_bits"]


def do_crossover(
    genome_a: Genome, genome_b: Genome, rate: float, rng: np.random.Generator
) -> Genome:
    """Point crossover walking one strand at a time.

    The walk starts on *genome_a*; before each following bit it switches
    strand with probability *rate*.
    """
    if len(genome_a) != len(genome_b):
        raise ValueError(
            f"Parents differ in length: {len(genome_a)} vs {len(genome_b)}"
        )
    if not 0.0 <= rate <= 1.0:
        raise ValueError(f"Crossover rate must be within [0, 1], got {rate}")

    length = len(genome_a)
    if length == 0:
        return genome_a

    switches = np.zeros(length, dtype=np.int64)
    switches[1:] = rng.random(length - 1) < rate
    # strand index per position: parity of switches so far
    strand = np.cumsum(switches) % 2
    bits = np.where(strand == 0, genome_a.bits, genome_b.bits)
    return Genome(bits)


def flip_genome_bits(genome: Genome, flip_count: int, rng: np.random.Generator) -> Genome:
    """Flip ``min(flip_count, len(genome))`` distinct positions."""
    if flip_count < 0:
        raise ValueError(f"flip_count must be non-negative, got {flip_count}")
    count = min(flip_count, len(genome))
    if count == 0:
        return genome
    positions = rng.choice(len(genome), size=count, replace=False)
    return genome.flip(positions.tolist())


class BuiltinOperators(GeneticOperators):
    name = "builtin"

    def crossover(
        self, genome_a: Genome, genome_b: Genome, rate: float, rng: np.random.Generator
    ) -> Genome:
        return do_crossover(genome_a, genome_b, rate, rng)

    def mutate(self, genome: Genome, flip_count: int, rng: np.random.Generator) -> Genome:
        return flip_genome_bits(genome, flip_count, rng)

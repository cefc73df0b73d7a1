"""Does crossover with 40%, mutates with 3 bit flips.

Load with ``evolution.operator_script=scripts/crossover_0_4_flip_3.py``.
The configured rate and flip count are ignored in favour of the values
this script is named after.
"""

from genecars.evolution.operators.builtin import do_crossover, flip_genome_bits


def crossover(genome_a, genome_b, rate, rng):
    return do_crossover(genome_a, genome_b, 0.4, rng)


def mutate(genome, flip_count, rng):
    return flip_genome_bits(genome, 3, rng)

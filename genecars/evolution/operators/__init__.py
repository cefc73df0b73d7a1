from genecars.evolution.operators.base import GeneticOperators
from genecars.evolution.operators.builtin import (
    BuiltinOperators,
    do_crossover,
    flip_genome_bits,
)
from genecars.evolution.operators.guard import OperatorGuard
from genecars.evolution.operators.registry import OperatorBinding, OperatorRegistry
from genecars.evolution.operators.script import ScriptOperators

__all__ = [
    "BuiltinOperators",
    "GeneticOperators",
    "OperatorBinding",
    "OperatorGuard",
    "OperatorRegistry",
    "ScriptOperators",
    "do_crossover",
    "flip_genome_bits",
]

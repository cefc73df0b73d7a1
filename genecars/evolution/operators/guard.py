from __future__ import annotations

from typing import Callable

from loguru import logger
import numpy as np

from genecars.evolution.operators.base import GeneticOperators
from genecars.evolution.operators.builtin import BuiltinOperators
from genecars.exceptions import OperatorFailure
from genecars.genome.genome import Genome


class OperatorGuard:
    """Runs the bound operators and retries once with the fallback on failure.

    A failure is an exception or anything other than a ``Genome`` of the
    expected length. Each call returns ``(genome, failed)`` where *failed*
    says whether the primary operator had to be replaced. If the fallback
    fails as well, :class:`OperatorFailure` propagates.
    """

    def __init__(
        self,
        primary: GeneticOperators,
        genome_length: int,
        fallback: GeneticOperators | None = None,
    ):
        self.primary = primary
        self.fallback = fallback or BuiltinOperators()
        self.genome_length = genome_length

    def crossover(
        self, genome_a: Genome, genome_b: Genome, rate: float, rng: np.random.Generator
    ) -> tuple[Genome, bool]:
        return self._guarded(
            "crossover",
            lambda ops: ops.crossover(genome_a, genome_b, rate, rng),
        )

    def mutate(
        self, genome: Genome, flip_count: int, rng: np.random.Generator
    ) -> tuple[Genome, bool]:
        return self._guarded(
            "mutate",
            lambda ops: ops.mutate(genome, flip_count, rng),
        )

    def _guarded(
        self, role: str, call: Callable[[GeneticOperators], Genome]
    ) -> tuple[Genome, bool]:
        try:
            return self._checked(role, self.primary, call(self.primary)), False
        except OperatorFailure as exc:
            failure = exc
        except Exception as exc:
            failure = OperatorFailure(
                f"{self.primary.name}.{role} raised {type(exc).__name__}: {exc}"
            )

        if self.primary is self.fallback:
            raise failure
        logger.warning("[OperatorGuard] {}; retrying with {}", failure, self.fallback.name)

        try:
            return self._checked(role, self.fallback, call(self.fallback)), True
        except OperatorFailure:
            raise
        except Exception as exc:
            raise OperatorFailure(
                f"Fallback {self.fallback.name}.{role} raised {type(exc).__name__}: {exc}"
            ) from exc

    def _checked(self, role: str, ops: GeneticOperators, result: object) -> Genome:
        if not isinstance(result, Genome):
            raise OperatorFailure(
                f"{ops.name}.{role} returned {type(result).__name__}, expected Genome"
            )
        if len(result) != self.genome_length:
            raise OperatorFailure(
                f"{ops.name}.{role} returned {len(result)} bits, expected {self.genome_length}"
            )
        return result

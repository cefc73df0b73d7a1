from __future__ import annotations

import importlib
import importlib.util
from pathlib import Path
from types import ModuleType
from typing import Callable

from loguru import logger
import numpy as np

from genecars.evolution.operators.base import GeneticOperators
from genecars.exceptions import OperatorLoadError
from genecars.genome.genome import Genome

REQUIRED_FUNCTIONS = ("crossover", "mutate")


def _import_script(ref: str) -> ModuleType:
    if ref.endswith(".py") or Path(ref).is_file():
        path = Path(ref)
        if not path.is_file():
            raise OperatorLoadError(f"Operator script not found: {path}")
        module_name = f"genecars_operator_script_{path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise OperatorLoadError(f"Cannot load operator script: {path}")
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            raise OperatorLoadError(f"Operator script {path} failed to import: {exc}") from exc
        return module

    try:
        return importlib.import_module(ref)
    except Exception as exc:
        raise OperatorLoadError(f"Operator module {ref!r} failed to import: {exc}") from exc


class ScriptOperators(GeneticOperators):
    """Operators backed by a user module exposing ``crossover`` and ``mutate``.

    Expected signatures::

        def crossover(genome_a, genome_b, rate, rng) -> Genome
        def mutate(genome, flip_count, rng) -> Genome
    """

    def __init__(
        self,
        name: str,
        crossover_fn: Callable[[Genome, Genome, float, np.random.Generator], Genome],
        mutate_fn: Callable[[Genome, int, np.random.Generator], Genome],
    ):
        self.name = name
        self._crossover = crossover_fn
        self._mutate = mutate_fn

    @classmethod
    def load(cls, ref: str) -> ScriptOperators:
        """Import *ref* (dotted module path or ``.py`` file) and bind its functions."""
        module = _import_script(ref)
        missing = [
            fn for fn in REQUIRED_FUNCTIONS if not callable(getattr(module, fn, None))
        ]
        if missing:
            raise OperatorLoadError(
                f"Operator script {ref!r} does not define: {', '.join(missing)}"
            )
        logger.info("[ScriptOperators] Loaded operator script {}", ref)
        return cls(ref, module.crossover, module.mutate)

    def crossover(
        self, genome_a: Genome, genome_b: Genome, rate: float, rng: np.random.Generator
    ) -> Genome:
        return self._crossover(genome_a, genome_b, rate, rng)

    def mutate(self, genome: Genome, flip_count: int, rng: np.random.Generator) -> Genome:
        return self._mutate(genome, flip_count, rng)

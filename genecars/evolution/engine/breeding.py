from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from loguru import logger

from genecars.evolution.operators.guard import OperatorGuard
from genecars.evolution.selection.parent_selector import ParentSelector
from genecars.population.individual import Individual
from genecars.population.state import Origin
from genecars.utils.seed import StreamPurpose, stream


@dataclass(frozen=True)
class BreedingPlan:
    """Parameters shared by every breeding task of one generation."""

    seed: int
    generation: int
    crossover_rate: float
    flip_count: int


@dataclass(frozen=True)
class BreedResult:
    individual: Individual
    operator_failures: int


def breed_one(
    index: int,
    *,
    ranked: list[Individual],
    plan: BreedingPlan,
    selector: ParentSelector,
    guard: OperatorGuard,
) -> BreedResult:
    """Select two parents, cross them over and mutate the child.

    Reads only *ranked* and its own random stream, so tasks are independent.
    """
    rng = stream(plan.seed, plan.generation, StreamPurpose.BREED, index)
    parent_a, parent_b = selector.select_parents(ranked, rng)
    child, crossover_failed = guard.crossover(
        parent_a.genome, parent_b.genome, plan.crossover_rate, rng
    )
    child, mutate_failed = guard.mutate(child, plan.flip_count, rng)
    return BreedResult(
        individual=Individual(
            id=index,
            genome=child,
            origin=Origin.BRED,
            generation=plan.generation,
            parents=(parent_a.id, parent_b.id),
        ),
        operator_failures=int(crossover_failed) + int(mutate_failed),
    )


def breed_offspring(
    indices: range,
    *,
    ranked: list[Individual],
    plan: BreedingPlan,
    selector: ParentSelector,
    guard: OperatorGuard,
    max_workers: int = 1,
) -> list[BreedResult]:
    """Breed one individual per index, in index order.

    With ``max_workers > 1`` tasks run on a thread pool; the result is the
    same as a sequential run because each index owns its random stream.
    """
    if not indices:
        return []

    def task(i: int) -> BreedResult:
        return breed_one(i, ranked=ranked, plan=plan, selector=selector, guard=guard)

    if max_workers <= 1:
        results = [task(i) for i in indices]
    else:
        with ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="genecars-breed"
        ) as pool:
            results = list(pool.map(task, indices))

    logger.debug(
        "[breeding] Generation {}: bred {} individual(s) with {} worker(s)",
        plan.generation,
        len(results),
        max_workers,
    )
    return results

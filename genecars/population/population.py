from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator

from genecars.exceptions import InvariantViolation
from genecars.population.individual import Individual
from genecars.population.state import Origin


def rank_individuals(individuals: Iterable[Individual]) -> list[Individual]:
    """Sort descending by fitness; ties go to the lower id."""
    pool = list(individuals)
    missing = [ind.id for ind in pool if ind.fitness is None]
    if missing:
        raise ValueError(f"Cannot rank individuals without fitness: {missing}")
    return sorted(pool, key=lambda ind: (-ind.fitness, ind.id))


class Population:
    """Ordered individuals of one generation, indexed by id."""

    def __init__(self, generation: int, individuals: Iterable[Individual]):
        self.generation = generation
        self._individuals: tuple[Individual, ...] = tuple(individuals)

        ids = [ind.id for ind in self._individuals]
        if ids != list(range(len(ids))):
            duplicates = [i for i, n in Counter(ids).items() if n > 1]
            raise InvariantViolation(
                f"Generation {generation} ids must be 0..{len(ids) - 1} in order "
                f"(duplicates: {duplicates})"
            )
        lengths = {len(ind.genome) for ind in self._individuals}
        if len(lengths) > 1:
            raise InvariantViolation(
                f"Generation {generation} mixes genome lengths {sorted(lengths)}"
            )

    def __len__(self) -> int:
        return len(self._individuals)

    def __iter__(self) -> Iterator[Individual]:
        return iter(self._individuals)

    def __getitem__(self, individual_id: int) -> Individual:
        return self._individuals[individual_id]

    @property
    def individuals(self) -> list[Individual]:
        return list(self._individuals)

    def get(self, individual_id: int) -> Individual | None:
        if 0 <= individual_id < len(self._individuals):
            return self._individuals[individual_id]
        return None

    def pending_ids(self) -> list[int]:
        return [ind.id for ind in self._individuals if ind.fitness is None]

    def is_fully_evaluated(self) -> bool:
        return not self.pending_ids()

    def ranked(self) -> list[Individual]:
        return rank_individuals(self._individuals)

    def origin_counts(self) -> dict[Origin, int]:
        counts = Counter(ind.origin for ind in self._individuals)
        return {origin: counts.get(origin, 0) for origin in Origin}

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal

from loguru import logger
import numpy as np

from genecars.population.individual import Individual

SelectionPolicy = Literal["rank", "tournament", "roulette"]


class ParentSelector(ABC):
    """Chooses two parents from a ranked pool (best first).

    All randomness comes from the *rng* passed in, so a selector holds no
    mutable state and can be shared between breeding workers.
    """

    def select_parents(
        self, ranked: list[Individual], rng: np.random.Generator
    ) -> tuple[Individual, Individual]:
        """Return two parents, distinct whenever the pool holds at least two."""
        if not ranked:
            raise ValueError("Cannot select parents from an empty pool")
        if len(ranked) == 1:
            return ranked[0], ranked[0]

        first = self._pick(ranked, list(range(len(ranked))), rng)
        rest = [i for i in range(len(ranked)) if i != first]
        second = self._pick(ranked, rest, rng)
        return ranked[first], ranked[second]

    @abstractmethod
    def _pick(
        self, ranked: list[Individual], candidates: list[int], rng: np.random.Generator
    ) -> int:
        """Return one rank position out of *candidates*."""


class RankProportionalParentSelector(ParentSelector):
    """Linear rank weighting: rank position ``r`` of ``n`` weighs ``n - r``."""

    def _pick(
        self, ranked: list[Individual], candidates: list[int], rng: np.random.Generator
    ) -> int:
        n = len(ranked)
        weights = np.array([n - r for r in candidates], dtype=np.float64)
        return candidates[int(rng.choice(len(candidates), p=weights / weights.sum()))]


class TournamentParentSelector(ParentSelector):
    """Best of ``size`` candidates drawn without replacement."""

    def __init__(self, size: int = 3):
        if size < 1:
            raise ValueError(f"Tournament size must be at least 1, got {size}")
        self.size = size

    def _pick(
        self, ranked: list[Individual], candidates: list[int], rng: np.random.Generator
    ) -> int:
        k = min(self.size, len(candidates))
        entrants = rng.choice(len(candidates), size=k, replace=False)
        # lower rank position is fitter
        return min(candidates[int(i)] for i in entrants)


class RouletteParentSelector(ParentSelector):
    """Fitness-proportional selection, shifted to positive weights."""

    def _pick(
        self, ranked: list[Individual], candidates: list[int], rng: np.random.Generator
    ) -> int:
        fitnesses = np.array([ranked[r].fitness for r in candidates], dtype=np.float64)
        # scale into [-1, 1] first so shifting and summing cannot overflow
        scale = np.abs(fitnesses).max()
        if scale > 0:
            fitnesses = fitnesses / scale
        lowest = fitnesses.min()
        if lowest <= 0:
            fitnesses = fitnesses - lowest + 1e-6
        total = fitnesses.sum()
        if not np.isfinite(total) or total <= 0:
            return candidates[int(rng.integers(len(candidates)))]
        return candidates[int(rng.choice(len(candidates), p=fitnesses / total))]


def build_parent_selector(policy: SelectionPolicy, tournament_size: int = 3) -> ParentSelector:
    if policy == "rank":
        selector: ParentSelector = RankProportionalParentSelector()
    elif policy == "tournament":
        selector = TournamentParentSelector(tournament_size)
    elif policy == "roulette":
        selector = RouletteParentSelector()
    else:
        raise ValueError(f"Unknown selection policy: {policy}")
    logger.debug("[ParentSelector] Using {}", type(selector).__name__)
    return selector

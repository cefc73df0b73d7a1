from __future__ import annotations

import asyncio
import contextlib

from loguru import logger

from genecars.evolution.engine.core import GenerationManager
from genecars.harness.base import SimulationHarness


class EvolutionRunner:
    """Drives the evaluate -> report -> advance loop against a harness.

    The manager itself never waits; this runner owns the waiting. Pausing only
    idles the loop between generations and has no effect on engine state.
    """

    def __init__(
        self,
        manager: GenerationManager,
        harness: SimulationHarness,
        *,
        max_generations: int | None = None,
        max_concurrent_evaluations: int = 8,
        loop_interval: float = 0.0,
    ) -> None:
        if max_concurrent_evaluations < 1:
            raise ValueError("max_concurrent_evaluations must be at least 1")
        self._manager = manager
        self._harness = harness
        self.max_generations = max_generations
        self.loop_interval = loop_interval
        self._semaphore = asyncio.Semaphore(max_concurrent_evaluations)
        self._task: asyncio.Task | None = None
        self._running = False
        self._paused = False
        self._generations_run = 0

    async def run(self) -> None:
        logger.info(
            "[EvolutionRunner] Start | max_generations={}",
            self.max_generations if self.max_generations else "unlimited",
        )
        self._running = True
        try:
            while self._running:
                if self._paused:
                    await asyncio.sleep(max(self.loop_interval, 0.05))
                    continue
                if self._reached_generation_cap():
                    logger.info("[EvolutionRunner] Stop: max_generations={}", self.max_generations)
                    break

                if not await self.evaluate_generation():
                    continue
                self._manager.advance()
                self._generations_run += 1
                await asyncio.sleep(self.loop_interval)
        finally:
            self._running = False
            logger.info("[EvolutionRunner] Stopped after {} generation(s)", self._generations_run)

    async def evaluate_generation(self) -> bool:
        """Evaluate every individual still missing a fitness value.

        Returns False without reporting anything if the run was reset or
        restored while the harness was busy; those distances belong to
        genomes that no longer exist.
        """
        run = (self._manager.epoch, self._manager.generation)
        definitions = await asyncio.to_thread(self._manager.phenotypes)
        pending = self._manager.pending_ids()

        async def evaluate(individual_id: int) -> tuple[int, float]:
            async with self._semaphore:
                distance = await self._harness.evaluate(individual_id, definitions[individual_id])
            return individual_id, distance

        results = await asyncio.gather(*(evaluate(i) for i in pending))
        if (self._manager.epoch, self._manager.generation) != run:
            logger.info(
                "[EvolutionRunner] Run changed during evaluation; dropped {} stale result(s)",
                len(results),
            )
            return False
        for individual_id, distance in results:
            self._manager.report_fitness(individual_id, distance)
        return True

    def reseed(self, seed: str | int | None) -> None:
        """Discard the current run and start over from *seed*."""
        self._manager.reset(seed)
        self._generations_run = 0

    def start(self) -> None:
        if self._task and not self._task.done():
            return
        self._task = asyncio.create_task(self.run(), name="genecars-evolution")
        logger.info("[EvolutionRunner] Evolution task started")

    async def stop(self) -> None:
        self._running = False
        if self._task:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
            logger.info("[EvolutionRunner] Evolution task stopped")

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def is_running(self) -> bool:
        return self._running

    def get_status(self) -> dict[str, object]:
        return {
            "running": self._running,
            "paused": self._paused,
            "generations_run": self._generations_run,
            **self._manager.get_status(),
        }

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    def _reached_generation_cap(self) -> bool:
        cap = self.max_generations
        return cap is not None and self._generations_run >= cap

from __future__ import annotations

from loguru import logger

from genecars.population.individual import Individual


class EvolutionListener:
    """Presentation-side hooks. Every method is a no-op by default."""

    def on_generation_advanced(self, generation: int, individuals: list[Individual]) -> None:
        pass

    def on_champion(self, generation: int, individual_id: int, distance: float) -> None:
        pass

    def on_operator_warning(self, generation: int, message: str) -> None:
        pass


class LoggingListener(EvolutionListener):
    """Writes engine events to the log."""

    def on_generation_advanced(self, generation: int, individuals: list[Individual]) -> None:
        origins: dict[str, int] = {}
        for ind in individuals:
            origins[ind.origin.value] = origins.get(ind.origin.value, 0) + 1
        summary = ", ".join(f"{k}={v}" for k, v in sorted(origins.items()))
        logger.info("Generation {} ready | {} individuals ({})", generation, len(individuals), summary)

    def on_champion(self, generation: int, individual_id: int, distance: float) -> None:
        logger.info(
            "New high score: generation {} car #{} traveled {:.2f} m",
            generation,
            individual_id,
            distance,
        )

    def on_operator_warning(self, generation: int, message: str) -> None:
        logger.warning("Generation {}: {}", generation, message)

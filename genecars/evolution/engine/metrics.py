from __future__ import annotations

from pydantic import BaseModel, Field


class EngineMetrics(BaseModel):
    """Counters accumulated across generations of one run."""

    generations_advanced: int = Field(
        default=0, description="Number of completed generation advances"
    )
    fitness_reports: int = Field(default=0, description="Accepted fitness reports")
    individuals_cloned: int = Field(default=0)
    individuals_randomized: int = Field(default=0)
    individuals_bred: int = Field(default=0)
    operator_failures: int = Field(
        default=0, description="Operator calls replaced by the fallback"
    )
    champions_recorded: int = Field(
        default=0, description="Generation champions that entered the high-score ledger"
    )
    aborted_advances: int = Field(default=0)
    best_fitness: float | None = Field(default=None)

    def record_advance(
        self, cloned: int, randomized: int, bred: int, operator_failures: int
    ) -> None:
        self.generations_advanced += 1
        self.individuals_cloned += cloned
        self.individuals_randomized += randomized
        self.individuals_bred += bred
        self.operator_failures += operator_failures

    def record_fitness(self, fitness: float) -> None:
        self.fitness_reports += 1
        if self.best_fitness is None or fitness > self.best_fitness:
            self.best_fitness = fitness

    def to_dict(self) -> dict[str, object]:
        return self.model_dump()

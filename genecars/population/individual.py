from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from genecars.genome.genome import Genome
from genecars.population.state import Origin


class Individual(BaseModel):
    """One genome plus its generation-scoped metadata."""

    id: int = Field(ge=0, description="Sequential id within the generation")
    genome: Genome
    origin: Origin
    generation: int = Field(default=1, ge=1, description="Generation number")
    fitness: float | None = Field(
        default=None, description="Distance traveled, set once the harness reports it"
    )
    parents: tuple[int, ...] | None = Field(
        default=None,
        description="Previous-generation ids of the parents (bred) or source (cloned)",
    )

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra="forbid",
        validate_assignment=True,
    )

    @field_validator("fitness")
    @classmethod
    def validate_fitness(cls, v: float | None) -> float | None:
        if v is not None and not math.isfinite(v):
            raise ValueError(f"Fitness must be finite, got {v}")
        return v

    @property
    def has_fitness(self) -> bool:
        return self.fitness is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "genome": self.genome.to_bitstring(),
            "origin": self.origin.value,
            "generation": self.generation,
            "fitness": self.fitness,
            "parents": list(self.parents) if self.parents is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Individual:
        parents = data.get("parents")
        return cls(
            id=data["id"],
            genome=Genome.from_bitstring(data["genome"]),
            origin=Origin(data["origin"]),
            generation=data.get("generation", 1),
            fitness=data.get("fitness"),
            parents=tuple(parents) if parents is not None else None,
        )

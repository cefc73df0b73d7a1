from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from genecars.evolution.selection.parent_selector import SelectionPolicy
from genecars.evolution.storage.high_scores import DEFAULT_CAPACITY
from genecars.exceptions import ConfigurationError


class EvolutionConfig(BaseModel):
    """Configuration options controlling GenerationManager behaviour."""

    population_size: int = Field(default=20, gt=0)
    num_clones: int = Field(
        default=2, ge=0, description="Top performers copied verbatim into the next generation"
    )
    num_random: int = Field(
        default=2, ge=0, description="Freshly randomized individuals per generation"
    )
    crossover_rate: float = Field(default=0.4, ge=0.0, le=1.0)
    mutation_flip_count: int = Field(default=3, ge=0)
    high_score_capacity: int = Field(default=DEFAULT_CAPACITY, gt=0)
    selection: SelectionPolicy = Field(
        default="rank", description="Parent selection policy for bred individuals"
    )
    tournament_size: int = Field(default=3, gt=0)
    operator_script: str | None = Field(
        default=None,
        description="Registered name, dotted module or .py file with crossover/mutate",
    )
    max_workers: int = Field(
        default=1, gt=0, description="Threads used for breeding and decoding (1 = sequential)"
    )
    operator_failure_warning_threshold: int = Field(
        default=2,
        gt=0,
        description="Operator failures within one generation that trigger a warning",
    )
    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def _check_quotas(self) -> EvolutionConfig:
        if self.num_clones + self.num_random > self.population_size:
            raise ValueError(
                f"num_clones ({self.num_clones}) + num_random ({self.num_random}) "
                f"exceeds population_size ({self.population_size})"
            )
        return self

    @property
    def num_bred(self) -> int:
        return self.population_size - self.num_clones - self.num_random

    @classmethod
    def load(cls, data: Mapping[str, Any] | None = None, **overrides: Any) -> EvolutionConfig:
        """Validate external configuration, raising ConfigurationError on any problem."""
        values = {**(data or {}), **overrides}
        try:
            return cls(**values)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid evolution configuration: {exc}") from exc

"""Application configuration: pydantic models over an OmegaConf/YAML source."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from omegaconf import DictConfig, OmegaConf
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from genecars.evolution.engine.config import EvolutionConfig
from genecars.exceptions import ConfigurationError


class LoggingConfig(BaseModel):
    log_dir: str = "logs"
    level: str = "INFO"
    rotation: str = "50 MB"
    retention: str = "30 days"
    enable_colors: bool = True


class RunConfig(BaseModel):
    seed: str | int | None = Field(
        default=None, description="Seed text or integer; empty uses the current date-time"
    )
    max_generations: int | None = Field(default=None, gt=0)
    track_length: float = Field(default=500.0, gt=0)
    max_concurrent_evaluations: int = Field(default=8, gt=0)
    snapshot_path: str | None = Field(
        default=None, description="Write a snapshot here when the run ends"
    )
    resume_from: str | None = Field(default=None, description="Snapshot to resume from")


class AppConfig(BaseModel):
    evolution: EvolutionConfig = Field(default_factory=EvolutionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    run: RunConfig = Field(default_factory=RunConfig)

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> AppConfig:
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    @classmethod
    def from_omegaconf(cls, cfg: DictConfig) -> AppConfig:
        return cls.from_mapping(OmegaConf.to_container(cfg, resolve=True))


def load_config(path: str | Path, overrides: list[str] | None = None) -> AppConfig:
    """Load YAML at *path*, applying dotlist *overrides* such as ``evolution.num_clones=4``."""
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}")
    cfg = OmegaConf.load(path)
    if overrides:
        cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(overrides))
    return AppConfig.from_omegaconf(cfg)

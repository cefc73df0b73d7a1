"""Run snapshots: everything needed to resume a run at an evaluation boundary."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from loguru import logger
import orjson
from pydantic import BaseModel, Field

from genecars.population.state import GenerationState

SNAPSHOT_VERSION = 1


class RunSnapshot(BaseModel):
    version: int = Field(default=SNAPSHOT_VERSION)
    seed: int = Field(ge=0)
    generation: int = Field(ge=1)
    state: GenerationState
    config: dict[str, Any] = Field(default_factory=dict)
    individuals: list[dict[str, Any]] = Field(default_factory=list)
    high_scores: list[dict[str, Any]] = Field(default_factory=list)


def save_snapshot(snapshot: RunSnapshot, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(orjson.dumps(snapshot.model_dump(mode="json"), option=orjson.OPT_INDENT_2))
    logger.info(
        "[snapshot] Saved generation {} ({} individuals) to {}",
        snapshot.generation,
        len(snapshot.individuals),
        path,
    )
    return path


def load_snapshot(path: str | Path) -> RunSnapshot:
    path = Path(path)
    snapshot = RunSnapshot.model_validate(orjson.loads(path.read_bytes()))
    if snapshot.version != SNAPSHOT_VERSION:
        raise ValueError(
            f"Unsupported snapshot version {snapshot.version} in {path} (expected {SNAPSHOT_VERSION})"
        )
    return snapshot

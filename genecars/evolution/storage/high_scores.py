from __future__ import annotations

from collections.abc import Iterator

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CAPACITY = 20


class HighScoreEntry(BaseModel):
    """Best-ever result of one individual."""

    rank: int = Field(default=0, ge=0, description="1-based position, 0 until ranked")
    generation: int = Field(ge=1)
    individual_id: int = Field(ge=0)
    fitness: float

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.rank}. Generation {self.generation}, {self.fitness:.2f} m"


class HighScoreLedger:
    """Bounded list of the best entries, sorted descending by fitness.

    Ties keep the earlier generation first, then insertion order. Entries are
    never edited; re-ranking replaces them with copies carrying the new rank.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._entries: list[HighScoreEntry] = []

    def record(
        self, generation: int, individual_id: int, fitness: float
    ) -> HighScoreEntry | None:
        """Insert a result; returns the ranked entry, or None if it did not make the cut."""
        entry = HighScoreEntry(generation=generation, individual_id=individual_id, fitness=fitness)
        entries = self._entries + [entry]
        entries.sort(key=lambda e: (-e.fitness, e.generation))

        evicted = entries[self.capacity :]
        entries = entries[: self.capacity]
        self._entries = [
            e.model_copy(update={"rank": i}) for i, e in enumerate(entries, start=1)
        ]

        if any(e is entry for e in evicted):
            logger.debug(
                "[HighScoreLedger] gen={} id={} fitness={:.2f} below top {}",
                generation,
                individual_id,
                fitness,
                self.capacity,
            )
            return None
        kept = next(
            self._entries[i] for i, e in enumerate(entries) if e is entry
        )
        logger.debug("[HighScoreLedger] Recorded {}", kept)
        return kept

    def reset(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> tuple[HighScoreEntry, ...]:
        return tuple(self._entries)

    @property
    def best(self) -> HighScoreEntry | None:
        return self._entries[0] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HighScoreEntry]:
        return iter(self._entries)

    def to_list(self) -> list[dict]:
        return [e.model_dump() for e in self._entries]

    @classmethod
    def from_list(cls, capacity: int, data: list[dict]) -> HighScoreLedger:
        ledger = cls(capacity)
        for item in data:
            ledger.record(item["generation"], item["individual_id"], item["fitness"])
        return ledger

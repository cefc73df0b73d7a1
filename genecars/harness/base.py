from abc import ABC, abstractmethod

from genecars.genome.decoder import VehicleDefinition


class SimulationHarness(ABC):
    """Evaluates vehicles; the engine only ever sees the returned distance."""

    @abstractmethod
    async def evaluate(self, individual_id: int, definition: VehicleDefinition) -> float:
        """Run one vehicle and return the distance it traveled before failing."""

    async def close(self) -> None:
        """Release simulation resources."""

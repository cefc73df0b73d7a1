from genecars.harness.base import SimulationHarness
from genecars.harness.synthetic import SyntheticTrackHarness

__all__ = ["SimulationHarness", "SyntheticTrackHarness"]

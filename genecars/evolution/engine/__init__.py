from genecars.evolution.engine.config import EvolutionConfig
from genecars.evolution.engine.core import GenerationManager
from genecars.evolution.engine.metrics import EngineMetrics

__all__ = ["EngineMetrics", "EvolutionConfig", "GenerationManager"]

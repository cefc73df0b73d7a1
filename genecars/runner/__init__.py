from genecars.runner.evolution_runner import EvolutionRunner

__all__ = ["EvolutionRunner"]

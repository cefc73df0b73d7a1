class GeneCarsError(Exception):
    """Base for all genecars exceptions."""

    pass


# High-level families
class ConfigurationError(GeneCarsError):
    """Invalid configuration, rejected at load time."""

    pass


class EvolutionError(GeneCarsError):
    """Evolution process failures."""

    pass


class InvariantViolation(GeneCarsError):
    """Internal invariant broken; the run cannot continue."""

    pass


# Genome / phenotype subtypes
class InvalidGenomeLength(InvariantViolation):
    """Genome length does not match the decoder schema."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Genome has {actual} bits, schema expects {expected}")
        self.expected = expected
        self.actual = actual


class VehicleDefinitionError(GeneCarsError):
    """Vehicle definition field outside its declared range."""

    pass


# Configuration subtypes
class SeedParseError(ConfigurationError):
    """Seed text could not be parsed."""

    pass


# Operator subtypes
class OperatorLoadError(ConfigurationError):
    """Operator script could not be imported or lacks a required function."""

    pass


class OperatorFailure(GeneCarsError):
    """A genetic operator raised or returned a malformed genome."""

    pass


# Generation lifecycle subtypes
class IncompleteGeneration(EvolutionError):
    """Advance requested before every individual has a fitness value."""

    def __init__(self, pending: list[int]):
        super().__init__(
            f"{len(pending)} individual(s) still await fitness: {pending[:10]}"
        )
        self.pending = pending


class FitnessReportError(EvolutionError):
    """Fitness report rejected (unknown id, duplicate, non-finite, wrong state)."""

    pass

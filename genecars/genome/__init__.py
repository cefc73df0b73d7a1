from genecars.genome.decoder import VehicleDefinition, decode, validate_definition
from genecars.genome.genome import Genome
from genecars.genome.schema import DEFAULT_SCHEMA, GeneField, GenomeSchema

__all__ = [
    "DEFAULT_SCHEMA",
    "GeneField",
    "Genome",
    "GenomeSchema",
    "VehicleDefinition",
    "decode",
    "validate_definition",
]

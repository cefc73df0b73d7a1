from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field

from genecars.exceptions import InvalidGenomeLength, VehicleDefinitionError
from genecars.genome.genome import Genome
from genecars.genome.schema import DEFAULT_SCHEMA, FieldKind, GeneField, GenomeSchema

__all__ = ["VehicleDefinition", "decode", "decode_field", "validate_definition"]


class VehicleDefinition(BaseModel):
    """Decoded, range-checked parameters used to build a simulated vehicle."""

    body_points: tuple[float, ...] = Field(description="Distance of each body vertex from the center")
    body_density: float
    wheel_attachment: tuple[int, ...] = Field(description="Body point index each wheel is mounted on")
    wheel_radius: tuple[float, ...]
    wheel_density: tuple[float, ...]
    wheel_torque: float
    wheel_speed: float = Field(description="Motor speed in degrees per second")

    model_config = ConfigDict(frozen=True)

    @property
    def num_body_points(self) -> int:
        return len(self.body_points)

    @property
    def num_wheels(self) -> int:
        return len(self.wheel_radius)

    def body_vertices(self) -> list[tuple[float, float]]:
        """Polygon vertices around (0, 0), one per body point, evenly spaced from 0 degrees."""
        step = 2.0 * math.pi / self.num_body_points
        return [
            (d * math.cos(i * step), d * math.sin(i * step))
            for i, d in enumerate(self.body_points)
        ]


def decode_field(genome: Genome, gene: GeneField) -> float | int:
    raw = genome.field_value(gene.offset, gene.bits)
    if gene.kind is FieldKind.INDEX:
        return raw % (int(gene.high) + 1)

    fraction = raw / gene.max_raw
    if gene.kind is FieldKind.SQRT:
        fraction = math.sqrt(fraction)
    value = gene.low + fraction * (gene.high - gene.low)
    # float rounding can step just outside the range
    return min(max(value, gene.low), gene.high)


def decode(genome: Genome, schema: GenomeSchema = DEFAULT_SCHEMA) -> VehicleDefinition:
    """Map *genome* to a vehicle definition.

    Total over genomes of the schema's length: every bit pattern decodes to a
    valid definition. Any other length is an invariant violation.
    """
    if len(genome) != schema.genome_length:
        raise InvalidGenomeLength(schema.genome_length, len(genome))

    values: dict[str, list[float | int]] = {}
    for gene in schema.fields:
        values.setdefault(gene.name, []).append(decode_field(genome, gene))

    return VehicleDefinition(
        body_points=tuple(values["body_point"]),
        body_density=values["body_density"][0],
        wheel_attachment=tuple(int(v) for v in values["wheel_attachment"]),
        wheel_radius=tuple(values["wheel_radius"]),
        wheel_density=tuple(values["wheel_density"]),
        wheel_torque=values["wheel_torque"][0],
        wheel_speed=values["wheel_speed"][0],
    )


def validate_definition(
    definition: VehicleDefinition, schema: GenomeSchema = DEFAULT_SCHEMA
) -> None:
    """Raise :class:`VehicleDefinitionError` if any field is out of range."""
    if definition.num_body_points != schema.num_body_points:
        raise VehicleDefinitionError(
            f"Expected {schema.num_body_points} body points, got {definition.num_body_points}"
        )
    if not (
        len(definition.wheel_attachment)
        == len(definition.wheel_radius)
        == len(definition.wheel_density)
        == schema.num_wheels
    ):
        raise VehicleDefinitionError(f"Expected {schema.num_wheels} wheels on every wheel field")

    scalars = {
        "body_density": definition.body_density,
        "wheel_torque": definition.wheel_torque,
        "wheel_speed": definition.wheel_speed,
    }
    per_slot = {
        "body_point": definition.body_points,
        "wheel_attachment": definition.wheel_attachment,
        "wheel_radius": definition.wheel_radius,
        "wheel_density": definition.wheel_density,
    }
    for gene in schema.fields:
        value = scalars[gene.name] if gene.name in scalars else per_slot[gene.name][gene.slot]
        if not gene.low <= value <= gene.high:
            raise VehicleDefinitionError(
                f"{gene.name}[{gene.slot}]={value} outside [{gene.low}, {gene.high}]"
            )

"""Bit layout of a vehicle genome.

A schema is an ordered list of :class:`GeneField`s. Offsets are assigned in
declaration order, so the bit layout never changes for a given schema.
"""

from __future__ import annotations

from enum import Enum
import math

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

NUM_BODY_POINTS = 8
NUM_WHEELS = 2

MIN_BODY_POINT_DISTANCE = 0.1
MAX_BODY_POINT_DISTANCE = 1.5
MIN_BODY_DENSITY = 30.0
MAX_BODY_DENSITY = 300.0
MIN_WHEEL_RADIUS = 0.1
MAX_WHEEL_RADIUS = 0.8
MIN_WHEEL_DENSITY = 40.0
MAX_WHEEL_DENSITY = 200.0
MIN_WHEEL_TORQUE = 50.0
MAX_WHEEL_TORQUE = 600.0
# degrees per second
MIN_WHEEL_SPEED = 360.0
MAX_WHEEL_SPEED = 2160.0

SCALAR_BITS = 8


class FieldKind(str, Enum):
    LINEAR = "linear"
    SQRT = "sqrt"
    INDEX = "index"


class GeneField(BaseModel):
    """One encoded phenotype parameter."""

    name: str = Field(description="Phenotype attribute this field feeds")
    slot: int = Field(default=0, ge=0, description="Element index for per-point/per-wheel fields")
    offset: int = Field(ge=0, description="First bit of the field")
    bits: int = Field(gt=0, le=32, description="Field width in bits")
    low: float = Field(description="Smallest decoded value")
    high: float = Field(description="Largest decoded value")
    kind: FieldKind = FieldKind.LINEAR

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_range(self) -> GeneField:
        if self.low > self.high:
            raise ValueError(
                f"Invalid range for {self.name}[{self.slot}]: {self.low} > {self.high}"
            )
        return self

    @property
    def max_raw(self) -> int:
        return (1 << self.bits) - 1

    @property
    def end(self) -> int:
        return self.offset + self.bits


class GenomeSchema(BaseModel):
    """Ordered, non-overlapping gene fields plus the vehicle topology."""

    num_body_points: int = Field(gt=2)
    num_wheels: int = Field(gt=0)
    fields: tuple[GeneField, ...]

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_layout(self) -> GenomeSchema:
        cursor = 0
        for f in self.fields:
            if f.offset != cursor:
                raise ValueError(
                    f"Field {f.name}[{f.slot}] starts at bit {f.offset}, expected {cursor}"
                )
            cursor = f.end
        return self

    @computed_field
    @property
    def genome_length(self) -> int:
        return self.fields[-1].end if self.fields else 0

    def fields_named(self, name: str) -> list[GeneField]:
        return [f for f in self.fields if f.name == name]

    @classmethod
    def build(
        cls,
        num_body_points: int = NUM_BODY_POINTS,
        num_wheels: int = NUM_WHEELS,
        scalar_bits: int = SCALAR_BITS,
    ) -> GenomeSchema:
        """Lay out the standard vehicle genome for the given topology."""
        index_bits = max(1, math.ceil(math.log2(num_body_points)))
        specs: list[tuple[str, int, int, float, float, FieldKind]] = []
        for i in range(num_body_points):
            specs.append(("body_point", i, scalar_bits, MIN_BODY_POINT_DISTANCE, MAX_BODY_POINT_DISTANCE, FieldKind.LINEAR))
        specs.append(("body_density", 0, scalar_bits, MIN_BODY_DENSITY, MAX_BODY_DENSITY, FieldKind.SQRT))
        for i in range(num_wheels):
            specs.append(("wheel_attachment", i, index_bits, 0, num_body_points - 1, FieldKind.INDEX))
        for i in range(num_wheels):
            specs.append(("wheel_radius", i, scalar_bits, MIN_WHEEL_RADIUS, MAX_WHEEL_RADIUS, FieldKind.LINEAR))
        for i in range(num_wheels):
            specs.append(("wheel_density", i, scalar_bits, MIN_WHEEL_DENSITY, MAX_WHEEL_DENSITY, FieldKind.SQRT))
        specs.append(("wheel_torque", 0, scalar_bits, MIN_WHEEL_TORQUE, MAX_WHEEL_TORQUE, FieldKind.LINEAR))
        specs.append(("wheel_speed", 0, scalar_bits, MIN_WHEEL_SPEED, MAX_WHEEL_SPEED, FieldKind.LINEAR))

        fields = []
        offset = 0
        for name, slot, bits, low, high, kind in specs:
            fields.append(
                GeneField(name=name, slot=slot, offset=offset, bits=bits, low=low, high=high, kind=kind)
            )
            offset += bits
        return cls(num_body_points=num_body_points, num_wheels=num_wheels, fields=tuple(fields))


DEFAULT_SCHEMA = GenomeSchema.build()

"""Closed-form stand-in for the physics simulation.

Scores a vehicle from its geometry and drive train without stepping any
physics: a long, low wheelbase, wheels under the body and a good torque to
mass ratio carry a car further over a rougher or smoother track. Useful for
headless runs and end-to-end tests of the evolution loop.
"""

from __future__ import annotations

import math

from loguru import logger
import numpy as np

from genecars.genome.decoder import VehicleDefinition, validate_definition
from genecars.genome.schema import DEFAULT_SCHEMA, GenomeSchema
from genecars.harness.base import SimulationHarness
from genecars.utils.seed import parse_seed

GRAVITY = 9.8


class SyntheticTrackHarness(SimulationHarness):
    def __init__(
        self,
        seed: str | int | None = 0,
        track_length: float = 500.0,
        schema: GenomeSchema = DEFAULT_SCHEMA,
    ):
        if track_length <= 0:
            raise ValueError(f"track_length must be positive, got {track_length}")
        self.track_length = track_length
        self.schema = schema
        rng = np.random.default_rng(parse_seed(seed))
        # hill steepness along the track, one value per 10 m section
        self.slopes = rng.uniform(0.0, 0.6, size=max(1, int(track_length // 10)))
        self.roughness = float(self.slopes.mean())
        logger.debug(
            "[SyntheticTrackHarness] track_length={} sections={} roughness={:.3f}",
            track_length,
            self.slopes.size,
            self.roughness,
        )

    async def evaluate(self, individual_id: int, definition: VehicleDefinition) -> float:
        validate_definition(definition, self.schema)
        return self.score(definition)

    def score(self, definition: VehicleDefinition) -> float:
        vertices = np.array(definition.body_vertices())
        x, y = vertices[:, 0], vertices[:, 1]
        area = 0.5 * abs(float(np.dot(x, np.roll(y, 1)) - np.dot(y, np.roll(x, 1))))

        radii = np.array(definition.wheel_radius)
        wheel_mass = float(np.sum(math.pi * radii**2 * np.array(definition.wheel_density)))
        mass = area * definition.body_density + wheel_mass

        mounts = vertices[list(definition.wheel_attachment)]
        wheelbase = float(mounts[:, 0].max() - mounts[:, 0].min())
        # wheels hanging below the body keep it off the ground
        clearance = float(np.mean(radii - mounts[:, 1]))
        grounded = 1.0 / (1.0 + math.exp(-4.0 * clearance))

        span = float(np.max(definition.body_points))
        stability = wheelbase / (wheelbase + span)

        top_speed = math.radians(definition.wheel_speed) * float(radii.mean())
        climb = definition.wheel_torque * float(radii.sum()) / (mass * GRAVITY)

        # sections cleared until the first slope the drive train cannot climb
        cleared = 0
        for slope in self.slopes:
            if climb * stability * grounded < slope:
                break
            cleared += 1
        reach = cleared / self.slopes.size

        coast = 1.0 - math.exp(-top_speed * stability * grounded / (1.0 + self.roughness))
        return round(self.track_length * min(1.0, reach + (1.0 - reach) * 0.1 * coast), 6)

#!/usr/bin/env python3
"""
Decode a genome into its vehicle definition.

Usage:
    python tools/decode_genome.py --bits 0101...
    python tools/decode_genome.py --hex 3fa0...
    python tools/decode_genome.py --random --seed "\\x2A"
    python tools/decode_genome.py --snapshot run.json --individual 3
"""

from __future__ import annotations

from pathlib import Path
import sys

import click

from genecars.evolution.storage.snapshot import load_snapshot
from genecars.exceptions import GeneCarsError
from genecars.genome.decoder import decode
from genecars.genome.genome import Genome
from genecars.genome.schema import DEFAULT_SCHEMA
from genecars.population.individual import Individual
from genecars.utils.seed import StreamPurpose, parse_seed, stream


@click.command()
@click.option("--bits", type=str, default=None, help="Genome as a 0/1 string.")
@click.option("--hex", "hex_value", type=str, default=None, help="Genome as packed hex.")
@click.option("--random", "use_random", is_flag=True, help="Decode a random genome.")
@click.option("--seed", type=str, default="", help="Seed for --random (\\x hex, \\d decimal or text).")
@click.option(
    "--snapshot",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Run snapshot to read the genome from.",
)
@click.option("--individual", type=int, default=0, help="Individual id within --snapshot.")
def main(
    bits: str | None,
    hex_value: str | None,
    use_random: bool,
    seed: str,
    snapshot: Path | None,
    individual: int,
) -> None:
    """Print the vehicle definition a genome decodes to."""
    length = DEFAULT_SCHEMA.genome_length
    chosen = sum(x is not None and x is not False for x in (bits, hex_value, snapshot)) + int(use_random)
    if chosen != 1:
        raise click.UsageError("Give exactly one of --bits, --hex, --random, --snapshot")

    try:
        if bits is not None:
            genome = Genome.from_bitstring(bits)
        elif hex_value is not None:
            genome = Genome.from_hex(hex_value, length)
        elif snapshot is not None:
            run = load_snapshot(snapshot)
            records = [Individual.from_dict(d) for d in run.individuals]
            matches = [ind for ind in records if ind.id == individual]
            if not matches:
                raise click.BadParameter(f"No individual {individual} in {snapshot}")
            genome = matches[0].genome
            click.echo(f"Generation {run.generation}, individual {individual} ({matches[0].origin.value})")
        else:
            genome = Genome.random(length, stream(parse_seed(seed), 1, StreamPurpose.INITIAL, 0))

        definition = decode(genome, DEFAULT_SCHEMA)
    except (GeneCarsError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"genome ({len(genome)} bits): {genome.to_bitstring()}")
    click.echo(f"hex: {genome.to_hex()}")
    for name, value in definition.model_dump().items():
        if isinstance(value, (list, tuple)):
            value = ", ".join(f"{v:.3f}" if isinstance(v, float) else str(v) for v in value)
        elif isinstance(value, float):
            value = f"{value:.3f}"
        click.echo(f"  {name:<17} {value}")
    click.echo("  body_vertices     " + ", ".join(f"({x:.2f}, {y:.2f})" for x, y in definition.body_vertices()))


if __name__ == "__main__":
    main()

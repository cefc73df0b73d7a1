"""Seed parsing and per-individual random streams.

Seed text conventions:

* empty / ``None``: the current date-time string is used;
* ``\\x1F2E``: hexadecimal integer;
* ``\\d1234``: decimal integer;
* anything else: the string itself, hashed.

Strings are hashed with SHA-256 rather than ``hash()`` so that a seed gives
the same run in every process.
"""

from __future__ import annotations

from datetime import datetime
from enum import IntEnum
import hashlib

from loguru import logger
import numpy as np

from genecars.exceptions import SeedParseError

SEED_MASK = (1 << 64) - 1
HEX_PREFIX = "\\x"
DEC_PREFIX = "\\d"


class StreamPurpose(IntEnum):
    INITIAL = 0
    RANDOM_INJECTION = 1
    BREED = 2


def default_seed_string() -> str:
    return datetime.now().strftime("%A, %B %d, %Y %I:%M:%S %p")


def hash_seed_string(text: str) -> int:
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


def parse_seed(value: str | int | None) -> int:
    """Normalize a user-supplied seed to an unsigned 64-bit integer."""
    if isinstance(value, bool):
        raise SeedParseError(f"Seed must be a string or integer, got {value!r}")
    if isinstance(value, int):
        return value & SEED_MASK

    text = value if value is not None else ""
    if not text:
        text = default_seed_string()
        logger.info("[Seed] No seed entered, using seed string: {}", text)
        return hash_seed_string(text)

    if text.startswith(HEX_PREFIX):
        digits = text[len(HEX_PREFIX) :]
        try:
            seed = int(digits, 16)
        except ValueError:
            raise SeedParseError(f"Error parsing the hex value {digits!r}") from None
    elif text.startswith(DEC_PREFIX):
        digits = text[len(DEC_PREFIX) :]
        try:
            seed = int(digits, 10)
        except ValueError:
            raise SeedParseError(f"Error parsing the value {digits!r}") from None
    else:
        logger.info("[Seed] Using seed string: {}", text)
        return hash_seed_string(text)

    return seed & SEED_MASK


def stream(seed: int, generation: int, purpose: StreamPurpose, index: int) -> np.random.Generator:
    """Independent generator for one individual's random draws.

    Derived only from its coordinates, so draws do not depend on how many
    other individuals were built before it or on which thread builds it.
    """
    sequence = np.random.SeedSequence(
        entropy=seed, spawn_key=(generation, int(purpose), index)
    )
    return np.random.default_rng(sequence)

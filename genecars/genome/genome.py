from __future__ import annotations

from collections.abc import Iterable

import numpy as np

__all__ = ["Genome"]


class Genome:
    """Immutable fixed-length bit vector.

    Bits are stored in a read-only ``uint8`` array. Every transform returns a
    new ``Genome``; nothing mutates an existing one, so genomes can be shared
    freely between breeding workers.
    """

    __slots__ = ("_bits",)

    def __init__(self, bits: Iterable[int] | np.ndarray):
        arr = np.array(bits, dtype=np.uint8, copy=True)
        if arr.ndim != 1:
            raise ValueError(f"Genome bits must be one-dimensional, got shape {arr.shape}")
        if arr.size and arr.max() > 1:
            raise ValueError("Genome bits must be 0 or 1")
        arr.setflags(write=False)
        self._bits = arr

    # ------------------------------------------------------------------
    # constructors

    @classmethod
    def random(cls, length: int, rng: np.random.Generator) -> Genome:
        """Draw each bit independently from *rng*."""
        if length < 0:
            raise ValueError(f"length must be non-negative, got {length}")
        return cls(rng.integers(0, 2, size=length, dtype=np.uint8))

    @classmethod
    def zeros(cls, length: int) -> Genome:
        return cls(np.zeros(length, dtype=np.uint8))

    @classmethod
    def ones(cls, length: int) -> Genome:
        return cls(np.ones(length, dtype=np.uint8))

    @classmethod
    def from_bitstring(cls, text: str) -> Genome:
        text = text.strip()
        if any(c not in "01" for c in text):
            raise ValueError("Bit string may only contain '0' and '1'")
        return cls([int(c) for c in text])

    @classmethod
    def from_hex(cls, text: str, length: int) -> Genome:
        """Inverse of :meth:`to_hex`; *length* drops the padding bits."""
        raw = bytes.fromhex(text)
        bits = np.unpackbits(np.frombuffer(raw, dtype=np.uint8))
        if bits.size < length:
            raise ValueError(f"Hex value holds {bits.size} bits, {length} requested")
        return cls(bits[:length])

    # ------------------------------------------------------------------
    # access

    def __len__(self) -> int:
        return int(self._bits.size)

    @property
    def bits(self) -> np.ndarray:
        """Read-only view of the underlying bits."""
        return self._bits

    def bit(self, index: int) -> int:
        self._check_index(index)
        return int(self._bits[index])

    def field_value(self, offset: int, width: int) -> int:
        """Unsigned integer of bits ``[offset, offset + width)``, MSB first."""
        if width <= 0:
            raise ValueError(f"width must be positive, got {width}")
        self._check_index(offset)
        self._check_index(offset + width - 1)
        value = 0
        for b in self._bits[offset : offset + width]:
            value = (value << 1) | int(b)
        return value

    # ------------------------------------------------------------------
    # transforms

    def set_bit(self, index: int, value: int | bool) -> Genome:
        self._check_index(index)
        if int(value) not in (0, 1):
            raise ValueError(f"Bit value must be 0 or 1, got {value}")
        arr = self._bits.copy()
        arr[index] = int(value)
        return Genome(arr)

    def flip(self, positions: Iterable[int]) -> Genome:
        """Flip every listed position exactly once."""
        idx = np.asarray(list(positions), dtype=np.int64)
        if idx.size == 0:
            return self
        if np.unique(idx).size != idx.size:
            raise ValueError("Flip positions must be distinct")
        if idx.min() < 0 or idx.max() >= len(self):
            raise IndexError(
                f"Flip position out of range [0, {len(self)}): {idx.tolist()}"
            )
        arr = self._bits.copy()
        arr[idx] ^= 1
        return Genome(arr)

    def hamming_distance(self, other: Genome) -> int:
        if len(other) != len(self):
            raise ValueError(
                f"Cannot compare genomes of length {len(self)} and {len(other)}"
            )
        return int(np.count_nonzero(self._bits != other._bits))

    # ------------------------------------------------------------------
    # serialization

    def to_bitstring(self) -> str:
        return "".join("1" if b else "0" for b in self._bits)

    def to_hex(self) -> str:
        return np.packbits(self._bits).tobytes().hex()

    # ------------------------------------------------------------------

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self):
            raise IndexError(f"Bit index {index} out of range [0, {len(self)})")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Genome):
            return NotImplemented
        return bool(np.array_equal(self._bits, other._bits))

    def __hash__(self) -> int:
        return hash((len(self), self._bits.tobytes()))

    def __repr__(self) -> str:
        return f"Genome(len={len(self)}, hex={self.to_hex()})"

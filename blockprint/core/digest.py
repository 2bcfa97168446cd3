"""Blockhash digest value type.

A digest is an immutable, fixed-length byte string holding the N*N bits
produced by the band thresholder, packed MSB-first. Four sizes are
supported, keyed by the number of bits:

- 16-bit (4x4 grid)
- 64-bit (8x8 grid)
- 144-bit (12x12 grid)
- 256-bit (16x16 grid)
"""

import math
import string
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional, Union

_HEX_DIGITS = frozenset(string.hexdigits)


class BlockhashParseError(ValueError):
    """Raised when a hex string is not a valid digest of the target size."""

    def __init__(self, message: str = "invalid hash string") -> None:
        super().__init__(message)


class HashSize(IntEnum):
    """Supported digest sizes, valued by bit length."""

    BITS_16 = 16
    BITS_64 = 64
    BITS_144 = 144
    BITS_256 = 256

    @property
    def grid(self) -> int:
        """Number of grid cells per axis."""
        return math.isqrt(self.value)

    @property
    def bits(self) -> int:
        return self.value

    @property
    def byte_length(self) -> int:
        return self.value // 8

    @property
    def hex_length(self) -> int:
        return self.value // 4

    @property
    def band_size(self) -> int:
        """Number of cells in each of the four thresholding bands."""
        return self.value // 4

    @classmethod
    def from_byte_length(cls, length: int) -> "HashSize":
        """Look up the size whose digest is `length` bytes long.

        Raises:
            ValueError: If no supported size has that byte length
        """
        size = _SIZES_BY_BYTE_LENGTH.get(length)
        if size is None:
            raise ValueError(f"Unsupported digest length: {length} bytes")
        return size


_SIZES_BY_BYTE_LENGTH: Dict[int, HashSize] = {s.byte_length: s for s in HashSize}
_SIZES_BY_HEX_LENGTH: Dict[int, HashSize] = {s.hex_length: s for s in HashSize}


@dataclass(frozen=True, order=True)
class Digest:
    """A perceptual hash digest.

    Equality, ordering and hashing are those of the underlying bytes, so
    digests can be used in sets, as dict keys and in sorted containers.
    The constructor trusts its input; use `from_bytes` or `from_hex` to
    validate external data.
    """

    data: bytes

    @property
    def size(self) -> HashSize:
        return HashSize.from_byte_length(len(self.data))

    @property
    def bit_length(self) -> int:
        return len(self.data) * 8

    def distance(self, other: "Digest") -> int:
        """Compute the Hamming distance to another digest of the same size.

        Args:
            other: Digest to compare against

        Returns:
            Number of differing bits

        Raises:
            ValueError: If the digests differ in size
        """
        if len(self.data) != len(other.data):
            raise ValueError(
                f"Digest size mismatch: {self.bit_length} vs {other.bit_length} bits"
            )

        diff = int.from_bytes(self.data, "big") ^ int.from_bytes(other.data, "big")
        return bin(diff).count("1")

    def to_hex(self) -> str:
        return self.data.hex()

    def as_bytes(self) -> bytes:
        return self.data

    def to_int(self) -> int:
        """Return the digest as a big-endian unsigned integer."""
        return int.from_bytes(self.data, "big")

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview]) -> "Digest":
        """Build a digest from raw bytes.

        Raises:
            ValueError: If the length matches no supported digest size
        """
        data = bytes(data)
        HashSize.from_byte_length(len(data))
        return cls(data)

    @classmethod
    def from_hex(cls, text: str, size: Optional[HashSize] = None) -> "Digest":
        """Parse a hex string (either case) into a digest.

        Args:
            text: Hex digits, two per byte
            size: Expected digest size; inferred from the length if omitted

        Raises:
            BlockhashParseError: If the length or characters are invalid
        """
        if size is None:
            size = _SIZES_BY_HEX_LENGTH.get(len(text))
            if size is None:
                raise BlockhashParseError()
        elif len(text) != HashSize(size).hex_length:
            raise BlockhashParseError()

        if not all(c in _HEX_DIGITS for c in text):
            raise BlockhashParseError()

        return cls(bytes.fromhex(text))

    @classmethod
    def from_int(cls, value: int, size: HashSize) -> "Digest":
        """Build a digest from a big-endian unsigned integer.

        Raises:
            ValueError: If the value is negative or too large for `size`
        """
        size = HashSize(size)
        if value < 0 or value.bit_length() > size.bits:
            raise ValueError(f"Value does not fit in a {size.bits}-bit digest")
        return cls(value.to_bytes(size.byte_length, "big"))

    def __bytes__(self) -> bytes:
        return self.data

    def __str__(self) -> str:
        return self.to_hex()

    def __repr__(self) -> str:
        return f"Digest({self.to_hex()!r})"

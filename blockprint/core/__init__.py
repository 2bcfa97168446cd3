"""Core types for blockhash digests and pixel access."""

from .digest import BlockhashParseError, Digest, HashSize
from .pixels import (
    ArrayPixelSource,
    PillowPixelSource,
    PixelFormat,
    PixelSource,
    read_brightness,
)

__all__ = [
    "ArrayPixelSource",
    "BlockhashParseError",
    "Digest",
    "HashSize",
    "PillowPixelSource",
    "PixelFormat",
    "PixelSource",
    "read_brightness",
]

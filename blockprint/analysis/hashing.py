"""Pure functions for blockhash computation.

These functions compute perceptual digests from pixel sources without any
decoding policy of their own: callers hand in something implementing
`PixelSource` (or a file path for the Pillow convenience wrapper).

Digest sizes:
- 16-bit: 4x4 grid, coarse bucketing
- 64-bit: 8x8 grid, the usual choice for duplicate detection
- 144-bit: 12x12 grid
- 256-bit: 16x16 grid, most discriminating
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

import numpy as np
from PIL import Image

from ..core.config import settings
from ..core.digest import Digest, HashSize
from ..core.pixels import PillowPixelSource, PixelSource, read_brightness
from .aggregation import aggregate
from .thresholding import pack_bits, threshold_bands

logger = logging.getLogger(__name__)


def _digest_from_brightness(
    brightness: np.ndarray,
    size: HashSize,
    max_brightness: int,
) -> Digest:
    height, width = brightness.shape
    values = aggregate(brightness, size.grid)
    bits = threshold_bands(values, width, height, max_brightness)
    return Digest(pack_bits(bits))


def compute_digest(
    source: PixelSource,
    size: Union[HashSize, int] = HashSize.BITS_64,
) -> Digest:
    """Compute the blockhash of an image.

    Args:
        source: Image data
        size: Digest size in bits (16, 64, 144 or 256)

    Returns:
        Digest of `size` bits
    """
    size = HashSize(size)
    brightness = read_brightness(source)
    digest = _digest_from_brightness(brightness, size, source.max_brightness)

    height, width = brightness.shape
    logger.debug(
        f"Computed {size.bits}-bit blockhash {digest} for {width}x{height} image"
    )
    return digest


def blockhash16(source: PixelSource) -> Digest:
    return compute_digest(source, HashSize.BITS_16)


def blockhash64(source: PixelSource) -> Digest:
    return compute_digest(source, HashSize.BITS_64)


def blockhash144(source: PixelSource) -> Digest:
    return compute_digest(source, HashSize.BITS_144)


def blockhash256(source: PixelSource) -> Digest:
    return compute_digest(source, HashSize.BITS_256)


def compute_all_digests(source: PixelSource) -> Dict[HashSize, Digest]:
    """Compute every digest size for an image.

    The pixels are read once and shared between sizes.

    Args:
        source: Image data

    Returns:
        Dict mapping each HashSize to its digest
    """
    brightness = read_brightness(source)
    return {
        size: _digest_from_brightness(brightness, size, source.max_brightness)
        for size in HashSize
    }


def hash_image_file(
    image_path: Union[Path, str],
    size: Optional[Union[HashSize, int]] = None,
) -> Digest:
    """Decode an image file with Pillow and compute its blockhash.

    Args:
        image_path: Path to image file
        size: Digest size in bits (default from settings)

    Returns:
        Digest of the decoded image
    """
    if size is None:
        size = settings.hash_size

    with Image.open(image_path) as img:
        img.load()
        source = PillowPixelSource(img)

    return compute_digest(source, size)


def hamming_distance(
    hash1: Union[Digest, str],
    hash2: Union[Digest, str],
) -> int:
    """Compute Hamming distance between two digests.

    Args:
        hash1: First digest, or its hex form
        hash2: Second digest, or its hex form

    Returns:
        Number of differing bits

    Raises:
        BlockhashParseError: If a hex string is not a valid digest
        ValueError: If digest sizes don't match
    """
    return coerce_digest(hash1).distance(coerce_digest(hash2))


def similarity_score(hash1: Union[Digest, str], hash2: Union[Digest, str]) -> int:
    """Compute similarity percentage between two digests.

    Returns:
        Similarity as percentage 0-100 (100 = identical)
    """
    first = coerce_digest(hash1)
    distance = first.distance(coerce_digest(hash2))
    return int(100 * (1 - distance / first.bit_length))


def coerce_digest(value: Union[Digest, str]) -> Digest:
    """Return `value` as a Digest, parsing it if it is a hex string."""
    if isinstance(value, Digest):
        return value
    return Digest.from_hex(value)

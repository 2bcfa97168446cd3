"""Pure functions for band thresholding.

Cell values are split into four contiguous bands in row-major order and
each cell becomes one bit by comparison with its band's median.
"""

import numpy as np


def threshold_bands(
    values: np.ndarray,
    width: int,
    height: int,
    max_brightness: int,
) -> np.ndarray:
    """Convert cell values to bits using per-band medians.

    A cell is 1 when it is above its band's median. A cell equal to the
    median is 1 only if the median exceeds half of the maximum possible
    cell value, `max_brightness * width * height // 2`.

    Args:
        values: N*N cell values from the aggregator
        width: Image width in pixels
        height: Image height in pixels
        max_brightness: Brightness of a white pixel

    Returns:
        uint8 array of N*N bits in the same order as `values`
    """
    values = np.asarray(values, dtype=np.uint64)
    band_size = values.size // 4
    half = band_size // 2
    half_value = np.uint64(max_brightness * width * height // 2)

    bits = np.zeros(values.size, dtype=np.uint8)

    for offset in range(0, values.size, band_size):
        band = values[offset : offset + band_size]
        ordered = np.sort(band)
        median = (ordered[half - 1] + ordered[half]) // np.uint64(2)

        bright = (band > median) | ((band == median) & (median > half_value))
        bits[offset : offset + band_size] = bright

    return bits


def pack_bits(bits: np.ndarray) -> bytes:
    """Pack bits eight per byte, most significant bit first."""
    return np.packbits(np.asarray(bits, dtype=np.uint8), bitorder="big").tobytes()

"""Tests for pure band thresholding functions."""

import numpy as np

from blockprint.analysis.thresholding import pack_bits, threshold_bands


def test_threshold_each_band_against_its_median():
    """Bands are thresholded independently in cell order."""
    values = np.arange(16, dtype=np.uint64)
    bits = threshold_bands(values, 1, 1, 255)

    # Band [0, 1, 2, 3] has median 1; the tie stays dark below half brightness
    assert bits.tolist() == [0, 0, 1, 1] * 4


def test_threshold_tie_breaks_bright_above_half_value():
    """Values equal to the median become 1 when the median is above half."""
    values = np.arange(16, dtype=np.uint64)
    bits = threshold_bands(values, 1, 1, 0)
    assert bits.tolist() == [0, 1, 1, 1] * 4


def test_threshold_median_is_floored():
    """The median of two middle values rounds down."""
    values = np.array([0, 0, 3, 3] * 4, dtype=np.uint64)
    bits = threshold_bands(values, 1, 1, 255)
    # median (0 + 3) // 2 == 1
    assert bits.tolist() == [0, 0, 1, 1] * 4


def test_threshold_constant_bright_band():
    """A constant band above half brightness is all ones."""
    values = np.full(64, 765 * 4, dtype=np.uint64)
    bits = threshold_bands(values, 2, 2, 765)
    assert bits.tolist() == [1] * 64


def test_threshold_constant_dark_band():
    """A constant band at or below half brightness is all zeros."""
    values = np.full(64, 765 * 2, dtype=np.uint64)
    bits = threshold_bands(values, 2, 2, 765)
    assert bits.tolist() == [0] * 64


def test_threshold_bands_are_independent():
    """A bright band does not affect the bits of a dark band."""
    values = np.array(
        [10, 20, 30, 40] + [1000, 2000, 3000, 4000] + [5, 5, 6, 6] + [0, 0, 0, 0],
        dtype=np.uint64,
    )
    bits = threshold_bands(values, 1, 1, 765)
    assert bits.tolist() == [0, 0, 1, 1, 0, 0, 1, 1, 0, 0, 1, 1, 0, 0, 0, 0]


def test_pack_bits_msb_first():
    """Bits are packed eight per byte, first bit most significant."""
    bits = [1, 0, 0, 0, 0, 0, 0, 0] + [0, 0, 0, 0, 0, 0, 0, 1]
    assert pack_bits(np.array(bits)) == bytes([0x80, 0x01])


def test_pack_bits_length():
    """256 bits pack into 32 bytes."""
    assert len(pack_bits(np.ones(256, dtype=np.uint8))) == 32

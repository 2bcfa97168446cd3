"""Pixel sources and brightness.

The hashing pipeline only needs two capabilities from an image: its
dimensions and the brightness of a pixel. `PixelSource` describes that
contract; `ArrayPixelSource` and `PillowPixelSource` adapt numpy arrays and
decoded Pillow images to it.

Brightness is the grey value for luma pixels and R+G+B for colour pixels.
A pixel whose alpha channel is exactly 0 counts as maximum brightness.
"""

from enum import Enum
from typing import Optional, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np
from PIL import Image


class PixelFormat(Enum):
    """Channel layout and bit depth of a pixel."""

    LUMA8 = (1, 8)
    LUMA_ALPHA8 = (2, 8)
    RGB8 = (3, 8)
    RGBA8 = (4, 8)
    LUMA16 = (1, 16)
    LUMA_ALPHA16 = (2, 16)
    RGB16 = (3, 16)
    RGBA16 = (4, 16)

    def __init__(self, channels: int, bit_depth: int) -> None:
        self.channels = channels
        self.bit_depth = bit_depth

    @property
    def has_alpha(self) -> bool:
        return self.channels in (2, 4)

    @property
    def color_channels(self) -> int:
        return 3 if self.channels >= 3 else 1

    @property
    def max_brightness(self) -> int:
        return ((1 << self.bit_depth) - 1) * self.color_channels

    @classmethod
    def from_layout(cls, channels: int, bit_depth: int) -> "PixelFormat":
        for fmt in cls:
            if fmt.channels == channels and fmt.bit_depth == bit_depth:
                return fmt
        raise ValueError(
            f"Unsupported pixel layout: {channels} channels at {bit_depth} bits"
        )


def pixel_brightness(pixel_format: PixelFormat, channels: Sequence[int]) -> int:
    """Compute the brightness of a single pixel.

    Args:
        pixel_format: Layout of `channels`
        channels: Channel values in L, LA, RGB or RGBA order

    Returns:
        Brightness in 0..pixel_format.max_brightness
    """
    if pixel_format.has_alpha and int(channels[-1]) == 0:
        return pixel_format.max_brightness
    return sum(int(c) for c in channels[: pixel_format.color_channels])


def brightness_from_array(array: np.ndarray, pixel_format: PixelFormat) -> np.ndarray:
    """Vectorised `pixel_brightness` over an (H, W) or (H, W, C) array."""
    data = np.asarray(array)
    if data.ndim == 2:
        data = data[:, :, np.newaxis]

    values = data[:, :, : pixel_format.color_channels].sum(axis=2, dtype=np.uint64)
    if pixel_format.has_alpha:
        values[data[:, :, -1] == 0] = pixel_format.max_brightness
    return values


@runtime_checkable
class PixelSource(Protocol):
    """Read-only access to decoded image data.

    `brightness` is only called with 0 <= x < width and 0 <= y < height,
    and must return the same value for repeated reads of a coordinate.
    """

    @property
    def max_brightness(self) -> int: ...

    def dimensions(self) -> Tuple[int, int]: ...

    def brightness(self, x: int, y: int) -> int: ...


def infer_pixel_format(array: np.ndarray) -> PixelFormat:
    """Guess the pixel format of an array from its shape and dtype.

    Raises:
        ValueError: If the dtype is not uint8/uint16 or the shape is not
            (H, W) or (H, W, C) with 1 to 4 channels
    """
    if array.dtype == np.uint8:
        bit_depth = 8
    elif array.dtype == np.uint16:
        bit_depth = 16
    else:
        raise ValueError(f"Unsupported pixel dtype: {array.dtype}")

    if array.ndim == 2:
        channels = 1
    elif array.ndim == 3:
        channels = array.shape[2]
    else:
        raise ValueError(f"Unsupported array shape: {array.shape}")

    return PixelFormat.from_layout(channels, bit_depth)


class ArrayPixelSource:
    """Pixel source backed by a numpy array in (row, column[, channel]) order."""

    def __init__(
        self, array: np.ndarray, pixel_format: Optional[PixelFormat] = None
    ) -> None:
        array = np.asarray(array)
        if pixel_format is None:
            pixel_format = infer_pixel_format(array)

        channels = 1 if array.ndim == 2 else array.shape[-1]
        if array.ndim not in (2, 3) or channels != pixel_format.channels:
            raise ValueError(
                f"Array of shape {array.shape} does not match {pixel_format.name}"
            )

        self._array = array
        self.pixel_format = pixel_format

    @property
    def max_brightness(self) -> int:
        return self.pixel_format.max_brightness

    def dimensions(self) -> Tuple[int, int]:
        height, width = self._array.shape[:2]
        return width, height

    def brightness(self, x: int, y: int) -> int:
        pixel = self._array[y, x]
        if self._array.ndim == 2:
            pixel = (pixel,)
        return pixel_brightness(self.pixel_format, pixel)

    def brightness_array(self) -> np.ndarray:
        return brightness_from_array(self._array, self.pixel_format)


_PIL_MODE_FORMATS = {
    "L": PixelFormat.LUMA8,
    "LA": PixelFormat.LUMA_ALPHA8,
    "RGB": PixelFormat.RGB8,
    "RGBA": PixelFormat.RGBA8,
    "I;16": PixelFormat.LUMA16,
    "I;16L": PixelFormat.LUMA16,
    "I;16B": PixelFormat.LUMA16,
    "I;16N": PixelFormat.LUMA16,
}


class PillowPixelSource(ArrayPixelSource):
    """Pixel source for a decoded `PIL.Image.Image`.

    L, LA, RGB, RGBA and 16-bit greyscale images are read as-is. 32-bit
    integer greyscale is clipped to 16 bits, bilevel and float images are
    read as 8-bit greyscale, and everything else (palette, CMYK, YCbCr, ...)
    is converted to RGBA when it carries transparency and to RGB otherwise.
    """

    def __init__(self, image: Image.Image) -> None:
        mode = image.mode
        if mode in _PIL_MODE_FORMATS:
            array = np.asarray(image)
            pixel_format = _PIL_MODE_FORMATS[mode]
        elif mode == "I":
            array = np.asarray(image, dtype=np.int64).clip(0, 0xFFFF).astype(np.uint16)
            pixel_format = PixelFormat.LUMA16
        elif mode in ("1", "F"):
            array = np.asarray(image.convert("L"))
            pixel_format = PixelFormat.LUMA8
        elif "A" in image.getbands() or "transparency" in image.info:
            array = np.asarray(image.convert("RGBA"))
            pixel_format = PixelFormat.RGBA8
        else:
            array = np.asarray(image.convert("RGB"))
            pixel_format = PixelFormat.RGB8

        super().__init__(array, pixel_format)
        self.mode = mode


def read_brightness(source: PixelSource) -> np.ndarray:
    """Read the brightness of every pixel into an (H, W) uint64 array.

    Sources exposing `brightness_array()` are read in one call; any other
    source is scanned pixel by pixel.

    Raises:
        ValueError: If the source is empty or its bulk read has the wrong shape
    """
    width, height = source.dimensions()
    if width < 1 or height < 1:
        raise ValueError(f"Image must be at least 1x1, got {width}x{height}")

    bulk_read = getattr(source, "brightness_array", None)
    if bulk_read is not None:
        values = np.asarray(bulk_read(), dtype=np.uint64)
        if values.shape != (height, width):
            raise ValueError(
                f"Brightness array shape {values.shape} does not match "
                f"{width}x{height} image"
            )
        return values

    values = np.empty((height, width), dtype=np.uint64)
    for y in range(height):
        for x in range(width):
            values[y, x] = source.brightness(x, y)
    return values

"""Pure functions for block aggregation.

The image is divided into an N x N grid and every cell receives the
brightness of the pixels it covers, weighted by the covered area. Values
are unsigned 64-bit integers in row-major cell order.

Each pixel is treated as an N x N square and each cell as a W x H
rectangle, so all weights are integers and a full cell of maximum
brightness sums to MAX_BRIGHTNESS * W * H whatever the strategy.

Strategies:
- aligned: W and H are multiples of N, every pixel falls in one cell
- box_filtered: W, H >= N, a pixel overlaps at most 2 x 2 cells
- generic: any W, H >= 1, a pixel may span a run of cells on each axis
"""

import logging
from enum import Enum
from typing import Callable, Dict, NamedTuple, Optional

import numpy as np

logger = logging.getLogger(__name__)


class AggregationStrategy(str, Enum):
    """Aggregation algorithm, chosen from the image and grid dimensions."""

    ALIGNED = "aligned"
    BOX_FILTERED = "box_filtered"
    GENERIC = "generic"


def select_strategy(width: int, height: int, grid: int) -> AggregationStrategy:
    """Pick the cheapest aggregation strategy valid for the dimensions."""
    if width % grid == 0 and height % grid == 0:
        return AggregationStrategy.ALIGNED
    if width >= grid and height >= grid:
        return AggregationStrategy.BOX_FILTERED
    return AggregationStrategy.GENERIC


def aggregate_aligned(brightness: np.ndarray, grid: int) -> np.ndarray:
    """Sum brightness per cell when the grid divides both dimensions.

    Each pixel is scaled by N*N so values match the weighted strategies.

    Raises:
        ValueError: If the dimensions are not multiples of `grid`
    """
    height, width = brightness.shape
    if width % grid or height % grid:
        raise ValueError(f"{width}x{height} image is not aligned to a {grid} grid")

    block_height = height // grid
    block_width = width // grid

    blocks = brightness.reshape(grid, block_height, grid, block_width)
    values = blocks.sum(axis=(1, 3), dtype=np.uint64) * np.uint64(grid * grid)
    return values.reshape(grid * grid)


class _AxisCursor(NamedTuple):
    """Per-coordinate split of a pixel between its current and next block."""

    low: np.ndarray
    high: np.ndarray
    weight_low: np.ndarray
    weight_high: np.ndarray


def _box_axis(length: int, grid: int) -> _AxisCursor:
    """Sweep one axis for the box-filtered strategy (length >= grid)."""
    low = np.empty(length, dtype=np.intp)
    high = np.empty(length, dtype=np.intp)
    weight_low = np.empty(length, dtype=np.uint64)
    weight_high = np.empty(length, dtype=np.uint64)

    block_high = 0
    w_low, w_high = grid, 0

    for coord in range(length):
        block_low = block_high

        end = (coord + 1) * grid % length
        if end < grid:
            block_high += 1
            w_low = grid - end
            w_high = end

        low[coord] = block_low
        # Past the last block the weight is zero, so any valid index will do
        high[coord] = block_high if block_high < grid else 0
        weight_low[coord] = w_low
        weight_high[coord] = w_high

    return _AxisCursor(low, high, weight_low, weight_high)


def aggregate_box_filtered(brightness: np.ndarray, grid: int) -> np.ndarray:
    """Area-weighted sums when every pixel overlaps at most 2 x 2 cells.

    Raises:
        ValueError: If either dimension is smaller than `grid`
    """
    height, width = brightness.shape
    if width < grid or height < grid:
        raise ValueError(f"{width}x{height} image is smaller than a {grid} grid")

    rows = _box_axis(height, grid)
    cols = _box_axis(width, grid)

    values = np.zeros((grid, grid), dtype=np.uint64)

    for row_idx, row_weight in (
        (rows.low, rows.weight_low),
        (rows.high, rows.weight_high),
    ):
        for col_idx, col_weight in (
            (cols.low, cols.weight_low),
            (cols.high, cols.weight_high),
        ):
            contribution = (
                brightness * row_weight[:, np.newaxis] * col_weight[np.newaxis, :]
            )
            np.add.at(
                values,
                (row_idx[:, np.newaxis], col_idx[np.newaxis, :]),
                contribution,
            )

    return values.reshape(grid * grid)


def _generic_axis_weights(length: int, grid: int) -> np.ndarray:
    """Weight of every cell for every pixel along one axis.

    Returns a (length, grid) matrix whose row for a pixel holds its partial
    weights on the first and last cell it touches and the full weight
    `length` on every cell strictly between them.
    """
    weights = np.zeros((length, grid), dtype=np.uint64)

    block_high = 0
    w_low, w_high = grid, 0

    for coord in range(length):
        block_low = block_high

        end = (coord + 1) * grid % length
        if end < grid:
            block_high = (coord + 1) * grid // length
            w_low = (grid - 1 - end) % length + 1
            w_high = end

        weights[coord, block_low] += w_low
        weights[coord, block_high if block_high < grid else 0] += w_high
        weights[coord, block_low + 1 : block_high] += length

    return weights


def aggregate_generic(brightness: np.ndarray, grid: int) -> np.ndarray:
    """Exact area-weighted sums for any image and grid size.

    Combines corner, edge and interior contributions per pixel; since the
    weight of a pixel on a cell is the product of its row and column
    weights, the whole grid is `row_weights.T @ brightness @ col_weights`.
    """
    height, width = brightness.shape

    row_weights = _generic_axis_weights(height, grid)
    col_weights = _generic_axis_weights(width, grid)

    values = row_weights.T @ brightness.astype(np.uint64) @ col_weights
    return values.reshape(grid * grid)


_AGGREGATORS: Dict[AggregationStrategy, Callable[[np.ndarray, int], np.ndarray]] = {
    AggregationStrategy.ALIGNED: aggregate_aligned,
    AggregationStrategy.BOX_FILTERED: aggregate_box_filtered,
    AggregationStrategy.GENERIC: aggregate_generic,
}


def aggregate(
    brightness: np.ndarray,
    grid: int,
    strategy: Optional[AggregationStrategy] = None,
) -> np.ndarray:
    """Compute the weighted brightness of every grid cell.

    Args:
        brightness: (H, W) array of per-pixel brightness
        grid: Number of cells per axis (N)
        strategy: Force a strategy instead of selecting one

    Returns:
        uint64 array of N*N cell values in row-major order
    """
    brightness = np.asarray(brightness, dtype=np.uint64)
    height, width = brightness.shape

    if strategy is None:
        strategy = select_strategy(width, height, grid)

    logger.debug(
        f"Aggregating {width}x{height} image into {grid}x{grid} grid "
        f"using {strategy.value} strategy"
    )
    return _AGGREGATORS[AggregationStrategy(strategy)](brightness, grid)

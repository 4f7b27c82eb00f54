"""Block-average pixelation on RGBA NumPy arrays.

The image is split into a grid of ``block x block`` cells (the last column
and row may be narrower). Each cell is collapsed to the truncated integer
mean of its pixels, and the grid is then expanded back to the original size.

Both stages fan out over a thread pool. Work is split into one contiguous
range per worker (block indices for averaging, output rows for
reconstruction) and every range writes its own slice of a preallocated
array, so results never depend on scheduling order.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import numpy as np

logger = logging.getLogger(__name__)

EMPTY_BLOCK_COLOR = np.array([0, 0, 0, 255], dtype=np.uint8)


def default_workers() -> int:
    return os.cpu_count() or 1


def _partition(total: int, parts: int) -> list[tuple[int, int]]:
    """Split ``range(total)`` into at most *parts* contiguous (start, stop) ranges."""
    parts = max(1, min(parts, total))
    step, extra = divmod(total, parts)
    ranges = []
    start = 0
    for i in range(parts):
        stop = start + step + (1 if i < extra else 0)
        if stop > start:
            ranges.append((start, stop))
        start = stop
    return ranges


def _run_partitioned(
    task: Callable[[int, int], None],
    total: int,
    workers: int | None,
) -> None:
    workers = workers or default_workers()
    ranges = _partition(total, workers)
    if len(ranges) <= 1:
        for start, stop in ranges:
            task(start, stop)
        return
    with ThreadPoolExecutor(max_workers=len(ranges)) as pool:
        # list() re-raises the first exception from any worker
        list(pool.map(lambda r: task(*r), ranges))


def _check_rgba(rgba: np.ndarray) -> None:
    if not isinstance(rgba, np.ndarray) or rgba.ndim != 3 or rgba.shape[2] != 4:
        raise ValueError("rgba must be an RGBA image with shape (H, W, 4)")
    if rgba.dtype != np.uint8:
        raise ValueError("rgba must have dtype=uint8")


def block_means(sums: np.ndarray, counts: np.ndarray) -> np.ndarray:
    """Truncating per-channel mean of summed blocks.

    Args:
        sums:   (N, 4) uint64 channel sums.
        counts: (N,) pixel count of each block.

    Returns:
        (N, 4) uint8. Blocks with no pixels become opaque black.
    """
    counts = np.asarray(counts, dtype=np.uint64)
    means = sums // np.maximum(counts, 1)[:, np.newaxis]
    out = means.astype(np.uint8)
    out[counts == 0] = EMPTY_BLOCK_COLOR
    return out


def average_blocks(
    rgba: np.ndarray,
    block_size: int,
    workers: int | None = None,
) -> tuple[np.ndarray, int, int]:
    """Average every ``block_size`` square of *rgba* into one colour.

    Args:
        rgba:       (H, W, 4) uint8 source image (read only).
        block_size: Block side in source pixels; values below 1 become 1.
        workers:    Thread count (default: ``os.cpu_count()``).

    Returns:
        ``(table, blocks_x, blocks_y)`` where *table* is a read-only
        (blocks_x * blocks_y, 4) uint8 array in row-major block order.
    """
    _check_rgba(rgba)
    h, w = rgba.shape[:2]
    b = max(1, int(block_size))
    blocks_x = -(-w // b)
    blocks_y = -(-h // b)
    total = blocks_x * blocks_y

    table = np.empty((total, 4), dtype=np.uint8)

    def average_range(start: int, stop: int) -> None:
        idx = start
        while idx < stop:
            # one run of blocks sharing a block row
            by, bx0 = divmod(idx, blocks_x)
            bx1 = min(blocks_x, bx0 + (stop - idx))
            y0, y1 = by * b, min(by * b + b, h)
            x0, x1 = bx0 * b, min(bx1 * b, w)

            columns = rgba[y0:y1, x0:x1].sum(axis=0, dtype=np.uint64)
            starts = np.arange(0, x1 - x0, b)
            sums = np.add.reduceat(columns, starts, axis=0)
            widths = np.minimum(starts + b, x1 - x0) - starts
            table[idx:idx + len(starts)] = block_means(sums, widths * (y1 - y0))
            idx += bx1 - bx0

    t0 = time.perf_counter()
    _run_partitioned(average_range, total, workers)
    table.flags.writeable = False
    logger.debug(
        "Averaged %dx%d blocks of %dpx  (%.3f s)",
        blocks_x, blocks_y, b, time.perf_counter() - t0,
    )
    return table, blocks_x, blocks_y


def reconstruct_mosaic(
    block_colors: np.ndarray,
    blocks_x: int,
    width: int,
    height: int,
    block_size: int,
    workers: int | None = None,
) -> np.ndarray:
    """Expand a block colour table back to a full (height, width, 4) image.

    Pixel ``(x, y)`` takes ``block_colors[(y // b) * blocks_x + x // b]``.
    Rows are filled in parallel; each worker owns a contiguous band of rows.
    """
    b = max(1, int(block_size))
    blocks_y = -(-height // b)
    if len(block_colors) != blocks_x * blocks_y or blocks_x != -(-width // b):
        raise ValueError(
            f"Block table of {len(block_colors)} entries does not cover a "
            f"{width}x{height} image with block size {b}"
        )

    out = np.empty((height, width, 4), dtype=np.uint8)
    column_blocks = np.arange(width) // b

    def fill_rows(y0: int, y1: int) -> None:
        row_blocks = np.arange(y0, y1) // b * blocks_x
        out[y0:y1] = block_colors[row_blocks[:, np.newaxis] + column_blocks]

    t0 = time.perf_counter()
    _run_partitioned(fill_rows, height, workers)
    logger.debug(
        "Reconstructed %dx%d mosaic  (%.3f s)", width, height, time.perf_counter() - t0,
    )
    return out


def pixelate(
    rgba: np.ndarray,
    block_size: int,
    workers: int | None = None,
) -> np.ndarray:
    """Pixelate an RGBA image, keeping its original size.

    Returns:
        (H, W, 4) uint8 mosaic.
    """
    table, blocks_x, _ = average_blocks(rgba, block_size, workers)
    h, w = rgba.shape[:2]
    return reconstruct_mosaic(table, blocks_x, w, h, block_size, workers)

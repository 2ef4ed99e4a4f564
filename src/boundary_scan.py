"""
Boundary scanning along sweep lines.

A sweep line is a row, a column, or one of two diagonal families:
- DIAG_SUM lines hold every pixel with x + y = k
- DIAG_DIFF lines hold every pixel with x - y = k

scan_line() finds the first and last foreground pixel on a line in scan
order. A line without foreground pixels returns None, which is the normal
outcome while the sweep has not reached the shape yet.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

Point = Tuple[float, float]


class LineKind(str, Enum):
    ROW = "row"              # fixed y
    COLUMN = "column"        # fixed x
    DIAG_SUM = "diag_sum"    # x + y = k
    DIAG_DIFF = "diag_diff"  # x - y = k


@dataclass(frozen=True)
class SweepLine:
    """
    Concrete sweep line resolved from a scan phase and a progress value.

    Attributes:
        kind: Line family
        index: Row y, column x, or diagonal index k
        reverse: Scan from high x (or y for columns) to low
    """
    kind: LineKind
    index: int
    reverse: bool = False


@dataclass(frozen=True)
class BoundaryHit:
    """Extreme foreground pixels on a sweep line, in scan order."""
    first: Tuple[int, int]
    last: Tuple[int, int]

    @property
    def midpoint(self) -> Point:
        fx, fy = self.first
        lx, ly = self.last
        return (fx + (lx - fx) / 2.0, fy + (ly - fy) / 2.0)


def line_pixels(shape: Tuple[int, ...], line: SweepLine) -> Tuple[np.ndarray, np.ndarray]:
    """
    List the pixel coordinates of a sweep line in scan order.

    Args:
        shape: Mask shape (height, width)
        line: Sweep line to enumerate

    Returns:
        Tuple of (xs, ys) integer arrays, empty if the line misses the grid
    """
    height, width = shape[:2]
    k = int(line.index)

    if line.kind is LineKind.ROW:
        if 0 <= k < height:
            xs = np.arange(width, dtype=np.intp)
            ys = np.full(width, k, dtype=np.intp)
        else:
            xs = ys = np.empty(0, dtype=np.intp)

    elif line.kind is LineKind.COLUMN:
        if 0 <= k < width:
            ys = np.arange(height, dtype=np.intp)
            xs = np.full(height, k, dtype=np.intp)
        else:
            xs = ys = np.empty(0, dtype=np.intp)

    elif line.kind is LineKind.DIAG_SUM:
        x_start = max(0, k - height + 1)
        x_end = min(k, width - 1)
        xs = np.arange(x_start, x_end + 1, dtype=np.intp)
        ys = k - xs

    elif line.kind is LineKind.DIAG_DIFF:
        xs = np.arange(width, dtype=np.intp)
        ys = xs - k
        valid = (ys >= 0) & (ys < height)
        xs = xs[valid]
        ys = ys[valid]

    else:
        raise ValueError(f"Unknown sweep line kind: {line.kind}")

    if line.reverse:
        xs = xs[::-1]
        ys = ys[::-1]

    return xs, ys


def scan_line(mask: np.ndarray, line: SweepLine) -> Optional[BoundaryHit]:
    """
    Find the first and last foreground pixel along a sweep line.

    Args:
        mask: HxW boolean mask, True for foreground
        line: Sweep line to scan

    Returns:
        BoundaryHit with (x, y) extremes in scan order, or None if the line
        holds no foreground pixel
    """
    xs, ys = line_pixels(mask.shape, line)
    if xs.size == 0:
        return None

    hits = np.flatnonzero(mask[ys, xs])
    if hits.size == 0:
        return None

    first, last = hits[0], hits[-1]
    return BoundaryHit(
        first=(int(xs[first]), int(ys[first])),
        last=(int(xs[last]), int(ys[last])),
    )

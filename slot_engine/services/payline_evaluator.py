"""
Payline extraction: which symbols sit on a given line.

A payline bitmap is a flat row-major mask over the grid.  Bit ``i`` maps to
cell ``(i // columns, i % columns)``.  Symbols are returned in bitmap scan
order; grouping downstream is by identity, so the order never changes a
payout.
"""

from typing import Tuple

from slot_engine.core.errors import ConfigurationError
from slot_engine.core.machine_config import Grid, Payline, Symbol


def grid_shape(grid: Grid) -> Tuple[int, int]:
    """Return ``(rows, columns)`` of a rectangular grid (columns of row 0)."""
    rows = len(grid)
    columns = len(grid[0]) if rows else 0
    return rows, columns


def symbols_on_line(grid: Grid, payline: Payline) -> Tuple[Symbol, ...]:
    """
    Return the symbols covered by ``payline``, in bitmap scan order.

    The grid is assumed rectangular (the payout boundary validates that);
    this function only checks that the bitmap covers exactly the grid.

    Raises:
        ConfigurationError: If ``len(payline.bitmap) != rows × columns`` of
            the grid, or the line is scoped to a different layout.
    """
    rows, columns = grid_shape(grid)

    if len(payline.bitmap) != rows * columns or not payline.matches_layout(rows, columns):
        raise ConfigurationError(
            f"{payline!r} is scoped to {payline.rows}x{payline.columns} "
            f"({len(payline.bitmap)} cells) but the grid is {rows}x{columns}."
        )

    output = []
    for i, bit in enumerate(payline.bitmap):
        if not bit:
            continue
        row = i // columns
        col = i - row * columns
        output.append(grid[row][col])

    return tuple(output)

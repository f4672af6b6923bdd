"""
Win resolution and payout aggregation.

For every payline the symbols on the line are counted by identity in a
single pass.  Each distinct symbol with an exact ``(symbol, count)`` paytable
entry yields one :class:`Win`; counts without an entry contribute nothing.
Wins are per line and are never deduplicated across lines.

Payout::

    bet_multiplier = bet // BET_UNIT
    payout         = sum(win.pay * bet_multiplier for win in wins)

The remainder of ``bet / BET_UNIT`` is discarded, so any bet below one unit
pays zero whatever the grid shows.
"""

import logging
import os
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from slot_engine.core.errors import ConfigurationError, PayoutRangeError, PayoutValidationError
from slot_engine.core.machine_config import Grid, Payline, Symbol
from slot_engine.core.providers import PaytableProvider
from slot_engine.schemas import PayoutRequest
from slot_engine.services.payline_evaluator import symbols_on_line

logger = logging.getLogger(__name__)

# Credits per unit of bet multiplier
BET_UNIT = int(os.getenv("SLOT_BET_UNIT", "50"))


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Win:
    """A matched (payline, symbol) combination with its pay rate."""

    symbol: Symbol
    occurrences: int
    pay: int
    line_index: int          # position of the payline in the evaluated list
    line_id: Optional[int] = None


# ---------------------------------------------------------------------------
# Boundary validation
# ---------------------------------------------------------------------------

def validate_grid(grid: object, rows: int, columns: int) -> Grid:
    """
    Check that ``grid`` is a ``rows × columns`` matrix of :class:`Symbol`.

    Lists are accepted and normalised to tuples so the result can be
    handed to the pure evaluation functions.

    Raises:
        PayoutValidationError: On a non-sequence grid or row, a wrong row
            or column count, or a cell that is not a ``Symbol``.
    """
    if not isinstance(grid, (list, tuple)):
        raise PayoutValidationError(f"Grid must be a list of rows, got {type(grid).__name__}.")
    if len(grid) != rows:
        raise PayoutValidationError(f"Grid has {len(grid)} rows, expected {rows}.")

    normalised = []
    for r, row in enumerate(grid):
        if not isinstance(row, (list, tuple)):
            raise PayoutValidationError(
                f"Grid row {r} must be a list of symbols, got {type(row).__name__}."
            )
        if len(row) != columns:
            raise PayoutValidationError(
                f"Grid row {r} has {len(row)} symbols, expected {columns}."
            )
        for c, cell in enumerate(row):
            if not isinstance(cell, Symbol):
                raise PayoutValidationError(
                    f"Grid cell ({r}, {c}) is {type(cell).__name__}, not a Symbol."
                )
        normalised.append(tuple(row))
    return tuple(normalised)


def validate_request(bet: object, n_lines: object = None) -> PayoutRequest:
    """
    Validate the wager (and optional line count) through :class:`PayoutRequest`.

    Raises:
        PayoutValidationError: If ``bet`` is not a non-negative ``int`` or
            ``n_lines`` is not an ``int``.
        PayoutRangeError: If ``n_lines`` is given and not positive.
    """
    try:
        request = PayoutRequest(bet=bet, n_lines=n_lines)
    except ValidationError as exc:
        raise PayoutValidationError(
            f"Invalid payout request (bet={bet!r}, n_lines={n_lines!r}): "
            + "; ".join(f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors())
        ) from exc

    validate_line_count(request.n_lines)
    return request


def validate_line_count(n_lines: object) -> Optional[int]:
    """Return ``n_lines`` unchanged if it is ``None`` or a positive ``int``."""
    if n_lines is None:
        return None
    if isinstance(n_lines, bool) or not isinstance(n_lines, int):
        raise PayoutValidationError(f"n_lines must be an integer, got {n_lines!r}.")
    if n_lines <= 0:
        raise PayoutRangeError(f"n_lines must be greater than 0, got {n_lines}.")
    return n_lines


# ---------------------------------------------------------------------------
# Win resolution (pure)
# ---------------------------------------------------------------------------

def count_symbols(symbols: Iterable[Symbol]) -> Counter:
    """Map each distinct symbol (by id) to its number of occurrences."""
    return Counter(symbols)


def check_lines(grid: Grid, lines: Sequence[Payline]) -> None:
    """Fail before any evaluation if a payline does not cover the grid exactly."""
    rows = len(grid)
    columns = len(grid[0]) if rows else 0
    for line in lines:
        if not line.matches_layout(rows, columns):
            raise ConfigurationError(
                f"{line!r} is scoped to {line.rows}x{line.columns}, "
                f"cannot evaluate against a {rows}x{columns} grid."
            )


def resolve_wins(
    grid: Grid,
    lines: Sequence[Payline],
    paytable: PaytableProvider,
) -> List[Win]:
    """
    Resolve every payline on ``grid`` into wins.

    Args:
        grid: A validated rectangular grid.
        lines: Paylines to evaluate, in order.  ``Win.line_index`` refers
            to a position in this sequence.
        paytable: Exact ``(symbol, count)`` pay lookup.

    Returns:
        One :class:`Win` per (payline, symbol) pair with a paytable entry.

    Raises:
        ConfigurationError: If any line's bitmap does not match the grid.
    """
    check_lines(grid, lines)

    wins: List[Win] = []
    for line_index, line in enumerate(lines):
        counts = count_symbols(symbols_on_line(grid, line))
        for symbol, n in counts.items():
            pay = paytable.pay_for(symbol, n)
            if pay is None:
                continue
            wins.append(Win(symbol=symbol, occurrences=n, pay=pay,
                            line_index=line_index, line_id=line.line_id))
            logger.debug("Line %d (id=%s): %r x%d pays %d",
                         line_index, line.line_id, symbol, n, pay)
    return wins


# ---------------------------------------------------------------------------
# Payout aggregation (pure)
# ---------------------------------------------------------------------------

def bet_multiplier(bet: int, unit: int = BET_UNIT) -> int:
    """Whole bet units in ``bet``; the remainder is discarded."""
    if unit <= 0:
        raise ConfigurationError(f"Bet unit must be positive, got {unit}.")
    return bet // unit


def total_payout(wins: Iterable[Win], bet: int, unit: int = BET_UNIT) -> Tuple[int, int]:
    """Return ``(bet_multiplier, payout)`` for a list of wins."""
    multiplier = bet_multiplier(bet, unit)
    payout = sum(win.pay * multiplier for win in wins)
    return multiplier, payout


def calculate_payout(
    grid: object,
    bet: object,
    lines: Sequence[Payline],
    paytable: PaytableProvider,
    *,
    rows: int,
    columns: int,
    unit: int = BET_UNIT,
) -> int:
    """
    Validate inputs, resolve wins and return the total payout.

    Validation happens before any evaluation: a malformed grid or bet raises
    :class:`PayoutValidationError`, a payline that does not fit the grid
    raises :class:`ConfigurationError`.  A valid grid with no wins pays 0.
    """
    checked_grid = validate_grid(grid, rows, columns)
    request = validate_request(bet)

    wins = resolve_wins(checked_grid, lines, paytable)
    multiplier, payout = total_payout(wins, request.bet, unit)

    logger.info("Payout %d (bet=%d, multiplier=%d, wins=%d, lines=%d)",
                payout, request.bet, multiplier, len(wins), len(lines))
    return payout

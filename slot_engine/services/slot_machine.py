"""
SlotMachine: the engine's entry point for a game-session service.

Wires the grid generator, payline evaluator and payout calculator to the
read-only providers of a single machine.  Exposes the two core operations:

    random_grid()             -> Grid
    calculate_payout(grid, bet) -> int

plus ``winnings`` (wins for the first N lines) and ``spin`` (draw + pay in
one call).  Hand the machine a :class:`MachineSnapshot` (or providers that
return immutable values) so a spin never sees configuration change midway.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from slot_engine.core.errors import ConfigurationError
from slot_engine.core.machine_config import Grid, MachineConfig, Payline
from slot_engine.core.providers import (
    MachineSnapshot,
    PaylineProvider,
    PaytableProvider,
    SymbolPoolProvider,
)
from slot_engine.schemas import SpinResponse, WinResponse
from slot_engine.services.grid_generator import GridGenerator
from slot_engine.services.payout_calculator import (
    BET_UNIT,
    Win,
    calculate_payout,
    resolve_wins,
    total_payout,
    validate_grid,
    validate_line_count,
    validate_request,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpinResult:
    """Outcome of one :meth:`SlotMachine.spin`."""

    grid: Grid
    bet: int
    bet_multiplier: int
    payout: int
    wins: Tuple[Win, ...] = field(default_factory=tuple)

    def to_response(self, machine_id: Optional[int] = None) -> SpinResponse:
        return SpinResponse(
            machine_id=machine_id,
            bet=self.bet,
            bet_multiplier=self.bet_multiplier,
            payout=self.payout,
            grid=[[symbol.id for symbol in row] for row in self.grid],
            wins=[
                WinResponse(
                    symbol_id=w.symbol.id,
                    symbol_name=w.symbol.name,
                    occurrences=w.occurrences,
                    pay=w.pay,
                    line_index=w.line_index,
                    line_id=w.line_id,
                )
                for w in self.wins
            ],
        )


class SlotMachine:
    """A configured machine that can draw grids and price them."""

    def __init__(
        self,
        config: MachineConfig,
        symbol_pool: SymbolPoolProvider,
        paylines: PaylineProvider,
        paytable: PaytableProvider,
        rng: Optional[np.random.Generator] = None,
        bet_unit: int = BET_UNIT,
    ):
        for name, value, kind in (
            ("symbol_pool", symbol_pool, SymbolPoolProvider),
            ("paylines", paylines, PaylineProvider),
            ("paytable", paytable, PaytableProvider),
        ):
            if not isinstance(value, kind):
                raise TypeError(f"{name} must be a {kind.__name__}, got {type(value).__name__}")

        if isinstance(bet_unit, bool) or not isinstance(bet_unit, int) or bet_unit <= 0:
            raise ConfigurationError(f"bet_unit must be a positive integer, got {bet_unit!r}")

        self.config = config
        self.paylines = paylines
        self.paytable = paytable
        self.bet_unit = bet_unit
        self.generator = GridGenerator(config, symbol_pool, rng=rng)

    @classmethod
    def from_snapshot(
        cls,
        snapshot: MachineSnapshot,
        rng: Optional[np.random.Generator] = None,
        bet_unit: int = BET_UNIT,
    ) -> "SlotMachine":
        return cls(snapshot.config, snapshot, snapshot, snapshot, rng=rng, bet_unit=bet_unit)

    # ------------------------------------------------------------------ #
    #  Core operations                                                     #
    # ------------------------------------------------------------------ #

    def random_grid(self, rng: Optional[np.random.Generator] = None) -> Grid:
        """Draw a fresh ``rows × columns`` grid from the symbol pool."""
        return self.generator.random_grid(rng)

    def lines(self, n_lines: Optional[int] = None) -> Tuple[Payline, ...]:
        """Paylines for this machine's layout, optionally only the first ``n_lines``."""
        n_lines = validate_line_count(n_lines)
        lines = self.paylines.paylines(self.config.rows, self.config.columns)
        return lines if n_lines is None else lines[:n_lines]

    def winnings(self, grid: object, n_lines: Optional[int] = None) -> List[Win]:
        """
        Resolve the wins on ``grid``.

        Args:
            grid: A ``rows × columns`` matrix of symbols.
            n_lines: Evaluate only the first N paylines.  ``None`` = all.

        Raises:
            PayoutValidationError: Malformed grid or non-integer ``n_lines``.
            PayoutRangeError: ``n_lines`` not positive.
            ConfigurationError: A payline does not fit the grid.
        """
        checked = validate_grid(grid, self.config.rows, self.config.columns)
        return resolve_wins(checked, self.lines(n_lines), self.paytable)

    def calculate_payout(self, grid: object, bet: object) -> int:
        """
        Return the payout for ``grid`` at wager ``bet``.

        ``bet // bet_unit`` scales every win's pay rate; a bet below one
        unit, or a grid without wins, pays 0.

        Raises:
            PayoutValidationError: Malformed grid, or ``bet`` not a
                non-negative integer.
            ConfigurationError: A payline does not fit the grid.
        """
        return calculate_payout(
            grid, bet, self.lines(), self.paytable,
            rows=self.config.rows, columns=self.config.columns, unit=self.bet_unit,
        )

    def spin(self, bet: object, rng: Optional[np.random.Generator] = None) -> SpinResult:
        """Validate ``bet``, draw a grid and price it."""
        request = validate_request(bet)
        grid = self.random_grid(rng)
        wins = resolve_wins(grid, self.lines(), self.paytable)
        multiplier, payout = total_payout(wins, request.bet, self.bet_unit)

        logger.info("Machine %s spin: bet=%d wins=%d payout=%d",
                    self.config.machine_id, request.bet, len(wins), payout)
        return SpinResult(grid=grid, bet=request.bet, bet_multiplier=multiplier,
                          payout=payout, wins=tuple(wins))

    def __repr__(self) -> str:
        return f"SlotMachine({self.config!r}, bet_unit={self.bet_unit})"

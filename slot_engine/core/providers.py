"""Read-only data-provider interfaces consumed by the engine.

The grid generator and payout calculator never reach into a database on
their own.  They accept objects implementing the ABCs below at
construction time, which enables:

* **Unit testing**: hand the engine a :class:`MachineSnapshot` built from
  literals; no database, no fixtures on disk.
* **Storage swaps**: the SQL catalog in
  :mod:`slot_engine.services.catalog` is one implementation; a JSON file
  or a remote config service would be another.

Design choices
--------------
* Providers are abstract base classes rather than ``typing.Protocol`` so
  :class:`~slot_engine.services.slot_machine.SlotMachine` can ``isinstance``
  check them in its constructor.
* :class:`MachineSnapshot` is frozen and holds only tuples and a read-only
  mapping.  A spin that was handed a snapshot can never observe a
  configuration change halfway through evaluation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

from slot_engine.core.errors import ConfigurationError
from slot_engine.core.machine_config import MachineConfig, Payline, PaytableEntry, Symbol


# ---------------------------------------------------------------------------
# Abstract providers
# ---------------------------------------------------------------------------


class SymbolPoolProvider(ABC):
    """Supplies the symbols eligible to appear on a machine's grid."""

    @abstractmethod
    def symbols(self) -> tuple[Symbol, ...]:
        """Return the full symbol pool.  May be empty; callers decide if that is fatal."""


class PaylineProvider(ABC):
    """Supplies the paylines configured for a grid layout."""

    @abstractmethod
    def paylines(self, rows: int, columns: int) -> tuple[Payline, ...]:
        """Return every payline scoped to a ``rows × columns`` layout, in a stable order."""


class PaytableProvider(ABC):
    """Maps ``(symbol, occurrence count)`` to a pay rate."""

    @abstractmethod
    def pay_for(self, symbol: Symbol, occurrences: int) -> int | None:
        """Return the pay rate for exactly ``occurrences`` copies, or ``None`` if unpaid.

        Lookup is by exact count only.  A ``None`` result is the normal
        outcome for most counts and is not an error.
        """


# ---------------------------------------------------------------------------
# Immutable in-memory implementation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MachineSnapshot(SymbolPoolProvider, PaylineProvider, PaytableProvider):
    """A frozen copy of everything one machine needs to spin and pay.

    Attributes:
        config: Grid dimensions and identity of the machine.
        symbol_pool: Symbols eligible for the grid, in catalog order.
        lines: All paylines known to the snapshot.  :meth:`paylines`
            filters these to the requested layout.
        paytable: Pay entries.  Each ``(symbol_id, occurrences)`` pair may
            appear at most once.
    """

    config: MachineConfig
    symbol_pool: tuple[Symbol, ...] = ()
    lines: tuple[Payline, ...] = ()
    paytable: tuple[PaytableEntry, ...] = ()
    _pay_index: Mapping[tuple[int, int], int] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        index: dict[tuple[int, int], int] = {}
        for entry in self.paytable:
            if entry.key in index:
                raise ConfigurationError(
                    f"Duplicate paytable entry for symbol {entry.symbol_id} "
                    f"with {entry.occurrences} occurrences."
                )
            index[entry.key] = entry.pay
        object.__setattr__(self, "_pay_index", MappingProxyType(index))

    @classmethod
    def build(
        cls,
        config: MachineConfig,
        symbols: Iterable[Symbol],
        lines: Iterable[Payline],
        paytable: Iterable[PaytableEntry],
    ) -> MachineSnapshot:
        """Freeze arbitrary iterables into a snapshot."""
        return cls(
            config=config,
            symbol_pool=tuple(symbols),
            lines=tuple(lines),
            paytable=tuple(paytable),
        )

    def symbols(self) -> tuple[Symbol, ...]:
        return self.symbol_pool

    def paylines(self, rows: int, columns: int) -> tuple[Payline, ...]:
        return tuple(line for line in self.lines if line.matches_layout(rows, columns))

    def pay_for(self, symbol: Symbol, occurrences: int) -> int | None:
        return self._pay_index.get((symbol.id, occurrences))

    def __repr__(self) -> str:
        return (
            f"MachineSnapshot({self.config!r}, symbols={len(self.symbol_pool)}, "
            f"lines={len(self.lines)}, paytable={len(self.paytable)})"
        )

"""Machine-level configuration values: symbols, paylines, paytable entries.

Everything here is a frozen dataclass so a configuration can be shared
across threads and concurrent spins without copying.  Values are read-only
inputs to the engine; nothing in ``slot_engine`` mutates them.

Architecture
------------
* :class:`MachineConfig` carries the grid dimensions.  Named constructors
  (:meth:`MachineConfig.classic_3x3`, :meth:`MachineConfig.video_5x3`)
  return pre-populated instances; override single fields with
  :func:`dataclasses.replace`.
* :class:`Payline` stores its cell mask as a tuple of booleans in
  row-major order.  The persisted form is a ``"0"/"1"`` string; use
  :meth:`Payline.from_bitmap_string` to convert.
* :class:`PaytableEntry` is one ``(symbol, occurrences) → pay`` row.
  Lookups are always by exact occurrence count.

Typical usage::

    from slot_engine.core.machine_config import MachineConfig, Payline

    cfg = MachineConfig.classic_3x3()
    top_row = Payline.from_bitmap_string("111000000", rows=3, columns=3)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from slot_engine.core.errors import ConfigurationError

#: Characters accepted in a persisted bitmap string.
BIT_SET: Final[str] = "1"
BIT_CLEAR: Final[str] = "0"


def _is_int(value: object) -> bool:
    # bool is an int subclass but never a valid count or rate here.
    return isinstance(value, int) and not isinstance(value, bool)


def _require_dimensions(owner: str, rows: object, columns: object) -> None:
    for label, value in (("rows", rows), ("columns", columns)):
        if not _is_int(value) or value <= 0:
            raise ConfigurationError(
                f"{owner}.{label} must be a positive integer, got {value!r}."
            )


@dataclass(frozen=True)
class MachineConfig:
    """Grid dimensions of a single slot machine.

    Attributes:
        rows: Number of rows in every grid.  Must be positive.
        columns: Number of symbols per row.  Must be positive.
        machine_id: Primary key of the machine in the catalog, if any.
            Used for logging only.
        name: Human-readable machine name for logging.
    """

    rows: int
    columns: int
    machine_id: int | None = None
    name: str = ""

    def __post_init__(self) -> None:
        _require_dimensions("MachineConfig", self.rows, self.columns)

    @classmethod
    def classic_3x3(cls) -> MachineConfig:
        """Return the three-reel, three-row layout used by the demo machine."""
        return cls(rows=3, columns=3, name="Classic 3x3")

    @classmethod
    def video_5x3(cls) -> MachineConfig:
        """Return the common five-reel video slot layout (3 rows, 5 columns)."""
        return cls(rows=3, columns=5, name="Video 5x3")

    @property
    def cell_count(self) -> int:
        """Number of cells in a grid, and the required payline bitmap length."""
        return self.rows * self.columns

    def __repr__(self) -> str:
        return (
            f"MachineConfig(id={self.machine_id!r}, name={self.name!r}, "
            f"rows={self.rows}, columns={self.columns})"
        )


@dataclass(frozen=True)
class Symbol:
    """One reel symbol.

    Equality and hashing use ``id`` only: two cells hold "the same symbol"
    iff their ids match, regardless of display name.
    """

    id: int
    name: str = field(default="", compare=False)

    def __repr__(self) -> str:
        return f"Symbol({self.id}, {self.name!r})" if self.name else f"Symbol({self.id})"


@dataclass(frozen=True)
class Payline:
    """A fixed set of grid cells checked for matching symbols.

    Attributes:
        rows: Row count of the machine layout this line is scoped to.
        columns: Column count of the machine layout this line is scoped to.
        bitmap: Row-major cell mask of length ``rows × columns``; a ``True``
            entry marks a cell on the line.
        line_id: Catalog primary key, if the line came from the database.
    """

    rows: int
    columns: int
    bitmap: tuple[bool, ...]
    line_id: int | None = None

    def __post_init__(self) -> None:
        _require_dimensions(f"Payline {self.line_id!r}", self.rows, self.columns)
        # A "0"/"1" string is truthy cell by cell; use from_bitmap_string for it.
        if not isinstance(self.bitmap, (tuple, list)):
            raise ConfigurationError(
                f"Payline {self.line_id!r} bitmap must be a tuple of bools, "
                f"got {type(self.bitmap).__name__}."
            )
        if not all(isinstance(bit, bool) for bit in self.bitmap):
            raise ConfigurationError(
                f"Payline {self.line_id!r} bitmap {self.bitmap!r} holds non-bool cells."
            )
        object.__setattr__(self, "bitmap", tuple(self.bitmap))
        if len(self.bitmap) != self.rows * self.columns:
            raise ConfigurationError(
                f"Payline {self.line_id!r} bitmap has {len(self.bitmap)} cells, "
                f"expected {self.rows * self.columns} for a "
                f"{self.rows}x{self.columns} layout."
            )

    @classmethod
    def from_bitmap_string(
        cls,
        bitmap: str,
        *,
        rows: int,
        columns: int,
        line_id: int | None = None,
    ) -> Payline:
        """Build a payline from its persisted ``"0"/"1"`` form.

        Raises:
            ConfigurationError: If the string holds anything other than
                ``0`` and ``1``, or its length is not ``rows × columns``.
        """
        bad = set(bitmap) - {BIT_SET, BIT_CLEAR}
        if bad:
            raise ConfigurationError(
                f"Payline {line_id!r} bitmap {bitmap!r} contains invalid "
                f"characters {sorted(bad)!r}."
            )
        return cls(
            rows=rows,
            columns=columns,
            bitmap=tuple(ch == BIT_SET for ch in bitmap),
            line_id=line_id,
        )

    def to_bitmap_string(self) -> str:
        return "".join(BIT_SET if bit else BIT_CLEAR for bit in self.bitmap)

    def matches_layout(self, rows: int, columns: int) -> bool:
        """Return True if this line can be evaluated against a ``rows × columns`` grid."""
        return self.rows == rows and self.columns == columns

    def __repr__(self) -> str:
        return f"Payline(id={self.line_id!r}, bitmap={self.to_bitmap_string()!r})"


@dataclass(frozen=True)
class PaytableEntry:
    """Pay rate for ``occurrences`` copies of a symbol on one line.

    Attributes:
        symbol_id: Id of the :class:`Symbol` this entry pays for.
        occurrences: Exact number of copies on the line.  ``>= 1``.
        pay: Non-negative pay rate, multiplied by the bet multiplier.
    """

    symbol_id: int
    occurrences: int
    pay: int

    def __post_init__(self) -> None:
        for label, value in (
            ("symbol_id", self.symbol_id),
            ("occurrences", self.occurrences),
            ("pay", self.pay),
        ):
            if not _is_int(value):
                raise ConfigurationError(
                    f"Paytable entry {label} must be an integer, got {value!r}."
                )
        if self.occurrences < 1:
            raise ConfigurationError(
                f"Paytable entry for symbol {self.symbol_id} has "
                f"occurrences={self.occurrences}; must be >= 1."
            )
        if self.pay < 0:
            raise ConfigurationError(
                f"Paytable entry ({self.symbol_id}, {self.occurrences}) has "
                f"negative pay {self.pay}."
            )

    @property
    def key(self) -> tuple[int, int]:
        return (self.symbol_id, self.occurrences)


#: A spin result: ``rows`` rows of ``columns`` symbols each, row-major.
Grid = tuple[tuple[Symbol, ...], ...]

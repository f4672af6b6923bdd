"""
SQL-backed machine catalog.

Reads a machine, its symbol pool, the paylines for its layout and every
paytable row in one session, and copies them into a frozen
:class:`MachineSnapshot`.  The engine only ever sees the snapshot, so an
admin editing the paytable mid-spin cannot tear a payout computation.
"""

import logging
from typing import List, Optional

import numpy as np
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from slot_engine.core.errors import ConfigurationError
from slot_engine.core.machine_config import MachineConfig, Payline, PaytableEntry, Symbol
from slot_engine.core.providers import MachineSnapshot
from slot_engine.models import Line, SlotMachine, SlotMachineSymbol, SessionLocal
from slot_engine.services.slot_machine import SlotMachine as SlotMachineEngine

logger = logging.getLogger(__name__)


def _load_lines(db: Session, rows: int, columns: int) -> List[Payline]:
    lines: List[Payline] = []
    stmt = select(Line).where(Line.rows == rows, Line.columns == columns).order_by(Line.id)
    for row in db.scalars(stmt):
        if len(row.bitmap) != rows * columns:
            logger.warning(
                "Line %d bitmap %r has %d cells, layout %dx%d needs %d",
                row.id, row.bitmap, len(row.bitmap), rows, columns, rows * columns,
            )
        # Raises ConfigurationError on a bad bitmap
        lines.append(Payline.from_bitmap_string(row.bitmap, rows=rows, columns=columns, line_id=row.id))
    return lines


def load_machine_snapshot(db: Session, machine_id: int) -> MachineSnapshot:
    """
    Copy machine ``machine_id`` and its configuration into a snapshot.

    Raises:
        ConfigurationError: Unknown machine, a malformed payline bitmap, or
            an invalid paytable row.
    """
    machine: Optional[SlotMachine] = db.get(
        SlotMachine,
        machine_id,
        options=[selectinload(SlotMachine.symbols).selectinload(SlotMachineSymbol.paytable)],
    )
    if machine is None:
        raise ConfigurationError(f"Slot machine {machine_id} does not exist")

    config = MachineConfig(
        rows=machine.rows, columns=machine.columns,
        machine_id=machine.id, name=machine.name or "",
    )
    symbols = [Symbol(id=s.id, name=s.name) for s in machine.symbols]
    paytable = [
        PaytableEntry(symbol_id=s.id, occurrences=p.occurrences, pay=p.pay)
        for s in machine.symbols
        for p in s.paytable
    ]
    lines = _load_lines(db, machine.rows, machine.columns)

    snapshot = MachineSnapshot.build(config, symbols, lines, paytable)
    logger.info("Loaded %r", snapshot)
    return snapshot


def load_machine(
    machine_id: int,
    rng: Optional[np.random.Generator] = None,
    db: Optional[Session] = None,
) -> SlotMachineEngine:
    """Build a ready-to-spin engine for ``machine_id``, opening a session if none is given."""
    if db is not None:
        return SlotMachineEngine.from_snapshot(load_machine_snapshot(db, machine_id), rng=rng)

    db = SessionLocal()
    try:
        return SlotMachineEngine.from_snapshot(load_machine_snapshot(db, machine_id), rng=rng)
    finally:
        db.close()

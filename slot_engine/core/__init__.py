"""Core data types and contracts for the slot payout engine.

This package contains pure building blocks:

- ``errors``        : the exception kinds raised at the engine boundary
- ``machine_config``: frozen symbols, paylines, paytable entries, machine dims
- ``providers``     : ABCs for the symbol pool, payline set and paytable,
  plus an immutable in-memory snapshot implementing all three

Nothing in this package imports from ``slot_engine.services`` or
``slot_engine.models``.  All modules are side-effect-free and unit-testable
in isolation.
"""

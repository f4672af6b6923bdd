"""
Database models for the slot payout engine
SQLAlchemy ORM, read by slot_engine.services.catalog
"""

from sqlalchemy import (
    create_engine,
    Column,
    Integer,
    String,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, sessionmaker, relationship
import os
from dotenv import load_dotenv

# Load .env before reading DATABASE_URL
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./slot_engine.db")

engine = create_engine(DATABASE_URL, pool_pre_ping=True, echo=False)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


class SlotMachine(Base):
    """A slot machine layout and its symbol pool"""

    __tablename__ = "slot_machines"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, default="")
    rows = Column(Integer, nullable=False)
    columns = Column(Integer, nullable=False)

    # Relationships
    symbols = relationship(
        "SlotMachineSymbol", back_populates="slot_machine", order_by="SlotMachineSymbol.id"
    )


class SlotMachineSymbol(Base):
    """A reel symbol belonging to one machine's pool"""

    __tablename__ = "slot_machine_symbols"

    id = Column(Integer, primary_key=True, index=True)
    slot_machine_id = Column(Integer, ForeignKey("slot_machines.id"), nullable=False, index=True)
    name = Column(String, nullable=False)

    slot_machine = relationship("SlotMachine", back_populates="symbols")
    paytable = relationship(
        "SlotMachineSymbolPaytable",
        back_populates="symbol",
        order_by="SlotMachineSymbolPaytable.occurrences",
    )


class SlotMachineSymbolPaytable(Base):
    """Pay rate for an exact number of occurrences of a symbol on one line"""

    __tablename__ = "slot_machine_symbol_paytables"
    __table_args__ = (
        UniqueConstraint("slot_machine_symbol_id", "occurrences", name="uq_symbol_occurrences"),
    )

    id = Column(Integer, primary_key=True, index=True)
    slot_machine_symbol_id = Column(
        Integer, ForeignKey("slot_machine_symbols.id"), nullable=False, index=True
    )
    occurrences = Column(Integer, nullable=False)  # >= 1
    pay = Column(Integer, nullable=False)          # >= 0

    symbol = relationship("SlotMachineSymbol", back_populates="paytable")


class Line(Base):
    """A payline bitmap, shared by every machine with the same layout"""

    __tablename__ = "lines"

    id = Column(Integer, primary_key=True, index=True)
    rows = Column(Integer, nullable=False, index=True)
    columns = Column(Integer, nullable=False, index=True)
    bitmap = Column(String, nullable=False)  # "111000000", row-major, rows*columns chars


def init_db(bind=None):
    """Create any missing tables on ``bind`` (the configured engine by default)"""
    Base.metadata.create_all(bind=bind if bind is not None else engine)

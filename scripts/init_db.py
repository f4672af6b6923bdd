#!/usr/bin/env python3
"""
Database initialization script
Creates all tables and optionally seeds a demo machine
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Load .env file
from dotenv import load_dotenv
load_dotenv()

from slot_engine.models import Base, engine, SessionLocal, init_db
from slot_engine.models import SlotMachine, SlotMachineSymbol, SlotMachineSymbolPaytable, Line
import logging
from sqlalchemy import text, inspect
from sqlalchemy.exc import SQLAlchemyError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Rows, diagonals for the 3x3 demo layout
DEMO_LINES = ["111000000", "000111000", "000000111", "100010001", "001010100"]

# name -> {occurrences: pay}
DEMO_PAYTABLE = {
    "Cherry": {2: 1, 3: 5},
    "Lemon": {3: 8},
    "Bell": {3: 15},
    "Seven": {3: 50},
}


def init_database(drop_existing: bool = False):
    """
    Initialize database tables

    Args:
        drop_existing: If True, drops all tables first (DANGER: data loss!)
    """
    logger.info("Initializing slot engine database...")

    if drop_existing:
        logger.warning("Dropping all existing tables!")
        response = input("Are you sure? This will delete all data. Type 'yes' to confirm: ")
        if response.lower() != 'yes':
            logger.info("Aborted.")
            return

        Base.metadata.drop_all(bind=engine)
        logger.info("Existing tables dropped")

    init_db()
    logger.info("Database tables created successfully")

    inspector = inspect(engine)
    tables = inspector.get_table_names()
    logger.info(f"Tables: {', '.join(tables)}")

    return True


def seed_demo_machine():
    """Add a 3x3 demo machine with five lines and a small paytable"""
    logger.info("Seeding demo machine...")

    db = SessionLocal()

    try:
        machine = SlotMachine(name="Classic 3x3", rows=3, columns=3)
        db.add(machine)
        db.flush()

        for name, pays in DEMO_PAYTABLE.items():
            symbol = SlotMachineSymbol(slot_machine_id=machine.id, name=name)
            db.add(symbol)
            db.flush()
            db.add_all(
                SlotMachineSymbolPaytable(slot_machine_symbol_id=symbol.id, occurrences=n, pay=pay)
                for n, pay in pays.items()
            )

        existing = {
            row.bitmap
            for row in db.query(Line).filter(Line.rows == 3, Line.columns == 3)
        }
        db.add_all(Line(rows=3, columns=3, bitmap=b) for b in DEMO_LINES if b not in existing)
        db.commit()

        logger.info(f"Demo machine seeded (id={machine.id})")

    except SQLAlchemyError as e:
        logger.error(f"Error seeding data: {e}")
        db.rollback()
        raise

    finally:
        db.close()


def check_connection():
    """Test database connection"""
    try:
        db = SessionLocal()
        db.execute(text("SELECT 1"))
        db.close()
        logger.info("Database connection successful")
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        return False


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Initialize slot engine database")
    parser.add_argument("--drop", action="store_true", help="Drop existing tables (DANGER!)")
    parser.add_argument("--seed", action="store_true", help="Seed the demo machine")
    parser.add_argument("--check", action="store_true", help="Only check connection")

    args = parser.parse_args()

    if args.check:
        check_connection()
    else:
        if check_connection():
            init_database(drop_existing=args.drop)

            if args.seed:
                seed_demo_machine()

            logger.info("Database initialization complete!")
        else:
            logger.error("Cannot initialize database - connection failed")
            sys.exit(1)

from gymapp.db.base import Base
from gymapp.db.session import get_db, engine, SessionLocal
from gymapp.db.tables import ALL_TABLE_NAMES, RESET_TABLE_NAMES

__all__ = ["get_db", "engine", "SessionLocal", "Base", "ALL_TABLE_NAMES", "RESET_TABLE_NAMES"]

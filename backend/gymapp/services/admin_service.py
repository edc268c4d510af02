"""
Admin: wipe application data (local development and demos). Tables: see gymapp.db.tables.
"""
import logging

from sqlalchemy import text
from sqlalchemy.orm import Session

from gymapp.db.tables import RESET_TABLE_NAMES

logger = logging.getLogger(__name__)


def reset_db(db: Session) -> dict[str, int]:
    """
    Delete all rows from every application table, children first.
    Returns dict of table -> deleted count.
    """
    logger.info("reset_db: starting")
    deleted: dict[str, int] = {}
    try:
        for table in RESET_TABLE_NAMES:
            deleted[table] = db.execute(text(f"DELETE FROM {table}")).rowcount
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("reset_db: done %s", deleted)
    return deleted

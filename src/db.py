# SPDX-License-Identifier: GPL-3.0-only
"""Database connection."""

from peewee import SqliteDatabase

from base_logger import get_logger
from src.utils import get_configs

logger = get_logger(__name__)


def connect() -> SqliteDatabase:
    """Return the state database configured by STATE_DATABASE_PATH."""
    database_path = get_configs("STATE_DATABASE_PATH", default_value="nkey_state.db")
    logger.debug("Using state database at %s", database_path)
    return SqliteDatabase(
        database_path,
        pragmas={"journal_mode": "wal", "foreign_keys": 1},
    )

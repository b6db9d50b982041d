import sqlite3
from contextlib import contextmanager
from pathlib import Path

import structlog

from config import CONFIG_DIR
from .schema import SCHEMA_SQL, INDEXES_SQL, SCHEMA_VERSION

DB_PATH = CONFIG_DIR / "flipdeck.db"

logger = structlog.get_logger(__name__)


def init_db():
    """Initialize the database by creating tables and indexes if they don't exist."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    with get_conn() as conn:
        conn.executescript(SCHEMA_SQL)
        conn.executescript(INDEXES_SQL)
        ensure_cards_fts(conn)
        ensure_schema_version(conn)
        conn.commit()
    logger.info("db_initialized", path=str(DB_PATH), schema_version=SCHEMA_VERSION)


def ensure_cards_fts(conn: sqlite3.Connection) -> None:
    """Rebuild the FTS index when it lags behind the cards table."""
    cursor = conn.cursor()
    cursor.execute("SELECT COUNT(*) FROM cards_fts")
    fts_count = cursor.fetchone()[0] or 0
    cursor.execute("SELECT COUNT(*) FROM cards")
    cards_count = cursor.fetchone()[0] or 0
    if fts_count < cards_count:
        cursor.execute("INSERT INTO cards_fts(cards_fts) VALUES('rebuild')")


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the SQLite schema version from PRAGMA user_version."""
    cursor = conn.cursor()
    cursor.execute("PRAGMA user_version")
    row = cursor.fetchone()
    return int(row[0]) if row else 0


def ensure_schema_version(conn: sqlite3.Connection) -> None:
    if get_schema_version(conn) != SCHEMA_VERSION:
        conn.execute(f"PRAGMA user_version = {int(SCHEMA_VERSION)}")


def connect(path: Path = None) -> sqlite3.Connection:
    conn = sqlite3.connect(path or DB_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_conn():
    """Context manager for SQLite connection, using row_factory for dict-like rows."""
    conn = connect()
    try:
        yield conn
    finally:
        conn.close()


def get_db():
    """FastAPI dependency that yields a DB connection and closes it afterwards."""
    with get_conn() as conn:
        yield conn

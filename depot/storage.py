"""
Depot - Storage Module

This file handles:
- SQLite connection and schema
- The salt table (exactly one random salt per database)
- The storage table (key -> value, nonce, modification time)

Database structure:
- storage: one row per key; a NULL nonce means the value is plain text,
  a non-NULL nonce means the value is base64 AES-GCM ciphertext
- salt: a single row holding the database salt
"""

import logging
import sqlite3
from dataclasses import dataclass
from typing import Optional

from . import crypto
from .errors import NotFoundError, StorageError

logger = logging.getLogger(__name__)


# =============================================================================
# DATABASE SCHEMA
# =============================================================================

SCHEMA = """
CREATE TABLE IF NOT EXISTS storage (
    modified INT DEFAULT (strftime('%s', 'now')),
    key TEXT UNIQUE NOT NULL,
    val TEXT NOT NULL,                -- plain text, or base64 ciphertext
    nonce BLOB UNIQUE                 -- NULL for plain text values
);

CREATE TABLE IF NOT EXISTS salt (
    data BLOB NOT NULL
);
"""

PRAGMAS = """
PRAGMA synchronous=FULL;
PRAGMA secure_delete=ON;
"""

UPSERT = """
INSERT INTO storage (key, val, nonce)
VALUES (?, ?, ?)
ON CONFLICT (key) DO UPDATE SET
    modified = strftime('%s', 'now'),
    val = excluded.val,
    nonce = excluded.nonce
"""


def connect(location: str) -> sqlite3.Connection:
    """
    Open the database at location.

    Locations starting with "file:" are treated as SQLite URIs, anything
    else as a filesystem path (or ":memory:"). The connection runs in
    autocommit mode, so each statement is its own transaction.
    """
    conn = sqlite3.connect(
        location,
        isolation_level=None,
        uri=location.startswith("file:"),
    )
    conn.row_factory = sqlite3.Row
    try:
        conn.executescript(PRAGMAS)
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def initialize_schema(conn: sqlite3.Connection) -> None:
    """Create the tables if they do not exist yet. Safe to call repeatedly."""
    conn.executescript(SCHEMA)


@dataclass(frozen=True)
class Record:
    """One row of the storage table."""

    key: str
    value: str
    nonce: Optional[bytes]
    modified: int

    @property
    def encrypted(self) -> bool:
        return self.nonce is not None


# =============================================================================
# SALT STORE
# =============================================================================

class SaltStore:
    """Owns the single salt row of a database."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def ensure_salt(self) -> bytes:
        """
        Return the database salt, creating it on first use.

        Runs under BEGIN IMMEDIATE so two processes opening a fresh file at
        the same time cannot both insert a salt.

        Raises:
            sqlite3.Error: If the table cannot be read or written
        """
        self.conn.execute("BEGIN IMMEDIATE")
        try:
            row = self.conn.execute("SELECT data FROM salt LIMIT 1").fetchone()
            if row is not None:
                salt = bytes(row["data"])
            else:
                salt = crypto.generate_salt()
                self.conn.execute("INSERT INTO salt (data) VALUES (?)", (salt,))
                logger.debug("generated new database salt")
        except BaseException:
            self.conn.execute("ROLLBACK")
            raise
        self.conn.execute("COMMIT")
        return salt


# =============================================================================
# RECORD STORE
# =============================================================================

class RecordStore:
    """
    Key -> value mapping on the storage table.

    Every method is a single SQL statement; atomicity and key uniqueness
    come from SQLite itself, so concurrent processes writing the same key
    cannot interleave a partial record.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def upsert(self, key: str, value: str, nonce: Optional[bytes]) -> None:
        """Insert key, or replace its value, nonce and modification time."""
        try:
            self.conn.execute(UPSERT, (key, value, nonce))
        except sqlite3.Error as err:
            raise StorageError(f"cannot access database: {err}") from err

    def lookup(self, key: str) -> Record:
        """
        Return the record stored under key.

        Raises:
            NotFoundError: If no row matches
            StorageError: If the query fails
        """
        try:
            row = self.conn.execute(
                "SELECT key, val, nonce, modified FROM storage WHERE key = ?",
                (key,)
            ).fetchone()
        except sqlite3.Error as err:
            raise StorageError(f"cannot access database: {err}") from err

        if row is None:
            raise NotFoundError(key)

        nonce = row["nonce"]
        return Record(
            key=row["key"],
            value=row["val"],
            nonce=bytes(nonce) if nonce is not None else None,
            modified=row["modified"],
        )

    def delete(self, key: str) -> None:
        """Remove key. Deleting a missing key is not an error."""
        try:
            self.conn.execute("DELETE FROM storage WHERE key = ?", (key,))
        except sqlite3.Error as err:
            raise StorageError(f"cannot access database: {err}") from err

    def peek_value(self, key: str) -> Optional[str]:
        """Return the plain text value of key, or None if missing or encrypted."""
        try:
            row = self.conn.execute(
                "SELECT val FROM storage WHERE key = ? AND nonce IS NULL",
                (key,)
            ).fetchone()
        except sqlite3.Error as err:
            raise StorageError(f"cannot access database: {err}") from err

        return row["val"] if row is not None else None

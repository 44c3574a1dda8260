"""
Depot - The key-value store

Ties the salt table, the storage table and the value cipher together into
four operations: stow, fetch, peek and drop.
"""

import base64
import binascii
import logging
import sqlite3
from typing import Optional, Union

from . import crypto
from . import storage
from .errors import EncryptionError, InitializationError, PasswordRequiredError

logger = logging.getLogger(__name__)

Password = Optional[Union[bytes, str]]


def _as_bytes(password: Password) -> Optional[bytes]:
    if isinstance(password, str):
        return password.encode("utf-8")
    return password


class Depot:
    """
    A key-value store backed by one SQLite database.

    Usage:
        with Depot("depot.db") as depot:
            depot.stow("greeting", "hello")
            depot.stow("token", "s3cr3t", password=b"pw")

            depot.peek("greeting")                  # "hello"
            depot.peek("token")                     # None, it is encrypted
            depot.fetch("token", password=b"pw")    # "s3cr3t"

            depot.drop("token")

    A password of None means "no password". An empty password is still a
    password and encrypts the value.
    """

    def __init__(self, location: str):
        """
        Open (or create) the depot at location.

        Creates the schema if needed and loads the database salt, generating
        it the first time a database is opened.

        Args:
            location: Path to the SQLite file, ":memory:" or a "file:" URI

        Raises:
            InitializationError: If the database or the salt is unusable
        """
        self.location = location
        try:
            self.conn = storage.connect(location)
        except sqlite3.Error as err:
            raise InitializationError(f"cannot connect to database: {err}") from err

        try:
            storage.initialize_schema(self.conn)
            self._salt = storage.SaltStore(self.conn).ensure_salt()
        except (sqlite3.Error, OSError) as err:
            self.conn.close()
            raise InitializationError(f"cannot access database: {err}") from err

        self.records = storage.RecordStore(self.conn)
        logger.debug("opened depot at %s", location)

    @property
    def salt(self) -> bytes:
        return self._salt

    def close(self) -> None:
        self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def stow(self, key: str, value: str, password: Password = None) -> None:
        """
        Store value under key, replacing whatever was there.

        With a password the value is encrypted; without one it is stored
        as plain text.

        Raises:
            EncryptionError: If the value cannot be encrypted
            StorageError: If the database write fails
        """
        password = _as_bytes(password)
        if password is None:
            self.records.upsert(key, value, None)
            logger.debug("stowed plain value for %r", key)
            return

        ciphertext, nonce = crypto.encrypt(password, self._salt, value.encode("utf-8"))
        encoded = base64.b64encode(ciphertext).decode("ascii")
        self.records.upsert(key, encoded, nonce)
        logger.debug("stowed encrypted value for %r", key)

    def fetch(self, key: str, password: Password = None) -> str:
        """
        Return the value stored under key.

        Plain values are returned as-is and never need a password.

        Raises:
            NotFoundError: If key does not exist
            PasswordRequiredError: If the value is encrypted and password is None
            BadPasswordError: If the password is wrong or the data was altered
            EncryptionError: If the stored ciphertext cannot be decoded
            StorageError: If the database read fails
        """
        record = self.records.lookup(key)
        if not record.encrypted:
            return record.value

        password = _as_bytes(password)
        if password is None:
            raise PasswordRequiredError(key)

        try:
            ciphertext = base64.b64decode(record.value, validate=True)
        except (binascii.Error, ValueError) as err:
            raise EncryptionError(f"cannot decrypt data: {err}") from err

        plaintext = crypto.decrypt(password, self._salt, record.nonce, ciphertext)
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as err:
            raise EncryptionError(f"cannot decrypt data: {err}") from err

    def peek(self, key: str) -> Optional[str]:
        """
        Return the value of key if it can be read without a password.

        None means "missing or encrypted"; the two cases are deliberately
        not told apart. Use fetch() to find out which.
        """
        return self.records.peek_value(key)

    def drop(self, key: str) -> None:
        """Remove key from the depot. Missing keys are ignored."""
        self.records.delete(key)
        logger.debug("dropped %r", key)

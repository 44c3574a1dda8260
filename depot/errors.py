"""
Depot - Exceptions

Every failure the library reports is a DepotError. Callers that only care
whether an operation worked can catch the base class; the CLI relies on the
subclasses to tell "wrong password" apart from "something is broken".
"""


class DepotError(Exception):
    """Base class for all depot errors."""


class InitializationError(DepotError):
    """Database could not be opened, its schema created, or its salt made."""


class NotFoundError(DepotError):
    """No record exists for the requested key."""

    def __init__(self, key: str):
        super().__init__("key not found")
        self.key = key


class PasswordRequiredError(DepotError):
    """The record is encrypted but no password was given."""

    def __init__(self, key: str):
        super().__init__("password is needed for decryption")
        self.key = key


class BadPasswordError(DepotError):
    """
    Authentication of an encrypted value failed.

    Either the password is wrong or the ciphertext/nonce were altered.
    AES-GCM cannot tell these apart, so neither can we.
    """

    def __init__(self):
        super().__init__("cannot decrypt data: bad password")


class StorageError(DepotError):
    """Reading or writing the database failed."""


class EncryptionError(DepotError):
    """Key derivation or cipher setup failed."""

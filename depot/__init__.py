"""
Depot - Command-Line Key-Value Store with Optional Encryption

A tiny single-user store for values you want to keep at hand in a shell.

Key Features:
- Plain values: stored as-is, fetched without any password
- Secret values: AES-256-GCM, key derived from a password with PBKDF2
- One random salt per database, one random nonce per secret value
- Everything lives in a single SQLite file

Components:
- crypto.py: Key derivation and value encryption
- storage.py: SQLite schema, salt and record tables
- depot.py: The Depot facade (stow / fetch / peek / drop)
- errors.py: Exceptions raised by the library
- config.py: Environment variables and default database path
- cli.py: Command-line interface (uses built-in argparse)

Usage:
    echo "hello" | depot stow greeting          # Store a plain value
    echo "hunter2" | depot -s stow password     # Store a secret value
    depot fetch greeting                        # Print a value
    depot drop greeting                         # Remove a value
"""

from .depot import Depot
from .errors import (
    DepotError,
    InitializationError,
    NotFoundError,
    PasswordRequiredError,
    BadPasswordError,
    StorageError,
    EncryptionError,
)

__version__ = "1.0.0"

__all__ = [
    "Depot",
    "DepotError",
    "InitializationError",
    "NotFoundError",
    "PasswordRequiredError",
    "BadPasswordError",
    "StorageError",
    "EncryptionError",
]

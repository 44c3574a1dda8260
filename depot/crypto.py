"""
Depot - Cryptography Module

All cryptographic operations of the depot live in this file.

Security Architecture:
    1. Password + database salt -> PBKDF2 -> Value Key (32 bytes)
    2. Value Key + fresh random nonce -> AES-256-GCM -> ciphertext + tag
    3. The nonce is stored next to the ciphertext; the salt once per database

The key is derived again for every encrypt/decrypt call and never kept
around, so it only lives in memory for the duration of one operation.

The parameters below (PBKDF2-HMAC-SHA1, 4096 rounds, 32-byte key, 12-byte
nonce, no associated data) define the on-disk format. Changing any of them
makes existing databases unreadable.
"""

import logging
import os
from typing import Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import BadPasswordError, EncryptionError

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

KEY_SIZE = 32            # 256-bit key for AES-256
NONCE_SIZE = 12          # 96-bit nonce for AES-GCM
SALT_SIZE = 32           # one per database, never rotated
TAG_SIZE = 16            # 128-bit authentication tag appended to ciphertext

KDF_ITERATIONS = 4096


# =============================================================================
# Key Derivation
# =============================================================================

def derive_key(password: bytes, salt: bytes) -> bytes:
    """
    Derive the value key from a password using PBKDF2-HMAC-SHA1.

    Deterministic: the same (password, salt) pair always gives the same key.

    Args:
        password: User's password (any bytes, may be empty)
        salt: The database salt (see generate_salt)

    Returns:
        32-byte key
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA1(),
        length=KEY_SIZE,
        salt=salt,
        iterations=KDF_ITERATIONS,
    )
    return kdf.derive(password)


def generate_salt() -> bytes:
    """Return a fresh random database salt."""
    return os.urandom(SALT_SIZE)


# =============================================================================
# Encryption (AES-256-GCM)
# =============================================================================

def encrypt(password: bytes, salt: bytes, plaintext: bytes) -> Tuple[bytes, bytes]:
    """
    Encrypt one value under a password.

    Args:
        password: User's password
        salt: The database salt
        plaintext: Value to encrypt

    Returns:
        (ciphertext, nonce) tuple
        - ciphertext: encrypted data + 16-byte tag
        - nonce: 12 random bytes (must be stored with the ciphertext)

    Raises:
        EncryptionError: If key derivation or cipher setup fails
    """
    try:
        key = derive_key(password, salt)
        # Fresh nonce for every call, never reuse with the same key
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = AESGCM(key).encrypt(nonce, plaintext, None)
    except (TypeError, ValueError) as err:
        raise EncryptionError(f"cannot encrypt data: {err}") from err

    return ciphertext, nonce


def decrypt(password: bytes, salt: bytes, nonce: bytes, ciphertext: bytes) -> bytes:
    """
    Decrypt one value sealed by encrypt().

    Raises:
        BadPasswordError: Wrong password, or ciphertext/nonce tampered
        EncryptionError: Any other failure (e.g. malformed nonce)
    """
    try:
        key = derive_key(password, salt)
        aesgcm = AESGCM(key)
        return aesgcm.decrypt(nonce, ciphertext, None)
    except InvalidTag as err:
        logger.debug("authentication tag mismatch")
        raise BadPasswordError() from err
    except (TypeError, ValueError) as err:
        raise EncryptionError(f"cannot decrypt data: {err}") from err

"""
Cryptographic primitives for AES-256-GCM envelope encryption.

This module provides:
- SecureKey: Mutable key holder with explicit zeroization
- EncryptedData: Nonce, ciphertext and detached authentication tag
- AesGcmCipher: AES-256-GCM encryption/decryption operations
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from types import TracebackType
from typing import Optional, Type

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import CryptoError, DecryptionError

# Cryptographic constants
AES_256_KEY_SIZE: int = 32  # 256 bits
NONCE_SIZE: int = 12  # 96 bits (standard for AES-GCM)
TAG_SIZE: int = 16  # 128 bits (authentication tag)


class SecureKey:
    """
    Key material held in a bytearray so it can be zeroed in place.

    Use as a context manager to scope the key to a block: the buffer is
    wiped on exit whether the block returns normally or raises. The
    __del__ wipe is a fallback only; Python's garbage collector gives no
    timing guarantee.
    """

    __slots__ = ("_bytes",)

    def __init__(self, key_bytes: bytes | bytearray) -> None:
        if not isinstance(key_bytes, (bytes, bytearray)):
            raise CryptoError("Key must be bytes or bytearray")
        self._bytes = bytearray(key_bytes)

    @classmethod
    def generate(cls) -> SecureKey:
        """Generate a cryptographically secure random 32-byte key."""
        return cls(secrets.token_bytes(AES_256_KEY_SIZE))

    @property
    def buffer(self) -> bytearray:
        """The live key buffer. Wiping the key zeroes this object."""
        return self._bytes

    def copy(self) -> bytearray:
        """Return an independent copy the caller is responsible for wiping."""
        return bytearray(self._bytes)

    def wipe(self) -> None:
        """Overwrite the key material with zeros."""
        for i in range(len(self._bytes)):
            self._bytes[i] = 0

    def is_wiped(self) -> bool:
        return not any(self._bytes)

    def __enter__(self) -> SecureKey:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.wipe()

    def __len__(self) -> int:
        return len(self._bytes)

    def __repr__(self) -> str:
        """Redacted representation to prevent accidental key disclosure."""
        return "SecureKey([REDACTED])"

    def __del__(self) -> None:
        if hasattr(self, "_bytes"):
            self.wipe()


@dataclass(frozen=True)
class EncryptedData:
    """
    AES-GCM output split into its three wire parts.

    AESGCM appends the 16-byte tag to the ciphertext; records carry the tag
    as a separate field, so it is detached here and re-attached on decrypt.
    """

    nonce: bytes  # 12 bytes
    ciphertext: bytes  # without tag
    tag: bytes  # 16 bytes

    @classmethod
    def from_sealed(cls, nonce: bytes, sealed: bytes) -> EncryptedData:
        """Split AESGCM output (ciphertext || tag)."""
        if len(sealed) < TAG_SIZE:
            raise CryptoError(
                f"Sealed data too small: expected at least {TAG_SIZE} bytes, got {len(sealed)}"
            )
        return cls(nonce=nonce, ciphertext=sealed[:-TAG_SIZE], tag=sealed[-TAG_SIZE:])

    def sealed(self) -> bytes:
        """Ciphertext with the tag re-attached, as AESGCM expects it."""
        return self.ciphertext + self.tag


class AesGcmCipher:
    """
    AES-256-GCM authenticated encryption.

    Provides static methods for encryption and decryption with
    Additional Authenticated Data (AAD) for identity binding.
    """

    @staticmethod
    def encrypt(
        key: SecureKey,
        plaintext: bytes | bytearray,
        aad: Optional[bytes] = None,
    ) -> EncryptedData:
        """
        Encrypt plaintext with AES-256-GCM under a fresh random nonce.

        Args:
            key: 32-byte encryption key
            plaintext: Data to encrypt
            aad: Optional Additional Authenticated Data for binding

        Returns:
            EncryptedData with nonce, ciphertext and tag

        Raises:
            CryptoError: If key size is invalid or encryption fails
        """
        if len(key) != AES_256_KEY_SIZE:
            raise CryptoError(
                f"Invalid key size: expected {AES_256_KEY_SIZE}, got {len(key)}"
            )

        nonce = secrets.token_bytes(NONCE_SIZE)
        aesgcm = AESGCM(key.buffer)

        try:
            sealed = aesgcm.encrypt(nonce, plaintext, aad)
        except (ValueError, OverflowError) as e:
            raise CryptoError(f"Encryption error: {e}") from e

        return EncryptedData.from_sealed(nonce, sealed)

    @staticmethod
    def decrypt(
        key: SecureKey,
        encrypted: EncryptedData,
        aad: Optional[bytes] = None,
    ) -> bytes:
        """
        Decrypt and authenticate ciphertext with AES-256-GCM.

        Args:
            key: 32-byte decryption key
            encrypted: EncryptedData with nonce, ciphertext and tag
            aad: Optional Additional Authenticated Data (must match encryption)

        Returns:
            Decrypted plaintext bytes

        Raises:
            CryptoError: If key/nonce/tag size is invalid
            DecryptionError: If authentication fails
        """
        if len(key) != AES_256_KEY_SIZE:
            raise CryptoError(
                f"Invalid key size: expected {AES_256_KEY_SIZE}, got {len(key)}"
            )

        if len(encrypted.nonce) != NONCE_SIZE:
            raise CryptoError(
                f"Invalid nonce size: expected {NONCE_SIZE}, got {len(encrypted.nonce)}"
            )

        if len(encrypted.tag) != TAG_SIZE:
            raise CryptoError(
                f"Invalid tag size: expected {TAG_SIZE}, got {len(encrypted.tag)}"
            )

        aesgcm = AESGCM(key.buffer)

        try:
            return aesgcm.decrypt(encrypted.nonce, encrypted.sealed(), aad)
        except InvalidTag:
            # Generic error to prevent oracle attacks
            raise DecryptionError() from None


def generate_random_bytes(length: int) -> bytes:
    """
    Generate cryptographically secure random bytes.

    Args:
        length: Number of bytes to generate

    Returns:
        Random bytes of specified length
    """
    return secrets.token_bytes(length)


def generate_master_key_hex() -> str:
    """Generate a new master key as 64 lowercase hex characters."""
    return secrets.token_hex(AES_256_KEY_SIZE)

"""
Exception classes for transaction envelope encryption.

Two failure kinds reach callers of the engine: ValidationError for
malformed, caller-fixable input, and DecryptionError for any authenticated
decryption failure. DecryptionError always carries the same message so a
caller cannot tell which encryption layer rejected the record.
"""

from __future__ import annotations

from typing import Optional

DECRYPTION_FAILED_MESSAGE = "Decryption failed: data may be tampered or corrupted"


class EnvelopeError(Exception):
    """Base exception for all envelope encryption operations."""

    pass


class ValidationError(EnvelopeError):
    """Input failed a format, length or version check."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class CryptoError(EnvelopeError):
    """Cryptographic operation failed (encryption, decryption, key generation)."""

    pass


class DecryptionError(CryptoError):
    """Authenticated decryption failed at either layer."""

    def __init__(self) -> None:
        super().__init__(DECRYPTION_FAILED_MESSAGE)


class SerializationError(EnvelopeError):
    """Serialization or deserialization error."""

    pass


class RecordNotFoundError(EnvelopeError):
    """Record not found in storage."""

    pass


class ConfigError(EnvelopeError):
    """Configuration error."""

    pass

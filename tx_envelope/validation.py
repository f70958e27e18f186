"""
Format checks for wire fields and the master key.

Every check is pure and raises ValidationError naming the offending field.
The engine runs these before any decryption so malformed input never
reaches AES-GCM.
"""

from __future__ import annotations

import re
from typing import Any

from .crypto import AES_256_KEY_SIZE, NONCE_SIZE, TAG_SIZE
from .errors import ValidationError

_HEX_RE = re.compile(r"[0-9a-fA-F]+")

MASTER_KEY_FIELD = "master_key"


def validate_hex(value: Any, field: str) -> None:
    """Require a non-empty, even-length string of hex digits."""
    if (
        not isinstance(value, str)
        or len(value) % 2 != 0
        or _HEX_RE.fullmatch(value) is None
    ):
        raise ValidationError(
            f"{field} must be an even-length hex string (0-9, a-f, A-F)", field
        )


def validate_hex_length(value: Any, expected_bytes: int, field: str) -> None:
    """Require valid hex that decodes to exactly ``expected_bytes`` bytes."""
    validate_hex(value, field)
    actual_bytes = len(value) // 2

    if actual_bytes != expected_bytes:
        raise ValidationError(
            f"{field} must be {expected_bytes} bytes ({expected_bytes * 2} hex chars), "
            f"got {actual_bytes} bytes",
            field,
        )


def validate_nonce(value: Any, field: str) -> None:
    validate_hex_length(value, NONCE_SIZE, field)


def validate_tag(value: Any, field: str) -> None:
    validate_hex_length(value, TAG_SIZE, field)


def validate_master_key_hex(value: Any) -> None:
    """Require a 32-byte key encoded as 64 hex characters."""
    validate_hex(value, MASTER_KEY_FIELD)

    if len(value) != AES_256_KEY_SIZE * 2:
        raise ValidationError(
            f"master key must be {AES_256_KEY_SIZE} bytes "
            f"({AES_256_KEY_SIZE * 2} hex chars)",
            MASTER_KEY_FIELD,
        )


def hex_to_bytes(value: str) -> bytes:
    """Decode hex already checked by validate_hex."""
    return bytes.fromhex(value)


def bytes_to_hex(value: bytes | bytearray) -> str:
    return bytes(value).hex()

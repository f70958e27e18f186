"""
Record types exchanged between the engine and its callers.

This module provides:
- SecureRecord: The persisted/transmitted encrypted transaction record
- EncryptionResult: A record plus the caller-owned DEK used to produce it
- DecryptionInput: The fields the engine needs to decrypt a record

The wire mapping (to_dict/from_dict) uses the JSON field names shared with
any transport or storage layer: ``partyId`` and ``createdAt`` are camelCase,
all binary fields are lowercase hex.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

from .errors import SerializationError, ValidationError

ALGORITHM = "AES-256-GCM"
MK_VERSION = 1
RECORD_ID_PREFIX = "tx_"
RECORD_ID_RANDOM_BYTES = 16
RECORD_ID_PATTERN = re.compile(r"^tx_[0-9a-f]{32}$")

# (python attribute, wire name) for the fields needed to decrypt
_DECRYPTION_FIELDS = (
    ("id", "id"),
    ("party_id", "partyId"),
    ("mk_version", "mk_version"),
    ("payload_nonce", "payload_nonce"),
    ("payload_ct", "payload_ct"),
    ("payload_tag", "payload_tag"),
    ("dek_wrap_nonce", "dek_wrap_nonce"),
    ("dek_wrapped", "dek_wrapped"),
    ("dek_wrap_tag", "dek_wrap_tag"),
)


def _require(data: Mapping[str, Any], wire_name: str) -> Any:
    if wire_name not in data:
        raise ValidationError(f"{wire_name} is required", wire_name)
    return data[wire_name]


def _format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str):
        raise ValidationError("createdAt must be an ISO-8601 string", "createdAt")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(
            "createdAt must be an ISO-8601 string", "createdAt"
        ) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class SecureRecord:
    """Encrypted transaction record (the only persisted entity)."""

    id: str
    party_id: str
    created_at: datetime
    payload_nonce: str
    payload_ct: str
    payload_tag: str
    dek_wrap_nonce: str
    dek_wrapped: str
    dek_wrap_tag: str
    alg: str = ALGORITHM
    mk_version: int = MK_VERSION

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation."""
        return {
            "id": self.id,
            "partyId": self.party_id,
            "createdAt": _format_timestamp(self.created_at),
            "payload_nonce": self.payload_nonce,
            "payload_ct": self.payload_ct,
            "payload_tag": self.payload_tag,
            "dek_wrap_nonce": self.dek_wrap_nonce,
            "dek_wrapped": self.dek_wrapped,
            "dek_wrap_tag": self.dek_wrap_tag,
            "alg": self.alg,
            "mk_version": self.mk_version,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SecureRecord:
        """
        Build a record from its wire representation.

        Field contents are not checked here beyond presence; the engine
        validates every field before decrypting.

        Raises:
            ValidationError: If a field is missing or createdAt is malformed
        """
        values = {attr: _require(data, wire) for attr, wire in _DECRYPTION_FIELDS}
        return cls(
            created_at=_parse_timestamp(_require(data, "createdAt")),
            alg=data.get("alg", ALGORITHM),
            **values,
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str | bytes) -> SecureRecord:
        """Deserialize a record from a JSON document."""
        try:
            data = json.loads(json_str)
        except ValueError as e:
            raise SerializationError(f"Failed to deserialize record: {e}") from e
        if not isinstance(data, dict):
            raise SerializationError("Failed to deserialize record: expected a JSON object")
        return cls.from_dict(data)


@dataclass(frozen=True)
class DecryptionInput:
    """Fields required to decrypt a record, possibly attacker-modified."""

    id: str
    party_id: str
    mk_version: Any
    payload_nonce: str
    payload_ct: str
    payload_tag: str
    dek_wrap_nonce: str
    dek_wrapped: str
    dek_wrap_tag: str

    @classmethod
    def from_record(cls, record: SecureRecord) -> DecryptionInput:
        return cls(**{attr: getattr(record, attr) for attr, _ in _DECRYPTION_FIELDS})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DecryptionInput:
        return cls(**{attr: _require(data, wire) for attr, wire in _DECRYPTION_FIELDS})


@dataclass
class EncryptionResult:
    """
    A freshly encrypted record and the DEK that encrypted its payload.

    The DEK is a copy owned by the caller; the engine has already wiped its
    own. Call wipe_dek() once it is no longer needed.
    """

    record: SecureRecord
    dek: bytearray

    def wipe_dek(self) -> None:
        for i in range(len(self.dek)):
            self.dek[i] = 0

    def __repr__(self) -> str:
        return f"EncryptionResult(record={self.record!r}, dek=[REDACTED])"

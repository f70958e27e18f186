"""
Envelope encryption engine for transaction payloads.

Each payload is encrypted under a one-time DEK, and the DEK is wrapped under
the engine's master key. Both layers authenticate the same associated data
built from the record's id, party id and mk_version, so a ciphertext only
decrypts under the identity it was created for: swapping ``partyId`` or
``id`` between records, or changing the version, fails authentication even
though every ciphertext and tag byte is untouched.

The engine holds no mutable state. One instance can be shared across
threads; every call draws its own DEK and nonces.
"""

from __future__ import annotations

import json
import logging
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, Union

from .crypto import AES_256_KEY_SIZE, AesGcmCipher, EncryptedData, SecureKey
from .errors import DecryptionError, ValidationError
from .models import (
    ALGORITHM,
    MK_VERSION,
    RECORD_ID_PATTERN,
    RECORD_ID_PREFIX,
    RECORD_ID_RANDOM_BYTES,
    DecryptionInput,
    EncryptionResult,
    SecureRecord,
)
from .validation import (
    bytes_to_hex,
    hex_to_bytes,
    validate_hex,
    validate_hex_length,
    validate_master_key_hex,
    validate_nonce,
    validate_tag,
)

logger = logging.getLogger(__name__)

RecordLike = Union[SecureRecord, DecryptionInput]


def build_aad(record_id: str, party_id: str, mk_version: int) -> bytes:
    """Associated data shared by the payload and key-wrap layers."""
    return f"{record_id}:{party_id}:v{mk_version}".encode("utf-8")


def _new_record_id() -> str:
    return RECORD_ID_PREFIX + secrets.token_hex(RECORD_ID_RANDOM_BYTES)


def _serialize_payload(payload: Any) -> bytes:
    if not isinstance(payload, dict):
        raise ValidationError("payload must be an object", "payload")
    try:
        text = json.dumps(
            payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"payload must be JSON-serializable: {e}", "payload") from None
    return text.encode("utf-8")


def _parse_payload(plaintext: bytes) -> Dict[str, Any]:
    try:
        parsed = json.loads(plaintext.decode("utf-8"))
    except ValueError:
        raise ValidationError("invalid encoding in decrypted payload", "payload") from None

    if not isinstance(parsed, dict):
        raise ValidationError("decrypted payload must be an object", "payload")
    return parsed


class EnvelopeEngine:
    """
    Encrypts and decrypts transaction payloads under a single master key.

    Construction validates the key immediately; an invalid key never yields
    an engine.
    """

    __slots__ = ("_master_key",)

    def __init__(self, master_key_hex: str) -> None:
        """
        Args:
            master_key_hex: 32-byte master key as 64 hex characters

        Raises:
            ValidationError: If the key is not 64 hex characters
        """
        validate_master_key_hex(master_key_hex)
        self._master_key = SecureKey(hex_to_bytes(master_key_hex))

    @property
    def mk_version(self) -> int:
        return MK_VERSION

    def __repr__(self) -> str:
        return f"EnvelopeEngine(mk_version={MK_VERSION}, master_key=[REDACTED])"

    def encrypt_payload(self, party_id: str, payload: Dict[str, Any]) -> EncryptionResult:
        """
        Encrypt a payload for a party.

        Args:
            party_id: Owner of the record, bound into the associated data
            payload: JSON-serializable object

        Returns:
            EncryptionResult with the new record and a caller-owned DEK copy

        Raises:
            ValidationError: If party_id is blank or payload is not a
                JSON-serializable object
        """
        if not isinstance(party_id, str) or not party_id.strip():
            raise ValidationError("party_id must be a non-empty string", "partyId")

        plaintext = _serialize_payload(payload)
        record_id = _new_record_id()
        aad = build_aad(record_id, party_id, MK_VERSION)

        with SecureKey.generate() as dek:
            encrypted_payload = AesGcmCipher.encrypt(dek, plaintext, aad)
            wrapped_dek = AesGcmCipher.encrypt(self._master_key, dek.buffer, aad)
            dek_copy = dek.copy()

        record = SecureRecord(
            id=record_id,
            party_id=party_id,
            created_at=datetime.now(timezone.utc),
            payload_nonce=bytes_to_hex(encrypted_payload.nonce),
            payload_ct=bytes_to_hex(encrypted_payload.ciphertext),
            payload_tag=bytes_to_hex(encrypted_payload.tag),
            dek_wrap_nonce=bytes_to_hex(wrapped_dek.nonce),
            dek_wrapped=bytes_to_hex(wrapped_dek.ciphertext),
            dek_wrap_tag=bytes_to_hex(wrapped_dek.tag),
            alg=ALGORITHM,
            mk_version=MK_VERSION,
        )

        logger.debug("Payload encrypted", extra={"record_id": record_id})
        return EncryptionResult(record=record, dek=dek_copy)

    def decrypt_payload(self, record: RecordLike) -> Dict[str, Any]:
        """
        Verify and decrypt a record.

        All format and version checks run before any decryption.

        Args:
            record: SecureRecord or DecryptionInput, possibly tampered

        Returns:
            The decrypted payload object

        Raises:
            ValidationError: If a field is missing, malformed or mis-sized,
                the version is unsupported, or the plaintext is not a JSON object
            DecryptionError: If either layer fails authentication
        """
        self._validate_input(record)

        aad = build_aad(record.id, record.party_id, record.mk_version)
        wrapped_dek = EncryptedData(
            nonce=hex_to_bytes(record.dek_wrap_nonce),
            ciphertext=hex_to_bytes(record.dek_wrapped),
            tag=hex_to_bytes(record.dek_wrap_tag),
        )
        encrypted_payload = EncryptedData(
            nonce=hex_to_bytes(record.payload_nonce),
            ciphertext=hex_to_bytes(record.payload_ct),
            tag=hex_to_bytes(record.payload_tag),
        )

        try:
            with SecureKey(AesGcmCipher.decrypt(self._master_key, wrapped_dek, aad)) as dek:
                if len(dek) != AES_256_KEY_SIZE:
                    raise ValidationError(
                        f"unwrapped DEK must be {AES_256_KEY_SIZE} bytes", "dek_wrapped"
                    )
                plaintext = AesGcmCipher.decrypt(dek, encrypted_payload, aad)
        except DecryptionError:
            logger.warning("Record failed authentication", extra={"record_id": record.id})
            raise

        payload = _parse_payload(plaintext)
        logger.debug("Payload decrypted", extra={"record_id": record.id})
        return payload

    @staticmethod
    def _validate_input(record: RecordLike) -> None:
        for value in (record.id, record.party_id):
            if not isinstance(value, str) or not value:
                raise ValidationError("id and partyId are required for decryption")

        # A fixed-shape id keeps the ':' separators in the AAD unambiguous
        if not RECORD_ID_PATTERN.fullmatch(record.id):
            raise ValidationError(
                "id must match tx_ followed by 32 lowercase hex characters", "id"
            )

        # bool is an int subclass; True must not pass as version 1
        version = record.mk_version
        if type(version) is not int or version != MK_VERSION:
            raise ValidationError(
                f"unsupported version: mk_version {version!r}, expected {MK_VERSION}",
                "mk_version",
            )

        validate_nonce(record.payload_nonce, "payload_nonce")
        validate_tag(record.payload_tag, "payload_tag")
        validate_nonce(record.dek_wrap_nonce, "dek_wrap_nonce")
        validate_tag(record.dek_wrap_tag, "dek_wrap_tag")
        validate_hex(record.payload_ct, "payload_ct")
        validate_hex_length(record.dek_wrapped, AES_256_KEY_SIZE, "dek_wrapped")

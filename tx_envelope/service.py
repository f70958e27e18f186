"""
Transaction service: the engine plus a record store.

This is the layer a transport (HTTP handler, queue consumer) calls. It owns
the caller-side rules the engine leaves open: party id format, payload size
limit, id lookup and DEK disposal.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

from .config import Settings
from .engine import EnvelopeEngine
from .errors import DecryptionError, RecordNotFoundError, ValidationError
from .models import RECORD_ID_PATTERN, SecureRecord
from .storage import InMemoryRecordStorage, RecordStorage

logger = logging.getLogger(__name__)

PARTY_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{3,64}$")
MAX_PAYLOAD_BYTES = 64 * 1024


class TransactionService:
    """Encrypts, stores and decrypts transaction records."""

    def __init__(self, engine: EnvelopeEngine, storage: RecordStorage) -> None:
        self._engine = engine
        self._storage = storage

    @classmethod
    def from_settings(cls, settings: Settings) -> TransactionService:
        """Build a service with an in-memory store from loaded settings."""
        return cls(
            engine=EnvelopeEngine(settings.master_key_hex),
            storage=InMemoryRecordStorage(),
        )

    @property
    def storage(self) -> RecordStorage:
        return self._storage

    async def encrypt_and_store(
        self, party_id: str, payload: Dict[str, Any]
    ) -> SecureRecord:
        """
        Encrypt a payload and store the resulting record.

        The DEK returned by the engine is wiped here; the service never
        retains it.

        Raises:
            ValidationError: If party_id or payload is rejected
        """
        if not isinstance(party_id, str) or not PARTY_ID_PATTERN.match(party_id):
            raise ValidationError(
                "partyId must be 3-64 characters of letters, digits, '_' or '-'",
                "partyId",
            )
        if not isinstance(payload, dict):
            raise ValidationError("payload must be an object", "payload")

        try:
            size = len(json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))
        except (TypeError, ValueError) as e:
            raise ValidationError(f"payload must be JSON-serializable: {e}", "payload") from None
        if size > MAX_PAYLOAD_BYTES:
            raise ValidationError(
                f"payload exceeds max allowed size of {MAX_PAYLOAD_BYTES} bytes", "payload"
            )

        result = self._engine.encrypt_payload(party_id, payload)
        result.wipe_dek()
        await self._storage.save(result.record)

        logger.info(
            "Transaction encrypted and stored",
            extra={"record_id": result.record.id, "party_id": party_id},
        )
        return result.record

    async def get_record(self, record_id: str) -> SecureRecord:
        """
        Raises:
            ValidationError: If record_id is not a valid record id
            RecordNotFoundError: If no record has this id
        """
        if not isinstance(record_id, str) or not RECORD_ID_PATTERN.match(record_id):
            raise ValidationError("id must match tx_ followed by 32 hex characters", "id")

        record = await self._storage.find_by_id(record_id)
        if record is None:
            raise RecordNotFoundError(f"Transaction {record_id} not found")
        return record

    async def decrypt_record(self, record_id: str) -> Dict[str, Any]:
        """
        Look up a stored record and decrypt its payload.

        Raises:
            ValidationError: If the id or stored record is malformed
            RecordNotFoundError: If no record has this id
            DecryptionError: If the record fails authentication
        """
        record = await self.get_record(record_id)

        try:
            payload = self._engine.decrypt_payload(record)
        except ValidationError as e:
            logger.warning(
                "Decryption validation failed",
                extra={"record_id": record_id, "error": str(e)},
            )
            raise
        except DecryptionError:
            logger.error("Decryption failed", extra={"record_id": record_id})
            raise

        logger.info("Transaction decrypted", extra={"record_id": record_id})
        return payload

    async def list_records(self, party_id: Optional[str] = None) -> List[SecureRecord]:
        """All records, or those of one party, newest first."""
        if party_id is None:
            return await self._storage.list()
        return await self._storage.find_by_party_id(party_id)

    async def count(self) -> int:
        return await self._storage.count()

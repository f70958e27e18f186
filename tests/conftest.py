"""
Pytest configuration and fixtures for transaction envelope tests.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timezone
from typing import Callable

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from tx_envelope import (
    EnvelopeEngine,
    InMemoryRecordStorage,
    SecureRecord,
    TransactionService,
    build_aad,
)


@pytest.fixture
def master_key_hex() -> str:
    return secrets.token_hex(32)


@pytest.fixture
def engine(master_key_hex: str) -> EnvelopeEngine:
    return EnvelopeEngine(master_key_hex)


@pytest.fixture
def memory_storage() -> InMemoryRecordStorage:
    """Create an in-memory storage instance for testing."""
    return InMemoryRecordStorage()


@pytest.fixture
def service(
    engine: EnvelopeEngine, memory_storage: InMemoryRecordStorage
) -> TransactionService:
    return TransactionService(engine, memory_storage)


@pytest.fixture
def forge_record(master_key_hex: str) -> Callable[..., SecureRecord]:
    """
    Build a correctly authenticated record around arbitrary plaintext.

    Lets tests reach the post-decryption checks with content the engine
    itself would refuse to encrypt.
    """

    def _forge(plaintext: bytes, party_id: str = "party_1") -> SecureRecord:
        record_id = "tx_" + secrets.token_hex(16)
        aad = build_aad(record_id, party_id, 1)
        dek = secrets.token_bytes(32)
        payload_nonce = secrets.token_bytes(12)
        wrap_nonce = secrets.token_bytes(12)

        sealed_payload = AESGCM(dek).encrypt(payload_nonce, plaintext, aad)
        sealed_dek = AESGCM(bytes.fromhex(master_key_hex)).encrypt(wrap_nonce, dek, aad)

        return SecureRecord(
            id=record_id,
            party_id=party_id,
            created_at=datetime.now(timezone.utc),
            payload_nonce=payload_nonce.hex(),
            payload_ct=sealed_payload[:-16].hex(),
            payload_tag=sealed_payload[-16:].hex(),
            dek_wrap_nonce=wrap_nonce.hex(),
            dek_wrapped=sealed_dek[:-16].hex(),
            dek_wrap_tag=sealed_dek[-16:].hex(),
        )

    return _forge

"""
Transaction Envelope Encryption

Envelope encryption for structured transaction payloads at rest. Each record
is bound to its own identity (id, partyId, mk_version) so it cannot be
swapped between owners, replayed under another id, or silently corrupted.

Quick Start
-----------
```python
from tx_envelope import EnvelopeEngine, SecureRecord

engine = EnvelopeEngine("00" * 32)

result = engine.encrypt_payload("party_1", {"amount": 150, "currency": "AED"})
result.wipe_dek()  # the DEK copy is caller-owned

record = result.record
wire = record.to_json()  # persist or transmit this

payload = engine.decrypt_payload(SecureRecord.from_json(wire))
```

Key Features
------------
- **AES-256-GCM**: Authenticated encryption on both layers
- **One-time DEKs**: A fresh data-encryption key per record, wrapped by the master key
- **Identity Binding**: id, partyId and mk_version authenticated as associated data
- **Fail-fast Validation**: Hex, length and version checks before any decryption
- **Generic Integrity Errors**: No indication of which layer failed
- **Memory Hygiene**: DEK buffers zeroed on every exit path

Modules
-------
- `crypto`: AES-256-GCM primitives and the SecureKey holder
- `validation`: Hex and length checks for wire fields and the master key
- `models`: SecureRecord, EncryptionResult, DecryptionInput
- `engine`: EnvelopeEngine
- `errors`: Exception hierarchy
- `storage`: In-memory record storage
- `service`: TransactionService (engine + storage)
- `config`: Environment-based settings
- `observability`: Logging setup
"""

__version__ = "0.1.0"

# =============================================================================
# Crypto Exports
# =============================================================================

from .crypto import (
    AES_256_KEY_SIZE,
    NONCE_SIZE,
    TAG_SIZE,
    AesGcmCipher,
    EncryptedData,
    SecureKey,
    generate_master_key_hex,
    generate_random_bytes,
)

# =============================================================================
# Error Exports
# =============================================================================

from .errors import (
    ConfigError,
    CryptoError,
    DecryptionError,
    EnvelopeError,
    RecordNotFoundError,
    SerializationError,
    ValidationError,
)

# =============================================================================
# Validation Exports
# =============================================================================

from .validation import (
    validate_hex,
    validate_hex_length,
    validate_master_key_hex,
    validate_nonce,
    validate_tag,
)

# =============================================================================
# Model Exports
# =============================================================================

from .models import (
    ALGORITHM,
    MK_VERSION,
    RECORD_ID_PATTERN,
    RECORD_ID_PREFIX,
    DecryptionInput,
    EncryptionResult,
    SecureRecord,
)

# =============================================================================
# Engine Exports (Primary API)
# =============================================================================

from .engine import EnvelopeEngine, build_aad

# =============================================================================
# Service, Storage and Config Exports
# =============================================================================

from .config import Settings, load_settings
from .observability import JSONFormatter, setup_logging
from .service import MAX_PAYLOAD_BYTES, TransactionService
from .storage import InMemoryRecordStorage, RecordStorage

# =============================================================================
# Public API
# =============================================================================

__all__ = [
    # Version
    "__version__",
    # Crypto
    "AES_256_KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
    "AesGcmCipher",
    "EncryptedData",
    "SecureKey",
    "generate_master_key_hex",
    "generate_random_bytes",
    # Errors
    "EnvelopeError",
    "ValidationError",
    "CryptoError",
    "DecryptionError",
    "SerializationError",
    "RecordNotFoundError",
    "ConfigError",
    # Validation
    "validate_hex",
    "validate_hex_length",
    "validate_nonce",
    "validate_tag",
    "validate_master_key_hex",
    # Models
    "ALGORITHM",
    "MK_VERSION",
    "RECORD_ID_PREFIX",
    "RECORD_ID_PATTERN",
    "SecureRecord",
    "EncryptionResult",
    "DecryptionInput",
    # Engine (Primary API)
    "EnvelopeEngine",
    "build_aad",
    # Service, storage, config
    "TransactionService",
    "MAX_PAYLOAD_BYTES",
    "RecordStorage",
    "InMemoryRecordStorage",
    "Settings",
    "load_settings",
    "setup_logging",
    "JSONFormatter",
]

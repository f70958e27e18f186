from __future__ import annotations

import pytest

import tx_envelope.crypto as crypto_module
from tx_envelope import (
    NONCE_SIZE,
    TAG_SIZE,
    AesGcmCipher,
    CryptoError,
    DecryptionError,
    EncryptedData,
    SecureKey,
    generate_master_key_hex,
    generate_random_bytes,
)


def test_secure_key_generate_and_redact():
    key = SecureKey.generate()
    assert len(key) == 32
    assert repr(key) == "SecureKey([REDACTED])"


def test_secure_key_rejects_non_bytes():
    with pytest.raises(CryptoError):
        SecureKey("not bytes")  # type: ignore[arg-type]


def test_secure_key_context_manager_wipes_on_error():
    key = SecureKey(b"\x01" * 32)
    with pytest.raises(RuntimeError):
        with key:
            raise RuntimeError("boom")
    assert key.is_wiped()
    assert key.buffer == bytearray(32)


def test_copy_is_independent():
    key = SecureKey(b"\x07" * 32)
    copy = key.copy()
    key.wipe()
    assert copy == bytearray(b"\x07" * 32)


def test_encrypt_decrypt_with_aad():
    key = SecureKey.generate()
    encrypted = AesGcmCipher.encrypt(key, b"hello", b"aad")

    assert len(encrypted.nonce) == NONCE_SIZE
    assert len(encrypted.tag) == TAG_SIZE
    assert len(encrypted.ciphertext) == 5
    assert AesGcmCipher.decrypt(key, encrypted, b"aad") == b"hello"


def test_wrong_aad_raises_generic_error():
    key = SecureKey.generate()
    encrypted = AesGcmCipher.encrypt(key, b"hello", b"aad")

    with pytest.raises(DecryptionError) as exc:
        AesGcmCipher.decrypt(key, encrypted, b"other")
    assert str(exc.value) == "Decryption failed: data may be tampered or corrupted"
    assert exc.value.__cause__ is None


def test_invalid_key_size():
    with pytest.raises(CryptoError, match="Invalid key size"):
        AesGcmCipher.encrypt(SecureKey(b"\x00" * 16), b"data")


def test_invalid_nonce_size_on_decrypt():
    key = SecureKey.generate()
    bad = EncryptedData(nonce=b"\x00" * 8, ciphertext=b"", tag=b"\x00" * TAG_SIZE)
    with pytest.raises(CryptoError, match="Invalid nonce size"):
        AesGcmCipher.decrypt(key, bad)


def test_generate_master_key_hex():
    key_hex = generate_master_key_hex()
    assert len(key_hex) == 64
    assert key_hex == key_hex.lower()
    bytes.fromhex(key_hex)


def test_generate_random_bytes():
    first = generate_random_bytes(16)
    assert len(first) == 16
    assert first != generate_random_bytes(16)


def test_plaintext_buffer_passed_without_copy(monkeypatch):
    seen = []
    real_aesgcm = crypto_module.AESGCM

    class RecordingAESGCM:
        def __init__(self, key):
            self._inner = real_aesgcm(key)

        def encrypt(self, nonce, data, aad):
            seen.append(data)
            return self._inner.encrypt(nonce, data, aad)

    monkeypatch.setattr(crypto_module, "AESGCM", RecordingAESGCM)

    key = SecureKey.generate()
    dek = SecureKey.generate()
    AesGcmCipher.encrypt(key, dek.buffer, b"aad")

    assert seen[0] is dek.buffer

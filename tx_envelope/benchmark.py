"""
Transaction Envelope Benchmark CLI.

Usage:
    tx-envelope-benchmark

Or run directly:
    python -m tx_envelope.benchmark

Setup:
    Set MASTER_KEY (64 hex characters) in the environment or a .env file.
    A key can be generated with:
        python -c "from tx_envelope import generate_master_key_hex; print(generate_master_key_hex())"
"""

from __future__ import annotations

import sys
import time
from dataclasses import replace
from typing import Optional

from tx_envelope.config import load_settings
from tx_envelope.engine import EnvelopeEngine
from tx_envelope.errors import ConfigError, DecryptionError, ValidationError
from tx_envelope.observability import setup_logging

DEFAULT_ITERATIONS = 1000

SAMPLE_PAYLOAD = {
    "amount": 150,
    "currency": "AED",
    "reference": "INV-2024-0001",
    "lines": [{"sku": "A-100", "qty": 2}, {"sku": "B-200", "qty": 1}],
}


def _prompt_iterations() -> int:
    try:
        user_input = input(
            f"Enter number of iterations (default: {DEFAULT_ITERATIONS}): "
        ).strip()
        return int(user_input) if user_input else DEFAULT_ITERATIONS
    except (ValueError, EOFError):
        return DEFAULT_ITERATIONS


def _flip_last_hex_digit(value: str) -> str:
    return value[:-1] + ("1" if value[-1] == "0" else "0")


def run_benchmark(iterations: Optional[int] = None) -> None:
    """Run the encrypt/decrypt benchmark."""
    print("=== Transaction Envelope Benchmark ===\n")

    try:
        settings = load_settings()
        setup_logging(settings.log_level, settings.log_format)
        engine = EnvelopeEngine(settings.master_key_hex)
    except (ConfigError, ValidationError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    if iterations is None:
        iterations = _prompt_iterations()
    iterations = max(1, iterations)
    print(f"Testing with {iterations} iterations\n")

    print("=" * 70)
    print("                    BENCHMARK START")
    print("=" * 70 + "\n")

    # ========================================================================
    # Encryption
    # ========================================================================
    print("+" + "-" * 68 + "+")
    print("|  Encryption                                                        |")
    print("+" + "-" * 68 + "+")

    records = []
    encrypt_start = time.perf_counter()
    for _ in range(iterations):
        result = engine.encrypt_payload("party_bench", SAMPLE_PAYLOAD)
        result.wipe_dek()
        records.append(result.record)
    encrypt_duration = time.perf_counter() - encrypt_start

    print(f"[OK] Encrypted {iterations} payloads")
    print(f"[PERF] Time: {encrypt_duration * 1000:.3f}ms | Rate: {iterations / encrypt_duration:.2f} ops/sec\n")

    # ========================================================================
    # Decryption
    # ========================================================================
    print("+" + "-" * 68 + "+")
    print("|  Decryption                                                        |")
    print("+" + "-" * 68 + "+")

    decrypt_start = time.perf_counter()
    for record in records:
        if engine.decrypt_payload(record) != SAMPLE_PAYLOAD:
            print("[ERROR] Round-trip mismatch")
            sys.exit(1)
    decrypt_duration = time.perf_counter() - decrypt_start

    print(f"[OK] Decrypted {iterations} records")
    print(f"[PERF] Time: {decrypt_duration * 1000:.3f}ms | Rate: {iterations / decrypt_duration:.2f} ops/sec\n")

    # ========================================================================
    # Tamper rejection
    # ========================================================================
    print("+" + "-" * 68 + "+")
    print("|  Tamper Rejection                                                  |")
    print("+" + "-" * 68 + "+")

    rejected = 0
    tamper_start = time.perf_counter()
    for record in records:
        tampered = replace(record, payload_tag=_flip_last_hex_digit(record.payload_tag))
        try:
            engine.decrypt_payload(tampered)
        except DecryptionError:
            rejected += 1
    tamper_duration = time.perf_counter() - tamper_start

    print(f"[OK] Rejected {rejected}/{iterations} tampered records")
    print(f"[PERF] Time: {tamper_duration * 1000:.3f}ms | Rate: {iterations / tamper_duration:.2f} ops/sec\n")

    # ========================================================================
    # Summary
    # ========================================================================
    print("=" * 70)
    print("                    BENCHMARK SUMMARY")
    print("=" * 70 + "\n")

    enc_rate = f"{iterations / encrypt_duration:.2f}"
    dec_rate = f"{iterations / decrypt_duration:.2f}"
    rej_rate = f"{iterations / tamper_duration:.2f}"
    print(f"  Encryption:        {enc_rate} ops/sec")
    print(f"  Decryption:        {dec_rate} ops/sec")
    print(f"  Tamper rejection:  {rej_rate} ops/sec")

    print("\nTest Configuration:")
    print(f"  - Iterations: {iterations}")
    print("  - Crypto: AES-256-GCM, payload layer + DEK wrap layer")
    print(f"  - mk_version: {engine.mk_version}")

    print("\n" + "=" * 70)
    print("                    BENCHMARK COMPLETE")
    print("=" * 70 + "\n")


def main() -> None:
    """CLI entry point for tx-envelope-benchmark command."""
    run_benchmark()


if __name__ == "__main__":
    main()

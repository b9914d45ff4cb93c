# src/goosereview/cache/fingerprint.py — v1
"""Content fingerprinting for change detection.

A fingerprint is the SHA-256 hex digest of a file's raw bytes: fixed length,
unsalted, identical bytes always give the same value.
"""

from __future__ import annotations

import hashlib

FINGERPRINT_LENGTH = 64


def compute_fingerprint(raw_bytes: bytes) -> str:
    """SHA-256 on raw file bytes."""
    return hashlib.sha256(raw_bytes).hexdigest()


def compute_text_fingerprint(code: str) -> str:
    """Fingerprint of source text as the UI sends it (UTF-8 encoded)."""
    return compute_fingerprint(code.encode("utf-8"))

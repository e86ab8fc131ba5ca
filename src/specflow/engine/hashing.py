"""Content hashing for specflow documents.

ParseCache keys its single slot on the SHA-256 of the raw document text,
so any byte-level change to a document is a cache miss.
"""

from __future__ import annotations

import hashlib


def text_hash(text: str) -> str:
    """SHA-256 hex digest of a raw document string."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()

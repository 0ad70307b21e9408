"""
Content hashing for transaction unit documents.

Documents are encoded canonically before hashing: sorted keys, compact
separators, UTF-8 without ASCII escaping. NaN and infinities are rejected
because they have no JSON representation.
"""

import hashlib
import json
from typing import Any

DIGEST_PREFIX = "sha256:"


def encode_document(document: Any) -> bytes:
    """Encode a JSON-compatible document to its canonical byte form."""
    text = json.dumps(
        document,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return text.encode("utf-8")


def content_digest(document: Any) -> str:
    """
    Return the prefixed SHA256 digest of a document's canonical encoding.

    Two units with the same inputs and commands always share a digest,
    regardless of the unit's local identity.
    """
    return DIGEST_PREFIX + hashlib.sha256(encode_document(document)).hexdigest()

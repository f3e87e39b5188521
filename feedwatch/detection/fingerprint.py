"""Content fingerprinting for cheap change comparison."""

from __future__ import annotations

import hashlib


def fingerprint(content: str) -> str:
    """Return the lowercase hex SHA-256 of *content* encoded as UTF-8."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()

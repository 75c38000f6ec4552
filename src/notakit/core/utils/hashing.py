"""SHA-256 hashing for stable identifiers derived from source text"""

import hashlib


def sha256(content: str) -> str:
    """Return the hex-encoded SHA-256 digest of content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()

"""
Digest engine: SHA-1 identities for stored objects
"""

import hashlib
import logging
import string

from objectdb.constants import SHA_LENGTH, RAW_SHA_LENGTH
from objectdb.errors import InvalidFormat

logger = logging.getLogger(__name__)

_HEX_DIGITS = frozenset(string.hexdigits)


def digest_of(data: bytes) -> str:
    """Compute the lowercase hex SHA-1 of exactly the bytes given"""
    sha = hashlib.sha1(data).hexdigest()
    logger.debug("Generated sha: %s", sha)
    return sha


def is_valid_format(candidate) -> bool:
    """Check that candidate is exactly 40 hex characters (any case)"""
    return (
        isinstance(candidate, str)
        and len(candidate) == SHA_LENGTH
        and all(c in _HEX_DIGITS for c in candidate)
    )


def validate_format(candidate) -> None:
    """
    Reject a malformed digest before it is used to build a path

    Raises:
        InvalidFormat: if candidate is not 40 hexadecimal characters
    """
    if not is_valid_format(candidate):
        raise InvalidFormat(f"Invalid object name {candidate!r}: expected {SHA_LENGTH} hexadecimal characters")


def to_raw(sha: str) -> bytes:
    """Convert a 40-char hex digest into its 20 raw bytes"""
    validate_format(sha)
    return bytes.fromhex(sha)


def from_raw(raw: bytes) -> str:
    """Render 20 raw digest bytes as 40 lowercase hex characters"""
    if len(raw) != RAW_SHA_LENGTH:
        raise ValueError(f"expected {RAW_SHA_LENGTH} digest bytes, got {len(raw)}")
    return raw.hex()

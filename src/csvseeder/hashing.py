"""One-way hashing for credential columns."""

import bcrypt

# bcrypt only uses the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


def _secret(value: str) -> bytes:
    return value.encode("utf-8")[:BCRYPT_MAX_BYTES]


def bcrypt_hash(value: str) -> str:
    """Hash a value with a fresh bcrypt salt."""
    hashed = bcrypt.hashpw(_secret(value), bcrypt.gensalt())
    return hashed.decode("utf-8")


def check_hash(value: str, hashed: str) -> bool:
    """Verify a value against a bcrypt hash."""
    return bcrypt.checkpw(_secret(value), hashed.encode("utf-8"))

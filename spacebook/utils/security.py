"""Password hashing with PBKDF2-SHA256 in `pbkdf2_sha256$rounds$salt$hash` form."""

from __future__ import annotations

import hashlib
import secrets


_SCHEME = "pbkdf2_sha256"


def hash_password(password: str, rounds: int) -> str:
    salt = secrets.token_hex(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt), rounds)
    return f"{_SCHEME}${rounds}${salt}${dk.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        scheme, rounds, salt, expected = encoded.split("$", 3)
        rounds_value = int(rounds)
        salt_bytes = bytes.fromhex(salt)
    except ValueError:
        return False
    if scheme != _SCHEME:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt_bytes, rounds_value)
    return secrets.compare_digest(dk.hex(), expected)

import secrets

import bcrypt

from backend.core import config

TEMPORARY_PASSWORD_BYTES = 8


def hash_password(password: str, rounds: int | None = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        return False


def generate_temporary_password() -> str:
    """Return a 16 character lowercase hex password from a CSPRNG."""
    return secrets.token_hex(TEMPORARY_PASSWORD_BYTES)

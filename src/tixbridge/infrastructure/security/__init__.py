"""Password hashing with bcrypt."""

import bcrypt

BCRYPT_ROUNDS = 10


def hash_password(password: str, *, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plaintext password.

    Args:
        password: Plaintext password
        rounds: bcrypt cost factor

    Returns:
        bcrypt hash as text
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


__all__ = ["BCRYPT_ROUNDS", "hash_password", "verify_password"]

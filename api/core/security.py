"""Password hashing with bcrypt.

Stored passwords are bcrypt hashes ("$2b$<rounds>$<salt+digest>"); the
plaintext never reaches the database.
"""

import bcrypt

from core.config import get_settings

# bcrypt only looks at the first 72 bytes and rejects longer input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a plaintext password with a fresh salt.

    The cost factor comes from settings.password_hash_rounds.
    """
    salt = bcrypt.gensalt(rounds=get_settings().password_hash_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("ascii")

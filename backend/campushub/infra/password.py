"""Centralized password hashing configuration.

All modules requiring password hashing import from here so every stored
hash is produced with the same Argon2id parameters. Argon2 salts each hash
individually and compares digests in constant time during verification.
"""

from argon2 import PasswordHasher
from argon2 import exceptions as argon_exc

# Argon2id parameters
# - Memory: 64 MB (65536 KB)
# - Iterations (time_cost): 3
# - Parallelism: 4
PASSWORD_HASHER = PasswordHasher(
    time_cost=3,
    memory_cost=65536,
    parallelism=4,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    """Hash a password using Argon2id."""
    return PASSWORD_HASHER.hash(password)


def verify_password(hash: str, password: str) -> bool:
    """Verify a password against its hash.

    Returns True if valid, False otherwise.
    """
    try:
        return PASSWORD_HASHER.verify(hash, password)
    except argon_exc.VerifyMismatchError:
        return False
    except argon_exc.VerificationError:
        return False
    except argon_exc.InvalidHashError:
        return False


def check_needs_rehash(hash: str) -> bool:
    """Return True when the hash was made with different parameters and should be upgraded."""
    return PASSWORD_HASHER.check_needs_rehash(hash)

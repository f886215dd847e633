"""Argon2id password hashing using argon2-cffi."""
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from gatehouse.domain.identity.value_objects import Password, PasswordHash

_hasher = PasswordHasher(
    time_cost=2,
    memory_cost=65536,  # 64 MiB
    parallelism=2,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: Password | str) -> PasswordHash:
    """Hash a validated password. Strength rules are enforced by ``Password``."""
    return PasswordHash(_hasher.hash(str(password)))


def verify_password(raw_password: str, password_hash: PasswordHash) -> bool:
    try:
        return _hasher.verify(str(password_hash), raw_password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False

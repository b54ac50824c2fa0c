import logging
import os

from argon2.low_level import Type, hash_secret_raw

from .framing import KEY_LEN

logger = logging.getLogger(__name__)

PASSPHRASE_LENGTH = 256
SALT_LENGTH = 32
TIME_COST = 2
MEMORY_COST = 19456
PARALLELISM = 1


def create_salt(length: int = SALT_LENGTH) -> bytes:
    """Return ``length`` cryptographically secure random bytes."""
    try:
        return os.urandom(length)
    except (OSError, NotImplementedError):
        logger.error("Problem reading random data while generating salt")
        raise


def derive_key(
    password: bytes,
    salt: bytes,
    time_cost: int = TIME_COST,
    memory_cost: int = MEMORY_COST,
    parallelism: int = PARALLELISM,
    key_len: int = KEY_LEN,
) -> bytes:
    """
    Derive key material from a password using Argon2id.
    Returns raw derived key bytes.
    """
    if isinstance(password, str):
        password = password.encode("utf-8")

    return hash_secret_raw(
        secret=password,
        salt=salt,
        time_cost=time_cost,
        memory_cost=memory_cost,
        parallelism=parallelism,
        hash_len=key_len,
        type=Type.ID,
    )


def create_key_buffer() -> bytes:
    """
    Return a fresh 32-byte AES-256 key.

    Both the passphrase and the salt fed to Argon2id are random, so the KDF
    only mixes two independent random sources; nothing here is derived from
    a user secret.
    """
    passphrase = create_salt(PASSPHRASE_LENGTH)
    salt = create_salt(SALT_LENGTH)
    return derive_key(passphrase, salt)


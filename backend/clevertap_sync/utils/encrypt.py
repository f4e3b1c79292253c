"""Fernet encryption for connection passcodes."""

from functools import lru_cache

from cryptography.fernet import Fernet

from clevertap_sync.config import settings

MASK = "********"


@lru_cache(maxsize=4)
def get_fernet(key: str) -> Fernet:
    return Fernet(key.encode("utf-8"))


def encrypt_data(data: str) -> str:
    return get_fernet(settings.encryption_key).encrypt(data.encode("utf-8")).decode("utf-8")


def decrypt_data(encrypted_data: str) -> str:
    """Raises cryptography.fernet.InvalidToken when the key does not match."""
    return get_fernet(settings.encryption_key).decrypt(encrypted_data.encode("utf-8")).decode("utf-8")


def mask_secret(value):
    """Mask a stored secret for API responses; cleared secrets stay empty."""
    return MASK if value else None

import base64
import binascii
import hashlib
import hmac
import secrets
from typing import Optional, Tuple

SALT_SIZE = 32


def generate_salt(size: int = SALT_SIZE) -> bytes:
    """Return `size` bytes from the OS CSPRNG."""
    if size < 1:
        raise ValueError("salt size must be at least one byte")
    return secrets.token_bytes(size)


def digest_password(password: str, salt: bytes) -> bytes:
    """
    SHA-512 over the UTF-8 password bytes followed by the salt bytes.

    Lone surrogates (valid in JSON strings, not in UTF-8) are encoded as
    their raw code units rather than rejected, so every str hashes.
    """
    return hashlib.sha512(password.encode("utf-8", "surrogatepass") + salt).digest()


def encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def decode(text: str) -> bytes:
    return base64.b64decode(text.encode("ascii"), validate=True)


def hash_password(password: str, salt: Optional[bytes] = None) -> Tuple[str, str]:
    """
    Hash a password for storage.

    Args:
        password: The plaintext password
        salt: Raw salt bytes; a fresh one is generated when omitted

    Returns:
        Tuple of (password_hash, salt), both base64 encoded
    """
    if salt is None:
        salt = generate_salt()
    return encode(digest_password(password, salt)), encode(salt)


def verify_password(password: str, password_hash: str, salt: str) -> bool:
    """
    Check a plaintext password against a stored hash and salt.

    A stored salt that is not valid base64 never verifies.
    """
    try:
        salt_bytes = decode(salt)
    except (binascii.Error, ValueError):
        return False
    candidate = encode(digest_password(password, salt_bytes))
    return hmac.compare_digest(candidate.encode("ascii"), password_hash.encode("utf-8"))

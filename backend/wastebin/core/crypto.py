from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from dataclasses import dataclass
from typing import Optional, Tuple, Union
import os

from wastebin.core.errors import AuthenticationFailure, CryptoFailure

KEY_LENGTH = 32
SALT_LENGTH = 16
NONCE_LENGTH = 12

# ---------- CONTENT VARIANTS ----------

@dataclass(frozen=True)
class Unprotected:
    """Plaintext bytes, stored as-is."""
    data: bytes


@dataclass(frozen=True)
class Protected:
    """Encrypted under a key derived from the creator's password."""
    ciphertext: bytes
    salt: bytes
    nonce: bytes


@dataclass(frozen=True)
class Sealed:
    """Encrypted under the server-held at-rest key."""
    ciphertext: bytes
    nonce: bytes


Content = Union[Unprotected, Protected, Sealed]


def content_to_columns(content: Content) -> Tuple[bytes, bytes, bytes]:
    """Flatten a content variant into (data, salt, nonce) columns."""
    if isinstance(content, Protected):
        return content.ciphertext, content.salt, content.nonce
    if isinstance(content, Sealed):
        return content.ciphertext, b"", content.nonce
    return content.data, b"", b""


def content_from_columns(data: bytes, salt: Optional[bytes], nonce: Optional[bytes]) -> Content:
    salt = bytes(salt or b"")
    nonce = bytes(nonce or b"")
    data = bytes(data)
    if salt:
        return Protected(ciphertext=data, salt=salt, nonce=nonce)
    if nonce:
        return Sealed(ciphertext=data, nonce=nonce)
    return Unprotected(data=data)


# ---------- KEY DERIVATION ----------

@dataclass(frozen=True)
class ScryptParams:
    n: int = 2 ** 15
    r: int = 8
    p: int = 1


DEFAULT_PARAMS = ScryptParams()


def derive_key(
    password: str,
    salt: bytes | None = None,
    params: ScryptParams = DEFAULT_PARAMS
) -> Tuple[bytes, bytes]:
    """
    scrypt(password, salt) → 32-byte AES-256 key.
    A fresh random salt is generated when none is given.
    """
    if salt is None:
        salt = os.urandom(SALT_LENGTH)

    key = Scrypt(
        salt=salt,
        length=KEY_LENGTH,
        n=params.n,
        r=params.r,
        p=params.p,
    ).derive(password.encode("utf-8"))

    return key, salt


_TIMING_SALT = b"\x00" * SALT_LENGTH


def equalize_timing(params: ScryptParams = DEFAULT_PARAMS) -> None:
    """Spend one KDF evaluation so a miss costs the same as a wrong password."""
    derive_key("", _TIMING_SALT, params)


# ---------- ENCRYPTION ----------

def encrypt(key: bytes, nonce: bytes, plaintext: bytes) -> bytes:
    """
    AES-GCM → ciphertext + tag (16)
    """
    return AESGCM(key).encrypt(nonce, plaintext, None)


def decrypt(key: bytes, nonce: bytes, ciphertext: bytes) -> bytes:
    """
    Decrypt AES-GCM payload. Raises InvalidTag on a wrong key or tampering.
    """
    return AESGCM(key).decrypt(nonce, ciphertext, None)


def protect(password: str, plaintext: bytes, params: ScryptParams = DEFAULT_PARAMS) -> Protected:
    key, salt = derive_key(password, params=params)
    nonce = os.urandom(NONCE_LENGTH)
    return Protected(ciphertext=encrypt(key, nonce, plaintext), salt=salt, nonce=nonce)


def unprotect(content: Protected, password: str, params: ScryptParams = DEFAULT_PARAMS) -> bytes:
    if len(content.salt) != SALT_LENGTH or len(content.nonce) != NONCE_LENGTH:
        raise CryptoFailure("malformed salt or nonce")

    key, _ = derive_key(password, content.salt, params)
    try:
        return decrypt(key, content.nonce, content.ciphertext)
    except InvalidTag as exc:
        # wrong password and tampered ciphertext look the same from here
        raise AuthenticationFailure("password rejected") from exc


def seal(server_key: bytes, plaintext: bytes) -> Sealed:
    nonce = os.urandom(NONCE_LENGTH)
    return Sealed(ciphertext=encrypt(server_key, nonce, plaintext), nonce=nonce)


def unseal(content: Sealed, server_key: bytes | None) -> bytes:
    if server_key is None:
        raise CryptoFailure("sealed paste but no at-rest key configured")
    if len(content.nonce) != NONCE_LENGTH:
        raise CryptoFailure("malformed nonce")

    try:
        return decrypt(server_key, content.nonce, content.ciphertext)
    except InvalidTag as exc:
        raise CryptoFailure("sealed paste failed authentication") from exc


def check_server_key(server_key: bytes) -> bytes:
    if len(server_key) != KEY_LENGTH:
        raise ValueError(f"at-rest key must be {KEY_LENGTH} bytes")
    return server_key

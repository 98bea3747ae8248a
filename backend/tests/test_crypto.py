import os

import pytest

from wastebin.core import crypto
from wastebin.core.errors import AuthenticationFailure, CryptoFailure

from conftest import AT_REST_KEY, FAST_KDF


def test_derive_key_is_deterministic_for_a_salt():
    key1, salt = crypto.derive_key("hunter2", params=FAST_KDF)
    key2, _ = crypto.derive_key("hunter2", salt, FAST_KDF)

    assert len(key1) == crypto.KEY_LENGTH
    assert len(salt) == crypto.SALT_LENGTH
    assert key1 == key2


def test_derive_key_uses_fresh_salts():
    key1, salt1 = crypto.derive_key("hunter2", params=FAST_KDF)
    key2, salt2 = crypto.derive_key("hunter2", params=FAST_KDF)

    assert salt1 != salt2
    assert key1 != key2


def test_protect_round_trip():
    content = crypto.protect("s3cret", b"hello world", FAST_KDF)

    assert content.ciphertext != b"hello world"
    assert b"hello world" not in content.ciphertext
    assert crypto.unprotect(content, "s3cret", FAST_KDF) == b"hello world"


def test_wrong_password_is_rejected():
    content = crypto.protect("s3cret", b"hello world", FAST_KDF)

    with pytest.raises(AuthenticationFailure):
        crypto.unprotect(content, "s3cret!", FAST_KDF)


def test_tampered_ciphertext_is_rejected():
    content = crypto.protect("s3cret", b"hello world", FAST_KDF)
    flipped = bytes([content.ciphertext[0] ^ 0x01]) + content.ciphertext[1:]
    tampered = crypto.Protected(ciphertext=flipped, salt=content.salt, nonce=content.nonce)

    with pytest.raises(AuthenticationFailure):
        crypto.unprotect(tampered, "s3cret", FAST_KDF)


def test_malformed_parameters_are_integrity_failures():
    content = crypto.protect("s3cret", b"hello world", FAST_KDF)
    broken = crypto.Protected(ciphertext=content.ciphertext, salt=content.salt, nonce=b"\x00" * 3)

    with pytest.raises(CryptoFailure):
        crypto.unprotect(broken, "s3cret", FAST_KDF)


def test_seal_round_trip():
    sealed = crypto.seal(AT_REST_KEY, b"\x00binary\xff")

    assert crypto.unseal(sealed, AT_REST_KEY) == b"\x00binary\xff"


def test_unseal_with_other_key_fails():
    sealed = crypto.seal(AT_REST_KEY, b"data")

    with pytest.raises(CryptoFailure):
        crypto.unseal(sealed, os.urandom(32))


def test_unseal_without_key_fails():
    sealed = crypto.seal(AT_REST_KEY, b"data")

    with pytest.raises(CryptoFailure):
        crypto.unseal(sealed, None)


def test_server_key_length_is_checked():
    with pytest.raises(ValueError):
        crypto.check_server_key(b"short")


def test_columns_round_trip_each_variant():
    variants = [
        crypto.Unprotected(b"plain"),
        crypto.protect("pw", b"secret", FAST_KDF),
        crypto.seal(AT_REST_KEY, b"sealed"),
    ]
    for content in variants:
        assert crypto.content_from_columns(*crypto.content_to_columns(content)) == content


def test_unprotected_columns_carry_no_crypto_parameters():
    data, salt, nonce = crypto.content_to_columns(crypto.Unprotected(b"plain"))

    assert (data, salt, nonce) == (b"plain", b"", b"")
    assert crypto.content_from_columns(b"plain", None, None) == crypto.Unprotected(b"plain")

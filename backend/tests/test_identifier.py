import string

import pytest

from wastebin.core.identifier import DEFAULT_ID_LENGTH, generate_id, is_valid_id

URL_SAFE = set(string.ascii_letters + string.digits + "-_")


def test_generate_id_default_length():
    assert len(generate_id()) == DEFAULT_ID_LENGTH


def test_generate_id_is_url_safe():
    for _ in range(200):
        assert set(generate_id()) <= URL_SAFE


def test_generate_id_custom_length():
    assert len(generate_id(20)) == 20


def test_generate_id_does_not_repeat():
    ids = {generate_id() for _ in range(5000)}
    assert len(ids) == 5000


@pytest.mark.parametrize("length", [0, 4, 7, 65])
def test_generate_id_rejects_weak_or_oversized_lengths(length):
    with pytest.raises(ValueError):
        generate_id(length)


@pytest.mark.parametrize("value", ["abc", "A-b_9", "x" * 64])
def test_valid_ids(value):
    assert is_valid_id(value)


@pytest.mark.parametrize("value", ["", "a.b", "../etc", "a b", "x" * 65, "é", None])
def test_invalid_ids(value):
    assert not is_valid_id(value)

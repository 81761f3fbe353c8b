"""
Unit tests for the fixed-width Base62 codec.
"""

import random
import re

import pytest

from shortlink.errors import CapacityExceeded, InvalidCode
from shortlink.manager import codec
from shortlink.manager.codec import CAPACITY, CODE_WIDTH, decode, encode, is_valid_code

CODE_PATTERN = re.compile(r"^[0-9a-zA-Z]{6}$")


@pytest.mark.parametrize(
    "num,code",
    [
        (0, "000000"),
        (1, "000001"),
        (9, "000009"),
        (10, "00000a"),
        (35, "00000z"),
        (36, "00000A"),
        (61, "00000Z"),
        (62, "000010"),
        (62 ** 2, "000100"),
        (CAPACITY - 1, "ZZZZZZ"),
    ],
)
def test_encode_known_values(num, code):
    assert encode(num) == code
    assert decode(code) == num


def test_alphabet_order_and_size():
    assert codec.ALPHABET[:10] == "0123456789"
    assert codec.ALPHABET[10:36] == "abcdefghijklmnopqrstuvwxyz"
    assert codec.ALPHABET[36:] == "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    assert len(set(codec.ALPHABET)) == 62


def test_round_trip_and_fixed_width_sample():
    rng = random.Random(1234)
    samples = [rng.randrange(CAPACITY) for _ in range(500)] + list(range(200))
    for n in samples:
        code = encode(n)
        assert CODE_PATTERN.match(code)
        assert decode(code) == n


def test_consecutive_values_get_distinct_codes():
    codes = [encode(n) for n in range(1, 5000)]
    assert len(set(codes)) == len(codes)


def test_encode_capacity_exceeded():
    with pytest.raises(CapacityExceeded):
        encode(CAPACITY)
    with pytest.raises(CapacityExceeded):
        encode(CAPACITY * 62)


def test_encode_negative_rejected():
    with pytest.raises(ValueError):
        encode(-1)


@pytest.mark.parametrize("bad", ["abc-12", "00000_", "ñ00000", " 00001", ""])
def test_decode_invalid_code(bad):
    with pytest.raises(InvalidCode):
        decode(bad)


def test_invalid_code_is_a_value_error():
    with pytest.raises(ValueError):
        decode("!!!!!!")


def test_decode_ignores_padding_width():
    assert decode("1") == decode("000001") == 1
    assert decode("10") == 62


@pytest.mark.parametrize(
    "code,ok",
    [("000001", True), ("ZZZZZZ", True), ("00001", False), ("0000001", False), ("0000-1", False)],
)
def test_is_valid_code(code, ok):
    assert is_valid_code(code) is ok
    assert len(encode(1)) == CODE_WIDTH

import pytest

from ethkit.encoding import (
    decode_big,
    decode_bytes,
    decode_to_hex,
    decode_uint64,
    encode_big,
    encode_bytes,
    encode_to_hex,
    encode_uint64,
)


def test_decode_to_hex_odd_length_is_padded():
    assert decode_to_hex("0x1") == b"\x01"


def test_decode_to_hex_without_prefix():
    assert decode_to_hex("abcd") == b"\xab\xcd"


def test_decode_to_hex_accepts_bytes():
    assert decode_to_hex(b"0x0102") == b"\x01\x02"


@pytest.mark.parametrize("bad", ["0xzz", "0x01 02", "0xg1"])
def test_decode_to_hex_rejects_invalid(bad):
    with pytest.raises(ValueError):
        decode_to_hex(bad)


def test_encode_to_hex_value():
    assert encode_to_hex(b"\x01\x02") == "0x0102"


@pytest.mark.parametrize("data", [b"", b"\x00", b"\x01\x02\xff", bytes(range(40))])
def test_hex_round_trip(data):
    assert decode_to_hex(encode_to_hex(data)) == data


def test_encode_big_has_no_leading_zeros():
    assert encode_big(255) == "0xff"


@pytest.mark.parametrize("value", [0, 1, 255, 256, 2**64, 2**255 + 12345])
def test_big_round_trip(value):
    assert decode_big(encode_big(value)) == value


def test_encode_uint64_zero():
    assert encode_uint64(0) == "0x0"


@pytest.mark.parametrize("value", [0, 1, 4096, 2**64 - 1])
def test_uint64_round_trip(value):
    assert decode_uint64(encode_uint64(value)) == value


def test_decode_uint64_empty_is_zero():
    assert decode_uint64("0x") == 0
    assert decode_uint64("") == 0


def test_decode_uint64_overflow():
    with pytest.raises(ValueError):
        decode_uint64(encode_big(2**64))


@pytest.mark.parametrize("bad", ["0x-1", "0x+1", "0x1_0", "0xq"])
def test_decode_uint64_rejects_invalid(bad):
    with pytest.raises(ValueError):
        decode_uint64(bad)


def test_encode_uint64_rejects_out_of_range():
    with pytest.raises(ValueError):
        encode_uint64(-1)


@pytest.mark.parametrize("data", [b"", b"\x10\x20", bytes(range(256))])
def test_bytes_round_trip(data):
    assert decode_bytes(encode_bytes(data)) == data


def test_decode_bytes_invalid_yields_empty():
    assert decode_bytes("0xnothex") == b""
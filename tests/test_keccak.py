import pytest

from ethkit.keccak import keccak256


def test_empty_input_digest():
    assert keccak256(b"").hex() == (
        "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    )


def test_no_arguments_equals_empty_input():
    assert keccak256() == keccak256(b"")


@pytest.mark.parametrize(
    "parts",
    [
        [b"a", b"b"],
        [b"", b"ab"],
        [b"ab", b""],
    ],
)
def test_multiple_arguments_are_concatenated(parts):
    assert keccak256(*parts) == keccak256(b"ab")


def test_digest_length():
    assert len(keccak256(b"\x01\x02\x03")) == 32


def test_accepts_bytearray():
    assert keccak256(bytearray(b"xyz")) == keccak256(b"xyz")


def test_different_inputs_give_different_digests():
    assert keccak256(b"a") != keccak256(b"b")
import numpy as np
import pytest

from huffpack.bits_utils import (
    bits_entropy_stats,
    bits_to_bytes,
    bits_to_text,
    bytes_to_bits,
    symbol_entropy,
)


def test_bits_to_bytes_msb_first_with_padding():
    assert bits_to_bytes([1, 0, 1]) == b"\xa0"
    assert bits_to_bytes([0, 1, 0, 0, 0, 0, 0, 1, 1]) == b"\x41\x80"
    assert bits_to_bytes([]) == b""


def test_bytes_to_bits_trims_padding():
    assert bytes_to_bits(b"\xa0", 3).tolist() == [1, 0, 1]
    assert bytes_to_bits(b"A", 8).tolist() == [0, 1, 0, 0, 0, 0, 0, 1]


def test_bytes_to_bits_rejects_too_many_bits():
    with pytest.raises(ValueError):
        bytes_to_bits(b"\x00", 9)


def test_text_form():
    assert bits_to_text(np.array([0, 1, 1, 0], dtype=np.uint8)) == "0110"


def test_bits_entropy_stats():
    p0, p1, H, var = bits_entropy_stats([0, 1, 0, 1])
    assert p0 == pytest.approx(0.5)
    assert p1 == pytest.approx(0.5)
    assert H == pytest.approx(1.0)
    assert var == pytest.approx(0.25)

    _, _, H, _ = bits_entropy_stats([1, 1, 1])
    assert H == 0.0


def test_symbol_entropy():
    assert symbol_entropy([1, 1, 0, 0]) == pytest.approx(1.0)
    assert symbol_entropy(np.ones(256)) == pytest.approx(8.0)
    assert symbol_entropy(np.zeros(256)) == 0.0

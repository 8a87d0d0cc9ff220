import io

import pytest

from bitstream import BitInputStream, BitOutputStream


def read_all(bits):
    out = []
    while bits.has_next_bit():
        out.append(bits.next_bit())
    return out


def test_output_packs_msb_first():
    buf = io.BytesIO()
    bits = BitOutputStream(buf)
    bits.write_code("10110")
    assert bits.close() == 3
    assert buf.getvalue() == bytes([0b10110000])
    assert bits.bits_written == 5


def test_output_full_byte_needs_no_padding():
    buf = io.BytesIO()
    bits = BitOutputStream(buf)
    bits.write_code("0000000111111110")
    assert bits.close() == 0
    assert buf.getvalue() == bytes([0x01, 0xFE])


def test_output_rejects_non_bits():
    bits = BitOutputStream(io.BytesIO())
    with pytest.raises(ValueError):
        bits.write_bit(2)


def test_input_skips_pad_bits():
    bits = BitInputStream(bytes([0b10110000]), pad_bits=3)
    assert bits.bits_remaining() == 5
    assert read_all(bits) == [1, 0, 1, 1, 0]
    assert not bits.has_next_bit()
    with pytest.raises(EOFError):
        bits.next_bit()


def test_from_string():
    bits = BitInputStream.from_string("1100101011")
    assert bits.total_bits == 10
    assert read_all(bits) == [1, 1, 0, 0, 1, 0, 1, 0, 1, 1]
    assert not BitInputStream.from_string("").has_next_bit()


def test_output_then_input():
    buf = io.BytesIO()
    out = BitOutputStream(buf)
    out.write_code("1110001")
    pad = out.close()
    assert read_all(BitInputStream(buf.getvalue(), pad)) == [1, 1, 1, 0, 0, 0, 1]


@pytest.mark.parametrize("data,pad", [(b"\x00", 8), (b"\x00", -1), (b"", 2)])
def test_input_rejects_bad_padding(data, pad):
    with pytest.raises(ValueError):
        BitInputStream(data, pad)


def test_from_string_rejects_other_characters():
    with pytest.raises(ValueError):
        BitInputStream.from_string("01a")

import io
import random

import pytest

import compressor
import huffman as huff
from bitstream import BitOutputStream


def test_freq_table_is_indexed():
    ft = compressor.freq_table(b"abca")
    assert len(ft) == 256
    assert ft[ord('a')] == 2
    assert ft[ord('b')] == 1
    assert sum(ft) == 4


@pytest.mark.parametrize("data", [
    b"hello huffman!",
    bytes(range(256)),
    b"ab" * 500,
    bytes(random.Random(7).getrandbits(8) for _ in range(4096)),
])
def test_compress_decompress_bytes(data):
    table, packed = compressor.compress_bytes(data)
    assert compressor.decompress_bytes(table, packed) == data


def test_single_symbol_input_roundtrip():
    data = b"A" * 1000
    table, packed = compressor.compress_bytes(data)
    assert table == "65\n\n"
    # one filler bit per symbol: 125 bytes, no padding
    assert packed[0] == 0
    assert len(packed) == 1 + 125
    assert compressor.decompress_bytes(table, packed) == data


def test_empty_input_raises():
    with pytest.raises(huff.EmptyAlphabetError):
        compressor.compress_bytes(b"")


def test_encode_unknown_byte_raises():
    with pytest.raises(huff.InvalidSymbolError):
        compressor.encode(b"z", {ord('a'): "0"}, BitOutputStream(io.BytesIO()))


def pack(bit_string):
    buf = io.BytesIO()
    out = BitOutputStream(buf)
    out.write_code(bit_string)
    return bytes([out.close()]) + buf.getvalue()


def test_truncated_payload_strict_and_lenient():
    data = b"a" * 10 + b"bc"
    table, _ = compressor.compress_bytes(data)
    codes = huff.generate_huffman_codes(huff.load_code_table(table.splitlines()))
    assert len(codes[ord('c')]) == 2
    # drop the final bit so the code for c is cut in half
    cut = pack("".join(codes[b] for b in data)[:-1])

    with pytest.raises(huff.TruncatedStreamError):
        compressor.decompress_bytes(table, cut)
    assert compressor.decompress_bytes(table, cut, strict=False) == data[:-1]


def test_missing_header_raises():
    with pytest.raises(huff.TruncatedStreamError):
        compressor.decompress_bytes("65\n0\n66\n1\n", b"")


def test_files_roundtrip(tmp_path):
    src = tmp_path / "notes.txt"
    src.write_bytes(b"she sells sea shells by the sea shore\n" * 10)
    code_path, short_path = compressor.compress_file(src)
    assert code_path == tmp_path / "notes.code"
    assert short_path == tmp_path / "notes.short"
    assert short_path.stat().st_size < src.stat().st_size

    new_path = compressor.decompress_file(tmp_path / "notes")
    assert new_path == tmp_path / "notes.new"
    assert new_path.read_bytes() == src.read_bytes()


def test_cli_compress_and_decompress(tmp_path, capsys):
    src = tmp_path / "data.bin"
    src.write_bytes(bytes(range(50)) * 3)
    out = tmp_path / "out"

    assert compressor.main(["compress", str(src), "--outdir", str(out)]) == 0
    assert (out / "data.code").exists()
    assert compressor.main(["decompress", str(out / "data"), "--outdir", str(out)]) == 0
    assert (out / "data.new").read_bytes() == src.read_bytes()
    assert "Wrote" in capsys.readouterr().out


def test_cli_reports_bad_table(tmp_path, capsys):
    (tmp_path / "bad.code").write_text("65\n0\n66\n", encoding="utf-8")
    (tmp_path / "bad.short").write_bytes(b"\x00\x00")
    assert compressor.main(["decompress", str(tmp_path / "bad")]) == 1
    assert "ERROR:" in capsys.readouterr().out


def test_cli_reports_missing_file(tmp_path, capsys):
    assert compressor.main(["compress", str(tmp_path / "nope.txt")]) == 1
    assert "ERROR:" in capsys.readouterr().out


@pytest.mark.parametrize("header", [b"\x09\x55", b"\x03", b"\xff"])
def test_corrupt_header_raises(header):
    with pytest.raises(huff.TruncatedStreamError):
        compressor.decompress_bytes("65\n0\n66\n1\n", header)


@pytest.mark.parametrize("code,short", [
    (b"65\n0\n66\n1\n", b"\x09\x55"),   # pad count above 7
    (b"65\n0\n66\n1\n", b"\x03"),       # pad bits with no payload
    (b"\xff\xfe\n0\n", b"\x00\x55"),    # table is not UTF-8
    (b"1_0\n0\n66\n1\n", b"\x00\x55"),  # symbol line is not plain decimal
])
def test_cli_reports_corrupt_inputs(tmp_path, capsys, code, short):
    (tmp_path / "bad.code").write_bytes(code)
    (tmp_path / "bad.short").write_bytes(short)
    assert compressor.main(["decompress", str(tmp_path / "bad")]) == 1
    assert "ERROR:" in capsys.readouterr().out
    assert not (tmp_path / "bad.new").exists()

#!/usr/bin/env python3
"""
compressor.py : file-level Huffman compression on top of huffman.py

Compressing NAME.ext writes two files next to each other:
  NAME.code   the code table, one symbol line and one path line per leaf
  NAME.short  one header byte (pad bit count) followed by the packed bits

Decompressing reads NAME.code + NAME.short and writes NAME.new

Usage:
    python compressor.py compress notes.txt
    python compressor.py decompress notes --outdir restored
    python compressor.py decompress notes --lenient   # drop a truncated last symbol instead of failing
"""

import argparse
import io
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import huffman as huff
from bitstream import BitInputStream, BitOutputStream

ALPHABET_SIZE = huff.MAX_SYMBOL + 1


def freq_table(data: bytes) -> List[int]:
    ft = [0] * ALPHABET_SIZE # indexed table: position = byte value
    for b in data:
        ft[b] += 1
    return ft


def encode(data: bytes, code_map: Dict[int, str], bits: BitOutputStream) -> None:
    """Write the code of every byte in data to bits."""
    for b in data:
        code = code_map.get(b)
        if code is None:
            raise huff.InvalidSymbolError(f"byte {b} has no code in this table")
        # A one-symbol tree has the empty code; spend one bit per occurrence
        # so the reader can still count symbols.
        bits.write_code(code or "0")


def compress_bytes(data: bytes) -> Tuple[str, bytes]:
    """Return (code table text, packed payload with its pad header byte)."""
    root = huff.build_huffman_tree(freq_table(data))
    table = io.StringIO()
    huff.save_code_table(root, table)

    payload = io.BytesIO()
    bits = BitOutputStream(payload)
    encode(data, huff.generate_huffman_codes(root), bits)
    pad_bits = bits.close()
    return table.getvalue(), bytes([pad_bits]) + payload.getvalue()


def decompress_bytes(table_text: str, packed: bytes, strict: bool = True) -> bytes:
    if not packed:
        raise huff.TruncatedStreamError("compressed payload is missing its header byte")
    pad_bits = packed[0]
    if pad_bits > 7 or (pad_bits and len(packed) == 1):
        raise huff.TruncatedStreamError(f"corrupt header: {pad_bits} pad bits for {len(packed) - 1} payload bytes")
    root = huff.load_code_table(io.StringIO(table_text))
    bits = BitInputStream(packed[1:], pad_bits)

    decoded = bytearray()
    if isinstance(root, huff.Leaf):
        # translate() would emit forever on a leaf root without reading;
        # here each filler bit stands for one occurrence
        while bits.has_next_bit():
            bits.next_bit()
            decoded.append(root.symbol)
    else:
        huff.translate(root, bits, decoded, strict=strict)
    return bytes(decoded)


def compress_file(src: Path, outdir: Optional[Path] = None) -> Tuple[Path, Path]:
    data = src.read_bytes()
    table_text, packed = compress_bytes(data)

    base = (outdir or src.parent) / src.stem
    code_path = base.with_suffix(".code")
    short_path = base.with_suffix(".short")
    code_path.write_text(table_text, encoding="utf-8")
    short_path.write_bytes(packed)
    return code_path, short_path


def decompress_file(base: Path, outdir: Optional[Path] = None, strict: bool = True) -> Path:
    code_path = base.with_suffix(".code")
    short_path = base.with_suffix(".short")
    try:
        with code_path.open("r", encoding="utf-8") as f:
            table_text = f.read()
    except UnicodeDecodeError as e:
        raise huff.MalformedTableError(f"{code_path} is not valid UTF-8 text") from e
    data = decompress_bytes(table_text, short_path.read_bytes(), strict=strict)

    new_path = ((outdir or base.parent) / base.stem).with_suffix(".new")
    new_path.write_bytes(data)
    return new_path


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Huffman file compressor")
    sub = ap.add_subparsers(dest="command", required=True)

    c = sub.add_parser("compress", help="Write NAME.code and NAME.short for a file")
    c.add_argument("file", type=str, help="File to compress")
    c.add_argument("--outdir", type=str, default=None, help="Output directory (default: next to the input)")

    d = sub.add_parser("decompress", help="Rebuild NAME.new from NAME.code and NAME.short")
    d.add_argument("base", type=str, help="Path without extension, e.g. notes for notes.code/notes.short")
    d.add_argument("--outdir", type=str, default=None, help="Output directory (default: next to the inputs)")
    d.add_argument("--lenient", action="store_true",
                   help="Drop a partial trailing code instead of failing")

    args = ap.parse_args(argv)
    outdir = Path(args.outdir) if args.outdir else None
    if outdir is not None:
        outdir.mkdir(parents=True, exist_ok=True)

    try:
        if args.command == "compress":
            src = Path(args.file)
            code_path, short_path = compress_file(src, outdir)
            original = src.stat().st_size
            compressed = short_path.stat().st_size
            print(f"Wrote code table to {code_path}")
            print(f"Wrote {compressed} bytes to {short_path} ({original} bytes in, ratio {compressed / max(1, original):.3f})")
        else:
            new_path = decompress_file(Path(args.base), outdir, strict=not args.lenient)
            print(f"Wrote {new_path.stat().st_size} bytes to {new_path}")
    except (huff.HuffmanError, OSError) as e:
        print(f"ERROR: {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

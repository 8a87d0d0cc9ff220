from typing import BinaryIO


class BitOutputStream:
    """
    Packs bits MSB-first into bytes written to a binary file-like object.
    close() pads the last partial byte with 0 bits and returns the pad count.
    """

    def __init__(self, output: BinaryIO):
        self.output = output
        self.bits_written = 0
        self._acc = 0
        self._acc_bits = 0

    def write_bit(self, bit: int) -> None:
        if bit not in (0, 1):
            raise ValueError(f"bit must be 0 or 1, got {bit!r}")
        self._acc = (self._acc << 1) | bit
        self._acc_bits += 1
        self.bits_written += 1
        if self._acc_bits == 8:
            self.output.write(bytes([self._acc]))
            self._acc = 0
            self._acc_bits = 0

    def write_code(self, code: str) -> None:
        for ch in code:
            self.write_bit(1 if ch == "1" else 0)

    def close(self) -> int:
        pad_bits = 0
        if self._acc_bits != 0:
            pad_bits = 8 - self._acc_bits
            self.output.write(bytes([(self._acc << pad_bits) & 0xFF]))
            self._acc = 0
            self._acc_bits = 0
        return pad_bits


class BitInputStream:
    """Reads bits MSB-first from a bytes object, skipping trailing pad bits."""

    def __init__(self, data: bytes, pad_bits: int = 0):
        if not 0 <= pad_bits <= 7:
            raise ValueError(f"pad_bits must be in 0..7, got {pad_bits}")
        if pad_bits and not data:
            raise ValueError("pad_bits given for empty data")
        self.data = bytes(data)
        self.total_bits = len(self.data) * 8 - pad_bits
        self.position = 0

    @classmethod
    def from_string(cls, bits: str) -> "BitInputStream":
        """Build a stream from a string such as '0110'."""
        if bits.strip("01"):
            raise ValueError(f"bit string may only contain 0 and 1: {bits!r}")
        pad_bits = (-len(bits)) % 8
        padded = bits + "0" * pad_bits
        data = bytes(int(padded[i:i + 8], 2) for i in range(0, len(padded), 8))
        return cls(data, pad_bits)

    def has_next_bit(self) -> bool:
        return self.position < self.total_bits

    def next_bit(self) -> int:
        if self.position >= self.total_bits:
            raise EOFError("no bits left in stream")
        byte = self.data[self.position >> 3]
        bit = (byte >> (7 - (self.position & 7))) & 1
        self.position += 1
        return bit

    def bits_remaining(self) -> int:
        return self.total_bits - self.position

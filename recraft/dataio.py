"""Big-endian binary readers and writers for the game's wire format."""

from __future__ import annotations


class DataInputStream:
    """Reads big-endian integers and UTF-16 strings from a byte buffer."""

    def __init__(self, data: bytes) -> None:
        self._buffer = bytes(data)
        self._pos = 0

    def read_byte(self) -> int:
        """Return the next byte as an unsigned value; raise EOFError at the end."""
        if self._pos >= len(self._buffer):
            raise EOFError("End of stream")
        value = self._buffer[self._pos]
        self._pos += 1
        return value

    def _read_unsigned(self, size: int) -> int:
        result = 0
        for _ in range(size):
            result = (result << 8) | self.read_byte()
        return result

    def read_short(self) -> int:
        """Return an unsigned 16-bit big-endian value."""
        return self._read_unsigned(2)

    def read_int(self) -> int:
        """Return an unsigned 32-bit big-endian value."""
        return self._read_unsigned(4)

    def read_long(self) -> int:
        """Return an unsigned 64-bit big-endian value."""
        return self._read_unsigned(8)

    def read_char(self) -> str:
        """Return one UTF-16 code unit as a one-character string."""
        return chr(self.read_short())

    def read_string(self, max_length: int) -> str:
        """Read a length-prefixed UTF-16 string; non-ASCII units become '?'."""
        length = self.read_short()
        if length > max_length:
            raise ValueError(
                "Received string length longer than maximum allowed "
                f"({length} > {max_length})"
            )
        chars = []
        for _ in range(length):
            char = self.read_char()
            chars.append(char if ord(char) <= 0x7F else "?")
        return "".join(chars)

    def at_end(self) -> bool:
        return self._pos >= len(self._buffer)


class DataOutputStream:
    """Accumulates big-endian integers and UTF-16 strings into a byte buffer."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def _write_unsigned(self, value: int, size: int) -> None:
        mask = (1 << (8 * size)) - 1
        self._buffer += (value & mask).to_bytes(size, "big")

    def write_byte(self, value: int) -> None:
        self._write_unsigned(value, 1)

    def write_short(self, value: int) -> None:
        self._write_unsigned(value, 2)

    def write_int(self, value: int) -> None:
        self._write_unsigned(value, 4)

    def write_long(self, value: int) -> None:
        self._write_unsigned(value, 8)

    def write_chars(self, text: str) -> None:
        """Write each UTF-8 byte of ``text`` as one 16-bit code unit."""
        for byte in text.encode("utf-8"):
            self.write_short(byte)

    def write_string(self, text: str) -> None:
        """Write a 16-bit length followed by the characters of ``text``."""
        size = len(text.encode("utf-8"))
        if size > 0x7FFF:
            raise ValueError("String too big")
        self.write_short(size)
        self.write_chars(text)

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)

    def __str__(self) -> str:
        return " ".join(f"{byte:02x}" for byte in self._buffer)
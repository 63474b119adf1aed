"""Scalar, byte-array and string NBT tags."""

from __future__ import annotations

import operator
import struct
from typing import BinaryIO, ClassVar

from recraft.nbt.base import (
    NBTBase,
    _read_exact,
    _read_short_string,
    _write_short_string,
)


class NumericTag(NBTBase):
    """A tag holding one fixed-width big-endian number."""

    _format: ClassVar[str]
    _integral: ClassVar[bool] = True

    def __init__(self, key: str = "", value: int | float = 0) -> None:
        super().__init__(key)
        self.value = value

    @property
    def value(self) -> int | float:
        return self._value

    @value.setter
    def value(self, value: int | float) -> None:
        self._value = self._coerce(value)

    @classmethod
    def _coerce(cls, value: int | float) -> int | float:
        size = struct.calcsize(cls._format)
        if cls._integral:
            raw = (operator.index(value) & ((1 << (8 * size)) - 1)).to_bytes(size, "big")
        else:
            raw = struct.pack(cls._format, float(value))
        return struct.unpack(cls._format, raw)[0]

    def write_contents(self, stream: BinaryIO) -> None:
        stream.write(struct.pack(self._format, self._value))

    def read_contents(self, stream: BinaryIO) -> None:
        raw = _read_exact(stream, struct.calcsize(self._format))
        (self._value,) = struct.unpack(self._format, raw)

    def clone(self) -> "NumericTag":
        return type(self)(self.key, self._value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NBTBase):
            return NotImplemented
        return self._same_header(other) and self._value == other.value  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return str(self._value) if self._integral else f"{self._value:f}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.key!r}, value={self._value!r})"


class NBTTagByte(NumericTag, tag_type=1):
    """Signed 8-bit integer. Equality compares the value only, not the key."""

    _format = ">b"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NBTBase):
            return NotImplemented
        return other.tag_type == self.tag_type and self.value == other.value  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]


class NBTTagShort(NumericTag, tag_type=2):
    """Signed 16-bit integer."""

    _format = ">h"


class NBTTagInt(NumericTag, tag_type=3):
    """Signed 32-bit integer."""

    _format = ">i"


class NBTTagLong(NumericTag, tag_type=4):
    """Signed 64-bit integer."""

    _format = ">q"


class NBTTagFloat(NumericTag, tag_type=5):
    """Single-precision float; values are rounded to 32 bits on assignment."""

    _format = ">f"
    _integral = False


class NBTTagDouble(NumericTag, tag_type=6):
    """Double-precision float."""

    _format = ">d"
    _integral = False


class NBTTagByteArray(NBTBase, tag_type=7):
    """A byte string with a signed 32-bit length prefix."""

    def __init__(self, key: str = "", value: bytes = b"") -> None:
        super().__init__(key)
        self.value = bytes(value)

    def write_contents(self, stream: BinaryIO) -> None:
        if len(self.value) > 0x7FFFFFFF:
            raise ValueError("byte array too long for NBT")
        stream.write(struct.pack(">i", len(self.value)))
        stream.write(self.value)

    def read_contents(self, stream: BinaryIO) -> None:
        (length,) = struct.unpack(">i", _read_exact(stream, 4))
        if length < 0:
            raise ValueError(f"negative byte array length {length}")
        self.value = _read_exact(stream, length)

    def clone(self) -> "NBTTagByteArray":
        return NBTTagByteArray(self.key, self.value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NBTBase):
            return NotImplemented
        return self._same_header(other) and self.value == other.value  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return f"[{len(self.value)} bytes]"

    def __repr__(self) -> str:
        return f"NBTTagByteArray(key={self.key!r}, value={self.value!r})"


class NBTTagString(NBTBase, tag_type=8):
    """A string with a 16-bit byte-length prefix.

    An explicitly given value must not be empty.
    """

    def __init__(self, key: str = "", value: str | None = None) -> None:
        super().__init__(key)
        if value is not None and not value:
            raise ValueError("Empty string not allowed")
        self.value = value or ""

    def write_contents(self, stream: BinaryIO) -> None:
        _write_short_string(self.value, stream)

    def read_contents(self, stream: BinaryIO) -> None:
        self.value = _read_short_string(stream)

    def clone(self) -> "NBTTagString":
        return NBTTagString(self.key, self.value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NBTBase):
            return NotImplemented
        return self._same_header(other) and self.value == other.value  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"NBTTagString(key={self.key!r}, value={self.value!r})"
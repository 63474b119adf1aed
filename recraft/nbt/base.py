"""Core NBT tag machinery: the abstract tag, the end tag and tag (de)serialisation."""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from typing import BinaryIO, ClassVar

_TAG_NAMES = {
    0: "TAG_End",
    1: "TAG_Byte",
    2: "TAG_Short",
    3: "TAG_Int",
    4: "TAG_Long",
    5: "TAG_Float",
    6: "TAG_Double",
    7: "TAG_Byte_Array",
    8: "TAG_String",
    9: "TAG_List",
    10: "TAG_Compound",
}

_TAG_CLASSES: dict[int, type["NBTBase"]] = {}

_TEXT_ENCODING = "utf-8"
_TEXT_ERRORS = "surrogateescape"


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read exactly ``size`` bytes or raise EOFError."""
    data = stream.read(size)
    if data is None or len(data) != size:
        raise EOFError(f"expected {size} bytes, got {0 if not data else len(data)}")
    return data


def _encode_text(text: str) -> bytes:
    return text.encode(_TEXT_ENCODING, _TEXT_ERRORS)


def _decode_text(data: bytes) -> str:
    return data.decode(_TEXT_ENCODING, _TEXT_ERRORS)


def _write_short_string(text: str, stream: BinaryIO) -> None:
    """Write a string prefixed with its big-endian 16-bit byte length."""
    data = _encode_text(text)
    if len(data) > 0xFFFF:
        raise ValueError(f"string of {len(data)} bytes is too long for NBT")
    stream.write(struct.pack(">H", len(data)))
    stream.write(data)


def _read_short_string(stream: BinaryIO) -> str:
    (length,) = struct.unpack(">H", _read_exact(stream, 2))
    return _decode_text(_read_exact(stream, length))


class NBTBase(ABC):
    """A named NBT tag. Subclasses declare their numeric type with ``tag_type=``."""

    tag_type: ClassVar[int]

    def __init_subclass__(cls, tag_type: int | None = None, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if tag_type is not None:
            cls.tag_type = tag_type
            _TAG_CLASSES[tag_type] = cls

    def __init__(self, key: str = "") -> None:
        self.key = key or ""

    @abstractmethod
    def write_contents(self, stream: BinaryIO) -> None:
        """Write the tag's payload (no type byte, no key)."""

    @abstractmethod
    def read_contents(self, stream: BinaryIO) -> None:
        """Replace the tag's payload with one read from ``stream``."""

    @abstractmethod
    def clone(self) -> "NBTBase":
        """Return an independent copy of this tag."""

    def _same_header(self, other: object) -> bool:
        return (
            isinstance(other, NBTBase)
            and self.tag_type == other.tag_type
            and self.key == other.key
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NBTBase):
            return NotImplemented
        return self._same_header(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.key!r})"


class NBTTagEnd(NBTBase, tag_type=0):
    """Marks the end of a compound tag; it has no key and no payload."""

    def __init__(self) -> None:
        super().__init__("")

    def write_contents(self, stream: BinaryIO) -> None:
        pass

    def read_contents(self, stream: BinaryIO) -> None:
        pass

    def clone(self) -> "NBTTagEnd":
        return NBTTagEnd()

    def __str__(self) -> str:
        return "END"


def get_tag_name(tag_type: int) -> str:
    """Return the conventional name of a tag type, or ``"UNKNOWN"``."""
    return _TAG_NAMES.get(tag_type, "UNKNOWN")


def create_tag_of_type(tag_type: int, key: str) -> NBTBase | None:
    """Create an empty tag of the given type, or ``None`` for an unknown type."""
    if tag_type == 0:
        return NBTTagEnd()
    cls = _TAG_CLASSES.get(tag_type)
    if cls is None:
        return None
    return cls(key)


def read_tag(stream: BinaryIO) -> NBTBase | None:
    """Read a full named tag; returns ``None`` if its type is unknown."""
    (tag_type,) = _read_exact(stream, 1)
    if tag_type == 0:
        return NBTTagEnd()
    key = _read_short_string(stream)
    tag = create_tag_of_type(tag_type, key)
    if tag is not None:
        tag.read_contents(stream)
    return tag


def write_tag(tag: NBTBase, stream: BinaryIO) -> None:
    """Write a full named tag: type byte, key and payload."""
    stream.write(bytes([tag.tag_type]))
    if tag.tag_type != 0:
        _write_short_string(tag.key, stream)
        tag.write_contents(stream)
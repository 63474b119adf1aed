"""Compound and list NBT tags."""

from __future__ import annotations

import struct
from typing import BinaryIO, Iterator

from recraft.nbt.base import (
    NBTBase,
    _read_exact,
    create_tag_of_type,
    get_tag_name,
    read_tag,
    write_tag,
)
from recraft.nbt.primitives import (
    NBTTagByte,
    NBTTagByteArray,
    NBTTagDouble,
    NBTTagFloat,
    NBTTagInt,
    NBTTagLong,
    NBTTagShort,
    NBTTagString,
)


class NBTTagCompound(NBTBase, tag_type=10):
    """A mapping of names to tags, terminated on the wire by an end tag."""

    def __init__(self, key: str = "") -> None:
        super().__init__(key)
        self.tag_map: dict[str, NBTBase] = {}

    def write_contents(self, stream: BinaryIO) -> None:
        for tag in self.tag_map.values():
            write_tag(tag, stream)
        stream.write(b"\x00")

    def read_contents(self, stream: BinaryIO) -> None:
        self.tag_map.clear()
        while True:
            tag = read_tag(stream)
            if tag is None:
                raise ValueError("unknown tag type inside compound")
            if tag.tag_type == 0:
                break
            self.tag_map[tag.key] = tag

    def clone(self) -> "NBTTagCompound":
        copy = NBTTagCompound(self.key)
        copy.tag_map = {key: tag.clone() for key, tag in self.tag_map.items()}
        return copy

    def __len__(self) -> int:
        return len(self.tag_map)

    def __iter__(self) -> Iterator[str]:
        return iter(self.tag_map)

    def __contains__(self, key: object) -> bool:
        return key in self.tag_map

    def __str__(self) -> str:
        return f"{len(self.tag_map)} entries"

    def __repr__(self) -> str:
        return f"NBTTagCompound(key={self.key!r}, tags={self.tag_map!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NBTBase):
            return NotImplemented
        if not self._same_header(other):
            return False
        assert isinstance(other, NBTTagCompound)
        if len(self.tag_map) != len(other.tag_map):
            return False
        return all(
            key in other.tag_map and tag == other.tag_map[key]
            for key, tag in self.tag_map.items()
        )

    __hash__ = None  # type: ignore[assignment]

    # -- setters -------------------------------------------------------

    def set_tag(self, key: str, tag: NBTBase) -> None:
        """Store ``tag`` under ``key``, renaming the tag to match."""
        tag.key = key
        self.tag_map[key] = tag

    def set_byte(self, key: str, value: int) -> None:
        self.set_tag(key, NBTTagByte(key, value))

    def set_short(self, key: str, value: int) -> None:
        self.set_tag(key, NBTTagShort(key, value))

    def set_integer(self, key: str, value: int) -> None:
        self.set_tag(key, NBTTagInt(key, value))

    def set_long(self, key: str, value: int) -> None:
        self.set_tag(key, NBTTagLong(key, value))

    def set_float(self, key: str, value: float) -> None:
        self.set_tag(key, NBTTagFloat(key, value))

    def set_double(self, key: str, value: float) -> None:
        self.set_tag(key, NBTTagDouble(key, value))

    def set_string(self, key: str, value: str) -> None:
        """Store a string; an empty string raises ValueError."""
        self.set_tag(key, NBTTagString(key, value))

    def set_byte_array(self, key: str, value: bytes) -> None:
        self.set_tag(key, NBTTagByteArray(key, value))

    def set_compound_tag(self, key: str, value: "NBTTagCompound") -> None:
        self.set_tag(key, value)

    def set_boolean(self, key: str, value: bool) -> None:
        self.set_byte(key, 1 if value else 0)

    # -- getters -------------------------------------------------------

    def get_tag(self, key: str) -> NBTBase | None:
        return self.tag_map.get(key)

    def has_key(self, key: str) -> bool:
        return key in self.tag_map

    def _typed(self, key: str, cls: type) -> NBTBase | None:
        tag = self.tag_map.get(key)
        return tag if isinstance(tag, cls) else None

    def get_byte(self, key: str) -> int:
        """Return the byte as an unsigned value (0-255), or 0 if absent."""
        tag = self._typed(key, NBTTagByte)
        return tag.value & 0xFF if tag is not None else 0  # type: ignore[attr-defined]

    def get_short(self, key: str) -> int:
        tag = self._typed(key, NBTTagShort)
        return tag.value if tag is not None else 0  # type: ignore[attr-defined]

    def get_integer(self, key: str) -> int:
        tag = self._typed(key, NBTTagInt)
        return tag.value if tag is not None else 0  # type: ignore[attr-defined]

    def get_long(self, key: str) -> int:
        tag = self._typed(key, NBTTagLong)
        return tag.value if tag is not None else 0  # type: ignore[attr-defined]

    def get_float(self, key: str) -> float:
        tag = self._typed(key, NBTTagFloat)
        return tag.value if tag is not None else 0.0  # type: ignore[attr-defined]

    def get_double(self, key: str) -> float:
        tag = self._typed(key, NBTTagDouble)
        return tag.value if tag is not None else 0.0  # type: ignore[attr-defined]

    def get_string(self, key: str) -> str:
        tag = self._typed(key, NBTTagString)
        return tag.value if tag is not None else ""  # type: ignore[attr-defined]

    def get_byte_array(self, key: str) -> bytes:
        tag = self._typed(key, NBTTagByteArray)
        return tag.value if tag is not None else b""  # type: ignore[attr-defined]

    def get_compound_tag(self, key: str) -> "NBTTagCompound | None":
        return self._typed(key, NBTTagCompound)  # type: ignore[return-value]

    def get_tag_list(self, key: str) -> "NBTTagList | None":
        return self._typed(key, NBTTagList)  # type: ignore[return-value]

    def get_boolean(self, key: str) -> bool:
        return self.get_byte(key) != 0


class NBTTagList(NBTBase, tag_type=9):
    """An ordered sequence of unnamed tags sharing one element type."""

    def __init__(self, key: str = "") -> None:
        super().__init__(key)
        self.element_type = 1
        self.tags: list[NBTBase] = []

    def write_contents(self, stream: BinaryIO) -> None:
        actual_type = self.tags[0].tag_type if self.tags else 1
        stream.write(bytes([actual_type]))
        stream.write(struct.pack(">I", len(self.tags)))
        for tag in self.tags:
            tag.write_contents(stream)

    def read_contents(self, stream: BinaryIO) -> None:
        (self.element_type,) = _read_exact(stream, 1)
        (count,) = struct.unpack(">I", _read_exact(stream, 4))
        self.tags = []
        for _ in range(count):
            tag = create_tag_of_type(self.element_type, "")
            if tag is None:
                raise ValueError(f"unknown list element type {self.element_type}")
            tag.read_contents(stream)
            self.tags.append(tag)

    def clone(self) -> "NBTTagList":
        copy = NBTTagList(self.key)
        copy.element_type = self.element_type
        copy.tags = [tag.clone() for tag in self.tags]
        return copy

    def add_tag(self, tag: NBTBase) -> None:
        """Append a tag; the list takes on its element type."""
        self.element_type = tag.tag_type
        self.tags.append(tag)

    def tag_at(self, index: int) -> NBTBase | None:
        """Return the tag at ``index``, or ``None`` when out of range."""
        if 0 <= index < len(self.tags):
            return self.tags[index]
        return None

    def tag_count(self) -> int:
        return len(self.tags)

    def __len__(self) -> int:
        return len(self.tags)

    def __iter__(self) -> Iterator[NBTBase]:
        return iter(self.tags)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NBTBase):
            return NotImplemented
        if not self._same_header(other):
            return False
        assert isinstance(other, NBTTagList)
        return (
            self.element_type == other.element_type
            and len(self.tags) == len(other.tags)
            and all(a == b for a, b in zip(self.tags, other.tags))
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return f"{len(self.tags)} entries of type {get_tag_name(self.element_type)}"

    def __repr__(self) -> str:
        return f"NBTTagList(key={self.key!r}, tags={self.tags!r})"
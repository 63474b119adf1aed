"""Reading and writing root compound tags, raw or zlib-compressed, in memory or on disk."""

from __future__ import annotations

import io
import os
import zlib
from typing import Union

from recraft.nbt.base import read_tag, write_tag
from recraft.nbt.containers import NBTTagCompound

PathLike = Union[str, "os.PathLike[str]"]

MAX_DECOMPRESSED_SIZE = 1024 * 1024


def read_from_memory(data: bytes) -> NBTTagCompound:
    """Parse uncompressed NBT whose root must be a compound tag."""
    tag = read_tag(io.BytesIO(bytes(data)))
    if not isinstance(tag, NBTTagCompound):
        raise ValueError("Root tag must be a named compound tag")
    return tag


def write_to_memory(nbt: NBTTagCompound) -> bytes:
    """Serialise a compound tag without compression."""
    buf = io.BytesIO()
    write_tag(nbt, buf)
    return buf.getvalue()


def load_gzipped_compound_from_memory(data: bytes) -> NBTTagCompound:
    """Decompress a zlib stream (at most 1 MiB of output) and parse it."""
    decompressor = zlib.decompressobj()
    try:
        raw = decompressor.decompress(bytes(data), MAX_DECOMPRESSED_SIZE + 1)
    except zlib.error as exc:
        raise ValueError("Failed to decompress NBT data") from exc
    if len(raw) > MAX_DECOMPRESSED_SIZE or not decompressor.eof:
        raise ValueError("Failed to decompress NBT data")
    return read_from_memory(raw)


def write_map_to_gzipped_memory(nbt: NBTTagCompound) -> bytes:
    """Serialise a compound tag and compress it as a zlib stream at best compression."""
    return zlib.compress(write_to_memory(nbt), 9)


def load_map_from_byte_array(data: bytes) -> NBTTagCompound:
    return load_gzipped_compound_from_memory(data)


def write_map_to_byte_array(nbt: NBTTagCompound) -> bytes:
    return write_map_to_gzipped_memory(nbt)


def save_map_to_file(nbt: NBTTagCompound, filename: PathLike) -> None:
    """Write a compound tag, uncompressed, to ``filename``."""
    data = write_to_memory(nbt)
    with open(filename, "wb") as out:
        out.write(data)


def save_map_to_file_with_backup(nbt: NBTTagCompound, filename: PathLike) -> None:
    """Write to a temporary file first, then move it over ``filename``."""
    target = os.fspath(filename)
    tmp = target + "_tmp"
    save_map_to_file(nbt, tmp)
    try:
        os.remove(target)
    except FileNotFoundError:
        pass
    os.replace(tmp, target)


def read_map_from_file(filename: PathLike) -> NBTTagCompound:
    """Read an uncompressed compound tag from ``filename``."""
    with open(filename, "rb") as src:
        data = src.read()
    return read_from_memory(data)
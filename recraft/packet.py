"""Packet base class, packet id registry and NBT payload helpers."""

from __future__ import annotations

import struct
import time
from abc import ABC, abstractmethod
from typing import BinaryIO, Callable

from recraft.nbt.compressed import load_map_from_byte_array, write_map_to_byte_array
from recraft.nbt.containers import NBTTagCompound


class Packet(ABC):
    """A protocol packet that knows how to read and write its own payload."""

    def __init__(self) -> None:
        self.creation_time_millis = int(time.time() * 1000)
        self.is_chunk_data_packet = False

    @abstractmethod
    def read_packet_data(self, stream: BinaryIO) -> None:
        """Read the packet's payload (without the id byte)."""

    @abstractmethod
    def write_packet_data(self, stream: BinaryIO) -> None:
        """Write the packet's payload (without the id byte)."""

    @abstractmethod
    def packet_size(self) -> int:
        """Return the size of the payload in bytes."""


class PacketRegistry:
    """Maps packet ids to packet classes and the direction they may travel."""

    def __init__(self) -> None:
        self._factories: dict[int, Callable[[], Packet]] = {}
        self._ids: dict[type, int] = {}
        self.client_ids: set[int] = set()
        self.server_ids: set[int] = set()

    def add_mapping(
        self, packet_id: int, client: bool, server: bool, packet_class: type[Packet]
    ) -> None:
        """Register ``packet_class`` under ``packet_id``; duplicates raise ValueError."""
        if packet_id in self._factories:
            raise ValueError(f"Duplicate packet id: {packet_id}")
        if packet_class in self._ids:
            raise ValueError(f"Duplicate packet class: {packet_class.__name__}")
        self._factories[packet_id] = packet_class
        self._ids[packet_class] = packet_id
        if client:
            self.client_ids.add(packet_id)
        if server:
            self.server_ids.add(packet_id)

    def id_of(self, packet: Packet) -> int:
        try:
            return self._ids[type(packet)]
        except KeyError:
            raise LookupError("Unknown packet class ID") from None

    def new_packet(self, packet_id: int) -> Packet | None:
        factory = self._factories.get(packet_id)
        return factory() if factory is not None else None

    def read_packet(self, stream: BinaryIO, is_server: bool) -> Packet | None:
        """Read one packet; returns None at end of stream."""
        head = stream.read(1)
        if not head:
            return None
        packet_id = head[0]
        allowed = self.server_ids if is_server else self.client_ids
        if packet_id not in allowed:
            raise ValueError(f"Bad packet id {packet_id}")
        packet = self.new_packet(packet_id)
        if packet is None:
            raise ValueError(f"Unknown packet id {packet_id}")
        packet.read_packet_data(stream)
        return packet

    def write_packet(self, packet: Packet, stream: BinaryIO) -> None:
        stream.write(bytes([self.id_of(packet) & 0xFF]))
        packet.write_packet_data(stream)


_LENGTH = struct.Struct("<h")


def read_nbt(stream: BinaryIO) -> NBTTagCompound | None:
    """Read a compressed compound prefixed by a signed 16-bit little-endian length."""
    raw = stream.read(_LENGTH.size)
    if len(raw) != _LENGTH.size:
        raise EOFError("truncated NBT length")
    (length,) = _LENGTH.unpack(raw)
    if length < 0:
        return None
    data = stream.read(length)
    if len(data) != length:
        raise EOFError("truncated NBT data")
    return load_map_from_byte_array(data)


def write_nbt(tag: NBTTagCompound | None, stream: BinaryIO) -> None:
    """Write a compressed compound, or a length of -1 for no tag."""
    if tag is None:
        stream.write(_LENGTH.pack(-1))
        return
    data = write_map_to_byte_array(tag)
    if len(data) > 0x7FFF:
        raise ValueError("NBT data too large for packet")
    stream.write(_LENGTH.pack(len(data)))
    stream.write(data)
"""A saved server entry and its NBT form."""

from __future__ import annotations

from dataclasses import dataclass

from recraft.nbt.containers import NBTTagCompound


@dataclass
class ServerNBTStorage:
    """A server in the list, with the results of its last poll."""

    name: str
    host: str
    player_count: str = ""
    motd: str = ""
    lag: int = 0
    polled: bool = False

    def to_compound(self) -> NBTTagCompound:
        """Return the stored form; empty name or host raises ValueError."""
        tag = NBTTagCompound()
        tag.set_string("name", self.name)
        tag.set_string("ip", self.host)
        return tag

    @classmethod
    def from_compound(cls, tag: NBTTagCompound) -> "ServerNBTStorage":
        return cls(tag.get_string("name"), tag.get_string("ip"))
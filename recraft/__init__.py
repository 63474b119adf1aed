"""Console server list, status polling, login and NBT storage for a block-game multiplayer client."""

__version__ = "0.1.0"
"""Input key flags and the abstract screen shown on the console."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from enum import IntFlag
from typing import ClassVar


class Key(IntFlag):
    """Buttons, with the bit values used by the handheld's input register."""

    A = 1 << 0
    B = 1 << 1
    SELECT = 1 << 2
    START = 1 << 3
    RIGHT = 1 << 4
    LEFT = 1 << 5
    UP = 1 << 6
    DOWN = 1 << 7
    R = 1 << 8
    L = 1 << 9
    X = 1 << 10
    Y = 1 << 11


def parse_keys(text: str) -> Key:
    """Parse key names separated by spaces, commas or '+', e.g. ``"l+r"``."""
    keys = Key(0)
    for name in re.split(r"[\s,+]+", text.strip()):
        if not name:
            continue
        try:
            keys |= Key[name.upper()]
        except KeyError:
            raise ValueError(f"unknown key: {name!r}") from None
    return keys


class Screen(ABC):
    """A console screen that draws itself and reacts to key presses."""

    current_screen: ClassVar["Screen | None"] = None

    @abstractmethod
    def draw_screen(self) -> None:
        """Render the screen."""

    @abstractmethod
    def update_controls(self, keys: Key) -> None:
        """React to the keys pressed this frame."""
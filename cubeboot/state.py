"""Boot state block shared with the loaded program."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar, List

MAX_BUTTONS = 13

BUTTON_UP = 0
BUTTON_DOWN = 1

STATE_ADDRESS = 0x81700000

_LAYOUT = struct.Struct(">IHH" + "I4xQ" * MAX_BUTTONS)


@dataclass
class HeldButton:
    status: int = BUTTON_UP
    timestamp: int = 0


def _default_buttons() -> List[HeldButton]:
    return [HeldButton() for _ in range(MAX_BUTTONS)]


@dataclass
class CubebootState:
    """The state record kept at ``STATE_ADDRESS``, big-endian."""

    boot_code: int = 0
    padding: int = 0
    last_buttons: int = 0
    held_buttons: List[HeldButton] = field(default_factory=_default_buttons)

    SIZE: ClassVar[int] = _LAYOUT.size

    def __post_init__(self) -> None:
        if len(self.held_buttons) != MAX_BUTTONS:
            raise ValueError(f"expected {MAX_BUTTONS} held buttons, got {len(self.held_buttons)}")

    def pack(self) -> bytes:
        values = [self.boot_code, self.padding, self.last_buttons]
        for button in self.held_buttons:
            values.extend((button.status, button.timestamp))
        try:
            return _LAYOUT.pack(*values)
        except struct.error as exc:
            raise ValueError(str(exc)) from exc

    @classmethod
    def unpack(cls, data) -> "CubebootState":
        data = bytes(data)
        if len(data) < cls.SIZE:
            raise ValueError(f"state block needs {cls.SIZE} bytes, got {len(data)}")
        boot_code, padding, last_buttons, *rest = _LAYOUT.unpack_from(data)
        buttons = [HeldButton(status, ts) for status, ts in zip(rest[::2], rest[1::2])]
        return cls(boot_code, padding, last_buttons, buttons)
from __future__ import annotations
from dataclasses import dataclass, field

import mido

from midi.constants import NUM_CHANNELS


def status_byte(command: int, channel: int) -> int:
    if not (1 <= channel <= NUM_CHANNELS):
        raise ValueError(f"MIDI channel must be 1-16, got {channel}")
    return ((command & 0x0F) << 4) | (channel - 1)


@dataclass(frozen=True)
class Message:
    status: int
    data: tuple[int, ...] = field(default_factory=tuple)
    timestamp: float = 0.0

    @property
    def command(self) -> int:
        return self.status >> 4

    @property
    def channel(self) -> int:
        return (self.status & 0x0F) + 1

    def to_bytes(self) -> list[int]:
        return [self.status, *self.data]

    def to_mido(self, time: float = 0) -> mido.Message:
        """Parse into a mido message; raises ValueError for malformed bytes."""
        msg = mido.Message.from_bytes(self.to_bytes())
        return msg.copy(time=time)

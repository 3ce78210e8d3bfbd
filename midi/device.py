from __future__ import annotations
import mido

from core.logger import AppLogger
from midi.messages import Message
from midi.output import BaseOutput, MessageScheduler
from midi.timing import MidiClock


def list_midi_ports() -> list[str]:
    return list(mido.get_output_names())


def find_port(ports: list[str], fragment: str) -> int | None:
    # Exact name first, then the first port containing the fragment
    for i, name in enumerate(ports):
        if name == fragment:
            return i
    lowered = fragment.lower()
    for i, name in enumerate(ports):
        if lowered in name.lower():
            return i
    return None


class MidiDevice(BaseOutput):
    """Hardware MIDI output. Future timestamps are held by a MessageScheduler."""

    def __init__(self, logger: AppLogger | None = None, clock: MidiClock | None = None,
                 octave_offset: int = 0) -> None:
        super().__init__(clock, logger, octave_offset)
        self._port = None
        self._connected = False
        self._port_name: str | None = None
        self._scheduler = MessageScheduler(self._send_now, self.clock, self._logger)

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def port_name(self) -> str | None:
        return self._port_name

    @property
    def pending(self) -> int:
        return self._scheduler.pending

    def connect(self, port_name: str) -> None:
        if self._connected:
            self.disconnect()
        try:
            self._port = mido.open_output(port_name)
        except (IOError, OSError) as exc:
            raise RuntimeError(
                f"Could not open MIDI output port '{port_name}'. "
                "It may be in use by another application."
            ) from exc
        self._logger.midi(f"OUT: {port_name}")
        self._connected = True
        self._port_name = port_name

    def disconnect(self) -> None:
        self._scheduler.stop()
        if self._connected and self._port is not None:
            self._port.close()
            self._logger.midi(f"closed {self._port_name}")
        self._port = None
        self._connected = False
        self._port_name = None

    def clear(self) -> None:
        """Drop every message still waiting for its timestamp."""
        self._scheduler.cancel_all()

    def _transmit(self, message: Message) -> None:
        if not self._connected:
            raise RuntimeError("Not connected to a MIDI device")
        self._scheduler.schedule(message)

    def _send_now(self, message: Message) -> None:
        if not self._connected or self._port is None:
            raise RuntimeError("Not connected to a MIDI device")
        self._port.send(message.to_mido())

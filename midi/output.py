from __future__ import annotations

import heapq
import itertools
import math
import threading
from typing import Callable, Sequence

import mido

from core.logger import AppLogger
from midi.channel import OutputChannel
from midi.constants import CHANNEL_AFTERTOUCH, NUM_CHANNELS, PROGRAM_CHANGE
from midi.messages import Message
from midi.timing import MidiClock, TimeResolver

_STOP_TIMEOUT_SEC = 2.0


class BaseOutput:
    """An output with 16 channels. Subclasses implement ``_transmit``.

    ``send`` rejects malformed wire bytes with ValueError (or TypeError for
    non-integer bytes) as parsed by mido. Running status, system messages
    and incomplete messages are all refused.
    """

    def __init__(self, clock: MidiClock | None = None, logger: AppLogger | None = None,
                 octave_offset: int = 0) -> None:
        self._clock = clock or MidiClock()
        self._time_resolver = TimeResolver(self._clock)
        self._logger = logger or AppLogger()
        self._channels = [
            OutputChannel(self, number, self._time_resolver, self._logger, octave_offset)
            for number in range(1, NUM_CHANNELS + 1)
        ]

    @property
    def clock(self) -> MidiClock:
        return self._clock

    @property
    def channels(self) -> list[OutputChannel]:
        return list(self._channels)

    def channel(self, number: int) -> OutputChannel:
        if not (isinstance(number, int) and 1 <= number <= NUM_CHANNELS):
            raise ValueError(f"MIDI channel must be 1-16, got {number}")
        return self._channels[number - 1]

    def send(self, status: int, data: Sequence[int] = (), timestamp: float | None = None) -> None:
        if timestamp is None:
            timestamp = self._clock.now()
        if not (isinstance(status, int) and 0x80 <= status <= 0xEF):
            raise ValueError(f"Only channel message status bytes (0x80-0xEF) can be sent, got {status!r}")
        data = tuple(data)
        expected = 1 if status >> 4 in (PROGRAM_CHANGE, CHANNEL_AFTERTOUCH) else 2
        if len(data) != expected:
            raise ValueError(f"Status {status:#04x} takes {expected} data byte(s), got {len(data)}")
        message = Message(status, data, float(timestamp))
        message.to_mido()
        self._transmit(message)

    def _transmit(self, message: Message) -> None:
        raise NotImplementedError


class RecordingOutput(BaseOutput):
    """Keeps every sent message in memory instead of transmitting it."""

    def __init__(self, clock: MidiClock | None = None, logger: AppLogger | None = None,
                 octave_offset: int = 0) -> None:
        super().__init__(clock, logger, octave_offset)
        self._messages: list[Message] = []
        self._lock = threading.Lock()

    @property
    def messages(self) -> list[Message]:
        with self._lock:
            return list(self._messages)

    def clear(self) -> None:
        with self._lock:
            self._messages.clear()

    def _transmit(self, message: Message) -> None:
        with self._lock:
            self._messages.append(message)

    def to_midi_file(self, ticks_per_beat: int = 480, tempo: int = 500000) -> mido.MidiFile:
        """Render the recorded messages into a single-track MIDI file.

        Timestamps are ms; the earliest one becomes tick 0.
        """
        mid = mido.MidiFile(ticks_per_beat=ticks_per_beat)
        track = mido.MidiTrack()
        mid.tracks.append(track)
        track.append(mido.MetaMessage("set_tempo", tempo=tempo, time=0))
        events = sorted(self.messages, key=lambda m: m.timestamp)
        if not events:
            return mid
        origin = events[0].timestamp
        last_tick = 0
        for message in events:
            seconds = (message.timestamp - origin) / 1000.0
            tick = round(mido.second2tick(seconds, ticks_per_beat, tempo))
            track.append(message.to_mido(time=tick - last_tick))
            last_tick = tick
        return mid


class MessageScheduler:
    """Delivers messages at their timestamps from a daemon thread.

    Messages whose timestamp is not in the future are delivered immediately on
    the caller's thread. Messages with equal timestamps keep their send order.
    """

    def __init__(self, send_now: Callable[[Message], None], clock: MidiClock,
                 logger: AppLogger | None = None) -> None:
        self._send_now = send_now
        self._clock = clock
        self._logger = logger or AppLogger()
        self._queue: list[tuple[float, int, Message]] = []
        self._counter = itertools.count()
        self._cond = threading.Condition()
        self._stop_flag = False
        self._thread: threading.Thread | None = None

    @property
    def pending(self) -> int:
        with self._cond:
            return len(self._queue)

    def schedule(self, message: Message) -> None:
        if not math.isfinite(message.timestamp):
            raise ValueError(f"Cannot schedule a message at {message.timestamp!r}")
        with self._cond:
            due = message.timestamp <= self._clock.now() and not self._queue
            if not due:
                heapq.heappush(self._queue, (message.timestamp, next(self._counter), message))
                self._ensure_thread()
                self._cond.notify()
        if due:
            self._send_now(message)

    def cancel_all(self) -> None:
        with self._cond:
            dropped = len(self._queue)
            self._queue.clear()
            self._cond.notify()
        if dropped:
            self._logger.schedule(f"cancelled {dropped} pending message(s)")

    def stop(self) -> None:
        with self._cond:
            self._stop_flag = True
            self._queue.clear()
            self._cond.notify()
        if self._thread is not None:
            self._thread.join(timeout=_STOP_TIMEOUT_SEC)
            if self._thread.is_alive():
                self._logger.schedule(f"delivery thread did not stop within {_STOP_TIMEOUT_SEC} s")
                return
            self._thread = None
        with self._cond:
            self._stop_flag = False

    def _ensure_thread(self) -> None:
        if self._thread is None or not self._thread.is_alive():
            self._stop_flag = False
            self._thread = threading.Thread(target=self._run, daemon=True)
            self._thread.start()

    def _run(self) -> None:
        while True:
            with self._cond:
                while not self._stop_flag:
                    if not self._queue:
                        self._cond.wait()
                        continue
                    wait_ms = self._queue[0][0] - self._clock.now()
                    if wait_ms <= 0:
                        break
                    self._cond.wait(timeout=wait_ms / 1000.0)
                if self._stop_flag:
                    return
                _, _, message = heapq.heappop(self._queue)
            try:
                self._send_now(message)
            except Exception as exc:
                self._logger.schedule(f"delivery failed for {message.to_bytes()}: {exc}")

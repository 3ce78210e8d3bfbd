import threading
import time

import mido
import pytest

from core.logger import AppLogger
from midi.messages import Message
from midi.output import MessageScheduler, RecordingOutput
from midi.timing import MidiClock


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.value = now

    def now(self) -> float:
        return self.value


@pytest.fixture
def rec():
    return RecordingOutput(clock=FakeClock(), logger=AppLogger(echo=False))


def test_output_has_sixteen_channels(rec):
    assert [c.number for c in rec.channels] == list(range(1, 17))
    assert rec.channel(5).number == 5
    assert rec.channel(5).output is rec

def test_output_channel_lookup_invalid(rec):
    with pytest.raises(ValueError):
        rec.channel(0)

def test_send_records_message(rec):
    rec.send(0x90, [60, 100], 2000)
    assert rec.messages == [Message(0x90, (60, 100), 2000.0)]

def test_send_without_timestamp_uses_now(rec):
    rec.send(0xC0, [3])
    assert rec.messages[0].timestamp == 1000.0

@pytest.mark.parametrize("status, data", [
    (0x40, [60, 100]),       # running status
    (0xF0, [1, 2]),          # system exclusive
    (0xF4, []),              # reserved
    (0x100, [0]),            # not a byte
    (0x90, [60]),            # incomplete
    (0xC0, [1, 2]),          # too long
    (0xE0, [0]),             # incomplete pitch bend
    (0xB0, [7, 200]),        # data byte above 127
])
def test_send_rejects_malformed(rec, status, data):
    with pytest.raises(ValueError):
        rec.send(status, data)
    assert rec.messages == []

def test_channel_errors_propagate_from_output(rec):
    with pytest.raises(ValueError):
        rec.channel(1).send(0x90, [60, 300])

def test_channels_share_output_clock(rec):
    rec.channel(1).play_note("C4", duration=100, time="+10")
    rec.channel(2).set_program(5, time="+10")
    assert rec.messages == [
        Message(0x90, (60, 64), 1010.0),
        Message(0x80, (60, 64), 1110.0),
        Message(0xC1, (4,), 1010.0),
    ]

def test_clear(rec):
    rec.channel(1).turn_notes_off()
    rec.clear()
    assert rec.messages == []

def test_to_midi_file(rec):
    rec.channel(1).send_note_on(60, raw_attack=100, time=1000)
    rec.channel(1).send_note_off(60, time=1500)
    mid = rec.to_midi_file(ticks_per_beat=480, tempo=500000)
    msgs = [m for m in mid.tracks[0] if not m.is_meta]
    assert [m.type for m in msgs] == ["note_on", "note_off"]
    assert msgs[0].time == 0
    assert msgs[1].time == 480  # 500 ms at 120 BPM is one beat

def test_to_midi_file_sorts_by_timestamp(rec):
    rec.send(0x90, [64, 1], 3000)
    rec.send(0x90, [60, 1], 2000)
    mid = rec.to_midi_file()
    notes = [m.note for m in mid.tracks[0] if m.type == "note_on"]
    assert notes == [60, 64]

def test_to_midi_file_empty(rec):
    mid = rec.to_midi_file()
    assert isinstance(mid, mido.MidiFile)
    assert len(mid.tracks) == 1


# -- scheduler --

def _collector():
    sent = []
    done = threading.Event()

    def send_now(message):
        sent.append(message)
        done.set()

    return sent, done, send_now


def test_scheduler_sends_due_messages_immediately():
    sent, _, send_now = _collector()
    scheduler = MessageScheduler(send_now, FakeClock(1000.0), AppLogger(echo=False))
    scheduler.schedule(Message(0x90, (60, 64), 500.0))
    assert sent == [Message(0x90, (60, 64), 500.0)]
    assert scheduler.pending == 0

def test_scheduler_delays_future_messages():
    sent, done, send_now = _collector()
    clock = MidiClock()
    scheduler = MessageScheduler(send_now, clock, AppLogger(echo=False))
    try:
        scheduler.schedule(Message(0x90, (60, 64), clock.now() + 50))
        assert sent == []
        assert done.wait(timeout=2.0)
        assert len(sent) == 1
    finally:
        scheduler.stop()

def test_scheduler_keeps_order_for_equal_timestamps():
    sent = []
    clock = MidiClock()
    scheduler = MessageScheduler(sent.append, clock, AppLogger(echo=False))
    try:
        due = clock.now() + 30
        for note in (60, 61, 62):
            scheduler.schedule(Message(0x90, (note, 64), due))
        deadline = time.monotonic() + 2.0
        while len(sent) < 3 and time.monotonic() < deadline:
            time.sleep(0.01)
        assert [m.data[0] for m in sent] == [60, 61, 62]
    finally:
        scheduler.stop()

def test_scheduler_cancel_all():
    sent, _, send_now = _collector()
    clock = MidiClock()
    scheduler = MessageScheduler(send_now, clock, AppLogger(echo=False))
    try:
        scheduler.schedule(Message(0x90, (60, 64), clock.now() + 10000))
        assert scheduler.pending == 1
        scheduler.cancel_all()
        assert scheduler.pending == 0
        assert sent == []
    finally:
        scheduler.stop()

@pytest.mark.parametrize("timestamp", [float("nan"), float("inf")])
def test_scheduler_rejects_non_finite_timestamps(timestamp):
    sent, _, send_now = _collector()
    scheduler = MessageScheduler(send_now, FakeClock(1000.0), AppLogger(echo=False))
    with pytest.raises(ValueError):
        scheduler.schedule(Message(0x90, (60, 64), timestamp))
    assert scheduler.pending == 0
    scheduler.schedule(Message(0x90, (61, 64), 0.0))
    assert sent == [Message(0x90, (61, 64), 0.0)]

def test_scheduler_stop_keeps_busy_thread_flagged(monkeypatch):
    monkeypatch.setattr("midi.output._STOP_TIMEOUT_SEC", 0.05)
    entered = threading.Event()
    release = threading.Event()
    sent = []

    def send_now(message):
        entered.set()
        release.wait(timeout=5.0)
        sent.append(message)

    clock = MidiClock()
    scheduler = MessageScheduler(send_now, clock, AppLogger(echo=False))
    scheduler.schedule(Message(0x90, (60, 64), clock.now() + 10))
    assert entered.wait(timeout=2.0)
    busy = scheduler._thread
    scheduler.stop()
    assert busy.is_alive()
    assert scheduler._stop_flag
    release.set()
    busy.join(timeout=2.0)
    assert not busy.is_alive()
    scheduler.schedule(Message(0x90, (61, 64), clock.now() + 10))
    deadline = time.monotonic() + 2.0
    while len(sent) < 2 and time.monotonic() < deadline:
        time.sleep(0.01)
    assert [m.data[0] for m in sent] == [60, 61]
    scheduler.stop()

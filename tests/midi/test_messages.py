import pytest

from midi.messages import Message, status_byte


def test_status_byte_low_nibble_is_channel():
    assert status_byte(0x9, 1) == 0x90
    assert status_byte(0xB, 16) == 0xBF
    assert status_byte(0xE, 3) == 0xE2

def test_status_byte_invalid_channel():
    with pytest.raises(ValueError):
        status_byte(0x9, 0)
    with pytest.raises(ValueError):
        status_byte(0x9, 17)

def test_message_properties():
    msg = Message(0x93, (60, 100), 12.0)
    assert msg.command == 0x9
    assert msg.channel == 4
    assert msg.to_bytes() == [0x93, 60, 100]

def test_message_to_mido():
    msg = Message(0xC0, (5,)).to_mido(time=10)
    assert msg.type == "program_change"
    assert msg.program == 5
    assert msg.time == 10

def test_message_to_mido_rejects_bad_data():
    with pytest.raises(ValueError):
        Message(0x90, (60,)).to_mido()
    with pytest.raises(ValueError):
        Message(0x90, (60, 200)).to_mido()

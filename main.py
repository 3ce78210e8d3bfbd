import argparse
import math
import sys
import time

from core.config import AppConfig
from core.logger import AppLogger
from midi.constants import NUM_CHANNELS
from midi.device import MidiDevice, find_port, list_midi_ports
from midi.notes import resolve_notes


def _note_arg(value: str):
    return int(value) if value.lstrip("-").isdigit() else value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send MIDI channel messages to an output port")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("ports", help="List MIDI output ports")

    play = subparsers.add_parser("play", help="Play notes one after another")
    play.add_argument("notes", nargs="+", type=_note_arg, help="Note numbers or names (C4, G#3)")
    play.add_argument("--port", type=str, default=None, help="Output port name or fragment")
    play.add_argument("--channel", type=int, default=None, help="MIDI channel 1-16")
    play.add_argument("--duration", type=float, default=None, help="Note length in ms")
    play.add_argument("--attack", type=float, default=0.5, help="Attack velocity 0-1 (default: 0.5)")

    panic = subparsers.add_parser("panic", help="All sound off and reset controllers on every channel")
    panic.add_argument("--port", type=str, default=None, help="Output port name or fragment")
    return parser


def _open_device(port: str | None, config: AppConfig, logger: AppLogger) -> MidiDevice | None:
    ports = list_midi_ports()
    fragment = port or config.midi_port
    if fragment:
        index = find_port(ports, fragment)
    else:
        index = 0 if ports else None
    if index is None:
        logger.general(f"No MIDI output port found (available: {ports})")
        return None
    device = MidiDevice(logger=logger, octave_offset=config.octave_offset)
    try:
        device.connect(ports[index])
    except RuntimeError as exc:
        logger.general(str(exc))
        return None
    return device


def _drain(device: MidiDevice, timeout_sec: float) -> None:
    deadline = time.monotonic() + timeout_sec
    while device.pending and time.monotonic() < deadline:
        time.sleep(0.01)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = AppConfig()
    logger = AppLogger()

    if args.command == "ports":
        for name in list_midi_ports():
            print(name)
        return 0

    if args.command == "play":
        duration = args.duration if args.duration is not None else config.default_duration_ms
        channel_number = args.channel or config.channel
        try:
            resolve_notes(args.notes, octave_offset=config.octave_offset)
        except (TypeError, ValueError) as exc:
            logger.general(f"Invalid note: {exc}")
            return 1
        if not 1 <= channel_number <= NUM_CHANNELS:
            logger.general(f"MIDI channel must be 1-16, got {channel_number}")
            return 1
        if not math.isfinite(duration) or duration < 0:
            logger.general(f"Duration must be a positive number, got {duration}")
            return 1
        device = _open_device(args.port, config, logger)
        if device is None:
            return 1
        channel = device.channel(channel_number)
        try:
            for i, note in enumerate(args.notes):
                channel.play_note(note, duration=duration, attack=args.attack,
                                  time=f"+{i * duration}" if i else None)
            _drain(device, (len(args.notes) * duration) / 1000.0 + 2.0)
        finally:
            device.disconnect()
        return 0

    if args.command == "panic":
        device = _open_device(args.port, config, logger)
        if device is None:
            return 1
        try:
            for channel in device.channels:
                channel.turn_sound_off()
                channel.reset_all_controllers()
        finally:
            device.disconnect()
        return 0

    build_parser().print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())

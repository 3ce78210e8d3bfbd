from __future__ import annotations
import math
from typing import Protocol, Sequence

from core.logger import AppLogger
from midi.constants import (
    CHANNEL_AFTERTOUCH,
    CHANNEL_MODE,
    CHANNEL_MODE_MESSAGES,
    CONTROL_CHANGE,
    CONTROL_CHANGE_MESSAGES,
    KEY_AFTERTOUCH,
    MAX_CHANNEL_MODE,
    MAX_CONTROLLER,
    MIN_CHANNEL_MODE,
    NOTE_OFF,
    NOTE_ON,
    NUM_CHANNELS,
    PITCH_BEND,
    PROGRAM_CHANGE,
)
from midi.messages import status_byte
from midi.notes import resolve_notes
from midi.numeric import normalize_unit_value, split_fourteen_bit, validate_byte
from midi.parameters import Step, control_changes, set_sequence, step_sequence
from midi.timing import MidiClock, TimeResolver

_LEGACY_OPTIONS = {"velocity", "raw_velocity"}


class MessageSink(Protocol):
    def send(self, status: int, data: Sequence[int] = (), timestamp: float | None = None) -> None:
        ...


class OutputChannel:
    """One MIDI channel (1-16) of an output.

    Every operation validates its arguments, resolves its time descriptor once
    and hands one or more messages to the output, all with that timestamp.
    Time descriptors are ``None`` (now), an absolute clock timestamp in ms, or
    ``"+<ms>"`` relative to now.

    Out-of-range addressing values (controllers, programs, parameters) raise
    ValueError and unknown names raise TypeError, before anything is sent.
    Expressive values (velocity, pressure) that are missing or invalid fall back
    to 0.5 (64 raw).
    """

    def __init__(self, output: MessageSink, number: int,
                 time_resolver: TimeResolver | None = None,
                 logger: AppLogger | None = None, octave_offset: int = 0) -> None:
        if not (isinstance(number, int) and 1 <= number <= NUM_CHANNELS):
            raise ValueError(f"MIDI channel must be 1-16, got {number}")
        self._output = output
        self._number = number
        self._time_resolver = time_resolver or TimeResolver(MidiClock())
        self._logger = logger or AppLogger()
        self._octave_offset = octave_offset

    @property
    def number(self) -> int:
        return self._number

    @property
    def output(self) -> MessageSink:
        return self._output

    def send(self, status: int, data: Sequence[int] = (), timestamp: float | None = None) -> None:
        self._output.send(status, list(data), timestamp)

    def _emit(self, command: int, data: list[int], timestamp: float) -> None:
        self.send(status_byte(command, self._number), data, timestamp)

    def _resolve_time(self, time: float | str | None) -> float:
        return self._time_resolver.resolve(time)

    # -- notes --

    def _legacy_velocity(self, legacy: dict, value, raw_value, canonical: str):
        unknown = set(legacy) - _LEGACY_OPTIONS
        if unknown:
            raise TypeError(f"Unexpected option(s): {', '.join(sorted(unknown))}")
        if legacy.get("raw_velocity"):
            self._logger.deprecated(
                f"The 'raw_velocity' option is deprecated. Use 'raw_{canonical}' instead."
            )
            if "velocity" in legacy:
                raw_value = legacy["velocity"]
        elif "velocity" in legacy:
            self._logger.deprecated(
                f"The 'velocity' option is deprecated. Use '{canonical}' instead."
            )
            value = legacy["velocity"]
        return value, raw_value

    def send_note_on(self, note, attack: float | None = None, raw_attack: int | None = None,
                     time: float | str | None = None, **legacy) -> None:
        """Send a note on for one note or a list of notes (numbers, names or Note objects).

        ``raw_attack`` (0-127) wins over ``attack`` (0-1) when given. Note
        objects carrying their own attack keep it. A velocity of 0 is sent as is.
        """
        attack, raw_attack = self._legacy_velocity(legacy, attack, raw_attack, "attack")
        if raw_attack is not None:
            velocity = normalize_unit_value(raw_attack, use_raw=True)
        else:
            velocity = normalize_unit_value(attack)
        notes = resolve_notes(note, raw_attack=velocity, octave_offset=self._octave_offset)
        timestamp = self._resolve_time(time)
        for n in notes:
            self._emit(NOTE_ON, [n.number, n.raw_attack], timestamp)

    def send_note_off(self, note, release: float | None = None, raw_release: int | None = None,
                      time: float | str | None = None, **legacy) -> None:
        release, raw_release = self._legacy_velocity(legacy, release, raw_release, "release")
        if raw_release is not None:
            velocity = normalize_unit_value(raw_release, use_raw=True)
        else:
            velocity = normalize_unit_value(release)
        notes = resolve_notes(note, raw_release=velocity, octave_offset=self._octave_offset)
        timestamp = self._resolve_time(time)
        for n in notes:
            self._emit(NOTE_OFF, [n.number, n.raw_release], timestamp)

    def stop_note(self, note, release: float | None = None, raw_release: int | None = None,
                  time: float | str | None = None, **legacy) -> None:
        self.send_note_off(note, release, raw_release, time, **legacy)

    def play_note(self, note, duration: float | None = None,
                  attack: float | None = None, raw_attack: int | None = None,
                  release: float | None = None, raw_release: int | None = None,
                  time: float | str | None = None, **legacy) -> None:
        """Send a note on and, when ``duration`` (ms) is given, the matching note off.

        The note off is scheduled ``duration`` ms after the note on's own
        timestamp, so it follows a delayed start.
        """
        if duration is not None:
            if isinstance(duration, bool) or not isinstance(duration, (int, float)) \
                    or not math.isfinite(duration) or duration < 0:
                raise ValueError(f"Duration must be a positive number of milliseconds, got {duration!r}")
        start = self._resolve_time(time)
        self.send_note_on(note, attack, raw_attack, time=start, **legacy)
        if duration is not None:
            self.send_note_off(note, release, raw_release, time=start + duration, **legacy)

    # -- aftertouch --

    def set_key_aftertouch(self, note, pressure: float = 0.5, use_raw_value: bool = False,
                           time: float | str | None = None) -> None:
        value = normalize_unit_value(pressure, use_raw=use_raw_value)
        notes = resolve_notes(note, octave_offset=self._octave_offset)
        timestamp = self._resolve_time(time)
        for n in notes:
            self._emit(KEY_AFTERTOUCH, [n.number, value], timestamp)

    def set_channel_aftertouch(self, pressure: float = 0.5, use_raw_value: bool = False,
                               time: float | str | None = None) -> None:
        value = normalize_unit_value(pressure, use_raw=use_raw_value)
        self._emit(CHANNEL_AFTERTOUCH, [value], self._resolve_time(time))

    # -- control change, program, pitch bend --

    @staticmethod
    def _controller_number(controller) -> int:
        if isinstance(controller, str):
            if controller not in CONTROL_CHANGE_MESSAGES:
                raise TypeError(f"Invalid controller name: {controller!r}")
            return CONTROL_CHANGE_MESSAGES[controller]
        return validate_byte(controller, "Controller number", 0, MAX_CONTROLLER)

    def send_control_change(self, controller: int | str, value: int = 0,
                            time: float | str | None = None) -> None:
        controller = self._controller_number(controller)
        value = validate_byte(value, "Control change value")
        self._emit(CONTROL_CHANGE, [controller, value], self._resolve_time(time))

    def set_program(self, program: int, time: float | str | None = None) -> None:
        """Select program 1-128; the wire value is 0-based."""
        program = validate_byte(program, "Program number", 1, 128)
        self._emit(PROGRAM_CHANGE, [program - 1], self._resolve_time(time))

    def set_pitch_bend(self, value: float = 0.0, use_raw_value: bool = False,
                       time: float | str | None = None) -> None:
        """Bend between -1.0 and 1.0, or 0-127 with ``use_raw_value``."""
        if use_raw_value:
            value = validate_byte(value, "Raw pitch bend value") / 127 * 2 - 1
        try:
            msb, lsb = split_fourteen_bit(value)
        except ValueError as exc:
            raise ValueError(f"Pitch bend value must be between -1.0 and 1.0, got {value!r}") from exc
        # Pitch bend carries the LSB first.
        self._emit(PITCH_BEND, [lsb, msb], self._resolve_time(time))

    # -- registered / non-registered parameters --

    def _send_steps(self, steps: list[Step], time: float | str | None) -> None:
        timestamp = self._resolve_time(time)
        for controller, value in control_changes(steps):
            self._emit(CONTROL_CHANGE, [controller, value], timestamp)

    def set_registered_parameter(self, parameter, data, time: float | str | None = None) -> None:
        """Select a registered parameter (name or pair), write 1 or 2 data bytes, deselect."""
        self._send_steps(set_sequence(parameter, data, registered=True), time)

    def set_non_registered_parameter(self, parameter, data, time: float | str | None = None) -> None:
        self._send_steps(set_sequence(parameter, data, registered=False), time)

    def increment_registered_parameter(self, parameter, time: float | str | None = None) -> None:
        self._send_steps(step_sequence(parameter, increment=True, registered=True), time)

    def decrement_registered_parameter(self, parameter, time: float | str | None = None) -> None:
        self._send_steps(step_sequence(parameter, increment=False, registered=True), time)

    def increment_non_registered_parameter(self, parameter, time: float | str | None = None) -> None:
        self._send_steps(step_sequence(parameter, increment=True, registered=False), time)

    def decrement_non_registered_parameter(self, parameter, time: float | str | None = None) -> None:
        self._send_steps(step_sequence(parameter, increment=False, registered=False), time)

    def set_pitch_bend_range(self, semitones: int, cents: int = 0,
                             time: float | str | None = None) -> None:
        self.set_registered_parameter("pitchbendrange", [semitones, cents], time)

    def set_modulation_range(self, semitones: int, cents: int = 0,
                             time: float | str | None = None) -> None:
        self.set_registered_parameter("modulationrange", [semitones, cents], time)

    def set_master_tuning(self, value: float = 0.0, time: float | str | None = None) -> None:
        """Tune the channel by a signed number of semitones, -64 <= value < 64.

        The integer part goes to coarse tuning (offset by 64) and the fraction
        to fine tuning at 14-bit resolution.
        """
        if isinstance(value, bool) or not isinstance(value, (int, float)) \
                or math.isnan(value) or not (-64 <= value < 64):
            raise ValueError(
                f"Master tuning must be at least -64 and smaller than 64, got {value!r}"
            )
        coarse = math.floor(value) + 64
        msb, lsb = split_fourteen_bit(value - math.floor(value))
        steps = (set_sequence("channelcoarsetuning", coarse)
                 + set_sequence("channelfinetuning", [msb, lsb]))
        self._send_steps(steps, time)

    def set_tuning_bank(self, value: int, time: float | str | None = None) -> None:
        value = validate_byte(value, "Tuning bank", 1, 128)
        self.set_registered_parameter("tuningbank", value - 1, time)

    def set_tuning_program(self, value: int, time: float | str | None = None) -> None:
        value = validate_byte(value, "Tuning program", 1, 128)
        self.set_registered_parameter("tuningprogram", value - 1, time)

    # -- channel mode --

    def send_channel_mode(self, command: int | str, value: int | None = 0,
                          time: float | str | None = None) -> None:
        if isinstance(command, str):
            if command not in CHANNEL_MODE_MESSAGES:
                raise TypeError(f"Invalid channel mode message name: {command!r}")
            command = CHANNEL_MODE_MESSAGES[command]
        else:
            command = validate_byte(command, "Channel mode command", MIN_CHANNEL_MODE, MAX_CHANNEL_MODE)
        value = validate_byte(0 if value is None else value, "Channel mode value")
        self._emit(CHANNEL_MODE, [command, value], self._resolve_time(time))

    def set_omni_mode(self, state: bool = True, time: float | str | None = None) -> None:
        self.send_channel_mode("omnimodeon" if state else "omnimodeoff", 0, time)

    def set_polyphonic_mode(self, mode: str = "poly", time: float | str | None = None) -> None:
        self.send_channel_mode("monomodeon" if mode == "mono" else "polymodeon", 0, time)

    def set_local_control(self, state: bool = False, time: float | str | None = None) -> None:
        self.send_channel_mode("localcontrol", 127 if state else 0, time)

    def turn_notes_off(self, time: float | str | None = None) -> None:
        self.send_channel_mode("allnotesoff", 0, time)

    def turn_sound_off(self, time: float | str | None = None) -> None:
        self.send_channel_mode("allsoundoff", 0, time)

    def reset_all_controllers(self, time: float | str | None = None) -> None:
        self.send_channel_mode("resetallcontrollers", 0, time)

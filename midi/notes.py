from __future__ import annotations
import re
from dataclasses import dataclass, replace

from midi.numeric import validate_byte

_SEMITONES = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}
_ACCIDENTALS = {"": 0, "#": 1, "##": 2, "b": -1, "bb": -2}
_NOTE_NAME = re.compile(r"^([A-Ga-g])(#{0,2}|b{0,2})(-?\d+)$")


def note_number(name: str, octave_offset: int = 0) -> int:
    """Convert a note name such as ``C4``, ``G#4``, ``Db7`` or ``F-1`` to 0-127.

    Middle C is ``C4`` (60). ``octave_offset`` shifts the octave numbering.
    """
    match = _NOTE_NAME.match(name.strip()) if isinstance(name, str) else None
    if match is None:
        raise TypeError(f"Invalid note name: {name!r}")
    letter, accidental, octave = match.groups()
    number = ((int(octave) + 1 + octave_offset) * 12
              + _SEMITONES[letter.upper()] + _ACCIDENTALS[accidental])
    if not (0 <= number <= 127):
        raise ValueError(f"Note {name!r} is outside the MIDI range (C-1 to G9)")
    return number


@dataclass(frozen=True)
class Note:
    number: int
    raw_attack: int | None = None
    raw_release: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "number", validate_byte(self.number, "Note number"))
        if self.raw_attack is not None:
            object.__setattr__(self, "raw_attack", validate_byte(self.raw_attack, "Attack velocity"))
        if self.raw_release is not None:
            object.__setattr__(self, "raw_release", validate_byte(self.raw_release, "Release velocity"))

    @classmethod
    def from_name(cls, name: str, raw_attack: int | None = None,
                  raw_release: int | None = None, octave_offset: int = 0) -> Note:
        return cls(note_number(name, octave_offset), raw_attack, raw_release)


NoteSpec = int | str | Note


def resolve_notes(spec: NoteSpec | list[NoteSpec] | tuple[NoteSpec, ...],
                  raw_attack: int = 64, raw_release: int = 64,
                  octave_offset: int = 0) -> list[Note]:
    """Resolve one note or an ordered collection of notes into ``Note`` objects.

    Numbers and names take the shared velocities. ``Note`` objects keep their
    own velocities; only the missing ones are filled in.
    """
    items = list(spec) if isinstance(spec, (list, tuple)) else [spec]
    notes: list[Note] = []
    for item in items:
        if isinstance(item, Note):
            notes.append(replace(
                item,
                raw_attack=raw_attack if item.raw_attack is None else item.raw_attack,
                raw_release=raw_release if item.raw_release is None else item.raw_release,
            ))
        elif isinstance(item, str):
            notes.append(Note.from_name(item, raw_attack, raw_release, octave_offset))
        elif isinstance(item, (int, float)) and not isinstance(item, bool):
            notes.append(Note(item, raw_attack, raw_release))
        else:
            raise TypeError(f"Invalid note specification: {item!r}")
    return notes

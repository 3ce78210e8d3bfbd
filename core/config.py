from __future__ import annotations
import json
from pathlib import Path

_DEFAULTS = {
    "midi_port": None,
    "channel": 1,
    "octave_offset": 0,
    "default_duration_ms": 500,
}

class AppConfig:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "channelvoice" / "config.json"
        self.midi_port: str | None = _DEFAULTS["midi_port"]
        self.channel: int = _DEFAULTS["channel"]
        self.octave_offset: int = _DEFAULTS["octave_offset"]
        self.default_duration_ms: int = _DEFAULTS["default_duration_ms"]
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text())
            for key in _DEFAULTS:
                if key in data:
                    setattr(self, key, data[key])
        except (json.JSONDecodeError, OSError):
            pass
        if not (isinstance(self.channel, int) and 1 <= self.channel <= 16):
            self.channel = _DEFAULTS["channel"]

    def save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = {key: getattr(self, key) for key in _DEFAULTS}
        self._path.write_text(json.dumps(data, indent=2))

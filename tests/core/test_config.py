from pathlib import Path
from core.config import AppConfig

def test_config_defaults(tmp_path):
    cfg = AppConfig(path=tmp_path / "config.json")
    assert cfg.midi_port is None
    assert cfg.channel == 1
    assert cfg.octave_offset == 0
    assert cfg.default_duration_ms == 500

def test_config_save_and_load(tmp_path):
    path = tmp_path / "config.json"
    cfg = AppConfig(path=path)
    cfg.midi_port = "Synth"
    cfg.channel = 10
    cfg.save()
    cfg2 = AppConfig(path=path)
    assert cfg2.midi_port == "Synth"
    assert cfg2.channel == 10

def test_config_does_not_crash_on_missing_file(tmp_path):
    cfg = AppConfig(path=tmp_path / "nonexistent" / "config.json")
    assert cfg.channel == 1

def test_config_ignores_corrupt_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    cfg = AppConfig(path=path)
    assert cfg.midi_port is None

def test_config_rejects_invalid_channel(tmp_path):
    path = tmp_path / "config.json"
    path.write_text('{"channel": 42}')
    assert AppConfig(path=path).channel == 1

def test_config_save_creates_parent_dirs(tmp_path):
    path = tmp_path / "a" / "b" / "config.json"
    AppConfig(path=path).save()
    assert path.exists()

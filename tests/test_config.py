"""Tests for configuration and logging setup."""

import io
from pathlib import Path

import structlog

from escapade.config import Config
from escapade.logging import configure_logging, get_logger, hash_fingerprint_processor


def test_defaults(monkeypatch):
    for name in ("ESCAPADE_WORLD_FILE", "ESCAPADE_LOCKPICK_TRIES"):
        monkeypatch.delenv(name, raising=False)
    config = Config.from_env()
    assert config.world_file is None
    assert config.lockpick_tries == 5


def test_from_env(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("ESCAPADE_WORLD_FILE", str(tmp_path / "world.json"))
    monkeypatch.setenv("ESCAPADE_LOCKPICK_TRIES", "3")
    monkeypatch.setenv("ESCAPADE_JSON_LOGS", "yes")
    monkeypatch.setenv("ESCAPADE_HASH_FINGERPRINTS", "no")
    config = Config.from_env()
    assert config.world_file == tmp_path / "world.json"
    assert config.lockpick_tries == 3
    assert config.json_logs
    assert not config.hash_fingerprints


def test_fingerprints_are_hashed():
    event = hash_fingerprint_processor(None, "info", {"event": "x", "fingerprint": "abc"})
    assert "fingerprint" not in event
    assert len(event["fingerprint_hash"]) == 12


def test_unknown_fingerprint_is_dropped():
    event = hash_fingerprint_processor(None, "info", {"event": "x", "fingerprint": "unknown"})
    assert event == {"event": "x"}


def test_json_logs_go_to_the_given_stream():
    stream = io.StringIO()
    configure_logging(json_logs=True, stream=stream)
    try:
        get_logger("escapade.test").info("world_loaded", title="Crypt Escape")
    finally:
        structlog.reset_defaults()
    line = stream.getvalue()
    assert '"event": "world_loaded"' in line
    assert '"title": "Crypt Escape"' in line

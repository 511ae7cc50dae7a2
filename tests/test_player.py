import subprocess
from pathlib import Path

import pytest

from musictui.player import Player


class FakeProcess:
    instances = []

    def __init__(self, args, **kwargs):
        self.args = args
        self.kwargs = kwargs
        self.killed = False
        self.waited = False
        FakeProcess.instances.append(self)

    def kill(self):
        self.killed = True

    def wait(self, timeout=None):
        self.waited = True
        return 0


@pytest.fixture
def fake_popen(monkeypatch):
    FakeProcess.instances = []
    monkeypatch.setattr(subprocess, "Popen", FakeProcess)
    return FakeProcess


def test_idle_player():
    player = Player()
    assert player.current() is None
    assert player.elapsed() == 0.0


def test_play_starts_ffplay(fake_popen):
    player = Player()
    player.play(Path("/music/song.mp3"))
    process = fake_popen.instances[0]
    assert process.args == ["ffplay", "-nodisp", "-autoexit", "-loglevel", "error", "/music/song.mp3"]
    assert process.kwargs["stdin"] == subprocess.DEVNULL
    assert player.current() == "/music/song.mp3"
    assert player.elapsed() >= 0.0


def test_stop_kills_and_resets(fake_popen):
    player = Player()
    player.play("song.mp3")
    player.stop()
    process = fake_popen.instances[0]
    assert process.killed and process.waited
    assert player.current() is None
    assert player.elapsed() == 0.0


def test_play_again_stops_previous(fake_popen):
    player = Player()
    player.play("one.mp3")
    player.play("two.mp3")
    first, second = fake_popen.instances
    assert first.killed
    assert not second.killed
    assert player.current() == "two.mp3"


def test_play_failure_raises(monkeypatch):
    def fail(*args, **kwargs):
        raise FileNotFoundError("ffplay")

    monkeypatch.setattr(subprocess, "Popen", fail)
    player = Player()
    with pytest.raises(RuntimeError, match="failed to start ffplay"):
        player.play("song.mp3")
    assert player.current() is None


def test_context_manager_stops(fake_popen):
    with Player() as player:
        player.play("song.mp3")
    assert fake_popen.instances[0].killed
    assert player.current() is None
"""
Pytest configuration and fixtures for Transcribe Pro tests.
"""
import io

import numpy as np
import pytest
import soundfile as sf
from PyQt6.QtCore import QCoreApplication, QObject, pyqtSignal

from transcribe.core.playback_clock import PlaybackClock
from transcribe.core.store import AppStore
from transcribe.core.types import Marker


class FakeTime:
    """Manually advanced monotonic time source."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeEngine(QObject):
    """Records actuator calls instead of making sound."""
    playbackEnded = pyqtSignal()

    def __init__(self, duration: float = 30.0):
        super().__init__()
        self.duration = duration
        self.calls = []
        self.rate = 1.0
        self.fail_on_play = False

    def load(self, data):
        self.calls.append(("load", len(data)))
        return self.duration

    def play(self):
        self.calls.append(("play",))
        if self.fail_on_play:
            raise RuntimeError("device unavailable")

    def pause(self):
        self.calls.append(("pause",))

    def stop(self):
        self.calls.append(("stop",))

    def seek(self, seconds):
        self.calls.append(("seek", seconds))

    def set_rate(self, rate):
        self.rate = rate

    def raw_position(self):
        return 0.0

    def close(self):
        self.calls.append(("close",))

    def call_names(self):
        return [c[0] for c in self.calls]


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """Qt timers and queued signals need an application object."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine(duration=30.0)


@pytest.fixture
def store() -> AppStore:
    return AppStore()


@pytest.fixture
def clock(fake_time, store) -> PlaybackClock:
    """A clock with a 30 second source attached and no engine."""
    clock = PlaybackClock(store=store, time_source=fake_time)
    clock.set_source(30.0)
    yield clock
    clock.cleanup()


@pytest.fixture
def engine_clock(fake_time, fake_engine, store) -> PlaybackClock:
    """A clock driving the fake engine, loaded with a 30 second source."""
    clock = PlaybackClock(fake_engine, store, time_source=fake_time)
    clock.load(b"fake-audio")
    fake_engine.calls.clear()
    yield clock
    clock.cleanup()


@pytest.fixture
def sample_markers() -> list[Marker]:
    return [
        Marker(id="id1", start=0.0, end=10.0, label="Intro"),
        Marker(id="id2", start=5.0, end=15.0, label="Verse"),
        Marker(id="id3", start=20.0, end=25.0, label="Chorus"),
    ]


@pytest.fixture
def sample_wav_bytes() -> bytes:
    """1 second of mono 440 Hz sine encoded as WAV."""
    sr = 8000
    t = np.linspace(0, 1, sr, endpoint=False, dtype=np.float32)
    data = 0.5 * np.sin(2 * np.pi * 440 * t).astype(np.float32)
    buffer = io.BytesIO()
    sf.write(buffer, data, sr, format="WAV", subtype="FLOAT")
    return buffer.getvalue()

"""Pytest configuration and fixtures."""

import os
import sys
from unittest.mock import MagicMock

import pytest

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from sink import (  # noqa: E402
    AudioSink,
    ClipNotFound,
    PlayableClip,
    SinkActivationFailure,
    SinkError,
)


class FakeSink(AudioSink):
    """In-memory sink recording every command it receives."""

    def __init__(self, clips=None, reports_completion=False):
        super().__init__()
        self.clips = dict(clips or {})
        self._reports_completion = reports_completion
        self.calls = []
        self.played = []
        self.now_playing = None
        self.current_clip = None
        self.fail_activation = False
        self.fail_deactivation = False
        self.broken_durations = set()

    @property
    def reports_completion(self):
        return self._reports_completion

    def load(self, identifier):
        self.calls.append(("load", identifier))
        if identifier not in self.clips:
            raise ClipNotFound(identifier)
        return PlayableClip(
            identifier=identifier,
            samples=None,
            sample_rate=48000,
            duration=self.clips[identifier],
        )

    def duration(self, clip):
        if clip.identifier in self.broken_durations:
            raise SinkError(f"no duration for {clip.identifier}")
        return clip.duration

    def activate(self):
        self.calls.append(("activate",))
        if self.fail_activation:
            raise SinkActivationFailure("session busy")

    def deactivate(self):
        self.calls.append(("deactivate",))
        if self.fail_deactivation:
            raise SinkActivationFailure("cannot deactivate")

    def play(self, clip):
        self.calls.append(("play", clip.identifier))
        self.played.append(clip.identifier)
        self.now_playing = clip.identifier
        self.current_clip = clip

    def stop(self):
        self.calls.append(("stop",))
        self.now_playing = None

    def finished(self, clip, success=True):
        """Emits a native completion event for ``clip``."""
        self.listener.on_clip_finished(success, clip=clip)

    def count(self, name):
        return sum(1 for call in self.calls if call[0] == name)


class ManualTimer:
    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args, **self.kwargs)


class ManualTimers:
    """Timer factory whose timers only fire when a test says so."""

    def __init__(self):
        self.created = []

    def __call__(self, interval, function, args=None, kwargs=None):
        timer = ManualTimer(interval, function, args, kwargs)
        self.created.append(timer)
        return timer

    @property
    def last(self):
        return self.created[-1]


@pytest.fixture
def fake_sink():
    return FakeSink(clips={"A": 1.0, "B": 2.0, "C": 0.5, "D": 3.0})


@pytest.fixture
def timers():
    return ManualTimers()


@pytest.fixture
def scheduler(fake_sink, timers):
    from scheduler import PlaybackScheduler

    sched = PlaybackScheduler(
        fake_sink,
        completion_margin=0.5,
        volume_poll_interval=0,
        timer_factory=timers,
    )
    yield sched
    sched.teardown()


@pytest.fixture
def mock_sounddevice():
    """Mock sounddevice module."""
    mock_sd = MagicMock()
    mock_sd.PortAudioError = type("PortAudioError", (Exception,), {})
    mock_sd.default = MagicMock()
    mock_sd.default.device = (0, 1)
    mock_sd.query_devices = MagicMock(
        return_value={
            "name": "Test Speaker",
            "max_output_channels": 2,
            "default_samplerate": 48000,
        }
    )
    return mock_sd

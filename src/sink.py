from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


class SinkError(Exception):
    pass


class ClipNotFound(SinkError):
    def __init__(self, identifier: str):
        super().__init__(f"Audio file not found: {identifier}")
        self.identifier = identifier


class SinkActivationFailure(SinkError):
    pass


@dataclass(frozen=True, eq=False)
class PlayableClip:
    """A loaded clip, ready to hand to ``AudioSink.play``."""

    identifier: str
    samples: Any
    sample_rate: int
    duration: float


class SinkListener(ABC):
    """Receives the events a sink emits, one method per event."""

    @abstractmethod
    def on_clip_finished(self, success: bool, clip: Optional[PlayableClip] = None) -> None:
        pass

    @abstractmethod
    def on_interruption_began(self) -> None:
        pass

    @abstractmethod
    def on_interruption_ended(self, should_resume: bool) -> None:
        pass


class AudioSink(ABC):
    def __init__(self):
        self.listener: Optional[SinkListener] = None

    def bind(self, listener: SinkListener) -> None:
        self.listener = listener

    @property
    def reports_completion(self) -> bool:
        """True when the sink calls ``on_clip_finished`` itself, passing the clip."""
        return False

    @abstractmethod
    def load(self, identifier: str) -> PlayableClip:
        pass

    @abstractmethod
    def play(self, clip: PlayableClip) -> None:
        pass

    @abstractmethod
    def stop(self) -> None:
        pass

    def duration(self, clip: PlayableClip) -> float:
        return clip.duration

    def activate(self) -> None:
        pass

    def deactivate(self) -> None:
        pass

    def output_volume(self) -> float:
        return 1.0

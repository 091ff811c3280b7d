import os
import wave

import numpy as np
import sounddevice as sd

from config import (
    CLIPS_DIR,
    CLIP_EXTENSION,
    OUTPUT_DEVICE,
    OUTPUT_VOLUME,
    logger,
)
from sink import AudioSink, ClipNotFound, PlayableClip, SinkActivationFailure

_SAMPLE_TYPES = {
    1: np.uint8,
    2: np.int16,
    4: np.int32,
}


def read_wav_file(path: str, volume: float = 1.0):
    """Decodes a PCM WAV file into float32 samples in [-1.0, 1.0].

    Returns ``(samples, sample_rate, duration_seconds)``. Multi-channel audio
    is shaped ``(frames, channels)`` as sounddevice expects.
    """
    with wave.open(path, "rb") as wf:
        channels = wf.getnchannels()
        sample_width = wf.getsampwidth()
        sample_rate = wf.getframerate()
        n_frames = wf.getnframes()
        data = wf.readframes(n_frames)

    if sample_width not in _SAMPLE_TYPES:
        raise ValueError(f"Unsupported sample width: {sample_width * 8} bits")

    audio = np.frombuffer(data, dtype=_SAMPLE_TYPES[sample_width]).astype(np.float32)
    if sample_width == 1:
        # 8-bit WAV is unsigned
        audio = (audio - 128.0) / 128.0
    else:
        audio = audio / float(2 ** (8 * sample_width - 1))
    if channels > 1:
        audio = audio.reshape(-1, channels)

    audio = audio * volume
    duration = n_frames / float(sample_rate) if sample_rate else 0.0
    return audio, sample_rate, duration


class SoundDeviceSink(AudioSink):
    """Plays WAV clips from a directory on a sounddevice output."""

    def __init__(
        self,
        clips_dir=CLIPS_DIR,
        extension=CLIP_EXTENSION,
        device=OUTPUT_DEVICE,
        volume=OUTPUT_VOLUME,
    ):
        super().__init__()
        self.clips_dir = clips_dir
        self.extension = extension
        self.device = device
        self.volume = max(0.0, min(1.0, volume))
        self.active = False

    def clip_path(self, identifier: str) -> str:
        return os.path.join(self.clips_dir, f"{identifier}.{self.extension}")

    def load(self, identifier: str) -> PlayableClip:
        path = self.clip_path(identifier)
        if not os.path.isfile(path):
            raise ClipNotFound(identifier)
        try:
            samples, sample_rate, duration = read_wav_file(path, self.volume)
        except (wave.Error, EOFError, ValueError) as e:
            logger.error(f"Cannot decode {path}: {e}")
            raise ClipNotFound(identifier) from e
        return PlayableClip(
            identifier=identifier,
            samples=samples,
            sample_rate=sample_rate,
            duration=duration,
        )

    def activate(self) -> None:
        try:
            info = sd.query_devices(self.device, kind="output")
        except (sd.PortAudioError, ValueError) as e:
            raise SinkActivationFailure(f"Output device unavailable: {e}") from e
        if not self.active:
            logger.info(f"Audio session active on {info['name']}")
        self.active = True

    def deactivate(self) -> None:
        if not self.active:
            return
        sd.stop()
        self.active = False
        logger.info("Audio session deactivated")

    def play(self, clip: PlayableClip) -> None:
        try:
            sd.play(clip.samples, clip.sample_rate, device=self.device)
        except sd.PortAudioError as e:
            raise SinkActivationFailure(f"Audio Playback Error: {e}") from e

    def stop(self) -> None:
        sd.stop()

    def output_volume(self) -> float:
        return self.volume

"""
Audio actuator for Transcribe Pro.
Decodes audio bytes with soundfile and streams them through sounddevice.
The playback clock owns position and play state; this engine only makes
sound and reports when the device runs out of audio.
"""
from __future__ import annotations
import io
import logging
from typing import Optional

import numpy as np
import sounddevice as sd
import soundfile as sf
from PyQt6.QtCore import QObject, pyqtSignal

from .config import AUDIO_CONFIG
from .errors import AudioLoadError, NoSourceLoaded
from .types import AudioArray

logger = logging.getLogger("TranscribePro")


class SoundDeviceEngine(QObject):
    """
    Streams a decoded buffer to the default output device.

    Playback rate is applied by stepping through the buffer at ``rate``
    frames per output frame, so pitch follows speed.
    """
    # Emitted from the audio thread; Qt queues it onto the receiver's thread.
    playbackEnded = pyqtSignal()

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._data: Optional[AudioArray] = None
        self._samplerate: int = 0
        self._stream: Optional[sd.OutputStream] = None
        self._position: float = 0.0  # fractional frame index
        self._rate: float = 1.0
        self._gain: float = 1.0
        self._closed: bool = False

    @property
    def samplerate(self) -> int:
        return self._samplerate

    @property
    def is_loaded(self) -> bool:
        return self._data is not None

    @property
    def duration(self) -> float:
        if self._data is None or self._samplerate <= 0:
            return 0.0
        return len(self._data) / self._samplerate

    def load(self, data: bytes) -> float:
        """
        Decode audio bytes into a playable buffer.

        Args:
            data: Encoded audio file contents

        Returns:
            Duration in seconds
        """
        self._close_stream()
        self._data = None
        self._samplerate = 0
        self._position = 0.0

        if not data:
            raise AudioLoadError("File is empty or corrupted")

        try:
            samples, samplerate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
        except (sf.LibsndfileError, RuntimeError, TypeError) as e:
            raise AudioLoadError(
                f"Failed to decode audio: {e}. Try converting to WAV, FLAC or OGG."
            ) from e

        if samples.shape[0] == 0 or samplerate <= 0:
            raise AudioLoadError("Decoded audio buffer is empty")

        channels = AUDIO_CONFIG.playback_channels
        if samples.shape[1] == 1:
            samples = np.repeat(samples, channels, axis=1)
        elif samples.shape[1] > channels:
            samples = samples[:, :channels]

        self._data = np.ascontiguousarray(samples, dtype=np.float32)
        self._samplerate = int(samplerate)
        logger.info(
            "Decoded %d frames at %d Hz (%.2fs)", len(self._data), self._samplerate, self.duration
        )
        return self.duration

    def play(self) -> None:
        """Start streaming from the current position."""
        if self._data is None:
            raise NoSourceLoaded("play")
        if self._stream is not None:
            if self._stream.active:
                return
            self._close_stream()

        data = self._data
        total = len(data)

        def playback_callback(
            outdata: np.ndarray,
            frames: int,
            time: object,
            status: sd.CallbackFlags
        ) -> None:
            """Real-time audio callback."""
            outdata.fill(0)
            indices = (self._position + np.arange(frames) * self._rate).astype(np.int64)
            valid = indices < total
            count = int(np.count_nonzero(valid))
            if count:
                outdata[:count] = data[indices[:count]] * self._gain
            np.clip(outdata, -1.0, 1.0, out=outdata)

            self._position += frames * self._rate
            if self._position >= total:
                raise sd.CallbackStop()

        def on_finished() -> None:
            """Called by sounddevice when the stream ends."""
            # Streams we closed ourselves are not a natural end.
            if self._closed or self._stream is None:
                return
            if self._position >= total:
                self.playbackEnded.emit()

        try:
            self._stream = sd.OutputStream(
                samplerate=self._samplerate,
                channels=AUDIO_CONFIG.playback_channels,
                blocksize=AUDIO_CONFIG.playback_blocksize,
                callback=playback_callback,
                finished_callback=on_finished,
            )
            self._stream.start()
            logger.info("Stream started at %.2fs", self.raw_position())
        except sd.PortAudioError:
            self._stream = None
            raise

    def pause(self) -> None:
        """Stop streaming and keep the position."""
        self._close_stream()

    def stop(self) -> None:
        """Stop streaming and rewind."""
        self._close_stream()
        self._position = 0.0

    def seek(self, seconds: float) -> None:
        if self._data is None:
            return
        frame = seconds * self._samplerate
        self._position = float(min(max(frame, 0.0), len(self._data)))

    def set_rate(self, rate: float) -> None:
        if rate <= 0:
            raise ValueError("playback rate must be positive")
        self._rate = float(rate)

    def set_volume(self, volume: float) -> None:
        self._gain = float(min(max(volume, 0.0), 1.0))

    def raw_position(self) -> float:
        """Position as last advanced by the audio thread, in seconds."""
        if self._samplerate <= 0:
            return 0.0
        return self._position / self._samplerate

    def close(self) -> None:
        """Release the output stream and the decoded buffer."""
        # Mark closed first so finished_callback can't emit into torn-down receivers.
        self._closed = True
        self._close_stream()
        self._data = None

    def _close_stream(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except sd.PortAudioError as e:
            logger.warning("Error stopping stream: %s", e)

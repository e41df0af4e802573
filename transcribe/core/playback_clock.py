"""
Playback clock for Transcribe Pro.

The clock is the single authority for "is audio playing" and "what second
are we at". Position is never stored while playing; it is derived on
demand from the offset at which playback last (re)started and the wall
time elapsed since then:

    position = paused_offset + (now - anchor_wall_time) * playback_rate

The audio engine is treated purely as an actuator. Its own end-of-stream
signal is only a secondary cue next to the clock's periodic end check.
"""
from __future__ import annotations
import logging
import time
from typing import TYPE_CHECKING, Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .config import CLOCK_CONFIG, ClockConfig, PlaybackState
from .errors import AudioLoadError, NoSourceLoaded, TranscribeError
from .types import PlaybackEngine, TimeSource

if TYPE_CHECKING:
    from .store import AppStore

logger = logging.getLogger("TranscribePro")


class PlaybackClock(QObject):
    """
    Play/pause/stop/seek state machine with a derived playback position.

    State transitions are applied synchronously before the engine is
    touched, so ``is_playing`` and ``position`` always reflect the most
    recent call even if the device has not started producing sound yet.
    """
    positionChanged = pyqtSignal(float)
    stateChanged = pyqtSignal(object)  # PlaybackState
    playbackFinished = pyqtSignal()
    errorOccurred = pyqtSignal(object)  # TranscribeError or engine exception

    def __init__(
        self,
        engine: Optional[PlaybackEngine] = None,
        store: Optional["AppStore"] = None,
        time_source: TimeSource = time.monotonic,
        config: ClockConfig = CLOCK_CONFIG,
        parent: Optional[QObject] = None
    ) -> None:
        """
        Initialize the clock.

        Args:
            engine: Actuator that makes sound; optional for headless use
            store: Shared state to mirror currentTime/isPlaying into
            time_source: Monotonic seconds, injectable for tests
            config: Tick interval and end-of-media tolerance
            parent: Qt parent object
        """
        super().__init__(parent)
        self._engine = engine
        self._store = store
        self._now = time_source
        self._config = config

        self._loaded: bool = False
        self._duration: float = 0.0
        self._is_playing: bool = False
        self._paused_offset: float = 0.0
        self._anchor_wall_time: float = 0.0
        self._playback_rate: float = 1.0
        self._state = PlaybackState.STOPPED
        self._disposed: bool = False

        # One timer per clock; it only runs while playing.
        self._timer = QTimer(self)
        self._timer.setInterval(config.tick_interval_ms)
        self._timer.timeout.connect(self.tick)

        if engine is not None:
            engine.playbackEnded.connect(self._on_engine_ended)

    # --- Read-only state ---

    @property
    def has_source(self) -> bool:
        return self._loaded

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def playback_rate(self) -> float:
        return self._playback_rate

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    @property
    def is_ticking(self) -> bool:
        """True while the periodic end-of-media check is scheduled."""
        return self._timer.isActive()

    @property
    def position(self) -> float:
        """Current playback position in seconds, within [0, duration]."""
        if not self._is_playing:
            return self._clamp(self._paused_offset)
        elapsed = self._now() - self._anchor_wall_time
        return self._clamp(self._paused_offset + elapsed * self._playback_rate)

    def get_position(self) -> float:
        return self.position

    def get_is_playing(self) -> bool:
        return self._is_playing

    # --- Source management ---

    def load(self, data: bytes) -> float:
        """
        Decode audio through the engine and reset the clock to it.

        Returns:
            Duration of the new source in seconds
        """
        if self._engine is None:
            raise RuntimeError("PlaybackClock has no engine to load audio into")

        self.unload()
        try:
            duration = self._engine.load(data)
        except AudioLoadError:
            logger.error("Failed to load audio source", exc_info=True)
            raise
        self._engine.set_rate(self._playback_rate)
        self.set_source(duration)
        return duration

    def set_source(self, duration: float) -> None:
        """
        Attach a new source of the given duration.
        Cancels any pending tick and resets to Stopped at position 0.
        """
        if not duration > 0:
            raise ValueError("source duration must be positive")

        self._cancel_tick()
        self._loaded = True
        self._duration = float(duration)
        self._is_playing = False
        self._paused_offset = 0.0
        self._anchor_wall_time = self._now()
        if self._store is not None:
            self._store.set_duration(self._duration)
        self._set_state(PlaybackState.STOPPED)
        self._publish()
        logger.info("Source attached (%.2fs)", self._duration)

    def unload(self) -> None:
        """Forget the current source and cancel the tick."""
        self._cancel_tick()
        was_loaded = self._loaded
        self._loaded = False
        self._duration = 0.0
        self._is_playing = False
        self._paused_offset = 0.0
        if self._store is not None:
            self._store.reset_audio()
        self._set_state(PlaybackState.STOPPED)
        if was_loaded:
            self._actuate("stop")

    # --- Transitions ---

    def play(self) -> bool:
        """
        Start or resume playback from the paused offset.

        Returns:
            True if playing after the call
        """
        if self._disposed:
            return False
        if not self._loaded:
            return self._fail(NoSourceLoaded("play"))
        if self._is_playing:
            return True

        previous_state = self._state
        self._anchor_wall_time = self._now()
        self._is_playing = True
        self._start_tick()
        self._set_state(PlaybackState.PLAYING)
        self._publish()

        if self._engine is not None:
            try:
                self._engine.seek(self._paused_offset)
                self._engine.play()
            except Exception as e:
                logger.error("Failed to start playback: %s", e, exc_info=True)
                # Nothing elapsed that should count; roll the transition back.
                self._is_playing = False
                self._cancel_tick()
                self._set_state(previous_state)
                self._publish()
                self.errorOccurred.emit(e)
                return False

        logger.info("Playback started at %.2fs", self._paused_offset)
        return True

    def pause(self) -> None:
        """Freeze the position. No-op unless playing."""
        if not self._is_playing:
            return
        self._paused_offset = self.position
        self._is_playing = False
        self._cancel_tick()
        self._set_state(PlaybackState.PAUSED)
        self._publish()
        self._actuate("pause")
        logger.info("Playback paused at %.2fs", self._paused_offset)

    def stop(self) -> None:
        """Stop and rewind. Always succeeds."""
        self._cancel_tick()
        self._is_playing = False
        self._paused_offset = 0.0
        self._set_state(PlaybackState.STOPPED)
        self._publish()
        if self._loaded:
            self._actuate("stop")
        logger.info("Playback stopped")

    def seek(self, seconds: float) -> bool:
        """
        Jump to a position, clamped to [0, duration].

        While playing this is a seamless jump: playback continues from the
        new position and ``is_playing`` never reports False in between.
        From Stopped, a non-zero target leaves the clock Paused there.
        """
        if self._disposed:
            return False
        if not self._loaded:
            return self._fail(NoSourceLoaded("seek"))

        target = self._clamp(seconds)
        self._paused_offset = target
        self._anchor_wall_time = self._now()
        # Stopped means rewound; any other resting position is Paused.
        if self._state == PlaybackState.STOPPED and target > 0:
            self._set_state(PlaybackState.PAUSED)
        self._publish()
        self._actuate("seek", target)
        return True

    def set_playback_rate(self, rate: float) -> None:
        """
        Change how fast future wall time advances the position.
        Already-elapsed time is settled at the old rate first.
        """
        if not rate > 0:
            raise ValueError(f"playback rate must be positive, got {rate}")
        if self._is_playing:
            self._paused_offset = self.position
            self._anchor_wall_time = self._now()
        self._playback_rate = float(rate)
        if self._engine is not None:
            self._engine.set_rate(self._playback_rate)
        logger.info("Playback rate set to %.2fx", self._playback_rate)

    def toggle_play_pause(self) -> bool:
        """Toggle between play and pause states."""
        if self._is_playing:
            self.pause()
            return True
        return self.play()

    # --- Periodic check ---

    def tick(self) -> None:
        """
        Broadcast the live position and detect natural end of media.
        Driven by the clock's timer while playing.
        """
        if self._disposed or not self._is_playing:
            return
        position = self.position
        if position >= self._duration - self._config.end_tolerance:
            self._finish()
            return
        if self._store is not None:
            self._store.set_current_time(position)
        self.positionChanged.emit(position)

    def _on_engine_ended(self) -> None:
        if self._disposed:
            return
        logger.debug("Engine reported end of stream")
        self._finish()

    def _finish(self) -> None:
        # Both the tick and the engine land here; only the first one counts.
        if not self._is_playing:
            return
        self._is_playing = False
        self._paused_offset = self._duration
        self._cancel_tick()
        self._set_state(PlaybackState.STOPPED)
        self._publish()
        self._actuate("pause")
        logger.info("Reached end of media (%.2fs)", self._duration)
        self.playbackFinished.emit()

    # --- Lifecycle ---

    def cleanup(self) -> None:
        """Cancel timers and detach from the engine."""
        # Mark disposed first so late engine callbacks are ignored.
        self._disposed = True
        self._cancel_tick()
        if self._engine is not None:
            self._engine.playbackEnded.disconnect(self._on_engine_ended)
            self._engine = None
        self._is_playing = False
        self._state = PlaybackState.STOPPED

    # --- Internals ---

    def _clamp(self, seconds: float) -> float:
        return min(max(seconds, 0.0), self._duration)

    def _start_tick(self) -> None:
        if not self._timer.isActive():
            self._timer.start()

    def _cancel_tick(self) -> None:
        if self._timer.isActive():
            self._timer.stop()

    def _set_state(self, state: PlaybackState) -> None:
        """Update state and notify listeners."""
        if self._state != state:
            self._state = state
            if not self._disposed:
                self.stateChanged.emit(state)

    def _publish(self) -> None:
        """Mirror the current position and play flag to listeners."""
        if self._disposed:
            return
        position = self.position
        if self._store is not None:
            self._store.set_is_playing(self._is_playing)
            self._store.set_current_time(position)
        self.positionChanged.emit(position)

    def _fail(self, error: TranscribeError) -> bool:
        logger.warning("%s", error)
        self.errorOccurred.emit(error)
        return False

    def _actuate(self, method: str, *args: float) -> None:
        """Forward a transition to the engine; the clock state is already final."""
        if self._engine is None:
            return
        try:
            getattr(self._engine, method)(*args)
        except Exception as e:
            logger.error("Engine %s failed: %s", method, e, exc_info=True)
            self.errorOccurred.emit(e)

"""
Tests for PlaybackClock.
"""
import pytest

from transcribe.core.config import CLOCK_CONFIG, PlaybackState
from transcribe.core.errors import AudioLoadError, NoSourceLoaded
from transcribe.core.playback_clock import PlaybackClock


class TestClockWithoutSource:
    """Operations before any audio is loaded."""

    def test_initial_state(self, fake_time):
        clock = PlaybackClock(time_source=fake_time)
        assert not clock.has_source
        assert not clock.is_playing
        assert clock.state == PlaybackState.STOPPED
        assert clock.position == 0.0

    def test_play_signals_no_source(self, fake_time):
        clock = PlaybackClock(time_source=fake_time)
        errors = []
        clock.errorOccurred.connect(errors.append)

        assert clock.play() is False
        assert not clock.is_playing
        assert not clock.is_ticking
        assert len(errors) == 1
        assert isinstance(errors[0], NoSourceLoaded)

    def test_seek_signals_no_source(self, fake_time):
        clock = PlaybackClock(time_source=fake_time)
        errors = []
        clock.errorOccurred.connect(errors.append)

        assert clock.seek(5.0) is False
        assert clock.position == 0.0
        assert isinstance(errors[0], NoSourceLoaded)

    def test_stop_always_succeeds(self, fake_time):
        clock = PlaybackClock(time_source=fake_time)
        clock.stop()
        assert clock.state == PlaybackState.STOPPED

    def test_load_without_engine_raises(self, fake_time):
        clock = PlaybackClock(time_source=fake_time)
        with pytest.raises(RuntimeError):
            clock.load(b"data")

    def test_zero_duration_source_rejected(self, fake_time):
        clock = PlaybackClock(time_source=fake_time)
        with pytest.raises(ValueError):
            clock.set_source(0.0)
        assert not clock.has_source


class TestClockTransitions:
    """Play, pause, stop and seek against a fake time source."""

    def test_play_advances_with_wall_time(self, clock, fake_time):
        assert clock.play()
        fake_time.advance(2.5)
        assert clock.position == pytest.approx(2.5)
        assert clock.is_playing
        assert clock.state == PlaybackState.PLAYING

    def test_play_is_idempotent(self, clock, fake_time):
        clock.play()
        fake_time.advance(1.0)
        assert clock.play()
        fake_time.advance(1.0)
        # A second play must not re-anchor the clock
        assert clock.position == pytest.approx(2.0)

    def test_pause_freezes_position(self, clock, fake_time):
        clock.play()
        fake_time.advance(3.0)
        clock.pause()
        fake_time.advance(10.0)
        assert clock.position == pytest.approx(3.0)
        assert clock.state == PlaybackState.PAUSED
        assert not clock.is_playing

    def test_pause_when_stopped_is_noop(self, clock):
        clock.pause()
        assert clock.state == PlaybackState.STOPPED

    def test_resume_continues_from_paused_offset(self, clock, fake_time):
        clock.play()
        fake_time.advance(3.0)
        clock.pause()
        fake_time.advance(7.0)
        clock.play()
        fake_time.advance(1.5)
        assert clock.position == pytest.approx(4.5)

    def test_zero_length_pause_does_not_drift(self, clock, fake_time):
        clock.play()
        fake_time.advance(4.2)
        before = clock.position
        clock.pause()
        clock.play()
        assert clock.position == before

    def test_stop_rewinds(self, clock, fake_time):
        clock.play()
        fake_time.advance(5.0)
        clock.stop()
        assert clock.position == 0.0
        assert clock.state == PlaybackState.STOPPED
        assert not clock.is_ticking

    def test_seek_while_paused(self, clock):
        assert clock.seek(12.0)
        assert clock.position == 12.0
        assert not clock.is_playing

    def test_seek_from_stopped_moves_to_paused(self, clock):
        clock.seek(12.0)
        assert clock.state == PlaybackState.PAUSED
        clock.play()
        assert clock.position == 12.0

    def test_seek_to_zero_from_stopped_stays_stopped(self, clock):
        states = []
        clock.stateChanged.connect(states.append)
        clock.seek(0.0)
        assert clock.state == PlaybackState.STOPPED
        assert states == []

    def test_seek_while_paused_keeps_paused(self, clock, fake_time):
        clock.play()
        fake_time.advance(2.0)
        clock.pause()
        clock.seek(0.0)
        assert clock.state == PlaybackState.PAUSED

    def test_seek_while_playing_is_seamless(self, clock, fake_time):
        states = []
        clock.stateChanged.connect(states.append)
        clock.play()
        fake_time.advance(2.0)

        clock.seek(20.0)
        assert clock.is_playing
        assert clock.position == 20.0
        fake_time.advance(1.0)
        assert clock.position == pytest.approx(21.0)
        # No flicker through PAUSED or STOPPED
        assert states == [PlaybackState.PLAYING]

    @pytest.mark.parametrize("target, expected", [(-5.0, 0.0), (45.0, 30.0), (30.0, 30.0)])
    def test_seek_clamps(self, clock, target, expected):
        clock.seek(target)
        assert clock.position == expected

    def test_position_never_exceeds_duration(self, clock, fake_time):
        clock.play()
        fake_time.advance(100.0)
        assert clock.position == 30.0

    def test_position_stays_in_range_over_sequence(self, clock, fake_time):
        steps = [
            lambda: clock.play(),
            lambda: fake_time.advance(7.0),
            lambda: clock.seek(-3.0),
            lambda: clock.pause(),
            lambda: clock.seek(80.0),
            lambda: clock.play(),
            lambda: fake_time.advance(50.0),
            lambda: clock.stop(),
            lambda: clock.play(),
            lambda: fake_time.advance(0.25),
        ]
        for step in steps:
            step()
            assert 0.0 <= clock.position <= clock.duration

    def test_toggle_play_pause(self, clock):
        clock.toggle_play_pause()
        assert clock.is_playing
        clock.toggle_play_pause()
        assert clock.state == PlaybackState.PAUSED


class TestPlaybackRate:
    """Rate changes settle elapsed time before taking effect."""

    def test_rate_scales_future_elapsed_time(self, clock, fake_time):
        clock.set_playback_rate(2.0)
        clock.play()
        fake_time.advance(3.0)
        assert clock.position == pytest.approx(6.0)

    def test_rate_change_does_not_rescale_elapsed(self, clock, fake_time):
        clock.play()
        fake_time.advance(4.0)
        clock.set_playback_rate(0.5)
        assert clock.position == pytest.approx(4.0)
        fake_time.advance(2.0)
        assert clock.position == pytest.approx(5.0)

    @pytest.mark.parametrize("rate", [0.0, -1.0, float("nan")])
    def test_invalid_rate_rejected(self, clock, fake_time, rate):
        clock.play()
        fake_time.advance(1.0)
        with pytest.raises(ValueError):
            clock.set_playback_rate(rate)
        assert clock.playback_rate == 1.0
        assert clock.position == pytest.approx(1.0)


class TestEndOfMedia:
    """Natural end detection by the periodic tick."""

    def test_tick_broadcasts_position(self, clock, fake_time, store):
        positions = []
        clock.positionChanged.connect(positions.append)
        clock.play()
        fake_time.advance(1.0)
        clock.tick()
        assert positions[-1] == pytest.approx(1.0)
        assert store.current_time == pytest.approx(1.0)

    def test_tick_when_not_playing_does_nothing(self, clock):
        positions = []
        clock.positionChanged.connect(positions.append)
        clock.tick()
        assert positions == []

    def test_finishes_within_tolerance(self, clock, fake_time):
        clock.play()
        fake_time.advance(30.0 - CLOCK_CONFIG.end_tolerance / 2)
        clock.tick()
        assert not clock.is_playing
        assert clock.position == 30.0
        assert clock.state == PlaybackState.STOPPED
        assert not clock.is_ticking

    def test_finishes_exactly_once(self, clock, fake_time):
        finished = []
        clock.playbackFinished.connect(lambda: finished.append(True))
        clock.play()
        fake_time.advance(31.0)
        clock.tick()
        clock.tick()
        fake_time.advance(1.0)
        clock.tick()
        assert finished == [True]
        assert clock.position == 30.0

    def test_engine_end_after_tick_is_ignored(self, engine_clock, fake_engine, fake_time):
        finished = []
        engine_clock.playbackFinished.connect(lambda: finished.append(True))
        engine_clock.play()
        fake_time.advance(30.0)
        engine_clock.tick()
        fake_engine.playbackEnded.emit()
        assert finished == [True]

    def test_engine_end_stops_clock(self, engine_clock, fake_engine, fake_time):
        engine_clock.play()
        fake_time.advance(12.0)
        # Engine ran out before our estimate caught up
        fake_engine.playbackEnded.emit()
        assert not engine_clock.is_playing
        assert engine_clock.position == 30.0


class TestTimerLifecycle:
    """The periodic check only runs while playing."""

    def test_tick_runs_only_while_playing(self, clock):
        assert not clock.is_ticking
        clock.play()
        assert clock.is_ticking
        clock.pause()
        assert not clock.is_ticking

    def test_new_source_cancels_tick_and_resets(self, clock, fake_time):
        clock.play()
        fake_time.advance(5.0)
        clock.set_source(60.0)
        assert not clock.is_ticking
        assert not clock.is_playing
        assert clock.position == 0.0
        assert clock.duration == 60.0

    def test_cleanup_cancels_tick_and_ignores_late_ticks(self, clock, fake_time):
        finished = []
        clock.playbackFinished.connect(lambda: finished.append(True))
        clock.play()
        clock.cleanup()
        assert not clock.is_ticking
        fake_time.advance(100.0)
        clock.tick()
        assert finished == []
        assert clock.play() is False

    def test_unload_forgets_source(self, clock, store):
        clock.play()
        clock.unload()
        assert not clock.has_source
        assert not clock.is_ticking
        assert store.duration == 0.0


class TestStoreMirroring:
    """Transitions write currentTime/isPlaying to the shared store."""

    def test_source_sets_duration(self, clock, store):
        assert store.duration == 30.0
        assert store.current_time == 0.0

    def test_play_pause_mirrored(self, clock, store, fake_time):
        clock.play()
        assert store.is_playing
        fake_time.advance(2.0)
        clock.pause()
        assert not store.is_playing
        assert store.current_time == pytest.approx(2.0)

    def test_seek_mirrored(self, clock, store):
        clock.seek(7.5)
        assert store.current_time == 7.5


class TestEngineActuation:
    """The clock drives the engine after its own state is final."""

    def test_load_resets_and_forwards_rate(self, fake_time, fake_engine, store):
        clock = PlaybackClock(fake_engine, store, time_source=fake_time)
        clock.set_playback_rate(1.5)
        duration = clock.load(b"abc")
        assert duration == 30.0
        assert clock.has_source
        assert fake_engine.rate == 1.5
        clock.cleanup()

    def test_play_seeks_engine_then_plays(self, engine_clock, fake_engine):
        engine_clock.seek(4.0)
        fake_engine.calls.clear()
        engine_clock.play()
        assert fake_engine.calls == [("seek", 4.0), ("play",)]

    def test_play_failure_rolls_back(self, engine_clock, fake_engine):
        errors = []
        engine_clock.errorOccurred.connect(errors.append)
        fake_engine.fail_on_play = True

        assert engine_clock.play() is False
        assert not engine_clock.is_playing
        assert not engine_clock.is_ticking
        assert engine_clock.state == PlaybackState.STOPPED
        assert isinstance(errors[0], RuntimeError)

    def test_pause_and_stop_forwarded(self, engine_clock, fake_engine):
        engine_clock.play()
        engine_clock.pause()
        engine_clock.stop()
        assert fake_engine.call_names()[-2:] == ["pause", "stop"]

    def test_load_failure_leaves_clock_unloaded(self, fake_time, fake_engine, store):
        clock = PlaybackClock(fake_engine, store, time_source=fake_time)

        def broken_load(data):
            raise AudioLoadError("corrupt")

        fake_engine.load = broken_load
        with pytest.raises(AudioLoadError):
            clock.load(b"junk")
        assert not clock.has_source
        assert store.duration == 0.0
        clock.cleanup()

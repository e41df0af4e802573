"""
Tests for audio acquisition and the sounddevice engine.
Only decoding and position bookkeeping are exercised; no device is opened.
"""
import pytest

from transcribe.core.audio_engine import SoundDeviceEngine
from transcribe.core.audio_source import file_dialog_filter, validate_audio_file
from transcribe.core.config import AUDIO_CONFIG
from transcribe.core.errors import AudioLoadError, NoSourceLoaded


class TestValidateAudioFile:
    """File allow-list and size checks."""

    def test_valid_wav(self, tmp_path, sample_wav_bytes):
        path = tmp_path / "take.wav"
        path.write_bytes(sample_wav_bytes)
        result = validate_audio_file(path)
        assert result
        assert result.error is None

    def test_extension_case_insensitive(self, tmp_path):
        path = tmp_path / "TAKE.MP3"
        path.write_bytes(b"\x00" * 16)
        assert validate_audio_file(path).valid

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        result = validate_audio_file(path)
        assert not result
        assert "Unsupported file format" in result.error

    def test_missing_file(self, tmp_path):
        assert not validate_audio_file(tmp_path / "gone.wav")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.flac"
        path.write_bytes(b"")
        assert validate_audio_file(path).error == "File is empty"

    def test_dialog_filter_lists_formats(self):
        text = file_dialog_filter()
        for ext in AUDIO_CONFIG.supported_extensions:
            assert f"*.{ext}" in text


class TestSoundDeviceEngine:
    """Decoding and seek bookkeeping."""

    def test_load_returns_duration(self, sample_wav_bytes):
        engine = SoundDeviceEngine()
        duration = engine.load(sample_wav_bytes)
        assert duration == pytest.approx(1.0)
        assert engine.is_loaded
        assert engine.samplerate == 8000

    def test_mono_upmixed(self, sample_wav_bytes):
        engine = SoundDeviceEngine()
        engine.load(sample_wav_bytes)
        assert engine._data.shape[1] == AUDIO_CONFIG.playback_channels

    def test_empty_bytes_rejected(self):
        with pytest.raises(AudioLoadError):
            SoundDeviceEngine().load(b"")

    def test_garbage_rejected(self):
        engine = SoundDeviceEngine()
        with pytest.raises(AudioLoadError):
            engine.load(b"definitely not audio" * 10)
        assert not engine.is_loaded

    def test_play_without_source(self):
        with pytest.raises(NoSourceLoaded):
            SoundDeviceEngine().play()

    def test_seek_clamps(self, sample_wav_bytes):
        engine = SoundDeviceEngine()
        engine.load(sample_wav_bytes)
        engine.seek(0.25)
        assert engine.raw_position() == pytest.approx(0.25)
        engine.seek(5.0)
        assert engine.raw_position() == pytest.approx(1.0)
        engine.seek(-1.0)
        assert engine.raw_position() == 0.0

    def test_stop_rewinds(self, sample_wav_bytes):
        engine = SoundDeviceEngine()
        engine.load(sample_wav_bytes)
        engine.seek(0.5)
        engine.stop()
        assert engine.raw_position() == 0.0

    def test_invalid_rate(self):
        with pytest.raises(ValueError):
            SoundDeviceEngine().set_rate(0.0)

    def test_close_releases_buffer(self, sample_wav_bytes):
        engine = SoundDeviceEngine()
        engine.load(sample_wav_bytes)
        engine.close()
        assert not engine.is_loaded

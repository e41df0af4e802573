"""
Transcribe Pro: audio playback with layered time-range markers.
"""
__version__ = "0.1.0"

"""voice-relay -- voice capture and transcription pipeline."""

__version__ = '0.3.0'

"""Audio constants shared by the whisper.cpp paths."""

SAMPLE_RATE = 16000  # whisper.cpp expects 16 kHz mono float32

# src/transcription/__init__.py
# ==============================
# Transcription Layer — Live Translator
#
#   whisper_client.py          speech-to-text capability (OpenAI Whisper)
#   validator.py               ACCEPT / REJECT heuristics over raw text
#   hallucination_patterns.py  curated, versioned pattern data
#
# Public API:
#   WhisperTranscriber().transcribe(path, hint) → str
#   TranscriptionValidator().validate(text)     → ValidationVerdict

from src.transcription.validator import (  # noqa: F401
    TranscriptionValidator,
    ValidationVerdict,
)
from src.transcription.whisper_client import WhisperTranscriber  # noqa: F401

__all__ = [
    "TranscriptionValidator",
    "ValidationVerdict",
    "WhisperTranscriber",
]

"""
src/outcomes.py
================
Pipeline Outcomes — Live Translator

Responsibility:
    - Define the tagged result of one utterance's pipeline run:
          NoSpeech | Rejected | UnsupportedLanguage | Translated | Failed
    - Define CapabilityError, raised when an external capability
      (transcription or language detection) fails
    - Serialize an outcome into the single outbound payload sent to
      transport collaborators

The outcome value is the ONLY thing exposed across the system boundary.
Callers always receive one of these, never a raw internal exception.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union

STAGE_TRANSCRIPTION = "transcription"
STAGE_DETECTION = "detection"


# =====================================================================
# Capability failure
# =====================================================================


class CapabilityError(Exception):
    """Raised when an external capability fails for one utterance."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        self.message = message
        super().__init__(f"{stage} capability failed: {message}")


# =====================================================================
# Outcome values
# =====================================================================


@dataclass(frozen=True)
class NoSpeech:
    """Transcription came back empty or whitespace-only."""

    kind: str = field(default="no_speech", init=False)


@dataclass(frozen=True)
class Rejected:
    """Validator rejected the transcription; ``reason`` is diagnostic only."""

    reason: str
    kind: str = field(default="rejected", init=False)


@dataclass(frozen=True)
class UnsupportedLanguage:
    """Detected language is outside the supported set."""

    detected: str | None
    kind: str = field(default="unsupported_language", init=False)


@dataclass(frozen=True)
class Translated:
    """Source language, validated text and one translation per target."""

    source_language: str
    source_text: str
    translations: dict[str, str]
    kind: str = field(default="translated", init=False)


@dataclass(frozen=True)
class Failed:
    """An external capability failed; the utterance was abandoned."""

    stage: str
    message: str
    kind: str = field(default="error", init=False)


PipelineOutcome = Union[NoSpeech, Rejected, UnsupportedLanguage, Translated, Failed]


# =====================================================================
# Outbound payload
# =====================================================================


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def to_payload(outcome: PipelineOutcome, timestamp: str | None = None) -> dict[str, Any]:
    """
    Build the outbound message for one utterance.

    Shapes:
        {"type": "no_speech"}
        {"type": "rejected", "reason": ...}
        {"type": "unsupported_language", "detected": ...}
        {"type": "translation_result", "detectedLanguage": ...,
         "sourceText": ..., "translations": {lang: text}}
        {"type": "error", "stage": ..., "message": ...}

    Every payload carries an ISO-8601 UTC ``timestamp``.
    """
    payload: dict[str, Any]

    if isinstance(outcome, Translated):
        payload = {
            "type": "translation_result",
            "detectedLanguage": outcome.source_language,
            "sourceText": outcome.source_text,
            "translations": dict(outcome.translations),
        }
    elif isinstance(outcome, NoSpeech):
        payload = {"type": "no_speech", "message": "No valid speech detected"}
    elif isinstance(outcome, Rejected):
        payload = {
            "type": "rejected",
            "reason": outcome.reason,
            "message": "No valid speech detected",
        }
    elif isinstance(outcome, UnsupportedLanguage):
        payload = {
            "type": "unsupported_language",
            "detected": outcome.detected,
            "message": "Unsupported language detected. Please speak in English, Italian, or Chinese.",
        }
    elif isinstance(outcome, Failed):
        payload = {
            "type": "error",
            "stage": outcome.stage,
            "message": "Failed to process audio",
        }
    else:
        raise TypeError(f"Unknown pipeline outcome: {type(outcome).__name__}")

    payload["timestamp"] = timestamp or _now_iso()
    return payload

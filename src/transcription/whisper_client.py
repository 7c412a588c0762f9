"""
src/transcription/whisper_client.py
====================================
OpenAI Whisper STT Client — Live Translator

Responsibility:
    - Transcribe one utterance's audio file with the OpenAI Whisper API
    - Forward a language hint ONLY when it is present and not "auto";
      otherwise let Whisper auto-detect
    - Return plain transcript text (possibly empty)

This module does NOT:
    - Filter hallucinations (see validator.py)
    - Detect or translate languages
    - Own the temp file lifecycle (see src/pipeline.py)
"""

import logging
import os
from pathlib import Path
from typing import Any

from openai import OpenAI

from src import config
from src.language.codes import is_auto_hint, normalize_language_code
from src.openai_retry import transcriptions_with_retry

logger = logging.getLogger("translator.transcription.whisper_client")


def _default_client() -> OpenAI:
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY environment variable is not set.")
    return OpenAI(api_key=api_key, timeout=config.CAPABILITY_TIMEOUT, max_retries=0)


class WhisperTranscriber:
    """Speech-to-text capability backed by ``audio.transcriptions``."""

    def __init__(self, client: Any = None, model: str | None = None):
        self._client = client
        self.model = model or config.TRANSCRIPTION_MODEL

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = _default_client()
        return self._client

    def transcribe(self, audio_path: Path, language_hint: str | None = None) -> str:
        """
        Transcribe the audio stored at ``audio_path``.

        Args:
            audio_path:    Temp file holding the utterance audio.
            language_hint: Optional ISO 639-1 hint; "auto" or None means
                           no hint is sent.

        Returns:
            Transcript text, stripped. Empty string when no speech.

        Raises:
            RuntimeError: If the Whisper API call fails.
        """
        params: dict[str, Any] = {
            "model": self.model,
            "response_format": "text",
        }
        if not is_auto_hint(language_hint):
            params["language"] = normalize_language_code(language_hint)

        try:
            response = transcriptions_with_retry(
                self.client,
                open_file=lambda: open(audio_path, "rb"),
                **params,
            )
        except Exception as exc:
            raise RuntimeError(f"Whisper transcription failed: {exc}") from exc

        # response_format="text" yields a str; tolerate object responses too
        text = response if isinstance(response, str) else getattr(response, "text", "")
        text = (text or "").strip()

        logger.info(
            "Whisper transcription (%s, hint=%s): %r",
            self.model, params.get("language", "auto"), text,
        )
        return text

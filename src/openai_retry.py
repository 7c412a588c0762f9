"""
src/openai_retry.py
====================
Shared OpenAI API retry utility — Live Translator

Wraps OpenAI SDK calls (chat completions for detection / translation and
audio transcriptions for speech-to-text) with exponential back-off on
transient failures: 429 rate-limit, 5xx server errors, timeouts and
connection errors.

Usage::

    from src.openai_retry import chat_completions_with_retry

    response = chat_completions_with_retry(
        client,
        model="gpt-4o-mini",
        messages=[...],
        temperature=0.0,
        max_tokens=10,
    )

This module does NOT:
    - Create or manage OpenAI client instances
    - Interpret responses
"""

import logging
import time
from typing import Any, Callable

logger = logging.getLogger("translator.openai_retry")

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

MAX_RETRIES: int = 2          # total attempts = MAX_RETRIES + 1 (initial)
BASE_DELAY: float = 0.5       # seconds, first back-off delay
MAX_DELAY: float = 8.0        # live audio: keep the worst case short
BACKOFF_FACTOR: float = 2.0

_RETRYABLE_STATUS_CODES: set[int] = {429, 500, 502, 503, 504}
_RETRYABLE_TYPES: set[str] = {"RateLimitError", "APITimeoutError", "APIConnectionError"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _is_retryable(exc: Exception) -> bool:
    """Return True if the exception is a transient OpenAI error."""
    if type(exc).__name__ in _RETRYABLE_TYPES:
        return True

    status_code = getattr(exc, "status_code", None)
    if status_code is not None:
        return status_code in _RETRYABLE_STATUS_CODES

    return False


def call_with_retry(operation: Callable[..., Any], label: str, **kwargs: Any) -> Any:
    """
    Call ``operation(**kwargs)``, retrying transient failures.

    Non-retryable errors are re-raised immediately. After the last attempt
    the final exception is re-raised unchanged.

    Args:
        operation: Bound SDK method, e.g. ``client.chat.completions.create``.
        label:     Short name used in log lines ("chat", "transcription").
        **kwargs:  Passed straight through to ``operation``.
    """
    delay = BASE_DELAY

    for attempt in range(MAX_RETRIES + 1):
        try:
            return operation(**kwargs)
        except Exception as exc:
            if not _is_retryable(exc):
                logger.warning("OpenAI %s call failed with non-retryable error: %s", label, exc)
                raise

            if attempt >= MAX_RETRIES:
                logger.error(
                    "OpenAI %s call failed after %d attempts: %s",
                    label, MAX_RETRIES + 1, exc,
                )
                raise

            logger.warning(
                "OpenAI %s call failed (attempt %d/%d): %s. Retrying in %.1fs",
                label, attempt + 1, MAX_RETRIES + 1, exc, delay,
            )
            time.sleep(delay)
            delay = min(delay * BACKOFF_FACTOR, MAX_DELAY)

    raise RuntimeError("Unreachable retry loop")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def chat_completions_with_retry(client: Any, **kwargs: Any) -> Any:
    """``client.chat.completions.create(**kwargs)`` with automatic retry."""
    return call_with_retry(client.chat.completions.create, "chat", **kwargs)


def transcriptions_with_retry(client: Any, **kwargs: Any) -> Any:
    """
    ``client.audio.transcriptions.create(**kwargs)`` with automatic retry.

    Takes an ``open_file`` factory instead of ``file`` so every attempt
    streams the audio from the beginning.
    """
    open_file = kwargs.pop("open_file")

    def _create(**call_kwargs: Any) -> Any:
        with open_file() as audio_file:
            return client.audio.transcriptions.create(file=audio_file, **call_kwargs)

    return call_with_retry(_create, "transcription", **kwargs)

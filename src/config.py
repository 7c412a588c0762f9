"""
src/config.py
==============
Runtime Configuration — Live Translator

Responsibility:
    - Load .env once and expose every tunable as a module constant
    - Parse list-valued settings (target languages, MIME types)

All values are read from the environment at import time. Tests patch
the constants on the consuming module rather than mutating os.environ.

This module does NOT:
    - Create API clients
    - Validate API keys (capabilities do that at first use)
"""

import os

from dotenv import load_dotenv

load_dotenv()


def parse_csv_list(raw: str | None) -> tuple[str, ...]:
    """
    Parse a comma-separated list into an ordered, de-duplicated tuple.

    Blank entries are dropped and entries are lower-cased. Order of first
    appearance is preserved.
    """
    if not raw:
        return ()
    seen: list[str] = []
    for part in raw.split(","):
        item = part.strip().lower()
        if item and item not in seen:
            seen.append(item)
    return tuple(seen)


def _int_env(name: str, default: int, minimum: int | None = None) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {value!r}") from exc
    if minimum is not None and parsed < minimum:
        raise RuntimeError(f"{name} must be at least {minimum}, got {parsed}")
    return parsed


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number, got {value!r}") from exc


# ---------------------------------------------------------------------------
# External capabilities
# ---------------------------------------------------------------------------

TRANSCRIPTION_MODEL: str = os.getenv("TRANSCRIPTION_MODEL", "whisper-1")
CHAT_MODEL: str = os.getenv("CHAT_MODEL", "gpt-4o-mini")

# "openai" (LLM detect + translate), "google" (Translation v2 REST)
# or "google-sdk" (google-cloud-translate client)
TRANSLATION_BACKEND: str = os.getenv("TRANSLATION_BACKEND", "openai").strip().lower()

CAPABILITY_TIMEOUT: float = _float_env("CAPABILITY_TIMEOUT", 30.0)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

# Always translate to Italian, Chinese, and English (in this order)
TARGET_LANGUAGES: tuple[str, ...] = (
    parse_csv_list(os.getenv("TARGET_LANGUAGES")) or ("it", "zh", "en")
)

TRANSLATION_WORKERS: int = _int_env("TRANSLATION_WORKERS", 4, minimum=1)

# Optional JSON file replacing the built-in hallucination pattern list
HALLUCINATION_PATTERNS_FILE: str | None = os.getenv("HALLUCINATION_PATTERNS_FILE") or None

UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

MAX_UPLOAD_BYTES: int = _int_env("MAX_UPLOAD_BYTES", 25 * 1024 * 1024, minimum=1)

ALLOWED_AUDIO_TYPES: tuple[str, ...] = parse_csv_list(
    os.getenv("ALLOWED_AUDIO_TYPES", "audio/wav,audio/mp3,audio/mpeg,audio/webm")
)

HOST: str = os.getenv("HOST", "127.0.0.1")
PORT: int = _int_env("PORT", 3000, minimum=1)

# src/language/__init__.py
# =========================
# Language Code Layer — Live Translator
#
# Canonical language identifiers shared by the transcription, detection
# and fan-out stages. Pure functions only; no I/O.

from src.language.codes import (  # noqa: F401
    AUTO_LANGUAGE,
    SUPPORTED_LANGUAGES,
    is_auto_hint,
    is_supported_language,
    language_name,
    normalize_language_code,
)

__all__ = [
    "AUTO_LANGUAGE",
    "SUPPORTED_LANGUAGES",
    "is_auto_hint",
    "is_supported_language",
    "language_name",
    "normalize_language_code",
]

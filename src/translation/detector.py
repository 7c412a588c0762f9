"""
src/translation/detector.py
============================
Language Detector — Live Translator

Responsibility:
    - Determine the source language of an accepted transcription
    - Trust an explicit, non-"auto" hint (no capability call)
    - Otherwise ask the detection capability and clean its noisy output
    - Return a canonical SUPPORTED code, or None ("abandon the utterance")

None never means "default to a language". Callers that need to tell
"unsupported" apart from "capability failed" use ``resolve``, which raises
DetectionError on capability failure and reports the raw detected code.

This module does NOT:
    - Translate (see fanout.py)
    - Validate transcriptions (see src/transcription/validator.py)
"""

import logging
import re
from dataclasses import dataclass

from src.language.codes import (
    is_auto_hint,
    is_supported_language,
    normalize_language_code,
)
from src.translation.backends import TranslationBackend

logger = logging.getLogger("translator.translation.detector")

_NON_CODE_CHARS: re.Pattern[str] = re.compile(r"[^a-z-]")

# Substring → canonical family, applied in order; later matches win
_FAMILY_TOKENS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("en",), "en"),
    (("it",), "it"),
    (("zh", "chi"), "zh"),
)


class DetectionError(RuntimeError):
    """The detection capability failed for this utterance."""


@dataclass(frozen=True)
class DetectionResult:
    """Canonical supported language (or None) plus the cleaned raw code."""

    language: str | None
    raw: str | None
    from_hint: bool = False


def clean_detected_code(raw: object) -> str | None:
    """
    Turn noisy capability output ("Language: IT.", "zh-CN", "Chinese")
    into a bare code.

    Lower-cases, strips everything except a-z and "-", then folds known
    language families by substring. Returns None when nothing is left.
    """
    if not isinstance(raw, str):
        return None

    cleaned = _NON_CODE_CHARS.sub("", raw.strip().lower())
    if not cleaned:
        return None

    for tokens, canonical in _FAMILY_TOKENS:
        if any(token in cleaned for token in tokens):
            cleaned = canonical

    return cleaned


class LanguageDetector:
    """Hint-or-capability language detection over validated text."""

    def __init__(self, backend: TranslationBackend):
        self.backend = backend

    def resolve(self, text: str, hint: str | None = None) -> DetectionResult:
        """
        Detect the language of ``text``.

        Raises:
            DetectionError: If the detection capability call fails.
        """
        if not is_auto_hint(hint):
            language = normalize_language_code(hint)
            supported = language if is_supported_language(language) else None
            logger.info("Language taken from hint: %s → %s", hint, supported)
            return DetectionResult(language=supported, raw=language, from_hint=True)

        try:
            raw = self.backend.detect_raw(text)
        except Exception as exc:
            logger.error("Language detection capability failed: %s", exc)
            raise DetectionError(str(exc)) from exc

        cleaned = clean_detected_code(raw)
        language = normalize_language_code(cleaned)

        if not is_supported_language(language):
            logger.info(
                "Unsupported language detected: %r (raw %r) for text %r",
                language, raw, text,
            )
            return DetectionResult(language=None, raw=language)

        logger.info("Detected language: %s for text %r", language, text)
        return DetectionResult(language=language, raw=language)

    def detect(self, text: str, hint: str | None = None) -> str | None:
        """
        Canonical supported language code, or None when the language is
        unsupported OR the capability failed.
        """
        try:
            return self.resolve(text, hint).language
        except DetectionError:
            return None

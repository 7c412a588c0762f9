# src/translation/__init__.py
# ============================
# Translation Layer — Live Translator
#
#   backends.py  capability contract + OpenAI / Google implementations
#   detector.py  hint-or-capability source language detection
#   fanout.py    one translation per configured target, failure-isolated
#
# Public API:
#   build_backend(name)                          → TranslationBackend
#   LanguageDetector(backend).detect(text, hint) → str | None
#   TranslationFanout(backend).translate_all(text, source) → dict[str, str]

from src.translation.backends import (  # noqa: F401
    GoogleCloudTranslateBackend,
    GoogleTranslateBackend,
    OpenAIChatBackend,
    TranslationBackend,
    build_backend,
)
from src.translation.detector import DetectionError, LanguageDetector  # noqa: F401
from src.translation.fanout import TRANSLATION_ERROR, TranslationFanout  # noqa: F401

__all__ = [
    "DetectionError",
    "GoogleCloudTranslateBackend",
    "GoogleTranslateBackend",
    "LanguageDetector",
    "OpenAIChatBackend",
    "TRANSLATION_ERROR",
    "TranslationBackend",
    "TranslationFanout",
    "build_backend",
]

"""
src/language/codes.py
======================
Language Code Normalizer — Live Translator

Responsibility:
    - Canonicalize language identifiers (case folding, regional variants)
    - Collapse every Chinese locale tag (zh, zh-CN, zh-tw, ...) to "zh"
    - Answer whether a code belongs to the supported set {en, it, zh}

Every function here is pure and total: malformed or unsupported input
yields None / False, never an exception.

This module does NOT:
    - Call any detection capability (see src/translation/detector.py)
    - Decide which languages are translation targets (see src/config.py)
"""

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

AUTO_LANGUAGE = "auto"

SUPPORTED_LANGUAGES: tuple[str, ...] = ("en", "it", "zh")

# Prefix → canonical code for languages with many regional tags
_FAMILY_PREFIXES: dict[str, str] = {
    "zh": "zh",
}

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "it": "Italian",
    "zh": "Chinese",
    "ja": "Japanese",
    "ko": "Korean",
    "fr": "French",
    "de": "German",
    "es": "Spanish",
    "pt": "Portuguese",
    "ru": "Russian",
    "ar": "Arabic",
    "hi": "Hindi",
    "nl": "Dutch",
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize_language_code(code: object) -> str | None:
    """
    Return the canonical form of ``code``, or None for empty / non-string
    input.

    Idempotent: normalize_language_code(normalize_language_code(x)) equals
    normalize_language_code(x) for every x.
    """
    if not isinstance(code, str):
        return None

    normalized = code.strip().lower()
    if not normalized:
        return None

    for prefix, canonical in _FAMILY_PREFIXES.items():
        if normalized.startswith(prefix):
            return canonical

    return normalized


def is_supported_language(code: object) -> bool:
    """True if ``code`` normalizes to one of SUPPORTED_LANGUAGES."""
    normalized = normalize_language_code(code)
    return normalized is not None and normalized in SUPPORTED_LANGUAGES


def is_auto_hint(hint: object) -> bool:
    """True when ``hint`` means "detect automatically" (absent, blank or "auto")."""
    normalized = normalize_language_code(hint)
    return normalized is None or normalized == AUTO_LANGUAGE


def language_name(code: object, default: str | None = None) -> str:
    """
    Human-readable English name for a language code.

    Unknown codes return ``default`` when given, otherwise the code itself
    title-cased (mirrors how detection results are logged).
    """
    normalized = normalize_language_code(code)
    if normalized is None:
        return default or ""
    if normalized in LANGUAGE_NAMES:
        return LANGUAGE_NAMES[normalized]
    return default if default is not None else normalized.title()

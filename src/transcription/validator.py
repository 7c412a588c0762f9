"""
src/transcription/validator.py
===============================
Transcription Validator — Live Translator

Responsibility:
    - Decide whether raw recognizer output is genuine speech (ACCEPT)
      or noise / hallucination (REJECT)
    - Attach a diagnostic reason tag to every rejection

Rules (applied in order, first match wins):
    1. too_short              absent, non-string, or < 2 cleaned characters
    2. unsupported_script     no Latin, accented Latin or CJK character
    3. hallucination_pattern  any curated pattern matches (data-driven)
    4. low_letter_density     letters / cleaned length < 0.3
    5. single_word_artifact   one word that is < 2 characters or all digits

The verdict is deterministic and has no side effects besides logging.
Reason tags are diagnostic only and are never shown as translation text.

This module does NOT:
    - Call the transcription capability
    - Detect the spoken language
"""

import logging
import re
from dataclasses import dataclass

from src.transcription.hallucination_patterns import DEFAULT_PATTERNS, PatternSet

logger = logging.getLogger("translator.transcription.validator")


# ---------------------------------------------------------------------------
# Reason tags
# ---------------------------------------------------------------------------

REASON_TOO_SHORT = "too_short"
REASON_UNSUPPORTED_SCRIPT = "unsupported_script"
REASON_LOW_LETTER_DENSITY = "low_letter_density"
REASON_SINGLE_WORD = "single_word_artifact"

MIN_CLEAN_LENGTH = 2
MIN_LETTER_RATIO = 0.3


# ---------------------------------------------------------------------------
# Character classes
# ---------------------------------------------------------------------------

_TRAILING_PUNCTUATION: re.Pattern[str] = re.compile(r"[.,!?;:]+$")

# Latin, Italian accented Latin, CJK unified ideographs
_SUPPORTED_SCRIPT: re.Pattern[str] = re.compile(
    r"[a-zA-Z"
    r"àáâäèéêëìíîïòóôöùúûüÀÁÂÄÈÉÊËÌÍÎÏÒÓÔÖÙÚÛÜ"
    r"\u4e00-\u9fff]"
)

# Latin, Latin-1 supplement / Latin extended-A, CJK
_LETTER: re.Pattern[str] = re.compile(r"[a-zA-Z\u00C0-\u017F\u4e00-\u9fff]")

_DIGITS_ONLY: re.Pattern[str] = re.compile(r"^[0-9]+$")


# ---------------------------------------------------------------------------
# Verdict
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationVerdict:
    """Accepted(text) or Rejected(reason)."""

    accepted: bool
    text: str | None = None
    reason: str | None = None

    @classmethod
    def accept(cls, text: str) -> "ValidationVerdict":
        return cls(accepted=True, text=text)

    @classmethod
    def reject(cls, reason: str) -> "ValidationVerdict":
        return cls(accepted=False, reason=reason)


def clean_transcription(text: str) -> str:
    """Trim, lower-case and strip trailing sentence punctuation."""
    return _TRAILING_PUNCTUATION.sub("", text.strip().lower())


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


class TranscriptionValidator:
    """
    Layered content heuristics over raw recognizer output.

    The hallucination list is supplied at construction so operators can
    swap in a new PatternSet without touching the matching algorithm.
    """

    def __init__(self, patterns: PatternSet = DEFAULT_PATTERNS):
        self.patterns = patterns
        self._compiled = patterns.compile()

    @property
    def pattern_version(self) -> str:
        return self.patterns.version

    def validate(self, raw_text: object) -> ValidationVerdict:
        """
        Classify ``raw_text``.

        Returns:
            ValidationVerdict.accept(original_text) or
            ValidationVerdict.reject(reason_tag).
        """
        if not isinstance(raw_text, str) or not raw_text:
            return self._reject(REASON_TOO_SHORT, raw_text)

        clean = clean_transcription(raw_text)

        # Rule 1: too short
        if len(clean) < MIN_CLEAN_LENGTH:
            return self._reject(REASON_TOO_SHORT, clean)

        # Rule 2: must contain at least one supported-script character
        if not _SUPPORTED_SCRIPT.search(clean):
            return self._reject(REASON_UNSUPPORTED_SCRIPT, clean)

        # Rule 3: curated hallucination patterns
        for pattern, tag in self._compiled:
            if pattern.search(clean):
                logger.info(
                    "Hallucination pattern %r matched: %r", pattern.pattern, clean,
                )
                return self._reject(tag, clean)

        # Rule 4: mostly letters
        letter_count = len(_LETTER.findall(clean))
        if letter_count / len(clean) < MIN_LETTER_RATIO:
            return self._reject(REASON_LOW_LETTER_DENSITY, clean)

        # Rule 5: single-word artifacts
        words = clean.split()
        if len(words) == 1:
            word = words[0]
            if len(word) < MIN_CLEAN_LENGTH or _DIGITS_ONLY.match(word):
                return self._reject(REASON_SINGLE_WORD, clean)

        return ValidationVerdict.accept(raw_text)

    @staticmethod
    def _reject(reason: str, text: object) -> ValidationVerdict:
        logger.info("Transcription rejected (%s): %r", reason, text)
        return ValidationVerdict.reject(reason)

"""
src/transcription/hallucination_patterns.py
============================================
Hallucination Pattern Data — Live Translator

Responsibility:
    - Hold the curated, versioned, ORDERED list of (pattern, tag) pairs
      that identify speech-recognizer hallucinations
    - Load a replacement list from a JSON file so the data can be updated
      without touching the matching code in validator.py

JSON document format::

    {
        "version": "2024-06-01",
        "patterns": [
            {"pattern": "thanks for watching", "tag": "hallucination_pattern"},
            {"pattern": "^um$"}
        ]
    }

Patterns are Python regular expressions, always matched with
re.IGNORECASE via re.search against the cleaned transcription.

This module does NOT:
    - Decide acceptance (see validator.py)
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger("translator.transcription.hallucination_patterns")

HALLUCINATION_TAG = "hallucination_pattern"


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HallucinationPattern:
    """A single regex plus the rejection tag reported when it matches."""

    pattern: str
    tag: str = HALLUCINATION_TAG


@dataclass(frozen=True)
class PatternSet:
    """Versioned ordered list of hallucination patterns."""

    version: str
    patterns: tuple[HallucinationPattern, ...]

    def compile(self) -> list[tuple[re.Pattern[str], str]]:
        """
        Compile every pattern case-insensitively, preserving order.

        Raises:
            ValueError: If any pattern is not a valid regular expression.
        """
        compiled: list[tuple[re.Pattern[str], str]] = []
        for entry in self.patterns:
            try:
                compiled.append((re.compile(entry.pattern, re.IGNORECASE), entry.tag))
            except re.error as exc:
                raise ValueError(
                    f"Invalid hallucination pattern {entry.pattern!r}: {exc}"
                ) from exc
        return compiled


def _tagged(*patterns: str) -> tuple[HallucinationPattern, ...]:
    return tuple(HallucinationPattern(p) for p in patterns)


# ---------------------------------------------------------------------------
# Default curated list
# ---------------------------------------------------------------------------

DEFAULT_PATTERNS = PatternSet(
    version="1",
    patterns=(
        # Single-word fillers and acknowledgements
        *_tagged(
            r"^beep$",
            r"^hi$",
            r"^um$",
            r"^uh$",
            r"^oh$",
            r"^ah$",
            r"^4k$",
            r"^mm-hmm$",
            r"^huh$",
            r"^mm$",
            r"^hmm$",
        ),
        # Common two-word hallucinations
        *_tagged(
            r"^okay bye$",
            r"^bye bye$",
            r"^thank you$",
            r"^you know$",
            r"^i mean$",
            r"^thank you. bye bye$",
        ),
        # Video / promotional closers
        *_tagged(
            r"if you enjoyed.*subscribe",
            r"please subscribe and like",
            r"thank you for watching",
            r"thanks for watching",
            r"thank you for listening",
            r"thanks for listening",
            r"share this video",
            r"subscribe",
            r"like and subscribe",
            r"don't forget to",
            r"visit our website",
            r"follow us",
            r"check out",
            r"click the link",
            r"smash that like button",
            r"ring the bell",
            r"that's it for this video",
            r"hope you enjoyed it",
            r"see you in the next one",
            r"i'll see you in the next",
            r"if you have any questions or comments",
            r"please post them in the comments",
            r"post them in the comments section",
            r"leave a comment below",
            r"let me know in the comments",
            r"that's all for today",
            r"that's all for now",
            r"until next time",
            r"see you next time",
            r"catch you later",
            r"stay tuned",
            r"coming up next",
            r"thanks for tuning in",
            r"thanks for joining",
            r"hope to see you",
            r"don't forget to hit",
            r"make sure to hit",
        ),
        # Technical artifacts
        *_tagged(
            r"\d{1,2}:\d{2}",
            r"\[.*\]",
            r"\(music\)",
        ),
        # Social media artifacts
        *_tagged(
            r"📢|🎵|♪|📱|💡|🔔|👍|❤️|💯",
            r"www\.",
            r"\.com",
            r"http",
            r"@\w+",
            r"#\w+",
        ),
        # Caption artifacts and Chinese promo phrases
        *_tagged(
            r"caption",
            r"subtitle",
            r"字幕",
            r"viewer discretion is advised",
            r"请不吝点赞",
            r"订阅",
            r"转发",
            r"打赏",
        ),
        # Same character repeated 5+ times
        *_tagged(r"(.)\1{4,}"),
    ),
)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


def parse_patterns(document: object) -> PatternSet:
    """
    Build a PatternSet from an already-decoded JSON document.

    Raises:
        ValueError: If the document does not follow the expected schema or
            any pattern fails to compile.
    """
    if not isinstance(document, dict):
        raise ValueError("Pattern document must be a JSON object.")

    version = document.get("version")
    raw_patterns = document.get("patterns")
    if not isinstance(version, str) or not version:
        raise ValueError("Pattern document is missing a non-empty 'version'.")
    if not isinstance(raw_patterns, list):
        raise ValueError("Pattern document 'patterns' must be a list.")

    entries: list[HallucinationPattern] = []
    for i, item in enumerate(raw_patterns):
        if not isinstance(item, dict) or not isinstance(item.get("pattern"), str):
            raise ValueError(f"Pattern entry {i} must be an object with a 'pattern' string.")
        tag = item.get("tag", HALLUCINATION_TAG)
        if not isinstance(tag, str) or not tag:
            raise ValueError(f"Pattern entry {i} has an invalid 'tag'.")
        entries.append(HallucinationPattern(pattern=item["pattern"], tag=tag))

    pattern_set = PatternSet(version=version, patterns=tuple(entries))
    # Fail at load time rather than on the first utterance
    pattern_set.compile()
    return pattern_set


def load_patterns(path: str | Path) -> PatternSet:
    """
    Load a PatternSet from a JSON file.

    Raises:
        ValueError: If the file is not valid JSON or fails schema checks.
        OSError: If the file cannot be read.
    """
    path = Path(path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Pattern file {path} is not valid JSON: {exc}") from exc

    pattern_set = parse_patterns(document)
    logger.info(
        "Loaded %d hallucination patterns (version %s) from %s.",
        len(pattern_set.patterns), pattern_set.version, path,
    )
    return pattern_set

"""
tests/test_validator.py
========================
Transcription Validator Tests

Test categories:
    1. Fixed accept/reject corpus (one rejection tag per rule)
    2. Rule ordering (first match wins)
    3. Externally supplied pattern data (PatternSet, JSON loader)

All tests are OFFLINE: no API, no audio processing.
"""

import json
import os
import sys
import tempfile
import unittest

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from src.transcription.hallucination_patterns import (
    DEFAULT_PATTERNS,
    HALLUCINATION_TAG,
    HallucinationPattern,
    PatternSet,
    load_patterns,
    parse_patterns,
)
from src.transcription.validator import (
    REASON_LOW_LETTER_DENSITY,
    REASON_SINGLE_WORD,
    REASON_TOO_SHORT,
    REASON_UNSUPPORTED_SCRIPT,
    TranscriptionValidator,
    ValidationVerdict,
    clean_transcription,
)


# ===================================================================
# Corpus
# ===================================================================

ACCEPTED = [
    "Hello, how are you today?",
    "Ciao, come stai?",
    "Buongiorno a tutti",
    "Perché è così difficile?",
    "Grazie",
    "你好，今天天气怎么样？",
    "I would like two coffees, please.",
]

REJECTED = [
    # Rule 1
    ("", REASON_TOO_SHORT),
    ("a", REASON_TOO_SHORT),
    ("A.", REASON_TOO_SHORT),
    ("   ", REASON_TOO_SHORT),
    ("?!", REASON_TOO_SHORT),
    # Rule 2
    ("¿¿ ¡¡", REASON_UNSUPPORTED_SCRIPT),
    ("12345", REASON_UNSUPPORTED_SCRIPT),
    ("... --- ...", REASON_UNSUPPORTED_SCRIPT),
    ("Привет", REASON_UNSUPPORTED_SCRIPT),
    # Rule 3
    ("thanks for watching", HALLUCINATION_TAG),
    ("Thanks for watching!", HALLUCINATION_TAG),
    ("Subscribe to my channel", HALLUCINATION_TAG),
    ("um", HALLUCINATION_TAG),
    ("Hmm.", HALLUCINATION_TAG),
    ("Thank you.", HALLUCINATION_TAG),
    ("See you next time, everyone", HALLUCINATION_TAG),
    ("Meeting at 10:30", HALLUCINATION_TAG),
    ("[Music]", HALLUCINATION_TAG),
    ("Follow me @someone", HALLUCINATION_TAG),
    ("great day #blessed", HALLUCINATION_TAG),
    ("Visit www.example.org", HALLUCINATION_TAG),
    ("aaaaaa", HALLUCINATION_TAG),
    ("字幕由社区提供", HALLUCINATION_TAG),
    ("请订阅我的频道", HALLUCINATION_TAG),
    # Rule 4
    ("a1 2 3 4 5 6 7", REASON_LOW_LETTER_DENSITY),
    ("x = 42 * 17 / 3", REASON_LOW_LETTER_DENSITY),
    # Rule 5
    ("A !", REASON_SINGLE_WORD),
]


# ===================================================================
# Tests
# ===================================================================


class TestCleanTranscription(unittest.TestCase):

    def test_trims_lowercases_and_strips_trailing_punctuation(self):
        self.assertEqual(clean_transcription("  Hello There!?. "), "hello there")

    def test_keeps_inner_punctuation(self):
        self.assertEqual(clean_transcription("Ciao, come stai?"), "ciao, come stai")


class TestValidatorCorpus(unittest.TestCase):

    def setUp(self):
        self.validator = TranscriptionValidator()

    def test_accepted_corpus(self):
        for text in ACCEPTED:
            with self.subTest(text=text):
                verdict = self.validator.validate(text)
                self.assertTrue(verdict.accepted, verdict.reason)
                self.assertEqual(verdict.text, text)
                self.assertIsNone(verdict.reason)

    def test_rejected_corpus(self):
        for text, reason in REJECTED:
            with self.subTest(text=text):
                verdict = self.validator.validate(text)
                self.assertFalse(verdict.accepted)
                self.assertEqual(verdict.reason, reason)
                self.assertIsNone(verdict.text)

    def test_accepted_text_is_original_not_cleaned(self):
        verdict = self.validator.validate("  Hello, how are you today?  ")
        self.assertEqual(verdict.text, "  Hello, how are you today?  ")

    def test_non_string_input(self):
        for value in (None, 42, b"hello there", ["hello"]):
            with self.subTest(value=value):
                self.assertEqual(
                    self.validator.validate(value),
                    ValidationVerdict.reject(REASON_TOO_SHORT),
                )

    def test_repeated_characters_rejected(self):
        for text in ("aaaaa", "zzzzzzzzz", "hello!!!!!!! world"):
            with self.subTest(text=text):
                self.assertEqual(self.validator.validate(text).reason, HALLUCINATION_TAG)

    def test_four_repeats_allowed(self):
        self.assertTrue(self.validator.validate("zzzz sleep").accepted)

    def test_deterministic(self):
        first = [self.validator.validate(t) for t, _ in REJECTED]
        second = [self.validator.validate(t) for t, _ in REJECTED]
        self.assertEqual(first, second)


class TestRuleOrdering(unittest.TestCase):

    def setUp(self):
        self.validator = TranscriptionValidator()

    def test_script_rule_before_patterns(self):
        # Timestamp pattern would match, but there is no letter at all
        self.assertEqual(self.validator.validate("10:30").reason, REASON_UNSUPPORTED_SCRIPT)

    def test_pattern_rule_before_density(self):
        self.assertEqual(self.validator.validate("a 1:23 4 5 6").reason, HALLUCINATION_TAG)


class TestExternalPatterns(unittest.TestCase):

    def test_default_patterns_are_versioned_and_ordered(self):
        self.assertTrue(DEFAULT_PATTERNS.version)
        self.assertEqual(DEFAULT_PATTERNS.patterns[0].pattern, r"^beep$")
        self.assertEqual(DEFAULT_PATTERNS.patterns[-1].pattern, r"(.)\1{4,}")

    def test_custom_pattern_set_replaces_defaults(self):
        validator = TranscriptionValidator(
            PatternSet(version="test", patterns=(HallucinationPattern("banana", "fruit"),))
        )
        self.assertTrue(validator.validate("thanks for watching").accepted)
        self.assertEqual(validator.validate("Banana split").reason, "fruit")
        self.assertEqual(validator.pattern_version, "test")

    def test_parse_patterns_defaults_tag(self):
        pattern_set = parse_patterns({"version": "2", "patterns": [{"pattern": "^ok$"}]})
        self.assertEqual(pattern_set.patterns, (HallucinationPattern("^ok$", HALLUCINATION_TAG),))

    def test_parse_patterns_rejects_bad_documents(self):
        bad_documents = [
            [],
            {"patterns": []},
            {"version": "1", "patterns": "nope"},
            {"version": "1", "patterns": [{"tag": "x"}]},
            {"version": "1", "patterns": [{"pattern": "(unclosed"}]},
        ]
        for document in bad_documents:
            with self.subTest(document=document):
                with self.assertRaises(ValueError):
                    parse_patterns(document)

    def test_load_patterns_from_file(self):
        document = {
            "version": "2024-06-01",
            "patterns": [
                {"pattern": "thanks for watching"},
                {"pattern": "^ciao$", "tag": "greeting_only"},
            ],
        }
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "patterns.json")
            with open(path, "w", encoding="utf-8") as handle:
                json.dump(document, handle)

            pattern_set = load_patterns(path)

        validator = TranscriptionValidator(pattern_set)
        self.assertEqual(pattern_set.version, "2024-06-01")
        self.assertEqual(validator.validate("Ciao!").reason, "greeting_only")
        self.assertEqual(validator.validate("Thanks for watching").reason, HALLUCINATION_TAG)
        self.assertTrue(validator.validate("Subscribe to my channel").accepted)

    def test_load_patterns_invalid_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "patterns.json")
            with open(path, "w", encoding="utf-8") as handle:
                handle.write("{not json")
            with self.assertRaises(ValueError):
                load_patterns(path)


if __name__ == "__main__":
    unittest.main()

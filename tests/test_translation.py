"""
tests/test_translation.py
==========================
Language Detector + Translation Fan-out Tests

Test categories:
    1. Detected-code cleanup (noisy capability output)
    2. Detector hint handling, unsupported languages, capability failure
    3. Fan-out key set, same-language copy, partial failure isolation

All tests are OFFLINE: the capability backend is a fake.
"""

import os
import sys
import threading
import unittest
from unittest.mock import MagicMock

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from src.translation.backends import TranslationBackend
from src.translation.detector import (
    DetectionError,
    LanguageDetector,
    clean_detected_code,
)
from src.translation.fanout import TRANSLATION_ERROR, TranslationFanout


# ===================================================================
# Fakes
# ===================================================================


class FakeBackend(TranslationBackend):
    """Deterministic backend: "<target>:<text>", optional failing targets."""

    name = "fake"

    def __init__(self, detected="en", failing_targets=(), detect_error=None):
        self.detected = detected
        self.failing_targets = set(failing_targets)
        self.detect_error = detect_error
        self.detect_calls = []
        self.translate_calls = []
        self._lock = threading.Lock()

    def detect_raw(self, text):
        self.detect_calls.append(text)
        if self.detect_error is not None:
            raise self.detect_error
        return self.detected

    def translate(self, text, source_language, target_language):
        with self._lock:
            self.translate_calls.append((source_language, target_language))
        if target_language in self.failing_targets:
            raise RuntimeError(f"quota exceeded for {target_language}")
        return f"{target_language}:{text}"


# ===================================================================
# Detector
# ===================================================================


class TestCleanDetectedCode(unittest.TestCase):

    def test_plain_codes(self):
        self.assertEqual(clean_detected_code("en"), "en")
        self.assertEqual(clean_detected_code("IT"), "it")
        self.assertEqual(clean_detected_code("ja"), "ja")

    def test_noisy_output(self):
        self.assertEqual(clean_detected_code(" It. "), "it")
        self.assertEqual(clean_detected_code('"zh-CN"'), "zh")
        self.assertEqual(clean_detected_code("Language: en"), "en")
        self.assertEqual(clean_detected_code("Chinese"), "zh")
        self.assertEqual(clean_detected_code("Italian"), "it")

    def test_empty(self):
        for raw in ("", "123", "...", None, 7):
            self.assertIsNone(clean_detected_code(raw), raw)


class TestLanguageDetector(unittest.TestCase):

    def test_explicit_hint_skips_capability(self):
        backend = FakeBackend(detected="en")
        detector = LanguageDetector(backend)

        self.assertEqual(detector.detect("Ciao, come stai?", "IT"), "it")
        self.assertEqual(detector.detect("你好", "zh-TW"), "zh")
        self.assertEqual(backend.detect_calls, [])

    def test_auto_hint_uses_capability(self):
        backend = FakeBackend(detected="it")
        detector = LanguageDetector(backend)

        self.assertEqual(detector.detect("Ciao, come stai?", "auto"), "it")
        self.assertEqual(detector.detect("Ciao, come stai?"), "it")
        self.assertEqual(len(backend.detect_calls), 2)

    def test_unsupported_hint_returns_none(self):
        detector = LanguageDetector(FakeBackend())
        self.assertIsNone(detector.detect("Bonjour", "fr"))

    def test_unsupported_detection_returns_none(self):
        detector = LanguageDetector(FakeBackend(detected="ja"))
        self.assertIsNone(detector.detect("今日はいい天気ですね"))

        result = detector.resolve("今日はいい天気ですね")
        self.assertIsNone(result.language)
        self.assertEqual(result.raw, "ja")

    def test_capability_failure(self):
        detector = LanguageDetector(FakeBackend(detect_error=RuntimeError("timeout")))

        self.assertIsNone(detector.detect("Hello there"))
        with self.assertRaises(DetectionError):
            detector.resolve("Hello there")

    def test_noisy_capability_output(self):
        detector = LanguageDetector(FakeBackend(detected="ZH-cn."))
        self.assertEqual(detector.detect("你好，今天天气怎么样？"), "zh")


# ===================================================================
# Fan-out
# ===================================================================


class TestTranslationFanout(unittest.TestCase):

    def test_key_set_matches_configured_targets(self):
        target_sets = [("it", "zh", "en"), ("en",), ("zh", "en"), ("fr", "de", "it", "en")]
        for targets in target_sets:
            with self.subTest(targets=targets):
                fanout = TranslationFanout(FakeBackend(), targets)
                result = fanout.translate_all("Hello there", "en")
                self.assertEqual(tuple(result.keys()), targets)

    def test_same_language_slot_is_verbatim(self):
        backend = FakeBackend()
        fanout = TranslationFanout(backend, ("it", "zh", "en"))

        result = fanout.translate_all("Ciao, come stai?", "it")

        self.assertEqual(result["it"], "Ciao, come stai?")
        self.assertEqual(result["en"], "en:Ciao, come stai?")
        self.assertEqual(result["zh"], "zh:Ciao, come stai?")
        self.assertNotIn(("it", "it"), backend.translate_calls)
        self.assertEqual(len(backend.translate_calls), 2)

    def test_same_language_uses_canonical_codes(self):
        backend = FakeBackend()
        fanout = TranslationFanout(backend, ("zh-CN", "en"))

        result = fanout.translate_all("你好", "zh")

        self.assertEqual(result["zh-CN"], "你好")
        self.assertEqual(backend.translate_calls, [("zh", "en")])

    def test_single_target_failure_is_isolated(self):
        backend = FakeBackend(failing_targets={"zh"})
        fanout = TranslationFanout(backend, ("it", "zh", "en"))

        result = fanout.translate_all("Hello there", "en")

        self.assertEqual(result, {
            "it": "it:Hello there",
            "zh": TRANSLATION_ERROR,
            "en": "Hello there",
        })

    def test_all_targets_failing_still_returns_full_map(self):
        backend = FakeBackend(failing_targets={"it", "zh"})
        fanout = TranslationFanout(backend, ("it", "zh", "en"))

        result = fanout.translate_all("Hello there", "en")

        self.assertEqual(set(result), {"it", "zh", "en"})
        self.assertEqual(result["it"], TRANSLATION_ERROR)
        self.assertEqual(result["zh"], TRANSLATION_ERROR)

    def test_override_targets_per_call(self):
        fanout = TranslationFanout(FakeBackend(), ("it", "zh", "en"))
        result = fanout.translate_all("Hello there", "en", ["zh"])
        self.assertEqual(result, {"zh": "zh:Hello there"})

    def test_no_network_when_only_target_is_source(self):
        backend = MagicMock(spec=TranslationBackend)
        fanout = TranslationFanout(backend, ("en",))

        self.assertEqual(fanout.translate_all("Hello there", "en"), {"en": "Hello there"})
        backend.translate.assert_not_called()

    def test_rejects_non_positive_worker_count(self):
        for workers in (0, -2):
            with self.subTest(workers=workers):
                with self.assertRaises(ValueError):
                    TranslationFanout(FakeBackend(), ("it",), max_workers=workers)


if __name__ == "__main__":
    unittest.main()

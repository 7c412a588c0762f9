"""
src/translation/fanout.py
==========================
Translation Fan-out Engine — Live Translator

Responsibility:
    - Turn one validated utterance into one translation per configured
      target language
    - Copy the source text verbatim into the slot whose target equals the
      source language (no capability call, never round-tripped)
    - Translate every other target independently and in parallel
    - Isolate failures: a failed target gets TRANSLATION_ERROR, the other
      targets are unaffected, and the call never raises for them

The returned dict's keys are exactly the configured targets, in the
configured order, regardless of completion order.

This module does NOT:
    - Detect the source language (see detector.py)
    - Choose the target set (fixed configuration, see src/config.py)
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable

from src import config
from src.language.codes import normalize_language_code
from src.translation.backends import TranslationBackend

logger = logging.getLogger("translator.translation.fanout")

TRANSLATION_ERROR = "[Translation Error]"


class TranslationFanout:
    """Per-target translation with partial-failure isolation."""

    def __init__(
        self,
        backend: TranslationBackend,
        target_languages: Iterable[str] | None = None,
        max_workers: int | None = None,
    ):
        self.backend = backend
        self.target_languages: tuple[str, ...] = tuple(
            target_languages if target_languages is not None else config.TARGET_LANGUAGES
        )
        self.max_workers = config.TRANSLATION_WORKERS if max_workers is None else max_workers
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")

    def translate_all(
        self,
        text: str,
        source_language: str,
        target_languages: Iterable[str] | None = None,
    ) -> dict[str, str]:
        """
        Translate ``text`` into every target language.

        Args:
            text:             Validated source text.
            source_language:  Canonical source language code.
            target_languages: Override of the configured targets (tests and
                              alternate deployments); defaults to the
                              engine's fixed target set.

        Returns:
            {target_code: translated_text or TRANSLATION_ERROR}
        """
        targets = tuple(target_languages) if target_languages is not None else self.target_languages
        source = normalize_language_code(source_language)

        results: dict[str, str] = {}
        pending: list[str] = []

        for target in targets:
            if target in results or target in pending:
                continue
            if normalize_language_code(target) == source:
                results[target] = text
            else:
                pending.append(target)

        if pending:
            results.update(self._translate_parallel(text, source_language, pending))

        # Re-key in configured order
        return {target: results[target] for target in targets}

    def _translate_parallel(
        self,
        text: str,
        source_language: str,
        targets: list[str],
    ) -> dict[str, str]:
        def _translate_one(target: str) -> str:
            try:
                return self.backend.translate(text, source_language, target)
            except Exception as exc:
                logger.warning(
                    "Translation to %s failed (%s → %s): %s",
                    target, source_language, target, exc,
                )
                return TRANSLATION_ERROR

        translated: dict[str, str] = {}
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(targets))) as executor:
            futures = {
                executor.submit(_translate_one, target): target
                for target in targets
            }
            for future in as_completed(futures):
                translated[futures[future]] = future.result()

        logger.info(
            "Fan-out complete: %d/%d targets translated.",
            sum(1 for v in translated.values() if v != TRANSLATION_ERROR),
            len(targets),
        )
        return translated

"""
src/pipeline.py
================
Utterance Pipeline Orchestrator — Live Translator

Responsibility:
    Run ONE utterance (one live audio chunk or one uploaded file) through:

        Received → Transcribing → (NoSpeech | Validating)
                 → (Rejected | LanguageDetecting)
                 → (UnsupportedLanguage | Translating) → Translated

    Any transcription or detection capability fault ends the run with a
    Failed(stage) outcome. The utterance's temp audio file is deleted on
    EVERY exit path before the outcome is returned.

Stages are strictly sequential. The only intra-utterance parallelism is
the per-target fan-out (src/translation/fanout.py). Runs share no mutable
state, so concurrent utterances are independent.

This layer MUST NOT:
    - Transcribe, validate, detect or translate itself
    - Raise to its caller for expected outcomes (no speech, rejection,
      unsupported language) or for capability failures
"""

import itertools
import logging
import os
import tempfile
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from src import config
from src.outcomes import (
    STAGE_DETECTION,
    STAGE_TRANSCRIPTION,
    CapabilityError,
    Failed,
    NoSpeech,
    PipelineOutcome,
    Rejected,
    Translated,
    UnsupportedLanguage,
)
from src.transcription.hallucination_patterns import DEFAULT_PATTERNS, load_patterns
from src.transcription.validator import TranscriptionValidator
from src.transcription.whisper_client import WhisperTranscriber
from src.translation.backends import build_backend
from src.translation.detector import DetectionError, LanguageDetector
from src.translation.fanout import TranslationFanout

logger = logging.getLogger("translator.pipeline")

STAGE_STORAGE = "storage"

_sequence = itertools.count(1)


# =====================================================================
# Utterance + scoped temp storage
# =====================================================================


@dataclass(frozen=True)
class Utterance:
    """One bounded unit of spoken input."""

    audio: bytes
    language_hint: str | None = None
    suffix: str = ".wav"
    received_at: float = field(default_factory=time.monotonic)
    sequence: int = field(default_factory=lambda: next(_sequence))


@contextmanager
def utterance_storage(utterance: Utterance, directory: str | Path) -> Iterator[Path]:
    """
    Write the utterance audio to a unique temp file and yield its path.

    The file is deleted when the block exits, whether normally or through
    an exception.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    fd, name = tempfile.mkstemp(
        prefix=f"chunk_{utterance.sequence}_", suffix=utterance.suffix, dir=directory,
    )
    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(utterance.audio)
        yield path
    finally:
        path.unlink(missing_ok=True)
        logger.debug("Temp audio released: %s", path)


# =====================================================================
# Orchestrator
# =====================================================================


class UtterancePipeline:
    """transcribe → validate → detect language → fan-out translate."""

    def __init__(
        self,
        transcriber: WhisperTranscriber,
        validator: TranscriptionValidator,
        detector: LanguageDetector,
        fanout: TranslationFanout,
        upload_dir: str | Path | None = None,
    ):
        self.transcriber = transcriber
        self.validator = validator
        self.detector = detector
        self.fanout = fanout
        self.upload_dir = Path(upload_dir or config.UPLOAD_DIR)

    def run(self, utterance: Utterance) -> PipelineOutcome:
        """
        Process one utterance end-to-end.

        Returns:
            NoSpeech, Rejected, UnsupportedLanguage, Translated or Failed.
            Never raises for capability faults.
        """
        started = time.monotonic()
        try:
            with utterance_storage(utterance, self.upload_dir) as audio_path:
                outcome = self._run_stages(utterance, audio_path)
        except CapabilityError as exc:
            logger.error(
                "Utterance #%d abandoned at %s stage: %s",
                utterance.sequence, exc.stage, exc.message,
            )
            outcome = Failed(stage=exc.stage, message=exc.message)
        except OSError as exc:
            logger.error("Utterance #%d temp storage failed: %s", utterance.sequence, exc)
            outcome = Failed(stage=STAGE_STORAGE, message=str(exc))

        logger.info(
            "Utterance #%d finished: %s (%.2fs)",
            utterance.sequence, outcome.kind, time.monotonic() - started,
        )
        return outcome

    def _run_stages(self, utterance: Utterance, audio_path: Path) -> PipelineOutcome:
        # ------------------------------------------------------------------
        # Stage 1: Transcription
        # ------------------------------------------------------------------
        try:
            transcription = self.transcriber.transcribe(audio_path, utterance.language_hint)
        except Exception as exc:
            raise CapabilityError(STAGE_TRANSCRIPTION, str(exc)) from exc

        if not transcription or not transcription.strip():
            logger.info("Utterance #%d: no speech detected.", utterance.sequence)
            return NoSpeech()

        # ------------------------------------------------------------------
        # Stage 2: Validation
        # ------------------------------------------------------------------
        verdict = self.validator.validate(transcription)
        if not verdict.accepted:
            return Rejected(reason=verdict.reason)

        text = verdict.text

        # ------------------------------------------------------------------
        # Stage 3: Language detection
        # ------------------------------------------------------------------
        try:
            detection = self.detector.resolve(text, utterance.language_hint)
        except DetectionError as exc:
            raise CapabilityError(STAGE_DETECTION, str(exc)) from exc

        if detection.language is None:
            return UnsupportedLanguage(detected=detection.raw)

        # ------------------------------------------------------------------
        # Stage 4: Fan-out translation
        # ------------------------------------------------------------------
        translations = self.fanout.translate_all(text, detection.language)

        return Translated(
            source_language=detection.language,
            source_text=text,
            translations=translations,
        )


# =====================================================================
# Production wiring
# =====================================================================


def build_pipeline() -> UtterancePipeline:
    """Assemble the pipeline from environment configuration."""
    patterns = (
        load_patterns(config.HALLUCINATION_PATTERNS_FILE)
        if config.HALLUCINATION_PATTERNS_FILE
        else DEFAULT_PATTERNS
    )
    backend = build_backend(config.TRANSLATION_BACKEND)

    return UtterancePipeline(
        transcriber=WhisperTranscriber(),
        validator=TranscriptionValidator(patterns),
        detector=LanguageDetector(backend),
        fanout=TranslationFanout(backend, config.TARGET_LANGUAGES),
        upload_dir=config.UPLOAD_DIR,
    )

"""
src/api/app.py
===============
API Endpoints — Live Translator

Responsibility:
    - Expose GET /health (OK marker + timestamp, no pipeline work)
    - Expose POST /upload-audio (multipart field "audio", optional form
      field "sourceLanguage", default "auto")
    - Expose WS /ws accepting {"type": "audio_chunk", "audio": <base64>,
      "sourceLanguage": <optional>} messages
    - Turn each upload / chunk into one Utterance, run the pipeline in a
      worker thread, and return exactly one outcome payload

Chunks from one WebSocket connection are processed concurrently; each
reply is sent as soon as its own pipeline run settles.

This module does NOT:
    - Transcribe, validate, detect or translate
    - Leak internal exception text to clients
"""

import asyncio
import base64
import binascii
import json
import logging
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path

from fastapi import (
    Depends,
    FastAPI,
    File,
    Form,
    HTTPException,
    UploadFile,
    WebSocket,
    WebSocketDisconnect,
)
from fastapi.responses import JSONResponse

from src import config
from src.language.codes import AUTO_LANGUAGE
from src.outcomes import Failed, to_payload
from src.pipeline import Utterance, UtterancePipeline, build_pipeline

logger = logging.getLogger("translator.api")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Live Translator",
    description="Real-time speech transcription and translation (English, Italian, Chinese).",
    version="1.0.0",
)


@lru_cache(maxsize=1)
def get_pipeline() -> UtterancePipeline:
    """Process-wide pipeline; overridden in tests via dependency_overrides."""
    return build_pipeline()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@app.get("/health")
async def health():
    return {"status": "OK", "timestamp": _now_iso()}


# ---------------------------------------------------------------------------
# File upload
# ---------------------------------------------------------------------------


@app.post("/upload-audio")
async def upload_audio(
    audio: UploadFile | None = File(None),
    source_language: str = Form(AUTO_LANGUAGE, alias="sourceLanguage"),
    pipeline: UtterancePipeline = Depends(get_pipeline),
):
    """
    Run one uploaded audio file through the pipeline.

    Returns:
        The outcome payload. 200 for every outcome except capability
        failure (500).
    """
    if audio is None or not audio.filename:
        raise HTTPException(status_code=400, detail="No audio file provided")

    if audio.content_type not in config.ALLOWED_AUDIO_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported content type: {audio.content_type}",
        )

    if audio.size is not None and audio.size > config.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Audio file too large")

    try:
        audio_bytes = await audio.read(config.MAX_UPLOAD_BYTES + 1)
    except Exception:
        raise HTTPException(status_code=400, detail="Failed to read uploaded file.")

    if len(audio_bytes) > config.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Audio file too large")

    logger.info(
        "Audio upload received: %s (%.2f KB, hint=%s)",
        audio.filename, len(audio_bytes) / 1024, source_language,
    )

    utterance = Utterance(
        audio=audio_bytes,
        language_hint=source_language,
        suffix=Path(audio.filename).suffix or ".wav",
    )
    outcome = await asyncio.to_thread(pipeline.run, utterance)

    status_code = 500 if isinstance(outcome, Failed) else 200
    return JSONResponse(status_code=status_code, content=to_payload(outcome))


# ---------------------------------------------------------------------------
# Live WebSocket stream
# ---------------------------------------------------------------------------


def _error_message(message: str) -> dict:
    return {"type": "error", "message": message, "timestamp": _now_iso()}


def _frame_text(message: dict) -> str:
    """
    Extract the JSON text of one ASGI WebSocket frame.

    Text and binary frames are both accepted; binary frames must be UTF-8.

    Raises:
        ValueError: If the frame carries no payload or is not UTF-8.
    """
    text = message.get("text")
    if text is not None:
        return text

    data = message.get("bytes")
    if data is None:
        raise ValueError("empty frame")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValueError(f"binary frame is not UTF-8: {exc}") from exc


def _parse_chunk(raw: str) -> Utterance | None:
    """
    Decode one WebSocket message into an Utterance.

    Returns None for well-formed messages that are not audio chunks.

    Raises:
        ValueError: If the message is not valid JSON or the audio field is
            missing / not base64.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON: {exc}") from exc

    if not isinstance(data, dict) or data.get("type") != "audio_chunk":
        return None

    encoded = data.get("audio")
    if not isinstance(encoded, str) or not encoded:
        raise ValueError("audio_chunk without audio payload")

    try:
        audio_bytes = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"audio is not valid base64: {exc}") from exc

    hint = data.get("sourceLanguage")
    return Utterance(
        audio=audio_bytes,
        language_hint=hint if isinstance(hint, str) else None,
    )


@app.websocket("/ws")
async def audio_stream(
    websocket: WebSocket,
    pipeline: UtterancePipeline = Depends(get_pipeline),
):
    await websocket.accept()
    logger.info("Client connected")

    send_lock = asyncio.Lock()
    in_flight: set[asyncio.Task] = set()

    async def _send(message: dict) -> None:
        async with send_lock:
            try:
                await websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError) as exc:
                logger.info("Dropping reply for closed connection: %s", exc)

    async def _process(utterance: Utterance) -> None:
        try:
            outcome = await asyncio.to_thread(pipeline.run, utterance)
        except Exception as exc:
            logger.error("Audio processing error: %s", exc, exc_info=True)
            await _send(_error_message("Failed to process audio"))
            return
        await _send(to_payload(outcome))

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            try:
                utterance = _parse_chunk(_frame_text(message))
            except ValueError as exc:
                logger.warning("Malformed WebSocket message: %s", exc)
                await _send(_error_message("Failed to process audio chunk"))
                continue

            if utterance is None:
                continue

            task = asyncio.create_task(_process(utterance))
            in_flight.add(task)
            task.add_done_callback(in_flight.discard)
    except WebSocketDisconnect:
        logger.info("Client disconnected")
    finally:
        if in_flight:
            await asyncio.gather(*in_flight, return_exceptions=True)

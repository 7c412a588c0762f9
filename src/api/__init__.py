# src/api/__init__.py
# =====================
# API Layer — Live Translator
#
#   GET  /health        liveness probe (no pipeline work)
#   POST /upload-audio  one uploaded file → one outcome payload
#   WS   /ws            one audio_chunk message → one outcome payload
#
# Transport only: every utterance is delegated to src.pipeline.

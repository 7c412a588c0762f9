"""
main.py
========
Central entry point for the Live Translator service.

Run with:
    uvicorn main:app --reload
"""

import logging

from dotenv import load_dotenv

load_dotenv()  # Load .env before any module reads env vars

# Configure logging for the entire application
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Keep OpenAI SDK / HTTP transport chatter out of the per-utterance logs.
for _transport_logger_name in (
    "openai",
    "openai._base_client",
    "httpx",
    "httpcore",
    "urllib3",
):
    logging.getLogger(_transport_logger_name).setLevel(logging.CRITICAL)

from src.api.app import app  # noqa: F401, E402

if __name__ == "__main__":
    import uvicorn

    from src import config

    uvicorn.run("main:app", host=config.HOST, port=config.PORT)

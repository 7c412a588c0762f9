"""
src/translation/backends.py
============================
Translation Capability Backends — Live Translator

Responsibility:
    - Define the narrow capability contract used by the language detector
      and the fan-out engine:
          detect_raw(text) → raw language code (may be noisy)
          translate(text, source, target) → translated text
    - Provide swappable implementations:
          OpenAIChatBackend       LLM-based detect + translate
          GoogleTranslateBackend  direct REST call to Google Translation v2
          GoogleCloudTranslateBackend  google-cloud-translate SDK client

Backends raise RuntimeError on any provider failure. Callers decide
whether a failure is fatal (detection) or isolated (per-target).

This module does NOT:
    - Normalize or validate language codes (see detector.py)
    - Decide which targets to translate to (see fanout.py)
"""

import logging
import os
from typing import Any

import requests
from google.cloud import translate_v2
from openai import OpenAI

from src import config
from src.language.codes import language_name, normalize_language_code
from src.openai_retry import chat_completions_with_retry

logger = logging.getLogger("translator.translation.backends")


# ---------------------------------------------------------------------------
# Capability contract
# ---------------------------------------------------------------------------


class TranslationBackend:
    """Detection + translation capability."""

    name = "base"

    def detect_raw(self, text: str) -> str:
        raise NotImplementedError

    def translate(self, text: str, source_language: str, target_language: str) -> str:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# OpenAI (language-model based)
# ---------------------------------------------------------------------------

_DETECT_PROMPT = (
    "Detect the language of this text and respond with only the ISO 639-1 "
    "language code (en for English, it for Italian, zh for Chinese). "
    'Text: "{text}"'
)

_TRANSLATE_SYSTEM_PROMPT = (
    "You are a professional translator. Translate the following text from "
    "{source} to {target}. Respond with ONLY the translation, no explanations, "
    "no additional text, no quotes."
)


class OpenAIChatBackend(TranslationBackend):
    """Detect and translate with a chat-completions model."""

    name = "openai"

    def __init__(self, client: Any = None, model: str | None = None):
        self._client = client
        self.model = model or config.CHAT_MODEL

    @property
    def client(self) -> Any:
        if self._client is None:
            api_key = os.environ.get("OPENAI_API_KEY")
            if not api_key:
                raise RuntimeError("OPENAI_API_KEY environment variable is not set.")
            self._client = OpenAI(
                api_key=api_key, timeout=config.CAPABILITY_TIMEOUT, max_retries=0,
            )
        return self._client

    def _complete(self, messages: list[dict[str, str]], **kwargs: Any) -> str:
        response = chat_completions_with_retry(
            self.client, model=self.model, messages=messages, **kwargs,
        )
        content = response.choices[0].message.content
        return (content or "").strip()

    def detect_raw(self, text: str) -> str:
        try:
            raw = self._complete(
                [{"role": "user", "content": _DETECT_PROMPT.format(text=text)}],
                max_tokens=10,
                temperature=0,
            )
        except Exception as exc:
            raise RuntimeError(f"OpenAI language detection failed: {exc}") from exc

        logger.debug("OpenAI raw detection %r for text %r", raw, text)
        return raw

    def translate(self, text: str, source_language: str, target_language: str) -> str:
        system_prompt = _TRANSLATE_SYSTEM_PROMPT.format(
            source=language_name(source_language, default="English"),
            target=language_name(target_language, default="English"),
        )
        try:
            return self._complete(
                [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": text},
                ],
                max_tokens=200,
                temperature=0.1,
            )
        except Exception as exc:
            raise RuntimeError(
                f"OpenAI translation failed ({source_language} → {target_language}): {exc}"
            ) from exc


# ---------------------------------------------------------------------------
# Google Cloud Translation v2 (direct REST provider)
# ---------------------------------------------------------------------------

GOOGLE_TRANSLATE_ENDPOINT = "https://translation.googleapis.com/language/translate/v2"
GOOGLE_DETECT_ENDPOINT = f"{GOOGLE_TRANSLATE_ENDPOINT}/detect"

# Google expects a script-qualified tag for Chinese
_GOOGLE_CODE_MAP: dict[str, str] = {
    "zh": "zh-CN",
}


def _google_code(code: str) -> str:
    normalized = normalize_language_code(code) or code
    return _GOOGLE_CODE_MAP.get(normalized, normalized)


class GoogleTranslateBackend(TranslationBackend):
    """Detect and translate through the Translation v2 REST API."""

    name = "google"

    def __init__(
        self,
        api_key: str | None = None,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ):
        self.api_key = api_key or os.environ.get("GOOGLE_TRANSLATE_API_KEY")
        if not self.api_key:
            raise RuntimeError("GOOGLE_TRANSLATE_API_KEY environment variable is not set.")
        self.session = session or requests.Session()
        self.timeout = timeout or config.CAPABILITY_TIMEOUT

    def _post(self, url: str, data: dict[str, str]) -> dict[str, Any]:
        try:
            resp = self.session.post(
                url,
                params={"key": self.api_key},
                data=data,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as exc:
            raise RuntimeError(f"Google Translate request failed: {exc}") from exc

    def detect_raw(self, text: str) -> str:
        body = self._post(GOOGLE_DETECT_ENDPOINT, {"q": text})
        try:
            return body["data"]["detections"][0][0]["language"]
        except (KeyError, IndexError, TypeError) as exc:
            raise RuntimeError(f"Unexpected Google detect response: {body}") from exc

    def translate(self, text: str, source_language: str, target_language: str) -> str:
        body = self._post(
            GOOGLE_TRANSLATE_ENDPOINT,
            {
                "q": text,
                "source": _google_code(source_language),
                "target": _google_code(target_language),
                "format": "text",
            },
        )
        try:
            return body["data"]["translations"][0]["translatedText"].strip()
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            raise RuntimeError(f"Unexpected Google translate response: {body}") from exc


# ---------------------------------------------------------------------------
# Google Cloud Translation (provider SDK)
# ---------------------------------------------------------------------------


class GoogleCloudTranslateBackend(TranslationBackend):
    """
    Detect and translate through the google-cloud-translate v2 client.

    Credentials come from the standard Google application-default chain
    (GOOGLE_APPLICATION_CREDENTIALS), resolved lazily on first use.
    """

    name = "google-sdk"

    def __init__(self, client: Any = None):
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = translate_v2.Client()
        return self._client

    def detect_raw(self, text: str) -> str:
        try:
            result = self.client.detect_language(text)
        except Exception as exc:
            raise RuntimeError(f"Google Cloud language detection failed: {exc}") from exc

        try:
            return result["language"]
        except (KeyError, TypeError) as exc:
            raise RuntimeError(f"Unexpected Google Cloud detect result: {result}") from exc

    def translate(self, text: str, source_language: str, target_language: str) -> str:
        try:
            result = self.client.translate(
                text,
                target_language=_google_code(target_language),
                source_language=_google_code(source_language),
                format_="text",
            )
        except Exception as exc:
            raise RuntimeError(
                f"Google Cloud translation failed ({source_language} → {target_language}): {exc}"
            ) from exc

        try:
            return result["translatedText"].strip()
        except (KeyError, TypeError, AttributeError) as exc:
            raise RuntimeError(f"Unexpected Google Cloud translate result: {result}") from exc


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_BACKENDS: dict[str, type[TranslationBackend]] = {
    OpenAIChatBackend.name: OpenAIChatBackend,
    GoogleTranslateBackend.name: GoogleTranslateBackend,
    GoogleCloudTranslateBackend.name: GoogleCloudTranslateBackend,
}


def build_backend(name: str | None = None) -> TranslationBackend:
    """
    Instantiate the configured backend.

    Raises:
        ValueError: If ``name`` is not a known backend.
    """
    key = (name or config.TRANSLATION_BACKEND).strip().lower()
    backend_cls = _BACKENDS.get(key)
    if backend_cls is None:
        raise ValueError(
            f"Unsupported translation backend: {key!r} (expected one of {sorted(_BACKENDS)})"
        )
    logger.info("Translation backend selected: %s", key)
    return backend_cls()

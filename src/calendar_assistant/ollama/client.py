"""Ollama client implementation.

This module provides the text generator used to turn free text into JSON.

Notes:
    The HTTP call is made with ``urllib`` and wrapped using
    ``asyncio.to_thread`` so the rest of the codebase can remain async-friendly.
"""

from __future__ import annotations

import asyncio
import json
import re
import urllib.error
import urllib.request
from typing import Any, Awaitable, Callable, Optional

import structlog

from calendar_assistant.config import Settings
from calendar_assistant.exceptions import GeneratorError, OllamaConnectionError, ParseError
from calendar_assistant.utils import RetryPolicy, retry_async

logger = structlog.get_logger()

JSON_ONLY_SUFFIX = "\n\nIMPORTANT: Respond with ONLY valid JSON, no additional text or explanation."

_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.S)
_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.I)


def parse_json_object(raw: str) -> dict[str, Any]:
    """Extract a JSON object from a raw model response.

    Accepts bare JSON, JSON wrapped in Markdown code fences, and JSON
    surrounded by stray prose.

    Raises:
        ParseError: If no JSON object can be recovered.
    """
    text = (raw or "").strip()
    if not text:
        raise ParseError("empty model response")

    text = _CODE_FENCE_RE.sub("", text).strip()

    # Fast path: direct JSON.
    try:
        obj = json.loads(text)
    except json.JSONDecodeError:
        obj = None
    if isinstance(obj, dict):
        return obj

    match = _JSON_OBJECT_RE.search(text)
    if not match:
        raise ParseError("model response did not contain a JSON object")

    try:
        obj = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise ParseError(f"model response contained malformed JSON: {exc.msg}") from exc
    if not isinstance(obj, dict):
        raise ParseError("extracted JSON was not an object")
    return obj


class OllamaClient:
    """Ollama LLM client for structured text parsing.

    Transient failures (connection errors, timeouts, HTTP 429 and 5xx) are
    retried according to the retry policy; callers only ever see a result
    or a ``GeneratorError``.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize Ollama client.

        Args:
            settings: Application settings. If None, uses default settings.
            retry_policy: Retry policy. If None, built from settings.
            sleep: Awaitable sleep used between retries.
        """
        from calendar_assistant.config import get_settings

        self.settings = settings or get_settings()
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=self.settings.max_retries,
            base_delay=self.settings.retry_base_delay,
            max_delay=self.settings.retry_max_delay,
            jitter=self.settings.retry_jitter,
        )
        self._sleep = sleep
        logger.info(
            "ollama_client_initialized",
            host=self.settings.ollama_host,
            model=self.settings.ollama_model,
        )

    async def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        *,
        json_mode: bool = False,
    ) -> str:
        """Generate text using Ollama.

        Args:
            prompt: The prompt to send to the model.
            model: Model name to use. If None, uses default from settings.
            json_mode: Ask Ollama to constrain the output to JSON.

        Returns:
            The generated text.

        Raises:
            GeneratorError: If generation fails after all retries.
        """
        model = model or self.settings.ollama_model
        payload: dict[str, Any] = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": self.settings.ollama_temperature},
        }
        if json_mode:
            payload["format"] = "json"

        logger.info("generating_text", model=model, prompt_length=len(prompt))

        async def _attempt() -> dict[str, Any]:
            return await asyncio.to_thread(self._post_generate, payload)

        try:
            data = await retry_async(
                _attempt,
                policy=self.retry_policy,
                retry_on=(OllamaConnectionError,),
                sleep=self._sleep,
            )
        except OllamaConnectionError as exc:
            raise GeneratorError(f"Ollama unavailable after {self.retry_policy.max_attempts} attempts: {exc}") from exc

        text = str(data.get("response") or "").strip()
        if not text:
            raise GeneratorError("Empty response from Ollama")
        return text

    async def generate_structured(self, prompt: str, model: Optional[str] = None) -> dict[str, Any]:
        """Generate a JSON object using Ollama.

        Raises:
            GeneratorError: If generation fails.
            ParseError: If the response is not a JSON object.
        """
        text = await self.generate(prompt + JSON_ONLY_SUFFIX, model, json_mode=True)
        try:
            return parse_json_object(text)
        except ParseError:
            logger.warning("ollama_response_not_json", response_preview=text[:200])
            raise

    def _post_generate(self, payload: dict[str, Any]) -> dict[str, Any]:
        host = self.settings.ollama_host.rstrip("/")
        req = urllib.request.Request(
            url=f"{host}/api/generate",
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )

        try:
            with urllib.request.urlopen(req, timeout=self.settings.ollama_timeout) as resp:  # noqa: S310
                body = resp.read().decode("utf-8")
        except urllib.error.HTTPError as exc:
            if exc.code == 429 or exc.code >= 500:
                raise OllamaConnectionError(f"HTTP {exc.code}: {exc.reason}") from exc
            raise GeneratorError(f"Ollama rejected the request: HTTP {exc.code}: {exc.reason}") from exc
        except (urllib.error.URLError, TimeoutError, ConnectionError) as exc:
            raise OllamaConnectionError(str(exc)) from exc

        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise GeneratorError("Ollama returned a non-JSON envelope") from exc
        if not isinstance(data, dict):
            raise GeneratorError("Ollama returned an unexpected envelope")
        return data

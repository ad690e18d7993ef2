"""Adapter around the Anthropic Messages API used for guideline judgments."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Callable, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..errors import LLMError

_AUTO_API_KEY = object()


@dataclass
class LLMRequest:
    """Represents an inference request for the judgment model."""

    prompt: str
    system: Optional[str]
    context: Optional[str]
    prefill: Optional[str]
    model: str
    max_tokens: int
    base_url: str
    api_key: Optional[str]
    request_timeout: Optional[float]


class LLMRunner:
    """Executes prompts against the configured model.

    ``context`` is sent as a separate, cacheable content block ahead of the
    prompt (the guidelines text is identical across calls for one PR).
    ``prefill`` primes the assistant turn; the returned text continues it and
    does not repeat the prefill.
    """

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    DEFAULT_BASE_URL = "https://api.anthropic.com/v1"
    API_VERSION = "2023-06-01"
    ENV_MODEL_KEYS = ("JACQUEZ_AI_MODEL", "AI_MODEL")
    ENV_BASE_URL_KEYS = ("JACQUEZ_LLM_BASE_URL", "ANTHROPIC_BASE_URL")
    ENV_API_KEY_KEYS = ("JACQUEZ_LLM_API_KEY", "ANTHROPIC_API_KEY")

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None = None,
        max_tokens: int = 300,
        api_key: str | None | object = _AUTO_API_KEY,
        request_timeout: Optional[float] = 60.0,
        runner: Callable[[LLMRequest], str] | None = None,
    ) -> None:
        self.model = self._resolve_model(model)
        self.base_url = self._resolve_base_url(base_url)
        self.max_tokens = max_tokens
        self.api_key = self._resolve_api_key(api_key)
        self.request_timeout = request_timeout
        self._runner = runner or self._http_runner

    def run(
        self,
        prompt: str,
        *,
        system: str | None = None,
        context: str | None = None,
        prefill: str | None = None,
    ) -> str:
        """Send the prompt to the model and return the response text."""
        request = LLMRequest(
            prompt=prompt,
            system=system,
            context=context,
            prefill=prefill,
            model=self.model,
            max_tokens=self.max_tokens,
            base_url=self.base_url,
            api_key=self.api_key,
            request_timeout=self.request_timeout,
        )
        return self._runner(request)

    @staticmethod
    def _http_runner(request: LLMRequest) -> str:
        if not request.api_key:
            raise LLMError("No API key configured for the judgment model.")
        endpoint = f"{request.base_url}/messages"
        payload: dict[str, object] = {
            "model": request.model,
            "max_tokens": request.max_tokens,
            "messages": LLMRunner._build_messages(request),
        }
        if request.system:
            payload["system"] = request.system

        data = json.dumps(payload).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "x-api-key": request.api_key,
            "anthropic-version": LLMRunner.API_VERSION,
        }
        http_request = Request(endpoint, data=data, headers=headers, method="POST")
        timeout = request.request_timeout or 60.0

        try:
            with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:  # pragma: no cover - depends on runtime
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise LLMError(f"Judgment request failed with status {exc.code}: {message}") from exc
        except (URLError, TimeoutError) as exc:  # pragma: no cover - depends on runtime
            raise LLMError(f"Judgment request failed: {getattr(exc, 'reason', exc)}") from exc

        try:
            response_payload = json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise LLMError("Judgment endpoint returned invalid JSON") from exc

        return LLMRunner._extract_content(response_payload)

    @staticmethod
    def _build_messages(request: LLMRequest) -> list[dict[str, object]]:
        content: list[dict[str, object]] = []
        if request.context:
            content.append(
                {
                    "type": "text",
                    "text": request.context,
                    "cache_control": {"type": "ephemeral"},
                }
            )
        content.append({"type": "text", "text": request.prompt})
        messages: list[dict[str, object]] = [{"role": "user", "content": content}]
        if request.prefill:
            messages.append({"role": "assistant", "content": request.prefill})
        return messages

    @staticmethod
    def _extract_content(payload: object) -> str:
        if not isinstance(payload, dict):
            return ""
        blocks = payload.get("content")
        if not isinstance(blocks, list) or not blocks:
            return ""
        first = blocks[0]
        if isinstance(first, dict) and first.get("type") == "text":
            text = first.get("text")
            if isinstance(text, str):
                return text
        return ""

    def _resolve_model(self, model: str | None) -> str:
        if model:
            return model
        return self._first_env_value(self.ENV_MODEL_KEYS) or self.DEFAULT_MODEL

    def _resolve_base_url(self, base_url: str | None) -> str:
        url = base_url or self._first_env_value(self.ENV_BASE_URL_KEYS) or self.DEFAULT_BASE_URL
        return url.rstrip("/")

    def _resolve_api_key(self, api_key: str | None | object) -> str | None:
        if api_key is _AUTO_API_KEY:
            return self._first_env_value(self.ENV_API_KEY_KEYS)
        return api_key  # type: ignore[return-value]

    @staticmethod
    def _first_env_value(keys: Sequence[str]) -> str | None:
        for key in keys:
            value = os.getenv(key)
            if value:
                return value
        return None


__all__ = ["LLMRequest", "LLMRunner"]

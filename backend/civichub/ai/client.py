"""Chat-completion clients for the hosted LLM used by the AI assist endpoints."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from civichub.domain.exceptions import UpstreamError
from civichub.obs import metrics as obs_metrics
from civichub.settings import settings

logger = logging.getLogger(__name__)


class LLMClient(Protocol):
	"""Text and JSON generation interface for dependency injection."""

	async def complete_text(self, prompt: str, *, operation: str, system: str | None = None) -> str:
		...

	async def complete_json(self, prompt: str, *, operation: str, system: str | None = None) -> dict[str, Any]:
		...


class DisabledLLMClient(LLMClient):
	"""Used when no API key is configured; every call fails as an upstream error."""

	async def complete_text(self, prompt: str, *, operation: str, system: str | None = None) -> str:  # noqa: ARG002 - interface parity
		obs_metrics.record_ai_request(operation, result="disabled")
		raise UpstreamError("ai_not_configured")

	async def complete_json(self, prompt: str, *, operation: str, system: str | None = None) -> dict[str, Any]:  # noqa: ARG002 - interface parity
		obs_metrics.record_ai_request(operation, result="disabled")
		raise UpstreamError("ai_not_configured")


@dataclass
class ChatCompletionsClient(LLMClient):
	"""Client for OpenAI-compatible `/chat/completions` endpoints (Groq by default)."""

	http: httpx.AsyncClient
	api_key: str
	model: str
	base_url: str = "https://api.groq.com/openai/v1"
	request_timeout: float = 30.0
	temperature: float = 0.3

	async def complete_text(self, prompt: str, *, operation: str, system: str | None = None) -> str:
		return await self._complete(prompt, operation=operation, system=system, json_mode=False)

	async def complete_json(self, prompt: str, *, operation: str, system: str | None = None) -> dict[str, Any]:
		content = await self._complete(prompt, operation=operation, system=system, json_mode=True)
		try:
			parsed = json.loads(content)
		except ValueError as exc:
			obs_metrics.record_ai_request(operation, result="invalid_json")
			logger.warning("ai_invalid_json", extra={"operation": operation, "content": content[:200]})
			raise UpstreamError("ai_invalid_response") from exc
		if not isinstance(parsed, dict):
			obs_metrics.record_ai_request(operation, result="invalid_json")
			raise UpstreamError("ai_invalid_response")
		return parsed

	def _payload(self, prompt: str, *, system: str | None, json_mode: bool) -> dict[str, Any]:
		messages: list[dict[str, str]] = []
		if system:
			messages.append({"role": "system", "content": system})
		messages.append({"role": "user", "content": prompt})
		payload: dict[str, Any] = {
			"model": self.model,
			"messages": messages,
			"temperature": self.temperature,
		}
		if json_mode:
			payload["response_format"] = {"type": "json_object"}
		return payload

	async def _complete(self, prompt: str, *, operation: str, system: str | None, json_mode: bool) -> str:
		url = f"{self.base_url.rstrip('/')}/chat/completions"
		started = time.perf_counter()
		try:
			response = await self.http.post(
				url,
				json=self._payload(prompt, system=system, json_mode=json_mode),
				headers={"Authorization": f"Bearer {self.api_key}"},
				timeout=self.request_timeout,
			)
			response.raise_for_status()
			body = response.json()
		except httpx.HTTPStatusError as exc:
			obs_metrics.record_ai_request(operation, result="http_error")
			logger.warning(
				"ai_upstream_status",
				extra={"operation": operation, "status": exc.response.status_code},
			)
			raise UpstreamError("ai_upstream_error") from exc
		except (httpx.HTTPError, ValueError) as exc:
			obs_metrics.record_ai_request(operation, result="transport_error")
			logger.warning("ai_upstream_unreachable", extra={"operation": operation}, exc_info=True)
			raise UpstreamError("ai_upstream_error") from exc
		latency = time.perf_counter() - started
		try:
			content = body["choices"][0]["message"]["content"]
		except (KeyError, IndexError, TypeError) as exc:
			obs_metrics.record_ai_request(operation, result="invalid_response", latency_seconds=latency)
			raise UpstreamError("ai_invalid_response") from exc
		if not isinstance(content, str):
			obs_metrics.record_ai_request(operation, result="invalid_response", latency_seconds=latency)
			raise UpstreamError("ai_invalid_response")
		obs_metrics.record_ai_request(operation, result="ok", latency_seconds=latency)
		return content


def build_llm_client(http: httpx.AsyncClient | None) -> LLMClient:
	if not settings.ai_api_key or http is None:
		return DisabledLLMClient()
	return ChatCompletionsClient(
		http=http,
		api_key=settings.ai_api_key,
		model=settings.ai_model,
		base_url=settings.ai_base_url,
		request_timeout=settings.ai_timeout_seconds,
	)

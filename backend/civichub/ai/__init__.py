"""Hosted LLM integration for the AI assist endpoints."""

from civichub.ai.client import ChatCompletionsClient, DisabledLLMClient, LLMClient, build_llm_client

__all__ = ["ChatCompletionsClient", "DisabledLLMClient", "LLMClient", "build_llm_client"]

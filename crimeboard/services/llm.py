# =============================================================================
# Agent Client: Hosted Chat-Completion Agent
# =============================================================================
#
# Sends one system + user prompt pair to the hosted agent endpoint and
# returns the raw completion text. The endpoint speaks the OpenAI
# chat-completions protocol, so the OpenAI SDK is pointed at it with a custom
# base_url.
#
# FAILURE POLICY:
# The client never raises toward the pipeline. When the endpoint or key is
# unset, the transport fails, or the server answers with a non-2xx status,
# `call()` returns the literal string "{}". There is no retry and no backoff
# at this layer (the SDK's own retries are disabled).
#
# ARCHITECTURE:
#   AgentClient (Protocol)
#   ├── GradientAgentClient   OpenAI SDK against the agent endpoint
#   │   └── call()            system prompt as first message
#   ├── AgentConfig           immutable endpoint/key/model, no env reads
#   └── get_agent_client()    lazy singleton built from settings
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import openai

from crimeboard.config import Settings, get_settings

logger = logging.getLogger(__name__)

EMPTY_RESPONSE = "{}"

_COMPLETIONS_PATH = "/api/v1/chat/completions"

# Gradient agents accept these flags alongside the standard body.
_AGENT_FLAGS = {
    "include_functions_info": False,
    "include_retrieval_info": False,
    "include_guardrails_info": False,
}


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AgentConfig:
    """Connection details for the hosted agent."""

    endpoint_url: str = ""
    access_key: str = ""
    model: str = "n/a"

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> AgentConfig:
        source = source or get_settings()
        return cls(
            endpoint_url=source.gradient_agent_endpoint,
            access_key=source.gradient_access_key,
            model=source.gradient_model,
        )

    @property
    def completions_url(self) -> str:
        """
        Full chat-completions URL.

        Accepts either the agent's base URL or the complete path:
            https://agent.example/              → https://agent.example/api/v1/chat/completions
            https://agent.example/api/v1/chat/completions → unchanged
        """
        endpoint = self.endpoint_url.strip().rstrip("/")
        if endpoint.endswith(_COMPLETIONS_PATH):
            return endpoint
        return f"{endpoint}{_COMPLETIONS_PATH}"

    @property
    def base_url(self) -> str:
        """Base URL for the OpenAI SDK, which appends /chat/completions."""
        return self.completions_url[: -len("/chat/completions")]

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint_url.strip().rstrip("/")) and bool(self.access_key)


# ---------------------------------------------------------------------------
# Protocol Definition
# ---------------------------------------------------------------------------


class AgentClient(Protocol):
    """
    Anything that can answer a system + user prompt with raw text.

    Implementations must not raise on transport or configuration failures;
    they return "{}" instead.
    """

    async def call(self, system_prompt: str, user_prompt: str) -> str:
        ...


# ---------------------------------------------------------------------------
# Implementation: Gradient agent via the OpenAI SDK
# ---------------------------------------------------------------------------


class GradientAgentClient:
    """
    Agent client for an OpenAI-compatible hosted agent.

    The SDK client is only created when the config is complete, so an
    unconfigured client is cheap and never touches the network.
    """

    def __init__(self, config: AgentConfig) -> None:
        self._config = config
        self._client: openai.AsyncOpenAI | None = None

        if config.is_configured:
            self._client = openai.AsyncOpenAI(
                api_key=config.access_key,
                base_url=config.base_url,
                max_retries=0,
            )
            logger.info(
                "Initialized GradientAgentClient (url=%s)",
                config.completions_url,
            )
        else:
            logger.warning(
                "Agent endpoint not configured; all agent calls will "
                "return an empty object"
            )

    @property
    def config(self) -> AgentConfig:
        return self._config

    async def call(self, system_prompt: str, user_prompt: str) -> str:
        """Send one completion request and return the raw content text."""
        if self._client is None:
            logger.warning("[Agent] Not configured, returning empty")
            return EMPTY_RESPONSE

        logger.info(
            "[Agent] POST %s (prompt length: %d)",
            self._config.completions_url, len(user_prompt),
        )

        try:
            response = await self._client.chat.completions.create(
                model=self._config.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                stream=False,
                extra_body=_AGENT_FLAGS,
            )
        except openai.APIStatusError as e:
            logger.error("[Agent] Error status: %s", e.status_code)
            return EMPTY_RESPONSE
        except openai.APIError as e:
            logger.error("[Agent] Request failed: %s", e)
            return EMPTY_RESPONSE

        choices = getattr(response, "choices", None) or []
        if not choices:
            logger.warning("[Agent] Response had no choices")
            return EMPTY_RESPONSE

        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None) or ""
        logger.info("[Agent] Response received, length: %d", len(content))
        return content or EMPTY_RESPONSE


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

# Lazy singleton: the SDK client keeps its own connection pool
_client: GradientAgentClient | None = None


def get_agent_client() -> GradientAgentClient:
    """Return the process-wide agent client built from settings."""
    global _client
    if _client is None:
        _client = GradientAgentClient(AgentConfig.from_settings())
    return _client

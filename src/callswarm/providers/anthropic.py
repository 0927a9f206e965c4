from __future__ import annotations

from typing import Any, Optional

from callswarm.config import ANTHROPIC_API_KEY_ENV
from callswarm.providers.base import BaseProvider
from callswarm.providers.models import Usage

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_ANTHROPIC_VERSION = "2023-06-01"

_OPTIONAL_PARAMS = (
    "temperature",
    "top_k",
    "top_p",
    "stop_sequences",
    "metadata",
    "tools",
    "tool_choice",
)


class AnthropicProvider(BaseProvider):
    """
    Provider implementation for the Anthropic Messages API.

    See: https://docs.anthropic.com/en/api/messages

    Authentication uses the `x-api-key` header together with a pinned
    `anthropic-version`. The system prompt is a top-level field rather than
    a message.

    Attributes:
        name (str): Always "anthropic"
        model (str): Model identifier (e.g., "claude-3-5-sonnet-20240620")
        api_version (str): Value of the `anthropic-version` header
        max_tokens (int): Default completion budget, required by the API
        request_url (str): Full API endpoint URL

    Example:
        >>> provider = AnthropicProvider(model="claude-3-5-sonnet-20240620")
        >>> task = provider.as_callable("Be brief.", "Hello, Claude", temperature=0.7)
    """

    name = "anthropic"
    api_key_env = ANTHROPIC_API_KEY_ENV

    def __init__(
        self,
        model: str = "claude-3-5-sonnet-20240620",
        api_key: Optional[str] = None,
        api_version: str = DEFAULT_ANTHROPIC_VERSION,
        max_tokens: int = 1024,
        request_url: str = ANTHROPIC_MESSAGES_URL,
    ) -> None:
        self.model = model
        self.api_key = api_key
        self.api_version = api_version
        self.max_tokens = max_tokens
        self.request_url = request_url

    def build_headers(self, api_key: str) -> dict[str, str]:
        return {
            "x-api-key": api_key,
            "anthropic-version": self.api_version,
            "Content-Type": "application/json",
        }

    def build_request(self, system_prompt: str, user_task: str, **params: Any) -> dict[str, Any]:
        """
        Build a Messages API payload.

        Args:
            system_prompt (str): Top-level system prompt (omitted when empty)
            user_task (str): The single user message
            **params: `max_tokens` override and any of temperature, top_k,
                top_p, stop_sequences, metadata, tools, tool_choice

        Returns:
            dict[str, Any]: Request payload

        Raises:
            TypeError: If an unsupported parameter is given
        """
        unknown = set(params) - set(_OPTIONAL_PARAMS) - {"max_tokens"}
        if unknown:
            raise TypeError(f"Unsupported Anthropic parameters: {sorted(unknown)}")

        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": params.get("max_tokens", self.max_tokens),
            "messages": [{"role": "user", "content": user_task}],
        }
        if system_prompt:
            payload["system"] = system_prompt
        for key in _OPTIONAL_PARAMS:
            if params.get(key) is not None:
                payload[key] = params[key]
        return payload

    def parse_error(self, payload: dict[str, Any]) -> Optional[str]:
        """
        Parse error from an Anthropic response.

        Error response format:
        {
            "type": "error",
            "error": {"type": "invalid_request_error", "message": "..."}
        }
        """
        if payload.get("type") != "error" and "error" not in payload:
            return None
        error = payload.get("error")
        if isinstance(error, dict):
            message = error.get("message") or error
            error_type = error.get("type")
            return f"{error_type}: {message}" if error_type else str(message)
        return str(error or payload)

    def extract_usage(self, payload: dict[str, Any]) -> Optional[Usage]:
        usage = payload.get("usage")
        if not isinstance(usage, dict):
            return None
        input_tokens = int(usage.get("input_tokens", 0))
        output_tokens = int(usage.get("output_tokens", 0))
        return Usage(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=input_tokens + output_tokens,
        )

    def extract_text(self, payload: dict[str, Any]) -> str:
        blocks = payload.get("content") or []
        return "".join(
            str(block.get("text", ""))
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
        )

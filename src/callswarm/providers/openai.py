from __future__ import annotations

from typing import Any, Optional

from callswarm.config import OPENAI_API_KEY_ENV
from callswarm.providers.base import BaseProvider
from callswarm.providers.models import Usage

OPENAI_CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"


class OpenAIProvider(BaseProvider):
    name = "openai"
    api_key_env = OPENAI_API_KEY_ENV

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        request_url: str = OPENAI_CHAT_COMPLETIONS_URL,
    ) -> None:
        self.model = model
        self.api_key = api_key
        self.request_url = request_url

    def build_request(self, system_prompt: str, user_task: str, **params: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_task},
            ],
        }
        payload.update(params)
        return payload

    def parse_error(self, payload: dict[str, Any]) -> Optional[str]:
        error = payload.get("error")
        if not error:
            return None
        if isinstance(error, dict):
            return str(error.get("message") or error)
        return str(error)

    def extract_usage(self, payload: dict[str, Any]) -> Optional[Usage]:
        usage = payload.get("usage")
        if not isinstance(usage, dict):
            return None
        # Chat completions endpoint https://platform.openai.com/docs/api-reference/chat/object#chat/object-usage
        prompt_tokens = int(usage.get("prompt_tokens", 0))
        completion_tokens = int(usage.get("completion_tokens", 0))
        total_tokens = int(usage.get("total_tokens", prompt_tokens + completion_tokens))
        return Usage(
            input_tokens=prompt_tokens,
            output_tokens=completion_tokens,
            total_tokens=total_tokens,
        )

    def extract_text(self, payload: dict[str, Any]) -> str:
        choices = payload.get("choices") or []
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return str(message.get("content") or "")

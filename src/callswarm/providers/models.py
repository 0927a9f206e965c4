from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


class ProviderError(Exception):
    """
    Error reported by a provider's API in its response payload.

    Attributes:
        provider (str): Provider name (e.g., "openai")
        message (str): Error message extracted from the payload
        status (Optional[int]): HTTP status code of the response
    """

    def __init__(self, provider: str, message: str, status: Optional[int] = None) -> None:
        self.provider = provider
        self.message = message
        self.status = status
        detail = f" (HTTP {status})" if status is not None else ""
        super().__init__(f"{provider} API error{detail}: {message}")

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, Mapping, Optional, Tuple

from aiohttp import ClientError, ClientSession
from loguru import logger

from callswarm.config import MissingAPIKeyError, get_api_key
from callswarm.core.models import Err, Ok, Outcome
from callswarm.providers.models import ProviderError, Usage

ChatCallable = Callable[[ClientSession], Awaitable[Outcome[dict[str, Any], Exception]]]


class BaseProvider(ABC):
    """
    Abstract base class for chat-completion provider implementations.

    A provider knows how to authenticate, shape a request from a system
    prompt and a user task, send it over a shared aiohttp session, and
    interpret the response. `as_callable` turns a prompt into the
    one-argument async callable expected by `run_swarm`.

    Default implementations provided:
    - Bearer token authentication (build_headers)
    - Standard request sending (send)
    - Outcome conversion of responses and failures (complete)

    Subclasses must implement:
    - build_request: Provider-specific payload shape
    - parse_error: Provider-specific error message extraction
    - extract_usage: Provider-specific usage metric extraction
    - extract_text: Provider-specific assistant text extraction

    Attributes:
        name (str): Human-readable provider identifier (e.g., "openai", "anthropic")
        api_key_env (str): Environment variable holding the API key
        api_key (Optional[str]): Explicit API key; overrides the environment
        model (str): Model identifier
        request_url (str): Full API endpoint URL
    """

    name: str
    api_key_env: str
    api_key: Optional[str]
    model: str
    request_url: str

    def resolve_api_key(self) -> str:
        """
        Return the explicit API key, or read it from the environment.

        Raises:
            MissingAPIKeyError: If no key is configured
        """
        if self.api_key:
            return self.api_key
        return get_api_key(self.api_key_env)

    def build_headers(self, api_key: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    async def send(
        self,
        session: ClientSession,
        headers: Mapping[str, str],
        request_json: dict[str, Any],
    ) -> Tuple[Any, int]:
        """
        POST the request and return the decoded JSON body with the HTTP status.

        Raises:
            aiohttp.ClientError: For network/connection errors
            asyncio.TimeoutError: For request timeouts
            ValueError: If the body is not valid JSON
        """
        async with session.post(self.request_url, headers=headers, json=request_json) as response:
            data = await response.json(content_type=None)
            return data, response.status

    async def complete(
        self,
        session: ClientSession,
        system_prompt: str,
        user_task: str,
        **params: Any,
    ) -> Outcome[dict[str, Any], Exception]:
        """
        Run one chat completion and report it as an outcome.

        Missing credentials, transport errors, undecodable bodies and API
        error payloads all become `Err`. Invalid `params` still raise.

        Args:
            session (ClientSession): Shared aiohttp session
            system_prompt (str): System prompt setting the assistant's behavior
            user_task (str): The user message
            **params: Extra request parameters accepted by `build_request`

        Returns:
            Outcome[dict[str, Any], Exception]: Response payload or the failure
        """
        try:
            api_key = self.resolve_api_key()
        except MissingAPIKeyError as e:
            return Err(e)

        request_json = self.build_request(system_prompt, user_task, **params)
        try:
            payload, status = await self.send(
                session=session,
                headers=self.build_headers(api_key),
                request_json=request_json,
            )
        except (ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.debug(f"{self.name}: Request failed: {type(e).__name__}: {e}")
            return Err(e)

        if not isinstance(payload, dict):
            return Err(ProviderError(self.name, f"Unexpected response body: {payload!r}", status))

        parsed_error = self.parse_error(payload)
        if parsed_error:
            logger.debug(f"{self.name}: API error (HTTP {status}): {parsed_error}")
            return Err(ProviderError(self.name, parsed_error, status))

        usage = self.extract_usage(payload)
        if usage:
            logger.debug(
                f"{self.name}: Completed (input: {usage.input_tokens}, "
                f"output: {usage.output_tokens} tokens)"
            )
        return Ok(payload)

    def as_callable(self, system_prompt: str, user_task: str, **params: Any) -> ChatCallable:
        """
        Bind a prompt into a callable suitable for `run_swarm`.

        Example:
            >>> task = provider.as_callable("You are a helpful assistant.", "Hi!")
            >>> results = await run_swarm(task, 4, session, "responses.jsonl")
        """

        async def call(session: ClientSession) -> Outcome[dict[str, Any], Exception]:
            return await self.complete(session, system_prompt, user_task, **params)

        return call

    @abstractmethod
    def build_request(self, system_prompt: str, user_task: str, **params: Any) -> dict[str, Any]:
        """
        Build the JSON request body.

        Args:
            system_prompt (str): System prompt
            user_task (str): User message
            **params: Provider-specific optional parameters

        Returns:
            dict[str, Any]: Request payload
        """
        ...

    @abstractmethod
    def parse_error(self, payload: dict[str, Any]) -> Optional[str]:
        """
        Extract error message from API response payload.

        Returns:
            Optional[str]: Error message if present, None if successful response
        """
        ...

    @abstractmethod
    def extract_usage(self, payload: dict[str, Any]) -> Optional[Usage]:
        ...

    @abstractmethod
    def extract_text(self, payload: dict[str, Any]) -> str:
        ...

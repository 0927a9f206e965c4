import asyncio
from pathlib import Path
from typing import Any, Optional

import aiohttp
import pytest

from callswarm.config import MissingAPIKeyError
from callswarm.core.io import read_log_entries
from callswarm.core.models import Err, Ok
from callswarm.core.swarm import run_swarm
from callswarm.providers import (
    AnthropicProvider,
    OpenAIProvider,
    ProviderError,
    available_providers,
    get_provider,
    register_provider,
    registry,
)

OPENAI_RESPONSE = {
    "id": "chatcmpl-123",
    "object": "chat.completion",
    "choices": [
        {
            "index": 0,
            "message": {"role": "assistant", "content": "The Los Angeles Dodgers."},
            "finish_reason": "stop",
        }
    ],
    "usage": {"prompt_tokens": 20, "completion_tokens": 6, "total_tokens": 26},
}

ANTHROPIC_RESPONSE = {
    "id": "msg_01",
    "type": "message",
    "role": "assistant",
    "model": "claude-3-5-sonnet-20240620",
    "content": [{"type": "text", "text": "Hello!"}],
    "stop_reason": "end_turn",
    "stop_sequence": None,
    "usage": {"input_tokens": 10, "output_tokens": 3},
}


class FakeResponse:
    def __init__(self, body: Any, status: int) -> None:
        self.body = body
        self.status = status

    async def json(self, content_type: Optional[str] = "application/json") -> Any:
        if isinstance(self.body, Exception):
            raise self.body
        return self.body

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None


class FakeSession:
    """Stand-in for aiohttp.ClientSession recording every POST."""

    def __init__(self, body: Any = None, status: int = 200, error: Optional[Exception] = None):
        self.body = body
        self.status = status
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, headers: Any = None, json: Any = None) -> FakeResponse:
        self.calls.append({"url": url, "headers": dict(headers or {}), "json": json})
        if self.error is not None:
            raise self.error
        return FakeResponse(self.body, self.status)


@pytest.fixture
def no_api_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)


class TestOpenAIProvider:
    """Tests for the OpenAI chat completions provider."""

    def test_build_request_has_system_and_user_messages(self) -> None:
        """Test the chat completions payload shape."""
        provider = OpenAIProvider(model="gpt-4o-mini", api_key="sk-test")

        payload = provider.build_request("You are a helpful assistant.", "Hi", temperature=0.0)

        assert payload == {
            "model": "gpt-4o-mini",
            "messages": [
                {"role": "system", "content": "You are a helpful assistant."},
                {"role": "user", "content": "Hi"},
            ],
            "temperature": 0.0,
        }

    def test_headers(self) -> None:
        """Test bearer authentication headers."""
        provider = OpenAIProvider(api_key="sk-test")

        assert provider.build_headers("sk-test") == {
            "Authorization": "Bearer sk-test",
            "Content-Type": "application/json",
        }

    def test_extracts_usage_and_text(self) -> None:
        """Test usage and assistant text extraction."""
        provider = OpenAIProvider(api_key="sk-test")

        usage = provider.extract_usage(OPENAI_RESPONSE)

        assert usage is not None
        assert (usage.input_tokens, usage.output_tokens, usage.total_tokens) == (20, 6, 26)
        assert provider.extract_text(OPENAI_RESPONSE) == "The Los Angeles Dodgers."

    @pytest.mark.asyncio
    async def test_complete_success(self) -> None:
        """Test that a normal response becomes Ok(payload)."""
        provider = OpenAIProvider(api_key="sk-test")
        session = FakeSession(OPENAI_RESPONSE)

        outcome = await provider.complete(session, "system", "user")  # type: ignore[arg-type]

        assert outcome == Ok(OPENAI_RESPONSE)
        assert session.calls[0]["url"] == "https://api.openai.com/v1/chat/completions"
        assert session.calls[0]["headers"]["Authorization"] == "Bearer sk-test"

    @pytest.mark.asyncio
    async def test_complete_api_error_payload(self) -> None:
        """Test that an error payload becomes Err(ProviderError)."""
        provider = OpenAIProvider(api_key="sk-bad")
        session = FakeSession({"error": {"message": "Incorrect API key provided"}}, status=401)

        outcome = await provider.complete(session, "system", "user")  # type: ignore[arg-type]

        assert isinstance(outcome, Err)
        assert isinstance(outcome.error, ProviderError)
        assert outcome.error.status == 401
        assert "Incorrect API key provided" in str(outcome.error)

    @pytest.mark.asyncio
    async def test_complete_missing_key(self, no_api_keys: None) -> None:
        """Test that a missing key is reported without sending a request."""
        provider = OpenAIProvider()
        session = FakeSession(OPENAI_RESPONSE)

        outcome = await provider.complete(session, "system", "user")  # type: ignore[arg-type]

        assert isinstance(outcome, Err)
        assert isinstance(outcome.error, MissingAPIKeyError)
        assert session.calls == []

    @pytest.mark.asyncio
    async def test_key_read_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the key falls back to OPENAI_API_KEY."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        provider = OpenAIProvider()
        session = FakeSession(OPENAI_RESPONSE)

        await provider.complete(session, "system", "user")  # type: ignore[arg-type]

        assert session.calls[0]["headers"]["Authorization"] == "Bearer sk-env"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        argnames="error",
        argvalues=[
            aiohttp.ClientConnectionError("connection reset"),
            asyncio.TimeoutError(),
        ],
    )
    async def test_complete_transport_error(self, error: Exception) -> None:
        """Test that network failures become Err instead of raising."""
        provider = OpenAIProvider(api_key="sk-test")
        session = FakeSession(error=error)

        outcome = await provider.complete(session, "system", "user")  # type: ignore[arg-type]

        assert outcome == Err(error)

    @pytest.mark.asyncio
    async def test_complete_invalid_json(self) -> None:
        """Test that an undecodable body becomes Err."""
        provider = OpenAIProvider(api_key="sk-test")
        session = FakeSession(ValueError("Expecting value"), status=502)

        outcome = await provider.complete(session, "system", "user")  # type: ignore[arg-type]

        assert isinstance(outcome, Err)

    @pytest.mark.asyncio
    async def test_complete_non_object_body(self) -> None:
        """Test that a JSON body that is not an object becomes Err."""
        provider = OpenAIProvider(api_key="sk-test")
        session = FakeSession(["unexpected"])

        outcome = await provider.complete(session, "system", "user")  # type: ignore[arg-type]

        assert isinstance(outcome, Err)
        assert isinstance(outcome.error, ProviderError)


class TestAnthropicProvider:
    """Tests for the Anthropic messages provider."""

    def test_build_request(self) -> None:
        """Test the messages payload shape with optional parameters."""
        provider = AnthropicProvider(model="claude-3-5-sonnet-20240620", api_key="k")

        payload = provider.build_request(
            "Be brief.", "Hello, Claude", temperature=0.7, top_k=50, top_p=None
        )

        assert payload == {
            "model": "claude-3-5-sonnet-20240620",
            "max_tokens": 1024,
            "system": "Be brief.",
            "messages": [{"role": "user", "content": "Hello, Claude"}],
            "temperature": 0.7,
            "top_k": 50,
        }

    def test_build_request_omits_empty_system_prompt(self) -> None:
        """Test that an empty system prompt is not sent."""
        payload = AnthropicProvider(api_key="k").build_request("", "Hi", max_tokens=16)

        assert "system" not in payload
        assert payload["max_tokens"] == 16

    def test_build_request_rejects_unknown_parameters(self) -> None:
        """Test that unsupported parameters raise TypeError."""
        with pytest.raises(TypeError):
            AnthropicProvider(api_key="k").build_request("", "Hi", frequency_penalty=1.0)

    def test_headers(self) -> None:
        """Test x-api-key and version headers."""
        provider = AnthropicProvider(api_version="2023-06-01")

        assert provider.build_headers("k") == {
            "x-api-key": "k",
            "anthropic-version": "2023-06-01",
            "Content-Type": "application/json",
        }

    def test_parse_error(self) -> None:
        """Test error extraction from an error payload."""
        provider = AnthropicProvider(api_key="k")
        payload = {
            "type": "error",
            "error": {"type": "overloaded_error", "message": "Overloaded"},
        }

        assert provider.parse_error(payload) == "overloaded_error: Overloaded"
        assert provider.parse_error(ANTHROPIC_RESPONSE) is None

    def test_extracts_usage_and_text(self) -> None:
        """Test usage and text extraction from a message."""
        provider = AnthropicProvider(api_key="k")

        usage = provider.extract_usage(ANTHROPIC_RESPONSE)

        assert usage is not None
        assert usage.total_tokens == 13
        assert provider.extract_text(ANTHROPIC_RESPONSE) == "Hello!"


class TestRegistry:
    """Tests for provider lookup and registration."""

    def test_get_known_provider(self) -> None:
        """Test that names are case-insensitive."""
        provider = get_provider("Anthropic", api_key="k")

        assert isinstance(provider, AnthropicProvider)

    def test_unknown_provider_raises(self) -> None:
        """Test that an unknown name raises ValueError."""
        with pytest.raises(ValueError) as exc_info:
            get_provider("nope")

        assert "anthropic, openai" in str(exc_info.value)

    def test_duplicate_registration_raises(self) -> None:
        """Test that built-in names cannot be re-registered."""
        with pytest.raises(ValueError):
            register_provider("openai", lambda **kwargs: OpenAIProvider(**kwargs))

    def test_available_providers(self) -> None:
        """Test that built-in providers are listed in sorted order."""
        assert available_providers() == ["anthropic", "openai"]

    def test_register_custom_provider(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a registered factory is reachable by name."""
        monkeypatch.setattr(registry, "_REGISTRY", dict(registry._REGISTRY))

        def local_server(**kwargs: Any) -> OpenAIProvider:
            return OpenAIProvider(request_url="http://localhost:8000/v1/chat/completions", **kwargs)

        register_provider(" Local ", local_server)
        provider = get_provider("local", model="llama-3", api_key="none")

        assert provider.request_url == "http://localhost:8000/v1/chat/completions"
        assert provider.model == "llama-3"
        assert "local" in available_providers()

    def test_empty_name_rejected(self) -> None:
        """Test that a blank provider name cannot be registered."""
        with pytest.raises(ValueError):
            register_provider("  ", lambda **kwargs: OpenAIProvider(**kwargs))


class TestProviderSwarm:
    """Tests running provider callables through the swarm."""

    @pytest.mark.asyncio
    async def test_swarm_over_shared_session(self, tmp_path: Path) -> None:
        """Test that all tasks share one session and log the payloads."""
        output_file = tmp_path / "responses.jsonl"
        provider = OpenAIProvider(api_key="sk-test")
        session = FakeSession(OPENAI_RESPONSE)
        task = provider.as_callable("You are a helpful assistant.", "Who won in 2020?")

        results = await run_swarm(task, 4, session, output_file, show_progress=False)

        assert results == [Ok(OPENAI_RESPONSE)] * 4
        assert len(session.calls) == 4
        entries = read_log_entries(output_file)
        assert all(entry["response"]["id"] == "chatcmpl-123" for entry in entries)

    @pytest.mark.asyncio
    async def test_missing_key_is_per_task_error(self, tmp_path: Path, no_api_keys: None) -> None:
        """Test that configuration errors surface as error lines, not a crash."""
        output_file = tmp_path / "responses.jsonl"
        task = AnthropicProvider().as_callable("", "Hello")

        results = await run_swarm(task, 2, FakeSession(), output_file, show_progress=False)

        assert all(isinstance(r, Err) for r in results)
        entries = read_log_entries(output_file)
        assert all(entry["status"] == "error" for entry in entries)
        assert all("ANTHROPIC_API_KEY" in entry["error"] for entry in entries)

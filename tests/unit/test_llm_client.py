"""Tests for analysis engine clients.

All tests are deterministic and do not make real network calls.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from openai import APIConnectionError, AuthenticationError, InternalServerError, RateLimitError
from pydantic import SecretStr

from backend.app.analysis.errors import (
    EngineAuthError,
    EngineError,
    MalformedResponseError,
    RateLimitedError,
)
from backend.app.llm.client import (
    DeterministicStubEngine,
    OpenAIEngine,
    error_for_status,
    get_analysis_engine,
)
from backend.app.llm.prompts import CLASSIFICATION_INSTRUCTIONS, RUBRICS
from backend.app.models.common import AnalysisMode

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _status_error(cls: type, status: int, headers: dict[str, str] | None = None) -> Exception:
    response = httpx.Response(status, request=_REQUEST, headers=headers or {})
    return cls(f"status {status}", response=response, body=None)  # type: ignore[no-any-return]


def _completion(content: str | None) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


@pytest.fixture
def openai_engine() -> OpenAIEngine:
    engine = OpenAIEngine(api_key="test_key", model="gpt-4o-mini")
    engine.client = MagicMock()
    engine.client.chat.completions.create = AsyncMock()
    return engine


class TestDeterministicStubEngine:
    @pytest.mark.asyncio
    async def test_flags_lexicon_terms_quoting_input(self) -> None:
        raw = await DeterministicStubEngine().complete(
            system_instructions=RUBRICS[AnalysisMode.language],
            user_content="The Chairman thanked the guys.",
        )

        issues = json.loads(raw)["issues"]
        assert [issue["text"] for issue in issues] == ["Chairman", "guys"]
        assert issues[0]["suggestion"] == "chairperson"
        assert issues[1]["severity"] == "low"

    @pytest.mark.asyncio
    async def test_matches_whole_words_only(self) -> None:
        raw = await DeterministicStubEngine().complete(
            system_instructions=RUBRICS[AnalysisMode.language],
            user_content="Ninjas are not flagged, mankindness neither.",
        )

        assert json.loads(raw) == {"issues": []}

    @pytest.mark.asyncio
    async def test_is_deterministic(self) -> None:
        engine = DeterministicStubEngine()
        kwargs = {
            "system_instructions": RUBRICS[AnalysisMode.recruitment],
            "user_content": "We need a rockstar ninja who is a digital native.",
        }

        assert await engine.complete(**kwargs) == await engine.complete(**kwargs)

    @pytest.mark.asyncio
    async def test_classifies_recruitment_text(self) -> None:
        raw = await DeterministicStubEngine().complete(
            system_instructions=CLASSIFICATION_INSTRUCTIONS,
            user_content="We are looking for a candidate to apply for this role.",
        )

        result = json.loads(raw)
        assert result["type"] == "recruitment"
        assert result["confidence"] == 0.9

    @pytest.mark.asyncio
    async def test_classifies_plain_prose_as_general(self) -> None:
        raw = await DeterministicStubEngine().complete(
            system_instructions=CLASSIFICATION_INSTRUCTIONS,
            user_content="The weather was lovely today.",
        )

        assert json.loads(raw)["type"] == "general"


class TestOpenAIEngine:
    def test_sdk_retries_are_disabled(self) -> None:
        engine = OpenAIEngine(api_key="test_key")

        assert engine.client.max_retries == 0

    @pytest.mark.asyncio
    async def test_returns_raw_content_in_json_mode(self, openai_engine: OpenAIEngine) -> None:
        openai_engine.client.chat.completions.create.return_value = _completion('{"issues": []}')

        raw = await openai_engine.complete(system_instructions="rubric", user_content="text")

        assert raw == '{"issues": []}'
        kwargs = openai_engine.client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0] == {"role": "system", "content": "rubric"}
        assert kwargs["messages"][1] == {"role": "user", "content": "text"}

    @pytest.mark.asyncio
    async def test_rate_limit_maps_to_rate_limited(self, openai_engine: OpenAIEngine) -> None:
        openai_engine.client.chat.completions.create.side_effect = _status_error(
            RateLimitError, 429, {"retry-after": "7"}
        )

        with pytest.raises(RateLimitedError) as exc_info:
            await openai_engine.complete(system_instructions="rubric", user_content="text")

        assert exc_info.value.retry_after == 7
        assert openai_engine.client.chat.completions.create.await_count == 1

    @pytest.mark.asyncio
    async def test_unauthorized_maps_to_auth_error(self, openai_engine: OpenAIEngine) -> None:
        openai_engine.client.chat.completions.create.side_effect = _status_error(
            AuthenticationError, 401
        )

        with pytest.raises(EngineAuthError):
            await openai_engine.complete(system_instructions="rubric", user_content="text")

    @pytest.mark.asyncio
    async def test_server_error_maps_to_engine_error(self, openai_engine: OpenAIEngine) -> None:
        openai_engine.client.chat.completions.create.side_effect = _status_error(
            InternalServerError, 500
        )

        with pytest.raises(EngineError) as exc_info:
            await openai_engine.complete(system_instructions="rubric", user_content="text")

        assert exc_info.value.status == 500
        assert "status 500" in exc_info.value.user_message

    @pytest.mark.asyncio
    async def test_connection_error_maps_to_engine_error(self, openai_engine: OpenAIEngine) -> None:
        openai_engine.client.chat.completions.create.side_effect = APIConnectionError(
            request=_REQUEST
        )

        with pytest.raises(EngineError):
            await openai_engine.complete(system_instructions="rubric", user_content="text")

    @pytest.mark.asyncio
    async def test_empty_content_is_malformed(self, openai_engine: OpenAIEngine) -> None:
        openai_engine.client.chat.completions.create.return_value = _completion("  ")

        with pytest.raises(MalformedResponseError):
            await openai_engine.complete(system_instructions="rubric", user_content="text")


def test_error_for_status_mapping() -> None:
    assert isinstance(error_for_status(429, "slow down", retry_after=3), RateLimitedError)
    assert isinstance(error_for_status(401, "bad key"), EngineAuthError)

    error = error_for_status(503, "unavailable")
    assert isinstance(error, EngineError)
    assert error.provider_message == "unavailable"
    assert error.status_code == 500


@pytest.mark.asyncio
async def test_get_analysis_engine_returns_stub_when_no_api_key() -> None:
    with patch("backend.app.llm.client.get_settings") as mock_get_settings:
        mock_get_settings.return_value.openai_api_key = None

        engine = await get_analysis_engine()

    assert isinstance(engine, DeterministicStubEngine)


@pytest.mark.asyncio
async def test_get_analysis_engine_returns_openai_when_api_key_present() -> None:
    with patch("backend.app.llm.client.get_settings") as mock_get_settings:
        settings = mock_get_settings.return_value
        settings.openai_api_key = SecretStr("test_key")
        settings.openai_model = "gpt-4o-mini"
        settings.engine_timeout_seconds = 5.0

        engine = await get_analysis_engine()

    assert isinstance(engine, OpenAIEngine)
    assert engine.model == "gpt-4o-mini"

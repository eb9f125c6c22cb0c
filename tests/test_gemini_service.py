"""Tests for the Gemini generation client adapter (no network)."""

import asyncio
import time
from types import SimpleNamespace

import httpx
import pytest
from google.genai import errors as genai_errors

from app.services.gemini_service import GeminiGenerationClient
from app.services.request_builder import SYSTEM_INSTRUCTION, build_generation_request
from app.utils.exceptions import (
    EmptyResponseError,
    GenerationServiceError,
    ServiceUnavailableError,
)


class FakeModels:
    def __init__(self, result=None, error=None, delay=0.0):
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = []

    def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


def _client_with(models: FakeModels, timeout: float = 5.0) -> GeminiGenerationClient:
    client = GeminiGenerationClient(api_key="test-key", model="gemini-test", timeout=timeout)
    client._client = SimpleNamespace(models=models)
    return client


@pytest.fixture
def request_():
    return build_generation_request(["Tofu", "Rice"])


def test_returns_stripped_text(request_):
    models = FakeModels(result=SimpleNamespace(text='  {"title": "Tofu Bowl"}\n'))
    text = asyncio.run(_client_with(models).invoke(request_))

    assert text == '{"title": "Tofu Bowl"}'
    call = models.calls[0]
    assert call["model"] == "gemini-test"
    assert "Tofu, Rice" in call["contents"]
    assert call["config"].system_instruction == SYSTEM_INSTRUCTION
    assert call["config"].response_mime_type == "application/json"


def test_falls_back_to_candidate_parts(request_):
    part = SimpleNamespace(text='{"title": "From parts"}')
    response = SimpleNamespace(
        text=None,
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))],
    )
    text = asyncio.run(_client_with(FakeModels(result=response)).invoke(request_))
    assert text == '{"title": "From parts"}'


def test_empty_text_raises_empty_response(request_):
    response = SimpleNamespace(text="   ", candidates=[])
    with pytest.raises(EmptyResponseError):
        asyncio.run(_client_with(FakeModels(result=response)).invoke(request_))


def test_api_error_maps_to_service_error(request_):
    error = genai_errors.ClientError(
        400, {"error": {"code": 400, "message": "Invalid argument", "status": "INVALID_ARGUMENT"}}
    )
    with pytest.raises(GenerationServiceError) as exc_info:
        asyncio.run(_client_with(FakeModels(error=error)).invoke(request_))
    assert "400" in str(exc_info.value)


def test_transport_error_maps_to_service_unavailable(request_):
    error = httpx.ConnectError("connection refused")
    with pytest.raises(ServiceUnavailableError):
        asyncio.run(_client_with(FakeModels(error=error)).invoke(request_))


def test_timeout_maps_to_service_unavailable(request_):
    models = FakeModels(result=SimpleNamespace(text="{}"), delay=0.5)
    with pytest.raises(ServiceUnavailableError):
        asyncio.run(_client_with(models, timeout=0.05).invoke(request_))


def test_missing_api_key_is_service_unavailable(request_):
    client = GeminiGenerationClient(api_key="", model="gemini-test")
    with pytest.raises(ServiceUnavailableError):
        asyncio.run(client.invoke(request_))


def test_check_connection():
    ok = _client_with(FakeModels(result=SimpleNamespace(text="hi")))
    down = _client_with(FakeModels(error=httpx.ConnectError("down")))

    assert asyncio.run(ok.check_connection()) is True
    assert asyncio.run(down.check_connection()) is False


def test_http_timeout_matches_generation_timeout(monkeypatch):
    created = []

    def fake_client(**kwargs):
        created.append(kwargs)
        return SimpleNamespace(models=FakeModels())

    monkeypatch.setattr("app.services.gemini_service.genai.Client", fake_client)
    client = GeminiGenerationClient(api_key="test-key", model="gemini-test", timeout=2.5)

    assert client.client is client.client
    assert len(created) == 1
    assert created[0]["api_key"] == "test-key"
    assert created[0]["http_options"].timeout == 2500

"""Generation gateway: remote call contract and offline fallback.

Remote faults are served by httpx.MockTransport; no test reaches the network.
"""

import asyncio
import json

import httpx
import pytest

from budowniczy.api_keys import GenerationSettings, api_keys_manager
from budowniczy.logic.gateway import (
    SOURCE_OFFLINE,
    SOURCE_ONLINE,
    GenerationGateway,
    generate_document,
)
from budowniczy.logic.offline import generate_offline_document


def _run(gateway, answers):
    return asyncio.run(gateway.generate_with_details(answers))


# =============================================================================
# SUCCESS
# =============================================================================

class TestRemoteSuccess:
    def test_response_text_passed_through(self, mock_gateway, answers):
        gateway = mock_gateway(lambda request: httpx.Response(200, json={"response": "## Analiza\nTreść"}))
        result = _run(gateway, answers)
        assert result.text == "## Analiza\nTreść"
        assert result.source == SOURCE_ONLINE
        assert result.error is None

    def test_request_shape(self, mock_gateway, answers):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"response": "ok"})

        _run(mock_gateway(handler), answers)
        # trailing slash on base_url is not doubled
        assert seen["url"] == "https://gen.example.test/functions/v1/analyze-needs"
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"] == {"surveyData": answers.to_dict()}

    def test_generate_returns_text_only(self, mock_gateway, answers):
        gateway = mock_gateway(lambda request: httpx.Response(200, json={"response": "tekst"}))
        assert asyncio.run(gateway.generate(answers)) == "tekst"


# =============================================================================
# FALLBACK
# =============================================================================

class TestOfflineFallback:
    @pytest.mark.parametrize("response", [
        httpx.Response(404, text="Not Found"),
        httpx.Response(500, json={"response": "should be ignored"}),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"unexpected": "shape"}),
        httpx.Response(200, json={"response": ""}),
        httpx.Response(200, json={"response": 42}),
        httpx.Response(200, json=["response"]),
        httpx.Response(200, json={"error": "API temporarily unavailable", "response": "x"}),
    ])
    def test_bad_answers_give_offline_document(self, mock_gateway, answers, response):
        result = _run(mock_gateway(lambda request: response), answers)
        assert result.source == SOURCE_OFFLINE
        assert result.text == generate_offline_document(answers)
        assert result.error

    def test_transport_error(self, mock_gateway, answers):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = _run(mock_gateway(handler), answers)
        assert result.source == SOURCE_OFFLINE
        assert result.text == generate_offline_document(answers)

    def test_timeout(self, mock_gateway, answers):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        assert _run(mock_gateway(handler), answers).source == SOURCE_OFFLINE

    @pytest.mark.parametrize("settings", [
        GenerationSettings(),
        GenerationSettings(base_url="https://gen.example.test"),
        GenerationSettings(api_key="test-key"),
    ])
    def test_missing_configuration_skips_network(self, answers, settings):
        def handler(request):
            raise AssertionError("network must not be used")

        gateway = GenerationGateway(settings=settings, transport=httpx.MockTransport(handler))
        result = _run(gateway, answers)
        assert result.source == SOURCE_OFFLINE
        assert result.error == "not configured"

    def test_sync_wrapper_without_env(self, answers):
        assert generate_document(answers) == generate_offline_document(answers)


# =============================================================================
# SETTINGS
# =============================================================================

class TestGenerationSettings:
    def test_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("BUDOWNICZY_GENERATION_URL", "https://abc.supabase.co")
        monkeypatch.setenv("BUDOWNICZY_GENERATION_KEY", "anon-key-123456")
        monkeypatch.setenv("BUDOWNICZY_GENERATION_TIMEOUT", "12.5")
        settings = api_keys_manager.get_generation_settings()
        assert settings.is_configured
        assert settings.endpoint == "https://abc.supabase.co/functions/v1/analyze-needs"
        assert settings.timeout_s == 12.5

    @pytest.mark.parametrize("raw", ["", "abc", "-3", "0"])
    def test_bad_timeout_uses_default(self, monkeypatch, raw):
        monkeypatch.setenv("BUDOWNICZY_GENERATION_TIMEOUT", raw)
        assert api_keys_manager.get_generation_settings().timeout_s == 30.0

    def test_empty_values_are_unconfigured(self, monkeypatch):
        monkeypatch.setenv("BUDOWNICZY_GENERATION_URL", "")
        monkeypatch.setenv("BUDOWNICZY_GENERATION_KEY", "")
        assert not api_keys_manager.get_generation_settings().is_configured

    def test_status_is_masked(self, monkeypatch):
        monkeypatch.setenv("BUDOWNICZY_GENERATION_KEY", "anon-key-123456")
        status = {s.provider: s for s in api_keys_manager.get_status()}
        assert status["generation"].configured
        assert status["generation"].masked_key == "anon...3456"
        assert not status["openai"].configured
        assert api_keys_manager.get_configured_providers() == ["generation"]

"""LLM router: model selection and provider routing (no real API calls)."""

from unittest.mock import MagicMock, patch

from budowniczy.llm_router import (
    DEFAULT_MODEL,
    get_model,
    is_configured,
    llm_call,
    provider_for,
)


class TestModelSelection:
    def test_default_model(self):
        assert get_model() == DEFAULT_MODEL

    def test_model_from_env(self, monkeypatch):
        monkeypatch.setenv("BUDOWNICZY_LLM_MODEL", "gemini-2.0-flash")
        assert get_model() == "gemini-2.0-flash"
        assert provider_for(get_model()) == "gemini"

    def test_provider_by_prefix(self):
        assert provider_for("gpt-4.1") == "openai"
        assert provider_for("gemini-2.0-flash") == "gemini"

    def test_is_configured_follows_provider_key(self, monkeypatch):
        assert not is_configured("gpt-4o")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        assert is_configured("gpt-4o")
        assert not is_configured("gemini-2.0-flash")


class TestRouting:
    def test_gpt_routes_to_openai(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        openai_call = MagicMock(return_value="ok")
        with patch.dict("budowniczy.llm_router._PROVIDER_CALLS", {"openai": openai_call}):
            result = llm_call("prompt", system_prompt="system", model="gpt-4o")
        assert result.text == "ok"
        assert result.error is None
        openai_call.assert_called_once_with("gpt-4o", "system", "prompt", 0.1, 3000)

    def test_gemini_routes_to_gemini(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "gm-test")
        gemini_call = MagicMock(return_value="ok")
        with patch.dict("budowniczy.llm_router._PROVIDER_CALLS", {"gemini": gemini_call}):
            llm_call("prompt", model="gemini-2.0-flash", temperature=0.5)
        gemini_call.assert_called_once_with("gemini-2.0-flash", None, "prompt", 0.5, 3000)

    def test_missing_key_is_reported_not_raised(self):
        result = llm_call("prompt", model="gpt-4o")
        assert result.text == ""
        assert result.error == "OPENAI_API_KEY not set"

    def test_provider_exception_is_captured(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        failing = MagicMock(side_effect=RuntimeError("rate limited"))
        with patch.dict("budowniczy.llm_router._PROVIDER_CALLS", {"openai": failing}):
            result = llm_call("prompt", model="gpt-4o")
        assert result.text == ""
        assert result.error == "rate limited"

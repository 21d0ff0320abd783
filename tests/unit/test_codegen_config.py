"""
Unit tests for configuration models and the LiteLLM helpers.
"""
import pytest
from pydantic import ValidationError

import ai_utils
from ai_utils import ReasoningLevel
from codegen_config import CodegenConfig, GenerationConfig, ModelConfig, SessionConfig


class TestSessionConfig:
    def test_explicit_key_wins(self, monkeypatch):
        monkeypatch.setenv("BROWSERBASE_API_KEY", "env-key")
        assert SessionConfig(api_key="explicit").resolve_api_key() == "explicit"

    def test_environment_key(self, monkeypatch):
        monkeypatch.setenv("BROWSERBASE_API_KEY", "env-key")
        assert SessionConfig().resolve_api_key() == "env-key"

    def test_custom_env_name(self, monkeypatch):
        monkeypatch.setenv("BB_KEY", "other")
        assert SessionConfig(api_key_env="BB_KEY").resolve_api_key() == "other"

    def test_missing_or_blank_key(self, monkeypatch):
        monkeypatch.setenv("BROWSERBASE_API_KEY", "")
        assert SessionConfig().resolve_api_key() is None

    def test_timeouts_must_be_positive(self):
        with pytest.raises(ValidationError):
            SessionConfig(connect_timeout_ms=0)


class TestCodegenConfig:
    def test_defaults(self):
        config = CodegenConfig()
        assert config.model.model_name == "gpt-4o"
        assert config.model.reasoning_level is ReasoningLevel.NONE
        assert config.generation.timeout_s == 60.0
        assert config.logging.debug_mode is False

    def test_presets(self):
        assert CodegenConfig.debug().logging.debug_mode is True
        production = CodegenConfig.production()
        assert production.session.connect_timeout_ms < SessionConfig().connect_timeout_ms
        assert production.generation.timeout_s < GenerationConfig().timeout_s

    def test_reasoning_level_from_string(self):
        assert ModelConfig(reasoning_level="low").reasoning_level is ReasoningLevel.LOW


class TestReasoningLevel:
    def test_coerce(self):
        assert ReasoningLevel.coerce(" HIGH ") is ReasoningLevel.HIGH

    def test_coerce_invalid(self):
        with pytest.raises(ValueError, match="Allowed values"):
            ReasoningLevel.coerce("expert")

    def test_none_disables_reasoning(self):
        assert ai_utils._normalize_reasoning_level(ReasoningLevel.NONE) is None
        assert ai_utils._normalize_reasoning_level("medium") == "medium"


class TestProviderHelpers:
    @pytest.mark.parametrize("model,provider", [
        ("gpt-4o", "openai"),
        ("gemini/gemini-2.5-flash", "gemini"),
        ("gemini-2.5-pro", "google"),
        ("anthropic/claude-sonnet-4", "anthropic"),
        ("groq/llama-3.1-8b-instant", "groq"),
        ("deepseek-chat", "deepseek"),
    ])
    def test_infer_provider(self, model, provider):
        assert ai_utils._infer_provider(model) == provider

    def test_missing_api_key_raises(self, monkeypatch):
        monkeypatch.delenv("GROQ_API_KEY", raising=False)
        with pytest.raises(RuntimeError, match="GROQ_API_KEY"):
            ai_utils._resolve_api_key("groq/llama-3.1-8b-instant", "groq")

    def test_override_api_key(self, monkeypatch):
        monkeypatch.setitem(ai_utils.MODEL_API_KEYS, "openai", "sk-override")
        assert ai_utils._resolve_api_key("gpt-4o", "openai") == "sk-override"

    def test_extract_text(self):
        response = {"choices": [{"message": {"content": "x();"}}]}
        assert ai_utils._extract_text_from_response(response) == "x();"
        assert ai_utils._extract_text_from_response({"choices": []}) == ""


class TestGenerateText:
    def test_completion_receives_deadline(self, monkeypatch, event_logger):
        captured = {}

        def fake_completion(**kwargs):
            captured.update(kwargs)
            return {
                "choices": [{"message": {"content": "await page.click('#a');"}}],
                "usage": {"prompt_tokens": 7, "completion_tokens": 3, "total_tokens": 10},
            }

        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setattr(ai_utils, "completion", fake_completion)
        monkeypatch.setattr(ai_utils, "completion_cost", lambda response: 0.5)

        text, cost, usage = ai_utils.generate_text_with_cost(
            "click a", system_prompt="sys", model="gpt-4o", timeout=5
        )

        assert text == "await page.click('#a');"
        assert cost == 0.5
        assert usage["total_tokens"] == 10
        assert captured["timeout"] == 5
        assert captured["messages"][0] == {"role": "system", "content": "sys"}
        assert "reasoning_effort" not in captured
        assert event_logger.history[-1].details["cost_usd"] == 0.5

    def test_unpriced_model_costs_nothing(self, monkeypatch, event_logger):
        def no_pricing(response):
            raise ValueError("model not mapped")

        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setattr(ai_utils, "completion", lambda **kwargs: {"choices": [{"message": {"content": "x();"}}]})
        monkeypatch.setattr(ai_utils, "completion_cost", no_pricing)

        result = ai_utils.complete("click", model="my-local-model")

        assert result.cost_usd == 0.0
        assert result.usage["total_tokens"] == 0

    def test_reasoning_effort_sent_to_supporting_provider(self, monkeypatch, event_logger):
        captured = {}

        def fake_completion(**kwargs):
            captured.update(kwargs)
            return {"choices": [{"message": {"content": "x();"}}], "usage": {}}

        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
        monkeypatch.setattr(ai_utils, "completion", fake_completion)
        monkeypatch.setattr(ai_utils, "completion_cost", lambda response: 0.0)

        result = ai_utils.complete("click", model="anthropic/claude-sonnet-4", reasoning_level="low")

        assert result.text == "x();"
        assert captured["reasoning_effort"] == "low"
        assert captured["messages"] == [{"role": "user", "content": "click"}]
        assert captured["timeout"] == ai_utils.DEFAULT_TIMEOUT_S

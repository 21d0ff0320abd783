"""
Unit tests for the code generator. The LiteLLM call is replaced with a stub.
"""
import pytest

import code_generator
from code_generator import CodeGenerator, build_user_prompt, strip_code_fence
from codegen_config import GenerationConfig, ModelConfig
from models.codegen_models import GenerationRequest
from utils.event_logger import EventType


@pytest.fixture
def completions(monkeypatch):
    """Replace the model call; returns captured calls and the mutable reply."""
    calls = []
    replies = {"text": 'await page.click("#signup");\n', "error": None}

    def fake_generate(**kwargs):
        calls.append(kwargs)
        if replies["error"] is not None:
            raise replies["error"]
        return replies["text"], 0.0012, {"input_tokens": 10, "output_tokens": 5, "total_tokens": 15}

    monkeypatch.setattr(code_generator, "generate_text_with_cost", fake_generate)
    return calls, replies


class TestStripCodeFence:
    def test_fenced_reply(self):
        assert strip_code_fence("```javascript\nawait page.click('#a');\n```") == "await page.click('#a');\n"

    def test_fence_without_language(self):
        assert strip_code_fence("```\nx();\ny();\n```\n") == "x();\ny();\n"

    def test_fence_body_is_kept_verbatim(self):
        assert strip_code_fence("```js\nx();```") == "x();"
        assert strip_code_fence("```js\n  a();\n\nb();\n```") == "  a();\n\nb();\n"

    def test_plain_reply_is_untouched(self):
        assert strip_code_fence("await page.fill('#q', 'shoes');") == "await page.fill('#q', 'shoes');"

    def test_inner_fence_is_untouched(self):
        text = "// see ```js``` docs\nx();"
        assert strip_code_fence(text) == text


class TestBuildUserPrompt:
    def test_includes_every_input(self):
        prompt = build_user_prompt(GenerationRequest(
            prompt="press sign up", existing_script="await page.goto('/');\n", sanitized_markup="<button/>"
        ))
        assert "press sign up" in prompt
        assert "await page.goto('/');" in prompt
        assert "<button/>" in prompt

    def test_empty_script_is_marked(self):
        prompt = build_user_prompt(GenerationRequest(prompt="go"))
        assert "(empty)" in prompt


class TestCodeGenerator:
    def test_returns_fragment(self, completions, event_logger):
        calls, _ = completions
        generator = CodeGenerator(ModelConfig(model_name="gpt-4o-mini"), GenerationConfig(timeout_s=12),
                                  event_logger=event_logger)

        fragment = generator.generate("press sign up", "", "<button id=\"signup\">Sign Up</button>")

        assert fragment == 'await page.click("#signup");\n'
        assert calls[0]["model"] == "gpt-4o-mini"
        assert calls[0]["timeout"] == 12
        assert "javascript" in calls[0]["system_prompt"]
        assert "press sign up" in calls[0]["prompt"]
        assert generator.total_cost_usd == pytest.approx(0.0012)
        assert any(e.event_type is EventType.GENERATION_SUCCESS for e in event_logger.history)

    def test_strips_code_fence(self, completions, event_logger):
        _, replies = completions
        replies["text"] = "```js\nawait page.click('#signup');\n```"

        assert CodeGenerator(event_logger=event_logger).generate("p", "", "") == "await page.click('#signup');\n"

    def test_keeps_fence_when_disabled(self, completions, event_logger):
        _, replies = completions
        replies["text"] = "```js\nx();\n```"
        generator = CodeGenerator(config=GenerationConfig(strip_code_fences=False), event_logger=event_logger)

        assert generator.generate("p", "", "") == "```js\nx();\n```"

    @pytest.mark.parametrize("text", ["", "   \n", "```\n```"])
    def test_empty_reply_is_none(self, completions, event_logger, text):
        _, replies = completions
        replies["text"] = text

        assert CodeGenerator(event_logger=event_logger).generate("p", "", "") is None
        assert any(e.event_type is EventType.GENERATION_FAILURE for e in event_logger.history)

    def test_model_error_is_none(self, completions, event_logger):
        _, replies = completions
        replies["error"] = RuntimeError("No API key configured for model 'gpt-4o'")

        assert CodeGenerator(event_logger=event_logger).generate("p", "", "") is None
        failure = [e for e in event_logger.history if e.event_type is EventType.GENERATION_FAILURE][0]
        assert failure.details["error_type"] == "RuntimeError"
        assert failure.details["model"] == "gpt-4o"

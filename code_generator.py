"""
Code generator: ask a chat model for the next Playwright statements.

The generator sees the user's instruction, the script written so far and
the sanitized page markup, and must answer with code only.
"""
from __future__ import annotations

import re
from typing import Optional

from ai_utils import generate_text_with_cost
from codegen_config import GenerationConfig, ModelConfig
from models.codegen_models import GenerationRequest
from utils.event_logger import EventLogger, get_event_logger

CODE_FENCE_RE = re.compile(r"^\s*```[\w+-]*[ \t]*\n(.*?)```\s*$", re.DOTALL)

SYSTEM_PROMPT = """
ROLE
You write Playwright ({language}) automation code, one step at a time.

INPUT
- instruction: what the user wants to do next on the page
- script: the Playwright code written so far (may be empty)
- html: the current page markup, reduced to tags and selector-relevant attributes

OUTPUT
- Only the new statements that perform the instruction, continuing the script.
- Assume a `page` object is already available. Do not repeat earlier statements,
  do not add imports, setup or teardown.
- Prefer selectors built from id, data-testid, name, aria-* or visible text found in the html.
- End the output with a newline. No explanations, no Markdown.
""".strip()


def build_user_prompt(request: GenerationRequest) -> str:
    script = request.existing_script if request.existing_script.strip() else "(empty)"
    return (
        f"instruction:\n{request.prompt}\n\n"
        f"script:\n{script}\n\n"
        f"html:\n{request.sanitized_markup}"
    )


def strip_code_fence(text: str) -> str:
    """Remove a Markdown code fence wrapping the whole reply."""
    match = CODE_FENCE_RE.match(text)
    if not match:
        return text
    return match.group(1)


class CodeGenerator:
    """
    Generation-service boundary used by the orchestrator.

    ``generate`` returns the code fragment, or None if the model failed or
    produced nothing.
    """

    def __init__(
        self,
        model: Optional[ModelConfig] = None,
        config: Optional[GenerationConfig] = None,
        event_logger: Optional[EventLogger] = None,
    ):
        self.model = model or ModelConfig()
        self.config = config or GenerationConfig()
        self.event_logger = event_logger or get_event_logger()
        self.total_cost_usd = 0.0

    def generate(self, prompt: str, existing_script: str, sanitized_markup: str) -> Optional[str]:
        request = GenerationRequest(
            prompt=prompt,
            existing_script=existing_script,
            sanitized_markup=sanitized_markup,
        )
        return self.generate_for(request)

    def generate_for(self, request: GenerationRequest) -> Optional[str]:
        """Run one generation request; errors are reported and turned into None."""
        model_name = self.model.model_name
        try:
            text, cost_usd, _usage = generate_text_with_cost(
                prompt=build_user_prompt(request),
                system_prompt=SYSTEM_PROMPT.format(language=self.config.language),
                model=model_name,
                reasoning_level=self.model.reasoning_level,
                timeout=self.config.timeout_s,
            )
        except Exception as e:
            self.event_logger.generation_failure(error=str(e), model=model_name, error_type=type(e).__name__)
            return None

        self.total_cost_usd += cost_usd or 0.0
        if self.config.strip_code_fences and text:
            text = strip_code_fence(text)

        if not text or not text.strip():
            self.event_logger.generation_failure(error="empty response", model=model_name)
            return None

        self.event_logger.generation_success(len(text), model=model_name)
        return text

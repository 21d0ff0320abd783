"""LiteLLM access for the code generator.

Everything model-related goes through ``complete``:
    * the provider and API key are inferred from the model id
    * the request always carries a deadline
    * cost and token usage are reported to the event logger
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence, Tuple, Union

from litellm import completion, completion_cost
from litellm.exceptions import UnsupportedParamsError

import litellm
litellm.suppress_debug_info = True


class ReasoningLevel(str, Enum):
    """Reasoning effort for providers that accept ``reasoning_effort``."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def coerce(cls, value: Union["ReasoningLevel", str]) -> "ReasoningLevel":
        """
        Return a `ReasoningLevel` for ``value``.

        Examples
        --------
        >>> ReasoningLevel.coerce("LOW")
        <ReasoningLevel.LOW: 'low'>
        >>> ReasoningLevel.coerce("Expert")
        Traceback (most recent call last):
            ...
        ValueError: Invalid reasoning level 'expert'. Allowed values: none, low, medium, high.
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        try:
            return cls(normalized)
        except ValueError as exc:
            allowed = ", ".join(level.value for level in cls)
            raise ValueError(
                f"Invalid reasoning level '{normalized}'. Allowed values: {allowed}."
            ) from exc


DEFAULT_MODEL = "gpt-4o"
DEFAULT_TIMEOUT_S = 60.0

# Keys by model id or provider name; checked before the environment.
MODEL_API_KEYS: dict[str, str] = {}


@dataclass(frozen=True)
class ProviderConfig:
    env_vars: Sequence[str]
    supports_reasoning_flag: bool = False


_PROVIDERS: dict[str, ProviderConfig] = {
    "openai": ProviderConfig(env_vars=("OPENAI_API_KEY",)),
    "google": ProviderConfig(("GOOGLE_API_KEY", "GEMINI_API_KEY"), supports_reasoning_flag=True),
    "gemini": ProviderConfig(("GOOGLE_API_KEY", "GEMINI_API_KEY"), supports_reasoning_flag=True),
    "groq": ProviderConfig(env_vars=("GROQ_API_KEY",)),
    "anthropic": ProviderConfig(("ANTHROPIC_API_KEY",), supports_reasoning_flag=True),
    "deepseek": ProviderConfig(("DEEPSEEK_API_KEY",), supports_reasoning_flag=True),
}

# Substring of an unprefixed model id -> provider
_MODEL_HINTS: Tuple[Tuple[str, str], ...] = (
    ("gemini", "google"),
    ("deepseek", "deepseek"),
    ("claude", "anthropic"),
)

# Models that rejected reasoning_effort at runtime
_MODELS_WITHOUT_REASONING: set[str] = set()


@dataclass
class CompletionResult:
    """Text of one completion plus what it cost."""

    text: str
    model: str
    cost_usd: float = 0.0
    usage: dict[str, Any] = field(default_factory=dict)

    def as_tuple(self) -> Tuple[str, float, dict[str, Any]]:
        return self.text, self.cost_usd, self.usage


def _infer_provider(model: str) -> str:
    if "/" in model:
        prefix = model.split("/", 1)[0].lower()
        if prefix in _PROVIDERS:
            return prefix
    lowered = model.lower()
    for hint, provider in _MODEL_HINTS:
        if hint in lowered:
            return provider
    return "openai"


def _resolve_api_key(model: str, provider: str) -> str:
    """Find the API key for ``model``; raises RuntimeError when there is none."""
    override = MODEL_API_KEYS.get(model) or MODEL_API_KEYS.get(provider)
    if override:
        return override

    config = _PROVIDERS.get(provider)
    env_names = config.env_vars if config else ()
    for env_name in env_names:
        value = os.getenv(env_name)
        if value:
            return value

    env_hint = ", ".join(env_names) or "<provider specific env var>"
    raise RuntimeError(
        f"No API key configured for model '{model}' (provider '{provider}'). "
        f"Set one in MODEL_API_KEYS or via environment variable(s): {env_hint}."
    )


def _normalize_reasoning_level(reasoning_level: Union[ReasoningLevel, str, None]) -> Optional[str]:
    """Provider value for ``reasoning_level``; None means do not send the flag."""
    if reasoning_level is None:
        return None
    level = ReasoningLevel.coerce(reasoning_level)
    return None if level is ReasoningLevel.NONE else level.value


def _extract_text_from_response(response: Any) -> str:
    choices = response.get("choices") or []
    if not choices:
        return ""
    content = (choices[0].get("message") or {}).get("content")
    if isinstance(content, list):
        # Some providers return content as a list of typed segments
        return "\n".join(
            part["text"] for part in content if isinstance(part, dict) and part.get("text")
        )
    return content if isinstance(content, str) else ""


def _extract_usage(response: Any, model: str) -> Tuple[float, dict[str, Any]]:
    usage = response.get("usage") or {}
    input_tokens = usage.get("prompt_tokens") or usage.get("input_tokens") or 0
    output_tokens = usage.get("completion_tokens") or usage.get("output_tokens") or 0

    try:
        cost_usd = completion_cost(response) or 0.0
    except Exception:
        cost_usd = 0.0

    return cost_usd, {
        "model": model,
        "input_tokens": input_tokens,
        "output_tokens": output_tokens,
        "total_tokens": usage.get("total_tokens") or (input_tokens + output_tokens),
    }


def complete(
    prompt: str,
    *,
    system_prompt: str = "",
    model: Optional[str] = None,
    reasoning_level: Union[ReasoningLevel, str, None] = None,
    timeout: Optional[float] = None,
) -> CompletionResult:
    """
    Run one chat completion.

    Args:
        prompt: User message
        system_prompt: Optional system message
        model: LiteLLM model id, defaults to DEFAULT_MODEL
        reasoning_level: Only sent to providers that support it
        timeout: Request deadline in seconds, defaults to DEFAULT_TIMEOUT_S

    Raises:
        RuntimeError: no API key is configured for the model's provider
        litellm exceptions: the provider call failed or timed out
    """
    model = model or DEFAULT_MODEL
    provider = _infer_provider(model)
    config = _PROVIDERS.get(provider, ProviderConfig(env_vars=()))

    messages = [{"role": "user", "content": prompt}]
    if system_prompt:
        messages.insert(0, {"role": "system", "content": system_prompt})

    kwargs: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "api_key": _resolve_api_key(model, provider),
        "timeout": timeout if timeout is not None else DEFAULT_TIMEOUT_S,
    }
    effort = _normalize_reasoning_level(reasoning_level)
    if effort and config.supports_reasoning_flag and model.lower() not in _MODELS_WITHOUT_REASONING:
        kwargs["reasoning_effort"] = effort

    try:
        response = completion(**kwargs)
    except UnsupportedParamsError:
        if "reasoning_effort" not in kwargs:
            raise
        del kwargs["reasoning_effort"]
        _MODELS_WITHOUT_REASONING.add(model.lower())
        response = completion(**kwargs)

    cost_usd, usage = _extract_usage(response, model)
    result = CompletionResult(_extract_text_from_response(response), model, cost_usd, usage)

    from utils.event_logger import get_event_logger
    get_event_logger().llm_cost(
        cost_usd=cost_usd,
        input_tokens=usage["input_tokens"],
        output_tokens=usage["output_tokens"],
        total_tokens=usage["total_tokens"],
        model=model,
    )
    return result


def generate_text_with_cost(
    prompt: str,
    system_prompt: str = "",
    model: Optional[str] = None,
    reasoning_level: Union[ReasoningLevel, str, None] = None,
    timeout: Optional[float] = None,
) -> Tuple[str, float, dict[str, Any]]:
    """``complete`` flattened to ``(text, cost_usd, usage)``."""
    return complete(
        prompt,
        system_prompt=system_prompt,
        model=model,
        reasoning_level=reasoning_level,
        timeout=timeout,
    ).as_tuple()

"""
Configuration models for the Browserbase codegen loop.

Settings are grouped into small Pydantic models instead of being passed
around as loose arguments.

Example:
    >>> from codegen_config import CodegenConfig, ModelConfig, SessionConfig
    >>> config = CodegenConfig(
    ...     model=ModelConfig(model_name="gpt-4o-mini"),
    ...     session=SessionConfig(connect_timeout_ms=15000)
    ... )
"""
from __future__ import annotations

import os
from typing import Optional
from pydantic import BaseModel, Field
from ai_utils import ReasoningLevel


class SessionConfig(BaseModel):
    """Remote browser session (Browserbase) configuration."""

    api_key_env: str = Field(
        default="BROWSERBASE_API_KEY",
        description="Environment variable holding the Browserbase API key"
    )
    api_key: Optional[str] = Field(
        default=None,
        description="Explicit API key; overrides the environment variable"
    )
    connect_url: str = Field(
        default="wss://connect.browserbase.com",
        description="CDP endpoint of the session provider"
    )
    session_url_prefix: str = Field(
        default="https://www.browserbase.com/sessions/",
        description="Dashboard URL prefix identifying an existing session"
    )
    connect_timeout_ms: int = Field(
        default=30000,
        ge=1,
        description="Deadline for connecting to the session"
    )
    navigation_timeout_ms: int = Field(
        default=30000,
        ge=1,
        description="Deadline for opening a target website in a fresh session"
    )

    def resolve_api_key(self) -> Optional[str]:
        """Return the configured API key, falling back to the environment."""
        if self.api_key:
            return self.api_key
        return os.getenv(self.api_key_env) or None


class ModelConfig(BaseModel):
    """AI model configuration for code generation."""

    model_name: str = Field(
        default="gpt-4o",
        description="Model used for code generation"
    )
    reasoning_level: ReasoningLevel = Field(
        default=ReasoningLevel.NONE,
        description="Reasoning level for providers that expose it"
    )

    class Config:
        arbitrary_types_allowed = True


class GenerationConfig(BaseModel):
    """Code generation behavior configuration."""

    timeout_s: float = Field(
        default=60.0,
        gt=0.0,
        description="Deadline for a single generation request"
    )
    strip_code_fences: bool = Field(
        default=True,
        description="Remove a surrounding Markdown code fence from replies"
    )
    language: str = Field(
        default="javascript",
        description="Playwright flavour of the generated statements"
    )


class DebugConfig(BaseModel):
    """Debugging and logging configuration."""

    debug_mode: bool = Field(
        default=False,
        description="Print every event to the console"
    )


class CodegenConfig(BaseModel):
    """
    Main configuration object for the codegen loop.

    Example:
        >>> config = CodegenConfig(
        ...     generation=GenerationConfig(timeout_s=30),
        ...     logging=DebugConfig(debug_mode=True)
        ... )
    """

    session: SessionConfig = Field(
        default_factory=SessionConfig,
        description="Remote session configuration"
    )
    model: ModelConfig = Field(
        default_factory=ModelConfig,
        description="AI model configuration"
    )
    generation: GenerationConfig = Field(
        default_factory=GenerationConfig,
        description="Code generation configuration"
    )
    logging: DebugConfig = Field(
        default_factory=DebugConfig,
        description="Debug and logging configuration"
    )

    @classmethod
    def debug(cls) -> CodegenConfig:
        """
        Create a configuration optimized for debugging.

        Returns:
            CodegenConfig with every event printed to the console
        """
        return cls(logging=DebugConfig(debug_mode=True))

    @classmethod
    def production(cls) -> CodegenConfig:
        """
        Create a configuration with tighter deadlines and quiet logging.

        Returns:
            CodegenConfig suited for unattended use
        """
        return cls(
            session=SessionConfig(connect_timeout_ms=15000, navigation_timeout_ms=20000),
            generation=GenerationConfig(timeout_s=45.0),
            logging=DebugConfig(debug_mode=False)
        )

"""
Structured error handling for the Browserbase codegen loop.

Provides custom exception types, error context and a small error recorder
used by the orchestrator for diagnostics.
"""
from __future__ import annotations

import traceback as tb
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
from datetime import datetime


@dataclass
class ErrorContext:
    """
    Context information about an error.

    Captures everything needed to understand and debug a failed cycle.
    """

    error_type: str
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    # Cycle context
    address: Optional[str] = None
    prompt: Optional[str] = None
    stage: Optional[str] = None

    # Stack trace
    traceback: Optional[str] = None

    # Additional metadata
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'error_type': self.error_type,
            'message': self.message,
            'timestamp': self.timestamp.isoformat(),
            'address': self.address,
            'prompt': self.prompt,
            'stage': self.stage,
            'traceback': self.traceback,
            'metadata': self.metadata
        }


class CodegenError(Exception):
    """
    Base exception for all codegen errors.

    All custom exceptions should inherit from this.
    """

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        **kwargs
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext(
            error_type=self.__class__.__name__,
            message=message
        )

        # Allow overriding context fields
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)


class InputValidationError(CodegenError):
    """A required input (address or prompt) was empty."""


class ConnectorError(CodegenError):
    """The remote browser session could not be reached or read."""


class SessionUnreachableError(ConnectorError):
    """The session provider refused or dropped the connection."""


class ConnectTimeoutError(ConnectorError):
    """Connecting to the session exceeded its deadline."""


class MissingCredentialError(ConnectorError):
    """The session provider API key is not configured."""


class GenerationError(CodegenError):
    """The code-generation model failed or returned nothing."""


@dataclass
class ErrorHandler:
    """
    Records errors raised during codegen cycles.

    Nothing is retried here; a retry is always a fresh user-triggered cycle.
    """

    max_history: int = 100
    errors: List[ErrorContext] = field(default_factory=list)

    def handle_error(
        self,
        error: Exception,
        stage: Optional[str] = None,
        cycle_context: Optional[Dict[str, Any]] = None
    ) -> ErrorContext:
        """
        Record an error and return its context.

        Args:
            error: The exception that occurred
            stage: Interaction state the cycle was in when it failed
            cycle_context: Address/prompt of the failed cycle

        Returns:
            ErrorContext describing the failure
        """
        if isinstance(error, CodegenError):
            context = error.context
        else:
            context = ErrorContext(
                error_type=type(error).__name__,
                message=str(error)
            )

        if context.traceback is None and error.__traceback__ is not None:
            context.traceback = "".join(
                tb.format_exception(type(error), error, error.__traceback__)
            )

        if stage:
            context.stage = stage
        if cycle_context:
            context.address = cycle_context.get('address', context.address)
            context.prompt = cycle_context.get('prompt', context.prompt)

        self.errors.append(context)
        if len(self.errors) > self.max_history:
            self.errors.pop(0)
        return context

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of all errors."""
        error_counts = {}
        for error in self.errors:
            error_type = error.error_type
            error_counts[error_type] = error_counts.get(error_type, 0) + 1

        return {
            'total_errors': len(self.errors),
            'error_counts': error_counts,
            'recent_errors': [e.to_dict() for e in self.errors[-5:]]
        }

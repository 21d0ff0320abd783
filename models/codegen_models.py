"""Data models shared by the session connector, generator and orchestrator."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class InteractionState(str, Enum):
    """Phase of the single in-flight codegen cycle."""
    READY = "ready"
    CONNECTING = "connecting"
    GENERATING = "generating"


class NoticeKind(str, Enum):
    """User-visible notices raised by a cycle."""
    EMPTY_ADDRESS = "empty_address"
    EMPTY_PROMPT = "empty_prompt"
    CONNECTOR_FAILED = "connector_failed"
    MISSING_CREDENTIAL = "missing_credential"
    GENERATION_FAILED = "generation_failed"
    UNEXPECTED_ERROR = "unexpected_error"


class CycleStatus(str, Enum):
    SUCCESS = "success"
    REJECTED = "rejected"
    BUSY = "busy"
    CONNECTOR_FAILED = "connector_failed"
    GENERATION_FAILED = "generation_failed"
    ERROR = "error"


class SessionHandle(BaseModel):
    """Markup captured from one remote browser session."""

    session_id: str = Field(description="Opaque identifier of the remote session")
    page_markup: str = Field(description="Page HTML at capture time")
    page_url: Optional[str] = Field(default=None, description="URL of the captured page, when known")

    class Config:
        frozen = True


class GenerationRequest(BaseModel):
    """Inputs of one code-generation call."""

    prompt: str = Field(description="Natural-language instruction from the user")
    existing_script: str = Field(default="", description="Script buffer contents when the request was built")
    sanitized_markup: str = Field(default="", description="Reduced page markup")

    class Config:
        frozen = True


@dataclass(frozen=True)
class Notice:
    kind: NoticeKind
    title: str
    description: str


# Title/description pairs shown to the user for each notice kind
NOTICES: Dict[NoticeKind, Notice] = {
    NoticeKind.EMPTY_ADDRESS: Notice(
        NoticeKind.EMPTY_ADDRESS,
        "Empty Browserbase URL",
        "Please enter a Browserbase URL",
    ),
    NoticeKind.EMPTY_PROMPT: Notice(
        NoticeKind.EMPTY_PROMPT,
        "Empty prompt",
        "Please write a prompt and hit execute",
    ),
    NoticeKind.CONNECTOR_FAILED: Notice(
        NoticeKind.CONNECTOR_FAILED,
        "Failed to connect to Browserbase page",
        "The session could not be reached. Check the URL and try again.",
    ),
    NoticeKind.MISSING_CREDENTIAL: Notice(
        NoticeKind.MISSING_CREDENTIAL,
        "Failed to connect to Browserbase page",
        'Ensure you have added your "BROWSERBASE_API_KEY" to your environment configuration (.env file)',
    ),
    NoticeKind.GENERATION_FAILED: Notice(
        NoticeKind.GENERATION_FAILED,
        "Codegen error 😢",
        "Failed to generate code.",
    ),
    NoticeKind.UNEXPECTED_ERROR: Notice(
        NoticeKind.UNEXPECTED_ERROR,
        "Error",
        "Failed to execute the action (see logs)",
    ),
}


class ScriptBuffer:
    """
    User-visible accumulated automation script.

    Generation only ever appends; user edits replace the whole text. The
    orchestrator keeps a reference to the buffer, so an append made when a
    cycle completes lands on whatever the user has typed in the meantime.
    """

    def __init__(self, text: str = ""):
        self._text = text

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        """Replace the buffer with a user edit."""
        self._text = text or ""

    def append(self, fragment: str) -> str:
        self._text = self._text + fragment
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"ScriptBuffer({len(self._text)} chars)"


@dataclass
class CycleResult:
    """
    Outcome of one ``execute`` call.

    Attributes:
        status: How the cycle ended
        fragment: Code appended to the script (success only)
        notice: Notice shown to the user, if any
        metadata: Extra diagnostics (session id, markup sizes, ...)
    """
    status: CycleStatus
    fragment: Optional[str] = None
    notice: Optional[Notice] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.status is CycleStatus.SUCCESS

    def __bool__(self) -> bool:
        return self.success

    def __repr__(self) -> str:
        status = "✅" if self.success else "❌"
        return f"CycleResult({status}, status='{self.status.value}')"

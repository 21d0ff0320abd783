"""
Generation orchestrator: the ready → connecting → generating → ready loop.

One orchestrator owns one interaction state and one script buffer. Every
transition and every user-visible notice is emitted as an event, so a
front end only has to subscribe to the event logger to render progress.

Example:
    >>> orchestrator = CodegenOrchestrator(SessionConnector(), CodeGenerator())
    >>> result = orchestrator.execute("click the sign up button",
    ...                               "https://www.browserbase.com/sessions/abc123xyz")
    >>> print(orchestrator.script.text)
"""
from __future__ import annotations

import re
from typing import Callable, Optional, Protocol

from error_handling import ErrorHandler, GenerationError, InputValidationError, MissingCredentialError
from markup_sanitizer import sanitize_markup
from models.codegen_models import (
    NOTICES,
    CycleResult,
    CycleStatus,
    InteractionState,
    Notice,
    NoticeKind,
    ScriptBuffer,
    SessionHandle,
)
from utils.event_logger import EventLogger, get_event_logger

BARE_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://$", re.IGNORECASE)


def is_blank_address(address: Optional[str]) -> bool:
    """True for an empty address or one that is only a scheme such as ``https://``."""
    address = (address or "").strip()
    return not address or bool(BARE_SCHEME_RE.match(address))


class Connector(Protocol):
    def connect(self, address: str) -> Optional[SessionHandle]: ...


class Generator(Protocol):
    def generate(self, prompt: str, existing_script: str, sanitized_markup: str) -> Optional[str]: ...


class CodegenOrchestrator:
    """
    Drives one codegen cycle per ``execute`` call.

    Only a trigger received in ``ready`` is accepted. Every exit path, including
    unexpected exceptions, returns the state to ``ready``.
    """

    def __init__(
        self,
        connector: Connector,
        generator: Generator,
        script: Optional[ScriptBuffer] = None,
        event_logger: Optional[EventLogger] = None,
        error_handler: Optional[ErrorHandler] = None,
        sanitizer: Callable[[str], str] = sanitize_markup,
    ):
        self.connector = connector
        self.generator = generator
        self.script = script if script is not None else ScriptBuffer()
        self.event_logger = event_logger or get_event_logger()
        self.error_handler = error_handler or ErrorHandler()
        self.sanitizer = sanitizer
        self._state = InteractionState.READY

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def is_input_enabled(self) -> bool:
        """Address and prompt inputs are only editable while ready."""
        return self._state is InteractionState.READY

    def edit_script(self, text: str) -> None:
        """Apply a direct user edit to the script buffer (allowed in any state)."""
        self.script.set_text(text)

    def execute(self, prompt: str, address: str) -> CycleResult:
        """
        Run one cycle for ``prompt`` against the session at ``address``.

        Args:
            prompt: Natural-language instruction
            address: Browserbase session URL/id or website URL

        Returns:
            CycleResult describing how the cycle ended
        """
        if self._state is not InteractionState.READY:
            self.event_logger.system_debug(
                f"Ignoring trigger while {self._state.value}", state=self._state.value
            )
            return CycleResult(CycleStatus.BUSY)

        if is_blank_address(address):
            return self._reject(NoticeKind.EMPTY_ADDRESS, "Address is empty", address, prompt)
        if not (prompt or "").strip():
            return self._reject(NoticeKind.EMPTY_PROMPT, "Prompt is empty", address, prompt)

        cycle_context = {"address": address, "prompt": prompt}
        self.event_logger.cycle_start(prompt, address)
        result = CycleResult(CycleStatus.ERROR)
        try:
            result = self._run_cycle(prompt, address, cycle_context)
        except Exception as e:
            context = self.error_handler.handle_error(e, stage=self._state.value, cycle_context=cycle_context)
            self.event_logger.system_error(
                "Codegen cycle failed", error=e, stage=context.stage, traceback=context.traceback
            )
            result = CycleResult(
                CycleStatus.ERROR,
                notice=self._notify(NoticeKind.UNEXPECTED_ERROR),
                metadata={"error": str(e), "error_type": type(e).__name__},
            )
        finally:
            self._set_state(InteractionState.READY)
            self.event_logger.cycle_complete(result.success, result.status.value)
        return result

    def _run_cycle(self, prompt: str, address: str, cycle_context: dict) -> CycleResult:
        self._set_state(InteractionState.CONNECTING)
        handle = self.connector.connect(address)
        if handle is None:
            failure = getattr(self.connector, "last_failure", None)
            if failure is not None:
                self.error_handler.handle_error(failure, stage=self._state.value, cycle_context=cycle_context)
            # The provider only reports absence; treat an unknown reason as a credential problem
            if failure is None or isinstance(failure, MissingCredentialError):
                kind = NoticeKind.MISSING_CREDENTIAL
            else:
                kind = NoticeKind.CONNECTOR_FAILED
            return CycleResult(
                CycleStatus.CONNECTOR_FAILED,
                notice=self._notify(kind),
                metadata={"error_type": type(failure).__name__ if failure else None},
            )

        self._set_state(InteractionState.GENERATING)
        sanitized = self.sanitizer(handle.page_markup)
        self.event_logger.markup_sanitized(len(handle.page_markup), len(sanitized), session_id=handle.session_id)

        fragment = self.generator.generate(prompt, self.script.text, sanitized)
        if not fragment:
            self.error_handler.handle_error(
                GenerationError("Generation returned no code"),
                stage=self._state.value,
                cycle_context=cycle_context,
            )
            return CycleResult(CycleStatus.GENERATION_FAILED, notice=self._notify(NoticeKind.GENERATION_FAILED))

        # Append to the buffer as it is now; the user may have edited it meanwhile
        script_text = self.script.append(fragment)
        self.event_logger.script_appended(fragment, len(script_text))
        return CycleResult(
            CycleStatus.SUCCESS,
            fragment=fragment,
            metadata={
                "session_id": handle.session_id,
                "markup_length": len(handle.page_markup),
                "sanitized_length": len(sanitized),
            },
        )

    def _reject(self, kind: NoticeKind, message: str, address: str, prompt: str) -> CycleResult:
        self.error_handler.handle_error(
            InputValidationError(message, address=address, prompt=prompt),
            stage=self._state.value,
        )
        return CycleResult(CycleStatus.REJECTED, notice=self._notify(kind))

    def _set_state(self, state: InteractionState) -> None:
        previous = self._state
        if previous is state:
            return
        self._state = state
        self.event_logger.state_change(previous.value, state.value)

    def _notify(self, kind: NoticeKind) -> Notice:
        notice = NOTICES[kind]
        self.event_logger.notice(kind.value, notice.title, notice.description)
        return notice

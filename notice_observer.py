"""
Terminal rendering of orchestrator events.

Progress for ``connecting`` / ``generating`` is a single spinner whose text
is updated in place; it is stopped as soon as the state returns to
``ready``. Notices are printed once each.
"""
from __future__ import annotations

from typing import Any, Callable, Optional

from rich import print as rprint
from yaspin import yaspin

from models.codegen_models import InteractionState
from utils.event_logger import CodegenEvent, EventType

PROGRESS_TEXT = {
    InteractionState.CONNECTING.value: "Connecting to session...",
    InteractionState.GENERATING.value: "Generating code...",
}

NOTICE_STYLE = {
    "empty_address": "yellow",
    "empty_prompt": "yellow",
    "connector_failed": "red",
    "missing_credential": "red",
    "generation_failed": "red",
    "unexpected_error": "red",
}


def _default_spinner(text: str) -> Any:
    return yaspin(text=text, color="cyan")


class NoticeObserver:
    """Event-logger callback that shows progress and notices."""

    def __init__(
        self,
        spinner_factory: Callable[[str], Any] = _default_spinner,
        printer: Callable[..., None] = rprint,
    ):
        self.spinner_factory = spinner_factory
        self.printer = printer
        self._spinner: Optional[Any] = None

    @property
    def progress_active(self) -> bool:
        return self._spinner is not None

    def __call__(self, event: CodegenEvent) -> None:
        if event.event_type is EventType.STATE_CHANGE:
            self._on_state(event.details.get("current"))
        elif event.event_type is EventType.NOTICE:
            self._show_notice(event.details)

    def _on_state(self, state: Optional[str]) -> None:
        text = PROGRESS_TEXT.get(state)
        if text is None:
            self.dismiss()
            return
        if self._spinner is not None:
            self._spinner.text = text
        else:
            self._spinner = self.spinner_factory(text)
            self._spinner.start()

    def dismiss(self) -> None:
        if self._spinner is not None:
            self._spinner.stop()
            self._spinner = None

    def _show_notice(self, details: dict) -> None:
        style = NOTICE_STYLE.get(details.get("kind"), "white")
        line = f"[bold {style}]{details.get('title')}[/bold {style}] {details.get('description')}"
        if self._spinner is not None:
            with self._spinner.hidden():
                self.printer(line)
        else:
            self.printer(line)

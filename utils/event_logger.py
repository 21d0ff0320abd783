"""
Simple, robust event-driven logging for the codegen loop.

Design principles:
- Non-blocking: logging errors never break a cycle
- Simple: minimal API surface
- Flexible: presentation layers subscribe through callbacks
"""
from enum import Enum
from typing import Any, Dict, List, Optional, Callable
from dataclasses import dataclass, field
from datetime import datetime
import time


class EventType(str, Enum):
    """All event types that can be logged"""
    # Cycle events
    CYCLE_START = "cycle_start"
    CYCLE_COMPLETE = "cycle_complete"
    STATE_CHANGE = "state_change"

    # User-visible notices
    NOTICE = "notice"

    # Session events
    SESSION_CONNECTED = "session_connected"
    SESSION_FAILURE = "session_failure"

    # Markup events
    MARKUP_SANITIZED = "markup_sanitized"

    # Generation events
    GENERATION_SUCCESS = "generation_success"
    GENERATION_FAILURE = "generation_failure"
    SCRIPT_APPENDED = "script_appended"

    # System events
    SYSTEM_INFO = "system_info"
    SYSTEM_WARNING = "system_warning"
    SYSTEM_ERROR = "system_error"
    SYSTEM_DEBUG = "system_debug"

    # Performance/cost events
    LLM_COST = "llm_cost"  # Token usage and cost tracking


@dataclass
class CodegenEvent:
    """Structured event data"""
    event_type: EventType
    message: str
    timestamp: float = field(default_factory=time.time)
    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, SUCCESS
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "event_type": self.event_type.value,
            "message": self.message,
            "timestamp": self.timestamp,
            "timestamp_iso": datetime.fromtimestamp(self.timestamp).isoformat(),
            "level": self.level,
            "details": self.details
        }


class EventLogger:
    """
    Simple, robust event logger.

    In debug mode: prints directly to console
    In normal mode: only calls callbacks (no prints)
    """

    def __init__(self, debug_mode: bool = True, max_history: int = 1000):
        self.debug_mode = debug_mode
        self._callbacks: List[Callable[[CodegenEvent], None]] = []
        self._event_history: List[CodegenEvent] = []
        self._max_history = max_history

    def register_callback(self, callback: Callable[[CodegenEvent], None]) -> None:
        """Register a callback for all events"""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[CodegenEvent], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    @property
    def history(self) -> List[CodegenEvent]:
        return list(self._event_history)

    def _safe_emit(self, event: CodegenEvent) -> None:
        """Safely emit an event - never raises exceptions"""
        self._event_history.append(event)
        if len(self._event_history) > self._max_history:
            self._event_history.pop(0)

        if self.debug_mode:
            try:
                self._print_event(event)
            except Exception:
                pass  # Ignore print errors

        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception:
                pass  # Ignore callback errors

    def _print_event(self, event: CodegenEvent) -> None:
        """Print event in debug mode"""
        level_emoji = {
            "DEBUG": "🔍",
            "INFO": "ℹ️",
            "WARNING": "⚠️",
            "ERROR": "❌",
            "SUCCESS": "✅"
        }
        emoji = level_emoji.get(event.level, "•")
        print(f"{emoji} {event.message}")

        # Print important details
        for key, value in event.details.items():
            if value is not None and isinstance(value, (str, int, float, bool)) and key != "traceback":
                print(f"   {key}: {value}")

    def emit(self, event_type: EventType, message: str, level: str = "INFO", **details) -> None:
        """Emit an event - safe wrapper that never raises"""
        try:
            event = CodegenEvent(
                event_type=event_type,
                message=message,
                level=level,
                details=details
            )
            self._safe_emit(event)
        except Exception:
            # Last resort: if even creating the event fails, try to print in debug mode
            if self.debug_mode:
                print(f"⚠️ Event logger error: {message}")

    # Convenience methods
    def cycle_start(self, prompt: str, address: str, **details):
        self.emit(EventType.CYCLE_START, f"Starting codegen cycle: {prompt}", "INFO",
                  prompt=prompt, address=address, **details)

    def cycle_complete(self, success: bool, status: str, **details):
        level = "SUCCESS" if success else "WARNING"
        self.emit(EventType.CYCLE_COMPLETE, f"Codegen cycle finished ({status})", level,
                  success=success, status=status, **details)

    def state_change(self, previous: str, current: str, **details):
        self.emit(EventType.STATE_CHANGE, f"State {previous} → {current}", "DEBUG",
                  previous=previous, current=current, **details)

    def notice(self, kind: str, title: str, description: str, **details):
        level = "ERROR" if kind in ("connector_failed", "missing_credential",
                                    "generation_failed", "unexpected_error") else "WARNING"
        self.emit(EventType.NOTICE, f"{title}: {description}", level,
                  kind=kind, title=title, description=description, **details)

    def session_connected(self, session_id: str, markup_length: int, url: str = None, **details):
        msg = f"Connected to session {session_id}"
        if url:
            msg += f" ({url})"
        self.emit(EventType.SESSION_CONNECTED, msg, "INFO",
                  session_id=session_id, markup_length=markup_length, url=url, **details)

    def session_failure(self, address: str, error: str = None, **details):
        msg = f"Failed to connect to session: {address}"
        if error:
            msg += f" - {error}"
        self.emit(EventType.SESSION_FAILURE, msg, "ERROR", address=address, error=error, **details)

    def markup_sanitized(self, raw_length: int, sanitized_length: int, **details):
        self.emit(EventType.MARKUP_SANITIZED,
                  f"Sanitized markup {raw_length} → {sanitized_length} chars", "DEBUG",
                  raw_length=raw_length, sanitized_length=sanitized_length, **details)

    def generation_success(self, fragment_length: int, model: str = None, **details):
        self.emit(EventType.GENERATION_SUCCESS, f"Generated {fragment_length} chars of code", "SUCCESS",
                  fragment_length=fragment_length, model=model, **details)

    def generation_failure(self, error: str = None, model: str = None, **details):
        msg = "Code generation failed"
        if error:
            msg += f" - {error}"
        self.emit(EventType.GENERATION_FAILURE, msg, "ERROR", error=error, model=model, **details)

    def script_appended(self, fragment: str, script_length: int, **details):
        self.emit(EventType.SCRIPT_APPENDED, f"Appended {len(fragment)} chars to script", "INFO",
                  fragment=fragment, script_length=script_length, **details)

    def system_info(self, message: str, **details):
        self.emit(EventType.SYSTEM_INFO, message, "INFO", **details)

    def system_warning(self, message: str, **details):
        self.emit(EventType.SYSTEM_WARNING, message, "WARNING", **details)

    def system_error(self, message: str, error: Exception = None, **details):
        msg = message
        if error:
            msg += f" - {str(error)}"
        self.emit(EventType.SYSTEM_ERROR, msg, "ERROR", error=str(error) if error else None, **details)

    def system_debug(self, message: str, **details):
        self.emit(EventType.SYSTEM_DEBUG, message, "DEBUG", **details)

    def llm_cost(self, cost_usd: float, input_tokens: int, output_tokens: int, total_tokens: int, model: str = None, **details):
        msg = f"Prompt Cost: {cost_usd} USD, Input Tokens: {input_tokens}, Output Tokens: {output_tokens}, Total Tokens: {total_tokens}"
        if model:
            msg += f" (Model: {model})"
        self.emit(EventType.LLM_COST, msg, "DEBUG", cost_usd=cost_usd, input_tokens=input_tokens,
                  output_tokens=output_tokens, total_tokens=total_tokens, model=model, **details)


# Global instance
_global_event_logger: Optional[EventLogger] = None

def get_event_logger() -> EventLogger:
    """Get the global event logger instance"""
    global _global_event_logger
    if _global_event_logger is None:
        _global_event_logger = EventLogger(debug_mode=False)
    return _global_event_logger

def set_event_logger(logger: EventLogger) -> None:
    """Set the global event logger instance"""
    global _global_event_logger
    _global_event_logger = logger

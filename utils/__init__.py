"""
Utility modules for the codegen loop.
"""
from .event_logger import EventLogger, EventType, CodegenEvent, get_event_logger, set_event_logger

__all__ = ["EventLogger", "EventType", "CodegenEvent", "get_event_logger", "set_event_logger"]

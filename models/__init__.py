"""
Data models for the codegen loop.
"""
from .codegen_models import (
    InteractionState,
    NoticeKind,
    CycleStatus,
    SessionHandle,
    GenerationRequest,
    Notice,
    NOTICES,
    ScriptBuffer,
    CycleResult,
)

__all__ = [
    "InteractionState",
    "NoticeKind",
    "CycleStatus",
    "SessionHandle",
    "GenerationRequest",
    "Notice",
    "NOTICES",
    "ScriptBuffer",
    "CycleResult",
]

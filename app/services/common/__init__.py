"""
Common type definitions shared across the application.

This package contains the session, record and webhook message models
used by the messaging and workflow services.
"""

from app.services.common.types import (
    CompletionRecord,
    FeedbackStep,
    InboundMessage,
    MessageKind,
    MessageStatus,
    Session,
    SessionStats,
    TemplateKey,
)

__all__ = [
    "CompletionRecord",
    "FeedbackStep",
    "InboundMessage",
    "MessageKind",
    "MessageStatus",
    "Session",
    "SessionStats",
    "TemplateKey",
]

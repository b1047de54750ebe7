"""
WhatsApp messaging service for the Feedback Bot application.

This package handles sending replies via the WhatsApp API, keeping
per-user conversation sessions and sweeping the expired ones.
"""

from app.services.messaging.client import MessagingClient, WhatsApp, WhatsAppAPIError
from app.services.messaging.records import CompletionSink, LoggingCompletionSink
from app.services.messaging.session_store import SessionStore
from app.services.messaging.sweeper import SessionSweeper

__all__ = [
    "MessagingClient",
    "WhatsApp",
    "WhatsAppAPIError",
    "LoggingCompletionSink",
    "CompletionSink",
    "SessionStore",
    "SessionSweeper",
]

"""
Workflow management for the WhatsApp feedback conversation.

This package holds the transition table of the feedback flow, one handler
per step, and the dispatcher that routes each inbound message to them.
"""

from app.services.workflow.dispatcher import ConversationDispatcher
from app.services.workflow.transitions import Transition, next_transition

__all__ = ["ConversationDispatcher", "Transition", "next_transition"]

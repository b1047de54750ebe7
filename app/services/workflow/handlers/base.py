from abc import ABC, abstractmethod
from typing import Dict, Any, Tuple
from app.constants import get_template
from app.logging import setup_logger
from app.services.common.types import FeedbackStep, InboundMessage
from app.services.messaging.client import MessagingClient
from app.services.messaging.session_store import SessionStore
from app.services.workflow.transitions import Transition, next_transition


class BaseHandler(ABC):
    """Base class for the per-step handlers of the feedback flow"""

    step: FeedbackStep

    def __init__(self, client: MessagingClient, store: SessionStore):
        self.client = client
        self.store = store
        self.logger = setup_logger(__name__)

    async def handle(self, message: InboundMessage) -> Transition:
        """Handle a message from a user whose session is at this handler's step"""
        user_key = message.from_
        transition = next_transition(self.step, message.kind)

        if not transition.accepted:
            self.logger.info(
                f"Expected different input at step {int(self.step)} from {user_key}, "
                f"got {message.type}"
            )
            await self.send_message(user_key, get_template(transition.template))
            return transition

        args = self.accept(user_key, message)
        await self.send_message(user_key, get_template(transition.template, *args))
        return transition

    @abstractmethod
    def accept(self, user_key: str, message: InboundMessage) -> Tuple[str, ...]:
        """Store the user's input, move the session on and return template arguments"""
        pass

    async def send_message(self, user_key: str, message: str) -> Dict[str, Any]:
        """Send a message to a user"""
        return await self.client.send_message(message, user_key)

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Union

from app.constants import get_template
from app.logging import setup_logger, log_exception
from app.services.common.types import FeedbackStep, InboundMessage, MessageStatus
from app.services.messaging.client import MessagingClient
from app.services.messaging.session_store import SessionStore
from app.services.workflow.handlers.base import BaseHandler
from app.services.workflow.handlers.feedback import FeedbackHandler
from app.services.workflow.handlers.image import ImageHandler
from app.services.workflow.handlers.name import NameHandler
from app.services.workflow.transitions import GREETING, Transition


class ConversationDispatcher:
    """
    Drives one step of the feedback flow per inbound WhatsApp message.

    Messages for the same user are handled one at a time; messages for
    different users may interleave freely.
    """

    def __init__(
        self,
        client: MessagingClient,
        store: SessionStore,
        trigger_phrase: str = "hi",
    ):
        self.logger = setup_logger(__name__)
        self.client = client
        self.store = store
        self.trigger_phrase = trigger_phrase.strip().lower()

        self.handlers: Dict[FeedbackStep, BaseHandler] = {
            handler.step: handler
            for handler in (
                NameHandler(client, store),
                FeedbackHandler(client, store),
                ImageHandler(client, store),
            )
        }

        # user_key -> [lock, number of callers holding or waiting for it]
        self._locks: Dict[str, List[Any]] = {}

    async def handle_message(
        self, message: Union[InboundMessage, Dict[str, Any]]
    ) -> Transition:
        """
        Handle a single inbound message.

        If handling fails the user is sent the system error template on a
        best-effort basis and the original exception is re-raised.
        """
        if isinstance(message, dict):
            user_key = message.get("from")
        else:
            user_key = getattr(message, "from_", None)

        async with self._user_lock(user_key):
            try:
                if not isinstance(message, InboundMessage):
                    message = InboundMessage.model_validate(message)
                self.logger.info(
                    f"Processing {message.type} message from {message.from_}"
                )
                return await self._dispatch(message)
            except Exception as e:
                log_exception(self.logger, "Error handling incoming message", e)
                await self._notify_system_error(user_key)
                raise

    def handle_status(self, status: Union[MessageStatus, Dict[str, Any]]) -> None:
        """Record a delivery/read receipt; receipts never change session state."""
        if isinstance(status, dict):
            status = MessageStatus.model_validate(status)
        self.logger.info(f"Message status update: {status.to_dict()}")

    async def _dispatch(self, message: InboundMessage) -> Transition:
        user_key = message.from_

        if self._is_trigger(message):
            self.logger.info(f"Starting feedback collection for {user_key}")
            self.store.create(user_key)
            await self.send_message(user_key, get_template(GREETING.template))
            return GREETING

        session = self.store.get(user_key)
        handler = self.handlers.get(session.step)

        if handler is None:
            self.logger.warning(
                f"Invalid step {int(session.step)} for {user_key}, resetting"
            )
            self.store.reset(user_key)
            await self.send_message(user_key, get_template(GREETING.template))
            return GREETING

        return await handler.handle(message)

    def _is_trigger(self, message: InboundMessage) -> bool:
        return (
            message.kind == "text"
            and message.text_body.strip().lower() == self.trigger_phrase
        )

    async def _notify_system_error(self, user_key: Optional[str]) -> None:
        if not user_key:
            return
        try:
            await self.send_message(user_key, get_template("system_error"))
        except Exception as send_error:
            self.logger.error(f"Failed to send error message to {user_key}: {send_error}")

    @asynccontextmanager
    async def _user_lock(self, user_key: Optional[str]) -> AsyncIterator[None]:
        key = user_key or ""
        entry = self._locks.setdefault(key, [asyncio.Lock(), 0])
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    async def send_message(self, user_key: str, message: str) -> Dict[str, Any]:
        """Send a message to the user"""
        return await self.client.send_message(message, user_key)

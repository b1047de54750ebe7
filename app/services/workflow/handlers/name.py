from typing import Tuple
from app.services.common.types import FeedbackStep, InboundMessage
from app.services.workflow.handlers.base import BaseHandler


class NameHandler(BaseHandler):
    """Step 1: collect the user's name"""

    step = FeedbackStep.AWAITING_NAME

    def accept(self, user_key: str, message: InboundMessage) -> Tuple[str, ...]:
        name = message.text_body.strip()
        self.logger.info(f'Collected name: "{name}" from {user_key}')

        self.store.update(user_key, name=name)
        self.store.advance(user_key)
        return (name,)

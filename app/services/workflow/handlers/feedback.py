from typing import Tuple
from app.services.common.types import FeedbackStep, InboundMessage
from app.services.workflow.handlers.base import BaseHandler


class FeedbackHandler(BaseHandler):
    """Step 2: collect the free-text feedback"""

    step = FeedbackStep.AWAITING_FEEDBACK

    def accept(self, user_key: str, message: InboundMessage) -> Tuple[str, ...]:
        feedback = message.text_body.strip()
        self.logger.info(f'Collected feedback: "{feedback[:50]}..." from {user_key}')

        self.store.update(user_key, feedback=feedback)
        self.store.advance(user_key)
        return ()

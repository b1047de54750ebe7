from typing import Tuple
from app.services.common.types import FeedbackStep, InboundMessage
from app.services.workflow.handlers.base import BaseHandler


class ImageHandler(BaseHandler):
    """Step 3: collect the profile image and finish the submission"""

    step = FeedbackStep.AWAITING_IMAGE

    def accept(self, user_key: str, message: InboundMessage) -> Tuple[str, ...]:
        image_ref = message.image.id
        self.logger.info(f"Collected image: {image_ref} from {user_key}")

        session = self.store.update(user_key, profile_image_ref=image_ref)

        # Logs the completion record and removes the session
        completed = self.store.complete(user_key) or session
        return (completed.name,)

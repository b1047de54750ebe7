from datetime import datetime
from enum import IntEnum
from typing import Dict, Literal, Optional, Any
from pydantic import BaseModel, ConfigDict, Field


# Common type definitions
MessageKind = Literal["text", "image", "other"]
TemplateKey = Literal[
    "greeting",
    "need_text",
    "name_received",
    "feedback_received",
    "need_image",
    "completed",
    "system_error",
]


class FeedbackStep(IntEnum):
    """Stages of the feedback flow; COMPLETED is terminal."""

    AWAITING_NAME = 1
    AWAITING_FEEDBACK = 2
    AWAITING_IMAGE = 3
    COMPLETED = 4


class Session(BaseModel):
    """Conversation state for a single WhatsApp user"""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    user_key: str
    step: FeedbackStep = FeedbackStep.AWAITING_NAME
    name: str = ""
    feedback: str = ""
    profile_image_ref: str = ""
    created_at: datetime
    last_activity: datetime


class CompletionRecord(BaseModel):
    """Summary written once per finished feedback submission"""

    timestamp: datetime
    user_key: str
    name: str
    feedback: str
    profile_image_ref: str
    session_duration_minutes: int
    completed_at: datetime


class SessionStats(BaseModel):
    total_active_sessions: int
    sessions_by_step: Dict[int, int] = Field(default_factory=dict)
    timestamp: datetime


class TextBody(BaseModel):
    body: str = ""


class MediaRef(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    mime_type: Optional[str] = None
    sha256: Optional[str] = None


class InboundMessage(BaseModel):
    """
    A single message from the ``messages`` array of a WhatsApp webhook.

    Only the fields the feedback flow reads are modelled; everything else
    WhatsApp sends is kept as extra data.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = None
    from_: str = Field(alias="from")
    timestamp: Optional[str] = None
    type: str = "unknown"
    text: Optional[TextBody] = None
    image: Optional[MediaRef] = None

    @property
    def kind(self) -> MessageKind:
        # Whitespace-only text carries nothing worth storing
        if self.type == "text" and self.text is not None and self.text.body.strip():
            return "text"
        if self.type == "image" and self.image is not None:
            return "image"
        return "other"

    @property
    def text_body(self) -> str:
        return self.text.body if self.text is not None else ""


class MessageStatus(BaseModel):
    """Delivery / read receipt from the ``statuses`` array"""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    recipient_id: Optional[str] = None
    status: Optional[str] = None
    timestamp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "messageId": self.id,
            "recipientId": self.recipient_id,
            "status": self.status,
            "timestamp": self.timestamp,
        }

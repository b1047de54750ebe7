from pydantic import BaseModel, Field


class SimulatedMessageRequest(BaseModel):
    message: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)


class SimulatedImageRequest(BaseModel):
    phone_number: str = Field(..., min_length=1)
    image_id: str = Field(default="test-image-123", min_length=1)


class CleanupResponse(BaseModel):
    removed: int

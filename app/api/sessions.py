from fastapi import APIRouter, Depends, Request
from typing import Dict, Any

from app.api.webhook import simulate_image_webhook, simulate_webhook
from app.schemas import CleanupResponse, SimulatedImageRequest, SimulatedMessageRequest
from app.services.common.types import SessionStats
from app.services.messaging.sweeper import SessionSweeper
from app.services.messaging.session_store import SessionStore
from app.services.workflow.dispatcher import ConversationDispatcher
from app.logging import setup_logger

router = APIRouter(tags=["sessions"])
logger = setup_logger(__name__)


def get_store(request: Request) -> SessionStore:
    return request.app.state.store


def get_sweeper(request: Request) -> SessionSweeper:
    return request.app.state.sweeper


def get_dispatcher(request: Request) -> ConversationDispatcher:
    return request.app.state.dispatcher


@router.get("/sessions/stats", response_model=SessionStats)
async def get_session_stats(store: SessionStore = Depends(get_store)) -> SessionStats:
    """
    Snapshot of active sessions, grouped by step.
    """
    return store.stats()


@router.post("/sessions/cleanup", response_model=CleanupResponse)
async def cleanup_sessions(
    sweeper: SessionSweeper = Depends(get_sweeper),
) -> CleanupResponse:
    """
    Remove expired sessions now instead of waiting for the next scheduled sweep.
    """
    removed = sweeper.run_once()
    logger.info(f"Manual cleanup removed {removed} sessions")
    return CleanupResponse(removed=removed)


@router.post("/test/message")
async def simulate_message(
    body: SimulatedMessageRequest,
    dispatcher: ConversationDispatcher = Depends(get_dispatcher),
) -> Dict[str, Any]:
    """
    Feed a text message through the webhook pipeline.
    """
    return await simulate_webhook(body.message, body.phone_number, dispatcher)


@router.post("/test/image")
async def simulate_image(
    body: SimulatedImageRequest,
    dispatcher: ConversationDispatcher = Depends(get_dispatcher),
) -> Dict[str, Any]:
    """
    Feed an image message through the webhook pipeline.
    """
    return await simulate_image_webhook(body.phone_number, dispatcher, body.image_id)
